from .imagecanvas import ImageCanvas, array_to_qimage

__all__ = ["ImageCanvas", "array_to_qimage"]
