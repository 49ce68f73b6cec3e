import logging

import numpy as np
from PySide6 import QtGui, QtWidgets
from PySide6.QtCore import QRect, QSize, Qt, Signal

from ...core import to_display_uint8
from ...engine.state import Region

logger = logging.getLogger(__name__)


def array_to_qimage(image: np.ndarray) -> QtGui.QImage:
    """Converts a filter buffer to a QImage that owns its pixels."""
    display = np.ascontiguousarray(to_display_uint8(image))
    h, w = display.shape[:2]
    if display.ndim == 3:
        qimage = QtGui.QImage(display.data, w, h, 3 * w, QtGui.QImage.Format_RGB888)
    else:
        qimage = QtGui.QImage(display.data, w, h, w, QtGui.QImage.Format_Grayscale8)
    # The numpy buffer is reused by the next recompute
    return qimage.copy()


class ImageCanvas(QtWidgets.QLabel):
    """Shows the image 1:1 and reports rubber-band drags in image coordinates."""

    regionDragged = Signal(object, bool)  # Region | None, shift held

    def __init__(self, parent=None):
        super().__init__(parent)
        self.setAlignment(Qt.AlignLeft | Qt.AlignTop)
        self.setFocusPolicy(Qt.StrongFocus)
        self._rubber_band = QtWidgets.QRubberBand(QtWidgets.QRubberBand.Rectangle, self)
        self._origin = None
        self._interactive = True

    @property
    def interactive(self):
        return self._interactive

    def set_interactive(self, interactive: bool):
        self._interactive = interactive
        if not interactive:
            self._origin = None
            self._rubber_band.hide()

    def set_image(self, image: np.ndarray):
        self.set_qimage(array_to_qimage(image))

    def set_qimage(self, qimage: QtGui.QImage):
        self.setPixmap(QtGui.QPixmap.fromImage(qimage))
        self.setFixedSize(qimage.width(), qimage.height())

    def mousePressEvent(self, event):
        if event.button() != Qt.LeftButton or not self._interactive:
            super().mousePressEvent(event)
            return
        self._origin = event.position().toPoint()
        self._rubber_band.setGeometry(QRect(self._origin, QSize()))
        self._rubber_band.show()
        self._emit_region(QRect(), event.modifiers())

    def mouseMoveEvent(self, event):
        if self._origin is None:
            super().mouseMoveEvent(event)
            return
        point = event.position().toPoint()
        # Width and height are the pointer travel
        rect = QRect(
            min(self._origin.x(), point.x()),
            min(self._origin.y(), point.y()),
            abs(point.x() - self._origin.x()),
            abs(point.y() - self._origin.y()),
        )
        rect = rect.intersected(self.rect())
        self._rubber_band.setGeometry(rect)
        self._emit_region(rect, event.modifiers())

    def mouseReleaseEvent(self, event):
        self._origin = None
        super().mouseReleaseEvent(event)

    def _emit_region(self, rect: QRect, modifiers):
        region = None
        if not rect.isEmpty():
            region = Region(rect.x(), rect.y(), rect.width(), rect.height())
        self.regionDragged.emit(region, bool(modifiers & Qt.ShiftModifier))
