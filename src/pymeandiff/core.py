import logging
import time
from pathlib import Path

import cv2
import numpy as np
from PIL import Image, ImageOps

from .processing.difference_of_mean import Radii, RadiusPair, render_difference_of_mean
from .processing.integral import create_integral_image

# Configure logger for this module
logger = logging.getLogger(__name__)

SUPPORTED_EXTS = (".png", ".tif", ".tiff", ".jpg", ".jpeg", ".bmp", ".webp", ".pgm")

_GRAY_MODES = {"1", "L", "LA"}
_GRAY16_MODES = {"I;16", "I;16B", "I;16L", "I;16N"}


# ---------------- Image IO ----------------
def open_image(path):
    """
    Opens an image file as a numpy array in one of the supported pixel models.

    8-bit grey -> uint8 (H, W), 16-bit grey -> uint16 (H, W),
    32-bit float -> float32 (H, W), anything colour -> uint8 (H, W, 3).
    32-bit integer images whose values do not fit in 16 bits are returned
    as int32 and rejected later by the filter.
    """
    path = Path(path)
    with Image.open(path) as img:
        img = ImageOps.exif_transpose(img)
        mode = img.mode

        if mode in _GRAY_MODES:
            arr = np.array(img.convert("L"))
        elif mode in _GRAY16_MODES:
            arr = np.array(img).astype(np.uint16)
        elif mode == "I":
            arr = np.array(img)
            if arr.size and arr.min() >= 0 and arr.max() <= 65535:
                arr = arr.astype(np.uint16)
        elif mode == "F":
            arr = np.array(img, dtype=np.float32)
        else:
            arr = np.array(img.convert("RGB"))

    logger.debug(f"Opened {path.name}: mode={mode} -> {arr.dtype} {arr.shape}")
    return arr


def save_image(image, path):
    """Saves an array produced by the filter, keeping its bit depth."""
    path = Path(path)
    image = np.ascontiguousarray(image)
    if image.dtype == np.float64:
        image = image.astype(np.float32)
    Image.fromarray(image).save(path)
    logger.info(f"Saved {image.dtype} {image.shape[1]}x{image.shape[0]} to {path}")


def to_display_uint8(image):
    """8-bit view of an image for on-screen display."""
    if image.dtype == np.uint8:
        return image
    if image.dtype == np.uint16:
        return cv2.convertScaleAbs(image, alpha=255.0 / 65535.0)
    plane = np.nan_to_num(image.astype(np.float32))
    return cv2.normalize(plane, None, 0, 255, cv2.NORM_MINMAX, dtype=cv2.CV_8U)


# ---------------- Difference of Mean ----------------
def apply_difference_of_mean(image, primary=(0, 0), secondary=(0, 0)):
    """One-shot difference of mean; returns a new array of the same type."""
    if min(*primary, *secondary) < 0:
        raise ValueError(f"Radii must be non-negative: {primary}, {secondary}")

    start_time = time.perf_counter()
    integral = create_integral_image(image)
    radii = Radii(RadiusPair(*primary), RadiusPair(*secondary))
    result = render_difference_of_mean(integral, radii)
    elapsed = (time.perf_counter() - start_time) * 1000
    logger.info(
        f"Difference of mean applied: primary={tuple(primary)} secondary={tuple(secondary)} ({elapsed:.2f}ms)"
    )
    return result
