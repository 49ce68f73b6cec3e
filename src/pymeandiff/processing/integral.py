"""
Integral images (summed-area tables) for O(1) box sums.

One interface, three variants selected by pixel model:

- ``LongIntegralImage``   8/16-bit grey, int64 accumulation
- ``DoubleIntegralImage`` float grey, float64 accumulation
- ``RGBIntegralImage``    8-bit RGB, one ``LongIntegralImage`` per channel

Rectangles follow the half-open lower bound convention: a query over
``(x_min, y_min, x_max, y_max)`` covers ``[x_min+1, x_max] x [y_min+1, y_max]``
so ``-1`` denotes the start of the image.
"""

import logging
import time
from abc import ABC, abstractmethod
from enum import Enum

import numpy as np

from ..utils.numba_integral import (
    build_summed_area_table,
    difference_of_mean_kernel,
    rect_sum,
    saturate,
)

logger = logging.getLogger(__name__)


class PixelModel(Enum):
    GRAY8 = "gray8"
    GRAY16 = "gray16"
    FLOAT = "float"
    RGB = "rgb"


class UnsupportedPixelModelError(ValueError):
    """Raised when an image has no matching integral image variant."""


def detect_pixel_model(image) -> PixelModel:
    """Maps a numpy image to its pixel model or raises UnsupportedPixelModelError."""
    image = np.asarray(image)
    if image.ndim == 2:
        if image.dtype == np.uint8:
            return PixelModel.GRAY8
        if image.dtype == np.uint16:
            return PixelModel.GRAY16
        if image.dtype in (np.float32, np.float64):
            return PixelModel.FLOAT
    elif image.ndim == 3 and image.shape[2] == 3 and image.dtype == np.uint8:
        return PixelModel.RGB

    raise UnsupportedPixelModelError(
        f"Type not yet supported: dtype={image.dtype}, shape={image.shape}"
    )


def clamp_rect(x_min, y_min, x_max, y_max, width, height):
    """Clamps rectangle corners to [-1, dimension-1]."""
    return (
        max(-1, min(width - 1, x_min)),
        max(-1, min(height - 1, y_min)),
        max(-1, min(width - 1, x_max)),
        max(-1, min(height - 1, y_max)),
    )


def rect_scale(x_min, y_min, x_max, y_max):
    """Reciprocal of the rectangle area, with width and height clamped to >= 1."""
    return 1.0 / (max(1, x_max - x_min) * max(1, y_max - y_min))


class IntegralImage(ABC):
    """Uniform query contract shared by every variant."""

    pixel_model: PixelModel

    def __init__(self, width: int, height: int, dtype):
        self.width = width
        self.height = height
        self.dtype = np.dtype(dtype)

    def _clamp(self, x_min, y_min, x_max, y_max):
        return clamp_rect(x_min, y_min, x_max, y_max, self.width, self.height)

    @abstractmethod
    def get_sum(self, x_min, y_min, x_max, y_max):
        """Sum of the pixel values inside the clamped rectangle."""

    @abstractmethod
    def get_scaled_sum_difference(
        self,
        x_min1,
        y_min1,
        x_max1,
        y_max1,
        scale1,
        x_min2,
        y_min2,
        x_max2,
        y_max2,
        scale2,
    ):
        """``sum(rect1) * scale1 - sum(rect2) * scale2`` as one output pixel."""

    @abstractmethod
    def difference_of_mean(self, radii, out=None) -> np.ndarray:
        """Full-frame difference of the primary and secondary box means."""

    def get_mean_difference(self, rect1, rect2):
        """Difference of means over two rectangles, scales taken from the clamped areas."""
        rect1 = self._clamp(*rect1)
        rect2 = self._clamp(*rect2)
        return self.get_scaled_sum_difference(
            *rect1, rect_scale(*rect1), *rect2, rect_scale(*rect2)
        )

    def _allocate(self, out, shape):
        if out is None:
            return np.empty(shape, dtype=self.dtype)
        if out.shape != shape or out.dtype != self.dtype:
            raise ValueError(
                f"Output buffer must be {shape} {self.dtype}, got {out.shape} {out.dtype}"
            )
        return out


class _ScalarIntegralImage(IntegralImage):
    """Single-channel summed-area table with a saturation policy."""

    accumulator = np.int64
    round_output = True

    def __init__(self, plane):
        plane = np.asarray(plane)
        height, width = plane.shape
        super().__init__(width, height, plane.dtype)
        self.table = build_summed_area_table(plane, self.accumulator)
        self.lo, self.hi = self._value_range()

    def _value_range(self):
        info = np.iinfo(self.dtype)
        return float(info.min), float(info.max)

    def get_sum(self, x_min, y_min, x_max, y_max):
        x_min, y_min, x_max, y_max = self._clamp(x_min, y_min, x_max, y_max)
        if x_max <= x_min or y_max <= y_min:
            return self.accumulator(0)
        return rect_sum(self.table, x_min, y_min, x_max, y_max)

    def get_scaled_sum_difference(
        self,
        x_min1,
        y_min1,
        x_max1,
        y_max1,
        scale1,
        x_min2,
        y_min2,
        x_max2,
        y_max2,
        scale2,
    ):
        value = (
            self.get_sum(x_min1, y_min1, x_max1, y_max1) * scale1
            - self.get_sum(x_min2, y_min2, x_max2, y_max2) * scale2
        )
        return self.dtype.type(saturate(float(value), self.lo, self.hi, self.round_output))

    def difference_of_mean(self, radii, out=None):
        out = self._allocate(out, (self.height, self.width))
        primary, secondary = radii
        difference_of_mean_kernel(
            self.table,
            out,
            primary.rx,
            primary.ry,
            secondary.rx,
            secondary.ry,
            self.lo,
            self.hi,
            self.round_output,
        )
        return out


class LongIntegralImage(_ScalarIntegralImage):
    """Integer accumulation for 8-bit and 16-bit grey images."""

    accumulator = np.int64
    round_output = True

    def __init__(self, plane):
        super().__init__(plane)
        self.pixel_model = (
            PixelModel.GRAY8 if self.dtype == np.uint8 else PixelModel.GRAY16
        )


class DoubleIntegralImage(_ScalarIntegralImage):
    """Floating point accumulation; results are neither rounded nor saturated."""

    pixel_model = PixelModel.FLOAT
    accumulator = np.float64
    round_output = False

    def _value_range(self):
        return -np.inf, np.inf


class RGBIntegralImage(IntegralImage):
    """Three independent channel accumulators packed back into one pixel."""

    pixel_model = PixelModel.RGB

    def __init__(self, image):
        image = np.asarray(image)
        height, width, _ = image.shape
        super().__init__(width, height, image.dtype)
        self.channels = tuple(
            LongIntegralImage(np.ascontiguousarray(image[:, :, c])) for c in range(3)
        )

    def get_sum(self, x_min, y_min, x_max, y_max):
        return tuple(ch.get_sum(x_min, y_min, x_max, y_max) for ch in self.channels)

    def get_scaled_sum_difference(
        self,
        x_min1,
        y_min1,
        x_max1,
        y_max1,
        scale1,
        x_min2,
        y_min2,
        x_max2,
        y_max2,
        scale2,
    ):
        return tuple(
            ch.get_scaled_sum_difference(
                x_min1, y_min1, x_max1, y_max1, scale1, x_min2, y_min2, x_max2, y_max2, scale2
            )
            for ch in self.channels
        )

    def difference_of_mean(self, radii, out=None):
        out = self._allocate(out, (self.height, self.width, 3))
        for c, channel in enumerate(self.channels):
            plane = np.empty((self.height, self.width), dtype=self.dtype)
            channel.difference_of_mean(radii, plane)
            out[:, :, c] = plane
        return out


def create_integral_image(image) -> IntegralImage:
    """Builds the integral image variant matching the pixel model of ``image``."""
    model = detect_pixel_model(image)
    start_time = time.perf_counter()

    if model is PixelModel.FLOAT:
        integral = DoubleIntegralImage(image)
    elif model is PixelModel.RGB:
        integral = RGBIntegralImage(image)
    else:
        integral = LongIntegralImage(image)

    elapsed = (time.perf_counter() - start_time) * 1000
    logger.debug(
        f"Integral image built: {model.value} {integral.width}x{integral.height} ({elapsed:.2f}ms)"
    )
    return integral
