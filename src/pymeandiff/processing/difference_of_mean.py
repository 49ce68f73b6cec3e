import logging
import time
from typing import NamedTuple

from .integral import IntegralImage, rect_scale

logger = logging.getLogger(__name__)


class RadiusPair(NamedTuple):
    """Half-width and half-height of a box window, in pixels."""

    rx: int = 0
    ry: int = 0


class Radii(NamedTuple):
    primary: RadiusPair = RadiusPair()
    secondary: RadiusPair = RadiusPair()


def window_bounds(center, radius, last):
    """Half-open window bounds around ``center``, clamped to [-1, last]."""
    return max(-1, center - radius - 1), min(last, center + radius)


def window_rect(x, y, radius: RadiusPair, width, height):
    x_min, x_max = window_bounds(x, radius.rx, width - 1)
    y_min, y_max = window_bounds(y, radius.ry, height - 1)
    return x_min, y_min, x_max, y_max


def pixel_difference_of_mean(integral: IntegralImage, x, y, radii: Radii):
    """Difference of means at a single pixel through the scaled sum difference query."""
    rect1 = window_rect(x, y, radii.primary, integral.width, integral.height)
    rect2 = window_rect(x, y, radii.secondary, integral.width, integral.height)
    return integral.get_scaled_sum_difference(
        *rect1, rect_scale(*rect1), *rect2, rect_scale(*rect2)
    )


def render_difference_of_mean(integral: IntegralImage, radii: Radii, out=None):
    """
    Recomputes the whole frame from the integral image.

    The integral image is built from the original pixels, so repeated calls
    never compound: identical radii always give identical output.
    """
    start_time = time.perf_counter()
    out = integral.difference_of_mean(radii, out)
    elapsed = (time.perf_counter() - start_time) * 1000
    logger.debug(
        f"Difference of mean: r1=({radii.primary.rx}, {radii.primary.ry}) "
        f"r2=({radii.secondary.rx}, {radii.secondary.ry}) | "
        f"Size: {integral.width}x{integral.height} | Time: {elapsed:.2f}ms"
    )
    return out
