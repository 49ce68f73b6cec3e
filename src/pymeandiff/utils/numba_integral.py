import math

import numpy as np

from ._numba_base import njit, prange


def build_summed_area_table(plane, accumulator):
    """
    Builds a zero-padded (H+1, W+1) summed-area table for a 2-D plane.

    Row 0 and column 0 are zero so that the coordinate -1 of a query
    addresses the padding.
    """
    rows, cols = plane.shape
    table = np.zeros((rows + 1, cols + 1), dtype=accumulator)
    table[1:, 1:] = np.cumsum(plane, axis=0, dtype=accumulator).cumsum(axis=1)
    return table


@njit(cache=True)
def rect_sum(table, x_min, y_min, x_max, y_max):
    """Sum over [x_min+1, x_max] x [y_min+1, y_max]. Coordinates must be clamped."""
    return (
        table[y_max + 1, x_max + 1]
        - table[y_min + 1, x_max + 1]
        - table[y_max + 1, x_min + 1]
        + table[y_min + 1, x_min + 1]
    )


@njit(cache=True)
def scaled_sum_difference(
    table,
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
    """Unsaturated ``sum(rect1) * scale1 - sum(rect2) * scale2``."""
    s1 = rect_sum(table, x_min1, y_min1, x_max1, y_max1)
    s2 = rect_sum(table, x_min2, y_min2, x_max2, y_max2)
    return s1 * scale1 - s2 * scale2


@njit(cache=True)
def saturate(value, lo, hi, round_output):
    """Round half up (integer outputs only) and clamp to [lo, hi]."""
    if round_output:
        value = math.floor(value + 0.5)
    if value < lo:
        return lo
    if value > hi:
        return hi
    return value


@njit(cache=True, parallel=True)
def difference_of_mean_kernel(
    table,  # (H+1, W+1) summed-area table, int64 or float64
    out,  # (H, W) output plane - MODIFIED IN PLACE
    rx1,
    ry1,
    rx2,
    ry2,
    lo,  # float, lower saturation bound
    hi,  # float, upper saturation bound
    round_output,  # bool, round half up before saturating
):
    """
    Full-frame difference of two box means.

    For every pixel the primary and secondary windows are clamped to the
    image, the scale of each window is the reciprocal of its clamped area
    (width and height clamped to >= 1) and the result is the scaled sum
    difference, saturated to [lo, hi].
    """
    rows, cols = out.shape
    w = cols - 1
    h = rows - 1

    for y in prange(rows):
        y_min1 = max(-1, y - ry1 - 1)
        y_max1 = min(h, y + ry1)
        bh1 = max(1, y_max1 - y_min1)

        y_min2 = max(-1, y - ry2 - 1)
        y_max2 = min(h, y + ry2)
        bh2 = max(1, y_max2 - y_min2)

        for x in range(cols):
            x_min1 = max(-1, x - rx1 - 1)
            x_max1 = min(w, x + rx1)
            scale1 = 1.0 / (max(1, x_max1 - x_min1) * bh1)

            x_min2 = max(-1, x - rx2 - 1)
            x_max2 = min(w, x + rx2)
            scale2 = 1.0 / (max(1, x_max2 - x_min2) * bh2)

            value = scaled_sum_difference(
                table,
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
            )
            out[y, x] = saturate(value, lo, hi, round_output)
