import cv2
import numpy as np
import pytest

from pymeandiff.processing.difference_of_mean import (
    Radii,
    RadiusPair,
    pixel_difference_of_mean,
    render_difference_of_mean,
    window_bounds,
    window_rect,
)
from pymeandiff.processing.integral import create_integral_image, rect_scale


def _box_mean(image, rx, ry):
    """Brute-force mean over the window clamped to the image."""
    h, w = image.shape
    out = np.empty((h, w), dtype=np.float64)
    for y in range(h):
        for x in range(w):
            block = image[max(0, y - ry) : y + ry + 1, max(0, x - rx) : x + rx + 1]
            out[y, x] = block.mean()
    return out


def test_window_bounds_clamps_to_image():
    assert window_bounds(0, 2, 9) == (-1, 2)
    assert window_bounds(5, 2, 9) == (2, 7)
    assert window_bounds(9, 2, 9) == (6, 9)
    assert window_bounds(4, 0, 9) == (3, 4)


def test_border_window_area():
    rect = window_rect(0, 0, RadiusPair(2, 2), 10, 10)

    # Covers x in [0, 2] and y in [0, 2]
    assert rect == (-1, -1, 2, 2)
    assert rect_scale(*rect) == pytest.approx(1 / 9)


def test_border_pixel_uses_clamped_mean():
    image = np.arange(100, dtype=np.float64).reshape(10, 10)
    integral = create_integral_image(image)
    radii = Radii(RadiusPair(2, 2), RadiusPair(0, 0))

    out = render_difference_of_mean(integral, radii)

    expected = image[0:3, 0:3].mean() - image[0, 0]
    assert out[0, 0] == pytest.approx(expected)


def test_uniform_image_scenario():
    image = np.full((4, 4), 10, dtype=np.uint8)
    integral = create_integral_image(image)

    out = render_difference_of_mean(integral, Radii(RadiusPair(1, 1), RadiusPair(0, 0)))

    assert out.dtype == np.uint8
    assert np.array_equal(out, np.zeros((4, 4), dtype=np.uint8))


@pytest.mark.parametrize(
    "dtype, shape",
    [
        (np.uint8, (9, 7)),
        (np.uint16, (9, 7)),
        (np.float32, (9, 7)),
        (np.uint8, (9, 7, 3)),
    ],
)
def test_zero_radius_identity(dtype, shape):
    rng = np.random.default_rng(3)
    if np.issubdtype(dtype, np.integer):
        image = rng.integers(0, np.iinfo(dtype).max, size=shape, dtype=dtype)
    else:
        image = rng.random(shape).astype(dtype)
    integral = create_integral_image(image)

    out = render_difference_of_mean(integral, Radii())

    assert np.all(out == 0)


def test_recompute_is_idempotent():
    rng = np.random.default_rng(4)
    image = rng.integers(0, 256, size=(20, 17, 3), dtype=np.uint8)
    integral = create_integral_image(image)
    radii = Radii(RadiusPair(4, 2), RadiusPair(1, 3))

    first = render_difference_of_mean(integral, radii).copy()
    second = render_difference_of_mean(integral, radii)

    assert np.array_equal(first, second)


def test_float_matches_brute_force():
    rng = np.random.default_rng(5)
    image = rng.random((13, 11))
    integral = create_integral_image(image)
    radii = Radii(RadiusPair(3, 1), RadiusPair(1, 2))

    out = render_difference_of_mean(integral, radii)

    expected = _box_mean(image, 3, 1) - _box_mean(image, 1, 2)
    np.testing.assert_allclose(out, expected, rtol=0, atol=1e-9)


def test_float_matches_opencv_box_filter():
    rng = np.random.default_rng(6)
    image = rng.random((16, 21))
    integral = create_integral_image(image)
    rx, ry = 4, 2

    out = render_difference_of_mean(integral, Radii(RadiusPair(rx, ry), RadiusPair()))

    kernel = (2 * rx + 1, 2 * ry + 1)
    sums = cv2.boxFilter(
        image, -1, kernel, normalize=False, borderType=cv2.BORDER_CONSTANT
    )
    counts = cv2.boxFilter(
        np.ones_like(image), -1, kernel, normalize=False, borderType=cv2.BORDER_CONSTANT
    )
    np.testing.assert_allclose(out, sums / counts - image, rtol=0, atol=1e-9)


def test_radius_larger_than_image():
    image = np.arange(12, dtype=np.float64).reshape(3, 4)
    integral = create_integral_image(image)

    out = render_difference_of_mean(integral, Radii(RadiusPair(50, 50), RadiusPair()))

    np.testing.assert_allclose(out, image.mean() - image, atol=1e-12)


@pytest.mark.parametrize("shape", [(8, 6), (8, 6, 3)])
def test_frame_kernel_agrees_with_scalar_query(shape):
    rng = np.random.default_rng(7)
    image = rng.integers(0, 256, size=shape, dtype=np.uint8)
    integral = create_integral_image(image)
    radii = Radii(RadiusPair(2, 1), RadiusPair(0, 1))

    image_out = render_difference_of_mean(integral, radii)

    for y in range(shape[0]):
        for x in range(shape[1]):
            pixel = pixel_difference_of_mean(integral, x, y, radii)
            if len(shape) == 3:
                assert tuple(image_out[y, x]) == pixel
            else:
                assert image_out[y, x] == pixel


def test_render_into_existing_buffer():
    image = np.full((5, 5), 100, dtype=np.uint16)
    integral = create_integral_image(image)
    out = np.full((5, 5), 7, dtype=np.uint16)

    result = render_difference_of_mean(integral, Radii(RadiusPair(1, 1)), out)

    assert result is out
    assert np.all(out == 0)
