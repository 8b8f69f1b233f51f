import numpy as np
import pytest
from PIL import Image

from quantise.errors import InvalidArgument
from quantise.luminance import greyscale, luminance_image


@pytest.mark.parametrize(
    "pixel, expected",
    [
        ((0, 0, 0, 255), 0),
        ((100, 0, 0, 255), 29),
        ((0, 100, 0, 255), 58),
        ((0, 0, 100, 255), 11),
        ((100, 0, 0), 29),
    ],
)
def test_greyscale_weights_truncate(pixel, expected):
    assert greyscale(pixel) == expected


def test_greyscale_ignores_alpha():
    assert greyscale((40, 120, 200, 0)) == greyscale((40, 120, 200, 255))


def test_greyscale_passes_grey_ints_through():
    assert greyscale(0) == 0
    assert greyscale(173) == 173
    with pytest.raises(InvalidArgument):
        greyscale(256)


def test_greyscale_needs_three_channels():
    with pytest.raises(InvalidArgument):
        greyscale((1, 2))


def test_luminance_image_matches_scalar(random_rgba):
    lum = luminance_image(random_rgba)
    assert lum.shape == random_rgba.shape[:2]
    assert lum.dtype == np.uint8
    for y in range(random_rgba.shape[0]):
        for x in range(random_rgba.shape[1]):
            assert lum[y, x] == greyscale(random_rgba[y, x])


def test_single_channel_is_already_luminance(gradient):
    np.testing.assert_array_equal(luminance_image(gradient), gradient)


def test_rgb_and_rgba_agree(random_rgba):
    np.testing.assert_array_equal(
        luminance_image(random_rgba[..., :3]), luminance_image(random_rgba)
    )


def test_threaded_rows_match_single_thread(tall_rgba):
    np.testing.assert_array_equal(
        luminance_image(tall_rgba, workers=4), luminance_image(tall_rgba)
    )


def test_pillow_images(random_rgba, gradient):
    np.testing.assert_array_equal(
        luminance_image(Image.fromarray(random_rgba)), luminance_image(random_rgba)
    )
    np.testing.assert_array_equal(luminance_image(Image.fromarray(gradient)), gradient)


def test_zero_area_image():
    lum = luminance_image(np.zeros((0, 0, 4), dtype=np.uint8))
    assert lum.shape == (0, 0)


def test_rejects_non_uint8():
    with pytest.raises(TypeError):
        luminance_image(np.zeros((2, 2, 4), dtype=np.float32))
    with pytest.raises(TypeError):
        luminance_image(np.zeros((2, 2, 2), dtype=np.uint8))


@pytest.mark.parametrize("v", [37, 61, 74, 93, 111, 122, 148, 186, 215, 222, 233, 244, 253])
def test_grey_planes_skip_the_rgb_formula(v):
    # float32 weights truncate these equal-channel pixels one level down
    assert greyscale((v, v, v, 255)) == v - 1
    plane = np.full((2, 2), v, dtype=np.uint8)
    assert (luminance_image(plane) == v).all()
