import numpy as np
import pytest

from quantise import palette, quantise, remap
from quantise.errors import InvalidArgument
from quantise.remap import level_usage, nearest_lookup


def test_lookup_picks_nearest():
    lut = nearest_lookup([10, 200])
    assert lut.shape == (256,)
    assert lut[0] == 10
    assert lut[104] == 10
    assert lut[106] == 200
    assert lut[255] == 200


def test_lookup_ties_go_to_first_entry():
    assert nearest_lookup([10, 20])[15] == 10
    assert nearest_lookup([20, 10])[15] == 20
    assert nearest_lookup([0, 0, 50])[25] == 0


def test_lookup_rejects_bad_palettes():
    with pytest.raises(InvalidArgument):
        nearest_lookup([])
    with pytest.raises(InvalidArgument):
        nearest_lookup([10, 256])


def test_remap_keeps_shape_and_uses_palette_values(random_rgba):
    levels = [30, 90, 180]
    out = remap(random_rgba, levels)
    assert out.shape == random_rgba.shape[:2]
    assert out.dtype == np.uint8
    assert set(np.unique(out).tolist()) <= set(levels)


@pytest.mark.parametrize("strategy", ["sparse", "dense"])
def test_quantise_two_clusters(strategy, two_clusters):
    np.testing.assert_array_equal(quantise(two_clusters, 2, strategy=strategy), two_clusters)


@pytest.mark.parametrize("levels", [1, 2, 4, 7])
def test_quantise_values_come_from_palette(levels, random_rgba):
    out = quantise(random_rgba, levels)
    assert set(np.unique(out).tolist()) <= set(palette(random_rgba, levels))


@pytest.mark.parametrize("levels", [2, 5, 11])
def test_quantise_strategies_agree(levels, random_rgba):
    np.testing.assert_array_equal(
        quantise(random_rgba, levels, strategy="sparse"),
        quantise(random_rgba, levels, strategy="dense"),
    )


def test_gradient_ties_and_idempotence(gradient):
    once = quantise(gradient, 2)
    assert palette(gradient, 2) == [64, 192]
    assert int((once == 64).sum()) == 129  # 0..128, 128 ties to the first level
    assert int((once == 192).sum()) == 127
    np.testing.assert_array_equal(quantise(once, 2), once)


def test_idempotent_on_three_clusters():
    img = np.array([[20, 20, 120], [120, 230, 230]], dtype=np.uint8)
    once = quantise(img, 3)
    np.testing.assert_array_equal(once, img)
    np.testing.assert_array_equal(quantise(once, 3), once)


def test_zero_area_image():
    out = quantise(np.zeros((0, 4, 4), dtype=np.uint8), 3)
    assert out.shape == (0, 4)
    assert out.dtype == np.uint8


def test_workers_do_not_change_output(tall_rgba):
    levels = palette(tall_rgba, 5)
    np.testing.assert_array_equal(
        remap(tall_rgba, levels, workers=3), remap(tall_rgba, levels)
    )
    np.testing.assert_array_equal(quantise(tall_rgba, 5, workers=4), quantise(tall_rgba, 5))


def test_level_usage(two_clusters):
    out = quantise(two_clusters, 2)
    assert level_usage(out, [10, 200]) == [(10, 2), (200, 2)]
    assert level_usage(out, [10, 10, 200]) == [(10, 2), (10, 0), (200, 2)]


def test_numpy_integer_level_count(two_clusters):
    np.testing.assert_array_equal(quantise(two_clusters, np.int64(2)), two_clusters)


def test_requantising_can_move_the_palette():
    # an empty top segment on the first pass collapses the low levels to 0
    img = np.array([[37, 74, 111], [145, 177, 211]], dtype=np.uint8)
    assert palette(img, 6) == [0, 0, 0, 37, 92, 177]
    once = quantise(img, 6)
    np.testing.assert_array_equal(
        once, np.array([[37, 92, 92], [177, 177, 177]], dtype=np.uint8)
    )
    assert palette(once, 6) == [0, 0, 0, 0, 37, 143]
    twice = quantise(once, 6)
    np.testing.assert_array_equal(
        twice, np.array([[37, 143, 143], [143, 143, 143]], dtype=np.uint8)
    )
