import numpy as np
import pytest


def grey(values, shape):
    """uint8 greyscale image from a flat list of luminance values."""
    return np.array(values, dtype=np.uint8).reshape(shape)


@pytest.fixture
def rng():
    return np.random.default_rng(1234)


@pytest.fixture
def two_clusters():
    # 2x2 image with luminances [10, 10, 200, 200]
    return grey([10, 10, 200, 200], (2, 2))


@pytest.fixture
def gradient():
    # every luminance 0..255 exactly once
    return np.arange(256, dtype=np.uint8).reshape(16, 16)


@pytest.fixture
def random_rgba(rng):
    return rng.integers(0, 256, size=(24, 32, 4), dtype=np.uint8)


@pytest.fixture
def tall_rgba(rng):
    # tall enough to take the threaded row-partitioned path
    return rng.integers(0, 256, size=(300, 7, 4), dtype=np.uint8)
