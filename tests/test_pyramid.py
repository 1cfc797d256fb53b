import numpy as np
import pytest

from core.pyramid import decompose, reconstruct
from tests.helpers import random_image


@pytest.mark.parametrize("levels", [1, 3, 5])
def test_pyramid_layout(levels):
    image = random_image(96, 128)
    pyramid = decompose(image, levels)

    assert len(pyramid) == levels + 2
    assert pyramid[-1] is image

    height, width = image.shape[:2]
    for level in range(levels):
        assert pyramid[level].shape == (height, width, 3)
        height, width = (height + 1) // 2, (width + 1) // 2
    assert pyramid[levels].shape == (height, width, 3)


def test_odd_dimensions_are_preserved():
    image = random_image(45, 63)
    pyramid = decompose(image, 3)

    assert [band.shape[:2] for band in pyramid[:4]] == [(45, 63), (23, 32), (12, 16), (6, 8)]
    assert reconstruct(pyramid[:4]).shape == image.shape


@pytest.mark.parametrize("shape", [(64, 64), (45, 63), (120, 160)])
def test_round_trip_reproduces_image(shape):
    image = random_image(*shape, seed=3)
    levels = 4
    pyramid = decompose(image, levels)

    rebuilt = reconstruct(pyramid[:levels + 1])

    np.testing.assert_allclose(rebuilt, image, atol=1e-3)


def test_zero_levels_keeps_image_as_residual():
    image = random_image(16, 16)
    pyramid = decompose(image, 0)

    assert len(pyramid) == 2
    np.testing.assert_array_equal(pyramid[0], image)
    np.testing.assert_array_equal(reconstruct(pyramid[:1]), image)


def test_invalid_arguments():
    with pytest.raises(ValueError):
        decompose(random_image(8, 8), -1)
    with pytest.raises(ValueError):
        reconstruct([])
