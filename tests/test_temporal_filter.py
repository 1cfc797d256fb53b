import numpy as np
import pytest

from core.temporal_filter import FilterBank, FilterState


def test_first_band_seeds_identity_state():
    band = np.full((4, 4, 3), 2.0, dtype=np.float32)
    state = FilterState.from_band(band)

    for image in (state.low_pass1, state.low_pass2, state.filtered):
        np.testing.assert_array_equal(image, band)
        assert image is not band


def test_update_applies_both_low_passes():
    state = FilterState.from_band(np.zeros((2, 2), dtype=np.float32))
    band = np.ones((2, 2), dtype=np.float32)

    filtered = state.update(band, high=0.4, low=0.05)
    np.testing.assert_allclose(state.low_pass1, 0.4)
    np.testing.assert_allclose(state.low_pass2, 0.05)
    np.testing.assert_allclose(filtered, 0.35)

    state.update(np.zeros((2, 2), dtype=np.float32), high=0.4, low=0.05)
    np.testing.assert_allclose(state.low_pass1, 0.24)
    np.testing.assert_allclose(state.low_pass2, 0.0475)
    np.testing.assert_allclose(state.filtered, 0.1925)


def test_constant_input_has_no_bandpass_response():
    band = np.full((3, 3), 0.7, dtype=np.float32)
    state = FilterState.from_band(band)

    for _ in range(10):
        state.update(band, high=0.4, low=0.05)

    np.testing.assert_allclose(state.filtered, 0.0, atol=1e-6)


def test_zero_keeps_shape():
    state = FilterState.from_band(np.ones((5, 6, 3), dtype=np.float32))
    state.zero()

    assert state.filtered.shape == (5, 6, 3)
    assert not state.filtered.any()


def test_filter_bank_partitions_by_level():
    bands = [np.full((8 >> i, 8 >> i), float(i), dtype=np.float32) for i in range(4)]
    bank = FilterBank()
    assert not bank.initialized

    bank.initialize(bands)

    assert bank.initialized
    assert len(bank) == 4
    assert bank[2].filtered.shape == (2, 2)
    assert [b.shape for b in bank.filtered_bands(3)] == [(8, 8), (4, 4), (2, 2)]
    with pytest.raises(IndexError):
        bank[4]
