from dataclasses import replace

import numpy as np
import pytest

from core.colorspace import LUMA_CHANNEL, to_working
from core.magnifier import Magnifier
from Handlers.Synthetic_Source_Handler import SyntheticSourceHandler
from tests.helpers import pyramids_from
from utils.failures import FrameProcessingError


@pytest.fixture
def run_magnifier():
    magnifiers = []

    def run(settings, source):
        magnifier = Magnifier(settings)
        magnifiers.append(magnifier)
        return magnifier, [magnifier.process(p) for p in pyramids_from(source, settings.levels)]

    yield run
    for magnifier in magnifiers:
        magnifier.close()


def test_first_frame_is_passed_through(scenario_settings, synthetic_source, run_magnifier):
    synthetic_source.start()
    first_input = to_working(synthetic_source.read_frame())

    _, results = run_magnifier(scenario_settings, synthetic_source)

    np.testing.assert_array_equal(results[0].amplified, results[0].original)
    np.testing.assert_array_equal(results[0].amplified, first_input)
    assert results[0].amplified is not results[0].original


def test_results_keep_input_order(scenario_settings, synthetic_source, run_magnifier):
    magnifier, results = run_magnifier(scenario_settings, synthetic_source)

    assert [r.index for r in results] == [0, 1, 2, 3, 4]
    assert magnifier.frame_index == 5
    assert magnifier.last_elapsed_ms >= 0.0


def test_outer_levels_contribute_nothing(scenario_settings, synthetic_source):
    magnifier = Magnifier(scenario_settings)
    try:
        for pyramid in pyramids_from(synthetic_source, scenario_settings.levels):
            magnifier.process(pyramid)
            if pyramid.index == 0:
                continue
            assert not magnifier.bank[0].filtered.any()
            assert not magnifier.bank[scenario_settings.levels].filtered.any()
            assert magnifier.bank[1].filtered.any()
    finally:
        magnifier.close()


def test_oscillation_is_amplified(scenario_settings, synthetic_source, run_magnifier):
    _, results = run_magnifier(scenario_settings, synthetic_source)
    assert len(results) == 5

    originals = np.stack([r.original[..., LUMA_CHANNEL] for r in results])
    amplified = np.stack([r.amplified[..., LUMA_CHANNEL] for r in results])

    # Peak-to-peak swing of each pixel over frames 0..4
    input_swing = (originals.max(axis=0) - originals.min(axis=0)).max()
    output_swing = (amplified.max(axis=0) - amplified.min(axis=0)).max()

    assert input_swing > 0
    assert output_swing > 1.5 * input_swing


def test_single_pixel_oscillation_is_amplified(scenario_settings, run_magnifier):
    source = SyntheticSourceHandler(64, 64, frames=5, amplitude=1.0, period=4.0, patch=1)
    _, results = run_magnifier(scenario_settings, source)

    originals = np.stack([r.original[..., LUMA_CHANNEL] for r in results])
    amplified = np.stack([r.amplified[..., LUMA_CHANNEL] for r in results])
    input_swing = (originals.max(axis=0) - originals.min(axis=0)).max()
    output_swing = (amplified.max(axis=0) - amplified.min(axis=0)).max()

    assert input_swing > 0
    assert output_swing > input_swing


def test_zero_chroma_attenuation_leaves_chrominance_untouched(
        scenario_settings, synthetic_source, run_magnifier):
    settings = replace(scenario_settings, chrom_attenuation=0.0)
    _, results = run_magnifier(settings, synthetic_source)

    for result in results[1:]:
        np.testing.assert_array_equal(result.amplified[..., 1:], result.original[..., 1:])
        assert np.any(result.amplified[..., 0] != result.original[..., 0])


def test_full_chroma_attenuation_keeps_chroma_motion(scenario_settings, synthetic_source, run_magnifier):
    settings = replace(scenario_settings, chrom_attenuation=1.0)
    _, results = run_magnifier(settings, synthetic_source)

    assert any(np.any(r.amplified[..., 1:] != r.original[..., 1:]) for r in results[1:])


def test_level_count_mismatch_is_rejected(scenario_settings, synthetic_source):
    pyramids = pyramids_from(synthetic_source, scenario_settings.levels + 1)
    magnifier = Magnifier(scenario_settings)
    try:
        with pytest.raises(FrameProcessingError):
            magnifier.process(pyramids[0])
    finally:
        magnifier.close()


def test_frame_size_change_fails_the_frame(scenario_settings):
    big = pyramids_from(SyntheticSourceHandler(64, 64, frames=1), scenario_settings.levels)
    small = pyramids_from(SyntheticSourceHandler(32, 32, frames=1), scenario_settings.levels)
    magnifier = Magnifier(scenario_settings)
    try:
        magnifier.process(big[0])
        with pytest.raises(FrameProcessingError) as info:
            magnifier.process(small[0])
        assert info.value.critical
    finally:
        magnifier.close()
