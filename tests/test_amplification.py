import math

import pytest

from core.amplification import delta, is_passband_level, level_gain, spatial_wavelength
from utils.settings import Settings


def test_delta_and_wavelength(scenario_settings):
    assert delta(scenario_settings) == pytest.approx(16.0 / 8.0 / 11.0)
    diagonal = math.sqrt(64 ** 2 + 64 ** 2)
    assert spatial_wavelength(64, 64, 0) == pytest.approx(diagonal / 3.0)
    assert spatial_wavelength(64, 64, 2) == pytest.approx(diagonal / 12.0)


def test_closed_form_gains(scenario_settings):
    # Level 1 is capped by alpha; level 2 falls below it
    assert level_gain(scenario_settings, 64, 64, 1) == pytest.approx(10.0)
    assert level_gain(scenario_settings, 64, 64, 2) == pytest.approx(8.3709, rel=1e-3)


def test_finest_and_coarsest_levels_are_not_amplified(scenario_settings):
    assert level_gain(scenario_settings, 64, 64, 0) == 0.0
    assert level_gain(scenario_settings, 64, 64, 3) == 0.0
    assert not is_passband_level(0, 3)
    assert is_passband_level(1, 3)
    assert is_passband_level(2, 3)
    assert not is_passband_level(3, 3)


@pytest.mark.parametrize("size", [(640, 480), (64, 64), (1920, 1080)])
def test_gain_never_increases_with_level(size):
    settings = Settings(levels=6, alpha=50.0, lambda_c=10.0, exaggeration_factor=2.0)
    gains = [level_gain(settings, *size, level) for level in range(1, settings.levels)]

    assert len(gains) >= 3
    assert all(a >= b for a, b in zip(gains, gains[1:]))
    assert all(gain <= settings.alpha for gain in gains)


def test_short_wavelengths_get_negative_gain():
    settings = Settings(levels=5, alpha=20.0, lambda_c=200.0, exaggeration_factor=1.0)
    assert level_gain(settings, 32, 32, 4) < 0.0
