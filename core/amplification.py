"""
Amplification Policy

Per-level gain derived from the band's spatial wavelength. Bands whose
wavelength is short relative to ``lambda_c`` get a small (or negative) gain,
``alpha`` caps every gain, and the finest and coarsest bands carry no
trusted motion so they are always zeroed.
"""
import math

from utils.settings import Settings


def delta(settings: Settings) -> float:
    """Wavelength scale shared by all levels of a frame."""
    return settings.lambda_c / 8.0 / (1.0 + settings.alpha)


def spatial_wavelength(width: int, height: int, level: int) -> float:
    """Representative wavelength of ``level``: a third of the diagonal, halved per octave."""
    return math.sqrt(width * width + height * height) / 3.0 / (2 ** level)


def is_passband_level(level: int, levels: int) -> bool:
    """Level 0 (noise) and the residual at ``levels`` (average color) are never amplified."""
    return 0 < level < levels


def level_gain(settings: Settings, width: int, height: int, level: int) -> float:
    """
    Gain applied to the bandpassed image of ``level``.

    Returns 0.0 for levels outside the passband.
    """
    if not is_passband_level(level, settings.levels):
        return 0.0
    wavelength = spatial_wavelength(width, height, level)
    current_alpha = (wavelength / delta(settings) / 8.0 - 1.0) * settings.exaggeration_factor
    return min(settings.alpha, current_alpha)
