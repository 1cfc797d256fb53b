"""
Per-run magnification settings.

Settings are read-only once the pipeline starts. They are built from the
JSON configuration and then refined by ``key=value`` command-line tokens.
"""
import re
from dataclasses import dataclass, fields, replace
from typing import Iterable

from utils.config import Config
from utils.logger import Logger

_logger = Logger("Settings")

_DECIMAL = r"([+-]?(?:\d+(?:\.\d*)?|\.\d+))"

FLOAT_FIELDS = (
    "alpha",
    "lambda_c",
    "cutoff_frequency_high",
    "cutoff_frequency_low",
    "chrom_attenuation",
    "exaggeration_factor",
)

SETTING_NAMES = ("levels",) + FLOAT_FIELDS

_TOKEN_PATTERNS = [("levels", re.compile(r"^levels=(\d+)$"), int)] + [
    (name, re.compile(rf"^{name}={_DECIMAL}$"), float) for name in FLOAT_FIELDS
]


@dataclass(frozen=True)
class Settings:
    """
    Immutable magnification parameters.

    ``cutoff_frequency_high`` and ``cutoff_frequency_low`` are dimensionless
    per-frame smoothing coefficients in (0, 1), not frequencies in Hz: the
    passband they select scales with the actual input frame rate.
    The caller must keep ``cutoff_frequency_high > cutoff_frequency_low``;
    swapping them inverts the bandpass and is not validated here.
    """
    levels: int = 5
    alpha: float = 20.0
    lambda_c: float = 20.0
    cutoff_frequency_high: float = 0.4
    cutoff_frequency_low: float = 0.05
    chrom_attenuation: float = 0.1
    exaggeration_factor: float = 2.0
    source: str = ""

    @classmethod
    def from_config(cls, config: Config) -> "Settings":
        """Build settings from the ``settings`` section of the configuration."""
        defaults = cls()
        return cls(
            levels=config.get_int("settings.levels", defaults.levels),
            alpha=config.get_float("settings.alpha", defaults.alpha),
            lambda_c=config.get_float("settings.lambda_c", defaults.lambda_c),
            cutoff_frequency_high=config.get_float(
                "settings.cutoff_frequency_high", defaults.cutoff_frequency_high),
            cutoff_frequency_low=config.get_float(
                "settings.cutoff_frequency_low", defaults.cutoff_frequency_low),
            chrom_attenuation=config.get_float(
                "settings.chrom_attenuation", defaults.chrom_attenuation),
            exaggeration_factor=config.get_float(
                "settings.exaggeration_factor", defaults.exaggeration_factor),
            source=str(config.get("settings.source", defaults.source) or ""),
        )

    def describe(self) -> str:
        """Multi-line ``key: value`` dump, logged at startup."""
        return "\n".join(f"{f.name}: {getattr(self, f.name)}" for f in fields(self))


def apply_cli_tokens(settings: Settings, tokens: Iterable[str]) -> Settings:
    """
    Apply ``key=value`` tokens to ``settings``.

    A token that is not a well-formed setting assignment becomes the source
    identifier (the last one wins). A malformed number such as ``alpha=abc``
    therefore leaves ``alpha`` at its current value.
    """
    changes = {}
    for token in tokens:
        for name, pattern, cast in _TOKEN_PATTERNS:
            match = pattern.match(token)
            if match:
                changes[name] = cast(match.group(1))
                break
        else:
            if token.partition("=")[0] in SETTING_NAMES:
                _logger.warning(f"Malformed setting '{token}' treated as source identifier")
            changes["source"] = token
    return replace(settings, **changes)
