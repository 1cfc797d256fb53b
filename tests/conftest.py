import threading

import pytest

from Handlers.Synthetic_Source_Handler import SyntheticSourceHandler
from utils.settings import Settings


@pytest.fixture
def scenario_settings():
    """Parameters of the 64x64 oscillating-patch scenario."""
    return Settings(
        levels=3,
        alpha=10.0,
        lambda_c=16.0,
        cutoff_frequency_high=0.4,
        cutoff_frequency_low=0.05,
        chrom_attenuation=0.1,
        exaggeration_factor=2.0,
    )


@pytest.fixture
def synthetic_source():
    return SyntheticSourceHandler(width=64, height=64, frames=5, amplitude=1.0, period=4.0, patch=8)


@pytest.fixture(autouse=True)
def no_leaked_stage_threads():
    """Every test must leave no pipeline stage thread running."""
    yield
    leaked = [t.name for t in threading.enumerate()
              if t.name in ("CaptureStage", "MagnifyStage", "DisplayStage") and t.is_alive()]
    assert not leaked, f"stage threads still alive: {leaked}"
