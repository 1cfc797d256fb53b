"""
Temporal Filter Bank

One FilterState per pyramid band. Each frame the band is pushed through two
single-pole exponential low-passes and their difference is kept as the
bandpassed signal:

    low_pass1 = (1 - high) * low_pass1 + high * band
    low_pass2 = (1 - low)  * low_pass2 + low  * band
    filtered  = low_pass1 - low_pass2

``high`` and ``low`` are per-frame decay coefficients, so the passband moves
with the input frame rate. No frame history is buffered.
"""
from dataclasses import dataclass
from typing import List, Sequence

import numpy as np


@dataclass
class FilterState:
    """Running filter state of a single pyramid band."""
    low_pass1: np.ndarray
    low_pass2: np.ndarray
    filtered: np.ndarray

    @classmethod
    def from_band(cls, band: np.ndarray) -> "FilterState":
        """Identity state: all three images start as copies of the first band."""
        return cls(low_pass1=band.copy(), low_pass2=band.copy(), filtered=band.copy())

    def update(self, band: np.ndarray, high: float, low: float) -> np.ndarray:
        """Advance both low-passes by one frame and return the new bandpassed image."""
        self.low_pass1 = (1.0 - high) * self.low_pass1 + high * band
        self.low_pass2 = (1.0 - low) * self.low_pass2 + low * band
        self.filtered = self.low_pass1 - self.low_pass2
        return self.filtered

    def zero(self) -> None:
        """Drop this band's contribution to the motion image."""
        self.filtered = np.zeros_like(self.filtered)


class FilterBank:
    """Per-level filter states, indexed finest (0) to coarsest (levels)."""

    def __init__(self):
        self.states: List[FilterState] = []

    @property
    def initialized(self) -> bool:
        return bool(self.states)

    def initialize(self, bands: Sequence[np.ndarray]) -> None:
        """Seed one state per band from the first frame's pyramid."""
        self.states = [FilterState.from_band(band) for band in bands]

    def __getitem__(self, level: int) -> FilterState:
        return self.states[level]

    def __len__(self) -> int:
        return len(self.states)

    def filtered_bands(self, count: int) -> List[np.ndarray]:
        """The first ``count`` bandpassed images, finest first."""
        return [state.filtered for state in self.states[:count]]
