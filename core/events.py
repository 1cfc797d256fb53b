"""
Typed message and event definitions for the magnifier pipeline.

Stages never hold references to each other: frame data flows through the
pipeline queues, and control-plane notifications (timing, failures) go
through the event bus.
"""
from dataclasses import dataclass, field
from typing import List
import time
import numpy as np


# ─── Pipeline Messages (flow through PipelineQueue stages) ──────────────

@dataclass(frozen=True)
class Pyramid:
    """
    A decomposed frame.

    ``bands`` holds ``levels`` detail bands (finest first), then the coarsest
    residual, then the original full-resolution working frame.
    """
    index: int
    bands: List[np.ndarray]
    timestamp: float = field(default_factory=time.time)

    @property
    def levels(self) -> int:
        return len(self.bands) - 2

    @property
    def original(self) -> np.ndarray:
        return self.bands[-1]


@dataclass(frozen=True)
class ResultPair:
    """The original frame and its amplified composite, in working color space."""
    index: int
    original: np.ndarray
    amplified: np.ndarray
    timestamp: float = field(default_factory=time.time)


# ─── Event Bus Events (control plane, low-frequency) ─────────────────────

@dataclass
class FrameProcessed:
    """Published by the magnify stage after each frame's critical path."""
    index: int
    elapsed_ms: float
    timestamp: float = field(default_factory=time.time)


@dataclass
class StageFailed:
    """Published by any stage whose loop raised; triggers pipeline shutdown."""
    stage: str
    error: Exception
    timestamp: float = field(default_factory=time.time)


@dataclass
class StageFinished:
    """Published when a stage leaves its loop (normally or not)."""
    stage: str
    items: int = 0
    timestamp: float = field(default_factory=time.time)
