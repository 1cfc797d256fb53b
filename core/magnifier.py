"""
Per-frame magnification: temporal filtering, amplification, reconstruction
and compositing of one decomposed frame.

The filter bank is owned by the Magnifier. Inside a frame, each level is
handed to its own pool task together with that level's FilterState only, so
tasks never touch each other's state. The orchestrating thread waits for all
tasks before reconstructing (fork-join barrier).
"""
import time
from concurrent.futures import ThreadPoolExecutor
from typing import List, Tuple

import cv2
import numpy as np

from core.amplification import is_passband_level, level_gain
from core.colorspace import attenuate_chroma
from core.events import Pyramid, ResultPair
from core.pyramid import reconstruct
from core.temporal_filter import FilterBank, FilterState
from utils.failures import FrameProcessingError
from utils.logger import Logger
from utils.settings import Settings


class Magnifier:
    """Stateful Eulerian magnifier for a single stream."""

    def __init__(self, settings: Settings):
        self.settings = settings
        self.bank = FilterBank()
        self.frame_index = 0
        self.last_elapsed_ms = 0.0
        self.logger = Logger("Magnifier")
        self._pool = ThreadPoolExecutor(
            max_workers=settings.levels + 1,
            thread_name_prefix="LevelWorker",
        )

    def process(self, pyramid: Pyramid) -> ResultPair:
        """
        Magnify one frame.

        Returns:
            ResultPair(original, composited). For the first frame the
            composite is a copy of the original.
        """
        t_start = time.perf_counter()
        levels = self.settings.levels

        if pyramid.levels != levels:
            raise FrameProcessingError(
                f"Pyramid has {pyramid.levels} levels, expected {levels}",
                frame_index=pyramid.index,
            )

        original = pyramid.original
        if original.size == 0:
            raise FrameProcessingError("Empty frame", frame_index=pyramid.index)

        if self.frame_index == 0:
            self.bank.initialize(pyramid.bands)
            composited = original.copy()
        else:
            self._filter_levels(pyramid)
            try:
                motion = reconstruct(self.bank.filtered_bands(levels + 1))
                motion = attenuate_chroma(motion, self.settings.chrom_attenuation)
            except cv2.error as e:
                raise FrameProcessingError(
                    f"Reconstruction failed on frame {pyramid.index}: {e}",
                    frame_index=pyramid.index,
                ) from e
            composited = original + motion

        self.last_elapsed_ms = (time.perf_counter() - t_start) * 1000.0
        self.frame_index += 1

        return ResultPair(index=pyramid.index, original=original, amplified=composited)

    def _filter_levels(self, pyramid: Pyramid) -> None:
        """Fan out one task per level (coarsest first) and join them all."""
        height, width = pyramid.original.shape[:2]
        futures = [
            self._pool.submit(
                self._filter_level,
                self.bank[level],
                pyramid.bands[level],
                level,
                level_gain(self.settings, width, height, level),
            )
            for level in range(self.settings.levels, -1, -1)
        ]

        errors: List[Tuple[int, BaseException]] = []
        for level, future in zip(range(self.settings.levels, -1, -1), futures):
            exc = future.exception()
            if exc is not None:
                errors.append((level, exc))

        if errors:
            level, exc = errors[0]
            raise FrameProcessingError(
                f"Level {level} failed on frame {pyramid.index}: {exc}",
                frame_index=pyramid.index,
            ) from exc

    def _filter_level(self, state: FilterState, band: np.ndarray, level: int, gain: float) -> None:
        if not is_passband_level(level, self.settings.levels):
            state.zero()
            return

        filtered = state.update(
            band,
            self.settings.cutoff_frequency_high,
            self.settings.cutoff_frequency_low,
        )
        state.filtered = filtered * gain

    def close(self) -> None:
        """Release the level worker pool."""
        self._pool.shutdown(wait=True)
