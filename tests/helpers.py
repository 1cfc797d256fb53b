"""Shared helpers for the test-suite."""
import numpy as np

from core.colorspace import to_working
from core.events import Pyramid
from core.pyramid import decompose


def random_image(height, width, seed=0):
    """A random Lab working frame."""
    rng = np.random.default_rng(seed)
    return to_working(rng.random((height, width, 3), dtype=np.float32))


def pyramids_from(source, levels):
    """Decompose every frame of ``source`` the way the capture stage does."""
    source.start()
    pyramids = []
    while True:
        frame = source.read_frame()
        if frame is None:
            break
        pyramids.append(Pyramid(index=len(pyramids), bands=decompose(to_working(frame), levels)))
    source.stop()
    return pyramids
