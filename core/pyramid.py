"""
Spatial Pyramid Transform

Decomposes a working frame into Laplacian-style detail bands and rebuilds an
image from (possibly filtered) bands. Pure functions over numpy arrays;
anti-aliased down-sampling and size-matched up-sampling come from OpenCV.
"""
from typing import List, Sequence

import cv2
import numpy as np


def decompose(image: np.ndarray, levels: int) -> List[np.ndarray]:
    """
    Build the pyramid of a single image.

    Args:
        image: Input image (H, W, C), float32
        levels: Number of detail bands

    Returns:
        ``levels + 2`` images: detail bands finest to coarsest, the coarsest
        low-pass residual, then ``image`` itself (unchanged, not copied).
    """
    if levels < 0:
        raise ValueError(f"levels must be >= 0, got {levels}")

    pyramid = []
    current = image

    for _ in range(levels):
        down = cv2.pyrDown(current)
        height, width = current.shape[:2]
        up = cv2.pyrUp(down, dstsize=(width, height))

        # Detail band = current octave minus its own low-pass reconstruction
        pyramid.append(current - up)
        current = down

    pyramid.append(current)
    pyramid.append(image)
    return pyramid


def reconstruct(bands: Sequence[np.ndarray]) -> np.ndarray:
    """
    Collapse bands ``[0..levels]`` (finest first, residual last) into one image.

    Starting from the coarsest band, each step up-samples to the next finer
    band's exact size and adds that band.
    """
    if not bands:
        raise ValueError("reconstruct() needs at least one band")

    current = bands[-1]
    for band in reversed(bands[:-1]):
        height, width = band.shape[:2]
        current = cv2.pyrUp(current, dstsize=(width, height)) + band

    return current
