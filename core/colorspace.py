"""
Conversions between decoded BGR frames and the Lab working representation.

Frames are processed as float32 Lab converted from BGR samples normalized to
[0, 1]: channel 0 is lightness, channels 1 and 2 are chrominance.
"""
import cv2
import numpy as np

LUMA_CHANNEL = 0
CHROMA_CHANNELS = (1, 2)


def to_working(frame_bgr: np.ndarray) -> np.ndarray:
    """BGR uint8 (or float in [0, 1]) -> float32 Lab."""
    if frame_bgr.dtype == np.uint8:
        normalized = frame_bgr.astype(np.float32) / 255.0
    else:
        normalized = frame_bgr.astype(np.float32)
    return cv2.cvtColor(normalized, cv2.COLOR_BGR2Lab)


def to_display(frame_lab: np.ndarray) -> np.ndarray:
    """float32 Lab -> BGR uint8, clipping amplified values to the displayable range."""
    bgr = cv2.cvtColor(frame_lab.astype(np.float32), cv2.COLOR_Lab2BGR)
    return np.clip(bgr * 255.0 + 0.5, 0, 255).astype(np.uint8)


def attenuate_chroma(image: np.ndarray, factor: float) -> np.ndarray:
    """Scale both chrominance planes of a Lab image by ``factor``."""
    planes = list(cv2.split(image))
    for channel in CHROMA_CHANNELS:
        planes[channel] = planes[channel] * factor
    return cv2.merge(planes)
