"""
Pixel Sampling Module
=====================

Reads luminance samples from camera frames.
"""

import math
from typing import Optional, Tuple

import numpy as np


def round_half_away(value: float) -> int:
    """Round to the nearest integer, halves away from zero."""
    return int(math.copysign(math.floor(abs(value) + 0.5), value))


def read_luminance(frame: np.ndarray, xy: Tuple[float, float]) -> Optional[int]:
    """
    Sum of the colour channels at the pixel nearest to ``xy``.

    Args:
        frame: BGR or BGRA ``uint8`` image
        xy: Pixel position (x, y)

    Returns:
        Luminance in [0, 765], or None if the position lies outside the frame
    """
    x, y = xy
    if not (math.isfinite(x) and math.isfinite(y)):
        return None
    col = round_half_away(x)
    row = round_half_away(y)
    height, width = frame.shape[:2]
    if not (0 <= col < width and 0 <= row < height):
        return None
    pixel = frame[row, col]
    return int(pixel[0]) + int(pixel[1]) + int(pixel[2])
