"""
Projection Module
=================

Projective transform between clinkcode grid space and image pixels.

The code grid spans 6x6 blocks; the corner tags sit one block outside it,
at grid coordinates (-1, -1), (6, -1), (-1, 6) and (6, 6). The transform
is built from four point correspondences with the square-to-quad basis
method: ``basis(dst) @ adj(basis(src))``.
"""

from typing import Tuple

import numpy as np

Point = Tuple[float, float]

NUM_BLOCKS = 6.0
GRID_CORNERS = (
    (-1.0, -1.0),
    (NUM_BLOCKS, -1.0),
    (-1.0, NUM_BLOCKS),
    (NUM_BLOCKS, NUM_BLOCKS),
)


def adjugate3(m: np.ndarray) -> np.ndarray:
    """Adjugate of a 3x3 matrix (the inverse up to scale)."""
    m = np.asarray(m, dtype=np.float64).reshape(9)
    return np.array([
        [m[4] * m[8] - m[5] * m[7], m[2] * m[7] - m[1] * m[8], m[1] * m[5] - m[2] * m[4]],
        [m[5] * m[6] - m[3] * m[8], m[0] * m[8] - m[2] * m[6], m[2] * m[3] - m[0] * m[5]],
        [m[3] * m[7] - m[4] * m[6], m[1] * m[6] - m[0] * m[7], m[0] * m[4] - m[1] * m[3]],
    ])


def form_basis(p1: Point, p2: Point, p3: Point, p4: Point) -> np.ndarray:
    """
    Matrix mapping the projective basis onto four points.

    Maps (1,0,0), (0,1,0), (0,0,1) to p1, p2, p3 and (1,1,1) to p4.
    """
    m = np.array([
        [p1[0], p2[0], p3[0]],
        [p1[1], p2[1], p3[1]],
        [1.0, 1.0, 1.0],
    ])
    v = adjugate3(m) @ np.array([p4[0], p4[1], 1.0])
    return m @ np.diag(v)


def build_projection_matrix(
    top_left: Point, top_right: Point, bottom_left: Point, bottom_right: Point
) -> np.ndarray:
    """
    Transform from code grid coordinates to image pixels.

    Args:
        top_left: Pixel position of the top-left corner tag
        top_right: Pixel position of the top-right corner tag
        bottom_left: Pixel position of the bottom-left corner tag
        bottom_right: Pixel position of the bottom-right corner tag

    Returns:
        3x3 matrix normalized so that ``m[2, 2] == 1``. Degenerate corner
        layouts produce non-finite entries.
    """
    src = form_basis(*GRID_CORNERS)
    dst = form_basis(top_left, top_right, bottom_left, bottom_right)
    with np.errstate(divide="ignore", invalid="ignore"):
        t = dst @ adjugate3(src)
        return t / t[2, 2]


def project_point(m: np.ndarray, pt: Point) -> Point:
    """Apply the transform to a grid point, with perspective divide."""
    x, y, w = m @ np.array([pt[0], pt[1], 1.0])
    with np.errstate(divide="ignore", invalid="ignore"):
        s = 1.0 / w
        return (float(s * x), float(s * y))


def is_finite(m: np.ndarray) -> bool:
    """Check that every matrix entry is finite."""
    return bool(np.all(np.isfinite(m)))
