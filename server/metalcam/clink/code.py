"""
Clinkcode Module
================

Decodes a clinkcode from two pairs of opposite corner tags and the
camera frame they were found in.

A clinkcode is a 6x6 grid of dark and light blocks. Its two diagonals
are complementary and carry a 6-bit check value; the 24 remaining blocks
carry the code. A code is accepted when the hash of its binary form
matches the diagonal value.

Usage:
    code = decode_clinkcode(cw_pair, ccw_pair, frame)
    if code.is_valid:
        print(code.code, code.center)
"""

from dataclasses import dataclass, field
from typing import List, Optional, Tuple

import numpy as np

from .layout import VALID_CLINKCODE_DIAGONALS, simple_hash
from .pixels import read_luminance
from .projection import build_projection_matrix, is_finite, project_point
from .tags import ExtractedTag, OppositeTagPair

GRID_SIZE = 6

# read_code results that are not codes
CODE_REJECTED = 0
CODE_NEEDS_ROTATION = -1


def _diagonal_check(code_value: int) -> Optional[int]:
    """Diagonal value a code must carry, or None if no diagonal can match."""
    h = simple_hash(format(code_value, "b")) - 12
    if h < 0:
        return None
    return h % 64


def read_code(matrix: np.ndarray, frame: np.ndarray) -> int:
    """
    Read the code through a grid-to-image transform.

    Args:
        matrix: 3x3 transform from code grid to image pixels
        frame: Camera frame the corners were detected in

    Returns:
        The positive code, ``CODE_NEEDS_ROTATION`` if the grid reads
        correctly only after a 180 degree turn, or ``CODE_REJECTED``.
    """
    diagonal_a: List[int] = []
    diagonal_b: List[int] = []

    for i in range(GRID_SIZE):
        lum_a = read_luminance(frame, project_point(matrix, (float(i), float(i))))
        lum_b = read_luminance(frame, project_point(matrix, (float(GRID_SIZE - 1 - i), float(i))))
        if lum_a is None or lum_b is None:
            return CODE_REJECTED
        diagonal_a.append(lum_a)
        diagonal_b.append(lum_b)

    avg_lum = (sum(diagonal_a) + sum(diagonal_b)) // (2 * GRID_SIZE)

    diagonal_value = 0
    reverse_diagonal_value = 0
    for i in range(GRID_SIZE):
        dark_a = diagonal_a[i] < avg_lum
        dark_b = diagonal_b[i] < avg_lum
        if dark_a == dark_b:
            # A rotation cannot fix this either
            return CODE_REJECTED
        if dark_a:
            reverse_diagonal_value |= 1 << i
            diagonal_value |= 1 << (GRID_SIZE - 1 - i)

    if reverse_diagonal_value in VALID_CLINKCODE_DIAGONALS:
        return CODE_NEEDS_ROTATION
    if diagonal_value not in VALID_CLINKCODE_DIAGONALS:
        return CODE_REJECTED

    code_value = 0
    bit_index = 0
    for x in range(GRID_SIZE):
        for y in range(GRID_SIZE):
            if x == y or x == GRID_SIZE - 1 - y:
                continue
            lum = read_luminance(frame, project_point(matrix, (float(x), float(y))))
            if lum is None:
                return CODE_REJECTED
            if lum < avg_lum:
                code_value |= 1 << bit_index
            bit_index += 1

    if _diagonal_check(code_value) != diagonal_value:
        return CODE_REJECTED
    return code_value


@dataclass
class ClinkCode:
    """A clinkcode candidate spanned by four corner tags."""
    top_left: ExtractedTag
    top_right: ExtractedTag
    bottom_left: ExtractedTag
    bottom_right: ExtractedTag
    is_valid: bool = False
    projection_matrix: Optional[np.ndarray] = field(default=None, repr=False)
    code: int = 0
    center: Tuple[float, float] = (-1.0, -1.0)

    def build_projection_matrix(self) -> np.ndarray:
        """Rebuild the grid-to-image transform from the current corners."""
        self.projection_matrix = build_projection_matrix(
            self.top_left.xy, self.top_right.xy, self.bottom_left.xy, self.bottom_right.xy
        )
        return self.projection_matrix

    def rotate_180(self) -> None:
        """Swap the corners as if the code were turned upside down."""
        self.top_left, self.top_right, self.bottom_right, self.bottom_left = (
            self.bottom_right, self.bottom_left, self.top_left, self.top_right
        )

    def to_dict(self) -> dict:
        return {
            "code": self.code,
            "center": [self.center[0], self.center[1]],
            "corners": {
                "top_left": list(self.top_left.xy),
                "top_right": list(self.top_right.xy),
                "bottom_left": list(self.bottom_left.xy),
                "bottom_right": list(self.bottom_right.xy),
            },
        }


def decode_clinkcode(
    cw_pair: OppositeTagPair, ccw_pair: OppositeTagPair, frame: np.ndarray
) -> ClinkCode:
    """
    Orient the four corners and read the code between them.

    Args:
        cw_pair: Clockwise tags, one of which is the top-left corner
        ccw_pair: Counter-clockwise tags on the other diagonal
        frame: Camera frame the tags were detected in

    Returns:
        The decoded code; check ``is_valid`` before using it
    """
    top_left, bottom_right = cw_pair.tag_a, cw_pair.tag_b
    if top_left.y > bottom_right.y:
        # assume up is actually up
        top_left, bottom_right = bottom_right, top_left

    top_right, bottom_left = ccw_pair.tag_a, ccw_pair.tag_b
    if top_left.error_pointing_to(top_right) < top_left.error_pointing_to(bottom_left):
        top_right, bottom_left = bottom_left, top_right

    clinkcode = ClinkCode(
        top_left=top_left,
        top_right=top_right,
        bottom_left=bottom_left,
        bottom_right=bottom_right,
    )

    if not is_finite(clinkcode.build_projection_matrix()):
        return clinkcode

    code = read_code(clinkcode.projection_matrix, frame)
    if code == CODE_NEEDS_ROTATION:
        clinkcode.rotate_180()
        clinkcode.build_projection_matrix()
        code = read_code(clinkcode.projection_matrix, frame)
    if code <= 0:
        return clinkcode

    clinkcode.code = code
    clinkcode.center = project_point(clinkcode.projection_matrix, (2.5, 2.5))
    clinkcode.is_valid = True
    return clinkcode
