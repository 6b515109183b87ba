"""
Clink Data Layout Module
========================

Constants describing the per-frame grid summary ("clink data") written by
the GPU pass, and the tag types it reports.

The buffer starts with one counter per tag type, followed by
``VALUES_PER_CELL`` weighted sums for every grid cell.
"""

from dataclasses import dataclass
from typing import Sequence

import numpy as np

from ..errors import ClinkDataError

# Frame geometry
NUM_PIX_X = 1920
NUM_PIX_Y = 1080
BYTES_PER_PIXEL = 4
BYTES_PER_ROW = NUM_PIX_X * BYTES_PER_PIXEL

# Grid at resolution 1
BASE_DIVISIONS_X = 16
BASE_DIVISIONS_Y = 9

# Corner tag types
NUM_TAG_TYPES = 30
BOARD_3PART_CW = 0
CODE_3PART_CW = 1
BOARD_3PART_CCW = 2
CODE_3PART_CCW = 3
BOARD_4PART_RR = 4
MARKER_4PART_YY = 5
BOARD_4PART_BB = 6

CLINKBOARD_TYPES = frozenset({BOARD_3PART_CW, BOARD_3PART_CCW, BOARD_4PART_BB, BOARD_4PART_RR})
CLINKCODE_TYPES = frozenset({CODE_3PART_CW, CODE_3PART_CCW})

VALID_CLINKCODE_DIAGONALS = (28, 23, 49, 19, 52, 46, 13, 59)

# Per-cell fields
VALUES_PER_CELL = 8
TOTAL_WEIGHT = 0
TYPE_FLAGS = 1
TYPE_AVERAGE = 2
X_COORD_AVERAGE = 3
Y_COORD_AVERAGE = 4
X_ORIENTATION_AVERAGE = 5
Y_ORIENTATION_AVERAGE = 6
DOT_SIZE = 7

INT32_MIN = int(np.iinfo(np.int32).min)
INT32_MAX = int(np.iinfo(np.int32).max)


def is_clinkboard_type(tag_type: int) -> bool:
    """Check whether a tag type belongs to a clinkboard."""
    return tag_type in CLINKBOARD_TYPES


def is_clinkcode_type(tag_type: int) -> bool:
    """Check whether a tag type belongs to a clinkcode."""
    return tag_type in CLINKCODE_TYPES


def simple_hash(text: str) -> int:
    """32-bit multiplicative string hash used to checksum clinkcodes."""
    h = 0
    for byte in text.encode("utf-8"):
        h = (31 * h + byte) & 0xFFFFFFFF
    return h


@dataclass(frozen=True)
class GridLayout:
    """Grid dimensions of the clink data buffer."""
    resolution: int = 1

    @property
    def divisions_x(self) -> int:
        return BASE_DIVISIONS_X * self.resolution

    @property
    def divisions_y(self) -> int:
        return BASE_DIVISIONS_Y * self.resolution

    @property
    def num_cells(self) -> int:
        return self.divisions_x * self.divisions_y

    @property
    def data_size(self) -> int:
        return VALUES_PER_CELL * self.num_cells + NUM_TAG_TYPES

    def cell_offset(self, cell_index: int) -> int:
        """Index of the first value of a cell within the buffer."""
        return NUM_TAG_TYPES + VALUES_PER_CELL * cell_index

    def empty_buffer(self) -> np.ndarray:
        """Zeroed buffer, as handed to the GPU before each frame."""
        return np.zeros(self.data_size, dtype=np.int32)

    def as_buffer(self, data: Sequence[int]) -> np.ndarray:
        """
        Validate and convert clink data to an int32 array.

        Raises:
            ClinkDataError: If the values are not int32 integers or the
                buffer size does not match the layout
        """
        try:
            values = np.asarray(data)
        except (OverflowError, ValueError, TypeError) as e:
            raise ClinkDataError(f"Clink data is not a flat list of integers: {e}") from e
        if values.dtype.kind not in "iu":
            raise ClinkDataError(f"Clink data must hold integers, got {values.dtype}")
        if values.size and (values.min() < INT32_MIN or values.max() > INT32_MAX):
            raise ClinkDataError("Clink data values must fit in int32")

        buffer = values.astype(np.int32).reshape(-1)
        if buffer.size != self.data_size:
            raise ClinkDataError(
                f"Clink data holds {buffer.size} values, expected {self.data_size}"
            )
        return buffer
