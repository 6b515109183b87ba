"""
Clink Detector Module
=====================

Turns one frame's clink data buffer and pixels into decoded clinkcodes.

Usage:
    detector = ClinkDetector()
    result = detector.process(clink_data, frame)
    for code in result.codes:
        print(code.code, code.center)
"""

import logging
from dataclasses import dataclass, field
from typing import List, Optional, Sequence, Tuple

import numpy as np

from . import layout
from .code import ClinkCode, decode_clinkcode
from .layout import GridLayout
from .tags import extract_tags_by_type, generate_opposite_tag_pairs

LOGGER = logging.getLogger(__name__)


@dataclass
class DetectionResult:
    """Outcome of processing one frame."""
    clinkboard_detected: bool = False
    clinkcode_detected: bool = False
    codes: List[ClinkCode] = field(default_factory=list)

    @property
    def marker(self) -> Optional[Tuple[float, float]]:
        """Center of the last decoded code, used for the crosshair overlay."""
        if not self.codes:
            return None
        return self.codes[-1].center

    def to_dict(self) -> dict:
        marker = self.marker
        return {
            "clinkboard_detected": self.clinkboard_detected,
            "clinkcode_detected": self.clinkcode_detected,
            "codes": [code.to_dict() for code in self.codes],
            "marker": list(marker) if marker else None,
        }


class ClinkDetector:
    """
    Finds clinkboards and decodes clinkcodes in a frame.

    Attributes:
        grid (GridLayout): Layout of the clink data buffer
    """

    def __init__(self, grid: GridLayout = GridLayout()):
        """
        Initialize the detector.

        Args:
            grid: Layout of the clink data buffers it will receive
        """
        self.grid = grid

    def process(self, data: Sequence[int], frame: np.ndarray) -> DetectionResult:
        """
        Decode every clinkcode visible in a frame.

        Args:
            data: Clink data buffer produced for this frame
            frame: The frame's pixels (BGR or BGRA)

        Returns:
            Detection flags and the valid codes, in discovery order

        Raises:
            ClinkDataError: If the buffer does not match the grid layout
        """
        buffer = self.grid.as_buffer(data)
        result = DetectionResult()

        board_seen = (
            buffer[layout.BOARD_4PART_RR] > 0
            and buffer[layout.BOARD_4PART_BB] > 0
            and buffer[layout.BOARD_3PART_CW] > 0
            and buffer[layout.BOARD_3PART_CCW] > 0
        )
        code_seen = buffer[layout.CODE_3PART_CW] > 1 and buffer[layout.CODE_3PART_CCW] > 1
        if not (board_seen or code_seen):
            return result

        tags_by_type = extract_tags_by_type(buffer, self.grid)

        result.clinkboard_detected = bool(board_seen) and all(
            tags_by_type.get(t) for t in layout.CLINKBOARD_TYPES
        )
        cw_tags = tags_by_type.get(layout.CODE_3PART_CW, [])
        ccw_tags = tags_by_type.get(layout.CODE_3PART_CCW, [])
        result.clinkcode_detected = bool(code_seen) and len(cw_tags) > 1 and len(ccw_tags) > 1

        if not result.clinkcode_detected:
            return result

        cw_pairs = generate_opposite_tag_pairs(cw_tags)
        ccw_pairs = generate_opposite_tag_pairs(ccw_tags)
        for cw_pair in cw_pairs:
            for ccw_pair in ccw_pairs:
                if not cw_pair.is_compatible(ccw_pair):
                    continue
                clinkcode = decode_clinkcode(cw_pair, ccw_pair, frame)
                if clinkcode.is_valid:
                    LOGGER.info("Found clinkcode: %d at (%.1f, %.1f)",
                                clinkcode.code, *clinkcode.center)
                    result.codes.append(clinkcode)

        return result
