"""
Corner Tags Module
==================

Extraction of corner tags from the clink data buffer and pairing of
opposite corners.

Classes:
    ExtractedTag: A corner tag averaged over one grid cell
    OppositeTagPair: Two tags that may sit on opposite corners of a code
"""

import math
from dataclasses import dataclass
from typing import Dict, List, Sequence, Tuple

from . import layout
from .layout import GridLayout
from .pixels import round_half_away

Point = Tuple[float, float]


@dataclass
class ExtractedTag:
    """Corner tag averaged over one grid cell."""
    weight: float
    type_flags: int
    type: int
    x: float
    y: float
    orient_x: float
    orient_y: float
    orient_hypot: float
    dot_size: float
    cell_index: int

    @property
    def xy(self) -> Point:
        return (self.x, self.y)

    def dist_to(self, tag: "ExtractedTag") -> float:
        """Euclidean distance to another tag."""
        return math.hypot(tag.x - self.x, tag.y - self.y)

    def error_pointing_to(self, tag: "ExtractedTag") -> float:
        """
        How far this tag's orientation misses another tag.

        Walks ``dist_to(tag)`` along the unit orientation and returns the
        distance between the reached point and ``tag``.
        """
        dist = self.dist_to(tag)
        px = self.x + dist * self.orient_x / self.orient_hypot
        py = self.y + dist * self.orient_y / self.orient_hypot
        return math.hypot(px - tag.x, py - tag.y)


@dataclass
class OppositeTagPair:
    """Two tags facing each other across a marker."""
    tag_a: ExtractedTag
    tag_b: ExtractedTag

    @property
    def center(self) -> Point:
        return ((self.tag_a.x + self.tag_b.x) / 2.0, (self.tag_a.y + self.tag_b.y) / 2.0)

    @property
    def separation(self) -> float:
        return math.hypot(self.tag_a.x - self.tag_b.x, self.tag_a.y - self.tag_b.y)

    def is_compatible(self, other: "OppositeTagPair") -> bool:
        """Check whether both pairs share a center, i.e. span the same marker."""
        (ax, ay), (bx, by) = self.center, other.center
        dist = math.hypot(ax - bx, ay - by)
        return dist < min(self.separation, other.separation) / 2.0


def extract_tags_by_type(
    data: Sequence[int], grid: GridLayout = GridLayout()
) -> Dict[int, List[ExtractedTag]]:
    """
    Average every weighted grid cell into a tag.

    Args:
        data: Clink data buffer
        grid: Grid layout of the buffer

    Returns:
        Mapping of tag type to the tags of that type, in cell order.
        Only clinkboard and clinkcode types are reported.
    """
    buffer = grid.as_buffer(data)
    tags_by_type: Dict[int, List[ExtractedTag]] = {}

    for n in range(grid.num_cells):
        offset = grid.cell_offset(n)
        weight = float(buffer[offset + layout.TOTAL_WEIGHT])
        if weight <= 0:
            continue

        tag_type = round_half_away(float(buffer[offset + layout.TYPE_AVERAGE]) / weight)
        if not (layout.is_clinkcode_type(tag_type) or layout.is_clinkboard_type(tag_type)):
            continue

        orient_x = float(buffer[offset + layout.X_ORIENTATION_AVERAGE]) / weight
        orient_y = float(buffer[offset + layout.Y_ORIENTATION_AVERAGE]) / weight
        tag = ExtractedTag(
            weight=weight,
            type_flags=int(buffer[offset + layout.TYPE_FLAGS]),
            type=tag_type,
            x=float(buffer[offset + layout.X_COORD_AVERAGE]) / weight,
            y=float(buffer[offset + layout.Y_COORD_AVERAGE]) / weight,
            orient_x=orient_x,
            orient_y=orient_y,
            orient_hypot=math.hypot(orient_x, orient_y),
            dot_size=float(buffer[offset + layout.DOT_SIZE]) / weight,
            cell_index=n,
        )
        tags_by_type.setdefault(tag_type, []).append(tag)

    return tags_by_type


def find_possible_opposite_corner_tags(
    code_tag: ExtractedTag,
    possible_matches: Sequence[ExtractedTag],
    start_at: int,
) -> List[ExtractedTag]:
    """
    Find tags whose orientation roughly opposes ``code_tag``.

    Opposite corners point at each other, so their orientation vectors
    nearly cancel. Candidates are ordered by how well they cancel.
    """
    threshold = code_tag.orient_hypot / 1.5
    matches: List[Tuple[float, ExtractedTag]] = []

    for tag in possible_matches[start_at:]:
        if tag.cell_index == code_tag.cell_index:
            continue
        mag = math.hypot(code_tag.orient_x + tag.orient_x, code_tag.orient_y + tag.orient_y)
        if mag < threshold:
            matches.append((mag, tag))

    matches.sort(key=lambda m: m[0])
    return [tag for _, tag in matches]


def generate_opposite_tag_pairs(tags: Sequence[ExtractedTag]) -> List[OppositeTagPair]:
    """Pair every tag with the opposite candidates that follow it."""
    pairs: List[OppositeTagPair] = []
    for i, tag in enumerate(tags):
        for opposite in find_possible_opposite_corner_tags(tag, tags, i + 1):
            pairs.append(OppositeTagPair(tag_a=tag, tag_b=opposite))
    return pairs


def sort_tags_by_weight(tags: Sequence[ExtractedTag]) -> List[ExtractedTag]:
    """Heaviest tags first; equal weights keep their order."""
    return sorted(tags, key=lambda t: t.weight, reverse=True)
