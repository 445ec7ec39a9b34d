"""
Boundary overlay geometry.

Edges between traversable and blocked cells are turned into thin
axis-aligned rectangles in world space, then coalesced so renderers draw
fewer primitives. World Y runs opposite to grid Y:
``world_y = world_height - grid_y * cell_size``.
"""

from dataclasses import dataclass, field
from enum import Enum
from typing import Iterable, List, Optional

import structlog

from ..config import settings
from ..utils.validation import require_non_negative, require_positive

logger = structlog.get_logger()


class Orientation(Enum):
    HORIZONTAL = "horizontal"
    VERTICAL = "vertical"


@dataclass
class BoundaryOptions:
    """Boundary extraction and merge parameters, in world units."""

    thickness: float = field(default_factory=lambda: settings.boundary_thickness)
    # Max difference in centre and in shared extent for two rectangles to line up
    alignment_tolerance: float = field(default_factory=lambda: settings.merge_alignment_tolerance)
    # Max gap between facing edges for two rectangles to count as touching
    gap_tolerance: float = field(default_factory=lambda: settings.merge_gap_tolerance)

    def __post_init__(self):
        self.thickness = require_positive("thickness", self.thickness)
        self.alignment_tolerance = require_non_negative("alignment_tolerance", self.alignment_tolerance)
        self.gap_tolerance = require_non_negative("gap_tolerance", self.gap_tolerance)


@dataclass(frozen=True)
class BoundarySegment:
    """A boundary line centred on (x, y), before merging."""

    x: float
    y: float
    length: float
    orientation: Orientation
    thickness: float

    @property
    def width(self) -> float:
        return self.length if self.orientation is Orientation.HORIZONTAL else self.thickness

    @property
    def height(self) -> float:
        return self.thickness if self.orientation is Orientation.HORIZONTAL else self.length


@dataclass
class MergedRectangle:
    """Axis-aligned rectangle given by centre and full extents."""

    x: float
    y: float
    width: float
    height: float

    @property
    def area(self) -> float:
        return self.width * self.height

    @property
    def left(self) -> float:
        return self.x - self.width / 2

    @property
    def right(self) -> float:
        return self.x + self.width / 2

    @property
    def bottom(self) -> float:
        return self.y - self.height / 2

    @property
    def top(self) -> float:
        return self.y + self.height / 2


def extract_boundary_segments(grid, options: Optional[BoundaryOptions] = None) -> List[BoundarySegment]:
    """
    Emit one segment per edge between a traversable cell and a blocked neighbour.

    Only neighbours inside the grid are tested, so the outer border of the
    world never produces a segment.

    Args:
        grid: BiomeGrid to scan
        options: Boundary options (thickness is used)

    Returns:
        Segments in scan order: rows, then columns, then right/left/top/bottom
    """
    options = options or BoundaryOptions()
    traversable = grid.traversability_map()
    width, height = grid.grid_dimensions()
    cell_size = grid.cell_size
    world_height = grid.world_height
    thickness = options.thickness

    segments = []

    def vertical(edge_x: int, y: int) -> BoundarySegment:
        return BoundarySegment(
            x=edge_x * cell_size,
            y=world_height - (y + 0.5) * cell_size,
            length=cell_size,
            orientation=Orientation.VERTICAL,
            thickness=thickness,
        )

    def horizontal(x: int, edge_y: int) -> BoundarySegment:
        return BoundarySegment(
            x=(x + 0.5) * cell_size,
            y=world_height - edge_y * cell_size,
            length=cell_size,
            orientation=Orientation.HORIZONTAL,
            thickness=thickness,
        )

    for y in range(height):
        row = y * width
        for x in range(width):
            if not traversable[row + x]:
                continue

            if x < width - 1 and not traversable[row + x + 1]:
                segments.append(vertical(x + 1, y))
            if x > 0 and not traversable[row + x - 1]:
                segments.append(vertical(x, y))
            if y < height - 1 and not traversable[row + width + x]:
                segments.append(horizontal(x, y + 1))
            if y > 0 and not traversable[row - width + x]:
                segments.append(horizontal(x, y))

    logger.debug("Extracted boundary segments", count=len(segments))
    return segments


def _absorb_horizontal(current: MergedRectangle, rect, gap: float) -> bool:
    """Extend ``current`` sideways over ``rect`` if their facing edges touch."""
    rect_left = rect.x - rect.width / 2
    rect_right = rect.x + rect.width / 2

    if abs(current.right - rect_left) < gap:
        left = current.left
        current.width = rect_right - left
        current.x = (left + rect_right) / 2
        return True
    if abs(current.left - rect_right) < gap:
        right = current.right
        current.width = right - rect_left
        current.x = (rect_left + right) / 2
        return True
    return False


def _absorb_vertical(current: MergedRectangle, rect, gap: float) -> bool:
    """Extend ``current`` up or down over ``rect`` if their facing edges touch."""
    rect_bottom = rect.y - rect.height / 2
    rect_top = rect.y + rect.height / 2

    if abs(current.top - rect_bottom) < gap:
        bottom = current.bottom
        current.height = rect_top - bottom
        current.y = (bottom + rect_top) / 2
        return True
    if abs(current.bottom - rect_top) < gap:
        top = current.top
        current.height = top - rect_bottom
        current.y = (rect_bottom + top) / 2
        return True
    return False


def merge_rectangles(rectangles: Iterable, options: Optional[BoundaryOptions] = None) -> List[MergedRectangle]:
    """
    Greedily coalesce touching rectangles that share a row or a column.

    Each unused rectangle in input order seeds a merge. All remaining unused
    rectangles are scanned repeatedly; one with the same height and centre
    y whose x-extent touches the seed's (or the same width and centre x with
    a touching y-extent) is absorbed. Scanning stops once a full pass
    absorbs nothing. Output order follows the seeds, so a stable input order
    gives a stable result.

    Inputs carrying an ``orientation`` (``BoundarySegment``) only merge
    along their length: horizontal runs sideways, vertical runs up and down,
    and never with a segment of the other orientation. Parallel segments on
    neighbouring edges are one cell apart, so with a small cell size they
    would otherwise fall inside the gap tolerance and be fused across the
    cell between them.

    Args:
        rectangles: Objects with x, y (centre), width and height
        options: Boundary options (alignment and gap tolerances are used)

    Returns:
        Merged rectangles, never more than the input count
    """
    options = options or BoundaryOptions()
    align = options.alignment_tolerance
    gap = options.gap_tolerance

    rects = list(rectangles)
    used = set()
    merged = []

    for i, start in enumerate(rects):
        if i in used:
            continue
        used.add(i)
        current = MergedRectangle(start.x, start.y, start.width, start.height)
        orientation = getattr(start, "orientation", None)
        sideways = orientation is not Orientation.VERTICAL
        upright = orientation is not Orientation.HORIZONTAL

        extended = True
        while extended:
            extended = False
            for j, rect in enumerate(rects):
                if j in used or getattr(rect, "orientation", None) is not orientation:
                    continue

                if sideways and abs(current.y - rect.y) < align and abs(current.height - rect.height) < align:
                    if _absorb_horizontal(current, rect, gap):
                        used.add(j)
                        extended = True
                        continue

                if upright and abs(current.x - rect.x) < align and abs(current.width - rect.width) < align:
                    if _absorb_vertical(current, rect, gap):
                        used.add(j)
                        extended = True

        merged.append(current)

    logger.debug("Merged boundary rectangles", input=len(rects), output=len(merged))
    return merged


def extract_boundaries(grid, options: Optional[BoundaryOptions] = None) -> List[MergedRectangle]:
    """
    Build the boundary overlay for a grid.

    The result is computed fresh on every call; caching belongs to the caller.
    """
    options = options or BoundaryOptions()
    segments = extract_boundary_segments(grid, options)
    merged = merge_rectangles(segments, options)

    logger.info("Extracted biome boundaries", segments=len(segments), rectangles=len(merged))
    return merged
