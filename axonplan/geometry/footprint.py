"""
Wall footprint polygon.

Joins the left and right offsets of a centerline into one closed polygon
with counter-clockwise winding, which extrusion relies on for outward
face normals.
"""

from typing import List, NamedTuple, Optional, Sequence

from axonplan.core.models import Point2D
from axonplan.core.vectors import points_coincide, signed_area

CLOSURE_TOLERANCE = 1e-10


class FootprintCheck(NamedTuple):
    """Validity report for a footprint polygon."""
    valid: bool
    area: float
    has_gaps: bool
    error: Optional[str] = None


def build_footprint(
    left: Sequence[Point2D],
    right: Sequence[Point2D],
    tolerance: float = CLOSURE_TOLERANCE,
) -> List[Point2D]:
    """
    Build a wall footprint from left and right offset polylines.

    Walks out along the left side and back along the reversed right side,
    closes the ring with a copy of the first point, and reverses the whole
    ring if it came out clockwise.

    Args:
        left: Left offset polyline
        right: Right offset polyline
        tolerance: Distance below which first and last count as closed

    Returns:
        Closed CCW polygon, or [] if either side is empty
    """
    if not left or not right:
        return []

    footprint = list(left) + list(reversed(right))

    first = footprint[0]
    if not points_coincide(first, footprint[-1], tolerance):
        footprint.append(Point2D(x=first.x, y=first.y))

    if signed_area(footprint) < 0:
        footprint.reverse()

    return footprint


def validate_footprint(footprint: Sequence[Point2D]) -> FootprintCheck:
    """
    Check that a footprint is usable for extrusion.

    A closed quad (4 points) is the smallest footprint without gaps.
    """
    if len(footprint) < 3:
        return FootprintCheck(valid=False, area=0.0, has_gaps=True,
                              error="Polygon has less than 3 vertices")

    area = abs(signed_area(footprint))
    has_gaps = len(footprint) < 4

    error = None
    if area <= 0:
        error = "Polygon area is zero or negative"
    elif has_gaps:
        error = "Polygon has gaps"

    return FootprintCheck(valid=area > 0 and not has_gaps, area=area, has_gaps=has_gaps, error=error)
