"""
Centerline offset (wall thickness).

Creates the two parallel boundaries of a wall centerline at half the wall
thickness on each side. Interior vertices use the average of the adjacent
segment normals, which mitres the corners instead of stepping them.
"""

from typing import List, NamedTuple, Sequence

from axonplan.core.models import Point2D
from axonplan.core.vectors import normalize2, points_coincide

DEFAULT_NORMAL = Point2D(x=0.0, y=1.0)
CLOSURE_TOLERANCE = 1e-10


class OffsetResult(NamedTuple):
    """Left and right boundaries of an offset centerline."""
    left: List[Point2D]
    right: List[Point2D]


def segment_normal(start: Point2D, end: Point2D) -> Point2D:
    """
    Unit normal of a segment, the direction rotated 90 degrees counter-clockwise.

    A near-zero segment yields (0, 1).
    """
    dx = end.x - start.x
    dy = end.y - start.y
    return normalize2(-dy, dx, fallback=DEFAULT_NORMAL)


def average_normals(n1: Point2D, n2: Point2D) -> Point2D:
    """Renormalized mean of two normals; falls back to n1 if they cancel out."""
    return normalize2((n1.x + n2.x) / 2, (n1.y + n2.y) / 2, fallback=n1)


def is_closed_centerline(centerline: Sequence[Point2D], tolerance: float = CLOSURE_TOLERANCE) -> bool:
    """A centerline is closed if it has >= 3 points and ends where it starts."""
    return len(centerline) >= 3 and points_coincide(centerline[0], centerline[-1], tolerance)


def vertex_normals(centerline: Sequence[Point2D], tolerance: float = CLOSURE_TOLERANCE) -> List[Point2D]:
    """
    Offset direction at every centerline vertex.

    Open polylines use the single adjacent normal at both ends. Closed loops
    are handled as a ring of distinct points so the start/end corner is
    mitred like every other corner; the closing vertex repeats the first.
    """
    if is_closed_centerline(centerline, tolerance):
        ring = list(centerline[:-1])
        count = len(ring)
        edge_normals = [segment_normal(ring[i], ring[(i + 1) % count]) for i in range(count)]
        normals = [average_normals(edge_normals[i - 1], edge_normals[i]) for i in range(count)]
        return normals + [normals[0]]

    edge_normals = [segment_normal(centerline[i], centerline[i + 1])
                    for i in range(len(centerline) - 1)]

    normals = [edge_normals[0]]
    for i in range(1, len(centerline) - 1):
        normals.append(average_normals(edge_normals[i - 1], edge_normals[i]))
    normals.append(edge_normals[-1])
    return normals


def offset_centerline(
    centerline: Sequence[Point2D],
    thickness: float,
    tolerance: float = CLOSURE_TOLERANCE,
) -> OffsetResult:
    """
    Offset a centerline to create left and right wall boundaries.

    Args:
        centerline: Centerline points
        thickness: Wall thickness (each side is offset by half)
        tolerance: Closure tolerance for detecting closed loops

    Returns:
        OffsetResult(left, right); both empty for fewer than 2 points
    """
    if len(centerline) < 2:
        return OffsetResult(left=[], right=[])

    half = thickness / 2
    left = []
    right = []

    for point, normal in zip(centerline, vertex_normals(centerline, tolerance)):
        left.append(Point2D(x=point.x - normal.x * half, y=point.y - normal.y * half))
        right.append(Point2D(x=point.x + normal.x * half, y=point.y + normal.y * half))

    return OffsetResult(left=left, right=right)
