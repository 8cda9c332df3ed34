"""
Vector primitives for plan and model space.

Every function returns a new value; inputs are never modified.
"""

import math
from typing import Optional, Sequence, Tuple

import numpy as np

from axonplan.core.models import Point2D, Point3D

DEGENERATE_LENGTH = 1e-10
UP = Point3D(x=0.0, y=0.0, z=1.0)


def points_coincide(p1: Point2D, p2: Point2D, tolerance: float = DEGENERATE_LENGTH) -> bool:
    """Check if two points coincide within tolerance on each axis."""
    return abs(p1.x - p2.x) < tolerance and abs(p1.y - p2.y) < tolerance


def normalize2(x: float, y: float, fallback: Optional[Point2D] = None) -> Optional[Point2D]:
    """
    Normalize a 2D vector.

    Returns fallback when the vector is shorter than DEGENERATE_LENGTH.
    """
    length = math.hypot(x, y)
    if length < DEGENERATE_LENGTH:
        return fallback
    return Point2D(x=x / length, y=y / length)


def dot3(a: Point3D, b: Point3D) -> float:
    return a.x * b.x + a.y * b.y + a.z * b.z


def negate3(v: Point3D) -> Point3D:
    return Point3D(x=-v.x, y=-v.y, z=-v.z)


def face_normal(vertices: Sequence[Point3D]) -> Point3D:
    """
    Unit normal of a planar polygon from its first three vertices.

    Uses the cross product of (v1 - v0) and (v2 - v0). Fewer than three
    vertices, or a near-zero cross product, yield the up vector.
    """
    if len(vertices) < 3:
        return UP

    v0, v1, v2 = (np.array(v.as_tuple(), dtype=float) for v in vertices[:3])
    cross = np.cross(v1 - v0, v2 - v0)
    length = float(np.linalg.norm(cross))
    if length < DEGENERATE_LENGTH:
        return UP

    nx, ny, nz = (float(c) for c in cross / length)
    return Point3D(x=nx, y=ny, z=nz)


def signed_area(polygon: Sequence[Point2D]) -> float:
    """
    Signed area by the shoelace formula.

    Positive for counter-clockwise, negative for clockwise, 0 for fewer
    than three points.
    """
    if len(polygon) < 3:
        return 0.0

    area = 0.0
    for i in range(len(polygon)):
        j = (i + 1) % len(polygon)
        area += polygon[i].x * polygon[j].y
        area -= polygon[j].x * polygon[i].y
    return area / 2.0


def shoelace_area(coords: Sequence[Tuple[float, float]]) -> float:
    """Unsigned shoelace area of raw (x, y) coordinate pairs."""
    if len(coords) < 3:
        return 0.0

    area = 0.0
    for i in range(len(coords)):
        j = (i + 1) % len(coords)
        area += coords[i][0] * coords[j][1]
        area -= coords[j][0] * coords[i][1]
    return abs(area) / 2.0


def bounding_box(coords: Sequence[Tuple[float, float]]) -> Tuple[float, float, float, float]:
    """
    Get bounding box (min_x, max_x, min_y, max_y) of coordinate pairs.

    Returns all zeros for an empty sequence.
    """
    if not coords:
        return (0.0, 0.0, 0.0, 0.0)

    xs = [c[0] for c in coords]
    ys = [c[1] for c in coords]
    return (min(xs), max(xs), min(ys), max(ys))
