"""
Footprint extrusion into 3D wall volumes.

Lifts a CCW footprint polygon into a prism: a top cap plus one quad per
footprint edge, each with an outward normal and a coarse style label.
"""

from typing import List, Optional, Sequence
from loguru import logger

from axonplan.core.models import Face, FaceStyle, Point2D, Point3D, WallVolume
from axonplan.core.vectors import face_normal, negate3, points_coincide

CLOSURE_TOLERANCE = 1e-10


class DegenerateFootprintError(ValueError):
    """Footprint cannot be extruded (fewer than 3 distinct vertices)."""


def classify_face(normal: Point3D) -> FaceStyle:
    """
    Style from the dominant normal axis.

    Z wins only when strictly larger than both X and Y; otherwise X wins
    over Y only when strictly larger. Down-facing and -Y faces share "back".
    """
    abs_x = abs(normal.x)
    abs_y = abs(normal.y)
    abs_z = abs(normal.z)

    if abs_z > abs_x and abs_z > abs_y:
        return FaceStyle.TOP if normal.z > 0 else FaceStyle.BACK
    if abs_x > abs_y:
        return FaceStyle.RIGHT if normal.x > 0 else FaceStyle.LEFT
    return FaceStyle.FRONT if normal.y > 0 else FaceStyle.BACK


def _open_ring(footprint: Sequence[Point2D], tolerance: float) -> List[Point2D]:
    """Footprint vertices without consecutive repeats or the repeated closing point."""
    ring: List[Point2D] = []
    for point in footprint:
        if not ring or not points_coincide(ring[-1], point, tolerance):
            ring.append(point)
    while len(ring) > 1 and points_coincide(ring[0], ring[-1], tolerance):
        ring.pop()
    return ring


def estimate_thickness(ring: Sequence[Point2D]) -> float:
    """
    Approximate wall thickness from a footprint ring.

    Shortest edge of the ring, which is the end cap of a straight wall;
    0 for fewer than 4 vertices.
    """
    if len(ring) < 4:
        return 0.0
    return min(ring[i].distance_to(ring[(i + 1) % len(ring)]) for i in range(len(ring)))


def extrude_footprint(
    footprint: Sequence[Point2D],
    height: float,
    tolerance: float = CLOSURE_TOLERANCE,
    centerline: Optional[Sequence[Point2D]] = None,
    thickness: Optional[float] = None,
) -> WallVolume:
    """
    Extrude a footprint polygon into a 3D wall volume.

    Args:
        footprint: CCW footprint polygon, optionally closed
        height: Extrusion height (bottom at z=0)
        tolerance: Distance below which first and last vertex are one point
        centerline: Source centerline to record on the volume (footprint ring if None)
        thickness: Source wall thickness to record (estimated from the ring if None)

    Returns:
        WallVolume with the top face first, then one side face per edge

    Raises:
        DegenerateFootprintError: If the footprint has fewer than 3 vertices
    """
    if len(footprint) < 3:
        raise DegenerateFootprintError(
            f"Footprint must have at least 3 vertices (got {len(footprint)})"
        )

    ring = _open_ring(footprint, tolerance)
    if len(ring) < 3:
        raise DegenerateFootprintError(
            f"Footprint must have at least 3 distinct vertices (got {len(ring)})"
        )

    bottom = [Point3D(x=p.x, y=p.y, z=0.0) for p in ring]
    top = [Point3D(x=p.x, y=p.y, z=float(height)) for p in ring]

    faces = []

    top_normal = face_normal(top[:3])
    if top_normal.z < 0:
        top_normal = negate3(top_normal)
    faces.append(Face(vertices=top, normal=top_normal, style=FaceStyle.TOP))

    count = len(ring)
    for i in range(count):
        nxt = (i + 1) % count
        quad = [bottom[i], bottom[nxt], top[nxt], top[i]]
        normal = face_normal(quad)
        faces.append(Face(vertices=quad, normal=normal, style=classify_face(normal)))

    logger.debug(f"Extruded {count}-vertex footprint to height {height}: {len(faces)} faces")

    return WallVolume(
        faces=faces,
        centerline=list(centerline) if centerline is not None else ring,
        thickness=float(thickness) if thickness is not None else estimate_thickness(ring),
        height=float(height),
    )
