"""
Fixed axonometric projection.

x' = x * cos(ax) - y * cos(ay)
y' = x * sin(ax) + y * sin(ay) - z

with ax = ay = 30 degrees by default. Screen y grows downward, so higher
points get smaller y'. Points are immutable, so projecting can never
disturb a vertex shared by several faces.
"""

from typing import List, Optional, Sequence

from axonplan.core.config import AxonProjection
from axonplan.core.models import AxonFace, Face, Point2D, Point3D

DEFAULT_PROJECTION = AxonProjection()


def project_point(point: Point3D, projection: AxonProjection = DEFAULT_PROJECTION) -> Point2D:
    """Project a 3D point to 2D axonometric space (returns a new point)."""
    cos_x, sin_x, cos_y, sin_y = projection.coefficients()
    x, y, z = point.x, point.y, point.z
    return Point2D(
        x=x * cos_x - y * cos_y,
        y=x * sin_x + y * sin_y - z,
    )


def project_points(points: Sequence[Point3D],
                   projection: AxonProjection = DEFAULT_PROJECTION) -> List[Point2D]:
    """Project each point independently."""
    return [project_point(p, projection) for p in points]


def average_depth(vertices: Sequence[Point3D]) -> float:
    """Mean Z of the vertices (0 for none)."""
    if not vertices:
        return 0.0
    return sum(v.z for v in vertices) / len(vertices)


def project_faces(faces: Sequence[Face], projection: AxonProjection = DEFAULT_PROJECTION,
                  source_id: Optional[str] = None) -> List[AxonFace]:
    """
    Project 3D faces to axonometric faces with depth for sorting.

    Args:
        faces: Faces to project
        projection: Projection angles
        source_id: Optional wall id stamped on every projected face

    Returns:
        AxonFace per input face, in input order
    """
    return [
        AxonFace(
            vertices=project_points(face.vertices, projection),
            depth=average_depth(face.vertices),
            normal=face.normal,
            style=face.style,
            source_id=source_id,
        )
        for face in faces
    ]
