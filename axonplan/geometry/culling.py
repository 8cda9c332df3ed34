"""
Back-face culling for the fixed axonometric view.
"""

import math
from typing import List, Sequence

from axonplan.core.models import Face, Point3D
from axonplan.core.vectors import dot3

_INV_SQRT3 = 1 / math.sqrt(3)

# Points from the viewer toward the scene
DEFAULT_VIEW_DIRECTION = Point3D(x=_INV_SQRT3, y=_INV_SQRT3, z=-_INV_SQRT3)
CULL_TOLERANCE = 1e-6


def is_visible(face: Face, view_direction: Point3D = DEFAULT_VIEW_DIRECTION,
               tolerance: float = CULL_TOLERANCE) -> bool:
    """A face is kept unless its normal points away beyond the tolerance."""
    return dot3(face.normal, view_direction) > -tolerance


def cull_faces(
    faces: Sequence[Face],
    view_direction: Point3D = DEFAULT_VIEW_DIRECTION,
    tolerance: float = CULL_TOLERANCE,
) -> List[Face]:
    """
    Drop faces facing away from the view direction.

    The small tolerance keeps faces that are edge-on to the view, so they
    do not flicker in and out between runs.

    Args:
        faces: Faces to cull
        view_direction: Unit view vector
        tolerance: Dot-product slack for near-perpendicular faces

    Returns:
        Visible faces in input order
    """
    return [face for face in faces if is_visible(face, view_direction, tolerance)]
