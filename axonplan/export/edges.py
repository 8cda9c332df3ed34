"""
Stroke extraction for line drawings of projected faces.
"""

from typing import List, NamedTuple, Sequence, Set, Tuple

from axonplan.core.models import AxonFace, FaceStyle, Point2D

EDGE_PRECISION = 6


class Edge(NamedTuple):
    """One stroke of the drawing, styled after the first face that owns it."""
    start: Point2D
    end: Point2D
    style: FaceStyle


def _key(p: Point2D, precision: int) -> Tuple[float, float]:
    return (round(p.x, precision), round(p.y, precision))


def unique_edges(faces: Sequence[AxonFace], precision: int = EDGE_PRECISION) -> List[Edge]:
    """
    Collect face edges without drawing shared edges twice.

    Edges are compared in either direction with coordinates rounded to
    `precision` decimals. The first face to contribute an edge sets its style.

    Args:
        faces: Projected faces, usually already depth-sorted
        precision: Decimal places used when comparing vertices

    Returns:
        Edges in face order
    """
    seen: Set[Tuple[Tuple[float, float], Tuple[float, float]]] = set()
    edges = []

    for face in faces:
        count = len(face.vertices)
        if count < 2:
            continue

        for i in range(count):
            v1 = face.vertices[i]
            v2 = face.vertices[(i + 1) % count]
            k1 = _key(v1, precision)
            k2 = _key(v2, precision)
            if (k1, k2) in seen or (k2, k1) in seen:
                continue
            seen.add((k1, k2))
            edges.append(Edge(start=v1, end=v2, style=face.style))

    return edges
