"""
Back-to-front ordering of projected faces for painter's-algorithm drawing.
"""

from functools import cmp_to_key
from typing import List, Sequence, Tuple

from axonplan.core.models import AxonFace

DEPTH_TOLERANCE = 1e-10


def depth_sort(faces: Sequence[AxonFace], tolerance: float = DEPTH_TOLERANCE) -> List[AxonFace]:
    """
    Sort faces by descending depth, keeping input order for ties.

    Faces whose depths differ by at most the tolerance count as equal and
    keep their relative input order, so repeated runs draw overlaps the
    same way.

    Args:
        faces: Projected faces
        tolerance: Depth difference treated as a tie

    Returns:
        New list, deepest (largest Z) first
    """
    def compare(a: Tuple[int, AxonFace], b: Tuple[int, AxonFace]) -> int:
        diff = b[1].depth - a[1].depth
        if abs(diff) > tolerance:
            return 1 if diff > 0 else -1
        return a[0] - b[0]

    indexed = sorted(enumerate(faces), key=cmp_to_key(compare))
    return [face for _, face in indexed]
