"""
Helpers for raw floor-plan records.

A record is a plain dict decoded from JSON:
{"walls": [...], "rooms": [...], "openings": [...], "meta": {...}}.
Nothing here assumes the record is well-formed.
"""

import json
import math
from pathlib import Path
from typing import Any, Dict, Iterable, List, Optional, Tuple
from loguru import logger

from axonplan.core.vectors import bounding_box

Coord = Tuple[float, float]

BOUNDS_KEYS = ("minX", "maxX", "minY", "maxY")


def is_number(value: Any) -> bool:
    """Check for a finite int/float (booleans are not numbers here)."""
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        return False
    return math.isfinite(value)


def as_coord(value: Any) -> Optional[Coord]:
    """Convert an [x, y] pair to a float tuple, or None if it is not a finite 2D point."""
    if not isinstance(value, (list, tuple)) or len(value) != 2:
        return None
    x, y = value
    if not is_number(x) or not is_number(y):
        return None
    return (float(x), float(y))


def list_field(record: Dict[str, Any], key: str) -> List[Any]:
    """Get a list-valued field, or an empty list if missing or not a list."""
    value = record.get(key)
    return value if isinstance(value, list) else []


def wall_coords(walls: Iterable[Any]) -> List[Coord]:
    """Collect valid endpoints of wall dicts."""
    coords = []
    for wall in walls:
        if not isinstance(wall, dict):
            continue
        for key in ("start", "end"):
            coord = as_coord(wall.get(key))
            if coord is not None:
                coords.append(coord)
    return coords


def room_coords(rooms: Iterable[Any]) -> List[Coord]:
    """Collect valid polygon points of room dicts."""
    coords = []
    for room in rooms:
        if not isinstance(room, dict) or not isinstance(room.get("polygon"), list):
            continue
        for point in room["polygon"]:
            coord = as_coord(point)
            if coord is not None:
                coords.append(coord)
    return coords


def bounds_from_coords(coords: List[Coord]) -> Dict[str, float]:
    """Bounds dict of coordinates; all zeros when there are none."""
    min_x, max_x, min_y, max_y = bounding_box(coords)
    return {"minX": min_x, "maxX": max_x, "minY": min_y, "maxY": max_y}


def declared_bounds(record: Dict[str, Any]) -> Optional[Dict[str, float]]:
    """Get meta.bounds if it is present and every edge is a finite number."""
    meta = record.get("meta")
    if not isinstance(meta, dict):
        return None
    bounds = meta.get("bounds")
    if not isinstance(bounds, dict):
        return None
    if not all(is_number(bounds.get(key)) for key in BOUNDS_KEYS):
        return None
    return {key: float(bounds[key]) for key in BOUNDS_KEYS}


def record_bounds(record: Dict[str, Any]) -> Dict[str, float]:
    """
    Bounds of a record.

    Uses meta.bounds when supplied, otherwise the bounding box of every wall
    endpoint and room polygon point.
    """
    bounds = declared_bounds(record)
    if bounds is not None:
        return bounds

    coords = wall_coords(list_field(record, "walls")) + room_coords(list_field(record, "rooms"))
    return bounds_from_coords(coords)


def load_record(file_path: str) -> Dict[str, Any]:
    """
    Load a floor-plan record from a JSON file.

    Args:
        file_path: Path to JSON file

    Returns:
        Decoded record (not validated)

    Raises:
        FileNotFoundError: If the file doesn't exist
        ValueError: If the file is not a JSON object
    """
    path = Path(file_path)
    if not path.exists():
        raise FileNotFoundError(f"Record file not found: {path}")

    with open(path, 'r') as f:
        record = json.load(f)

    if not isinstance(record, dict):
        raise ValueError(f"Record must be a JSON object: {path}")

    logger.debug(f"Loaded record {path.name}: "
                 f"{len(list_field(record, 'walls'))} walls, {len(list_field(record, 'rooms'))} rooms")
    return record
