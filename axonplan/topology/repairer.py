"""
Heuristic repair of floor-plan records.

Drops or defaults malformed elements instead of failing the whole record.
Every drop and default is recorded in a RepairReport so callers can see
what was discarded without diffing input and output.
"""

import math
from typing import Any, Dict, List, Optional, Set, Tuple
from loguru import logger

from axonplan.core.config import TopologySettings, get_default_config
from axonplan.core.models import OpeningType, RepairReport, WallType
from axonplan.core.vectors import shoelace_area
from axonplan.topology.records import (
    Coord,
    as_coord,
    bounds_from_coords,
    is_number,
    list_field,
    room_coords,
)

WALL_TYPES = {t.value for t in WallType}
OPENING_TYPES = {t.value for t in OpeningType}


def _distance(p1: Coord, p2: Coord) -> float:
    return math.hypot(p2[0] - p1[0], p2[1] - p1[1])


def _is_choice(value: Any, choices: Set[str]) -> bool:
    """Membership test that tolerates unhashable record values."""
    return isinstance(value, str) and value in choices


def _next_id(prefix: str, count: int, taken: Set[str]) -> str:
    """Generate "<prefix>-N" starting at count + 1, skipping ids already taken."""
    n = count + 1
    while f"{prefix}-{n}" in taken:
        n += 1
    return f"{prefix}-{n}"


def _input_ids(items: List[Any]) -> Set[str]:
    """Non-empty string ids present anywhere in the raw list."""
    return {item["id"] for item in items
            if isinstance(item, dict) and isinstance(item.get("id"), str) and item["id"]}


def remove_duplicate_points(points: List[Coord], epsilon: float) -> List[Coord]:
    """Collapse consecutive points closer than epsilon into the first of the run."""
    if not points:
        return []

    result = [points[0]]
    for point in points[1:]:
        if _distance(point, result[-1]) > epsilon:
            result.append(point)
    return result


def close_polygon(points: List[Coord], epsilon: float) -> List[Coord]:
    """
    Close a polygon with an exact copy of its first point.

    Trailing points within epsilon of the first point are folded into the
    closing point, so the result ends on the first point exactly.
    """
    if not points:
        return []

    result = list(points)
    first = result[0]
    while len(result) > 1 and _distance(result[-1], first) <= epsilon:
        result.pop()
    result.append((first[0], first[1]))
    return result


class TopologyRepairer:
    """
    Best-effort cleanup of floor-plan records.

    Repair order: walls, rooms, openings (which need the kept wall ids),
    then meta. Output always has walls/rooms/openings lists and a meta
    object with a positive scale and recomputed bounds.
    """

    def __init__(self, settings: Optional[TopologySettings] = None):
        """
        Initialize repairer.

        Args:
            settings: Tolerances and defaults (from the default config if None)
        """
        if settings is None:
            settings = get_default_config().topology_settings()
        self.settings = settings

    def epsilon(self, coords: List[Coord]) -> float:
        """Dedup tolerance: 1% of the bbox diagonal, at least 1 cm."""
        bounds = bounds_from_coords(coords)
        diagonal = math.hypot(bounds["maxX"] - bounds["minX"], bounds["maxY"] - bounds["minY"])
        return max(diagonal * self.settings.epsilon_ratio, self.settings.min_epsilon)

    def repair(self, record: Any) -> Tuple[Any, RepairReport]:
        """
        Repair a floor-plan record.

        Args:
            record: Record dict. Anything else is returned unchanged.

        Returns:
            (repaired record, report of what was dropped or defaulted)
        """
        report = RepairReport()

        if not isinstance(record, dict):
            logger.debug("Repair skipped: record is not an object")
            return record, report

        walls = self._repair_walls(list_field(record, "walls"), report)

        # Epsilon from the walls kept so far plus the room points under repair
        wall_points = [tuple(w["start"]) for w in walls] + [tuple(w["end"]) for w in walls]
        raw_rooms = list_field(record, "rooms")
        epsilon = self.epsilon(wall_points + room_coords(raw_rooms))

        rooms = self._repair_rooms(raw_rooms, epsilon, report)
        openings = self._repair_openings(
            list_field(record, "openings"), {w["id"] for w in walls}, report
        )
        meta = self._repair_meta(record.get("meta"), walls, rooms, report)

        repaired = {"walls": walls, "rooms": rooms, "openings": openings, "meta": meta}

        if report.is_clean():
            logger.debug("Repair: record already well-formed")
        else:
            logger.info(
                f"Repaired record: {len(report.dropped)} dropped, {len(report.defaulted)} defaulted "
                f"({len(walls)} walls, {len(rooms)} rooms, {len(openings)} openings kept)"
            )
        return repaired, report

    def _repair_walls(self, raw_walls: List[Any], report: RepairReport) -> List[Dict[str, Any]]:
        walls: List[Dict[str, Any]] = []
        taken: Set[str] = set()
        reserved = _input_ids(raw_walls)

        for index, wall in enumerate(raw_walls):
            path = f"walls[{index}]"

            if not isinstance(wall, dict):
                self._drop(report, path, "not an object")
                continue

            start = as_coord(wall.get("start"))
            end = as_coord(wall.get("end"))
            if start is None or end is None:
                self._drop(report, path, "endpoints are not finite 2D points")
                continue

            length = _distance(start, end)
            if length < self.settings.min_wall_length:
                self._drop(report, path, f"length {length:.4f} below minimum {self.settings.min_wall_length}")
                continue

            wall_id = wall.get("id")
            if not isinstance(wall_id, str) or not wall_id or wall_id in taken:
                reason = "duplicate id" if _is_choice(wall_id, taken) else "missing id"
                wall_id = _next_id("wall", len(walls), taken | reserved)
                self._default(report, f"{path}.id", f"{reason}, assigned {wall_id}")

            thickness = wall.get("thickness")
            if not is_number(thickness) or thickness <= 0:
                thickness = self.settings.default_wall_thickness
                self._default(report, f"{path}.thickness", f"not a positive number, using {thickness}")

            wall_type = wall.get("type")
            if not _is_choice(wall_type, WALL_TYPES):
                wall_type = self.settings.default_wall_type
                self._default(report, f"{path}.type", f"invalid type, using {wall_type}")

            repaired = {
                "id": wall_id,
                "start": [start[0], start[1]],
                "end": [end[0], end[1]],
                "thickness": float(thickness),
                "type": wall_type,
            }

            # Optional extrusion height survives only when usable
            height = wall.get("height")
            if is_number(height) and height > 0:
                repaired["height"] = float(height)

            walls.append(repaired)
            taken.add(wall_id)

        return walls

    def _repair_rooms(self, raw_rooms: List[Any], epsilon: float,
                      report: RepairReport) -> List[Dict[str, Any]]:
        rooms: List[Dict[str, Any]] = []
        taken: Set[str] = set()
        reserved = _input_ids(raw_rooms)

        for index, room in enumerate(raw_rooms):
            path = f"rooms[{index}]"

            if not isinstance(room, dict):
                self._drop(report, path, "not an object")
                continue

            polygon = room.get("polygon")
            if not isinstance(polygon, list):
                self._drop(report, path, "polygon is not an array")
                continue

            coords = [as_coord(point) for point in polygon]
            points = [c for c in coords if c is not None]
            if len(points) < len(coords):
                self._drop(report, f"{path}.polygon", f"{len(coords) - len(points)} invalid point(s)")
            if len(points) < 3:
                self._drop(report, path, "polygon has fewer than 3 points")
                continue

            cleaned = close_polygon(remove_duplicate_points(points, epsilon), epsilon)

            area = shoelace_area(cleaned)
            if area <= 0:
                self._drop(report, path, "polygon has zero area")
                continue

            room_id = room.get("id")
            if not isinstance(room_id, str) or not room_id or room_id in taken:
                reason = "duplicate id" if _is_choice(room_id, taken) else "missing id"
                room_id = _next_id("room", len(rooms), taken | reserved)
                self._default(report, f"{path}.id", f"{reason}, assigned {room_id}")

            rooms.append({
                "id": room_id,
                "polygon": [[x, y] for x, y in cleaned],
                "area_m2": area,
            })
            taken.add(room_id)

        return rooms

    def _repair_openings(self, raw_openings: List[Any], wall_ids: Set[str],
                         report: RepairReport) -> List[Dict[str, Any]]:
        openings: List[Dict[str, Any]] = []
        taken: Set[str] = set()
        reserved = _input_ids(raw_openings)

        for index, opening in enumerate(raw_openings):
            path = f"openings[{index}]"

            if not isinstance(opening, dict):
                self._drop(report, path, "not an object")
                continue

            wall_id = opening.get("wallId")
            if not isinstance(wall_id, str) or wall_id not in wall_ids:
                self._drop(report, path, f"references unknown wall {wall_id!r}")
                continue

            position = opening.get("position")
            if is_number(position):
                position = min(1.0, max(0.0, float(position)))
            else:
                position = self.settings.default_opening_position
                self._default(report, f"{path}.position", f"not numeric, using {position}")

            opening_type = opening.get("type")
            if not _is_choice(opening_type, OPENING_TYPES):
                opening_type = self.settings.default_opening_type
                self._default(report, f"{path}.type", f"invalid type, using {opening_type}")

            opening_id = opening.get("id")
            if not isinstance(opening_id, str) or not opening_id or opening_id in taken:
                reason = "duplicate id" if _is_choice(opening_id, taken) else "missing id"
                opening_id = _next_id("opening", len(openings), taken | reserved)
                self._default(report, f"{path}.id", f"{reason}, assigned {opening_id}")

            openings.append({
                "id": opening_id,
                "wallId": wall_id,
                "type": opening_type,
                "position": position,
            })
            taken.add(opening_id)

        return openings

    def _repair_meta(self, raw_meta: Any, walls: List[Dict[str, Any]],
                     rooms: List[Dict[str, Any]], report: RepairReport) -> Dict[str, Any]:
        meta = dict(raw_meta) if isinstance(raw_meta, dict) else {}

        scale = meta.get("scale")
        if not is_number(scale) or scale <= 0:
            meta["scale"] = self.settings.default_scale
            self._default(report, "meta.scale", f"not a positive number, using {meta['scale']}")

        coords = [tuple(w[key]) for w in walls for key in ("start", "end")]
        coords += [tuple(p) for r in rooms for p in r["polygon"]]
        meta["bounds"] = bounds_from_coords(coords)
        return meta

    @staticmethod
    def _drop(report: RepairReport, path: str, reason: str) -> None:
        logger.debug(f"Dropped {path}: {reason}")
        report.drop(path, reason)

    @staticmethod
    def _default(report: RepairReport, path: str, reason: str) -> None:
        logger.debug(f"Defaulted {path}: {reason}")
        report.default(path, reason)


def repair_floor_plan_with_report(
    record: Any,
    settings: Optional[TopologySettings] = None,
) -> Tuple[Any, RepairReport]:
    """
    Repair a record and return what was dropped or defaulted.

    Args:
        record: Record dict
        settings: Tolerances and defaults (from the default config if None)

    Returns:
        (repaired record, RepairReport)
    """
    return TopologyRepairer(settings).repair(record)


def repair_floor_plan(record: Any, settings: Optional[TopologySettings] = None) -> Any:
    """
    Convenience function to repair a floor-plan record.

    Args:
        record: Record dict (non-dicts are returned unchanged)
        settings: Tolerances and defaults (from the default config if None)

    Returns:
        Repaired record
    """
    repaired, _ = TopologyRepairer(settings).repair(record)
    return repaired
