"""
Structural validation of floor-plan records.

Reports every violation it finds instead of stopping at the first one, and
never raises: the result is meant for diagnostics, not control flow.
"""

import math
from typing import Any, Dict, List, Optional
from loguru import logger

from axonplan.core.config import TopologySettings, get_default_config
from axonplan.core.models import ValidationIssue, ValidationResult
from axonplan.core.vectors import shoelace_area
from axonplan.topology.records import as_coord, declared_bounds, is_number, record_bounds


class TopologyValidator:
    """
    Checks a record against the floor-plan invariants.

    Checks (all reported):
    1. meta.scale is a positive number
    2. walls have unique string ids and finite endpoints inside the bounds
    3. room polygons have >= 3 points, are closed within epsilon, have area > 0
    4. openings reference an existing wall id
    """

    def __init__(self, settings: Optional[TopologySettings] = None):
        """
        Initialize validator.

        Args:
            settings: Tolerances (from the default config if None)
        """
        if settings is None:
            settings = get_default_config().topology_settings()
        self.settings = settings

    def epsilon(self, bounds: Dict[str, float]) -> float:
        """Closure tolerance: 1% of the larger bbox side, at least 1 cm."""
        return max(
            (bounds["maxX"] - bounds["minX"]) * self.settings.epsilon_ratio,
            (bounds["maxY"] - bounds["minY"]) * self.settings.epsilon_ratio,
            self.settings.min_epsilon,
        )

    def validate(self, record: Any) -> ValidationResult:
        """
        Validate a floor-plan record.

        Args:
            record: Record dict (any value is accepted)

        Returns:
            ValidationResult with every error found
        """
        if not isinstance(record, dict):
            return ValidationResult(
                valid=False,
                errors=[ValidationIssue(path="root", message="Record must be an object")],
            )

        errors: List[ValidationIssue] = []
        warnings: List[ValidationIssue] = []

        self._check_meta(record, errors)

        bounds = record_bounds(record)
        epsilon = self.epsilon(bounds)

        wall_ids = self._check_walls(record.get("walls"), bounds, errors)
        self._check_rooms(record.get("rooms"), epsilon, errors, warnings)
        self._check_openings(record.get("openings"), wall_ids, errors)

        result = ValidationResult(valid=len(errors) == 0, errors=errors, warnings=warnings)

        if result.valid:
            logger.debug(f"Record valid ({len(warnings)} warnings)")
        else:
            logger.debug(f"Record invalid: {len(errors)} errors")
        return result

    def _check_meta(self, record: Dict[str, Any], errors: List[ValidationIssue]) -> None:
        meta = record.get("meta")
        if not isinstance(meta, dict):
            errors.append(ValidationIssue(path="meta", message="Missing meta object"))
            return

        scale = meta.get("scale")
        if not is_number(scale) or scale <= 0:
            errors.append(ValidationIssue(path="meta.scale", message="Scale must be a positive number"))

        if "bounds" in meta and declared_bounds(record) is None:
            errors.append(ValidationIssue(
                path="meta.bounds",
                message="Bounds must have numeric minX, maxX, minY and maxY",
            ))

    def _check_walls(self, walls: Any, bounds: Dict[str, float],
                     errors: List[ValidationIssue]) -> set:
        """Check walls and return the set of their valid ids."""
        wall_ids: set = set()

        if not isinstance(walls, list):
            errors.append(ValidationIssue(path="walls", message="Walls must be an array"))
            return wall_ids

        for index, wall in enumerate(walls):
            wall_path = f"walls[{index}]"

            if not isinstance(wall, dict):
                errors.append(ValidationIssue(path=wall_path, message="Wall must be an object"))
                continue

            wall_id = wall.get("id")
            if not isinstance(wall_id, str) or not wall_id:
                errors.append(ValidationIssue(path=f"{wall_path}.id", message="Wall must have a string id"))
            elif wall_id in wall_ids:
                errors.append(ValidationIssue(path=f"{wall_path}.id", message=f"Duplicate wall id: {wall_id}"))
            else:
                wall_ids.add(wall_id)

            for key, label in (("start", "Start"), ("end", "End")):
                if not self._point_in_bounds(wall.get(key), bounds):
                    errors.append(ValidationIssue(
                        path=f"{wall_path}.{key}",
                        message=f"{label} point {wall.get(key)!r} is not numeric or out of bounds",
                    ))

        return wall_ids

    def _check_rooms(self, rooms: Any, epsilon: float,
                     errors: List[ValidationIssue], warnings: List[ValidationIssue]) -> None:
        if not isinstance(rooms, list):
            errors.append(ValidationIssue(path="rooms", message="Rooms must be an array"))
            return

        for index, room in enumerate(rooms):
            room_path = f"rooms[{index}]"

            if not isinstance(room, dict):
                errors.append(ValidationIssue(path=room_path, message="Room must be an object"))
                continue

            polygon = room.get("polygon")
            if not isinstance(polygon, list) or len(polygon) < 3:
                errors.append(ValidationIssue(
                    path=f"{room_path}.polygon",
                    message="Polygon must be an array with at least 3 points",
                ))
                continue

            coords = [as_coord(point) for point in polygon]
            bad = [i for i, coord in enumerate(coords) if coord is None]
            if bad:
                errors.append(ValidationIssue(
                    path=f"{room_path}.polygon[{bad[0]}]",
                    message=f"Polygon has {len(bad)} point(s) that are not finite 2D points",
                ))
                continue

            first, last = coords[0], coords[-1]
            if math.hypot(last[0] - first[0], last[1] - first[1]) > epsilon:
                errors.append(ValidationIssue(
                    path=f"{room_path}.polygon",
                    message="Polygon is not closed (endpoints are too far apart)",
                ))

            area = shoelace_area(coords)
            if area <= 0:
                errors.append(ValidationIssue(
                    path=f"{room_path}.area_m2",
                    message=f"Polygon has zero or negative area: {area}",
                ))
                continue

            # Informational only: stated area may come from a different measurement
            stated = room.get("area_m2")
            if is_number(stated) and abs(stated - area) > self.settings.area_mismatch_tolerance:
                warnings.append(ValidationIssue(
                    path=f"{room_path}.area_m2",
                    message=f"Stated area {stated} differs from polygon area {area:.3f}",
                ))

    def _check_openings(self, openings: Any, wall_ids: set, errors: List[ValidationIssue]) -> None:
        if not isinstance(openings, list):
            errors.append(ValidationIssue(path="openings", message="Openings must be an array"))
            return

        for index, opening in enumerate(openings):
            opening_path = f"openings[{index}]"

            if not isinstance(opening, dict):
                errors.append(ValidationIssue(path=opening_path, message="Opening must be an object"))
                continue

            wall_id = opening.get("wallId")
            if not isinstance(wall_id, str) or not wall_id:
                errors.append(ValidationIssue(
                    path=f"{opening_path}.wallId",
                    message="Opening must have a string wallId",
                ))
            elif wall_id not in wall_ids:
                errors.append(ValidationIssue(
                    path=f"{opening_path}.wallId",
                    message=f"Opening references non-existent wall: {wall_id}",
                ))

    @staticmethod
    def _point_in_bounds(value: Any, bounds: Dict[str, float]) -> bool:
        coord = as_coord(value)
        if coord is None:
            return False
        x, y = coord
        return bounds["minX"] <= x <= bounds["maxX"] and bounds["minY"] <= y <= bounds["maxY"]


def validate_floor_plan(record: Any, settings: Optional[TopologySettings] = None) -> ValidationResult:
    """
    Convenience function to validate a floor-plan record.

    Args:
        record: Record dict
        settings: Tolerances (from the default config if None)

    Returns:
        ValidationResult
    """
    return TopologyValidator(settings).validate(record)
