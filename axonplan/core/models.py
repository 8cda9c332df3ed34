"""
Core data models for axonplan.

All models use Pydantic for validation and serialization. Geometry value
types are frozen: a point, face or volume never changes after creation, so
the same vertex can be shared by several faces without aliasing bugs.
"""

from enum import Enum
from typing import List, Optional, Tuple
from pydantic import BaseModel, ConfigDict, Field, field_validator


class FaceStyle(str, Enum):
    """Coarse face category used by the line-drawing renderer."""
    TOP = "top"
    LEFT = "left"
    RIGHT = "right"
    FRONT = "front"
    BACK = "back"  # also used for downward-facing faces


class WallType(str, Enum):
    """Wall categories accepted in a floor-plan record."""
    EXTERIOR = "exterior"
    INTERIOR = "interior"
    STRUCTURAL = "structural"
    PARTITION = "partition"


class OpeningType(str, Enum):
    """Opening categories accepted in a floor-plan record."""
    DOOR = "door"
    WINDOW = "window"
    OPENING = "opening"


class Point2D(BaseModel):
    """2D point in plan or projected space."""
    model_config = ConfigDict(frozen=True)

    x: float
    y: float

    def distance_to(self, other: "Point2D") -> float:
        """Calculate Euclidean distance to another point."""
        return ((self.x - other.x) ** 2 + (self.y - other.y) ** 2) ** 0.5

    def as_tuple(self) -> Tuple[float, float]:
        return (self.x, self.y)


class Point3D(BaseModel):
    """3D point in model space. Also used as a 3D vector (face normals)."""
    model_config = ConfigDict(frozen=True)

    x: float
    y: float
    z: float = 0.0

    def as_tuple(self) -> Tuple[float, float, float]:
        return (self.x, self.y, self.z)


class CenterlineWall(BaseModel):
    """Wall in pipeline form: a centerline polyline with thickness and height (mm)."""
    model_config = ConfigDict(frozen=True)

    centerline: Tuple[Point2D, ...] = Field(min_length=2)
    thickness: float
    height: float
    source_id: Optional[str] = None  # topology wall id(s) this came from

    def is_closed(self, tolerance: float = 1e-10) -> bool:
        """Check if the centerline returns to its first point."""
        if len(self.centerline) < 3:
            return False
        first, last = self.centerline[0], self.centerline[-1]
        return abs(first.x - last.x) < tolerance and abs(first.y - last.y) < tolerance


class Face(BaseModel):
    """Planar 3D polygon of a wall volume."""
    model_config = ConfigDict(frozen=True)

    vertices: Tuple[Point3D, ...]
    normal: Point3D
    style: FaceStyle


class WallVolume(BaseModel):
    """Extrusion result for one wall footprint."""
    model_config = ConfigDict(frozen=True)

    faces: Tuple[Face, ...]
    centerline: Tuple[Point2D, ...]
    thickness: float
    height: float


class AxonFace(BaseModel):
    """Projected face ready for back-to-front drawing."""
    model_config = ConfigDict(frozen=True)

    vertices: Tuple[Point2D, ...]
    depth: float  # mean source Z
    normal: Point3D
    style: FaceStyle
    source_id: Optional[str] = None

    def __str__(self) -> str:
        return f"AxonFace({self.style.value}, {len(self.vertices)} vertices, depth={self.depth:.1f})"


# Topology form. Points stay as (x, y) tuples to mirror the JSON record.

class TopologyWall(BaseModel):
    """Wall as extracted from a floor plan (record units, typically metres)."""
    id: str = Field(min_length=1)
    start: Tuple[float, float]
    end: Tuple[float, float]
    thickness: float = Field(gt=0)
    type: WallType = WallType.INTERIOR
    height: Optional[float] = Field(default=None, gt=0)  # extrusion height, record units


class Room(BaseModel):
    """Closed room polygon with its area."""
    id: str = Field(min_length=1)
    polygon: List[Tuple[float, float]]
    area_m2: float = Field(gt=0)

    @field_validator('polygon')
    @classmethod
    def validate_polygon(cls, v: List[Tuple[float, float]]) -> List[Tuple[float, float]]:
        """Ensure the polygon has at least 3 points."""
        if len(v) < 3:
            raise ValueError('Room polygon must have at least 3 points')
        return v


class Opening(BaseModel):
    """Door, window or plain opening positioned along a wall."""
    model_config = ConfigDict(populate_by_name=True)

    id: str = Field(min_length=1)
    wall_id: str = Field(alias="wallId")
    type: OpeningType = OpeningType.OPENING
    position: float = Field(default=0.5, ge=0.0, le=1.0)  # fraction along the wall


class PlanBounds(BaseModel):
    """Axis-aligned bounds of a floor plan."""
    model_config = ConfigDict(populate_by_name=True)

    min_x: float = Field(default=0.0, alias="minX")
    max_x: float = Field(default=0.0, alias="maxX")
    min_y: float = Field(default=0.0, alias="minY")
    max_y: float = Field(default=0.0, alias="maxY")


class PlanMeta(BaseModel):
    """Record metadata: drawing scale and bounds."""
    model_config = ConfigDict(extra="allow")

    scale: float = Field(gt=0)
    bounds: PlanBounds = Field(default_factory=PlanBounds)


class FloorPlan(BaseModel):
    """Typed view of a well-formed floor-plan record."""
    walls: List[TopologyWall] = Field(default_factory=list)
    rooms: List[Room] = Field(default_factory=list)
    openings: List[Opening] = Field(default_factory=list)
    meta: PlanMeta

    @classmethod
    def from_record(cls, record: dict) -> "FloorPlan":
        """Parse a record dict (as produced by the repairer)."""
        return cls.model_validate(record)

    def to_record(self) -> dict:
        """Dump back to the record shape (camelCase keys)."""
        return self.model_dump(mode="json", by_alias=True, exclude_none=True)

    def __str__(self) -> str:
        return (f"FloorPlan({len(self.walls)} walls, {len(self.rooms)} rooms, "
                f"{len(self.openings)} openings)")


class ValidationIssue(BaseModel):
    """Single structural problem found in a record."""
    path: str  # e.g. "walls[2].start"
    message: str


class ValidationResult(BaseModel):
    """Result of topology validation."""
    valid: bool
    errors: List[ValidationIssue] = Field(default_factory=list)
    warnings: List[ValidationIssue] = Field(default_factory=list)

    def messages(self) -> List[str]:
        """Get errors as "path: message" strings."""
        return [f"{e.path}: {e.message}" for e in self.errors]


class RepairAction(BaseModel):
    """One thing the repairer dropped or defaulted."""
    path: str
    action: str  # "dropped" or "defaulted"
    reason: str


class RepairReport(BaseModel):
    """Audit trail of a repair pass."""
    dropped: List[RepairAction] = Field(default_factory=list)
    defaulted: List[RepairAction] = Field(default_factory=list)

    def drop(self, path: str, reason: str) -> None:
        self.dropped.append(RepairAction(path=path, action="dropped", reason=reason))

    def default(self, path: str, reason: str) -> None:
        self.defaulted.append(RepairAction(path=path, action="defaulted", reason=reason))

    def is_clean(self) -> bool:
        """True if the repair changed nothing."""
        return not self.dropped and not self.defaulted
