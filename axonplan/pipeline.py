"""
Wall pipeline: floor-plan walls to depth-sorted axonometric faces.

Each wall goes through offset, footprint, extrusion, culling and projection
on its own. Faces from all walls are merged in input order and depth-sorted
once, so the result is the same whether walls run sequentially or on a
thread pool.
"""

from concurrent.futures import ThreadPoolExecutor
from typing import Any, Dict, List, NamedTuple, Optional, Sequence, Tuple, Union
from loguru import logger
from pydantic import BaseModel, Field

from axonplan.core.config import AxonProjection, Config, get_default_config
from axonplan.core.models import (
    AxonFace, CenterlineWall, FloorPlan, Point2D, Point3D, RepairReport,
    TopologyWall, ValidationResult,
)
from axonplan.core.vectors import points_coincide
from axonplan.geometry.culling import CULL_TOLERANCE, DEFAULT_VIEW_DIRECTION, cull_faces
from axonplan.geometry.depth_sort import DEPTH_TOLERANCE, depth_sort
from axonplan.geometry.extrusion import CLOSURE_TOLERANCE, DegenerateFootprintError, extrude_footprint
from axonplan.geometry.footprint import build_footprint
from axonplan.geometry.offset import offset_centerline
from axonplan.geometry.projection import DEFAULT_PROJECTION, project_faces
from axonplan.topology.repairer import repair_floor_plan_with_report
from axonplan.topology.validator import validate_floor_plan

DEFAULT_WALL_HEIGHT = 2700.0  # mm
DEFAULT_WALL_THICKNESS = 200.0  # mm
JOIN_TOLERANCE = 1e-6

WallInput = Union[TopologyWall, CenterlineWall, Dict[str, Any]]


class PipelineResult(NamedTuple):
    """Depth-sorted faces plus labels of walls that could not be extruded."""
    faces: List[AxonFace]
    skipped: List[str]


class PlanRender(BaseModel):
    """Everything produced while rendering one floor-plan record."""
    plan: FloorPlan
    validation: ValidationResult
    report: RepairReport
    faces: List[AxonFace] = Field(default_factory=list)
    skipped: List[str] = Field(default_factory=list)

    def __str__(self) -> str:
        return (f"PlanRender({len(self.plan.walls)} walls, {len(self.faces)} faces, "
                f"{len(self.skipped)} skipped)")


def _point_from(value: Any) -> Point2D:
    """Accept a Point2D, an {x, y} dict or an [x, y] pair."""
    if isinstance(value, Point2D):
        return value
    if isinstance(value, dict):
        return Point2D(x=value["x"], y=value["y"])
    x, y = value
    return Point2D(x=x, y=y)


def topology_wall_to_centerline(
    wall: WallInput,
    default_height: float = DEFAULT_WALL_HEIGHT,
    default_thickness: float = DEFAULT_WALL_THICKNESS,
    unit_scale: float = 1.0,
) -> CenterlineWall:
    """
    Convert a topology wall to a two-point centerline wall.

    Coordinates, thickness and an explicit height are multiplied by
    unit_scale; the defaults are already in pipeline units and are used as
    given. A CenterlineWall is returned unchanged.

    Args:
        wall: TopologyWall, record dict or CenterlineWall
        default_height: Height used when the wall has none (or a zero one)
        default_thickness: Thickness used when the wall has none (or a zero one)
        unit_scale: Record units to pipeline units factor

    Returns:
        CenterlineWall in pipeline units
    """
    if isinstance(wall, CenterlineWall):
        return wall
    if isinstance(wall, TopologyWall):
        wall = wall.model_dump()

    start = _point_from(wall["start"])
    end = _point_from(wall["end"])
    thickness = wall.get("thickness")
    height = wall.get("height")
    wall_id = wall.get("id")

    return CenterlineWall(
        centerline=[
            Point2D(x=start.x * unit_scale, y=start.y * unit_scale),
            Point2D(x=end.x * unit_scale, y=end.y * unit_scale),
        ],
        thickness=thickness * unit_scale if thickness else default_thickness,
        height=height * unit_scale if height else default_height,
        source_id=str(wall_id) if wall_id is not None else None,
    )


def _same_section(w1: CenterlineWall, w2: CenterlineWall) -> bool:
    return w1.thickness == w2.thickness and w1.height == w2.height


def _join_pair(w1: CenterlineWall, w2: CenterlineWall,
               tolerance: float = JOIN_TOLERANCE) -> Optional[CenterlineWall]:
    """
    Chain two open centerlines that share an endpoint.

    Tries end-to-start, start-to-end, end-to-end and start-to-start, reversing
    one side where needed. A chain that returns to its start is closed by
    snapping its last point onto the first.

    Returns:
        Joined wall, or None if the walls cannot be chained
    """
    if not _same_section(w1, w2) or w1.is_closed() or w2.is_closed():
        return None

    a = list(w1.centerline)
    b = list(w2.centerline)

    if points_coincide(a[-1], b[0], tolerance):
        points = a + b[1:]
    elif points_coincide(b[-1], a[0], tolerance):
        points = b + a[1:]
    elif points_coincide(a[-1], b[-1], tolerance):
        points = a + b[::-1][1:]
    elif points_coincide(a[0], b[0], tolerance):
        points = a[::-1] + b[1:]
    else:
        return None

    if points_coincide(points[0], points[-1], tolerance):
        # A there-and-back pair has no area to enclose
        if len(points) < 4:
            return None
        points[-1] = points[0]

    source_ids = [s for s in (w1.source_id, w2.source_id) if s]
    return CenterlineWall(
        centerline=points,
        thickness=w1.thickness,
        height=w1.height,
        source_id=",".join(source_ids) if source_ids else None,
    )


def join_centerlines(walls: Sequence[CenterlineWall],
                     tolerance: float = JOIN_TOLERANCE) -> List[CenterlineWall]:
    """
    Merge connected walls of equal thickness and height into polylines.

    Walls are joined pairwise in repeated passes until a pass makes no
    merge. Each merged wall takes the position of its first member.

    Args:
        walls: Centerline walls
        tolerance: Endpoint distance (per axis) treated as shared

    Returns:
        Joined walls
    """
    if not walls:
        return []

    logger.info(f"Joining {len(walls)} centerlines")

    merged = list(walls)
    iteration = 0

    while iteration < len(walls):
        iteration += 1
        merged_count = 0
        new_walls = []
        used = set()

        for i, w1 in enumerate(merged):
            if i in used:
                continue

            found = False
            for j in range(i + 1, len(merged)):
                if j in used:
                    continue
                joined = _join_pair(w1, merged[j], tolerance)
                if joined is not None:
                    new_walls.append(joined)
                    used.update((i, j))
                    merged_count += 1
                    found = True
                    break

            if not found:
                new_walls.append(w1)
                used.add(i)

        logger.debug(f"Iteration {iteration}: joined {merged_count} pairs, {len(new_walls)} walls remaining")

        if merged_count == 0:
            break

        merged = new_walls

    logger.success(f"Joined {len(walls)} centerlines into {len(merged)} walls")

    return merged


def topology_walls_to_centerlines(
    walls: Sequence[WallInput],
    join_connected: bool = False,
    default_height: float = DEFAULT_WALL_HEIGHT,
    default_thickness: float = DEFAULT_WALL_THICKNESS,
    unit_scale: float = 1.0,
    tolerance: float = JOIN_TOLERANCE,
) -> List[CenterlineWall]:
    """
    Convert topology walls to centerline walls, optionally chaining them.

    Args:
        walls: Topology walls (see topology_wall_to_centerline)
        join_connected: Chain walls that share endpoints into polylines
        default_height: Height for walls without one
        default_thickness: Thickness for walls without one
        unit_scale: Record units to pipeline units factor
        tolerance: Endpoint tolerance for joining

    Returns:
        One CenterlineWall per wall, or per chain when joining
    """
    centerlines = [
        topology_wall_to_centerline(w, default_height, default_thickness, unit_scale)
        for w in walls
    ]
    if join_connected:
        centerlines = join_centerlines(centerlines, tolerance)
    return centerlines


def process_wall(
    wall: CenterlineWall,
    projection: AxonProjection = DEFAULT_PROJECTION,
    view_direction: Point3D = DEFAULT_VIEW_DIRECTION,
    cull_tolerance: float = CULL_TOLERANCE,
    closure_tolerance: float = CLOSURE_TOLERANCE,
) -> List[AxonFace]:
    """
    Turn one centerline wall into its visible projected faces (unsorted).

    Raises:
        DegenerateFootprintError: If the wall offsets to fewer than 3 distinct vertices
    """
    offsets = offset_centerline(wall.centerline, wall.thickness, closure_tolerance)
    footprint = build_footprint(offsets.left, offsets.right, closure_tolerance)
    volume = extrude_footprint(
        footprint,
        wall.height,
        closure_tolerance,
        centerline=wall.centerline,
        thickness=wall.thickness,
    )
    visible = cull_faces(volume.faces, view_direction, cull_tolerance)
    return project_faces(visible, projection, source_id=wall.source_id)


class WallPipeline:
    """Runs walls through the geometry stages with configured constants."""

    def __init__(self, config: Optional[Config] = None, max_workers: Optional[int] = None):
        """
        Initialize pipeline.

        Args:
            config: Configuration (uses the default config if None)
            max_workers: Thread count; None or 1 processes walls sequentially
        """
        self.config = config or get_default_config()
        self.max_workers = max_workers

        self.projection = self.config.projection()
        self.view_direction = self.config.view_direction()
        self.cull_tolerance = self.config.get_geometry_default("cull_tolerance", CULL_TOLERANCE)
        self.closure_tolerance = self.config.get_geometry_default("closure_tolerance", CLOSURE_TOLERANCE)
        self.depth_tolerance = self.config.get_geometry_default("depth_tie_tolerance", DEPTH_TOLERANCE)
        self.join_tolerance = self.config.get_geometry_default("join_tolerance", JOIN_TOLERANCE)
        self.default_height = self.config.get_geometry_default("default_wall_height_mm", DEFAULT_WALL_HEIGHT)
        self.default_thickness = self.config.get_geometry_default(
            "default_wall_thickness_mm", DEFAULT_WALL_THICKNESS
        )

    def to_centerlines(self, walls: Sequence[WallInput], join_connected: bool = False,
                       unit_scale: float = 1.0) -> List[CenterlineWall]:
        """Convert walls using the configured defaults."""
        return topology_walls_to_centerlines(
            walls,
            join_connected=join_connected,
            default_height=self.default_height,
            default_thickness=self.default_thickness,
            unit_scale=unit_scale,
            tolerance=self.join_tolerance,
        )

    def process_wall(self, wall: CenterlineWall) -> List[AxonFace]:
        return process_wall(
            wall,
            projection=self.projection,
            view_direction=self.view_direction,
            cull_tolerance=self.cull_tolerance,
            closure_tolerance=self.closure_tolerance,
        )

    def _process_indexed(self, item: Tuple[int, CenterlineWall]) -> Tuple[List[AxonFace], Optional[str]]:
        index, wall = item
        try:
            return self.process_wall(wall), None
        except DegenerateFootprintError as e:
            label = wall.source_id or f"wall[{index}]"
            logger.warning(f"Skipping {label}: {e}")
            return [], label

    def run(self, walls: Sequence[WallInput], join_connected: bool = False,
            unit_scale: float = 1.0) -> PipelineResult:
        """
        Process walls and depth-sort the merged faces.

        Args:
            walls: Topology or centerline walls
            join_connected: Chain connected walls before processing
            unit_scale: Record units to pipeline units factor

        Returns:
            PipelineResult with sorted faces and skipped wall labels
        """
        centerlines = self.to_centerlines(walls, join_connected, unit_scale)

        logger.info(f"Processing {len(centerlines)} walls")

        items = list(enumerate(centerlines))
        if self.max_workers is not None and self.max_workers > 1:
            with ThreadPoolExecutor(max_workers=self.max_workers) as executor:
                results = list(executor.map(self._process_indexed, items))
        else:
            results = [self._process_indexed(item) for item in items]

        merged: List[AxonFace] = []
        skipped: List[str] = []
        for faces, skipped_label in results:
            merged.extend(faces)
            if skipped_label is not None:
                skipped.append(skipped_label)

        sorted_faces = depth_sort(merged, self.depth_tolerance)

        logger.success(f"Rendered {len(sorted_faces)} faces from {len(centerlines) - len(skipped)} walls")
        if skipped:
            logger.warning(f"Skipped {len(skipped)} degenerate walls")

        return PipelineResult(faces=sorted_faces, skipped=skipped)


def process_walls(
    walls: Sequence[WallInput],
    max_workers: Optional[int] = None,
    join_connected: bool = False,
    config: Optional[Config] = None,
) -> List[AxonFace]:
    """
    Convenience function to render walls into depth-sorted faces.

    Args:
        walls: Topology or centerline walls (pipeline units)
        max_workers: Thread count for per-wall processing
        join_connected: Chain connected walls before processing
        config: Configuration (uses the default config if None)

    Returns:
        Depth-sorted visible faces; degenerate walls are skipped
    """
    return WallPipeline(config, max_workers).run(walls, join_connected).faces


def render_floor_plan(
    record: Any,
    config: Optional[Config] = None,
    max_workers: Optional[int] = None,
    join_connected: bool = False,
) -> PlanRender:
    """
    Validate, repair and render a floor-plan record.

    Wall coordinates in the record are scaled to millimetres with the
    configured record_units_to_mm factor before extrusion.

    Args:
        record: Raw floor-plan record (dict)
        config: Configuration (uses the default config if None)
        max_workers: Thread count for per-wall processing
        join_connected: Chain connected walls before processing

    Returns:
        PlanRender with the repaired plan, validation, repair report and faces

    Raises:
        ValueError: If the record is not an object
    """
    if not isinstance(record, dict):
        raise ValueError(f"Record must be an object, got {type(record).__name__}")

    config = config or get_default_config()
    settings = config.topology_settings()

    logger.info("Rendering floor plan record")

    validation = validate_floor_plan(record, settings)
    if not validation.valid:
        logger.info(f"Record has {len(validation.errors)} validation errors, repairing")

    repaired, report = repair_floor_plan_with_report(record, settings)
    plan = FloorPlan.from_record(repaired)

    unit_scale = config.get_geometry_default("record_units_to_mm", 1000.0)
    result = WallPipeline(config, max_workers).run(plan.walls, join_connected, unit_scale)

    render = PlanRender(
        plan=plan,
        validation=validation,
        report=report,
        faces=result.faces,
        skipped=result.skipped,
    )
    logger.success(f"Rendered {render}")
    return render
