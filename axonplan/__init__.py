"""
axonplan - Floor-Plan Topology to Axonometric Line Drawings

Validates and repairs floor-plan topology records, then turns each wall
into extruded, culled and projected faces ordered for back-to-front drawing.
"""

__version__ = "0.1.0"

from axonplan.topology.validator import validate_floor_plan
from axonplan.topology.repairer import repair_floor_plan, repair_floor_plan_with_report
from axonplan.topology.records import load_record
from axonplan.geometry.offset import offset_centerline
from axonplan.geometry.footprint import build_footprint, validate_footprint
from axonplan.geometry.extrusion import DegenerateFootprintError, extrude_footprint
from axonplan.geometry.culling import cull_faces
from axonplan.geometry.projection import project_faces
from axonplan.geometry.depth_sort import depth_sort
from axonplan.pipeline import process_wall, process_walls, render_floor_plan
from axonplan.export.dxf_writer import write_axon_dxf
from axonplan.export.edges import unique_edges

__all__ = [
    "validate_floor_plan",
    "repair_floor_plan",
    "repair_floor_plan_with_report",
    "load_record",
    "offset_centerline",
    "build_footprint",
    "validate_footprint",
    "extrude_footprint",
    "DegenerateFootprintError",
    "cull_faces",
    "project_faces",
    "depth_sort",
    "process_wall",
    "process_walls",
    "render_floor_plan",
    "write_axon_dxf",
    "unique_edges",
]
