"""
DXF export of axonometric line drawings.

Writes depth-sorted faces as closed polylines, or their de-duplicated
edges as lines, on two layers: a thin one for top faces and a heavier
one for side faces. Projected y grows
downward, so y is flipped to keep the drawing upright in CAD.
"""

from pathlib import Path
from typing import List, Optional, Sequence, Tuple

import ezdxf
from ezdxf import units
from loguru import logger

from axonplan.core.config import Config, get_default_config
from axonplan.core.models import AxonFace, FaceStyle
from axonplan.export.edges import unique_edges


class AxonDXFWriter:
    """Builds a DXF document from projected faces."""

    def __init__(self, config: Optional[Config] = None):
        """
        Initialize DXF writer.

        Args:
            config: Configuration (uses the default config if None)
        """
        self.config = config or get_default_config()
        self.dxf_version = self.config.get_export_setting("dxf_version", "R2010")
        self.top_layer = self.config.get_export_setting("top_layer", "AXON_TOP")
        self.side_layer = self.config.get_export_setting("side_layer", "AXON_SIDE")
        self.top_lineweight = self.config.get_export_setting("top_lineweight", 13)
        self.side_lineweight = self.config.get_export_setting("side_lineweight", 25)
        self.stroke_color = self.config.get_export_setting("stroke_color", 7)
        self.background_rgb = tuple(self.config.get_export_setting("background_rgb", [255, 255, 255]))

        self.doc = None
        self.msp = None
        self.face_count = 0

    def create_document(self):
        """Create a new document with the top and side layers."""
        logger.info(f"Creating DXF document ({self.dxf_version})")

        self.doc = ezdxf.new(self.dxf_version)
        self.doc.units = units.MM
        self.msp = self.doc.modelspace()
        self.face_count = 0

        self.doc.layers.new(self.top_layer, dxfattribs={
            "color": self.stroke_color,
            "lineweight": self.top_lineweight,
        })
        self.doc.layers.new(self.side_layer, dxfattribs={
            "color": self.stroke_color,
            "lineweight": self.side_lineweight,
        })

        return self.doc

    def layer_for(self, style: FaceStyle) -> str:
        return self.top_layer if style == FaceStyle.TOP else self.side_layer

    @staticmethod
    def _flip(face: AxonFace) -> List[Tuple[float, float]]:
        return [(v.x, -v.y) for v in face.vertices]

    def add_faces(self, faces: Sequence[AxonFace], fill: bool = False) -> None:
        """
        Add faces in the given order.

        Args:
            faces: Depth-sorted faces (deepest first)
            fill: Put a solid background hatch under each face so nearer
                  faces hide the lines of faces drawn before them
        """
        if self.msp is None:
            self.create_document()

        logger.info(f"Adding {len(faces)} faces to DXF")

        for face in faces:
            if len(face.vertices) < 2:
                logger.debug(f"Skipping {face}: fewer than 2 vertices")
                continue

            layer = self.layer_for(face.style)
            points = self._flip(face)

            if fill and len(points) >= 3:
                hatch = self.msp.add_hatch(dxfattribs={"layer": layer})
                hatch.rgb = self.background_rgb
                hatch.paths.add_polyline_path(points, is_closed=True)

            self.msp.add_lwpolyline(points, format="xy", close=True, dxfattribs={"layer": layer})
            self.face_count += 1

        logger.success(f"Added {self.face_count} faces")

    def add_edges(self, faces: Sequence[AxonFace]) -> int:
        """
        Add each shared edge once as a LINE, styled by the first face that owns it.

        Args:
            faces: Depth-sorted faces (deepest first)

        Returns:
            Number of lines added
        """
        if self.msp is None:
            self.create_document()

        edges = unique_edges(faces)
        for edge in edges:
            self.msp.add_line(
                (edge.start.x, -edge.start.y),
                (edge.end.x, -edge.end.y),
                dxfattribs={"layer": self.layer_for(edge.style)},
            )

        logger.success(f"Added {len(edges)} edges from {len(faces)} faces")
        return len(edges)

    def write(self, output_path: str) -> Path:
        """
        Write DXF file to disk.

        Args:
            output_path: Path to output .dxf file

        Returns:
            Path of the written file
        """
        if self.doc is None:
            raise RuntimeError("No DXF document to write. Create document first.")

        output_file = Path(output_path)
        output_file.parent.mkdir(parents=True, exist_ok=True)
        self.doc.saveas(output_file)

        file_size_kb = output_file.stat().st_size / 1024
        logger.success(f"Wrote DXF file: {output_file.absolute()} ({file_size_kb:.1f} KB)")

        return output_file


def write_axon_dxf(
    faces: Sequence[AxonFace],
    output_path: str,
    config: Optional[Config] = None,
    fill: bool = False,
    edges: bool = False,
) -> Path:
    """
    Convenience function to write depth-sorted faces to a DXF file.

    Args:
        faces: Depth-sorted faces
        output_path: Path to output .dxf file
        config: Configuration (uses the default config if None)
        fill: Occlude hidden lines with solid background hatches
        edges: Draw de-duplicated edges as lines instead of closed polylines

    Returns:
        Path of the written file
    """
    if edges and fill:
        raise ValueError("fill needs closed faces and cannot be combined with edges")

    writer = AxonDXFWriter(config)
    writer.create_document()
    if edges:
        writer.add_edges(faces)
    else:
        writer.add_faces(faces, fill=fill)
    return writer.write(output_path)
