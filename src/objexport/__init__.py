"""
OBJ Exporter
============

Engine-independent serialization of mesh snapshots to Wavefront OBJ.

Meshes from a left-handed scene (Unity-style: +Y up, +Z forward) are merged
into one OBJ document with per-object `o` groups, global 1-based indices,
Z negated and triangle winding reversed so the result opens correctly in
right-handed tools.

Key Features:
- Optional baking of local-to-world transforms into vertices
- Fixed-point number output with configurable precision
- UV and normal channels written only when present
- JSON scene snapshots and an `objexport` command-line tool

Example Usage:
    from objexport import OBJExporter, ExportableMesh

    exporter = OBJExporter(floating_point_precision=4)
    exporter.add(ExportableMesh.from_trs(
        "Triangle",
        positions=[[0, 0, 0], [1, 0, 0], [0, 1, 0]],
        triangles=[0, 1, 2],
        translation=[0, 0, 5],
    ))
    exporter.export("triangle.obj")
"""

__version__ = "1.0.0"

from .mesh import (
    ExportableMesh,
    ExportSession,
    MalformedMesh,
    TransformMode,
    trs_matrix,
)
from .formatting import format_float
from .exporters import (
    OBJExporter,
    InvalidDestination,
    render_obj,
    export_obj,
)
from .scene import load_scene, session_from_dict

__all__ = [
    "ExportableMesh",
    "ExportSession",
    "MalformedMesh",
    "TransformMode",
    "trs_matrix",
    "format_float",
    "OBJExporter",
    "InvalidDestination",
    "render_obj",
    "export_obj",
    "load_scene",
    "session_from_dict",
]
