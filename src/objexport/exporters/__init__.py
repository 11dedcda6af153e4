"""
Export modules for 3D formats.

Supported formats:
- Wavefront (.obj) - Universal text format with merged multi-object output
"""

from .obj_exporter import (
    OBJExporter,
    InvalidDestination,
    IndexOffsets,
    render_obj,
    export_obj,
    resolve_export_path,
)

__all__ = [
    "OBJExporter",
    "InvalidDestination",
    "IndexOffsets",
    "render_obj",
    "export_obj",
    "resolve_export_path",
]
