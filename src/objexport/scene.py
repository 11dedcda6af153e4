"""
Scene Snapshot Ingestion

Loads a JSON description of meshes and their transforms into an
ExportSession. This is the file-based stand-in for reading MeshFilter-style
components out of a live scene: each entry carries a name, shared mesh
arrays and either a TRS transform or an explicit 4x4 matrix.

Example document:
    {
      "transform_mode": "apply",
      "precision": 4,
      "objects": [
        {
          "name": "Cube",
          "positions": [[0, 0, 0], [1, 0, 0], [0, 1, 0]],
          "normals": [[0, 0, -1], [0, 0, -1], [0, 0, -1]],
          "triangles": [0, 1, 2],
          "translation": [0, 0, 5],
          "rotation": [0, 0, 0, 1],
          "scale": [1, 1, 1]
        }
      ]
    }
"""

import json
import logging
from pathlib import Path
from typing import Any, Dict, Mapping, Optional, Union
import numpy as np

from .mesh import ExportableMesh, ExportSession, MalformedMesh, TransformMode

logger = logging.getLogger(__name__)


def _require(entry: Mapping[str, Any], key: str, label: str):
    if key not in entry:
        raise MalformedMesh(f"{label}: missing required field '{key}'")
    return entry[key]


def mesh_from_dict(entry: Mapping[str, Any], index: int = 0) -> ExportableMesh:
    """
    Build a mesh snapshot from one scene entry.

    Args:
        entry: Mapping with name, positions, triangles and optional
            uvs, normals, translation, rotation, scale, matrix
        index: Position in the scene, used in error messages

    Returns:
        Validated ExportableMesh
    """
    label = f"Object #{index}"
    if not isinstance(entry, Mapping):
        raise MalformedMesh(f"{label}: expected an object, got {type(entry).__name__}")

    name = str(_require(entry, "name", label))
    positions = _require(entry, "positions", label)
    triangles = _require(entry, "triangles", label)
    try:
        triangles = np.asarray(triangles)
    except ValueError as e:
        raise MalformedMesh(f"{label} ({name!r}): triangles are not a flat or (M, 3) list: {e}") from e
    if triangles.size and not np.issubdtype(triangles.dtype, np.integer):
        raise MalformedMesh(f"{label}: triangle indices must be integers")

    scale = entry.get("scale", (1.0, 1.0, 1.0))

    try:
        if "matrix" in entry:
            mesh = ExportableMesh(
                name=name,
                positions=positions,
                triangles=triangles,
                uvs=entry.get("uvs"),
                normals=entry.get("normals"),
                local_to_world=entry["matrix"],
                scale=scale,
            )
        else:
            mesh = ExportableMesh.from_trs(
                name=name,
                positions=positions,
                triangles=triangles,
                uvs=entry.get("uvs"),
                normals=entry.get("normals"),
                translation=entry.get("translation", (0.0, 0.0, 0.0)),
                rotation=entry.get("rotation", (0.0, 0.0, 0.0, 1.0)),
                scale=scale,
            )
    except MalformedMesh:
        raise
    except (TypeError, ValueError) as e:
        raise MalformedMesh(f"{label} ({name!r}): {e}") from e

    return mesh.validate()


def session_from_dict(
    data: Mapping[str, Any],
    transform_mode: Optional[TransformMode] = None,
    precision: Optional[int] = None
) -> ExportSession:
    """
    Build an export session from a parsed scene document.

    Explicit arguments override the document's own settings.

    Args:
        data: Parsed scene mapping
        transform_mode: Optional override of "transform_mode"
        precision: Optional override of "precision"

    Returns:
        ExportSession with all objects added in document order
    """
    if not isinstance(data, Mapping):
        raise MalformedMesh("Scene document must be a JSON object")

    objects = data.get("objects")
    if not isinstance(objects, list):
        raise MalformedMesh("Scene document needs an 'objects' list")

    if transform_mode is None:
        transform_mode = TransformMode(data.get("transform_mode", TransformMode.APPLY_TRANSFORM.value))
    if precision is None:
        precision = data.get("precision", 4)

    session = ExportSession(
        transform_mode=transform_mode,
        floating_point_precision=precision,
    )
    session.extend(mesh_from_dict(entry, index) for index, entry in enumerate(objects))

    return session


def load_scene(
    scene_path: Union[str, Path],
    transform_mode: Optional[TransformMode] = None,
    precision: Optional[int] = None
) -> ExportSession:
    """
    Load a JSON scene snapshot from disk.

    Args:
        scene_path: Path to the .json file
        transform_mode: Optional override of the document's mode
        precision: Optional override of the document's precision

    Returns:
        ExportSession
    """
    scene_path = Path(scene_path)
    if not scene_path.exists():
        raise FileNotFoundError(f"Scene not found: {scene_path}")

    with open(scene_path, "r", encoding="utf-8") as f:
        try:
            data: Dict[str, Any] = json.load(f)
        except json.JSONDecodeError as e:
            raise MalformedMesh(f"Invalid JSON in {scene_path}: {e}") from e

    session = session_from_dict(data, transform_mode, precision)
    logger.info("Loaded %d objects from %s", len(session), scene_path)
    return session
