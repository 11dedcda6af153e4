"""
Mesh Snapshots and Export Sessions

This module provides:
- ExportableMesh: An immutable-by-convention snapshot of one drawable's
  geometry together with its local-to-world transform
- ExportSession: The ordered list of meshes plus the global export settings
- TRS helpers for building 4x4 transforms from translation, rotation and scale

A snapshot is decoupled from any live scene graph. Whatever owns the scene
(a game engine, a DCC tool, a JSON file) fills one in at the boundary and the
exporter never looks back at the source objects.
"""

from dataclasses import dataclass, field
from enum import Enum
from typing import Iterable, List, Optional, Sequence
import numpy as np
from scipy.spatial.transform import Rotation


class MalformedMesh(ValueError):
    """Raised when mesh data would produce invalid OBJ indices or numbers."""


class TransformMode(Enum):
    """How object transforms are treated during export."""
    NO_TRANSFORM = "none"       # Export object-local coordinates
    APPLY_TRANSFORM = "apply"   # Bake local-to-world and scale into vertices


def quaternion_to_matrix(rotation: Sequence[float]) -> np.ndarray:
    """
    Convert a unit quaternion to a 3x3 rotation matrix.

    Args:
        rotation: Quaternion as (x, y, z, w)

    Returns:
        3x3 rotation matrix
    """
    try:
        return Rotation.from_quat(np.asarray(rotation, dtype=np.float64)).as_matrix()
    except ValueError as e:
        raise MalformedMesh(f"Invalid rotation quaternion {list(rotation)}: {e}") from e


def trs_matrix(
    translation: Sequence[float] = (0.0, 0.0, 0.0),
    rotation: Sequence[float] = (0.0, 0.0, 0.0, 1.0),
    scale: Sequence[float] = (1.0, 1.0, 1.0)
) -> np.ndarray:
    """
    Build a 4x4 affine matrix as T * R * S.

    Args:
        translation: (x, y, z) offset
        rotation: Unit quaternion (x, y, z, w)
        scale: Per-axis scale factors

    Returns:
        4x4 local-to-world matrix
    """
    matrix = np.eye(4, dtype=np.float64)
    matrix[:3, :3] = quaternion_to_matrix(rotation) * np.asarray(scale, dtype=np.float64)
    matrix[:3, 3] = np.asarray(translation, dtype=np.float64)
    return matrix


def _as_channel(values, width: int) -> Optional[np.ndarray]:
    """Coerce an optional per-vertex channel; empty means absent."""
    if values is None:
        return None
    array = np.asarray(values, dtype=np.float64)
    if array.size == 0:
        return None
    if array.ndim == 1 and array.size % width == 0:
        array = array.reshape(-1, width)
    return array


@dataclass(eq=False)
class ExportableMesh:
    """
    Geometry snapshot of one object to be written as an OBJ `o` group.

    Positions, UVs and normals share a single index space addressed by
    `triangles`. UVs and normals are optional channels: `None` means the
    mesh has no such channel, and an empty array is normalised to `None`.

    `scale` is multiplied in component-wise after `local_to_world` has been
    applied. When the matrix already contains that scale, as with
    `from_trs`, the result is scaled twice.
    """

    name: str
    positions: np.ndarray
    triangles: np.ndarray
    uvs: Optional[np.ndarray] = None
    normals: Optional[np.ndarray] = None
    local_to_world: np.ndarray = field(
        default_factory=lambda: np.eye(4, dtype=np.float64)
    )
    scale: np.ndarray = field(
        default_factory=lambda: np.ones(3, dtype=np.float64)
    )

    def __post_init__(self):
        """Normalise array types and shapes."""
        self.positions = np.asarray(self.positions, dtype=np.float64)
        if self.positions.ndim == 1 and self.positions.size % 3 == 0:
            self.positions = self.positions.reshape(-1, 3)
        self.triangles = np.asarray(self.triangles).reshape(-1)
        if self.triangles.size == 0:
            self.triangles = self.triangles.astype(np.int64)
        self.uvs = _as_channel(self.uvs, 2)
        self.normals = _as_channel(self.normals, 3)
        self.local_to_world = np.asarray(self.local_to_world, dtype=np.float64)
        self.scale = np.asarray(self.scale, dtype=np.float64)

    @classmethod
    def from_trs(
        cls,
        name: str,
        positions,
        triangles,
        uvs=None,
        normals=None,
        translation: Sequence[float] = (0.0, 0.0, 0.0),
        rotation: Sequence[float] = (0.0, 0.0, 0.0, 1.0),
        scale: Sequence[float] = (1.0, 1.0, 1.0)
    ) -> "ExportableMesh":
        """
        Build a snapshot from a scene-style transform.

        The local scale goes into the matrix and is also kept as the
        re-applied `scale`, which is how engine transforms are captured.

        Args:
            name: Object name for the `o` statement
            positions: (N, 3) object-local positions
            triangles: Flat triangle index list
            uvs: Optional (N, 2) texture coordinates
            normals: Optional (N, 3) normals
            translation: World position
            rotation: World rotation quaternion (x, y, z, w)
            scale: Local scale

        Returns:
            ExportableMesh
        """
        return cls(
            name=name,
            positions=positions,
            triangles=triangles,
            uvs=uvs,
            normals=normals,
            local_to_world=trs_matrix(translation, rotation, scale),
            scale=np.asarray(scale, dtype=np.float64),
        )

    @property
    def vertex_count(self) -> int:
        return len(self.positions)

    @property
    def triangle_count(self) -> int:
        return self.triangles.size // 3

    @property
    def has_uvs(self) -> bool:
        return self.uvs is not None

    @property
    def has_normals(self) -> bool:
        return self.normals is not None

    def validate(self) -> "ExportableMesh":
        """
        Check structural consistency.

        Raises:
            MalformedMesh: If any array has the wrong shape, any index is out
                of range, or any number is not finite

        Returns:
            self for method chaining
        """
        if not self.name:
            raise MalformedMesh("Mesh name must not be empty")
        if any(c in self.name for c in "\r\n"):
            raise MalformedMesh(f"Mesh name {self.name!r} must not contain line breaks")

        label = f"Mesh {self.name!r}"
        if self.positions.ndim != 2 or self.positions.shape[1] != 3:
            raise MalformedMesh(f"{label}: positions must have shape (N, 3)")
        count = self.vertex_count

        if self.uvs is not None and self.uvs.shape != (count, 2):
            raise MalformedMesh(
                f"{label}: uvs shape {self.uvs.shape} does not match ({count}, 2)"
            )
        if self.normals is not None and self.normals.shape != (count, 3):
            raise MalformedMesh(
                f"{label}: normals shape {self.normals.shape} does not match ({count}, 3)"
            )

        if self.triangles.size % 3 != 0:
            raise MalformedMesh(
                f"{label}: triangle index count {self.triangles.size} is not a multiple of 3"
            )
        if self.triangles.size:
            if not np.issubdtype(self.triangles.dtype, np.integer):
                raise MalformedMesh(f"{label}: triangle indices must be integers")
            if self.triangles.min() < 0 or self.triangles.max() >= count:
                raise MalformedMesh(
                    f"{label}: triangle index out of range for {count} vertices"
                )

        if self.local_to_world.shape != (4, 4):
            raise MalformedMesh(f"{label}: local_to_world must be a 4x4 matrix")
        if self.scale.shape != (3,):
            raise MalformedMesh(f"{label}: scale must have 3 components")

        for channel, values in (
            ("positions", self.positions),
            ("uvs", self.uvs),
            ("normals", self.normals),
            ("local_to_world", self.local_to_world),
            ("scale", self.scale),
        ):
            if values is not None and not np.all(np.isfinite(values)):
                raise MalformedMesh(f"{label}: {channel} contains non-finite values")

        return self


def check_precision(precision) -> int:
    """Validate a digits-after-the-point setting."""
    if isinstance(precision, bool) or not isinstance(precision, (int, np.integer)):
        raise ValueError(f"Precision must be an integer, got {precision!r}")
    if precision < 0:
        raise ValueError(f"Precision must be non-negative, got {precision}")
    return int(precision)


@dataclass
class ExportSession:
    """
    Ordered collection of meshes plus the settings they are exported with.

    Insertion order is export order. Rendering never mutates the session,
    so the same session can be exported any number of times.
    """

    objects: List[ExportableMesh] = field(default_factory=list)
    transform_mode: TransformMode = TransformMode.APPLY_TRANSFORM
    floating_point_precision: int = 4

    def __post_init__(self):
        """Validate settings."""
        self.floating_point_precision = check_precision(self.floating_point_precision)
        self.transform_mode = TransformMode(self.transform_mode)
        self.objects = [obj.validate() for obj in self.objects]

    def __len__(self) -> int:
        return len(self.objects)

    def add(self, mesh: ExportableMesh) -> "ExportSession":
        """
        Append a mesh after validating its structure.

        Args:
            mesh: Snapshot to export

        Returns:
            self for method chaining
        """
        self.objects.append(mesh.validate())
        return self

    def extend(self, meshes: Iterable[ExportableMesh]) -> "ExportSession":
        """Append several meshes in order."""
        for mesh in meshes:
            self.add(mesh)
        return self

    def clear(self):
        """Remove all meshes."""
        self.objects.clear()

    @property
    def vertex_count(self) -> int:
        """Total vertices over all objects."""
        return sum(obj.vertex_count for obj in self.objects)

    @property
    def triangle_count(self) -> int:
        """Total triangles over all objects."""
        return sum(obj.triangle_count for obj in self.objects)
