"""
Wavefront OBJ Format Exporter

Serializes an ExportSession into OBJ text. Each mesh becomes one `o` group
with its `v`, `vt` and `vn` blocks followed by its triangles. Indices in OBJ
are global and 1-based, so every group's face indices are shifted by the
number of elements written before it.

Output layout:
    #.obj created with objexport
    <blank>
    o <name>
    v x y z          one per vertex (transformed, Z negated)
    vt u v           one per UV, only if the mesh has UVs
    vn x y z         one per normal, only if the mesh has normals
    f c/c/c b/b/b a/a/a   one per triangle, winding reversed
    <blank>

Rendering is a pure fold over the objects: the running offsets are passed in
and returned, never stored, so one session may be rendered concurrently or
repeatedly with identical results.
"""

import logging
from pathlib import Path
from typing import NamedTuple, Tuple, Union

from ..formatting import format_vector
from ..mesh import ExportableMesh, ExportSession, TransformMode, check_precision
from ..transform import transform_vectors

logger = logging.getLogger(__name__)

OBJ_EXTENSION = ".obj"
HEADER_ATTRIBUTION = "objexport"


class InvalidDestination(ValueError):
    """Raised when an export path cannot be written to."""


class IndexOffsets(NamedTuple):
    """1-based global index of the next element in each OBJ channel."""
    position: int = 1
    uv: int = 1
    normal: int = 1

    def advance(self, mesh: ExportableMesh) -> "IndexOffsets":
        """Offsets after `mesh` has been written."""
        return IndexOffsets(
            position=self.position + mesh.vertex_count,
            uv=self.uv + (len(mesh.uvs) if mesh.has_uvs else 0),
            normal=self.normal + (len(mesh.normals) if mesh.has_normals else 0),
        )


def render_header() -> str:
    """Attribution comment followed by a blank line."""
    return f"#.obj created with {HEADER_ATTRIBUTION}\n\n"


def render_object_name(mesh: ExportableMesh) -> str:
    return f"o {mesh.name}\n"


def render_vectors(keyword: str, vectors, precision: int) -> str:
    """
    Render one statement per row, e.g. `v x y z` or `vt u v`.

    Args:
        keyword: OBJ statement keyword
        vectors: Array of shape (N, K)
        precision: Digits after the decimal point

    Returns:
        Text block, empty when there are no rows
    """
    return "".join(
        f"{keyword} {format_vector(row, precision)}\n" for row in vectors
    )


def _face_element(position: int, uv: int, normal: int, has_uv: bool, has_normal: bool) -> str:
    """Format one `v/vt/vn` reference for the channels the mesh has."""
    if has_uv and has_normal:
        return f"{position}/{uv}/{normal}"
    if has_normal:
        return f"{position}//{normal}"
    if has_uv:
        return f"{position}/{uv}"
    return str(position)


def render_faces(mesh: ExportableMesh, offsets: IndexOffsets) -> str:
    """
    Render `f` statements for every triangle of a mesh.

    Winding is reversed (a, b, c) -> (c, b, a) to undo the orientation flip
    caused by negating Z.

    Args:
        mesh: Mesh whose triangles to write
        offsets: Global 1-based index of the mesh's first element per channel

    Returns:
        Text block with one line per triangle
    """
    has_uv = mesh.has_uvs
    has_normal = mesh.has_normals
    lines = []

    for triangle in mesh.triangles.reshape(-1, 3)[:, ::-1]:
        elements = [
            _face_element(
                int(i) + offsets.position,
                int(i) + offsets.uv,
                int(i) + offsets.normal,
                has_uv,
                has_normal,
            )
            for i in triangle
        ]
        lines.append(f"f {' '.join(elements)}\n")

    return "".join(lines)


def render_object(
    mesh: ExportableMesh,
    offsets: IndexOffsets,
    mode: TransformMode,
    precision: int
) -> Tuple[str, IndexOffsets]:
    """
    Render one OBJ group.

    Args:
        mesh: Mesh to write
        offsets: Offsets before this mesh
        mode: Transform mode for positions and normals
        precision: Digits after the decimal point

    Returns:
        Tuple of (group text, offsets after this mesh)
    """
    parts = [
        render_object_name(mesh),
        render_vectors("v", transform_vectors(mesh.positions, mesh, mode), precision),
    ]
    if mesh.has_uvs:
        parts.append(render_vectors("vt", mesh.uvs, precision))
    if mesh.has_normals:
        parts.append(render_vectors("vn", transform_vectors(mesh.normals, mesh, mode), precision))
    parts.append(render_faces(mesh, offsets))
    parts.append("\n")

    return "".join(parts), offsets.advance(mesh)


def render_obj(session: ExportSession) -> str:
    """
    Render a whole session to OBJ text.

    Args:
        session: Meshes and settings to export

    Returns:
        Complete OBJ document
    """
    parts = [render_header()]
    offsets = IndexOffsets()

    for mesh in session.objects:
        text, offsets = render_object(
            mesh, offsets, session.transform_mode, session.floating_point_precision
        )
        parts.append(text)

    logger.debug(
        "Rendered %d objects, %d vertices, %d triangles",
        len(session), session.vertex_count, session.triangle_count
    )
    return "".join(parts)


def resolve_export_path(output_path: Union[str, Path]) -> Path:
    """
    Validate an export destination and force the .obj extension.

    Args:
        output_path: Requested file path

    Raises:
        InvalidDestination: If the containing directory does not exist

    Returns:
        Path that will be written
    """
    output_path = Path(output_path)
    directory = output_path.parent

    if not directory.is_dir():
        raise InvalidDestination(f'Directory "{directory}" does not exist')
    if not output_path.name:
        raise InvalidDestination(f'"{output_path}" does not name a file')

    if output_path.suffix != OBJ_EXTENSION:
        output_path = output_path.with_suffix(OBJ_EXTENSION)

    return output_path


def export_obj(session: ExportSession, output_path: Union[str, Path]) -> Path:
    """
    Render a session and write it to disk, overwriting any existing file.

    The destination is checked before anything is opened, so a bad path
    leaves the file system untouched. Write errors propagate as OSError.

    Args:
        session: Meshes and settings to export
        output_path: Requested file path (.obj is enforced)

    Returns:
        Path of the written file
    """
    output_path = resolve_export_path(output_path)
    text = render_obj(session)

    with open(output_path, "w", encoding="utf-8", newline="\n") as f:
        f.write(text)

    logger.info(".obj successfully exported to %s", output_path)
    return output_path


class OBJExporter:
    """
    Accumulates meshes and exports them to Wavefront OBJ.

    This is the stateful front end over ExportSession, render_obj and
    export_obj for callers that collect objects incrementally.
    """

    def __init__(
        self,
        floating_point_precision: int = 4,
        transform_mode: TransformMode = TransformMode.APPLY_TRANSFORM
    ):
        """
        Initialize the exporter.

        Args:
            floating_point_precision: Digits after the decimal point
            transform_mode: Whether to bake object transforms into vertices
        """
        self.session = ExportSession(
            transform_mode=transform_mode,
            floating_point_precision=floating_point_precision,
        )

    @property
    def floating_point_precision(self) -> int:
        return self.session.floating_point_precision

    @floating_point_precision.setter
    def floating_point_precision(self, value: int):
        self.session.floating_point_precision = check_precision(value)

    @property
    def transform_mode(self) -> TransformMode:
        return self.session.transform_mode

    @transform_mode.setter
    def transform_mode(self, value: TransformMode):
        self.session.transform_mode = TransformMode(value)

    def add(self, mesh: ExportableMesh) -> "OBJExporter":
        """
        Queue a mesh for export.

        Returns:
            self for method chaining
        """
        self.session.add(mesh)
        return self

    def clear(self):
        """Forget all queued meshes."""
        self.session.clear()

    def render_text(self) -> str:
        """Render queued meshes to OBJ text."""
        return render_obj(self.session)

    def export(self, output_path: Union[str, Path]) -> Path:
        """
        Export queued meshes to a file.

        Args:
            output_path: Output file path (.obj)

        Returns:
            Path of the written file
        """
        return export_obj(self.session, output_path)
