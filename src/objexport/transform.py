"""
Vertex Transformation for OBJ Export

Scene data arrives in a left-handed system (+X Right, +Y Up, +Z Forward).
OBJ consumers expect a right-handed one, so every exported position and
normal has its Z component negated as the last step. Flipping one axis also
flips triangle orientation, which the face writer compensates for by
reversing winding.

Under TransformMode.APPLY_TRANSFORM each vector is first pushed through the
object's 4x4 local-to-world matrix as a point (translation included) and
then multiplied component-wise by the object's scale.

Normals go through exactly the same rule as positions, translation and
scale included, and are not renormalised. This is not the inverse-transpose
a renderer would use.
"""

import numpy as np

from .mesh import ExportableMesh, TransformMode


# Z negation: left-handed (engine) to right-handed (OBJ)
LEFT_TO_RIGHT_HANDED = np.array([1.0, 1.0, -1.0])


def apply_affine(matrix: np.ndarray, points: np.ndarray) -> np.ndarray:
    """
    Transform points by a 4x4 affine matrix.

    Args:
        matrix: 4x4 transform (bottom row ignored)
        points: Array of shape (N, 3)

    Returns:
        Transformed points of shape (N, 3)
    """
    return points @ matrix[:3, :3].T + matrix[:3, 3]


def to_right_handed(vectors: np.ndarray) -> np.ndarray:
    """Convert (N, 3) vectors from left-handed to right-handed coordinates."""
    # Element-wise keeps the sign of zero (0.0 -> -0.0)
    return vectors * LEFT_TO_RIGHT_HANDED


def transform_vectors(
    vectors: np.ndarray,
    mesh: ExportableMesh,
    mode: TransformMode
) -> np.ndarray:
    """
    Apply the export transform to positions or normals of a mesh.

    Args:
        vectors: Array of shape (N, 3) in object-local space
        mesh: Mesh providing local_to_world and scale
        mode: Whether to bake the object transform

    Returns:
        New (N, 3) array in right-handed output space
    """
    result = np.asarray(vectors, dtype=np.float64).reshape(-1, 3)

    if mode == TransformMode.APPLY_TRANSFORM:
        result = apply_affine(mesh.local_to_world, result)
        result = result * mesh.scale

    return to_right_handed(result)
