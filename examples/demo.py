#!/usr/bin/env python3
"""
OBJ Exporter Demo Script

This script demonstrates the export pipeline by:
1. Building synthetic meshes (no scene or asset files needed)
2. Placing them with translation, rotation and scale
3. Exporting the merged scene with and without transforms
4. Printing statistics

Run with: python examples/demo.py
"""

import sys
from pathlib import Path
import numpy as np
import time

# Add src to path for development
sys.path.insert(0, str(Path(__file__).parent.parent / "src"))

from objexport import ExportableMesh, OBJExporter, TransformMode


def create_cube(name: str = "Cube", **transform) -> ExportableMesh:
    """
    Create a unit cube with per-face vertices.

    Returns:
        ExportableMesh with 24 vertices and 12 triangles
    """
    faces = [
        # (normal, four corners in counter-clockwise order seen from outside)
        ((0, 0, -1), [(0, 0, 0), (0, 1, 0), (1, 1, 0), (1, 0, 0)]),
        ((0, 0, 1), [(1, 0, 1), (1, 1, 1), (0, 1, 1), (0, 0, 1)]),
        ((-1, 0, 0), [(0, 0, 1), (0, 1, 1), (0, 1, 0), (0, 0, 0)]),
        ((1, 0, 0), [(1, 0, 0), (1, 1, 0), (1, 1, 1), (1, 0, 1)]),
        ((0, -1, 0), [(0, 0, 1), (0, 0, 0), (1, 0, 0), (1, 0, 1)]),
        ((0, 1, 0), [(0, 1, 0), (0, 1, 1), (1, 1, 1), (1, 1, 0)]),
    ]

    positions, normals, uvs, triangles = [], [], [], []
    for normal, corners in faces:
        base = len(positions)
        positions.extend(corners)
        normals.extend([normal] * 4)
        uvs.extend([(0, 0), (0, 1), (1, 1), (1, 0)])
        triangles.extend([base, base + 1, base + 2, base, base + 2, base + 3])

    # Center on the origin
    positions = np.array(positions, dtype=np.float64) - 0.5

    return ExportableMesh.from_trs(
        name, positions, triangles, uvs=uvs, normals=normals, **transform
    )


def create_grid(name: str = "Ground", size: int = 4) -> ExportableMesh:
    """
    Create a flat grid in the XZ plane without normals.

    Returns:
        ExportableMesh with (size + 1)^2 vertices
    """
    xs, zs = np.meshgrid(np.arange(size + 1), np.arange(size + 1))
    offset = size / 2
    positions = np.stack([xs.ravel() - offset, np.zeros(xs.size), zs.ravel() - offset], axis=1)
    uvs = np.stack([xs.ravel(), zs.ravel()], axis=1) / size

    triangles = []
    for row in range(size):
        for col in range(size):
            i = row * (size + 1) + col
            triangles.extend([i, i + size + 1, i + 1, i + 1, i + size + 1, i + size + 2])

    return ExportableMesh(name, positions, triangles, uvs=uvs)


def main():
    output_dir = Path(__file__).parent / "output"
    output_dir.mkdir(exist_ok=True)

    half = np.sqrt(0.5)
    meshes = [
        create_grid(),
        create_cube("Cube", translation=(0, 0.5, 0)),
        create_cube("Tilted", translation=(2, 1, 1), rotation=(0, half, 0, half), scale=(0.5, 1, 0.5)),
    ]

    for mode in TransformMode:
        exporter = OBJExporter(floating_point_precision=4, transform_mode=mode)
        for mesh in meshes:
            exporter.add(mesh)

        start = time.time()
        path = exporter.export(output_dir / f"scene_{mode.value}")
        elapsed = time.time() - start

        print(f"{mode.name}: {path}")
        print(f"  Objects: {len(exporter.session)}")
        print(f"  Vertices: {exporter.session.vertex_count}")
        print(f"  Triangles: {exporter.session.triangle_count}")
        print(f"  Size: {path.stat().st_size} bytes in {elapsed * 1000:.1f} ms")


if __name__ == "__main__":
    main()
