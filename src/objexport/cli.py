"""
Command-Line Interface for OBJ Exporter

Usage:
    objexport scene.json
    objexport scene.json -o build/model.obj --precision 6
    objexport scene.json --no-transform --stdout

"""

import argparse
import logging
import sys
from pathlib import Path
from typing import List, Optional
import time

from . import __version__
from .mesh import TransformMode
from .scene import load_scene
from .exporters import export_obj, render_obj


def create_parser() -> argparse.ArgumentParser:
    """Create the argument parser."""
    parser = argparse.ArgumentParser(
        prog="objexport",
        description="OBJ Exporter - Merge mesh snapshots into a Wavefront OBJ file",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  objexport scene.json
      Write scene.obj next to the scene file

  objexport scene.json -o out/level.obj --precision 6
      Six digits after the decimal point

  objexport scene.json --no-transform --stdout
      Print object-local geometry instead of writing a file

Scene files are JSON documents with an "objects" list; each object has
name, positions, triangles and optional uvs, normals, translation,
rotation (x, y, z, w), scale or a 4x4 matrix.
        """
    )

    parser.add_argument(
        "scene",
        help="Input scene snapshot (.json)"
    )

    parser.add_argument(
        "-o", "--output",
        help="Output file path (.obj is enforced; default: scene path with .obj)"
    )

    parser.add_argument(
        "-p", "--precision",
        type=int,
        help="Digits after the decimal point (default: scene setting or 4)"
    )

    parser.add_argument(
        "--no-transform",
        action="store_true",
        help="Export object-local coordinates without applying transforms"
    )

    parser.add_argument(
        "--stdout",
        action="store_true",
        help="Print the OBJ text instead of writing a file"
    )

    parser.add_argument(
        "--stats",
        action="store_true",
        help="Print object, vertex and triangle counts"
    )

    parser.add_argument(
        "-v", "--verbose",
        action="count",
        default=0,
        help="Verbose output (repeat for debug logging)"
    )

    parser.add_argument(
        "--version",
        action="version",
        version=f"%(prog)s {__version__}"
    )

    return parser


def configure_logging(verbosity: int):
    """Route library logging to stderr according to -v count."""
    if verbosity <= 0:
        return
    level = logging.DEBUG if verbosity > 1 else logging.INFO
    logging.basicConfig(level=level, format="%(levelname)s %(name)s: %(message)s")


def main(argv: Optional[List[str]] = None) -> int:
    """Main entry point."""
    parser = create_parser()
    args = parser.parse_args(argv)
    configure_logging(args.verbose)

    scene_path = Path(args.scene)
    if not scene_path.exists():
        print(f"Error: Scene file not found: {scene_path}", file=sys.stderr)
        return 1

    if args.precision is not None and args.precision < 0:
        print("Error: --precision must be non-negative", file=sys.stderr)
        return 1

    start_time = time.time()

    try:
        session = load_scene(
            scene_path,
            transform_mode=TransformMode.NO_TRANSFORM if args.no_transform else None,
            precision=args.precision,
        )

        if args.stats:
            # Keep stdout clean when it carries the OBJ text
            stream = sys.stderr if args.stdout else sys.stdout
            print("Scene Statistics:", file=stream)
            print(f"  Objects: {len(session)}", file=stream)
            print(f"  Vertices: {session.vertex_count}", file=stream)
            print(f"  Triangles: {session.triangle_count}", file=stream)

        if args.stdout:
            sys.stdout.write(render_obj(session))
            return 0

        output_path = Path(args.output) if args.output else scene_path.with_suffix(".obj")
        output_path = export_obj(session, output_path)

        print(f"Exported: {output_path}")
        if args.verbose:
            elapsed = time.time() - start_time
            print(f"Completed in {elapsed:.2f}s")

        return 0

    except Exception as e:
        print(f"Error: {e}", file=sys.stderr)
        if args.verbose:
            import traceback
            traceback.print_exc()
        return 1


if __name__ == "__main__":
    sys.exit(main())
