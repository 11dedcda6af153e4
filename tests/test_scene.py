"""
Tests for scene snapshot loading and the command-line interface.
"""

import io
import json
import sys
import tempfile
from contextlib import redirect_stderr, redirect_stdout
from pathlib import Path
import numpy as np
import unittest

# Add src to path
sys.path.insert(0, str(Path(__file__).parent.parent / "src"))

from objexport import MalformedMesh, TransformMode, load_scene, session_from_dict
from objexport.cli import main
from objexport.scene import mesh_from_dict


TRIANGLE = {
    "name": "Triangle",
    "positions": [[0, 0, 0], [1, 0, 0], [0, 1, 0]],
    "uvs": [[0, 0], [1, 0], [0, 1]],
    "normals": [[0, 0, 1], [0, 0, 1], [0, 0, 1]],
    "triangles": [0, 1, 2],
}


def scene_document(**settings):
    doc = {"objects": [dict(TRIANGLE), dict(TRIANGLE, name="Moved", translation=[0, 0, 5])]}
    doc.update(settings)
    return doc


class TestSceneLoading(unittest.TestCase):
    """Tests for turning scene documents into sessions."""

    def test_session_from_dict(self):
        """Test objects and default settings are read."""
        session = session_from_dict(scene_document())
        assert [obj.name for obj in session.objects] == ["Triangle", "Moved"]
        assert session.transform_mode == TransformMode.APPLY_TRANSFORM
        assert session.floating_point_precision == 4

    def test_document_settings(self):
        """Test settings stored in the document are honoured."""
        session = session_from_dict(scene_document(transform_mode="none", precision=2))
        assert session.transform_mode == TransformMode.NO_TRANSFORM
        assert session.floating_point_precision == 2

    def test_overrides(self):
        """Test explicit arguments beat document settings."""
        session = session_from_dict(
            scene_document(precision=2), transform_mode=TransformMode.NO_TRANSFORM, precision=6
        )
        assert session.transform_mode == TransformMode.NO_TRANSFORM
        assert session.floating_point_precision == 6

    def test_trs_fields(self):
        """Test translation is built into the matrix."""
        mesh = mesh_from_dict(dict(TRIANGLE, translation=[1, 2, 3], scale=[2, 2, 2]))
        assert np.allclose(mesh.local_to_world[:3, 3], [1, 2, 3])
        assert np.allclose(mesh.scale, [2, 2, 2])

    def test_matrix_field(self):
        """Test an explicit matrix is used as given."""
        matrix = np.eye(4)
        matrix[:3, 3] = [4, 5, 6]
        mesh = mesh_from_dict(dict(TRIANGLE, matrix=matrix.tolist()))
        assert np.allclose(mesh.local_to_world, matrix)
        assert np.allclose(mesh.scale, [1, 1, 1])

    def test_nested_triangles(self):
        """Test triangles may be given as index triples."""
        mesh = mesh_from_dict(dict(TRIANGLE, triangles=[[0, 1, 2]]))
        assert mesh.triangle_count == 1

    def test_optional_channels(self):
        """Test UVs and normals may be omitted."""
        entry = {k: v for k, v in TRIANGLE.items() if k not in ("uvs", "normals")}
        mesh = mesh_from_dict(entry)
        assert not mesh.has_uvs
        assert not mesh.has_normals

    def test_missing_field(self):
        """Test a missing required field is reported."""
        entry = {k: v for k, v in TRIANGLE.items() if k != "positions"}
        with self.assertRaises(MalformedMesh):
            mesh_from_dict(entry)

    def test_ragged_positions(self):
        """Test inconsistent vectors are reported as malformed."""
        with self.assertRaises(MalformedMesh):
            mesh_from_dict(dict(TRIANGLE, positions=[[0, 0, 0], [1, 0], [0, 1, 0]]))

    def test_ragged_triangles(self):
        """Test inconsistent index triples are reported as malformed."""
        with self.assertRaises(MalformedMesh):
            session_from_dict({"objects": [dict(TRIANGLE, triangles=[[0, 1, 2], [0, 1]])]})

    def test_name_with_line_break(self):
        """Test scene names cannot inject OBJ statements."""
        with self.assertRaises(MalformedMesh):
            session_from_dict({"objects": [dict(TRIANGLE, name="A\nf 9 9 9")]})

    def test_float_indices(self):
        """Test fractional indices are rejected."""
        with self.assertRaises(MalformedMesh):
            mesh_from_dict(dict(TRIANGLE, triangles=[0, 1.5, 2]))

    def test_missing_objects(self):
        """Test documents need an objects list."""
        with self.assertRaises(MalformedMesh):
            session_from_dict({"meshes": []})

    def test_load_scene(self):
        """Test loading from a JSON file."""
        with tempfile.TemporaryDirectory() as tmp:
            path = Path(tmp) / "scene.json"
            path.write_text(json.dumps(scene_document()), encoding="utf-8")
            session = load_scene(path)
            assert len(session) == 2

    def test_load_missing_file(self):
        """Test a missing scene raises FileNotFoundError."""
        with self.assertRaises(FileNotFoundError):
            load_scene("/nonexistent/scene.json")

    def test_load_invalid_json(self):
        """Test broken JSON is reported as malformed."""
        with tempfile.TemporaryDirectory() as tmp:
            path = Path(tmp) / "scene.json"
            path.write_text("{not json", encoding="utf-8")
            with self.assertRaises(MalformedMesh):
                load_scene(path)


class TestCLI(unittest.TestCase):
    """Tests for the objexport command."""

    def setUp(self):
        self._tmp = tempfile.TemporaryDirectory()
        self.tmp = Path(self._tmp.name)
        self.scene = self.tmp / "scene.json"
        self.scene.write_text(json.dumps(scene_document()), encoding="utf-8")

    def tearDown(self):
        self._tmp.cleanup()

    def run_cli(self, *argv):
        out, err = io.StringIO(), io.StringIO()
        with redirect_stdout(out), redirect_stderr(err):
            code = main(list(argv))
        return code, out.getvalue(), err.getvalue()

    def test_default_output(self):
        """Test the OBJ is written next to the scene."""
        code, out, _ = self.run_cli(str(self.scene))
        assert code == 0
        assert (self.tmp / "scene.obj").exists()
        assert "Exported:" in out

    def test_explicit_output(self):
        """Test -o with a foreign extension."""
        code, _, _ = self.run_cli(str(self.scene), "-o", str(self.tmp / "out.txt"))
        assert code == 0
        text = (self.tmp / "out.obj").read_text(encoding="utf-8")
        assert "o Triangle" in text
        assert "o Moved" in text

    def test_stdout(self):
        """Test --stdout prints OBJ text instead of writing."""
        code, out, _ = self.run_cli(str(self.scene), "--stdout", "--no-transform", "-p", "2")
        assert code == 0
        assert out.startswith("#.obj created with objexport\n")
        assert "v 1.00 0.00 -0.00" in out.splitlines()
        assert "f 6/6/6 5/5/5 4/4/4" in out.splitlines()
        assert not (self.tmp / "scene.obj").exists()

    def test_transform_applied_by_default(self):
        """Test the second object's translation shows up in the output."""
        code, out, _ = self.run_cli(str(self.scene), "--stdout")
        assert code == 0
        assert "v 0.0000 0.0000 -5.0000" in out.splitlines()

    def test_stats(self):
        """Test --stats prints counts."""
        code, out, _ = self.run_cli(str(self.scene), "--stats")
        assert code == 0
        assert "Objects: 2" in out
        assert "Vertices: 6" in out
        assert "Triangles: 2" in out

    def test_missing_scene(self):
        """Test a missing scene file fails."""
        code, _, err = self.run_cli(str(self.tmp / "nope.json"))
        assert code == 1
        assert "not found" in err

    def test_missing_output_directory(self):
        """Test an invalid destination fails with an error message."""
        code, _, err = self.run_cli(str(self.scene), "-o", str(self.tmp / "no" / "out.obj"))
        assert code == 1
        assert "does not exist" in err

    def test_negative_precision(self):
        """Test negative precision is refused."""
        code, _, err = self.run_cli(str(self.scene), "-p", "-1")
        assert code == 1
        assert "precision" in err


if __name__ == "__main__":
    unittest.main(verbosity=2)
