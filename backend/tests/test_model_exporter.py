"""
Тести для сервісу експорту мешів
"""
import pytest
import trimesh

from services.level_offset import LevelOffsetResolver
from services.model_exporter import export_layer_meshes
from services.side_mesh_generator import MeshBuffers, Point3, SideMeshGenerator
from services.tile_map import SimpleTileLayer

SQUARE = [Point3(0, 0, 0), Point3(1, 0, 0), Point3(1, 0, 1), Point3(0, 0, 1)]


@pytest.fixture
def square_buffers():
    generator = SideMeshGenerator(LevelOffsetResolver([{"height": 0}, {"height": 16}], tile_size=16), tile_size=16)
    return generator.generate(SQUARE, [], 0, SimpleTileLayer(4, 4))


class TestModelExporter:
    """Тести для model_exporter.py"""

    def test_export_stl(self, output_dir, square_buffers):
        """Тест експорту у STL"""
        output_file = output_dir / "sides.stl"
        export_layer_meshes([("ground", square_buffers)], str(output_file), format="stl")

        assert output_file.exists()
        assert output_file.stat().st_size > 0
        mesh = trimesh.load(str(output_file), force="mesh")
        assert len(mesh.faces) > 0

    def test_export_glb(self, output_dir, square_buffers):
        """Тест експорту у GLB"""
        output_file = output_dir / "sides.glb"
        export_layer_meshes([("ground", square_buffers)], str(output_file), format="glb")
        assert output_file.exists()
        assert output_file.stat().st_size > 0

    def test_export_multiple_layers(self, output_dir, square_buffers):
        """Тест експорту кількох шарів"""
        output_file = output_dir / "multi.glb"
        export_layer_meshes(
            [("ground", square_buffers), ("upper", square_buffers)],
            str(output_file),
            format="glb",
        )
        assert output_file.exists()

    def test_skips_empty_layers(self, output_dir, square_buffers):
        output_file = output_dir / "skip.stl"
        empty = MeshBuffers([], [], [], [])
        export_layer_meshes([("empty", empty), ("ground", square_buffers)], str(output_file), format="stl")
        assert output_file.exists()

    def test_export_empty(self, output_dir):
        """Тест експорту порожньої сцени"""
        output_file = output_dir / "empty.stl"
        with pytest.raises(ValueError):
            export_layer_meshes([("empty", MeshBuffers([], [], [], []))], str(output_file), format="stl")

    def test_unknown_format(self, output_dir, square_buffers):
        with pytest.raises(ValueError):
            export_layer_meshes([("ground", square_buffers)], str(output_dir / "x.3mf"), format="3mf")
