"""
Тести для pipeline генерації стін шару
"""
import asyncio

import pytest

from services.layer_generation import generate_layer_sides
from services.tile_map import TileLayer, TileMap


@pytest.fixture
def tile_map(map_document, fake_loader):
    return asyncio.run(TileMap(fake_loader).load_map(map_document))


class TestGenerateLayerSides:
    """Тести для layer_generation.py"""

    def test_ring_layer(self, tile_map):
        buffers = generate_layer_sides(tile_map, tile_map.layers[0])
        assert buffers.quad_count == 8
        assert buffers.vertex_count == 16
        assert len(buffers.indices) == 96
        assert buffers.offset_y == 0.0
        # стіна від підлоги вниз на heightOffset2 = 2 тайли
        assert set(buffers.positions[1::3]) == {0.0, -2.0}

    def test_upper_layer_offset(self, tile_map):
        buffers = generate_layer_sides(tile_map, tile_map.layers[1])
        assert buffers.quad_count == 4
        assert buffers.offset_y == 2.0

    def test_computed_normals(self, tile_map):
        buffers = generate_layer_sides(tile_map, tile_map.layers[0], normals="computed")
        assert len(buffers.normals) == len(buffers.positions)
        assert buffers.normals != [0.0, 1.0, 0.0] * buffers.vertex_count

    def test_unknown_normals_mode(self, tile_map):
        with pytest.raises(ValueError):
            generate_layer_sides(tile_map, tile_map.layers[0], normals="flat")

    def test_empty_layer(self, tile_map):
        layer = TileLayer({"level": 1, "width": 2, "height": 2, "tilesetName": "x", "data": [[0, 0], [0, 0]]})
        buffers = generate_layer_sides(tile_map, layer)
        assert buffers.positions == []
        assert buffers.indices == []
        assert buffers.offset_y == 2.0

    def test_multiple_regions_merged(self, tile_map):
        layer = TileLayer({"level": 0, "width": 3, "height": 1, "tilesetName": "x", "data": [[1, 0, 1]]})
        buffers = generate_layer_sides(tile_map, layer)
        assert buffers.quad_count == 8
        assert buffers.vertex_count == 16
        assert max(buffers.indices) == 15
