"""
Pipeline одного шару: solid mask -> boundary loops -> side mesh кожного регіону -> один MeshBuffers.
"""
from typing import List, Optional

from services.boundary_extractor import extract_boundaries
from services.side_mesh_generator import (
    MeshBuffers,
    SideMeshGenerator,
    apply_computed_normals,
    merge_buffers,
)
from services.tile_map import TileLayer, TileMap

NORMAL_MODES = ("up", "computed")


def generate_layer_sides(
    tile_map: TileMap,
    layer: TileLayer,
    normals: str = "up",
    uv_key: Optional[str] = None,
    strict: Optional[bool] = None,
) -> MeshBuffers:
    """
    Генерує стіни для всіх суцільних регіонів шару.

    Args:
        normals: "up" - (0,1,0) на кожну вершину; "computed" - усереднені нормалі трикутників
    """
    if normals not in NORMAL_MODES:
        raise ValueError(f"Невідомий режим нормалей: {normals}")

    generator = SideMeshGenerator(
        tile_map.offsets,
        master_level=tile_map.masterLevel,
        uv_key=uv_key,
        strict=strict,
    )
    simple_layer = layer.simple()

    parts: List[MeshBuffers] = []
    for region in extract_boundaries(layer.solid_mask()):
        parts.append(generator.generate(region.outer, region.holes, layer.level, simple_layer))

    if not parts:
        height_offset, _ = tile_map.offsets.height_offsets(layer.level)
        return MeshBuffers([], [], [], [], offset_y=height_offset)

    buffers = merge_buffers(parts)
    if normals == "computed":
        apply_computed_normals(buffers)

    print(f"[INFO] Шар {layer.details.get('name')!r}: {len(parts)} регіонів, {buffers.quad_count} quads")
    return buffers
