"""
Генерація бокових стін (sides) для tile layer.

Кожне ребро кожного boundary loop (зовнішнього та дірок) перетворюється на вертикальний quad
від підлоги шару вниз на heightOffset2 - до підлоги нижчого рівня.
Вершини зварюються за точною рівністю координат, кожен quad двосторонній (front + mirrored back).

Конвенція локальних координат: y - вертикаль, y == 0 - підлога шару (сам меш ставиться
на heightOffset через MeshBuffers.offset_y), z = -row, тобто z лежить у [-height, 0].
"""
from typing import Dict, List, NamedTuple, Optional, Sequence, Tuple

import numpy as np
import trimesh

from services import config
from services.level_offset import LevelOffsetResolver
from services.tile_map import SimpleTileLayer


class GeometryError(ValueError):
    """Невалідна вхідна геометрія (лише strict mode) або координати поза діапазоном hash-ключа"""


class Point3(NamedTuple):
    x: float
    y: float
    z: float


class UV(NamedTuple):
    u: float
    v: float


class Quad(NamedTuple):
    v1: Point3
    v2: Point3
    v3: Point3
    v4: Point3


# Межа, в якій p3_hash не дає колізій: |x|, |z| < 10000 тайлів, |y| < 10000
HASH_RANGE = 10000.0

UP_NORMAL = (0.0, 1.0, 0.0)


def p3_hash(p: Point3) -> float:
    """Числовий spatial hash вершини: x*1e8 + y*1e4 + z"""
    return p.x * 100000000 + p.y * 10000 + p.z


def p3_key(p: Point3) -> Tuple[float, float, float]:
    return (p.x, p.y, p.z)


def check_hash_range(p: Point3) -> None:
    if abs(p.x) >= HASH_RANGE or abs(p.y) >= HASH_RANGE or abs(p.z) >= HASH_RANGE:
        raise GeometryError(f"Вершина {tuple(p)} поза діапазоном p3_hash (<{HASH_RANGE:g})")


def make_quads(path: Sequence[Point3], holes: Sequence[Sequence[Point3]], height: float) -> List[Quad]:
    """
    Один quad на кожне ребро curr -> next (останнє ребро замикається на вершину 0).
    Орієнтація граней визначається обходом loop, тут нічого не переорієнтовується.
    """
    groups = [path, *holes]
    quads: List[Quad] = []

    for vertices in groups:
        n = len(vertices)
        for i in range(n):
            curr = vertices[i]
            nxt = vertices[(i + 1) % n]
            quads.append(Quad(
                v1=Point3(curr[0], curr[1], curr[2]),
                v2=Point3(curr[0], curr[1] + height, curr[2]),
                v3=Point3(nxt[0], nxt[1] + height, nxt[2]),
                v4=Point3(nxt[0], nxt[1], nxt[2]),
            ))
    return quads


def validate_loops(path: Sequence[Point3], holes: Sequence[Sequence[Point3]]) -> None:
    """
    Strict перевірка boundary loops.

    Raises:
        GeometryError: порожній outer loop, loop з < 3 вершин, нескінченні координати
    """
    if not path:
        raise GeometryError("Порожній зовнішній loop")
    for index, loop in enumerate([path, *holes]):
        if len(loop) < 3:
            raise GeometryError(f"Loop {index}: {len(loop)} вершин, потрібно щонайменше 3")
        coords = np.asarray([tuple(p) for p in loop], dtype=float)
        if coords.shape[1] != 3 or not np.all(np.isfinite(coords)):
            raise GeometryError(f"Loop {index}: невалідні координати")


class MeshBuffers:
    """
    Плоскі буфери меша, renderer-agnostic:
    positions/normals - xyz підряд, uvs - uv підряд, indices - трикутники.
    offset_y - висота підлоги шару (куди рендерер ставить меш).
    """

    def __init__(
        self,
        positions: List[float],
        indices: List[int],
        uvs: List[float],
        normals: List[float],
        offset_y: float = 0.0,
        quad_count: int = 0,
    ):
        self.positions = positions
        self.indices = indices
        self.uvs = uvs
        self.normals = normals
        self.offset_y = offset_y
        self.quad_count = quad_count

    @property
    def vertex_count(self) -> int:
        return len(self.positions) // 3

    def to_dict(self) -> Dict[str, object]:
        return {
            "positions": self.positions,
            "indices": self.indices,
            "normals": self.normals,
            "uvs": self.uvs,
            "offsetY": self.offset_y,
            "quadCount": self.quad_count,
        }

    def to_trimesh(self) -> trimesh.Trimesh:
        """
        Trimesh без process (інакше trimesh сам зварить/перевпорядкує вершини).
        Меш зсунуто на offset_y.
        """
        vertices = np.asarray(self.positions, dtype=float).reshape(-1, 3)
        vertices = vertices + np.array([0.0, self.offset_y, 0.0])
        faces = np.asarray(self.indices, dtype=np.int64).reshape(-1, 3)
        uv = np.asarray(self.uvs, dtype=float).reshape(-1, 2)
        mesh = trimesh.Trimesh(
            vertices=vertices,
            faces=faces,
            vertex_normals=np.asarray(self.normals, dtype=float).reshape(-1, 3),
            visual=trimesh.visual.TextureVisuals(uv=uv),
            process=False,
        )
        return mesh


def compute_normals(buffers: MeshBuffers) -> List[float]:
    """
    Згладжені нормалі: cross products трикутників, усереднені по зварених вершинах.

    Беремо лише front-трикутники (перші 6 індексів з кожних 12): back-трикутники
    дзеркальні, і з ними сума нормалей у кожній вершині була б нулем.
    """
    if not buffers.indices:
        return []
    vertices = np.asarray(buffers.positions, dtype=float).reshape(-1, 3)
    per_quad = np.asarray(buffers.indices, dtype=np.int64).reshape(-1, 12)
    front = per_quad[:, :6].reshape(-1, 3)

    mesh = trimesh.Trimesh(vertices=vertices, faces=front, process=False)
    normals = np.asarray(mesh.vertex_normals, dtype=float)
    return normals.reshape(-1).tolist()


def apply_computed_normals(buffers: MeshBuffers) -> MeshBuffers:
    """Opt-in post-process: замінює up-vector нормалі на обчислені"""
    buffers.normals = compute_normals(buffers)
    return buffers


class SideMeshGenerator:
    """
    Stateful лише в межах одного generate(): буфери створюються на кожен виклик,
    тому окремі екземпляри можна ганяти паралельно.
    """

    def __init__(
        self,
        offsets: LevelOffsetResolver,
        master_level: int = 0,
        tile_size: Optional[int] = None,
        uv_key: Optional[str] = None,
        strict: Optional[bool] = None,
    ):
        self.offsets = offsets
        self.master_level = int(master_level)
        self.tile_size = int(tile_size or config.TILE_SIZE)
        self.uv_key = (uv_key or config.SIDE_MESH_UV_KEY).lower()
        if self.uv_key not in ("tuple", "hash"):
            raise ValueError(f"Невідомий uv_key: {self.uv_key}")
        self.strict = config.SIDE_MESH_STRICT if strict is None else bool(strict)

        self.width = 0
        self.height = 0
        self.level = -1
        self.height_offset = 0.0
        self.height_offset2 = 0.0

    def generate(
        self,
        path: Sequence[Point3],
        holes: Sequence[Sequence[Point3]],
        level: int,
        simple_tile_layer: SimpleTileLayer,
    ) -> MeshBuffers:
        if self.strict:
            validate_loops(path, holes)

        self.height_offset, self.height_offset2 = self.offsets.height_offsets(level)

        self.width = simple_tile_layer.width
        self.height = simple_tile_layer.height - simple_tile_layer.extended_bottom

        self.level = int(level)

        if self.strict and (self.width <= 0 or self.height <= 0):
            raise GeometryError(f"Невалідні розміри шару для UV: {self.width}x{self.height}")

        quads = make_quads(path, holes, -self.height_offset2)

        positions: List[Point3] = []
        position_index: Dict[Tuple[float, float, float], int] = {}
        indices: List[int] = []
        uvs: Dict[object, UV] = {}

        for quad in quads:
            self.process_quad(quad, positions, position_index, indices, uvs)

        flat_positions: List[float] = []
        for p in positions:
            flat_positions.extend((p.x, p.y, p.z))

        # UV впорядковані як positions: ключ вставляється в dict разом з новою вершиною
        flat_uvs: List[float] = []
        for uv in uvs.values():
            flat_uvs.extend((uv.u, uv.v))

        normals = list(UP_NORMAL) * len(positions)

        print(
            f"[DEBUG] Sides level={self.level}: {len(quads)} quads, "
            f"{len(positions)} вершин, {len(indices)} індексів"
        )
        return MeshBuffers(
            positions=flat_positions,
            indices=indices,
            uvs=flat_uvs,
            normals=normals,
            offset_y=self.height_offset,
            quad_count=len(quads),
        )

    def process_quad(
        self,
        quad: Quad,
        positions: List[Point3],
        position_index: Dict[Tuple[float, float, float], int],
        indices: List[int],
        uvs: Dict[object, UV],
    ) -> None:
        vertex = [self.find_pos_index(v, positions, position_index) for v in quad]

        indices.extend((
            vertex[0], vertex[1], vertex[2],
            vertex[2], vertex[3], vertex[0],

            # backside
            vertex[2], vertex[1], vertex[0],
            vertex[0], vertex[3], vertex[2],
        ))

        for v in quad:
            uvs[self.uv_map_key(v)] = self.get_uv_from_vertex(v)

    def uv_map_key(self, v: Point3):
        if self.uv_key == "hash":
            check_hash_range(v)
            return p3_hash(v)
        return p3_key(v)

    def get_uv_from_vertex(self, vertex: Point3) -> UV:
        u = vertex.x
        v = self.height_offset2 if vertex.y == 0 else 0
        v += vertex.z
        v += self.height
        if self.level < self.master_level:
            v += self.offsets.offset(self.level) - self.offsets.offset(self.master_level)
        u /= self.width
        v /= self.height

        # 1 pixel offset
        v -= 1 / (self.height * self.tile_size)
        return UV(u, v)

    @staticmethod
    def find_pos_index(
        pos: Point3,
        positions: List[Point3],
        position_index: Dict[Tuple[float, float, float], int],
    ) -> int:
        key = p3_key(pos)
        index = position_index.get(key)
        if index is None:
            positions.append(pos)
            index = len(positions) - 1
            position_index[key] = index
        return index


def merge_buffers(parts: Sequence[MeshBuffers]) -> MeshBuffers:
    """
    Об'єднує буфери кількох регіонів одного шару: індекси зсуваються на кількість
    вершин попередніх частин, вершини між регіонами НЕ зварюються.
    """
    positions: List[float] = []
    indices: List[int] = []
    uvs: List[float] = []
    normals: List[float] = []
    quad_count = 0
    offset_y = parts[0].offset_y if parts else 0.0

    for part in parts:
        base = len(positions) // 3
        positions.extend(part.positions)
        indices.extend(i + base for i in part.indices)
        uvs.extend(part.uvs)
        normals.extend(part.normals)
        quad_count += part.quad_count

    return MeshBuffers(positions, indices, uvs, normals, offset_y=offset_y, quad_count=quad_count)
