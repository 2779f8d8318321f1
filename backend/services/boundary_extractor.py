"""
Витягування меж суцільних регіонів tile layer у вигляді замкнених loops.

Суцільні тайли об'єднуються через shapely (unary_union), далі кожен polygon
орієнтується (orient sign=1.0: exterior CCW, дірки CW у координатах (col, row))
і переводиться в Point3(x=col, y=floor, z=-row).
Після віддзеркалення z = -row обхід у площині x-z змінюється на протилежний,
але зовнішній контур і дірки все одно завжди обходяться в різні боки.
"""
from typing import List, NamedTuple, Sequence, Tuple

import numpy as np
from shapely.geometry import MultiPolygon, Polygon, box
from shapely.geometry.polygon import orient
from shapely.ops import unary_union

from services.side_mesh_generator import Point3


class BoundaryRegion(NamedTuple):
    outer: List[Point3]
    holes: List[List[Point3]]


def _row_runs(mask: np.ndarray) -> List[Polygon]:
    """Прямокутники по горизонтальних серіях суцільних тайлів (менше геометрій для union)"""
    cells = []
    for row in range(mask.shape[0]):
        cols = np.flatnonzero(mask[row])
        if cols.size == 0:
            continue
        # межі серій: там, де наступна колонка не сусідня
        breaks = np.flatnonzero(np.diff(cols) != 1)
        starts = np.concatenate(([cols[0]], cols[breaks + 1]))
        ends = np.concatenate((cols[breaks], [cols[-1]]))
        for start, end in zip(starts, ends):
            cells.append(box(float(start), float(row), float(end + 1), float(row + 1)))
    return cells


def _drop_collinear(points: Sequence[Tuple[float, float]]) -> List[Tuple[float, float]]:
    """Прибирає дублікати підряд і вершини посеред прямих ребер (цикл замкнений)"""
    deduped = []
    for p in points:
        if not deduped or deduped[-1] != p:
            deduped.append(p)
    if len(deduped) > 1 and deduped[0] == deduped[-1]:
        deduped.pop()

    n = len(deduped)
    if n <= 3:
        return deduped

    kept = []
    for i in range(n):
        px, py = deduped[i - 1]
        cx, cy = deduped[i]
        nx, ny = deduped[(i + 1) % n]
        cross = (cx - px) * (ny - cy) - (cy - py) * (nx - cx)
        if cross != 0:
            kept.append(deduped[i])
    return kept


def _flip(row: float) -> float:
    # 0.0 - row, а не -row: інакше рядок 0 дає -0.0
    return 0.0 - float(row)


def ring_to_loop(coords, floor: float = 0.0) -> List[Point3]:
    points = [(float(c[0]), float(c[1])) for c in coords]
    return [Point3(x, float(floor), _flip(row)) for x, row in _drop_collinear(points)]


def extract_boundaries(mask, floor: float = 0.0) -> List[BoundaryRegion]:
    """
    Args:
        mask: 2D bool масив (rows, cols), True - суцільний тайл
        floor: y для всіх вершин (0 - локальна підлога шару)

    Returns:
        Список регіонів (outer + holes), впорядкований за (min row, min col)
    """
    mask = np.asarray(mask, dtype=bool)
    if mask.ndim != 2 or not mask.any():
        return []

    merged = unary_union(_row_runs(mask))
    if isinstance(merged, Polygon):
        polygons = [merged]
    elif isinstance(merged, MultiPolygon):
        polygons = list(merged.geoms)
    else:
        polygons = [g for g in getattr(merged, "geoms", []) if isinstance(g, Polygon)]

    polygons.sort(key=lambda p: (p.bounds[1], p.bounds[0]))

    regions = []
    for poly in polygons:
        if poly.is_empty:
            continue
        poly = orient(poly, sign=1.0)
        outer = ring_to_loop(poly.exterior.coords, floor)
        holes = [ring_to_loop(ring.coords, floor) for ring in poly.interiors]
        regions.append(BoundaryRegion(outer, holes))
    return regions
