"""
Тести для витягування меж суцільних регіонів
"""
import numpy as np

from services.boundary_extractor import extract_boundaries, ring_to_loop
from services.side_mesh_generator import Point3


def signed_area_xz(loop):
    total = 0.0
    for i, p in enumerate(loop):
        q = loop[(i + 1) % len(loop)]
        total += p.x * q.z - q.x * p.z
    return total / 2.0


class TestExtractBoundaries:
    """Тести для boundary_extractor.py"""

    def test_empty_mask(self):
        assert extract_boundaries(np.zeros((3, 3), dtype=bool)) == []

    def test_block_without_collinear_vertices(self):
        regions = extract_boundaries(np.ones((2, 2), dtype=bool))
        assert len(regions) == 1
        outer, holes = regions[0]
        assert holes == []
        assert set(outer) == {Point3(0, 0, 0), Point3(2, 0, 0), Point3(2, 0, -2), Point3(0, 0, -2)}

    def test_no_negative_zero(self):
        outer = extract_boundaries(np.ones((1, 1), dtype=bool))[0].outer
        for p in outer:
            assert str(p.z) != "-0.0"

    def test_ring_has_hole(self):
        mask = np.array([[1, 1, 1], [1, 0, 1], [1, 1, 1]], dtype=bool)
        regions = extract_boundaries(mask)
        assert len(regions) == 1
        outer, holes = regions[0]
        assert len(outer) == 4
        assert len(holes) == 1
        assert set(holes[0]) == {Point3(1, 0, -1), Point3(2, 0, -1), Point3(2, 0, -2), Point3(1, 0, -2)}

    def test_hole_wound_opposite_to_outer(self):
        mask = np.array([[1, 1, 1], [1, 0, 1], [1, 1, 1]], dtype=bool)
        outer, holes = extract_boundaries(mask)[0]
        assert signed_area_xz(outer) * signed_area_xz(holes[0]) < 0

    def test_l_shape(self):
        mask = np.array([[1, 0], [1, 1]], dtype=bool)
        outer, holes = extract_boundaries(mask)[0]
        assert len(outer) == 6
        assert holes == []

    def test_separate_regions_sorted(self):
        mask = np.array([[0, 0, 1], [0, 0, 0], [1, 0, 0]], dtype=bool)
        regions = extract_boundaries(mask)
        assert len(regions) == 2
        # спершу регіон з меншим row
        assert min(-p.z for p in regions[0].outer) == 0
        assert min(-p.z for p in regions[1].outer) == 2

    def test_floor(self):
        outer = extract_boundaries(np.ones((1, 1), dtype=bool), floor=3.0)[0].outer
        assert {p.y for p in outer} == {3.0}

    def test_ring_to_loop_drops_closing_and_collinear(self):
        coords = [(0, 0), (1, 0), (2, 0), (2, 1), (0, 1), (0, 0)]
        loop = ring_to_loop(coords)
        assert loop == [Point3(0, 0, 0), Point3(2, 0, 0), Point3(2, 0, -1), Point3(0, 0, -1)]
