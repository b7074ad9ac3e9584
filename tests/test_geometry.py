# tests/test_geometry.py
"""Geometry value types and the in-plane projection helper."""

import numpy as np
import pytest

from femcore import Edge3, Face3, Point3, Vector3
from femcore.geometry import plane_coordinates


class TestVectors:

    def test_arithmetic(self):
        a, b = Vector3(1, 2, 3), Vector3(4, 5, 6)
        assert a + b == Vector3(5, 7, 9)
        assert 2 * a == a * 2 == Vector3(2, 4, 6)
        assert a.dot(b) == 32
        assert a.cross(b) == Vector3(-3, 6, -3)
        assert Vector3(3, 4, 0).norm() == 5.0

    def test_unit_of_zero_vector(self):
        with pytest.raises(ValueError):
            Vector3().unit()

    def test_points(self):
        p, q = Point3(1, 1, 1), Point3(4, 5, 1)
        assert q - p == Vector3(3, 4, 0)
        assert p + Vector3(1, 0, 0) == Point3(2, 1, 1)
        assert p.distance_to(q) == 5.0
        assert tuple(q) == (4, 5, 1)


class TestTopology:

    def test_edge(self):
        assert Edge3(3, 1).key() == Edge3(1, 3).key() == (1, 3)
        assert Edge3(3, 1).reversed() == Edge3(1, 3)
        with pytest.raises(ValueError):
            Edge3(2, 2)

    def test_faces(self):
        tri, quad = Face3(0, 1, 2), Face3(0, 1, 2, 3)
        assert not tri.is_quad and quad.is_quad
        assert tri.indices == (0, 1, 2)
        assert [e.key() for e in quad.edges()] == [(0, 1), (1, 2), (2, 3), (0, 3)]


class TestPlaneCoordinates:

    def test_xy_plane_is_untouched(self):
        pts = [Point3(0, 0, 5), Point3(2, 0, 5), Point3(2, 1, 5)]
        coords, basis = plane_coordinates(pts)
        np.testing.assert_array_equal(coords, [[0, 0], [2, 0], [2, 1]])
        np.testing.assert_array_equal(basis, [[1, 0, 0], [0, 1, 0]])

    def test_tilted_plane_preserves_distances(self):
        pts = [Point3(0, 0, 0), Point3(3, 0, 3), Point3(3, 2, 3), Point3(0, 2, 0)]
        coords, basis = plane_coordinates(pts)
        np.testing.assert_allclose(basis @ basis.T, np.eye(2), atol=1e-12)
        d3 = np.linalg.norm(pts[2].to_array() - pts[0].to_array())
        assert np.linalg.norm(coords[2] - coords[0]) == pytest.approx(d3)

    def test_not_coplanar(self):
        pts = [Point3(0, 0, 0), Point3(1, 0, 0), Point3(1, 1, 1), Point3(0, 1, 0)]
        with pytest.raises(ValueError):
            plane_coordinates(pts)
