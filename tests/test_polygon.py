import math
import unittest
from unittest import mock

import numpy as np

import meshgeom.polygon as polygon_mod
from meshgeom.errors import DegenerateGeometryError, NonConvexPolygonError
from meshgeom.geometry import Point
from meshgeom.pointset import PointSet
from meshgeom.polygon import Polygon, reorder, reorder_indices

UNIT_SQUARE_CW = [(0, 0, 0), (0, 1, 0), (1, 1, 0), (1, 0, 0)]


def _hexagon():
    return [Point(math.cos(k * math.pi / 3), math.sin(k * math.pi / 3), 0.0) for k in range(6)]


def _is_rotation(points, expected):
    """True if ``points`` is a cyclic rotation of ``expected`` (same direction)."""
    expected = [Point(*p) for p in expected]
    n = len(expected)
    if len(points) != n:
        return False
    for shift in range(n):
        if all(points[k] == expected[(k + shift) % n] for k in range(n)):
            return True
    return False


class TestReorder(unittest.TestCase):
    def test_unit_square_scrambled(self):
        """A scrambled unit square becomes the clockwise cycle about +z."""
        poly = Polygon([(1, 1, 0), (0, 0, 0), (1, 0, 0), (0, 1, 0)])
        self.assertEqual(poly.normal(), Point(0, 0, 1))
        self.assertTrue(_is_rotation(poly.points, UNIT_SQUARE_CW))
        # the first input vertex stays first
        self.assertEqual(poly[0], Point(1, 1, 0))
        self.assertAlmostEqual(poly.area(), 1.0)
        self.assertEqual(poly.center(), Point(0.5, 0.5, 0.0))

    def test_diagonal_first(self):
        pts = reorder([(0, 0, 0), (1, 1, 0), (0, 1, 0), (1, 0, 0)])
        self.assertEqual(pts, [Point(*p) for p in UNIT_SQUARE_CW])

    def test_counter_clockwise_input_is_kept(self):
        """An ordered cycle is a fixed point; its fitted normal follows its direction."""
        ccw = [(0, 0, 0), (1, 0, 0), (1, 1, 0), (0, 1, 0)]
        poly = Polygon(ccw)
        self.assertEqual(poly.points, [Point(*p) for p in ccw])
        self.assertEqual(poly.normal(), Point(0, 0, -1))

    def test_wrapped_backwards_is_reversed(self):
        """When the wrap runs against the fitted normal the tail is reversed."""
        h = _hexagon()
        scrambled = [h[0], h[2], h[5], h[1], h[3], h[4]]
        self.assertEqual(reorder(scrambled), h)

    def test_idempotent(self):
        pts = [(2, 4, 0), (0, 0, 0), (4, 2, 0), (-1, 2, 0), (3, 0, 0)]
        once = reorder(pts)
        self.assertEqual(reorder(once), once)
        self.assertEqual(reorder(reorder(once)), once)

    def test_triangle_unchanged(self):
        tri = [(0, 0, 0), (1, 0, 0), (0, 1, 0)]
        self.assertEqual(reorder(tri), [Point(*p) for p in tri])

    def test_too_few_points(self):
        with self.assertRaises(DegenerateGeometryError):
            reorder([(0, 0, 0), (1, 0, 0)])

    def test_non_convex_rejected(self):
        """Two vertices strictly inside the hull leave the wrap without a valid edge."""
        pts = [(0, 0, 0), (4, 0, 0), (4, 4, 0), (0, 4, 0), (1, 2, 0), (3, 2, 0)]
        with self.assertLogs("meshgeom.polygon", level="WARNING"):
            with self.assertRaises(NonConvexPolygonError):
                reorder(pts)
        # NonConvexPolygonError is still a ValueError
        with self.assertRaises(ValueError):
            Polygon(pts)

    def test_concave_quad_rejected(self):
        """A vertex inside the triangle of the other three is not silently appended."""
        with self.assertLogs("meshgeom.polygon", level="WARNING"):
            with self.assertRaises(NonConvexPolygonError):
                reorder([(0, 0, 0), (4, 0, 0), (0, 4, 0), (1, 1, 0)])
        with self.assertRaises(NonConvexPolygonError):
            reorder([(0, 0, 0), (1, 1, 0), (4, 0, 0), (0, 4, 0)])
        with self.assertRaises(NonConvexPolygonError):
            Polygon([(0, 0, 0), (1, 0, 0), (1, 1, 0), (0, 1, 0), (0.5, 0.5, 0)])

    def test_coincident_vertices(self):
        with self.assertRaises(DegenerateGeometryError):
            reorder([(0, 0, 0), (0, 0, 0), (1, 0, 0), (0, 1, 0)])

    def test_collinear_vertices(self):
        with self.assertRaises(DegenerateGeometryError):
            Polygon([(0, 0, 0), (1, 0, 0), (2, 0, 0), (3, 0, 0)])

    def test_reorder_indices(self):
        verts = [(0, 0, 0), (1, 0, 0), (1, 1, 0), (0, 1, 0), (5, 5, 5)]
        self.assertEqual(reorder_indices(verts, [0, 2, 1, 3]), [0, 1, 2, 3])
        self.assertEqual(reorder_indices(np.array(verts, dtype=float), (0, 2, 1, 3)), [0, 1, 2, 3])
        with self.assertRaises(IndexError):
            reorder_indices(verts, [0, 1, 7])


class TestPolygon(unittest.TestCase):
    def setUp(self):
        self.square = Polygon(UNIT_SQUARE_CW)
        # convex pentagon, area 13, given out of order
        self.pentagon = Polygon([(2, 4, 0), (0, 0, 0), (4, 2, 0), (-1, 2, 0), (3, 0, 0)])

    def test_plane_consistency(self):
        """Every vertex lies on the fitted plane."""
        tilted = Polygon([(1, 1, 1), (0, 0, 0), (1, 0, 1), (0, 1, 0)])
        hexagon = Polygon(_hexagon())
        for poly in (self.square, self.pentagon, tilted, hexagon):
            for p in poly.points:
                self.assertLessEqual(abs(poly.plane.signed_distance(p)), 1e-8)
            self.assertAlmostEqual(poly.normal().norm(), 1.0)

    def test_area_and_center(self):
        self.assertAlmostEqual(self.pentagon.area(), 13.0)
        self.assertGreater(self.pentagon.area(), 0.0)
        c = self.pentagon.center()
        self.assertAlmostEqual(c.x, 122.0 / 78.0)
        self.assertAlmostEqual(c.y, 132.0 / 78.0)
        self.assertAlmostEqual(c.z, 0.0)
        # differs from the vertex mean (1.6, 1.6)
        self.assertNotAlmostEqual(c.x, 1.6)
        self.assertTrue(self.pentagon.point_inside(c))
        self.assertAlmostEqual(self.square.perimeter(), 4.0)

    def test_tilted_square(self):
        poly = Polygon([(1, 1, 1), (0, 0, 0), (1, 0, 1), (0, 1, 0)])
        self.assertAlmostEqual(poly.area(), math.sqrt(2))
        self.assertEqual(poly.center(), Point(0.5, 0.5, 0.5))
        self.assertAlmostEqual(abs(poly.normal().x), 1 / math.sqrt(2))
        self.assertAlmostEqual(abs(poly.normal().z), 1 / math.sqrt(2))
        self.assertTrue(poly.point_inside((0.5, 0.5, 0.5)))
        self.assertFalse(poly.point_inside((0.5, 0.5, 0.0)))

    def test_point_inside(self):
        sq = self.square
        self.assertTrue(sq.point_inside((0.5, 0.5, 0.0)))
        self.assertTrue(sq.point_inside((0.5, 0.5, 5e-11)))
        self.assertFalse(sq.point_inside((0.5, 0.5, 1e-3)))
        self.assertFalse(sq.point_inside((2.0, 0.5, 0.0)))
        self.assertFalse(sq.point_inside((-0.1, -0.1, 0.0)))
        # boundary and corners count as inside
        self.assertTrue(sq.point_inside((0.5, 0.0, 0.0)))
        self.assertTrue(sq.point_inside((1.0, 0.3, 0.0)))
        self.assertTrue(sq.point_inside((0.0, 0.0, 0.0)))
        # a looser tolerance accepts points slightly off the plane
        self.assertTrue(sq.point_inside((0.5, 0.5, 1e-3), tol=1e-2))

    def test_edges_and_sides(self):
        sq = self.square
        self.assertEqual(sq.get_edges(), [(0, 1), (1, 2), (2, 3), (3, 0)])
        side = sq.get_side((0, 1))
        # wall through (0,0,0)-(0,1,0), perpendicular to the square
        self.assertAlmostEqual(side.normal.dot(sq.normal()), 0.0)
        self.assertAlmostEqual(side.signed_distance((0.0, 0.5, 7.0)), 0.0)
        self.assertAlmostEqual(side.distance((1.0, 0.0, 0.0)), 1.0)
        with self.assertRaises(IndexError):
            sq.get_side((0, 4))
        with self.assertRaises(IndexError):
            sq.get_side((-1, 0))

    def test_short_edge_side_plane(self):
        """Side planes of edges far below unit length are still well defined."""
        poly = Polygon([(0, 0, 0), (1e-9, 0, 0), (0, 1, 0)])
        side = poly.get_side((0, 1))
        self.assertAlmostEqual(side.distance((0.5, 2.0, 0.0)), 2.0)
        self.assertTrue(poly.point_inside(poly.center()))
        self.assertFalse(poly.point_inside((0.5, 0.5, 0.0)))

    def test_move(self):
        poly = self.square
        area = poly.area()
        normal = poly.normal()
        poly.move((1, 2, 3))
        self.assertEqual(poly.center(), Point(1.5, 2.5, 3.0))
        self.assertEqual(poly.plane.point, Point(1.5, 2.5, 3.0))
        self.assertEqual(poly.normal(), normal)
        self.assertAlmostEqual(poly.area(), area)
        for p in poly.points:
            self.assertAlmostEqual(poly.plane.signed_distance(p), 0.0)
        self.assertTrue(poly.point_inside((1.5, 2.5, 3.0)))
        self.assertFalse(poly.point_inside((0.5, 0.5, 0.0)))

    def test_set_data(self):
        poly = self.square
        poly.set_data([(0, 0, 5), (2, 0, 5), (0, 2, 5)])
        self.assertEqual(len(poly), 3)
        self.assertAlmostEqual(poly.area(), 2.0)
        self.assertAlmostEqual(poly.plane.signed_distance((0, 0, 5)), 0.0)
        with self.assertRaises(DegenerateGeometryError):
            poly.set_data([(0, 0, 0), (1, 1, 1)])
        # a failed update leaves the polygon untouched
        self.assertEqual(len(poly), 3)

    def test_points_are_copied(self):
        pts = self.square.points
        pts.append(Point(9, 9, 9))
        self.assertEqual(len(self.square), 4)
        self.assertEqual(len(list(iter(self.square))), 4)

    def test_from_indices(self):
        ps = PointSet(1e-6)
        idx = [ps.insert(p) for p in [(0, 0, 0), (1, 0, 0), (1, 1, 0), (0, 1, 0)]]
        poly = Polygon.from_indices(ps, [idx[0], idx[2], idx[1], idx[3]])
        self.assertAlmostEqual(poly.area(), 1.0)
        self.assertEqual(poly.center(), Point(0.5, 0.5, 0.0))
        arr = np.array(UNIT_SQUARE_CW, dtype=float)
        self.assertAlmostEqual(Polygon.from_indices(arr, (3, 1, 2, 0)).area(), 1.0)
        with self.assertRaises(IndexError):
            Polygon.from_indices(ps, [0, 1, 9])
        with self.assertRaises(DegenerateGeometryError):
            Polygon.from_indices(ps, [0, 1])

    def test_repr(self):
        rep = repr(self.square)
        self.assertIn("n_points=4", rep)
        self.assertIn("area=1.000", rep)

    @unittest.skipUnless(polygon_mod._SHAPELY_AVAILABLE, "shapely not installed")
    def test_to_shapely(self):
        shp = self.pentagon.to_shapely()
        self.assertAlmostEqual(shp.area, 13.0)
        self.assertTrue(self.pentagon.is_valid())
        tilted = Polygon([(1, 1, 1), (0, 0, 0), (1, 0, 1), (0, 1, 0)])
        self.assertAlmostEqual(tilted.to_shapely().area, math.sqrt(2))

    def test_to_shapely_without_backend(self):
        with mock.patch.object(polygon_mod, "_SHAPELY_AVAILABLE", False):
            with self.assertRaises(RuntimeError):
                self.square.to_shapely()


if __name__ == '__main__':
    unittest.main()
