from __future__ import annotations
import logging
from typing import Any, Iterator, List, Sequence, Tuple

from . import config
from .core.shape import translate
from .errors import DegenerateGeometryError, NonConvexPolygonError
from .geometry import Plane, Point, PointLike, as_point, centroid, triangle_area


"""meshgeom.polygon - planar convex polygons in 3-D
--------------------------------------------------------------------------
A :class:`Polygon` owns a clockwise-ordered copy of its vertices and the
:class:`~meshgeom.geometry.Plane` fitted through them. Vertices may be given
in any order; :func:`reorder` turns a convex vertex set into a cycle.
When the *Shapely* package is available the polygon can also be exported as a
2-D shapely polygon expressed in its own plane.
"""

# ---------------------------------------------------------------------------
# Optional Shapely backend ---------------------------------------------------
# ---------------------------------------------------------------------------
try:
    from shapely.geometry import Polygon as _ShpPolygon
    _SHAPELY_AVAILABLE = True
except ModuleNotFoundError:
    _SHAPELY_AVAILABLE = False
    _ShpPolygon = None

LOGGER = logging.getLogger("meshgeom.polygon")

Edge = Tuple[int, int]


# ---------------------------------------------------------------------------
# Vertex ordering -----------------------------------------------------------
# ---------------------------------------------------------------------------
def _is_hull_edge(points: List[Point], a: int, b: int, normal: Point, tol: float) -> bool:
    """
    True if every point other than ``a`` and ``b`` lies on one side of the
    wall plane erected on the segment ``a -> b`` along ``normal``.
    """
    pa, pb = points[a], points[b]
    if (pb - pa).norm() == 0.0:
        raise DegenerateGeometryError(f"Vertices {a} and {b} coincide at {pa.get_point()}.")
    # wall contains the edge and the polygon normal
    wall = Plane(normal.cross(pb - pa), pa)

    orientation = None  # side of the first off-edge point
    for j, p in enumerate(points):
        if j == a or j == b:
            continue
        above = wall.signed_distance(p) > -tol
        if orientation is None:
            orientation = above
        elif above != orientation:
            return False
    return True


def _winding(points: List[Point], order: List[int], plane: Plane) -> float:
    """Positive when ``order`` runs clockwise seen from the tip of the plane normal."""
    cm = plane.point
    total = 0.0
    n = len(order)
    for k in range(n):
        a = points[order[k]] - cm
        b = points[order[(k + 1) % n]] - cm
        total += b.cross(a).dot(plane.normal)
    return total


def _order_permutation(points: List[Point]) -> List[int]:
    """
    Gift-wrap a convex, coplanar vertex set.

    Returns the positions of ``points`` in clockwise order, starting with
    position 0. Vertices stay where they are; a ``placed`` flag per vertex
    tracks which ones are already on the chain.
    """
    n = len(points)
    if n < 3:
        raise DegenerateGeometryError("Need at least 3 points to order a polygon.")
    if n == 3:
        return [0, 1, 2]

    plane = Plane.from_points(points)
    normal = plane.normal

    order = [0]
    placed = [False] * n
    placed[0] = True
    remaining = n - 1

    passes = 0
    max_passes = 2 * remaining
    while remaining > 0:
        if passes >= max_passes:
            LOGGER.warning(
                "Vertex ordering gave up after %d passes (%d of %d vertices placed)",
                passes, n - remaining, n,
            )
            raise NonConvexPolygonError("Polygon is not convex: cannot order its vertices.")

        if remaining == 1:
            order.append(placed.index(False))
            break

        last = order[-1]
        for i in range(n):
            if placed[i]:
                continue
            if _is_hull_edge(points, last, i, normal, config.ORDER_TOL):
                order.append(i)
                placed[i] = True
                remaining -= 1
                LOGGER.debug("edge %d -> %d accepted", last, i)
                break
        passes += 1

    # the last vertex went in unchecked: both closing edges must be hull edges
    for a, b in ((order[-2], order[-1]), (order[-1], order[0])):
        if not _is_hull_edge(points, a, b, normal, config.ORDER_TOL):
            LOGGER.warning("Vertex ordering closed on the non-hull edge %d -> %d", a, b)
            raise NonConvexPolygonError("Polygon is not convex: cannot order its vertices.")

    if _winding(points, order, plane) < 0.0:
        order[1:] = order[:0:-1]
    return order


def reorder(points: Sequence[PointLike]) -> List[Point]:
    """
    Return the vertices of a convex planar polygon in clockwise order with
    respect to the normal fitted through them (see ``Plane.from_points``).

    The first input vertex stays first. Three points are returned unchanged.

    Raises
    ------
    DegenerateGeometryError: fewer than 3 points, coincident or collinear points.
    NonConvexPolygonError: the points do not form a convex polygon.
    """
    pts = [as_point(p) for p in points]
    return [pts[i] for i in _order_permutation(pts)]


def _gather(vertices: Any, indices: Sequence[int]) -> List[Point]:
    n = len(vertices)
    out: List[Point] = []
    for i in indices:
        if not 0 <= i < n:
            raise IndexError(f"Vertex index {i} out of range (have {n} vertices).")
        out.append(as_point(vertices[i]))
    return out


def reorder_indices(vertices: Any, indices: Sequence[int]) -> List[int]:
    """
    Reorder a face index tuple so that ``vertices[idx]`` run clockwise.

    ``vertices`` is any indexable vertex source: a list of points, an
    ``(N, 3)`` numpy array or a :class:`~meshgeom.pointset.PointSet`.
    """
    perm = _order_permutation(_gather(vertices, indices))
    return [indices[i] for i in perm]


# ---------------------------------------------------------------------------
# Polygon -------------------------------------------------------------------
# ---------------------------------------------------------------------------
class Polygon:
    """
    Convex planar polygon in 3-D space.

    The vertices are stored clockwise with respect to ``normal()``, whatever
    order they were given in. The polygon owns copies of its vertices and
    its plane; the plane's support point is the arithmetic mean of the
    vertices.

    Construction
    ------------
    >>> Polygon([(0, 0, 0), (1, 1, 0), (1, 0, 0), (0, 1, 0)])
    >>> Polygon.from_indices(point_set, (4, 7, 9))
    """

    __slots__ = ("_points", "_plane")

    def __init__(self, points: Sequence[PointLike]):
        self._points: List[Point] = []
        self.set_data(points)

    @classmethod
    def from_indices(cls, vertices: Any, indices: Sequence[int]) -> "Polygon":
        """Build a face from some mesh vertices; ``vertices`` is copied from, not kept."""
        if len(indices) < 3:
            raise DegenerateGeometryError("A polygon needs at least 3 vertex indices.")
        return cls(_gather(vertices, indices))

    # ---------------- mutation ---------------------------------------
    def set_data(self, points: Sequence[PointLike]) -> None:
        """Replace the vertices, reorder them and refit the plane."""
        pts = [as_point(p) for p in points]
        if len(pts) < 3:
            raise DegenerateGeometryError("Polygon requires at least 3 points.")
        ordered = reorder(pts)
        # support point of the fitted plane is the arithmetic centroid
        plane = Plane.from_points(ordered)
        self._points = ordered
        self._plane = plane

    def move(self, delta: PointLike) -> None:
        """Shift all vertices and the plane by ``delta``."""
        self._points = translate(self._points, delta)
        self._plane.move(delta)

    # ---------------- geometric properties ---------------------------
    def area(self) -> float:
        """Sum of the triangles fanned from the vertex mean."""
        cm = centroid(self._points)
        n = len(self._points)
        return sum(
            triangle_area(self._points[i], self._points[(i + 1) % n], cm)
            for i in range(n)
        )

    def center(self) -> Point:
        """
        Area-weighted centroid.

        The polygon is split into triangles ``(p0, pj, pj+1)``; each
        triangle's centroid is weighted by its area. This is the true centre
        of mass and differs from the vertex mean for irregular polygons.
        """
        pts = self._points
        p0 = pts[0]
        weighted = Point(0.0, 0.0, 0.0)
        total = 0.0
        for j in range(1, len(pts) - 1):
            a = triangle_area(p0, pts[j], pts[j + 1])
            weighted = weighted + (p0 + pts[j] + pts[j + 1]) * (a / 3.0)
            total += a
        if total == 0.0:
            raise DegenerateGeometryError("Polygon has zero area: centroid is undefined.")
        return weighted / total

    def perimeter(self) -> float:
        n = len(self._points)
        return sum(self._points[i].distance_to(self._points[(i + 1) % n]) for i in range(n))

    def normal(self) -> Point:
        return self._plane.normal

    def get_edges(self) -> List[Edge]:
        """Pairs of consecutive vertex indices, closing back to vertex 0."""
        n = len(self._points)
        return [(i, (i + 1) % n) for i in range(n)]

    def get_side(self, edge: Edge) -> Plane:
        """
        Wall plane through ``edge``, perpendicular to the polygon plane.

        Raises IndexError if the edge references a missing vertex.
        """
        i, j = edge
        n = len(self._points)
        if not (0 <= i < n and 0 <= j < n):
            raise IndexError(f"Edge {edge} does not exist (polygon has {n} vertices).")
        a, b = self._points[i], self._points[j]
        return Plane((b - a).cross(self._plane.normal), a)

    def point_inside(self, p: PointLike, tol: float = config.INSIDE_TOL) -> bool:
        """
        True if ``p`` lies in the polygon plane (within ``tol``) and inside
        the prism swept by the polygon along its normal.

        Points on an edge count as inside.
        """
        p = as_point(p)
        if self._plane.distance(p) > tol:
            return False

        cm = self.center()
        for edge in self.get_edges():
            side = self.get_side(edge)
            if side.above(p) != side.above(cm) and side.distance(p) > tol:
                return False
        return True

    # ---------------- shapely interop --------------------------------
    def to_shapely(self):
        """
        Return a *shapely.geometry.Polygon* in the polygon's own 2-D frame.

        The frame origin is the plane support point, the first axis runs
        along the first edge and the second completes it with the normal.
        """
        if not _SHAPELY_AVAILABLE:
            raise RuntimeError("Shapely is required for this operation. Please install shapely.")
        origin = self._plane.point
        u = (self._points[1] - self._points[0]).normalized()
        v = self._plane.normal.cross(u)
        return _ShpPolygon([((q - origin).dot(u), (q - origin).dot(v)) for q in self._points])

    def is_valid(self) -> bool:
        """Check the in-plane polygon with Shapely's validity rules."""
        return self.to_shapely().is_valid

    # ---------------- container --------------------------------------
    @property
    def points(self) -> List[Point]:
        """Copy of the ordered vertex list."""
        return list(self._points)

    @property
    def plane(self) -> Plane:
        return self._plane

    def __len__(self) -> int:
        return len(self._points)

    def __iter__(self) -> Iterator[Point]:
        return iter(self._points)

    def __getitem__(self, idx) -> Point:
        return self._points[idx]

    def __repr__(self) -> str:
        return f"<meshgeom.Polygon n_points={len(self)} area={self.area():.3f}>"


__all__ = ["Edge", "Polygon", "reorder", "reorder_indices"]
