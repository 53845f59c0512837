from __future__ import annotations
import logging
import math
import numbers
from itertools import combinations
from typing import Iterable, Iterator, Optional, Sequence, Tuple, Union

from . import config
from .errors import DegenerateGeometryError


"""meshgeom.geometry - points and planes
--------------------------------------------------------------------------
This module defines the 3-D :class:`Point` value type used by every other part
of the kernel, and the :class:`Plane` that polygons fit to their vertices.
Everything is plain Python floats; numeric arrays are accepted as input
wherever a point is expected and converted on the way in.
"""

LOGGER = logging.getLogger("meshgeom.geometry")

PointLike = Union["Point", Sequence[float]]


# ---------------------------------------------------------------------------
# Core Primitives -----------------------------------------------------------
# ---------------------------------------------------------------------------
class Point:
    """
    Immutable three-dimensional point / vector.

    Supports the usual vector arithmetic (``+``, ``-``, scalar ``*`` and
    ``/``, :meth:`dot`, :meth:`cross`, :meth:`norm`). Equality is tolerant:
    two points compare equal when every coordinate agrees within
    ``config.POINT_EQ_TOL``; use :meth:`isclose` for a custom tolerance.
    """

    __slots__ = ("_x", "_y", "_z")

    def __init__(self, x: float = 0.0, y: float = 0.0, z: float = 0.0):
        self._x = float(x)
        self._y = float(y)
        self._z = float(z)

    # ------------------------------------------------------------------
    # Public helpers
    # ------------------------------------------------------------------
    def get_point(self) -> Tuple[float, float, float]:
        """Return the coordinates as a tuple."""
        return (self._x, self._y, self._z)

    def dot(self, other: "Point") -> float:
        return self._x * other._x + self._y * other._y + self._z * other._z

    def cross(self, other: "Point") -> "Point":
        return Point(
            self._y * other._z - self._z * other._y,
            self._z * other._x - self._x * other._z,
            self._x * other._y - self._y * other._x,
        )

    def norm(self) -> float:
        """Euclidean length of the vector."""
        return math.sqrt(self.dot(self))

    def normalized(self) -> "Point":
        """Unit vector with the same direction. Raises on a zero-length vector."""
        length = self.norm()
        if length == 0.0:
            raise DegenerateGeometryError("Cannot normalize a zero-length vector.")
        return self / length

    def distance_to(self, other: "Point") -> float:
        """Calculate Euclidean distance to another Point."""
        if not isinstance(other, Point):
            raise TypeError("Can only calculate distance to another Point instance.")
        return (self - other).norm()

    def isclose(self, other: "Point", tol: float) -> bool:
        """True if every coordinate differs from ``other`` by at most ``tol``."""
        return (
            math.isclose(self._x, other._x, abs_tol=tol) and
            math.isclose(self._y, other._y, abs_tol=tol) and
            math.isclose(self._z, other._z, abs_tol=tol)
        )

    # ------------------------------------------------------------------
    # Arithmetic
    # ------------------------------------------------------------------
    def __add__(self, other):
        if not isinstance(other, Point):
            return NotImplemented
        return Point(self._x + other._x, self._y + other._y, self._z + other._z)

    def __sub__(self, other):
        if not isinstance(other, Point):
            return NotImplemented
        return Point(self._x - other._x, self._y - other._y, self._z - other._z)

    def __neg__(self) -> "Point":
        return Point(-self._x, -self._y, -self._z)

    def __mul__(self, k):
        if not isinstance(k, numbers.Real):
            return NotImplemented
        return Point(self._x * k, self._y * k, self._z * k)

    __rmul__ = __mul__

    def __truediv__(self, k):
        if not isinstance(k, numbers.Real):
            return NotImplemented
        return Point(self._x / k, self._y / k, self._z / k)

    # ------------------------------------------------------------------
    # Dunder / Properties
    # ------------------------------------------------------------------
    def __iter__(self) -> Iterator[float]:
        return iter((self._x, self._y, self._z))

    def __getitem__(self, idx: int) -> float:
        return self.get_point()[idx]

    def __len__(self) -> int:
        return 3

    def __repr__(self):
        return f"<meshgeom.Point x={self._x:.3f}, y={self._y:.3f}, z={self._z:.3f}>"

    def __eq__(self, other):
        if not isinstance(other, Point):
            return NotImplemented
        return self.isclose(other, config.POINT_EQ_TOL)

    def __hash__(self):
        return hash((self._x, self._y, self._z))

    @property
    def x(self) -> float:
        return self._x

    @property
    def y(self) -> float:
        return self._y

    @property
    def z(self) -> float:
        return self._z


def as_point(p: PointLike) -> Point:
    """
    Coerce ``p`` into a :class:`Point`.

    Accepts Point instances, objects exposing ``x``/``y``/``z`` attributes and
    any iterable of exactly three numbers (tuples, lists, numpy rows).

    Raises
    ------
    TypeError: unsupported object or non-numeric coordinates.
    ValueError: the iterable does not hold exactly 3 coordinates.
    """
    if isinstance(p, Point):
        return p
    if hasattr(p, "x") and hasattr(p, "y") and hasattr(p, "z"):
        coords = (p.x, p.y, p.z)
    else:
        try:
            coords = tuple(p)
        except TypeError as exc:
            raise TypeError(f"Unsupported point type: {type(p).__name__}.") from exc
    if len(coords) != 3:
        raise ValueError("Each point must provide exactly 3 coordinates (x, y, z).")
    try:
        return Point(*(float(c) for c in coords))
    except (TypeError, ValueError) as exc:
        raise TypeError("Point coordinates must be numeric.") from exc


def centroid(points: Iterable[PointLike]) -> Point:
    """Arithmetic mean of the points (not the area centroid of a polygon)."""
    sx = sy = sz = 0.0
    n = 0
    for p in points:
        x, y, z = as_point(p)
        sx += x; sy += y; sz += z
        n += 1
    if n == 0:
        raise DegenerateGeometryError("Cannot take the centroid of an empty point set.")
    return Point(sx / n, sy / n, sz / n)


def triangle_area(a: Point, b: Point, c: Point) -> float:
    return 0.5 * (b - a).cross(c - a).norm()


# ---------------------------------------------------------------------------
# Plane ---------------------------------------------------------------------
# ---------------------------------------------------------------------------
class Plane:
    """
    Infinite plane given by a unit normal and a support point.

    Build it with :meth:`from_three` (three explicit points) or
    :meth:`from_points` (best fit through a vertex list). After construction
    only the support point may change, through :meth:`set_point` and
    :meth:`move`; the normal is fixed.
    """

    __slots__ = ("_normal", "_point")

    def __init__(self, normal: PointLike, point: PointLike):
        n = as_point(normal)
        length = n.norm()
        if length <= config.COLLINEAR_TOL:
            raise DegenerateGeometryError("Plane normal must be non-zero.")
        self._normal = n / length
        self._point = as_point(point)

    @classmethod
    def from_three(cls, a: PointLike, b: PointLike, c: PointLike) -> "Plane":
        """
        Plane through three points, normal along ``(b - a) x (c - a)`` and
        support point ``a``.
        """
        a, b, c = as_point(a), as_point(b), as_point(c)
        n = (b - a).cross(c - a)
        if n.norm() <= config.COLLINEAR_TOL:
            raise DegenerateGeometryError(
                f"Points {a.get_point()}, {b.get_point()}, {c.get_point()} are collinear."
            )
        return cls(n, a)

    @classmethod
    def from_points(cls, points: Sequence[PointLike]) -> "Plane":
        """
        Fit a plane through a vertex list; the support point is the
        arithmetic centroid ``cm``.

        The normal comes from ``cm`` and a pair of vertices. Vertices 0 and 1
        are used unless they are collinear with ``cm`` (only one such pair
        can exist for a non-degenerate polygon), then 0 and 2, then any other
        pair in order. For an ordered pair ``(a, b)`` the normal is
        ``(p[b] - cm) x (p[a] - cm)``: a vertex run ``a -> b`` is clockwise
        when seen from the tip of the normal.
        """
        pts = [as_point(p) for p in points]
        if len(pts) < 3:
            raise DegenerateGeometryError("Need at least 3 points to fit a plane.")
        cm = centroid(pts)
        for ia, ib in combinations(range(len(pts)), 2):
            n = (pts[ib] - cm).cross(pts[ia] - cm)
            if n.norm() > config.COLLINEAR_TOL:
                return cls(n, cm)
        LOGGER.warning("Plane fit failed: %d points are collinear", len(pts))
        raise DegenerateGeometryError("All points are collinear: cannot fit a plane.")

    # ---------------- queries -----------------------------------------
    def signed_distance(self, p: PointLike) -> float:
        """Offset of ``p`` along the normal; positive on the normal's side."""
        return (as_point(p) - self._point).dot(self._normal)

    def distance(self, p: PointLike) -> float:
        return abs(self.signed_distance(p))

    def above(self, p: PointLike, eps: Optional[float] = None) -> bool:
        """True if ``p`` is on the normal's side or on the plane (within ``eps``)."""
        if eps is None:
            eps = config.ABOVE_TOL
        return self.signed_distance(p) > -eps

    def project(self, p: PointLike) -> Point:
        """Orthogonal projection of ``p`` onto the plane."""
        p = as_point(p)
        return p - self._normal * self.signed_distance(p)

    # ---------------- mutation ----------------------------------------
    def set_point(self, p: PointLike) -> None:
        """Relocate the support point; the normal is unchanged."""
        self._point = as_point(p)

    def move(self, delta: PointLike) -> None:
        self._point = self._point + as_point(delta)

    # ---------------- properties --------------------------------------
    @property
    def normal(self) -> Point:
        return self._normal

    @property
    def point(self) -> Point:
        return self._point

    def __repr__(self) -> str:
        return (f"<meshgeom.Plane normal={self._normal.get_point()} "
                f"point={self._point.get_point()}>")


__all__ = ["Point", "PointLike", "as_point", "centroid", "triangle_area", "Plane"]
