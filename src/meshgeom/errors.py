"""Exception types raised by the geometry kernel.

All of them derive from :class:`ValueError`, so callers that already guard
geometry construction with ``except ValueError`` keep working.
"""


class GeometryError(ValueError):
    """Base class for invalid geometric input."""


class DegenerateGeometryError(GeometryError):
    """Points are too few, coincident or collinear to define the requested shape."""


class NonConvexPolygonError(GeometryError):
    """The vertex set cannot be ordered into a convex cycle."""


class OutOfDomainError(GeometryError):
    """A coordinate lies outside the range a PointSet can address."""


__all__ = [
    "GeometryError",
    "DegenerateGeometryError",
    "NonConvexPolygonError",
    "OutOfDomainError",
]
