"""
meshgeom - planar polygons in 3-D and tolerance-based vertex deduplication.

Convenience re-exports so users can write:
    from meshgeom import Point, Plane, Polygon, PointSet
"""

__version__ = "0.1.0"

from .errors import (
    GeometryError,
    DegenerateGeometryError,
    NonConvexPolygonError,
    OutOfDomainError,
)
from .geometry import Point, Plane, as_point, centroid
from .polygon import Edge, Polygon, reorder, reorder_indices
from .pointset import PointSet
from .builder import FaceMeshBuilder, WEDGE_FACES, wedge_faces
from .core import Shape

__all__ = (
    # Primitives
    "Point",
    "Plane",
    "as_point",
    "centroid",
    # Polygons
    "Edge",
    "Polygon",
    "reorder",
    "reorder_indices",
    "Shape",
    # Vertex deduplication / assembly
    "PointSet",
    "FaceMeshBuilder",
    "WEDGE_FACES",
    "wedge_faces",
    # Errors
    "GeometryError",
    "DegenerateGeometryError",
    "NonConvexPolygonError",
    "OutOfDomainError",
    "__version__",
)
