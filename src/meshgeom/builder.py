from __future__ import annotations
import logging
from itertools import combinations
from typing import List, Optional, Sequence, Tuple

from .errors import DegenerateGeometryError
from .geometry import Plane, Point, PointLike, as_point
from .pointset import PointSet
from .polygon import Polygon, reorder_indices

"""
Face mesh assembly

The builder collects cell faces from raw coordinates: vertices are merged
through a :class:`PointSet`, each face is stored as a clockwise tuple of
vertex indices, and :class:`Polygon` objects are created on demand from those
tuples.
"""

LOGGER = logging.getLogger("meshgeom.builder")

Face = Tuple[int, ...]

# First-order wedge (prism) in VTK numbering: two triangles 0-1-2 and 3-4-5,
# joined by three quadrilaterals.
WEDGE_FACES: Tuple[Face, ...] = (
    (0, 1, 2),
    (3, 4, 5),
    (0, 3, 4, 1),
    (1, 2, 5, 4),
    (0, 3, 5, 2),
)


def wedge_faces(indices: Sequence[int]) -> List[Face]:
    """Map the local wedge face table onto six global vertex indices."""
    if len(indices) != 6:
        raise ValueError(f"A first-order wedge has 6 vertices, got {len(indices)}.")
    return [tuple(indices[i] for i in face) for face in WEDGE_FACES]


class FaceMeshBuilder:
    """
    Accumulate polygonal faces over a shared, deduplicated vertex table.

    Every ``add_*`` call either records all of its vertices and faces or
    raises and leaves the builder unchanged.

    The vertex table is a :class:`PointSet`, so coordinates must lie inside
    its addressable box: about +/-1.32 with the default tolerance of 1e-6.
    Pass a coarser ``tolerance`` for larger models.

    Usage
    -----
    >>> b = FaceMeshBuilder(tolerance=1e-6)
    >>> _ = b.add_face([(0, 0, 0), (1, 0, 0), (1, 1, 0), (0, 1, 0)])
    >>> _ = b.add_face([(1, 0, 0), (1, 1, 0), (1, 1, 1), (1, 0, 1)])
    >>> len(b.vertices)   # the shared edge is stored once
    6
    """

    def __init__(self, tolerance: Optional[float] = None) -> None:
        self._vertices = PointSet(tolerance)
        self._faces: List[Face] = []

    # ---------------- validation -------------------------------------
    def _match(self, coords: Sequence[PointLike]) -> Tuple[List[Point], List[Optional[int]], List[Point]]:
        """
        Look ``coords`` up without inserting them.

        Returns the points, the index each one merges into (None for a new
        vertex) and the coordinates the stored face will use.
        """
        pts = [as_point(p) for p in coords]
        matches = [self._vertices.find(p) for p in pts]
        snapped = [p if i is None else self._vertices[i] for p, i in zip(pts, matches)]
        tol = self._vertices.tolerance
        for a, b in combinations(range(len(snapped)), 2):
            if snapped[a].distance_to(snapped[b]) < tol:
                raise DegenerateGeometryError(
                    f"Vertices {a} and {b} collapse under the merge tolerance {tol:g}."
                )
        return pts, matches, snapped

    @staticmethod
    def _order(points: Sequence[Point], local: Sequence[int]) -> Face:
        """Clockwise order of ``local`` positions into ``points``; the face must fit a plane."""
        face = reorder_indices(points, list(local))
        Plane.from_points([points[i] for i in face])
        return tuple(face)

    def _commit(self, pts: List[Point], matches: List[Optional[int]]) -> List[int]:
        return [self._vertices.insert(p) if i is None else i for p, i in zip(pts, matches)]

    # ---------------- vertices ---------------------------------------
    def add_vertex(self, point: PointLike) -> int:
        return self._vertices.insert(point)

    # ---------------- faces ------------------------------------------
    def add_face(self, coords: Sequence[PointLike]) -> Face:
        """Add a face given by coordinates; returns its clockwise index tuple."""
        pts, matches, snapped = self._match(coords)
        local = self._order(snapped, range(len(snapped)))
        ids = self._commit(pts, matches)
        return self._record([tuple(ids[k] for k in local)])[0]

    def add_face_indices(self, indices: Sequence[int]) -> Face:
        """Add a face given by indices into :attr:`vertices`."""
        indices = list(indices)
        if len(set(indices)) != len(indices):
            raise DegenerateGeometryError(f"Face repeats a vertex index: {indices}.")
        face = tuple(reorder_indices(self._vertices, indices))
        Plane.from_points([self._vertices[i] for i in face])
        return self._record([face])[0]

    def add_wedge(self, coords: Sequence[PointLike]) -> List[Face]:
        """Add the five faces of a first-order wedge given by its 6 corners (VTK order)."""
        if len(coords) != 6:
            raise ValueError(f"A first-order wedge has 6 vertices, got {len(coords)}.")
        pts, matches, snapped = self._match(coords)
        local_faces = [self._order(snapped, face) for face in WEDGE_FACES]
        ids = self._commit(pts, matches)
        return self._record([tuple(ids[k] for k in face) for face in local_faces])

    def _record(self, faces: List[Face]) -> List[Face]:
        for face in faces:
            LOGGER.debug("face %d: %s", len(self._faces), face)
            self._faces.append(face)
        return faces

    # ---------------- queries ----------------------------------------
    @property
    def vertices(self) -> PointSet:
        return self._vertices

    @property
    def faces(self) -> List[Face]:
        return list(self._faces)

    def polygons(self) -> List[Polygon]:
        return [Polygon.from_indices(self._vertices, face) for face in self._faces]

    def total_area(self) -> float:
        return sum(poly.area() for poly in self.polygons())

    def __repr__(self) -> str:
        return f"<meshgeom.FaceMeshBuilder n_vertices={len(self._vertices)} n_faces={len(self._faces)}>"


__all__ = ["Face", "WEDGE_FACES", "wedge_faces", "FaceMeshBuilder"]
