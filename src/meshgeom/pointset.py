from __future__ import annotations
import logging
import math
from typing import Dict, Iterator, List, Optional, Set, Tuple

import numpy as np
from scipy.spatial import cKDTree

from . import config
from .errors import OutOfDomainError
from .geometry import Point, PointLike, as_point

LOGGER = logging.getLogger("meshgeom.pointset")


class PointSet:
    """
    Deduplicating collection of 3-D points with stable indices.

    Points closer than ``tolerance`` to a stored point are merged into it:
    :meth:`insert` returns the index of the stored point instead of adding a
    new one. Lookups go through a spatial hash of cubic cells whose edge is
    the tolerance, so every insert only inspects the 27 cells around the
    query point.

    Addressable domain
    ------------------
    The integer cell key must fit into ``config.HASH_BITS`` bits, which allows
    ``cbrt(2**HASH_BITS - 1)`` cells per axis. With cells of size
    ``tolerance`` the usable box is symmetric about the origin:

        upper = tolerance * cbrt(2**HASH_BITS - 1) / 2,   lower = -upper

    (about +/-1.32 for the default tolerance 1e-6 and 64-bit keys, so larger
    models need a coarser tolerance or coordinates relative to a local origin).
    Coordinates outside ``[lower, upper]`` raise :class:`OutOfDomainError`.

    Notes
    -----
    - The set only grows; stored points are never moved or merged later.
    - Not thread-safe; each builder should own its own instance.
    """

    def __init__(self, tolerance: Optional[float] = None) -> None:
        tol = config.POINTSET_TOL if tolerance is None else float(tolerance)
        if not (math.isfinite(tol) and tol > 0.0):
            raise ValueError("tolerance must be a finite number > 0.")
        self._tol: float = tol

        max_value = 2 ** config.HASH_BITS - 1
        span = float(max_value) ** (1.0 / 3.0)
        # Number of cells along each axis (>= 1)
        self._ncells: int = max(1, int(math.floor(span)))
        half = tol * span / 2.0
        self._upper = Point(half, half, half)
        self._lower = -self._upper

        self._points: List[Point] = []
        self._buckets: Dict[int, List[int]] = {}

    # ----------------------------------------------------------------------
    # Grid helpers
    # ----------------------------------------------------------------------
    def _flat_index(self, ix: int, iy: int, iz: int) -> int:
        """
        Convert 3D cell indices (ix, iy, iz) to a flat key in [0, n**3).
        """
        n = self._ncells
        return ix + iy * n + iz * n * n

    def _check_domain(self, p: Point) -> None:
        for c, lo, hi in zip(p, self._lower, self._upper):
            if not (math.isfinite(c) and lo <= c <= hi):
                LOGGER.warning("Point %s outside PointSet domain [%g, %g]", p.get_point(), lo, hi)
                raise OutOfDomainError(
                    f"Point {p.get_point()} is outside the addressable range "
                    f"[{lo:g}, {hi:g}] for tolerance {self._tol:g}."
                )

    def _coord_to_cell_index(self, p: Point) -> Tuple[int, int, int]:
        """
        Map a coordinate to cell indices (ix, iy, iz).
        """
        self._check_domain(p)
        last = self._ncells - 1
        ix = min(int((p.x - self._lower.x) // self._tol), last)
        iy = min(int((p.y - self._lower.y) // self._tol), last)
        iz = min(int((p.z - self._lower.z) // self._tol), last)
        return ix, iy, iz

    def _candidates(self, cell: Tuple[int, int, int]) -> List[int]:
        """Indices stored in ``cell`` and its 26 neighbours."""
        ix0, iy0, iz0 = cell
        last = self._ncells - 1
        out: List[int] = []
        for ix in range(max(ix0 - 1, 0), min(ix0 + 1, last) + 1):
            for iy in range(max(iy0 - 1, 0), min(iy0 + 1, last) + 1):
                for iz in range(max(iz0 - 1, 0), min(iz0 + 1, last) + 1):
                    bucket = self._buckets.get(self._flat_index(ix, iy, iz))
                    if bucket:
                        out.extend(bucket)
        return out

    def _nearest_within_tol(self, p: Point, cell: Tuple[int, int, int]) -> Optional[int]:
        candidates = self._candidates(cell)
        if not candidates:
            return None
        coords = np.array([self._points[i].get_point() for i in candidates], dtype=float)
        dists = np.linalg.norm(coords - np.array(p.get_point(), dtype=float), axis=1)
        pos = int(dists.argmin())
        if dists[pos] < self._tol:
            return candidates[pos]
        return None

    # ----------------------------------------------------------------------
    # Public API
    # ----------------------------------------------------------------------
    def insert(self, point: PointLike) -> int:
        """
        Add ``point`` unless a stored point lies closer than ``tolerance``.

        Returns the index of the nearest such stored point, or the index of
        the newly stored point.
        """
        p = as_point(point)
        cell = self._coord_to_cell_index(p)
        found = self._nearest_within_tol(p, cell)
        if found is not None:
            LOGGER.debug("merged %s into vertex %d", p.get_point(), found)
            return found

        idx = len(self._points)
        self._points.append(p)
        self._buckets.setdefault(self._flat_index(*cell), []).append(idx)
        return idx

    def find(self, point: PointLike) -> Optional[int]:
        """Index of the stored point within ``tolerance`` of ``point``, or None."""
        p = as_point(point)
        return self._nearest_within_tol(p, self._coord_to_cell_index(p))

    def size(self) -> int:
        return len(self._points)

    def points(self) -> List[Point]:
        """Return a copy of the stored points, in index order."""
        return list(self._points)

    def as_array(self) -> np.ndarray:
        """Stored points as an ``(N, 3)`` float array."""
        if not self._points:
            return np.empty((0, 3), dtype=float)
        return np.array([p.get_point() for p in self._points], dtype=float)

    def close_pairs(self, radius: Optional[float] = None) -> Set[Tuple[int, int]]:
        """
        All index pairs ``(i, j)``, ``i < j``, whose points are closer than
        ``radius`` (default: the tolerance). Empty for a consistent set when
        ``radius`` is the tolerance.
        """
        r = self._tol if radius is None else float(radius)
        if len(self._points) < 2:
            return set()
        coords = self.as_array()
        tree = cKDTree(coords)
        pairs = set()
        for i, j in tree.query_pairs(r):
            if np.linalg.norm(coords[i] - coords[j]) < r:
                pairs.add((min(i, j), max(i, j)))
        return pairs

    # ---------------- properties -------------------------------------
    @property
    def tolerance(self) -> float:
        return self._tol

    @property
    def lower(self) -> Point:
        return self._lower

    @property
    def upper(self) -> Point:
        return self._upper

    # ---------------- container magic --------------------------------
    def __len__(self) -> int:
        return len(self._points)

    def __iter__(self) -> Iterator[Point]:
        return iter(self._points)

    def __getitem__(self, idx: int) -> Point:
        if not 0 <= idx < len(self._points):
            raise IndexError(f"PointSet index {idx} out of range (size {len(self._points)}).")
        return self._points[idx]

    def __repr__(self) -> str:
        return f"<meshgeom.PointSet n_points={len(self)} tol={self._tol:g}>"


__all__ = ["PointSet"]
