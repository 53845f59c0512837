# meshgeom/config.py
# -*- coding: utf-8 -*-
"""
Numerical tolerances used by the geometry kernel.
- Defaults suit coordinates in metres; every value can be overridden through
  an environment variable so that CI runs or unusual unit systems can tune them.
  Environment variables:
    MESHGEOM_COLLINEAR_TOL   (default: "1e-16")  cross-product magnitude treated as zero
    MESHGEOM_ORDER_TOL       (default: "1e-8")   side test slack while reordering vertices
    MESHGEOM_ABOVE_TOL       (default: "1e-10")  slack of Plane.above()
    MESHGEOM_INSIDE_TOL      (default: "1e-10")  default tolerance of Polygon.point_inside()
    MESHGEOM_POINT_EQ_TOL    (default: "1e-9")   absolute tolerance of Point.__eq__
    MESHGEOM_POINTSET_TOL    (default: "1e-6")   default merge distance of PointSet
    MESHGEOM_HASH_BITS       (default: "64")     width of the PointSet bucket key
  COLLINEAR_TOL is absolute and compared with cross-product magnitudes
  (length squared), so plane fitting rejects polygons smaller than about
  1e-8 units across. Rescale such input or lower MESHGEOM_COLLINEAR_TOL.
"""

import os

# Plane fitting
COLLINEAR_TOL = float(os.getenv("MESHGEOM_COLLINEAR_TOL", "1e-16"))
ABOVE_TOL = float(os.getenv("MESHGEOM_ABOVE_TOL", "1e-10"))

# Polygon ordering / containment
ORDER_TOL = float(os.getenv("MESHGEOM_ORDER_TOL", "1e-8"))
INSIDE_TOL = float(os.getenv("MESHGEOM_INSIDE_TOL", "1e-10"))

# Points
POINT_EQ_TOL = float(os.getenv("MESHGEOM_POINT_EQ_TOL", "1e-9"))

# Point deduplication
POINTSET_TOL = float(os.getenv("MESHGEOM_POINTSET_TOL", "1e-6"))
HASH_BITS = int(os.getenv("MESHGEOM_HASH_BITS", "64"))
