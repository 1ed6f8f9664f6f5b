# -*- coding: utf-8 -*-
# crsalign/__init__.py

"""
crsalign: coordinate reference system alignment for raster and vector data
==========================================================================

crsalign describes raster grids in their CRS and reprojects rasters from one CRS into another, or onto the
grid of a reference raster.

Key features:
- Grid descriptors with exact cell/world coordinate math
- Reprojection with derived or forced destination resolution
- Nearest-neighbor and bilinear resampling with nodata propagation
- Typed errors instead of silent misalignment across CRSs
- Raster and vector I/O through rasterio and geopandas
"""

import logging

__version__ = "0.1.0"

from .core.crs import CRS, parse_crs, require_matching_crs
from .core.errors import (
    CRSAlignError,
    CRSMismatchError,
    EmptyIntersectionError,
    SingularTransformError,
    UndefinedCRSError,
    UnsupportedCRSError,
)
from .core.grid import BoundingBox, GridDescriptor
from .core.raster import Raster
from .core.reprojector import Reprojector, reproject, reproject_to_grid
from .core.resampling import default_nodata, resample
from .core.transform import CoordinateTransform, transform_bounds

from .io.raster import load_raster, save_raster
from .io.vector import grid_footprint, read_vector, reproject_vector, write_vector

from .utils.helpers import create_sample_raster

logging.getLogger(__name__).addHandler(logging.NullHandler())
