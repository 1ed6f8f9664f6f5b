# -*- coding: utf-8 -*-
"""Helpers for building sample rasters."""

import numpy as np
from affine import Affine

from ..core.grid import GridDescriptor
from ..core.raster import Raster


def create_sample_raster(
    width=100,
    height=100,
    resolution=1.0,
    origin=(500000.0, 4500100.0),
    crs="EPSG:32618",
    band_count=1,
    dtype="float32",
    nodata=None,
):
    """Create a synthetic raster for testing and examples.

    Cell values form a smooth ramp (column + row * width, offset by 1000 per band), so every cell is distinct
    and resampling results are easy to trace back to their source cell.

    Parameters:
    -----------
    width, height : int
        Grid size in cells
    resolution : float
        Cell size in CRS units
    origin : tuple of float
        (x, y) of the upper-left corner
    crs : CRS, str, int or None
        Coordinate reference system; UTM zone 18N by default
    band_count : int
        Number of bands
    dtype : str or numpy.dtype
        Data type of the cell values
    nodata : int or float, optional
        Nodata value

    Returns:
    --------
    raster : Raster
        Synthetic raster
    """
    rows, cols = np.mgrid[0:height, 0:width]
    ramp = cols + rows * width
    data = np.stack([ramp + 1000 * band for band in range(band_count)]).astype(dtype)

    transform = Affine(resolution, 0.0, origin[0], 0.0, -resolution, origin[1])
    grid = GridDescriptor(crs, transform, width, height, band_count=band_count, nodata=nodata)
    return Raster(data, grid)
