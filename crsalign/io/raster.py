# -*- coding: utf-8 -*-
"""Handles raster input and output, converting between raster files and Raster values.

File formats are rasterio's concern; this module only maps a dataset's bands, transform, CRS and nodata value
onto a GridDescriptor and back.
"""

import os

import rasterio

from ..core.crs import parse_crs
from ..core.grid import GridDescriptor
from ..core.raster import Raster


def load_raster(raster_path, nodata=None):
    """Read a raster file into a Raster.

    Parameters:
    -----------
    raster_path : str
        Path to the raster file
    nodata : int or float, optional
        Nodata value to use when the file declares none

    Returns:
    --------
    raster : Raster
        Raster holding every band of the file; its CRS is None if the file has none
    """
    with rasterio.open(raster_path) as src:
        image_data = src.read()
        transform = src.transform
        crs = src.crs
        file_nodata = src.nodata

    grid = GridDescriptor(
        parse_crs(crs) if crs else None,
        transform,
        image_data.shape[2],
        image_data.shape[1],
        band_count=image_data.shape[0],
        nodata=file_nodata if file_nodata is not None else nodata,
    )
    return Raster(image_data, grid)


def save_raster(raster, output_path, driver="GTiff"):
    """Write a Raster to a file.

    Parameters:
    -----------
    raster : Raster
        Raster to save
    output_path : str
        Path to the output raster file
    driver : str
        GDAL driver name
    """
    directory = os.path.dirname(output_path)
    if directory:
        os.makedirs(directory, exist_ok=True)

    data = raster.data
    with rasterio.open(
        output_path,
        "w",
        driver=driver,
        height=raster.height,
        width=raster.width,
        count=raster.band_count,
        dtype=data.dtype,
        crs=raster.crs.to_rasterio() if raster.crs is not None else None,
        transform=raster.transform,
        nodata=raster.nodata,
    ) as dst:
        dst.write(data)
