# -*- coding: utf-8 -*-
"""Manages vector data I/O and reprojection, supporting formats like Shapefile, GeoJSON and GeoPackage.

Vector layers are reprojected with geopandas; like rasters, a layer without a CRS cannot be reprojected.
"""

import os

import geopandas as gpd
from shapely.geometry import Polygon

from ..core.crs import parse_crs
from ..core.errors import UndefinedCRSError

VECTOR_DRIVERS = {
    ".shp": "ESRI Shapefile",
    ".geojson": "GeoJSON",
    ".gpkg": "GPKG",
}


def _vector_driver(path):
    file_extension = os.path.splitext(path)[1].lower()
    if file_extension not in VECTOR_DRIVERS:
        supported = ", ".join(VECTOR_DRIVERS)
        raise ValueError(f"Unsupported vector format: {file_extension} (expected one of {supported})")
    return VECTOR_DRIVERS[file_extension]


def read_vector(vector_path):
    """Read a Shapefile, GeoJSON or GeoPackage layer, keeping the CRS the file declares.

    Parameters:
    -----------
    vector_path : str
        Path to a .shp, .geojson or .gpkg file

    Returns:
    --------
    gdf : geopandas.GeoDataFrame
        Layer read from the file; its ``crs`` is None if the file has none
    """
    _vector_driver(vector_path)
    return gpd.read_file(vector_path)


def write_vector(gdf, output_path):
    """Write a GeoDataFrame to a vector file.

    Parameters:
    -----------
    gdf : geopandas.GeoDataFrame
        GeoDataFrame to write
    output_path : str
        Path to the output vector file
    """
    driver = _vector_driver(output_path)

    directory = os.path.dirname(output_path)
    if directory:
        os.makedirs(directory, exist_ok=True)
    gdf.to_file(output_path, driver=driver)


def reproject_vector(gdf, target_crs):
    """Reproject a vector layer into another CRS.

    Parameters:
    -----------
    gdf : geopandas.GeoDataFrame
        Layer to reproject; it is not modified
    target_crs : CRS, str or int
        Destination CRS

    Returns:
    --------
    gdf : geopandas.GeoDataFrame
        New layer in ``target_crs``
    """
    if gdf.crs is None:
        raise UndefinedCRSError("Vector layer has no CRS defined; assign one with GeoDataFrame.set_crs first")
    target = parse_crs(target_crs)
    if target is None:
        raise UndefinedCRSError("Target CRS is not defined")
    return gdf.to_crs(target.pyproj_crs)


def grid_footprint(grid):
    """Outline of a raster grid as a one-row GeoDataFrame, for overlaying raster extents with vector layers.

    Parameters:
    -----------
    grid : GridDescriptor
        Grid to outline

    Returns:
    --------
    gdf : geopandas.GeoDataFrame
        Polygon through the four grid corners, in the grid CRS
    """
    corners = [
        grid.cell_to_world(0, 0),
        grid.cell_to_world(grid.width, 0),
        grid.cell_to_world(grid.width, grid.height),
        grid.cell_to_world(0, grid.height),
    ]
    crs = grid.crs.pyproj_crs if grid.crs is not None else None
    return gpd.GeoDataFrame(
        {"width": [grid.width], "height": [grid.height], "band_count": [grid.band_count]},
        geometry=[Polygon(corners)],
        crs=crs,
    )
