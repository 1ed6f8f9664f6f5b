# -*- coding: utf-8 -*-
"""Implements raster reprojection: deriving a destination grid in a new CRS and resampling cells into it.

Reprojection changes the data grid itself, so the result is always a new Raster; the source is never modified.
Every call takes its CRS explicitly, and there is no module-level "current CRS".
"""

import logging
import math
import warnings

import numpy as np

from .crs import parse_crs
from .errors import EmptyIntersectionError, UndefinedCRSError
from .grid import GridDescriptor, check_resolution, is_nan
from .raster import Raster
from .resampling import default_nodata, resample, resampling_method
from .transform import DEFAULT_POINTS_PER_EDGE, CoordinateTransform, local_scale, transform_bounds

logger = logging.getLogger(__name__)


class Reprojector:
    """Reprojects rasters into another CRS, or onto an existing grid.

    The reprojector holds configuration only, so one instance can be shared between threads.
    """

    def __init__(self, resampling="nearest", points_per_edge=DEFAULT_POINTS_PER_EDGE, strict=False):
        """Initialize the reprojector.

        Parameters:
        -----------
        resampling : str or rasterio.enums.Resampling
            Default resampling method, "nearest" or "bilinear"
        points_per_edge : int
            Boundary samples per edge used when transforming extents (corners and midpoints at minimum)
        strict : bool
            Raise EmptyIntersectionError instead of warning when the source does not overlap the destination
        """
        if points_per_edge < 3:
            raise ValueError(f"points_per_edge must be at least 3, got {points_per_edge}")
        self.resampling = resampling_method(resampling)
        self.points_per_edge = int(points_per_edge)
        self.strict = strict

    def plan(self, source, target_crs, target_resolution=None):
        """Derive the destination grid of a reprojection without resampling.

        Parameters:
        -----------
        source : Raster or GridDescriptor
            Source raster or its grid
        target_crs : CRS, str or int
            Destination CRS
        target_resolution : float or tuple of float, optional
            Forced destination cell size (dx, dy) in target CRS units

        Returns:
        --------
        grid : GridDescriptor
            Destination grid

        Raises:
        -------
        UndefinedCRSError
            If the source has no CRS, or no target CRS is given
        UnsupportedCRSError
            If either CRS has no known transform path
        SingularTransformError
            If the forced resolution has a zero cell size
        """
        src_grid = source.grid if isinstance(source, Raster) else source
        transform = self._coordinate_transform(src_grid, target_crs)

        nodata = src_grid.nodata
        if nodata is None and isinstance(source, Raster):
            nodata = default_nodata(source.dtype)

        if transform.is_identity and target_resolution is None:
            # Same CRS at native resolution keeps the source orientation and cell layout
            logger.debug("Planned identity reprojection in %s", src_grid.crs)
            return src_grid.replace(nodata=nodata)

        dst_bbox = transform_bounds(
            src_grid.bounding_box(), transform.target_crs, self.points_per_edge, transform=transform
        )

        if target_resolution is not None:
            resolution = check_resolution(target_resolution)
        else:
            resolution = self._default_resolution(src_grid, transform, dst_bbox)

        grid = GridDescriptor.from_bounds(
            dst_bbox, resolution, crs=transform.target_crs, band_count=src_grid.band_count, nodata=nodata
        )
        logger.debug("Planned %s -> %s: %dx%d cells at %s", src_grid.crs, grid.crs, grid.width, grid.height, resolution)
        return grid

    def reproject(self, source, target_crs, target_resolution=None, resampling=None):
        """Reproject a raster into another CRS.

        Parameters:
        -----------
        source : Raster
            Raster to reproject; it is not modified
        target_crs : CRS, str or int
            Destination CRS
        target_resolution : float or tuple of float, optional
            Forced destination cell size. Without it, a square cell preserving the source cell area at the raster
            center is used, which usually gives a non-round resolution.
        resampling : str or rasterio.enums.Resampling, optional
            Overrides the reprojector's default method

        Returns:
        --------
        raster : Raster
            New raster in ``target_crs``
        """
        return self._reproject(source, target_crs, target_resolution, resampling, stacklevel=4)

    def reproject_to_grid(self, source, target_grid, resampling=None):
        """Resample a raster onto a given grid, e.g. to align it with a reference raster.

        The destination keeps ``target_grid``'s CRS, transform and size; band count follows the source. If no
        destination cell falls inside the source, an all-nodata raster is returned and EmptyIntersectionError is
        issued as a warning, or raised when the reprojector is strict.

        Parameters:
        -----------
        source : Raster
            Raster to resample
        target_grid : GridDescriptor
            Destination grid
        resampling : str or rasterio.enums.Resampling, optional
            Overrides the reprojector's default method

        Returns:
        --------
        raster : Raster
            New raster on ``target_grid``
        """
        return self._reproject_to_grid(source, target_grid, resampling, stacklevel=4)

    # stacklevel counts frames up to the public caller, so warnings point at user code
    def _reproject(self, source, target_crs, target_resolution, resampling, stacklevel):
        self._check_source(source)
        dst_grid = self.plan(source, target_crs, target_resolution)
        return self._resample_onto(source, dst_grid, resampling, stacklevel)

    def _reproject_to_grid(self, source, target_grid, resampling, stacklevel):
        self._check_source(source)
        if target_grid.crs is None:
            raise UndefinedCRSError("Target grid has no CRS defined")

        nodata = source.nodata
        if nodata is None:
            nodata = target_grid.nodata if target_grid.nodata is not None else default_nodata(source.dtype)
        dst_grid = target_grid.replace(band_count=source.band_count, nodata=nodata)
        return self._resample_onto(source, dst_grid, resampling, stacklevel)

    def _check_source(self, source):
        if not isinstance(source, Raster):
            raise ValueError(f"source must be a Raster, got {type(source).__name__}")
        if source.crs is None:
            raise UndefinedCRSError("Source raster has no CRS defined; reprojection cannot be used without one")

    def _coordinate_transform(self, src_grid, target_crs):
        if src_grid.crs is None:
            raise UndefinedCRSError("Source grid has no CRS defined; reprojection cannot be used without one")
        target = parse_crs(target_crs)
        if target is None:
            raise UndefinedCRSError("Target CRS is not defined")
        return CoordinateTransform(src_grid.crs, target)

    def _default_resolution(self, src_grid, transform, dst_bbox):
        """Square destination cell with the same area as a source cell, mapped through the transform Jacobian."""
        if transform.is_identity:
            return src_grid.resolution

        cx, cy = src_grid.cell_to_world(src_grid.width / 2.0, src_grid.height / 2.0)
        step_x, step_y = src_grid.resolution
        jacobian = local_scale(transform, cx, cy, step_x, step_y)
        cell_area = 0.0
        if np.isfinite(jacobian).all():
            cell_area = abs(np.linalg.det(jacobian)) * abs(src_grid.transform.determinant)

        if cell_area > 0 and math.isfinite(cell_area):
            size = math.sqrt(cell_area)
        else:
            # Center outside the target domain: spread the source diagonal cell count over the destination diagonal
            logger.debug("No usable Jacobian at raster center, using the diagonal estimate")
            diagonal_cells = math.hypot(src_grid.width, src_grid.height)
            size = math.hypot(dst_bbox.width, dst_bbox.height) / diagonal_cells
        logger.debug("Default resolution %g %s", size, transform.target_crs.units)
        return size, size

    def _resample_onto(self, source, dst_grid, resampling, stacklevel):
        method = self.resampling if resampling is None else resampling_method(resampling)
        transform = CoordinateTransform(source.crs, dst_grid.crs)

        xs, ys = dst_grid.cell_centers()
        sx, sy = transform.inverse(xs, ys)
        cols, rows = source.grid.world_to_cell(sx, sy)

        nodata_out = dst_grid.nodata
        if nodata_out is None or (is_nan(nodata_out) and not np.issubdtype(source.dtype, np.floating)):
            nodata_out = default_nodata(source.dtype)
            dst_grid = dst_grid.replace(nodata=nodata_out)

        values = resample(source.data, cols, rows, method, nodata_in=source.nodata, nodata_out=nodata_out)

        inside = np.isfinite(cols) & np.isfinite(rows)
        inside &= (cols >= 0) & (cols < source.width) & (rows >= 0) & (rows < source.height)
        if not inside.any():
            message = f"Source extent {source.bounding_box()!r} does not overlap the destination grid {dst_grid!r}"
            if self.strict:
                raise EmptyIntersectionError(message)
            warnings.warn(EmptyIntersectionError(message), stacklevel=stacklevel)

        return Raster(values, dst_grid)


_default_reprojector = Reprojector()


def reproject(source, target_crs, target_resolution=None, resampling=None):
    """Reproject a raster with the default Reprojector. See ``Reprojector.reproject``."""
    return _default_reprojector._reproject(source, target_crs, target_resolution, resampling, stacklevel=4)


def reproject_to_grid(source, target_grid, resampling=None):
    """Resample a raster onto a grid with the default Reprojector. See ``Reprojector.reproject_to_grid``."""
    return _default_reprojector._reproject_to_grid(source, target_grid, resampling, stacklevel=4)
