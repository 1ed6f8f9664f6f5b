# -*- coding: utf-8 -*-
"""Defines the Raster class: one GridDescriptor plus a dense (bands, height, width) array of cell values.

A Raster is an immutable value. Operations that change the grid, such as reprojection, produce a new Raster and
leave the source untouched.
"""

import numpy as np
import pandas as pd

from .grid import GridDescriptor, is_nan


class Raster:
    """Immutable raster: a grid descriptor and its cell values."""

    __slots__ = ("_grid", "_data")

    def __init__(self, data, grid):
        """Initialize a Raster.

        Parameters:
        -----------
        data : numpy.ndarray
            Cell values with shape (bands, height, width); a 2D array is read as a single band
        grid : GridDescriptor
            Grid the values sit on; its shape must match the data
        """
        data = np.array(data, copy=True)
        if data.ndim == 2:
            data = data.reshape(1, *data.shape)
        if data.ndim != 3:
            raise ValueError(f"Raster data must be 2D or 3D, got {data.ndim}D")
        if data.dtype == np.bool_ or not np.issubdtype(data.dtype, np.number):
            raise ValueError(f"Raster data must be numeric, got dtype {data.dtype}")
        if np.issubdtype(data.dtype, np.complexfloating):
            raise ValueError("Complex rasters are not supported")
        if not isinstance(grid, GridDescriptor):
            raise ValueError(f"grid must be a GridDescriptor, got {type(grid).__name__}")
        if data.shape != grid.shape:
            raise ValueError(f"Data shape {data.shape} does not match grid shape {grid.shape}")

        data.setflags(write=False)
        object.__setattr__(self, "_grid", grid)
        object.__setattr__(self, "_data", data)

    def __setattr__(self, name, value):
        raise AttributeError("Raster is immutable")

    @classmethod
    def from_array(cls, data, transform, crs=None, nodata=None):
        """Build a Raster from an array, deriving the grid size and band count from the data."""
        data = np.asarray(data)
        if data.ndim == 2:
            data = data.reshape(1, *data.shape)
        if data.ndim != 3:
            raise ValueError(f"Raster data must be 2D or 3D, got {data.ndim}D")
        bands, height, width = data.shape
        grid = GridDescriptor(crs, transform, width, height, band_count=bands, nodata=nodata)
        return cls(data, grid)

    @property
    def grid(self):
        return self._grid

    @property
    def data(self):
        """Read-only (bands, height, width) array."""
        return self._data

    @property
    def crs(self):
        return self._grid.crs

    @property
    def transform(self):
        return self._grid.transform

    @property
    def nodata(self):
        return self._grid.nodata

    @property
    def dtype(self):
        return self._data.dtype

    @property
    def width(self):
        return self._grid.width

    @property
    def height(self):
        return self._grid.height

    @property
    def band_count(self):
        return self._grid.band_count

    @property
    def shape(self):
        return self._data.shape

    @property
    def resolution(self):
        return self._grid.resolution

    def bounding_box(self):
        return self._grid.bounding_box()

    def band(self, index):
        """Return one band as a 2D read-only array.

        Parameters:
        -----------
        index : int
            Band number, starting at 1 as in rasterio
        """
        if not 1 <= index <= self.band_count:
            raise ValueError(f"Band {index} out of range 1..{self.band_count}")
        return self._data[index - 1]

    def valid_mask(self):
        """Boolean (bands, height, width) mask, True where a cell holds data."""
        mask = np.ones(self._data.shape, dtype=bool)
        if np.issubdtype(self.dtype, np.floating):
            mask &= ~np.isnan(self._data)
        if self.nodata is not None and not is_nan(self.nodata):
            mask &= self._data != self.nodata
        return mask

    def with_crs(self, crs):
        """Return a new Raster with ``crs`` assigned to the same grid.

        This only labels the data; cell values and transform are unchanged. Use a Reprojector to change CRS.
        """
        return Raster(self._data, self._grid.replace(crs=crs))

    def to_points(self, band=1, skip_nodata=True):
        """Flatten one band into (x, y, value) tuples at cell centers, row-major.

        Parameters:
        -----------
        band : int
            Band number, starting at 1
        skip_nodata : bool
            Whether to leave out cells without data

        Returns:
        --------
        points : list of tuple
            (x, y, value) for each cell
        """
        values = self.band(band)
        xs, ys = self._grid.cell_centers()
        if skip_nodata:
            keep = self.valid_mask()[band - 1]
            xs, ys, values = xs[keep], ys[keep], values[keep]
        return list(zip(xs.ravel().tolist(), ys.ravel().tolist(), values.ravel().tolist(), strict=True))

    def to_dataframe(self, skip_nodata=True):
        """Point view of all bands as a DataFrame with x, y and band_1..band_n columns.

        With ``skip_nodata`` a cell is dropped only when every band lacks data.
        """
        xs, ys = self._grid.cell_centers()
        frame = {"x": xs.ravel(), "y": ys.ravel()}
        for i in range(self.band_count):
            frame[f"band_{i + 1}"] = self._data[i].ravel()
        df = pd.DataFrame(frame)

        if skip_nodata:
            keep = self.valid_mask().any(axis=0).ravel()
            df = df[keep].reset_index(drop=True)
        return df

    def __eq__(self, other):
        if not isinstance(other, Raster):
            return NotImplemented
        return self._grid == other._grid and np.array_equal(self._data, other._data, equal_nan=self._can_hold_nan())

    def _can_hold_nan(self):
        return np.issubdtype(self.dtype, np.floating)

    __hash__ = None

    def __repr__(self):
        return f"Raster(shape={self.shape}, dtype={self.dtype}, grid={self._grid!r})"
