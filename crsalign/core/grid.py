# -*- coding: utf-8 -*-
"""Defines the BoundingBox and GridDescriptor value types describing where raster cells sit in space.

A GridDescriptor couples a CRS with an affine transform mapping (column, row) cell coordinates to (x, y)
world coordinates, plus the grid size, band count and nodata value. Both types are immutable and compare
structurally.
"""

import math

import numpy as np
from affine import Affine, TransformNotInvertibleError

from .crs import parse_crs
from .errors import CRSMismatchError, SingularTransformError

# Relative tolerance under which span / resolution is treated as a whole number of cells
SIZE_TOLERANCE = 1e-6
# Determinants smaller than this (relative to the squared cell size) are treated as singular
DETERMINANT_TOLERANCE = 1e-12


class BoundingBox:
    """Axis-aligned rectangle {xmin, ymin, xmax, ymax} in a specific CRS."""

    __slots__ = ("xmin", "ymin", "xmax", "ymax", "crs")

    def __init__(self, xmin, ymin, xmax, ymax, crs=None):
        values = [float(v) for v in (xmin, ymin, xmax, ymax)]
        if not all(math.isfinite(v) for v in values):
            raise ValueError(f"Bounding box coordinates must be finite, got {tuple(values)}")
        if values[0] > values[2] or values[1] > values[3]:
            raise ValueError(f"Invalid bounding box ordering: {tuple(values)}")

        for name, value in zip(("xmin", "ymin", "xmax", "ymax"), values, strict=True):
            object.__setattr__(self, name, value)
        object.__setattr__(self, "crs", parse_crs(crs))

    def __setattr__(self, name, value):
        raise AttributeError("BoundingBox is immutable")

    @property
    def width(self):
        return self.xmax - self.xmin

    @property
    def height(self):
        return self.ymax - self.ymin

    @property
    def center(self):
        return (self.xmin + self.xmax) / 2.0, (self.ymin + self.ymax) / 2.0

    def as_tuple(self):
        return self.xmin, self.ymin, self.xmax, self.ymax

    def corners(self):
        """Corner points, clockwise from the upper left."""
        return [
            (self.xmin, self.ymax),
            (self.xmax, self.ymax),
            (self.xmax, self.ymin),
            (self.xmin, self.ymin),
        ]

    def _check_comparable(self, other):
        if self.crs != other.crs:
            raise CRSMismatchError(f"Cannot compare a box in {self.crs} with a box in {other.crs} without a transform")

    def intersects(self, other):
        """Whether two boxes in the same CRS overlap (touching edges count)."""
        self._check_comparable(other)
        return not (
            other.xmin > self.xmax or other.xmax < self.xmin or other.ymin > self.ymax or other.ymax < self.ymin
        )

    def intersection(self, other):
        """Overlapping box, or None if the boxes are disjoint."""
        if not self.intersects(other):
            return None
        return BoundingBox(
            max(self.xmin, other.xmin),
            max(self.ymin, other.ymin),
            min(self.xmax, other.xmax),
            min(self.ymax, other.ymax),
            crs=self.crs,
        )

    def union(self, other):
        self._check_comparable(other)
        return BoundingBox(
            min(self.xmin, other.xmin),
            min(self.ymin, other.ymin),
            max(self.xmax, other.xmax),
            max(self.ymax, other.ymax),
            crs=self.crs,
        )

    def __eq__(self, other):
        if isinstance(other, BoundingBox):
            return self.as_tuple() == other.as_tuple() and self.crs == other.crs
        return NotImplemented

    def __hash__(self):
        return hash((self.as_tuple(), self.crs))

    def __repr__(self):
        return f"BoundingBox({self.xmin}, {self.ymin}, {self.xmax}, {self.ymax}, crs={self.crs!r})"


def is_nan(value):
    """True only for a floating-point NaN; integers and None are never NaN."""
    return isinstance(value, (float, np.floating)) and math.isnan(value)


def _coerce_nodata(nodata):
    # Integer nodata stays an exact int so 64-bit sentinels keep their value
    if nodata is None:
        return None
    if isinstance(nodata, (int, np.integer)) and not isinstance(nodata, bool):
        return int(nodata)
    return float(nodata)


def _same_nodata(a, b):
    if a is None or b is None:
        return a is None and b is None
    if is_nan(a) or is_nan(b):
        return is_nan(a) and is_nan(b)
    return a == b


def _whole_cells(span, resolution):
    """Number of cells of size ``resolution`` needed to cover ``span``, forgiving float noise on exact multiples."""
    cells = span / resolution
    nearest = round(cells)
    if nearest >= 1 and abs(cells - nearest) <= SIZE_TOLERANCE * max(1.0, nearest):
        return int(nearest)
    return max(1, int(math.ceil(cells)))


def check_resolution(resolution):
    """Normalize a resolution to a positive ``(dx, dy)`` pair.

    Parameters:
    -----------
    resolution : float or tuple of float
        Single cell size for both axes, or (dx, dy)

    Returns:
    --------
    dx, dy : float
        Cell sizes

    Raises:
    -------
    SingularTransformError
        If a cell size is zero (the grid transform would not be invertible)
    ValueError
        If a cell size is negative or not finite
    """
    if np.isscalar(resolution):
        dx = dy = resolution
    else:
        try:
            dx, dy = resolution
        except (TypeError, ValueError) as e:
            raise ValueError(f"Resolution must be a number or a (dx, dy) pair, got {resolution!r}") from e

    dx, dy = float(dx), float(dy)
    if dx == 0 or dy == 0:
        raise SingularTransformError(f"Resolution ({dx}, {dy}) has a zero cell size")
    if not (math.isfinite(dx) and math.isfinite(dy)) or dx < 0 or dy < 0:
        raise ValueError(f"Resolution must be positive and finite, got ({dx}, {dy})")
    return dx, dy


class GridDescriptor:
    """Spatial grid of a raster: CRS, affine transform, size, band count and nodata value."""

    __slots__ = ("crs", "transform", "width", "height", "band_count", "nodata")

    def __init__(self, crs, transform, width, height, band_count=1, nodata=None):
        """Initialize a grid.

        Parameters:
        -----------
        crs : CRS, str, int or None
            Coordinate reference system of the grid; None when undefined
        transform : affine.Affine or sequence of 6 floats
            Mapping from (col, row) to (x, y); a 6-sequence is read in affine order (a, b, c, d, e, f)
        width, height : int
            Number of columns and rows, both positive
        band_count : int
            Number of bands, at least 1
        nodata : int or float, optional
            Value marking cells without data
        """
        if not isinstance(transform, Affine):
            transform = Affine(*transform)
        width, height, band_count = int(width), int(height), int(band_count)

        if width <= 0 or height <= 0:
            raise ValueError(f"Grid width and height must be positive, got {width}x{height}")
        if band_count < 1:
            raise ValueError(f"Band count must be at least 1, got {band_count}")

        scale = max(abs(transform.a), abs(transform.b), abs(transform.d), abs(transform.e))
        if scale == 0 or abs(transform.determinant) <= DETERMINANT_TOLERANCE * scale * scale:
            raise SingularTransformError(f"Grid transform is not invertible: {tuple(transform)[:6]}")

        object.__setattr__(self, "crs", parse_crs(crs))
        object.__setattr__(self, "transform", transform)
        object.__setattr__(self, "width", width)
        object.__setattr__(self, "height", height)
        object.__setattr__(self, "band_count", band_count)
        object.__setattr__(self, "nodata", _coerce_nodata(nodata))

    def __setattr__(self, name, value):
        raise AttributeError("GridDescriptor is immutable")

    @classmethod
    def from_bounds(cls, bbox, resolution, crs=None, band_count=1, nodata=None):
        """Build a north-up grid covering a bounding box.

        Width and height are ``ceil(span / resolution)``; the extra coverage that rounding up adds is split
        evenly on both sides of the box.

        Parameters:
        -----------
        bbox : BoundingBox
            Area to cover
        resolution : float or tuple of float
            Cell size (dx, dy)
        crs : CRS, str or int, optional
            Grid CRS; defaults to the box CRS
        band_count : int
            Number of bands
        nodata : int or float, optional
            Nodata value

        Returns:
        --------
        grid : GridDescriptor
            New grid
        """
        dx, dy = check_resolution(resolution)
        width = _whole_cells(bbox.width, dx)
        height = _whole_cells(bbox.height, dy)

        pad_x = (width * dx - bbox.width) / 2.0
        pad_y = (height * dy - bbox.height) / 2.0
        transform = Affine(dx, 0.0, bbox.xmin - pad_x, 0.0, -dy, bbox.ymax + pad_y)

        return cls(crs if crs is not None else bbox.crs, transform, width, height, band_count, nodata)

    @property
    def shape(self):
        return self.band_count, self.height, self.width

    @property
    def resolution(self):
        """Absolute cell size (dx, dy) along the grid axes."""
        t = self.transform
        return math.hypot(t.a, t.d), math.hypot(t.b, t.e)

    @property
    def is_north_up(self):
        return self.transform.b == 0 and self.transform.d == 0

    def cell_to_world(self, col, row):
        """Apply the affine transform to cell coordinates.

        Integer coordinates address cell corners; add 0.5 for cell centers. Accepts scalars or arrays.
        """
        t = self.transform
        x = t.a * col + t.b * row + t.c
        y = t.d * col + t.e * row + t.f
        return x, y

    def world_to_cell(self, x, y):
        """Fractional (col, row) of world coordinates, through the inverse transform.

        Raises:
        -------
        SingularTransformError
            If the transform cannot be inverted
        """
        try:
            inverse = ~self.transform
        except TransformNotInvertibleError as e:
            raise SingularTransformError(f"Grid transform is not invertible: {tuple(self.transform)[:6]}") from e

        col = inverse.a * x + inverse.b * y + inverse.c
        row = inverse.d * x + inverse.e * y + inverse.f
        return col, row

    def cell_centers(self):
        """World coordinates of every cell center as two (height, width) arrays."""
        cols, rows = np.meshgrid(
            np.arange(self.width, dtype=np.float64) + 0.5,
            np.arange(self.height, dtype=np.float64) + 0.5,
        )
        return self.cell_to_world(cols, rows)

    def bounding_box(self):
        """Enclosing box of the four grid corners, in the grid CRS."""
        xs, ys = self.cell_to_world(
            np.array([0.0, self.width, self.width, 0.0]),
            np.array([0.0, 0.0, self.height, self.height]),
        )
        return BoundingBox(xs.min(), ys.min(), xs.max(), ys.max(), crs=self.crs)

    def replace(self, **changes):
        """Return a copy of this grid with some fields replaced."""
        fields = {name: getattr(self, name) for name in self.__slots__}
        unknown = set(changes) - set(fields)
        if unknown:
            raise ValueError(f"Unknown grid fields: {sorted(unknown)}")
        fields.update(changes)
        return GridDescriptor(**fields)

    def __eq__(self, other):
        if not isinstance(other, GridDescriptor):
            return NotImplemented
        return (
            self.crs == other.crs
            and tuple(self.transform) == tuple(other.transform)
            and self.shape == other.shape
            and _same_nodata(self.nodata, other.nodata)
        )

    def __hash__(self):
        nodata = "nan" if is_nan(self.nodata) else self.nodata
        return hash((self.crs, tuple(self.transform), self.shape, nodata))

    def __repr__(self):
        return (
            f"GridDescriptor(crs={self.crs!r}, transform={tuple(self.transform)[:6]}, "
            f"width={self.width}, height={self.height}, band_count={self.band_count}, nodata={self.nodata})"
        )
