# -*- coding: utf-8 -*-
"""Coordinate reference system handling.

The CRS class wraps a ``pyproj.CRS`` and adds the one capability the reprojection core needs from it:
projecting WGS84 longitude/latitude into the CRS and back. ``parse_crs`` acts as the registry that resolves
authority codes, PROJ strings and WKT into CRS values.
"""

import pyproj
from pyproj import Transformer
from pyproj.exceptions import CRSError, ProjError

from .errors import CRSMismatchError, UndefinedCRSError, UnsupportedCRSError

WGS84 = "EPSG:4326"


class CRS:
    """Immutable coordinate reference system with forward and inverse projection through lon/lat."""

    __slots__ = ("_crs", "_to_crs", "_to_lonlat")

    def __init__(self, user_input):
        """Resolve a CRS.

        Parameters:
        -----------
        user_input : str, int, CRS, pyproj.CRS or rasterio.crs.CRS
            Authority code ("EPSG:32618" or 32618), PROJ string, WKT or an existing CRS object

        Raises:
        -------
        UnsupportedCRSError
            If the input cannot be resolved, or the CRS is neither geographic nor projected
        """
        if isinstance(user_input, CRS):
            crs = user_input._crs
        else:
            # rasterio CRS objects go through their WKT
            if hasattr(user_input, "to_wkt") and not isinstance(user_input, pyproj.CRS):
                user_input = user_input.to_wkt()
            try:
                crs = pyproj.CRS.from_user_input(user_input)
            except CRSError as e:
                raise UnsupportedCRSError(f"Cannot resolve CRS from {user_input!r}: {e}") from e

        if not (crs.is_geographic or crs.is_projected):
            raise UnsupportedCRSError(f"CRS '{crs.name}' is neither geographic nor projected")

        try:
            to_crs = Transformer.from_crs(WGS84, crs, always_xy=True)
            to_lonlat = Transformer.from_crs(crs, WGS84, always_xy=True)
        except (CRSError, ProjError) as e:
            raise UnsupportedCRSError(f"No transform path between WGS84 and '{crs.name}': {e}") from e

        object.__setattr__(self, "_crs", crs)
        object.__setattr__(self, "_to_crs", to_crs)
        object.__setattr__(self, "_to_lonlat", to_lonlat)

    def __setattr__(self, name, value):
        raise AttributeError("CRS is immutable")

    def project(self, lon, lat):
        """Project WGS84 longitude/latitude into this CRS.

        Parameters:
        -----------
        lon, lat : float or numpy.ndarray
            Geographic coordinates in degrees

        Returns:
        --------
        x, y : float or numpy.ndarray
            Coordinates in this CRS; points outside the projection domain are non-finite
        """
        return self._to_crs.transform(lon, lat, errcheck=False)

    def unproject(self, x, y):
        """Inverse of ``project``: coordinates in this CRS back to WGS84 longitude/latitude."""
        return self._to_lonlat.transform(x, y, errcheck=False)

    @property
    def pyproj_crs(self):
        return self._crs

    @property
    def name(self):
        return self._crs.name

    @property
    def is_geographic(self):
        return self._crs.is_geographic

    @property
    def is_projected(self):
        return self._crs.is_projected

    @property
    def units(self):
        """Unit name of the first axis, e.g. "metre" or "degree"."""
        axes = self._crs.axis_info
        return axes[0].unit_name if axes else None

    def to_string(self):
        """Authority code when one exists ("EPSG:32618"), else a PROJ string."""
        authority = self._crs.to_authority()
        if authority:
            return f"{authority[0]}:{authority[1]}"
        return self._crs.to_proj4()

    def to_wkt(self):
        return self._crs.to_wkt()

    def to_rasterio(self):
        """Return the equivalent ``rasterio.crs.CRS``, as expected by rasterio writers."""
        from rasterio.crs import CRS as RasterioCRS

        return RasterioCRS.from_wkt(self.to_wkt())

    def __eq__(self, other):
        if isinstance(other, CRS):
            return self._crs == other._crs
        return NotImplemented

    def __hash__(self):
        # Equivalent CRSs can differ in WKT, so hash only what equivalence preserves
        return hash((self.is_geographic, self.units))

    def __str__(self):
        return self.to_string()

    def __repr__(self):
        return f"CRS('{self.to_string()}')"

    def __reduce__(self):
        return (CRS, (self.to_wkt(),))


def parse_crs(value):
    """Resolve a CRS specification into a CRS value.

    Parameters:
    -----------
    value : str, int, CRS, pyproj.CRS, rasterio.crs.CRS or None
        CRS specification

    Returns:
    --------
    crs : CRS or None
        Resolved CRS, or None if ``value`` is None
    """
    if value is None:
        return None
    if isinstance(value, CRS):
        return value
    return CRS(value)


def crs_of(item):
    """Return the CRS carried by a Raster, GridDescriptor, BoundingBox, GeoDataFrame or CRS input."""
    if item is None:
        return None
    if isinstance(item, CRS):
        return item
    if isinstance(item, (str, int, pyproj.CRS)):
        return parse_crs(item)
    if hasattr(item, "crs"):
        return parse_crs(item.crs)
    return parse_crs(item)


def require_matching_crs(*items):
    """Check that every item shares one CRS.

    Layers drawn or combined across different CRSs silently misalign, so this raises instead.

    Parameters:
    -----------
    *items : Raster, GridDescriptor, BoundingBox, geopandas.GeoDataFrame or CRS
        Items to compare

    Returns:
    --------
    crs : CRS
        The shared CRS

    Raises:
    -------
    UndefinedCRSError
        If an item has no CRS
    CRSMismatchError
        If two items have different CRSs
    """
    if not items:
        raise ValueError("At least one item is required")

    shared = None
    for index, item in enumerate(items):
        crs = crs_of(item)
        if crs is None:
            raise UndefinedCRSError(f"Item {index} ({type(item).__name__}) has no CRS defined")
        if shared is None:
            shared = crs
        elif crs != shared:
            raise CRSMismatchError(f"Item {index} is in {crs}, expected {shared}")
    return shared
