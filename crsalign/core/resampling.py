# -*- coding: utf-8 -*-
"""Resampling engine: samples source cells at fractional cell coordinates.

Every band is resampled independently. Nearest-neighbor picks the cell containing the sample point; bilinear
blends the four surrounding cell centers. A blend that touches a nodata or NaN cell yields nodata rather than a
mixed value, and integer rasters are always sampled with nearest-neighbor so no intermediate values are invented.
"""

import logging

import numpy as np
from rasterio.enums import Resampling

from .grid import is_nan

logger = logging.getLogger(__name__)

SUPPORTED_METHODS = (Resampling.nearest, Resampling.bilinear)


def resampling_method(method):
    """Resolve a resampling method given as a ``rasterio.enums.Resampling`` member or its name.

    Raises:
    -------
    ValueError
        If the method is unknown or not supported by this engine
    """
    if method is None:
        return Resampling.nearest
    if isinstance(method, str):
        try:
            method = Resampling[method.lower()]
        except KeyError as e:
            raise ValueError(f"Unknown resampling method: {method}") from e
    if method not in SUPPORTED_METHODS:
        names = ", ".join(m.name for m in SUPPORTED_METHODS)
        raise ValueError(f"Unsupported resampling method '{getattr(method, 'name', method)}', expected one of: {names}")
    return method


def default_nodata(dtype):
    """Nodata sentinel for a dtype when the source raster defines none.

    NaN for floats, the minimum for signed integers and the maximum for unsigned integers.
    """
    dtype = np.dtype(dtype)
    if np.issubdtype(dtype, np.floating):
        return float("nan")
    if np.issubdtype(dtype, np.signedinteger):
        return int(np.iinfo(dtype).min)
    if np.issubdtype(dtype, np.unsignedinteger):
        return int(np.iinfo(dtype).max)
    raise ValueError(f"No nodata sentinel for dtype {dtype}")


def _missing(values, nodata):
    """Mask of values that count as missing: NaN, or equal to the nodata value."""
    missing = np.zeros(values.shape, dtype=bool)
    if np.issubdtype(values.dtype, np.floating):
        missing |= np.isnan(values)
    if nodata is not None and not is_nan(nodata):
        missing |= values == nodata
    return missing


def _nearest(data, cols, rows, nodata_in, nodata_out):
    bands, height, width = data.shape
    ci = np.floor(cols)
    ri = np.floor(rows)
    inside = np.isfinite(ci) & np.isfinite(ri) & (ci >= 0) & (ci < width) & (ri >= 0) & (ri < height)

    out = np.full((bands,) + cols.shape, nodata_out, dtype=data.dtype)
    ci = ci[inside].astype(np.intp)
    ri = ri[inside].astype(np.intp)

    sampled = data[:, ri, ci]
    sampled_missing = _missing(sampled, nodata_in)
    sampled[sampled_missing] = nodata_out
    out[:, inside] = sampled
    return out


def _bilinear(data, cols, rows, nodata_in, nodata_out):
    bands, height, width = data.shape
    inside = np.isfinite(cols) & np.isfinite(rows) & (cols >= 0) & (cols < width) & (rows >= 0) & (rows < height)

    out = np.full((bands,) + cols.shape, nodata_out, dtype=data.dtype)
    # Positions relative to cell centers; neighbors beyond the edge are clamped to the edge cell
    u = cols[inside] - 0.5
    v = rows[inside] - 0.5
    c0 = np.floor(u)
    r0 = np.floor(v)
    fu = u - c0
    fv = v - r0

    c0 = c0.astype(np.intp)
    r0 = r0.astype(np.intp)
    c1 = np.clip(c0 + 1, 0, width - 1)
    r1 = np.clip(r0 + 1, 0, height - 1)
    c0 = np.clip(c0, 0, width - 1)
    r0 = np.clip(r0, 0, height - 1)

    blended = np.zeros((bands, u.size), dtype=np.float64)
    missing = np.zeros((bands, u.size), dtype=bool)
    for r, c, weight in (
        (r0, c0, (1.0 - fu) * (1.0 - fv)),
        (r0, c1, fu * (1.0 - fv)),
        (r1, c0, (1.0 - fu) * fv),
        (r1, c1, fu * fv),
    ):
        values = data[:, r, c]
        corner_missing = _missing(values, nodata_in)
        # Only neighbors that carry weight can spoil the blend
        missing |= corner_missing & (weight > 0)
        blended += np.where(corner_missing, 0.0, values.astype(np.float64)) * weight

    blended = blended.astype(data.dtype)
    blended[missing] = nodata_out
    out[:, inside] = blended
    return out


def resample(data, cols, rows, method=Resampling.nearest, nodata_in=None, nodata_out=None):
    """Sample a (bands, height, width) array at fractional cell coordinates.

    Parameters:
    -----------
    data : numpy.ndarray
        Source values, shape (bands, height, width)
    cols, rows : numpy.ndarray
        Fractional source cell coordinates of each sample, same shape; cell (i, j) spans [i, i+1) x [j, j+1)
    method : rasterio.enums.Resampling or str
        ``nearest`` or ``bilinear``
    nodata_in : int or float, optional
        Source nodata value
    nodata_out : int or float, optional
        Value written where a sample has no data; defaults to ``nodata_in`` or the dtype sentinel

    Returns:
    --------
    values : numpy.ndarray
        Array of shape (bands,) + cols.shape with the source dtype
    """
    method = resampling_method(method)
    cols = np.asarray(cols, dtype=np.float64)
    rows = np.asarray(rows, dtype=np.float64)
    if cols.shape != rows.shape:
        raise ValueError(f"cols and rows must have the same shape, got {cols.shape} and {rows.shape}")
    if nodata_out is None:
        nodata_out = nodata_in if nodata_in is not None else default_nodata(data.dtype)

    if method == Resampling.bilinear and not np.issubdtype(data.dtype, np.floating):
        logger.info("Bilinear resampling requested for %s data, using nearest-neighbor", data.dtype)
        method = Resampling.nearest

    if method == Resampling.bilinear:
        return _bilinear(data, cols, rows, nodata_in, nodata_out)
    return _nearest(data, cols, rows, nodata_in, nodata_out)
