# -*- coding: utf-8 -*-
"""Exceptions raised while aligning rasters and vectors across coordinate reference systems."""


class CRSAlignError(Exception):
    """Base class for all crsalign errors."""


class UndefinedCRSError(CRSAlignError):
    """A raster, grid or layer has no coordinate reference system defined.

    Reprojection cannot be used if no CRS is defined: assign one first with ``Raster.with_crs``.
    """


class UnsupportedCRSError(CRSAlignError):
    """A CRS could not be resolved, or no transform path exists between two CRSs."""


class CRSMismatchError(CRSAlignError):
    """Two inputs that must share a CRS do not."""


class SingularTransformError(CRSAlignError):
    """An affine transform is degenerate (zero determinant) and cannot be inverted."""


class EmptyIntersectionError(CRSAlignError, UserWarning):
    """The source raster does not overlap the destination grid.

    This is also a ``UserWarning`` so the condition can be surfaced with ``warnings.warn``
    while still returning the (all nodata) result.
    """
