# -*- coding: utf-8 -*-
"""Coordinate transforms between two CRSs, and the bounding-box and scale math built on top of them."""

import logging

import numpy as np

from .crs import parse_crs
from .errors import EmptyIntersectionError, UndefinedCRSError
from .grid import BoundingBox

logger = logging.getLogger(__name__)

DEFAULT_POINTS_PER_EDGE = 21


class CoordinateTransform:
    """Maps coordinates from a source CRS to a target CRS and back.

    The forward direction unprojects source coordinates to WGS84 longitude/latitude and projects them into the
    target CRS; the inverse runs the same chain the other way. When both CRSs are equal the transform is an exact
    identity.
    """

    def __init__(self, source_crs, target_crs):
        """Initialize the transform.

        Parameters:
        -----------
        source_crs : CRS, str or int
            CRS coordinates are given in
        target_crs : CRS, str or int
            CRS coordinates are mapped to

        Raises:
        -------
        UndefinedCRSError
            If either CRS is None
        UnsupportedCRSError
            If either CRS cannot be resolved to a working projection
        """
        if source_crs is None:
            raise UndefinedCRSError("Source CRS is not defined")
        if target_crs is None:
            raise UndefinedCRSError("Target CRS is not defined")

        self.source_crs = parse_crs(source_crs)
        self.target_crs = parse_crs(target_crs)
        self.is_identity = self.source_crs == self.target_crs

    def forward(self, x, y):
        """Source CRS coordinates to target CRS coordinates; arrays in, float64 arrays out."""
        x = np.asarray(x, dtype=np.float64)
        y = np.asarray(y, dtype=np.float64)
        if self.is_identity:
            return x.copy(), y.copy()
        lon, lat = self.source_crs.unproject(x, y)
        tx, ty = self.target_crs.project(lon, lat)
        return np.asarray(tx, dtype=np.float64), np.asarray(ty, dtype=np.float64)

    def inverse(self, x, y):
        """Target CRS coordinates back to source CRS coordinates."""
        x = np.asarray(x, dtype=np.float64)
        y = np.asarray(y, dtype=np.float64)
        if self.is_identity:
            return x.copy(), y.copy()
        lon, lat = self.target_crs.unproject(x, y)
        sx, sy = self.source_crs.project(lon, lat)
        return np.asarray(sx, dtype=np.float64), np.asarray(sy, dtype=np.float64)

    def __repr__(self):
        return f"CoordinateTransform({self.source_crs!r} -> {self.target_crs!r})"


def densify_boundary(bbox, points_per_edge=DEFAULT_POINTS_PER_EDGE):
    """Sample points along the boundary of a box.

    Parameters:
    -----------
    bbox : BoundingBox
        Box to sample
    points_per_edge : int
        Points per edge including both corners; at least 3 so edge midpoints are always present

    Returns:
    --------
    xs, ys : numpy.ndarray
        Boundary sample coordinates
    """
    if points_per_edge < 3:
        raise ValueError(f"points_per_edge must be at least 3, got {points_per_edge}")

    t = np.linspace(0.0, 1.0, points_per_edge)
    xs_edge = bbox.xmin + t * bbox.width
    ys_edge = bbox.ymin + t * bbox.height

    xs = np.concatenate([xs_edge, np.full_like(t, bbox.xmax), xs_edge[::-1], np.full_like(t, bbox.xmin)])
    ys = np.concatenate([np.full_like(t, bbox.ymax), ys_edge[::-1], np.full_like(t, bbox.ymin), ys_edge])
    return xs, ys


def transform_bounds(bbox, target_crs, points_per_edge=DEFAULT_POINTS_PER_EDGE, transform=None):
    """Enclosing rectangle of a box after transforming it into another CRS.

    Corners, edge midpoints and further edge samples are transformed so curved edges are covered. Samples that
    fall outside the target projection's domain are ignored.

    Parameters:
    -----------
    bbox : BoundingBox
        Box in its own CRS
    target_crs : CRS, str or int
        CRS to transform into
    points_per_edge : int
        Boundary samples per edge
    transform : CoordinateTransform, optional
        Prebuilt transform from the box CRS to ``target_crs``

    Returns:
    --------
    bbox : BoundingBox
        Enclosing box in the target CRS

    Raises:
    -------
    EmptyIntersectionError
        If no boundary sample can be represented in the target CRS
    """
    if transform is None:
        transform = CoordinateTransform(bbox.crs, target_crs)

    xs, ys = densify_boundary(bbox, points_per_edge)
    tx, ty = transform.forward(xs, ys)
    finite = np.isfinite(tx) & np.isfinite(ty)
    if not finite.any():
        raise EmptyIntersectionError(f"No part of {bbox!r} can be represented in {transform.target_crs}")
    if not finite.all():
        logger.debug("Dropped %d boundary samples outside the target domain", int((~finite).sum()))

    tx, ty = tx[finite], ty[finite]
    return BoundingBox(tx.min(), ty.min(), tx.max(), ty.max(), crs=transform.target_crs)


def local_scale(transform, x, y, dx, dy):
    """Jacobian of a forward transform at a point, by finite differences over one cell.

    Parameters:
    -----------
    transform : CoordinateTransform
        Transform to differentiate
    x, y : float
        Point in source coordinates
    dx, dy : float
        Step sizes along the source x and y axes

    Returns:
    --------
    jacobian : numpy.ndarray
        2x2 array [[dX/dx, dX/dy], [dY/dx, dY/dy]]; NaN entries when the point is outside the target domain
    """
    px = np.array([x, x + dx, x], dtype=np.float64)
    py = np.array([y, y, y + dy], dtype=np.float64)
    tx, ty = transform.forward(px, py)
    return np.array(
        [
            [(tx[1] - tx[0]) / dx, (tx[2] - tx[0]) / dy],
            [(ty[1] - ty[0]) / dx, (ty[2] - ty[0]) / dy],
        ]
    )
