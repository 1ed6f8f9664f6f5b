# -*- coding: utf-8 -*-
"""Tests for the BoundingBox and GridDescriptor value types."""

import math

import numpy as np
import pytest
from affine import Affine

from crsalign import BoundingBox, CRSMismatchError, GridDescriptor, SingularTransformError


@pytest.fixture
def grid():
    """Fixture providing a 10x5 north-up grid with 2 unit cells."""
    return GridDescriptor("EPSG:32618", Affine(2.0, 0.0, 100.0, 0.0, -2.0, 200.0), 10, 5, band_count=2, nodata=-1)


def test_cell_to_world_applies_transform_exactly(grid):
    x, y = grid.cell_to_world(3, 4)
    assert (x, y) == (106.0, 192.0), "Cell corner mapped to the wrong world coordinate."

    x, y = grid.cell_to_world(0.5, 0.5)
    assert (x, y) == (101.0, 199.0), "Cell center mapped to the wrong world coordinate."


def test_world_to_cell_inverts_cell_to_world(grid):
    col, row = grid.world_to_cell(*grid.cell_to_world(3.25, 1.75))
    assert col == pytest.approx(3.25)
    assert row == pytest.approx(1.75)


def test_world_to_cell_on_rotated_grid():
    rotated = GridDescriptor(None, Affine(1.0, 1.0, 10.0, -1.0, 1.0, 20.0), 4, 4)
    cols = np.array([0.0, 2.5, 3.9])
    rows = np.array([0.0, 3.5, 1.1])
    back_cols, back_rows = rotated.world_to_cell(*rotated.cell_to_world(cols, rows))
    np.testing.assert_allclose(back_cols, cols, atol=1e-12)
    np.testing.assert_allclose(back_rows, rows, atol=1e-12)


@pytest.mark.parametrize(
    "transform",
    [
        Affine(1.0, 2.0, 0.0, 2.0, 4.0, 0.0),
        Affine(0.0, 0.0, 0.0, 0.0, -1.0, 0.0),
        Affine(1.0, 0.0, 0.0, 0.0, 0.0, 0.0),
    ],
)
def test_degenerate_transform_is_rejected(transform):
    with pytest.raises(SingularTransformError):
        GridDescriptor("EPSG:4326", transform, 10, 10)


@pytest.mark.parametrize("width, height, bands", [(0, 10, 1), (10, -1, 1), (10, 10, 0)])
def test_invalid_sizes_are_rejected(width, height, bands):
    with pytest.raises(ValueError):
        GridDescriptor("EPSG:4326", Affine.identity(), width, height, band_count=bands)


def test_bounding_box_from_corners(grid):
    bbox = grid.bounding_box()
    assert bbox.as_tuple() == (100.0, 190.0, 120.0, 200.0)
    assert bbox.crs == grid.crs


def test_bounding_box_of_rotated_grid():
    swapped = GridDescriptor(None, Affine(0.0, 1.0, 0.0, 1.0, 0.0, 0.0), 4, 2)
    assert swapped.bounding_box().as_tuple() == (0.0, 0.0, 2.0, 4.0)


def test_resolution_and_shape(grid):
    assert grid.resolution == (2.0, 2.0)
    assert grid.shape == (2, 5, 10)
    assert grid.is_north_up


def test_cell_centers(grid):
    xs, ys = grid.cell_centers()
    assert xs.shape == (5, 10)
    assert (xs[0, 0], ys[0, 0]) == (101.0, 199.0)
    assert (xs[-1, -1], ys[-1, -1]) == (119.0, 191.0)


def test_from_bounds_exact_multiple():
    built = GridDescriptor.from_bounds(BoundingBox(0, 0, 10, 5, crs="EPSG:32618"), 1.0)
    assert (built.width, built.height) == (10, 5)
    assert tuple(built.transform)[:6] == (1.0, 0.0, 0.0, 0.0, -1.0, 5.0)
    assert built.crs == BoundingBox(0, 0, 1, 1, crs="EPSG:32618").crs


def test_from_bounds_ignores_float_noise():
    built = GridDescriptor.from_bounds(BoundingBox(0, 0, 0.3, 0.3), (0.1, 0.1))
    assert (built.width, built.height) == (3, 3), "An exact multiple should not gain an extra cell."


def test_from_bounds_rounds_up_and_centers():
    built = GridDescriptor.from_bounds(BoundingBox(0, 0, 10.5, 5), 1.0)
    assert built.width == 11
    assert built.transform.c == pytest.approx(-0.25)
    bbox = built.bounding_box()
    assert bbox.xmin <= 0 and bbox.xmax >= 10.5


def test_from_bounds_resolution_validation():
    bbox = BoundingBox(0, 0, 10, 10)
    with pytest.raises(SingularTransformError):
        GridDescriptor.from_bounds(bbox, (0, 1))
    with pytest.raises(ValueError):
        GridDescriptor.from_bounds(bbox, (-1, 1))
    with pytest.raises(ValueError):
        GridDescriptor.from_bounds(bbox, (float("nan"), 1))


def test_structural_equality(grid):
    same = GridDescriptor("EPSG:32618", Affine(2.0, 0.0, 100.0, 0.0, -2.0, 200.0), 10, 5, band_count=2, nodata=-1)
    assert grid == same
    assert hash(grid) == hash(same)
    assert grid != grid.replace(nodata=0)
    assert grid != grid.replace(crs="EPSG:4326")

    nan_a = grid.replace(nodata=float("nan"))
    nan_b = grid.replace(nodata=math.nan)
    assert nan_a == nan_b, "NaN nodata values should compare equal."


def test_integer_nodata_is_kept_exact(grid):
    largest = 2**64 - 1
    wide = grid.replace(nodata=np.uint64(largest))
    assert wide.nodata == largest
    assert isinstance(wide.nodata, int)
    assert grid.replace(nodata=-9999) == grid.replace(nodata=-9999.0)
    assert hash(grid.replace(nodata=-9999)) == hash(grid.replace(nodata=-9999.0))


def test_grid_is_immutable(grid):
    with pytest.raises(AttributeError):
        grid.width = 20


def test_replace_rejects_unknown_fields(grid):
    with pytest.raises(ValueError):
        grid.replace(colour="red")


def test_bounding_box_ordering():
    with pytest.raises(ValueError):
        BoundingBox(10, 0, 0, 10)


def test_bounding_box_intersection():
    a = BoundingBox(0, 0, 10, 10, crs="EPSG:32618")
    b = BoundingBox(5, 5, 15, 15, crs="EPSG:32618")
    c = BoundingBox(20, 20, 30, 30, crs="EPSG:32618")

    assert a.intersects(b)
    assert a.intersection(b).as_tuple() == (5.0, 5.0, 10.0, 10.0)
    assert a.intersection(c) is None
    assert a.union(c).as_tuple() == (0.0, 0.0, 30.0, 30.0)


def test_bounding_boxes_in_different_crs_are_not_comparable():
    a = BoundingBox(0, 0, 10, 10, crs="EPSG:32618")
    b = BoundingBox(0, 0, 10, 10, crs="EPSG:4326")
    with pytest.raises(CRSMismatchError):
        a.intersects(b)
