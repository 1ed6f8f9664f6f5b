# -*- coding: utf-8 -*-
"""Tests for raster and vector input/output and vector reprojection."""

import os

import geopandas as gpd
import numpy as np
import pytest
from shapely.geometry import Point

from crsalign import (
    CRS,
    UndefinedCRSError,
    UnsupportedCRSError,
    create_sample_raster,
    grid_footprint,
    load_raster,
    read_vector,
    reproject,
    reproject_vector,
    require_matching_crs,
    save_raster,
    write_vector,
)


@pytest.fixture
def sample_raster():
    """Fixture providing a small two band UTM raster with a nodata value."""
    return create_sample_raster(width=12, height=8, resolution=5.0, band_count=2, nodata=-9999.0)


@pytest.fixture
def points():
    """Fixture providing a GeoDataFrame with two WGS84 points."""
    return gpd.GeoDataFrame({"name": ["a", "b"]}, geometry=[Point(-75.0, 40.6), Point(-74.99, 40.61)], crs="EPSG:4326")


def test_raster_save_and_load(tmp_path, sample_raster):
    path = os.path.join(tmp_path, "nested", "sample.tif")
    save_raster(sample_raster, path)
    assert os.path.exists(path), "Raster file was not written."

    loaded = load_raster(path)
    np.testing.assert_array_equal(loaded.data, sample_raster.data)
    assert loaded.transform == sample_raster.transform
    assert loaded.nodata == -9999.0
    assert loaded.band_count == 2
    assert loaded.crs.to_string() == "EPSG:32618"


def test_reprojected_raster_round_trips_through_file(tmp_path, sample_raster):
    geographic = reproject(sample_raster, "EPSG:4326")
    path = os.path.join(tmp_path, "geographic.tif")
    save_raster(geographic, path)

    loaded = load_raster(path)
    assert loaded.crs.to_string() == "EPSG:4326"
    assert loaded.shape == geographic.shape
    np.testing.assert_array_equal(loaded.data, geographic.data)


def test_raster_without_crs_loads_and_cannot_be_reprojected(tmp_path):
    no_crs = create_sample_raster(width=4, height=4, crs=None, nodata=0)
    path = os.path.join(tmp_path, "no_crs.tif")
    save_raster(no_crs, path)

    loaded = load_raster(path)
    assert loaded.crs is None
    with pytest.raises(UndefinedCRSError):
        reproject(loaded, "EPSG:4326")

    labelled = loaded.with_crs("EPSG:32618")
    assert labelled.crs == CRS("EPSG:32618")
    assert loaded.crs is None, "Assigning a CRS must not modify the loaded raster."


def test_load_uses_fallback_nodata(tmp_path):
    raster = create_sample_raster(width=4, height=4)
    path = os.path.join(tmp_path, "plain.tif")
    save_raster(raster, path)
    assert load_raster(path).nodata is None
    assert load_raster(path, nodata=0).nodata == 0.0


def test_reproject_vector(points):
    projected = reproject_vector(points, "EPSG:32618")
    assert CRS(projected.crs) == CRS("EPSG:32618")
    assert projected.geometry.iloc[0].x == pytest.approx(500000.0, abs=1e-3)
    assert points.crs.to_epsg() == 4326, "The source layer must not be modified."


def test_reproject_vector_requires_crs(points):
    with pytest.raises(UndefinedCRSError):
        reproject_vector(gpd.GeoDataFrame(geometry=[Point(0, 0)]), "EPSG:32618")
    with pytest.raises(UnsupportedCRSError):
        reproject_vector(points, "EPSG:999999")


def test_vector_round_trip(tmp_path, points):
    path = os.path.join(tmp_path, "points.geojson")
    write_vector(points, path)
    loaded = read_vector(path)
    assert len(loaded) == 2
    assert loaded.crs.to_epsg() == 4326

    with pytest.raises(ValueError):
        write_vector(points, os.path.join(tmp_path, "points.csv"))


def test_read_vector_rejects_unknown_format(tmp_path):
    path = os.path.join(tmp_path, "points.csv")
    with open(path, "w") as f:
        f.write("x,y\n1,2\n")
    with pytest.raises(ValueError, match="Unsupported vector format"):
        read_vector(path)


def test_grid_footprint_overlays_vectors(sample_raster, points):
    footprint = grid_footprint(sample_raster.grid)
    assert footprint.geometry.iloc[0].area == pytest.approx(12 * 5.0 * 8 * 5.0)
    assert CRS(footprint.crs) == sample_raster.crs

    # Overlaying needs both layers in one CRS
    projected = reproject_vector(points, sample_raster.crs)
    assert require_matching_crs(footprint, projected, sample_raster) == sample_raster.crs
