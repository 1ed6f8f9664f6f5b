# -*- coding: utf-8 -*-
"""The core package holds the value types and algorithms of crsalign.

It defines CRS, BoundingBox, GridDescriptor and Raster, the coordinate transforms between CRSs, the resampling
engine and the Reprojector that ties them together.
"""
