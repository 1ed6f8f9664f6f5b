# -*- coding: utf-8 -*-
"""Utility helpers, such as synthetic sample rasters for tests and examples."""
