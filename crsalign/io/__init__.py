# -*- coding: utf-8 -*-
"""The io package contains modules for reading and writing both raster and vector data.

It abstracts file operations and coordinate system handling so the core never touches files.
"""
