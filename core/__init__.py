# -*- coding: utf-8 -*-
"""
LocForge Core Package

Plain-Python engines: similarity detection, the canonical registry and
runtime key resolution.
"""
