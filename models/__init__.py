# -*- coding: utf-8 -*-
"""
LocForge Models Package

This package contains the data models used throughout the toolkit.
"""

from models.settings_model import SettingsModel

__all__ = ['SettingsModel']
