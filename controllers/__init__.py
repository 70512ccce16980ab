# -*- coding: utf-8 -*-
"""
LocForge Controllers Package

Controllers coordinate the core engines, the settings model and the
Qt event loop.
"""

from controllers.language_controller import LanguageController
from controllers.review_controller import SimilarityReviewSession

__all__ = [
    'LanguageController',
    'SimilarityReviewSession',
]
