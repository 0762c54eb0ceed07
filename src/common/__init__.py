"""
Common types shared across all modules.

This module provides standardized data types for the document digitization
pipeline, ensuring consistency across the locators, geometry engine and
rectifier.
"""

from src.common.types import Point, Quadrilateral, RasterBuffer

__all__ = ["RasterBuffer", "Point", "Quadrilateral"]
