"""
Perspective rectification of detected documents.

Transforms a document quadrilateral into a flat, axis-aligned rectangle
using a destination->source homography and bilinear inverse mapping.
"""

from src.alignment.config import RectificationConfig
from src.alignment.rectifier import Rectifier, destination_corners, warp_perspective

__all__ = [
    "RectificationConfig",
    "Rectifier",
    "destination_corners",
    "warp_perspective",
]
