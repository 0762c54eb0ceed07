"""
Document corner location.

Two interchangeable strategies implement :class:`CornerLocator`:
classical edge analysis (Canny, contours, convex hull, polygon
simplification) and an external vision-model oracle.

Example:
    >>> from src.detection import ClassicalEdgeLocator
    >>> locator = ClassicalEdgeLocator()
    >>> quad = locator.locate(buffer)
    >>> if quad is not None:
    ...     print(quad.to_numpy())
"""

from src.detection.base import CornerLocator
from src.detection.classical import ClassicalEdgeLocator, QuadCandidate
from src.detection.config import EdgeDetectionConfig, OracleConfig
from src.detection.oracle import (
    CornerOracleClient,
    OpenAICornerClient,
    OracleCornerLocator,
    validate_reply_corners,
)

__all__ = [
    "ClassicalEdgeLocator",
    "CornerLocator",
    "CornerOracleClient",
    "EdgeDetectionConfig",
    "OpenAICornerClient",
    "OracleConfig",
    "OracleCornerLocator",
    "QuadCandidate",
    "validate_reply_corners",
]
