"""
Classical document corner locator.

Finds the document quadrilateral with a pure computer-vision pipeline:

    grayscale -> blur -> Canny -> dilate -> contours -> convex hull
    -> Douglas-Peucker -> quadrilateral acceptance -> corner ordering

No external service is involved. The locator is deterministic and never
raises for images without a document; it returns None instead.
"""

import logging
from dataclasses import dataclass
from typing import List, Optional

import numpy as np

from src.common.types import Quadrilateral, RasterBuffer
from src.detection.base import CornerLocator
from src.detection.config import EdgeDetectionConfig
from src.detection.contours import extract_contours
from src.detection.edge_filters import canny, dilate, gaussian_blur, to_grayscale
from src.geometry.polygon import (
    convex_hull,
    is_convex,
    polygon_area,
    polygon_perimeter,
    simplify_closed,
)

logger = logging.getLogger(__name__)


@dataclass
class QuadCandidate:
    """A simplified contour that passed the quadrilateral acceptance test.

    Attributes:
        corners: 4 vertices of shape (4, 2) in hull order.
        area: Shoelace area in square pixels.
        contour_size: Number of boundary pixels in the source contour.
    """

    corners: np.ndarray
    area: float
    contour_size: int


class ClassicalEdgeLocator(CornerLocator):
    """
    Locate a document by its edge contour.

    Construct one instance per caller; it holds only its configuration, so
    instances are independent and safe to create in tests.

    Example:
        >>> locator = ClassicalEdgeLocator()
        >>> quad = locator.locate(buffer)
        >>> if quad is not None:
        ...     print(quad.top_left, quad.bottom_right)
    """

    name = "classical"

    def __init__(self, config: Optional[EdgeDetectionConfig] = None):
        self.config = config if config is not None else EdgeDetectionConfig()
        self._initialized = False

    def initialize(self) -> None:
        """Log the active thresholds once. Safe to call more than once."""
        if self._initialized:
            return
        logger.info(
            f"ClassicalEdgeLocator ready: canny={self.config.canny_low}/"
            f"{self.config.canny_high}, dilate={self.config.dilate_iterations}, "
            f"epsilon_ratio={self.config.epsilon_ratio}, "
            f"min_area_ratio={self.config.min_area_ratio}"
        )
        self._initialized = True

    def detect_edges(self, image: RasterBuffer) -> np.ndarray:
        """
        Build the dilated edge map of an image.

        Returns:
            Boolean mask of shape (H, W).
        """
        gray = to_grayscale(image.data)
        blurred = gaussian_blur(gray)
        edges = canny(blurred, self.config.canny_low, self.config.canny_high)
        return dilate(edges, self.config.dilate_iterations)

    def find_candidates(self, image: RasterBuffer) -> List[QuadCandidate]:
        """
        Find every contour whose simplified hull is an acceptable quadrilateral.

        A candidate has exactly 4 vertices, is convex within the configured
        noise tolerance, and covers more than ``min_area_ratio`` of the image.

        Returns:
            Accepted candidates, in contour order.
        """
        edges = self.detect_edges(image)
        contours = extract_contours(edges, self.config.min_contour_points)
        min_area = self.config.min_area_ratio * image.area

        candidates = []
        for contour in contours:
            hull = convex_hull(contour)
            if len(hull) < 4:
                continue

            epsilon = self.config.epsilon_ratio * polygon_perimeter(hull)
            approx = simplify_closed(hull, epsilon)
            if len(approx) != 4:
                continue

            if not is_convex(approx, self.config.convexity_tolerance):
                continue

            area = polygon_area(approx)
            if area <= min_area:
                continue

            logger.debug(
                f"Candidate quad area={area:.0f} ({area / image.area:.1%} of image), "
                f"contour={len(contour)} px"
            )
            candidates.append(QuadCandidate(corners=approx, area=area, contour_size=len(contour)))

        return candidates

    def locate(self, image: RasterBuffer) -> Optional[Quadrilateral]:
        """
        Find the largest acceptable document quadrilateral.

        Returns:
            Canonically ordered Quadrilateral, or None if no candidate exists.
        """
        self.initialize()

        candidates = self.find_candidates(image)
        if not candidates:
            logger.info("No document quadrilateral found")
            return None

        best = max(candidates, key=lambda c: c.area)
        quad = Quadrilateral.from_points(best.corners)

        logger.info(
            f"Document found among {len(candidates)} candidate(s): "
            f"area={best.area:.0f}px ({best.area / image.area:.1%} of image)"
        )
        return quad
