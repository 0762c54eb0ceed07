"""
Output dimension estimation for rectified documents.

Derives the size of the flat output raster from the edge lengths of the
detected quadrilateral, and compares corner sets between frames.
"""

import logging
import math
from typing import Tuple

import numpy as np

from src.geometry.polygon import PointsLike, as_point_array, order_corners

logger = logging.getLogger(__name__)

MIN_OUTPUT_SIZE = 200


def calculate_edge_lengths(quad: PointsLike) -> Tuple[float, float, float, float]:
    """
    Calculate the length of all 4 edges of a quadrilateral.

    Args:
        quad: 4 corner points in order [TL, TR, BR, BL], shape (4, 2),
              or a ``Quadrilateral``.

    Returns:
        Tuple of (top_edge, right_edge, bottom_edge, left_edge) lengths.

    Raises:
        ValueError: If the input is not 4 points.

    Example:
        >>> points = np.array([[100, 100], [400, 100], [400, 200], [100, 200]])
        >>> top, right, bottom, left = calculate_edge_lengths(points)
        >>> print(f"Width: {top:.0f}, Height: {right:.0f}")
        Width: 300, Height: 100
    """
    corners = as_point_array(quad)
    if corners.shape != (4, 2):
        raise ValueError(f"Expected 4 corners with shape (4, 2), got {corners.shape}")

    tl, tr, br, bl = corners

    top_edge = float(np.linalg.norm(tr - tl))
    right_edge = float(np.linalg.norm(br - tr))
    bottom_edge = float(np.linalg.norm(bl - br))
    left_edge = float(np.linalg.norm(tl - bl))

    logger.debug(
        f"Edge lengths - Top: {top_edge:.1f}, Right: {right_edge:.1f}, "
        f"Bottom: {bottom_edge:.1f}, Left: {left_edge:.1f}"
    )

    return top_edge, right_edge, bottom_edge, left_edge


def estimate_output_dimensions(
    quad: PointsLike, min_size: int = MIN_OUTPUT_SIZE
) -> Tuple[int, int]:
    """
    Estimate the (width, height) of the rectified document.

    Width is the longer of the top and bottom edges and height the longer of
    the left and right edges, so no content is downsampled. Each side is
    floored at ``min_size`` to avoid degenerate tiny outputs.

    Args:
        quad: 4 corner points in order [TL, TR, BR, BL].
        min_size: Minimum output side in pixels.

    Returns:
        Tuple of (width, height) in pixels.

    Example:
        >>> estimate_output_dimensions([[0, 0], [850, 0], [850, 1100], [0, 1100]])
        (850, 1100)
    """
    top, right, bottom, left = calculate_edge_lengths(quad)

    # Halves round up
    width = max(int(math.floor(max(top, bottom) + 0.5)), min_size)
    height = max(int(math.floor(max(left, right) + 0.5)), min_size)

    logger.debug(f"Output dimensions: {width} x {height}")

    return width, height


def calculate_aspect_ratio(quad: PointsLike) -> float:
    """
    Calculate the aspect ratio (width/height) of the rectified document.

    Raises:
        ValueError: If the estimated height is zero.
    """
    top, right, bottom, left = calculate_edge_lengths(quad)
    height = max(left, right)

    if height == 0:
        raise ValueError("Height is zero, cannot calculate aspect ratio")

    return max(top, bottom) / height


def corners_stable(a: PointsLike, b: PointsLike, threshold: float = 15.0) -> bool:
    """
    Check whether two corner sets describe the same document position.

    Both sets are canonically ordered first, so their input order does not
    matter.

    Args:
        a: First set of 4 corners.
        b: Second set of 4 corners.
        threshold: Maximum movement in pixels allowed for any corner.

    Returns:
        True if every corner moved at most ``threshold`` pixels.
    """
    try:
        ordered_a = order_corners(as_point_array(a))
        ordered_b = order_corners(as_point_array(b))
    except ValueError:
        return False

    moved = np.linalg.norm(ordered_a - ordered_b, axis=1)
    return bool(np.all(moved <= threshold))
