"""
Contour extraction from a binary edge map.

Each 8-connected edge component contributes one contour made of its
boundary pixels only: pixels with at least one non-edge 8-neighbour, or
lying on the image border. Interior fill of thick blobs is dropped.
"""

import logging
from typing import List

import cv2
import numpy as np

logger = logging.getLogger(__name__)


def boundary_mask(edges: np.ndarray) -> np.ndarray:
    """
    Mark edge pixels that touch the background or the image border.

    Args:
        edges: Boolean edge mask.

    Returns:
        Boolean mask of boundary pixels.
    """
    mask = edges.astype(np.uint8)
    kernel = np.ones((3, 3), dtype=np.uint8)
    # Out-of-image pixels count as background, so border pixels never survive erosion
    interior = cv2.erode(mask, kernel, borderType=cv2.BORDER_CONSTANT, borderValue=0)
    return edges & (interior == 0)


def extract_contours(edges: np.ndarray, min_points: int = 30) -> List[np.ndarray]:
    """
    Extract the boundary pixels of every 8-connected edge component.

    Args:
        edges: Boolean edge mask of shape (H, W).
        min_points: Components with fewer boundary pixels are discarded as noise.

    Returns:
        List of int32 arrays of shape (N, 2) with [x, y] rows, one per
        component, each in raster order.
    """
    if not edges.any():
        return []

    num_labels, labels = cv2.connectedComponents(edges.astype(np.uint8), connectivity=8)
    ys, xs = np.nonzero(boundary_mask(edges))
    owners = labels[ys, xs]

    order = np.argsort(owners, kind="stable")
    points = np.stack([xs[order], ys[order]], axis=1).astype(np.int32)
    counts = np.bincount(owners, minlength=num_labels)

    contours = []
    start = 0
    for label in range(num_labels):
        count = int(counts[label])
        if label > 0 and count >= min_points:
            contours.append(points[start : start + count])
        start += count

    logger.debug(
        f"Found {num_labels - 1} edge components, kept {len(contours)} "
        f"with >= {min_points} boundary pixels"
    )
    return contours
