"""
Pixel-level filters for the classical edge locator.

Implements the edge map stages:
1. Grayscale conversion with fixed-point luma weights
2. Separable 5-tap Gaussian blur with clamped borders
3. Canny edge detection (Sobel, non-maximum suppression, hysteresis)
4. 3x3 dilation to bridge small gaps

Every function allocates its output and leaves its input untouched.
"""

import logging
from typing import Tuple

import cv2
import numpy as np

logger = logging.getLogger(__name__)

GAUSSIAN_TAPS = (1, 4, 6, 4, 1)

# Direction bins of the gradient angle folded into [0, pi)
BIN_0, BIN_45, BIN_90, BIN_135 = 0, 1, 2, 3


def to_grayscale(image: np.ndarray) -> np.ndarray:
    """
    Convert an RGB(A) raster to 8-bit luma.

    Uses the fixed-point weights ``(R*77 + G*150 + B*29) >> 8``. Single
    channel input is copied through; an alpha channel is ignored.

    Args:
        image: uint8 array of shape (H, W), (H, W, 1), (H, W, 3) or (H, W, 4).

    Returns:
        uint8 array of shape (H, W).
    """
    if image.ndim == 2:
        return image.copy()
    if image.shape[2] == 1:
        return image[:, :, 0].copy()

    rgb = image[:, :, :3].astype(np.uint32)
    luma = (rgb[:, :, 0] * 77 + rgb[:, :, 1] * 150 + rgb[:, :, 2] * 29) >> 8
    return luma.astype(np.uint8)


def _blur_axis(values: np.ndarray, axis: int) -> np.ndarray:
    pad = [(0, 0), (0, 0)]
    pad[axis] = (2, 2)
    padded = np.pad(values, pad, mode="edge")
    size = values.shape[axis]

    total = np.zeros(values.shape, dtype=np.uint32)
    for offset, weight in enumerate(GAUSSIAN_TAPS):
        window = padded[offset : offset + size] if axis == 0 else padded[:, offset : offset + size]
        total += weight * window
    return ((total + 8) >> 4).astype(np.uint16)


def gaussian_blur(gray: np.ndarray) -> np.ndarray:
    """
    Blur with the separable kernel ``[1, 4, 6, 4, 1] / 16``.

    A horizontal pass is followed by a vertical pass; pixels outside the
    image take the value of the nearest edge pixel.

    Args:
        gray: uint8 array of shape (H, W).

    Returns:
        Blurred uint8 array of shape (H, W).
    """
    horizontal = _blur_axis(gray.astype(np.uint16), axis=1)
    vertical = _blur_axis(horizontal, axis=0)
    return vertical.astype(np.uint8)


def sobel_gradients(gray: np.ndarray) -> Tuple[np.ndarray, np.ndarray]:
    """
    3x3 Sobel gradients with replicated borders.

    Returns:
        Tuple (gx, gy) of int32 arrays; gy grows downwards.
    """
    p = np.pad(gray.astype(np.int32), 1, mode="edge")
    h, w = gray.shape

    top = p[0:h, 0:w] + 2 * p[0:h, 1 : w + 1] + p[0:h, 2 : w + 2]
    bottom = p[2 : h + 2, 0:w] + 2 * p[2 : h + 2, 1 : w + 1] + p[2 : h + 2, 2 : w + 2]
    left = p[0:h, 0:w] + 2 * p[1 : h + 1, 0:w] + p[2 : h + 2, 0:w]
    right = p[0:h, 2 : w + 2] + 2 * p[1 : h + 1, 2 : w + 2] + p[2 : h + 2, 2 : w + 2]

    return right - left, bottom - top


def quantize_directions(gx: np.ndarray, gy: np.ndarray) -> np.ndarray:
    """
    Quantize gradient directions into 4 bins (0, 45, 90 and 135 degrees).

    Bin boundaries sit at odd multiples of pi/8.

    Returns:
        uint8 array of bin indices.
    """
    angle = np.mod(np.arctan2(gy, gx), np.pi)
    step = np.pi / 8
    bins = np.full(angle.shape, BIN_0, dtype=np.uint8)
    bins[(angle >= step) & (angle < 3 * step)] = BIN_45
    bins[(angle >= 3 * step) & (angle < 5 * step)] = BIN_90
    bins[(angle >= 5 * step) & (angle < 7 * step)] = BIN_135
    return bins


def non_maximum_suppression(magnitude: np.ndarray, bins: np.ndarray) -> np.ndarray:
    """
    Keep pixels that are local maxima along their gradient direction.

    Each pixel is compared with its two neighbours along the quantized
    gradient direction, i.e. across the edge. Neighbours outside the image
    count as zero.

    Returns:
        Boolean mask of surviving pixels.
    """
    h, w = magnitude.shape
    p = np.pad(magnitude, 1, mode="constant", constant_values=0)

    def shifted(dx: int, dy: int) -> np.ndarray:
        return p[1 + dy : 1 + dy + h, 1 + dx : 1 + dx + w]

    # (dx, dy) of the forward neighbour for each bin; y grows downwards
    offsets = {BIN_0: (1, 0), BIN_45: (1, 1), BIN_90: (0, 1), BIN_135: (-1, 1)}

    keep = np.zeros((h, w), dtype=bool)
    for direction, (dx, dy) in offsets.items():
        in_bin = bins == direction
        forward = shifted(dx, dy)
        backward = shifted(-dx, -dy)
        keep |= in_bin & (magnitude > forward) & (magnitude >= backward)
    return keep & (magnitude > 0)


def hysteresis(magnitude: np.ndarray, candidates: np.ndarray, low: float, high: float) -> np.ndarray:
    """
    Hysteresis thresholding over 8-connected weak edges.

    Pixels at or above ``high`` are seeds; pixels at or above ``low`` are weak.
    Every weak pixel 8-connected to a seed through other weak pixels becomes
    an edge; all other weak pixels are discarded.

    Args:
        magnitude: Gradient magnitude.
        candidates: Mask of pixels surviving non-maximum suppression.
        low: Low threshold.
        high: High threshold.

    Returns:
        Boolean edge mask.
    """
    weak = candidates & (magnitude >= low)
    strong = weak & (magnitude >= high)
    if not strong.any():
        return np.zeros_like(weak)

    num_labels, labels = cv2.connectedComponents(weak.astype(np.uint8), connectivity=8)
    seeded = np.zeros(num_labels, dtype=bool)
    seeded[np.unique(labels[strong])] = True
    seeded[0] = False
    return seeded[labels]


def canny(blurred: np.ndarray, low: float = 50.0, high: float = 150.0) -> np.ndarray:
    """
    Canny edge detection on a pre-blurred grayscale image.

    Args:
        blurred: uint8 array of shape (H, W).
        low: Hysteresis low threshold.
        high: Hysteresis high threshold.

    Returns:
        Boolean edge mask of shape (H, W).
    """
    gx, gy = sobel_gradients(blurred)
    magnitude = np.sqrt(
        gx.astype(np.float32) ** 2 + gy.astype(np.float32) ** 2
    )
    bins = quantize_directions(gx, gy)
    thin = non_maximum_suppression(magnitude, bins)
    edges = hysteresis(magnitude, thin, low, high)

    logger.debug(
        f"Canny: {int(thin.sum())} thin pixels, {int(edges.sum())} edge pixels "
        f"(low={low}, high={high})"
    )
    return edges


def dilate(edges: np.ndarray, iterations: int = 2) -> np.ndarray:
    """
    Grow the edge map with a 3x3 max filter.

    Args:
        edges: Boolean edge mask.
        iterations: Number of dilation passes; 0 returns a copy.

    Returns:
        Boolean dilated mask.
    """
    if iterations <= 0:
        return edges.copy()
    kernel = np.ones((3, 3), dtype=np.uint8)
    grown = cv2.dilate(edges.astype(np.uint8), kernel, iterations=iterations)
    return grown > 0
