"""
Pytest Configuration and Shared Fixtures

This file contains pytest configuration and fixtures that are available
to all test modules.
"""

import cv2
import numpy as np
import pytest

from src.common.types import RasterBuffer


def draw_document_scene(
    width: int,
    height: int,
    corners,
    background: int = 30,
    foreground: int = 220,
    channels: int = 3,
) -> RasterBuffer:
    """Light filled quadrilateral on a dark uniform background."""
    shape = (height, width) if channels == 1 else (height, width, channels)
    image = np.full(shape, background, dtype=np.uint8)
    pts = np.round(np.asarray(corners, dtype=np.float64)).astype(np.int32)
    color = foreground if channels == 1 else (foreground,) * channels
    cv2.fillPoly(image, [pts], color)
    return RasterBuffer(data=image)


@pytest.fixture
def scene_factory():
    """Fixture providing the synthetic scene builder."""
    return draw_document_scene


@pytest.fixture
def sample_quadrilateral_points():
    """Fixture providing sample 4-corner points in scrambled order."""
    return np.array(
        [
            [300, 150],  # Top-right area
            [100, 200],  # Top-left area
            [320, 400],  # Bottom-right area
            [80, 380],  # Bottom-left area
        ],
        dtype=np.float64,
    )


@pytest.fixture
def document_corners():
    """Corners [TL, TR, BR, BL] of the page drawn by ``document_scene``."""
    return np.array([[150, 120], [620, 90], [660, 480], [120, 500]], dtype=np.float64)


@pytest.fixture
def document_scene(document_corners):
    """800x600 RGB photo of a light page on a dark desk."""
    return draw_document_scene(800, 600, document_corners)


@pytest.fixture
def blank_scene():
    """800x600 RGB image with no document."""
    return RasterBuffer(data=np.full((600, 800, 3), 128, dtype=np.uint8))


@pytest.fixture
def gradient_image():
    """Smooth 3-channel gradient, 301x201 pixels."""
    ys, xs = np.mgrid[0:201, 0:301]
    r = (xs * 255 // 300).astype(np.uint8)
    g = (ys * 255 // 200).astype(np.uint8)
    b = ((xs + ys) * 255 // 500).astype(np.uint8)
    return RasterBuffer(data=np.dstack([r, g, b]))
