"""
Visualization Utilities

Functions for drawing and plotting detected document boundaries.
"""

from pathlib import Path
from typing import Optional, Tuple

import cv2
import matplotlib.pyplot as plt
import numpy as np

from src.common.types import Quadrilateral, RasterBuffer

CORNER_LABELS = ("TL", "TR", "BR", "BL")


def draw_quadrilateral_overlay(
    image: RasterBuffer,
    quad: Optional[Quadrilateral],
    color: Tuple[int, int, int] = (59, 130, 246),
    fill_alpha: float = 0.12,
    thickness: int = 3,
) -> RasterBuffer:
    """
    Draw a detected document outline on a copy of the image.

    The quadrilateral is filled semi-transparently, outlined, and each corner
    is marked with a dot. A missing quad returns an unmarked copy.

    Args:
        image: Source raster (not modified).
        quad: Detected corners, or None.
        color: RGB outline color.
        fill_alpha: Opacity of the interior fill.
        thickness: Outline thickness in pixels.

    Returns:
        New RasterBuffer with the overlay.
    """
    canvas = image.data.copy()
    if quad is None:
        return RasterBuffer(data=canvas)

    if canvas.ndim == 2 or canvas.shape[2] == 1:
        canvas = cv2.cvtColor(canvas.reshape(canvas.shape[:2]), cv2.COLOR_GRAY2RGB)
    elif canvas.shape[2] == 4:
        canvas = cv2.cvtColor(canvas, cv2.COLOR_RGBA2RGB)

    pts = np.round(quad.to_numpy()).astype(np.int32).reshape(-1, 1, 2)

    filled = canvas.copy()
    cv2.fillPoly(filled, [pts], color)
    canvas = cv2.addWeighted(filled, fill_alpha, canvas, 1.0 - fill_alpha, 0)

    cv2.polylines(canvas, [pts], isClosed=True, color=color, thickness=thickness)
    radius = max(4, thickness * 2)
    for x, y in pts.reshape(-1, 2):
        cv2.circle(canvas, (int(x), int(y)), radius, color, -1)
        cv2.circle(canvas, (int(x), int(y)), radius, (255, 255, 255), 2)

    return RasterBuffer(data=canvas)


def plot_image_with_quadrilateral(
    image: RasterBuffer,
    quad: Optional[Quadrilateral],
    title: Optional[str] = None,
    save_path: Path = None,
):
    """
    Plot an image with its detected document corners.

    Args:
        image: Image raster (RGB)
        quad: Detected corners, or None for no overlay
        title: Optional figure title
        save_path: Optional path to save figure
    """
    fig, ax = plt.subplots(1, 1, figsize=(12, 8))
    cmap = "gray" if image.channels == 1 else None
    ax.imshow(image.data.squeeze(), cmap=cmap)

    if quad is not None:
        corners = quad.to_numpy()
        closed = np.vstack([corners, corners[:1]])
        ax.plot(closed[:, 0], closed[:, 1], "g-", linewidth=2)
        for label, (x, y) in zip(CORNER_LABELS, corners):
            ax.plot(x, y, "ro", markersize=8)
            ax.text(x + 5, y + 5, label, color="red", fontsize=12, weight="bold")

    if title:
        ax.set_title(title)
    ax.axis("off")

    if save_path:
        plt.savefig(save_path, bbox_inches="tight", dpi=150)
        plt.close(fig)
    else:
        plt.show()
