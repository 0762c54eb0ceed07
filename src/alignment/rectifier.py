"""
Perspective rectification of a detected document.

Warps the quadrilateral region of a photo into a flat, axis-aligned
rectangle using inverse mapping: every destination pixel is mapped back into
the source through the destination->source homography and sampled with
bilinear interpolation, so the output has no holes.

Destination pixels whose source position is undefined (near-zero
perspective divisor) or whose 2x2 sampling neighbourhood leaves the source
image keep the background fill (white by default). Source pixels are never
clamped or wrapped.
"""

import logging
from typing import Optional, Tuple

import numpy as np

from src.alignment.config import RectificationConfig
from src.common.types import Quadrilateral, RasterBuffer
from src.geometry.dimensions import estimate_output_dimensions
from src.geometry.homography import Homography, compute_homography, validate_homography

logger = logging.getLogger(__name__)

# Source coordinates closer than this to a pixel centre are sampled exactly there
LATTICE_SNAP = 1e-9


def _snap_to_lattice(coords: np.ndarray) -> np.ndarray:
    nearest = np.rint(coords)
    return np.where(np.abs(coords - nearest) < LATTICE_SNAP, nearest, coords)


def destination_corners(width: int, height: int) -> np.ndarray:
    """Corners of the output rectangle in [TL, TR, BR, BL] order."""
    return np.array(
        [
            [0, 0],
            [width - 1, 0],
            [width - 1, height - 1],
            [0, height - 1],
        ],
        dtype=np.float64,
    )


def warp_perspective(
    source: np.ndarray,
    homography: Homography,
    width: int,
    height: int,
    background: int = 255,
    band_rows: int = 256,
) -> np.ndarray:
    """
    Inverse-map a source raster into a new ``width`` x ``height`` raster.

    Args:
        source: uint8 array of shape (H, W) or (H, W, C).
        homography: Destination->source homography.
        width: Output width in pixels.
        height: Output height in pixels.
        background: Fill value for pixels with no valid source sample.
        band_rows: Number of output rows mapped per vectorized step; bounds
            the size of the temporary coordinate arrays.

    Returns:
        New uint8 array of shape (height, width) or (height, width, C).
    """
    grayscale = source.ndim == 2
    src = source[:, :, np.newaxis] if grayscale else source
    src_h, src_w, channels = src.shape

    out = np.full((height, width, channels), background, dtype=np.uint8)
    xs = np.arange(width, dtype=np.float64)

    for top in range(0, height, band_rows):
        rows = np.arange(top, min(top + band_rows, height), dtype=np.float64)
        grid_x, grid_y = np.meshgrid(xs, rows)

        sx, sy, valid = homography.apply_array(grid_x, grid_y)
        sx = _snap_to_lattice(np.where(valid, sx, -1.0))
        sy = _snap_to_lattice(np.where(valid, sy, -1.0))

        x0 = np.floor(sx)
        y0 = np.floor(sy)
        inside = valid & (x0 >= 0) & (x0 + 1 < src_w) & (y0 >= 0) & (y0 + 1 < src_h)
        if not inside.any():
            continue

        fx = (sx - x0)[inside][:, np.newaxis]
        fy = (sy - y0)[inside][:, np.newaxis]
        x0i = x0[inside].astype(np.intp)
        y0i = y0[inside].astype(np.intp)
        x1i = x0i + 1
        y1i = y0i + 1

        value = (
            src[y0i, x0i].astype(np.float64) * (1 - fx) * (1 - fy)
            + src[y0i, x1i].astype(np.float64) * fx * (1 - fy)
            + src[y1i, x0i].astype(np.float64) * (1 - fx) * fy
            + src[y1i, x1i].astype(np.float64) * fx * fy
        )

        band = out[top : top + len(rows)]
        band[inside] = np.clip(np.floor(value + 0.5), 0, 255).astype(np.uint8)

    return out[:, :, 0] if grayscale else out


class Rectifier:
    """
    Flatten a document quadrilateral into an axis-aligned raster.

    Example:
        >>> rectifier = Rectifier()
        >>> flat = rectifier.rectify(buffer, quad)
        >>> print(flat.width, flat.height)
    """

    def __init__(self, config: Optional[RectificationConfig] = None):
        self.config = config if config is not None else RectificationConfig()

    def output_size(self, quad: Quadrilateral) -> Tuple[int, int]:
        """Output (width, height) for a quadrilateral."""
        return estimate_output_dimensions(quad, min_size=self.config.min_output_size)

    def homography_for(self, quad: Quadrilateral, width: int, height: int) -> Homography:
        """
        Destination->source homography mapping the output rectangle onto ``quad``.

        Raises:
            DegenerateHomographyError: If validation is enabled and the
                corners cannot define a projective map.
        """
        dst_rect = destination_corners(width, height)
        corners = quad.to_numpy()
        homography = compute_homography(dst_rect, corners)
        if self.config.validate_homography:
            validate_homography(homography, dst_rect, corners)
        return homography

    def rectify(
        self,
        image: RasterBuffer,
        quad: Quadrilateral,
        output_size: Optional[Tuple[int, int]] = None,
    ) -> RasterBuffer:
        """
        Warp the quadrilateral region of ``image`` to a flat rectangle.

        Args:
            image: Source raster (not modified).
            quad: Document corners in [TL, TR, BR, BL] order.
            output_size: Optional (width, height); estimated from the corner
                geometry when omitted.

        Returns:
            New RasterBuffer with the same channel count as ``image``.

        Raises:
            DegenerateHomographyError: If the corners cannot define a
                projective map (only when validation is enabled).
        """
        width, height = output_size if output_size is not None else self.output_size(quad)
        homography = self.homography_for(quad, width, height)

        warped = warp_perspective(
            image.data,
            homography,
            width,
            height,
            background=self.config.background,
            band_rows=self.config.band_rows,
        )

        logger.info(
            f"Rectified {image.width}x{image.height} quadrilateral to {width}x{height} rectangle"
        )
        return RasterBuffer(data=warped)
