"""
Homography estimation from four point correspondences.

Builds the 8x8 Direct Linear Transform system for the projective map

    x' = (h0*x + h1*y + h2) / (h6*x + h7*y + 1)
    y' = (h3*x + h4*y + h5) / (h6*x + h7*y + 1)

and solves it by Gaussian elimination with partial pivoting. Pivots below
``PIVOT_EPSILON`` are skipped rather than raising, leaving their unknown at
zero; the skipped columns are recorded on the result so callers can reject
the matrix with :func:`validate_homography`.
"""

import logging
from dataclasses import dataclass, field
from typing import List, Optional, Sequence, Tuple

import numpy as np

from src.geometry.polygon import PointsLike, as_point_array

logger = logging.getLogger(__name__)

PIVOT_EPSILON = 1e-10
DIVISOR_EPSILON = 1e-10

# Pivots this small relative to the largest system coefficient are rounding
# residue of a singular system rather than genuine values.
RELATIVE_PIVOT_EPSILON = 1e-12

REPROJECTION_TOLERANCE = 1e-3


class DegenerateHomographyError(ValueError):
    """Raised when a homography cannot represent a valid projective map."""


@dataclass
class Homography:
    """
    Projective transform between two quadrilaterals.

    Attributes:
        matrix: 3x3 matrix with ``matrix[2, 2] == 1``.
        singular_pivots: Columns of the linear system whose pivot magnitude
            fell below ``PIVOT_EPSILON`` during elimination.
        pivots: Absolute pivot value used for every column.
        scale: Largest absolute coefficient of the linear system.
    """

    matrix: np.ndarray
    singular_pivots: List[int] = field(default_factory=list)
    pivots: List[float] = field(default_factory=list)
    scale: float = 1.0

    @property
    def has_singular_pivot(self) -> bool:
        return bool(self.singular_pivots)

    @property
    def min_relative_pivot(self) -> float:
        """Smallest pivot divided by the system scale (1.0 if unknown)."""
        if not self.pivots:
            return 1.0
        return min(self.pivots) / max(self.scale, 1.0)

    def apply(self, x: float, y: float) -> Optional[Tuple[float, float]]:
        """
        Map a single point.

        Returns:
            Mapped (x, y), or None when the perspective divisor is near zero.
        """
        h = self.matrix
        w = h[2, 0] * x + h[2, 1] * y + h[2, 2]
        if abs(w) < DIVISOR_EPSILON:
            return None
        return (
            float((h[0, 0] * x + h[0, 1] * y + h[0, 2]) / w),
            float((h[1, 0] * x + h[1, 1] * y + h[1, 2]) / w),
        )

    def apply_array(
        self, xs: np.ndarray, ys: np.ndarray
    ) -> Tuple[np.ndarray, np.ndarray, np.ndarray]:
        """
        Map arrays of points.

        Returns:
            Tuple (mapped_x, mapped_y, valid) where ``valid`` is False wherever
            the perspective divisor is near zero; mapped values are NaN there.
        """
        h = self.matrix
        w = h[2, 0] * xs + h[2, 1] * ys + h[2, 2]
        valid = np.abs(w) >= DIVISOR_EPSILON
        safe_w = np.where(valid, w, 1.0)
        mapped_x = np.where(valid, (h[0, 0] * xs + h[0, 1] * ys + h[0, 2]) / safe_w, np.nan)
        mapped_y = np.where(valid, (h[1, 0] * xs + h[1, 1] * ys + h[1, 2]) / safe_w, np.nan)
        return mapped_x, mapped_y, valid


def solve_linear_system(
    a: Sequence[Sequence[float]], b: Sequence[float]
) -> Tuple[np.ndarray, List[int], List[float]]:
    """
    Solve ``A x = b`` by Gaussian elimination with partial pivoting.

    At each column the row with the largest absolute entry is swapped into
    the pivot position. A pivot whose magnitude is below ``PIVOT_EPSILON`` is
    skipped: its column is not eliminated and its unknown stays 0.

    Args:
        a: Square coefficient matrix (n x n).
        b: Right-hand side of length n.

    Returns:
        Tuple (solution, singular_pivots, pivots) where ``singular_pivots``
        lists the skipped columns and ``pivots`` holds every pivot magnitude.
    """
    aug = np.hstack(
        [np.array(a, dtype=np.float64), np.array(b, dtype=np.float64).reshape(-1, 1)]
    )
    n = aug.shape[0]
    singular: List[int] = []
    pivots: List[float] = []

    for col in range(n):
        pivot_row = col + int(np.argmax(np.abs(aug[col:, col])))
        if pivot_row != col:
            aug[[col, pivot_row]] = aug[[pivot_row, col]]

        pivot = abs(aug[col, col])
        pivots.append(float(pivot))
        if pivot < PIVOT_EPSILON:
            singular.append(col)
            continue

        factors = aug[col + 1 :, col] / aug[col, col]
        aug[col + 1 :, col:] -= np.outer(factors, aug[col, col:])

    x = np.zeros(n, dtype=np.float64)
    for i in range(n - 1, -1, -1):
        if i in singular:
            continue
        x[i] = (aug[i, n] - np.dot(aug[i, i + 1 : n], x[i + 1 :])) / aug[i, i]

    if singular:
        logger.debug(f"Singular pivots in columns {singular}")
    return x, singular, pivots


def compute_homography(src: PointsLike, dst: PointsLike) -> Homography:
    """
    Compute the homography that maps ``src[i]`` onto ``dst[i]``.

    Never raises for degenerate input: near-collinear or duplicate
    correspondences still produce a matrix. Use :func:`find_degeneracy` /
    :func:`validate_homography` to reject it.

    Args:
        src: 4 source points, shape (4, 2).
        dst: 4 destination points, shape (4, 2).

    Returns:
        Homography with a 3x3 matrix whose bottom-right entry is 1.

    Raises:
        ValueError: If either input is not 4 points.

    Example:
        >>> src = [[0, 0], [99, 0], [99, 99], [0, 99]]
        >>> dst = [[10, 12], [110, 5], [120, 118], [4, 101]]
        >>> h = compute_homography(src, dst)
        >>> h.apply(99, 0)  # approximately (110.0, 5.0)
    """
    src_pts = as_point_array(src)
    dst_pts = as_point_array(dst)
    if src_pts.shape != (4, 2) or dst_pts.shape != (4, 2):
        raise ValueError(
            f"Expected 4 correspondences, got src {src_pts.shape} and dst {dst_pts.shape}"
        )

    a = []
    b = []
    for (xs, ys), (xd, yd) in zip(src_pts, dst_pts):
        a.append([xs, ys, 1.0, 0.0, 0.0, 0.0, -xs * xd, -ys * xd])
        b.append(xd)
        a.append([0.0, 0.0, 0.0, xs, ys, 1.0, -xs * yd, -ys * yd])
        b.append(yd)

    h, singular, pivots = solve_linear_system(a, b)
    matrix = np.array(
        [[h[0], h[1], h[2]], [h[3], h[4], h[5]], [h[6], h[7], 1.0]], dtype=np.float64
    )
    return Homography(
        matrix=matrix,
        singular_pivots=singular,
        pivots=pivots,
        scale=float(np.max(np.abs(a))),
    )


def find_degeneracy(
    homography: Homography,
    src: PointsLike,
    dst: Optional[PointsLike] = None,
) -> Optional[str]:
    """
    Describe why a homography is unusable, if it is.

    Checks, in order:
    1. A pivot was skipped, or is negligible relative to the system scale
       (near-collinear or duplicate correspondences).
    2. The matrix holds NaN or infinity.
    3. A source corner maps through a near-zero perspective divisor.
    4. When ``dst`` is given, a source corner does not map onto its
       destination within ``REPROJECTION_TOLERANCE`` (relative to the
       destination extent).

    Args:
        homography: Result of :func:`compute_homography`.
        src: The source points it was computed from.
        dst: Optional destination points it was computed for.

    Returns:
        Reason string, or None when the matrix is usable.
    """
    if homography.has_singular_pivot:
        return f"near-zero pivot in columns {homography.singular_pivots}"

    if homography.min_relative_pivot < RELATIVE_PIVOT_EPSILON:
        return f"near-zero relative pivot {homography.min_relative_pivot:.3e}"

    if not np.all(np.isfinite(homography.matrix)):
        return "non-finite matrix entries"

    src_pts = as_point_array(src)
    mapped_x, mapped_y, valid = homography.apply_array(src_pts[:, 0], src_pts[:, 1])
    if not np.all(valid):
        return "near-zero perspective divisor at a source corner"

    if dst is not None:
        dst_pts = as_point_array(dst)
        extent = max(float(np.ptp(dst_pts[:, 0])), float(np.ptp(dst_pts[:, 1])), 1.0)
        error = float(
            np.max(np.hypot(mapped_x - dst_pts[:, 0], mapped_y - dst_pts[:, 1]))
        )
        if error > REPROJECTION_TOLERANCE * extent:
            return f"corners reproject with error {error:.3g}px"

    return None


def validate_homography(
    homography: Homography,
    src: PointsLike,
    dst: Optional[PointsLike] = None,
) -> None:
    """
    Reject a degenerate homography.

    Raises:
        DegenerateHomographyError: If :func:`find_degeneracy` reports a reason.
    """
    reason = find_degeneracy(homography, src, dst)
    if reason is not None:
        raise DegenerateHomographyError(f"Degenerate homography: {reason}")
