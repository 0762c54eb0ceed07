"""
Polygon utilities for document boundary extraction.

Provides the planar geometry used by the classical edge locator:
- Canonical corner ordering (TL, TR, BR, BL)
- Shoelace area and closed-polygon perimeter
- Convex hull (Andrew's monotone chain)
- Douglas-Peucker simplification of open and closed curves
- Convexity test with a noise tolerance

All functions take array-likes of shape (N, 2) holding [x, y] rows and are
free of image or I/O concerns.
"""

import logging
from typing import List, Tuple, Union

import numpy as np

logger = logging.getLogger(__name__)

PointsLike = Union[np.ndarray, list]


def as_point_array(points: PointsLike) -> np.ndarray:
    """
    Convert corner-like input to a float64 array of shape (N, 2).

    Objects exposing ``to_numpy()`` (e.g. ``Quadrilateral``) are converted
    through it.

    Raises:
        ValueError: If the input is not a list of 2D points.
    """
    if hasattr(points, "to_numpy"):
        points = points.to_numpy()
    arr = np.asarray(points, dtype=np.float64)
    if arr.ndim != 2 or arr.shape[1] != 2:
        raise ValueError(f"Expected points with shape (N, 2), got shape {arr.shape}")
    return arr


def order_corners(pts: PointsLike) -> np.ndarray:
    """
    Order 4 corners as Top-Left, Top-Right, Bottom-Right, Bottom-Left.

    The ordering uses the coordinate sum and difference:
    - Top-Left: smallest x + y
    - Bottom-Right: largest x + y
    - Top-Right: largest x - y
    - Bottom-Left: smallest x - y

    When those picks do not select four distinct corners (a square rotated by
    45 degrees ties on both sums), the corners are instead sorted clockwise
    around their centroid, starting from the smallest x + y.

    Args:
        pts: Array-like of shape (4, 2) with [x, y] rows, any order.

    Returns:
        Array of shape (4, 2) in [TL, TR, BR, BL] order.

    Raises:
        ValueError: If input does not contain exactly 4 points.

    Example:
        >>> order_corners([[300, 150], [100, 200], [320, 400], [80, 380]])
        array([[100., 200.], [300., 150.], [320., 400.], [ 80., 380.]])
    """
    pts = np.array(pts, dtype=np.float64)
    if pts.shape != (4, 2):
        raise ValueError(
            f"Expected exactly 4 points with shape (4, 2), got shape {pts.shape}"
        )

    s = pts[:, 0] + pts[:, 1]
    d = pts[:, 0] - pts[:, 1]
    picks = [int(np.argmin(s)), int(np.argmax(d)), int(np.argmax(s)), int(np.argmin(d))]

    if len(set(picks)) == 4:
        return pts[picks]

    logger.debug(f"Ambiguous sum/difference ordering {picks}, sorting by angle")
    centroid = pts.mean(axis=0)
    # y grows downwards, so increasing atan2 walks clockwise on screen
    angles = np.arctan2(pts[:, 1] - centroid[1], pts[:, 0] - centroid[0])
    clockwise = list(np.argsort(angles, kind="stable"))
    start = clockwise.index(int(np.argmin(s)))
    return pts[clockwise[start:] + clockwise[:start]]


def polygon_area(polygon: PointsLike) -> float:
    """
    Area of a simple polygon using the shoelace formula.

    Returns:
        Unsigned area. Polygons with fewer than 3 vertices have area 0.
    """
    poly = as_point_array(polygon)
    if len(poly) < 3:
        return 0.0
    x, y = poly[:, 0], poly[:, 1]
    return float(abs(np.dot(x, np.roll(y, -1)) - np.dot(y, np.roll(x, -1))) / 2.0)


def polygon_perimeter(polygon: PointsLike) -> float:
    """Perimeter of a closed polygon (last vertex connects back to the first)."""
    poly = as_point_array(polygon)
    if len(poly) < 2:
        return 0.0
    edges = np.roll(poly, -1, axis=0) - poly
    return float(np.hypot(edges[:, 0], edges[:, 1]).sum())


def _cross(o: Tuple[float, float], a: Tuple[float, float], b: Tuple[float, float]) -> float:
    return (a[0] - o[0]) * (b[1] - o[1]) - (a[1] - o[1]) * (b[0] - o[0])


def convex_hull(points: PointsLike) -> np.ndarray:
    """
    Convex hull using Andrew's monotone chain algorithm.

    Points are sorted by x then y; the lower and upper chains are built by
    popping every vertex that does not make a strict left turn, so collinear
    points are excluded from the hull.

    Args:
        points: Array-like of shape (N, 2).

    Returns:
        Hull vertices of shape (M, 2), starting at the smallest (x, y) point.
        Inputs with fewer than 3 distinct points are returned deduplicated.
    """
    pts = as_point_array(points)
    if len(pts) == 0:
        return pts

    pts = np.unique(pts, axis=0)  # sorted by x, then y
    if len(pts) < 3:
        return pts

    ordered = [tuple(p) for p in pts.tolist()]

    lower: List[Tuple[float, float]] = []
    for p in ordered:
        while len(lower) >= 2 and _cross(lower[-2], lower[-1], p) <= 0:
            lower.pop()
        lower.append(p)

    upper: List[Tuple[float, float]] = []
    for p in reversed(ordered):
        while len(upper) >= 2 and _cross(upper[-2], upper[-1], p) <= 0:
            upper.pop()
        upper.append(p)

    # Last point of each chain is the first point of the other
    return np.array(lower[:-1] + upper[:-1], dtype=np.float64)


def _perpendicular_distances(
    points: np.ndarray, start: np.ndarray, end: np.ndarray
) -> np.ndarray:
    """Distances of points to the line through start and end."""
    chord = end - start
    length = float(np.hypot(chord[0], chord[1]))
    offsets = points - start
    if length == 0.0:
        return np.hypot(offsets[:, 0], offsets[:, 1])
    return np.abs(chord[0] * offsets[:, 1] - chord[1] * offsets[:, 0]) / length


def douglas_peucker(points: PointsLike, epsilon: float) -> np.ndarray:
    """
    Simplify an open polyline with the Douglas-Peucker algorithm.

    The farthest point from the chord is kept and the curve is split there
    whenever its distance exceeds ``epsilon``. Splits are processed from an
    explicit worklist, so long runs of near-collinear points cannot exhaust
    the interpreter's recursion limit.

    Args:
        points: Polyline vertices of shape (N, 2).
        epsilon: Distance tolerance in pixels.

    Returns:
        Kept vertices in their original order; both endpoints are always kept.
    """
    pts = as_point_array(points)
    n = len(pts)
    if n < 3:
        return pts.copy()

    keep = np.zeros(n, dtype=bool)
    keep[0] = keep[n - 1] = True

    worklist = [(0, n - 1)]
    while worklist:
        first, last = worklist.pop()
        if last - first < 2:
            continue
        distances = _perpendicular_distances(pts[first + 1 : last], pts[first], pts[last])
        offset = int(np.argmax(distances))
        if distances[offset] > epsilon:
            split = first + 1 + offset
            keep[split] = True
            worklist.append((first, split))
            worklist.append((split, last))

    return pts[keep]


def simplify_closed(points: PointsLike, epsilon: float) -> np.ndarray:
    """
    Simplify a closed curve with Douglas-Peucker.

    The curve is split at the vertex farthest from its first vertex into two
    open curves, each simplified independently, and the results are joined
    without repeating the two shared endpoints.

    Args:
        points: Closed curve vertices of shape (N, 2), first vertex not repeated.
        epsilon: Distance tolerance in pixels.

    Returns:
        Simplified closed polygon of shape (M, 2).
    """
    pts = as_point_array(points)
    n = len(pts)
    if n < 3:
        return pts.copy()

    offsets = pts - pts[0]
    far = int(np.argmax(np.hypot(offsets[:, 0], offsets[:, 1])))
    if far == 0:
        return pts[:1].copy()

    first_half = douglas_peucker(pts[: far + 1], epsilon)
    second_half = douglas_peucker(np.vstack([pts[far:], pts[:1]]), epsilon)
    return np.vstack([first_half, second_half[1:-1]])


def is_convex(polygon: PointsLike, tolerance: float = 1.0) -> bool:
    """
    Check that a closed polygon turns consistently in one direction.

    Cross products of consecutive edge pairs whose magnitude is at most
    ``tolerance`` are treated as noise and ignored; all remaining ones must
    share a sign.

    Args:
        polygon: Vertices of shape (N, 2), N >= 3.
        tolerance: Noise tolerance on the cross-product magnitude.

    Returns:
        True if the polygon is convex, False otherwise (including when every
        turn is below the tolerance).
    """
    poly = as_point_array(polygon)
    if len(poly) < 3:
        return False

    v1 = np.roll(poly, -1, axis=0) - poly
    v2 = np.roll(poly, -2, axis=0) - np.roll(poly, -1, axis=0)
    crosses = v1[:, 0] * v2[:, 1] - v1[:, 1] * v2[:, 0]

    significant = crosses[np.abs(crosses) > tolerance]
    if significant.size == 0:
        return False

    convex = bool(np.all(significant > 0) or np.all(significant < 0))
    if not convex:
        logger.debug(f"Non-convex polygon. Cross products: {crosses.tolist()}")
    return convex
