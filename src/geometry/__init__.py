"""
Geometry engine for document rectification.

Pure numerical helpers with no image dependencies:
- polygon: corner ordering, hull, Douglas-Peucker, area, convexity
- homography: 4-point DLT solved by Gaussian elimination
- dimensions: output size estimation from corner geometry
"""

from src.geometry.dimensions import (
    calculate_aspect_ratio,
    calculate_edge_lengths,
    corners_stable,
    estimate_output_dimensions,
)
from src.geometry.homography import (
    DegenerateHomographyError,
    Homography,
    compute_homography,
    find_degeneracy,
    solve_linear_system,
    validate_homography,
)
from src.geometry.polygon import (
    convex_hull,
    douglas_peucker,
    is_convex,
    order_corners,
    polygon_area,
    polygon_perimeter,
    simplify_closed,
)

__all__ = [
    "calculate_aspect_ratio",
    "calculate_edge_lengths",
    "corners_stable",
    "estimate_output_dimensions",
    "DegenerateHomographyError",
    "Homography",
    "compute_homography",
    "find_degeneracy",
    "solve_linear_system",
    "validate_homography",
    "convex_hull",
    "douglas_peucker",
    "is_convex",
    "order_corners",
    "polygon_area",
    "polygon_perimeter",
    "simplify_closed",
]
