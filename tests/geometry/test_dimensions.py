"""
Unit tests for dimensions module.

Tests edge length calculations and output size estimation.
"""

import numpy as np
import pytest

from src.common.types import Quadrilateral
from src.geometry.dimensions import (
    calculate_aspect_ratio,
    calculate_edge_lengths,
    corners_stable,
    estimate_output_dimensions,
)


class TestCalculateEdgeLengths:
    """Tests for calculate_edge_lengths function."""

    def test_rectangle_edges(self):
        """Test edge calculation for perfect rectangle."""
        points = np.array([[100, 100], [400, 100], [400, 200], [100, 200]])

        top, right, bottom, left = calculate_edge_lengths(points)

        assert top == pytest.approx(300.0)
        assert right == pytest.approx(100.0)
        assert bottom == pytest.approx(300.0)
        assert left == pytest.approx(100.0)

    def test_accepts_quadrilateral(self):
        quad = Quadrilateral.from_points([[0, 0], [30, 0], [30, 40], [0, 40]])

        assert calculate_edge_lengths(quad) == pytest.approx((30.0, 40.0, 30.0, 40.0))

    def test_invalid_point_count(self):
        with pytest.raises(ValueError, match="Expected 4 corners"):
            calculate_edge_lengths([[0, 0], [1, 0], [1, 1]])


class TestEstimateOutputDimensions:
    """Tests for estimate_output_dimensions function."""

    def test_letter_page(self):
        assert estimate_output_dimensions([[0, 0], [850, 0], [850, 1100], [0, 1100]]) == (850, 1100)

    def test_uses_longer_opposite_edges(self):
        """A trapezoid takes the longer of each pair of opposite edges."""
        trapezoid = [[100, 0], [300, 0], [400, 300], [0, 300]]

        width, height = estimate_output_dimensions(trapezoid)

        assert width == 400
        assert height == round(np.hypot(100, 300))

    def test_half_pixel_edges_round_up(self):
        rectangle = [[0, 0], [300.5, 0], [300.5, 250.5], [0, 250.5]]

        assert estimate_output_dimensions(rectangle) == (301, 251)

    def test_minimum_size_floor(self):
        assert estimate_output_dimensions([[0, 0], [50, 0], [50, 30], [0, 30]]) == (200, 200)

    def test_custom_minimum(self):
        assert estimate_output_dimensions(
            [[0, 0], [50, 0], [50, 30], [0, 30]], min_size=10
        ) == (50, 30)


class TestAspectRatio:
    """Tests for calculate_aspect_ratio and corners_stable."""

    def test_a4_aspect(self):
        ratio = calculate_aspect_ratio([[0, 0], [210, 0], [210, 297], [0, 297]])
        assert ratio == pytest.approx(210 / 297)

    def test_zero_height(self):
        with pytest.raises(ValueError, match="Height is zero"):
            calculate_aspect_ratio([[0, 0], [10, 0], [10, 0], [0, 0]])

    def test_stable_corners_any_order(self):
        a = [[0, 0], [100, 0], [100, 100], [0, 100]]
        b = [[102, 98], [3, 1], [1, 104], [99, 2]]

        assert corners_stable(a, b, threshold=15.0)

    def test_moved_corners(self):
        a = [[0, 0], [100, 0], [100, 100], [0, 100]]
        b = [[30, 0], [100, 0], [100, 100], [0, 100]]

        assert not corners_stable(a, b, threshold=15.0)

    def test_wrong_count_not_stable(self):
        assert not corners_stable([[0, 0], [1, 1]], [[0, 0], [1, 1]])
