"""Unit tests for the classical edge-map filters."""

import numpy as np
import pytest

from src.detection.edge_filters import (
    BIN_0,
    BIN_45,
    BIN_90,
    BIN_135,
    canny,
    dilate,
    gaussian_blur,
    hysteresis,
    non_maximum_suppression,
    quantize_directions,
    sobel_gradients,
    to_grayscale,
)


class TestGrayscale:
    """Tests for to_grayscale."""

    def test_fixed_point_weights(self):
        image = np.array([[[255, 0, 0], [0, 255, 0], [0, 0, 255], [255, 255, 255]]], dtype=np.uint8)

        gray = to_grayscale(image)

        assert gray.tolist() == [[76, 149, 28, 255]]

    def test_alpha_ignored(self):
        rgba = np.zeros((2, 2, 4), dtype=np.uint8)
        rgba[..., 3] = 255

        assert to_grayscale(rgba).max() == 0

    def test_single_channel_copied(self):
        gray = np.full((3, 3, 1), 9, dtype=np.uint8)

        result = to_grayscale(gray)

        assert result.shape == (3, 3)
        assert not np.shares_memory(result, gray)


class TestGaussianBlur:
    """Tests for gaussian_blur."""

    def test_uniform_image_unchanged(self):
        gray = np.full((20, 30), 77, dtype=np.uint8)
        np.testing.assert_array_equal(gaussian_blur(gray), gray)

    def test_impulse_response(self):
        gray = np.zeros((9, 9), dtype=np.uint8)
        gray[4, 4] = 255

        blurred = gaussian_blur(gray)

        # Centre weight 6/16 per axis: 255 * 6 / 16 = 95.6 -> 96, then 96 * 6 / 16 = 36
        assert blurred[4, 4] == 36
        assert blurred[4, 4] == blurred.max()
        np.testing.assert_array_equal(blurred, blurred.T)

    def test_input_untouched(self):
        gray = np.arange(100, dtype=np.uint8).reshape(10, 10)
        original = gray.copy()

        gaussian_blur(gray)

        np.testing.assert_array_equal(gray, original)


class TestGradients:
    """Tests for sobel_gradients and quantize_directions."""

    def test_vertical_step(self):
        gray = np.zeros((5, 6), dtype=np.uint8)
        gray[:, 3:] = 100

        gx, gy = sobel_gradients(gray)

        assert gx[2, 2] == 400
        assert gx[2, 3] == 400
        assert np.all(gy == 0)

    def test_direction_bins(self):
        gx = np.array([10, 10, 0, -10])
        gy = np.array([0, 10, 10, 10])

        bins = quantize_directions(gx, gy)

        assert bins.tolist() == [BIN_0, BIN_45, BIN_90, BIN_135]


class TestCanny:
    """Tests for non-maximum suppression, hysteresis and canny."""

    def test_nms_keeps_ridge(self):
        magnitude = np.array([[0, 5, 9, 5, 0]], dtype=np.float32)
        bins = np.full(magnitude.shape, BIN_0, dtype=np.uint8)

        keep = non_maximum_suppression(magnitude, bins)

        assert keep.tolist() == [[False, False, True, False, False]]

    def test_hysteresis_follows_weak_chain(self):
        magnitude = np.array([[200, 80, 80, 0, 80]], dtype=np.float32)
        candidates = np.ones_like(magnitude, dtype=bool)

        edges = hysteresis(magnitude, candidates, low=50, high=150)

        assert edges.tolist() == [[True, True, True, False, False]]

    def test_hysteresis_without_strong_pixels(self):
        magnitude = np.full((3, 3), 100, dtype=np.float32)

        edges = hysteresis(magnitude, np.ones((3, 3), dtype=bool), low=50, high=150)

        assert not edges.any()

    def test_square_outline(self):
        gray = np.full((60, 60), 20, dtype=np.uint8)
        gray[15:45, 15:45] = 230

        edges = canny(gaussian_blur(gray))

        assert edges.any()
        # Edges hug the square boundary only
        ys, xs = np.nonzero(edges)
        assert xs.min() >= 12 and xs.max() <= 47
        assert ys.min() >= 12 and ys.max() <= 47
        assert not edges[25:35, 25:35].any()

    def test_flat_image_has_no_edges(self):
        assert not canny(np.full((40, 40), 128, dtype=np.uint8)).any()


class TestDilate:
    """Tests for dilate."""

    @pytest.mark.parametrize("iterations, size", [(1, 3), (2, 5)])
    def test_single_pixel_grows(self, iterations, size):
        edges = np.zeros((11, 11), dtype=bool)
        edges[5, 5] = True

        grown = dilate(edges, iterations)

        assert grown.sum() == size * size

    def test_zero_iterations_copies(self):
        edges = np.eye(4, dtype=bool)

        result = dilate(edges, 0)

        np.testing.assert_array_equal(result, edges)
        assert result is not edges
