"""Unit tests for image and file I/O helpers."""

import cv2
import numpy as np
import pytest

from src.common.types import RasterBuffer
from src.utils.io import (
    decode_image,
    encode_jpeg,
    load_image,
    load_json,
    load_yaml,
    prepare_image,
    save_image,
    save_json,
    save_yaml,
)


class TestImageIO:
    """Test image loading and saving."""

    def test_png_round_trip_keeps_rgb_order(self, tmp_path):
        data = np.zeros((10, 12, 3), dtype=np.uint8)
        data[..., 0] = 200  # red

        path = save_image(RasterBuffer(data=data), tmp_path / "red.png")
        loaded = load_image(path)

        np.testing.assert_array_equal(loaded.data, data)

    def test_file_written_as_bgr(self, tmp_path):
        data = np.zeros((4, 4, 3), dtype=np.uint8)
        data[..., 0] = 200

        save_image(RasterBuffer(data=data), tmp_path / "red.png")

        on_disk = cv2.imread(str(tmp_path / "red.png"))
        assert on_disk[0, 0].tolist() == [0, 0, 200]

    def test_grayscale_round_trip(self, tmp_path):
        data = np.arange(64, dtype=np.uint8).reshape(8, 8)

        loaded = load_image(save_image(RasterBuffer(data=data), tmp_path / "gray.png"))

        assert loaded.channels == 1
        np.testing.assert_array_equal(loaded.data, data)

    def test_rgba_png_round_trip(self, tmp_path):
        data = np.full((5, 5, 4), 120, dtype=np.uint8)
        data[..., 3] = 60

        loaded = load_image(save_image(RasterBuffer(data=data), tmp_path / "alpha.png"))

        assert loaded.channels == 4
        np.testing.assert_array_equal(loaded.data, data)

    def test_missing_file(self, tmp_path):
        with pytest.raises(FileNotFoundError, match="Image not found"):
            load_image(tmp_path / "absent.jpg")

    def test_undecodable_payload(self):
        with pytest.raises(ValueError, match="Could not decode"):
            decode_image(b"definitely not an image")

    def test_encode_jpeg(self, gradient_image):
        payload = encode_jpeg(gradient_image, quality=80)

        assert payload[:2] == b"\xff\xd8"
        decoded = decode_image(payload)
        assert (decoded.width, decoded.height) == (gradient_image.width, gradient_image.height)

    def test_encode_jpeg_drops_alpha(self):
        rgba = RasterBuffer(data=np.full((6, 6, 4), 99, dtype=np.uint8))

        assert decode_image(encode_jpeg(rgba)).channels == 3


class TestPrepareImage:
    """Test prepare_image downscaling."""

    def test_large_image_downscaled(self):
        image = RasterBuffer(data=np.zeros((3000, 4000, 3), dtype=np.uint8))

        prepared = prepare_image(image, max_dimension=2000)

        assert (prepared.width, prepared.height) == (2000, 1500)
        assert prepared.channels == 3

    def test_portrait_bounded_by_height(self):
        image = RasterBuffer(data=np.zeros((4000, 3000), dtype=np.uint8))

        prepared = prepare_image(image, max_dimension=1000)

        assert (prepared.width, prepared.height) == (750, 1000)

    def test_small_image_untouched(self, gradient_image):
        assert prepare_image(gradient_image, max_dimension=2000) is gradient_image

    def test_single_channel_keeps_shape(self):
        image = RasterBuffer(data=np.zeros((100, 200, 1), dtype=np.uint8))

        prepared = prepare_image(image, max_dimension=50)

        assert prepared.shape == (25, 50, 1)


class TestStructuredFiles:
    """Test JSON and YAML helpers."""

    def test_json_round_trip(self, tmp_path):
        data = {"page.jpg": {"decision": "RECTIFIED", "width": 850}}
        path = tmp_path / "nested" / "report.json"

        save_json(data, path)

        assert load_json(path) == data

    def test_yaml_round_trip(self, tmp_path):
        data = {"pipeline": {"strategy": "oracle"}, "io": {"max_dimension": 1200}}
        path = tmp_path / "config.yaml"

        save_yaml(data, path)

        assert load_yaml(path) == data
