"""
Unit tests for config_loader module.
"""

import tempfile
from pathlib import Path

import pytest
import yaml

from src.pipeline.config_loader import Config, get_default_config, load_config


class TestLoadConfig:
    """Tests for load_config function."""

    def test_load_default_config(self):
        """Test loading the bundled configuration file."""
        config = get_default_config()

        assert isinstance(config, Config)
        assert config.pipeline.strategy == "classical"
        assert config.edge_detection.canny_low == 50.0
        assert config.edge_detection.canny_high == 150.0
        assert config.edge_detection.dilate_iterations == 2
        assert config.edge_detection.min_contour_points == 30
        assert config.edge_detection.epsilon_ratio == 0.02
        assert config.edge_detection.min_area_ratio == 0.1
        assert config.oracle.model == "gpt-4o-mini"
        assert config.oracle.timeout_seconds == 30.0
        assert config.rectification.min_output_size == 200
        assert config.rectification.background == 255
        assert config.io.max_dimension == 2000

    def test_bundled_file_matches_model_defaults(self):
        assert get_default_config().model_dump() == Config().model_dump()

    def test_load_custom_config(self):
        """Test loading a custom configuration file."""
        custom_config = {
            "pipeline": {"strategy": "oracle"},
            "edge_detection": {"canny_low": 30, "canny_high": 90, "dilate_iterations": 1},
            "oracle": {"model": "gpt-4o", "timeout_seconds": 10},
            "rectification": {"min_output_size": 100, "band_rows": 64},
            "io": {"max_dimension": 1600},
        }

        with tempfile.NamedTemporaryFile(mode="w", suffix=".yaml", delete=False) as f:
            yaml.dump(custom_config, f)
            temp_path = Path(f.name)

        try:
            config = load_config(temp_path)

            assert config.pipeline.strategy == "oracle"
            assert config.edge_detection.canny_low == 30
            assert config.edge_detection.canny_high == 90
            assert config.edge_detection.dilate_iterations == 1
            # Unspecified values keep their defaults
            assert config.edge_detection.min_area_ratio == 0.1
            assert config.oracle.model == "gpt-4o"
            assert config.oracle.timeout_seconds == 10.0
            assert config.rectification.band_rows == 64
            assert config.io.max_dimension == 1600
            assert config.io.jpeg_quality == 95
        finally:
            temp_path.unlink()

    def test_partial_config_uses_defaults(self, tmp_path):
        path = tmp_path / "partial.yaml"
        path.write_text("io:\n  jpeg_quality: 80\n", encoding="utf-8")

        config = load_config(path)

        assert config.io.jpeg_quality == 80
        assert config.edge_detection.model_dump() == Config().edge_detection.model_dump()

    def test_empty_file_uses_defaults(self, tmp_path):
        path = tmp_path / "empty.yaml"
        path.write_text("", encoding="utf-8")

        assert load_config(path).model_dump() == Config().model_dump()

    def test_missing_file(self):
        with pytest.raises(FileNotFoundError, match="Configuration file not found"):
            load_config(Path("does/not/exist.yaml"))

    def test_missing_bundled_file_falls_back(self, tmp_path):
        assert get_default_config(tmp_path / "absent.yaml").model_dump() == Config().model_dump()

    @pytest.mark.parametrize(
        "content",
        [
            "edge_detection:\n  canny_low: 200\n  canny_high: 100\n",
            "pipeline:\n  strategy: neural\n",
            "rectification:\n  min_output_size: 0\n",
            "io:\n  max_dimension: -5\n",
            "oracle:\n  timeout_seconds: 0\n",
            "edge_detection:\n  epsilon_ratio: 1.5\n",
        ],
    )
    def test_invalid_values(self, tmp_path, content):
        path = tmp_path / "invalid.yaml"
        path.write_text(content, encoding="utf-8")

        with pytest.raises(ValueError, match="Invalid configuration"):
            load_config(path)

    def test_malformed_yaml(self, tmp_path):
        path = tmp_path / "broken.yaml"
        path.write_text("pipeline: [unclosed\n", encoding="utf-8")

        with pytest.raises(ValueError, match="Invalid YAML"):
            load_config(path)

    def test_non_mapping_root(self, tmp_path):
        path = tmp_path / "list.yaml"
        path.write_text("- 1\n- 2\n", encoding="utf-8")

        with pytest.raises(ValueError, match="must be a mapping"):
            load_config(path)
