"""
Configuration loader with Pydantic validation for the digitization pipeline.

This module provides type-safe configuration loading from YAML files using
Pydantic models for validation and default values.
"""

from pathlib import Path
from typing import Literal, Optional, Union

import yaml
from pydantic import BaseModel, Field, ValidationError

from src.alignment.config import RectificationConfig
from src.detection.config import EdgeDetectionConfig, OracleConfig

DEFAULT_CONFIG_PATH = Path(__file__).parent / "config.yaml"


class PipelineSettings(BaseModel):
    """Orchestrator settings.

    Attributes:
        strategy: Corner locator used by the pipeline ("classical" or "oracle").
    """

    strategy: Literal["classical", "oracle"] = "classical"


class IOConfig(BaseModel):
    """Image I/O settings used by the CLI.

    Attributes:
        max_dimension: Longer side of prepared input images, in pixels.
        jpeg_quality: JPEG quality of written outputs.
    """

    max_dimension: int = Field(default=2000, gt=0)
    jpeg_quality: int = Field(default=95, ge=1, le=100)


class Config(BaseModel):
    """Root configuration container.

    Attributes:
        pipeline: Orchestrator settings.
        edge_detection: Classical edge locator configuration.
        oracle: Vision-model corner oracle configuration.
        rectification: Rectifier configuration.
        io: Image I/O configuration.
    """

    pipeline: PipelineSettings = Field(default_factory=PipelineSettings)
    edge_detection: EdgeDetectionConfig = Field(default_factory=EdgeDetectionConfig)
    oracle: OracleConfig = Field(default_factory=OracleConfig)
    rectification: RectificationConfig = Field(default_factory=RectificationConfig)
    io: IOConfig = Field(default_factory=IOConfig)


def load_config(config_path: Union[str, Path]) -> Config:
    """Load and validate configuration from YAML file.

    Sections missing from the file take their default values.

    Args:
        config_path: Path to YAML configuration file.

    Returns:
        Validated Config object with all settings.

    Raises:
        FileNotFoundError: If config file does not exist.
        ValueError: If the YAML is malformed or a value fails validation.

    Example:
        >>> config = load_config(Path("src/pipeline/config.yaml"))
        >>> print(config.edge_detection.canny_high)
        150.0
    """
    config_path = Path(config_path)
    if not config_path.exists():
        raise FileNotFoundError(f"Configuration file not found: {config_path}")

    try:
        with open(config_path, "r", encoding="utf-8") as f:
            config_dict = yaml.safe_load(f)
    except yaml.YAMLError as e:
        raise ValueError(f"Invalid YAML in {config_path}: {e}") from e

    if config_dict is None:
        config_dict = {}
    if not isinstance(config_dict, dict):
        raise ValueError(f"Configuration root must be a mapping: {config_path}")

    try:
        return Config(**config_dict)
    except ValidationError as e:
        raise ValueError(f"Invalid configuration in {config_path}:\n{e}") from e


def get_default_config(config_path: Optional[Path] = None) -> Config:
    """Get default configuration from bundled config.yaml file.

    Returns:
        Config object loaded from src/pipeline/config.yaml, or model defaults
        when the file is missing.
    """
    path = config_path if config_path is not None else DEFAULT_CONFIG_PATH
    if path.exists():
        return load_config(path)
    # Fallback to hardcoded defaults if config file is missing
    return Config()
