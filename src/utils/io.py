"""
I/O Utilities

Image decoding/encoding around the digitization core, plus JSON and YAML
helpers. Decoded rasters are RGB(A); OpenCV's BGR order stays inside this
module.
"""

import json
import logging
from pathlib import Path
from typing import Any, Dict, Union

import cv2
import numpy as np
import yaml

from src.common.types import RasterBuffer

logger = logging.getLogger(__name__)

IMAGE_EXTENSIONS = {".jpg", ".jpeg", ".png", ".bmp", ".tif", ".tiff", ".webp"}


def _to_rgb(decoded: np.ndarray) -> np.ndarray:
    if decoded.ndim == 2:
        return decoded
    if decoded.shape[2] == 4:
        return cv2.cvtColor(decoded, cv2.COLOR_BGRA2RGBA)
    return cv2.cvtColor(decoded, cv2.COLOR_BGR2RGB)


def _to_bgr(data: np.ndarray) -> np.ndarray:
    if data.ndim == 2:
        return data
    if data.shape[2] == 1:
        return data[:, :, 0]
    if data.shape[2] == 4:
        return cv2.cvtColor(data, cv2.COLOR_RGBA2BGR)
    return cv2.cvtColor(data, cv2.COLOR_RGB2BGR)


def decode_image(payload: bytes) -> RasterBuffer:
    """
    Decode an encoded image (JPEG, PNG, ...) into a RasterBuffer.

    Raises:
        ValueError: If the payload cannot be decoded.
    """
    decoded = cv2.imdecode(np.frombuffer(payload, dtype=np.uint8), cv2.IMREAD_UNCHANGED)
    if decoded is None:
        raise ValueError("Could not decode image payload")
    if decoded.dtype != np.uint8:
        decoded = cv2.convertScaleAbs(decoded, alpha=255.0 / max(float(decoded.max()), 1.0))
    return RasterBuffer(data=_to_rgb(decoded))


def load_image(file_path: Union[str, Path]) -> RasterBuffer:
    """
    Load an image file as an RGB(A) RasterBuffer.

    Raises:
        FileNotFoundError: If the file does not exist.
        ValueError: If the file cannot be decoded.
    """
    file_path = Path(file_path)
    if not file_path.exists():
        raise FileNotFoundError(f"Image not found: {file_path}")
    return decode_image(file_path.read_bytes())


def prepare_image(image: RasterBuffer, max_dimension: int = 2000) -> RasterBuffer:
    """
    Bound the longer side of an image, never enlarging it.

    Args:
        image: Input raster.
        max_dimension: Maximum width or height in pixels.

    Returns:
        The input itself if it already fits, otherwise a downscaled copy
        (area interpolation).
    """
    longest = max(image.width, image.height)
    if longest <= max_dimension:
        return image

    scale = max_dimension / longest
    size = (max(1, round(image.width * scale)), max(1, round(image.height * scale)))
    resized = cv2.resize(image.data, size, interpolation=cv2.INTER_AREA)
    if image.data.ndim == 3 and resized.ndim == 2:
        resized = resized[:, :, np.newaxis]

    logger.debug(f"Resized {image.width}x{image.height} -> {size[0]}x{size[1]}")
    return RasterBuffer(data=resized)


def encode_jpeg(image: RasterBuffer, quality: int = 95) -> bytes:
    """
    Encode a raster as JPEG. An alpha channel is dropped.

    Raises:
        ValueError: If OpenCV fails to encode the image.
    """
    ok, encoded = cv2.imencode(".jpg", _to_bgr(image.data), [cv2.IMWRITE_JPEG_QUALITY, quality])
    if not ok:
        raise ValueError("JPEG encoding failed")
    return encoded.tobytes()


def save_image(image: RasterBuffer, file_path: Union[str, Path], quality: int = 95) -> Path:
    """
    Save a raster; the format follows the file extension.

    Raises:
        ValueError: If OpenCV fails to write the file.
    """
    file_path = Path(file_path)
    file_path.parent.mkdir(parents=True, exist_ok=True)

    data = image.data
    if data.ndim == 3 and data.shape[2] == 4 and file_path.suffix.lower() == ".png":
        bgr = cv2.cvtColor(data, cv2.COLOR_RGBA2BGRA)
    else:
        bgr = _to_bgr(data)

    if not cv2.imwrite(str(file_path), bgr, [cv2.IMWRITE_JPEG_QUALITY, quality]):
        raise ValueError(f"Failed to write image: {file_path}")
    return file_path


def load_json(file_path: Path) -> Dict[str, Any]:
    """Load JSON file."""
    with open(file_path, "r", encoding="utf-8") as f:
        return json.load(f)


def save_json(data: Dict[str, Any], file_path: Path, indent: int = 2):
    """Save data to JSON file."""
    file_path.parent.mkdir(parents=True, exist_ok=True)
    with open(file_path, "w", encoding="utf-8") as f:
        json.dump(data, f, indent=indent)


def load_yaml(file_path: Path) -> Dict[str, Any]:
    """Load YAML file."""
    with open(file_path, "r", encoding="utf-8") as f:
        return yaml.safe_load(f)


def save_yaml(data: Dict[str, Any], file_path: Path):
    """Save data to YAML file."""
    file_path.parent.mkdir(parents=True, exist_ok=True)
    with open(file_path, "w", encoding="utf-8") as f:
        yaml.dump(data, f, default_flow_style=False, sort_keys=False)
