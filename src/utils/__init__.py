"""
Shared Utilities

Image I/O and logging helpers used around the digitization core.
"""

from src.utils.io import (
    decode_image,
    encode_jpeg,
    load_image,
    prepare_image,
    save_image,
)
from src.utils.logging_config import setup_logging

__all__ = [
    "decode_image",
    "encode_jpeg",
    "load_image",
    "prepare_image",
    "save_image",
    "setup_logging",
]
