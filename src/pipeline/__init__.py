"""
Document digitization pipeline.

Locates a document in a photo, estimates its output size and flattens it,
passing the original image through when no document is found.
"""

from src.pipeline.config_loader import Config, get_default_config, load_config
from src.pipeline.processor import DigitizeProcessor, build_locator, process_document
from src.pipeline.types import DecisionStatus, DigitizeResult, FallbackReason

__all__ = [
    "Config",
    "DecisionStatus",
    "DigitizeProcessor",
    "DigitizeResult",
    "FallbackReason",
    "build_locator",
    "get_default_config",
    "load_config",
    "process_document",
]
