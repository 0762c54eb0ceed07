"""Vision-model corner locator.

Delegates corner detection to an external vision-capable chat model and
validates its answer before trusting it. The network client is injected, so
tests (and alternative providers) can supply their own.

Every failure mode (transport error, timeout, unparseable reply, schema
mismatch, out-of-bounds or non-finite coordinates) is reported as "not
found" by returning None. No request is retried.

Example:
    >>> locator = OracleCornerLocator(OpenAICornerClient(OracleConfig()))
    >>> quad = locator.locate(buffer)
"""

import base64
import logging
import math
import os
from typing import List, Optional, Protocol

from pydantic import ValidationError

from src.common.types import Quadrilateral, RasterBuffer
from src.detection.base import CornerLocator
from src.detection.config import OracleConfig
from src.detection.schemas import CornerReply, ReplyPoint, parse_json_reply
from src.utils.io import encode_jpeg

logger = logging.getLogger(__name__)

CORNER_PROMPT = """Find the document, sheet of paper or notebook page in this photo.

The image is {width}x{height} pixels. Reply with JSON only, using pixel coordinates:
{{
  "found": true,
  "corners": {{
    "topLeft": {{"x": N, "y": N}},
    "topRight": {{"x": N, "y": N}},
    "bottomRight": {{"x": N, "y": N}},
    "bottomLeft": {{"x": N, "y": N}}
  }}
}}

- Every coordinate must lie inside the image bounds.
- Place each corner on the physical edge of the page, even if it is partly hidden.
- topLeft is the page corner nearest the top-left of the image, and so on.
- If there is no clear document, reply with {{"found": false}}."""


class CornerOracleClient(Protocol):
    """Transport to a vision model that answers with corner JSON."""

    def request_corners(self, image_jpeg: bytes, width: int, height: int) -> str:
        """Send the image and return the model's raw text reply."""
        ...


class OpenAICornerClient:
    """
    Corner oracle backed by an OpenAI vision chat model.

    The OpenAI SDK client is created lazily on first use, with the configured
    timeout and retries disabled.

    Args:
        config: Oracle configuration.
        api_key: Explicit API key. If None, read from ``config.api_key_env``.
    """

    def __init__(self, config: Optional[OracleConfig] = None, api_key: Optional[str] = None):
        self.config = config if config is not None else OracleConfig()
        self._api_key = api_key
        self._client: Optional[object] = None

    def initialize(self) -> None:
        """Create the SDK client if it does not exist yet."""
        _ = self.client

    @property
    def client(self):
        """Lazy-load the OpenAI client on first access.

        Raises:
            ImportError: If the openai package is not installed.
        """
        if self._client is None:
            try:
                from openai import OpenAI
            except ImportError as e:
                logger.error("Failed to import openai. Install with: pip install openai")
                raise ImportError("openai not installed. Run: pip install openai") from e

            api_key = self._api_key or os.getenv(self.config.api_key_env, "")
            self._client = OpenAI(
                api_key=api_key,
                timeout=self.config.timeout_seconds,
                max_retries=0,
            )
            logger.info(
                f"OpenAI corner client ready: model={self.config.model}, "
                f"timeout={self.config.timeout_seconds}s"
            )
        return self._client

    def request_corners(self, image_jpeg: bytes, width: int, height: int) -> str:
        data_url = "data:image/jpeg;base64," + base64.b64encode(image_jpeg).decode("utf-8")
        prompt = CORNER_PROMPT.format(width=width, height=height)

        resp = self.client.chat.completions.create(
            model=self.config.model,
            temperature=self.config.temperature,
            response_format={"type": "json_object"},
            messages=[
                {
                    "role": "user",
                    "content": [
                        {"type": "text", "text": prompt},
                        {"type": "image_url", "image_url": {"url": data_url}},
                    ],
                }
            ],
        )
        return (resp.choices[0].message.content or "").strip()


def _is_valid_coordinate(value: object, limit: int) -> bool:
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        return False
    try:
        value = float(value)
    except OverflowError:
        return False
    return math.isfinite(value) and 0 <= value <= limit


def validate_reply_corners(reply: CornerReply, width: int, height: int) -> Optional[Quadrilateral]:
    """
    Turn a parsed reply into a Quadrilateral if every corner is usable.

    Each corner must be a finite number within ``[0, width] x [0, height]``;
    a single failing corner invalidates the whole reply.

    Returns:
        Canonically ordered Quadrilateral, or None.
    """
    if not reply.has_document:
        return None

    corners = reply.corners
    points: List[ReplyPoint] = [
        corners.top_left,
        corners.top_right,
        corners.bottom_right,
        corners.bottom_left,
    ]
    for point in points:
        if not (_is_valid_coordinate(point.x, width) and _is_valid_coordinate(point.y, height)):
            logger.warning(f"Invalid corner coordinates from oracle: ({point.x}, {point.y})")
            return None

    return Quadrilateral.from_points([[float(p.x), float(p.y)] for p in points])


class OracleCornerLocator(CornerLocator):
    """
    Locate a document by asking an external vision model.

    Args:
        client: Transport implementing :class:`CornerOracleClient`.
        config: Oracle configuration (JPEG quality for the upload).
    """

    name = "oracle"

    def __init__(self, client: CornerOracleClient, config: Optional[OracleConfig] = None):
        self.client = client
        self.config = config if config is not None else OracleConfig()

    def initialize(self) -> None:
        init = getattr(self.client, "initialize", None)
        if callable(init):
            init()

    def locate(self, image: RasterBuffer) -> Optional[Quadrilateral]:
        try:
            image_jpeg = encode_jpeg(image, quality=self.config.jpeg_quality)
            text = self.client.request_corners(image_jpeg, image.width, image.height)
        except Exception as e:
            logger.warning(f"Corner oracle request failed: {e}")
            return None

        try:
            reply = CornerReply.model_validate(parse_json_reply(text))
        except (TypeError, ValueError, ValidationError) as e:
            logger.warning(f"Corner oracle reply rejected: {e}")
            return None

        quad = validate_reply_corners(reply, image.width, image.height)
        if quad is None:
            logger.info("Corner oracle found no usable document")
        else:
            logger.info(f"Corner oracle found document: TL={quad.top_left}, BR={quad.bottom_right}")
        return quad
