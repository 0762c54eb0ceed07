"""
Pydantic schemas and tolerant JSON parsing for vision-model corner replies.

Vision models occasionally wrap their JSON in markdown fences, leave raw
control characters or invalid backslash escapes inside strings, or add
trailing commas. :func:`parse_json_reply` recovers from those before the
payload is validated against :class:`CornerReply`.
"""

import json
import logging
import re
from typing import Any, Dict, Optional

from pydantic import BaseModel, ConfigDict, Field

logger = logging.getLogger(__name__)

_FENCE_START = re.compile(r"^```(?:json)?\s*\n?", re.IGNORECASE)
_FENCE_END = re.compile(r"\n?```\s*$")
_TRAILING_COMMA = re.compile(r",(\s*[}\]])")
_OBJECT = re.compile(r"\{[\s\S]*\}")

_VALID_ESCAPES = set('"\\/bfnrtu')
_CONTROL_ESCAPES = {"\n": "\\n", "\r": "\\r", "\t": "\\t"}


class ReplyPoint(BaseModel):
    """A corner as returned by the model; values are checked later."""

    x: Any
    y: Any


class ReplyCorners(BaseModel):
    """The four named corners of a reply."""

    model_config = ConfigDict(populate_by_name=True)

    top_left: ReplyPoint = Field(alias="topLeft")
    top_right: ReplyPoint = Field(alias="topRight")
    bottom_right: ReplyPoint = Field(alias="bottomRight")
    bottom_left: ReplyPoint = Field(alias="bottomLeft")


class CornerReply(BaseModel):
    """Corner detection reply.

    Attributes:
        found: Whether the model saw a document. Replies that omit it count
            as found when they carry corners.
        corners: Named corners, or None when nothing was found.
        confidence: Optional self-reported confidence.
    """

    found: Optional[bool] = None
    corners: Optional[ReplyCorners] = None
    confidence: Optional[float] = None

    @property
    def has_document(self) -> bool:
        return self.corners is not None and self.found is not False


def sanitize_json(raw: str) -> str:
    """
    Repair common defects in model-generated JSON text.

    - Strips markdown code fences
    - Escapes raw newlines, carriage returns and tabs inside string values
    - Doubles backslashes that do not start a valid JSON escape
    - Removes trailing commas before ``}`` or ``]``
    """
    text = _FENCE_END.sub("", _FENCE_START.sub("", raw.strip())).strip()

    out = []
    in_string = False
    backslashes = 0
    for i, ch in enumerate(text):
        # A quote is escaped only after an odd run of backslashes
        escaped = backslashes % 2 == 1
        backslashes = backslashes + 1 if ch == "\\" else 0

        if ch == '"' and not escaped:
            in_string = not in_string
            out.append(ch)
            continue

        if not in_string:
            out.append(ch)
            continue

        if ch in _CONTROL_ESCAPES:
            out.append(_CONTROL_ESCAPES[ch])
            continue

        if ch == "\\" and not escaped:
            nxt = text[i + 1] if i + 1 < len(text) else ""
            if nxt and nxt not in _VALID_ESCAPES:
                out.append("\\\\")
                continue

        out.append(ch)

    return _TRAILING_COMMA.sub(r"\1", "".join(out))


def parse_json_reply(text: str) -> Dict[str, Any]:
    """
    Parse a JSON object from model output, trying progressively looser strategies.

    1. Direct parse
    2. Parse after :func:`sanitize_json`
    3. Parse the outermost ``{...}`` block after sanitizing

    Raises:
        ValueError: If no strategy yields a JSON object.
    """
    candidates = [lambda: text, lambda: sanitize_json(text)]
    match = _OBJECT.search(text)
    if match:
        candidates.append(lambda: sanitize_json(match.group(0)))

    for build in candidates:
        try:
            parsed = json.loads(build())
        except json.JSONDecodeError:
            continue
        if isinstance(parsed, dict):
            return parsed

    raise ValueError("Could not parse a JSON object from the model reply")
