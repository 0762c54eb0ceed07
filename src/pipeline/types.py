"""
Data types for the digitization pipeline.

Provides the result container returned by the orchestrator.
"""

from dataclasses import dataclass
from enum import Enum
from typing import Any, Dict, Optional, Tuple

from src.common.types import Quadrilateral, RasterBuffer


class DecisionStatus(Enum):
    """Pipeline decision outcomes."""

    RECTIFIED = "RECTIFIED"
    PASSTHROUGH = "PASSTHROUGH"


class FallbackReason(Enum):
    """Why the original image was passed through unchanged."""

    NOT_FOUND = "Document Not Found"  # Locator returned no quadrilateral
    DEGENERATE_HOMOGRAPHY = "Degenerate Homography"  # Corners cannot define a warp
    NONE = "None"  # Rectified successfully


@dataclass
class DigitizeResult:
    """
    Output from the digitization pipeline.

    Attributes:
        image: Rectified raster, or the original raster on pass-through.
        width: Output width in pixels.
        height: Output height in pixels.
        decision: RECTIFIED or PASSTHROUGH.
        reason: Fallback reason (NONE when rectified).
        corners: Corners used for rectification, or the rejected corners of a
            degenerate detection. None when no document was found.
        strategy: Name of the locator that produced the corners.
    """

    image: RasterBuffer
    width: int
    height: int
    decision: DecisionStatus
    reason: FallbackReason
    corners: Optional[Quadrilateral]
    strategy: str

    @property
    def size(self) -> Tuple[int, int]:
        return self.width, self.height

    def is_rectified(self) -> bool:
        """Check if the document was found and rectified."""
        return self.decision == DecisionStatus.RECTIFIED

    def to_dict(self) -> Dict[str, Any]:
        """JSON-serializable summary (pixel data excluded)."""
        return {
            "width": self.width,
            "height": self.height,
            "decision": self.decision.value,
            "reason": self.reason.value,
            "strategy": self.strategy,
            "corners": self.corners.to_dict() if self.corners is not None else None,
        }
