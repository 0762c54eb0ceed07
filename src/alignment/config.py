"""
Configuration model for perspective rectification.
"""

from pydantic import BaseModel, Field


class RectificationConfig(BaseModel):
    """Rectifier configuration.

    Attributes:
        min_output_size: Floor on each side of the estimated output, in pixels
        background: Fill value for output pixels with no valid source sample
        band_rows: Output rows warped per vectorized step
        validate_homography: Reject degenerate homographies before warping
    """

    min_output_size: int = Field(default=200, ge=1)
    background: int = Field(default=255, ge=0, le=255)
    band_rows: int = Field(default=256, ge=1)
    validate_homography: bool = True
