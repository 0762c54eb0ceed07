"""
Configuration models for the corner locators.

Pydantic models with the default values used when no configuration file
overrides them.
"""

from pydantic import BaseModel, Field, model_validator


class EdgeDetectionConfig(BaseModel):
    """Classical edge locator configuration.

    Attributes:
        canny_low: Hysteresis low threshold on gradient magnitude
        canny_high: Hysteresis high threshold on gradient magnitude
        dilate_iterations: Number of 3x3 dilation passes over the edge map
        min_contour_points: Minimum boundary pixels for a component to count
        epsilon_ratio: Douglas-Peucker tolerance as a fraction of the hull perimeter
        min_area_ratio: Minimum quadrilateral area as a fraction of image area
        convexity_tolerance: Cross products at or below this magnitude are noise
    """

    canny_low: float = Field(default=50.0, ge=0.0)
    canny_high: float = Field(default=150.0, ge=0.0)
    dilate_iterations: int = Field(default=2, ge=0)
    min_contour_points: int = Field(default=30, ge=1)
    epsilon_ratio: float = Field(default=0.02, gt=0.0, lt=1.0)
    min_area_ratio: float = Field(default=0.1, ge=0.0, lt=1.0)
    convexity_tolerance: float = Field(default=1.0, ge=0.0)

    @model_validator(mode="after")
    def _check_thresholds(self) -> "EdgeDetectionConfig":
        if self.canny_low > self.canny_high:
            raise ValueError(
                f"canny_low ({self.canny_low}) must not exceed "
                f"canny_high ({self.canny_high})"
            )
        return self


class OracleConfig(BaseModel):
    """Vision-model corner oracle configuration.

    Attributes:
        model: Chat model name sent with every request
        timeout_seconds: Request timeout; an expired request counts as not found
        jpeg_quality: JPEG quality used to encode the image for upload
        api_key_env: Environment variable holding the API key
        temperature: Sampling temperature for the reply
    """

    model: str = "gpt-4o-mini"
    timeout_seconds: float = Field(default=30.0, gt=0.0)
    jpeg_quality: int = Field(default=90, ge=1, le=100)
    api_key_env: str = "OPENAI_API_KEY"
    temperature: float = Field(default=0.0, ge=0.0, le=2.0)
