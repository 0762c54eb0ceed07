"""
Common type definitions for the document digitization pipeline.

This module provides Pydantic-based type definitions for the core data
structures shared by the locators, the geometry engine and the rectifier:
raster buffers, points and document quadrilaterals.

Pixel buffers are validated once at construction, so downstream stages can
index them without re-checking dtype or channel count. Quadrilaterals always
hold their corners in TL, TR, BR, BL order.
"""

import math
from typing import List, Tuple, Union

import numpy as np
from pydantic import BaseModel, Field, field_validator

from src.geometry.polygon import order_corners, polygon_area


class RasterBuffer(BaseModel):
    """
    Type-safe wrapper for decoded raster images (numpy.ndarray).

    A buffer is owned by whichever pipeline stage currently holds it. Stages
    never write into a buffer they received; each one allocates its own
    output.

    Attributes:
        data: The underlying numpy array containing pixel data.
            Shape: (H, W, C) for color images, (H, W) for grayscale.
            Dtype: uint8 (0-255).

    Example:
        >>> buffer = RasterBuffer.from_bytes(pixels, width=640, height=480, channels=3)
        >>> print(buffer.width, buffer.height, buffer.channels)  # 640 480 3
    """

    data: np.ndarray = Field(..., description="Pixel data as numpy array")

    model_config = {"arbitrary_types_allowed": True}

    @field_validator("data")
    @classmethod
    def _validate_image(cls, v: np.ndarray) -> np.ndarray:
        """
        Validate that the numpy array is a valid raster.

        Raises:
            ValueError: If array is not a valid image format.
        """
        if not isinstance(v, np.ndarray):
            raise ValueError(f"Expected numpy.ndarray, got {type(v)}")

        if v.size == 0:
            raise ValueError("Image array is empty")

        if len(v.shape) not in (2, 3):
            raise ValueError(
                f"Expected 2D (grayscale) or 3D (color) image, got shape {v.shape}"
            )

        if len(v.shape) == 3 and v.shape[2] not in (1, 3, 4):
            raise ValueError(
                f"Expected 1, 3, or 4 channels for color image, got {v.shape[2]}"
            )

        if v.dtype != np.uint8:
            raise ValueError(
                f"Expected uint8 dtype for image, got {v.dtype}. "
                "Images should be in range [0, 255]"
            )

        return v

    @classmethod
    def from_bytes(
        cls, pixels: bytes, width: int, height: int, channels: int
    ) -> "RasterBuffer":
        """
        Create a buffer from a flat row-major pixel byte string.

        Args:
            pixels: Interleaved pixel bytes, ``width * height * channels`` long.
            width: Image width in pixels.
            height: Image height in pixels.
            channels: Number of interleaved channels (1, 3 or 4).

        Returns:
            RasterBuffer holding a copy of the pixels.

        Raises:
            ValueError: If the byte count does not match the dimensions.
        """
        expected = width * height * channels
        if len(pixels) != expected:
            raise ValueError(
                f"Expected {expected} bytes for {width}x{height}x{channels}, "
                f"got {len(pixels)}"
            )
        flat = np.frombuffer(pixels, dtype=np.uint8).copy()
        if channels == 1:
            return cls(data=flat.reshape(height, width))
        return cls(data=flat.reshape(height, width, channels))

    def to_bytes(self) -> bytes:
        """Return the pixels as a flat row-major byte string."""
        return np.ascontiguousarray(self.data).tobytes()

    @property
    def shape(self) -> Tuple[int, ...]:
        """Get image shape (H, W) or (H, W, C)."""
        return self.data.shape

    @property
    def height(self) -> int:
        """Get image height in pixels."""
        return int(self.data.shape[0])

    @property
    def width(self) -> int:
        """Get image width in pixels."""
        return int(self.data.shape[1])

    @property
    def channels(self) -> int:
        """Get number of channels (1 for grayscale, 3 for RGB, 4 for RGBA)."""
        if len(self.data.shape) == 2:
            return 1
        return int(self.data.shape[2])

    @property
    def area(self) -> int:
        """Get image area in pixels."""
        return self.width * self.height

    def to_numpy(self) -> np.ndarray:
        """Get underlying numpy array."""
        return self.data

    def copy(self) -> "RasterBuffer":
        """Create a deep copy of the raster buffer."""
        return RasterBuffer(data=self.data.copy())

    def __repr__(self) -> str:
        return (
            f"RasterBuffer(width={self.width}, height={self.height}, "
            f"channels={self.channels})"
        )


class Point(BaseModel):
    """
    Subpixel image coordinate (x, y).

    Attributes:
        x: X-coordinate (horizontal, 0 to image width).
        y: Y-coordinate (vertical, 0 to image height).

    Example:
        >>> point = Point(x=100.5, y=200.25)
        >>> arr = point.to_numpy()  # array([100.5, 200.25])
        >>> point2 = Point.from_numpy(np.array([150, 250]))
    """

    x: float = Field(..., description="X-coordinate (horizontal)")
    y: float = Field(..., description="Y-coordinate (vertical)")

    @field_validator("x", "y", mode="before")
    @classmethod
    def _require_finite(cls, v: Union[int, float]) -> float:
        """
        Coerce a coordinate to float and reject NaN or infinity.

        Raises:
            ValueError: If the value is not a finite number.
        """
        if isinstance(v, bool) or not isinstance(v, (int, float, np.number)):
            raise ValueError(f"Coordinate must be numeric, got {type(v)}")
        v = float(v)
        if not math.isfinite(v):
            raise ValueError(f"Coordinate must be finite, got {v}")
        return v

    @classmethod
    def from_numpy(cls, arr: np.ndarray) -> "Point":
        """
        Create Point from numpy array of shape (2,).

        Raises:
            ValueError: If array shape is not (2,).
        """
        arr = np.asarray(arr)
        if arr.shape != (2,):
            raise ValueError(f"Expected array of shape (2,), got {arr.shape}")
        return cls(x=float(arr[0]), y=float(arr[1]))

    @classmethod
    def from_list(cls, coords: list) -> "Point":
        """
        Create Point from list [x, y].

        Raises:
            ValueError: If list does not contain exactly 2 elements.
        """
        if len(coords) != 2:
            raise ValueError(f"Expected list with 2 elements, got {len(coords)}")
        return cls(x=coords[0], y=coords[1])

    def to_numpy(self, dtype: type = np.float64) -> np.ndarray:
        """Convert Point to numpy array of shape (2,)."""
        return np.array([self.x, self.y], dtype=dtype)

    def to_tuple(self) -> Tuple[float, float]:
        return (self.x, self.y)

    def distance_to(self, other: "Point") -> float:
        """Euclidean distance to another point."""
        return math.hypot(self.x - other.x, self.y - other.y)

    def __repr__(self) -> str:
        return f"Point(x={self.x}, y={self.y})"


class Quadrilateral(BaseModel):
    """
    Document boundary as four corners in canonical order.

    The corners are always ``[top_left, top_right, bottom_right, bottom_left]``.
    Use :meth:`from_points` to build one from corners in arbitrary order.

    Example:
        >>> quad = Quadrilateral.from_points([[300, 150], [100, 200], [320, 400], [80, 380]])
        >>> quad.top_left
        Point(x=100.0, y=200.0)
    """

    top_left: Point
    top_right: Point
    bottom_right: Point
    bottom_left: Point

    @classmethod
    def from_points(cls, points: Union[np.ndarray, list]) -> "Quadrilateral":
        """
        Create a Quadrilateral from 4 corners in any order.

        Args:
            points: Array-like of shape (4, 2) with [x, y] rows.

        Raises:
            ValueError: If input does not contain exactly 4 points.
        """
        ordered = order_corners(points)
        return cls(
            top_left=Point.from_numpy(ordered[0]),
            top_right=Point.from_numpy(ordered[1]),
            bottom_right=Point.from_numpy(ordered[2]),
            bottom_left=Point.from_numpy(ordered[3]),
        )

    @classmethod
    def from_ordered(cls, points: Union[np.ndarray, list]) -> "Quadrilateral":
        """Create a Quadrilateral from corners already in [TL, TR, BR, BL] order."""
        arr = np.asarray(points, dtype=np.float64)
        if arr.shape != (4, 2):
            raise ValueError(
                f"Expected exactly 4 points with shape (4, 2), got shape {arr.shape}"
            )
        return cls(
            top_left=Point.from_numpy(arr[0]),
            top_right=Point.from_numpy(arr[1]),
            bottom_right=Point.from_numpy(arr[2]),
            bottom_left=Point.from_numpy(arr[3]),
        )

    @property
    def corners(self) -> List[Point]:
        return [self.top_left, self.top_right, self.bottom_right, self.bottom_left]

    def to_numpy(self, dtype: type = np.float64) -> np.ndarray:
        """Convert to a (4, 2) array in [TL, TR, BR, BL] order."""
        return np.array([p.to_tuple() for p in self.corners], dtype=dtype)

    def area(self) -> float:
        """Enclosed area (shoelace formula)."""
        return polygon_area(self.to_numpy())

    def is_within(self, width: int, height: int) -> bool:
        """Check every corner lies inside ``[0, width] x [0, height]``."""
        return all(0 <= p.x <= width and 0 <= p.y <= height for p in self.corners)

    def to_dict(self) -> dict:
        """Serialize to the camelCase corner mapping used in reports."""
        return {
            "topLeft": {"x": self.top_left.x, "y": self.top_left.y},
            "topRight": {"x": self.top_right.x, "y": self.top_right.y},
            "bottomRight": {"x": self.bottom_right.x, "y": self.bottom_right.y},
            "bottomLeft": {"x": self.bottom_left.x, "y": self.bottom_left.y},
        }
