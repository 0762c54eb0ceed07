"""
Common interface for document corner locators.

A locator either finds the document quadrilateral or reports that none is
present by returning None. Not finding a document is an expected outcome,
never an exception.
"""

from abc import ABC, abstractmethod
from typing import Optional

from src.common.types import Quadrilateral, RasterBuffer


class CornerLocator(ABC):
    """Strategy that finds the document boundary in a raster image."""

    name: str = "locator"

    def initialize(self) -> None:
        """Prepare expensive resources. Safe to call more than once."""

    @abstractmethod
    def locate(self, image: RasterBuffer) -> Optional[Quadrilateral]:
        """
        Find the document quadrilateral.

        Args:
            image: Decoded raster; not modified.

        Returns:
            Canonically ordered Quadrilateral, or None if no document was found.
        """
