"""
Main processor for the digitization pipeline.

Orchestrates the complete flow for one photographed page:
1. Corner location (classical edge analysis or vision-model oracle)
2. Output size estimation and homography
3. Perspective rectification

Falls back to passing the original image through when no document is found
or its corners cannot define a warp.
"""

import logging
from pathlib import Path
from typing import Iterable, Iterator, Optional

from src.alignment.rectifier import Rectifier
from src.common.types import RasterBuffer
from src.detection.base import CornerLocator
from src.detection.classical import ClassicalEdgeLocator
from src.detection.oracle import CornerOracleClient, OpenAICornerClient, OracleCornerLocator
from src.geometry.homography import DegenerateHomographyError
from src.pipeline.config_loader import Config, get_default_config, load_config
from src.pipeline.types import DecisionStatus, DigitizeResult, FallbackReason

logger = logging.getLogger(__name__)


def build_locator(
    config: Config, oracle_client: Optional[CornerOracleClient] = None
) -> CornerLocator:
    """
    Create the corner locator selected by ``config.pipeline.strategy``.

    Args:
        config: Pipeline configuration.
        oracle_client: Transport for the oracle strategy. Defaults to an
            OpenAI-backed client.

    Raises:
        ValueError: If the strategy is unknown.
    """
    strategy = config.pipeline.strategy
    if strategy == "classical":
        return ClassicalEdgeLocator(config.edge_detection)
    if strategy == "oracle":
        client = oracle_client if oracle_client is not None else OpenAICornerClient(config.oracle)
        return OracleCornerLocator(client, config.oracle)
    raise ValueError(f"Unknown corner location strategy: {strategy}")


class DigitizeProcessor:
    """
    Locate a document in a photo and flatten it.

    Example:
        >>> processor = DigitizeProcessor()
        >>> result = processor.process(load_image("page.jpg"))
        >>> if result.is_rectified():
        ...     save_image(result.image, "page_flat.jpg")
    """

    def __init__(
        self,
        config: Optional[Config] = None,
        config_path: Optional[Path] = None,
        locator: Optional[CornerLocator] = None,
        oracle_client: Optional[CornerOracleClient] = None,
    ):
        """
        Initialize the digitization processor.

        Args:
            config: Pre-loaded configuration object. If None, will load from file.
            config_path: Path to config file. If None, uses the bundled default.
            locator: Corner locator to use instead of the configured strategy.
            oracle_client: Transport for the oracle strategy.
        """
        if config is not None:
            self.config = config
            logger.info("Using provided configuration")
        else:
            self.config = load_config(config_path) if config_path else get_default_config()
            logger.info("Loaded configuration from file")

        self.locator = locator if locator is not None else build_locator(self.config, oracle_client)
        self.rectifier = Rectifier(self.config.rectification)

    def _passthrough(
        self, image: RasterBuffer, reason: FallbackReason, corners=None
    ) -> DigitizeResult:
        return DigitizeResult(
            image=image,
            width=image.width,
            height=image.height,
            decision=DecisionStatus.PASSTHROUGH,
            reason=reason,
            corners=corners,
            strategy=self.locator.name,
        )

    def process(self, image: RasterBuffer) -> DigitizeResult:
        """
        Execute the complete digitization pipeline.

        Args:
            image: Decoded photo (not modified).

        Returns:
            DigitizeResult with the rectified raster, or the original raster
            when no usable document was found.
        """
        logger.info("=" * 60)
        logger.info(f"Starting Digitization Pipeline ({image.width}x{image.height})")
        logger.info("=" * 60)

        # Stage 1: Corner location
        logger.info(f"[Stage 1/3] Corner location ({self.locator.name})")
        self.locator.initialize()
        quad = self.locator.locate(image)

        if quad is None:
            logger.warning("Pipeline PASSTHROUGH at Stage 1: Document not found")
            return self._passthrough(image, FallbackReason.NOT_FOUND)

        if not quad.is_within(image.width, image.height):
            logger.warning(
                f"Pipeline PASSTHROUGH at Stage 1: Corners outside "
                f"{image.width}x{image.height} image"
            )
            return self._passthrough(image, FallbackReason.NOT_FOUND)

        # Stage 2: Output size
        logger.info("[Stage 2/3] Output size estimation")
        width, height = self.rectifier.output_size(quad)
        logger.info(f"Estimated output size: {width}x{height}")

        # Stage 3: Rectification
        logger.info("[Stage 3/3] Perspective rectification")
        try:
            rectified = self.rectifier.rectify(image, quad, output_size=(width, height))
        except DegenerateHomographyError as e:
            logger.warning(f"Pipeline PASSTHROUGH at Stage 3: {e}")
            return self._passthrough(image, FallbackReason.DEGENERATE_HOMOGRAPHY, corners=quad)

        logger.info("Pipeline RECTIFIED")
        return DigitizeResult(
            image=rectified,
            width=width,
            height=height,
            decision=DecisionStatus.RECTIFIED,
            reason=FallbackReason.NONE,
            corners=quad,
            strategy=self.locator.name,
        )

    def process_batch(self, images: Iterable[RasterBuffer]) -> Iterator[DigitizeResult]:
        """Process images one at a time, yielding each result as it completes."""
        for index, image in enumerate(images):
            logger.info(f"Batch item {index + 1}")
            yield self.process(image)


def process_document(image: RasterBuffer, config: Optional[Config] = None) -> DigitizeResult:
    """One-shot convenience: digitize a single image with a fresh processor."""
    return DigitizeProcessor(config=config).process(image)
