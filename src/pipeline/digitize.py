"""
Command-line digitization of photographed pages.

Usage:
    python -m src.pipeline.digitize --input photos/ --output flat/ --save-corners
"""

import argparse
import logging
from pathlib import Path
from typing import List, Optional

from src.pipeline.config_loader import get_default_config, load_config
from src.pipeline.processor import DigitizeProcessor
from src.utils.io import IMAGE_EXTENSIONS, load_image, prepare_image, save_image, save_json
from src.utils.logging_config import setup_logging
from src.utils.visualization import draw_quadrilateral_overlay

logger = logging.getLogger(__name__)


def collect_inputs(input_path: Path) -> List[Path]:
    """List image files for a file or directory input, sorted by name."""
    if input_path.is_dir():
        return sorted(
            p for p in input_path.iterdir() if p.is_file() and p.suffix.lower() in IMAGE_EXTENSIONS
        )
    if input_path.is_file():
        return [input_path]
    raise FileNotFoundError(f"Input not found: {input_path}")


def main(argv: Optional[List[str]] = None) -> int:
    """Main entry point."""
    parser = argparse.ArgumentParser(description="Detect and flatten documents in photos")
    parser.add_argument(
        "--input",
        type=str,
        required=True,
        help="Input image or directory of images",
    )
    parser.add_argument(
        "--output",
        type=str,
        required=True,
        help="Output directory for rectified images",
    )
    parser.add_argument(
        "--config",
        type=str,
        default=None,
        help="Path to configuration file (defaults to the bundled config.yaml)",
    )
    parser.add_argument(
        "--strategy",
        type=str,
        choices=["classical", "oracle"],
        default=None,
        help="Corner location strategy (overrides the configuration)",
    )
    parser.add_argument(
        "--max-dim",
        type=int,
        default=None,
        help="Longer side of prepared input images (overrides the configuration)",
    )
    parser.add_argument(
        "--save-corners",
        action="store_true",
        help="Write corners.json with the detected corners of every image",
    )
    parser.add_argument(
        "--save-overlay",
        action="store_true",
        help="Also write each input with the detected outline drawn on it",
    )
    parser.add_argument("--verbose", action="store_true", help="Enable debug logging")

    args = parser.parse_args(argv)
    setup_logging(logging.DEBUG if args.verbose else logging.INFO)

    try:
        config = load_config(Path(args.config)) if args.config else get_default_config()
    except (FileNotFoundError, ValueError) as e:
        logger.error(f"Failed to load configuration: {e}")
        return 1

    if args.strategy:
        config.pipeline.strategy = args.strategy
    if args.max_dim:
        config.io.max_dimension = args.max_dim

    try:
        inputs = collect_inputs(Path(args.input))
    except FileNotFoundError as e:
        logger.error(str(e))
        return 1
    if not inputs:
        logger.error(f"No images found in {args.input}")
        return 1

    output_dir = Path(args.output)
    output_dir.mkdir(parents=True, exist_ok=True)

    processor = DigitizeProcessor(config=config)
    report = {}
    failures = 0

    for image_path in inputs:
        try:
            image = prepare_image(load_image(image_path), config.io.max_dimension)
        except (FileNotFoundError, ValueError) as e:
            logger.error(f"Skipping {image_path.name}: {e}")
            failures += 1
            continue

        result = processor.process(image)
        save_image(result.image, output_dir / f"{image_path.stem}.jpg", quality=config.io.jpeg_quality)

        if args.save_overlay:
            overlay = draw_quadrilateral_overlay(image, result.corners)
            save_image(
                overlay,
                output_dir / f"{image_path.stem}_overlay.jpg",
                quality=config.io.jpeg_quality,
            )

        report[image_path.name] = result.to_dict()
        logger.info(f"{image_path.name}: {result.decision.value} ({result.width}x{result.height})")

    if args.save_corners:
        save_json(report, output_dir / "corners.json")

    logger.info(f"Processed {len(report)}/{len(inputs)} images into {output_dir}")
    return 0 if failures == 0 else 1


if __name__ == "__main__":
    exit(main())
