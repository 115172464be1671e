"""Command-line entry point: convert one whiteboard image into an ``.excalidraw`` file.

Usage:
    sketch-to-excalidraw path/to/whiteboard.jpg
    sketch-to-excalidraw path/to/whiteboard.jpg --output-dir out/ --max-attempts 5
"""

import argparse
import json
import logging
import sys
from collections import Counter
from pathlib import Path

from sketch_excalidraw import config
from sketch_excalidraw.conversion.pipeline import ConversionRequest, PipelineResult, run_pipeline
from sketch_excalidraw.conversion.transforms import ImagePayload
from sketch_excalidraw.llm.client import build_transforms

logger = logging.getLogger(__name__)


def write_document(result: PipelineResult, output_dir: Path) -> Path:
    """Write a successful run's document to ``output_dir/<filename>`` and return the path."""
    output_dir.mkdir(parents=True, exist_ok=True)
    path = output_dir / result.filename
    path.write_text(json.dumps(result.contents, indent=2, ensure_ascii=False), encoding="utf-8")
    return path


def element_breakdown(contents: dict) -> dict[str, int]:
    """Count elements per ``type`` in a scene document."""
    elements = contents.get("elements")
    if not isinstance(elements, list):
        return {}
    return dict(Counter(str(el.get("type", "unknown")) if isinstance(el, dict) else "unknown" for el in elements))


def main(argv: list[str] | None = None) -> int:
    """Parse arguments, run the pipeline, and write the output file.  Returns the exit code."""
    parser = argparse.ArgumentParser(description="Convert a whiteboard image into an Excalidraw file")
    parser.add_argument("image", type=Path, help="Path to the whiteboard image (png, jpg, gif, webp)")
    parser.add_argument("--output-dir", type=Path, default=config.OUTPUT_DIR, help=f"Directory for the .excalidraw file (default: {config.OUTPUT_DIR})")
    parser.add_argument("--max-attempts", type=int, default=config.MAX_REPAIR_ATTEMPTS, help="Repair attempts before giving up (default: %(default)s)")
    parser.add_argument("-v", "--verbose", action="store_true", help="Enable debug logging")
    args = parser.parse_args(argv)

    logging.basicConfig(level=logging.DEBUG if args.verbose else logging.INFO, format="%(asctime)s %(levelname)s %(name)s: %(message)s")
    logging.getLogger("httpx").setLevel(logging.WARNING)

    try:
        image = ImagePayload.from_path(args.image)
    except (OSError, ValueError) as exc:
        logger.error("Cannot read image %s: %s", args.image, exc)
        return 1
    logger.info("Loaded image %s (%.2f KB)", args.image.name, len(image.data) / 1024)

    image_transform, repair_transform = build_transforms()
    result = run_pipeline(
        ConversionRequest(filename=args.image.name, image=image),
        image_transform,
        repair_transform,
        max_repair_attempts=args.max_attempts,
    )

    if not result.succeeded:
        print(f"Conversion failed at step {result.failed_stage.value}: {result.error}", file=sys.stderr)
        return 1

    path = write_document(result, args.output_dir)
    breakdown = element_breakdown(result.contents)
    print(f"Excalidraw file saved as: {path}")
    print(f"Total elements created: {sum(breakdown.values())}")
    for element_type, count in sorted(breakdown.items()):
        print(f"   - {element_type}: {count}")
    return 0


if __name__ == "__main__":
    sys.exit(main())
