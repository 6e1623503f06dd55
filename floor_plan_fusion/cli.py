"""CLI for analyzing floor plan detections."""

import argparse
import json
import logging
import sys
from pathlib import Path
from typing import List, Optional, Sequence, Tuple

from .analyzer import FloorPlanAnalyzer
from .models import (
    ClassifierParams,
    DetectionResponse,
    DimensionParams,
    PipelineParams,
    TextToken,
)


def load_detections(path: Path) -> DetectionResponse:
    """Load a detection service response from a JSON file.

    A bare list of predictions is accepted as well.
    """
    payload = json.loads(path.read_text())
    if isinstance(payload, list):
        payload = {"predictions": payload}
    return DetectionResponse.model_validate(payload)


def load_text_tokens(path: Path) -> Tuple[List[TextToken], bool]:
    """Load OCR text tokens from a JSON file.

    Returns:
        Tokens and whether the first one holds the full page text
    """
    payload = json.loads(path.read_text())

    # Vision style response: the first annotation is the whole text
    if isinstance(payload, dict):
        if "responses" in payload:
            payload = payload["responses"][0] if payload["responses"] else {}
        annotations = payload.get("textAnnotations", [])
        return [TextToken.model_validate(a) for a in annotations], True

    if not isinstance(payload, list):
        raise ValueError(f"Expected an object or a list of text tokens in {path}")

    return [TextToken.model_validate(t) for t in payload], False


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        description="Classify rooms and overlay dimensions from floor plan detections"
    )
    parser.add_argument(
        "rooms",
        type=str,
        help="Path to room detections JSON",
    )
    parser.add_argument(
        "--furniture",
        type=str,
        help="Path to furniture detections JSON",
    )
    parser.add_argument(
        "--ocr",
        type=str,
        help="Path to OCR text annotations JSON",
    )
    parser.add_argument(
        "--scale",
        type=float,
        default=0.1,
        help="Physical length per pixel (default: 0.1 ft/px)",
    )
    parser.add_argument(
        "--no-geometry-fallback",
        action="store_true",
        help="Leave unlabeled rooms to furniture evidence",
    )
    parser.add_argument(
        "--output",
        type=str,
        help="Write the analysis result as JSON to this path",
    )
    parser.add_argument(
        "-v",
        "--verbose",
        action="store_true",
        help="Log pipeline progress",
    )
    return parser


def main(argv: Optional[Sequence[str]] = None) -> int:
    """Main entry point."""
    args = build_parser().parse_args(argv)

    logging.basicConfig(
        level=logging.INFO if args.verbose else logging.WARNING,
        format="%(levelname)s %(name)s: %(message)s",
    )

    paths = [args.rooms, args.furniture, args.ocr]
    for path in paths:
        if path is not None and not Path(path).exists():
            print(f"❌ Error: File not found: {path}", file=sys.stderr)
            return 1

    try:
        rooms = load_detections(Path(args.rooms))
        furniture = load_detections(Path(args.furniture)) if args.furniture else None

        tokens = None
        skip_first = False
        if args.ocr:
            tokens, skip_first = load_text_tokens(Path(args.ocr))

        params = PipelineParams(
            scale_factor=args.scale,
            classifier=ClassifierParams(use_geometry_fallback=not args.no_geometry_fallback),
            dimensions=DimensionParams(skip_first_token=skip_first),
        )

        analyzer = FloorPlanAnalyzer(params)
        print(f"\n🏗️  Analyzing floor plan: {args.rooms}\n")
        result = analyzer.analyze(rooms, furniture, text_tokens=tokens)

    except ValueError as e:
        print(f"\n❌ Error during analysis: {e}", file=sys.stderr)
        return 1

    analyzer.print_report(result)

    if args.output:
        Path(args.output).write_text(result.model_dump_json(indent=2))
        print(f"\n✅ Result written to {args.output}\n")

    return 0


if __name__ == "__main__":
    sys.exit(main())
