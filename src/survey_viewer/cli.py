"""Command-line interface for the survey viewer."""

import argparse
import asyncio
import logging
import sys
from dataclasses import replace

from src.logging_config import setup_logging
from src.survey_viewer.config import load_config
from src.survey_viewer.errors import DatasetError
from src.survey_viewer.session import open_session
from src.survey_viewer.viewer import PlotlyDisplays, export_html, show_figure


def main() -> None:
    """Main entry point for survey viewer CLI."""
    parser = argparse.ArgumentParser(
        description="Survey Viewer - browse georeferenced front/rear survey imagery",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  # View survey points in browser
  uv run python -m src.survey_viewer.cli data.csv

  # Flat-image dataset (no image dimensions)
  uv run python -m src.survey_viewer.cli data.csv --variant flat

  # Open the viewer on the third point and print the info panel
  uv run python -m src.survey_viewer.cli data.csv --open 2

  # Export map to HTML file
  uv run python -m src.survey_viewer.cli data.csv --export map.html
        """,
    )

    parser.add_argument(
        "path",
        type=str,
        help="Path to survey CSV file",
    )
    parser.add_argument(
        "--variant",
        choices=["graph", "flat"],
        default="graph",
        help="Dataset variant: graph (with image dimensions) or flat",
    )
    parser.add_argument(
        "--images-base",
        type=str,
        default=None,
        metavar="URL",
        help="URL prefix for image files (default: SURVEY_IMAGE_BASE or ./images)",
    )
    parser.add_argument(
        "--open",
        type=int,
        default=None,
        metavar="INDEX",
        help="Open the viewer on the point at INDEX (0-based)",
    )
    parser.add_argument(
        "--export",
        type=str,
        metavar="FILE",
        help="Export map to HTML file instead of opening browser",
    )
    parser.add_argument(
        "-v",
        "--verbose",
        action="store_true",
        help="Enable verbose logging",
    )

    args = parser.parse_args()

    setup_logging()
    if args.verbose:
        logging.getLogger("src.survey_viewer").setLevel(logging.DEBUG)

    logger = logging.getLogger(__name__)

    config = load_config()
    if args.images_base:
        config = replace(config, image_base=args.images_base.rstrip("/"))

    try:
        logger.info(f"Loading survey from {args.path}")
        session = open_session(args.path, config=config, variant=args.variant)
    except DatasetError as e:
        print(f"Error: {e}", file=sys.stderr)
        sys.exit(1)

    print(f"Loaded {len(session.points)} survey points ({session.variant} variant)")
    if session.provider is not None:
        graph = session.provider.graph
        print(
            f"Image graph: {len(graph.images)} images, "
            f"{len(graph.sequences)} sequences, {len(graph.cells)} cells"
        )

    controller = session.controller
    if args.open is not None:
        if asyncio.run(controller.marker_clicked(args.open)):
            print(controller.info_panel().text)
            print(f"Image: {controller.image_url}")
        else:
            print(f"Error: no point at index {args.open}", file=sys.stderr)

    if session.provider is not None:
        asyncio.run(session.aclose())

    displays = session.displays
    if not isinstance(displays, PlotlyDisplays):
        return

    if args.export:
        logger.info(f"Exporting to {args.export}")
        export_html(displays.map_figure, args.export)
        print(f"Exported to {args.export}")
    else:
        logger.info("Opening in browser")
        show_figure(displays.map_figure)


if __name__ == "__main__":
    main()
