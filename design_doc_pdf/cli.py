#!/usr/bin/env python3
"""
Command line entry point: convert a markdown design document to PDF.

MIT License - Copyright (c) 2025 Markdown to PDF Converter
"""

import argparse
import sys
from pathlib import Path
from typing import List, Optional

from .config import (
    DEFAULT_DIAGRAM_TIMEOUT,
    DEFAULT_INPUT_PATH,
    DEFAULT_MARGIN,
    PAGE_FORMATS,
    RenderConfiguration,
    default_output_path,
)
from .dependencies import check_dependencies, install_browser
from .errors import ConversionError
from .log import ConsoleLogger
from .pipeline import convert


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="design-doc-pdf",
        description="Convert a markdown design document to PDF with Mermaid diagram support",
    )
    parser.add_argument("input", nargs="?", default=str(DEFAULT_INPUT_PATH),
                        help=f"Markdown file to convert (default: {DEFAULT_INPUT_PATH})")
    parser.add_argument("-o", "--output", default=None,
                        help="PDF output path (default: input path with .pdf extension)")
    parser.add_argument("--format", default="A4",
                        help=f"Paper size (default: A4). Available: {', '.join(PAGE_FORMATS)}")
    parser.add_argument("--margin", default=DEFAULT_MARGIN,
                        help=f"Page margins in CSS format (default: '{DEFAULT_MARGIN}'). Range: 0-3 inches. Use 1, 2, or 4 values. Units: in, cm, mm, pt, px")
    parser.add_argument("--no-background", action="store_true", help="Do not print background colors and images")
    parser.add_argument("--no-page-numbers", action="store_true", help="Omit the page number footer")
    parser.add_argument("--timeout", type=float, default=DEFAULT_DIAGRAM_TIMEOUT,
                        help=f"Seconds to wait for diagram rendering (default: {DEFAULT_DIAGRAM_TIMEOUT:g})")
    parser.add_argument("--save-html", default=None, metavar="PATH", help="Also save the rendered HTML page to PATH")
    parser.add_argument("--install-browser", action="store_true", help="Install Playwright's Chromium and exit")
    parser.add_argument("--debug", action="store_true", help="Enable debug logging for detailed output")
    return parser


def main(argv: Optional[List[str]] = None) -> int:
    """Main entry point."""
    parser = build_parser()
    args = parser.parse_args(argv)

    if args.install_browser:
        return 0 if install_browser() else 1

    input_path = Path(args.input)
    output_path = Path(args.output) if args.output else default_output_path(input_path)

    try:
        config = RenderConfiguration(
            output_path=output_path,
            page_format=args.format,
            margin=args.margin,
            print_background=not args.no_background,
            diagram_timeout=args.timeout,
            page_numbers=not args.no_page_numbers,
            html_output=args.save_html,
        )
    except ValueError as e:
        parser.error(str(e))

    logger = ConsoleLogger(debug=args.debug)
    logger.info(f"Converting {input_path} to PDF...")

    if not check_dependencies():
        return 1

    try:
        artifact = convert(input_path, config, logger)
    except ConversionError as e:
        logger.error(f"PDF generation failed: {e}")
        return 1

    logger.success(f"PDF created successfully at: {artifact.path}")
    return 0


if __name__ == "__main__":
    sys.exit(main())
