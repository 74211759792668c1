"""Entry point for the pi-backdrop CLI."""

from __future__ import annotations

import argparse
import asyncio
import logging
import os
import sys
from typing import Any

from pi.backdrop.app import BackdropApp
from pi.backdrop.config import BackdropSettings, default_config_dir, load_settings
from pi.backdrop.document import DEFAULT_LAYOUT, Document, LayoutError, NavStrip, layout_from_dict, load_layout
from pi.backdrop.metrics import MetricsError, TerminalMetrics
from pi.backdrop.terminal import ProcessTerminal

logger = logging.getLogger(__name__)


def parse_args(argv: list[str] | None = None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(
        prog="pi-backdrop",
        description="Animated character-grid backdrop with draggable, editable boxes",
    )
    parser.add_argument("--layout", help="JSON layout file describing the boxes")
    parser.add_argument("--cwd", default=os.getcwd(), help="Project directory for .pi/backdrop.json")
    parser.add_argument("--trail-ms", type=float, dest="trail_ms", help="Pointer trail lifetime in milliseconds")
    parser.add_argument("--fps", type=float, help="Frames per second")
    parser.add_argument(
        "--pixel-mouse",
        action="store_true",
        default=None,
        help="Request pixel-precise mouse reports (SGR-Pixels)",
    )
    parser.add_argument("--log-file", help="Log file (default: ~/.pi/backdrop/backdrop.log)")
    parser.add_argument("--log-level", default="info", choices=["debug", "info", "warning", "error"])
    return parser.parse_args(argv)


def setup_logging(log_file: str | None, level: str) -> None:
    path = log_file or os.path.join(default_config_dir(), "backdrop.log")
    os.makedirs(os.path.dirname(os.path.abspath(path)), exist_ok=True)
    logging.basicConfig(
        filename=path,
        level=getattr(logging, level.upper()),
        format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
    )


def settings_overrides(args: argparse.Namespace) -> dict[str, Any]:
    """CLI flags as camelCase settings; unset flags stay ``None`` and are skipped."""
    return {
        "layout": args.layout,
        "trailDurationMs": args.trail_ms,
        "frameRate": args.fps,
        "pixelMouse": args.pixel_mouse,
    }


def build_document(settings: BackdropSettings, metrics: TerminalMetrics) -> Document:
    nav = NavStrip(title=settings.nav_title, tabs=settings.nav_tabs, rows=settings.nav_rows)
    if settings.layout:
        return load_layout(settings.layout, metrics.char_size, nav)
    return layout_from_dict(DEFAULT_LAYOUT, metrics.char_size, nav)


def main(argv: list[str] | None = None) -> None:
    args = parse_args(argv)
    setup_logging(args.log_file, args.log_level)

    try:
        settings = load_settings(cwd=args.cwd, overrides=settings_overrides(args))
        metrics = TerminalMetrics()
        document = build_document(settings, metrics)
        terminal = ProcessTerminal(pixel_mouse=settings.pixel_mouse)
        app = BackdropApp(terminal, metrics, document, settings)
    except (MetricsError, LayoutError, ValueError) as e:
        logger.error("Startup failed: %s", e)
        print(f"Error: {e}", file=sys.stderr)
        sys.exit(1)

    if not sys.stdin.isatty() or not sys.stdout.isatty():
        print("Error: pi-backdrop needs an interactive terminal", file=sys.stderr)
        sys.exit(1)

    try:
        asyncio.run(app.run())
    except KeyboardInterrupt:
        pass


if __name__ == "__main__":
    main()
