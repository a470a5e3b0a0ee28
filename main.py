from __future__ import annotations

import argparse
import asyncio
import logging
from pathlib import Path
import sys

from linescope_core.config import (
    DEFAULT_HOST,
    DEFAULT_PORT,
    RENDERER_KINDS,
    AxisRange,
    PlotterConfig,
    load_config_file,
    parse_bind,
)
from linescope_core.plotters import create_plotter_factory
from linescope_core.server import PlotServer
from linescope_core.sinks import terminal_sink

LOGGER = logging.getLogger("linescope")


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(prog="linescope")
    sub = parser.add_subparsers(dest="command", required=True)

    serve = sub.add_parser("serve", help="Listen for newline-delimited numbers and plot them on stdout.")
    serve.add_argument("--config", type=Path, default=None, help="TOML file with [plot] and [server] tables.")
    serve.add_argument("--min", type=float, default=None, help="Axis minimum. Default: 0.")
    serve.add_argument("--max", type=float, default=None, help="Axis maximum. Default: 100.")
    serve.add_argument(
        "--bar-capacity",
        type=int,
        default=None,
        help="Bar width in cells, and samples kept per series by the chart in count mode. Default: 100.",
    )
    serve.add_argument("--width", type=int, default=None, help="Chart grid width in cells. Default: 100.")
    serve.add_argument("--height", type=int, default=None, help="Chart grid height in cells. Default: 30.")
    serve.add_argument(
        "--max-age",
        type=float,
        default=None,
        help="Keep samples for this many seconds instead of a fixed count (chart renderer).",
    )
    serve.add_argument("--frame-interval", type=float, default=None, help="Minimum seconds between frames.")
    serve.add_argument("--bind", default=None, help=f"HOST:PORT to listen on. Default: {DEFAULT_HOST}:{DEFAULT_PORT}.")
    serve.add_argument("--multiple-connections", action="store_true", default=None)
    serve.add_argument("--renderer", choices=list(RENDERER_KINDS), default=None)
    serve.add_argument("--max-line-length", type=int, default=None)
    serve.add_argument("--lazy-offsets", action="store_true", default=None)
    serve.add_argument("--mark-latest", action="store_true", default=None)
    serve.add_argument("--log-level", choices=["DEBUG", "INFO", "WARNING", "ERROR"], default="WARNING")
    return parser


def config_from_args(args: argparse.Namespace) -> PlotterConfig:
    base = load_config_file(args.config) if args.config is not None else PlotterConfig()
    axis = base.axis
    if args.min is not None or args.max is not None:
        axis = AxisRange(
            min=base.axis.min if args.min is None else args.min,
            max=base.axis.max if args.max is None else args.max,
        )
    host = port = None
    if args.bind is not None:
        host, port = parse_bind(args.bind)
    return base.with_overrides(
        axis=axis,
        width=args.width,
        height=args.height,
        capacity=args.bar_capacity,
        max_age=args.max_age,
        frame_interval=args.frame_interval,
        multiple_connections=args.multiple_connections,
        renderer=args.renderer,
        host=host,
        port=port,
        max_line_length=args.max_line_length,
        lazy_offsets=args.lazy_offsets,
        mark_latest=args.mark_latest,
    )


async def serve(config: PlotterConfig) -> None:
    factory = create_plotter_factory(config, terminal_sink())
    server = PlotServer(config, factory)
    await server.serve_forever()


def main(argv: list[str] | None = None) -> int:
    parser = build_parser()
    args = parser.parse_args(argv)

    if args.command == "serve":
        # stdout carries the chart; logs go to stderr.
        logging.basicConfig(
            level=args.log_level,
            stream=sys.stderr,
            format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
        )
        try:
            config = config_from_args(args)
        except (OSError, ValueError) as exc:
            parser.error(str(exc))
        try:
            asyncio.run(serve(config))
        except KeyboardInterrupt:
            return 130
        except RuntimeError as exc:
            LOGGER.error("%s", exc)
            return 1
        return 0

    raise RuntimeError(f"unsupported command: {args.command}")


if __name__ == "__main__":
    sys.exit(main())
