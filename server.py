"""
Flow Runner server entry point.

Boots the FastAPI app that bridges the browser UI to the najie-flow CLI.

Usage:
    flow-runner --data-dir /path/to/data --port 5176
"""

from __future__ import annotations

import argparse
import logging
import sys
from collections.abc import Sequence

import uvicorn

from flowrunner.api import create_app
from flowrunner.config import load_settings, set_settings
from utils.env import get_env

logger = logging.getLogger("flowrunner.server")


def configure_logging(level_name: str | None = None) -> None:
    level_name = (level_name or get_env("LOG_LEVEL", "INFO") or "INFO").upper()
    logging.basicConfig(
        level=getattr(logging, level_name, logging.INFO),
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
    )


def build_arg_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(prog="flow-runner", description="Serve the najie-flow CLI over HTTP.")
    parser.add_argument("--data-dir", help="Flow data directory passed through to the CLI.")
    parser.add_argument("--host", help="Interface to bind (default 127.0.0.1).")
    parser.add_argument("--port", type=int, help="Port to listen on (default 5176).")
    parser.add_argument("--log-level", help="Logging level (default from LOG_LEVEL or INFO).")
    return parser


def main(argv: Sequence[str] | None = None) -> int:
    argv = list(sys.argv[1:] if argv is None else argv)
    args = build_arg_parser().parse_args(argv)
    configure_logging(args.log_level)

    settings = load_settings(argv, host=args.host, port=args.port)
    set_settings(settings)
    app = create_app(settings)

    logger.info("Flow Runner listening on http://%s:%s", settings.host, settings.port)
    log_level = logging.getLevelName(logging.getLogger().level).lower()
    uvicorn.run(app, host=settings.host, port=settings.port, log_level=log_level)
    return 0


if __name__ == "__main__":
    sys.exit(main())
