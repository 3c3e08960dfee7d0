from __future__ import annotations

import argparse
import logging
from typing import List, Optional

import uvicorn

from ..protocol.http.app import create_app
from ..protocol.text.loop import run_text_loop


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(prog="chessrules", description="Chess rules engine")
    sub = parser.add_subparsers(dest="command", required=True)

    serve = sub.add_parser("serve", help="Run the HTTP API")
    serve.add_argument("--host", type=str, default="127.0.0.1", help="Bind address")
    serve.add_argument("--port", type=int, default=8000, help="Bind port (default: 8000)")
    serve.add_argument(
        "--log-level",
        type=str.lower,
        default="info",
        choices=["debug", "info", "warning", "error"],
        help="Logging level (default: info)",
    )

    play = sub.add_parser("play", help="Play on the terminal")
    play.add_argument(
        "--log-level",
        type=str.lower,
        default="warning",
        choices=["debug", "info", "warning", "error"],
        help="Logging level (default: warning)",
    )
    return parser


def main(argv: Optional[List[str]] = None) -> None:
    args = build_parser().parse_args(argv)
    if args.command == "serve":
        uvicorn.run(
            create_app(log_level=args.log_level.upper()),
            host=args.host,
            port=args.port,
            log_level=args.log_level,
        )
        return
    logging.basicConfig(level=args.log_level.upper())
    run_text_loop()


if __name__ == "__main__":
    main()
