import argparse
import logging
from typing import List, Optional

import flet as ft

from connectfour.config import (
    DEFAULT_COLS,
    DEFAULT_HOST,
    DEFAULT_PORT,
    DEFAULT_ROWS,
    ClientSettings,
    ServerSettings,
)
from connectfour.errors import SessionConnectionError
from connectfour.game.board import Status
from connectfour.network.client import ConnectFourClient
from connectfour.network.server import GameServer
from connectfour.ui.app import ConnectFourApp

logger = logging.getLogger(__name__)

LOG_FORMAT = "%(asctime)s %(levelname)s: %(message)s"


def run_ui(args: argparse.Namespace) -> int:
    try:
        settings = ClientSettings(host=args.host, port=args.port, connect_timeout=args.timeout)
    except ValueError as exc:
        logger.error("Invalid startup parameters: %s", exc)
        return 1

    try:
        client = ConnectFourClient.connect(settings)
    except SessionConnectionError as exc:
        logger.error("%s", exc)
        return 1

    app = ConnectFourApp(client)
    try:
        ft.app(target=app.main)
    finally:
        client.shutdown()
    return 0


def run_serve(args: argparse.Namespace) -> int:
    try:
        settings = ServerSettings(
            host=args.host,
            port=args.port,
            cols=args.cols,
            rows=args.rows,
            snapshots=args.snapshots,
        )
    except ValueError as exc:
        logger.error("Invalid server settings: %s", exc)
        return 1

    server = GameServer(settings)
    try:
        server.bind()
    except OSError as exc:
        logger.error("Cannot listen on %s:%s: %s", settings.host, settings.port, exc)
        return 1

    try:
        outcome = server.serve()
    except KeyboardInterrupt:
        logger.info("Server stopped")
        server.close()
        return 0

    if outcome is Status.I_WON:
        logger.info("Game finished: player 1 won")
    elif outcome is Status.I_LOST:
        logger.info("Game finished: player 2 won")
    elif outcome is Status.TIED:
        logger.info("Game finished: tie")
    else:
        logger.info("Game finished with an error")
    return 0


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(description="Networked Connect Four")
    parser.add_argument(
        "--log-level",
        default="INFO",
        choices=["DEBUG", "INFO", "WARNING", "ERROR"],
        help="Logging verbosity (default: INFO)",
    )
    subparsers = parser.add_subparsers(dest="command", help="Available commands")

    ui_parser = subparsers.add_parser("ui", help="Join a game with the desktop client")
    ui_parser.add_argument("host", help="Server host name or address")
    ui_parser.add_argument("port", type=int, help="Server port")
    ui_parser.add_argument(
        "--timeout",
        type=float,
        default=None,
        help="Seconds to wait for the connection (default: no limit)",
    )
    ui_parser.set_defaults(func=run_ui)

    serve_parser = subparsers.add_parser("serve", help="Host one game for two clients")
    serve_parser.add_argument("--host", default=DEFAULT_HOST, help=f"Address to bind (default: {DEFAULT_HOST})")
    serve_parser.add_argument("--port", type=int, default=DEFAULT_PORT, help=f"Port to bind (default: {DEFAULT_PORT})")
    serve_parser.add_argument("--cols", type=int, default=DEFAULT_COLS, help=f"Board columns (default: {DEFAULT_COLS})")
    serve_parser.add_argument("--rows", type=int, default=DEFAULT_ROWS, help=f"Board rows (default: {DEFAULT_ROWS})")
    serve_parser.add_argument(
        "--snapshots",
        action="store_true",
        help="Broadcast full board snapshots instead of single-cell updates",
    )
    serve_parser.set_defaults(func=run_serve)
    return parser


def main(argv: Optional[List[str]] = None) -> int:
    parser = build_parser()
    args = parser.parse_args(argv)
    logging.basicConfig(level=getattr(logging, args.log_level), format=LOG_FORMAT)

    if hasattr(args, "func"):
        return args.func(args)
    parser.print_help()
    return 1
