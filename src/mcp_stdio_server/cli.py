"""Command line entry point for the stdio server."""

from __future__ import annotations

import argparse
import sys
from dataclasses import replace
from pathlib import Path

from mcp_stdio_server import __version__
from mcp_stdio_server.config import ConfigLoadError, load_config
from mcp_stdio_server.loader import register_components
from mcp_stdio_server.logger import LOG_LEVELS, StderrLogger
from mcp_stdio_server.server import Server, ServerConfig
from mcp_stdio_server.traffic import TrafficLogger

DEFAULT_NAME = "mcp-stdio-server"


def build_parser() -> argparse.ArgumentParser:
    """Create the argument parser."""
    parser = argparse.ArgumentParser(
        prog="mcp-stdio-server",
        description="MCP server speaking JSON-RPC over stdin/stdout",
    )
    parser.add_argument(
        "--config",
        "-c",
        type=Path,
        help="Path to server configuration YAML file",
    )
    parser.add_argument("--name", help="Server name (overrides the configuration file)")
    parser.add_argument(
        "--log-level",
        choices=sorted(LOG_LEVELS, key=LOG_LEVELS.__getitem__),
        help="Minimum level of diagnostics written to stderr",
    )
    parser.add_argument(
        "--traffic-log",
        help="Append every message read and written to this JSON Lines file",
    )
    parser.add_argument(
        "--component",
        action="append",
        default=[],
        metavar="MODULE",
        help="Module to load tools, resources and prompts from (repeatable)",
    )
    parser.add_argument(
        "--version",
        "-v",
        action="version",
        version=f"mcp-stdio-server {__version__}",
    )
    return parser


def resolve_config(args: argparse.Namespace) -> ServerConfig:
    """Load the configuration file, if any, and apply command line overrides.

    Raises:
        ConfigLoadError: If the configuration file is invalid.
    """
    if args.config is not None:
        config = load_config(args.config)
    else:
        config = ServerConfig(name=args.name or DEFAULT_NAME)

    overrides: dict[str, object] = {}
    if args.name:
        overrides["name"] = args.name
    if args.log_level:
        overrides["log_level"] = args.log_level
    if args.traffic_log:
        overrides["traffic_log"] = args.traffic_log
    if args.component:
        overrides["components"] = [*config.components, *args.component]
    return replace(config, **overrides)


def main(argv: list[str] | None = None) -> int:
    """Run the MCP server.

    Args:
        argv: Command line arguments (defaults to sys.argv).

    Returns:
        Exit code (0 for success, non-zero for errors).
    """
    args = build_parser().parse_args(argv)

    try:
        config = resolve_config(args)
    except ConfigLoadError as e:
        print(f"Error loading configuration: {e}", file=sys.stderr)
        return 1

    logger = StderrLogger(level=config.log_level)
    server = Server(config, logger=logger)
    register_components(server, config.components)

    traffic_log = TrafficLogger(Path(config.traffic_log)) if config.traffic_log else None
    if traffic_log is not None:
        logger.info(f"Logging stdio traffic to: {config.traffic_log}")

    try:
        server.start(traffic_log=traffic_log)
    except KeyboardInterrupt:
        logger.info("Interrupted, shutting down")
        return 130  # Standard exit code for SIGINT
    except Exception as e:
        logger.error(f"Error: {e}")
        return 1
    finally:
        if traffic_log is not None:
            traffic_log.close()

    return 0
