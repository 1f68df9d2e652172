#!/usr/bin/env python3
"""
Entry point for the CHUK Announcer MCP Server.

This module provides the main entry point for the MCP server,
supporting multiple transport modes (stdio, http). Announcer options
given on the command line are handed to the server through the
ANNOUNCER_* environment variables it reads at startup.
"""

import argparse
import asyncio
import logging
import os
from collections.abc import MutableMapping

from pydantic import ValidationError

from chuk_mcp_announcer.models.settings import (
    ENV_DEPTH_LIMIT,
    ENV_OPTIONAL_PROBABILITY,
    ENV_SCRIPTS_DIR,
    AnnouncerSettings,
)

logging.basicConfig(level=logging.INFO)
logger = logging.getLogger(__name__)


def build_parser() -> argparse.ArgumentParser:
    """Create the command-line parser."""
    parser = argparse.ArgumentParser(description="CHUK Announcer MCP Server")
    parser.add_argument(
        "--transport",
        choices=["stdio", "http"],
        default="stdio",
        help="Transport mode (default: stdio)",
    )
    parser.add_argument(
        "--port",
        type=int,
        default=8000,
        help="HTTP port (only for http transport)",
    )
    parser.add_argument(
        "--scripts-dir",
        help="Directory of project scripts (default: ./scripts)",
    )
    parser.add_argument(
        "--optional-probability",
        type=float,
        help="Chance that an Optional tag is announced (0..1)",
    )
    parser.add_argument(
        "--depth-limit",
        type=int,
        help="Longest allowed chain of pattern references in a script",
    )
    parser.add_argument(
        "--debug",
        action="store_true",
        help="Enable debug logging",
    )
    return parser


def apply_overrides(args: argparse.Namespace, environ: MutableMapping[str, str]) -> None:
    """Copy announcer options that were given into the environment."""
    for value, variable in (
        (args.scripts_dir, ENV_SCRIPTS_DIR),
        (args.optional_probability, ENV_OPTIONAL_PROBABILITY),
        (args.depth_limit, ENV_DEPTH_LIMIT),
    ):
        if value is not None:
            environ[variable] = str(value)


def main() -> None:
    """Main entry point with transport detection."""
    parser = build_parser()
    args = parser.parse_args()

    if args.debug:
        logging.getLogger().setLevel(logging.DEBUG)

    apply_overrides(args, os.environ)
    try:
        AnnouncerSettings.from_env()
    except ValidationError as e:
        parser.error(f"invalid announcer settings: {e}")

    # Import after argument parsing so the server sees the overrides
    from chuk_mcp_announcer.async_server import mcp

    if args.transport == "stdio":
        logger.info("Starting CHUK Announcer MCP Server (stdio)")
        asyncio.run(mcp.run_stdio())
    else:
        logger.info(f"Starting CHUK Announcer MCP Server (http:{args.port})")
        asyncio.run(mcp.run_http(port=args.port))


if __name__ == "__main__":
    main()
