#!/usr/bin/env python3
"""
Async Announcer MCP Server using chuk-mcp-server

This server provides MCP tools for building song announcements from
announcement scripts: named, reusable text patterns bound to song tags.

The server provides tools for:
- Listing library and project scripts
- Validating scripts (names, references, cycles)
- Rendering a single announcement for a song
- Building the transition announcement spoken between songs
"""

import logging
import os
from pathlib import Path

from chuk_mcp_server import ChukMCPServer

from chuk_mcp_announcer.models.settings import ENV_SCRIPTS_DIR, AnnouncerSettings
from chuk_mcp_announcer.scripts import ScriptLoader
from chuk_mcp_announcer.tools import register_announcement_tools

logging.basicConfig(level=logging.INFO)
logger = logging.getLogger(__name__)

# Create the MCP server instance
mcp = ChukMCPServer("chuk-mcp-announcer")

# Paths - use standard project structure
BASE_PATH = Path.cwd()
SCRIPTS_DIR = Path(os.getenv(ENV_SCRIPTS_DIR) or BASE_PATH / "scripts")
LIBRARY_PATH = Path(__file__).parent / "scripts" / "library"

# Create managers
script_loader = ScriptLoader(
    library_path=LIBRARY_PATH,
    project_path=SCRIPTS_DIR,
)
settings = AnnouncerSettings.from_env()

# Register all tools
announcement_tools = register_announcement_tools(mcp, script_loader, settings)

# Export tool functions for direct access
rj_list_scripts = announcement_tools["rj_list_scripts"]
rj_validate_script = announcement_tools["rj_validate_script"]
rj_list_entry_points = announcement_tools["rj_list_entry_points"]
rj_render_announcement = announcement_tools["rj_render_announcement"]
rj_announce_transition = announcement_tools["rj_announce_transition"]

logger.info("CHUK Announcer MCP Server initialized")
logger.info(f"  Library path: {LIBRARY_PATH}")
logger.info(f"  Scripts dir: {SCRIPTS_DIR}")
logger.info(
    f"  Optional probability: {settings.optional_probability}, depth limit: {settings.depth_limit}"
)
