"""
MCP tool implementations.

Tools are organized by domain:
- announcements - Script discovery, validation and rendering
"""

from chuk_mcp_announcer.tools.announcements import register_announcement_tools

__all__ = [
    "register_announcement_tools",
]
