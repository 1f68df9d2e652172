"""
Announcer - turns songs into spoken transitions.
"""

from chuk_mcp_announcer.announcer.announcer import Announcer, RestorableScript
from chuk_mcp_announcer.announcer.selector import AnnouncementSelector

__all__ = [
    "AnnouncementSelector",
    "Announcer",
    "RestorableScript",
]
