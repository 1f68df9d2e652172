"""
Pydantic models for the announcement system.

This module provides:
- AnnouncementScript: Complete script (patterns, tense patterns, conjunctions, policy)
- Pattern / TensePattern: The two kinds of registry node
- TagPolicy: Per-tag inclusion policy
- SongMetadata / MetadataBinding: Song tags and their render-time view
- AnnouncerSettings / VoiceProfile: Operator settings
"""

from chuk_mcp_announcer.models.script import (
    AnnouncementScript,
    Pattern,
    PatternNode,
    ScriptMetadata,
    TagPolicy,
    TensePattern,
)
from chuk_mcp_announcer.models.settings import AnnouncerSettings, VoiceProfile
from chuk_mcp_announcer.models.song import MetadataBinding, SongMetadata

__all__ = [
    "AnnouncementScript",
    "AnnouncerSettings",
    "MetadataBinding",
    "Pattern",
    "PatternNode",
    "ScriptMetadata",
    "SongMetadata",
    "TagPolicy",
    "TensePattern",
    "VoiceProfile",
]
