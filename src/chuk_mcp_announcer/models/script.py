"""
Script model - the grammar an operator writes.

A script contains:
- Patterns: named sets of alternative fragments, some usable as entry points
- Tense patterns: named past/present phrase pairs
- Conjunctions: phrases that join two upcoming-song announcements
- Tags to announce: the per-tag inclusion policy
"""

from __future__ import annotations

from typing import Any, Union

from pydantic import BaseModel, Field

from chuk_mcp_announcer.constants import DEFAULT_TAG_POLICY, SUPPORTED_TAGS, Inclusion


class Pattern(BaseModel):
    """
    A named set of alternative fragments.

    Entry-point patterns ("whole" in scripts) can start a render.
    The rest exist only to be referenced from other fragments.
    """

    name: str = Field(..., description="Pattern name ([A-Za-z0-9_]+)")
    is_entry_point: bool = Field(
        False, alias="whole", description="Whether the pattern can start a render"
    )
    fragments: tuple[str, ...] = Field(
        default_factory=tuple, description="Alternative fragment templates"
    )

    model_config = {"frozen": True, "populate_by_name": True}


class TensePattern(BaseModel):
    """
    A phrase that changes with the playback moment.

    Resolves to `past` after a song played and to `present` before it plays.
    """

    name: str = Field(..., description="Tense pattern name ([A-Za-z0-9_]+)")
    past: str = Field(..., description="Phrase used after playback")
    present: str = Field(..., description="Phrase used before playback")

    model_config = {"frozen": True}


# A registry node is one of exactly two kinds
PatternNode = Union[Pattern, TensePattern]


def _default_inclusion(tag: str) -> Any:
    return Field(DEFAULT_TAG_POLICY[tag], description=f"Inclusion of '{tag}'")


class TagPolicy(BaseModel):
    """Per-tag inclusion policy. One policy is active per render."""

    track_number: Inclusion = _default_inclusion("track_number")
    disc_number: Inclusion = _default_inclusion("disc_number")
    title: Inclusion = _default_inclusion("title")
    artist: Inclusion = _default_inclusion("artist")
    album_artist: Inclusion = _default_inclusion("album_artist")
    year: Inclusion = _default_inclusion("year")
    album: Inclusion = _default_inclusion("album")
    artwork: Inclusion = _default_inclusion("artwork")
    duration: Inclusion = _default_inclusion("duration")
    lyricist: Inclusion = _default_inclusion("lyricist")
    composer: Inclusion = _default_inclusion("composer")
    genre: Inclusion = _default_inclusion("genre")
    label: Inclusion = _default_inclusion("label")

    model_config = {"frozen": True}

    @classmethod
    def uniform(cls, inclusion: Inclusion) -> TagPolicy:
        """Create a policy that applies one inclusion to every tag."""
        return cls(**{tag: inclusion for tag in SUPPORTED_TAGS})

    def inclusion_for(self, tag: str) -> Inclusion | None:
        """
        Get the inclusion for a tag.

        Returns None for names the policy does not govern (id, path, parent).
        """
        if tag not in SUPPORTED_TAGS:
            return None
        inclusion: Inclusion = getattr(self, tag)
        return inclusion


class AnnouncementScript(BaseModel):
    """
    A complete announcement script, as deserialized from configuration.
    """

    patterns: list[Pattern] = Field(
        default_factory=list, alias="pattern", description="Patterns"
    )
    tense_patterns: list[TensePattern] = Field(
        default_factory=list, alias="tense_pattern", description="Tense patterns"
    )
    conjunctions: list[str] = Field(
        default_factory=list, description="Phrases joining two upcoming songs"
    )
    tags_to_announce: TagPolicy = Field(
        default_factory=TagPolicy, description="Per-tag inclusion policy"
    )

    model_config = {"populate_by_name": True}

    def to_dict(self) -> dict[str, object]:
        """Convert to the configuration mapping shape."""
        return {
            "pattern": [
                {"name": p.name, "whole": p.is_entry_point, "fragments": list(p.fragments)}
                for p in self.patterns
            ],
            "tense_pattern": [
                {"name": t.name, "past": t.past, "present": t.present}
                for t in self.tense_patterns
            ],
            "conjunctions": list(self.conjunctions),
            "tags_to_announce": {
                tag: self.tags_to_announce.inclusion_for(tag).value  # type: ignore[union-attr]
                for tag in SUPPORTED_TAGS
            },
        }


class ScriptMetadata(BaseModel):
    """Lightweight script metadata for listing/discovery."""

    name: str = Field(..., description="Script name")
    path: str | None = Field(None, description="Path to script file")
    pattern_count: int = Field(0, description="Number of patterns")
    tense_pattern_count: int = Field(0, description="Number of tense patterns")
    entry_points: list[str] = Field(default_factory=list, description="Entry-point patterns")

    @classmethod
    def from_script(
        cls, name: str, script: AnnouncementScript, path: str | None = None
    ) -> ScriptMetadata:
        """Create metadata from a full script."""
        return cls(
            name=name,
            path=path,
            pattern_count=len(script.patterns),
            tense_pattern_count=len(script.tense_patterns),
            entry_points=sorted(p.name for p in script.patterns if p.is_entry_point),
        )
