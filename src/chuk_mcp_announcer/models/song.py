"""
Song metadata and its read-only binding for renders.

SongMetadata is the record a metadata store hands over. MetadataBinding is
the view the expansion engine reads: reserved name -> display string, with
absent and empty values dropped.
"""

from __future__ import annotations

from collections.abc import Iterator, Mapping
from types import MappingProxyType
from typing import Any

from pydantic import BaseModel, Field

from chuk_mcp_announcer.constants import NON_TAGGABLE_FIELDS, RESERVED_NAMES, SUPPORTED_TAGS
from chuk_mcp_announcer.ssml import escape_text, wrap_tag_value


class SongMetadata(BaseModel):
    """Tag values of one song. Every tag is optional."""

    id: str | None = Field(None, description="Song identifier")
    path: str | None = Field(None, description="Path of the audio file")
    parent: str | None = Field(None, description="Containing directory")

    track_number: int | None = Field(None, description="Track number")
    disc_number: int | None = Field(None, description="Disc number")
    title: str | None = Field(None, description="Song title")
    artist: str | None = Field(None, description="Performing artist(s)")
    album_artist: str | None = Field(None, description="Album artist")
    year: int | None = Field(None, description="Release year")
    album: str | None = Field(None, description="Album title")
    artwork: str | None = Field(None, description="Artwork reference")
    duration: int | None = Field(None, description="Duration in seconds")
    lyricist: str | None = Field(None, description="Lyricist")
    composer: str | None = Field(None, description="Composer")
    genre: str | None = Field(None, description="Genre")
    label: str | None = Field(None, description="Record label")

    model_config = {"frozen": True}

    def binding(self, ssml: bool = False) -> MetadataBinding:
        """
        Build the render-time view of this song.

        Args:
            ssml: Wrap tag values in <say-as> hints

        Returns:
            MetadataBinding for one render
        """
        values: dict[str, str] = {}
        for name in RESERVED_NAMES:
            raw = getattr(self, name)
            if raw is None:
                continue
            text = str(raw).strip()
            if not text:
                continue
            if ssml and name in SUPPORTED_TAGS:
                text = wrap_tag_value(name, text)
            elif ssml:
                text = escape_text(text)
            values[name] = text
        return MetadataBinding(values, ssml=ssml)


class MetadataBinding(Mapping[str, str]):
    """
    Read-only view of one song's tag values keyed by reserved name.

    Only present, non-empty values are stored, so `name in binding`
    is the presence test the tag policy relies on.

    An SSML binding holds values already wrapped in <say-as> markup; the
    expander escapes the literal fragment text it renders around them.
    """

    def __init__(self, values: Mapping[str, str] | None = None, ssml: bool = False):
        clean = {
            name: value
            for name, value in (values or {}).items()
            if name in RESERVED_NAMES and value is not None and str(value).strip()
        }
        self._values: Mapping[str, str] = MappingProxyType(
            {name: str(value) for name, value in clean.items()}
        )
        self.ssml = ssml

    @classmethod
    def from_mapping(cls, values: Mapping[str, Any]) -> MetadataBinding:
        """Bind an arbitrary mapping, stringifying values and dropping missing ones."""
        return cls({name: str(value) for name, value in values.items() if value is not None})

    def __getitem__(self, name: str) -> str:
        return self._values[name]

    def __iter__(self) -> Iterator[str]:
        return iter(self._values)

    def __len__(self) -> int:
        return len(self._values)

    def __repr__(self) -> str:
        return f"MetadataBinding({dict(self._values)!r})"

    @property
    def identity(self) -> dict[str, str]:
        """Non-taggable fields, for log lines."""
        return {name: self._values[name] for name in NON_TAGGABLE_FIELDS if name in self._values}
