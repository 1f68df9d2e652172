"""
Announcer settings.

Operator-facing knobs that are not part of a script: how often Optional
tags appear, how deep scripts may nest and whether announcements are
wrapped for a speech synthesizer.
"""

from __future__ import annotations

import logging
import os
from collections.abc import Mapping

from pydantic import BaseModel, Field

from chuk_mcp_announcer.constants import DEFAULT_DEPTH_LIMIT, DEFAULT_OPTIONAL_PROBABILITY

logger = logging.getLogger(__name__)

# Environment variables read by AnnouncerSettings.from_env
ENV_OPTIONAL_PROBABILITY = "ANNOUNCER_OPTIONAL_PROBABILITY"
ENV_DEPTH_LIMIT = "ANNOUNCER_DEPTH_LIMIT"
ENV_SCRIPTS_DIR = "ANNOUNCER_SCRIPTS_DIR"


class VoiceProfile(BaseModel):
    """The profile of an on-air voice."""

    name: str = Field(..., description="Host name")
    voice_model: str = Field(..., description="Synthesizer voice name")
    language: str = Field(..., description="xml:lang of the voice")

    model_config = {"frozen": True}

    def is_complete(self) -> bool:
        """Return True if every field is filled in."""
        return bool(self.name and self.voice_model and self.language)


class AnnouncerSettings(BaseModel):
    """Settings for an Announcer."""

    optional_probability: float = Field(
        DEFAULT_OPTIONAL_PROBABILITY,
        ge=0.0,
        le=1.0,
        description="Chance that an Optional tag is included in a render",
    )
    depth_limit: int = Field(
        DEFAULT_DEPTH_LIMIT, ge=0, description="Longest allowed chain of pattern references"
    )
    enable_ssml: bool = Field(False, description="Wrap announcements as SSML")
    voices: list[VoiceProfile] = Field(default_factory=list, description="On-air voices")

    model_config = {"frozen": True}

    def voices_valid(self) -> bool:
        """SSML needs at least one voice and every voice fully specified."""
        return bool(self.voices) and all(v.is_complete() for v in self.voices)

    @property
    def current_voice(self) -> VoiceProfile | None:
        """Voice used for SSML packets, or None when SSML is off."""
        if not self.enable_ssml or not self.voices_valid():
            return None
        return self.voices[0]

    @classmethod
    def from_env(cls, environ: Mapping[str, str] | None = None) -> AnnouncerSettings:
        """
        Build settings from ANNOUNCER_* environment variables.

        Unset variables keep their defaults.

        Args:
            environ: Variables to read (defaults to os.environ)

        Raises:
            pydantic.ValidationError: A variable holds an invalid value
        """
        environ = os.environ if environ is None else environ
        values: dict[str, str] = {}
        for variable, field_name in (
            (ENV_OPTIONAL_PROBABILITY, "optional_probability"),
            (ENV_DEPTH_LIMIT, "depth_limit"),
        ):
            if environ.get(variable):
                logger.debug("Loaded %s from environment", variable)
                values[field_name] = environ[variable]
        return cls.model_validate(values)
