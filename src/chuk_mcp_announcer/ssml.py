"""
SSML helpers.

Wraps tag values in <say-as> hints and wraps whole announcements in a
<speak>/<voice> packet for a speech synthesizer.
"""

from __future__ import annotations

from xml.sax.saxutils import escape

from chuk_mcp_announcer.constants import (
    SAY_AS_NAME,
    SSML_SPEAK_CLOSE,
    SSML_SPEAK_OPEN,
    SSML_VOICE_CLOSE,
    SSML_VOICE_OPEN,
    TAG_SAY_AS,
)


def escape_text(text: str) -> str:
    """Escape plain text for inclusion in an SSML document."""
    return escape(text)


def say_as(value: str, interpret_as: str) -> str:
    """Wrap a value in a <say-as> element."""
    return f'<say-as interpret-as="{interpret_as}">{escape_text(value)}</say-as>'


def wrap_tag_value(tag: str, value: str) -> str:
    """Wrap a tag value with the interpretation that fits the tag."""
    return say_as(value, TAG_SAY_AS.get(tag, SAY_AS_NAME))


def build_packet(script: str, voice_model: str, language: str) -> str:
    """
    Wrap an announcement in a <speak> packet for a single voice.

    Args:
        script: Announcement text (may already contain <say-as> elements)
        voice_model: Synthesizer voice name
        language: xml:lang of the packet

    Returns:
        SSML document as a string
    """
    return (
        SSML_SPEAK_OPEN.format(language=language)
        + SSML_VOICE_OPEN.format(voice_model=voice_model)
        + script
        + SSML_VOICE_CLOSE
        + SSML_SPEAK_CLOSE
    )
