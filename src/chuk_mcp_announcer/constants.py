"""
Constants and enums for the announcement system.

No magic strings - use enums and Literal types for constrained values.
"""

import re
from enum import Enum
from typing import Literal


class Inclusion(str, Enum):
    """
    How a tag takes part in announcements.

    This is the per-tag knob a station operator turns.
    """

    REQUIRED = "Required"  # Announce whenever the song has it
    OPTIONAL = "Optional"  # Coin flip per render
    EXCLUDE = "Exclude"  # Never announce


class TenseContext(str, Enum):
    """Where the announcement sits relative to playback."""

    BEFORE = "before"  # Present/future phrasing
    AFTER = "after"  # Past phrasing


# Delimiter that surrounds a reference inside a fragment: ^name^
FIELD_DELIMITER = "^"

PATTERN_NAME_RE = re.compile(r"^[A-Za-z0-9_]+$")
REFERENCE_RE = re.compile(r"\^([^^]*)\^")

# Fields that identify a song but are never policy-governed
NON_TAGGABLE_FIELDS: tuple[str, ...] = ("id", "path", "parent")

# Tags that a TagPolicy governs
SUPPORTED_TAGS: tuple[str, ...] = (
    "track_number",
    "disc_number",
    "title",
    "artist",
    "album_artist",
    "year",
    "album",
    "artwork",
    "duration",
    "lyricist",
    "composer",
    "genre",
    "label",
)

RESERVED_NAMES: frozenset[str] = frozenset(NON_TAGGABLE_FIELDS + SUPPORTED_TAGS)

TagName = Literal[
    "track_number",
    "disc_number",
    "title",
    "artist",
    "album_artist",
    "year",
    "album",
    "artwork",
    "duration",
    "lyricist",
    "composer",
    "genre",
    "label",
]

# How SSML should speak each tag value
SAY_AS_NAME = "name"
SAY_AS_DATE = "date"
SAY_AS_CARDINAL = "cardinal"

TAG_SAY_AS: dict[str, str] = {
    "track_number": SAY_AS_CARDINAL,
    "disc_number": SAY_AS_CARDINAL,
    "duration": SAY_AS_CARDINAL,
    "year": SAY_AS_DATE,
}

SSML_SPEAK_OPEN = (
    "<speak version='1.0' xmlns='http://www.w3.org/2001/10/synthesis' "
    "xmlns:mstts='http://www.w3.org/2001/mstts' "
    "xmlns:emo='http://www.w3.org/2009/10/emotionml' xml:lang='{language}'>"
)
SSML_VOICE_OPEN = "<voice name='{voice_model}'>"
SSML_VOICE_CLOSE = "</voice>"
SSML_SPEAK_CLOSE = "</speak>"

# Chance that an Optional tag is included in a render
DEFAULT_OPTIONAL_PROBABILITY = 0.5

# Longest allowed chain of pattern references below any pattern
DEFAULT_DEPTH_LIMIT = 5

# Joins the previous/next/next-next announcements
NATURAL_PAUSE = ". "

# Default per-tag policy used when a script does not provide one
DEFAULT_TAG_POLICY: dict[str, Inclusion] = {
    "track_number": Inclusion.EXCLUDE,
    "disc_number": Inclusion.EXCLUDE,
    "title": Inclusion.REQUIRED,
    "artist": Inclusion.REQUIRED,
    "album_artist": Inclusion.OPTIONAL,
    "year": Inclusion.OPTIONAL,
    "album": Inclusion.REQUIRED,
    "artwork": Inclusion.EXCLUDE,
    "duration": Inclusion.EXCLUDE,
    "lyricist": Inclusion.REQUIRED,
    "composer": Inclusion.REQUIRED,
    "genre": Inclusion.OPTIONAL,
    "label": Inclusion.EXCLUDE,
}


class ErrorMessages:
    """Standardized error messages."""

    INVALID_NAME = "Invalid pattern name: '{name}'. Names may contain letters, digits and '_'."
    RESERVED_NAME = "Pattern name '{name}' collides with a reserved tag name."
    DUPLICATE_NAME = "Duplicate pattern name: '{name}'."
    EMPTY_PATTERN = "Pattern '{name}' has no fragments."
    ODD_DELIMITERS = "Fragment of '{name}' has an odd number ({count}) of '^' delimiters: {fragment!r}"
    MALFORMED_REFERENCE = "Fragment of '{name}' has a malformed reference '^{reference}^': {fragment!r}"
    UNKNOWN_REFERENCE = "Pattern '{name}' references unknown name '{reference}': {fragment!r}"
    CYCLIC_REFERENCE = "Cyclic reference: {cycle}"
    TOO_DEEP = "Pattern '{name}' nests {depth} references deep (limit {limit})."
    INVALID_CONJUNCTION = "Delimiter '^' is not allowed in conjunctions: {conjunction!r}"
    UNKNOWN_ENTRY_POINT = "'{name}' is not a known entry-point pattern."
    NO_AVAILABLE_FRAGMENT = "Pattern '{name}' has no fragment whose tags are all eligible."
    ANNOUNCER_DISABLED = "Announcer has no script loaded."
    SCRIPT_NOT_FOUND = "Script '{name}' not found."


class SuccessMessages:
    """Standardized success messages."""

    SCRIPT_VALID = "Script '{name}' is valid ({patterns} patterns, {tense_patterns} tense patterns)."
    SCRIPT_LOADED = "Loaded script '{name}'."
