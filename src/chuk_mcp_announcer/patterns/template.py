"""
Fragment templates.

A fragment is plain text with references written as ^name^. Parsing splits
it into literal and reference tokens once, at registry build time, so renders
never re-scan text.
"""

from __future__ import annotations

from dataclasses import dataclass

from chuk_mcp_announcer.constants import (
    FIELD_DELIMITER,
    PATTERN_NAME_RE,
    REFERENCE_RE,
    RESERVED_NAMES,
)


@dataclass(frozen=True)
class Token:
    """One piece of a parsed fragment."""

    text: str
    is_reference: bool = False


@dataclass(frozen=True)
class FragmentTemplate:
    """
    A parsed fragment.

    `tokens` alternate literal text and references in source order.
    """

    source: str
    tokens: tuple[Token, ...]

    @property
    def references(self) -> tuple[str, ...]:
        """Referenced names in order of appearance (may repeat)."""
        return tuple(t.text for t in self.tokens if t.is_reference)

    @property
    def tag_references(self) -> frozenset[str]:
        """Reserved tag names this fragment needs directly."""
        return frozenset(name for name in self.references if name in RESERVED_NAMES)

    @property
    def pattern_references(self) -> tuple[str, ...]:
        """Pattern and tense-pattern names, deduplicated, in order."""
        seen: dict[str, None] = {}
        for name in self.references:
            if name not in RESERVED_NAMES:
                seen.setdefault(name)
        return tuple(seen)


def is_valid_name(name: str) -> bool:
    """Check a pattern name against [A-Za-z0-9_]+."""
    return bool(PATTERN_NAME_RE.match(name))


def delimiter_count(fragment: str) -> int:
    """Count ^ delimiters in a fragment."""
    return fragment.count(FIELD_DELIMITER)


def malformed_references(fragment: str) -> list[str]:
    """
    Find delimited spans that are not valid names.

    Assumes an even number of delimiters.
    """
    return [m.group(1) for m in REFERENCE_RE.finditer(fragment) if not is_valid_name(m.group(1))]


def parse_fragment(fragment: str) -> FragmentTemplate:
    """
    Split a fragment into literal and reference tokens.

    Delimiter structure must already be validated; an unpaired trailing
    delimiter is kept as literal text.
    """
    tokens: list[Token] = []
    cursor = 0
    for match in REFERENCE_RE.finditer(fragment):
        if match.start() > cursor:
            tokens.append(Token(fragment[cursor : match.start()]))
        tokens.append(Token(match.group(1), is_reference=True))
        cursor = match.end()
    if cursor < len(fragment):
        tokens.append(Token(fragment[cursor:]))
    return FragmentTemplate(source=fragment, tokens=tuple(tokens))
