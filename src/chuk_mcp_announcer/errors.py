"""
Announcement errors.

Two disjoint families:
- ScriptValidationError: raised while building a registry from a script.
  Fatal to that script, never to the process.
- RenderError: raised while rendering one announcement. Callers recover by
  falling back to another entry point or skipping the announcement.
"""

from __future__ import annotations

from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from chuk_mcp_announcer.patterns.validator import ValidationResult


class AnnouncerError(Exception):
    """Base class for all announcement errors."""

    code = "ANNOUNCER_ERROR"


class ScriptValidationError(AnnouncerError):
    """A script failed validation."""

    code = "INVALID_SCRIPT"

    def __init__(
        self,
        message: str,
        *,
        name: str | None = None,
        fragment: str | None = None,
        reference: str | None = None,
        cycle: list[str] | None = None,
        depth: int | None = None,
        result: ValidationResult | None = None,
    ):
        super().__init__(message)
        self.name = name
        self.fragment = fragment
        self.reference = reference
        self.cycle = cycle
        self.depth = depth
        self.result = result


class InvalidName(ScriptValidationError):
    code = "INVALID_NAME"


class ReservedNameCollision(ScriptValidationError):
    code = "RESERVED_NAME_COLLISION"


class DuplicateName(ScriptValidationError):
    code = "DUPLICATE_NAME"


class EmptyPattern(ScriptValidationError):
    code = "EMPTY_PATTERN"


class MalformedReference(ScriptValidationError):
    code = "MALFORMED_REFERENCE"


class UnknownReference(ScriptValidationError):
    code = "UNKNOWN_REFERENCE"


class CyclicReference(ScriptValidationError):
    code = "CYCLIC_REFERENCE"


class TooDeep(ScriptValidationError):
    code = "TOO_DEEP"


class InvalidConjunction(ScriptValidationError):
    code = "INVALID_CONJUNCTION"


class RenderError(AnnouncerError):
    """An announcement could not be rendered."""

    code = "RENDER_ERROR"

    def __init__(self, message: str, *, name: str | None = None):
        super().__init__(message)
        self.name = name


class UnknownEntryPoint(RenderError):
    code = "UNKNOWN_ENTRY_POINT"


class NoAvailableFragment(RenderError):
    code = "NO_AVAILABLE_FRAGMENT"


class AnnouncerDisabled(RenderError):
    code = "ANNOUNCER_DISABLED"


VALIDATION_ERRORS: dict[str, type[ScriptValidationError]] = {
    cls.code: cls
    for cls in (
        InvalidName,
        ReservedNameCollision,
        DuplicateName,
        EmptyPattern,
        MalformedReference,
        UnknownReference,
        CyclicReference,
        TooDeep,
        InvalidConjunction,
    )
}
