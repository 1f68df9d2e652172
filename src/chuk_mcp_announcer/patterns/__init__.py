"""
Pattern system - the announcement grammar.

Patterns are named sets of alternative fragments that reference each other,
tense patterns and song tags. The registry validates them once; the expander
renders them per announcement.
"""

from chuk_mcp_announcer.patterns.expander import PatternExpander, RenderContext
from chuk_mcp_announcer.patterns.policy import EligibilityCache, is_tag_eligible
from chuk_mcp_announcer.patterns.registry import PatternRegistry
from chuk_mcp_announcer.patterns.template import FragmentTemplate, parse_fragment
from chuk_mcp_announcer.patterns.validator import (
    ScriptValidator,
    ValidationIssue,
    ValidationResult,
    ValidationSeverity,
    validate_script,
)

__all__ = [
    "EligibilityCache",
    "FragmentTemplate",
    "PatternExpander",
    "PatternRegistry",
    "RenderContext",
    "ScriptValidator",
    "ValidationIssue",
    "ValidationResult",
    "ValidationSeverity",
    "is_tag_eligible",
    "parse_fragment",
    "validate_script",
]
