"""
Script Validator - validates patterns and tense patterns before a registry is built.

Validates, in order (a stage runs only if the earlier ones found no errors):
- Names match [A-Za-z0-9_]+
- Names do not collide with reserved tag names
- Names are unique across patterns and tense patterns
- Patterns have at least one fragment
- Delimiters pair up and every reference resolves
- The reference graph has no cycles (self-references included)
- No reference chain is deeper than the depth limit
- Conjunctions contain no delimiter
"""

from __future__ import annotations

from collections.abc import Iterable, Iterator, Mapping, Sequence
from dataclasses import dataclass, field
from enum import Enum
from typing import Any

from chuk_mcp_announcer.constants import (
    DEFAULT_DEPTH_LIMIT,
    FIELD_DELIMITER,
    RESERVED_NAMES,
    ErrorMessages,
)
from chuk_mcp_announcer.errors import (
    VALIDATION_ERRORS,
    CyclicReference,
    DuplicateName,
    EmptyPattern,
    InvalidConjunction,
    InvalidName,
    MalformedReference,
    ReservedNameCollision,
    ScriptValidationError,
    TooDeep,
    UnknownReference,
)
from chuk_mcp_announcer.models.script import Pattern, TensePattern
from chuk_mcp_announcer.patterns.template import (
    delimiter_count,
    is_valid_name,
    malformed_references,
    parse_fragment,
)


class ValidationSeverity(str, Enum):
    """Severity level for validation issues."""

    ERROR = "error"  # Prevents building a registry
    WARNING = "warning"  # Registry builds but may not announce
    INFO = "info"  # Informational only


@dataclass
class ValidationIssue:
    """A single validation issue."""

    severity: ValidationSeverity
    code: str
    message: str
    location: str | None = None
    context: dict[str, Any] = field(default_factory=dict)

    def __str__(self) -> str:
        prefix = f"[{self.severity.value.upper()}]"
        location = f" at {self.location}" if self.location else ""
        return f"{prefix} {self.code}: {self.message}{location}"


class ValidationResult:
    """Result of validating a script."""

    def __init__(self) -> None:
        self.issues: list[ValidationIssue] = []

    def add_error(
        self, code: str, message: str, location: str | None = None, **context: Any
    ) -> None:
        """Add an error issue."""
        self.issues.append(
            ValidationIssue(ValidationSeverity.ERROR, code, message, location, context)
        )

    def add_warning(
        self, code: str, message: str, location: str | None = None, **context: Any
    ) -> None:
        """Add a warning issue."""
        self.issues.append(
            ValidationIssue(ValidationSeverity.WARNING, code, message, location, context)
        )

    def add_info(
        self, code: str, message: str, location: str | None = None, **context: Any
    ) -> None:
        """Add an info issue."""
        self.issues.append(
            ValidationIssue(ValidationSeverity.INFO, code, message, location, context)
        )

    @property
    def is_valid(self) -> bool:
        """Return True if no errors (warnings/info are OK)."""
        return not any(i.severity == ValidationSeverity.ERROR for i in self.issues)

    @property
    def errors(self) -> list[ValidationIssue]:
        """Get all error issues."""
        return [i for i in self.issues if i.severity == ValidationSeverity.ERROR]

    @property
    def warnings(self) -> list[ValidationIssue]:
        """Get all warning issues."""
        return [i for i in self.issues if i.severity == ValidationSeverity.WARNING]

    def raise_for_errors(self) -> None:
        """Raise the typed error for the first error issue, if any."""
        if self.is_valid:
            return
        first = self.errors[0]
        error_cls = VALIDATION_ERRORS.get(first.code, ScriptValidationError)
        raise error_cls(
            first.message,
            name=first.context.get("name"),
            fragment=first.context.get("fragment"),
            reference=first.context.get("reference"),
            cycle=first.context.get("cycle"),
            depth=first.context.get("depth"),
            result=self,
        )

    def __bool__(self) -> bool:
        """Boolean conversion returns is_valid."""
        return self.is_valid

    def __str__(self) -> str:
        if not self.issues:
            return "Validation passed: no issues found"
        return "\n".join(str(issue) for issue in self.issues)


def build_dependency_graph(patterns: Iterable[Pattern]) -> dict[str, tuple[str, ...]]:
    """
    Map each pattern to the pattern/tense-pattern names its fragments reference.

    Reserved tag references are not edges.
    """
    graph: dict[str, tuple[str, ...]] = {}
    for pattern in patterns:
        seen: dict[str, None] = {}
        for fragment in pattern.fragments:
            for name in parse_fragment(fragment).pattern_references:
                seen.setdefault(name)
        graph[pattern.name] = tuple(seen)
    return graph


def find_cycles(graph: Mapping[str, tuple[str, ...]]) -> list[list[str]]:
    """
    Find reference cycles with a depth-first walk.

    The walk keeps an explicit stack instead of recursing, so chain length
    is bounded by memory rather than the interpreter's recursion limit. All
    walk state lives in this call, so concurrent validations never share it.

    Returns:
        Cycle paths, each starting and ending with the same name
    """
    cycles: list[list[str]] = []
    finished: set[str] = set()

    for root in sorted(graph):
        if root in finished:
            continue
        path = [root]
        on_path = {root}
        pending: list[Iterator[str]] = [iter(graph.get(root, ()))]
        while pending:
            child = next(pending[-1], None)
            if child is None:
                pending.pop()
                node = path.pop()
                on_path.discard(node)
                finished.add(node)
            elif child in on_path:
                cycles.append(path[path.index(child) :] + [child])
            elif child not in finished:
                path.append(child)
                on_path.add(child)
                pending.append(iter(graph.get(child, ())))
    return cycles


def reference_depths(graph: Mapping[str, tuple[str, ...]]) -> dict[str, int]:
    """
    Length of the longest reference chain below each node.

    A pattern with no pattern references has depth 0. The graph must be
    acyclic.
    """
    depths: dict[str, int] = {}
    for root in sorted(graph):
        stack: list[tuple[str, bool]] = [(root, False)]
        while stack:
            node, children_done = stack.pop()
            if node in depths:
                continue
            children = graph.get(node, ())
            if children_done:
                depths[node] = max((depths[child] + 1 for child in children), default=0)
            else:
                stack.append((node, True))
                stack.extend((child, False) for child in children if child not in depths)
    return depths


class ScriptValidator:
    """Validates patterns, tense patterns and conjunctions."""

    def __init__(self, depth_limit: int = DEFAULT_DEPTH_LIMIT):
        """
        Initialize the validator.

        Args:
            depth_limit: Longest allowed chain of pattern references
        """
        self.depth_limit = depth_limit

    def validate(
        self,
        patterns: Sequence[Pattern],
        tense_patterns: Sequence[TensePattern] = (),
        conjunctions: Sequence[str] = (),
    ) -> ValidationResult:
        """
        Validate a script's building blocks.

        Args:
            patterns: Patterns to validate
            tense_patterns: Tense patterns to validate
            conjunctions: Conjunction phrases to validate

        Returns:
            ValidationResult with any issues found
        """
        result = ValidationResult()

        stages = (
            lambda: self._validate_name_syntax(patterns, tense_patterns, result),
            lambda: self._validate_reserved_names(patterns, tense_patterns, result),
            lambda: self._validate_unique_names(patterns, tense_patterns, result),
            lambda: self._validate_fragments_present(patterns, result),
            lambda: self._validate_references(patterns, tense_patterns, result),
            lambda: self._validate_acyclic(patterns, result),
            lambda: self._validate_depth(patterns, result),
            lambda: self._validate_conjunctions(conjunctions, result),
        )
        for stage in stages:
            stage()
            if not result.is_valid:
                return result

        self._validate_usage(patterns, result)
        return result

    def _all_names(
        self, patterns: Sequence[Pattern], tense_patterns: Sequence[TensePattern]
    ) -> list[tuple[str, str]]:
        return [(p.name, "pattern") for p in patterns] + [
            (t.name, "tense_pattern") for t in tense_patterns
        ]

    def _validate_name_syntax(
        self,
        patterns: Sequence[Pattern],
        tense_patterns: Sequence[TensePattern],
        result: ValidationResult,
    ) -> None:
        """Check every name against the allowed alphabet."""
        for name, kind in self._all_names(patterns, tense_patterns):
            if not is_valid_name(name):
                result.add_error(
                    InvalidName.code,
                    ErrorMessages.INVALID_NAME.format(name=name),
                    f"{kind}/{name}",
                    name=name,
                )

    def _validate_reserved_names(
        self,
        patterns: Sequence[Pattern],
        tense_patterns: Sequence[TensePattern],
        result: ValidationResult,
    ) -> None:
        """Reserved tag names cannot be shadowed."""
        for name, kind in self._all_names(patterns, tense_patterns):
            if name in RESERVED_NAMES:
                result.add_error(
                    ReservedNameCollision.code,
                    ErrorMessages.RESERVED_NAME.format(name=name),
                    f"{kind}/{name}",
                    name=name,
                )

    def _validate_unique_names(
        self,
        patterns: Sequence[Pattern],
        tense_patterns: Sequence[TensePattern],
        result: ValidationResult,
    ) -> None:
        """Patterns and tense patterns share one namespace."""
        seen: set[str] = set()
        for name, kind in self._all_names(patterns, tense_patterns):
            if name in seen:
                result.add_error(
                    DuplicateName.code,
                    ErrorMessages.DUPLICATE_NAME.format(name=name),
                    f"{kind}/{name}",
                    name=name,
                )
            seen.add(name)

    def _validate_fragments_present(
        self, patterns: Sequence[Pattern], result: ValidationResult
    ) -> None:
        for pattern in patterns:
            if not pattern.fragments:
                result.add_error(
                    EmptyPattern.code,
                    ErrorMessages.EMPTY_PATTERN.format(name=pattern.name),
                    f"pattern/{pattern.name}",
                    name=pattern.name,
                )

    def _validate_references(
        self,
        patterns: Sequence[Pattern],
        tense_patterns: Sequence[TensePattern],
        result: ValidationResult,
    ) -> None:
        """Delimiters must pair up and every reference must resolve."""
        known = {p.name for p in patterns} | {t.name for t in tense_patterns} | RESERVED_NAMES

        for pattern in patterns:
            for index, fragment in enumerate(pattern.fragments):
                location = f"pattern/{pattern.name}/fragments/{index}"

                count = delimiter_count(fragment)
                if count % 2:
                    result.add_error(
                        MalformedReference.code,
                        ErrorMessages.ODD_DELIMITERS.format(
                            name=pattern.name, count=count, fragment=fragment
                        ),
                        location,
                        name=pattern.name,
                        fragment=fragment,
                    )
                    continue

                bad = malformed_references(fragment)
                for reference in bad:
                    result.add_error(
                        MalformedReference.code,
                        ErrorMessages.MALFORMED_REFERENCE.format(
                            name=pattern.name, reference=reference, fragment=fragment
                        ),
                        location,
                        name=pattern.name,
                        fragment=fragment,
                        reference=reference,
                    )
                if bad:
                    continue

                for reference in parse_fragment(fragment).references:
                    if reference not in known:
                        result.add_error(
                            UnknownReference.code,
                            ErrorMessages.UNKNOWN_REFERENCE.format(
                                name=pattern.name, reference=reference, fragment=fragment
                            ),
                            location,
                            name=pattern.name,
                            fragment=fragment,
                            reference=reference,
                        )

    def _validate_acyclic(self, patterns: Sequence[Pattern], result: ValidationResult) -> None:
        for cycle in find_cycles(build_dependency_graph(patterns)):
            result.add_error(
                CyclicReference.code,
                ErrorMessages.CYCLIC_REFERENCE.format(cycle=" -> ".join(cycle)),
                f"pattern/{cycle[0]}",
                name=cycle[0],
                cycle=cycle,
            )

    def _validate_depth(self, patterns: Sequence[Pattern], result: ValidationResult) -> None:
        """Bound how deep a render can nest."""
        depths = reference_depths(build_dependency_graph(patterns))
        for pattern in patterns:
            depth = depths.get(pattern.name, 0)
            if depth > self.depth_limit:
                result.add_error(
                    TooDeep.code,
                    ErrorMessages.TOO_DEEP.format(
                        name=pattern.name, depth=depth, limit=self.depth_limit
                    ),
                    f"pattern/{pattern.name}",
                    name=pattern.name,
                    depth=depth,
                )

    def _validate_conjunctions(
        self, conjunctions: Sequence[str], result: ValidationResult
    ) -> None:
        for index, conjunction in enumerate(conjunctions):
            if FIELD_DELIMITER in conjunction:
                result.add_error(
                    InvalidConjunction.code,
                    ErrorMessages.INVALID_CONJUNCTION.format(conjunction=conjunction),
                    f"conjunctions/{index}",
                    fragment=conjunction,
                )

    def _validate_usage(self, patterns: Sequence[Pattern], result: ValidationResult) -> None:
        """Non-fatal checks on an otherwise valid script."""
        if not any(p.is_entry_point for p in patterns):
            result.add_warning(
                "NO_ENTRY_POINTS",
                "Script has no entry-point (whole) patterns; nothing can be announced",
                "pattern",
            )

        referenced = {name for refs in build_dependency_graph(patterns).values() for name in refs}
        for pattern in patterns:
            if not pattern.is_entry_point and pattern.name not in referenced:
                result.add_info(
                    "UNUSED_PATTERN",
                    f"Pattern '{pattern.name}' is not an entry point and is never referenced",
                    f"pattern/{pattern.name}",
                    name=pattern.name,
                )


def validate_script(
    patterns: Sequence[Pattern],
    tense_patterns: Sequence[TensePattern] = (),
    conjunctions: Sequence[str] = (),
    depth_limit: int = DEFAULT_DEPTH_LIMIT,
) -> ValidationResult:
    """
    Convenience function to validate a script's building blocks.

    Args:
        patterns: Patterns to validate
        tense_patterns: Tense patterns to validate
        conjunctions: Conjunction phrases to validate
        depth_limit: Longest allowed chain of pattern references

    Returns:
        ValidationResult with any issues found
    """
    validator = ScriptValidator(depth_limit)
    return validator.validate(patterns, tense_patterns, conjunctions)
