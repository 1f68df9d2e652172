"""
Pattern Registry - the validated, immutable grammar of a script.

The registry is built once per script (startup or reload) and then shared
read-only by every render. Building validates names, references and cycles
and precomputes parsed fragments and the dependency graph.
"""

from __future__ import annotations

import logging
import random
from collections.abc import Mapping, Sequence
from types import MappingProxyType
from typing import Any

from chuk_mcp_announcer.constants import (
    DEFAULT_DEPTH_LIMIT,
    DEFAULT_OPTIONAL_PROBABILITY,
    TenseContext,
)
from chuk_mcp_announcer.models.script import (
    AnnouncementScript,
    Pattern,
    PatternNode,
    TagPolicy,
    TensePattern,
)
from chuk_mcp_announcer.models.song import SongMetadata
from chuk_mcp_announcer.patterns.expander import PatternExpander
from chuk_mcp_announcer.patterns.template import FragmentTemplate, parse_fragment
from chuk_mcp_announcer.patterns.validator import (
    ValidationResult,
    build_dependency_graph,
    validate_script,
)

logger = logging.getLogger(__name__)


class PatternRegistry:
    """
    Immutable collection of patterns and tense patterns.

    Use PatternRegistry.build() (or from_script()) rather than the
    constructor; the constructor trusts its input.
    """

    def __init__(
        self,
        nodes: Mapping[str, PatternNode],
        templates: Mapping[str, tuple[FragmentTemplate, ...]],
        graph: Mapping[str, tuple[str, ...]],
        conjunctions: Sequence[str] = (),
        validation: ValidationResult | None = None,
    ):
        self._nodes: Mapping[str, PatternNode] = MappingProxyType(dict(nodes))
        self._templates: Mapping[str, tuple[FragmentTemplate, ...]] = MappingProxyType(
            dict(templates)
        )
        self._graph: Mapping[str, tuple[str, ...]] = MappingProxyType(dict(graph))
        self._conjunctions: tuple[str, ...] = tuple(conjunctions)
        self._entry_points: tuple[str, ...] = tuple(
            sorted(
                name
                for name, node in self._nodes.items()
                if isinstance(node, Pattern) and node.is_entry_point
            )
        )
        self.validation = validation or ValidationResult()

    @classmethod
    def build(
        cls,
        patterns: Sequence[Pattern],
        tense_patterns: Sequence[TensePattern] = (),
        conjunctions: Sequence[str] = (),
        depth_limit: int = DEFAULT_DEPTH_LIMIT,
    ) -> PatternRegistry:
        """
        Validate and build a registry.

        Args:
            patterns: Pattern records
            tense_patterns: Tense pattern records
            conjunctions: Phrases joining two upcoming-song announcements
            depth_limit: Longest allowed chain of pattern references; bounds
                how deep a render nests

        Returns:
            A registry ready to render

        Raises:
            ScriptValidationError: The subclass for the first failing check
        """
        result = validate_script(patterns, tense_patterns, conjunctions, depth_limit)
        if not result.is_valid:
            logger.warning("Script validation failed:\n%s", result)
        result.raise_for_errors()

        nodes: dict[str, PatternNode] = {}
        templates: dict[str, tuple[FragmentTemplate, ...]] = {}
        for pattern in patterns:
            nodes[pattern.name] = pattern
            templates[pattern.name] = tuple(parse_fragment(f) for f in pattern.fragments)
        for tense_pattern in tense_patterns:
            nodes[tense_pattern.name] = tense_pattern

        registry = cls(
            nodes=nodes,
            templates=templates,
            graph=build_dependency_graph(patterns),
            conjunctions=conjunctions,
            validation=result,
        )
        logger.info(
            "Built pattern registry: %d patterns, %d tense patterns, %d entry points",
            len(patterns),
            len(tense_patterns),
            len(registry.entry_points),
        )
        for issue in result.warnings:
            logger.warning("%s", issue)
        return registry

    @classmethod
    def from_script(
        cls, script: AnnouncementScript, depth_limit: int = DEFAULT_DEPTH_LIMIT
    ) -> PatternRegistry:
        """Build a registry from a deserialized script."""
        return cls.build(
            script.patterns, script.tense_patterns, script.conjunctions, depth_limit
        )

    def __contains__(self, name: object) -> bool:
        return name in self._nodes

    def __len__(self) -> int:
        return len(self._nodes)

    def get_node(self, name: str) -> PatternNode | None:
        """
        Get a pattern or tense pattern by name.

        Args:
            name: Node name

        Returns:
            The node or None if not found
        """
        return self._nodes.get(name)

    def templates(self, name: str) -> tuple[FragmentTemplate, ...]:
        """Parsed fragments of a pattern (empty for tense patterns)."""
        return self._templates.get(name, ())

    def dependencies(self, name: str) -> tuple[str, ...]:
        """Pattern/tense-pattern names referenced directly by a pattern."""
        return self._graph.get(name, ())

    @property
    def names(self) -> list[str]:
        """All node names, sorted."""
        return sorted(self._nodes)

    @property
    def entry_points(self) -> tuple[str, ...]:
        """Names of patterns usable as a render root, sorted."""
        return self._entry_points

    @property
    def conjunctions(self) -> tuple[str, ...]:
        """Conjunction phrases ("" when the script has none)."""
        return self._conjunctions or ("",)

    def render(
        self,
        entry_point: str,
        metadata: SongMetadata | Mapping[str, Any],
        tense_context: TenseContext,
        policy: TagPolicy,
        rng: random.Random,
        optional_probability: float = DEFAULT_OPTIONAL_PROBABILITY,
    ) -> str:
        """
        Render an entry-point pattern for one song.

        See PatternExpander.render.
        """
        expander = PatternExpander(self, optional_probability)
        return expander.render(entry_point, metadata, tense_context, policy, rng)
