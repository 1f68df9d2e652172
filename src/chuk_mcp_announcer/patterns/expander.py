"""
Pattern Expander - renders an entry-point pattern into announcement text.

The expander walks the reference graph from the entry point: at each pattern
it keeps only fragments whose tags are all eligible, picks one uniformly with
the render's random source, and substitutes references left to right. Tense
patterns resolve to their past or present phrase.

Recursion follows reference chains, which the registry caps at its depth
limit when it is built.
"""

from __future__ import annotations

import logging
import random
from collections.abc import Mapping
from dataclasses import dataclass
from typing import TYPE_CHECKING, Any

from chuk_mcp_announcer.constants import (
    DEFAULT_OPTIONAL_PROBABILITY,
    RESERVED_NAMES,
    ErrorMessages,
    TenseContext,
)
from chuk_mcp_announcer.errors import NoAvailableFragment, UnknownEntryPoint
from chuk_mcp_announcer.models.script import Pattern, TagPolicy, TensePattern
from chuk_mcp_announcer.models.song import MetadataBinding, SongMetadata
from chuk_mcp_announcer.patterns.policy import EligibilityCache
from chuk_mcp_announcer.patterns.template import FragmentTemplate
from chuk_mcp_announcer.ssml import escape_text

if TYPE_CHECKING:
    from chuk_mcp_announcer.patterns.registry import PatternRegistry

logger = logging.getLogger(__name__)


@dataclass
class RenderContext:
    """
    Everything one render threads through its recursion.

    A fresh context (and eligibility cache) is made for every render call.
    """

    tense: TenseContext
    metadata: MetadataBinding
    rng: random.Random
    eligibility: EligibilityCache


def bind_metadata(metadata: SongMetadata | Mapping[str, Any]) -> MetadataBinding:
    """Coerce caller metadata into a read-only binding."""
    if isinstance(metadata, MetadataBinding):
        return metadata
    if isinstance(metadata, SongMetadata):
        return metadata.binding()
    return MetadataBinding.from_mapping(metadata)


class PatternExpander:
    """
    Renders patterns from a registry.

    The expander holds no per-render state, so one instance can serve
    concurrent renders.
    """

    def __init__(
        self,
        registry: PatternRegistry,
        optional_probability: float = DEFAULT_OPTIONAL_PROBABILITY,
    ):
        """
        Initialize the expander.

        Args:
            registry: Validated pattern registry
            optional_probability: Chance that an Optional tag is included
        """
        self.registry = registry
        self.optional_probability = optional_probability

    def render(
        self,
        entry_point_name: str,
        metadata: SongMetadata | Mapping[str, Any],
        tense_context: TenseContext,
        policy: TagPolicy,
        rng: random.Random,
    ) -> str:
        """
        Render an entry-point pattern.

        Args:
            entry_point_name: Name of an entry-point pattern
            metadata: Song metadata (SongMetadata, MetadataBinding or mapping)
            tense_context: Before or after playback
            policy: Active tag policy
            rng: Random source for this render

        Returns:
            Announcement text

        Raises:
            UnknownEntryPoint: Name is unknown or not an entry point
            NoAvailableFragment: Some pattern on the chosen path has no usable fragment
        """
        node = self.registry.get_node(entry_point_name)
        if not isinstance(node, Pattern) or not node.is_entry_point:
            raise UnknownEntryPoint(
                ErrorMessages.UNKNOWN_ENTRY_POINT.format(name=entry_point_name),
                name=entry_point_name,
            )

        binding = bind_metadata(metadata)
        context = RenderContext(
            tense=TenseContext(tense_context),
            metadata=binding,
            rng=rng,
            eligibility=EligibilityCache(policy, binding, rng, self.optional_probability),
        )
        text = self._expand(entry_point_name, context)
        logger.debug(
            "Rendered %s (%s) with decisions %s",
            entry_point_name,
            context.tense.value,
            context.eligibility.decisions,
        )
        return text

    def _expand(self, name: str, context: RenderContext) -> str:
        """Expand one node of the reference graph."""
        node = self.registry.get_node(name)
        if isinstance(node, TensePattern):
            phrase = node.past if context.tense == TenseContext.AFTER else node.present
            return self._literal(phrase, context)

        available = [
            template
            for template in self.registry.templates(name)
            if context.eligibility.all_eligible(template.tag_references)
        ]
        if not available:
            raise NoAvailableFragment(
                ErrorMessages.NO_AVAILABLE_FRAGMENT.format(name=name),
                name=name,
            )

        return self._substitute(context.rng.choice(available), context)

    def _substitute(self, template: FragmentTemplate, context: RenderContext) -> str:
        """Replace references left to right and join the pieces."""
        parts: list[str] = []
        for token in template.tokens:
            if not token.is_reference:
                parts.append(self._literal(token.text, context))
            elif token.text in RESERVED_NAMES:
                parts.append(context.metadata[token.text])
            else:
                parts.append(self._expand(token.text, context))
        return "".join(parts)

    def _literal(self, text: str, context: RenderContext) -> str:
        """Author-written text, escaped when the binding is SSML."""
        return escape_text(text) if context.metadata.ssml else text
