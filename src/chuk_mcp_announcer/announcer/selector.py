"""
Announcement Selector - chooses which entry point to render for a moment.

The selector owns the fallback policy: entry points are tried in a random
order and the first that renders wins. A render error for one entry point
only means that grammar path cannot be satisfied for this song.
"""

from __future__ import annotations

import logging
import random
from collections.abc import Mapping, Sequence
from typing import Any

from chuk_mcp_announcer.constants import DEFAULT_OPTIONAL_PROBABILITY, TenseContext
from chuk_mcp_announcer.errors import RenderError
from chuk_mcp_announcer.models.script import TagPolicy
from chuk_mcp_announcer.models.song import SongMetadata
from chuk_mcp_announcer.patterns import PatternRegistry

logger = logging.getLogger(__name__)


class AnnouncementSelector:
    """
    Picks entry points for before/after playback moments.

    By default every entry point of the registry is a candidate for both
    moments; operators can restrict either moment to a subset.
    """

    def __init__(
        self,
        before: Sequence[str] | None = None,
        after: Sequence[str] | None = None,
    ):
        """
        Initialize the selector.

        Args:
            before: Entry points allowed before playback (None = all)
            after: Entry points allowed after playback (None = all)
        """
        self._allowed: dict[TenseContext, tuple[str, ...] | None] = {
            TenseContext.BEFORE: tuple(before) if before is not None else None,
            TenseContext.AFTER: tuple(after) if after is not None else None,
        }

    def candidates(self, registry: PatternRegistry, tense: TenseContext) -> list[str]:
        """Entry points usable for a moment, in registry order."""
        allowed = self._allowed[TenseContext(tense)]
        if allowed is None:
            return list(registry.entry_points)
        return [name for name in registry.entry_points if name in allowed]

    def select(
        self, registry: PatternRegistry, tense: TenseContext, rng: random.Random
    ) -> list[str]:
        """
        Entry points in the order they should be tried.

        Args:
            registry: Pattern registry
            tense: Before or after playback
            rng: Random source for this announcement

        Returns:
            Shuffled candidate list
        """
        order = self.candidates(registry, tense)
        rng.shuffle(order)
        return order

    def announce(
        self,
        registry: PatternRegistry,
        metadata: SongMetadata | Mapping[str, Any],
        tense: TenseContext,
        policy: TagPolicy,
        rng: random.Random,
        optional_probability: float = DEFAULT_OPTIONAL_PROBABILITY,
    ) -> str | None:
        """
        Render the first entry point that succeeds.

        Returns:
            Announcement text, or None if no entry point renders for this song
        """
        for entry_point in self.select(registry, tense, rng):
            try:
                return registry.render(
                    entry_point, metadata, tense, policy, rng, optional_probability
                )
            except RenderError as e:
                logger.debug("Entry point %s skipped: %s", entry_point, e)
        logger.info("No entry point could be rendered (%s)", TenseContext(tense).value)
        return None
