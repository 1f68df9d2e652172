"""
Tag Policy Evaluator - decides which tags may appear in a render.

Required tags always appear when the song has them, Excluded or absent tags
never do, and Optional tags are a biased coin flip from the render's random
source. Decisions are memoized per render so that two ^title^ references in
one announcement agree.
"""

from __future__ import annotations

import logging
import random
from collections.abc import Mapping

from chuk_mcp_announcer.constants import DEFAULT_OPTIONAL_PROBABILITY, Inclusion
from chuk_mcp_announcer.models.script import TagPolicy

logger = logging.getLogger(__name__)


def is_tag_eligible(
    tag_name: str,
    policy: TagPolicy,
    metadata: Mapping[str, str],
    rng: random.Random,
    optional_probability: float = DEFAULT_OPTIONAL_PROBABILITY,
) -> bool:
    """
    Decide whether a tag may appear in this render.

    Args:
        tag_name: Reserved tag name
        policy: Active tag policy
        metadata: Bound song metadata (present, non-empty values only)
        rng: The render's random source
        optional_probability: Chance that an Optional tag is included

    Returns:
        True if fragments referencing the tag are usable
    """
    if not (metadata.get(tag_name) or "").strip():
        return False

    inclusion = policy.inclusion_for(tag_name)
    if inclusion is None:
        # id, path, parent: not policy-governed
        return True
    if inclusion == Inclusion.EXCLUDE:
        return False
    if inclusion == Inclusion.REQUIRED:
        return True
    return rng.random() < optional_probability


class EligibilityCache:
    """
    Per-render memo of tag eligibility.

    Owned by a single render call and discarded with it; never stored on
    the shared registry.
    """

    def __init__(
        self,
        policy: TagPolicy,
        metadata: Mapping[str, str],
        rng: random.Random,
        optional_probability: float = DEFAULT_OPTIONAL_PROBABILITY,
    ):
        self.policy = policy
        self.metadata = metadata
        self.rng = rng
        self.optional_probability = optional_probability
        self._decisions: dict[str, bool] = {}

    def is_eligible(self, tag_name: str) -> bool:
        """Evaluate a tag once per render, then return the same answer."""
        if tag_name not in self._decisions:
            decision = is_tag_eligible(
                tag_name, self.policy, self.metadata, self.rng, self.optional_probability
            )
            self._decisions[tag_name] = decision
            logger.debug("Tag %s eligible=%s", tag_name, decision)
        return self._decisions[tag_name]

    def all_eligible(self, tag_names: frozenset[str]) -> bool:
        """
        Return True if every tag is eligible.

        Tags are evaluated in sorted order so the random draws do not depend
        on set iteration order.
        """
        return all(self.is_eligible(tag) for tag in sorted(tag_names))

    @property
    def decisions(self) -> dict[str, bool]:
        """Decisions made so far."""
        return dict(self._decisions)
