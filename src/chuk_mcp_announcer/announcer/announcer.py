"""
Announcer - the on-air host.

Ties a validated script to operator settings and produces the text spoken
between songs: what just played, what plays next and what follows it.
"""

from __future__ import annotations

import logging
import random
from dataclasses import dataclass

from chuk_mcp_announcer.announcer.selector import AnnouncementSelector
from chuk_mcp_announcer.constants import NATURAL_PAUSE, ErrorMessages, TenseContext
from chuk_mcp_announcer.errors import AnnouncerDisabled
from chuk_mcp_announcer.models.script import AnnouncementScript, TagPolicy
from chuk_mcp_announcer.models.settings import AnnouncerSettings
from chuk_mcp_announcer.models.song import SongMetadata
from chuk_mcp_announcer.patterns import PatternRegistry
from chuk_mcp_announcer.ssml import build_packet, escape_text

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class RestorableScript:
    """A previously active script, as returned by update_script()."""

    registry: PatternRegistry | None
    policy: TagPolicy


class Announcer:
    """
    Produces announcements for songs.

    An announcer without a registry is disabled: every announcement
    request raises AnnouncerDisabled.
    """

    def __init__(
        self,
        registry: PatternRegistry | None = None,
        policy: TagPolicy | None = None,
        settings: AnnouncerSettings | None = None,
        selector: AnnouncementSelector | None = None,
    ):
        """
        Initialize the announcer.

        Args:
            registry: Validated pattern registry (None = disabled)
            policy: Tag policy (defaults to the standard policy)
            settings: Announcer settings
            selector: Entry point selector
        """
        self.registry = registry
        self.policy = policy or TagPolicy()
        self.selector = selector or AnnouncementSelector()
        self.settings = AnnouncerSettings()
        self.update_settings(settings or AnnouncerSettings())

    @classmethod
    def from_script(
        cls,
        script: AnnouncementScript,
        settings: AnnouncerSettings | None = None,
    ) -> Announcer:
        """
        Create an announcer from a script.

        Raises:
            ScriptValidationError: The script is invalid
        """
        settings = settings or AnnouncerSettings()
        return cls(
            registry=PatternRegistry.from_script(script, settings.depth_limit),
            policy=script.tags_to_announce,
            settings=settings,
        )

    @property
    def enabled(self) -> bool:
        """True when a script is loaded."""
        return self.registry is not None

    @property
    def ssml(self) -> bool:
        """True when announcements are wrapped as SSML."""
        return self.settings.current_voice is not None

    def _require_registry(self) -> PatternRegistry:
        if self.registry is None:
            raise AnnouncerDisabled(ErrorMessages.ANNOUNCER_DISABLED)
        return self.registry

    def get_announcement(
        self,
        song: SongMetadata,
        tense: TenseContext,
        rng: random.Random | None = None,
    ) -> str:
        """
        Announce one song.

        Args:
            song: Song metadata
            tense: Before or after playback
            rng: Random source (a fresh one if omitted)

        Returns:
            Announcement text, or "" when no pattern fits the song

        Raises:
            AnnouncerDisabled: No script is loaded
        """
        registry = self._require_registry()
        rng = rng or random.Random()
        text = self.selector.announce(
            registry,
            song.binding(ssml=self.ssml),
            tense,
            self.policy,
            rng,
            self.settings.optional_probability,
        )
        return text or ""

    def conjunction(self, rng: random.Random | None = None) -> str:
        """A randomly chosen phrase joining two upcoming-song announcements."""
        registry = self._require_registry()
        return (rng or random.Random()).choice(registry.conjunctions)

    def announce_transition(
        self,
        previous: SongMetadata | None = None,
        next_song: SongMetadata | None = None,
        next_next: SongMetadata | None = None,
        rng: random.Random | None = None,
    ) -> str:
        """
        Build the full announcement spoken between songs.

        The song that just played is announced in the past tense, the next
        two in the present tense, joined by a conjunction. Missing or
        unannounceable songs are skipped.

        Args:
            previous: Song that just finished
            next_song: Song about to play
            next_next: Song after that
            rng: Random source (a fresh one if omitted)

        Returns:
            Announcement text, SSML-wrapped when enabled

        Raises:
            AnnouncerDisabled: No script is loaded
        """
        self._require_registry()
        rng = rng or random.Random()

        pieces: list[str] = []
        if previous is not None:
            pieces.append(self.get_announcement(previous, TenseContext.AFTER, rng))
        if next_song is not None:
            pieces.append(self.get_announcement(next_song, TenseContext.BEFORE, rng))
        if next_next is not None:
            following = self.get_announcement(next_next, TenseContext.BEFORE, rng)
            if following:
                conjunction = self.conjunction(rng)
                if self.ssml:
                    conjunction = escape_text(conjunction)
                pieces.append(f"{conjunction} {following}".strip())

        text = NATURAL_PAUSE.join(piece for piece in pieces if piece)
        text = text.replace("\0", " ")
        return self.build_packet(text)

    def build_packet(self, script: str) -> str:
        """Wrap text for the speech synthesizer when SSML is enabled."""
        voice = self.settings.current_voice
        if voice is None:
            return script
        return build_packet(script, voice.voice_model, voice.language)

    def update_script(self, script: AnnouncementScript) -> RestorableScript:
        """
        Replace the active script.

        The new script is validated first; on failure nothing changes.

        Returns:
            The previous script state, for restore()

        Raises:
            ScriptValidationError: The new script is invalid
        """
        registry = PatternRegistry.from_script(script, self.settings.depth_limit)
        previous = RestorableScript(registry=self.registry, policy=self.policy)
        self.registry = registry
        self.policy = script.tags_to_announce
        logger.info("Announcement script replaced")
        return previous

    def restore(self, previous: RestorableScript) -> None:
        """Put back a script returned by update_script()."""
        self.registry = previous.registry
        self.policy = previous.policy

    def update_settings(self, settings: AnnouncerSettings) -> AnnouncerSettings:
        """
        Replace the settings.

        SSML without a complete voice profile is turned off.

        Returns:
            The previous settings
        """
        if settings.enable_ssml and not settings.voices_valid():
            logger.warning("SSML enabled without a complete voice profile; disabling SSML")
            settings = settings.model_copy(update={"enable_ssml": False})
        previous = self.settings
        self.settings = settings
        return previous
