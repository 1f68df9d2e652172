#!/usr/bin/env python3
"""
Example: Render announcements from the bundled tutorial script.

Usage:
    python examples/render_announcements.py

Shows:
1. A YAML script is loaded and validated into a registry
2. Each entry point renders for the same song before and after playback
3. A seeded random source makes every render reproducible
4. The announcer joins previous/next/next-next songs into one transition
"""

import random

from chuk_mcp_announcer.announcer import Announcer
from chuk_mcp_announcer.constants import TenseContext
from chuk_mcp_announcer.errors import RenderError
from chuk_mcp_announcer.models import SongMetadata
from chuk_mcp_announcer.patterns import PatternRegistry
from chuk_mcp_announcer.scripts import ScriptLoader


def main() -> None:
    """Render every entry point of the tutorial script."""
    loader = ScriptLoader()
    script = loader.get_script("tutorial")
    assert script is not None

    registry = PatternRegistry.from_script(script)
    song = SongMetadata(
        title="Nothing Else Matters",
        album="The Black Album",
        album_artist="Metallica",
        artist="James Hetfield, Jason Newsted",
        year=1991,
        genre="Heavy Metal",
    )

    print("CHUK Announcer - tutorial script")
    print("=" * 40)
    for entry_point in registry.entry_points:
        for tense in TenseContext:
            try:
                text = registry.render(
                    entry_point, song, tense, script.tags_to_announce, random.Random(42)
                )
            except RenderError as e:
                text = f"(skipped: {e})"
            print(f"{entry_point:<32} {tense.value:<7} {text}")

    print()
    announcer = Announcer.from_script(script)
    print(
        announcer.announce_transition(
            previous=song,
            next_song=SongMetadata(title="Enter Sandman", album="The Black Album"),
            next_next=SongMetadata(title="The Unforgiven", album="The Black Album"),
            rng=random.Random(1),
        )
    )


if __name__ == "__main__":
    main()
