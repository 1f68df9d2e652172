"""
Pytest configuration and shared fixtures.
"""

import random
import tempfile
from pathlib import Path

import pytest

from chuk_mcp_announcer.constants import Inclusion
from chuk_mcp_announcer.models import AnnouncementScript, SongMetadata, TagPolicy
from chuk_mcp_announcer.patterns import PatternRegistry
from chuk_mcp_announcer.scripts import ScriptLoader

LIBRARY_PATH = Path(__file__).parent.parent / "src" / "chuk_mcp_announcer" / "scripts" / "library"


class FixedRandom(random.Random):
    """Random source whose random() always returns the same value."""

    def __init__(self, value: float, seed: int = 0):
        super().__init__(seed)
        self.value = value
        self.calls = 0

    def random(self) -> float:
        self.calls += 1
        return self.value


@pytest.fixture
def temp_dir() -> Path:
    """Create a temporary directory for test outputs."""
    with tempfile.TemporaryDirectory() as tmpdir:
        yield Path(tmpdir)


@pytest.fixture
def library_path() -> Path:
    """Path to the bundled script library."""
    return LIBRARY_PATH


@pytest.fixture
def tutorial_script(library_path: Path) -> AnnouncementScript:
    """The bundled tutorial script."""
    script = ScriptLoader(library_path=library_path).get_script("tutorial")
    assert script is not None
    return script


@pytest.fixture
def tutorial_registry(tutorial_script: AnnouncementScript) -> PatternRegistry:
    """Registry built from the tutorial script."""
    return PatternRegistry.from_script(tutorial_script)


@pytest.fixture
def metallica() -> SongMetadata:
    """The song every tutorial example is written for."""
    return SongMetadata(
        title="Nothing Else Matters",
        album="The Black Album",
        album_artist="Metallica",
        artist="James Hetfield, Jason Newsted",
        composer="James Hetfield, Lars Ulrich",
        lyricist="James Hetfield",
        year=1991,
        genre="Heavy Metal",
    )


@pytest.fixture
def all_required() -> TagPolicy:
    """Policy with every tag Required."""
    return TagPolicy.uniform(Inclusion.REQUIRED)


@pytest.fixture
def fixed_random():
    """Factory for random sources whose random() always returns one value."""
    return FixedRandom
