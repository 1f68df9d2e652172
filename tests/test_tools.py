"""
Tests for MCP tools.

Tests the MCP tool implementations for script listing, validation,
rendering and transition announcements.
"""

import json
from pathlib import Path

import pytest

from chuk_mcp_announcer.models import AnnouncerSettings, VoiceProfile
from chuk_mcp_announcer.scripts import ScriptLoader
from chuk_mcp_announcer.tools import register_announcement_tools

METALLICA = {
    "title": "Nothing Else Matters",
    "album": "The Black Album",
    "album_artist": "Metallica",
    "year": 1991,
}
ALL_REQUIRED = {"album_artist": "Required", "title": "Required", "album": "Required"}


def deep_script_yaml(depth: int) -> str:
    """A script whose entry point p0 sits on a reference chain of the given depth."""
    lines = ["pattern:", "  - name: p0", "    whole: true", "    fragments: ['^p1^']"]
    for i in range(1, depth + 1):
        fragment = f"^p{i + 1}^" if i < depth else "^title^"
        lines += [f"  - name: p{i}", f"    fragments: ['{fragment}']"]
    return "\n".join(lines) + "\n"


class MockMCPServer:
    """Mock MCP server that just stores registered tools."""

    def __init__(self, name: str):
        self.name = name
        self.tools: dict = {}

    def tool(self, func):
        """Decorator to register a tool."""
        self.tools[func.__name__] = func
        return func


@pytest.fixture
def tools(library_path: Path, temp_dir: Path) -> dict:
    mcp = MockMCPServer("test")
    loader = ScriptLoader(library_path=library_path, project_path=temp_dir)
    return register_announcement_tools(mcp, loader)


class TestRegistration:
    """Tests for tool registration."""

    def test_registers_all_tools(self, library_path: Path) -> None:
        mcp = MockMCPServer("test")
        tools = register_announcement_tools(mcp, ScriptLoader(library_path=library_path))
        assert set(mcp.tools) == set(tools) == {
            "rj_list_scripts",
            "rj_validate_script",
            "rj_list_entry_points",
            "rj_render_announcement",
            "rj_announce_transition",
        }


class TestScriptTools:
    """Tests for listing and validating scripts."""

    @pytest.mark.asyncio
    async def test_list_scripts(self, tools: dict) -> None:
        data = json.loads(await tools["rj_list_scripts"]())
        assert data["status"] == "success"
        assert data["count"] == 2
        assert {s["name"] for s in data["scripts"]} == {"en_default", "tutorial"}

    @pytest.mark.asyncio
    async def test_validate_library_script(self, tools: dict) -> None:
        data = json.loads(await tools["rj_validate_script"](name="tutorial"))
        assert data["status"] == "success"
        assert data["valid"] is True
        assert "tutorial" in data["message"]

    @pytest.mark.asyncio
    async def test_validate_inline_script(self, tools: dict) -> None:
        script_yaml = """
pattern:
  - name: a
    whole: true
    fragments: ["^b^"]
  - name: b
    fragments: ["^a^"]
"""
        data = json.loads(await tools["rj_validate_script"](script_yaml=script_yaml))
        assert data["status"] == "success"
        assert data["valid"] is False
        assert data["issues"][0]["code"] == "CYCLIC_REFERENCE"
        assert data["issues"][0]["severity"] == "error"

    @pytest.mark.asyncio
    async def test_validate_missing_script(self, tools: dict) -> None:
        data = json.loads(await tools["rj_validate_script"](name="missing"))
        assert data["status"] == "error"

    @pytest.mark.asyncio
    async def test_validate_without_input(self, tools: dict) -> None:
        data = json.loads(await tools["rj_validate_script"]())
        assert data["status"] == "error"

    @pytest.mark.asyncio
    async def test_list_entry_points(self, tools: dict) -> None:
        data = json.loads(await tools["rj_list_entry_points"](name="tutorial"))
        assert data["status"] == "success"
        assert "simple_title" in data["entry_points"]
        assert data["dependencies"]["tensed_simple_title_and_album"] == ["tensed_listen"]

    @pytest.mark.asyncio
    async def test_list_entry_points_missing(self, tools: dict) -> None:
        data = json.loads(await tools["rj_list_entry_points"](name="missing"))
        assert data["status"] == "error"
        assert "missing" in data["message"]

    @pytest.mark.asyncio
    async def test_invalid_project_script(self, tools: dict, temp_dir: Path) -> None:
        (temp_dir / "bad.yaml").write_text(
            "pattern:\n  - name: title\n    whole: true\n    fragments: ['x']\n"
        )
        data = json.loads(await tools["rj_list_entry_points"](name="bad"))
        assert data["status"] == "error"
        assert data["code"] == "RESERVED_NAME_COLLISION"

    @pytest.mark.asyncio
    async def test_deep_project_script(self, tools: dict, temp_dir: Path) -> None:
        (temp_dir / "deep.yaml").write_text(deep_script_yaml(8))
        data = json.loads(await tools["rj_list_entry_points"](name="deep"))
        assert data["status"] == "error"
        assert data["code"] == "TOO_DEEP"
        assert data["depth"] == 8

    @pytest.mark.asyncio
    async def test_validate_deep_inline_script(self, tools: dict) -> None:
        data = json.loads(await tools["rj_validate_script"](script_yaml=deep_script_yaml(8)))
        assert data["valid"] is False
        assert data["issues"][0]["code"] == "TOO_DEEP"
        assert data["issues"][0]["location"] == "pattern/p0"

    @pytest.mark.asyncio
    async def test_depth_limit_from_settings(self, library_path: Path, temp_dir: Path) -> None:
        (temp_dir / "deep.yaml").write_text(deep_script_yaml(8))
        mcp = MockMCPServer("test")
        loader = ScriptLoader(library_path=library_path, project_path=temp_dir)
        tools = register_announcement_tools(mcp, loader, AnnouncerSettings(depth_limit=8))

        data = json.loads(await tools["rj_list_entry_points"](name="deep"))
        assert data["status"] == "success"
        assert data["entry_points"] == ["p0"]


class TestRenderTools:
    """Tests for rendering tools."""

    @pytest.mark.asyncio
    async def test_render(self, tools: dict) -> None:
        data = json.loads(
            await tools["rj_render_announcement"](
                name="tutorial",
                entry_point="tensed_simple_title_and_album",
                song=METALLICA,
                tense="after",
                seed=7,
            )
        )
        assert data["status"] == "success"
        assert data["announcement"] == (
            "You were listening to Nothing Else Matters from the album The Black Album"
        )

    @pytest.mark.asyncio
    async def test_render_with_policy_override(self, tools: dict) -> None:
        data = json.loads(
            await tools["rj_render_announcement"](
                name="tutorial",
                entry_point="simple_title_album_and_artist",
                song=METALLICA,
                tense="before",
                seed=1,
                tags_to_announce=ALL_REQUIRED,
            )
        )
        assert data["status"] == "success"
        assert data["announcement"].startswith("You will be listening to Nothing Else Matters")
        assert data["announcement"].endswith("by Metallica")

    @pytest.mark.asyncio
    async def test_render_seed_is_reproducible(self, tools: dict) -> None:
        kwargs = {
            "name": "en_default",
            "entry_point": "up_next",
            "song": {**METALLICA, "artist": "Metallica"},
            "seed": 11,
        }
        first = json.loads(await tools["rj_render_announcement"](**kwargs))
        second = json.loads(await tools["rj_render_announcement"](**kwargs))
        assert first == second

    @pytest.mark.asyncio
    async def test_render_unknown_entry_point(self, tools: dict) -> None:
        data = json.loads(
            await tools["rj_render_announcement"](
                name="tutorial", entry_point="nope", song=METALLICA
            )
        )
        assert data["status"] == "error"
        assert data["code"] == "UNKNOWN_ENTRY_POINT"

    @pytest.mark.asyncio
    async def test_render_no_fragment(self, tools: dict) -> None:
        data = json.loads(
            await tools["rj_render_announcement"](
                name="tutorial", entry_point="simple_title", song={"album": "Load"}
            )
        )
        assert data["status"] == "error"
        assert data["code"] == "NO_AVAILABLE_FRAGMENT"

    @pytest.mark.asyncio
    async def test_render_bad_tense(self, tools: dict) -> None:
        data = json.loads(
            await tools["rj_render_announcement"](
                name="tutorial", entry_point="simple_title", song=METALLICA, tense="during"
            )
        )
        assert data["status"] == "error"


class TestTransitionTool:
    """Tests for rj_announce_transition."""

    @pytest.mark.asyncio
    async def test_transition(self, tools: dict) -> None:
        data = json.loads(
            await tools["rj_announce_transition"](
                name="tutorial",
                previous={"title": "One"},
                next_song={"title": "Two"},
                seed=3,
            )
        )
        assert data["status"] == "success"
        assert data["announcement"] == "The song is One. The song is Two"
        assert data["ssml"] is False

    @pytest.mark.asyncio
    async def test_transition_ssml(self, library_path: Path) -> None:
        settings = AnnouncerSettings(
            enable_ssml=True,
            voices=[VoiceProfile(name="Sam", voice_model="en-US-Sam", language="en-US")],
        )
        mcp = MockMCPServer("test")
        tools = register_announcement_tools(mcp, ScriptLoader(library_path=library_path), settings)

        data = json.loads(
            await tools["rj_announce_transition"](name="tutorial", next_song={"title": "Two"})
        )
        assert data["status"] == "success"
        assert data["ssml"] is True
        assert data["announcement"].startswith("<speak")

    @pytest.mark.asyncio
    async def test_transition_missing_script(self, tools: dict) -> None:
        data = json.loads(await tools["rj_announce_transition"](name="missing"))
        assert data["status"] == "error"
