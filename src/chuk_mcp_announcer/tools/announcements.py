"""
Announcement tools - MCP tools for script validation and rendering.

Tools for listing scripts, validating them, and rendering announcements
for songs.
"""

from __future__ import annotations

import json
import logging
import random
from typing import TYPE_CHECKING, Any

from chuk_mcp_announcer.announcer import Announcer
from chuk_mcp_announcer.constants import ErrorMessages, SuccessMessages, TenseContext
from chuk_mcp_announcer.errors import AnnouncerError, ScriptValidationError
from chuk_mcp_announcer.models.script import AnnouncementScript, TagPolicy
from chuk_mcp_announcer.models.settings import AnnouncerSettings
from chuk_mcp_announcer.models.song import SongMetadata
from chuk_mcp_announcer.patterns import PatternRegistry, validate_script
from chuk_mcp_announcer.scripts import ScriptLoader, parse_script

if TYPE_CHECKING:
    from chuk_mcp_server import ChukMCPServer

logger = logging.getLogger(__name__)


def register_announcement_tools(
    mcp: ChukMCPServer,
    loader: ScriptLoader,
    settings: AnnouncerSettings | None = None,
) -> dict[str, Any]:
    """
    Register announcement tools with the MCP server.

    Args:
        mcp: The MCP server instance
        loader: The script loader
        settings: Announcer settings shared by all tools

    Returns:
        Dictionary of registered tool functions
    """
    tools: dict[str, Any] = {}
    settings = settings or AnnouncerSettings()
    registries: dict[str, PatternRegistry] = {}

    def get_registry(name: str) -> tuple[AnnouncementScript, PatternRegistry]:
        script = loader.get_script(name)
        if script is None:
            raise ValueError(ErrorMessages.SCRIPT_NOT_FOUND.format(name=name))
        if name not in registries:
            registries[name] = PatternRegistry.from_script(script, settings.depth_limit)
        return script, registries[name]

    def error_response(e: Exception) -> str:
        payload: dict[str, Any] = {"status": "error", "message": str(e)}
        if isinstance(e, AnnouncerError):
            payload["code"] = e.code
        if isinstance(e, ScriptValidationError) and e.cycle:
            payload["cycle"] = e.cycle
        if isinstance(e, ScriptValidationError) and e.depth is not None:
            payload["depth"] = e.depth
        return json.dumps(payload)

    @mcp.tool  # type: ignore[arg-type]
    async def rj_list_scripts() -> str:
        """
        List available announcement scripts.

        Returns:
            JSON string with list of script summaries

        Example:
            rj_list_scripts()
        """
        try:
            scripts = loader.list_scripts()
            return json.dumps(
                {
                    "status": "success",
                    "scripts": [s.model_dump() for s in scripts],
                    "count": len(scripts),
                }
            )
        except Exception as e:
            logger.exception("Failed to list scripts")
            return error_response(e)

    tools["rj_list_scripts"] = rj_list_scripts

    @mcp.tool  # type: ignore[arg-type]
    async def rj_validate_script(
        name: str | None = None,
        script_yaml: str | None = None,
    ) -> str:
        """
        Validate an announcement script.

        Checks pattern names, reserved names, duplicates, references,
        reference cycles and nesting depth.

        Args:
            name: Name of a library or project script
            script_yaml: Inline YAML script (used when name is not given)

        Returns:
            JSON string with validation result and issues

        Example:
            rj_validate_script(name="tutorial")
        """
        try:
            if name:
                script = loader.get_script(name)
                if script is None:
                    return json.dumps(
                        {
                            "status": "error",
                            "message": ErrorMessages.SCRIPT_NOT_FOUND.format(name=name),
                        }
                    )
            elif script_yaml:
                script = parse_script(script_yaml)
            else:
                return json.dumps(
                    {"status": "error", "message": "Provide either name or script_yaml"}
                )

            result = validate_script(
                script.patterns,
                script.tense_patterns,
                script.conjunctions,
                settings.depth_limit,
            )
            response: dict[str, Any] = {
                "status": "success",
                "valid": result.is_valid,
                "issues": [
                    {
                        "severity": i.severity.value,
                        "code": i.code,
                        "message": i.message,
                        "location": i.location,
                    }
                    for i in result.issues
                ],
            }
            if result.is_valid:
                response["message"] = SuccessMessages.SCRIPT_VALID.format(
                    name=name or "inline",
                    patterns=len(script.patterns),
                    tense_patterns=len(script.tense_patterns),
                )
            return json.dumps(response)
        except Exception as e:
            logger.exception("Failed to validate script")
            return error_response(e)

    tools["rj_validate_script"] = rj_validate_script

    @mcp.tool  # type: ignore[arg-type]
    async def rj_list_entry_points(name: str) -> str:
        """
        List the entry-point patterns of a script.

        Args:
            name: Script name

        Returns:
            JSON string with entry point names

        Example:
            rj_list_entry_points(name="tutorial")
        """
        try:
            _, registry = get_registry(name)
            return json.dumps(
                {
                    "status": "success",
                    "script": name,
                    "entry_points": list(registry.entry_points),
                    "dependencies": {
                        ep: list(registry.dependencies(ep)) for ep in registry.entry_points
                    },
                }
            )
        except Exception as e:
            logger.exception("Failed to list entry points")
            return error_response(e)

    tools["rj_list_entry_points"] = rj_list_entry_points

    @mcp.tool  # type: ignore[arg-type]
    async def rj_render_announcement(
        name: str,
        entry_point: str,
        song: dict[str, Any],
        tense: str = "before",
        seed: int | None = None,
        tags_to_announce: dict[str, str] | None = None,
    ) -> str:
        """
        Render one entry-point pattern for a song.

        Args:
            name: Script name
            entry_point: Entry-point pattern name
            song: Song tags (title, album, album_artist, year, ...)
            tense: 'before' or 'after' playback
            seed: Random seed for a reproducible render
            tags_to_announce: Optional policy override, tag -> Required/Optional/Exclude

        Returns:
            JSON string with the rendered announcement

        Example:
            rj_render_announcement(
                name="tutorial",
                entry_point="simple_title_album_and_artist",
                song={"title": "Nothing Else Matters", "album": "The Black Album",
                      "album_artist": "Metallica"},
                tense="after",
                seed=7,
            )
        """
        try:
            script, registry = get_registry(name)
            policy = (
                TagPolicy.model_validate(tags_to_announce)
                if tags_to_announce
                else script.tags_to_announce
            )
            text = registry.render(
                entry_point,
                SongMetadata.model_validate(song),
                TenseContext(tense),
                policy,
                random.Random(seed),
                settings.optional_probability,
            )
            return json.dumps(
                {"status": "success", "entry_point": entry_point, "announcement": text}
            )
        except AnnouncerError as e:
            logger.info("Render of %s/%s failed: %s", name, entry_point, e)
            return error_response(e)
        except Exception as e:
            logger.exception("Failed to render announcement")
            return error_response(e)

    tools["rj_render_announcement"] = rj_render_announcement

    @mcp.tool  # type: ignore[arg-type]
    async def rj_announce_transition(
        name: str,
        previous: dict[str, Any] | None = None,
        next_song: dict[str, Any] | None = None,
        next_next: dict[str, Any] | None = None,
        seed: int | None = None,
    ) -> str:
        """
        Build the announcement spoken between songs.

        The previous song is announced in the past tense; the next two in
        the present tense, joined by one of the script's conjunctions.

        Args:
            name: Script name
            previous: Tags of the song that just played
            next_song: Tags of the song about to play
            next_next: Tags of the song after that
            seed: Random seed for a reproducible announcement

        Returns:
            JSON string with the announcement

        Example:
            rj_announce_transition(name="en_default", next_song={"title": "One"})
        """
        try:
            script, registry = get_registry(name)
            announcer = Announcer(
                registry=registry, policy=script.tags_to_announce, settings=settings
            )
            text = announcer.announce_transition(
                previous=SongMetadata.model_validate(previous) if previous else None,
                next_song=SongMetadata.model_validate(next_song) if next_song else None,
                next_next=SongMetadata.model_validate(next_next) if next_next else None,
                rng=random.Random(seed),
            )
            return json.dumps({"status": "success", "announcement": text, "ssml": announcer.ssml})
        except Exception as e:
            logger.exception("Failed to build transition announcement")
            return error_response(e)

    tools["rj_announce_transition"] = rj_announce_transition

    return tools
