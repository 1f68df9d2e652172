"""
Script loader - discovers and loads announcement scripts.

Scripts can come from:
1. Built-in library (shipped with package)
2. Project scripts (user's project/scripts directory)
"""

from __future__ import annotations

import logging
from pathlib import Path
from typing import Any

import yaml

from chuk_mcp_announcer.models.script import AnnouncementScript, ScriptMetadata

logger = logging.getLogger(__name__)

# Keys whose value may be written as null in a script
_OPTIONAL_LISTS = ("pattern", "tense_pattern", "conjunctions")


def script_from_dict(data: dict[str, Any] | None) -> AnnouncementScript:
    """
    Create an AnnouncementScript from a configuration mapping.

    Raises:
        pydantic.ValidationError: The mapping does not fit the script model
    """
    data = dict(data or {})
    for key in _OPTIONAL_LISTS:
        if data.get(key) is None:
            data.pop(key, None)
    if data.get("tags_to_announce") is None:
        data.pop("tags_to_announce", None)
    return AnnouncementScript.model_validate(data)


def parse_script(text: str) -> AnnouncementScript:
    """
    Parse a YAML script.

    Raises:
        yaml.YAMLError: Not valid YAML
        pydantic.ValidationError: The document does not fit the script model
    """
    return script_from_dict(yaml.safe_load(text))


def load_script(path: Path) -> AnnouncementScript:
    """Load a script from a YAML file."""
    with open(path) as f:
        return script_from_dict(yaml.safe_load(f))


def dump_script(script: AnnouncementScript) -> str:
    """Serialize a script to YAML."""
    return yaml.safe_dump(script.to_dict(), default_flow_style=False, sort_keys=False)


class ScriptLoader:
    """
    Discovers and loads script definitions.

    Scripts are loaded from YAML files in the library and project directories.
    Project scripts override library scripts with the same name.
    """

    def __init__(
        self,
        library_path: Path | None = None,
        project_path: Path | None = None,
    ):
        """
        Initialize the script loader.

        Args:
            library_path: Path to built-in script library
            project_path: Path to project scripts directory
        """
        self.library_path = library_path or (Path(__file__).parent / "library")
        self.project_path = project_path
        self._cache: dict[str, AnnouncementScript] = {}

    def list_scripts(self) -> list[ScriptMetadata]:
        """
        List all available scripts.

        Returns scripts from both library and project, with project
        scripts taking precedence. Files that fail to parse are skipped.
        """
        scripts: dict[str, ScriptMetadata] = {}

        for base in (self.library_path, self.project_path):
            if base is None or not base.exists():
                continue
            for path in sorted(base.glob("*.yaml")):
                try:
                    script = load_script(path)
                except Exception as e:
                    logger.warning("Skipping unreadable script %s: %s", path, e)
                    continue
                scripts[path.stem] = ScriptMetadata.from_script(path.stem, script, str(path))

        return sorted(scripts.values(), key=lambda m: m.name)

    def get_script(self, name: str) -> AnnouncementScript | None:
        """
        Get a script by name.

        Project scripts take precedence over library scripts.

        Args:
            name: Script name (file stem)

        Returns:
            Script if found, None otherwise
        """
        if name in self._cache:
            return self._cache[name]

        path = self.find_script(name)
        if path is None:
            return None

        script = load_script(path)
        self._cache[name] = script
        logger.debug("Loaded script %s from %s", name, path)
        return script

    def find_script(self, name: str) -> Path | None:
        """Locate a script file, project first."""
        for base in (self.project_path, self.library_path):
            if base is None:
                continue
            candidate = base / f"{name}.yaml"
            if candidate.exists():
                return candidate
        return None

    def save_script(self, name: str, script: AnnouncementScript) -> Path:
        """
        Write a script to the project directory.

        Args:
            name: Script name
            script: Script to write

        Returns:
            Path to the written file
        """
        if not self.project_path:
            raise ValueError("No project path configured")

        self.project_path.mkdir(parents=True, exist_ok=True)
        dest_file = self.project_path / f"{name}.yaml"
        dest_file.write_text(dump_script(script))

        self._cache.pop(name, None)
        return dest_file

    def clear_cache(self) -> None:
        """Clear the script cache."""
        self._cache.clear()
