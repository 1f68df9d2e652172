"""
Script system - announcement scripts as YAML.

Built-in scripts ship in the library directory; a project can add or
override scripts in its own directory.
"""

from chuk_mcp_announcer.scripts.loader import (
    ScriptLoader,
    dump_script,
    load_script,
    parse_script,
    script_from_dict,
)

__all__ = [
    "ScriptLoader",
    "dump_script",
    "load_script",
    "parse_script",
    "script_from_dict",
]
