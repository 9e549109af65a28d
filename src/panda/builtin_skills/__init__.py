"""
Builtin skills that ship with panda.

This directory is the root of the panda namespace. Its skills have the
lowest priority: project and personal skills with the same name
override them.
"""

import pathlib as _pathlib


def get_builtin_skills_path() -> _pathlib.Path:
    """Get the path to builtin skills directory."""
    return _pathlib.Path(__file__).parent
