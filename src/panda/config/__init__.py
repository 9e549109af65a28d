"""
Configuration module for Panda.

Uses pydantic-settings for environment variable loading.
"""

from panda.config.settings import (
    ProjectRootTooWideError,
    Settings,
    find_git_root,
    find_project_root,
)
from panda.config.sources import ConfigFileError

__all__ = [
    "ConfigFileError",
    "ProjectRootTooWideError",
    "Settings",
    "find_git_root",
    "find_project_root",
]
