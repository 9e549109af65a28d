"""
Shared constants for Panda.

This module provides a single source of truth for default values
that are used across multiple modules.
"""

# Skill files
SKILL_FILE_NAME = "SKILL.md"
"""File that marks a directory as a skill."""

SKILL_BODY_SOFT_LIMIT = 500
"""Recommended maximum number of lines in a skill body."""

# Default search roots
DEFAULT_PROJECT_SKILLS_DIR = ".claude/skills"
"""Project skills directory, relative to the project root."""

DEFAULT_PERSONAL_SKILLS_DIR = "~/.claude/skills"
"""Personal skills directory."""

ENV_SKILL_PATH = "PANDA_SKILL_PATH"
"""Extra personal skill directories (colon-separated)."""

# Session start hook
DEFAULT_INTRO_SKILL = "panda:using-panda"
"""Skill injected into every new session."""

LEGACY_SKILLS_DIR = "~/.config/panda/skills"
"""Skills directory used before panda moved to the native skills system.

Skills left here are no longer read; the session start hook warns
while the directory exists.
"""

INTRO_SKILL_READ_ERROR = "Error reading using-panda skill"
"""Placeholder injected when the intro skill cannot be loaded."""
