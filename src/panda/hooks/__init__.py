"""
Agent runtime hooks for Panda.

Hooks are commands the agent runtime runs at lifecycle events and whose
JSON output it reads back.
"""

from panda.hooks.session_start import (
    HOOK_EVENT_NAME,
    build_additional_context,
    build_session_start_output,
    legacy_skills_warning,
    read_intro_skill,
    render_session_start_output,
)

__all__ = [
    "HOOK_EVENT_NAME",
    "build_additional_context",
    "build_session_start_output",
    "legacy_skills_warning",
    "read_intro_skill",
    "render_session_start_output",
]
