"""
SessionStart hook output.

On session start the agent runtime runs ``panda hook session-start`` and
reads a JSON envelope from stdout. The envelope injects the intro skill
(``panda:using-panda``) into the session, plus a reminder when skills are
still left in the retired ~/.config/panda/skills directory.
"""

from __future__ import annotations

import json as _json
import logging as _logging
import pathlib as _pathlib
import typing as _typing

import panda.constants as constants
import panda.skills.errors as errors

if _typing.TYPE_CHECKING:
    import panda.skills.resolver as resolver_module

_logger = _logging.getLogger(__name__)

HOOK_EVENT_NAME = "SessionStart"

LEGACY_SKILLS_WARNING = (
    "<important-reminder>IN YOUR FIRST REPLY AFTER SEEING THIS MESSAGE YOU MUST "
    "TELL THE USER:⚠️ **WARNING:** Panda now uses the native skills system. "
    "Custom skills in {legacy_dir} will not be read. Move custom skills to "
    "{personal_dir} instead. To make this message go away, remove {legacy_dir}"
    "</important-reminder>"
)


def read_intro_skill(
    resolver: resolver_module.SkillResolver,
    identifier: str = constants.DEFAULT_INTRO_SKILL,
) -> str:
    """
    Read the full SKILL.md text of the intro skill.

    Never raises: a missing or broken intro skill is logged and replaced
    by a placeholder, so the session still starts.

    Args:
        resolver: Resolver to look the skill up with.
        identifier: Intro skill identifier.

    Returns:
        Raw SKILL.md content, frontmatter included.
    """
    try:
        skill = resolver.resolve(identifier)
        return resolver.registry.read_source(skill)
    except (errors.SkillError, OSError, ValueError) as e:
        _logger.warning("Cannot read intro skill %s: %s", identifier, e)
        return constants.INTRO_SKILL_READ_ERROR


def _collapse_home(path: _pathlib.Path) -> str:
    """Show a path under the home directory as ~/..."""
    try:
        return str(_pathlib.Path("~") / path.relative_to(_pathlib.Path.home()))
    except ValueError:
        return str(path)


def legacy_skills_warning(
    legacy_skills_dir: _pathlib.Path,
    personal_skills_dir: str = constants.DEFAULT_PERSONAL_SKILLS_DIR,
) -> str:
    """
    Reminder to move skills out of the legacy directory.

    Returns:
        The reminder (with leading blank lines), or "" when the legacy
        directory doesn't exist.
    """
    if not legacy_skills_dir.is_dir():
        return ""
    _logger.debug("Legacy skills directory present: %s", legacy_skills_dir)
    return "\n\n" + LEGACY_SKILLS_WARNING.format(
        legacy_dir=_collapse_home(legacy_skills_dir),
        personal_dir=personal_skills_dir,
    )


def build_additional_context(
    intro_content: str,
    warning: str = "",
    intro_skill: str = constants.DEFAULT_INTRO_SKILL,
) -> str:
    """Wrap the intro skill and any warning for injection."""
    return (
        "<EXTREMELY_IMPORTANT>\n"
        "You have panda.\n\n"
        f"**Below is the full content of your '{intro_skill}' skill - your "
        "introduction to using skills. For all other skills, use the 'Skill' tool:**\n\n"
        f"{intro_content}\n\n"
        f"{warning}\n"
        "</EXTREMELY_IMPORTANT>"
    )


def build_session_start_output(
    resolver: resolver_module.SkillResolver,
    *,
    intro_skill: str = constants.DEFAULT_INTRO_SKILL,
    legacy_skills_dir: _pathlib.Path | None = None,
) -> dict[str, _typing.Any]:
    """
    Build the SessionStart hook envelope.

    Args:
        resolver: Resolver used to find the intro skill.
        intro_skill: Identifier of the skill to inject.
        legacy_skills_dir: Retired skills directory to warn about
            (default: ~/.config/panda/skills).

    Returns:
        Envelope dict, ready for json.dumps.
    """
    if legacy_skills_dir is None:
        legacy_skills_dir = _pathlib.Path(constants.LEGACY_SKILLS_DIR).expanduser()

    content = read_intro_skill(resolver, intro_skill)
    warning = legacy_skills_warning(legacy_skills_dir)

    return {
        "hookSpecificOutput": {
            "hookEventName": HOOK_EVENT_NAME,
            "additionalContext": build_additional_context(content, warning, intro_skill),
        }
    }


def render_session_start_output(
    resolver: resolver_module.SkillResolver,
    **kwargs: _typing.Any,
) -> str:
    """Build the SessionStart envelope and serialize it to JSON."""
    return _json.dumps(build_session_start_output(resolver, **kwargs), indent=2, ensure_ascii=False)
