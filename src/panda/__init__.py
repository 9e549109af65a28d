"""
Panda - skills for AI coding assistants

Discovers, validates and resolves the skill files that make up the
panda plugin, together with any project and personal overrides.
"""

import importlib.metadata as _metadata

# Version is defined in pyproject.toml - read it and parse into tuple (primary representation)
_raw_version = _metadata.version("panda-skills")
__version_info__: tuple[int, int, int] = tuple(int(x) for x in _raw_version.split(".")[:3])  # type: ignore[assignment]
__version__: str = ".".join(str(x) for x in __version_info__)
__author__ = "Panda Contributors"

from panda.config import Settings  # noqa: E402
from panda.skills import Skill, SkillRegistry, SkillResolver  # noqa: E402

__all__ = [
    "__version__",
    "__version_info__",
    "Settings",
    "Skill",
    "SkillRegistry",
    "SkillResolver",
]
