"""
Skill discovery and resolution for Panda.

Skills are directories containing a SKILL.md file: YAML frontmatter
(name, description) followed by markdown instructions.

Skill namespaces (in precedence order):
1. project  - <project>/.claude/skills/
2. personal - ~/.claude/skills/ and $PANDA_SKILL_PATH
3. panda    - skills bundled with the plugin

Project skills override personal skills, which override panda skills.
Use ``namespace:name`` to ask for a specific namespace.
"""

from panda.skills.errors import (
    DuplicateSkillError,
    InvalidSkillIdentifierError,
    MalformedSkillError,
    SkillError,
    SkillNotFoundError,
)
from panda.skills.listing import DirectoryLister, FilesystemLister, MemoryLister
from panda.skills.registry import SkillRegistry
from panda.skills.resolver import SkillIdentifier, SkillResolver, parse_identifier
from panda.skills.roots import (
    Namespace,
    SearchRoot,
    SearchRoots,
    get_default_search_roots,
    get_personal_skills_path,
    get_project_skills_path,
)
from panda.skills.skill import (
    SKILL_BODY_SOFT_LIMIT,
    Skill,
    SkillFrontmatter,
    load_skill,
    parse_skill_markdown,
)

__all__ = [
    # Core
    "Skill",
    "SkillFrontmatter",
    "SKILL_BODY_SOFT_LIMIT",
    # Parsing
    "load_skill",
    "parse_skill_markdown",
    # Roots
    "Namespace",
    "SearchRoot",
    "SearchRoots",
    "get_default_search_roots",
    "get_personal_skills_path",
    "get_project_skills_path",
    # Listing
    "DirectoryLister",
    "FilesystemLister",
    "MemoryLister",
    # Registry and Resolver
    "SkillRegistry",
    "SkillIdentifier",
    "SkillResolver",
    "parse_identifier",
    # Errors
    "SkillError",
    "MalformedSkillError",
    "SkillNotFoundError",
    "DuplicateSkillError",
    "InvalidSkillIdentifierError",
]
