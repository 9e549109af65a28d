"""
Skill definition and SKILL.md parsing.

Skills are defined by a SKILL.md file with YAML frontmatter.
The frontmatter contains metadata; the body contains instructions.
"""

from __future__ import annotations

import dataclasses as _dataclasses
import logging as _logging
import pathlib as _pathlib
import re as _re
import typing as _typing

import pydantic as _pydantic
import yaml as _yaml

import panda.constants as constants
import panda.skills.errors as errors
import panda.skills.listing as listing
import panda.skills.roots as roots

_logger = _logging.getLogger(__name__)

# Soft limit for SKILL.md body (lines)
SKILL_BODY_SOFT_LIMIT = constants.SKILL_BODY_SOFT_LIMIT

# Frontmatter is delimited by "---" lines at the very top of the file
_FRONTMATTER_RE = _re.compile(
    r"\A---[ \t]*\r?\n(.*?)^---[ \t]*\r?$\n?(.*)\Z",
    _re.DOTALL | _re.MULTILINE,
)


class SkillFrontmatter(_pydantic.BaseModel):
    """
    Frontmatter parsed from a SKILL.md file.

    Required fields:
    - name: Skill identifier, unique within its namespace

    Optional fields:
    - description: What the skill does and when to use it. Agents match
      requests against it, so it should be present, but a skill without
      one still loads.
    - license, allowed-tools, metadata
    """

    model_config = _pydantic.ConfigDict(extra="allow", populate_by_name=True)

    name: str = _pydantic.Field(
        ...,
        min_length=1,
        max_length=64,
        pattern=r"^[a-z0-9][a-z0-9-]*[a-z0-9]$|^[a-z0-9]$",
        description="Skill name (lowercase, hyphens allowed)",
    )

    description: str = _pydantic.Field(
        default="",
        max_length=1024,
        description="What the skill does and when to use it",
    )

    license: str | None = _pydantic.Field(
        default=None,
        description="License for the skill",
    )

    allowed_tools: list[str] = _pydantic.Field(
        default_factory=list,
        alias="allowed-tools",
        description="Tools pre-approved for use with this skill",
    )

    metadata: dict[str, _typing.Any] = _pydantic.Field(
        default_factory=dict,
        description="Custom metadata for client-specific data",
    )

    @_pydantic.field_validator("description", mode="before")
    @classmethod
    def _empty_description(cls, value: _typing.Any) -> _typing.Any:
        # "description:" with no value parses as None
        if value is None:
            return ""
        return value


@_dataclasses.dataclass(frozen=True)
class Skill:
    """
    A parsed skill ready for use.

    The namespace is not part of the file: it records which search root
    the skill was discovered under.
    """

    frontmatter: SkillFrontmatter
    """Parsed frontmatter metadata."""

    body: str
    """Skill instructions (markdown body after frontmatter)."""

    source_path: _pathlib.PurePath
    """Path to the SKILL.md file."""

    namespace: roots.Namespace = roots.Namespace.PROJECT
    """Namespace the skill was discovered in."""

    @property
    def name(self) -> str:
        """Skill name from frontmatter."""
        return self.frontmatter.name

    @property
    def description(self) -> str:
        """Skill description from frontmatter."""
        return self.frontmatter.description

    @property
    def qualified_name(self) -> str:
        """Name prefixed with its namespace, e.g. ``panda:brainstorming``."""
        return f"{self.namespace.value}:{self.name}"

    @property
    def license(self) -> str | None:
        """Skill license from frontmatter."""
        return self.frontmatter.license

    @property
    def allowed_tools(self) -> list[str]:
        """Pre-approved tools from frontmatter."""
        return self.frontmatter.allowed_tools

    @property
    def skill_dir(self) -> _pathlib.PurePath:
        """Directory containing the SKILL.md file."""
        return self.source_path.parent

    @property
    def body_line_count(self) -> int:
        """Number of lines in the skill body."""
        return len(self.body.splitlines())

    @property
    def exceeds_soft_limit(self) -> bool:
        """Whether body exceeds the soft limit."""
        return self.body_line_count > SKILL_BODY_SOFT_LIMIT

    def get_metadata_for_prompt(self) -> str:
        """Name and description as a one-line summary."""
        if not self.description:
            return f"**{self.qualified_name}**"
        return f"**{self.qualified_name}**: {self.description}"

    def to_dict(self) -> dict[str, _typing.Any]:
        """Convert to dictionary for JSON serialization."""
        return {
            "name": self.name,
            "qualified_name": self.qualified_name,
            "description": self.description,
            "namespace": self.namespace.value,
            "path": str(self.source_path),
            "license": self.license,
            "allowed_tools": self.allowed_tools,
            "body_lines": self.body_line_count,
            "exceeds_limit": self.exceeds_soft_limit,
        }


def parse_skill_markdown(
    content: str,
    path: _pathlib.PurePath | None = None,
) -> tuple[SkillFrontmatter, str]:
    """
    Parse a SKILL.md file into frontmatter and body.

    Args:
        content: Raw markdown content.
        path: File the content came from (for error messages).

    Returns:
        Tuple of (frontmatter, body).

    Raises:
        MalformedSkillError: If frontmatter is missing or invalid.
    """
    match = _FRONTMATTER_RE.match(content.lstrip("\ufeff"))
    if not match:
        raise errors.MalformedSkillError("SKILL.md must start with YAML frontmatter (---)", path)

    frontmatter_yaml = match.group(1)
    body = match.group(2).strip()

    try:
        data = _yaml.safe_load(frontmatter_yaml)
    except _yaml.YAMLError as e:
        raise errors.MalformedSkillError(f"Invalid YAML in frontmatter: {e}", path) from e

    if data is None:
        data = {}
    if not isinstance(data, dict):
        raise errors.MalformedSkillError(
            f"Frontmatter must be a mapping, got {type(data).__name__}", path
        )
    if "name" not in data:
        raise errors.MalformedSkillError("Frontmatter is missing required field 'name'", path)

    try:
        frontmatter = SkillFrontmatter.model_validate(data)
    except _pydantic.ValidationError as e:
        raise errors.MalformedSkillError(f"Invalid skill frontmatter: {e}", path) from e

    return frontmatter, body


def load_skill(
    path: _pathlib.PurePath,
    namespace: roots.Namespace = roots.Namespace.PROJECT,
    *,
    lister: listing.DirectoryLister | None = None,
    skill_file: str = constants.SKILL_FILE_NAME,
) -> Skill:
    """
    Load a skill from its SKILL.md file.

    Args:
        path: The SKILL.md file, or the skill directory containing it.
        namespace: Namespace the skill belongs to.
        lister: Filesystem view to read through (default: real filesystem).
        skill_file: Name of the skill file inside a skill directory.

    Returns:
        Parsed Skill instance.

    Raises:
        FileNotFoundError: If the skill file doesn't exist.
        MalformedSkillError: If the skill file is invalid or not UTF-8.
    """
    lister = lister or listing.FilesystemLister()

    if lister.is_dir(path):
        path = path / skill_file
    if not lister.is_file(path):
        raise FileNotFoundError(f"{skill_file} not found: {path}")

    try:
        content = lister.read_text(path)
    except UnicodeDecodeError as e:
        raise errors.MalformedSkillError(f"not valid UTF-8: {e}", path) from e
    frontmatter, body = parse_skill_markdown(content, path)

    line_count = len(body.splitlines())
    if line_count > SKILL_BODY_SOFT_LIMIT:
        _logger.warning(
            "Skill %s exceeds recommended body limit (%d lines > %d)",
            frontmatter.name,
            line_count,
            SKILL_BODY_SOFT_LIMIT,
        )

    return Skill(
        frontmatter=frontmatter,
        body=body,
        source_path=path,
        namespace=namespace,
    )
