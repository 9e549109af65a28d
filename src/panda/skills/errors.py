"""
Exceptions raised by skill loading and resolution.

Discovery never raises these for individual skills: broken skills are
logged and skipped. They surface from direct ``load_skill`` calls and
from ``SkillResolver.resolve``.
"""

from __future__ import annotations

import pathlib as _pathlib
import typing as _typing

if _typing.TYPE_CHECKING:
    import panda.skills.roots as roots


class SkillError(Exception):
    """Base class for all skill errors."""

    pass


class MalformedSkillError(SkillError, ValueError):
    """A skill file violates the front matter contract."""

    def __init__(self, message: str, path: _pathlib.PurePath | None = None) -> None:
        self.path = path
        if path is not None:
            message = f"{path}: {message}"
        super().__init__(message)


class InvalidSkillIdentifierError(SkillError, ValueError):
    """A skill identifier is not of the form ``[namespace:]name``."""

    def __init__(self, identifier: str, reason: str) -> None:
        self.identifier = identifier
        super().__init__(f"Invalid skill identifier '{identifier}': {reason}")


class SkillNotFoundError(SkillError, LookupError):
    """No namespace holds the requested skill."""

    def __init__(
        self,
        identifier: str,
        *,
        namespace: roots.Namespace | None = None,
        available: list[str] | None = None,
    ) -> None:
        self.identifier = identifier
        self.namespace = namespace
        self.available = available or []
        if namespace is not None:
            message = f"Skill '{identifier}' not found in {namespace.value} skills"
        else:
            message = f"Skill '{identifier}' not found"
        super().__init__(message)


class DuplicateSkillError(SkillError):
    """Two skills in the same namespace share a name."""

    def __init__(
        self,
        name: str,
        namespace: roots.Namespace,
        paths: list[_pathlib.PurePath],
    ) -> None:
        self.name = name
        self.namespace = namespace
        self.paths = paths
        locations = ", ".join(str(p) for p in paths)
        super().__init__(
            f"Skill '{name}' is defined more than once in {namespace.value} skills: {locations}"
        )
