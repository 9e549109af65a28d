"""
Skill namespaces and search roots.

Skills live under three namespaces, in precedence order:
1. project  - <project>/.claude/skills/
2. personal - ~/.claude/skills/ plus $PANDA_SKILL_PATH entries
3. panda    - skills bundled with this package

A bare skill name resolves to the highest-precedence namespace that
defines it, so project skills override personal skills, which override
panda skills.
"""

from __future__ import annotations

import collections.abc as _abc
import dataclasses as _dataclasses
import enum as _enum
import os as _os
import pathlib as _pathlib
import typing as _typing

import panda.builtin_skills as builtin_skills
import panda.constants as constants


class Namespace(_enum.Enum):
    """Provenance tier of a skill."""

    PROJECT = "project"
    """Skills checked into the current project."""

    PERSONAL = "personal"
    """Skills in the user's home directory."""

    PANDA = "panda"
    """Skills shipped with the plugin."""

    @property
    def precedence(self) -> int:
        """Rank of this namespace (0 is highest)."""
        return _PRECEDENCE.index(self)

    @classmethod
    def by_precedence(cls) -> list[Namespace]:
        """All namespaces, highest precedence first."""
        return list(_PRECEDENCE)

    @classmethod
    def parse(cls, value: str) -> Namespace | None:
        """Look up a namespace by its name, or None if unknown."""
        for namespace in cls:
            if namespace.value == value:
                return namespace
        return None


_PRECEDENCE: tuple[Namespace, ...] = (
    Namespace.PROJECT,
    Namespace.PERSONAL,
    Namespace.PANDA,
)


@_dataclasses.dataclass(frozen=True)
class SearchRoot:
    """A directory holding one subdirectory per skill."""

    namespace: Namespace
    path: _pathlib.PurePath

    def to_dict(self) -> dict[str, str]:
        """Convert to dictionary for JSON serialization."""
        return {"namespace": self.namespace.value, "path": str(self.path)}


class SearchRoots(_abc.Sequence[SearchRoot]):
    """
    Ordered, immutable list of search roots.

    Roots are sorted by namespace precedence. The sort is stable, so
    several directories in one namespace keep the order they were given
    in, and that order decides which duplicate wins.
    """

    def __init__(self, roots: _typing.Iterable[SearchRoot] = ()) -> None:
        self._roots: tuple[SearchRoot, ...] = tuple(
            sorted(roots, key=lambda r: r.namespace.precedence)
        )

    @classmethod
    def from_mapping(
        cls,
        mapping: _typing.Mapping[Namespace | str, _typing.Iterable[str | _pathlib.PurePath]],
    ) -> SearchRoots:
        """
        Build search roots from a namespace -> directories mapping.

        Args:
            mapping: Namespace (or its name) to directories, in scan order.

        Returns:
            SearchRoots ordered by precedence.

        Raises:
            ValueError: If a namespace name is unknown.
        """
        roots: list[SearchRoot] = []
        for key, directories in mapping.items():
            if isinstance(key, Namespace):
                namespace = key
            else:
                parsed = Namespace.parse(key)
                if parsed is None:
                    raise ValueError(f"Unknown skill namespace: {key}")
                namespace = parsed
            for directory in directories:
                path = directory if isinstance(directory, _pathlib.PurePath) else _pathlib.Path(directory)
                roots.append(SearchRoot(namespace, path))
        return cls(roots)

    def for_namespace(self, namespace: Namespace) -> list[SearchRoot]:
        """Roots belonging to one namespace, in scan order."""
        return [r for r in self._roots if r.namespace is namespace]

    @_typing.overload
    def __getitem__(self, index: int) -> SearchRoot: ...

    @_typing.overload
    def __getitem__(self, index: slice) -> _typing.Sequence[SearchRoot]: ...

    def __getitem__(
        self, index: int | slice
    ) -> SearchRoot | _typing.Sequence[SearchRoot]:
        return self._roots[index]

    def __len__(self) -> int:
        return len(self._roots)

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, SearchRoots):
            return NotImplemented
        return self._roots == other._roots

    def __hash__(self) -> int:
        return hash(self._roots)

    def __repr__(self) -> str:
        return f"SearchRoots({list(self._roots)!r})"

    def to_list(self) -> list[dict[str, str]]:
        """Convert to a list of dicts for JSON serialization."""
        return [r.to_dict() for r in self._roots]


def get_personal_skills_path() -> _pathlib.Path:
    """Get the path to the personal skills directory."""
    return _pathlib.Path(constants.DEFAULT_PERSONAL_SKILLS_DIR).expanduser()


def get_project_skills_path(project_root: _pathlib.Path) -> _pathlib.Path:
    """Get the path to the project skills directory."""
    return project_root / constants.DEFAULT_PROJECT_SKILLS_DIR


def get_env_skill_paths() -> list[_pathlib.Path]:
    """Extra personal skill directories from $PANDA_SKILL_PATH."""
    paths: list[_pathlib.Path] = []
    env_path = _os.environ.get(constants.ENV_SKILL_PATH, "")
    for p in env_path.split(":"):
        p = p.strip()
        if p:
            paths.append(_pathlib.Path(p).expanduser().resolve())
    return paths


def get_default_search_roots(
    project_root: _pathlib.Path | None = None,
    *,
    project_skills_dir: _pathlib.Path | None = None,
    personal_skills_dir: _pathlib.Path | None = None,
    panda_skills_dir: _pathlib.Path | None = None,
) -> SearchRoots:
    """
    Build the standard search roots.

    Args:
        project_root: Project root directory. If None, the project
                      namespace has no roots.
        project_skills_dir: Override for the project skills directory.
        personal_skills_dir: Override for the personal skills directory.
        panda_skills_dir: Override for the bundled skills directory.

    Returns:
        SearchRoots in precedence order.
    """
    roots: list[SearchRoot] = []

    if project_skills_dir is not None:
        roots.append(SearchRoot(Namespace.PROJECT, project_skills_dir))
    elif project_root is not None:
        roots.append(SearchRoot(Namespace.PROJECT, get_project_skills_path(project_root)))

    roots.append(
        SearchRoot(Namespace.PERSONAL, personal_skills_dir or get_personal_skills_path())
    )
    for env_path in get_env_skill_paths():
        roots.append(SearchRoot(Namespace.PERSONAL, env_path))

    roots.append(
        SearchRoot(
            Namespace.PANDA,
            panda_skills_dir or builtin_skills.get_builtin_skills_path(),
        )
    )

    return SearchRoots(roots)
