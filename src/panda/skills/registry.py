"""
Skill registry: enumerates skills under the configured search roots.

Roots are scanned in precedence order (project, personal, panda); each
immediate subdirectory holding a SKILL.md file is one candidate skill.
Nothing is cached: every call rescans through the DirectoryLister.
"""

from __future__ import annotations

import logging as _logging
import pathlib as _pathlib
import typing as _typing

import panda.constants as constants
import panda.skills.errors as errors
import panda.skills.listing as listing
import panda.skills.roots as roots
import panda.skills.skill as skill_module

_logger = _logging.getLogger(__name__)

DuplicatePolicy = _typing.Literal["first", "error"]
"""How to treat two skills with the same name in one namespace."""


class SkillRegistry:
    """
    Discovers skills from a set of search roots.

    A missing root directory counts as empty. A broken skill is logged
    and skipped; it never stops discovery of the others.
    """

    def __init__(
        self,
        search_roots: roots.SearchRoots,
        *,
        lister: listing.DirectoryLister | None = None,
        skill_file: str = constants.SKILL_FILE_NAME,
        on_duplicate: DuplicatePolicy = "first",
    ) -> None:
        """
        Initialize the skill registry.

        Args:
            search_roots: Roots to scan, in precedence order.
            lister: Filesystem view to scan through (default: real filesystem).
            skill_file: Name of the file that marks a skill directory.
            on_duplicate: "first" keeps the first skill discovered when a
                namespace defines a name twice; "error" raises
                DuplicateSkillError instead.
        """
        self._roots = search_roots
        self._lister = lister or listing.FilesystemLister()
        self._skill_file = skill_file
        self._on_duplicate = on_duplicate

    @property
    def roots(self) -> roots.SearchRoots:
        """The search roots in use."""
        return self._roots

    @property
    def lister(self) -> listing.DirectoryLister:
        """The filesystem view in use."""
        return self._lister

    def _roots_for(self, namespace: roots.Namespace | None) -> list[roots.SearchRoot]:
        if namespace is None:
            return list(self._roots)
        return self._roots.for_namespace(namespace)

    def discover_all(
        self,
        *,
        include_errors: bool = False,
        namespace: roots.Namespace | None = None,
    ) -> _typing.Iterator[skill_module.Skill | tuple[_pathlib.PurePath, Exception]]:
        """
        Discover all skills, optionally including errors.

        This is an iterator that yields skills as they're discovered,
        and optionally yields (path, exception) tuples for invalid skills.

        Args:
            include_errors: If True, yield (path, exception) for failures.
            namespace: Only scan roots of this namespace.

        Yields:
            Skill instances, or (path, exception) tuples if include_errors.
        """
        for search_root in self._roots_for(namespace):
            if not self._lister.is_dir(search_root.path):
                _logger.debug(
                    "Skipping missing %s skill root: %s",
                    search_root.namespace.value,
                    search_root.path,
                )
                continue

            for skill_dir in self._lister.list_subdirectories(search_root.path):
                skill_file = skill_dir / self._skill_file
                if not self._lister.is_file(skill_file):
                    continue

                try:
                    skill = skill_module.load_skill(
                        skill_file,
                        search_root.namespace,
                        lister=self._lister,
                        skill_file=self._skill_file,
                    )
                except (errors.MalformedSkillError, OSError) as e:
                    if include_errors:
                        yield (skill_file, e)
                    continue
                yield skill

    def list_skills(
        self,
        namespace: roots.Namespace | None = None,
    ) -> _typing.Iterator[skill_module.Skill]:
        """
        List every discoverable skill, in precedence and scan order.

        Each call returns a fresh iterator that rescans the roots.
        Skills shadowed by a higher namespace are included; use
        SkillResolver for effective definitions.

        Args:
            namespace: Only list skills of this namespace.

        Yields:
            Skill instances.
        """
        for result in self.discover_all(include_errors=True, namespace=namespace):
            if isinstance(result, tuple):
                path, error = result
                _logger.warning("Skipping invalid skill %s: %s", path, error)
                continue
            yield result

    def scan(
        self,
        namespace: roots.Namespace | None = None,
    ) -> tuple[list[skill_module.Skill], list[tuple[_pathlib.PurePath, Exception]]]:
        """
        Scan the roots once, splitting valid skills from broken ones.

        Each broken skill is logged once.

        Returns:
            Tuple of (skills, [(path, exception), ...]).
        """
        found: list[skill_module.Skill] = []
        failures: list[tuple[_pathlib.PurePath, Exception]] = []
        for result in self.discover_all(include_errors=True, namespace=namespace):
            if isinstance(result, tuple):
                _logger.warning("Skipping invalid skill %s: %s", *result)
                failures.append(result)
            else:
                found.append(result)
        return found, failures

    def index(
        self,
        namespace: roots.Namespace | None = None,
        *,
        skills: _typing.Iterable[skill_module.Skill] | None = None,
    ) -> dict[roots.Namespace, dict[str, skill_module.Skill]]:
        """
        Map each namespace to its skills by name.

        Within a namespace the first skill discovered wins (roots in the
        order given, directories sorted by name).

        Args:
            namespace: Only index this namespace. Other namespaces are
                present with empty dicts.
            skills: Already scanned skills to index instead of rescanning.

        Returns:
            Dict of namespace -> (name -> Skill), for every namespace.

        Raises:
            DuplicateSkillError: If on_duplicate is "error" and a
                namespace defines a name twice.
        """
        result: dict[roots.Namespace, dict[str, skill_module.Skill]] = {
            ns: {} for ns in roots.Namespace.by_precedence()
        }

        if skills is None:
            skills = self.list_skills(namespace)

        for skill in skills:
            bucket = result[skill.namespace]
            existing = bucket.get(skill.name)
            if existing is None:
                bucket[skill.name] = skill
                continue

            if self._on_duplicate == "error":
                raise errors.DuplicateSkillError(
                    skill.name,
                    skill.namespace,
                    [existing.source_path, skill.source_path],
                )
            _logger.warning(
                "Duplicate %s skill '%s': using %s, ignoring %s",
                skill.namespace.value,
                skill.name,
                existing.source_path,
                skill.source_path,
            )

        return result

    def read_source(self, skill: skill_module.Skill) -> str:
        """Read the raw SKILL.md text of a skill, frontmatter included."""
        return self._lister.read_text(skill.source_path)

    def to_dict(self) -> dict[str, _typing.Any]:
        """Convert to dictionary for JSON serialization."""
        return {
            "roots": [
                {**r.to_dict(), "exists": self._lister.is_dir(r.path)}
                for r in self._roots
            ],
            "skills": [s.to_dict() for s in self.list_skills()],
        }
