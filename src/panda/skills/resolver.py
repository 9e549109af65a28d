"""
Skill resolution.

Maps a requested identifier to the one skill that answers it:

- ``panda:brainstorming`` looks only in the panda namespace.
- ``brainstorming`` tries project, then personal, then panda and
  returns the first match.
"""

from __future__ import annotations

import dataclasses as _dataclasses
import typing as _typing

import panda.skills.errors as errors
import panda.skills.registry as registry_module
import panda.skills.roots as roots
import panda.skills.skill as skill_module


@_dataclasses.dataclass(frozen=True)
class SkillIdentifier:
    """A parsed ``[namespace:]name`` identifier."""

    name: str
    namespace: roots.Namespace | None = None

    def __str__(self) -> str:
        if self.namespace is None:
            return self.name
        return f"{self.namespace.value}:{self.name}"


def parse_identifier(identifier: str) -> SkillIdentifier:
    """
    Parse a skill identifier.

    Surrounding whitespace is ignored and names are matched lowercase.

    Args:
        identifier: ``name`` or ``namespace:name``.

    Returns:
        Parsed identifier.

    Raises:
        InvalidSkillIdentifierError: If the name is empty or the
            namespace is not one of project, personal, panda.
    """
    text = identifier.strip().lower()
    if ":" not in text:
        if not text:
            raise errors.InvalidSkillIdentifierError(identifier, "empty skill name")
        return SkillIdentifier(text)

    prefix, name = (part.strip() for part in text.split(":", 1))
    namespace = roots.Namespace.parse(prefix)
    if namespace is None:
        expected = ", ".join(ns.value for ns in roots.Namespace.by_precedence())
        raise errors.InvalidSkillIdentifierError(
            identifier, f"unknown namespace '{prefix}' (expected one of: {expected})"
        )
    if not name:
        raise errors.InvalidSkillIdentifierError(identifier, "empty skill name")
    return SkillIdentifier(name, namespace)


class SkillResolver:
    """
    Resolves skill identifiers against a registry.

    Stateless: every call reads the current state of the search roots.
    """

    def __init__(self, registry: registry_module.SkillRegistry) -> None:
        self._registry = registry

    @property
    def registry(self) -> registry_module.SkillRegistry:
        """The underlying registry."""
        return self._registry

    def _lookup(self, namespace: roots.Namespace, name: str) -> skill_module.Skill | None:
        return self._registry.index(namespace)[namespace].get(name)

    def _available_names(self, namespace: roots.Namespace | None = None) -> list[str]:
        return sorted({s.name for s in self._registry.list_skills(namespace)})

    def resolve(self, identifier: str) -> skill_module.Skill:
        """
        Resolve an identifier to its effective skill.

        Args:
            identifier: ``name`` or ``namespace:name``.

        Returns:
            The matching Skill.

        Raises:
            InvalidSkillIdentifierError: If the identifier is malformed.
            SkillNotFoundError: If no namespace (or not the requested
                one) defines the skill.
            DuplicateSkillError: If the registry rejects duplicates and
                the searched namespace defines the name twice.
        """
        parsed = parse_identifier(identifier)

        if parsed.namespace is not None:
            skill = self._lookup(parsed.namespace, parsed.name)
            if skill is None:
                raise errors.SkillNotFoundError(
                    str(parsed),
                    namespace=parsed.namespace,
                    available=self._available_names(parsed.namespace),
                )
            return skill

        for namespace in roots.Namespace.by_precedence():
            skill = self._lookup(namespace, parsed.name)
            if skill is not None:
                return skill

        raise errors.SkillNotFoundError(str(parsed), available=self._available_names())

    def find(self, identifier: str) -> skill_module.Skill | None:
        """Like resolve, but returns None when the skill doesn't exist."""
        try:
            return self.resolve(identifier)
        except errors.SkillNotFoundError:
            return None

    def has_skill(self, identifier: str) -> bool:
        """Check if an identifier resolves."""
        return self.find(identifier) is not None

    def effective_and_shadowed(
        self,
        skills: _typing.Iterable[skill_module.Skill] | None = None,
    ) -> tuple[list[skill_module.Skill], list[tuple[skill_module.Skill, skill_module.Skill]]]:
        """
        Effective skills and shadowed pairs from a single scan.

        Args:
            skills: Already scanned skills (from SkillRegistry.scan) to
                use instead of rescanning the roots.

        Returns:
            Tuple of (effective skills sorted by name, (winner, hidden)
            pairs sorted by name then namespace).
        """
        effective: dict[str, skill_module.Skill] = {}
        hidden: list[tuple[skill_module.Skill, skill_module.Skill]] = []
        index = self._registry.index(skills=skills)
        for namespace in roots.Namespace.by_precedence():
            for name, skill in index[namespace].items():
                winner = effective.get(name)
                if winner is None:
                    effective[name] = skill
                else:
                    hidden.append((winner, skill))
        return (
            sorted(effective.values(), key=lambda s: s.name),
            sorted(hidden, key=lambda pair: (pair[1].name, pair[1].namespace.precedence)),
        )

    def effective_skills(self) -> list[skill_module.Skill]:
        """
        One skill per name: the one a bare-name resolve returns.

        Returns:
            Skills sorted by name.
        """
        effective, _ = self.effective_and_shadowed()
        return effective

    def shadowed(self) -> list[tuple[skill_module.Skill, skill_module.Skill]]:
        """
        Skills hidden by a higher-precedence namespace.

        Returns:
            (winner, hidden) pairs, sorted by name then namespace.
        """
        _, hidden = self.effective_and_shadowed()
        return hidden

    def find_matching(
        self,
        text: str,
        *,
        max_results: int = 3,
    ) -> list[skill_module.Skill]:
        """
        Find skills that might match a request.

        This is simple keyword matching against skill names and
        descriptions.

        Args:
            text: User's message or request.
            max_results: Maximum number of skills to return.

        Returns:
            Matching effective skills, best match first.
        """
        text_lower = text.lower()
        matches: list[tuple[skill_module.Skill, int]] = []

        for skill in self.effective_skills():
            score = 0

            if skill.name in text_lower or skill.name.replace("-", " ") in text_lower:
                score += 10

            for word in skill.description.lower().split():
                if len(word) > 3 and word in text_lower:
                    score += 1

            if score > 0:
                matches.append((skill, score))

        # Stable sort keeps name order among equal scores
        matches.sort(key=lambda x: x[1], reverse=True)
        return [skill for skill, _ in matches[:max_results]]

    def get_metadata_for_prompt(self) -> str:
        """
        Summaries of all effective skills for a system prompt.

        Returns:
            Formatted skill list, or "" when there are no skills.
        """
        skills = self.effective_skills()
        if not skills:
            return ""

        lines = ["## Available Skills", ""]
        for skill in skills:
            lines.append(skill.get_metadata_for_prompt())
        return "\n".join(lines)

    def to_dict(self) -> dict[str, _typing.Any]:
        """Convert to dictionary for JSON serialization."""
        effective, shadowed = self.effective_and_shadowed()
        return {
            "roots": self._registry.roots.to_list(),
            "skills": [s.to_dict() for s in effective],
            "shadowed": [
                {"name": hidden.name, "winner": winner.qualified_name, "hidden": hidden.qualified_name}
                for winner, hidden in shadowed
            ],
        }
