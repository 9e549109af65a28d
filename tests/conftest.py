"""
Shared pytest fixtures for Panda tests.

This file is automatically loaded by pytest. Fixtures defined here are
available to all test files without explicit imports.
"""

import os as _os
import pathlib as _pathlib
import typing as _typing

import click.testing as _click_testing
import pytest as _pytest

import panda.skills as skills

# Environment variables that would leak the developer's setup into tests
ENV_PREFIXES_TO_CLEAR = ("PANDA_",)
ENV_KEYS_TO_CLEAR = {"NO_COLOR"}

SCENARIO_ROOT = _pathlib.PurePosixPath("/skills")


# =============================================================================
# Environment Isolation
# =============================================================================


@_pytest.fixture(autouse=True)
def isolated_env(
    monkeypatch: _pytest.MonkeyPatch,
    tmp_path_factory: _pytest.TempPathFactory,
) -> _pathlib.Path:
    """
    Isolate every test from PANDA_* variables and the real home directory.

    HOME points at an empty temporary directory, so ~/.claude/skills and
    ~/.config/panda never touch the developer's files.

    Returns:
        The temporary home directory.
    """
    for key in list(_os.environ):
        if key.startswith(ENV_PREFIXES_TO_CLEAR) or key in ENV_KEYS_TO_CLEAR:
            monkeypatch.delenv(key, raising=False)

    home = tmp_path_factory.mktemp("home")
    monkeypatch.setenv("HOME", str(home))
    return home


@_pytest.fixture
def home_dir(isolated_env: _pathlib.Path) -> _pathlib.Path:
    """The temporary home directory used by this test."""
    return isolated_env


# =============================================================================
# Skill Builders
# =============================================================================


def skill_markdown(
    name: str,
    description: str = "Test skill",
    body: str | None = None,
) -> str:
    """Render a minimal SKILL.md."""
    if body is None:
        body = f"# {name}\n\nInstructions for {name}."
    return f"---\nname: {name}\ndescription: {description}\n---\n\n{body}\n"


@_pytest.fixture
def skill_md() -> _typing.Callable[..., str]:
    """Factory rendering SKILL.md content: skill_md(name, description, body)."""
    return skill_markdown


@_pytest.fixture
def write_skill() -> _typing.Callable[..., _pathlib.Path]:
    """
    Factory writing a skill directory to disk.

    Usage:
        def test_something(tmp_path, write_skill):
            write_skill(tmp_path / "skills", "debugging", "Debug things")

    Returns the skill directory.
    """

    def _write(
        root: _pathlib.Path,
        name: str,
        description: str = "Test skill",
        *,
        body: str | None = None,
        dir_name: str | None = None,
        content: str | None = None,
    ) -> _pathlib.Path:
        skill_dir = root / (dir_name or name)
        skill_dir.mkdir(parents=True, exist_ok=True)
        if content is None:
            content = skill_markdown(name, description, body)
        (skill_dir / "SKILL.md").write_text(content, encoding="utf-8")
        return skill_dir

    return _write


# =============================================================================
# In-Memory Scenario
# =============================================================================


@_pytest.fixture
def scenario_roots() -> skills.SearchRoots:
    """One root per namespace under /skills."""
    return skills.SearchRoots.from_mapping(
        {
            "project": [SCENARIO_ROOT / "project"],
            "personal": [SCENARIO_ROOT / "personal"],
            "panda": [SCENARIO_ROOT / "panda"],
        }
    )


@_pytest.fixture
def scenario_lister() -> skills.MemoryLister:
    """
    project: (empty), personal: brainstorming, panda: brainstorming + create-pr.

    The project root exists but holds no skills.
    """
    lister = skills.MemoryLister(
        {
            SCENARIO_ROOT / "personal/brainstorming/SKILL.md": skill_markdown(
                "brainstorming", "My own way of brainstorming"
            ),
            SCENARIO_ROOT / "panda/brainstorming/SKILL.md": skill_markdown(
                "brainstorming", "Refine rough ideas into designs"
            ),
            SCENARIO_ROOT / "panda/create-pr/SKILL.md": skill_markdown(
                "create-pr", "Open a pull request for finished work"
            ),
        }
    )
    lister.add_file(SCENARIO_ROOT / "project/README.md", "No skills here yet.\n")
    return lister


@_pytest.fixture
def scenario_resolver(
    scenario_roots: skills.SearchRoots,
    scenario_lister: skills.MemoryLister,
) -> skills.SkillResolver:
    """Resolver over the in-memory scenario."""
    return skills.SkillResolver(skills.SkillRegistry(scenario_roots, lister=scenario_lister))


# =============================================================================
# CLI Test Fixtures
# =============================================================================


@_pytest.fixture
def cli_runner() -> _click_testing.CliRunner:
    """CLI runner for end-to-end tests."""
    return _click_testing.CliRunner()
