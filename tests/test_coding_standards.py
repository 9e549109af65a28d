"""
Tests that enforce coding standards.

These tests verify that the codebase follows our import and logging
conventions, and that the skills bundled with panda are well formed.
"""

import pathlib as _pathlib
import re as _re

import pytest as _pytest

import panda.builtin_skills as builtin_skills
import panda.skills as skills

# Directories to check
SRC_DIR = _pathlib.Path(__file__).parent.parent / "src" / "panda"
TESTS_DIR = _pathlib.Path(__file__).parent.parent / "tests"

# Only the CLI talks to the terminal directly
_PRINT_ALLOWED = {SRC_DIR / "cli" / "main.py"}

_PRINT_RE = _re.compile(r"^\s*print\(", _re.MULTILINE)
_LOGGER_RE = _re.compile(r"^_logger = _logging\.getLogger\((.*)\)$", _re.MULTILINE)


def _get_python_files(directory: _pathlib.Path) -> list[_pathlib.Path]:
    """Get all Python files in a directory, recursively."""
    return sorted(directory.rglob("*.py"))


def _extract_from_imports(content: str) -> list[tuple[int, str]]:
    """
    Extract 'from X import Y' statements from file content.

    Returns list of (line_number, line_content) tuples.
    Excludes:
    - 'from __future__ import' (allowed)
    - Lines inside TYPE_CHECKING blocks (allowed)
    """
    imports: list[tuple[int, str]] = []
    in_type_checking = False

    for i, line in enumerate(content.split("\n"), start=1):
        stripped = line.strip()

        if stripped in ("if TYPE_CHECKING:", "if _typing.TYPE_CHECKING:"):
            in_type_checking = True
            continue

        # Block ends at the next non-indented statement
        if in_type_checking and stripped and not stripped.startswith("#") and line[0] not in " \t":
            in_type_checking = False

        if in_type_checking:
            continue

        if stripped.startswith("from ") and " import " in stripped:
            if stripped.startswith("from __future__ import"):
                continue
            imports.append((i, stripped))

    return imports


def _import_violations(paths: list[_pathlib.Path]) -> list[str]:
    violations: list[str] = []
    for path in paths:
        # __init__.py re-exports are allowed
        if path.name == "__init__.py":
            continue
        for line_num, line in _extract_from_imports(path.read_text(encoding="utf-8")):
            violations.append(f"{path}:{line_num}: {line}")
    return violations


class TestImportStyle:
    """Tests for import style compliance."""

    def test_src_no_from_imports(self) -> None:
        """Source files should not use 'from X import Y' pattern."""
        violations = _import_violations(_get_python_files(SRC_DIR))
        if violations:
            _pytest.fail(
                "Found forbidden 'from X import Y' imports:\n"
                + "\n".join(f"  {v}" for v in violations)
                + "\n\nUse 'import X as _x' (external) or 'import X as x' (internal) instead."
            )

    def test_tests_no_from_imports(self) -> None:
        """Test files should not use 'from X import Y' pattern."""
        paths = [
            p for p in _get_python_files(TESTS_DIR) if p.name != "test_coding_standards.py"
        ]
        violations = _import_violations(paths)
        if violations:
            _pytest.fail(
                "Found forbidden 'from X import Y' imports:\n"
                + "\n".join(f"  {v}" for v in violations)
            )


class TestLoggingStyle:
    """Library code logs through module loggers and never prints."""

    def test_no_print_outside_cli(self) -> None:
        offenders = [
            str(path)
            for path in _get_python_files(SRC_DIR)
            if path not in _PRINT_ALLOWED and _PRINT_RE.search(path.read_text(encoding="utf-8"))
        ]
        assert offenders == []

    def test_module_loggers_use_module_name(self) -> None:
        for path in _get_python_files(SRC_DIR):
            for match in _LOGGER_RE.finditer(path.read_text(encoding="utf-8")):
                assert match.group(1) == "__name__", f"{path}: logger named {match.group(1)}"


class TestImportExtraction:
    """Tests for the import extraction logic itself."""

    def test_detects_from_import(self) -> None:
        imports = _extract_from_imports("from pathlib import Path")
        assert imports == [(1, "from pathlib import Path")]

    def test_allows_future_imports(self) -> None:
        assert _extract_from_imports("from __future__ import annotations") == []

    def test_ignores_type_checking_block(self) -> None:
        content = """
import typing as _typing

if _typing.TYPE_CHECKING:
    from some_module import SomeType

from forbidden import Other
"""
        imports = _extract_from_imports(content)
        assert [line for _, line in imports] == ["from forbidden import Other"]


class TestBuiltinSkills:
    """Every bundled skill must load cleanly."""

    @_pytest.mark.parametrize(
        "skill_dir",
        sorted(p.parent for p in builtin_skills.get_builtin_skills_path().glob("*/SKILL.md")),
        ids=lambda p: p.name,
    )
    def test_builtin_skill_is_valid(self, skill_dir: _pathlib.Path) -> None:
        skill = skills.load_skill(skill_dir, skills.Namespace.PANDA)

        assert skill.name == skill_dir.name
        assert skill.description
        assert not skill.exceeds_soft_limit
