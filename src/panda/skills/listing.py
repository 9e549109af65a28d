"""
Directory listers used by skill discovery.

Discovery never touches the filesystem directly. It goes through a
DirectoryLister so that tests (and embedders) can serve skills from
memory instead of real files.
"""

from __future__ import annotations

import pathlib as _pathlib
import typing as _typing


@_typing.runtime_checkable
class DirectoryLister(_typing.Protocol):
    """Read-only view of a directory tree."""

    def is_dir(self, path: _pathlib.PurePath) -> bool:
        """Whether path is an existing directory."""
        ...

    def is_file(self, path: _pathlib.PurePath) -> bool:
        """Whether path is an existing file."""
        ...

    def list_subdirectories(self, path: _pathlib.PurePath) -> list[_pathlib.PurePath]:
        """Immediate subdirectories of path, sorted by name."""
        ...

    def read_text(self, path: _pathlib.PurePath) -> str:
        """
        Read a file as UTF-8 text.

        Raises:
            FileNotFoundError: If the file does not exist.
            OSError: If the file cannot be read.
        """
        ...


class FilesystemLister:
    """DirectoryLister backed by the real filesystem."""

    def is_dir(self, path: _pathlib.PurePath) -> bool:
        return _pathlib.Path(path).is_dir()

    def is_file(self, path: _pathlib.PurePath) -> bool:
        return _pathlib.Path(path).is_file()

    def list_subdirectories(self, path: _pathlib.PurePath) -> list[_pathlib.PurePath]:
        directory = _pathlib.Path(path)
        if not directory.is_dir():
            return []
        return sorted(p for p in directory.iterdir() if p.is_dir())

    def read_text(self, path: _pathlib.PurePath) -> str:
        return _pathlib.Path(path).read_text(encoding="utf-8")


class MemoryLister:
    """
    DirectoryLister serving files from a dict.

    Directories exist implicitly as the parents of the given files.

    Usage:
        lister = MemoryLister({
            "/skills/panda/brainstorming/SKILL.md": "---\\nname: brainstorming\\n---\\n",
        })
    """

    def __init__(
        self,
        files: _typing.Mapping[str | _pathlib.PurePath, str] | None = None,
    ) -> None:
        self._files: dict[_pathlib.PurePosixPath, str] = {}
        self._dirs: set[_pathlib.PurePosixPath] = set()
        for path, content in (files or {}).items():
            self.add_file(path, content)

    @staticmethod
    def _key(path: str | _pathlib.PurePath) -> _pathlib.PurePosixPath:
        return _pathlib.PurePosixPath(str(path))

    def add_file(self, path: str | _pathlib.PurePath, content: str) -> None:
        """Add or replace a file, creating its parent directories."""
        key = self._key(path)
        self._files[key] = content
        self._dirs.update(key.parents)

    def is_dir(self, path: _pathlib.PurePath) -> bool:
        return self._key(path) in self._dirs

    def is_file(self, path: _pathlib.PurePath) -> bool:
        return self._key(path) in self._files

    def list_subdirectories(self, path: _pathlib.PurePath) -> list[_pathlib.PurePath]:
        parent = self._key(path)
        return sorted(d for d in self._dirs if d.parent == parent and d != parent)

    def read_text(self, path: _pathlib.PurePath) -> str:
        try:
            return self._files[self._key(path)]
        except KeyError:
            raise FileNotFoundError(f"No such file: {path}") from None
