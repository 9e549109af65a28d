"""
Settings configuration using pydantic-settings.

Loads configuration from:
1. Constructor arguments (highest precedence)
2. Environment variables with PANDA_ prefix
3. .env file (if PANDA_ENV_FILE points at one)
4. Layered YAML config files:
   - Project config: .panda/config.yaml (highest)
   - User config: ~/.config/panda/config.yaml

Nested config uses double underscore delimiter:
  PANDA_SKILLS__PERSONAL_DIR=~/my-skills
  PANDA_LOGGING__LEVEL=DEBUG
"""

import logging as _logging
import os as _os
import pathlib as _pathlib
import subprocess as _subprocess
import typing as _typing

import pydantic as _pydantic
import pydantic_settings as _pydantic_settings

import panda.config.sources as sources
import panda.config.types as types
import panda.skills as skills_module

_logger = _logging.getLogger(__name__)

ENV_PROJECT_DIR = "PANDA_PROJECT_DIR"


def _get_env_file() -> str | None:
    """Determine which .env file to load.

    Only PANDA_ENV_FILE is honoured; without it no .env is read and
    configuration comes from the environment and YAML files.
    """
    if env_file := _os.environ.get("PANDA_ENV_FILE"):
        if _pathlib.Path(env_file).exists():
            return env_file
    return None


class ProjectRootTooWideError(Exception):
    """Raised when project root would be an overly broad directory like ~ or /."""

    pass


def find_git_root(start_path: _pathlib.Path | None = None) -> _pathlib.Path | None:
    """Find the git repository root from the given path or current directory."""
    if start_path is None:
        start_path = _pathlib.Path.cwd()

    try:
        result = _subprocess.run(
            ["git", "rev-parse", "--show-toplevel"],
            capture_output=True,
            text=True,
            cwd=start_path,
            timeout=5,
        )
        if result.returncode == 0:
            return _pathlib.Path(result.stdout.strip())
    except (_subprocess.TimeoutExpired, FileNotFoundError, OSError):
        pass
    return None


def _is_overly_wide_root(path: _pathlib.Path) -> bool:
    """Check if a path is too broad to be a safe project root."""
    resolved = path.resolve()
    home = _pathlib.Path.home().resolve()
    root = _pathlib.Path("/").resolve()
    return resolved in (home, root)


def _check_project_root(path: _pathlib.Path) -> None:
    if _is_overly_wide_root(path):
        raise ProjectRootTooWideError(
            f"Project root '{path}' is too broad for project skills.\n"
            f"Navigate to a specific project directory, or set "
            f"PANDA_ALLOW_HOME_DIRECTORY=true to override."
        )


def find_project_root(
    start_path: _pathlib.Path | None = None,
    *,
    allow_wide_root: bool = False,
) -> _pathlib.Path:
    """
    Find the project root directory.

    Tries (in order):
    1. Git repository root
    2. Directory containing pyproject.toml, setup.py, setup.cfg or .git
    3. Current working directory

    Args:
        start_path: Starting path for search. Defaults to cwd.
        allow_wide_root: If False, raises ProjectRootTooWideError if
            the detected root is ~ or /. Defaults to False.

    Raises:
        ProjectRootTooWideError: If root would be too broad and
            allow_wide_root is False.
    """
    if start_path is None:
        start_path = _pathlib.Path.cwd()

    result: _pathlib.Path | None = find_git_root(start_path)

    if result is None:
        current = start_path.resolve()
        markers = ["pyproject.toml", "setup.py", "setup.cfg", ".git"]

        while current != current.parent:
            if any((current / marker).exists() for marker in markers):
                result = current
                break
            current = current.parent

    if result is None:
        result = start_path.resolve()

    if not allow_wide_root:
        _check_project_root(result)

    return result


class Settings(_pydantic_settings.BaseSettings):
    """
    Panda configuration settings.

    All settings can be overridden via environment variables with PANDA_ prefix.
    For nested config, use double underscore: PANDA_SKILLS__ON_DUPLICATE=error

    Config precedence (highest to lowest):
    1. Constructor arguments
    2. Environment variables (PANDA_*)
    3. .env file
    4. Project config (.panda/config.yaml)
    5. User config (~/.config/panda/config.yaml)
    6. Built-in defaults
    """

    model_config = _pydantic_settings.SettingsConfigDict(
        env_prefix="PANDA_",
        env_file=_get_env_file(),
        env_file_encoding="utf-8",
        env_nested_delimiter="__",
        extra="allow",  # Preserve unknown fields for strict validation mode
    )

    @classmethod
    def settings_customise_sources(
        cls,
        settings_cls: type[_pydantic_settings.BaseSettings],
        init_settings: _pydantic_settings.PydanticBaseSettingsSource,
        env_settings: _pydantic_settings.PydanticBaseSettingsSource,
        dotenv_settings: _pydantic_settings.PydanticBaseSettingsSource,
        file_secret_settings: _pydantic_settings.PydanticBaseSettingsSource,
    ) -> tuple[_pydantic_settings.PydanticBaseSettingsSource, ...]:
        """
        Configure settings sources with precedence:
        1. init_settings (constructor args) — highest
        2. env_settings (PANDA_* env vars)
        3. dotenv_settings (.env file)
        4. yaml_settings (project and user config.yaml)
        5. (defaults via Field definitions) — lowest
        """
        init_kwargs: dict[str, _typing.Any] = getattr(init_settings, "init_kwargs", {})
        project_dir = init_kwargs.get("project_dir") or _os.environ.get(ENV_PROJECT_DIR)
        if project_dir:
            project_root = _pathlib.Path(project_dir).expanduser().resolve()
        else:
            project_root = find_project_root(allow_wide_root=True)

        return (
            init_settings,
            env_settings,
            dotenv_settings,
            sources.YamlLayersSettingsSource(settings_cls, project_root),
            file_secret_settings,
        )

    @classmethod
    def construct_without_dotenv(cls, **kwargs: _typing.Any) -> "Settings":
        """Create Settings from environment variables only, without loading .env file.

        Useful for test isolation and for reproducing issues without
        .env interference.
        """
        return cls(_env_file=None, **kwargs)  # type: ignore[call-arg]

    # =========================================================================
    # Nested config sections
    # =========================================================================

    skills: types.SkillsConfig = _pydantic.Field(default_factory=types.SkillsConfig)
    """Skill discovery settings."""

    hooks: types.HooksConfig = _pydantic.Field(default_factory=types.HooksConfig)
    """Session hook settings."""

    logging: types.LoggingConfig = _pydantic.Field(default_factory=types.LoggingConfig)
    """Logging settings."""

    # =========================================================================
    # Flat fields
    # =========================================================================

    project_dir: str | None = _pydantic.Field(
        default=None,
        description="Explicit project root (skips git/marker detection)",
    )

    allow_home_directory: bool = _pydantic.Field(
        default=False,
        description="Allow ~ or / as the project root",
    )

    # =========================================================================
    # Directory settings (computed at runtime)
    # =========================================================================

    @property
    def config_dir(self) -> _pathlib.Path:
        """User configuration directory (~/.config/panda/)."""
        return sources.get_user_config_dir()

    @property
    def project_root(self) -> _pathlib.Path:
        """Project root directory (explicit, git root, or cwd)."""
        if self.project_dir:
            root = _pathlib.Path(self.project_dir).expanduser().resolve()
            if not self.allow_home_directory:
                _check_project_root(root)
            return root
        return find_project_root(allow_wide_root=self.allow_home_directory)

    def get_project_root_or_none(self) -> _pathlib.Path | None:
        """Project root, or None when it would be ~ or /."""
        try:
            return self.project_root
        except ProjectRootTooWideError as e:
            _logger.debug("No project root: %s", e)
            return None

    @property
    def legacy_skills_dir(self) -> _pathlib.Path:
        """Retired skills directory checked by the session start hook."""
        return _pathlib.Path(self.hooks.legacy_skills_dir).expanduser()

    # =========================================================================
    # Skill helpers
    # =========================================================================

    def get_search_roots(self) -> skills_module.SearchRoots:
        """
        Build skill search roots from this configuration.

        The project namespace is left out when the project root is too
        broad (~ or /), since its skills directory would then be the
        personal one.
        """
        project_root = self.get_project_root_or_none()

        project_skills_dir = None
        if project_root is not None:
            project_skills_dir = project_root / _pathlib.Path(self.skills.project_dir).expanduser()

        panda_skills_dir = None
        if self.skills.panda_dir:
            panda_skills_dir = _pathlib.Path(self.skills.panda_dir).expanduser()

        return skills_module.get_default_search_roots(
            project_root,
            project_skills_dir=project_skills_dir,
            personal_skills_dir=_pathlib.Path(self.skills.personal_dir).expanduser(),
            panda_skills_dir=panda_skills_dir,
        )

    def create_registry(
        self,
        lister: skills_module.DirectoryLister | None = None,
    ) -> skills_module.SkillRegistry:
        """Create a SkillRegistry over the configured search roots."""
        return skills_module.SkillRegistry(
            self.get_search_roots(),
            lister=lister,
            skill_file=self.skills.skill_file,
            on_duplicate=self.skills.on_duplicate,
        )

    def create_resolver(
        self,
        lister: skills_module.DirectoryLister | None = None,
    ) -> skills_module.SkillResolver:
        """Create a SkillResolver over the configured search roots."""
        return skills_module.SkillResolver(self.create_registry(lister))

    # =========================================================================
    # Introspection (for strict validation mode)
    # =========================================================================

    def get_extra_fields(self) -> dict[str, _typing.Any]:
        """Get unknown fields at the top level of Settings."""
        return dict(self.model_extra) if self.model_extra else {}

    def collect_all_extra_fields(self) -> dict[str, _typing.Any]:
        """
        Recursively collect all extra fields from Settings and nested configs.

        Returns a flat dict with dotted paths as keys, e.g.:
            {"skills.personl_dir": "~/skills", "loging": {...}}
        """
        result: dict[str, _typing.Any] = dict(self.get_extra_fields())

        for field_name in ["skills", "hooks", "logging"]:
            nested = getattr(self, field_name)
            result.update(nested.collect_all_extra_fields(prefix=field_name))

        return result

    def has_extra_fields(self) -> bool:
        """Check if there are any unknown fields anywhere in the config."""
        return bool(self.collect_all_extra_fields())

    # =========================================================================
    # Serialization
    # =========================================================================

    def to_dict(self) -> dict[str, _typing.Any]:
        """Convert settings to dictionary (for JSON output)."""
        project_root = self.get_project_root_or_none()
        return {
            "config_dir": str(self.config_dir),
            "project_root": str(project_root) if project_root else None,
            "search_roots": self.get_search_roots().to_list(),
            "skill_file": self.skills.skill_file,
            "on_duplicate": self.skills.on_duplicate,
            "intro_skill": self.hooks.intro_skill,
            "legacy_skills_dir": str(self.legacy_skills_dir),
            "log_level": self.logging.level,
        }
