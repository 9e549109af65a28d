"""Tests for Settings: defaults, layering and skill helpers."""

import pathlib as _pathlib
import typing as _typing

import pydantic as _pydantic
import pytest as _pytest

import panda.builtin_skills as builtin_skills
import panda.config as config
import panda.skills as skills


def _write_yaml(path: _pathlib.Path, text: str) -> _pathlib.Path:
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(text, encoding="utf-8")
    return path


class TestSettingsDefaults:
    """Built-in defaults with no config files or env vars."""

    def test_default_sections(self, tmp_path: _pathlib.Path) -> None:
        settings = config.Settings.construct_without_dotenv(project_dir=str(tmp_path))

        assert settings.skills.project_dir == ".claude/skills"
        assert settings.skills.personal_dir == "~/.claude/skills"
        assert settings.skills.panda_dir is None
        assert settings.skills.skill_file == "SKILL.md"
        assert settings.skills.on_duplicate == "first"
        assert settings.hooks.intro_skill == "panda:using-panda"
        assert settings.logging.level == "WARNING"
        assert settings.allow_home_directory is False

    def test_config_dir_defaults_to_xdg(self, tmp_path: _pathlib.Path, home_dir: _pathlib.Path) -> None:
        settings = config.Settings(project_dir=str(tmp_path))
        assert settings.config_dir == home_dir / ".config" / "panda"

    def test_no_extra_fields_by_default(self, tmp_path: _pathlib.Path) -> None:
        settings = config.Settings(project_dir=str(tmp_path))
        assert settings.has_extra_fields() is False


class TestSettingsEnvironment:
    """PANDA_* environment variables."""

    def test_nested_env_var(self, tmp_path: _pathlib.Path, monkeypatch: _pytest.MonkeyPatch) -> None:
        monkeypatch.setenv("PANDA_SKILLS__ON_DUPLICATE", "error")
        settings = config.Settings(project_dir=str(tmp_path))
        assert settings.skills.on_duplicate == "error"

    def test_log_level_is_case_insensitive(
        self, tmp_path: _pathlib.Path, monkeypatch: _pytest.MonkeyPatch
    ) -> None:
        monkeypatch.setenv("PANDA_LOGGING__LEVEL", "debug")
        settings = config.Settings(project_dir=str(tmp_path))
        assert settings.logging.level == "DEBUG"

    def test_invalid_value_rejected(
        self, tmp_path: _pathlib.Path, monkeypatch: _pytest.MonkeyPatch
    ) -> None:
        monkeypatch.setenv("PANDA_SKILLS__ON_DUPLICATE", "last")
        with _pytest.raises(_pydantic.ValidationError):
            config.Settings(project_dir=str(tmp_path))

    def test_project_dir_from_env(
        self, tmp_path: _pathlib.Path, monkeypatch: _pytest.MonkeyPatch
    ) -> None:
        monkeypatch.setenv("PANDA_PROJECT_DIR", str(tmp_path))
        settings = config.Settings()
        assert settings.project_root == tmp_path.resolve()

    def test_constructor_beats_env(
        self, tmp_path: _pathlib.Path, monkeypatch: _pytest.MonkeyPatch
    ) -> None:
        monkeypatch.setenv("PANDA_ALLOW_HOME_DIRECTORY", "false")
        settings = config.Settings(project_dir=str(tmp_path), allow_home_directory=True)
        assert settings.allow_home_directory is True


class TestSettingsYamlLayers:
    """User and project config.yaml files."""

    def test_user_config(
        self,
        tmp_path: _pathlib.Path,
        monkeypatch: _pytest.MonkeyPatch,
    ) -> None:
        config_dir = tmp_path / "cfg"
        _write_yaml(config_dir / "config.yaml", "skills:\n  personal_dir: /srv/skills\n")
        monkeypatch.setenv("PANDA_CONFIG_DIR", str(config_dir))

        settings = config.Settings(project_dir=str(tmp_path / "project"))

        assert settings.skills.personal_dir == "/srv/skills"
        assert settings.config_dir == config_dir

    def test_project_config_overrides_user_config(
        self,
        tmp_path: _pathlib.Path,
        home_dir: _pathlib.Path,
    ) -> None:
        _write_yaml(
            home_dir / ".config" / "panda" / "config.yaml",
            "skills:\n  personal_dir: /user/skills\n  on_duplicate: error\n",
        )
        project = tmp_path / "project"
        _write_yaml(project / ".panda" / "config.yaml", "skills:\n  on_duplicate: first\n")

        settings = config.Settings(project_dir=str(project))

        assert settings.skills.on_duplicate == "first"
        # Keys the project layer doesn't set survive the merge
        assert settings.skills.personal_dir == "/user/skills"

    def test_env_overrides_yaml(
        self,
        tmp_path: _pathlib.Path,
        monkeypatch: _pytest.MonkeyPatch,
    ) -> None:
        _write_yaml(tmp_path / ".panda" / "config.yaml", "logging:\n  level: ERROR\n")
        monkeypatch.setenv("PANDA_LOGGING__LEVEL", "INFO")

        settings = config.Settings(project_dir=str(tmp_path))

        assert settings.logging.level == "INFO"

    def test_malformed_yaml_raises(self, tmp_path: _pathlib.Path) -> None:
        _write_yaml(tmp_path / ".panda" / "config.yaml", "skills: [unclosed\n")

        with _pytest.raises(config.ConfigFileError, match="invalid YAML"):
            config.Settings(project_dir=str(tmp_path))

    def test_unknown_keys_are_reported(self, tmp_path: _pathlib.Path) -> None:
        _write_yaml(
            tmp_path / ".panda" / "config.yaml",
            "skills:\n  personl_dir: ~/typo\nloging:\n  level: DEBUG\n",
        )

        settings = config.Settings(project_dir=str(tmp_path))

        extras = settings.collect_all_extra_fields()
        assert extras == {"skills.personl_dir": "~/typo", "loging": {"level": "DEBUG"}}
        assert settings.has_extra_fields() is True


class TestProjectRoot:
    """Project root detection."""

    def test_explicit_project_dir(self, tmp_path: _pathlib.Path) -> None:
        settings = config.Settings(project_dir=str(tmp_path))
        assert settings.project_root == tmp_path.resolve()

    def test_finds_marker_directory(self, tmp_path: _pathlib.Path) -> None:
        (tmp_path / "pyproject.toml").write_text("[project]\n")
        nested = tmp_path / "src" / "pkg"
        nested.mkdir(parents=True)

        root = config.find_project_root(nested)

        # A surrounding git checkout would win over the marker file
        git_root = config.find_git_root(nested)
        assert root == (git_root or tmp_path.resolve())

    def test_home_is_too_wide(self, home_dir: _pathlib.Path) -> None:
        settings = config.Settings(project_dir=str(home_dir))

        with _pytest.raises(config.ProjectRootTooWideError):
            _ = settings.project_root
        assert settings.get_project_root_or_none() is None

    def test_home_allowed_when_configured(self, home_dir: _pathlib.Path) -> None:
        settings = config.Settings(project_dir=str(home_dir), allow_home_directory=True)
        assert settings.project_root == home_dir.resolve()


class TestSearchRoots:
    """Settings.get_search_roots and factories."""

    def test_helper_annotations_resolve_to_skill_types(self) -> None:
        """The skills field must not hide the skills package in annotations."""
        hints = _typing.get_type_hints(config.Settings.get_search_roots)
        assert hints["return"] is skills.SearchRoots
        hints = _typing.get_type_hints(config.Settings.create_resolver)
        assert hints["return"] is skills.SkillResolver

    def test_default_roots(self, tmp_path: _pathlib.Path, home_dir: _pathlib.Path) -> None:
        settings = config.Settings(project_dir=str(tmp_path))

        search_roots = settings.get_search_roots()

        assert [(r.namespace.value, r.path) for r in search_roots] == [
            ("project", tmp_path.resolve() / ".claude" / "skills"),
            ("personal", home_dir / ".claude" / "skills"),
            ("panda", builtin_skills.get_builtin_skills_path()),
        ]

    def test_configured_directories(
        self, tmp_path: _pathlib.Path, monkeypatch: _pytest.MonkeyPatch
    ) -> None:
        monkeypatch.setenv("PANDA_SKILLS__PROJECT_DIR", "agent/skills")
        monkeypatch.setenv("PANDA_SKILLS__PERSONAL_DIR", str(tmp_path / "mine"))
        monkeypatch.setenv("PANDA_SKILLS__PANDA_DIR", str(tmp_path / "bundled"))

        settings = config.Settings(project_dir=str(tmp_path))

        assert [r.path for r in settings.get_search_roots()] == [
            tmp_path.resolve() / "agent" / "skills",
            tmp_path / "mine",
            tmp_path / "bundled",
        ]

    def test_wide_project_root_drops_project_namespace(self, home_dir: _pathlib.Path) -> None:
        settings = config.Settings(project_dir=str(home_dir))

        search_roots = settings.get_search_roots()

        assert search_roots.for_namespace(skills.Namespace.PROJECT) == []
        assert settings.to_dict()["project_root"] is None

    def test_create_resolver_over_real_tree(
        self,
        tmp_path: _pathlib.Path,
        home_dir: _pathlib.Path,
        write_skill,
    ) -> None:
        project = tmp_path / "project"
        write_skill(project / ".claude" / "skills", "brainstorming", "Project copy")
        write_skill(home_dir / ".claude" / "skills", "brainstorming", "Personal copy")

        resolver = config.Settings(project_dir=str(project)).create_resolver()

        assert resolver.resolve("brainstorming").description == "Project copy"
        assert resolver.resolve("personal:brainstorming").description == "Personal copy"
        assert resolver.resolve("using-panda").namespace is skills.Namespace.PANDA

    def test_create_registry_uses_lister_and_policy(
        self,
        tmp_path: _pathlib.Path,
        monkeypatch: _pytest.MonkeyPatch,
    ) -> None:
        monkeypatch.setenv("PANDA_SKILLS__ON_DUPLICATE", "error")
        lister = skills.MemoryLister()

        registry = config.Settings(project_dir=str(tmp_path)).create_registry(lister)

        assert registry.lister is lister
        assert list(registry.list_skills()) == []

    def test_to_dict(self, tmp_path: _pathlib.Path) -> None:
        data = config.Settings(project_dir=str(tmp_path)).to_dict()

        assert data["project_root"] == str(tmp_path.resolve())
        assert data["skill_file"] == "SKILL.md"
        assert data["intro_skill"] == "panda:using-panda"
        assert [r["namespace"] for r in data["search_roots"]] == ["project", "personal", "panda"]
