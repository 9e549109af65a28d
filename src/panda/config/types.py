"""Configuration type definitions for Panda settings.

This module defines the Pydantic models used to represent configuration
sections nested within the main Settings class:

- SkillsConfig: where skills live and how duplicates are handled
- HooksConfig: session start hook behaviour
- LoggingConfig: log level

Design decision: All types use `extra="allow"` to preserve unknown fields.
This enables strict validation mode where users can audit their config for
typos and unknown keys. Use `get_extra_fields()` to inspect unknown fields.
"""

import typing as _typing

import pydantic as _pydantic

import panda.constants as constants

# =============================================================================
# Base class with introspection
# =============================================================================


class ConfigBase(_pydantic.BaseModel):
    """
    Base class for all config types.

    All config types use `extra="allow"` so unknown fields are preserved
    rather than silently dropped. This enables auditing for typos.
    """

    model_config = _pydantic.ConfigDict(extra="allow")

    def get_extra_fields(self) -> dict[str, _typing.Any]:
        """
        Return fields that were provided but not in the schema.

        Returns:
            Dict of field_name → value for all unrecognized fields.
        """
        return dict(self.model_extra) if self.model_extra else {}

    def has_extra_fields(self) -> bool:
        """Check if this config has any unrecognized fields."""
        return bool(self.model_extra)

    def collect_all_extra_fields(
        self,
        prefix: str = "",
    ) -> dict[str, _typing.Any]:
        """
        Recursively collect extra fields from this config and nested configs.

        Returns a flat dict with dotted paths as keys, e.g.:
            {"skills.personl_dir": "~/skills"}

        Args:
            prefix: Dotted path prefix (used in recursion).

        Returns:
            Flat dict of path → value for all unrecognized fields.
        """
        result: dict[str, _typing.Any] = {}

        for key, value in self.get_extra_fields().items():
            path = f"{prefix}.{key}" if prefix else key
            result[path] = value

        for field_name in self.__class__.model_fields:
            value = getattr(self, field_name, None)
            if isinstance(value, ConfigBase):
                child_prefix = f"{prefix}.{field_name}" if prefix else field_name
                result.update(value.collect_all_extra_fields(child_prefix))

        return result


# =============================================================================
# Skills
# =============================================================================


class SkillsConfig(ConfigBase):
    """
    Skill discovery settings.

    YAML section: skills.*
    """

    project_dir: str = constants.DEFAULT_PROJECT_SKILLS_DIR
    """Project skills directory (relative paths are under the project root)."""

    personal_dir: str = constants.DEFAULT_PERSONAL_SKILLS_DIR
    """Personal skills directory (~ is expanded)."""

    panda_dir: str | None = None
    """Panda skills directory. None means the skills bundled with panda."""

    skill_file: str = _pydantic.Field(default=constants.SKILL_FILE_NAME, min_length=1)
    """File that marks a directory as a skill."""

    on_duplicate: _typing.Literal["first", "error"] = "first"
    """Same name twice in one namespace: keep the first, or fail."""


# =============================================================================
# Hooks
# =============================================================================


class HooksConfig(ConfigBase):
    """
    Session hook settings.

    YAML section: hooks.*
    """

    intro_skill: str = constants.DEFAULT_INTRO_SKILL
    """Skill injected by the session start hook."""

    legacy_skills_dir: str = constants.LEGACY_SKILLS_DIR
    """Retired skills directory; its presence triggers a warning."""


# =============================================================================
# Logging
# =============================================================================


class LoggingConfig(ConfigBase):
    """
    Logging settings.

    YAML section: logging.*
    """

    level: _typing.Literal["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"] = "WARNING"
    """Level for panda's own log messages."""

    @_pydantic.field_validator("level", mode="before")
    @classmethod
    def _upper_level(cls, value: _typing.Any) -> _typing.Any:
        if isinstance(value, str):
            return value.upper()
        return value
