"""
Main CLI entry point for Panda.

Provides the command-line interface using Click.
"""

import json as _json
import logging as _logging
import os as _os
import pathlib as _pathlib
import sys as _sys
import typing as _typing

import click as _click
import pydantic as _pydantic
import rich.console as _rich_console
import rich.logging as _rich_logging
import rich.syntax as _rich_syntax
import yaml as _yaml

import panda
import panda.builtin_skills as builtin_skills
import panda.config as config
import panda.hooks as hooks
import panda.skills as skills

_logger = _logging.getLogger(__name__)

# Custom Click context settings for better help formatting
CONTEXT_SETTINGS: dict[str, _typing.Any] = {
    "help_option_names": ["-h", "--help"],
    "max_content_width": 100,
}


def _configure_logging(level: str) -> None:
    """Send panda's log records to stderr through rich."""
    logger = _logging.getLogger("panda")
    logger.setLevel(level)
    if not any(isinstance(h, _rich_logging.RichHandler) for h in logger.handlers):
        handler = _rich_logging.RichHandler(
            console=_rich_console.Console(stderr=True),
            show_time=False,
            show_path=False,
        )
        logger.addHandler(handler)


def _get_resolver(ctx: _click.Context) -> skills.SkillResolver:
    settings: config.Settings = ctx.obj["settings"]
    return settings.create_resolver()


@_click.group(invoke_without_command=True, context_settings=CONTEXT_SETTINGS)
@_click.version_option(panda.__version__, "-v", "--version", prog_name="panda")
@_click.option(
    "--project-root",
    type=_click.Path(file_okay=False, path_type=_pathlib.Path),
    default=None,
    help="Project root (default: git root or current directory)",
)
@_click.option(
    "--verbose",
    is_flag=True,
    help="Enable debug logging",
)
@_click.pass_context
def cli(
    ctx: _click.Context,
    project_root: _pathlib.Path | None,
    verbose: bool,
) -> None:
    """
    Panda - skills for AI coding assistants.

    Skills are looked up in project, personal and panda skill
    directories, in that order.

    \b
    Examples:
        panda skill list                 # Effective skills
        panda skill show brainstorming   # Which copy wins, and where it lives
        panda skill show panda:brainstorming
        panda hook session-start         # SessionStart hook output
    """
    settings: config.Settings | None
    try:
        if project_root is not None:
            settings = config.Settings(project_dir=str(project_root))
        else:
            settings = config.Settings()
    except (config.ConfigFileError, _pydantic.ValidationError) as e:
        if ctx.invoked_subcommand != "hook":
            if isinstance(e, config.ConfigFileError):
                raise _click.ClickException(str(e)) from e
            raise _click.ClickException(f"Invalid configuration: {e}") from e
        # Hooks must never fail the session
        _configure_logging("DEBUG" if verbose else "WARNING")
        _logger.warning("Ignoring configuration: %s", e)
        settings = None
    else:
        _configure_logging("DEBUG" if verbose else settings.logging.level)

    ctx.ensure_object(dict)
    ctx.obj["settings"] = settings

    if ctx.invoked_subcommand is None:
        _click.echo(ctx.get_help())


# =============================================================================
# Skill Commands
# =============================================================================


@cli.group(name="skill")
def skill_group() -> None:
    """Skill discovery and resolution commands."""
    pass


@skill_group.command(name="list")
@_click.option("--json", "json_output", is_flag=True, help="JSON output")
@_click.option("--all", "show_all", is_flag=True, help="Include skills overridden by another namespace")
@_click.pass_context
def skill_list(ctx: _click.Context, json_output: bool, show_all: bool) -> None:
    """List discovered skills."""
    resolver = _get_resolver(ctx)
    registry = resolver.registry

    found, failures = registry.scan()
    try:
        effective, shadowed = resolver.effective_and_shadowed(found)
    except skills.DuplicateSkillError as e:
        raise _click.ClickException(str(e)) from e

    listed = found if show_all else effective
    hidden = {h.qualified_name for _, h in shadowed}

    if json_output:
        invalid = [{"path": str(path), "error": str(error)} for path, error in failures]
        data = {
            "roots": [
                {**r.to_dict(), "exists": registry.lister.is_dir(r.path)}
                for r in registry.roots
            ],
            "skills": [
                {**s.to_dict(), "shadowed": s.qualified_name in hidden} for s in listed
            ],
            "invalid": invalid,
        }
        _click.echo(_json.dumps(data, indent=2))
        return

    _click.echo("Skill Search Roots:")
    for root in registry.roots:
        exists = "✓" if registry.lister.is_dir(root.path) else "(not found)"
        _click.echo(f"  {root.namespace.value:<9} {root.path} {exists}")
    _click.echo()

    if not listed:
        _click.echo("No skills found.")
        return

    _click.echo(f"Discovered Skills ({len(listed)}):")
    _click.echo(f"{'Name':<30} {'Namespace':<10} {'Lines':<8} {'Notes'}")
    _click.echo("-" * 70)
    for s in listed:
        notes = []
        if s.qualified_name in hidden:
            notes.append("overridden")
        if s.exceeds_soft_limit:
            notes.append("⚠ long")
        _click.echo(
            f"{s.name:<30} {s.namespace.value:<10} {s.body_line_count:<8} {', '.join(notes)}"
        )


@skill_group.command(name="show")
@_click.argument("identifier")
@_click.option("--json", "json_output", is_flag=True, help="JSON output")
@_click.option("--body", is_flag=True, help="Show full skill body")
@_click.pass_context
def skill_show(
    ctx: _click.Context, identifier: str, json_output: bool, body: bool
) -> None:
    """Resolve IDENTIFIER ([namespace:]name) and show the winning skill."""
    resolver = _get_resolver(ctx)

    try:
        skill = resolver.resolve(identifier)
    except skills.InvalidSkillIdentifierError as e:
        raise _click.BadParameter(str(e), param_hint="IDENTIFIER") from e
    except skills.SkillNotFoundError as e:
        if json_output:
            _click.echo(_json.dumps({"error": str(e), "available": e.available}))
        else:
            _click.echo(f"Error: {e}", err=True)
            if e.available:
                _click.echo(f"Available skills: {', '.join(e.available)}", err=True)
        raise SystemExit(1) from None
    except skills.DuplicateSkillError as e:
        raise _click.ClickException(str(e)) from e

    overrides = [
        hidden for winner, hidden in resolver.shadowed()
        if winner.qualified_name == skill.qualified_name
    ]

    if json_output:
        data = skill.to_dict()
        data["overrides"] = [h.qualified_name for h in overrides]
        if body:
            data["body"] = skill.body
        _click.echo(_json.dumps(data, indent=2))
        return

    _click.echo(f"Skill: {skill.name}")
    _click.echo(f"  Namespace: {skill.namespace.value}")
    _click.echo(f"  Description: {skill.description or '(none)'}")
    _click.echo(f"  Path: {skill.source_path}")
    _click.echo(f"  Body lines: {skill.body_line_count}")
    if skill.exceeds_soft_limit:
        _click.echo(f"  ⚠ Exceeds recommended limit of {skills.SKILL_BODY_SOFT_LIMIT} lines")
    if skill.license:
        _click.echo(f"  License: {skill.license}")
    if skill.allowed_tools:
        _click.echo(f"  Allowed tools: {', '.join(skill.allowed_tools)}")
    if overrides:
        _click.echo(f"  Overrides: {', '.join(h.qualified_name for h in overrides)}")

    if body:
        _click.echo()
        _click.echo("--- Body ---")
        _click.echo(skill.body)


@skill_group.command(name="validate")
@_click.argument("path", type=_click.Path(path_type=_pathlib.Path))
@_click.option("--json", "json_output", is_flag=True, help="JSON output")
@_click.pass_context
def skill_validate(ctx: _click.Context, path: _pathlib.Path, json_output: bool) -> None:
    """Validate a skill directory or SKILL.md file."""
    settings: config.Settings = ctx.obj["settings"]

    result: dict[str, _typing.Any] = {
        "path": str(path),
        "valid": False,
        "warnings": [],
        "error": None,
    }

    try:
        skill = skills.load_skill(path, skill_file=settings.skills.skill_file)
        result["valid"] = True
        result["name"] = skill.name
        result["description"] = skill.description
        result["body_lines"] = skill.body_line_count

        if not skill.description:
            result["warnings"].append("No description: agents match skills by description")
        if skill.exceeds_soft_limit:
            result["warnings"].append(
                f"Body exceeds recommended limit ({skill.body_line_count} > {skills.SKILL_BODY_SOFT_LIMIT} lines)"
            )
    except (FileNotFoundError, skills.MalformedSkillError) as e:
        result["error"] = str(e)

    if json_output:
        _click.echo(_json.dumps(result, indent=2))
    else:
        _click.echo(f"Skill: {path}")
        if result["error"]:
            _click.echo("  Status: ✗ invalid")
            _click.echo(f"  Error: {result['error']}")
        elif result["warnings"]:
            _click.echo("  Status: ⚠ valid with warnings")
            for warning in result["warnings"]:
                _click.echo(f"  Warning: {warning}")
        else:
            _click.echo("  Status: ✓ valid")
        if result.get("name"):
            _click.echo(f"  Name: {result['name']}")
            _click.echo(f"  Body lines: {result['body_lines']}")

    if not result["valid"]:
        raise SystemExit(1)


@skill_group.command(name="match")
@_click.argument("text")
@_click.option("--limit", type=_click.IntRange(min=1), default=3, show_default=True, help="Maximum results")
@_click.option("--json", "json_output", is_flag=True, help="JSON output")
@_click.pass_context
def skill_match(ctx: _click.Context, text: str, limit: int, json_output: bool) -> None:
    """Suggest skills whose name or description matches TEXT."""
    resolver = _get_resolver(ctx)
    matches = resolver.find_matching(text, max_results=limit)

    if json_output:
        _click.echo(_json.dumps([s.to_dict() for s in matches], indent=2))
        return

    if not matches:
        _click.echo("No matching skills.")
        return
    for s in matches:
        _click.echo(s.get_metadata_for_prompt())


@skill_group.command(name="paths")
@_click.option("--json", "json_output", is_flag=True, help="JSON output")
@_click.pass_context
def skill_paths(ctx: _click.Context, json_output: bool) -> None:
    """Show skill search roots in precedence order."""
    settings: config.Settings = ctx.obj["settings"]
    search_roots = settings.get_search_roots()

    if json_output:
        data = [
            {**r.to_dict(), "exists": _pathlib.Path(r.path).is_dir()} for r in search_roots
        ]
        _click.echo(_json.dumps(data, indent=2))
        return

    for root in search_roots:
        exists = "✓" if _pathlib.Path(root.path).is_dir() else "(not found)"
        _click.echo(f"{root.namespace.value:<9} {root.path} {exists}")


# =============================================================================
# Config Commands
# =============================================================================


@cli.group(invoke_without_command=True)
@_click.pass_context
def config_cmd(ctx: _click.Context) -> None:
    """Configuration commands.

    Without a subcommand, shows configuration overview.
    """
    if ctx.invoked_subcommand is None:
        settings: config.Settings = ctx.obj["settings"]
        project_root = settings.get_project_root_or_none()
        _click.echo("Panda Configuration:")
        _click.echo(f"  Project Root: {project_root or '(none)'}")
        _click.echo(f"  Config Dir: {settings.config_dir}")
        _click.echo(f"  Skill File: {settings.skills.skill_file}")
        _click.echo(f"  On Duplicate: {settings.skills.on_duplicate}")
        _click.echo(f"  Intro Skill: {settings.hooks.intro_skill}")
        _click.echo(f"  Log Level: {settings.logging.level}")
        extras = settings.collect_all_extra_fields()
        if extras:
            _click.echo(f"  ⚠ Unknown keys: {', '.join(sorted(extras))}")
        _click.echo("\nRun 'panda config show' for full configuration details.")


# Register config_cmd with the name "config" to avoid shadowing the module
cli.add_command(config_cmd, name="config")


def _should_use_color(cli_flag: bool | None) -> tuple[bool, bool]:
    """Determine whether to use color output.

    Priority:
    1. CLI flag (--color / --no-color) if specified
    2. PANDA_CONFIG_SHOW_COLOR env var (1=on, 0=off)
    3. NO_COLOR env var (if set, disable color) - standard convention
    4. Auto-detect: color if stdout is a TTY

    Returns:
        Tuple of (color_enabled, force_color).
        force_color is True when color was explicitly requested (not auto-detected).
    """
    if cli_flag is not None:
        return (cli_flag, cli_flag)

    env_color = _os.environ.get("PANDA_CONFIG_SHOW_COLOR")
    if env_color is not None:
        enabled = env_color.lower() in ("1", "true", "yes", "on")
        return (enabled, enabled)

    if _os.environ.get("NO_COLOR") is not None:
        return (False, False)

    return (_sys.stdout.isatty(), False)


def _print_yaml(yaml_text: str, *, color: bool = True, force_color: bool = False) -> None:
    """Print YAML text, optionally with syntax highlighting."""
    if not color:
        _click.echo(yaml_text)
        return

    console = _rich_console.Console(
        force_terminal=force_color,
        no_color=False if force_color else None,
        color_system="truecolor" if force_color else "auto",
    )
    syntax = _rich_syntax.Syntax(
        yaml_text,
        "yaml",
        theme="monokai",
        background_color="default",
    )
    console.print(syntax)


@config_cmd.command(name="show")
@_click.option("--json", "as_json", is_flag=True, help="Output as JSON")
@_click.option("--section", type=str, default=None, help="Show specific section only")
@_click.option(
    "--color/--no-color",
    "use_color",
    default=None,
    help="Enable/disable syntax highlighting (default: auto-detect TTY)",
)
@_click.pass_context
def config_show(
    ctx: _click.Context,
    as_json: bool,
    section: str | None,
    use_color: bool | None,
) -> None:
    """Show effective configuration from all sources.

    \b
    Examples:
        panda config show                  # All config as YAML
        panda config show --json           # As JSON
        panda config show --section skills # One section
    """
    settings: config.Settings = ctx.obj["settings"]

    color_enabled, force_color = _should_use_color(use_color)
    full_config = settings.model_dump(mode="json")

    if section:
        if section not in full_config:
            raise _click.ClickException(f"Unknown section: {section}")
        full_config = {section: full_config[section]}

    if as_json:
        _click.echo(_json.dumps(full_config, indent=2))
    else:
        yaml_text = _yaml.dump(full_config, default_flow_style=False, sort_keys=False)
        _print_yaml(yaml_text, color=color_enabled, force_color=force_color)


# =============================================================================
# Hook Commands
# =============================================================================


@cli.group(name="hook")
def hook_group() -> None:
    """Agent runtime hook commands."""
    pass


@hook_group.command(name="session-start")
@_click.pass_context
def hook_session_start(ctx: _click.Context) -> None:
    """Print the SessionStart hook envelope as JSON."""
    settings: config.Settings | None = ctx.obj["settings"]
    if settings is None:
        # Broken config: fall back to the bundled skills only
        search_roots = skills.SearchRoots.from_mapping(
            {skills.Namespace.PANDA: [builtin_skills.get_builtin_skills_path()]}
        )
        output = hooks.render_session_start_output(
            skills.SkillResolver(skills.SkillRegistry(search_roots))
        )
    else:
        output = hooks.render_session_start_output(
            settings.create_resolver(),
            intro_skill=settings.hooks.intro_skill,
            legacy_skills_dir=settings.legacy_skills_dir,
        )
    _click.echo(output)


def main() -> None:
    """Main entry point with correct program name."""
    cli(prog_name="panda")


if __name__ == "__main__":
    main()
