"""Config commands -- view and modify global configuration.

Provides the ``specbundle config`` sub-command group for reading,
updating, and resetting the user's global configuration file
(:class:`~specbundle.models.GlobalConfig`). Settings are persisted in
the specbundle config directory and control defaults such as the pass
limit, cleanup patterns, and output format.
"""

from __future__ import annotations

import json

import typer
from pydantic import ValidationError

from specbundle.commands import fail
from specbundle.exceptions import ConfigError, InvalidUsageError
from specbundle.output import format_response, info, print_data, success


config_app = typer.Typer(no_args_is_help=True)


@config_app.command("show")
def config_show() -> None:
    """Show current configuration.

    Loads the global config from disk and prints the config directory
    path followed by the full configuration as formatted output.

    Example::

        specbundle config show
        specbundle --json config show
    """
    from specbundle.config import get_config_dir, load_global_config

    try:
        config = load_global_config()
    except ConfigError as exc:
        raise fail(exc) from None
    info(f"Config directory: {get_config_dir()}")
    format_response(config.model_dump(mode="json"))


@config_app.command("path")
def config_path() -> None:
    """Print the path of the global config file."""
    from specbundle.config import global_config_path

    print_data(str(global_config_path()))


@config_app.command("set")
def config_set(
    key: str = typer.Argument(
        help="Config key (dot notation, e.g., 'resolver.max_passes')."
    ),
    value: str = typer.Argument(help="Value to set."),
) -> None:
    """Set a configuration value.

    Uses dot notation for nested keys. The value is coerced to match the
    existing field's type: booleans accept ``true/1/yes``, integers must
    parse, and list fields take a JSON array. The updated config is
    validated against :class:`~specbundle.models.GlobalConfig` before
    saving.

    Raises:
        typer.Exit: With code 2 if the key path is invalid, the value
            cannot be coerced, or Pydantic validation fails.

    Example::

        specbundle config set resolver.max_passes 5
        specbundle config set output.format yaml
        specbundle config set resolver.cleanup.prefixes '["#/api", "#/internal"]'
    """
    from specbundle.config import load_global_config, save_global_config, supported_formats
    from specbundle.models import GlobalConfig

    try:
        config = load_global_config()
    except ConfigError as exc:
        raise fail(exc) from None
    data = config.model_dump(mode="json")

    # Navigate the dot-separated key path.
    keys = key.split(".")
    target = data
    for k in keys[:-1]:
        if k not in target or not isinstance(target[k], dict):
            raise fail(InvalidUsageError(f"Invalid config key: {key}"))
        target = target[k]

    final_key = keys[-1]
    if final_key not in target:
        raise fail(InvalidUsageError(f"Unknown config key: {key}"))

    if key == "output.format" and value not in supported_formats():
        raise fail(
            InvalidUsageError(
                f"Unsupported format {value!r}; expected one of: {', '.join(supported_formats())}"
            )
        )

    # Type coerce the value to match the current field type.
    current = target[final_key]
    if isinstance(current, bool):
        coerced = value.lower() in ("true", "1", "yes")
    elif isinstance(current, int):
        try:
            coerced = int(value)
        except ValueError:
            raise fail(InvalidUsageError(f"Expected integer for {key}, got: {value}")) from None
    elif isinstance(current, (list, dict)):
        try:
            coerced = json.loads(value)
        except json.JSONDecodeError:
            raise fail(InvalidUsageError(f"Expected JSON for {key}, got: {value}")) from None
    else:
        coerced = value  # type: ignore[assignment]

    target[final_key] = coerced

    try:
        new_config = GlobalConfig.model_validate(data)
    except ValidationError as exc:
        raise fail(InvalidUsageError(f"Validation error: {exc}")) from None

    save_global_config(new_config)
    success(f"Set {key} = {coerced}")


@config_app.command("reset")
def config_reset(
    ctx: typer.Context,
) -> None:
    """Reset configuration to defaults.

    Replaces the persisted global config with a fresh
    :class:`~specbundle.models.GlobalConfig` instance containing all
    default values. Asks for confirmation unless ``--force`` is active.

    Raises:
        typer.Exit: If the user declines confirmation.

    Example::

        specbundle config reset
        specbundle --force config reset
    """
    from specbundle.config import save_global_config
    from specbundle.models import GlobalConfig

    force = ctx.obj.get("force", False) if ctx.obj else False
    if not force:
        confirmed = typer.confirm("Reset all config to defaults?")
        if not confirmed:
            info("Cancelled.")
            raise typer.Exit()

    save_global_config(GlobalConfig())
    success("Configuration reset to defaults.")
