"""Config commands -- view and modify the user configuration.

``specdesk config show`` prints the effective settings (user config with
the project file and environment applied), ``set`` edits one dot-separated
key of the user config and ``reset`` restores the defaults.  API keys are
not part of the configuration and cannot be set here.
"""

from __future__ import annotations

import json
from typing import Any

import typer
from pydantic import ValidationError

from specdesk.exit_codes import EXIT_INVALID_USAGE
from specdesk.output import get_output


config_app = typer.Typer(no_args_is_help=True)


@config_app.command("show")
def config_show(ctx: typer.Context) -> None:
    """Show the effective configuration.

    Example::

        specdesk config show
        specdesk --json config show
    """
    from specdesk.config import get_config_dir, resolve_config
    from specdesk.exceptions import SpecdeskError

    output = get_output()
    obj = ctx.obj or {}
    try:
        config = resolve_config(cli_document=obj.get("document"))
    except SpecdeskError as exc:
        output.error(str(exc))
        raise typer.Exit(code=exc.exit_code) from None
    output.info(f"Config directory: {get_config_dir()}")
    output.format_response(config.model_dump(mode="json"))


def _coerce(current: Any, value: str, key: str) -> Any:
    """Convert *value* to the type of the field it replaces.

    Lists take a comma-separated string, or a JSON array; ``none``/``null``
    clears an optional field.
    """
    output = get_output()
    if isinstance(current, bool):
        return value.lower() in ("true", "1", "yes")
    if isinstance(current, (int, float)):
        try:
            return type(current)(value)
        except ValueError:
            output.error(f"Expected {type(current).__name__} for {key}, got: {value}")
            raise typer.Exit(code=EXIT_INVALID_USAGE) from None
    if isinstance(current, list) or value.lstrip().startswith("["):
        if value.lstrip().startswith("["):
            try:
                return json.loads(value)
            except json.JSONDecodeError as exc:
                output.error(f"Invalid JSON list for {key}: {exc}")
                raise typer.Exit(code=EXIT_INVALID_USAGE) from None
        return [item.strip() for item in value.split(",") if item.strip()]
    if value.lower() in ("none", "null"):
        return None
    return value


@config_app.command("set")
def config_set(
    key: str = typer.Argument(help="Config key (dot notation, e.g. 'request.timeout')."),
    value: str = typer.Argument(help="Value to set."),
) -> None:
    """Set a value in the user configuration.

    Example::

        specdesk config set document https://api.tikhub.io/openapi.json
        specdesk config set request.timeout 60
        specdesk config set hidden_tags "Demo-API,Health-Check"
    """
    from specdesk.config import load_global_config, save_global_config
    from specdesk.models import GlobalConfig

    output = get_output()
    data = load_global_config().model_dump(mode="json")

    keys = key.split(".")
    target = data
    for k in keys[:-1]:
        if not isinstance(target.get(k), dict):
            output.error(f"Invalid config key: {key}")
            raise typer.Exit(code=EXIT_INVALID_USAGE)
        target = target[k]

    final_key = keys[-1]
    if final_key not in target:
        output.error(f"Unknown config key: {key}")
        raise typer.Exit(code=EXIT_INVALID_USAGE)

    coerced = _coerce(target[final_key], value, key)
    target[final_key] = coerced

    try:
        new_config = GlobalConfig.model_validate(data)
    except ValidationError as exc:
        output.error(f"Validation error: {exc}")
        raise typer.Exit(code=EXIT_INVALID_USAGE) from None

    save_global_config(new_config)
    output.success(f"Set {key} = {coerced}")


@config_app.command("reset")
def config_reset(
    force: bool = typer.Option(False, "--force", "-f", help="Skip confirmation."),
) -> None:
    """Reset the user configuration to defaults."""
    from specdesk.config import save_global_config
    from specdesk.models import GlobalConfig

    output = get_output()
    if not force and not typer.confirm("Reset all config to defaults?"):
        output.info("Cancelled.")
        raise typer.Exit()

    save_global_config(GlobalConfig())
    output.success("Configuration reset to defaults.")
