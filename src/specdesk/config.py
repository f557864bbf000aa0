"""Configuration: XDG paths, atomic writes and precedence resolution.

* **Directory layout** -- XDG Base Directory compliant on Linux/BSD,
  ``~/.specdesk/`` on macOS and Windows.  See :func:`get_config_dir` and
  :func:`get_data_dir`.
* **User config** -- one :class:`~specdesk.models.GlobalConfig` JSON file.
* **Project config** -- an optional ``./specdesk.json`` holding any subset of
  the same keys, layered over the user config.
* **Precedence** -- :func:`resolve_config` merges CLI flags, environment
  variables, project config and user config.
* **Credentials** -- :func:`resolve_credential` reads an API key from an env
  var, a file or an interactive prompt.  Keys are never written to disk.
"""

from __future__ import annotations

import getpass
import json
import os
import platform
import sys
import tempfile
from pathlib import Path
from typing import Any, Optional

from pydantic import ValidationError

from specdesk.exceptions import ConfigError
from specdesk.models import GlobalConfig

_APP_NAME = "specdesk"
_CONFIG_FILENAME = "config.json"
_PROJECT_CONFIG_FILENAME = "specdesk.json"

ENV_DOCUMENT = "SPECDESK_DOCUMENT"
ENV_BASE_URL = "SPECDESK_BASE_URL"
ENV_RELAY_URL = "SPECDESK_RELAY_URL"
ENV_API_KEY = "SPECDESK_API_KEY"

CREDENTIAL_PREFIXES = ("env:", "file:")


# --- XDG path resolution ---


def _is_xdg_platform() -> bool:
    system = platform.system()
    return system == "Linux" or system.endswith("BSD")


def _fallback_base_dir() -> Path:
    return Path.home() / f".{_APP_NAME}"


def _xdg_base(env_var: str, default_segments: tuple[str, ...]) -> Path:
    """Resolve an XDG base directory from *env_var*, else ``$HOME/<segments>``."""
    env_value = os.environ.get(env_var, "")
    if env_value:
        return Path(env_value)
    return Path.home().joinpath(*default_segments)


def get_config_dir() -> Path:
    """Return (and create) the configuration directory.

    On Linux/BSD: ``$XDG_CONFIG_HOME/specdesk/`` (default ``~/.config/specdesk/``).
    Elsewhere: ``~/.specdesk/``.
    """
    if _is_xdg_platform():
        path = _xdg_base("XDG_CONFIG_HOME", (".config",)) / _APP_NAME
    else:
        path = _fallback_base_dir()
    path.mkdir(parents=True, exist_ok=True)
    return path


def get_data_dir() -> Path:
    """Return (and create) the data directory used for crash logs.

    On Linux/BSD: ``$XDG_DATA_HOME/specdesk/`` (default ``~/.local/share/specdesk/``).
    Elsewhere: ``~/.specdesk/``.  Crash logs go in its ``logs/`` subdirectory.
    """
    if _is_xdg_platform():
        path = _xdg_base("XDG_DATA_HOME", (".local", "share")) / _APP_NAME
    else:
        path = _fallback_base_dir()
    path.mkdir(parents=True, exist_ok=True)
    return path


# --- Atomic file writes ---


def _atomic_write(path: Path, data: str) -> None:
    """Write *data* to a temp file next to *path*, then rename it over *path*."""
    path.parent.mkdir(parents=True, exist_ok=True)

    tmp = tempfile.NamedTemporaryFile(
        mode="w",
        dir=path.parent,
        prefix=f".{path.name}.",
        suffix=".tmp",
        delete=False,
        encoding="utf-8",
    )
    try:
        with tmp:
            tmp.write(data)
            tmp.flush()
            os.fsync(tmp.fileno())
        os.replace(tmp.name, path)
    except BaseException:
        Path(tmp.name).unlink(missing_ok=True)
        raise


# --- User config ---


def global_config_path() -> Path:
    return get_config_dir() / _CONFIG_FILENAME


def _read_json(path: Path, label: str) -> dict[str, Any]:
    try:
        data = json.loads(path.read_text(encoding="utf-8"))
    except (OSError, json.JSONDecodeError) as exc:
        raise ConfigError(f"Invalid {label} at {path}: {exc}") from exc
    if not isinstance(data, dict):
        raise ConfigError(f"Invalid {label} at {path}: expected a JSON object")
    return data


def load_global_config() -> GlobalConfig:
    """Load the user config, or defaults when the file does not exist.

    Raises:
        ConfigError: If the file holds invalid JSON or invalid settings.
    """
    path = global_config_path()
    if not path.is_file():
        return GlobalConfig()
    data = _read_json(path, "user config")
    try:
        return GlobalConfig.model_validate(data)
    except ValidationError as exc:
        raise ConfigError(f"Invalid user config at {path}: {exc}") from exc


def save_global_config(config: GlobalConfig) -> None:
    """Persist *config* atomically."""
    data = config.model_dump(mode="json", exclude_none=True)
    _atomic_write(global_config_path(), json.dumps(data, indent=2, ensure_ascii=False) + "\n")


# --- Project-local config ---


def load_project_config() -> Optional[dict[str, Any]]:
    """Return the parsed ``./specdesk.json``, or ``None`` when there is none.

    Raises:
        ConfigError: If the file exists but is not a JSON object.
    """
    path = Path.cwd() / _PROJECT_CONFIG_FILENAME
    if not path.is_file():
        return None
    return _read_json(path, "project config")


def _deep_merge(base: dict[str, Any], override: dict[str, Any]) -> dict[str, Any]:
    merged = dict(base)
    for key, value in override.items():
        if isinstance(value, dict) and isinstance(merged.get(key), dict):
            merged[key] = _deep_merge(merged[key], value)
        else:
            merged[key] = value
    return merged


# --- Precedence resolution ---


def resolve_config(
    cli_document: Optional[str] = None,
    cli_base_url: Optional[str] = None,
    cli_relay_url: Optional[str] = None,
    cli_format: Optional[str] = None,
) -> GlobalConfig:
    """Return the effective configuration.

    Precedence (high to low):
        1. CLI flags
        2. Environment (``SPECDESK_DOCUMENT``, ``SPECDESK_BASE_URL``,
           ``SPECDESK_RELAY_URL``)
        3. Project config (``./specdesk.json``)
        4. User config
        5. Defaults

    Raises:
        ConfigError: If any config file is invalid.
    """
    config = load_global_config()

    project = load_project_config()
    if project:
        merged = _deep_merge(config.model_dump(mode="json"), project)
        try:
            config = GlobalConfig.model_validate(merged)
        except ValidationError as exc:
            raise ConfigError(f"Invalid project config: {exc}") from exc

    config.document = cli_document or os.environ.get(ENV_DOCUMENT) or config.document
    config.base_url = cli_base_url or os.environ.get(ENV_BASE_URL) or config.base_url
    config.relay.url = cli_relay_url or os.environ.get(ENV_RELAY_URL) or config.relay.url
    if cli_format is not None:
        config.output.format = cli_format
    return config


# --- Credential source resolution ---


def resolve_credential(source: str) -> str:
    """Resolve a credential from its source descriptor.

    Supported formats:
        - ``"env:VAR_NAME"`` -- reads ``os.environ["VAR_NAME"]``
        - ``"file:/path/to/file"`` -- reads the file, stripped of whitespace
        - ``"prompt"`` -- asks interactively (requires a TTY)

    Raises:
        ConfigError: If the source cannot be resolved.
    """
    if source.startswith("env:"):
        var_name = source[4:]
        value = os.environ.get(var_name)
        if value is None:
            raise ConfigError(
                f"Environment variable '{var_name}' is not set (source: {source})"
            )
        return value

    if source.startswith("file:"):
        path = Path(source[5:]).expanduser()
        if not path.is_file():
            raise ConfigError(f"Credential file not found: {path} (source: {source})")
        try:
            return path.read_text(encoding="utf-8").strip()
        except OSError as exc:
            raise ConfigError(f"Cannot read credential file {path}: {exc}") from exc

    if source == "prompt":
        if not sys.stdin.isatty():
            raise ConfigError(
                "Cannot prompt for an API key: stdin is not a TTY (source: prompt)"
            )
        return getpass.getpass("API key: ")

    raise ConfigError(f"Unknown credential source format: {source}")


def resolve_api_key(cli_value: Optional[str] = None) -> str:
    """Return the API key for this invocation, or ``""`` when there is none.

    A ``--api-key`` value that looks like a source descriptor (``env:``,
    ``file:``, ``prompt``) is resolved; any other value is the key itself.
    Without a flag, ``SPECDESK_API_KEY`` is used.
    """
    if cli_value:
        if cli_value == "prompt" or cli_value.startswith(CREDENTIAL_PREFIXES):
            return resolve_credential(cli_value).strip()
        return cli_value.strip()
    return os.environ.get(ENV_API_KEY, "").strip()
