"""Configuration loading, precedence resolution and atomic output writes.

This module handles everything postmangen reads from or writes to disk:

* **Config files** -- a :class:`~postmangen.models.GeneratorConfig` stored
  as JSON or YAML. :func:`load_config_file` reads an explicit path;
  :func:`load_project_config` looks for ``postmangen.json``,
  ``postmangen.yaml`` or ``postmangen.yml`` in the working directory.
* **Precedence resolution** -- :func:`resolve_config` merges CLI flags,
  environment variables, the config file and model defaults into the final
  effective configuration.
* **Directory layout** -- :func:`get_data_dir` (crash logs) follows the XDG
  Base Directory spec on Linux/BSD and ``~/.postmangen/`` elsewhere.
* **Output** -- :func:`write_output` writes the generated collection with a
  temp-file-then-rename strategy (:func:`_atomic_write`) so a crash never
  leaves a half-written collection behind.
"""

from __future__ import annotations

import json
import os
import platform
import tempfile
from pathlib import Path
from typing import Any, Optional, Union

import yaml
from pydantic import ValidationError

from postmangen.exceptions import ConfigError
from postmangen.models import GeneratorConfig, PathVariablePolicy

_APP_NAME = "postmangen"
_PROJECT_CONFIG_FILENAMES = ("postmangen.json", "postmangen.yaml", "postmangen.yml")

_ENV_OVERRIDES: dict[str, str] = {
    "POSTMANGEN_NAME": "name",
    "POSTMANGEN_DESCRIPTION": "description",
    "POSTMANGEN_BASE_URL": "base_url",
    "POSTMANGEN_TOKEN": "token",
    "POSTMANGEN_SCHEMA": "schema_version",
    "POSTMANGEN_OUTPUT": "output",
}
"""Environment variable -> :class:`GeneratorConfig` field."""


# --- XDG path resolution ---


def _is_xdg_platform() -> bool:
    """Return True if the platform supports XDG Base Directory spec (Linux/FreeBSD)."""
    return platform.system() == "Linux" or platform.system().endswith("BSD")


def _xdg_base(env_var: str, default_segments: tuple[str, ...]) -> Path:
    """Resolve an XDG base directory from an env var with fallback segments under $HOME."""
    env_value = os.environ.get(env_var, "")
    if env_value:
        return Path(env_value)
    base = Path.home()
    for seg in default_segments:
        base = base / seg
    return base


def get_data_dir() -> Path:
    """Return the data directory (crash logs), creating it if necessary.

    On Linux/BSD: ``$XDG_DATA_HOME/postmangen/`` (default
    ``~/.local/share/postmangen/``). On macOS/Windows: ``~/.postmangen/``.

    Returns:
        Absolute path to the data directory (guaranteed to exist).
    """
    if _is_xdg_platform():
        path = _xdg_base("XDG_DATA_HOME", (".local", "share")) / _APP_NAME
    else:
        path = Path.home() / f".{_APP_NAME}"
    path.mkdir(parents=True, exist_ok=True)
    return path


# --- Atomic file writes ---


def _atomic_write(path: Path, data: str) -> None:
    """Write data to file atomically using temp file + rename.

    The temporary file is created in the same directory as *path* so that
    ``os.replace`` is guaranteed to be an atomic rename on POSIX systems.
    On success the temp file is renamed over *path*; on any failure the temp
    file is cleaned up.
    """
    path.parent.mkdir(parents=True, exist_ok=True)

    fd = None
    tmp_path: Optional[str] = None
    try:
        fd = tempfile.NamedTemporaryFile(
            mode="w",
            dir=path.parent,
            prefix=f".{path.name}.",
            suffix=".tmp",
            delete=False,
            encoding="utf-8",
        )
        tmp_path = fd.name
        fd.write(data)
        fd.flush()
        os.fsync(fd.fileno())
        fd.close()
        fd = None  # prevent double-close in finally
        os.replace(tmp_path, path)
    except BaseException:
        # Clean up the temp file on any error (including KeyboardInterrupt).
        if fd is not None:
            fd.close()
        if tmp_path is not None:
            try:
                os.unlink(tmp_path)
            except OSError:
                pass
        raise


def write_output(path: Union[str, Path], data: Union[str, bytes]) -> Path:
    """Atomically write a generated collection to *path*.

    Args:
        path: Destination file; parent directories are created.
        data: Document text, or UTF-8 bytes as returned by
            :meth:`~postmangen.collection.Collection.serialize`.

    Returns:
        The destination as a :class:`~pathlib.Path`.
    """
    target = Path(path)
    text = data.decode("utf-8") if isinstance(data, bytes) else data
    _atomic_write(target, text)
    return target


# --- Config files ---


def _parse_config_text(text: str, path: Path) -> dict[str, Any]:
    """Parse JSON or YAML config text, choosing by extension."""
    try:
        if path.suffix.lower() in (".yaml", ".yml"):
            data = yaml.safe_load(text)
        else:
            data = json.loads(text)
    except (json.JSONDecodeError, yaml.YAMLError) as exc:
        raise ConfigError(f"Invalid config at {path}: {exc}") from exc

    if data is None:
        return {}
    if not isinstance(data, dict):
        raise ConfigError(
            f"Invalid config at {path}: expected a mapping, got {type(data).__name__}"
        )
    return data


def _read_config_data(path: Path) -> dict[str, Any]:
    if not path.is_file():
        raise ConfigError(f"Config file not found: {path}")
    try:
        text = path.read_text(encoding="utf-8")
    except OSError as exc:
        raise ConfigError(f"Cannot read config file {path}: {exc}") from exc
    return _parse_config_text(text, path)


def _validate(data: dict[str, Any], source: str) -> GeneratorConfig:
    try:
        return GeneratorConfig.model_validate(data)
    except ValidationError as exc:
        raise ConfigError(f"Invalid config ({source}): {exc}") from exc


def load_config_file(path: Union[str, Path]) -> GeneratorConfig:
    """Load and validate a JSON or YAML config file.

    Args:
        path: Path to a ``.json``, ``.yaml`` or ``.yml`` file.

    Returns:
        The deserialised :class:`~postmangen.models.GeneratorConfig`.

    Raises:
        ConfigError: If the file does not exist, cannot be parsed, or fails
            Pydantic validation.
    """
    target = Path(path)
    return _validate(_read_config_data(target), str(target))


def find_project_config() -> Optional[Path]:
    """Return the first project config file in the working directory, if any."""
    for filename in _PROJECT_CONFIG_FILENAMES:
        candidate = Path.cwd() / filename
        if candidate.is_file():
            return candidate
    return None


def load_project_config() -> Optional[dict[str, Any]]:
    """Load project-local configuration from ``./postmangen.{json,yaml,yml}``.

    Returns:
        The parsed mapping, or ``None`` if no project config exists.

    Raises:
        ConfigError: If the file exists but cannot be parsed.
    """
    path = find_project_config()
    if path is None:
        return None
    return _read_config_data(path)


# --- Precedence resolution ---


def resolve_config(
    config_path: Optional[Union[str, Path]] = None,
    *,
    cli_name: Optional[str] = None,
    cli_base_url: Optional[str] = None,
    cli_schema: Optional[str] = None,
    cli_output: Optional[str] = None,
    cli_strict_params: Optional[bool] = None,
) -> GeneratorConfig:
    """Resolve config with full precedence chain.

    Precedence (high to low):
        1. CLI flags (``cli_*`` arguments)
        2. Environment variables (``POSTMANGEN_NAME``, ``POSTMANGEN_BASE_URL``,
           ``POSTMANGEN_TOKEN``, ``POSTMANGEN_SCHEMA``, ``POSTMANGEN_OUTPUT``,
           ``POSTMANGEN_DESCRIPTION``)
        3. Config file (*config_path*, else ``./postmangen.{json,yaml,yml}``)
        4. Defaults

    Returns:
        The effective :class:`~postmangen.models.GeneratorConfig`.

    Raises:
        ConfigError: If a config file is invalid or the merged values fail
            validation.
    """
    # 3. Config file
    if config_path is not None:
        data = _read_config_data(Path(config_path))
    else:
        data = load_project_config() or {}

    # 2. Environment variables
    for env_var, field_name in _ENV_OVERRIDES.items():
        value = os.environ.get(env_var)
        if value:
            data[field_name] = value

    # 1. CLI flags (highest precedence)
    overrides = {
        "name": cli_name,
        "base_url": cli_base_url,
        "schema_version": cli_schema,
        "output": cli_output,
    }
    for field_name, value in overrides.items():
        if value is not None:
            data[field_name] = value
    if cli_strict_params is not None:
        data["unmatched_path_variable"] = (
            PathVariablePolicy.ERROR if cli_strict_params else PathVariablePolicy.LITERAL
        )

    return _validate(data, "resolved")
