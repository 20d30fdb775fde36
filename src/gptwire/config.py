"""Client configuration: where it lives, how it is read, where keys come from.

Directories follow the XDG Base Directory layout on Linux and the BSDs
(``$XDG_CONFIG_HOME/gptwire``, ``$XDG_CACHE_HOME/gptwire``) and a single
``~/.gptwire`` tree elsewhere.

:func:`load_config` reads one JSON document into a
:class:`~gptwire.models.ClientConfig` and then applies environment overrides:

==================== ==========================================
``GPTWIRE_BASE_URL``  replaces ``request.base_url``
``GPTWIRE_CACHE``     replaces ``cache.strategy`` (case-insensitive)
``GPTWIRE_CACHE_DIR`` replaces ``cache.directory``
==================== ==========================================

Anything written to disk (the config file, filesystem cache entries) goes
through :func:`_atomic_write`.
"""

from __future__ import annotations

import json
import os
import platform
import tempfile
from pathlib import Path
from typing import Optional

from pydantic import ValidationError

from gptwire.exceptions import ConfigError
from gptwire.models import CacheStrategy, ClientConfig

_APP_NAME = "gptwire"
_CONFIG_FILENAME = "config.json"


# --- Directories ---


def _is_xdg_platform() -> bool:
    system = platform.system()
    return system == "Linux" or system.endswith("BSD")


def _app_dir(xdg_var: str, xdg_default: str, fallback: Optional[str] = None) -> Path:
    """Resolve (and create) one of gptwire's per-user directories.

    Args:
        xdg_var: XDG environment variable consulted first, e.g. ``XDG_CACHE_HOME``.
        xdg_default: Directory under ``$HOME`` used when *xdg_var* is unset.
        fallback: Subdirectory of ``~/.gptwire`` on non-XDG platforms.
    """
    if _is_xdg_platform():
        root = os.environ.get(xdg_var) or str(Path.home() / xdg_default)
        path = Path(root) / _APP_NAME
    else:
        path = Path.home() / f".{_APP_NAME}"
        if fallback:
            path = path / fallback
    path.mkdir(parents=True, exist_ok=True)
    return path


def get_config_dir() -> Path:
    """``~/.config/gptwire`` (XDG) or ``~/.gptwire``."""
    return _app_dir("XDG_CONFIG_HOME", ".config")


def get_cache_dir() -> Path:
    """``~/.cache/gptwire`` (XDG) or ``~/.gptwire/cache``.

    Nothing in here is ever expired by gptwire; deleting the directory is
    always safe.
    """
    return _app_dir("XDG_CACHE_HOME", ".cache", fallback="cache")


# --- Atomic writes ---


def _atomic_write(path: Path, data: str) -> None:
    """Replace *path* with *data* so readers see the old file or the new one.

    The data goes to a sibling temp file that is fsynced and then renamed
    over *path*.  If anything fails the temp file is removed and *path* is
    untouched.
    """
    path.parent.mkdir(parents=True, exist_ok=True)
    handle, tmp_name = tempfile.mkstemp(dir=path.parent, prefix=f".{path.name}.", suffix=".tmp")
    try:
        with os.fdopen(handle, "w", encoding="utf-8") as tmp:
            tmp.write(data)
            tmp.flush()
            os.fsync(tmp.fileno())
        os.replace(tmp_name, path)
    except BaseException:
        Path(tmp_name).unlink(missing_ok=True)
        raise


# --- Loading and saving ---


def _default_config_path() -> Path:
    return get_config_dir() / _CONFIG_FILENAME


def _read_config_file(path: Path, required: bool) -> dict:
    if not path.is_file():
        if required:
            raise ConfigError(f"Config file not found: {path}")
        return {}
    try:
        return json.loads(path.read_text(encoding="utf-8"))
    except json.JSONDecodeError as exc:
        raise ConfigError(f"Invalid config at {path}: {exc}") from exc


def _apply_env_overrides(config: ClientConfig) -> None:
    base_url = os.environ.get("GPTWIRE_BASE_URL")
    if base_url:
        config.request.base_url = base_url

    strategy = os.environ.get("GPTWIRE_CACHE")
    if strategy:
        try:
            config.cache.strategy = CacheStrategy(strategy.lower())
        except ValueError as exc:
            choices = ", ".join(member.value for member in CacheStrategy)
            raise ConfigError(
                f"Unknown cache strategy in GPTWIRE_CACHE: {strategy!r} (expected one of {choices})"
            ) from exc

    cache_dir = os.environ.get("GPTWIRE_CACHE_DIR")
    if cache_dir:
        config.cache.directory = cache_dir


def load_config(path: Optional[str | Path] = None) -> ClientConfig:
    """Build the effective :class:`~gptwire.models.ClientConfig`.

    Environment overrides win over the file, which wins over the defaults.
    A missing file at the default location just means "all defaults"; a
    missing file at an explicit *path* is an error.

    Raises:
        ConfigError: On a missing explicit file, malformed JSON, a schema
            violation, or an invalid ``GPTWIRE_CACHE`` value.
    """
    config_path = Path(path) if path is not None else _default_config_path()
    data = _read_config_file(config_path, required=path is not None)

    try:
        config = ClientConfig.model_validate(data)
    except ValidationError as exc:
        raise ConfigError(f"Invalid config at {config_path}: {exc}") from exc

    _apply_env_overrides(config)
    return config


def save_config(config: ClientConfig, path: Optional[str | Path] = None) -> Path:
    """Write *config* as indented JSON and return where it went."""
    config_path = Path(path) if path is not None else _default_config_path()
    _atomic_write(config_path, json.dumps(config.model_dump(mode="json"), indent=2) + "\n")
    return config_path


# --- Credentials ---


def resolve_credential(source: str) -> str:
    """Return the API key named by *source*.

    ``env:NAME`` reads an environment variable; ``file:PATH`` reads a file
    (``~`` expanded, surrounding whitespace stripped).

    Raises:
        ConfigError: If the variable is unset, the file is missing or
            unreadable, or the prefix is not recognised.
    """
    kind, _, ref = source.partition(":")

    if kind == "env":
        value = os.environ.get(ref)
        if value is None:
            raise ConfigError(f"Environment variable '{ref}' is not set (source: {source})")
        return value

    if kind == "file":
        key_path = Path(ref).expanduser()
        if not key_path.is_file():
            raise ConfigError(f"Credential file not found: {key_path} (source: {source})")
        try:
            return key_path.read_text(encoding="utf-8").strip()
        except OSError as exc:
            raise ConfigError(f"Cannot read credential file {key_path}: {exc}") from exc

    raise ConfigError(f"Unknown credential source format: {source}")
