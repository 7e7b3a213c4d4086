"""Configuration resolution, XDG data paths, and atomic writes.

This module handles everything mcpgen reads or writes outside the document
and the output directory:

* **Option resolution** -- :func:`resolve_options` merges CLI flags,
  ``MCPGEN_*`` environment variables, and a project-local ``mcpgen.json``
  into one immutable :class:`~mcpgen.models.GeneratorOptions`.
* **Data directory** -- XDG Base Directory compliant on Linux/BSD,
  ``~/.mcpgen/`` on macOS and Windows. Crash logs live here.
* **Atomic writes** -- generated files are written through
  :func:`_atomic_write` (temp file in the same directory, then
  ``os.replace``), so an interrupted run never leaves a half-written server.
"""

from __future__ import annotations

import json
import os
import platform
import tempfile
from pathlib import Path
from typing import Any, Optional

from pydantic import ValidationError

from mcpgen.exceptions import ConfigError
from mcpgen.models import GeneratorOptions

_APP_NAME = "mcpgen"
_PROJECT_CONFIG_FILENAME = "mcpgen.json"

ENV_OVERRIDES: dict[str, str] = {
    "MCPGEN_TRANSPORT": "transport",
    "MCPGEN_HEADER_MODE": "header_mode",
    "MCPGEN_BASE_URL": "default_base_url",
}
"""Environment variable -> :class:`~mcpgen.models.GeneratorOptions` field."""


# --- XDG path resolution ---


def _is_xdg_platform() -> bool:
    return platform.system() == "Linux" or platform.system().endswith("BSD")


def get_data_dir() -> Path:
    """Return the data directory (crash logs), creating it if necessary.

    On Linux/BSD: ``$XDG_DATA_HOME/mcpgen/`` (default ``~/.local/share/mcpgen/``).
    On macOS/Windows: ``~/.mcpgen/``.
    """
    if _is_xdg_platform():
        env_value = os.environ.get("XDG_DATA_HOME", "")
        base = Path(env_value) if env_value else Path.home() / ".local" / "share"
        path = base / _APP_NAME
    else:
        path = Path.home() / f".{_APP_NAME}"
    path.mkdir(parents=True, exist_ok=True)
    return path


# --- Atomic file writes ---


def _atomic_write(path: Path, data: str) -> None:
    """Write *data* to *path* atomically using a temp file and rename.

    The temp file lives next to *path* so ``os.replace`` is an atomic rename
    on POSIX. It is removed again if anything fails, including
    ``KeyboardInterrupt``.
    """
    path.parent.mkdir(parents=True, exist_ok=True)

    handle = None
    tmp_path: Optional[str] = None
    try:
        handle = tempfile.NamedTemporaryFile(
            mode="w",
            dir=path.parent,
            prefix=f".{path.name}.",
            suffix=".tmp",
            delete=False,
            encoding="utf-8",
        )
        tmp_path = handle.name
        handle.write(data)
        handle.flush()
        os.fsync(handle.fileno())
        handle.close()
        handle = None
        os.replace(tmp_path, path)
    except BaseException:
        if handle is not None:
            handle.close()
        if tmp_path is not None and os.path.exists(tmp_path):
            os.unlink(tmp_path)
        raise


# --- Project-local config ---


def load_project_config(directory: Optional[Path] = None) -> Optional[dict[str, Any]]:
    """Load ``mcpgen.json`` from *directory* (default: the working directory).

    Keys are :class:`~mcpgen.models.GeneratorOptions` field names, e.g.::

        {"transport": "http", "indent_size": 2, "dedupe_names": true}

    Returns:
        The parsed mapping, or ``None`` when the file does not exist.

    Raises:
        ConfigError: If the file is not valid JSON or not an object.
    """
    path = (directory or Path.cwd()) / _PROJECT_CONFIG_FILENAME
    if not path.is_file():
        return None
    try:
        data = json.loads(path.read_text(encoding="utf-8"))
    except (json.JSONDecodeError, OSError) as exc:
        raise ConfigError(f"Invalid project config at {path}: {exc}") from exc
    if not isinstance(data, dict):
        raise ConfigError(f"Invalid project config at {path}: expected a JSON object")
    return data


# --- Precedence resolution ---


def resolve_options(
    cli: Optional[dict[str, Any]] = None,
    project_dir: Optional[Path] = None,
) -> GeneratorOptions:
    """Resolve :class:`~mcpgen.models.GeneratorOptions` from every source.

    Precedence (high to low):
        1. CLI flags (*cli*; ``None`` values mean "not given")
        2. Environment variables (see :data:`ENV_OVERRIDES`)
        3. Project config (``./mcpgen.json``)
        4. Defaults

    Raises:
        ConfigError: If the project file is malformed or any merged value
            fails validation.
    """
    merged: dict[str, Any] = {}

    project = load_project_config(project_dir)
    if project:
        unknown = sorted(set(project) - set(GeneratorOptions.model_fields))
        if unknown:
            raise ConfigError(f"Unknown keys in {_PROJECT_CONFIG_FILENAME}: {', '.join(unknown)}")
        merged.update(project)

    for env_var, field in ENV_OVERRIDES.items():
        value = os.environ.get(env_var)
        if value:
            merged[field] = value

    if cli:
        merged.update({k: v for k, v in cli.items() if v is not None})

    try:
        return GeneratorOptions.model_validate(merged)
    except ValidationError as exc:
        problems = "; ".join(
            f"{'.'.join(str(p) for p in err['loc'])}: {err['msg']}" for err in exc.errors()
        )
        raise ConfigError(f"Invalid generator options: {problems}") from exc
