"""Infrastructure: the JSON config file and its environment overrides.

Layout
------
``$OCTL_CONFIG_DIR`` (default ``~/.config/octl``) holds::

    config.json        client/tenant settings
    auth_record.json   serialized authentication record (see infra.auth)

The directory is created with mode ``0700`` and every file is written
with mode ``0600``.
"""

from __future__ import annotations

import json
import logging
import os
from dataclasses import asdict, dataclass
from pathlib import Path

from octl.exceptions import ConfigError

logger = logging.getLogger(__name__)

ENV_CONFIG_DIR = "OCTL_CONFIG_DIR"
ENV_CLIENT_ID = "OCTL_CLIENT_ID"
ENV_TENANT_ID = "OCTL_TENANT_ID"

CONFIG_FILE = "config.json"
AUTH_RECORD_FILE = "auth_record.json"

DEFAULT_TENANT = "common"
"""Accepts both personal and work/school accounts."""

DIR_MODE = 0o700
FILE_MODE = 0o600


@dataclass(slots=True)
class Config:
    """Persisted settings.  Empty fields are omitted on write."""

    client_id: str = ""
    tenant_id: str = ""
    allow_unencrypted_storage: bool = False

    def to_dict(self) -> dict[str, object]:
        return {key: value for key, value in asdict(self).items() if value}


# ---------------------------------------------------------------------------
# Paths
# ---------------------------------------------------------------------------

def config_dir() -> Path:
    override = os.environ.get(ENV_CONFIG_DIR, "").strip()
    if override:
        return Path(override).expanduser()
    return Path.home() / ".config" / "octl"


def config_path() -> Path:
    return config_dir() / CONFIG_FILE


def auth_record_path() -> Path:
    return config_dir() / AUTH_RECORD_FILE


def ensure_config_dir() -> Path:
    """Create the config directory (mode 0700) if needed and return it."""
    directory = config_dir()
    try:
        directory.mkdir(mode=DIR_MODE, parents=True, exist_ok=True)
    except OSError as exc:
        raise ConfigError(f"Cannot create config directory {directory}: {exc}") from exc
    return directory


def write_private_file(path: Path, content: str) -> None:
    """Write *content* to *path* readable by the owner only."""
    ensure_config_dir()
    try:
        fd = os.open(path, os.O_WRONLY | os.O_CREAT | os.O_TRUNC, FILE_MODE)
        with os.fdopen(fd, "w", encoding="utf-8") as handle:
            handle.write(content)
        # O_CREAT's mode is ignored for files that already exist.
        os.chmod(path, FILE_MODE)
    except OSError as exc:
        raise ConfigError(f"Cannot write {path}: {exc}") from exc


# ---------------------------------------------------------------------------
# Load / save
# ---------------------------------------------------------------------------

def load() -> Config:
    """Read the config file; a missing file yields an empty :class:`Config`.

    Raises
    ------
    ConfigError
        When the file exists but cannot be read or parsed.
    """
    path = config_path()
    try:
        raw = path.read_text(encoding="utf-8")
    except FileNotFoundError:
        logger.debug("no config file at %s", path)
        return Config()
    except OSError as exc:
        raise ConfigError(f"Cannot read config file {path}: {exc}") from exc

    try:
        data = json.loads(raw)
    except json.JSONDecodeError as exc:
        raise ConfigError(
            f"Config file {path} is not valid JSON: {exc}",
            hint="Fix or delete the file and run 'octl auth login' again.",
        ) from exc
    if not isinstance(data, dict):
        raise ConfigError(f"Config file {path} must contain a JSON object.")

    return Config(
        client_id=str(data.get("client_id") or ""),
        tenant_id=str(data.get("tenant_id") or ""),
        allow_unencrypted_storage=bool(data.get("allow_unencrypted_storage", False)),
    )


def save(cfg: Config) -> None:
    path = config_path()
    write_private_file(path, json.dumps(cfg.to_dict(), indent=2) + "\n")
    logger.debug("saved config to %s", path)


# ---------------------------------------------------------------------------
# Accessors
# ---------------------------------------------------------------------------

def get_client_id() -> str:
    """Client ID from ``$OCTL_CLIENT_ID``, else the config file, else ``""``."""
    from_env = os.environ.get(ENV_CLIENT_ID, "").strip()
    if from_env:
        return from_env
    try:
        return load().client_id
    except ConfigError as exc:
        logger.debug("ignoring unreadable config: %s", exc)
        return ""


def set_client_id(client_id: str) -> None:
    try:
        cfg = load()
    except ConfigError:
        cfg = Config()
    cfg.client_id = client_id.strip()
    save(cfg)


def get_tenant_id() -> str:
    from_env = os.environ.get(ENV_TENANT_ID, "").strip()
    if from_env:
        return from_env
    try:
        tenant = load().tenant_id
    except ConfigError:
        tenant = ""
    return tenant or DEFAULT_TENANT


def get_allow_unencrypted_storage() -> bool:
    try:
        return load().allow_unencrypted_storage
    except ConfigError:
        return False
