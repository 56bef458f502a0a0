"""Application configuration loaded from a TOML file."""

from __future__ import annotations

import logging
import shutil
import threading
import tomllib
from dataclasses import dataclass, field
from dataclasses import fields as dataclass_fields
from pathlib import Path
from typing import Any, Mapping

logger = logging.getLogger(__name__)

CONFIG_LOGGER_DOMAIN = "[CONFIG]"
CONFIG_DIR = Path("config")
CONFIG_FILE = CONFIG_DIR / "config.toml"
TEMPLATE_FILE = Path("config.template")


class ConfigError(Exception):
    """Raised when the configuration cannot be located, read or parsed."""


@dataclass(frozen=True)
class EmbyConfig:
    """Connection settings for the Emby server."""

    base_url: str = "http://127.0.0.1:8096"
    api_key: str = field(default_factory=str, repr=False)


def _required_str(table: Mapping[str, Any], key: str, section: str) -> str:
    try:
        value = table[key]
    except KeyError:
        raise ConfigError(f"missing field `{key}` in [{section}]") from None
    if not isinstance(value, str):
        raise ConfigError(
            f"invalid type for `{key}` in [{section}]: expected a string, "
            f"got {type(value).__name__}"
        )
    return value


def _emby_from_table(table: Any) -> EmbyConfig:
    if not isinstance(table, Mapping):
        raise ConfigError("[emby] must be a table")
    values = {f.name: _required_str(table, f.name, "emby") for f in dataclass_fields(EmbyConfig)}
    return EmbyConfig(**values)


@dataclass(frozen=True)
class Config:
    """Top-level configuration."""

    emby: EmbyConfig

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> Config:
        """Build a configuration from parsed TOML data; unknown keys are ignored."""
        if not isinstance(data, Mapping):
            raise ConfigError("configuration must be a table")
        if "emby" not in data:
            raise ConfigError("missing field `emby`")
        return cls(emby=_emby_from_table(data["emby"]))


def parse_config(text: str) -> Config:
    """Parse TOML ``text`` into a :class:`Config`."""
    try:
        data = tomllib.loads(text)
    except tomllib.TOMLDecodeError as exc:
        raise ConfigError(f"invalid TOML: {exc}") from exc
    return Config.from_dict(data)


def load_config(
    config_dir: str | Path = CONFIG_DIR,
    config_file: str | Path = CONFIG_FILE,
    template_file: str | Path = TEMPLATE_FILE,
) -> Config:
    """Load the configuration file, creating it from the template when absent."""
    config_dir = Path(config_dir)
    config_file = Path(config_file)
    template_file = Path(template_file)
    try:
        if not config_dir.exists():
            config_dir.mkdir()
            logger.info("%s 📂 Create config directory: %s", CONFIG_LOGGER_DOMAIN, config_dir)
        if not config_file.exists():
            if not template_file.exists():
                logger.error(
                    "%s ❌ Config template file missing: %s", CONFIG_LOGGER_DOMAIN, template_file
                )
                raise ConfigError(f"Config template file missing: {template_file}")
            shutil.copyfile(template_file, config_file)
            logger.info(
                "%s 📄 Copy default config: %s -> %s",
                CONFIG_LOGGER_DOMAIN,
                template_file,
                config_file,
            )
        text = config_file.read_text(encoding="utf-8")
    except OSError as exc:
        raise ConfigError(str(exc)) from exc
    config = parse_config(text)
    logger.info("%s ✅ Config load success at %s", CONFIG_LOGGER_DOMAIN, config_file)
    return config


_lock = threading.Lock()
_current: Config | None = None


def get_config() -> Config:
    """Return the shared configuration, loading it on first use."""
    global _current
    with _lock:
        if _current is None:
            try:
                _current = load_config()
            except ConfigError as exc:
                logger.error("%s Config load fail: %s", CONFIG_LOGGER_DOMAIN, exc)
                raise
        return _current


def set_config(config: Config | None) -> None:
    """Replace the shared configuration; ``None`` makes the next access reload it."""
    global _current
    with _lock:
        _current = config