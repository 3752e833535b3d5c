"""
Configuration Module

Settings are read from a TOML file (default: translation-api.toml in the working
directory) with four tables:

    [database]   driver, file (sqlite3) or host/port/name/user/password (postgres)
    [server]     host, port
    [xliff]      import_path, export_path, source_language
    [logging]    mode (debug|info|off), file

Anything not given in the file keeps the defaults below.
"""

import tomllib
from dataclasses import dataclass, field, fields
from pathlib import Path
from typing import Any, Dict, Optional
from urllib.parse import quote

from transapi.exceptions import ConfigError
from transapi.logger import LOG_MODES, get_logger, set_log_mode

logger = get_logger(__name__)

DRIVER_SQLITE3 = "sqlite3"
DRIVER_POSTGRES = "postgres"
DRIVERS = (DRIVER_POSTGRES, DRIVER_SQLITE3)

DEFAULT_CONFIG_FILE = Path("translation-api.toml")
DEFAULT_SERVER_PORT = 8181
DEFAULT_POSTGRES_PORT = 5432
# Pending re-export requests held by the background export worker
EXPORT_QUEUE_SIZE = 100


@dataclass
class DbConfig:
    driver: str = DRIVER_SQLITE3
    # When driver is sqlite3, the path to the database file
    file: str = "translations.db"
    host: str = ""
    port: int = DEFAULT_POSTGRES_PORT
    name: str = ""
    user: str = ""
    password: str = ""

    def connection_string(self) -> str:
        """File path for sqlite3, connection URL for postgres."""
        if self.driver == DRIVER_POSTGRES:
            return (
                f"postgresql://{quote(self.user)}:{quote(self.password)}"
                f"@{self.host}:{self.port}/{self.name}"
            )
        return self.file


@dataclass
class ServerConfig:
    host: str = "0.0.0.0"
    port: int = DEFAULT_SERVER_PORT


@dataclass
class XliffConfig:
    import_path: str = "xliff-in"
    export_path: str = "xliff-out"
    # Language whose content fills the <source> element of exported files
    source_language: str = "en"


@dataclass
class LoggingConfig:
    mode: str = "info"
    file: Optional[str] = None


@dataclass
class Config:
    db: DbConfig = field(default_factory=DbConfig)
    server: ServerConfig = field(default_factory=ServerConfig)
    xliff: XliffConfig = field(default_factory=XliffConfig)
    logging: LoggingConfig = field(default_factory=LoggingConfig)

    def validate(self, require_import_path: bool = False):
        """Raise ConfigError if the configuration cannot be used."""
        db = self.db
        if db.driver not in DRIVERS:
            raise ConfigError(
                f"config: invalid database.driver value. (Must be one of: '{', '.join(DRIVERS)}')"
            )
        if db.driver == DRIVER_SQLITE3 and not db.file:
            raise ConfigError("config: missing database.file value")
        if db.driver == DRIVER_POSTGRES:
            if not db.host:
                raise ConfigError("config: missing database.host value")
            if not db.name:
                raise ConfigError("config: missing database.name value")
            if not db.user:
                raise ConfigError("config: missing database.user value")
            if db.port < 0:
                raise ConfigError("config: invalid database.port value")
        if self.server.port < 0:
            raise ConfigError("config: server.port is invalid")
        if not self.xliff.import_path:
            raise ConfigError("config: missing xliff.import_path value")
        if not self.xliff.export_path:
            raise ConfigError("config: missing xliff.export_path value")
        if not self.xliff.source_language:
            raise ConfigError("config: missing xliff.source_language value")
        if self.logging.mode not in LOG_MODES:
            raise ConfigError(f"config: logging.mode must be one of: {', '.join(LOG_MODES)}")
        if require_import_path and not Path(self.xliff.import_path).is_dir():
            raise ConfigError(f"config: xliff.import_path '{self.xliff.import_path}' does not exist")


def _apply_section(target, section_name: str, values: Dict[str, Any]):
    """Copy known keys of a TOML table onto a dataclass, rejecting unknown keys."""
    if not isinstance(values, dict):
        raise ConfigError(f"config: [{section_name}] must be a table")
    known = {f.name: f for f in fields(target)}
    for key, value in values.items():
        if key not in known:
            raise ConfigError(f"config: unknown key '{section_name}.{key}'")
        expected = known[key].type
        if expected is int and not isinstance(value, int):
            raise ConfigError(f"config: {section_name}.{key} must be an integer")
        if expected is str and not isinstance(value, str):
            raise ConfigError(f"config: {section_name}.{key} must be a string")
        setattr(target, key, value)


def config_from_dict(data: Dict[str, Any]) -> Config:
    """Build a Config from parsed TOML data, on top of the defaults."""
    config = Config()
    sections = {
        "database": config.db,
        "server": config.server,
        "xliff": config.xliff,
        "logging": config.logging,
    }
    for section_name, values in data.items():
        if section_name not in sections:
            raise ConfigError(f"config: unknown section [{section_name}]")
        _apply_section(sections[section_name], section_name, values)
    return config


def load_config(path=DEFAULT_CONFIG_FILE, require_import_path: bool = False) -> Config:
    """Load configuration from a TOML file and check its validity."""
    path = Path(path)
    try:
        with open(path, "rb") as f:
            data = tomllib.load(f)
    except FileNotFoundError:
        raise ConfigError(f"config: file '{path}' not found") from None
    except tomllib.TOMLDecodeError as e:
        raise ConfigError(f"config: could not parse '{path}': {e}") from e

    config = config_from_dict(data)
    config.validate(require_import_path=require_import_path)
    logger.debug(f"Configuration loaded from {path}")
    return config


def apply_logging_config(config: Config):
    """Switch all loggers to the configured log mode."""
    set_log_mode(config.logging.mode, config.logging.file)
