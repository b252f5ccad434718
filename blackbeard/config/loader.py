import configparser
import logging
import os
from pathlib import Path
from typing import Any, Callable, Dict, List, Mapping, Optional, Tuple

from pydantic import ValidationError

from blackbeard.constants import (
    CONFIG_SECTION,
    ENV_API_KEY,
    ENV_BASE_URL,
    ENV_DEBUG,
    ENV_TIMEOUT,
    FALSY_VALUES,
    TRUTHY_VALUES,
    get_config_file,
)
from blackbeard.errors import ConfigurationError

from .log_codes import (
    SETTINGS_FILE_INVALID,
    SETTINGS_FILE_MISSING,
    SETTINGS_INVALID_VALUE,
    SETTINGS_MISSING_SECTION,
    SETTINGS_RESOLVED,
    SETTINGS_SAVED,
)
from .settings import ClientSettings

logger = logging.getLogger(__name__)


API_KEY_KEY = "api_key"
BASE_URL_KEY = "base_url"
DEBUG_KEY = "debug"
TIMEOUT_KEY = "timeout"

ENV_KEYS = {
    API_KEY_KEY: ENV_API_KEY,
    BASE_URL_KEY: ENV_BASE_URL,
    DEBUG_KEY: ENV_DEBUG,
    TIMEOUT_KEY: ENV_TIMEOUT,
}


def parse_bool(value: str, source: str = "unknown") -> bool:
    """
    Parse a boolean flag as written in the environment or config.ini.

    Raises:
        ConfigurationError: If the value is not a recognised flag.
    """
    normalized = value.strip().lower()

    if normalized in TRUTHY_VALUES:
        return True
    if normalized in FALSY_VALUES:
        return False

    logger.error(SETTINGS_INVALID_VALUE, extra={"key": DEBUG_KEY, "source": source})
    raise ConfigurationError(f"Invalid debug flag {value!r} in {source}.")


def parse_timeout(value: str, source: str = "unknown") -> float:
    try:
        return float(value)
    except ValueError:
        logger.error(
            SETTINGS_INVALID_VALUE, extra={"key": TIMEOUT_KEY, "source": source}
        )
        raise ConfigurationError(f"Invalid timeout {value!r} in {source}.")


PARSERS: Dict[str, Callable[[str, str], Any]] = {
    DEBUG_KEY: parse_bool,
    TIMEOUT_KEY: parse_timeout,
}


def _parse(key: str, value: str, source: str) -> Any:
    parser = PARSERS.get(key)
    return parser(value, source) if parser else value


def _settings_from_env(environ: Mapping[str, str]) -> Dict[str, Any]:
    values: Dict[str, Any] = {}

    for key, env_name in ENV_KEYS.items():
        raw = environ.get(env_name)
        if raw is not None:
            values[key] = _parse(key, raw, source=env_name)

    return values


def _read_config_ini(config_path: Path) -> Tuple[configparser.ConfigParser, List[str]]:
    """
    Read config.ini without interpolation, so values may contain ``%``.

    Raises:
        ConfigurationError: If the file is not valid INI.
    """
    config = configparser.ConfigParser(interpolation=None)

    try:
        config_files = config.read(filenames=[config_path])
    except configparser.Error as e:
        logger.error(SETTINGS_FILE_INVALID, extra={"config_path": str(config_path)})
        raise ConfigurationError(f"Unable to read {config_path}: {e}") from e

    return config, config_files


def _settings_from_config_ini(config_path: Path) -> Dict[str, Any]:
    """
    Read the ``[pirate_metrics]`` section of config.ini.

    Args:
        config_path (Path): The path to the config.ini file.

    Returns:
        Dict[str, Any]: The values found, possibly empty.
    """
    config, config_files = _read_config_ini(config_path)

    if not config_files:
        logger.debug(SETTINGS_FILE_MISSING, extra={"config_path": str(config_path)})
        return {}

    if not config.has_section(CONFIG_SECTION):
        logger.debug(
            SETTINGS_MISSING_SECTION, extra={"config_path": str(config_path)}
        )
        return {}

    section = config[CONFIG_SECTION]
    source = f"{config_path} [{CONFIG_SECTION}]"

    return {
        key: _parse(key, section[key], source=source)
        for key in ENV_KEYS
        if key in section
    }


def load_settings(
    api_key: Optional[str] = None,
    base_url: Optional[str] = None,
    debug: Optional[bool] = None,
    timeout: Optional[float] = None,
    config_path: Optional[Path] = None,
    environ: Optional[Mapping[str, str]] = None,
) -> ClientSettings:
    """
    Resolve the effective client settings.

    Resolution order per setting (first non-None wins):
      1. Explicit arguments
      2. Environment variables
      3. config.ini file
      4. Defaults

    Args:
        api_key (Optional[str]): Explicit API key.
        base_url (Optional[str]): Explicit base URL.
        debug (Optional[bool]): Explicit debug flag.
        timeout (Optional[float]): Explicit request timeout in seconds.
        config_path (Optional[Path]): The config.ini to read, defaults to the user one.
        environ (Optional[Mapping[str, str]]): Environment, defaults to ``os.environ``.

    Returns:
        ClientSettings: The resolved settings.

    Raises:
        ConfigurationError: If a value cannot be parsed or is invalid.
    """
    config_path = config_path or get_config_file()
    environ = os.environ if environ is None else environ

    explicit = {
        API_KEY_KEY: api_key,
        BASE_URL_KEY: base_url,
        DEBUG_KEY: debug,
        TIMEOUT_KEY: timeout,
    }

    sources = [
        ("cli", {k: v for k, v in explicit.items() if v is not None}),
        ("env", _settings_from_env(environ)),
        ("config", _settings_from_config_ini(config_path)),
    ]

    values: Dict[str, Any] = {}
    origins: Dict[str, str] = {}

    for source_name, found in sources:
        for key, value in found.items():
            if key not in values:
                values[key] = value
                origins[key] = source_name

    try:
        settings = ClientSettings(**values)
    except ValidationError as e:
        raise ConfigurationError(f"Invalid Pirate Metrics settings: {e}") from e

    logger.debug(
        SETTINGS_RESOLVED,
        extra={"origins": origins, "config_path": str(config_path)},
    )
    return settings


def save_settings(
    api_key: Optional[str] = None,
    base_url: Optional[str] = None,
    debug: Optional[bool] = None,
    timeout: Optional[float] = None,
    config_path: Optional[Path] = None,
) -> Path:
    """
    Persist the given values to the ``[pirate_metrics]`` section of config.ini.

    Values left as None keep whatever the file already holds.

    Returns:
        Path: The file written.
    """
    config_path = config_path or get_config_file()

    config, _ = _read_config_ini(config_path)

    if not config.has_section(CONFIG_SECTION):
        config.add_section(CONFIG_SECTION)

    updates = {
        API_KEY_KEY: api_key,
        BASE_URL_KEY: base_url,
        DEBUG_KEY: None if debug is None else str(debug).lower(),
        TIMEOUT_KEY: None if timeout is None else str(timeout),
    }

    for key, value in updates.items():
        if value is not None:
            config.set(CONFIG_SECTION, key, value)

    config_path.parent.mkdir(parents=True, exist_ok=True)

    with open(config_path, "w") as configfile:
        config.write(configfile)

    logger.info(SETTINGS_SAVED, extra={"config_path": str(config_path)})
    return config_path
