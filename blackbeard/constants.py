# -*- coding: utf-8 -*-
import os
from pathlib import Path

DIR_NAME = ".blackbeard"


def get_user_dir() -> Path:
    """
    Get the user directory for the blackbeard configuration.

    Returns:
        Path: The user directory path.
    """
    path = Path("~", DIR_NAME).expanduser()
    return path


def get_config_file() -> Path:
    """
    Get the config.ini location, honouring BLACKBEARD_CONFIG_PATH.

    Returns:
        Path: The config file path.
    """
    raw_path = os.getenv(ENV_CONFIG_PATH)

    if raw_path:
        return Path(raw_path).expanduser()

    return USER_CONFIG_DIR / CONFIG_FILE_NAME


USER_CONFIG_DIR = get_user_dir()
CONFIG_FILE_NAME = "config.ini"
CONFIG_SECTION = "pirate_metrics"

DEFAULT_BASE_URL = "http://piratemetrics.com/api/v1/"
DEFAULT_REQUEST_TIMEOUT = 10.0

# Environment variables
ENV_API_KEY = "BLACKBEARD_API_KEY"
ENV_BASE_URL = "BLACKBEARD_BASE_URL"
ENV_DEBUG = "BLACKBEARD_DEBUG"
ENV_TIMEOUT = "BLACKBEARD_TIMEOUT"
ENV_CONFIG_PATH = "BLACKBEARD_CONFIG_PATH"

TRUTHY_VALUES = ("1", "true", "yes", "on")
FALSY_VALUES = ("0", "false", "no", "off", "")

# Exit codes
EXIT_CODE_FAILURE = 1
EXIT_CODE_INVALID_EVENT = 64
EXIT_CODE_CONFIGURATION = 78

# Messages
MSG_API_KEY_REQUIRED = "API key required!"
MSG_BULK_INVALID = "Unable to validate data."
MSG_BULK_EMPTY = "At least one event is required."
MSG_NOT_SERIALIZABLE = "Unable to encode data as JSON:"
MSG_UNKNOWN_EVENT_TYPE = "Unknown event type:"
