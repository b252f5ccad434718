from importlib.metadata import PackageNotFoundError, version
import logging
import platform
from typing import Dict, Optional


LOG = logging.getLogger(__name__)


def get_version() -> Optional[str]:
    """
    Get the version of the blackbeard package.

    Returns:
      Optional[str]: The installed version if found, otherwise None.
    """
    try:
        return version("blackbeard")
    except PackageNotFoundError:
        LOG.debug("Unable to get blackbeard version.")
        return None


def get_user_agent() -> str:
    """
    Get the user agent string for HTTP requests.

    Returns:
      str: The user agent string in the format: blackbeard/{version} ({os}; Python/{python_version})
    """
    client_version = get_version() or "unknown"
    os_name = platform.system() or "unknown"
    python_version = platform.python_version()

    return f"blackbeard/{client_version} ({os_name}; Python/{python_version})"


def get_meta_http_headers() -> Dict[str, str]:
    """
    Get the metadata headers sent with every request.

    Returns:
      Dict[str, str]: The metadata headers.
    """
    return {
        "Content-Type": "application/json",
        "User-Agent": get_user_agent(),
    }
