from typing import Any, Optional

from blackbeard.constants import (
    EXIT_CODE_CONFIGURATION,
    EXIT_CODE_FAILURE,
    EXIT_CODE_INVALID_EVENT,
    MSG_API_KEY_REQUIRED,
)


class BlackbeardError(Exception):
    """
    Base error for everything the Pirate Metrics client raises.

    Args:
        message (str): The error message.
        error_code (Optional[int]): The error code.
    """
    def __init__(self, message: str = "An error occurred while talking to Pirate Metrics.",
                 error_code: Optional[int] = None):
        self.message = message
        self.error_code = error_code
        super().__init__(self.message)

    def get_exit_code(self) -> int:
        """
        Get the exit code associated with this error.

        Returns:
            int: The exit code.
        """
        return EXIT_CODE_FAILURE


class ConfigurationError(BlackbeardError):
    """
    Error raised when the client settings are unusable.
    """
    def get_exit_code(self) -> int:
        return EXIT_CODE_CONFIGURATION


class MissingApiKeyError(ConfigurationError):
    """
    Error raised when a submission is attempted without an API key.
    """
    def __init__(self, message: str = MSG_API_KEY_REQUIRED):
        super().__init__(message)


class InvalidEventError(BlackbeardError):
    """
    Error raised when an event record fails validation.

    Args:
        message (str): The error message.
        index (Optional[int]): Position of the rejected record in a bulk batch.
    """
    def __init__(self, message: str, index: Optional[int] = None):
        self.index = index
        if index is not None:
            message = f"{message} (record {index})"
        super().__init__(message)

    def get_exit_code(self) -> int:
        return EXIT_CODE_INVALID_EVENT


class TransportError(BlackbeardError):
    """
    Error raised when a request did not complete with HTTP 200.
    """


class NetworkConnectionError(TransportError):
    """
    Error raised when there is a network connection issue.

    Args:
        message (str): The error message.
    """

    def __init__(self, message: str = "Network connection error: Unable to reach Pirate Metrics.\n"
                                      "Please check your internet connection and the configured base URL."):
        super().__init__(message)


class RequestTimeoutError(TransportError):
    """
    Error raised when a request times out.

    Args:
        message (str): The error message.
    """
    def __init__(self, message: str = "Request timed out: Pirate Metrics did not respond in time."):
        super().__init__(message)


class UnexpectedResponseError(TransportError):
    """
    Error raised when the API answers with anything other than HTTP 200.

    Args:
        status_code (int): The HTTP status code received.
        body (Any): The response body, passed through as received.
    """
    def __init__(self, status_code: int, body: Any = None):
        self.status_code = status_code
        self.body = body
        message = f"Unexpected response from Pirate Metrics: HTTP {status_code}"
        if body:
            message += f"\nDetails: {body}"
        super().__init__(message, error_code=status_code)
