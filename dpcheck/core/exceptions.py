"""Shared exceptions module."""

from pathlib import Path
from typing import Optional, Sequence


class DPCheckException(Exception):
    """Base exception for dpcheck."""

    def __init__(self, message: str):
        """Create a new DPCheckException instance.

        Args:
        ----
            message (str): The error message.

        """
        self.message = message
        super().__init__(self.message)


class ConfigException(DPCheckException):
    """Exception raised for an invalid scenario configuration."""

    pass


class ValidationException(DPCheckException):
    """Exception raised when a required value is missing, empty or of the wrong type."""

    pass


class ValueNotSetException(ValidationException):
    """Exception raised when a context value is read before it was set."""

    def __init__(self, name: str):
        """Create a new ValueNotSetException instance.

        Args:
        ----
            name (str): Name of the value that was read.

        """
        self.name = name
        super().__init__(f"{name} is not set in the test context")


class PayloadNotFoundException(DPCheckException):
    """Exception raised when a payload fixture exists at none of its candidate paths."""

    def __init__(self, candidates: Sequence[Path]):
        """Create a new PayloadNotFoundException instance.

        Args:
        ----
            candidates (Sequence[Path]): Every path that was tried, in order.

        """
        self.candidates = list(candidates)
        tried = "\n".join(f"- {c}" for c in self.candidates)
        super().__init__(f"Payload file not found at either:\n{tried}")


class PayloadParseException(DPCheckException):
    """Exception raised when a payload fixture is not a valid JSON object."""

    def __init__(self, path: Path, cause: Exception):
        """Create a new PayloadParseException instance.

        Args:
        ----
            path (Path): The fixture file that failed to parse.
            cause (Exception): The underlying parse error.

        """
        self.path = path
        self.cause = cause
        super().__init__(f"Failed to parse payload file {path}: {cause}")


class NetworkException(DPCheckException):
    """Exception raised when the ingestion endpoint could not be reached."""

    def __init__(self, cause: Exception, url: Optional[str] = None):
        """Create a new NetworkException instance.

        Args:
        ----
            cause (Exception): The transport error.
            url (str, optional): The URL that was requested.

        """
        self.cause = cause
        self.url = url
        super().__init__(f"Network Error: {cause}")


class ApiException(DPCheckException):
    """Exception raised when the ingestion endpoint answered with an error status."""

    def __init__(self, status_code: int, body: str, url: Optional[str] = None):
        """Create a new ApiException instance.

        Args:
        ----
            status_code (int): HTTP status code of the response.
            body (str): Raw response body.
            url (str, optional): The URL that was requested.

        """
        self.status_code = status_code
        self.body = body
        self.url = url
        super().__init__(f"API Error {status_code}: {body}")


class ElementNotFoundException(DPCheckException):
    """Exception raised when a required element is not displayed in time."""

    def __init__(self, selector: str, timeout_ms: int):
        """Create a new ElementNotFoundException instance.

        Args:
        ----
            selector (str): The element selector.
            timeout_ms (int): How long the element was waited for.

        """
        self.selector = selector
        self.timeout_ms = timeout_ms
        super().__init__(
            f"Element not found within timeout period ({timeout_ms}ms): {selector}"
        )


class LoginFailedException(DPCheckException):
    """Exception raised when the dashboard rejects the login form."""

    pass


class VerificationException(DPCheckException):
    """Exception raised when observed event counts violate the expected thresholds."""

    pass
