"""
Exceptions and error formatting for the scanning core
"""

from typing import Any, Sequence

from botocore.exceptions import ClientError


UNKNOWN_ERROR = "unknown error"


class CloudPostureError(Exception):
    """Base class for scanning core errors"""


class MalformedCacheError(CloudPostureError):
    """The response cache does not have the shape a lookup expected"""

    def __init__(self, key_path: Sequence[str], message: str):
        super().__init__(f"Malformed cache at {'/'.join(map(str, key_path))}: {message}")
        self.key_path = tuple(key_path)


class CompletionError(CloudPostureError):
    """A check completed twice or was mutated after completing"""


class SettingsError(CloudPostureError):
    """Invalid scan settings"""


def format_error(error: Any) -> str:
    """Return a display string for a stored error.

    Accepts an errored CacheEntry or the raw error object a collector stored:
    a mapping with a message, a botocore ClientError, an exception or a string.
    Falls back to "unknown error" and never raises.
    """
    # CacheEntry carries the raw error on .error
    error = getattr(error, "error", error)

    if error is None:
        return UNKNOWN_ERROR

    if isinstance(error, ClientError):
        message = error.response.get("Error", {}).get("Message")
        return message or str(error) or UNKNOWN_ERROR

    if isinstance(error, dict):
        for key in ("message", "Message", "code", "Code"):
            value = error.get(key)
            if value:
                return str(value)
        return UNKNOWN_ERROR

    if isinstance(error, BaseException):
        return str(error) or type(error).__name__

    if isinstance(error, str):
        return error or UNKNOWN_ERROR

    return UNKNOWN_ERROR
