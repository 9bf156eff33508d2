"""
Core exceptions for the entire package.
"""
from typing import Any


class StoreBatchError(Exception):
    """Generic base class for all StoreBatch-related errors"""


class StoreBatchKeyError(StoreBatchError, KeyError):
    """Exception raised for invalid keys."""


class StoreBatchValueError(StoreBatchError, ValueError):
    """Exception raised for invalid values."""


class StoreBatchTypeError(StoreBatchError, TypeError):
    """Exception raised for invalid types."""
    def __init__(self, kind: Any, message: str = "Invalid item type given"):
        self.message = message
        super().__init__(f"{self.message}: {kind}")


###########################################################################
## Config errors
###########################################################################
class ConfigError(StoreBatchError):
    """
    Exception raised for errors related to loading the configuration file.

    :param message: Explanation of the error.
    :param key: The key in the config that caused the error.
    :param value: The value that caused the error.
    """
    def __init__(self, message: str = "Could not process config", key: str | None = None, value: Any = None):
        self.message = message
        self.key = key
        self.value = value

        formatted = message
        if key is not None:
            formatted += f": {key}"
        if value is not None:
            formatted += f" = {value!r}"
        super().__init__(formatted)
