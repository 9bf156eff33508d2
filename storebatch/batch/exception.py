"""
Exceptions relating to batch operations.
"""
from storebatch.exception import StoreBatchError, StoreBatchValueError
from storebatch.source import Source


class BatchValueError(StoreBatchValueError):
    """Exception raised for invalid values given to a batch operation."""


class BatchError(StoreBatchError):
    """
    Exception raised when processing a single item of a batch operation fails.
    The original exception, where there is one, is available as ``__cause__``.

    :param message: Explanation of the error.
    :param source: The :py:class:`Source` being processed when the error occurred.
    """

    def __init__(self, message: str, source: Source | None = None):
        self.message = message
        self.source = source
        formatted = f"{source} | {message}" if source is not None else message
        super().__init__(formatted)


class FetchError(BatchError):
    """Exception raised when the body of a source could not be fetched."""


class TransformError(BatchError):
    """Exception raised when the user function fails for a source."""


class ContractViolationError(BatchError, TypeError):
    """Exception raised when the user function returns a value of an unexpected type."""


class WriteError(BatchError):
    """Exception raised when writing, copying, or deleting an object fails."""
