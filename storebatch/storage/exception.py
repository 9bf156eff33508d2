"""
Exceptions relating to storage operations.
"""
from aiohttp import ClientResponse

from storebatch.exception import StoreBatchError, StoreBatchKeyError


class StorageError(StoreBatchError):
    """
    Exception raised for errors relating to a storage backend.

    :param message: Explanation of the error.
    :param bucket: The bucket related to the error.
    :param key: The key related to the error.
    """

    def __init__(self, message: str | None = None, bucket: str | None = None, key: str | None = None):
        self.message = message
        self.bucket = bucket
        self.key = key

        formatted = message
        if bucket is not None:
            formatted = f"{bucket}/{key or ""} | {message}"
        super().__init__(formatted)


class ObjectNotFoundError(StorageError, StoreBatchKeyError):
    """Exception raised when an object cannot be found at the given location."""

    def __init__(self, bucket: str, key: str, message: str = "Object not found"):
        super().__init__(message=message, bucket=bucket, key=key)

    def __str__(self):
        return self.args[0]


class StorageRequestError(StorageError):
    """
    Exception raised for unexpected responses from a storage service.

    :param message: Explanation of the error.
    :param response: The :py:class:`ClientResponse` related to the error.
    """

    def __init__(
            self,
            message: str | None = None,
            bucket: str | None = None,
            key: str | None = None,
            response: ClientResponse | None = None,
    ):
        self.response = response
        self.status = response.status if response is not None else None
        formatted = f"Status code: {response.status} | {message}" if response is not None else message
        super().__init__(message=formatted, bucket=bucket, key=key)
