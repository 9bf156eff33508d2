"""
Base class for all storage backends.
"""
import asyncio
import inspect
import logging
from abc import ABCMeta, abstractmethod
from collections.abc import Callable, Iterable
from typing import Any, Self

from storebatch.log.logger import StoreBatchLogger

type Transformer = Callable[[bytes], Any]


class StorageAdapter(metaclass=ABCMeta):
    """
    Generic base class for a store of objects addressed by bucket and key.

    Implementations only need to handle raw bytes.
    Decoding, encoding and transformation of object bodies is handled by this base class.
    """

    __slots__ = ("logger",)

    #: The name of this storage backend
    kind: str = "storage"

    def __init__(self):
        # noinspection PyTypeChecker
        #: The :py:class:`StoreBatchLogger` for this  object
        self.logger: StoreBatchLogger = logging.getLogger(__name__)

    async def __aenter__(self) -> Self:
        return self

    async def __aexit__(self, __exc_type, __exc_value, __traceback) -> None:
        pass

    ###########################################################################
    ## Raw operations
    ###########################################################################
    @abstractmethod
    async def get_object(self, bucket: str, key: str) -> bytes:
        """
        Get the raw body of the object at the given location.

        :raise ObjectNotFoundError: When no object exists at the given location.
        """
        raise NotImplementedError

    @abstractmethod
    async def put_object(self, bucket: str, key: str, data: bytes) -> None:
        """Store the raw ``data`` at the given location, replacing any existing object."""
        raise NotImplementedError

    @abstractmethod
    async def delete(self, bucket: str, key: str) -> None:
        """
        Delete the object at the given location.

        :raise ObjectNotFoundError: When no object exists at the given location.
        """
        raise NotImplementedError

    @abstractmethod
    async def keys(self, bucket: str, prefix: str = "") -> list[str]:
        """Return the sorted keys of all objects in the given ``bucket`` which start with ``prefix``."""
        raise NotImplementedError

    async def copy(self, src_bucket: str, src_key: str, dst_bucket: str, dst_key: str) -> None:
        """Copy the object at the source location to the destination location."""
        self.logger.debug(f"{self.kind.upper():<7}: COPY {src_bucket}/{src_key} -> {dst_bucket}/{dst_key}")
        await self.put_object(dst_bucket, dst_key, await self.get_object(src_bucket, src_key))

    ###########################################################################
    ## Value operations
    ###########################################################################
    async def get(
            self, bucket: str, key: str, encoding: str | None = "utf8", transformer: Transformer | None = None
    ) -> Any:
        """
        Get the body of the object at the given location.

        :param bucket: The bucket to get the object from.
        :param key: The key of the object.
        :param encoding: The encoding to decode the raw body with. When None, returns the raw bytes.
            Ignored when ``transformer`` is given.
        :param transformer: A function which takes the raw body and returns the value to use.
            The function may also return an awaitable which resolves to this value.
        :return: The decoded or transformed body.
        """
        data = await self.get_object(bucket, key)
        if transformer is not None:
            value = transformer(data)
            return await value if inspect.isawaitable(value) else value
        return data.decode(encoding) if encoding else data

    async def put(self, bucket: str, key: str, body: Any, encoding: str | None = "utf8") -> None:
        """
        Store the ``body`` at the given location, replacing any existing object.

        Strings are encoded with the given ``encoding``, bytes are stored as is,
        and any other value is converted to a string first.
        """
        await self.put_object(bucket, key, self._to_bytes(body, encoding=encoding))

    async def delete_objects(self, bucket: str, keys: Iterable[str]) -> None:
        """Delete all objects in the given ``bucket`` with the given ``keys``."""
        await asyncio.gather(*(self.delete(bucket, key) for key in keys))

    @staticmethod
    def _to_bytes(body: Any, encoding: str | None = "utf8") -> bytes:
        if isinstance(body, bytes | bytearray):
            return bytes(body)
        if not isinstance(body, str):
            body = str(body)
        return body.encode(encoding or "utf8")
