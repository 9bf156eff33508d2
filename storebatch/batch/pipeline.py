"""
The fetch, transform, and dispatch steps shared by all batch modes for a single item.
"""
import inspect
import logging
from collections.abc import Callable
from typing import Any

from storebatch.batch.config import BatchConfig
from storebatch.batch.exception import FetchError, TransformError, WriteError, ContractViolationError
from storebatch.log.logger import StoreBatchLogger
from storebatch.source import Source
from storebatch.storage.base import StorageAdapter


class ItemPipeline:
    """
    Processes single items of a batch operation against a ``storage`` backend with a frozen ``config``.

    Every storage or user function failure is raised as the relevant :py:class:`BatchError`
    with the original exception as its cause.

    :param storage: The backend to fetch and write objects with.
    :param config: The settings to use for every item.
    """

    __slots__ = ("logger", "storage", "config")

    def __init__(self, storage: StorageAdapter, config: BatchConfig):
        # noinspection PyTypeChecker
        #: The :py:class:`StoreBatchLogger` for this  object
        self.logger: StoreBatchLogger = logging.getLogger(__name__)

        self.storage = storage
        self.config = config

    async def fetch(self, source: Source) -> Any:
        """Get the decoded or transformed body of the given ``source``"""
        try:
            return await self.storage.get(
                source.bucket, source.key, encoding=self.config.encoding, transformer=self.config.transformer
            )
        except Exception as ex:
            raise FetchError(f"Failed to fetch object: {ex}", source=source) from ex

    async def invoke(self, func: Callable[..., Any], *args, source: Source) -> Any:
        """
        Call ``func`` with the given ``args``, awaiting the result if it is awaitable.

        :raise TransformError: When ``func`` raises or its awaitable result fails.
        """
        try:
            result = func(*args)
            if inspect.isawaitable(result):
                result = await result
        except Exception as ex:
            raise TransformError(f"Function {_func_name(func)!r} failed: {ex}", source=source) from ex

        return result

    async def put(self, source: Source, body: Any) -> Source:
        """
        Write ``body`` for the given ``source``, either in place or to the configured target.

        :return: The location the body was written to.
        """
        if body is None:
            raise ContractViolationError("mapper function must return a value", source=source)

        target = self.config.target
        if target is None:
            location = source
        else:
            location = Source(bucket=target.bucket, key=target.key_for(source.key), prefix=target.prefix)

        try:
            await self.storage.put(location.bucket, location.key, body, encoding=self.config.encoding)
        except Exception as ex:
            raise WriteError(f"Failed to write object to {location}: {ex}", source=source) from ex

        return location

    async def keep(self, source: Source) -> Source | None:
        """
        Keep the given ``source``. Copies the source to the configured target if set.

        :return: The location the source was copied to, or None if no copy was made.
        """
        target = self.config.target
        if target is None:
            return

        location = Source(bucket=target.bucket, key=target.key_for(source.file), prefix=target.prefix)
        try:
            await self.storage.copy(source.bucket, source.key, location.bucket, location.key)
        except Exception as ex:
            raise WriteError(f"Failed to copy object to {location}: {ex}", source=source) from ex

        return location

    async def remove(self, source: Source) -> bool:
        """
        Remove the given ``source``. Deletes the source only when no target is configured.

        :return: True if the source was deleted.
        """
        if self.config.target is not None:
            return False

        try:
            await self.storage.delete(source.bucket, source.key)
        except Exception as ex:
            raise WriteError(f"Failed to delete object: {ex}", source=source) from ex

        return True


def _func_name(func: Callable) -> str:
    return getattr(func, "__qualname__", None) or getattr(func, "__name__", None) or repr(func)
