"""
The main entry point for working with objects in a storage backend.
"""
import logging
from collections.abc import Iterable
from pathlib import Path
from typing import Any, Self

from yarl import URL

from storebatch.batch.config import BatchConfig
from storebatch.batch.request import BatchRequest
from storebatch.config import Config
from storebatch.log.logger import StoreBatchLogger
from storebatch.source import Source, parse_location
from storebatch.storage import StorageAdapter, LocalStorage, MemoryStorage, HTTPStorage
from storebatch.storage.base import Transformer


class StoreBatch:
    """
    Wraps a storage backend to provide single object operations
    and batch requests over working contexts of many objects.

    :param storage: The backend to get and write objects with.
    :param config: The default settings for all batch requests created by this object.
    """

    __slots__ = ("logger", "storage", "config")

    @classmethod
    def local(cls, path: str | Path, **kwargs) -> Self:
        """Create a new :py:class:`StoreBatch` for objects stored in folders under the given ``path``"""
        return cls(storage=LocalStorage(path=path), **kwargs)

    @classmethod
    def memory(cls, buckets: dict[str, dict[str, str | bytes]] | None = None, **kwargs) -> Self:
        """Create a new :py:class:`StoreBatch` for objects stored in memory"""
        return cls(storage=MemoryStorage(buckets=buckets), **kwargs)

    @classmethod
    def http(cls, endpoint: str | URL, **kwargs) -> Self:
        """Create a new :py:class:`StoreBatch` for objects in an S3-compatible object store at ``endpoint``"""
        return cls(storage=HTTPStorage.create(endpoint=endpoint), **kwargs)

    @classmethod
    def from_config(cls, config: Config) -> Self:
        """Create a new :py:class:`StoreBatch` from the storage and batch settings of the given ``config``"""
        return cls(storage=config.create_storage(), config=config.batch)

    def __init__(self, storage: StorageAdapter, config: BatchConfig | None = None):
        # noinspection PyTypeChecker
        #: The :py:class:`StoreBatchLogger` for this  object
        self.logger: StoreBatchLogger = logging.getLogger(__name__)

        #: The backend to get and write objects with
        self.storage = storage
        #: The default settings for all batch requests created by this object
        self.config = config or BatchConfig()

    async def __aenter__(self) -> Self:
        await self.storage.__aenter__()
        return self

    async def __aexit__(self, __exc_type, __exc_value, __traceback) -> None:
        await self.storage.__aexit__(__exc_type, __exc_value, __traceback)

    ###########################################################################
    ## Batch requests
    ###########################################################################
    def context(self, location: str, prefix: str = "") -> BatchRequest:
        """
        Create a new :py:class:`BatchRequest` over all objects in a bucket whose keys start with a prefix.
        The keys are listed once, when the first operation on the request is executed.

        :param location: Either the bucket name or a URL in the form ``s3://<bucket>/<prefix>``.
        :param prefix: The prefix of the keys to include. Ignored when ``location`` is a URL which contains a prefix.
        """
        bucket, prefix = parse_location(location, prefix=prefix)

        async def _list_sources() -> list[Source]:
            keys = await self.storage.keys(bucket, prefix)
            self.logger.debug(f"Listed {len(keys)} objects in {bucket}/{prefix}")
            return [Source(bucket=bucket, key=key, prefix=prefix) for key in keys]

        return BatchRequest(storage=self.storage, sources=_list_sources, config=self.config)

    def context_from(self, sources: Iterable[Source]) -> BatchRequest:
        """Create a new :py:class:`BatchRequest` over the given ``sources``, in order"""
        return BatchRequest(storage=self.storage, sources=tuple(sources), config=self.config)

    ###########################################################################
    ## Object operations
    ###########################################################################
    async def get(
            self, bucket: str, key: str, encoding: str | None = "utf8", transformer: Transformer | None = None
    ) -> Any:
        """Get the body of the object at the given location. See :py:meth:`StorageAdapter.get`"""
        return await self.storage.get(bucket, key, encoding=encoding, transformer=transformer)

    async def put(self, bucket: str, key: str, body: Any, encoding: str | None = "utf8") -> None:
        """Store the ``body`` at the given location. See :py:meth:`StorageAdapter.put`"""
        await self.storage.put(bucket, key, body, encoding=encoding)

    async def delete(self, bucket: str, key: str) -> None:
        """Delete the object at the given location."""
        await self.storage.delete(bucket, key)

    async def delete_objects(self, bucket: str, keys: Iterable[str]) -> None:
        """Delete all objects in the given ``bucket`` with the given ``keys``."""
        await self.storage.delete_objects(bucket, keys)

    async def copy(self, src_bucket: str, src_key: str, dst_bucket: str, dst_key: str) -> None:
        """Copy the object at the source location to the destination location."""
        await self.storage.copy(src_bucket, src_key, dst_bucket, dst_key)

    async def keys(self, bucket: str, prefix: str = "") -> list[str]:
        """Return the sorted keys of all objects in the given ``bucket`` which start with ``prefix``."""
        return await self.storage.keys(bucket, prefix)
