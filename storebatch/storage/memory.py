"""
Storage backend for objects held in memory.
"""
from collections.abc import Mapping

from storebatch.storage.base import StorageAdapter
from storebatch.storage.exception import ObjectNotFoundError


class MemoryStorage(StorageAdapter):
    """
    Stores objects in a dictionary of buckets, each mapping keys to raw bytes.

    :param buckets: Optionally, provide initial objects as a map of ``{<bucket>: {<key>: <body>}}``.
        String bodies are encoded as UTF-8.
    """

    __slots__ = ("buckets",)

    kind = "memory"

    def __init__(self, buckets: Mapping[str, Mapping[str, str | bytes]] | None = None):
        super().__init__()
        #: The stored objects as a map of ``{<bucket>: {<key>: <body>}}``
        self.buckets: dict[str, dict[str, bytes]] = {
            bucket: {key: self._to_bytes(body) for key, body in objects.items()}
            for bucket, objects in (buckets or {}).items()
        }

    async def get_object(self, bucket: str, key: str) -> bytes:
        self.logger.debug(f"{self.kind.upper():<7}: GET    {bucket}/{key}")
        try:
            return self.buckets[bucket][key]
        except KeyError:
            raise ObjectNotFoundError(bucket=bucket, key=key)

    async def put_object(self, bucket: str, key: str, data: bytes) -> None:
        self.logger.debug(f"{self.kind.upper():<7}: PUT    {bucket}/{key} | {len(data)} bytes")
        self.buckets.setdefault(bucket, {})[key] = data

    async def delete(self, bucket: str, key: str) -> None:
        self.logger.debug(f"{self.kind.upper():<7}: DELETE {bucket}/{key}")
        try:
            del self.buckets[bucket][key]
        except KeyError:
            raise ObjectNotFoundError(bucket=bucket, key=key)

    async def keys(self, bucket: str, prefix: str = "") -> list[str]:
        self.logger.debug(f"{self.kind.upper():<7}: LIST   {bucket} | prefix: {prefix!r}")
        return sorted(key for key in self.buckets.get(bucket, {}) if key.startswith(prefix))
