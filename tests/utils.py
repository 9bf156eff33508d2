import asyncio
import string
from collections.abc import Mapping
from random import choice, randrange

from storebatch.storage.exception import StorageError
from storebatch.storage.memory import MemoryStorage


def random_str(start: int = 30, stop: int = 50) -> str:
    """Generates a random string of upper and lower case characters with a random length between the values given."""
    range_ = randrange(start=start, stop=stop) if start < stop else start
    return "".join(choice(string.ascii_letters) for _ in range(range_))


class RecordingStorage(MemoryStorage):
    """
    :py:class:`MemoryStorage` which records every call made to it in order.

    :param buckets: The initial objects as a map of ``{<bucket>: {<key>: <body>}}``.
    :param delay: The time in seconds to pause for on every call.
    :param fail_on: Map of ``{<method name>: {<keys>}}`` for which calls should raise a :py:class:`StorageError`.
    """

    __slots__ = ("calls", "delay", "fail_on", "in_flight", "max_in_flight")

    def __init__(
            self,
            buckets: Mapping[str, Mapping[str, str | bytes]] | None = None,
            delay: float = 0,
            fail_on: Mapping[str, set[str]] | None = None,
    ):
        super().__init__(buckets=buckets)
        self.calls: list[tuple[str, str, str]] = []
        self.delay = delay
        self.fail_on = fail_on or {}

        self.in_flight = 0
        self.max_in_flight = 0

    def keys_called(self, method: str) -> list[str]:
        """Return the keys of all calls to the given ``method`` in the order they were called"""
        return [key for name, _, key in self.calls if name == method]

    async def _record(self, method: str, bucket: str, key: str) -> None:
        self.calls.append((method, bucket, key))

        self.in_flight += 1
        self.max_in_flight = max(self.in_flight, self.max_in_flight)
        try:
            await asyncio.sleep(self.delay)
        finally:
            self.in_flight -= 1

        if key in self.fail_on.get(method, ()):
            raise StorageError("Forced failure", bucket=bucket, key=key)

    async def get_object(self, bucket: str, key: str) -> bytes:
        await self._record("get", bucket, key)
        return await super().get_object(bucket, key)

    async def put_object(self, bucket: str, key: str, data: bytes) -> None:
        await self._record("put", bucket, key)
        await super().put_object(bucket, key, data)

    async def delete(self, bucket: str, key: str) -> None:
        await self._record("delete", bucket, key)
        await super().delete(bucket, key)

    async def copy(self, src_bucket: str, src_key: str, dst_bucket: str, dst_key: str) -> None:
        await self._record("copy", src_bucket, src_key)
        await super().copy(src_bucket, src_key, dst_bucket, dst_key)
