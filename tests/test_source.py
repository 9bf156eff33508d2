import asyncio

import pytest

from storebatch.exception import StoreBatchValueError, StoreBatchTypeError
from storebatch.source import Source, Target, parse_location, SourceResolver
from tests.conftest import BUCKET, PREFIX


def test_source():
    source = Source(bucket=BUCKET, key=f"{PREFIX}/folder/file", prefix=PREFIX)
    assert source.file == "folder/file"
    assert str(source) == f"{BUCKET}/{PREFIX}/folder/file"

    assert Source(bucket=BUCKET, key="folder/file").file == "folder/file"
    assert Source(bucket=BUCKET, key="folder/file", prefix="folder/").file == "file"
    assert Source(bucket=BUCKET, key="prefix_file", prefix="prefix_").file == "file"

    assert source == Source(bucket=BUCKET, key=f"{PREFIX}/folder/file", prefix=PREFIX)
    assert len({source, Source(bucket=BUCKET, key=f"{PREFIX}/folder/file", prefix=PREFIX)}) == 1


def test_target():
    assert Target(bucket="output").key_for("file") == "file"
    assert Target(bucket="output", prefix="mapped/").key_for("folder/file") == "mapped/folder/file"
    assert Target(bucket="output", prefix="mapped").key_for("file") == "mappedfile"


def test_parse_location():
    assert parse_location(BUCKET) == (BUCKET, "")
    assert parse_location(BUCKET, prefix=PREFIX) == (BUCKET, PREFIX)

    assert parse_location(f"s3://{BUCKET}") == (BUCKET, "")
    assert parse_location(f"s3://{BUCKET}/", prefix=PREFIX) == (BUCKET, PREFIX)
    assert parse_location(f"s3://{BUCKET}/{PREFIX}/folder") == (BUCKET, f"{PREFIX}/folder")
    assert parse_location(f"s3://{BUCKET}/{PREFIX}", prefix="ignored") == (BUCKET, PREFIX)

    with pytest.raises(StoreBatchValueError):
        parse_location("s3:///prefix")


class TestSourceResolver:

    @pytest.fixture
    def sources(self) -> list[Source]:
        return [Source(bucket=BUCKET, key=f"{PREFIX}/file{i}", prefix=PREFIX) for i in range(3)]

    async def test_resolve_iterable(self, sources: list[Source]):
        resolver = SourceResolver(iter(sources))
        assert not resolver.resolved

        assert await resolver.resolve() == tuple(sources)
        assert resolver.resolved
        assert await resolver.resolve() == tuple(sources)

    async def test_resolve_awaitable(self, sources: list[Source]):
        async def get_sources() -> list[Source]:
            await asyncio.sleep(0)
            return sources

        assert await SourceResolver(get_sources()).resolve() == tuple(sources)
        assert await SourceResolver(get_sources).resolve() == tuple(sources)

    async def test_resolve_once(self, sources: list[Source]):
        calls = 0

        async def get_sources() -> list[Source]:
            nonlocal calls
            calls += 1
            await asyncio.sleep(0.01)
            return sources

        resolver = SourceResolver(get_sources)
        results = await asyncio.gather(*(resolver.resolve() for _ in range(5)))
        assert all(result == tuple(sources) for result in results)

        await resolver.resolve()
        assert calls == 1

    async def test_resolve_survives_cancelled_caller(self, sources: list[Source]):
        async def get_sources() -> list[Source]:
            await asyncio.sleep(0.01)
            return sources

        resolver = SourceResolver(get_sources)
        task = asyncio.create_task(resolver.resolve())
        await asyncio.sleep(0)
        task.cancel()
        with pytest.raises(asyncio.CancelledError):
            await task

        assert await resolver.resolve() == tuple(sources)

    async def test_resolve_failure(self):
        async def get_sources() -> list[Source]:
            raise RuntimeError("listing failed")

        resolver = SourceResolver(get_sources)
        with pytest.raises(RuntimeError, match="listing failed"):
            await resolver.resolve()
        assert not resolver.resolved

    async def test_resolve_invalid_type(self, sources: list[Source]):
        resolver = SourceResolver([*sources, f"{BUCKET}/{PREFIX}/file"])
        with pytest.raises(StoreBatchTypeError, match="str"):
            await resolver.resolve()
