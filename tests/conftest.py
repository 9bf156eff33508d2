from pathlib import Path

import pytest
from aioresponses import aioresponses
from faker import Faker

from storebatch.log.logger import StoreBatchLogger
from storebatch.source import Source
from storebatch.storage.local import LocalStorage
from tests.utils import RecordingStorage

BUCKET = "storebatch"
PREFIX = "files"
FILES = ("file1", "file2", "file3", "file4")


@pytest.fixture(scope="session", autouse=True)
def disable_bars():
    """Disable all progress bars for the duration of the test session"""
    StoreBatchLogger.disable_bars = True
    yield
    StoreBatchLogger.disable_bars = False


@pytest.fixture(scope="session")
def faker() -> Faker:
    """Sets up and yields a basic Faker object for fake data"""
    return Faker()


@pytest.fixture
def mock_response():
    with aioresponses() as m:
        yield m


@pytest.fixture
def keys() -> list[str]:
    """The keys of all test objects, in order"""
    return [f"{PREFIX}/{file}" for file in FILES]


@pytest.fixture
def sources(keys: list[str]) -> list[Source]:
    """The :py:class:`Source` objects for all test objects, in order"""
    return [Source(bucket=BUCKET, key=key, prefix=PREFIX) for key in keys]


@pytest.fixture
def storage(keys: list[str]) -> RecordingStorage:
    """Yields a :py:class:`RecordingStorage` where the body of each test object is equal to its file name"""
    return RecordingStorage(buckets={BUCKET: {key: key.split("/")[-1] for key in keys}})


@pytest.fixture
def local_storage(tmp_path: Path) -> LocalStorage:
    """Yields a :py:class:`LocalStorage` where the body of each test object is equal to its file name"""
    folder = tmp_path.joinpath(BUCKET, PREFIX)
    folder.mkdir(parents=True)
    for file in FILES:
        folder.joinpath(file).write_text(file)

    return LocalStorage(path=tmp_path)
