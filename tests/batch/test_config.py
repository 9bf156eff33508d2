from dataclasses import FrozenInstanceError

import pytest

from storebatch.batch.config import BatchConfig
from storebatch.batch.exception import BatchValueError
from storebatch.source import Target


def test_defaults():
    config = BatchConfig()
    assert config.encoding == "utf8"
    assert config.transformer is None
    assert config.concurrency is None
    assert config.target is None
    assert not config.show_progress


@pytest.mark.parametrize("concurrency", [0, -1, 1.5, "2", True, False])
def test_invalid_concurrency(concurrency):
    with pytest.raises(BatchValueError):
        BatchConfig(concurrency=concurrency)
    with pytest.raises(BatchValueError):
        BatchConfig().with_concurrency(concurrency)


def test_frozen():
    config = BatchConfig()
    with pytest.raises(FrozenInstanceError):
        # noinspection PyDataclass
        config.encoding = "ascii"


def test_with_settings():
    config = BatchConfig()

    assert config.with_encoding("ascii").encoding == "ascii"
    assert config.with_encoding(None).encoding is None
    assert config.with_transformer(len).transformer is len
    assert config.with_concurrency(3).concurrency == 3
    assert config.with_concurrency(None).concurrency is None
    assert config.with_progress().show_progress
    assert not config.with_progress().with_progress(False).show_progress

    target = config.with_target("output", prefix="out/").target
    assert target == Target(bucket="output", prefix="out/")
    assert target.key_for("file") == "out/file"
    assert config.with_target("output").with_target(None).target is None

    # original is unchanged
    assert config == BatchConfig()


def test_chained_settings_are_kept():
    config = BatchConfig().with_concurrency(2).with_encoding(None).with_target("output").with_transformer(len)
    assert config.concurrency == 2
    assert config.encoding is None
    assert config.target == Target(bucket="output")
    assert config.transformer is len


def test_as_dict():
    def transformer(raw: bytes) -> bytes:
        return raw

    config = BatchConfig(concurrency=2, transformer=transformer).with_target("output")
    assert config.as_dict() == {
        "encoding": "utf8",
        "transformer": "transformer",
        "concurrency": 2,
        "target": Target(bucket="output"),
        "show_progress": False,
    }
