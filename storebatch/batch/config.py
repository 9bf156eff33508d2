"""
Immutable configuration for batch requests.
"""
from dataclasses import dataclass, field, replace
from typing import Any, Self

from storebatch.batch.exception import BatchValueError
from storebatch.source import Target
from storebatch.storage.base import Transformer


@dataclass(frozen=True)
class BatchConfig:
    """
    Settings used by every item of a batch operation.
    Each ``with_*`` method returns a new configuration, leaving this one unchanged.
    """
    #: The encoding to decode object bodies with. When None, raw bytes are given to user functions.
    encoding: str | None = "utf8"
    #: A function which converts the raw body of an object to a value. Takes precedence over ``encoding``.
    transformer: Transformer | None = field(default=None, compare=False)
    #: The maximum number of items to process at once. When None, all items are processed at once.
    concurrency: int | None = None
    #: The location to write results to. When None, sources are modified in place.
    target: Target | None = None
    #: Show a progress bar while processing items.
    show_progress: bool = False

    def __post_init__(self):
        if self.concurrency is not None and (
                not isinstance(self.concurrency, int) or isinstance(self.concurrency, bool) or self.concurrency < 1
        ):
            raise BatchValueError(f"Concurrency must be a positive integer or None, got: {self.concurrency!r}")

    def with_encoding(self, encoding: str | None) -> Self:
        """Return a copy of this config with the given ``encoding``"""
        return replace(self, encoding=encoding)

    def with_transformer(self, transformer: Transformer | None) -> Self:
        """Return a copy of this config with the given ``transformer``"""
        return replace(self, transformer=transformer)

    def with_concurrency(self, concurrency: int | None) -> Self:
        """Return a copy of this config with the given ``concurrency``"""
        return replace(self, concurrency=concurrency)

    def with_target(self, bucket: str | None, prefix: str = "") -> Self:
        """Return a copy of this config with a target at the given ``bucket`` and ``prefix``"""
        return replace(self, target=Target(bucket=bucket, prefix=prefix) if bucket is not None else None)

    def with_progress(self, show: bool = True) -> Self:
        """Return a copy of this config which shows or hides progress bars"""
        return replace(self, show_progress=show)

    def as_dict(self) -> dict[str, Any]:
        """Return a dictionary representation of this config"""
        return {
            "encoding": self.encoding,
            "transformer": getattr(self.transformer, "__name__", self.transformer),
            "concurrency": self.concurrency,
            "target": self.target,
            "show_progress": self.show_progress,
        }
