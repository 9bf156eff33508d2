"""
The operation modes of a batch request, defining per-item behaviour and the shape of the aggregate result.
"""
from abc import ABCMeta, abstractmethod
from collections.abc import Callable, Awaitable, Sequence
from typing import Any

from storebatch.batch.config import BatchConfig
from storebatch.batch.exception import BatchValueError, ContractViolationError
from storebatch.batch.pipeline import ItemPipeline
from storebatch.source import Source


class _Missing:
    """Sentinel type for a reduce without an initial value"""

    __slots__ = ()

    def __repr__(self):
        return "<MISSING>"


MISSING: Any = _Missing()

type MaybeAwaitable[T] = T | Awaitable[T]


class BatchMode[T](metaclass=ABCMeta):
    """
    Generic base class for a batch operation mode.
    A mode instance holds the state of exactly one operation and should not be reused.
    """

    __slots__ = ()

    #: The name of this mode as used in logs and progress bars
    name: str = "batch"

    def get_concurrency(self, config: BatchConfig) -> int | None:
        """The maximum number of items to process at once for this mode given the ``config``"""
        return config.concurrency

    def prepare(self, sources: Sequence[Source]) -> None:
        """Validate and set up any state for the given ``sources`` before processing begins"""
        pass

    @abstractmethod
    async def process(self, pipeline: ItemPipeline, source: Source) -> Any:
        """Process a single ``source`` with the given ``pipeline``"""
        raise NotImplementedError

    @abstractmethod
    def aggregate(self, sources: Sequence[Source], values: Sequence[Any]) -> T:
        """Produce the result of the operation from the ordered ``sources`` and their processed ``values``"""
        raise NotImplementedError

    def __repr__(self):
        return f"{self.__class__.__name__}({self.name})"


class ForEachMode(BatchMode[str | None]):
    """
    Calls ``func(body, key)`` on every source for its side effects.
    Resolves with the key of the last source.

    :param func: The function to call.
    :param serial: When True, always process one item at a time in source order.
    """

    __slots__ = ("func", "serial")

    @property
    def name(self) -> str:
        return "for_each" if self.serial else "each"

    def __init__(self, func: Callable[[Any, str], MaybeAwaitable[Any]], serial: bool = True):
        self.func = func
        self.serial = serial

    def get_concurrency(self, config: BatchConfig) -> int | None:
        return 1 if self.serial else config.concurrency

    async def process(self, pipeline: ItemPipeline, source: Source) -> None:
        body = await pipeline.fetch(source)
        await pipeline.invoke(self.func, body, source.key, source=source)

    def aggregate(self, sources: Sequence[Source], values: Sequence[Any]) -> str | None:
        return sources[-1].key if sources else None


class MapMode(BatchMode[str | None]):
    """
    Replaces the body of every source with ``func(body, key)``,
    or writes the result to the configured target instead.
    Resolves with the key of the last source.
    """

    __slots__ = ("func",)

    name = "map"

    def __init__(self, func: Callable[[Any, str], MaybeAwaitable[Any]]):
        self.func = func

    async def process(self, pipeline: ItemPipeline, source: Source) -> Source:
        body = await pipeline.fetch(source)
        value = await pipeline.invoke(self.func, body, source.key, source=source)
        return await pipeline.put(source, value)

    def aggregate(self, sources: Sequence[Source], values: Sequence[Any]) -> str | None:
        return sources[-1].key if sources else None


class ReduceMode[T](BatchMode[T]):
    """
    Threads an accumulator through ``func(accumulator, body, key)`` for every source in order.
    When no ``initial`` value is given, the body of the first source is used as the accumulator
    and ``func`` is first called on the second source.
    """

    __slots__ = ("func", "value")

    name = "reduce"

    def __init__(self, func: Callable[[T, Any, str], MaybeAwaitable[T]], initial: T = MISSING):
        self.func = func
        #: The current value of the accumulator
        self.value = initial

    def get_concurrency(self, config: BatchConfig) -> int:
        return 1

    def prepare(self, sources: Sequence[Source]) -> None:
        if not sources and self.value is MISSING:
            raise BatchValueError("Cannot reduce an empty context with no initial value")

    async def process(self, pipeline: ItemPipeline, source: Source) -> None:
        body = await pipeline.fetch(source)
        if self.value is MISSING:
            self.value = body
            return

        self.value = await pipeline.invoke(self.func, self.value, body, source.key, source=source)

    def aggregate(self, sources: Sequence[Source], values: Sequence[Any]) -> T:
        return self.value


class FilterMode(BatchMode[None]):
    """
    Decides whether to keep every source with ``func(body, source)``, which must return a bool.

    With no target configured, removed sources are deleted and kept sources are left in place.
    With a target configured, kept sources are copied to the target and no source is deleted.
    """

    __slots__ = ("func",)

    name = "filter"

    def __init__(self, func: Callable[[Any, Source], MaybeAwaitable[bool]]):
        self.func = func

    async def process(self, pipeline: ItemPipeline, source: Source) -> bool:
        body = await pipeline.fetch(source)
        keep = await pipeline.invoke(self.func, body, source, source=source)
        if not isinstance(keep, bool):
            raise ContractViolationError(
                f"filter function must return a boolean, got {type(keep).__name__}", source=source
            )

        if keep:
            await pipeline.keep(source)
        else:
            await pipeline.remove(source)
        return keep

    def aggregate(self, sources: Sequence[Source], values: Sequence[Any]) -> None:
        return


class JoinMode(BatchMode[str]):
    """Joins the bodies of every source in order with the given ``delimiter``."""

    __slots__ = ("delimiter",)

    name = "join"

    def __init__(self, delimiter: str = ","):
        self.delimiter = delimiter

    def get_concurrency(self, config: BatchConfig) -> int:
        return 1

    async def process(self, pipeline: ItemPipeline, source: Source) -> Any:
        return await pipeline.fetch(source)

    def aggregate(self, sources: Sequence[Source], values: Sequence[Any]) -> str:
        return self.delimiter.join(
            value.decode() if isinstance(value, bytes | bytearray) else str(value) for value in values
        )
