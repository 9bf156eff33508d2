"""
Batch requests over a self-contained working context of objects.
"""
import logging
from collections.abc import Callable, Sequence
from datetime import datetime
from functools import partial
from typing import Any, Self

from storebatch.batch.config import BatchConfig
from storebatch.batch.limiter import ConcurrencyLimiter, TaskResult, TaskState
from storebatch.batch.modes import BatchMode, ForEachMode, MapMode, ReduceMode, FilterMode, JoinMode, MISSING
from storebatch.batch.modes import MaybeAwaitable
from storebatch.batch.pipeline import ItemPipeline
from storebatch.log.logger import StoreBatchLogger
from storebatch.source import Source, SourceResolver, SourceInput
from storebatch.storage.base import StorageAdapter, Transformer


class BatchRequest:
    """
    Self-contained batch request over an ordered working context of objects.

    Settings are chained before executing one of the terminal operations:
    :py:meth:`for_each`, :py:meth:`each`, :py:meth:`map`, :py:meth:`reduce`, :py:meth:`filter`, :py:meth:`join`.
    Every setting returns a new request sharing the same working context, leaving this request unchanged.
    User functions may return either a value or an awaitable which resolves to that value.

    Every terminal operation follows the same failure policy.
    Once any item fails, no further items are started, items already in progress are allowed to finish,
    and the first error to occur is raised.
    For a failed item this error is a :py:class:`BatchError` naming the failed source.
    The exception raised by the storage backend or user function is available as its ``__cause__``,
    so catch :py:class:`BatchError` and inspect ``__cause__`` rather than catching the original exception type.
    Cancelling the caller cancels all items in progress.

    :param storage: The backend to get and write objects with.
    :param sources: The sources which form the working context of this request.
    :param config: The settings to use for terminal operations.
    """

    __slots__ = ("logger", "storage", "sources", "config")

    def __init__(
            self, storage: StorageAdapter, sources: SourceResolver | SourceInput, config: BatchConfig | None = None
    ):
        # noinspection PyTypeChecker
        #: The :py:class:`StoreBatchLogger` for this  object
        self.logger: StoreBatchLogger = logging.getLogger(__name__)

        #: The backend to get and write objects with
        self.storage = storage
        #: The resolver for the working context of this request
        self.sources = sources if isinstance(sources, SourceResolver) else SourceResolver(sources)
        #: The frozen settings used by all terminal operations on this request
        self.config = config or BatchConfig()

    def _with_config(self, config: BatchConfig) -> Self:
        return self.__class__(storage=self.storage, sources=self.sources, config=config)

    ###########################################################################
    ## Settings
    ###########################################################################
    def encode(self, encoding: str | None) -> Self:
        """
        Set the encoding to decode objects with. When None, raw bytes are given to user functions.
        The default encoding is ``utf8``.
        """
        return self._with_config(self.config.with_encoding(encoding))

    def transform(self, transformer: Transformer | None) -> Self:
        """
        Set a function to convert the raw body of each object to the value given to user functions.
        Takes precedence over :py:meth:`encode`.
        """
        return self._with_config(self.config.with_transformer(transformer))

    def concurrency(self, concurrency: int | None) -> Self:
        """Set the maximum number of objects to process at once. When None, all objects are processed at once."""
        return self._with_config(self.config.with_concurrency(concurrency))

    def output(self, bucket: str | None, prefix: str = "") -> Self:
        """
        Set the output location for :py:meth:`map` and :py:meth:`filter`.
        When set, these write to that location instead of changing the original objects themselves.
        Give None as the ``bucket`` to clear the output location.
        """
        return self._with_config(self.config.with_target(bucket, prefix=prefix))

    def progress(self, show: bool = True) -> Self:
        """Show a progress bar while processing objects."""
        return self._with_config(self.config.with_progress(show))

    ###########################################################################
    ## Terminal operations
    ###########################################################################
    async def for_each(self, func: Callable[[Any, str], MaybeAwaitable[Any]]) -> str | None:
        """
        Call ``func(body, key)`` on each object one at a time, in order.

        :return: The key of the last object.
        """
        return await self.execute(ForEachMode(func, serial=True))

    async def each(self, func: Callable[[Any, str], MaybeAwaitable[Any]]) -> str | None:
        """
        Call ``func(body, key)`` on each object, processing up to the configured concurrency at once.

        :return: The key of the last object.
        """
        return await self.execute(ForEachMode(func, serial=False))

    async def map(self, func: Callable[[Any, str], MaybeAwaitable[Any]]) -> str | None:
        """
        Replace each object with the value returned by ``func(body, key)``.
        If an output location is set, objects are not overwritten but written to
        ``<output bucket>/<output prefix><key>`` instead.

        :return: The key of the last object.
        :raise ContractViolationError: When ``func`` returns None.
        """
        return await self.execute(MapMode(func))

    async def reduce[T](self, func: Callable[[T, Any, str], MaybeAwaitable[T]], initial: T = MISSING) -> T:
        """
        Reduce the objects to a single value, one at a time and in order.

        :param func: Takes the accumulated value, the body of the current object, and its key,
            and returns the new accumulated value.
        :param initial: The initial accumulated value.
            When not given, the body of the first object is used and ``func`` is first called on the second object.
        :return: The final accumulated value.
        """
        return await self.execute(ReduceMode(func, initial=initial))

    async def filter(self, func: Callable[[Any, Source], MaybeAwaitable[bool]]) -> None:
        """
        Filter the objects with ``func(body, source)``, which must return True to keep an object
        and False to remove it.

        When no output location is set, removed objects are deleted.
        When an output location is set, nothing is deleted and kept objects are copied to
        ``<output bucket>/<output prefix><file>`` instead.

        :raise ContractViolationError: When ``func`` returns anything other than a bool.
        """
        return await self.execute(FilterMode(func))

    async def join(self, delimiter: str = ",") -> str:
        """Join the bodies of all objects in order with the given ``delimiter``."""
        return await self.execute(JoinMode(delimiter))

    async def execute[T](self, mode: BatchMode[T]) -> T:
        """
        Run the given ``mode`` over every object in the working context.
        The current settings are used for the whole operation.

        :return: The aggregate result of the ``mode``.
        """
        config = self.config
        sources = await self.sources.resolve()
        mode.prepare(sources)

        concurrency = mode.get_concurrency(config)
        start_time = datetime.now()
        self.logger.debug(
            f"{mode.name.upper()}: START | {len(sources)} objects | concurrency: {concurrency or "unbounded"} | "
            f"target: {config.target}"
        )

        bar = None
        if config.show_progress and sources:
            bar = self.logger.get_synchronous_iterator(total=len(sources), desc=mode.name.title(), unit="objects")

        def _update_progress(percent: float) -> None:
            self.logger.debug(f"{mode.name.upper()}: {percent:.0f}%")
            if bar is not None:
                bar.update(1)

        pipeline = ItemPipeline(storage=self.storage, config=config)
        limiter = ConcurrencyLimiter(concurrency=concurrency, progress=_update_progress)
        try:
            results = await limiter.gather([partial(mode.process, pipeline, source) for source in sources])
        finally:
            if bar is not None:
                bar.close()

        error = limiter.first_error(results)
        if error is not None:
            self._log_failure(mode, results=results, error=error)
            raise error

        result = mode.aggregate(sources, [result.value for result in results])
        self.logger.info_extra(
            f"\33[92m{mode.name.title()} completed for {len(sources)} objects "
            f"in {(datetime.now() - start_time).total_seconds():.2f}s\33[0m"
        )
        self.logger.debug(f"{mode.name.upper()}: DONE")
        return result

    def _log_failure(self, mode: BatchMode, results: Sequence[TaskResult], error: Exception) -> None:
        counts = {state: sum(result.state == state for result in results) for state in TaskState}
        self.logger.warning(
            f"\33[91m{mode.name.title()} failed | "
            f"{" | ".join(f"{state.value}: {count}" for state, count in counts.items())} | {error}\33[0m"
        )

    def as_dict(self) -> dict[str, Any]:
        """Return a dictionary representation of this request"""
        return {"storage": self.storage.kind, "resolved": self.sources.resolved, **self.config.as_dict()}

    def __repr__(self):
        return f"{self.__class__.__name__}({", ".join(f"{k}={v!r}" for k, v in self.as_dict().items())})"
