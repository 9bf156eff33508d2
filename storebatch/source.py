"""
The addressable items a batch operates over and the resolver which produces the ordered working context.
"""
import asyncio
import inspect
from collections.abc import Awaitable, Iterable, Callable
from dataclasses import dataclass

from yarl import URL

from storebatch.exception import StoreBatchValueError, StoreBatchTypeError


@dataclass(frozen=True)
class Source:
    """An object in a remote store, identified by its ``bucket`` and ``key``."""
    #: The bucket the object is stored in.
    bucket: str
    #: The full key of the object.
    key: str
    #: The prefix the object was listed under when building the working context.
    prefix: str = ""

    @property
    def file(self) -> str:
        """The key of this object relative to the ``prefix`` it was listed under."""
        return self.key.removeprefix(self.prefix).lstrip("/")

    def __str__(self):
        return f"{self.bucket}/{self.key}"


@dataclass(frozen=True)
class Target:
    """An alternate location to write results to instead of modifying source objects in place."""
    bucket: str
    prefix: str = ""

    def key_for(self, name: str) -> str:
        """Return the key in this target location for the given ``name``"""
        return self.prefix + name


def parse_location(location: str, prefix: str = "") -> tuple[str, str]:
    """
    Split a storage location into its bucket and prefix.

    Accepts either a bare bucket name, in which case the given ``prefix`` is returned as is,
    or a URL of the form ``s3://<bucket>/<prefix>`` from which the prefix is extracted.
    """
    if "://" not in location:
        return location, prefix

    url = URL(location)
    if not url.host:
        raise StoreBatchValueError(f"No bucket found in location: {location}")
    return url.host, url.path.lstrip("/") or prefix


type SourceInput = Iterable[Source] | Awaitable[Iterable[Source]] | Callable[[], Awaitable[Iterable[Source]]]


class SourceResolver:
    """
    Produces the ordered working context of :py:class:`Source` objects exactly once.

    The first call to :py:meth:`resolve` starts the resolution and all later calls,
    including any made while resolution is pending, share its result.

    :param sources: The sources to resolve. May be an iterable of sources, an awaitable which returns them,
        or a function which returns such an awaitable.
    """

    __slots__ = ("_sources", "_task", "_resolved")

    @property
    def resolved(self) -> bool:
        """Have the sources been resolved."""
        return self._resolved is not None

    def __init__(self, sources: SourceInput):
        self._sources = sources
        self._task: asyncio.Future[tuple[Source, ...]] | None = None
        self._resolved: tuple[Source, ...] | None = None

    async def _resolve(self) -> tuple[Source, ...]:
        sources = self._sources
        if callable(sources):
            sources = sources()
        if inspect.isawaitable(sources):
            sources = await sources

        sources = tuple(sources)
        for source in sources:
            if not isinstance(source, Source):
                raise StoreBatchTypeError(type(source).__name__, message="Working context must only contain sources")
        return sources

    async def resolve(self) -> tuple[Source, ...]:
        """Return the ordered sources of the working context, resolving them if needed."""
        if self._resolved is not None:
            return self._resolved

        if self._task is None:
            self._task = asyncio.ensure_future(self._resolve())

        # a cancelled caller must not cancel the shared resolution
        self._resolved = await asyncio.shield(self._task)
        return self._resolved
