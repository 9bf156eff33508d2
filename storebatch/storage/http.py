"""
Storage backend for S3-compatible object stores reached over HTTP.
"""
import contextlib
import logging
from collections.abc import Callable, AsyncIterator
from typing import Any, Self
from urllib.parse import quote
from xml.etree import ElementTree

import aiohttp
from aiohttp import ClientResponse, ClientSession
from yarl import URL

from storebatch.storage.base import StorageAdapter
from storebatch.storage.exception import ObjectNotFoundError, StorageRequestError


class HTTPStorage(StorageAdapter):
    """
    Stores objects in an S3-compatible object store using path-style URLs i.e. ``<endpoint>/<bucket>/<key>``.

    Requests are unauthenticated and failed requests are not retried.
    Listing keys returns only the first page of results the service gives.

    :param endpoint: The base URL of the object store.
    :param connector: When called, returns a new session to use when making requests.
    """

    __slots__ = ("url", "_connector", "_session")

    kind = "http"

    @property
    def closed(self):
        """Is the stored client session closed."""
        return self._session is None or self._session.closed

    @property
    def session(self) -> ClientSession:
        """The :py:class:`ClientSession` object if it exists and is open."""
        if not self.closed:
            return self._session

    @classmethod
    def create(cls, endpoint: str | URL, **session_kwargs) -> Self:
        """Create a new :py:class:`HTTPStorage` with a session ``connector`` given the input kwargs"""
        return cls(endpoint=endpoint, connector=lambda: ClientSession(**session_kwargs))

    def __init__(self, endpoint: str | URL, connector: Callable[[], ClientSession] = ClientSession):
        super().__init__()
        #: The base URL of the object store
        self.url = URL(endpoint)

        self._connector = connector
        self._session: ClientSession | None = None

    async def __aenter__(self) -> Self:
        if self.closed:
            self._session = self._connector()

        await self.session.__aenter__()
        return self

    async def __aexit__(self, __exc_type, __exc_value, __traceback) -> None:
        await self.session.__aexit__(__exc_type, __exc_value, __traceback)
        self._session = None

    def _get_url(self, bucket: str, key: str | None = None) -> URL:
        url = self.url / bucket
        return url / key if key else url

    @contextlib.asynccontextmanager
    async def _request(
            self, method: str, bucket: str, key: str | None = None, **kwargs
    ) -> AsyncIterator[ClientResponse]:
        """Log and send the request, yield the response, and raise an error for any failed response"""
        if self.closed:
            raise StorageRequestError(
                "Session is closed. Enter the storage context to start a new session.", bucket=bucket, key=key
            )

        url = self._get_url(bucket, key)
        self.log(method=method, url=url, **kwargs)

        try:
            async with self.session.request(method=method.upper(), url=url, **kwargs) as response:
                if response.status == 404 and key:
                    raise ObjectNotFoundError(bucket=bucket, key=key)
                if not response.ok:
                    text = await response.text()
                    raise StorageRequestError(text or response.reason, bucket=bucket, key=key, response=response)

                yield response
        except aiohttp.ClientError as ex:
            raise StorageRequestError(str(ex), bucket=bucket, key=key) from ex

    def log(self, method: str, url: str | URL, level: int = logging.DEBUG, **kwargs) -> None:
        """Format and log a request to the given ``level``."""
        log: list[Any] = []

        url = URL(url)
        if kwargs.get("params"):
            log.extend(f"{k}: {v:<4}" for k, v in sorted(kwargs["params"].items()))
        if kwargs.get("headers"):
            log.extend(f"{k}: {v:<4}" for k, v in sorted(kwargs["headers"].items()))
        if kwargs.get("data") is not None:
            log.append(f"{len(kwargs["data"])} bytes")

        url = str(url.with_query(None))
        url_pad_map = [30, 40, 70, 100]
        url_pad = next((pad for pad in url_pad_map if len(url) < pad), url_pad_map[-1])

        self.logger.log(level=level, msg=f"{method.upper():<7}: {url:<{url_pad}} | {" | ".join(map(str, log))}")

    async def get_object(self, bucket: str, key: str) -> bytes:
        async with self._request("GET", bucket, key) as response:
            return await response.read()

    async def put_object(self, bucket: str, key: str, data: bytes) -> None:
        async with self._request("PUT", bucket, key, data=data):
            pass

    async def delete(self, bucket: str, key: str) -> None:
        async with self._request("DELETE", bucket, key):
            pass

    async def copy(self, src_bucket: str, src_key: str, dst_bucket: str, dst_key: str) -> None:
        headers = {"x-amz-copy-source": quote(f"/{src_bucket}/{src_key}")}
        async with self._request("PUT", dst_bucket, dst_key, headers=headers):
            pass

    async def keys(self, bucket: str, prefix: str = "") -> list[str]:
        params = {"list-type": "2", "prefix": prefix}
        async with self._request("GET", bucket, params=params) as response:
            text = await response.text()

        root = ElementTree.fromstring(text)
        if (root.findtext("{*}IsTruncated") or "").casefold() == "true":
            self.logger.warning(f"Listing for {bucket}/{prefix} is truncated, only the first page is used")

        return sorted(key.text for key in root.iterfind("{*}Contents/{*}Key") if key.text)
