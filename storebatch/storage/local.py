"""
Storage backend for objects stored as files in a local directory tree.
"""
import asyncio
import os
import shutil
from pathlib import Path

from storebatch.storage.base import StorageAdapter
from storebatch.storage.exception import ObjectNotFoundError, StorageError


class LocalStorage(StorageAdapter):
    """
    Stores objects as files on the local filesystem.
    Each bucket is a folder in the ``path`` root folder and each key is the relative path of a file in that folder.

    :param path: The root folder containing all buckets.
    """

    __slots__ = ("path",)

    kind = "local"

    def __init__(self, path: str | Path):
        super().__init__()
        #: The root folder containing all buckets
        self.path = Path(path)

    def _get_path(self, bucket: str, key: str) -> Path:
        """Return the path to the file for the object at the given location"""
        root = self.path.joinpath(bucket).resolve()
        path = root.joinpath(key).resolve()
        if not path.is_relative_to(root) or path == root:
            raise StorageError("Key resolves to a path outside of its bucket", bucket=bucket, key=key)
        return path

    async def get_object(self, bucket: str, key: str) -> bytes:
        path = self._get_path(bucket, key)
        self.logger.debug(f"{self.kind.upper():<7}: GET    {path}")
        try:
            return await asyncio.to_thread(path.read_bytes)
        except (FileNotFoundError, IsADirectoryError) as ex:
            raise ObjectNotFoundError(bucket=bucket, key=key) from ex

    async def put_object(self, bucket: str, key: str, data: bytes) -> None:
        path = self._get_path(bucket, key)
        self.logger.debug(f"{self.kind.upper():<7}: PUT    {path} | {len(data)} bytes")

        def _write() -> None:
            path.parent.mkdir(parents=True, exist_ok=True)
            path.write_bytes(data)

        await asyncio.to_thread(_write)

    async def delete(self, bucket: str, key: str) -> None:
        path = self._get_path(bucket, key)
        self.logger.debug(f"{self.kind.upper():<7}: DELETE {path}")
        try:
            await asyncio.to_thread(path.unlink)
        except (FileNotFoundError, IsADirectoryError) as ex:
            raise ObjectNotFoundError(bucket=bucket, key=key) from ex

    async def copy(self, src_bucket: str, src_key: str, dst_bucket: str, dst_key: str) -> None:
        src = self._get_path(src_bucket, src_key)
        dst = self._get_path(dst_bucket, dst_key)
        self.logger.debug(f"{self.kind.upper():<7}: COPY   {src} -> {dst}")
        if not src.is_file():
            raise ObjectNotFoundError(bucket=src_bucket, key=src_key)

        def _copy() -> None:
            dst.parent.mkdir(parents=True, exist_ok=True)
            shutil.copyfile(src, dst)

        await asyncio.to_thread(_copy)

    async def keys(self, bucket: str, prefix: str = "") -> list[str]:
        root = self.path.joinpath(bucket)
        self.logger.debug(f"{self.kind.upper():<7}: LIST   {root} | prefix: {prefix!r}")

        def _walk() -> list[str]:
            keys = []
            for parent, _, files in os.walk(root):
                for file in files:
                    key = Path(parent, file).relative_to(root).as_posix()
                    if key.startswith(prefix):
                        keys.append(key)
            return sorted(keys)

        return await asyncio.to_thread(_walk)
