"""Blob storage for package archives and generated artifacts."""

from __future__ import annotations

import asyncio
import os
import tempfile
from abc import ABC, abstractmethod
from pathlib import Path, PurePosixPath
from typing import Optional


def package_archive_relative_path(name: str, version: str) -> str:
    return f"packages/{name}/{version}.tar.gz"


class InvalidBlobPathError(ValueError):
    """Raised when a logical path would escape the storage root."""


class BlobStore(ABC):
    """Immutable byte blobs addressed by a logical ``/``-separated path."""

    @abstractmethod
    async def put(self, path: str, data: bytes, *, overwrite: bool = True) -> bool:
        """Store ``data`` at ``path``.

        Returns ``False`` without touching the existing blob when
        ``overwrite`` is disabled and ``path`` is already taken.
        """

    @abstractmethod
    async def get(self, path: str) -> Optional[bytes]:
        """Return the blob at ``path`` or ``None`` when absent."""

    @abstractmethod
    async def exists(self, path: str) -> bool: ...

    @abstractmethod
    async def delete(self, path: str) -> None:
        """Remove the blob at ``path``; missing blobs are ignored."""

    @abstractmethod
    async def list(self, prefix: str = "") -> list[str]:
        """Return logical paths of all blobs under ``prefix``."""


class FileSystemBlobStore(BlobStore):
    """Local filesystem implementation of :class:`BlobStore`.

    Writes go to a temporary file in the target directory first and are then
    linked or renamed into place, so readers never observe partial blobs.
    """

    def __init__(self, root: Path | str) -> None:
        self._root = Path(root).expanduser().resolve()
        self._root.mkdir(parents=True, exist_ok=True)

    @property
    def root(self) -> Path:
        return self._root

    def _resolve(self, path: str) -> Path:
        logical = PurePosixPath(path)
        if logical.is_absolute() or ".." in logical.parts or not logical.parts:
            raise InvalidBlobPathError(f"Invalid blob path: {path!r}")
        resolved = (self._root / Path(*logical.parts)).resolve()
        if self._root not in resolved.parents:
            raise InvalidBlobPathError(f"Invalid blob path: {path!r}")
        return resolved

    async def put(self, path: str, data: bytes, *, overwrite: bool = True) -> bool:
        target = self._resolve(path)
        return await asyncio.to_thread(self._write, target, data, overwrite)

    @staticmethod
    def _write(target: Path, data: bytes, overwrite: bool) -> bool:
        target.parent.mkdir(parents=True, exist_ok=True)
        fd, tmp_name = tempfile.mkstemp(dir=target.parent, prefix=".tmp-", suffix=".part")
        tmp_path = Path(tmp_name)
        try:
            with os.fdopen(fd, "wb") as handle:
                handle.write(data)
                handle.flush()
                os.fsync(handle.fileno())
            if overwrite:
                os.replace(tmp_path, target)
                return True
            try:
                # link() refuses to replace an existing file, which makes the
                # exclusive create atomic.
                os.link(tmp_path, target)
            except FileExistsError:
                return False
            return True
        finally:
            if tmp_path.exists():
                tmp_path.unlink()

    async def get(self, path: str) -> Optional[bytes]:
        target = self._resolve(path)
        return await asyncio.to_thread(self._read, target)

    @staticmethod
    def _read(target: Path) -> Optional[bytes]:
        try:
            return target.read_bytes()
        except FileNotFoundError:
            return None

    async def exists(self, path: str) -> bool:
        target = self._resolve(path)
        return await asyncio.to_thread(target.is_file)

    async def delete(self, path: str) -> None:
        target = self._resolve(path)
        await asyncio.to_thread(target.unlink, missing_ok=True)

    async def list(self, prefix: str = "") -> list[str]:
        base = self._resolve(prefix) if prefix.strip("/") else self._root
        return await asyncio.to_thread(self._walk, base)

    def _walk(self, base: Path) -> list[str]:
        if not base.is_dir():
            return []
        return sorted(
            item.relative_to(self._root).as_posix()
            for item in base.rglob("*")
            if item.is_file() and not item.name.startswith(".tmp-")
        )


__all__ = [
    "BlobStore",
    "FileSystemBlobStore",
    "InvalidBlobPathError",
    "package_archive_relative_path",
]
