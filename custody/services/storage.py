"""Object storage for receipt images and transfer proofs."""

from __future__ import annotations

import asyncio
import logging
from pathlib import Path, PurePosixPath
from typing import TYPE_CHECKING, Protocol, runtime_checkable

from custody.exceptions import CollaboratorError, NotFoundError, ValidationError

if TYPE_CHECKING:
    from custody.config import Settings

logger = logging.getLogger(__name__)


@runtime_checkable
class ObjectStore(Protocol):
    """Interface for binary object storage."""

    async def upload(self, data: bytes, path: str) -> str:
        """Store ``data`` under ``path`` and return its public URL."""
        ...

    async def read(self, path: str) -> bytes:
        """Return the bytes stored under ``path``; raise NotFoundError when absent."""
        ...


def normalize_object_path(path: str) -> str:
    """Reject absolute paths and parent-directory segments."""
    pure = PurePosixPath(path)
    if pure.is_absolute() or not pure.parts or ".." in pure.parts:
        raise ValidationError(f"Invalid object path: {path!r}")
    return pure.as_posix()


class InMemoryObjectStore:
    """Keeps uploaded objects in a dict; for tests and local development."""

    def __init__(self, base_url: str = "memory://objects") -> None:
        self.base_url = base_url.rstrip("/")
        self.objects: dict[str, bytes] = {}

    async def upload(self, data: bytes, path: str) -> str:
        key = normalize_object_path(path)
        self.objects[key] = data
        return f"{self.base_url}/{key}"

    async def read(self, path: str) -> bytes:
        key = normalize_object_path(path)
        if key not in self.objects:
            raise NotFoundError(f"File {key} not found")
        return self.objects[key]


class LocalObjectStore:
    """Writes objects below a directory and serves them from ``base_url``."""

    def __init__(self, root: str | Path, base_url: str) -> None:
        self.root = Path(root)
        self.base_url = base_url.rstrip("/")

    async def upload(self, data: bytes, path: str) -> str:
        key = normalize_object_path(path)
        target = self.root / key
        try:
            await asyncio.to_thread(self._write, target, data)
        except OSError as exc:
            raise CollaboratorError(f"Failed to store {key}: {exc}") from exc
        logger.info("Stored %d bytes at %s", len(data), target)
        return f"{self.base_url}/{key}"

    async def read(self, path: str) -> bytes:
        key = normalize_object_path(path)
        try:
            return await asyncio.to_thread((self.root / key).read_bytes)
        except (FileNotFoundError, IsADirectoryError, NotADirectoryError):
            raise NotFoundError(f"File {key} not found") from None
        except OSError as exc:
            raise CollaboratorError(f"Failed to read {key}: {exc}") from exc

    @staticmethod
    def _write(target: Path, data: bytes) -> None:
        target.parent.mkdir(parents=True, exist_ok=True)
        target.write_bytes(data)


def build_object_store(settings: Settings) -> ObjectStore:
    """Object store used by the upload endpoint."""
    return LocalObjectStore(settings.upload_dir, settings.public_base_url)
