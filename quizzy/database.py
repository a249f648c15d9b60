"""
Flat JSON file store - the whole database is one JSON document on disk
"""
import asyncio
import json
import logging
import os
import uuid
from contextlib import asynccontextmanager
from pathlib import Path
from typing import Any, AsyncIterator, Dict, Optional, Union

import aiofiles
import aiofiles.os

from quizzy.config import settings
from quizzy.defaults import COLLECTIONS, SCHEMA_VERSION, default_document, default_settings

logger = logging.getLogger(__name__)


class StoreError(Exception):
    """Store could not be read or written"""


class CorruptStoreError(StoreError):
    """Persisted document exists but is not a valid store document"""


class StoreUnavailableError(StoreError):
    """Store operation did not finish within the configured timeout"""


class FlatStore:
    """
    Single-document JSON store

    Every mutation goes through ``transaction()``, which holds one lock
    across the read-modify-write cycle so concurrent writers never lose
    each other's updates. Files are replaced atomically, so lock-free
    readers always see a complete document.
    """

    def __init__(self, path: Union[str, Path], timeout: float = 5.0):
        self.path = Path(path)
        self.timeout = timeout
        self._lock = asyncio.Lock()

    async def load(self) -> Dict[str, Any]:
        """
        Read the persisted document

        A missing file is initialized with the default document and
        persisted before returning. A malformed file raises
        CorruptStoreError instead of being reset.

        Returns:
            Normalized document with every collection key present
        """
        document = await self._read()
        if document is None:
            async with self._locked():
                document = await self._read_or_initialize()
        return document

    async def save(self, document: Dict[str, Any]) -> None:
        """Persist the full document, replacing prior content"""
        async with self._locked():
            await self._write(document)

    @asynccontextmanager
    async def transaction(self) -> AsyncIterator[Dict[str, Any]]:
        """
        Serialized read-modify-write cycle

        The yielded document is saved when the block exits normally.
        If the block raises, nothing is written.
        """
        async with self._locked():
            document = await self._read_or_initialize()
            yield document
            await self._write(document)

    @asynccontextmanager
    async def _locked(self) -> AsyncIterator[None]:
        await self._acquire()
        try:
            yield
        finally:
            self._lock.release()

    async def _acquire(self) -> None:
        acquire = asyncio.ensure_future(self._lock.acquire())
        try:
            await asyncio.wait_for(asyncio.shield(acquire), timeout=self.timeout)
        except asyncio.TimeoutError:
            self._abandon(acquire)
            logger.error(f"Store timeout after {self.timeout}s while waiting for store lock: {self.path}")
            raise StoreUnavailableError("Store unavailable: timed out waiting for store lock")
        except asyncio.CancelledError:
            self._abandon(acquire)
            raise

    def _abandon(self, acquire: "asyncio.Future[bool]") -> None:
        # the acquire may have won the race with the timeout
        acquire.cancel()
        acquire.add_done_callback(self._release_if_acquired)

    def _release_if_acquired(self, acquire: "asyncio.Future[bool]") -> None:
        if not acquire.cancelled() and acquire.exception() is None:
            self._lock.release()

    async def _bounded(self, awaitable, action: str):
        try:
            return await asyncio.wait_for(awaitable, timeout=self.timeout)
        except asyncio.TimeoutError:
            logger.error(f"Store timeout after {self.timeout}s while {action}: {self.path}")
            raise StoreUnavailableError(f"Store unavailable: timed out {action}")

    async def _read_or_initialize(self) -> Dict[str, Any]:
        document = await self._read()
        if document is None:
            logger.info(f"No store found at {self.path}, initializing default document")
            document = default_document()
            await self._write(document)
        return document

    async def _read(self) -> Optional[Dict[str, Any]]:
        try:
            raw = await self._bounded(self._read_text(), "reading store")
        except FileNotFoundError:
            return None
        except OSError as e:
            logger.error(f"Failed to read store {self.path}: {str(e)}")
            raise StoreError(f"Failed to read store: {str(e)}") from e

        try:
            document = json.loads(raw)
        except ValueError as e:
            logger.error(f"Store {self.path} contains malformed JSON: {str(e)}")
            raise CorruptStoreError(f"Store contains malformed JSON: {str(e)}") from e

        return self._normalize(document)

    async def _read_text(self) -> str:
        async with aiofiles.open(self.path, "r", encoding="utf-8") as f:
            return await f.read()

    async def _write(self, document: Dict[str, Any]) -> None:
        try:
            serialized = json.dumps(document, indent=2, ensure_ascii=False)
        except (TypeError, ValueError) as e:
            raise StoreError(f"Document is not JSON serializable: {str(e)}") from e

        temp_path = self.path.with_name(f".{self.path.name}.{uuid.uuid4().hex}.tmp")
        try:
            await self._bounded(self._write_text(temp_path, serialized), "writing store")
            # unbounded: the replace must finish before the lock is released
            await aiofiles.os.replace(temp_path, self.path)
        except OSError as e:
            logger.error(f"Failed to write store {self.path}: {str(e)}")
            await self._discard(temp_path)
            raise StoreError(f"Failed to write store: {str(e)}") from e
        except StoreUnavailableError:
            await self._discard(temp_path)
            raise

    async def _write_text(self, temp_path: Path, serialized: str) -> None:
        async with aiofiles.open(temp_path, "w", encoding="utf-8") as f:
            await f.write(serialized)
            await f.flush()

    async def _discard(self, temp_path: Path) -> None:
        if os.path.exists(temp_path):
            try:
                await aiofiles.os.remove(temp_path)
            except OSError as e:
                logger.warning(f"Could not remove temp file {temp_path}: {str(e)}")

    def _normalize(self, document: Any) -> Dict[str, Any]:
        if not isinstance(document, dict):
            raise CorruptStoreError("Store root must be a JSON object")

        for key, kind in COLLECTIONS.items():
            value = document.get(key)
            if value is None:
                document[key] = kind()
            elif not isinstance(value, kind):
                raise CorruptStoreError(
                    f"Store collection '{key}' must be a JSON {'array' if kind is list else 'object'}"
                )

        for field, value in default_settings(stamp=False).items():
            document["settings"].setdefault(field, value)

        document.setdefault("schemaVersion", SCHEMA_VERSION)
        return document


# Global instance
flat_store = FlatStore(settings.DB_PATH, timeout=settings.STORE_TIMEOUT_SECONDS)


def get_store() -> FlatStore:
    """Dependency that provides the flat store"""
    return flat_store


async def init_db() -> None:
    """Create the store file with the default document if it is missing"""
    await flat_store.load()
