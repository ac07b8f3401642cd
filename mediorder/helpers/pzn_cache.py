import asyncio
import json
from datetime import datetime
from pathlib import Path
from typing import Dict, Optional, Union

from pydantic import ValidationError

from mediorder.commons.logger import logger
from mediorder.validation.validators import PznInfo


class JsonPznCache:
    """
    Write-through PZN cache: in-memory dict mirrored to a JSON file.
    Row format: {"<pzn8>": {"info": {...}, "fetchedAt": "<iso>"}}
    Writes are serialized per key; file I/O never raises to the caller.
    """

    def __init__(self, path: Union[str, Path, None] = None):
        self.path = Path(path) if path else None
        self._rows: Dict[str, dict] = {}
        self._locks: Dict[str, asyncio.Lock] = {}
        self._lock_users: Dict[str, int] = {}
        self._file_lock = asyncio.Lock()
        self._loaded = self.path is None

    def __len__(self) -> int:
        return len(self._rows)

    async def get(self, key: str) -> Optional[PznInfo]:
        await self._ensure_loaded()
        row = self._rows.get(key)
        if not row:
            return None
        try:
            return PznInfo.model_validate(row["info"])
        except (KeyError, TypeError, ValidationError) as ex:
            logger.warning(f"Invalid cache row for PZN {key}: {ex}")
            return None

    async def put(self, key: str, info: PznInfo) -> None:
        await self._ensure_loaded()
        lock = self._locks.setdefault(key, asyncio.Lock())
        self._lock_users[key] = self._lock_users.get(key, 0) + 1
        try:
            async with lock:
                self._rows[key] = {
                    "info": info.model_dump(by_alias=True),
                    "fetchedAt": datetime.now().isoformat(timespec="seconds"),
                }
                await self._flush()
        finally:
            # Drop the key's lock once nobody holds or waits for it
            self._lock_users[key] -= 1
            if not self._lock_users[key]:
                del self._lock_users[key]
                del self._locks[key]

    async def _ensure_loaded(self):
        if self._loaded:
            return
        async with self._file_lock:
            if self._loaded:
                return
            try:
                if self.path.exists():
                    text = await asyncio.to_thread(self.path.read_text, encoding="utf-8")
                    data = json.loads(text)
                    if isinstance(data, dict):
                        self._rows.update(data)
                    logger.debug(f"Loaded {len(self._rows)} cached PZNs from {self.path}")
            except (OSError, ValueError) as ex:
                logger.warning(f"Could not read PZN cache {self.path}: {ex}")
            self._loaded = True

    async def _flush(self):
        if self.path is None:
            return
        async with self._file_lock:
            payload = json.dumps(self._rows, ensure_ascii=False, indent=2)
            try:
                self.path.parent.mkdir(parents=True, exist_ok=True)
                await asyncio.to_thread(self.path.write_text, payload, encoding="utf-8")
            except OSError as ex:
                logger.warning(f"Could not write PZN cache {self.path}: {ex}")
