import asyncio
import json
import re
import time
from datetime import datetime
from pathlib import Path
from typing import Awaitable, Callable, Dict, Optional

from watchdog.events import FileSystemEvent, PatternMatchingEventHandler
from watchdog.observers import Observer

from mediorder.commons.logger import logger

PayloadCallback = Callable[[bytes, str], Awaitable[None]]


class ArchiveWriter:
    """Writes processed plans as JSON into the archive folder."""

    def __init__(self, archive: str, pattern: str = "{timestamp}_{uuid}.json"):
        self.archive = Path(archive)
        self.archive.mkdir(parents=True, exist_ok=True)
        self.pattern = pattern

    def write(self, data: Dict) -> Path:
        uuid = re.sub(r"[^a-zA-Z0-9_\-]", "_", data.get("uuid") or "") or "no-uuid"
        fname = self.pattern.format(timestamp=datetime.now().strftime("%Y%m%d-%H%M%S-%f"), uuid=uuid)
        p = self.archive / fname
        p.write_text(json.dumps(data, ensure_ascii=False, indent=2), encoding="utf-8")
        return p


def read_when_stable(path: Path, attempts: int = 10, delay: float = 0.05) -> Optional[bytes]:
    """
    Read a payload file once its size stops changing (the scanner software
    writes in chunks). None if the file disappeared meanwhile.
    """
    last_size = -1
    for _ in range(attempts):
        try:
            size = path.stat().st_size
            if size == last_size and size > 0:
                return path.read_bytes()
            last_size = size
        except FileNotFoundError:
            return None
        except OSError:
            pass
        time.sleep(delay)
    try:
        return path.read_bytes()
    except FileNotFoundError:
        return None


class _InboxHandler(PatternMatchingEventHandler):
    def __init__(self, glob: str, on_payload_async: PayloadCallback, loop: asyncio.AbstractEventLoop):
        super().__init__(patterns=[glob], ignore_directories=True)
        self.on_payload_async = on_payload_async
        self.loop = loop

    def on_created(self, event: FileSystemEvent):
        self._dispatch_path(Path(event.src_path))

    def on_modified(self, event: FileSystemEvent):
        self._dispatch_path(Path(event.src_path))

    def on_moved(self, event: FileSystemEvent):
        self._dispatch_path(Path(event.dest_path))

    def _dispatch_path(self, path: Path):
        data = read_when_stable(path)
        if data is None:
            return
        logger.debug(f"Scan received: {path.name} ({len(data)} bytes)")
        # watchdog thread -> main loop
        asyncio.run_coroutine_threadsafe(self.on_payload_async(data, str(path)), self.loop)


class FileWatcher:
    """Watches the scanner drop folder and hands raw payload bytes to an async callback."""

    def __init__(self, inbox: str, glob: str, on_payload_async: PayloadCallback, loop: asyncio.AbstractEventLoop):
        self.inbox = Path(inbox)
        self.inbox.mkdir(parents=True, exist_ok=True)
        self.handler = _InboxHandler(glob, on_payload_async, loop)
        self.observer = Observer()

    def start(self):
        self.observer.schedule(self.handler, str(self.inbox), recursive=False)
        self.observer.start()

    def stop(self):
        self.observer.stop()
        self.observer.join()
