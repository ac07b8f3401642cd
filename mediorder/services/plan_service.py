# mediorder/services/plan_service.py
import asyncio
import shutil
from pathlib import Path
from typing import List, Optional, Sequence, Set

from mediorder.commons.bmp_engine import BmpEngine
from mediorder.commons.bmp_normalizer import Payload
from mediorder.commons.logger import logger
from mediorder.helpers.file_transport import ArchiveWriter, FileWatcher
from mediorder.parsers.errors import BmpError
from mediorder.parsers.models import ScanResult
from mediorder.services.lookup_service import PznLookupService


class PlanService:
    """
    Scan pipeline: decode -> parse -> merge (multi-page) -> enrich -> archive.
    Rejected payloads are copied to the error folder; the service keeps running.
    """

    def __init__(self, engine: BmpEngine, lookup: Optional[PznLookupService] = None):
        self.engine = engine
        self.lookup = lookup
        self.paths = engine.settings.paths
        self.archive = ArchiveWriter(self.paths.archive)
        Path(self.paths.error).mkdir(parents=True, exist_ok=True)
        # Inbox files being processed; watchdog fires created + modified per scan
        self._in_flight: Set[str] = set()

    async def process_pages(self, payloads: Sequence[Payload]) -> ScanResult:
        """Decode, merge and enrich one logical plan. BmpError propagates."""
        result = self.engine.read_pages(payloads)
        if self.lookup is not None:
            plan, _ = await self.lookup.enrich_plan(result.plan)
            result = ScanResult(plan=plan, raw_xml=result.raw_xml)
        return result

    async def ingest(self, payloads: Sequence[Payload]) -> Path:
        result = await self.process_pages(payloads)
        out_json = self.archive.write(self.engine.to_payload(result))
        logger.info(
            f"Plan {result.plan.uuid} archived ({len(payloads)} page(s), "
            f"{len(result.plan.medications())} medication(s)): {out_json}"
        )
        return out_json

    async def ingest_files(self, files: Sequence[Path]) -> Optional[Path]:
        """Pages of one plan as payload files; on failure the files go to error/."""
        try:
            payloads: List[bytes] = [Path(f).read_bytes() for f in files]
        except OSError as ex:
            logger.error(f"Could not read payload file: {ex}")
            return None
        try:
            out = await self.ingest(payloads)
        except BmpError as ex:
            logger.error(f"Plan rejected ({', '.join(Path(f).name for f in files)}): {ex}")
            for f in files:
                self._to_error(Path(f))
            return None
        self._archive_payloads(files)
        return out

    async def _process_payload(self, data: bytes, src: str):
        if not data:
            # Still being written: wait for the next event
            return
        key = str(Path(src).resolve())
        if key in self._in_flight:
            logger.debug(f"Already processing {Path(src).name}, event skipped")
            return
        if not Path(src).exists():
            # Moved to archive/error by an earlier event for the same scan
            return
        self._in_flight.add(key)
        try:
            await self.ingest([data])
        except BmpError as ex:
            logger.error(f"Payload rejected {Path(src).name}: {ex}")
            self._to_error(Path(src))
            return
        except Exception as ex:
            logger.exception(f"Unexpected error processing {src}: {ex}")
            self._to_error(Path(src))
            return
        finally:
            self._in_flight.discard(key)
        self._archive_payloads([Path(src)])

    def _to_error(self, src: Path):
        if src.exists():
            shutil.move(str(src), str(Path(self.paths.error) / src.name))

    def _archive_payloads(self, files: Sequence[Path]):
        dst_dir = Path(self.paths.archive) / "payloads"
        dst_dir.mkdir(parents=True, exist_ok=True)
        for f in files:
            if Path(f).exists():
                shutil.move(str(f), str(dst_dir / Path(f).name))

    async def _process_backlog(self, glob_pat: str):
        inbox = Path(self.paths.inbox)
        files = sorted(inbox.glob(glob_pat))
        if not files:
            return
        logger.info(f"Backlog: {len(files)} file(s) in {inbox}")
        for f in files:
            await self._process_payload(f.read_bytes(), str(f))

    async def run_file_mode(self, glob_pat: str, stop_event: Optional[asyncio.Event] = None):
        loop = asyncio.get_running_loop()

        # 1) Files already waiting in the inbox
        await self._process_backlog(glob_pat)

        # 2) Watch for new scans
        watcher = FileWatcher(self.paths.inbox, glob_pat, self._process_payload, loop)
        watcher.start()
        logger.info(f"Watching {self.paths.inbox} for {glob_pat}")
        try:
            await (stop_event or asyncio.Event()).wait()
        finally:
            watcher.stop()
