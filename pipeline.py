# 🚀 Drain pipeline: download every file, zip, upload, notify
# -----------------------------------------
#   - Downloads run concurrently; a failed download drops only that file.
#   - Nothing survived → silent no-op (no archive, no upload, no message).
#   - One upload per drain, never retried. Upload failure ends the drain
#     without a notification and the files are not re-queued.
#   - Notifier errors are logged; the upload is not rolled back.
# -----------------------------------------

import asyncio
import logging
from datetime import datetime, timezone
from typing import Awaitable, Callable, List, Optional, Tuple

from state import DrainResult, ManifestEntry, PendingFile
from utils import archive_name, pack_zip

log = logging.getLogger("pipeline")

Fetch = Callable[[str], Awaitable[bytes]]
Upload = Callable[[bytes, str], Awaitable[str]]


def utc_now() -> datetime:
    return datetime.now(timezone.utc)


class DrainPipeline:
    def __init__(self, fetch: Fetch, upload: Upload, notifier=None,
                 clock: Optional[Callable[[], datetime]] = None):
        self.fetch = fetch
        self.upload = upload
        self.notifier = notifier
        self.clock = clock or utc_now

    async def _download_all(self, group_id: int, snapshot: List[PendingFile]) -> List[Tuple[PendingFile, bytes]]:
        results = await asyncio.gather(
            *(self.fetch(f.fetch_locator) for f in snapshot),
            return_exceptions=True,
        )

        downloads = []
        for f, res in zip(snapshot, results):
            if isinstance(res, BaseException):
                if isinstance(res, asyncio.CancelledError):
                    raise res
                log.error(f"❌ Download failed in group {group_id}: {f.filename}: {res}")
                continue
            downloads.append((f, res))
        return downloads

    async def run(self, group_id: int, snapshot: List[PendingFile]) -> DrainResult:
        result = DrainResult(group_id=group_id, attempted=len(snapshot))

        downloads = await self._download_all(group_id, snapshot)
        result.fetched = len(downloads)
        if not downloads:
            log.info(f"⏭ Nothing downloaded for group {group_id} ({len(snapshot)} attempted)")
            return result

        now = self.clock()
        name = archive_name(now)
        archive = await asyncio.to_thread(pack_zip, [(f.filename, data) for f, data in downloads])
        log.info(f"🗜 Packed {len(downloads)}/{len(snapshot)} file(s) into {name} ({len(archive)} bytes)")

        try:
            url = await self.upload(archive, name)
        except Exception as e:
            log.error(f"❌ Upload failed for group {group_id}, batch dropped: {e}")
            result.error = f"upload failed: {e}"
            return result

        result.url = url
        result.archive_name = name
        result.timestamp = now
        result.manifest = [ManifestEntry(f.filename, f.is_replacement) for f, _ in downloads]
        log.info(f"✅ Batch uploaded for group {group_id}: {name} → {url}")

        if self.notifier is not None:
            try:
                await self.notifier.notify(group_id, result)
            except Exception as e:
                log.error(f"❌ Notification failed for group {group_id}: {e}")
        return result
