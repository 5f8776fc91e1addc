# 📥 Collects files per group and drains them once the group goes quiet
# -----------------------------------------
# Unified logic:
#   - Every submit/cancel re-arms the group's debounce timer (trailing debounce).
#   - Same filename in one window replaces the older entry.
#   - When the timer fires (or a drain is forced) the whole group mapping is
#     swapped out before any download/upload starts.
#   - Drains of one group run one at a time; a forced drain arriving during a
#     running drain waits, then drains whatever arrived meanwhile.
# -----------------------------------------

import asyncio
import logging
from dataclasses import replace
from typing import Dict, List, Optional

from state import DrainResult, GroupCollectionState, PendingFile
from utils import filename_key

log = logging.getLogger("collector")


class Collector:
    def __init__(self, pipeline, wait_secs: float):
        self.pipeline = pipeline
        self.wait_secs = wait_secs
        self._groups: Dict[int, GroupCollectionState] = {}

    def _group(self, group_id: int) -> GroupCollectionState:
        grp = self._groups.get(group_id)
        if grp is None:
            grp = self._groups[group_id] = GroupCollectionState()
            log.info(f"➕ New collection state created for group {group_id}")
        return grp

    # ---------------------------
    # Inbound events
    # ---------------------------
    def submit(self, group_id: int, file: PendingFile) -> bool:
        grp = self._group(group_id)
        key = filename_key(file.filename)
        is_replacement = key in grp.files

        grp.files[key] = replace(file, group_id=group_id, is_replacement=is_replacement)
        log.info(f"📥 File added in group {group_id}: {file.filename} (replacement: {is_replacement})")

        self._reset_timer(group_id, grp)
        return is_replacement

    def cancel(self, group_id: int, source_ref: int) -> Optional[str]:
        grp = self._groups.get(group_id)
        if not grp:
            return None

        found = next((key for key, f in grp.files.items() if f.source_ref == source_ref), None)
        if found is None:
            log.info(f"⏭ Nothing to cancel for message {source_ref} in group {group_id}")
            return None

        removed = grp.files.pop(found)
        log.info(f"🗑 File cancelled in group {group_id}: {removed.filename}")
        self._reset_timer(group_id, grp)
        return removed.filename

    def pending(self, group_id: int) -> List[PendingFile]:
        grp = self._groups.get(group_id)
        if not grp:
            return []
        return list(grp.files.values())

    # ---------------------------
    # Debounce timers
    # ---------------------------
    def _reset_timer(self, group_id: int, grp: GroupCollectionState) -> None:
        if grp.timer:
            grp.timer.cancel()
            log.info(f"⏹ Reset debounce timer for group {group_id}")
        grp.timer = asyncio.create_task(self._timer_task(group_id, grp))

    async def _timer_task(self, group_id: int, grp: GroupCollectionState) -> None:
        log.info(f"⏳ Starting debounce timer for group {group_id} ({self.wait_secs}s)")
        try:
            await asyncio.sleep(self.wait_secs)
        except asyncio.CancelledError:
            log.info(f"⏹ Debounce timer cancelled for group {group_id}")
            return
        # Past this point the drain must not be cancelled by a new submit
        if grp.timer is asyncio.current_task():
            grp.timer = None
        await self._drain(group_id, from_timer=True)

    def _cancel_timer(self, grp: GroupCollectionState) -> None:
        if grp.timer:
            grp.timer.cancel()
            grp.timer = None

    # ---------------------------
    # Drain
    # ---------------------------
    async def force_drain(self, group_id: int) -> DrainResult:
        grp = self._group(group_id)
        self._cancel_timer(grp)
        log.info(f"🚀 Forced drain requested for group {group_id}")
        return await self._drain(group_id)

    async def _drain(self, group_id: int, from_timer: bool = False) -> DrainResult:
        grp = self._group(group_id)
        async with grp.lock:
            # A file submitted while this timer waited for the lock armed a newer
            # timer; that one owns the window now
            if from_timer and grp.timer is not None:
                log.info(f"⏭ Newer debounce timer armed for group {group_id}, skipping stale drain")
                return DrainResult(group_id=group_id)

            snapshot = list(grp.files.values())
            grp.files = {}

            if not snapshot:
                log.info(f"⏭ No pending files for group {group_id}")
                return DrainResult(group_id=group_id)

            log.info(f"🚀 Draining {len(snapshot)} file(s) for group {group_id}")
            try:
                return await self.pipeline.run(group_id, snapshot)
            except Exception as e:
                log.error(f"❌ Drain failed for group {group_id}: {e}")
                return DrainResult(group_id=group_id, attempted=len(snapshot), error=str(e))

    async def shutdown(self) -> None:
        timers = [grp.timer for grp in self._groups.values() if grp.timer]
        for grp in self._groups.values():
            self._cancel_timer(grp)
        if timers:
            await asyncio.gather(*timers, return_exceptions=True)
        log.info(f"⏹ Collector stopped ({len(timers)} timer(s) cancelled)")
