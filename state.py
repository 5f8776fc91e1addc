# 🧠 Per-group collection state
# ----------------------------------------------------------------------
# All states are keyed by group_id (Telegram chat id) to avoid cross-talk
# between groups. Only the Collector touches GroupCollectionState.

import asyncio
from dataclasses import dataclass, field
from datetime import datetime
from typing import Dict, List, Optional


@dataclass(frozen=True)
class PendingFile:
    group_id: int
    filename: str
    source_ref: int            # message_id of the message carrying the file
    fetch_locator: str         # Telegram file_id or http(s) URL
    uploader_label: str
    source_link: Optional[str] = None
    is_replacement: bool = False


@dataclass
class GroupCollectionState:
    # 📥 filename key (case-folded) -> most recent PendingFile
    files: Dict[str, PendingFile] = field(default_factory=dict)
    # ⏱️ debounce task, None while idle or once the drain has started
    timer: Optional[asyncio.Task] = None
    # 🔒 serializes drains for this group
    lock: asyncio.Lock = field(default_factory=asyncio.Lock)


@dataclass(frozen=True)
class ManifestEntry:
    filename: str
    is_replacement: bool = False


@dataclass
class DrainResult:
    group_id: int
    attempted: int = 0
    fetched: int = 0
    manifest: List[ManifestEntry] = field(default_factory=list)
    url: Optional[str] = None
    archive_name: Optional[str] = None
    timestamp: Optional[datetime] = None
    error: Optional[str] = None

    @property
    def uploaded(self) -> bool:
        return self.url is not None
