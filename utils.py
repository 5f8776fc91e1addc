# 🛠️ Utility functions for archive building and message formatting

import html
import io
import zipfile
from datetime import datetime
from typing import Iterable, List, Optional, Tuple

from config import (
    ARCHIVE_TIME_FORMAT,
    CANCEL_KEYWORDS,
    CANCEL_SUBSTRINGS,
    FILE_EXTENSIONS,
    MAX_MESSAGE,
    ZIP_LEVEL,
)
from state import DrainResult, ManifestEntry, PendingFile

UPDATED_MARK = " (updated)"


def filename_key(filename: str) -> str:
    return filename.casefold()


def matches_extension(filename: Optional[str], extensions: Iterable[str] = FILE_EXTENSIONS) -> bool:
    if not filename:
        return False
    name = filename.lower()
    return any(name.endswith(ext) for ext in extensions)


def is_cancel_text(text: Optional[str]) -> bool:
    if not text:
        return False
    cleaned = text.strip().lower()
    if cleaned in CANCEL_KEYWORDS:
        return True
    return any(word in cleaned for word in CANCEL_SUBSTRINGS)


def archive_name(when: datetime) -> str:
    return f"files_{when.strftime(ARCHIVE_TIME_FORMAT)}.zip"


def pack_zip(entries: Iterable[Tuple[str, bytes]], level: int = ZIP_LEVEL) -> bytes:
    """
    Pack (filename, data) pairs into a single in-memory zip.
    Entry order follows the input order.
    """
    buf = io.BytesIO()
    with zipfile.ZipFile(buf, "w", compression=zipfile.ZIP_DEFLATED, compresslevel=level) as zf:
        for name, data in entries:
            zf.writestr(name, data)
    return buf.getvalue()


def join_lines(lines: List[str], limit: int) -> str:
    """
    Join whole lines up to `limit` chars. Lines are never cut in half
    (they carry HTML), the overflow is summarized as "... and N more".
    """
    out: List[str] = []
    used = 0
    for index, line in enumerate(lines):
        after = len(lines) - index - 1
        reserve = len(f"\n... and {after} more") if after else 0
        if used + len(line) + reserve > limit:
            out.append(f"... and {len(lines) - index} more")
            break
        out.append(line)
        used += len(line) + 1
    return "\n".join(out)


def format_manifest(manifest: List[ManifestEntry], url: str) -> str:
    """
    Build the batch notification (HTML parse mode).
    One bullet per file, replacements flagged, download link last.
    The link block is never dropped.
    """
    lines = [
        f"・{html.escape(entry.filename)}{UPDATED_MARK if entry.is_replacement else ''}"
        for entry in manifest
    ]
    header = "📦 The following files were updated\n\n"
    link_block = f'\n\n<b>Download all</b>: <a href="{html.escape(url)}">{html.escape(url)}</a>'
    budget = MAX_MESSAGE - len(header) - len(link_block)
    return header + join_lines(lines, budget) + link_block


def format_pending_list(files: List[PendingFile]) -> str:
    header = "<b>📂 Pending files (current batch):</b>\n"
    if not files:
        return header + "(No files waiting)"

    lines = []
    for f in files:
        name = html.escape(f.filename)
        if f.source_link:
            name = f'<a href="{html.escape(f.source_link)}">{name}</a>'
        mark = UPDATED_MARK if f.is_replacement else ""
        lines.append(f"・{name} by {html.escape(f.uploader_label)}{mark}")
    return header + join_lines(lines, MAX_MESSAGE - len(header))


def format_drain_report(result: DrainResult) -> str:
    """Aggregate outcome of a forced drain, shown to whoever triggered it."""
    if result.attempted == 0:
        return "❌ No pending files in this chat."
    if result.uploaded:
        return (
            f"✅ Upload complete: {len(result.manifest)}/{result.attempted} file(s) archived. "
            "Check the output chat."
        )
    if result.fetched == 0:
        return f"❌ None of the {result.attempted} file(s) could be downloaded."
    return f"❌ Upload failed ({result.fetched}/{result.attempted} file(s) downloaded). The batch was dropped."


def uploader_label(user) -> str:
    if user is None:
        return "unknown"
    if user.username:
        return f"@{user.username}"
    return user.full_name or str(user.id)
