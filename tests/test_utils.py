import io
import zipfile
from datetime import datetime
from types import SimpleNamespace

from state import DrainResult, ManifestEntry
from utils import (
    archive_name,
    filename_key,
    format_drain_report,
    format_manifest,
    format_pending_list,
    is_cancel_text,
    join_lines,
    matches_extension,
    pack_zip,
    uploader_label,
)

from fakes import make_file


def test_filename_key_is_case_insensitive():
    assert filename_key("Mod.JAR") == filename_key("mod.jar")


def test_matches_extension():
    assert matches_extension("mod.jar")
    assert matches_extension("MOD.JAR")
    assert not matches_extension("mod.zip")
    assert not matches_extension(None)
    assert matches_extension("a.zip", extensions=(".zip",))


def test_is_cancel_text():
    assert is_cancel_text("cancel")
    assert is_cancel_text("  CANCEL ")
    assert is_cancel_text("キャンセル")
    assert is_cancel_text("これキャンセルで")
    assert not is_cancel_text("please cancel this")
    assert not is_cancel_text("")
    assert not is_cancel_text(None)


def test_archive_name_is_sortable_and_safe():
    name = archive_name(datetime(2026, 1, 2, 3, 4, 5))
    assert name == "files_2026-01-02T03-04-05-000000.zip"
    assert ":" not in name


def test_archive_names_differ_within_one_second():
    first = archive_name(datetime(2026, 1, 2, 3, 4, 5, 1000))
    second = archive_name(datetime(2026, 1, 2, 3, 4, 5, 2000))
    assert first != second
    assert first < second


def test_pack_zip():
    data = pack_zip([("a.jar", b"aaa"), ("b.jar", b"")])
    with zipfile.ZipFile(io.BytesIO(data)) as zf:
        assert zf.namelist() == ["a.jar", "b.jar"]
        assert zf.read("a.jar") == b"aaa"


def test_format_manifest_flags_replacements_and_links():
    text = format_manifest(
        [ManifestEntry("a.jar", True), ManifestEntry("<b>.jar", False)],
        "https://gofile.io/d/abc",
    )
    assert "・a.jar (updated)" in text
    assert "・&lt;b&gt;.jar\n" in text
    assert text.endswith('<a href="https://gofile.io/d/abc">https://gofile.io/d/abc</a>')


def test_format_manifest_keeps_link_when_too_long():
    manifest = [ManifestEntry(f"file-{i:04d}.jar") for i in range(1000)]
    text = format_manifest(manifest, "https://gofile.io/d/abc")
    assert len(text) <= 4096
    assert "more" in text
    assert "https://gofile.io/d/abc" in text


def test_join_lines_summarizes_overflow():
    out = join_lines(["aaaa", "bbbb", "cccc"], limit=20)
    assert out.split("\n")[0] == "aaaa"
    assert out.endswith("more")
    assert len(out) <= 20
    assert join_lines(["aa", "bb"], limit=100) == "aa\nbb"


def test_format_pending_list():
    assert "(No files waiting)" in format_pending_list([])

    text = format_pending_list([make_file("a.jar", 5)])
    assert '<a href="https://t.me/c/1/5">a.jar</a>' in text
    assert "@alice" in text


def test_format_drain_report():
    assert "No pending" in format_drain_report(DrainResult(group_id=1))
    ok = DrainResult(group_id=1, attempted=3, fetched=2,
                     manifest=[ManifestEntry("a.jar"), ManifestEntry("b.jar")], url="u")
    assert "2/3" in format_drain_report(ok)
    assert "None of the 2" in format_drain_report(DrainResult(group_id=1, attempted=2))
    failed = DrainResult(group_id=1, attempted=2, fetched=2, error="upload failed")
    assert "Upload failed (2/2" in format_drain_report(failed)


def test_uploader_label():
    assert uploader_label(SimpleNamespace(username="bob", full_name="Bob", id=1)) == "@bob"
    assert uploader_label(SimpleNamespace(username=None, full_name="Bob B", id=1)) == "Bob B"
    assert uploader_label(None) == "unknown"
