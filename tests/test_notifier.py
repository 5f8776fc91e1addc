from datetime import datetime, timezone
from types import SimpleNamespace
from unittest.mock import AsyncMock

import pytest
from telegram.error import BadRequest, Forbidden

from notifier import MISSING_PERMISSIONS, Notifier
from settings import Settings
from state import DrainResult, ManifestEntry


def result(group_id=10):
    return DrainResult(
        group_id=group_id,
        attempted=2,
        fetched=2,
        manifest=[ManifestEntry("a.jar", True), ManifestEntry("b.jar")],
        url="https://gofile.io/d/abc",
        archive_name="files_x.zip",
        timestamp=datetime(2026, 10, 18, tzinfo=timezone.utc),
    )


def fake_bot(message_id=42, send_error=None, delete_error=None):
    send = AsyncMock(side_effect=send_error) if send_error else AsyncMock(
        return_value=SimpleNamespace(message_id=message_id))
    delete = AsyncMock(side_effect=delete_error) if delete_error else AsyncMock()
    return SimpleNamespace(send_message=send, delete_message=delete)


@pytest.mark.asyncio
async def test_notify_posts_into_source_group(tmp_path):
    bot = fake_bot()
    settings = Settings(str(tmp_path / "settings.json"))
    notifier = Notifier(bot, settings)

    assert await notifier.notify(10, result()) == 42

    chat_id, text = bot.send_message.await_args.args
    assert chat_id == 10
    assert "a.jar (updated)" in text
    assert "https://gofile.io/d/abc" in text
    assert settings.get_last_output(10) == (10, 42)
    bot.delete_message.assert_not_awaited()


@pytest.mark.asyncio
async def test_notify_uses_configured_output_chat_and_rotates(tmp_path):
    bot = fake_bot(message_id=43)
    settings = Settings(str(tmp_path / "settings.json"))
    settings.set_last_output(10, -100, 41)
    notifier = Notifier(bot, settings, output_chat_id=-100)

    await notifier.notify(10, result())

    assert bot.send_message.await_args.args[0] == -100
    bot.delete_message.assert_awaited_once_with(-100, 41)
    assert settings.get_last_output(10) == (-100, 43)


@pytest.mark.asyncio
async def test_failed_rotation_still_records_new_message(tmp_path):
    bot = fake_bot(message_id=43, delete_error=BadRequest("Message to delete not found"))
    settings = Settings(str(tmp_path / "settings.json"))
    settings.set_last_output(10, 10, 41)

    await Notifier(bot, settings).notify(10, result())

    assert settings.get_last_output(10) == (10, 43)


@pytest.mark.asyncio
async def test_forbidden_reports_to_source_group(tmp_path):
    bot = fake_bot()
    bot.send_message = AsyncMock(side_effect=[Forbidden("bot was kicked"), SimpleNamespace(message_id=1)])
    settings = Settings(str(tmp_path / "settings.json"))

    assert await Notifier(bot, settings, output_chat_id=-100).notify(10, result()) is None

    assert bot.send_message.await_args_list[1].args == (10, MISSING_PERMISSIONS)
    assert settings.get_last_output(10) is None


@pytest.mark.asyncio
async def test_send_error_is_swallowed(tmp_path):
    bot = fake_bot(send_error=BadRequest("chat not found"))
    settings = Settings(str(tmp_path / "settings.json"))

    assert await Notifier(bot, settings).notify(10, result()) is None
    assert bot.send_message.await_count == 1
