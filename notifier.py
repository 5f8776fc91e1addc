# 📣 Posts the batch notification (file list + download link)
# -----------------------------------------
#   - Destination: NOTIFY_CHAT_ID if configured, otherwise the source group.
#   - The previous notification of the group is deleted once the new one is up.
#   - Nothing here is re-raised: the archive is already uploaded.
# -----------------------------------------

import logging
from typing import Optional

from telegram import Bot
from telegram.error import Forbidden, TelegramError

from settings import Settings
from state import DrainResult
from utils import format_manifest

log = logging.getLogger("notifier")

MISSING_PERMISSIONS = "⚠️ Missing permissions to post the batch notification"


class Notifier:
    def __init__(self, bot: Bot, settings: Settings, output_chat_id: Optional[int] = None):
        self.bot = bot
        self.settings = settings
        self.output_chat_id = output_chat_id

    def destination(self, group_id: int) -> int:
        return self.output_chat_id or group_id

    async def notify(self, group_id: int, result: DrainResult) -> Optional[int]:
        chat_id = self.destination(group_id)
        text = format_manifest(result.manifest, result.url)

        try:
            sent = await self.bot.send_message(chat_id, text, parse_mode="HTML")
        except Forbidden as e:
            log.error(f"❌ No permission to post in {chat_id} for group {group_id}: {e}")
            await self._report_forbidden(group_id, chat_id)
            return None
        except TelegramError as e:
            log.error(f"❌ Failed to send notification to {chat_id} for group {group_id}: {e}")
            return None

        log.info(f"✅ Notification sent to {chat_id} for group {group_id} | message_id={sent.message_id}")
        await self._rotate(group_id)
        self.settings.set_last_output(group_id, chat_id, sent.message_id)
        return sent.message_id

    async def _rotate(self, group_id: int) -> None:
        last = self.settings.get_last_output(group_id)
        if not last:
            return
        chat_id, message_id = last
        try:
            await self.bot.delete_message(chat_id, message_id)
            log.info(f"🗑 Deleted previous notification {message_id} in {chat_id}")
        except TelegramError as e:
            log.warning(f"⚠️ Could not delete previous notification {message_id} in {chat_id}: {e}")

    async def _report_forbidden(self, group_id: int, chat_id: int) -> None:
        if chat_id == group_id:
            return
        try:
            await self.bot.send_message(group_id, MISSING_PERMISSIONS)
        except TelegramError as e:
            log.warning(f"⚠️ Could not report missing permissions to {group_id}: {e}")
