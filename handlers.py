# 📦 Telegram handlers: file collection, cancel replies, /createzip, /folderlist
# -----------------------------------------
# Flow:
#   - Documents with an allowed extension are handed to the Collector.
#   - A reply saying "cancel" (or the localized keyword) to a collected file
#     removes it from the current batch.
#   - /createzip drains the chat's batch right away and reports counts.
#   - /folderlist shows what is waiting; the previous listing is deleted.
# -----------------------------------------

import logging

from telegram import Update
from telegram.error import TelegramError
from telegram.ext import Application, CommandHandler, ContextTypes, MessageHandler, filters

from collector import Collector
from config import MONITOR_CHAT_IDS
from settings import Settings
from state import DrainResult, PendingFile
from utils import format_drain_report, format_pending_list, is_cancel_text, matches_extension, uploader_label

log = logging.getLogger("handlers")


def _collector(context: ContextTypes.DEFAULT_TYPE) -> Collector:
    return context.bot_data["collector"]


def _settings(context: ContextTypes.DEFAULT_TYPE) -> Settings:
    return context.bot_data["settings"]


# ---------------------------
# File collection
# ---------------------------
async def handle_document(update: Update, context: ContextTypes.DEFAULT_TYPE):
    msg = update.effective_message
    if not msg or not msg.document:
        return

    chat_id = update.effective_chat.id
    doc = msg.document
    try:
        if not matches_extension(doc.file_name):
            log.info(f"⏭ Ignored {doc.file_name!r} in chat {chat_id} (extension not collected)")
            return

        log.info(f"📥 Received {doc.file_name} in chat {chat_id} | message_id={msg.message_id}")
        _collector(context).submit(chat_id, PendingFile(
            group_id=chat_id,
            filename=doc.file_name,
            source_ref=msg.message_id,
            fetch_locator=doc.file_id,
            uploader_label=uploader_label(msg.from_user),
            source_link=msg.link,
        ))
    except Exception as e:
        log.error(f"❌ Document handling failed in chat {chat_id}: {e}")


async def handle_cancel_reply(update: Update, context: ContextTypes.DEFAULT_TYPE):
    msg = update.effective_message
    if not msg or not msg.reply_to_message or not is_cancel_text(msg.text):
        return

    chat_id = update.effective_chat.id
    try:
        removed = _collector(context).cancel(chat_id, msg.reply_to_message.message_id)
        if removed:
            await msg.reply_text(f"❌ Cancelled: {removed}")
    except Exception as e:
        log.error(f"❌ Cancel handling failed in chat {chat_id}: {e}")


# ---------------------------
# Commands
# ---------------------------
async def createzip(update: Update, context: ContextTypes.DEFAULT_TYPE):
    msg = update.effective_message
    chat_id = update.effective_chat.id
    log.info(f"🚀 Manual zip creation triggered in chat {chat_id}")

    try:
        if not _collector(context).pending(chat_id):
            await msg.reply_text(format_drain_report(DrainResult(group_id=chat_id)))
            return

        status = await msg.reply_text("⏳ Uploading, please wait...")
        result = await _collector(context).force_drain(chat_id)
        await status.edit_text(format_drain_report(result))
    except Exception as e:
        log.error(f"❌ /createzip failed in chat {chat_id}: {e}")


async def folderlist(update: Update, context: ContextTypes.DEFAULT_TYPE):
    msg = update.effective_message
    chat_id = update.effective_chat.id
    settings = _settings(context)

    last_id = settings.get_last_list_message_id(chat_id)
    if last_id:
        try:
            await context.bot.delete_message(chat_id, last_id)
            log.info(f"🗑 Deleted previous file list {last_id} in {chat_id}")
        except TelegramError as e:
            log.warning(f"⚠️ Could not delete previous file list {last_id} in {chat_id}: {e}")

    text = format_pending_list(_collector(context).pending(chat_id))
    try:
        sent = await msg.reply_text(text, parse_mode="HTML")
    except TelegramError as e:
        log.error(f"❌ Failed to send file list in chat {chat_id}: {e}")
        return
    settings.set_last_list_message_id(chat_id, sent.message_id)


async def on_error(update: object, context: ContextTypes.DEFAULT_TYPE):
    log.error(f"❌ Unhandled error while processing {update}: {context.error}")


# ---------------------------
# Handler registration
# ---------------------------
def register_handlers(app: Application, monitor_chat_ids=MONITOR_CHAT_IDS):
    # New messages only: edits and channel posts must not resubmit or cancel files
    scope = filters.UpdateType.MESSAGE
    if monitor_chat_ids:
        scope = scope & filters.Chat(chat_id=list(monitor_chat_ids))

    app.add_handler(CommandHandler("createzip", createzip, filters=scope))
    app.add_handler(CommandHandler("folderlist", folderlist, filters=scope))
    app.add_handler(MessageHandler(scope & filters.Document.ALL, handle_document))
    app.add_handler(MessageHandler(scope & filters.TEXT & filters.REPLY & ~filters.COMMAND, handle_cancel_reply))
    app.add_error_handler(on_error)
