import os
import logging
import sys
from typing import Optional

from telegram import BotCommand
from telegram.ext import Application, ApplicationBuilder

from collector import Collector
from config import BATCH_WAIT_SECS, NOTIFY_CHAT_ID, SETTINGS_FILE
from fetcher import TelegramFetcher
from gofile import upload_file
from handlers import register_handlers
from notifier import Notifier
from pipeline import DrainPipeline
from settings import Settings

# ---------------------------
# Logging setup
# ---------------------------
logging.basicConfig(level=os.environ.get("LOG_LEVEL", "INFO").upper(),
                    format="%(asctime)s %(levelname)s %(message)s",
                    stream=sys.stdout
                   )
log = logging.getLogger("file-collector")

COMMANDS = [
    BotCommand("createzip", "Zip and upload the pending files now"),
    BotCommand("folderlist", "List currently pending files"),
]


# ---------------------------
# Wiring
# ---------------------------
def build_collector(app: Application, settings: Settings,
                    wait_secs: float = BATCH_WAIT_SECS,
                    notify_chat_id: Optional[int] = NOTIFY_CHAT_ID) -> Collector:
    pipeline = DrainPipeline(
        fetch=TelegramFetcher(app.bot),
        upload=upload_file,
        notifier=Notifier(app.bot, settings, output_chat_id=notify_chat_id),
    )
    return Collector(pipeline, wait_secs)


async def post_init(app: Application) -> None:
    await app.bot.set_my_commands(COMMANDS)
    log.info("✅ Bot commands registered")


async def post_shutdown(app: Application) -> None:
    collector: Collector = app.bot_data.get("collector")
    if collector:
        await collector.shutdown()


def build_application(token: str, settings_file: str = SETTINGS_FILE) -> Application:
    app = (
        ApplicationBuilder()
        .token(token)
        .post_init(post_init)
        .post_shutdown(post_shutdown)
        .build()
    )
    settings = Settings(settings_file)
    app.bot_data["settings"] = settings
    app.bot_data["collector"] = build_collector(app, settings)
    register_handlers(app)
    return app


# ---------------------------
# Webhook / polling runner
# ---------------------------
def main() -> None:
    bot_token = os.environ["BOT_TOKEN"]
    webhook_url = os.environ.get("WEBHOOK_URL")
    port = int(os.environ.get("PORT", 5000))

    app = build_application(bot_token)
    log.info(f"🤖 File collector bot is running (batch window {BATCH_WAIT_SECS}s)...")

    if webhook_url:
        app.run_webhook(
            listen="0.0.0.0",
            port=port,
            url_path=bot_token,
            webhook_url=f"{webhook_url}/{bot_token}",
        )
    else:
        app.run_polling()


if __name__ == "__main__":
    main()
