# 📦 Configuration and constants

import os
import re

# ⏱️ Debounce window: seconds of quiet after the last file before a batch is zipped
BATCH_WAIT_SECS = float(os.environ.get("BATCH_WAIT_SECS", 60))

# 📎 Only documents with these extensions are collected
FILE_EXTENSIONS = tuple(
    ext.strip().lower()
    for ext in os.environ.get("FILE_EXTENSIONS", ".jar").split(",")
    if ext.strip()
)

# ❌ Reply keywords that cancel a collected file (exact match, or contained anywhere)
CANCEL_KEYWORDS = ("cancel", "キャンセル")
CANCEL_SUBSTRINGS = ("キャンセル",)

# 🔍 Chats to watch (empty = every chat the bot is in)
MONITOR_CHAT_IDS = {
    int(s) for s in os.environ.get("MONITOR_CHAT_IDS", "").split(",") if s.strip()
}

# 📣 Where batch notifications go (unset = back into the source group)
NOTIFY_CHAT_ID = int(os.environ["NOTIFY_CHAT_ID"]) if os.environ.get("NOTIFY_CHAT_ID") else None

# 💾 Persisted per-group settings
SETTINGS_FILE = os.environ.get("SETTINGS_FILE", "settings.json")

# ☁️ gofile.io upload server (getServer is unreliable, use a fixed store)
GOFILE_SERVER = os.environ.get("GOFILE_SERVER", "store1")
HTTP_TIMEOUT_SECS = float(os.environ.get("HTTP_TIMEOUT_SECS", 300))

# 🗜 Zip compression level
ZIP_LEVEL = 9

# 🕒 Archive timestamp format (sortable, filesystem-safe, microsecond resolution)
ARCHIVE_TIME_FORMAT = "%Y-%m-%dT%H-%M-%S-%f"

# 🔗 Telegram text message limit
MAX_MESSAGE = 4096

# 🔍 Regex pattern to detect http(s) locators
URL_REGEX = re.compile(r"^https?://", re.IGNORECASE)
