# 💾 Persisted per-group settings (settings.json)
# ----------------------------------------------------------------------
# group_id -> {
#     "last_output": [chat_id, message_id],   # previous batch notification
#     "last_list_message_id": message_id,     # previous /folderlist reply
# }

import json
import logging
from pathlib import Path
from typing import Any, Dict, Optional, Tuple

from config import SETTINGS_FILE

log = logging.getLogger("settings")


class Settings:
    def __init__(self, path: str = SETTINGS_FILE):
        self.path = Path(path)
        self._data: Dict[str, Dict[str, Any]] = self._load()

    def _load(self) -> Dict[str, Dict[str, Any]]:
        if not self.path.exists():
            return {}
        try:
            data = json.loads(self.path.read_text(encoding="utf-8"))
            log.info(f"💾 Loaded settings from {self.path}")
            return data if isinstance(data, dict) else {}
        except (OSError, ValueError) as e:
            log.error(f"❌ Failed to load {self.path}, using defaults: {e}")
            return {}

    def _save(self) -> None:
        try:
            self.path.write_text(json.dumps(self._data, indent=2), encoding="utf-8")
        except OSError as e:
            log.error(f"❌ Failed to save settings to {self.path}: {e}")

    def _get(self, group_id: int, key: str) -> Any:
        return self._data.get(str(group_id), {}).get(key)

    def _set(self, group_id: int, key: str, value: Any) -> None:
        self._data.setdefault(str(group_id), {})[key] = value
        self._save()

    def get_last_output(self, group_id: int) -> Optional[Tuple[int, int]]:
        value = self._get(group_id, "last_output")
        if not value:
            return None
        chat_id, message_id = value
        return int(chat_id), int(message_id)

    def set_last_output(self, group_id: int, chat_id: int, message_id: int) -> None:
        self._set(group_id, "last_output", [chat_id, message_id])

    def get_last_list_message_id(self, group_id: int) -> Optional[int]:
        return self._get(group_id, "last_list_message_id")

    def set_last_list_message_id(self, group_id: int, message_id: int) -> None:
        self._set(group_id, "last_list_message_id", message_id)
