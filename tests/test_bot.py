from telegram.ext import CommandHandler

from bot import build_application
from collector import Collector
from settings import Settings


def test_build_application_wires_collector(tmp_path):
    app = build_application("123456:TEST-TOKEN", settings_file=str(tmp_path / "settings.json"))

    assert isinstance(app.bot_data["collector"], Collector)
    assert isinstance(app.bot_data["settings"], Settings)

    commands = {
        command
        for handler in app.handlers[0]
        if isinstance(handler, CommandHandler)
        for command in handler.commands
    }
    assert commands == {"createzip", "folderlist"}
