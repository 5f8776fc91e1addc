# 📥 Fetches file bytes at drain time (files are never held in memory before that)

import logging
from typing import Optional

import httpx
from telegram import Bot
from telegram.error import TelegramError

from config import HTTP_TIMEOUT_SECS, URL_REGEX

log = logging.getLogger("fetcher")


class FetchError(Exception):
    pass


class TelegramFetcher:
    """
    Resolves a locator to bytes.
    - http(s) URL  -> plain GET
    - anything else -> Telegram file_id via getFile
    """

    def __init__(self, bot: Bot, client: Optional[httpx.AsyncClient] = None):
        self.bot = bot
        self.client = client

    async def fetch(self, locator: str) -> bytes:
        try:
            if URL_REGEX.match(locator):
                return await self._fetch_url(locator)
            tg_file = await self.bot.get_file(locator)
            data = await tg_file.download_as_bytearray()
            return bytes(data)
        except (TelegramError, httpx.HTTPError) as e:
            raise FetchError(f"could not fetch {locator}: {e}") from e

    async def _fetch_url(self, url: str) -> bytes:
        if self.client is not None:
            response = await self.client.get(url, follow_redirects=True)
        else:
            async with httpx.AsyncClient(timeout=HTTP_TIMEOUT_SECS) as client:
                response = await client.get(url, follow_redirects=True)
        response.raise_for_status()
        return response.content

    async def __call__(self, locator: str) -> bytes:
        return await self.fetch(locator)
