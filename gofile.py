# ☁️ Uploads finished archives to gofile.io and returns the download page

import logging
from typing import Optional

import httpx

from config import GOFILE_SERVER, HTTP_TIMEOUT_SECS

log = logging.getLogger("gofile")


class UploadError(Exception):
    pass


def upload_url(server: str = GOFILE_SERVER) -> str:
    return f"https://{server}.gofile.io/uploadFile"


async def upload_file(
    data: bytes,
    filename: str,
    *,
    server: str = GOFILE_SERVER,
    client: Optional[httpx.AsyncClient] = None,
) -> str:
    """
    Anonymous upload of one buffer. Called at most once per drain, no retries.
    Raises UploadError on transport errors or a non-"ok" response.
    """
    files = {"file": (filename, data, "application/zip")}
    try:
        if client is None:
            async with httpx.AsyncClient(timeout=HTTP_TIMEOUT_SECS) as own:
                response = await own.post(upload_url(server), files=files)
        else:
            response = await client.post(upload_url(server), files=files)
        response.raise_for_status()
        payload = response.json()
    except (httpx.HTTPError, ValueError) as e:
        log.error(f"❌ Upload of {filename} failed: {e}")
        raise UploadError(f"upload of {filename} failed: {e}") from e

    if payload.get("status") != "ok":
        log.error(f"❌ Upload of {filename} rejected: {payload}")
        raise UploadError(f"upload of {filename} rejected: {payload}")

    link = (payload.get("data") or {}).get("downloadPage")
    if not link:
        raise UploadError(f"upload of {filename} returned no download page: {payload}")

    log.info(f"✅ Uploaded {filename} ({len(data)} bytes) → {link}")
    return link
