# 🩺 Health check endpoint (for uptime pings on the hosting platform)
# Runs as its own process next to the bot: `file-collector-health` or `python server.py`

import os
import platform
from datetime import datetime, timezone

import uvicorn
from fastapi import FastAPI

app = FastAPI()


@app.get("/")
async def health():
    return {
        "status": "ok",
        "message": "File collector bot is running",
        "python_version": platform.python_version(),
        "timestamp": datetime.now(timezone.utc).isoformat(),
    }


def main() -> None:
    port = int(os.environ.get("HEALTH_PORT", 8080))
    uvicorn.run(app, host="0.0.0.0", port=port)


if __name__ == "__main__":
    main()
