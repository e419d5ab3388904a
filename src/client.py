"""Telegram client factory for the TICS AI assistant.

We explicitly manage the client's lifecycle (start/run_until_disconnected)
so it is obvious when the session is created and when it ends.
"""

from __future__ import annotations

import logging
import os

from dotenv import load_dotenv
from telethon import TelegramClient

REQUIRED_ENV = ("API_ID", "API_HASH", "BOT_TOKEN", "GEMINI_API_KEY")


def missing_credentials() -> list[str]:
    load_dotenv()
    return [name for name in REQUIRED_ENV if not os.getenv(name)]


def build_client() -> TelegramClient:
    """Create a Telethon client from environment variables.

    API_ID/API_HASH identify the application; the bot logs in later with
    BOT_TOKEN. The session name defaults to "tics_ai".
    """

    load_dotenv()

    api_id = os.getenv("API_ID")
    api_hash = os.getenv("API_HASH")
    session_name = os.getenv("SESSION_NAME", "tics_ai")

    if not api_id or not api_hash:
        raise RuntimeError("Missing API_ID or API_HASH in environment")
    try:
        api_id_value = int(api_id)
    except ValueError as exc:
        raise RuntimeError("API_ID must be an integer") from exc

    logging.getLogger(__name__).info("Initializing Telegram client")

    return TelegramClient(session_name, api_id_value, api_hash)
