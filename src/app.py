"""Application entry point for the TICS AI assistant."""

from __future__ import annotations

import argparse
import asyncio
import logging
import os
from dataclasses import fields
from logging.handlers import RotatingFileHandler
from typing import Optional

import httpx
from art import tprint
from telethon import events

import settings
from adapters.gemini_client import GeminiCompletionClient
from adapters.telegram_chat import TelegramChat
from adapters.telegram_mapper import build_incoming, is_bot_added, resolve_identity
from client import build_client, missing_credentials
from core.admission import AdmissionGate
from core.config import GenerationConfig, RateLimitConfig, ReplyTexts
from core.delivery import ReplyDelivery
from core.processor import MessageProcessor
from core.query_pipeline import QueryPipeline
from core.rate_limiter import RateLimiter

NAME = "TICS AI"
FONT = "tarty-1"
DEFAULT_REDACT = ["BOT_TOKEN", "GEMINI_API_KEY", "API_HASH"]


def _print_banner() -> None:
    tprint(NAME, FONT, space=1)


class _RedactingFormatter(logging.Formatter):
    def __init__(self, secrets: list[str], fmt: str, datefmt: Optional[str] = None) -> None:
        super().__init__(fmt=fmt, datefmt=datefmt)
        self._secrets = [secret for secret in secrets if secret]

    def format(self, record: logging.LogRecord) -> str:
        message = super().format(record)
        for secret in self._secrets:
            message = message.replace(secret, "***")
        return message


def _collect_redaction_values(config: dict) -> list[str]:
    redact_cfg = config.get("redact", {}) if config else {}
    if not redact_cfg.get("enabled", True):
        return []
    values = []
    for name in redact_cfg.get("patterns", DEFAULT_REDACT):
        value = os.getenv(name)
        if value:
            values.append(value)
    return sorted(set(values), key=len, reverse=True)


def _configure_logging() -> None:
    config = settings.LOGGING or {}
    if not config.get("enabled", True):
        return

    level_name = str(os.getenv("LOG_LEVEL") or config.get("level", "INFO")).upper()
    level = getattr(logging, level_name, logging.INFO)

    fmt = "%(asctime)s %(levelname)s %(name)s: %(message)s"
    datefmt = "%Y-%m-%d %H:%M:%S"
    secrets = _collect_redaction_values(config)
    formatter = _RedactingFormatter(secrets, fmt=fmt, datefmt=datefmt)

    handlers: list[logging.Handler] = []

    if config.get("console", True):
        console_handler = logging.StreamHandler()
        console_handler.setLevel(level)
        console_handler.setFormatter(formatter)
        handlers.append(console_handler)

    file_cfg = config.get("file", {})
    if file_cfg.get("enabled", False):
        path = file_cfg.get("path", "logs/tics_ai.log")
        if not os.path.isabs(path):
            path = os.path.join(settings.PROJECT_ROOT, path)
        directory = os.path.dirname(path)
        if directory:
            os.makedirs(directory, exist_ok=True)

        max_bytes = int(file_cfg.get("max_bytes", 5 * 1024 * 1024))
        backup_count = int(file_cfg.get("backup_count", 5))
        file_handler = RotatingFileHandler(
            path,
            maxBytes=max_bytes,
            backupCount=backup_count,
            encoding="utf-8",
        )
        file_handler.setLevel(level)
        file_handler.setFormatter(formatter)
        handlers.append(file_handler)

    if not handlers:
        return

    logging.basicConfig(level=level, handlers=handlers)
    # httpx logs every request at INFO; keep it for debugging only.
    logging.getLogger("httpx").setLevel(max(level, logging.WARNING))


def _build_generation_config(raw: dict) -> GenerationConfig:
    known = {field.name for field in fields(GenerationConfig)}
    return GenerationConfig(**{key: value for key, value in raw.items() if key in known})


def _build_rate_limit_config() -> RateLimitConfig:
    return RateLimitConfig(
        max_requests=settings.RATE_LIMIT_MAX_REQUESTS,
        window_seconds=settings.RATE_LIMIT_WINDOW_SECONDS,
    )


def _run() -> None:
    _print_banner()
    _configure_logging()
    logger = logging.getLogger(__name__)

    logger.info("Starting TICS AI")

    if settings.CONFIG_ERRORS:
        raise RuntimeError(f"Invalid configuration: {'; '.join(settings.CONFIG_ERRORS)}")

    missing = missing_credentials()
    if missing:
        raise RuntimeError(f"Missing required environment variables: {', '.join(missing)}")

    rate_limit_config = _build_rate_limit_config()
    generation = _build_generation_config(settings.GENERATION)
    texts = ReplyTexts.from_mapping(settings.MESSAGES)

    client = build_client()
    client.start(bot_token=os.getenv("BOT_TOKEN"))
    identity = client.loop.run_until_complete(resolve_identity(client, settings.BOT_HANDLE))
    logger.info("Logged in as @%s (%s)", identity.handle, identity.id)

    http = httpx.AsyncClient(timeout=settings.GEMINI_TIMEOUT_SECONDS)
    completion = GeminiCompletionClient(
        http,
        os.getenv("GEMINI_API_KEY", ""),
        model=settings.GEMINI_MODEL,
        generation=generation,
    )

    rate_limiter = RateLimiter(rate_limit_config)
    gate = AdmissionGate(identity, rate_limiter, aliases=settings.BOT_ALIASES)
    pipeline = QueryPipeline(completion, settings.PERSONA)
    delivery = ReplyDelivery(TelegramChat(client), fallback_reaction=settings.FALLBACK_REACTION)
    processor = MessageProcessor(gate, pipeline, delivery, texts)
    logger.info(
        "Rate limit: %s requests per %ss; %s aliases configured",
        rate_limit_config.max_requests,
        rate_limit_config.window_seconds,
        len(settings.BOT_ALIASES),
    )

    @client.on(events.NewMessage(incoming=True))
    async def handler(event) -> None:
        try:
            message = await build_incoming(event.message)
        except Exception:
            # Nothing has been admitted yet, so there is no one to apologize to.
            logger.exception("Error while reading message %s", event.id)
            return
        await processor.handle(message)

    @client.on(events.ChatAction)
    async def on_chat_action(event) -> None:
        try:
            if is_bot_added(event, identity):
                await processor.welcome(event.chat_id)
        except Exception:
            logger.exception("Error while greeting chat %s", event.chat_id)

    sweeper = client.loop.create_task(rate_limiter.run_sweeper())
    logger.info("Client connected. Listening for incoming messages...")
    try:
        client.run_until_disconnected()
    finally:
        sweeper.cancel()
        client.loop.run_until_complete(asyncio.gather(sweeper, return_exceptions=True))
        client.loop.run_until_complete(http.aclose())
        logger.info("Stopped TICS AI")


def _mask(value: Optional[str]) -> str:
    if not value:
        return "<missing>"
    return f"{value[:4]}***" if len(value) > 8 else "***"


def _check() -> int:
    """Validate configuration without connecting; return the exit code."""

    problems: list[str] = list(settings.CONFIG_ERRORS)
    missing = missing_credentials()
    if missing:
        problems.append(f"missing environment variables: {', '.join(missing)}")
    try:
        rate_limit_config = _build_rate_limit_config()
        _build_generation_config(settings.GENERATION)
    except (TypeError, ValueError) as exc:
        problems.append(str(exc))
        rate_limit_config = None

    print(f"config file:   {settings.CONFIG_PATH} ({'found' if settings.CONFIG else 'not found, using defaults'})")
    print(f"bot token:     {_mask(os.getenv('BOT_TOKEN'))}")
    print(f"gemini key:    {_mask(os.getenv('GEMINI_API_KEY'))}")
    print(f"gemini model:  {settings.GEMINI_MODEL}")
    print(f"handle:        {settings.BOT_HANDLE or '<from Telegram>'}")
    print(f"aliases:       {', '.join(settings.BOT_ALIASES) or '<none>'}")
    if rate_limit_config is not None:
        print(f"rate limit:    {rate_limit_config.max_requests} per {rate_limit_config.window_seconds}s")
    print(f"persona:       {len(settings.PERSONA)} chars")

    for problem in problems:
        print(f"ERROR: {problem}")
    return 1 if problems else 0


def main(argv: Optional[list[str]] = None) -> None:
    parser = argparse.ArgumentParser(prog="tics-ai")
    subparsers = parser.add_subparsers(dest="command")

    subparsers.add_parser("run", help="Start the assistant")
    subparsers.add_parser("check", help="Validate configuration and credentials")

    args = parser.parse_args(argv)
    if args.command == "check":
        raise SystemExit(_check())
    try:
        _run()
    except (RuntimeError, ValueError) as exc:
        logging.getLogger(__name__).error("Startup failed: %s", exc)
        raise SystemExit(1) from exc


if __name__ == "__main__":
    main()
