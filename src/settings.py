"""Static configuration for the TICS AI assistant.

Secrets come from the environment (optionally via .env). Deployment content
(persona, aliases, reply copy, logging) lives in an optional JSON file so it
can be edited without touching Python; environment variables override it.
"""

import json
import os

from dotenv import load_dotenv

load_dotenv()

PROJECT_ROOT = os.path.abspath(os.path.join(os.path.dirname(__file__), ".."))

CONFIG_PATH = os.getenv("TICS_CONFIG") or os.path.join(PROJECT_ROOT, "config.json")

DEFAULT_PERSONA = (
    "You are TICS AI, a friendly and knowledgeable assistant for the Qubetics "
    "community. Answer questions about Qubetics clearly and concisely. If a "
    "question is unrelated to Qubetics or you are not sure of the answer, say "
    "so politely instead of guessing."
)


def _load_json_config() -> dict:
    """Load the optional JSON config; a missing file means defaults."""

    if not os.path.exists(CONFIG_PATH):
        return {}

    try:
        with open(CONFIG_PATH, "r", encoding="utf-8") as handle:
            return json.load(handle)
    except (OSError, ValueError) as exc:
        CONFIG_ERRORS.append(f"{CONFIG_PATH} could not be loaded: {exc}")
        return {}


def parse_aliases(raw) -> list[str]:
    """Accept a comma-separated string or a list and return clean aliases."""

    if not raw:
        return []
    if isinstance(raw, str):
        raw = raw.split(",")
    return [str(alias).strip() for alias in raw if str(alias).strip()]


# Problems found while reading settings. Startup refuses to run while this is
# non-empty and `check` reports them.
CONFIG_ERRORS: list[str] = []


def _number(name: str, raw, default, cast):
    """Convert a numeric setting, recording a config error and using the default on failure."""

    if raw is None or raw == "":
        return default
    try:
        return cast(raw)
    except (TypeError, ValueError):
        CONFIG_ERRORS.append(f"{name} must be a number, got {raw!r}")
        return default


def _load_persona(config: dict) -> str:
    persona_file = os.getenv("PERSONA_FILE")
    if persona_file:
        try:
            with open(persona_file, "r", encoding="utf-8") as handle:
                return handle.read().strip()
        except OSError as exc:
            CONFIG_ERRORS.append(f"PERSONA_FILE could not be read: {exc}")
            return DEFAULT_PERSONA
    persona = config.get("persona", DEFAULT_PERSONA)
    if isinstance(persona, list):
        return "\n".join(str(line) for line in persona)
    return str(persona)


_CONFIG = _load_json_config()

# Expose the raw config for modules that need structured access.
CONFIG = _CONFIG

# Bot identity hints. The handle reported by Telegram at startup wins; the
# configured one is a fallback. Aliases feed the substring fallback matcher.
_bot = _CONFIG.get("bot", {})
BOT_HANDLE = os.getenv("BOT_HANDLE") or _bot.get("handle", "")
BOT_ALIASES = parse_aliases(os.getenv("BOT_ALIASES")) or parse_aliases(_bot.get("aliases", ["tics ai"]))
FALLBACK_REACTION = _bot.get("fallback_reaction", "👀")

# Per-user request budget.
_rate_limit = _CONFIG.get("rate_limit", {})
RATE_LIMIT_WINDOW_SECONDS = _number(
    "RATE_LIMIT_WINDOW_SECONDS",
    os.getenv("RATE_LIMIT_WINDOW_SECONDS") or _rate_limit.get("window_seconds"),
    30.0,
    float,
)
RATE_LIMIT_MAX_REQUESTS = _number(
    "RATE_LIMIT_MAX_REQUESTS",
    os.getenv("RATE_LIMIT_MAX_REQUESTS") or _rate_limit.get("max_requests"),
    2,
    int,
)

PERSONA = _load_persona(_CONFIG)

# Completion provider settings; the API key itself is read from GEMINI_API_KEY.
_gemini = _CONFIG.get("gemini", {})
GEMINI_MODEL = os.getenv("GEMINI_MODEL") or _gemini.get("model", "gemini-2.0-flash")
GEMINI_TIMEOUT_SECONDS = _number("gemini.timeout_seconds", _gemini.get("timeout_seconds"), 30.0, float)
GENERATION = _gemini.get("generation", {})

# Reply copy overrides, keyed by ReplyTexts field name.
MESSAGES = _CONFIG.get("messages", {})

# Logging is on by default with console output.
LOGGING = _CONFIG.get("logging", {"enabled": True})
