import math
import os
from dataclasses import dataclass
from typing import Optional
from urllib.parse import urlparse
from zoneinfo import ZoneInfo

from dotenv import load_dotenv


DEFAULT_API_ENDPOINT = "https://api.openai.com/v1/chat/completions"
DEFAULT_MODEL = "gpt-3.5-turbo"
DEFAULT_REQUEST_TIMEOUT = 120.0


@dataclass
class Config:
    """Centralized configuration loaded from environment variables."""

    api_endpoint: str = DEFAULT_API_ENDPOINT
    model: str = DEFAULT_MODEL
    request_timeout: float = DEFAULT_REQUEST_TIMEOUT
    log_level: str = "INFO"
    log_file: Optional[str] = None
    timezone: str = "UTC"


def load_config() -> Config:
    """Load configuration values from environment variables.

    The function also loads values from a local `.env` file when present so the
    endpoint or model can be pinned per workspace.
    """

    load_dotenv()

    api_endpoint = _validate_endpoint(os.getenv("CODING_WITH_YOU_API_ENDPOINT", DEFAULT_API_ENDPOINT))
    model = os.getenv("CODING_WITH_YOU_MODEL", DEFAULT_MODEL).strip()
    if not model:
        raise ValueError("CODING_WITH_YOU_MODEL must not be empty")

    request_timeout = _parse_positive_float(
        os.getenv("CODING_WITH_YOU_REQUEST_TIMEOUT", str(DEFAULT_REQUEST_TIMEOUT))
    )

    log_level = os.getenv("LOG_LEVEL", "INFO")
    log_file = os.getenv("LOG_FILE") or None
    timezone = os.getenv("TIMEZONE", "UTC")
    _validate_timezone(timezone)

    return Config(
        api_endpoint=api_endpoint,
        model=model,
        request_timeout=request_timeout,
        log_level=log_level,
        log_file=log_file,
        timezone=timezone,
    )


def _validate_endpoint(value: str) -> str:
    """Ensure the chat-completion endpoint is an absolute http(s) URL."""

    parsed = urlparse(value.strip())
    if parsed.scheme not in {"http", "https"} or not parsed.netloc:
        raise ValueError("CODING_WITH_YOU_API_ENDPOINT must be an absolute http(s) URL")
    return value.strip()


def _parse_positive_float(value: str) -> float:
    try:
        parsed = float(value)
    except ValueError as exc:  # noqa: BLE001
        raise ValueError("CODING_WITH_YOU_REQUEST_TIMEOUT must be a number of seconds") from exc
    if not math.isfinite(parsed) or parsed <= 0:
        raise ValueError("CODING_WITH_YOU_REQUEST_TIMEOUT must be a positive, finite number of seconds")
    return parsed


def _validate_timezone(value: str) -> None:
    """Ensure provided timezone is valid for ZoneInfo."""

    try:
        ZoneInfo(value)
    except Exception as exc:  # noqa: BLE001
        raise ValueError("TIMEZONE must be a valid IANA timezone, e.g., 'UTC' or 'America/New_York'") from exc
