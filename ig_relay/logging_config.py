"""Logfire setup and log scrubbing for Graph credentials and PSIDs."""

import logging
from typing import Any

import logfire
from fastapi import FastAPI

from ig_relay.config import get_settings

# Keys that may carry Graph or webhook credentials in logged dicts
SENSITIVE_KEYS = (
    "access_token",
    "verify_token",
    "app_secret",
    "authorization",
)

_LOCAL_FORMAT = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"


def setup_logfire(app: FastAPI) -> None:
    """Configure logfire for the relay and instrument the app.

    Spans stay local unless ``LOGFIRE_TOKEN`` is set. Stdlib logging gets a
    human-readable format locally and bare messages elsewhere, where logfire
    carries the structure.
    """
    settings = get_settings()

    options: dict[str, Any] = {
        "environment": settings.env,
        "service_name": "ig-dm-relay",
    }
    if settings.logfire_token:
        options["token"] = settings.logfire_token
    else:
        options["send_to_logfire"] = False

    logfire.configure(**options)
    logfire.instrument_fastapi(app)
    logfire.instrument_pydantic()

    level = getattr(logging, settings.log_level.upper(), logging.INFO)
    fmt = _LOCAL_FORMAT if settings.env == "local" else "%(message)s"
    logging.basicConfig(level=level, format=fmt)


def mask_pii(value: str | None, mask_char: str = "*") -> str:
    """Mask a PSID or token, keeping the first and last two characters."""
    if not value:
        return ""
    if len(value) <= 4:
        return mask_char * len(value)
    return f"{value[:2]}{mask_char * (len(value) - 4)}{value[-2:]}"


def redact_tokens(data: dict[str, Any]) -> dict[str, Any]:
    """Return a copy of ``data`` with credential values masked.

    Nested dicts under a sensitive key are redacted recursively.
    """
    redacted = data.copy()
    for key in SENSITIVE_KEYS:
        value = redacted.get(key)
        if isinstance(value, str):
            redacted[key] = mask_pii(value)
        elif isinstance(value, dict):
            redacted[key] = redact_tokens(value)
    return redacted
