"""
Centralized settings for the waitlist API.

This file reads environment variables (optionally from a .env file)
and provides sane defaults so the app can boot locally.

Database credentials are read on every call (get_d1_credentials) rather
than frozen at import time, so each request sees the current environment.
"""

import os
from dataclasses import dataclass
from typing import Optional
from pathlib import Path

from dotenv import load_dotenv

# Load environment variables from the .env file NEXT TO THIS FILE
ENV_PATH = Path(__file__).resolve().parent / ".env"
load_dotenv(ENV_PATH)


def _get_int(name: str, default: int) -> int:
    raw = os.getenv(name)
    if raw is None or raw.strip() == "":
        return default
    try:
        return int(raw)
    except ValueError:
        return default


def _get_str(name: str, default: str = "") -> str:
    raw = os.getenv(name)
    return default if raw is None else raw


def _get_bool(name: str, default: bool = False) -> bool:
    raw = os.getenv(name)
    if raw is None or raw.strip() == "":
        return default
    return raw.strip().lower() in ("1", "true", "yes", "on")


# ---------------------------
# Cloudflare D1
# ---------------------------
D1_API_BASE: str = _get_str("D1_API_BASE", "https://api.cloudflare.com/client/v4")
D1_TIMEOUT_SECONDS: int = _get_int("D1_TIMEOUT_SECONDS", 10)

# ---------------------------
# HTTP
# ---------------------------
CORS_ORIGIN_REGEX: str = _get_str("CORS_ORIGIN_REGEX", r"https?://(localhost|127\.0\.0\.1)(:\d+)?")


@dataclass(frozen=True)
class D1Credentials:
    account_id: str
    database_id: str
    api_token: str


def get_d1_credentials() -> Optional[D1Credentials]:
    """
    Return the D1 credentials, or None if any of them is missing.

    The token is looked up as CLOUDFLARE_API_TOKEN first, then
    CLOUDFLARE_DATABASE_API_TOKEN (both names are used in deployments).
    """
    account_id = _get_str("CLOUDFLARE_ACCOUNT_ID").strip()
    database_id = _get_str("CLOUDFLARE_DATABASE_ID").strip()
    api_token = (
        _get_str("CLOUDFLARE_API_TOKEN").strip()
        or _get_str("CLOUDFLARE_DATABASE_API_TOKEN").strip()
    )

    if not account_id or not database_id or not api_token:
        return None
    return D1Credentials(account_id=account_id, database_id=database_id, api_token=api_token)


def is_debug_enabled() -> bool:
    return _get_bool("WAITLIST_DEBUG", False)

