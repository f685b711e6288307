"""
logic/request_meta.py
Pure logic: best-effort client metadata from request headers.

Header priority:
    ip:      CF-Connecting-IP -> X-Forwarded-For (first hop) -> X-Real-IP
    country: CF-IPCountry -> X-Country-Code

The Cloudflare headers are only trustworthy behind Cloudflare; everything
here is informational and never used for access decisions.
"""

from dataclasses import dataclass
from typing import Mapping, Optional

from starlette.datastructures import Headers

MAX_USER_AGENT_LENGTH = 512

IP_HEADERS = ("cf-connecting-ip", "x-forwarded-for", "x-real-ip")
COUNTRY_HEADERS = ("cf-ipcountry", "x-country-code")


@dataclass(frozen=True)
class RequestMeta:
    ip: Optional[str] = None
    country: Optional[str] = None
    user_agent: Optional[str] = None


def _lowered(headers: Optional[Mapping[str, str]]) -> Mapping[str, str]:
    if not headers:
        return {}
    # Headers is case-insensitive and get() returns the first occurrence
    if isinstance(headers, Headers):
        return headers
    return {str(k).lower(): v for k, v in headers.items()}


def _first_present(headers: Mapping[str, str], names) -> str:
    for name in names:
        value = headers.get(name)
        if value:
            return value
    return ""


def resolve_client_ip(headers: Optional[Mapping[str, str]]) -> Optional[str]:
    raw = _first_present(_lowered(headers), IP_HEADERS)
    ip = raw.split(",")[0].strip()
    return ip or None


def resolve_country(headers: Optional[Mapping[str, str]]) -> Optional[str]:
    country = _first_present(_lowered(headers), COUNTRY_HEADERS).strip()
    return country.upper() or None


def resolve_user_agent(headers: Optional[Mapping[str, str]]) -> Optional[str]:
    ua = _lowered(headers).get("user-agent") or ""
    return ua[:MAX_USER_AGENT_LENGTH] or None


def extract_request_meta(headers: Optional[Mapping[str, str]]) -> RequestMeta:
    return RequestMeta(
        ip=resolve_client_ip(headers),
        country=resolve_country(headers),
        user_agent=resolve_user_agent(headers),
    )
