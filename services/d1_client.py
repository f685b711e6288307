# services/d1_client.py

"""
Thin client for the Cloudflare D1 HTTP query API.

Every call is one POST of {"sql": ..., "params": [...]} to
    {D1_API_BASE}/accounts/{account_id}/d1/database/{database_id}/query

and the response looks like:
    {
        "success": true,
        "result": [{"results": [{...row...}, ...]}],
        "errors": [{"message": "..."}]
    }

Credentials are resolved per call. Missing credentials fail before any
network traffic.
"""

from typing import Any, Dict, List, Optional

import requests

import config
from config import D1Credentials
from utils.logger import get_logger

log = get_logger("d1")

DEFAULT_ERROR_MESSAGE = "D1 query failed"


class ConfigurationError(Exception):
    code = "CONFIGURATION_ERROR"

    def __init__(self, message: str = "Cloudflare credentials not configured"):
        super().__init__(message)
        self.message = message


class StoreError(Exception):
    code = "STORE_ERROR"

    def __init__(self, message: str, status_code: Optional[int] = None):
        super().__init__(message)
        self.message = message
        self.status_code = status_code


def _require_credentials(credentials: Optional[D1Credentials]) -> D1Credentials:
    creds = credentials or config.get_d1_credentials()
    if creds is None:
        log.error("[d1] missing CLOUDFLARE_ACCOUNT_ID / CLOUDFLARE_DATABASE_ID / API token")
        raise ConfigurationError()
    return creds


def query_url(credentials: D1Credentials) -> str:
    base = config.D1_API_BASE.rstrip("/")
    return f"{base}/accounts/{credentials.account_id}/d1/database/{credentials.database_id}/query"


def _first_error_message(payload: Any) -> str:
    if not isinstance(payload, dict):
        return DEFAULT_ERROR_MESSAGE
    errors = payload.get("errors") or []
    if errors and isinstance(errors[0], dict) and errors[0].get("message"):
        return str(errors[0]["message"])
    return DEFAULT_ERROR_MESSAGE


def query(
    sql: str,
    params: Optional[List[Any]] = None,
    credentials: Optional[D1Credentials] = None,
) -> Dict[str, Any]:
    """
    Run one SQL statement against D1 and return the decoded JSON payload.

    Raises:
        ConfigurationError if credentials are missing (no request is sent).
        StoreError on transport failure, a non-2xx status, a body that is
        not JSON, or success != true.
    """
    creds = _require_credentials(credentials)

    body: Dict[str, Any] = {"sql": sql}
    if params is not None:
        body["params"] = list(params)

    headers = {
        "Authorization": f"Bearer {creds.api_token}",
        "Content-Type": "application/json",
    }

    try:
        response = requests.post(
            query_url(creds),
            headers=headers,
            json=body,
            timeout=config.D1_TIMEOUT_SECONDS,
        )
    except requests.RequestException as e:
        log.error(f"[d1] request failed: {e}")
        raise StoreError(DEFAULT_ERROR_MESSAGE) from e

    try:
        payload = response.json()
    except ValueError as e:
        log.error(f"[d1] non-JSON response (status {response.status_code})")
        raise StoreError(DEFAULT_ERROR_MESSAGE, status_code=response.status_code) from e

    if not response.ok or not isinstance(payload, dict) or payload.get("success") is not True:
        message = _first_error_message(payload)
        log.warning(f"[d1] query rejected (status {response.status_code}): {message}")
        raise StoreError(message, status_code=response.status_code)

    return payload


def first_row(payload: Dict[str, Any]) -> Dict[str, Any]:
    result = payload.get("result")
    if not isinstance(result, list) or not result or not isinstance(result[0], dict):
        return {}
    rows = result[0].get("results")
    if not isinstance(rows, list):
        return {}
    return rows[0] if rows and isinstance(rows[0], dict) else {}


def count_from(payload: Dict[str, Any], column: str = "c") -> int:
    raw = first_row(payload).get(column)
    try:
        return int(raw or 0)
    except (TypeError, ValueError):
        return 0
