# services/waitlist_service.py
from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Dict, Mapping, Optional

from logic.request_meta import RequestMeta, extract_request_meta
from logic.validation import validate_email
from services import d1_client
from utils.logger import get_logger, mask_email

log = get_logger("waitlist")

CREATE_TABLE_SQL = (
    "CREATE TABLE IF NOT EXISTS waitlist ("
    "id INTEGER PRIMARY KEY AUTOINCREMENT, "
    "email TEXT UNIQUE NOT NULL, "
    "created_at DATETIME DEFAULT CURRENT_TIMESTAMP, "
    "ip TEXT, user_agent TEXT, country TEXT);"
)
INSERT_SQL = "INSERT OR IGNORE INTO waitlist (email, ip, user_agent, country) VALUES (?, ?, ?, ?);"
COUNT_SQL = "SELECT COUNT(*) AS c FROM waitlist;"


@dataclass(frozen=True)
class WaitlistEntry:
    email: str
    ip: Optional[str] = None
    user_agent: Optional[str] = None
    country: Optional[str] = None

    @classmethod
    def from_request(cls, email: str, meta: RequestMeta) -> "WaitlistEntry":
        return cls(email=email, ip=meta.ip, user_agent=meta.user_agent, country=meta.country)

    def insert_params(self) -> list:
        return [self.email, self.ip, self.user_agent, self.country]


def ensure_schema() -> None:
    d1_client.query(CREATE_TABLE_SQL)


def _current_count() -> int:
    return d1_client.count_from(d1_client.query(COUNT_SQL))


def get_count() -> Dict[str, int]:
    """
    Current waitlist size. Creates the table on first use.
    """
    ensure_schema()
    return {"count": _current_count()}


def save_entry(entry: WaitlistEntry) -> int:
    """
    Insert the entry (duplicates by email are ignored by the store)
    and return the recomputed total.
    """
    ensure_schema()
    d1_client.query(INSERT_SQL, entry.insert_params())
    count = _current_count()
    log.info(f"[waitlist] join {mask_email(entry.email)} -> count={count}")
    return count


def build_entry(email: Any, headers: Optional[Mapping[str, str]] = None) -> WaitlistEntry:
    # validation first: malformed input never reaches the store
    normalized = validate_email(email)
    return WaitlistEntry.from_request(normalized, extract_request_meta(headers))


def join(email: Any, headers: Optional[Mapping[str, str]] = None) -> Dict[str, Any]:
    """
    Validate, store once, and report the new count.

    Raises:
        InvalidInput for a malformed email (no store call is made).
        ConfigurationError / StoreError from the D1 client.
    """
    entry = build_entry(email, headers)
    count = save_entry(entry)
    return {"ok": True, "count": count}
