# services/server_functions.py

"""
Callable surface used by the landing page front end.

Same store logic as the direct /api/waitlist handler, plus:
- schema validation of the input payload (pydantic)
- an operator-gated debug payload (WAITLIST_DEBUG=1) that echoes the
  resolved request metadata; it is a diagnostic aid, not part of the
  response contract.
"""

from typing import Any, Dict, Mapping, Optional

from pydantic import BaseModel, field_validator

import config
from logic.validation import INVALID_EMAIL_MESSAGE, is_valid_email, normalize_email
from services import waitlist_service


class JoinWaitlistInput(BaseModel):
    email: str

    @field_validator("email")
    @classmethod
    def _check_email(cls, value: str) -> str:
        email = normalize_email(value)
        if not is_valid_email(email):
            raise ValueError(INVALID_EMAIL_MESSAGE)
        return email


def get_waitlist_count() -> Dict[str, int]:
    return waitlist_service.get_count()


def join_waitlist(data: Mapping[str, Any], headers: Optional[Mapping[str, str]] = None) -> Dict[str, Any]:
    """
    Raises pydantic.ValidationError when `data` does not match JoinWaitlistInput.
    """
    payload = JoinWaitlistInput.model_validate(data)
    entry = waitlist_service.build_entry(payload.email, headers)
    count = waitlist_service.save_entry(entry)

    result: Dict[str, Any] = {"ok": True, "count": count}
    if config.is_debug_enabled():
        result["debug"] = {
            "email": entry.email,
            "ip": entry.ip,
            "country": entry.country,
            "user_agent": entry.user_agent,
        }
    return result
