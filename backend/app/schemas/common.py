from __future__ import annotations

import re
from datetime import datetime, timezone
from typing import Annotated, Any

from pydantic import AfterValidator

_EMAIL_PATTERN = re.compile(r"^[^@\s]+@[^@\s]+\.[^@\s]+$")


def to_utc(value: datetime) -> datetime:
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value.astimezone(timezone.utc)


def utc_now() -> datetime:
    return datetime.now(timezone.utc)


UtcDatetime = Annotated[datetime, AfterValidator(to_utc)]

OpenMap = dict[str, Any]


def normalize_required_text(value: Any) -> Any:
    if not isinstance(value, str):
        return value
    trimmed = value.strip()
    if trimmed == "":
        raise ValueError("value must not be empty")
    return trimmed


def normalize_email(value: Any) -> Any:
    if isinstance(value, str) and not _EMAIL_PATTERN.match(value):
        raise ValueError("value is not a valid email address")
    return value


def reject_null(value: Any) -> Any:
    # omitted fields keep their default; only an explicit null reaches here
    if value is None:
        raise ValueError("value may be omitted but must not be null")
    return value
