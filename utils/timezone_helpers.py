from __future__ import annotations

from datetime import date, datetime, timezone
from typing import Any
from zoneinfo import ZoneInfo

from flask import current_app, has_app_context

DEFAULT_TZ_NAME = "Asia/Tashkent"


def app_timezone() -> ZoneInfo:
    name = DEFAULT_TZ_NAME
    if has_app_context():
        name = current_app.config.get("APP_TIMEZONE") or DEFAULT_TZ_NAME
    return ZoneInfo(name)


def local_now() -> datetime:
    """Get the current time in the academy's timezone."""
    return datetime.now(app_timezone())


def local_today() -> date:
    return local_now().date()


def to_local(value: Any) -> datetime | None:
    """Convert the provided value to a timezone-aware datetime in the academy's timezone."""
    if not value:
        return None
    if isinstance(value, str):
        try:
            value = datetime.fromisoformat(value.replace("Z", "+00:00"))
        except ValueError:
            return None
    if not isinstance(value, datetime):
        return None
    if value.tzinfo is None:
        value = value.replace(tzinfo=timezone.utc)
    return value.astimezone(app_timezone())


def format_message_date(value: Any) -> str:
    """Day-first date used in Telegram/SMS texts ("-" when unknown)."""
    if isinstance(value, date) and not isinstance(value, datetime):
        return value.strftime("%d.%m.%Y")
    if isinstance(value, str) and len(value) == 10:
        try:
            return date.fromisoformat(value).strftime("%d.%m.%Y")
        except ValueError:
            return "-"
    dt = to_local(value)
    if dt:
        return dt.strftime("%d.%m.%Y")
    return "-"
