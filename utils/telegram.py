from __future__ import annotations

import re
from typing import Any, Dict, Tuple

import requests
from flask import current_app

DEFAULT_BUTTON_TEXT = "View details"


def _bot_token() -> str:
    return (current_app.config.get("TELEGRAM_BOT_TOKEN") or "").strip()


def telegram_is_configured() -> Tuple[bool, str | None]:
    if not _bot_token():
        return False, "missing_token"
    return True, None


def _endpoint(method: str) -> str:
    return f"https://api.telegram.org/bot{_bot_token()}/{method}"


def build_parent_portal_url() -> str | None:
    base = (current_app.config.get("PARENT_PORTAL_URL") or "").strip()
    if not base:
        return None
    return f"{base.rstrip('/')}/parent"


def send_telegram_message(
    chat_id: str,
    text: str,
    button_url: str | None = None,
    button_text: str | None = None,
) -> Tuple[bool, str | None]:
    ok, reason = telegram_is_configured()
    if not ok:
        return False, reason

    payload: Dict[str, Any] = {
        "chat_id": str(chat_id),
        "text": text,
        "parse_mode": "HTML",
        "disable_web_page_preview": True,
    }
    if button_url:
        payload["reply_markup"] = {
            "inline_keyboard": [[{"text": button_text or DEFAULT_BUTTON_TEXT, "url": button_url}]]
        }
    try:
        r = requests.post(_endpoint("sendMessage"), json=payload, timeout=20)
    except requests.RequestException:
        current_app.logger.exception("Telegram send error")
        return False, "send_failed"
    if 200 <= r.status_code < 300:
        return True, None
    current_app.logger.warning("Telegram send failed: HTTP %s %s", r.status_code, r.text)
    return False, "send_failed"


def set_webhook(url: str, secret_token: str | None = None) -> Tuple[bool, str | None]:
    ok, reason = telegram_is_configured()
    if not ok:
        return False, reason
    payload: Dict[str, Any] = {"url": url}
    if secret_token:
        payload["secret_token"] = secret_token
    try:
        r = requests.post(_endpoint("setWebhook"), json=payload, timeout=20)
    except requests.RequestException as e:
        return False, str(e)
    if 200 <= r.status_code < 300:
        return True, None
    return False, f"HTTP {r.status_code}: {r.text}"


def normalize_phone_for_linking(phone: str | None) -> str:
    """Keep digits and '+', turning an international ``00`` prefix into '+'."""
    cleaned = re.sub(r"[^\d+]", "", str(phone or ""))
    if cleaned.startswith("00"):
        cleaned = "+" + cleaned[2:]
    return cleaned


def parse_start_link_code(text: str) -> str:
    """Argument of a ``/start <code>`` command, or '' for anything else."""
    trimmed = (text or "").strip()
    if not trimmed.startswith("/start"):
        return ""
    parts = trimmed.split()
    return parts[1] if len(parts) > 1 else ""
