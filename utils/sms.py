from __future__ import annotations

import re
from typing import Tuple

import requests
from flask import current_app

TWILIO_MESSAGES_URL = "https://api.twilio.com/2010-04-01/Accounts/{sid}/Messages.json"


def _twilio_config() -> Tuple[str, str, str] | None:
    cfg = current_app.config
    sid = (cfg.get("TWILIO_ACCOUNT_SID") or "").strip()
    token = (cfg.get("TWILIO_AUTH_TOKEN") or "").strip()
    sender = (cfg.get("TWILIO_FROM_NUMBER") or "").strip()
    if not sid or not token or not sender:
        return None
    return sid, token, sender


def normalize_phone_for_sms(phone: str | None, country_code: str = "998") -> str:
    """E.164 number for an Uzbek mobile, or '' when it cannot be one.

    Accepts ``+998 90 123 45 67``, ``00998901234567``, ``901234567`` and the
    trunk-prefixed ``0901234567`` forms.
    """
    digits = re.sub(r"\D", "", str(phone or ""))
    if not digits:
        return ""
    if digits.startswith("00"):
        digits = digits[2:]
    if len(digits) == 9:
        digits = country_code + digits
    elif len(digits) == 10 and digits.startswith("0"):
        digits = country_code + digits[1:]
    if len(digits) != len(country_code) + 9 or not digits.startswith(country_code):
        return ""
    return f"+{digits}"


def send_sms(to: str, text: str) -> Tuple[bool, str | None]:
    config = _twilio_config()
    if config is None:
        return False, "missing_sms_config"
    sid, token, sender = config

    number = normalize_phone_for_sms(to, current_app.config.get("DEFAULT_COUNTRY_CODE", "998"))
    if not number:
        return False, "invalid_phone"

    try:
        r = requests.post(
            TWILIO_MESSAGES_URL.format(sid=sid),
            data={"To": number, "From": sender, "Body": text},
            auth=(sid, token),
            timeout=20,
        )
    except requests.RequestException:
        current_app.logger.exception("SMS send error")
        return False, "send_error"
    if 200 <= r.status_code < 300:
        return True, None
    current_app.logger.warning("SMS send failed: HTTP %s %s", r.status_code, r.text)
    return False, "send_failed"
