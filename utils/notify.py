"""Parent notifications over Telegram and SMS.

Parents are linked to a student through the ``studentId`` stored in their
metadata bag (see utils.parent_meta), and to Telegram through the chat id the
bot saved there on ``/start``.
"""
from __future__ import annotations

import html
from typing import Any, Dict, List, Optional

from flask import current_app

from extensions import db
from models import Parent
from utils.parent_meta import unpack_parent
from utils.sms import normalize_phone_for_sms, send_sms
from utils.telegram import build_parent_portal_url, send_telegram_message
from utils.timezone_helpers import format_message_date


def _linked_parents(admin_id: Optional[int], student_id: Optional[int]) -> List[Dict[str, Any]]:
    if not student_id:
        return []
    query = db.select(Parent).order_by(Parent.created_at.desc())
    if admin_id:
        query = query.filter(Parent.admin_id == admin_id)
    linked = []
    for parent in db.session.execute(query).scalars():
        unpacked = unpack_parent(parent.to_dict())
        try:
            linked_student = int(unpacked.get("studentId") or 0)
        except ValueError:
            continue
        if linked_student == int(student_id):
            linked.append(unpacked)
    return linked


def find_linked_parent_chat_ids(admin_id: Optional[int], student_id: Optional[int]) -> List[str]:
    chat_ids: List[str] = []
    for parent in _linked_parents(admin_id, student_id):
        chat_id = str(parent.get("telegramChatId") or "")
        if chat_id and chat_id not in chat_ids:
            chat_ids.append(chat_id)
    return chat_ids


def find_linked_parent_phones(admin_id: Optional[int], student_id: Optional[int]) -> List[str]:
    country_code = current_app.config.get("DEFAULT_COUNTRY_CODE", "998")
    phones: List[str] = []
    for parent in _linked_parents(admin_id, student_id):
        phone = normalize_phone_for_sms(parent.get("phone"), country_code)
        if phone and phone not in phones:
            phones.append(phone)
    return phones


def notify_parents(
    admin_id: Optional[int],
    student_id: Optional[int],
    text: str,
    button_text: str | None = None,
    sms_text: str | None = None,
) -> Dict[str, int]:
    """Send ``text`` to every parent linked to the student; returns sent counts."""
    sent = {"telegram": 0, "sms": 0}
    button_url = build_parent_portal_url()
    for chat_id in find_linked_parent_chat_ids(admin_id, student_id):
        ok, _ = send_telegram_message(chat_id, text, button_url=button_url, button_text=button_text)
        sent["telegram"] += int(ok)
    for phone in find_linked_parent_phones(admin_id, student_id):
        ok, _ = send_sms(phone, sms_text or _strip_html(text))
        sent["sms"] += int(ok)
    current_app.logger.info(
        "Notified parents of student %s: %s telegram, %s sms", student_id, sent["telegram"], sent["sms"]
    )
    return sent


def _strip_html(text: str) -> str:
    for tag in ("<b>", "</b>", "<i>", "</i>", "<code>", "</code>"):
        text = text.replace(tag, "")
    return html.unescape(text)


def _money(value: Any) -> str:
    return f"{float(value or 0):,.0f}".replace(",", " ")


def _esc(value: Any) -> str:
    """Plain text made safe for Telegram HTML parse mode."""
    return html.escape(str(value), quote=False)


# --------------------------
# Message texts
# --------------------------

def payment_message(student_name: str, payment: Dict[str, Any]) -> str:
    status = payment.get("displayStatus") or payment.get("status") or "pending"
    lines = [
        f"💳 <b>Payment update</b> for {_esc(student_name)}",
        f"Amount: {_money(payment.get('amount'))} UZS",
        f"Status: {_esc(status)}",
        f"Due: {format_message_date(payment.get('endDate') or payment.get('dueDate'))}",
    ]
    if payment.get("isOverdue"):
        lines.append(
            f"Overdue {payment.get('overdueDays')} day(s), penalty {_money(payment.get('penaltyAmount'))} UZS, "
            f"total due {_money(payment.get('totalDue'))} UZS"
        )
    if payment.get("month"):
        lines.insert(2, f"Period: {_esc(payment['month'])}")
    return "\n".join(lines)


def payment_reminder_message(student_name: str, payment: Dict[str, Any]) -> str:
    if payment.get("isOverdue"):
        return (
            f"⚠️ <b>Payment overdue</b> for {_esc(student_name)}\n"
            f"Overdue {payment.get('overdueDays')} day(s). Penalty is increasing daily.\n"
            f"Total due: {_money(payment.get('totalDue'))} UZS"
        )
    return (
        f"⏰ <b>Payment reminder</b> for {_esc(student_name)}\n"
        f"Amount: {_money(payment.get('amount'))} UZS\n"
        f"Due: {format_message_date(payment.get('endDate') or payment.get('dueDate'))}"
    )


def attendance_message(student_name: str, record: Dict[str, Any]) -> str:
    status = record.get("status") or "present"
    text = f"📋 <b>Attendance</b>: {_esc(student_name)} was marked <b>{_esc(status)}</b> on {format_message_date(record.get('date'))}"
    if record.get("note"):
        text += f"\nComment: {_esc(record['note'])}"
    return text


def score_message(student_name: str, score: Dict[str, Any]) -> str:
    kind = "Mock exam" if score.get("scoreType") == "mock" else "Weekly test"
    lines = [f"📊 <b>{kind} result</b> for {_esc(student_name)}: {score.get('overallPercent')}%"]
    for category, item in (score.get("breakdown") or {}).items():
        lines.append(f"• {_esc(category.replace('_', ' ').title())}: {item.get('percent')}%")
    return "\n".join(lines)
