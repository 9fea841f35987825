"""Telegram bot webhook.

Parents open the bot with ``/start <phone>``; the chat id is saved in the
metadata bag of every parent whose phone matches, and from then on that chat
receives the student's notifications.
"""
from __future__ import annotations

import hmac

from flask import Blueprint, current_app, request, jsonify

from extensions import db
from models import Parent
from utils.parent_meta import merge_parent_metadata, unpack_parent
from utils.telegram import (
    build_parent_portal_url,
    normalize_phone_for_linking,
    parse_start_link_code,
    send_telegram_message,
)

telegram_bp = Blueprint('telegram', __name__, url_prefix='/api/telegram')

SECRET_HEADER = 'X-Telegram-Bot-Api-Secret-Token'

HELP_TEXT = (
    "Hello! To receive notifications about your child, send\n"
    "<code>/start +998901234567</code>\n"
    "using the phone number registered at the academy."
)


def _link_chat(phone: str, chat_id: str) -> int:
    """Store ``chat_id`` on every parent with this phone; returns how many."""
    target = normalize_phone_for_linking(phone)
    if not target:
        return 0
    linked = 0
    for parent in db.session.execute(db.select(Parent)).scalars():
        if normalize_phone_for_linking(unpack_parent(parent.to_dict()).get('phone')) != target:
            continue
        parent.phone = merge_parent_metadata(parent.phone, telegramChatId=chat_id)
        linked += 1
    if linked:
        db.session.commit()
    return linked


@telegram_bp.route('/webhook', methods=['POST'])
def webhook():
    secret = current_app.config.get('TELEGRAM_WEBHOOK_SECRET') or ''
    if secret and not hmac.compare_digest(request.headers.get(SECRET_HEADER, ''), secret):
        return jsonify({'ok': False, 'error': 'Forbidden'}), 403

    update = request.get_json(silent=True) or {}
    message = update.get('message') or update.get('edited_message') or {}
    chat_id = (message.get('chat') or {}).get('id')
    text = message.get('text') or ''
    if chat_id is None:
        return jsonify({'ok': True})
    chat_id = str(chat_id)

    # Telegram retries non-2xx replies, so failures below still answer ok
    try:
        code = parse_start_link_code(text)
        if not code:
            send_telegram_message(chat_id, HELP_TEXT)
            return jsonify({'ok': True})
        linked = _link_chat(code, chat_id)
        if linked:
            current_app.logger.info("Linked Telegram chat %s to %s parent(s)", chat_id, linked)
            send_telegram_message(
                chat_id,
                "✅ Your Telegram is now linked. You will receive updates about your child here.",
                button_url=build_parent_portal_url(),
                button_text='Open parent portal',
            )
        else:
            send_telegram_message(chat_id, "❌ No parent with this phone number was found. Please check the number.")
    except Exception:
        db.session.rollback()
        current_app.logger.exception("Telegram webhook failed for chat %s", chat_id)
    return jsonify({'ok': True})
