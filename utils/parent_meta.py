"""Parent login/link metadata stored inside the ``parents.phone`` column.

The parents table has no columns for a login, the linked student or the
Telegram chat id, so those travel as a small JSON bag encoded into the phone
column::

    __KA_PARENT__:<base64(json)>

A column that was never encoded is just a phone number; ``decode`` returns
``None`` for it and :func:`unpack_parent` falls back to the raw value.
"""
from __future__ import annotations

import base64
import binascii
import json
from typing import Any, Dict, Optional

PARENT_META_PREFIX = "__KA_PARENT__:"
PARENT_META_FIELDS = ("username", "password", "studentId", "phone", "telegramChatId")


def encode_parent_metadata(metadata: Dict[str, Any]) -> str:
    compact = {key: metadata[key] for key in PARENT_META_FIELDS if metadata.get(key)}
    payload = json.dumps(compact, separators=(",", ":"))
    return PARENT_META_PREFIX + base64.b64encode(payload.encode("utf-8")).decode("ascii")


def decode_parent_metadata(stored_phone: Optional[str]) -> Optional[Dict[str, str]]:
    if not stored_phone or not stored_phone.startswith(PARENT_META_PREFIX):
        return None
    # Tolerate line breaks and missing padding in hand-edited rows
    payload = "".join(stored_phone[len(PARENT_META_PREFIX):].split()).rstrip("=")
    payload += "=" * (-len(payload) % 4)
    try:
        parsed = json.loads(base64.b64decode(payload).decode("utf-8"))
    except (binascii.Error, UnicodeDecodeError, ValueError):
        return None
    if not isinstance(parsed, dict):
        return None
    return {key: parsed[key] for key in PARENT_META_FIELDS if isinstance(parsed.get(key), str)}


def unpack_parent(parent: Dict[str, Any]) -> Dict[str, Any]:
    """Return the parent dict with metadata fields merged on top."""
    raw_phone = parent.get("phone")
    metadata = decode_parent_metadata(raw_phone)
    if metadata is None:
        # Never encoded: the column is a plain phone number
        plain = raw_phone and not str(raw_phone).startswith(PARENT_META_PREFIX)
        metadata = {"phone": raw_phone} if plain else {}
    return {
        **parent,
        "username": metadata.get("username"),
        "password": metadata.get("password"),
        "studentId": metadata.get("studentId"),
        "phone": metadata.get("phone") or None,
        "telegramChatId": metadata.get("telegramChatId"),
    }


def merge_parent_metadata(stored_phone: Optional[str], **changes: Any) -> str:
    """Decode, apply ``changes`` and re-encode the whole bag.

    ``None`` in ``changes`` leaves the field untouched; an empty string clears it.
    A legacy plain phone value seeds the ``phone`` field.
    """
    current = decode_parent_metadata(stored_phone)
    if current is None:
        current = {"phone": stored_phone} if stored_phone else {}
    for key, value in changes.items():
        if key not in PARENT_META_FIELDS or value is None:
            continue
        current[key] = str(value)
    return encode_parent_metadata(current)
