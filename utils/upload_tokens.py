"""Signed tokens for the two-phase course material upload.

Phase one: the admin UI asks ``/api/materials/upload`` for a token naming the
file it wants to store. Phase two: the browser uploads straight to the blob
store with that token, then creates the material with the same token so the
server can trust the resulting URL.

Token format: ``<urlsafe-b64(json payload)>.<hex hmac-sha256>``
"""
from __future__ import annotations

import base64
import binascii
import hashlib
import hmac
import json
import os
import re
import time
from typing import Any, Dict, Optional

ALLOWED_CONTENT_TYPES = {
    "video/mp4": "video",
    "video/quicktime": "video",
    "video/x-msvideo": "video",
    "application/pdf": "pdf",
    "image/jpeg": "image",
    "image/png": "image",
    "image/gif": "image",
    "text/plain": "text",
    "application/msword": "document",
    "application/vnd.openxmlformats-officedocument.wordprocessingml.document": "document",
    "application/vnd.ms-powerpoint": "document",
    "application/vnd.openxmlformats-officedocument.presentationml.presentation": "document",
    "audio/mpeg": "audio",
    "audio/wav": "audio",
    "application/zip": "archive",
    "application/x-rar-compressed": "archive",
}


class UploadTokenError(ValueError):
    pass


def _b64encode(raw: bytes) -> str:
    return base64.urlsafe_b64encode(raw).decode("ascii").rstrip("=")


def _b64decode(text: str) -> bytes:
    return base64.urlsafe_b64decode(text + "=" * (-len(text) % 4))


def _sign(secret: str, payload: str) -> str:
    return hmac.new(secret.encode("utf-8"), payload.encode("utf-8"), hashlib.sha256).hexdigest()


def _with_random_suffix(pathname: str) -> str:
    """``lesson 1.pdf`` -> ``materials/lesson-1-<8 hex>.pdf``"""
    name = os.path.basename(pathname or "").strip() or "upload"
    stem, ext = os.path.splitext(name)
    stem = re.sub(r"[^A-Za-z0-9_-]+", "-", stem).strip("-") or "upload"
    return f"materials/{stem}-{os.urandom(4).hex()}{ext.lower()}"


def material_type_for(content_type: str) -> Optional[str]:
    return ALLOWED_CONTENT_TYPES.get((content_type or "").split(";")[0].strip().lower())


def issue_upload_token(pathname: str, content_type: str, secret: str, ttl_seconds: int = 900, now: Optional[float] = None) -> Dict[str, Any]:
    if not secret:
        raise UploadTokenError("Upload signing secret is not configured.")
    if material_type_for(content_type) is None:
        raise UploadTokenError(f"Content type not allowed: {content_type or '(none)'}")
    issued = time.time() if now is None else now
    claims = {
        "pathname": _with_random_suffix(pathname),
        "contentType": content_type.split(";")[0].strip().lower(),
        "exp": int(issued + ttl_seconds),
        "source": "admin-materials-upload",
    }
    payload = _b64encode(json.dumps(claims, separators=(",", ":")).encode("utf-8"))
    return {"token": f"{payload}.{_sign(secret, payload)}", **claims}


def verify_upload_token(token: str, secret: str, now: Optional[float] = None) -> Dict[str, Any]:
    """Return the token claims; raises UploadTokenError when forged, malformed or expired."""
    if not token or "." not in token:
        raise UploadTokenError("Malformed upload token.")
    payload, signature = token.rsplit(".", 1)
    if not hmac.compare_digest(_sign(secret, payload), signature):
        raise UploadTokenError("Invalid upload token signature.")
    try:
        claims = json.loads(_b64decode(payload).decode("utf-8"))
    except (binascii.Error, UnicodeDecodeError, ValueError):
        raise UploadTokenError("Malformed upload token.")
    current = time.time() if now is None else now
    if int(claims.get("exp") or 0) < current:
        raise UploadTokenError("Upload token expired.")
    return claims
