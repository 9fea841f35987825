"""Per-admin (tenant) scoping for API handlers.

Requests may carry an ``x-admin-id`` header. When present every list is
filtered by it, new rows are stamped with it, and rows owned by another admin
look as if they do not exist (404) to updates and deletes.
"""
from __future__ import annotations

from typing import Any, Optional, Type

from flask import request

from extensions import db

ADMIN_ID_HEADER = "x-admin-id"


def get_admin_id_from_request() -> Optional[int]:
    raw = (request.headers.get(ADMIN_ID_HEADER) or "").strip()
    if not raw:
        return None
    try:
        admin_id = int(raw)
    except ValueError:
        return None
    return admin_id if admin_id > 0 else None


def scoped_select(model: Type[Any], admin_id: Optional[int] = None):
    """``SELECT`` for ``model`` newest first, filtered to the admin when scoped."""
    query = db.select(model).order_by(model.created_at.desc(), model.id.desc())
    if admin_id:
        query = query.filter(model.admin_id == admin_id)
    return query


def get_scoped(model: Type[Any], obj_id: Any, admin_id: Optional[int] = None):
    """Row by id, or None when missing or owned by another admin."""
    try:
        pk = int(obj_id)
    except (TypeError, ValueError):
        return None
    obj = db.session.get(model, pk)
    if obj is None:
        return None
    if admin_id and obj.admin_id != admin_id:
        return None
    return obj
