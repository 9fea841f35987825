from __future__ import annotations

from flask import Blueprint, request, jsonify

from extensions import db
from models import Parent
from utils import json_body, parse_int, server_error
from utils.parent_meta import decode_parent_metadata, merge_parent_metadata, unpack_parent
from utils.security import ensure_hashed
from utils.tenant import get_admin_id_from_request, get_scoped, scoped_select

parent_bp = Blueprint('parents', __name__, url_prefix='/api/parents')


def public_parent(parent: Parent) -> dict:
    """Unpacked parent without the stored password."""
    unpacked = unpack_parent(parent.to_dict())
    unpacked.pop('password', None)
    return unpacked


def _text(body: dict, field: str) -> str | None:
    """Stripped string for ``field``; None when the field is absent."""
    if field not in body:
        return None
    value = body.get(field)
    return str(value).strip() if value is not None else ''


def _metadata_changes(body: dict) -> dict:
    changes = {
        'username': _text(body, 'username'),
        'studentId': _text(body, 'studentId'),
        'phone': _text(body, 'phone'),
        'telegramChatId': _text(body, 'telegramChatId'),
    }
    password = _text(body, 'password')
    # Empty password on update means "keep the current one"
    if password:
        changes['password'] = ensure_hashed(password)
    return changes


def _stored_phone(current: str | None, body: dict) -> str | None:
    """Merged metadata bag for the phone column; None once the bag is empty."""
    stored = merge_parent_metadata(current, **_metadata_changes(body))
    return stored if decode_parent_metadata(stored) else None


@parent_bp.route('', methods=['GET'])
def list_parents():
    admin_id = get_admin_id_from_request()
    try:
        parents = db.session.execute(scoped_select(Parent, admin_id)).scalars().all()
        return jsonify([public_parent(p) for p in parents])
    except Exception:
        return server_error('Failed to load parents')


@parent_bp.route('', methods=['POST'])
def create_parent():
    body = json_body()
    try:
        parent = Parent(
            admin_id=get_admin_id_from_request(),
            full_name=(body.get('fullName') or body.get('name') or '').strip() or 'Parent',
            email=(body.get('email') or '').strip() or None,
            phone=_stored_phone(None, body),
        )
        db.session.add(parent)
        db.session.commit()
        return jsonify(public_parent(parent))
    except Exception:
        return server_error('Failed to create parent')


def _update(parent_id, body: dict):
    parent = get_scoped(Parent, parent_id, get_admin_id_from_request())
    if parent is None:
        return jsonify({'error': 'Parent not found'}), 404
    try:
        full_name = body.get('fullName') or body.get('name')
        if full_name:
            parent.full_name = full_name.strip()
        if 'email' in body:
            parent.email = (body.get('email') or '').strip() or None
        parent.phone = _stored_phone(parent.phone, body)
        db.session.commit()
        return jsonify(public_parent(parent))
    except Exception:
        return server_error('Failed to update parent')


def _delete(parent_id):
    parent = get_scoped(Parent, parent_id, get_admin_id_from_request())
    if parent is None:
        return jsonify({'error': 'Parent not found'}), 404
    try:
        db.session.delete(parent)
        db.session.commit()
        return jsonify({'success': True})
    except Exception:
        return server_error('Failed to delete parent')


@parent_bp.route('', methods=['PUT'])
def update_parent():
    body = json_body()
    if parse_int(body.get('id')) is None:
        return jsonify({'error': 'Missing id'}), 400
    return _update(body['id'], body)


@parent_bp.route('/<int:parent_id>', methods=['PUT'])
def update_parent_by_id(parent_id: int):
    return _update(parent_id, json_body())


@parent_bp.route('', methods=['DELETE'])
def delete_parent():
    parent_id = parse_int(request.args.get('id'))
    if parent_id is None:
        return jsonify({'error': 'Missing id'}), 400
    return _delete(parent_id)


@parent_bp.route('/<int:parent_id>', methods=['DELETE'])
def delete_parent_by_id(parent_id: int):
    return _delete(parent_id)
