from __future__ import annotations

from flask import Blueprint, request, jsonify

from extensions import db
from models import Admin
from utils import json_body, parse_int, server_error
from utils.security import hash_password

admin_bp = Blueprint('admins', __name__, url_prefix='/api/admins')


def _username_taken(username: str, exclude_id: int | None = None) -> bool:
    query = db.select(Admin.id).filter(Admin.username == username)
    if exclude_id is not None:
        query = query.filter(Admin.id != exclude_id)
    return db.session.execute(query).first() is not None


@admin_bp.route('', methods=['GET'])
def list_admins():
    try:
        admins = db.session.execute(db.select(Admin).order_by(Admin.created_at.desc(), Admin.id.desc())).scalars()
        return jsonify([a.to_dict() for a in admins])
    except Exception:
        return server_error('Failed to load admins')


@admin_bp.route('', methods=['POST'])
def create_admin():
    body = json_body()
    username = (body.get('username') or '').strip()
    password = body.get('password') or ''
    if not username or not password:
        return jsonify({'error': 'Username and password are required'}), 400
    if _username_taken(username):
        return jsonify({'error': 'Username already taken'}), 400
    try:
        admin = Admin(
            username=username,
            password=hash_password(password),
            full_name=(body.get('fullName') or '').strip() or username,
            email=body.get('email') or None,
            phone=body.get('phone') or None,
            is_active=bool(body.get('isActive', True)),
        )
        db.session.add(admin)
        db.session.commit()
        return jsonify(admin.to_dict())
    except Exception:
        return server_error('Failed to create admin')


@admin_bp.route('', methods=['PUT'])
def update_admin():
    body = json_body()
    admin_id = parse_int(body.get('id'))
    if admin_id is None:
        return jsonify({'error': 'Missing id'}), 400
    admin = db.session.get(Admin, admin_id)
    if admin is None:
        return jsonify({'error': 'Admin not found'}), 404

    username = (body.get('username') or '').strip()
    if username and username != admin.username:
        if _username_taken(username, exclude_id=admin.id):
            return jsonify({'error': 'Username already taken'}), 400
        admin.username = username
    try:
        for field, attr in (('fullName', 'full_name'), ('email', 'email'), ('phone', 'phone')):
            if field in body:
                setattr(admin, attr, body[field])
        if 'isActive' in body:
            admin.is_active = bool(body['isActive'])
        if body.get('password'):
            admin.password = hash_password(body['password'])
        db.session.commit()
        return jsonify(admin.to_dict())
    except Exception:
        return server_error('Failed to update admin')


@admin_bp.route('', methods=['DELETE'])
def delete_admin():
    admin_id = parse_int(request.args.get('id'))
    if admin_id is None:
        return jsonify({'error': 'Missing id'}), 400
    admin = db.session.get(Admin, admin_id)
    if admin is None:
        return jsonify({'error': 'Admin not found'}), 404
    try:
        db.session.delete(admin)
        db.session.commit()
        return jsonify({'success': True})
    except Exception:
        return server_error('Failed to delete admin')
