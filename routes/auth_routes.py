"""Login endpoints for the three portals.

Each answers the public profile of the matched account. Sessions live in the
client, so nothing is stored server side.
"""
from __future__ import annotations

from flask import Blueprint, current_app, jsonify

from extensions import db, limiter
from models import Admin, Parent, Student
from utils import json_body
from utils.parent_meta import decode_parent_metadata
from utils.security import verify_password
from routes.parent_routes import public_parent

auth_bp = Blueprint('auth', __name__, url_prefix='/api/auth')


def _credentials() -> tuple[str, str]:
    body = json_body()
    return (body.get('username') or '').strip(), body.get('password') or ''


def _missing():
    return jsonify({'error': 'Username and password are required', 'reason': 'missing_credentials'}), 400


def _rejected():
    return jsonify({'error': 'Invalid username or password', 'reason': 'not_found'}), 401


@auth_bp.route('/admin', methods=['POST'])
@limiter.limit('10 per minute', methods=['POST'])
def admin_login():
    username, password = _credentials()
    if not username or not password:
        return _missing()
    admin = db.session.execute(db.select(Admin).filter(Admin.username == username)).scalars().first()
    if admin is None or not admin.is_active or not verify_password(admin.password, password):
        current_app.logger.info("Failed admin login for %s", username)
        return _rejected()
    return jsonify(admin.to_dict())


@auth_bp.route('/student', methods=['POST'])
@limiter.limit('10 per minute', methods=['POST'])
def student_login():
    username, password = _credentials()
    if not username or not password:
        return _missing()
    student = db.session.execute(db.select(Student).filter(Student.username == username)).scalars().first()
    if student is None or not verify_password(student.password, password):
        current_app.logger.info("Failed student login for %s", username)
        return _rejected()
    if student.status != 'active':
        return jsonify({'error': 'Account is inactive', 'reason': 'inactive'}), 403
    return jsonify(student.to_dict())


def _parent_matches(parent: Parent, username: str, password: str) -> bool:
    metadata = decode_parent_metadata(parent.phone)
    if metadata and metadata.get('username'):
        return metadata['username'] == username and verify_password(metadata.get('password'), password)
    # Parents without a portal login: email is the login, phone the password
    phone = metadata.get('phone') if metadata is not None else parent.phone
    return bool(parent.email) and parent.email.strip() == username and verify_password(phone, password)


@auth_bp.route('/parent', methods=['POST'])
@limiter.limit('10 per minute', methods=['POST'])
def parent_login():
    username, password = _credentials()
    if not username or not password:
        return _missing()
    for parent in db.session.execute(db.select(Parent).order_by(Parent.id)).scalars():
        if _parent_matches(parent, username, password):
            return jsonify({**public_parent(parent), 'role': 'parent'})
    current_app.logger.info("Failed parent login for %s", username)
    return _rejected()
