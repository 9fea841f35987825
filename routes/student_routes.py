from __future__ import annotations

import time

from flask import Blueprint, request, jsonify

from extensions import db
from models import Student
from utils import json_body, parse_int, server_error
from utils.security import hash_password
from utils.tenant import get_admin_id_from_request, get_scoped, scoped_select

student_bp = Blueprint('students', __name__, url_prefix='/api/students')

STUDENT_STATUSES = ('active', 'inactive')


def resolve_student(body: dict, admin_id: int | None) -> Student | None:
    """Student referenced by ``studentId`` or, failing that, by ``studentName``."""
    raw_id = body.get('studentId')
    if raw_id is not None and str(raw_id).strip() != '':
        return get_scoped(Student, raw_id, admin_id)
    name = (body.get('studentName') or '').strip()
    if name:
        query = db.select(Student).filter(Student.full_name == name)
        if admin_id:
            query = query.filter(Student.admin_id == admin_id)
        return db.session.execute(query.limit(1)).scalars().first()
    return None


@student_bp.route('', methods=['GET'])
def list_students():
    admin_id = get_admin_id_from_request()
    try:
        query = scoped_select(Student, admin_id)
        group = (request.args.get('group') or '').strip()
        if group:
            query = query.filter(Student.group_name == group)
        students = db.session.execute(query).scalars().all()
        return jsonify([s.to_dict() for s in students])
    except Exception:
        return server_error('Database error')


@student_bp.route('', methods=['POST'])
def create_student():
    admin_id = get_admin_id_from_request()
    body = json_body()
    stamp = int(time.time() * 1000)
    status = body.get('status') or 'active'
    if status not in STUDENT_STATUSES:
        return jsonify({'error': f'Invalid status: {status}'}), 400
    username = (body.get('username') or '').strip() or f'user_{stamp}'
    if db.session.execute(db.select(Student.id).filter(Student.username == username)).first():
        return jsonify({'error': 'Username already taken'}), 400
    try:
        student = Student(
            admin_id=admin_id,
            full_name=(body.get('fullName') or body.get('name') or '').strip(),
            email=body.get('email') or f'{stamp}@test.com',
            phone=body.get('phone') or '',
            username=username,
            password=hash_password(body.get('password') or '123456'),
            status=status,
            group_name=body.get('group') or None,
        )
        db.session.add(student)
        db.session.commit()
        return jsonify(student.to_dict())
    except Exception:
        return server_error('Save error')


def _update(student_id, body: dict):
    admin_id = get_admin_id_from_request()
    student = get_scoped(Student, student_id, admin_id)
    if student is None:
        return jsonify({'error': 'Student not found'}), 404

    if 'status' in body and body['status'] not in STUDENT_STATUSES:
        return jsonify({'error': f"Invalid status: {body['status']}"}), 400
    username = (body.get('username') or '').strip()
    if username and username != student.username:
        taken = db.session.execute(
            db.select(Student.id).filter(Student.username == username, Student.id != student.id)
        ).first()
        if taken:
            return jsonify({'error': 'Username already taken'}), 400
        student.username = username

    try:
        full_name = body.get('fullName') or body.get('name')
        if full_name:
            student.full_name = full_name.strip()
        for field, attr in (('email', 'email'), ('phone', 'phone'), ('status', 'status'), ('group', 'group_name')):
            if field in body:
                setattr(student, attr, body[field])
        # Only replace the password when a new one is sent
        if body.get('password'):
            student.password = hash_password(body['password'])
        db.session.commit()
        return jsonify(student.to_dict())
    except Exception:
        return server_error('Update error')


def _delete(student_id):
    admin_id = get_admin_id_from_request()
    student = get_scoped(Student, student_id, admin_id)
    if student is None:
        return jsonify({'error': 'Student not found'}), 404
    try:
        db.session.delete(student)
        db.session.commit()
        return jsonify({'success': True})
    except Exception:
        return server_error('Delete error')


@student_bp.route('', methods=['PUT'])
def update_student():
    body = json_body()
    if parse_int(body.get('id')) is None:
        return jsonify({'error': 'Missing id'}), 400
    return _update(body['id'], body)


@student_bp.route('/<int:student_id>', methods=['PUT'])
def update_student_by_id(student_id: int):
    return _update(student_id, json_body())


@student_bp.route('', methods=['DELETE'])
def delete_student():
    student_id = parse_int(request.args.get('id'))
    if student_id is None:
        return jsonify({'error': 'ID missing'}), 400
    return _delete(student_id)


@student_bp.route('/<int:student_id>', methods=['DELETE'])
def delete_student_by_id(student_id: int):
    return _delete(student_id)
