from __future__ import annotations

from flask import Blueprint, request, jsonify

from extensions import db
from models import Group, Student
from utils import json_body, parse_int, server_error
from utils.scoring import LEVEL_CRITERIA
from utils.tenant import get_admin_id_from_request, get_scoped, scoped_select

group_bp = Blueprint('groups', __name__, url_prefix='/api/groups')

UNASSIGNED_GROUP = 'Not Assigned'


def _student_counts(admin_id: int | None) -> dict[str, int]:
    query = db.select(Student.group_name, db.func.count(Student.id)).group_by(Student.group_name)
    if admin_id:
        query = query.filter(Student.admin_id == admin_id)
    return {name: count for name, count in db.session.execute(query).all() if name}


def _apply(group: Group, body: dict) -> str | None:
    """Copy editable fields from ``body``; returns an error message when invalid."""
    if 'level' in body and body['level'] and body['level'] not in LEVEL_CRITERIA:
        return f"Invalid level: {body['level']}"
    if 'maxStudents' in body:
        max_students = parse_int(body.get('maxStudents'))
        if body.get('maxStudents') not in (None, '') and (max_students is None or max_students < 0):
            return 'maxStudents must be a non-negative integer'
        group.max_students = max_students
    for field in ('name', 'description', 'teacher', 'schedule', 'level', 'color'):
        if field in body:
            setattr(group, field, body[field] or None)
    return None


@group_bp.route('', methods=['GET'])
def list_groups():
    admin_id = get_admin_id_from_request()
    try:
        groups = db.session.execute(scoped_select(Group, admin_id)).scalars().all()
        counts = _student_counts(admin_id)
        return jsonify([g.to_dict(counts.get(g.name, 0)) for g in groups])
    except Exception:
        return server_error('Failed to load groups')


@group_bp.route('/<int:group_id>', methods=['GET'])
def group_details(group_id: int):
    admin_id = get_admin_id_from_request()
    group = get_scoped(Group, group_id, admin_id)
    if group is None:
        return jsonify({'error': 'Group not found'}), 404
    query = scoped_select(Student, admin_id).filter(Student.group_name == group.name)
    students = db.session.execute(query).scalars().all()
    return jsonify({**group.to_dict(len(students)), 'students': [s.to_dict() for s in students]})


@group_bp.route('', methods=['POST'])
def create_group():
    body = json_body()
    name = (body.get('name') or '').strip()
    if not name:
        return jsonify({'error': 'Group name is required'}), 400
    group = Group(admin_id=get_admin_id_from_request())
    error = _apply(group, {**body, 'name': name})
    if error:
        return jsonify({'error': error}), 400
    if not group.color:
        group.color = 'from-orange-500 to-red-500'
    try:
        db.session.add(group)
        db.session.commit()
        return jsonify(group.to_dict())
    except Exception:
        return server_error('Failed to create group')


def _update(group_id, body: dict):
    admin_id = get_admin_id_from_request()
    group = get_scoped(Group, group_id, admin_id)
    if group is None:
        return jsonify({'error': 'Group not found'}), 404
    old_name = group.name
    error = _apply(group, body)
    if error:
        db.session.rollback()
        return jsonify({'error': error}), 400
    if not group.name:
        db.session.rollback()
        return jsonify({'error': 'Group name is required'}), 400
    try:
        # Students point at their group by name
        if group.name != old_name:
            query = db.update(Student).where(Student.group_name == old_name)
            if admin_id:
                query = query.where(Student.admin_id == admin_id)
            db.session.execute(query.values(group_name=group.name))
        db.session.commit()
        return jsonify(group.to_dict(_student_counts(admin_id).get(group.name, 0)))
    except Exception:
        return server_error('Failed to update group')


def _delete(group_id):
    admin_id = get_admin_id_from_request()
    group = get_scoped(Group, group_id, admin_id)
    if group is None:
        return jsonify({'error': 'Group not found'}), 404
    try:
        query = db.update(Student).where(Student.group_name == group.name)
        if admin_id:
            query = query.where(Student.admin_id == admin_id)
        db.session.execute(query.values(group_name=UNASSIGNED_GROUP))
        db.session.delete(group)
        db.session.commit()
        return jsonify({'success': True})
    except Exception:
        return server_error('Failed to delete group')


@group_bp.route('', methods=['PUT'])
def update_group():
    body = json_body()
    if parse_int(body.get('id')) is None:
        return jsonify({'error': 'Missing id'}), 400
    return _update(body['id'], body)


@group_bp.route('/<int:group_id>', methods=['PUT'])
def update_group_by_id(group_id: int):
    return _update(group_id, json_body())


@group_bp.route('', methods=['DELETE'])
def delete_group():
    group_id = parse_int(request.args.get('id'))
    if group_id is None:
        return jsonify({'error': 'ID missing'}), 400
    return _delete(group_id)


@group_bp.route('/<int:group_id>', methods=['DELETE'])
def delete_group_by_id(group_id: int):
    return _delete(group_id)
