from __future__ import annotations

from flask import Blueprint, request, jsonify

from extensions import db
from models import Attendance
from routes.student_routes import resolve_student
from utils import json_body, parse_int, parse_iso_date, server_error
from utils.dispatch import queue_task
from utils.notify import attendance_message, notify_parents
from utils.tenant import get_admin_id_from_request, get_scoped, scoped_select
from utils.timezone_helpers import local_today

attendance_bp = Blueprint('attendance', __name__, url_prefix='/api/attendance')

ATTENDANCE_STATUSES = ('present', 'absent', 'late')
# Statuses parents hear about
NOTIFY_STATUSES = ('absent', 'late')


def _queue_attendance_notice(record: Attendance) -> None:
    if not record.student_id or record.status not in NOTIFY_STATUSES:
        return
    details = record.to_dict()
    text = attendance_message(details.get('studentName') or 'your child', details)
    queue_task(notify_parents, record.admin_id, record.student_id, text)


@attendance_bp.route('', methods=['GET'])
def list_attendance():
    admin_id = get_admin_id_from_request()
    try:
        query = scoped_select(Attendance, admin_id)
        student_id = parse_int(request.args.get('studentId'))
        if student_id is not None:
            query = query.filter(Attendance.student_id == student_id)
        on_date = request.args.get('date')
        if on_date:
            query = query.filter(Attendance.date == parse_iso_date(on_date))
        records = db.session.execute(query).scalars().all()
        return jsonify([r.to_dict() for r in records])
    except ValueError:
        return jsonify({'error': 'Dates must be in YYYY-MM-DD format'}), 400
    except Exception:
        return server_error('Failed to load attendance')


@attendance_bp.route('', methods=['POST'])
def create_attendance():
    admin_id = get_admin_id_from_request()
    body = json_body()
    status = body.get('status') or 'present'
    note = body.get('note').strip() if isinstance(body.get('note'), str) else ''
    if status not in ATTENDANCE_STATUSES:
        return jsonify({'error': f'Invalid status: {status}'}), 400
    if status == 'late' and not note:
        return jsonify({'error': 'A comment explaining the late arrival is required'}), 400
    try:
        record_date = parse_iso_date(body.get('date')) or local_today()
    except ValueError:
        return jsonify({'error': 'Dates must be in YYYY-MM-DD format'}), 400

    student = resolve_student(body, admin_id)
    try:
        record = Attendance(
            admin_id=admin_id,
            student_id=student.id if student else None,
            date=record_date,
            status=status,
            note=note or None,
        )
        db.session.add(record)
        db.session.commit()
    except Exception:
        return server_error('Failed to save attendance')
    _queue_attendance_notice(record)
    return jsonify(record.to_dict())


@attendance_bp.route('', methods=['PUT'])
def update_attendance():
    admin_id = get_admin_id_from_request()
    body = json_body()
    if parse_int(body.get('id')) is None:
        return jsonify({'error': 'Missing id'}), 400
    record = get_scoped(Attendance, body['id'], admin_id)
    if record is None:
        return jsonify({'error': 'Attendance record not found'}), 404

    status = body.get('status') or record.status
    if status not in ATTENDANCE_STATUSES:
        return jsonify({'error': f'Invalid status: {status}'}), 400
    note = body['note'].strip() if isinstance(body.get('note'), str) else record.note
    if status == 'late' and not note:
        return jsonify({'error': 'A comment explaining the late arrival is required'}), 400
    try:
        new_date = parse_iso_date(body.get('date'))
    except ValueError:
        return jsonify({'error': 'Dates must be in YYYY-MM-DD format'}), 400

    student = resolve_student(body, admin_id)
    try:
        record.status = status
        record.note = note or None
        if new_date:
            record.date = new_date
        if student is not None:
            record.student_id = student.id
        db.session.commit()
        return jsonify(record.to_dict())
    except Exception:
        return server_error('Failed to update attendance')


@attendance_bp.route('', methods=['DELETE'])
def delete_attendance():
    record_id = parse_int(request.args.get('id'))
    if record_id is None:
        return jsonify({'error': 'Missing id'}), 400
    record = get_scoped(Attendance, record_id, get_admin_id_from_request())
    if record is None:
        return jsonify({'error': 'Attendance record not found'}), 404
    try:
        db.session.delete(record)
        db.session.commit()
        return jsonify({'success': True})
    except Exception:
        return server_error('Failed to delete attendance')
