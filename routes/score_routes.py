from __future__ import annotations

from flask import Blueprint, request, jsonify

from extensions import db
from models import Group, Score, Student
from routes.student_routes import resolve_student
from utils import json_body, parse_int, server_error
from utils.dispatch import queue_task
from utils.notify import notify_parents, score_message
from utils.ranking import latest_per_student, rank_entries
from utils.scoring import LEVEL_CRITERIA, SCORE_TYPES, extract_score_payload
from utils.tenant import get_admin_id_from_request, get_scoped, scoped_select

score_bp = Blueprint('scores', __name__, url_prefix='/api/scores')


def _queue_score_notice(score: Score) -> None:
    if not score.student_id:
        return
    details = score.to_dict()
    text = score_message(details.get('studentName') or 'your child', details)
    queue_task(notify_parents, score.admin_id, score.student_id, text)


def _group_level(student: Student) -> str | None:
    if not student.group_name:
        return None
    query = db.select(Group.level).filter(Group.name == student.group_name)
    if student.admin_id:
        query = query.filter(Group.admin_id == student.admin_id)
    return db.session.execute(query.limit(1)).scalar()


def _validate_meta(body: dict) -> str | None:
    if body.get('scoreType') and body['scoreType'] not in SCORE_TYPES:
        return f"Invalid scoreType: {body['scoreType']}"
    if body.get('level') and body['level'] not in LEVEL_CRITERIA:
        return f"Invalid level: {body['level']}"
    return None


@score_bp.route('', methods=['GET'])
def list_scores():
    admin_id = get_admin_id_from_request()
    try:
        query = scoped_select(Score, admin_id)
        student_id = parse_int(request.args.get('studentId'))
        if student_id is not None:
            query = query.filter(Score.student_id == student_id)
        score_type = (request.args.get('scoreType') or '').strip()
        if score_type:
            query = query.filter(Score.score_type == score_type)
        scores = db.session.execute(query).scalars().all()
        return jsonify([s.to_dict() for s in scores])
    except Exception:
        return server_error('Failed to load scores')


@score_bp.route('/ranking', methods=['GET'])
def ranking():
    """Rank students of a group by their latest score."""
    admin_id = get_admin_id_from_request()
    try:
        students_query = scoped_select(Student, admin_id)
        group = (request.args.get('group') or '').strip()
        if group:
            students_query = students_query.filter(Student.group_name == group)
        students = {s.id: s for s in db.session.execute(students_query).scalars()}
        if not students:
            return jsonify([])

        scores_query = scoped_select(Score, admin_id).filter(Score.student_id.in_(list(students)))
        score_type = (request.args.get('scoreType') or '').strip()
        if score_type:
            scores_query = scores_query.filter(Score.score_type == score_type)
        latest = latest_per_student(db.session.execute(scores_query).scalars())

        entries = [
            {
                'studentId': student_id,
                'studentName': students[student_id].full_name,
                'score': score.overall_percent,
            }
            for student_id, score in latest.items()
        ]
        # Same input order every time so ties come out stable
        entries.sort(key=lambda e: e['studentName'] or '')
        return jsonify(rank_entries(entries))
    except Exception:
        return server_error('Failed to build ranking')


@score_bp.route('', methods=['POST'])
def create_score():
    admin_id = get_admin_id_from_request()
    body = json_body()
    error = _validate_meta(body)
    if error:
        return jsonify({'error': error}), 400
    student = resolve_student(body, admin_id)
    if student is None:
        return jsonify({'error': 'Student not found'}), 400
    payload = extract_score_payload(body)
    try:
        score = Score(
            admin_id=admin_id,
            student_id=student.id,
            score_type=body.get('scoreType') or 'weekly',
            level=body.get('level') or _group_level(student),
            subject=payload['subject'],
            breakdown=payload['breakdown'],
            overall_percent=payload['overall_percent'],
        )
        db.session.add(score)
        db.session.commit()
    except Exception:
        return server_error('Failed to save score')
    _queue_score_notice(score)
    return jsonify(score.to_dict())


@score_bp.route('', methods=['PUT'])
def update_score():
    admin_id = get_admin_id_from_request()
    body = json_body()
    if parse_int(body.get('id')) is None:
        return jsonify({'error': 'Missing id'}), 400
    score = get_scoped(Score, body['id'], admin_id)
    if score is None:
        return jsonify({'error': 'Score not found'}), 404
    error = _validate_meta(body)
    if error:
        return jsonify({'error': error}), 400
    if body.get('studentId') not in (None, '') or body.get('studentName'):
        student = resolve_student(body, admin_id)
        if student is None:
            return jsonify({'error': 'Student not found'}), 400
        score.student_id = student.id

    payload = extract_score_payload(body)
    try:
        if payload['breakdown'] or 'overallPercent' in body or 'value' in body:
            score.breakdown = payload['breakdown']
            score.overall_percent = payload['overall_percent']
        if body.get('subject'):
            score.subject = body['subject']
        if body.get('scoreType'):
            score.score_type = body['scoreType']
        if 'level' in body:
            score.level = body['level'] or None
        db.session.commit()
        return jsonify(score.to_dict())
    except Exception:
        return server_error('Failed to update score')


@score_bp.route('', methods=['DELETE'])
def delete_score():
    score_id = parse_int(request.args.get('id'))
    if score_id is None:
        return jsonify({'error': 'Missing id'}), 400
    score = get_scoped(Score, score_id, get_admin_id_from_request())
    if score is None:
        return jsonify({'error': 'Score not found'}), 404
    try:
        db.session.delete(score)
        db.session.commit()
        return jsonify({'success': True})
    except Exception:
        return server_error('Failed to delete score')
