from __future__ import annotations

from decimal import Decimal, InvalidOperation

from flask import Blueprint, current_app, request, jsonify

from extensions import db
from models import Payment
from routes.student_routes import resolve_student
from utils import json_body, parse_int, parse_iso_date, server_error
from utils.dispatch import queue_task
from utils.notify import notify_parents, payment_message
from utils.penalties import PAYMENT_STATUSES, describe_payment
from utils.tenant import get_admin_id_from_request, get_scoped, scoped_select
from utils.timezone_helpers import local_today

payment_bp = Blueprint('payments', __name__, url_prefix='/api/payments')


def _describe(payment: Payment) -> dict:
    return describe_payment(payment.to_dict(), window_days=current_app.config.get('DUE_SOON_DAYS', 3))


def _notify_payment(admin_id, student_id, text):
    notify_parents(admin_id, student_id, text, button_text='Open parent portal')


def _queue_payment_notice(payment: Payment) -> None:
    if not payment.student_id:
        return
    details = _describe(payment)
    text = payment_message(details.get('studentName') or 'your child', details)
    queue_task(_notify_payment, payment.admin_id, payment.student_id, text)


def _apply(payment: Payment, body: dict, creating: bool) -> str | None:
    """Copy request fields onto ``payment``; returns an error message when invalid."""
    if 'status' in body or creating:
        status = body.get('status') or 'pending'
        if status not in PAYMENT_STATUSES:
            return f'Invalid status: {status}'
        payment.status = status

    if 'amount' in body or creating:
        try:
            amount = Decimal(str(body.get('amount') if body.get('amount') not in (None, '') else 0))
        except InvalidOperation:
            return 'Amount must be a number'
        if not amount.is_finite():
            return 'Amount must be a number'
        if amount < 0:
            return 'Amount cannot be negative'
        payment.amount = amount

    if 'penaltyPerDay' in body or creating:
        rate = parse_int(body.get('penaltyPerDay'))
        if body.get('penaltyPerDay') not in (None, '') and (rate is None or rate < 0):
            return 'penaltyPerDay must be a non-negative integer'
        payment.penalty_per_day = rate if rate is not None else current_app.config.get('DEFAULT_PENALTY_PER_DAY', 10000)

    try:
        for field, attr in (('startDate', 'start_date'), ('endDate', 'end_date'), ('dueDate', 'due_date'), ('paidAt', 'paid_at')):
            if field in body:
                setattr(payment, attr, parse_iso_date(body[field]))
    except ValueError:
        return 'Dates must be in YYYY-MM-DD format'

    if payment.start_date and payment.end_date and payment.start_date > payment.end_date:
        return 'Start date cannot be after end date'
    if payment.end_date is not None and (payment.due_date is None or ('endDate' in body and 'dueDate' not in body)):
        payment.due_date = payment.end_date
    if payment.status == 'paid' and payment.paid_at is None:
        payment.paid_at = local_today()
    if payment.status != 'paid' and 'paidAt' not in body:
        payment.paid_at = None

    for field in ('month', 'note'):
        if field in body:
            value = body[field]
            setattr(payment, field, value.strip() if isinstance(value, str) and value.strip() else None)
    return None


@payment_bp.route('', methods=['GET'])
def list_payments():
    admin_id = get_admin_id_from_request()
    try:
        query = scoped_select(Payment, admin_id)
        student_id = parse_int(request.args.get('studentId'))
        if student_id is not None:
            query = query.filter(Payment.student_id == student_id)
        payments = [_describe(p) for p in db.session.execute(query).scalars()]
        # Status filter applies to the derived status, so "overdue" includes late pending invoices
        status = (request.args.get('status') or '').strip()
        if status:
            payments = [p for p in payments if p['displayStatus'] == status]
        return jsonify(payments)
    except Exception:
        return server_error('Failed to load payments')


@payment_bp.route('/<int:payment_id>', methods=['GET'])
def get_payment(payment_id: int):
    payment = get_scoped(Payment, payment_id, get_admin_id_from_request())
    if payment is None:
        return jsonify({'error': 'Payment not found'}), 404
    return jsonify(_describe(payment))


@payment_bp.route('', methods=['POST'])
def create_payment():
    admin_id = get_admin_id_from_request()
    body = json_body()
    student = resolve_student(body, admin_id)
    if student is None:
        return jsonify({'error': 'Student not found'}), 400
    payment = Payment(admin_id=admin_id, student_id=student.id)
    error = _apply(payment, body, creating=True)
    if error:
        return jsonify({'error': error}), 400
    try:
        db.session.add(payment)
        db.session.commit()
    except Exception:
        return server_error('Failed to save payment')
    _queue_payment_notice(payment)
    return jsonify(_describe(payment))


def _update(payment_id, body: dict):
    admin_id = get_admin_id_from_request()
    payment = get_scoped(Payment, payment_id, admin_id)
    if payment is None:
        return jsonify({'error': 'Payment not found'}), 404
    if body.get('studentId') not in (None, '') or body.get('studentName'):
        student = resolve_student(body, admin_id)
        if student is None:
            return jsonify({'error': 'Student not found'}), 400
        payment.student_id = student.id

    previous_status = payment.status
    error = _apply(payment, body, creating=False)
    if error:
        db.session.rollback()
        return jsonify({'error': error}), 400
    try:
        db.session.commit()
    except Exception:
        return server_error('Failed to update payment')
    if payment.status != previous_status:
        _queue_payment_notice(payment)
    return jsonify(_describe(payment))


def _delete(payment_id):
    payment = get_scoped(Payment, payment_id, get_admin_id_from_request())
    if payment is None:
        return jsonify({'error': 'Payment not found'}), 404
    try:
        db.session.delete(payment)
        db.session.commit()
        return jsonify({'success': True})
    except Exception:
        return server_error('Failed to delete payment')


@payment_bp.route('', methods=['PUT'])
def update_payment():
    body = json_body()
    if parse_int(body.get('id')) is None:
        return jsonify({'error': 'Missing id'}), 400
    return _update(body['id'], body)


@payment_bp.route('/<int:payment_id>', methods=['PUT'])
def update_payment_by_id(payment_id: int):
    return _update(payment_id, json_body())


@payment_bp.route('', methods=['DELETE'])
def delete_payment():
    payment_id = parse_int(request.args.get('id'))
    if payment_id is None:
        return jsonify({'error': 'Missing id'}), 400
    return _delete(payment_id)


@payment_bp.route('/<int:payment_id>', methods=['DELETE'])
def delete_payment_by_id(payment_id: int):
    return _delete(payment_id)
