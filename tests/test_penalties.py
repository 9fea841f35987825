from datetime import date, datetime, timedelta

from utils.penalties import calculate_penalty, days_until_due, describe_payment, is_due_soon

NOW = datetime(2024, 10, 6, 12, 0)


def test_paid_payment_has_no_penalty():
    summary = calculate_penalty('paid', 100000, date(2024, 9, 1), now=NOW)
    assert summary.is_overdue is False
    assert summary.penalty_amount == 0
    assert summary.total_due == 100000
    assert summary.display_status == 'paid'


def test_five_days_overdue():
    summary = calculate_penalty('pending', 100000, date(2024, 10, 1), penalty_per_day=10000, now=NOW)
    assert summary.is_overdue is True
    assert summary.overdue_days == 5
    assert summary.penalty_amount == 50000
    assert summary.total_due == 150000
    assert summary.display_status == 'overdue'


def test_end_date_today_is_not_overdue():
    summary = calculate_penalty('pending', 100000, NOW.date(), now=NOW)
    assert summary.is_overdue is False
    assert summary.overdue_days == 0
    assert summary.display_status == 'pending'


def test_exact_deadline_counts_at_least_one_day():
    summary = calculate_penalty('pending', 1000, NOW - timedelta(minutes=30), penalty_per_day=10, now=NOW)
    assert summary.overdue_days == 1
    assert summary.penalty_amount == 10


def test_falls_back_to_due_date():
    summary = calculate_penalty('pending', 1000, None, due_date='2024-10-04', penalty_per_day=100, now=NOW)
    assert summary.overdue_days == 2
    assert summary.total_due == 1200


def test_no_dates_means_no_penalty():
    summary = calculate_penalty('pending', 1000, None, now=NOW)
    assert summary.is_overdue is False
    assert summary.total_due == 1000


def test_manual_overdue_status_is_kept_before_deadline():
    summary = calculate_penalty('overdue', 1000, date(2024, 10, 20), now=NOW)
    assert summary.is_overdue is False
    assert summary.display_status == 'overdue'


def test_due_soon_window():
    assert days_until_due(date(2024, 10, 8), now=NOW) == 2
    assert is_due_soon('pending', date(2024, 10, 8), now=NOW) is True
    assert is_due_soon('pending', date(2024, 10, 10), now=NOW) is False
    assert is_due_soon('paid', date(2024, 10, 7), now=NOW) is False
    assert is_due_soon('pending', date(2024, 10, 5), now=NOW) is False


def test_describe_payment_warnings():
    overdue = describe_payment({'status': 'pending', 'amount': 500, 'endDate': '2024-10-01'}, now=NOW)
    assert overdue['isOverdue'] is True
    assert overdue['warning'] == 'Deadline passed. Penalty is increasing daily.'

    today = describe_payment({'status': 'pending', 'amount': 500, 'endDate': '2024-10-06'}, now=NOW)
    assert today['isDueSoon'] is True
    assert today['daysUntilDue'] == 0
    assert today['warning'] == 'Payment is due today.'

    later = describe_payment({'status': 'pending', 'amount': 500, 'endDate': '2024-10-08'}, now=NOW)
    assert later['warning'] == 'Payment is due in 2 day(s).'

    paid = describe_payment({'status': 'paid', 'amount': 500, 'endDate': '2024-10-08'}, now=NOW)
    assert paid['warning'] is None
    assert paid['amount'] == 500
