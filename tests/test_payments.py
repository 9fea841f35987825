from datetime import timedelta

from utils.timezone_helpers import local_today


def _iso(days_from_today):
    return (local_today() + timedelta(days=days_from_today)).isoformat()


def test_create_overdue_payment_is_enriched(client, make_student, admin_headers):
    student = make_student('Ali')
    r = client.post('/api/payments', json={
        'studentId': student['id'],
        'amount': 500000,
        'month': 'October',
        'startDate': _iso(-35),
        'endDate': _iso(-5),
    }, headers=admin_headers)
    assert r.status_code == 200
    data = r.get_json()
    assert data['studentName'] == 'Ali'
    assert data['status'] == 'pending'
    assert data['dueDate'] == data['endDate']
    assert data['penaltyPerDay'] == 10000
    assert data['isOverdue'] is True
    assert data['overdueDays'] == 5
    assert data['penaltyAmount'] == 50000
    assert data['totalDue'] == 550000
    assert data['displayStatus'] == 'overdue'


def test_deadline_today_is_due_not_overdue(client, make_student, admin_headers):
    student = make_student('Ali')
    data = client.post('/api/payments', json={
        'studentName': 'Ali', 'amount': 100, 'endDate': _iso(0),
    }, headers=admin_headers).get_json()
    assert data['studentId'] == student['id']
    assert data['isOverdue'] is False
    assert data['isDueSoon'] is True
    assert data['warning'] == 'Payment is due today.'


def test_validation_errors(client, make_student, admin_headers):
    student = make_student('Ali')
    base = {'studentId': student['id'], 'amount': 100}
    assert client.post('/api/payments', json={**base, 'status': 'late'}, headers=admin_headers).status_code == 400
    assert client.post('/api/payments', json={**base, 'amount': -1}, headers=admin_headers).status_code == 400
    assert client.post('/api/payments', json={**base, 'amount': 'lots'}, headers=admin_headers).status_code == 400
    assert client.post('/api/payments', json={**base, 'amount': 'NaN'}, headers=admin_headers).status_code == 400
    assert client.post('/api/payments', json={**base, 'amount': 'Infinity'}, headers=admin_headers).status_code == 400
    r = client.post('/api/payments', json={**base, 'startDate': _iso(5), 'endDate': _iso(1)}, headers=admin_headers)
    assert r.status_code == 400
    assert client.post('/api/payments', json={**base, 'endDate': 'soon'}, headers=admin_headers).status_code == 400
    assert client.post('/api/payments', json={'amount': 100}, headers=admin_headers).status_code == 400


def test_mark_paid_sets_paid_at_and_clears_penalty(client, make_student, admin_headers):
    student = make_student('Ali')
    payment = client.post('/api/payments', json={
        'studentId': student['id'], 'amount': 100, 'endDate': _iso(-3),
    }, headers=admin_headers).get_json()

    r = client.put(f"/api/payments/{payment['id']}", json={'status': 'paid'}, headers=admin_headers)
    data = r.get_json()
    assert data['status'] == 'paid'
    assert data['paidAt'] == local_today().isoformat()
    assert data['penaltyAmount'] == 0
    assert data['totalDue'] == 100


def test_list_filters(client, make_student, admin_headers):
    ali = make_student('Ali')
    bek = make_student('Bek')
    client.post('/api/payments', json={'studentId': ali['id'], 'amount': 1, 'endDate': _iso(-2)}, headers=admin_headers)
    client.post('/api/payments', json={'studentId': ali['id'], 'amount': 2, 'endDate': _iso(10)}, headers=admin_headers)
    client.post('/api/payments', json={'studentId': bek['id'], 'amount': 3, 'status': 'paid'}, headers=admin_headers)

    assert len(client.get('/api/payments', headers=admin_headers).get_json()) == 3
    assert len(client.get(f"/api/payments?studentId={ali['id']}", headers=admin_headers).get_json()) == 2
    overdue = client.get('/api/payments?status=overdue', headers=admin_headers).get_json()
    assert [p['amount'] for p in overdue] == [1]
    paid = client.get('/api/payments?status=paid', headers=admin_headers).get_json()
    assert [p['amount'] for p in paid] == [3]


def test_payment_scope_and_delete(client, make_student, admin_headers):
    student = make_student('Ali')
    payment = client.post('/api/payments', json={'studentId': student['id'], 'amount': 1}, headers=admin_headers).get_json()
    other = {'x-admin-id': '9'}
    assert client.get(f"/api/payments/{payment['id']}", headers=other).status_code == 404
    assert client.put('/api/payments', json={'id': payment['id'], 'amount': 5}, headers=other).status_code == 404
    assert client.delete(f"/api/payments?id={payment['id']}", headers=admin_headers).status_code == 200
    assert client.get(f"/api/payments/{payment['id']}", headers=admin_headers).status_code == 404


def test_deleting_student_removes_payments(client, make_student, admin_headers):
    student = make_student('Ali')
    client.post('/api/payments', json={'studentId': student['id'], 'amount': 1}, headers=admin_headers)
    client.delete(f"/api/students/{student['id']}", headers=admin_headers)
    assert client.get('/api/payments', headers=admin_headers).get_json() == []
