from unittest.mock import MagicMock, patch

from extensions import db
from models import Parent
from utils.parent_meta import encode_parent_metadata


def test_late_requires_note(client, make_student, admin_headers):
    student = make_student('Ali')
    r = client.post('/api/attendance', json={'studentId': student['id'], 'status': 'late'}, headers=admin_headers)
    assert r.status_code == 400
    r = client.post('/api/attendance', json={'studentId': student['id'], 'status': 'late', 'note': '   '}, headers=admin_headers)
    assert r.status_code == 400
    r = client.post('/api/attendance', json={'studentId': student['id'], 'status': 'late', 'note': 'Bus was late'}, headers=admin_headers)
    assert r.status_code == 200
    assert r.get_json()['note'] == 'Bus was late'
    assert r.get_json()['date'] is not None


def test_attendance_crud(client, make_student, admin_headers):
    student = make_student('Ali')
    assert client.post('/api/attendance', json={'studentId': student['id'], 'status': 'sick'}, headers=admin_headers).status_code == 400
    record = client.post('/api/attendance', json={
        'studentId': student['id'], 'status': 'present', 'date': '2024-10-01',
    }, headers=admin_headers).get_json()
    assert record['date'] == '2024-10-01'

    r = client.put('/api/attendance', json={'id': record['id'], 'status': 'late'}, headers=admin_headers)
    assert r.status_code == 400
    r = client.put('/api/attendance', json={'id': record['id'], 'status': 'absent'}, headers=admin_headers)
    assert r.get_json()['status'] == 'absent'

    listed = client.get(f"/api/attendance?studentId={student['id']}&date=2024-10-01", headers=admin_headers).get_json()
    assert [a['id'] for a in listed] == [record['id']]
    assert client.delete(f"/api/attendance?id={record['id']}", headers=admin_headers).status_code == 200
    assert client.get('/api/attendance', headers=admin_headers).get_json() == []


def test_absence_notifies_linked_parent(client, app, make_student, admin_headers, monkeypatch):
    monkeypatch.setitem(app.config, 'TELEGRAM_BOT_TOKEN', 'bot-token')
    student = make_student('Ali')
    client.post('/api/parents', json={
        'fullName': 'Mom', 'studentId': student['id'], 'telegramChatId': '777',
    }, headers=admin_headers)

    with patch('utils.telegram.requests.post') as post:
        post.return_value = MagicMock(status_code=200)
        r = client.post('/api/attendance', json={'studentId': student['id'], 'status': 'absent'}, headers=admin_headers)
        assert r.status_code == 200
        assert post.call_count == 1
        payload = post.call_args.kwargs['json']
        assert payload['chat_id'] == '777'
        assert 'absent' in payload['text']

        # Present marks are not reported
        client.post('/api/attendance', json={'studentId': student['id'], 'status': 'present'}, headers=admin_headers)
        assert post.call_count == 1


def test_notification_failure_does_not_fail_request(client, app, make_student, admin_headers, monkeypatch):
    monkeypatch.setitem(app.config, 'TELEGRAM_BOT_TOKEN', 'bot-token')
    student = make_student('Ali')
    with app.app_context():
        db.session.add(Parent(admin_id=1, full_name='Dad', phone=encode_parent_metadata({
            'studentId': str(student['id']), 'telegramChatId': '1',
        })))
        db.session.commit()

    with patch('utils.notify.send_telegram_message', side_effect=RuntimeError('boom')):
        r = client.post('/api/attendance', json={'studentId': student['id'], 'status': 'absent'}, headers=admin_headers)
    assert r.status_code == 200


def test_score_create_and_filters(client, make_student, admin_headers):
    client.post('/api/groups', json={'name': 'A1', 'level': 'Intermediate'}, headers=admin_headers)
    student = make_student('Ali', group='A1')
    assert client.post('/api/scores', json={'studentId': student['id'], 'scoreType': 'final'}, headers=admin_headers).status_code == 400
    assert client.post('/api/scores', json={'studentId': 999}, headers=admin_headers).status_code == 400

    r = client.post('/api/scores', json={
        'studentId': student['id'],
        'scoreType': 'mock',
        'breakdown': {'grammar': {'score': 8, 'maxScore': 10}, 'vocabulary': 90},
    }, headers=admin_headers)
    assert r.status_code == 200
    score = r.get_json()
    assert score['overallPercent'] == 85.0
    assert score['value'] == 85.0
    assert score['level'] == 'Intermediate'
    assert score['breakdown']['grammar']['percent'] == 80.0

    client.post('/api/scores', json={'studentId': student['id'], 'value': 70}, headers=admin_headers)
    assert len(client.get(f"/api/scores?studentId={student['id']}", headers=admin_headers).get_json()) == 2
    mocks = client.get('/api/scores?scoreType=mock', headers=admin_headers).get_json()
    assert [s['id'] for s in mocks] == [score['id']]

    r = client.put('/api/scores', json={'id': score['id'], 'overallPercent': 60}, headers=admin_headers)
    assert r.get_json()['overallPercent'] == 60.0
    assert client.delete(f"/api/scores?id={score['id']}", headers=admin_headers).status_code == 200


def test_ranking_uses_latest_score_with_ties(client, make_student, admin_headers):
    ali = make_student('Ali', group='A1')
    bek = make_student('Bek', group='A1')
    cho = make_student('Cho', group='A1')
    make_student('Dan', group='B1')
    for student, value in ((ali, 50), (ali, 90), (bek, 90), (cho, 80)):
        client.post('/api/scores', json={'studentId': student['id'], 'value': value}, headers=admin_headers)

    ranking = client.get('/api/scores/ranking?group=A1&scoreType=weekly', headers=admin_headers).get_json()
    assert [(e['studentName'], e['score'], e['rank']) for e in ranking] == [
        ('Ali', 90.0, 1),
        ('Bek', 90.0, 1),
        ('Cho', 80.0, 3),
    ]
    assert client.get('/api/scores/ranking?group=Z9', headers=admin_headers).get_json() == []
