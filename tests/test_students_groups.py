from extensions import db
from models import Student
from utils.security import is_hashed


def test_create_student_defaults(client, admin_headers, app):
    r = client.post('/api/students', json={'fullName': 'Ali Valiyev'}, headers=admin_headers)
    assert r.status_code == 200
    data = r.get_json()
    assert data['username'].startswith('user_')
    assert data['email'].endswith('@test.com')
    assert data['status'] == 'active'
    assert data['adminId'] == 1
    assert 'password' not in data
    with app.app_context():
        assert is_hashed(db.session.get(Student, data['id']).password)


def test_duplicate_username_and_bad_status(client, admin_headers):
    assert client.post('/api/students', json={'fullName': 'A', 'username': 'ali'}, headers=admin_headers).status_code == 200
    r = client.post('/api/students', json={'fullName': 'B', 'username': 'ali'}, headers=admin_headers)
    assert r.status_code == 400
    r = client.post('/api/students', json={'fullName': 'C', 'status': 'graduated'}, headers=admin_headers)
    assert r.status_code == 400


def test_list_is_scoped_by_admin(client, make_student):
    make_student('Ali', headers={'x-admin-id': '1'})
    make_student('Bek', headers={'x-admin-id': '2'})
    names = [s['fullName'] for s in client.get('/api/students', headers={'x-admin-id': '1'}).get_json()]
    assert names == ['Ali']
    assert len(client.get('/api/students').get_json()) == 2


def test_update_and_delete_outside_scope_is_404(client, make_student):
    student = make_student('Ali', headers={'x-admin-id': '1'})
    other = {'x-admin-id': '2'}
    assert client.put('/api/students', json={'id': student['id'], 'fullName': 'X'}, headers=other).status_code == 404
    assert client.delete(f"/api/students/{student['id']}", headers=other).status_code == 404
    assert client.delete('/api/students?id=999', headers={'x-admin-id': '1'}).status_code == 404


def test_update_student_by_body_and_path(client, make_student, admin_headers):
    student = make_student('Ali')
    r = client.put('/api/students', json={'id': student['id'], 'fullName': 'Ali V.', 'group': 'B2'}, headers=admin_headers)
    assert r.status_code == 200
    assert r.get_json()['fullName'] == 'Ali V.'
    assert r.get_json()['group'] == 'B2'

    r = client.put(f"/api/students/{student['id']}", json={'status': 'inactive'}, headers=admin_headers)
    assert r.get_json()['status'] == 'inactive'

    assert client.delete(f"/api/students?id={student['id']}", headers=admin_headers).get_json() == {'success': True}
    assert client.get('/api/students', headers=admin_headers).get_json() == []


def test_group_lifecycle(client, make_student, admin_headers):
    assert client.post('/api/groups', json={}, headers=admin_headers).status_code == 400
    assert client.post('/api/groups', json={'name': 'A1', 'level': 'Expert'}, headers=admin_headers).status_code == 400

    group = client.post('/api/groups', json={'name': 'A1', 'level': 'Beginner'}, headers=admin_headers).get_json()
    make_student('Ali', group='A1')
    make_student('Bek', group='A1')

    listed = client.get('/api/groups', headers=admin_headers).get_json()
    assert listed[0]['studentCount'] == 2

    details = client.get(f"/api/groups/{group['id']}", headers=admin_headers).get_json()
    assert sorted(s['fullName'] for s in details['students']) == ['Ali', 'Bek']

    # Renaming carries the students along
    r = client.put(f"/api/groups/{group['id']}", json={'name': 'A1-morning'}, headers=admin_headers)
    assert r.get_json()['studentCount'] == 2
    groups = {s['group'] for s in client.get('/api/students', headers=admin_headers).get_json()}
    assert groups == {'A1-morning'}

    assert client.delete(f"/api/groups?id={group['id']}", headers=admin_headers).status_code == 200
    groups = {s['group'] for s in client.get('/api/students', headers=admin_headers).get_json()}
    assert groups == {'Not Assigned'}
    assert client.get(f"/api/groups/{group['id']}", headers=admin_headers).status_code == 404
