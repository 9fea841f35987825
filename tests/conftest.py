import os
import sys

sys.path.insert(0, os.path.abspath(os.path.join(os.path.dirname(__file__), '..')))

# Must be set before the app (and Config) is imported
os.environ.update({
    'SQLALCHEMY_DATABASE_URI': 'sqlite://',
    'SECRET_KEY': 'test-secret',
    'TASKS_EAGER': '1',
    'RATELIMIT_ENABLED': '0',
    'ENFORCE_HTTPS': '0',
    'ENABLE_SCHEDULER': '0',
    'APP_TIMEZONE': 'Asia/Tashkent',
    'TELEGRAM_BOT_TOKEN': '',
    'TELEGRAM_WEBHOOK_SECRET': '',
    'TWILIO_ACCOUNT_SID': '',
    'TWILIO_AUTH_TOKEN': '',
    'TWILIO_FROM_NUMBER': '',
    'UPLOAD_TOKEN_SECRET': 'test-upload-secret',
    'BLOB_BASE_URL': 'https://blob.test',
})

import pytest

from app import app as flask_app
from extensions import db


@pytest.fixture
def app():
    flask_app.testing = True
    with flask_app.app_context():
        db.drop_all()
        db.create_all()
    yield flask_app
    with flask_app.app_context():
        db.session.remove()
        db.drop_all()


@pytest.fixture
def client(app):
    return app.test_client()


@pytest.fixture
def admin_headers():
    return {'x-admin-id': '1'}


@pytest.fixture
def make_student(client, admin_headers):
    def _make(name='Ali Valiyev', group='A1', headers=None, **extra):
        body = {'fullName': name, 'group': group, **extra}
        r = client.post('/api/students', json=body, headers=headers or admin_headers)
        assert r.status_code == 200, r.get_json()
        return r.get_json()
    return _make
