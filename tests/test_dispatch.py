import logging
import threading

from flask import has_app_context

from utils.dispatch import queue_task


def test_eager_task_errors_are_logged_not_raised(app, caplog):
    def boom():
        raise RuntimeError('provider down')

    with app.app_context(), caplog.at_level(logging.ERROR):
        queue_task(boom)
    assert 'Queued task boom failed' in caplog.text


def test_background_task_runs_in_app_context(app, monkeypatch):
    monkeypatch.setitem(app.config, 'TASKS_EAGER', False)
    done = threading.Event()
    seen = {}

    def record(value):
        seen['value'] = value
        seen['context'] = has_app_context()
        done.set()

    with app.app_context():
        queue_task(record, 42)
    assert done.wait(timeout=5)
    assert seen == {'value': 42, 'context': True}
