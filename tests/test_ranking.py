from datetime import datetime
from types import SimpleNamespace

from utils.ranking import latest_per_student, rank_entries


def test_competition_ranking_with_ties():
    entries = [
        {'studentName': 'A', 'score': 90},
        {'studentName': 'B', 'score': 80},
        {'studentName': 'C', 'score': 90},
    ]
    ranked = rank_entries(entries)
    assert [(e['studentName'], e['rank']) for e in ranked] == [('A', 1), ('C', 1), ('B', 3)]
    assert 'rank' not in entries[0]


def test_single_entry_is_first():
    assert rank_entries([{'score': 12}])[0]['rank'] == 1


def test_empty_input():
    assert rank_entries([]) == []


def test_latest_per_student_picks_newest():
    rows = [
        SimpleNamespace(id=1, student_id=1, created_at=datetime(2024, 1, 1), overall_percent=50),
        SimpleNamespace(id=2, student_id=1, created_at=datetime(2024, 2, 1), overall_percent=90),
        SimpleNamespace(id=3, student_id=2, created_at=None, overall_percent=70),
        SimpleNamespace(id=4, student_id=None, created_at=datetime(2024, 3, 1), overall_percent=10),
    ]
    latest = latest_per_student(rows)
    assert set(latest) == {1, 2}
    assert latest[1].overall_percent == 90
    assert latest[2].id == 3
