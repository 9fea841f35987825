from __future__ import annotations

from datetime import datetime
from typing import Any, Dict, Iterable, List


def rank_entries(entries: Iterable[Dict[str, Any]], key: str = "score") -> List[Dict[str, Any]]:
    """Standard competition ranking ("1224"), highest score first.

    Ties share a rank and the next lower score takes its 1-based position,
    so scores ``[90, 90, 80]`` rank ``[1, 1, 3]``. The sort is stable, tied
    entries keep their input order. Input dicts are copied, not mutated.
    """
    ordered = sorted(entries, key=lambda item: float(item.get(key) or 0), reverse=True)
    ranked: List[Dict[str, Any]] = []
    previous_score = None
    rank = 0
    for position, entry in enumerate(ordered, start=1):
        score = float(entry.get(key) or 0)
        if previous_score is None or score < previous_score:
            rank = position
        previous_score = score
        ranked.append({**entry, "rank": rank})
    return ranked


def latest_per_student(scores: Iterable[Any]) -> Dict[int, Any]:
    """Newest score row per student id (rows need ``student_id`` and ``created_at``)."""
    latest: Dict[int, Any] = {}
    for score in scores:
        if score.student_id is None:
            continue
        current = latest.get(score.student_id)
        if current is None or _recency(score) > _recency(current):
            latest[score.student_id] = score
    return latest


def _recency(score: Any):
    return (score.created_at or datetime.min, score.id or 0)
