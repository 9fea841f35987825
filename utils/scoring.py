from __future__ import annotations

import math
from typing import Any, Dict, Optional

SCORE_TYPES = ("weekly", "mock")

# Skills graded at each group level
LEVEL_CRITERIA = {
    "Beginner": ["grammar", "vocabulary", "vocabulary_writing", "pronunciation", "class_participation"],
    "Elementary": ["grammar", "vocabulary", "reading", "writing", "pronunciation", "class_participation"],
    "Intermediate": ["grammar", "vocabulary", "speaking", "reading", "writing", "listening"],
    "Advanced": ["grammar", "vocabulary", "speaking", "reading", "writing", "listening", "presentation"],
}

# Body keys that are never treated as a skill metric
_KNOWN_KEYS = {
    "id", "studentId", "studentName", "value", "subject", "createdAt", "adminId",
    "scoreType", "level", "breakdown", "overallPercent", "maxScore",
}


def _number(value: Any) -> Optional[float]:
    if isinstance(value, bool):
        return None
    try:
        number = float(value) if isinstance(value, (int, float)) else float(str(value).strip())
    except (TypeError, ValueError, OverflowError):
        return None
    return number if math.isfinite(number) else None


def _percent(score: float, max_score: float) -> float:
    if max_score <= 0:
        return 0.0
    percent = score / max_score * 100
    return round(percent, 2) if math.isfinite(percent) else 0.0


def normalize_breakdown(raw: Any) -> Dict[str, Dict[str, float]]:
    """Normalise a breakdown into ``{category: {score, maxScore, percent}}``.

    A category may be given as ``{"score": 8, "maxScore": 10}`` or as a bare
    number, which is read as a percentage (max 100). Unparseable entries are
    skipped.
    """
    if not isinstance(raw, dict):
        return {}
    breakdown: Dict[str, Dict[str, float]] = {}
    for category, item in raw.items():
        if isinstance(item, dict):
            score = _number(item.get("score"))
            max_score = _number(item.get("maxScore"))
            if max_score is None:
                max_score = 100.0
        else:
            score = _number(item)
            max_score = 100.0
        if score is None:
            continue
        breakdown[str(category)] = {
            "score": score,
            "maxScore": max_score,
            "percent": _percent(score, max_score),
        }
    return breakdown


def overall_percent(breakdown: Dict[str, Dict[str, float]], fallback: Any = None) -> float:
    if breakdown:
        percents = [item["percent"] for item in breakdown.values()]
        return round(sum(percents) / len(percents), 2)
    value = _number(fallback) if fallback is not None else None
    return value if value is not None else 0.0


def extract_score_payload(body: Dict[str, Any]) -> Dict[str, Any]:
    """Breakdown, overall percent and subject from a score create/update body.

    Besides an explicit ``breakdown`` the older flat form is accepted, where
    every numeric top-level field (``grammar: 80``) is one skill.
    """
    raw = body.get("breakdown")
    if not isinstance(raw, dict) or not raw:
        raw = {
            key: value
            for key, value in body.items()
            if key not in _KNOWN_KEYS and isinstance(value, (int, float)) and not isinstance(value, bool)
        }
    breakdown = normalize_breakdown(raw)
    fallback = body.get("overallPercent")
    if fallback is None:
        fallback = body.get("value")
    return {
        "breakdown": breakdown,
        "overall_percent": overall_percent(breakdown, fallback),
        "subject": body.get("subject") or "overall",
    }
