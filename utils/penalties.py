"""Late-payment penalty and due-date helpers.

Nothing here is stored: the penalty is recomputed from the payment's dates on
every read, so an unpaid invoice keeps growing until it is marked paid.
"""
from __future__ import annotations

import math
from dataclasses import dataclass
from datetime import date, datetime
from typing import Any, Dict, Optional, Union

from utils.timezone_helpers import local_now

DEFAULT_PENALTY_PER_DAY = 10000
DUE_SOON_WINDOW_DAYS = 3
PAYMENT_STATUSES = ("pending", "paid", "overdue")

DateLike = Union[date, datetime, str, None]


@dataclass(frozen=True)
class PenaltySummary:
    overdue_days: int
    penalty_amount: float
    total_due: float
    is_overdue: bool
    display_status: str

    def to_dict(self) -> Dict[str, Any]:
        return {
            "overdueDays": self.overdue_days,
            "penaltyAmount": self.penalty_amount,
            "totalDue": self.total_due,
            "isOverdue": self.is_overdue,
            "displayStatus": self.display_status,
        }


def parse_date(value: DateLike) -> Optional[Union[date, datetime]]:
    """Accept a date, a datetime or an ISO string ("2024-10-01" / full timestamp)."""
    if value is None or value == "":
        return None
    if isinstance(value, (date, datetime)):
        return value
    text = str(value).strip()
    try:
        if len(text) == 10:
            return date.fromisoformat(text)
        return datetime.fromisoformat(text.replace("Z", "+00:00"))
    except ValueError:
        return None


def _now(now: Optional[datetime]) -> datetime:
    return now if now is not None else local_now()


def _align(now: datetime, moment: datetime) -> datetime:
    # Compare naive with naive and aware with aware
    if moment.tzinfo is None and now.tzinfo is not None:
        return now.replace(tzinfo=None)
    if moment.tzinfo is not None and now.tzinfo is None:
        return now.replace(tzinfo=moment.tzinfo)
    return now


def _elapsed_days(end: Union[date, datetime], now: datetime) -> float:
    """Days elapsed since ``end``; calendar days when ``end`` is a plain date."""
    if isinstance(end, datetime):
        current = _align(now, end)
        return (current - end).total_seconds() / 86400
    return float((now.date() - end).days)


def calculate_penalty(
    status: str,
    amount: float,
    end_date: DateLike,
    due_date: DateLike = None,
    penalty_per_day: Optional[float] = DEFAULT_PENALTY_PER_DAY,
    now: Optional[datetime] = None,
) -> PenaltySummary:
    amount = float(amount or 0)
    rate = DEFAULT_PENALTY_PER_DAY if penalty_per_day is None else float(penalty_per_day)
    end = parse_date(end_date) or parse_date(due_date)

    elapsed = _elapsed_days(end, _now(now)) if end is not None else 0.0
    if status == "paid" or end is None or elapsed <= 0:
        return PenaltySummary(0, 0.0, amount, False, status)

    overdue_days = max(1, math.floor(elapsed))
    penalty = overdue_days * rate
    return PenaltySummary(overdue_days, penalty, amount + penalty, True, "overdue")


def days_until_due(due_date: DateLike, now: Optional[datetime] = None) -> Optional[int]:
    due = parse_date(due_date)
    if due is None:
        return None
    return math.floor(-_elapsed_days(due, _now(now)))


def is_due_soon(
    status: str,
    due_date: DateLike,
    now: Optional[datetime] = None,
    window_days: int = DUE_SOON_WINDOW_DAYS,
) -> bool:
    if status == "paid":
        return False
    remaining = days_until_due(due_date, now)
    return remaining is not None and 0 <= remaining <= window_days


def describe_payment(
    payment: Dict[str, Any],
    now: Optional[datetime] = None,
    window_days: int = DUE_SOON_WINDOW_DAYS,
) -> Dict[str, Any]:
    """Serialised payment plus penalty, due-soon flag and a warning line."""
    summary = calculate_penalty(
        payment.get("status") or "pending",
        payment.get("amount") or 0,
        payment.get("endDate"),
        payment.get("dueDate"),
        payment.get("penaltyPerDay"),
        now=now,
    )
    due = payment.get("endDate") or payment.get("dueDate")
    remaining = days_until_due(due, now)
    due_soon = is_due_soon(payment.get("status") or "pending", due, now, window_days)

    warning = None
    if summary.is_overdue:
        warning = "Deadline passed. Penalty is increasing daily."
    elif due_soon:
        warning = "Payment is due today." if remaining == 0 else f"Payment is due in {remaining} day(s)."

    return {
        **payment,
        **summary.to_dict(),
        "isDueSoon": due_soon,
        "daysUntilDue": remaining,
        "warning": warning,
    }
