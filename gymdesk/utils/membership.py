"""
Plan expiry and renewal selection.

Expiry is always derived from the member's join date and the duration of the
plan they reference by name; nothing here is ever persisted.
"""
from collections import namedtuple
from datetime import timedelta

from gymdesk.models.member import PlanStatus
from gymdesk.utils.helpers import local_today, parse_day

Expiry = namedtuple('Expiry', ['expiry_date', 'is_expired'])

NO_EXPIRY = Expiry(None, False)


def _plan_duration(plan_name, plans):
    """Duration in days of the plan named plan_name, or None if unknown/unusable."""
    for plan in plans:
        if plan.name == plan_name:
            try:
                days = int(plan.duration)
            except (TypeError, ValueError):
                return None
            return days if days > 0 else None
    return None


def compute_expiry(member, plans, today=None):
    """
    Return ``Expiry(expiry_date, is_expired)`` for member.

    Only Active members with a known plan and a join date have an expiry;
    everyone else gets ``(None, False)``. ``expiry_date`` is a datetime
    (join date plus the plan duration in calendar days) and the member is
    expired once that date lies strictly before today.
    """
    if member.plan_status != PlanStatus.ACTIVE or member.join_date is None:
        return NO_EXPIRY
    days = _plan_duration(member.plan, plans)
    if days is None:
        return NO_EXPIRY

    expiry_date = member.join_date + timedelta(days=days)
    today = parse_day(today) if today is not None else local_today()
    return Expiry(expiry_date, expiry_date.date() < today)


def select_renewals(members, plans, today=None):
    """
    Active members whose plan has lapsed, as ``(member, expiry_date)`` pairs,
    most overdue first. Members with the same expiry keep their input order.
    """
    lapsed = []
    for member in members:
        expiry = compute_expiry(member, plans, today=today)
        if expiry.is_expired:
            lapsed.append((member, expiry.expiry_date))
    return sorted(lapsed, key=lambda pair: pair[1])
