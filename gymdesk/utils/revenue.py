from collections import namedtuple
from decimal import Decimal

from dateutil.relativedelta import relativedelta

from gymdesk.utils.helpers import local_today, parse_day, to_decimal

MonthRevenue = namedtuple('MonthRevenue', ['label', 'year', 'month', 'revenue'])

WINDOWS = {
    6: 6,
    12: 12,
    '6M': 6,
    '1Y': 12,
}


def _window_months(window):
    if isinstance(window, bool):
        raise ValueError(f"Unsupported revenue window: {window!r}")
    try:
        return WINDOWS[window]
    except (KeyError, TypeError):
        raise ValueError(f"Unsupported revenue window: {window!r} (use 6, 12, '6M' or '1Y')")


def _plan_price(plan_name, plans):
    for plan in plans:
        if plan.name == plan_name:
            return to_decimal(plan.price)
    return Decimal(0)


def monthly_revenue(members, plans, year, month):
    """Sum of plan prices for members who joined in the given calendar month."""
    total = Decimal(0)
    for member in members:
        joined = member.join_date
        if joined is None or joined.year != year or joined.month != month:
            continue
        total += _plan_price(member.plan, plans)
    return total


def this_month_revenue(members, plans, today=None):
    today = parse_day(today) if today is not None else local_today()
    return monthly_revenue(members, plans, today.year, today.month)


def aggregate_revenue(members, plans, window=6, today=None):
    """
    Revenue per month for the ``window`` months ending with the current one,
    oldest first, each labelled with the short month name.
    """
    months = _window_months(window)
    today = parse_day(today) if today is not None else local_today()
    current = today.replace(day=1)

    result = []
    for offset in range(months - 1, -1, -1):
        start = current - relativedelta(months=offset)
        result.append(MonthRevenue(
            label=start.strftime('%b'),
            year=start.year,
            month=start.month,
            revenue=monthly_revenue(members, plans, start.year, start.month),
        ))
    return result
