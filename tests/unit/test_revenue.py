from datetime import date
from decimal import Decimal
import pytest

from gymdesk.models.member import PlanStatus
from gymdesk.models.membership_plan import MembershipPlan
from gymdesk.utils.revenue import (
    MonthRevenue, aggregate_revenue, monthly_revenue, this_month_revenue,
)


def test_march_revenue_is_exact(make_member, plans):
    members = [
        make_member(plan="1 Month", join_date="2025-03-05"),
        make_member(plan="3 Months", join_date="2025-03-20"),
    ]
    assert monthly_revenue(members, plans, 2025, 3) == Decimal("170")

    chart = aggregate_revenue(members, plans, window=6, today=date(2025, 3, 31))
    assert chart[-1] == MonthRevenue("Mar", 2025, 3, Decimal("170"))


def test_missing_plan_contributes_zero(make_member, plans):
    members = [
        make_member(plan="1 Month", join_date="2025-03-05"),
        make_member(plan="Retired Plan", join_date="2025-03-06"),
    ]
    assert monthly_revenue(members, plans, 2025, 3) == Decimal("50")


def test_join_date_outside_month_is_ignored(make_member, plans):
    members = [
        make_member(plan="1 Month", join_date="2025-02-28T23:59:59"),
        make_member(plan="1 Month", join_date="2024-03-10"),
        make_member(plan="1 Month", join_date=None),
    ]
    assert monthly_revenue(members, plans, 2025, 3) == Decimal(0)


def test_plan_status_does_not_matter(make_member, plans):
    member = make_member(plan="3 Months", join_date="2025-03-05", status=PlanStatus.INACTIVE)
    assert monthly_revenue([member], plans, 2025, 3) == Decimal("120")


def test_decimal_prices_do_not_drift(make_member):
    plans = [MembershipPlan(id="1", name="Dime", price=0.1, duration=1)]
    members = [make_member(plan="Dime", join_date="2025-03-01") for _ in range(3)]
    assert monthly_revenue(members, plans, 2025, 3) == Decimal("0.3")


@pytest.mark.parametrize("window, expected", [
    (6, ["Oct", "Nov", "Dec", "Jan", "Feb", "Mar"]),
    ("6M", ["Oct", "Nov", "Dec", "Jan", "Feb", "Mar"]),
    (12, ["Apr", "May", "Jun", "Jul", "Aug", "Sep", "Oct", "Nov", "Dec", "Jan", "Feb", "Mar"]),
    ("1Y", ["Apr", "May", "Jun", "Jul", "Aug", "Sep", "Oct", "Nov", "Dec", "Jan", "Feb", "Mar"]),
])
def test_window_spans_year_boundary(window, expected, plans):
    chart = aggregate_revenue([], plans, window=window, today=date(2025, 3, 15))
    assert [m.label for m in chart] == expected
    assert (chart[0].year, chart[-1].year) == (2024, 2025)
    assert all(m.revenue == 0 for m in chart)


@pytest.mark.parametrize("window", [3, "3M", None, "6m", True])
def test_unsupported_window_is_rejected(window, plans):
    with pytest.raises(ValueError):
        aggregate_revenue([], plans, window=window, today=date(2025, 3, 15))


def test_chart_buckets_each_month(make_member, plans):
    members = [
        make_member(plan="1 Month", join_date="2025-01-15"),
        make_member(plan="6 Months", join_date="2025-01-20"),
        make_member(plan="3 Months", join_date="2024-12-01"),
        make_member(plan="1 Month", join_date="2024-06-01"),  # outside the 6 month window
    ]
    chart = aggregate_revenue(members, plans, window=6, today=date(2025, 3, 1))
    totals = {(m.year, m.month): m.revenue for m in chart}
    assert totals[(2025, 1)] == Decimal("250")
    assert totals[(2024, 12)] == Decimal("120")
    assert sum(totals.values()) == Decimal("370")


def test_this_month_revenue(make_member, plans):
    members = [
        make_member(plan="6 Months", join_date="2025-07-01"),
        make_member(plan="1 Month", join_date="2025-06-30"),
    ]
    assert this_month_revenue(members, plans, today=date(2025, 7, 18)) == Decimal("200")
