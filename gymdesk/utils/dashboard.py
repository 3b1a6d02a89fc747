"""JSON-ready views shared by the blueprints."""
from gymdesk.utils.helpers import format_currency, format_timestamp
from gymdesk.utils.membership import compute_expiry, select_renewals
from gymdesk.utils.revenue import aggregate_revenue, this_month_revenue

RECENT_MEMBERS = 5


def member_json(member, plans, today=None):
    expiry = compute_expiry(member, plans, today=today)
    data = member.to_dict()
    data['expiryDate'] = format_timestamp(expiry.expiry_date)
    data['isExpired'] = expiry.is_expired
    return data


def revenue_json(months):
    return [
        {
            'label': m.label,
            'year': m.year,
            'month': m.month,
            'revenue': str(m.revenue),
            'formatted': format_currency(m.revenue),
        }
        for m in months
    ]


def renewals_json(members, plans, today=None):
    return [
        {
            'member': member.to_dict(),
            'expiryDate': format_timestamp(expiry_date),
        }
        for member, expiry_date in select_renewals(members, plans, today=today)
    ]


def admin_dashboard(members, plans, inventory_counts, window=6, today=None):
    """
    Admin overview: headline counts, this month's revenue, the revenue chart,
    lapsed plans and the newest members.
    """
    revenue = this_month_revenue(members, plans, today=today)
    recent = sorted(
        (m for m in members if m.join_date is not None),
        key=lambda m: m.join_date,
        reverse=True,
    )[:RECENT_MEMBERS]
    return {
        'totalMembers': len(members),
        'activePlans': sum(1 for m in members if m.is_active()),
        'revenueThisMonth': str(revenue),
        'revenueThisMonthFormatted': format_currency(revenue),
        'revenueChart': revenue_json(aggregate_revenue(members, plans, window=window, today=today)),
        'pendingRenewals': renewals_json(members, plans, today=today),
        'recentMembers': [m.to_dict() for m in recent],
        'inventory': inventory_counts,
    }
