from enum import Enum

from gymdesk.models.base import Repository, ValidationError
from gymdesk.models.database import MEMBERS_KEY
from gymdesk.utils.helpers import format_timestamp, local_now, parse_timestamp

NO_PLAN = 'None'


class PlanStatus(str, Enum):
    INACTIVE = 'Inactive'
    PENDING_APPROVAL = 'PendingApproval'
    ACTIVE = 'Active'

    @classmethod
    def parse(cls, value):
        if value is None:
            return cls.INACTIVE
        if isinstance(value, cls):
            return value
        return cls(str(value))


class Member:
    """
    Member profile. ``id`` is shared with the owning User record.

    Expiry is never stored here; it is always derived from ``join_date`` and
    the plan duration (see ``gymdesk.utils.membership``).
    """

    def __init__(self, id=None, name=None, email=None, plan=NO_PLAN, join_date=None,
                 plan_status=PlanStatus.INACTIVE):
        self.id = str(id) if id is not None else None
        self.name = name
        self.email = email
        self.plan = plan or NO_PLAN
        self.join_date = parse_timestamp(join_date)
        self.plan_status = PlanStatus.parse(plan_status)

    @classmethod
    def from_dict(cls, data):
        return cls(
            id=data['id'],
            name=data.get('name'),
            email=data.get('email'),
            plan=data.get('plan'),
            join_date=data.get('joinDate'),
            plan_status=data.get('planStatus'),
        )

    def to_dict(self):
        return {
            'id': self.id,
            'name': self.name,
            'email': self.email,
            'plan': self.plan,
            'joinDate': format_timestamp(self.join_date),
            'planStatus': self.plan_status.value,
        }

    # ---------------------------
    # Plan lifecycle
    # ---------------------------
    def request_plan(self, plan_name):
        """Member asks for a plan; an admin has to approve it."""
        if not plan_name or plan_name == NO_PLAN:
            raise ValidationError("Please choose a plan.")
        self.plan = plan_name
        self.plan_status = PlanStatus.PENDING_APPROVAL
        return self

    def approve_plan(self, now=None):
        """Activate the requested plan starting now."""
        if self.plan_status != PlanStatus.PENDING_APPROVAL:
            raise ValidationError(f"{self.name} has no plan request awaiting approval.")
        self.plan_status = PlanStatus.ACTIVE
        self.join_date = now or local_now()
        return self

    def renew(self, now=None):
        """Start another term of the same plan. Plan and status stay as they are."""
        self.join_date = now or local_now()
        return self

    def change_plan(self, plan_name, now=None):
        """Switch to plan_name starting now; the member ends up Active regardless of prior status."""
        if not plan_name:
            raise ValidationError("Please choose a plan.")
        self.plan = plan_name
        self.join_date = now or local_now()
        self.plan_status = PlanStatus.ACTIVE
        return self

    def is_active(self):
        return self.plan_status == PlanStatus.ACTIVE

    def __repr__(self):
        return f"<Member id={self.id} name={self.name} plan={self.plan} status={self.plan_status.value}>"


class MemberRepository(Repository):
    key = MEMBERS_KEY
    model = Member
