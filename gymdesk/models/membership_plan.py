# models/membership_plan.py
from gymdesk.models.base import Repository, ValidationError
from gymdesk.models.database import PLANS_KEY


class MembershipPlan:
    """
    MembershipPlan model with validation.

    Fields:
      - id, name (unique display key), price (number >= 0), duration (days, int >= 1)

    Members reference plans by name, not id. Renaming a plan therefore leaves
    members on the old name without a plan to resolve against.
    """

    def __init__(self, id=None, name=None, price=None, duration=None):
        self.id = str(id) if id is not None else None
        self.name = name.strip() if isinstance(name, str) else name
        self.price = price
        self.duration = duration

    @classmethod
    def from_dict(cls, data):
        return cls(
            id=data['id'],
            name=data.get('name'),
            price=data.get('price'),
            duration=data.get('duration'),
        )

    def to_dict(self):
        return {
            'id': self.id,
            'name': self.name,
            'price': self.price,
            'duration': self.duration,
        }

    # ----------------- Validation -----------------
    def validate(self):
        """Validate and normalise fields. Raises ValidationError on invalid data."""
        if not self.name:
            raise ValidationError("Plan name is required.")
        if self.duration is None or self.duration == '':
            raise ValidationError("duration is required and must be a whole number of days >= 1.")
        try:
            duration = int(self.duration)
        except (TypeError, ValueError):
            raise ValidationError("duration must be a whole number of days.")
        if duration < 1:
            raise ValidationError("duration must be at least 1 day.")
        if self.price is None or self.price == '':
            raise ValidationError("price is required and must be >= 0.")
        try:
            price = float(self.price)
        except (TypeError, ValueError):
            raise ValidationError("price must be a number.")
        if price < 0:
            raise ValidationError("price must be >= 0.")
        self.duration = duration
        self.price = int(price) if price.is_integer() else price
        return self

    def __repr__(self):
        return f"<MembershipPlan id={self.id} name={self.name} price={self.price} duration={self.duration}>"


class PlanRepository(Repository):
    key = PLANS_KEY
    model = MembershipPlan

    def find_by_name(self, name):
        return next((p for p in self.all() if p.name == name), None)

    def add(self, plan):
        plan.validate()
        with self.editing() as plans:
            if any(p.name == plan.name for p in plans):
                raise ValidationError(f"A plan named '{plan.name}' already exists.")
            plans.append(plan)
        return plan

    def replace(self, plan):
        plan.validate()
        with self.editing() as plans:
            if any(p.name == plan.name and p.id != plan.id for p in plans):
                raise ValidationError(f"A plan named '{plan.name}' already exists.")
            for i, existing in enumerate(plans):
                if existing.id == plan.id:
                    plans[i] = plan
                    return True
        return False
