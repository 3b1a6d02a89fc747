from gymdesk.models.base import Repository
from gymdesk.models.database import TRAINERS_KEY


def _salary(value):
    """Blank or non-numeric salaries count as 0."""
    if value is None or value == '' or isinstance(value, bool):
        return 0
    try:
        number = float(value)
    except (TypeError, ValueError):
        return 0
    return int(number) if number.is_integer() else number


class Trainer:
    """Public trainer profile, paired 1:1 with a trainer User."""

    def __init__(self, id=None, name=None, specialty=None, salary=0):
        self.id = str(id) if id is not None else None
        self.name = name
        self.specialty = specialty
        self.salary = _salary(salary)

    @classmethod
    def from_dict(cls, data):
        return cls(
            id=data['id'],
            name=data.get('name'),
            specialty=data.get('specialty'),
            salary=data.get('salary'),
        )

    def to_dict(self):
        return {
            'id': self.id,
            'name': self.name,
            'specialty': self.specialty,
            'salary': self.salary,
        }

    def update_details(self, name=None, specialty=None, salary=None):
        if name is not None:
            self.name = name
        if specialty is not None:
            self.specialty = specialty
        if salary is not None:
            self.salary = _salary(salary)
        return self

    def __repr__(self):
        return f"<Trainer id={self.id} name={self.name} specialty={self.specialty}>"


class TrainerRepository(Repository):
    key = TRAINERS_KEY
    model = Trainer
