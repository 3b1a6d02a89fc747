# models/inventory.py
from gymdesk.models.base import Repository, ValidationError
from gymdesk.models.database import INVENTORY_KEY

CATEGORIES = ['Equipment', 'Supplies', 'For Sale', 'Other']
STATUSES = ['Operational', 'Needs Maintenance', 'In Stock', 'Low Stock', 'Out']


class InventoryItem:
    def __init__(self, id=None, name=None, category='Equipment', quantity=1, status='Operational'):
        self.id = str(id) if id is not None else None
        self.name = name.strip() if isinstance(name, str) else name
        self.category = category
        self.quantity = quantity
        self.status = status

    @classmethod
    def from_dict(cls, data):
        return cls(
            id=data['id'],
            name=data.get('name'),
            category=data.get('category'),
            quantity=data.get('quantity', 1),
            status=data.get('status'),
        )

    def to_dict(self):
        return {
            'id': self.id,
            'name': self.name,
            'category': self.category,
            'quantity': self.quantity,
            'status': self.status,
        }

    # ---------------------------
    # Validation
    # ---------------------------
    def validate(self):
        if not self.name:
            raise ValidationError("Item name is required.")
        if not self.category:
            raise ValidationError("Category is required.")
        if self.category not in CATEGORIES:
            raise ValidationError(f"Unknown category '{self.category}'.")
        if self.status not in STATUSES:
            raise ValidationError(f"Unknown status '{self.status}'.")
        if self.quantity is None or self.quantity == '':
            self.quantity = 1
        try:
            quantity = float(self.quantity)
        except (TypeError, ValueError):
            raise ValidationError("Quantity must be a whole number.")
        if not quantity.is_integer() or quantity < 0:
            raise ValidationError("Quantity must be a whole number >= 0.")
        self.quantity = int(quantity)
        return self

    def __repr__(self):
        return f"<InventoryItem id={self.id} name={self.name} status={self.status}>"

    def __str__(self):
        return f"{self.name} ({self.category}) - {self.status}"


class InventoryRepository(Repository):
    key = INVENTORY_KEY
    model = InventoryItem

    def add(self, item):
        item.validate()
        return super().add(item)

    def replace(self, item):
        item.validate()
        return super().replace(item)

    def count_by_status(self):
        """Item count per status, every known status present (0 if none)."""
        counts = {status: 0 for status in STATUSES}
        for item in self.all():
            counts[item.status] = counts.get(item.status, 0) + 1
        return counts
