from enum import Enum

from gymdesk.models.base import Repository, ValidationError
from gymdesk.models.database import USERS_KEY


class Role(str, Enum):
    ADMIN = 'admin'
    TRAINER = 'trainer'
    MEMBER = 'member'

    @classmethod
    def parse(cls, value):
        if isinstance(value, cls):
            return value
        return cls(str(value).strip().lower())


class User:
    """
    Login credential record.

    Passwords are kept in plaintext, exactly as the stored data has them.
    """

    def __init__(self, id=None, email=None, username=None, password=None, role=Role.MEMBER):
        self.id = str(id) if id is not None else None
        self.email = email
        self.username = username
        self.password = password
        self.role = Role.parse(role)

    @classmethod
    def from_dict(cls, data):
        return cls(
            id=data['id'],
            email=data.get('email'),
            username=data.get('username'),
            password=data.get('password'),
            role=data.get('role', Role.MEMBER),
        )

    def to_dict(self):
        return {
            'id': self.id,
            'email': self.email,
            'username': self.username,
            'password': self.password,
            'role': self.role.value,
        }

    def session_payload(self):
        """What the session keeps about the logged-in user (no password)."""
        return {
            'id': self.id,
            'username': self.username,
            'email': self.email,
            'role': self.role.value,
        }

    def __repr__(self):
        return f"<User id={self.id} username={self.username} role={self.role.value}>"


class UserRepository(Repository):
    key = USERS_KEY
    model = User

    def find_by_login(self, login):
        """Match on email or username."""
        for user in self.all():
            if login and (user.email == login or user.username == login):
                return user
        return None

    def add(self, user):
        """Append a login; username and email must both be unused."""
        with self.editing() as logins:
            if any(u.username == user.username for u in logins):
                raise ValidationError("Username already exists.")
            if any(u.email == user.email for u in logins):
                raise ValidationError("Email already registered.")
            logins.append(user)
        return user

    def change_email(self, user_id, email):
        """Point a login at a new email. Returns False if there is no such login."""
        user_id = str(user_id)
        with self.editing() as logins:
            if any(u.email == email and u.id != user_id for u in logins):
                raise ValidationError("A user with this email already exists.")
            for user in logins:
                if user.id == user_id:
                    user.email = email
                    return True
        return False
