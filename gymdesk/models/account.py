"""
Account use cases: a login (User) and its profile (Member or Trainer) are
always created and deleted together.
"""
import logging

from gymdesk.models.base import ValidationError, new_id
from gymdesk.models.member import Member, MemberRepository, PlanStatus, NO_PLAN
from gymdesk.models.trainer import Trainer, TrainerRepository
from gymdesk.models.user import Role, User, UserRepository
from gymdesk.utils.helpers import is_blank, local_now

logger = logging.getLogger(__name__)

DEFAULT_MEMBER_PASSWORD = 'password123'


def _require(*values, message='Please fill in all fields.'):
    if any(is_blank(v) for v in values):
        raise ValidationError(message)


def create_account_with_profile(users, profiles, user, profile):
    """
    Write the login then the profile. The login write refuses a taken username
    or email. If the profile write fails the login is removed again and the
    original error re-raised.
    """
    users.add(user)
    try:
        profiles.add(profile)
    except Exception:
        logger.warning("Profile write failed for user %s; rolling back login", user.id)
        try:
            users.remove(user.id)
        except Exception:
            logger.exception("Rollback of login %s failed; it has no profile", user.id)
        raise
    logger.info("Created %s account %s (%s)", user.role.value, user.id, user.username)
    return user, profile


def delete_account_with_profile(users, profiles, record_id):
    """Remove the profile and its login. Returns the removed profile (None if absent)."""
    profile = profiles.remove(record_id)
    users.remove(record_id)
    if profile is not None:
        logger.info("Deleted account %s", record_id)
    return profile


# ---------------------------
# Members
# ---------------------------
def signup_member(store, name, email, username, password, now=None):
    """Self-service signup. The new member starts with no plan."""
    _require(name, email, username, password)
    record_id = new_id()
    user = User(id=record_id, email=email, username=username, password=password, role=Role.MEMBER)
    member = Member(
        id=record_id,
        name=name,
        email=email,
        plan=NO_PLAN,
        join_date=now or local_now(),
        plan_status=PlanStatus.INACTIVE,
    )
    create_account_with_profile(UserRepository(store), MemberRepository(store), user, member)
    return member


def add_member(store, name, email, plan_name, now=None):
    """Admin adds a member directly on an active plan; the email doubles as username."""
    _require(name, email, plan_name)
    record_id = new_id()
    user = User(
        id=record_id, email=email, username=email,
        password=DEFAULT_MEMBER_PASSWORD, role=Role.MEMBER,
    )
    member = Member(
        id=record_id,
        name=name,
        email=email,
        plan=plan_name,
        join_date=now or local_now(),
        plan_status=PlanStatus.ACTIVE,
    )
    create_account_with_profile(UserRepository(store), MemberRepository(store), user, member)
    return member


def update_member(store, member_id, name=None, email=None, plan_name=None):
    """
    Admin edit of name/email/plan. Plan status is left alone. A new email is
    written to the login first; if another user owns it nothing is saved.
    """
    members = MemberRepository(store)
    with members.editing() as items:
        member = next((m for m in items if m.id == str(member_id)), None)
        if member is None:
            return None
        if name is not None:
            _require(name)
            member.name = name
        if email is not None:
            _require(email)
            UserRepository(store).change_email(member.id, email)
            member.email = email
        if plan_name is not None:
            member.plan = plan_name or NO_PLAN
    return member


# ---------------------------
# Trainers
# ---------------------------
def add_trainer(store, name, specialty, salary, email, username, password):
    _require(name, specialty, email, username, password)
    record_id = new_id()
    user = User(id=record_id, email=email, username=username, password=password, role=Role.TRAINER)
    trainer = Trainer(id=record_id, name=name, specialty=specialty, salary=salary)
    create_account_with_profile(UserRepository(store), TrainerRepository(store), user, trainer)
    return trainer


# ---------------------------
# Login
# ---------------------------
def authenticate(store, login, password):
    """Match by email or username and plaintext password; returns the session payload or None."""
    if is_blank(login) or is_blank(password):
        return None
    user = UserRepository(store).find_by_login(login)
    if user is None or user.password != password:
        logger.info("Failed login for %r", login)
        return None
    return user.session_payload()
