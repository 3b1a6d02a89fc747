import pytest

from gymdesk.app import create_app
from gymdesk.models.database import MemoryKeyValueStore, insert_default_data
from gymdesk.models.member import Member, PlanStatus
from gymdesk.models.membership_plan import MembershipPlan


# -------------------------------------------------------------------
# Flask app fixture (used by route and system tests)
# -------------------------------------------------------------------
@pytest.fixture()
def flask_app():
    """App on an in-memory store seeded with the default gym data."""
    app = create_app({
        "TESTING": True,
        "SECRET_KEY": "test-secret-key",
        "STORE_BACKEND": "memory",
        "SEED_DEFAULT_DATA": True,
    })
    yield app


@pytest.fixture()
def client(flask_app):
    """Flask test client fixture."""
    return flask_app.test_client()


@pytest.fixture()
def store():
    """Empty in-memory store."""
    return MemoryKeyValueStore()


@pytest.fixture()
def seeded_store():
    store = MemoryKeyValueStore()
    insert_default_data(store)
    return store


# -------------------------------------------------------------------
# Login helpers (seeded credentials)
# -------------------------------------------------------------------
def _login(client, username, password):
    resp = client.post("/auth/login", json={"username": username, "password": password})
    assert resp.status_code == 200, resp.get_json()
    return resp.get_json()["user"]


@pytest.fixture()
def admin_client(client):
    _login(client, "admin", "admin")
    return client


@pytest.fixture()
def member_client(client):
    """Logged in as Alice (member 101)."""
    _login(client, "alice", "password123")
    return client


@pytest.fixture()
def trainer_client(client):
    """Logged in as Alex Costa (trainer t1)."""
    _login(client, "alex", "trainer123")
    return client


# -------------------------------------------------------------------
# Plain object factories
# -------------------------------------------------------------------
@pytest.fixture()
def plans():
    return [
        MembershipPlan(id="1", name="1 Month", price=50, duration=30),
        MembershipPlan(id="2", name="3 Months", price=120, duration=90),
        MembershipPlan(id="3", name="6 Months", price=200, duration=180),
    ]


@pytest.fixture()
def make_member():
    counter = {"n": 0}

    def _make(plan="1 Month", join_date="2025-03-05T00:00:00", status=PlanStatus.ACTIVE, **kwargs):
        counter["n"] += 1
        return Member(
            id=kwargs.pop("id", f"m{counter['n']}"),
            name=kwargs.pop("name", f"Member {counter['n']}"),
            email=kwargs.pop("email", f"m{counter['n']}@example.com"),
            plan=plan,
            join_date=join_date,
            plan_status=status,
        )

    return _make
