import os
import tempfile

# Configure the app before any advisor_crm import reads the environment
os.environ["DATABASE_URL"] = "sqlite://"
os.environ["SECRET_KEY"] = "test-secret-key"
os.environ["UPLOADS_DIR"] = tempfile.mkdtemp(prefix="advisor-crm-uploads-")
os.environ["PRESENCE_OFFLINE_GRACE_SECONDS"] = "0"
os.environ["SMTP_USER"] = ""
os.environ["SMTP_PASS"] = ""
os.environ["RESEND_API_KEY"] = ""

import pytest  # noqa: E402
from fastapi.testclient import TestClient  # noqa: E402

from advisor_crm.database import Base, SessionLocal, engine  # noqa: E402
from advisor_crm.main import app  # noqa: E402
from advisor_crm.models import (  # noqa: E402
    ROLE_ADMIN,
    ROLE_ADVISOR,
    ROLE_SUPER_ADMIN,
    ROLE_USER,
    Client,
    User,
)
from advisor_crm.security_utils import create_jwt_token, hash_password  # noqa: E402


@pytest.fixture(autouse=True)
def _fresh_database():
    """Every test starts from empty tables"""
    Base.metadata.drop_all(bind=engine)
    Base.metadata.create_all(bind=engine)
    yield


@pytest.fixture
def db():
    session = SessionLocal()
    try:
        yield session
    finally:
        session.close()


@pytest.fixture
def api():
    """TestClient with the lifespan running (notification service and presence hub on app.state)"""
    with TestClient(app) as test_client:
        yield test_client


def create_user(db, username: str, role: str = ROLE_USER, password: str = "secret123", **fields) -> User:
    user = User(
        username=username,
        email=fields.pop("email", f"{username}@example.com"),
        password=hash_password(password),
        role=role,
        **fields,
    )
    db.add(user)
    db.commit()
    db.refresh(user)
    return user


def create_client(db, owner: User, first_name: str = "Sarah", surname: str = "Johnson", **fields) -> Client:
    client = Client(first_name=first_name, surname=surname, user_id=owner.id, **fields)
    db.add(client)
    db.commit()
    db.refresh(client)
    return client


def auth_headers(user: User) -> dict:
    return {"Authorization": f"Bearer {create_jwt_token({'sub': str(user.id)})}"}


@pytest.fixture
def users(db):
    """One user per role"""
    return {
        "admin": create_user(db, "admin", ROLE_ADMIN, first_name="Ada"),
        "advisor": create_user(db, "advisor", ROLE_ADVISOR, first_name="John"),
        "other_advisor": create_user(db, "advisor2", ROLE_ADVISOR, first_name="Mary"),
        "super_admin": create_user(db, "super", ROLE_SUPER_ADMIN, first_name="Super"),
        "staff": create_user(db, "staff", ROLE_USER, first_name="Sam"),
    }
