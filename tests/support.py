"""Shared fixtures for tests: in-memory SQLite sessions, test settings and an API client."""

from collections.abc import Generator
from datetime import timedelta

from fastapi.testclient import TestClient
from sqlalchemy import create_engine
from sqlalchemy.orm import Session, sessionmaker
from sqlalchemy.pool import StaticPool

from app.core.config import Settings, get_settings
from app.core.database import get_db
from app.core.security import TokenConfig, hash_password
from app.main import app
from app.models import Base, User

ACCESS_SECRET = "test-access-secret-0123456789abcdef0123"
REFRESH_SECRET = "test-refresh-secret-0123456789abcdef012"
# Lowest bcrypt cost keeps the suite fast.
TEST_BCRYPT_ROUNDS = 4


def make_settings(**overrides: object) -> Settings:
    values: dict[str, object] = {
        "JWT_ACCESS_SECRET": ACCESS_SECRET,
        "JWT_REFRESH_SECRET": REFRESH_SECRET,
        "BCRYPT_ROUNDS": TEST_BCRYPT_ROUNDS,
    }
    values.update(overrides)
    return Settings(_env_file=None, **values)


def make_token_config(**overrides: object) -> TokenConfig:
    values: dict[str, object] = {
        "access_secret": ACCESS_SECRET,
        "refresh_secret": REFRESH_SECRET,
        "access_expires": timedelta(minutes=15),
        "refresh_expires": timedelta(days=7),
    }
    values.update(overrides)
    return TokenConfig(**values)


def make_sessionmaker() -> sessionmaker:
    """Fresh in-memory database with all tables; StaticPool shares one connection."""
    engine = create_engine(
        "sqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    Base.metadata.create_all(engine)
    return sessionmaker(autocommit=False, autoflush=False, bind=engine)


def add_user(
    session: Session,
    email: str = "a@x.com",
    password: str = "pw1",
    name: str = "A",
    role: str = "user",
) -> User:
    user = User(
        email=email,
        password_hash=hash_password(password, rounds=TEST_BCRYPT_ROUNDS),
        name=name,
        role=role,
    )
    session.add(user)
    session.commit()
    session.refresh(user)
    return user


class ApiTestMixin:
    """
    Mixin for unittest.TestCase: wires the app to a fresh database and test settings.

    Subclasses may set settings_overrides before setUp runs.
    """

    settings_overrides: dict[str, object] = {}

    def setUp(self) -> None:
        self.SessionLocal = make_sessionmaker()
        self.settings = make_settings(**self.settings_overrides)

        def override_get_db() -> Generator[Session, None, None]:
            db = self.SessionLocal()
            try:
                yield db
            finally:
                db.close()

        app.dependency_overrides[get_db] = override_get_db
        app.dependency_overrides[get_settings] = lambda: self.settings
        self.client = TestClient(app, raise_server_exceptions=False)

    def tearDown(self) -> None:
        app.dependency_overrides.clear()

    def api(self, path: str) -> str:
        return f"{self.settings.API_V1_PREFIX}{path}"

    def register(self, email: str = "a@x.com", password: str = "pw1", name: str = "A"):
        return self.client.post(
            self.api("/auth/register"),
            json={"name": name, "email": email, "password": password},
        )

    def login(self, email: str = "a@x.com", password: str = "pw1"):
        return self.client.post(
            self.api("/auth/login"), json={"email": email, "password": password}
        )

    def auth_headers(self, email: str = "a@x.com", password: str = "pw1") -> dict[str, str]:
        """Register (if needed) and log in; return headers carrying the access token."""
        self.register(email=email, password=password)
        token = self.login(email=email, password=password).json()["access_token"]
        return {self.settings.ACCESS_TOKEN_HEADER: token}

    def make_admin(self, email: str) -> None:
        with self.SessionLocal() as db:
            user = db.query(User).filter(User.email == email).one()
            user.role = "admin"
            db.commit()
