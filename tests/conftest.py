import os
import tempfile
from enum import Enum
from pathlib import Path
from typing import Callable, Optional
from uuid import uuid4

os.environ.setdefault("DB_PATH", str(Path(tempfile.mkdtemp(prefix="vitraya_")) / "import.db"))

import pytest
from fastapi.testclient import TestClient
from sqlalchemy.orm import Session

from vitraya.core.security import get_password_hash
from vitraya.core.seed import seed_reference_data
from vitraya.db.models import User
from vitraya.db.session import SessionLocal, configure_database, create_tables
from vitraya.services.llm import LLMRequestError, get_llm_client

DEFAULT_PASSWORD = "StrongPass123"


class FakeScenario(str, Enum):
    ANALYSIS_OK = "ANALYSIS_OK"
    ANALYSIS_FENCED = "ANALYSIS_FENCED"
    MALFORMED_JSON = "MALFORMED_JSON"
    MISSING_KEYS = "MISSING_KEYS"
    CHAT_OK = "CHAT_OK"
    EMPTY = "EMPTY"
    TIMEOUT = "TIMEOUT"
    PROVIDER_ERROR = "PROVIDER_ERROR"
    NON_FINITE_SCORE = "NON_FINITE_SCORE"


class FakeLLMClient:
    def __init__(self, scenario: FakeScenario, fixture_dir: Path) -> None:
        self.scenario = scenario
        self.fixture_dir = fixture_dir
        self.calls: list[dict] = []

    def _load_text(self, name: str) -> str:
        return (self.fixture_dir / name).read_text(encoding="utf-8")

    def complete(
        self,
        messages: list[dict[str, str]],
        temperature: float = 0.0,
        max_tokens: Optional[int] = None,
        top_p: Optional[float] = None,
    ) -> str:
        self.calls.append(
            {"messages": messages, "temperature": temperature, "max_tokens": max_tokens, "top_p": top_p}
        )
        if self.scenario == FakeScenario.ANALYSIS_OK:
            return self._load_text("ANALYSIS_OK.json")
        if self.scenario == FakeScenario.ANALYSIS_FENCED:
            return self._load_text("ANALYSIS_FENCED.txt")
        if self.scenario == FakeScenario.MALFORMED_JSON:
            return self._load_text("ANALYSIS_MALFORMED.txt")
        if self.scenario == FakeScenario.MISSING_KEYS:
            return self._load_text("ANALYSIS_MISSING_KEYS.json")
        if self.scenario == FakeScenario.NON_FINITE_SCORE:
            return self._load_text("ANALYSIS_NON_FINITE_SCORE.json")
        if self.scenario == FakeScenario.CHAT_OK:
            return self._load_text("CHAT_OK.txt")
        if self.scenario == FakeScenario.EMPTY:
            return ""
        if self.scenario == FakeScenario.TIMEOUT:
            raise LLMRequestError(
                provider="fake",
                model="fake-model",
                message="Chat completion timed out while waiting for response.",
            )
        if self.scenario == FakeScenario.PROVIDER_ERROR:
            raise LLMRequestError(
                provider="fake",
                model="fake-model",
                status_code=503,
                message="Chat completion failed (status=503): upstream unavailable",
            )
        raise ValueError("Unknown fake scenario")


@pytest.fixture(scope="session")
def fixture_dir() -> Path:
    return Path(__file__).resolve().parent / "fixtures" / "llm"


@pytest.fixture(scope="session")
def test_db_path(tmp_path_factory: pytest.TempPathFactory) -> Path:
    db_path = tmp_path_factory.mktemp("db") / "vitraya_test.db"
    configure_database(str(db_path))
    create_tables()
    return db_path


@pytest.fixture(scope="session")
def app(test_db_path: Path):
    from vitraya.main import app as fastapi_app

    return fastapi_app


@pytest.fixture
def client(app):
    app.dependency_overrides = {}
    with TestClient(app) as test_client:
        yield test_client
    app.dependency_overrides = {}


@pytest.fixture
def db_session(test_db_path: Path):
    db = SessionLocal()
    try:
        yield db
    finally:
        db.close()


@pytest.fixture
def seeded_db(db_session: Session) -> Session:
    seed_reference_data(db_session)
    return db_session


@pytest.fixture
def create_user(db_session: Session) -> Callable[..., User]:
    def _create_user(display_name: Optional[str] = None, email: Optional[str] = None) -> User:
        user = User(
            email=email or f"user_{uuid4().hex[:10]}@test.com",
            password_hash=get_password_hash(DEFAULT_PASSWORD),
            display_name=display_name,
        )
        db_session.add(user)
        db_session.commit()
        db_session.refresh(user)
        return user

    return _create_user


@pytest.fixture
def auth_token(client: TestClient) -> str:
    email = f"auth_{uuid4().hex[:10]}@test.com"
    signup = client.post(
        "/auth/signup",
        json={"email": email, "password": DEFAULT_PASSWORD, "first_name": "Ada", "last_name": "Lovelace"},
    )
    assert signup.status_code == 201
    login = client.post("/auth/login", data={"username": email, "password": DEFAULT_PASSWORD})
    assert login.status_code == 200
    client.cookies.clear()
    return login.json()["access_token"]


@pytest.fixture
def auth_headers(auth_token: str) -> dict[str, str]:
    return {"Authorization": f"Bearer {auth_token}"}


@pytest.fixture
def fake_llm_factory(fixture_dir: Path) -> Callable[[FakeScenario], FakeLLMClient]:
    def _factory(scenario: FakeScenario) -> FakeLLMClient:
        return FakeLLMClient(scenario=scenario, fixture_dir=fixture_dir)

    return _factory


@pytest.fixture
def override_llm(app, fake_llm_factory):
    def _override(scenario: FakeScenario) -> FakeLLMClient:
        fake = fake_llm_factory(scenario)
        app.dependency_overrides[get_llm_client] = lambda: fake
        return fake

    return _override


@pytest.fixture
def fake_firebase(monkeypatch):
    """Replace ID token verification with a lookup table of token -> claims."""
    tokens: dict[str, dict] = {}

    def _verify(id_token: str) -> Optional[dict]:
        return tokens.get(id_token)

    monkeypatch.setattr("vitraya.api.auth.verify_id_token", _verify)
    return tokens
