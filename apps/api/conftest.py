import os
from datetime import datetime, timedelta, UTC
from types import SimpleNamespace
from unittest.mock import patch

import pytest

# Set test environment variables before importing any application code
os.environ.update(
    {
        "DATABASE_URL": "sqlite:///:memory:",
        "SUPABASE_URL": "https://test.supabase.co",
        "SUPABASE_ANON_KEY": "eyJhbGciOiJIUzI1NiIsInR5cCI6IkpXVCJ9.eyJyb2xlIjoiYW5vbiJ9.test",
        "DEEPSEEK_API_KEY": "sk-test-deepseek-key",
        "OPENROUTER_API_KEY": "",
        "ENVIRONMENT": "test",
        "DEBUG": "false",
        "CORS_ORIGINS": "http://localhost:3000,http://localhost:3001",
    }
)

# Import after setting environment variables
from sqlalchemy.pool import StaticPool  # noqa: E402
from sqlmodel import Session, SQLModel, create_engine  # noqa: E402

from lvlai_api.models import Task, TaskPriority, TaskStatus, User  # noqa: E402


def make_completion(content: str | None):
    """Shape of an openai chat completion, as far as the gateway reads it"""
    return SimpleNamespace(
        choices=[SimpleNamespace(message=SimpleNamespace(content=content))]
    )


class FakeModel:
    """Handle on the patched OpenAI client class"""

    def __init__(self, client_cls):
        self.client_cls = client_cls
        self.create = client_cls.return_value.chat.completions.create
        self.reply("Mocked AI response")

    def reply(self, content: str | None):
        self.create.side_effect = None
        self.create.return_value = make_completion(content)

    def fail(self, exc: Exception):
        self.create.side_effect = exc

    @property
    def call_count(self) -> int:
        return self.create.call_count

    def last_call(self) -> dict:
        return self.create.call_args.kwargs


@pytest.fixture
def fake_model():
    """Patch the OpenAI SDK client used by the model gateway"""
    from lvlai_api.ai.model_gateway import get_client

    get_client.cache_clear()
    with patch("lvlai_api.ai.model_gateway.OpenAI") as client_cls:
        yield FakeModel(client_cls)
    get_client.cache_clear()


@pytest.fixture
def engine():
    """Fresh in-memory database for each test"""
    engine = create_engine(
        "sqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    SQLModel.metadata.create_all(engine)
    yield engine
    SQLModel.metadata.drop_all(engine)
    engine.dispose()


@pytest.fixture
def session(engine):
    with Session(engine) as session:
        yield session


@pytest.fixture
def user(session) -> User:
    user = User(
        name="Ada",
        email="ada@example.com",
        level=4,
        xp=1250,
        total_tasks_completed=37,
        daily_goal_xp=150,
    )
    session.add(user)
    session.commit()
    session.refresh(user)
    return user


@pytest.fixture
def other_user(session) -> User:
    user = User(name="Bob", email="bob@example.com")
    session.add(user)
    session.commit()
    session.refresh(user)
    return user


@pytest.fixture
def make_task(session):
    """Factory inserting a task; ``due_in_days`` is relative to today (UTC)"""

    def _make_task(
        owner: User,
        title: str,
        priority: TaskPriority = TaskPriority.MEDIUM,
        status: TaskStatus = TaskStatus.PENDING,
        due_in_days: int | None = None,
        due_date: datetime | None = None,
        **fields,
    ) -> Task:
        if due_date is None and due_in_days is not None:
            today = datetime.now(UTC).replace(hour=12, minute=0, second=0, microsecond=0)
            due_date = today + timedelta(days=due_in_days)
        task = Task(
            title=title,
            priority=priority,
            status=status,
            due_date=due_date,
            user_id=owner.id,
            **fields,
        )
        session.add(task)
        session.commit()
        session.refresh(task)
        return task

    return _make_task


@pytest.fixture
def client(session, user):
    """Test client authenticated as ``user`` and bound to the test session"""
    from fastapi.testclient import TestClient

    from lvlai_api.auth import get_current_user_id
    from lvlai_api.database import get_session
    from lvlai_api.main import app
    from lvlai_api.rate_limiter import limiter

    def override_get_session():
        yield session

    async def override_get_current_user_id():
        return str(user.id)

    app.dependency_overrides[get_session] = override_get_session
    app.dependency_overrides[get_current_user_id] = override_get_current_user_id
    limiter.enabled = False
    try:
        yield TestClient(app)
    finally:
        app.dependency_overrides.clear()
        limiter.enabled = True
