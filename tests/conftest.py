"""Shared fixtures: services on in-memory repositories and an HTTP client."""

import os
import tempfile


os.environ.setdefault("ENVIRONMENT", "testing")
os.environ.setdefault("LOG_DIR", tempfile.mkdtemp(prefix="matjip-logs-"))
os.environ.setdefault("LOG_REQUESTS", "false")

import pytest  # noqa: E402
from fastapi.testclient import TestClient  # noqa: E402

from src.auth.permissions import Principal, UserRole  # noqa: E402
from src.auth.security import create_access_token  # noqa: E402
from src.config import get_settings  # noqa: E402
from src.services import Repositories, Services, build_services  # noqa: E402
from tests.fakes import (  # noqa: E402
    FakeCommentRepository,
    FakeContentRepository,
    FakeIdAllocator,
    FakeRecommendationRepository,
    FakeReportRepository,
)


@pytest.fixture
def repositories() -> Repositories:
    """Fresh in-memory repositories."""
    return Repositories(
        content=FakeContentRepository(),
        comments=FakeCommentRepository(),
        recommendations=FakeRecommendationRepository(),
        reports=FakeReportRepository(),
        ids=FakeIdAllocator(),
    )


@pytest.fixture
def services(repositories: Repositories) -> Services:
    """Service graph wired exactly as in the application (no Redis)."""
    return build_services(repositories, get_settings())


@pytest.fixture
def alice() -> Principal:
    return Principal(user_id=1, nickname="alice")


@pytest.fixture
def bob() -> Principal:
    return Principal(user_id=2, nickname="bob")


@pytest.fixture
def admin() -> Principal:
    return Principal(user_id=99, nickname="admin", role=UserRole.ADMIN)


@pytest.fixture
def client(services: Services) -> TestClient:
    """HTTP client on an app whose services use in-memory repositories."""
    from src.main import create_app  # noqa: PLC0415

    app = create_app(use_lifespan=False)
    services.install(app)
    return TestClient(app)


def auth_headers(principal: Principal) -> dict[str, str]:
    """Bearer header carrying the principal's claims."""
    token = create_access_token(
        {
            "sub": str(principal.user_id),
            "nickname": principal.nickname,
            "role": principal.role.value,
        }
    )
    return {"Authorization": f"Bearer {token}"}
