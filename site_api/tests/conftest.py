"""Shared fixtures for studio site API tests."""

from pathlib import Path

import pytest

from site_api.models.contact import EmailMessage, EmailSendResult

REPO_CONTENT_DIR = Path(__file__).resolve().parents[2] / "content"

# 2024-06-01T12:00:00Z in epoch milliseconds
FIXED_NOW_MS = 1_717_243_200_000.0


class FakeClock:
    """Manually advanced epoch-millisecond clock."""

    def __init__(self, now_ms: float = FIXED_NOW_MS) -> None:
        self.now_ms = now_ms

    def __call__(self) -> float:
        return self.now_ms

    def advance(self, ms: float) -> None:
        self.now_ms += ms


class RecordingTransport:
    """Email transport double that records messages and returns a canned result."""

    def __init__(self, result: EmailSendResult | None = None) -> None:
        self.result = result or EmailSendResult(data={"id": "test-email-1"})
        self.sent: list[EmailMessage] = []

    async def send(self, message: EmailMessage) -> EmailSendResult:
        self.sent.append(message)
        return self.result


@pytest.fixture(autouse=True)
def _reset_global_state():
    """Reset all module-level singletons and caches between tests."""
    yield

    # 1. Settings LRU cache
    from site_api.config import get_settings

    get_settings.cache_clear()

    # 2. HTTP client singleton
    import site_api.services.http_client as http_mod

    http_mod._client = None

    # 3. Email transport singleton
    import site_api.services.email as email_mod

    email_mod._transport = None

    # 4. Rate limiter state
    import site_api.routers.contact as contact_mod

    contact_mod._limiter = None

    # 5. Content collection cache
    import site_api.services.content as content_mod

    content_mod._collection_cache.clear()

    # 6. Health cache + dependency overrides
    import site_api.main as main_mod

    main_mod._health_cache = None
    main_mod.app.dependency_overrides.clear()


@pytest.fixture
def mock_settings(monkeypatch):
    """Provide a Settings object with safe test defaults."""
    from site_api.config import Settings, get_settings

    test_settings = Settings(
        environment="test",
        email_from="Leads <leads@test.example>",
        email_to="studio@test.example",
        resend_api_key="test-resend-key",
        resend_api_url="https://resend.test/emails",
        content_dir=str(REPO_CONTENT_DIR),
    )

    get_settings.cache_clear()
    monkeypatch.setattr("site_api.config.get_settings", lambda: test_settings)

    # Patch get_settings in all modules that import it directly
    # (from site_api.config import get_settings creates a local binding that
    # the site_api.config monkeypatch above does not affect)
    for mod_path in [
        "site_api.services.http_client",
        "site_api.services.email",
        "site_api.services.content",
        "site_api.routers.contact",
        "site_api.main",
    ]:
        monkeypatch.setattr(f"{mod_path}.get_settings", lambda: test_settings)

    # FastAPI resolves Depends(get_settings) by identity, not by module lookup
    from site_api.main import app

    app.dependency_overrides[get_settings] = lambda: test_settings

    return test_settings


@pytest.fixture
def fake_clock() -> FakeClock:
    return FakeClock()


@pytest.fixture
def transport() -> RecordingTransport:
    return RecordingTransport()


@pytest.fixture
def valid_payload() -> dict:
    """A contact form body that passes validation (timestamp set per test)."""
    return {
        "name": "Jane O'Neil",
        "email": "jane@example.com",
        "projectType": "Wedding",
        "projectBudget": "£2k - £5k",
        "vision": "A relaxed documentary-style film of our summer wedding.",
        "website": "",
    }
