"""Shared test fixtures and configuration."""
import json
import os

import httpx
import pytest
from fastapi.testclient import TestClient

# Keep real credentials out of tests before importing app
os.environ.setdefault("RETELL_API_KEY", "")
os.environ.setdefault("RETELL_FROM_NUMBER", "")

from voicecall.main import app
from voicecall.core.config import Settings
from voicecall.core.dependencies import get_retell_client, get_settings
from voicecall.services.call_session.vendor import VoiceSession
from voicecall.services.retell.client import RetellClient


TEST_API_KEY = "key_test_123"
TEST_FROM_NUMBER = "+1 (415) 415-4155"
TEST_AGENT_ID = "agent_test"


class FakeRetellAPI:
    """Stand-in for the Retell REST API behind an httpx.MockTransport."""

    def __init__(self):
        self.requests = []
        self.responses = {
            "/v2/create-web-call": (
                201,
                {"call_id": "call_web_1", "access_token": "token_web_1"},
            ),
            "/v2/create-phone-call": (
                201,
                {"call_id": "call_phone_1", "call_status": "registered"},
            ),
            "/list-agents": (
                200,
                [{"agent_id": TEST_AGENT_ID, "agent_name": "Shakti"}],
            ),
        }

    def respond(self, path, status_code, body):
        """Override the canned answer for ``path``. ``body`` may be raw text."""
        self.responses[path] = (status_code, body)

    def handler(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        status_code, body = self.responses[request.url.path]
        if isinstance(body, str):
            return httpx.Response(status_code, text=body)
        return httpx.Response(status_code, json=body)

    @property
    def transport(self) -> httpx.MockTransport:
        return httpx.MockTransport(self.handler)

    def json_body(self, index=-1):
        return json.loads(self.requests[index].content)


class FakeVoiceSession(VoiceSession):
    """Vendor session that records calls instead of opening audio."""

    def __init__(self, fail_start=False, fail_stop=False):
        super().__init__()
        self.fail_start = fail_start
        self.fail_stop = fail_stop
        self.access_tokens = []
        self.stop_calls = 0
        self.mute_calls = 0
        self.unmute_calls = 0

    async def start_call(self, access_token):
        self.access_tokens.append(access_token)
        if self.fail_start:
            raise RuntimeError("Could not open realtime session")

    async def stop_call(self):
        self.stop_calls += 1
        if self.fail_stop:
            raise RuntimeError("Session already closed")

    def mute(self):
        self.mute_calls += 1

    def unmute(self):
        self.unmute_calls += 1


class FakeProxy:
    """Records proxy invocations and returns canned answers."""

    def __init__(self, responses=None, error=None, gate=None):
        self.calls = []
        self.responses = responses or {
            "create-web-call": {"call_id": "call_web_1", "access_token": "token_web_1"},
            "create-phone-call": {"call_id": "call_phone_1"},
        }
        self.error = error
        # asyncio.Event holding each request open until set
        self.gate = gate

    async def invoke(self, action, **body):
        self.calls.append((action, body))
        if self.gate is not None:
            await self.gate.wait()
        if self.error is not None:
            raise self.error
        return self.responses[action]


@pytest.fixture
def test_settings():
    """Settings with Retell configured."""
    return Settings(
        retell_api_key=TEST_API_KEY,
        retell_from_number=TEST_FROM_NUMBER,
        retell_agent_id=TEST_AGENT_ID,
        retell_api_base_url="https://retell.test",
        proxy_url="http://testserver/functions/retell-call",
        timer_interval_seconds=0.01,
        ended_reset_delay_seconds=0.05,
    )


@pytest.fixture
def fake_retell():
    """Fake Retell API."""
    return FakeRetellAPI()


@pytest.fixture
def override_dependencies(test_settings, fake_retell):
    """Point the app at the test settings and the fake Retell API."""

    def _override_get_settings():
        return test_settings

    def _override_get_retell_client():
        return RetellClient(
            api_key=test_settings.retell_api_key,
            base_url=test_settings.retell_api_base_url,
            transport=fake_retell.transport,
        )

    app.dependency_overrides[get_settings] = _override_get_settings
    app.dependency_overrides[get_retell_client] = _override_get_retell_client

    yield

    # Clear overrides
    app.dependency_overrides.clear()


@pytest.fixture
def test_client(override_dependencies):
    """Create FastAPI test client talking to the fake Retell API."""
    return TestClient(app)


@pytest.fixture
def unconfigured_client(test_client, test_settings):
    """Test client whose settings lack the Retell API key."""
    test_settings.retell_api_key = None
    return test_client


@pytest.fixture
def fake_voice_session():
    return FakeVoiceSession()


@pytest.fixture
def fake_proxy():
    return FakeProxy()


@pytest.fixture
def make_voice_session():
    """Factory for fake vendor sessions with optional failures."""
    return FakeVoiceSession


@pytest.fixture
def make_proxy():
    """Factory for fake proxies with custom answers or errors."""
    return FakeProxy
