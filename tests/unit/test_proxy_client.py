"""Tests for the widget proxy client against the real proxy endpoint."""
import asyncio

import httpx
import pytest

from voicecall.main import app
from voicecall.services.call_session.exceptions import ProxyError
from voicecall.services.call_session.manager import CallSessionManager
from voicecall.services.call_session.proxy_client import ProxyClient
from voicecall.services.call_session.status import CallStatus

PROXY_URL = "http://testserver/functions/retell-call"


@pytest.fixture
def asgi_transport(override_dependencies):
    return httpx.ASGITransport(app=app)


@pytest.fixture
def proxy_client(asgi_transport):
    return ProxyClient(PROXY_URL, transport=asgi_transport)


class TestProxyClient:
    """Test ProxyClient decoding of proxy answers."""

    @pytest.mark.asyncio
    async def test_invoke_returns_upstream_json(self, proxy_client, fake_retell):
        data = await proxy_client.invoke("create-web-call", agent_id="agent_abc")

        assert data["access_token"] == "token_web_1"
        assert len(fake_retell.requests) == 1

    @pytest.mark.asyncio
    async def test_invoke_list_agents(self, proxy_client):
        data = await proxy_client.invoke("list-agents")

        assert data == [{"agent_id": "agent_test", "agent_name": "Shakti"}]

    @pytest.mark.asyncio
    async def test_error_envelope_raises(self, proxy_client):
        with pytest.raises(ProxyError) as exc_info:
            await proxy_client.invoke("frobnicate")

        assert exc_info.value.status_code == 500
        assert "create-web-call" in str(exc_info.value)

    @pytest.mark.asyncio
    async def test_non_2xx_without_envelope_raises(self):
        transport = httpx.MockTransport(lambda request: httpx.Response(502, text="Bad Gateway"))
        client = ProxyClient(PROXY_URL, transport=transport)

        with pytest.raises(ProxyError) as exc_info:
            await client.invoke("create-phone-call", phone_number="+16264638602")

        assert exc_info.value.status_code == 502
        assert str(exc_info.value) == "Failed to create phone call"


class TestWidgetThroughProxy:
    """Drive the widget through the proxy endpoint and the fake Retell API."""

    @pytest.mark.asyncio
    async def test_phone_call_end_to_end(self, test_settings, asgi_transport, fake_retell, fake_voice_session):
        manager = CallSessionManager.from_settings(
            test_settings,
            session_factory=lambda: fake_voice_session,
            transport=asgi_transport,
        )

        await manager.start_phone_call("+1 (626) 463-8602")

        assert manager.session.status == CallStatus.CONNECTED
        assert len(fake_retell.requests) == 1
        assert fake_retell.json_body()["to_number"] == "+16264638602"
        await manager.close()

    @pytest.mark.asyncio
    async def test_invalid_phone_never_reaches_upstream(self, test_settings, asgi_transport, fake_retell, fake_voice_session):
        manager = CallSessionManager.from_settings(
            test_settings,
            session_factory=lambda: fake_voice_session,
            transport=asgi_transport,
        )

        await manager.start_phone_call("6264638602")

        assert manager.session.status == CallStatus.IDLE
        assert fake_retell.requests == []

    @pytest.mark.asyncio
    async def test_web_call_end_to_end(self, test_settings, asgi_transport, fake_voice_session):
        manager = CallSessionManager.from_settings(
            test_settings,
            session_factory=lambda: fake_voice_session,
            transport=asgi_transport,
        )

        await manager.start_web_call()
        fake_voice_session.emit("call_started")
        await asyncio.sleep(0.03)

        assert fake_voice_session.access_tokens == ["token_web_1"]
        assert manager.session.status == CallStatus.CONNECTED
        assert manager.session.elapsed_seconds > 0

        await manager.end_call()
        await asyncio.sleep(test_settings.ended_reset_delay_seconds * 2)
        assert manager.session.status == CallStatus.IDLE

    @pytest.mark.asyncio
    async def test_missing_key_surfaces_to_widget(self, test_settings, asgi_transport, fake_voice_session):
        test_settings.retell_api_key = None
        manager = CallSessionManager.from_settings(
            test_settings,
            session_factory=lambda: fake_voice_session,
            transport=asgi_transport,
        )

        await manager.start_web_call()

        assert manager.session.status == CallStatus.IDLE
        assert manager.notifications[-1].description == "RETELL_API_KEY is not configured"
