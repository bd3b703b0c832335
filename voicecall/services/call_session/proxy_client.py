"""HTTP client the widget uses to reach the Retell proxy endpoint."""
import logging
from typing import Any, Optional

import httpx

from voicecall.services.call_session.exceptions import ProxyError

logger = logging.getLogger(__name__)


class ProxyClient:
    """Invokes the ``retell-call`` proxy function."""

    def __init__(
        self,
        url: str,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        self.url = url
        self.transport = transport

    async def invoke(self, action: str, **body: Any) -> Any:
        """
        POST ``{action, **body}`` to the proxy.

        Returns:
            Decoded upstream JSON

        Raises:
            ProxyError: non-2xx status or an ``error`` field in the body
        """
        payload = {"action": action, **body}
        logger.info(f"[PROXY CLIENT] Invoking {action}")

        async with httpx.AsyncClient(transport=self.transport) as client:
            response = await client.post(self.url, json=payload)

        try:
            data = response.json()
        except ValueError:
            data = None

        if isinstance(data, dict) and data.get("error"):
            logger.error(f"[PROXY CLIENT] {action} failed: {data['error']}")
            raise ProxyError(str(data["error"]), response.status_code)
        if not response.is_success:
            logger.error(f"[PROXY CLIENT] {action} failed - Status: {response.status_code}")
            raise ProxyError(f"Failed to {action.replace('-', ' ')}", response.status_code)
        return data
