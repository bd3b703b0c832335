"""Retell REST API client."""
import json
import logging
from typing import Any, Dict, Optional, Tuple

import httpx

from voicecall.services.retell.exceptions import (
    RetellAPIError,
    RetellConfigurationError,
)

logger = logging.getLogger(__name__)

DEFAULT_BASE_URL = "https://api.retellai.com"


class RetellClient:
    """Thin async client for the three Retell endpoints the widget needs.

    Every call is a single fresh request: no retries, no idempotency keys.
    Timeouts are whatever httpx uses by default.
    """

    def __init__(
        self,
        api_key: Optional[str],
        base_url: str = DEFAULT_BASE_URL,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        self.api_key = api_key
        self.base_url = base_url.rstrip("/")
        self.transport = transport

    def _headers(self, with_body: bool) -> Dict[str, str]:
        if not self.api_key:
            raise RetellConfigurationError("RETELL_API_KEY")
        headers = {"Authorization": f"Bearer {self.api_key}"}
        if with_body:
            headers["Content-Type"] = "application/json"
        return headers

    async def _request(
        self,
        method: str,
        path: str,
        payload: Optional[Dict[str, Any]] = None,
    ) -> Tuple[int, Any]:
        """
        Send one request to Retell.

        Returns:
            Tuple of (upstream status code, decoded JSON body)

        Raises:
            RetellAPIError: upstream answered with a non-2xx status
        """
        headers = self._headers(with_body=payload is not None)

        async with httpx.AsyncClient(
            base_url=self.base_url, transport=self.transport
        ) as client:
            response = await client.request(method, path, json=payload, headers=headers)

        logger.info(f"[RETELL CLIENT] {method} {path} - Status: {response.status_code}")
        logger.debug(f"[RETELL CLIENT] Response body: {response.text}")

        if not response.is_success:
            logger.error(
                f"[RETELL CLIENT] {method} {path} failed - "
                f"Status: {response.status_code}, Body: {response.text}"
            )
            raise RetellAPIError(response.status_code, response.text)

        try:
            return response.status_code, response.json()
        except json.JSONDecodeError:
            logger.error(f"[RETELL CLIENT] Non-JSON response from {path}: {response.text!r}")
            raise

    async def create_web_call(self, agent_id: str) -> Tuple[int, Any]:
        """Create a browser call; the response carries an ``access_token``."""
        return await self._request(
            "POST", "/v2/create-web-call", {"agent_id": agent_id}
        )

    async def create_phone_call(
        self, from_number: str, to_number: str, agent_id: str
    ) -> Tuple[int, Any]:
        """Place an outbound phone call from ``from_number`` to ``to_number``."""
        return await self._request(
            "POST",
            "/v2/create-phone-call",
            {
                "from_number": from_number,
                "to_number": to_number,
                "agent_id": agent_id,
            },
        )

    async def list_agents(self) -> Tuple[int, Any]:
        """List agents configured on the Retell account."""
        return await self._request("GET", "/list-agents")
