"""Dispatch of widget proxy requests to the Retell API."""
import logging
from typing import Any, Awaitable, Callable, Dict, Optional, Tuple

from pydantic import BaseModel, ValidationError

from voicecall.core.config import Settings
from voicecall.services.retell.client import RetellClient
from voicecall.services.retell.exceptions import (
    InvalidActionError,
    InvalidRequestError,
    RetellConfigurationError,
)
from voicecall.services.retell.phone import normalize_phone_number

logger = logging.getLogger(__name__)

CREATE_WEB_CALL = "create-web-call"
CREATE_PHONE_CALL = "create-phone-call"
LIST_AGENTS = "list-agents"


class ProxyRequest(BaseModel):
    """Body accepted by the proxy endpoint."""
    action: Optional[str] = None
    agent_id: Optional[str] = None
    phone_number: Optional[str] = None


class RetellProxyService:
    """Validates a proxy request and forwards it to one Retell endpoint."""

    def __init__(self, settings: Settings, client: RetellClient):
        self.settings = settings
        self.client = client
        self._handlers: Dict[str, Callable[[ProxyRequest], Awaitable[Tuple[int, Any]]]] = {
            CREATE_WEB_CALL: self._create_web_call,
            CREATE_PHONE_CALL: self._create_phone_call,
            LIST_AGENTS: self._list_agents,
        }

    async def handle(self, body: Any) -> Tuple[int, Any]:
        """
        Handle one decoded proxy request body.

        Args:
            body: JSON-decoded request body

        Returns:
            Tuple of (status code, upstream JSON) to relay unchanged

        Raises:
            RetellError: configuration, validation or upstream failure
        """
        if not self.settings.retell_api_key:
            logger.error("[RETELL PROXY] RETELL_API_KEY is not configured")
            raise RetellConfigurationError("RETELL_API_KEY")

        if not isinstance(body, dict):
            raise InvalidRequestError("Request body must be a JSON object")
        try:
            request = ProxyRequest.model_validate(body)
        except ValidationError as e:
            raise InvalidRequestError(f"Invalid request body: {e.errors()[0]['msg']}") from e

        logger.info(
            f"[RETELL PROXY] Received request - action: {request.action}, "
            f"agent_id: {request.agent_id}, phone_number: {request.phone_number}"
        )

        handler = self._handlers.get(request.action or "")
        if handler is None:
            raise InvalidActionError(request.action)
        return await handler(request)

    def _agent_id(self, request: ProxyRequest) -> str:
        agent_id = request.agent_id or self.settings.retell_agent_id
        if not agent_id:
            raise InvalidRequestError(f"agent_id is required for {request.action}")
        return agent_id

    async def _create_web_call(self, request: ProxyRequest) -> Tuple[int, Any]:
        agent_id = self._agent_id(request)
        logger.info(f"[RETELL PROXY] Creating web call with agent_id: {agent_id}")
        return await self.client.create_web_call(agent_id)

    async def _create_phone_call(self, request: ProxyRequest) -> Tuple[int, Any]:
        agent_id = self._agent_id(request)
        if not request.phone_number:
            raise InvalidRequestError("phone_number is required for create-phone-call")

        # Outbound number always comes from server configuration
        from_number = self.settings.retell_from_number
        if not from_number:
            logger.error("[RETELL PROXY] RETELL_FROM_NUMBER is not configured")
            raise RetellConfigurationError("RETELL_FROM_NUMBER")

        to_number = normalize_phone_number(request.phone_number)
        logger.info(
            f"[RETELL PROXY] Creating phone call to: {to_number} with agent_id: {agent_id}"
        )
        return await self.client.create_phone_call(
            from_number=normalize_phone_number(from_number),
            to_number=to_number,
            agent_id=agent_id,
        )

    async def _list_agents(self, request: ProxyRequest) -> Tuple[int, Any]:
        logger.info("[RETELL PROXY] Listing agents")
        return await self.client.list_agents()
