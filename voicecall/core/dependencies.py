"""FastAPI dependencies."""
from fastapi import Depends

from voicecall.core.config import Settings, settings
from voicecall.services.retell.client import RetellClient
from voicecall.services.retell.proxy import RetellProxyService


def get_settings() -> Settings:
    """Get application settings."""
    return settings


def get_retell_client(
    app_settings: Settings = Depends(get_settings),
) -> RetellClient:
    """Get Retell API client for the configured base URL and key."""
    return RetellClient(
        api_key=app_settings.retell_api_key,
        base_url=app_settings.retell_api_base_url,
    )


def get_retell_proxy(
    app_settings: Settings = Depends(get_settings),
    client: RetellClient = Depends(get_retell_client),
) -> RetellProxyService:
    """Get the proxy service that dispatches widget actions to Retell."""
    return RetellProxyService(settings=app_settings, client=client)
