from __future__ import annotations

from functools import lru_cache

from fastapi import Depends

from app.clients.data_service import PlatformDataClient
from app.config import Settings, get_settings
from app.services import PlatformAnalyticsService


@lru_cache(maxsize=1)
def get_data_client_cached() -> PlatformDataClient:
    settings = get_settings()
    return PlatformDataClient(
        settings.data_service_base_url,
        timeout=settings.data_service_timeout,
        use_mock_data=settings.use_mock_data,
        token=settings.data_service_token,
    )


def get_data_client(settings: Settings = Depends(get_settings)) -> PlatformDataClient:
    return get_data_client_cached()


def get_platform_analytics_service(
    client: PlatformDataClient = Depends(get_data_client),
    settings: Settings = Depends(get_settings),
) -> PlatformAnalyticsService:
    return PlatformAnalyticsService(client, settings=settings)
