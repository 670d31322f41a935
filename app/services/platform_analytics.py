from __future__ import annotations

import asyncio
import logging
from datetime import datetime, timedelta, timezone
from typing import Any, Dict, List, Optional

from pydantic import ValidationError

from app.analytics import insights as dashboard
from app.analytics.engine import compute_platform_analytics
from app.analytics.leaderboards import get_selector
from app.clients.data_service import PlatformDataClient
from app.config import Settings, get_settings
from app.schemas.analytics import (
    LeaderboardResponse,
    OutlierResponse,
    PlatformAnalytics,
    PlatformAnalyticsRequest,
    PlatformInsights,
    TenantSearchRequest,
    TenantSearchResponse,
)
from app.schemas.platform import PlatformDataset
from app.services.exceptions import DataUnavailableError, ServiceError
from app.services.mock_store import PlatformDataRepository, get_mock_store

logger = logging.getLogger(__name__)

# Dataset field -> upstream path
_COLLECTION_PATHS = {
    "locations": "platform/locations",
    "staff": "platform/staff",
    "billing": "platform/billing",
    "clients": "platform/clients",
    "appointments": "platform/appointments",
    "daily_sales": "platform/daily-sales",
    "weekly_performance": "platform/performance",
}


def _utc_now() -> datetime:
    return datetime.now(timezone.utc)


class PlatformAnalyticsService:
    """Load platform row sets and run the analytics engine over them."""

    def __init__(
        self,
        client: PlatformDataClient,
        *,
        settings: Settings | None = None,
        repository: PlatformDataRepository | None = None,
    ) -> None:
        self._client = client
        self._settings = settings or get_settings()
        self._repository = repository
        if self._client.use_mock_data:
            self._repository = repository or get_mock_store().platform

    async def analytics(self, request: PlatformAnalyticsRequest) -> PlatformAnalytics:
        result = await self._compute(request.as_of)
        if not request.include_tenants:
            result.summary.tenant_metrics = []
        return result

    async def leaderboard(
        self, name: str, *, as_of: Optional[datetime] = None
    ) -> LeaderboardResponse:
        selector = get_selector(name, limit=self._settings.leaderboard_size)
        result = await self._compute(as_of)
        return LeaderboardResponse(
            name=name,
            generated_at=result.summary.generated_at,
            items=selector.select(result.summary.tenant_metrics),
        )

    async def search(self, request: TenantSearchRequest) -> TenantSearchResponse:
        result = await self._compute(request.as_of)
        items = dashboard.search_tenants(
            result.summary.tenant_metrics,
            query=request.query,
            sort_by=request.sort_by,
            descending=request.descending,
        )
        return TenantSearchResponse(query=request.query, total=len(items), items=items)

    async def outliers(self, *, as_of: Optional[datetime] = None) -> OutlierResponse:
        threshold = self._settings.outlier_threshold_percent
        result = await self._compute(as_of)
        return OutlierResponse(
            generated_at=result.summary.generated_at,
            threshold_percent=threshold,
            items=dashboard.tenant_outliers(result.summary, threshold_percent=threshold),
        )

    async def insights(self, *, as_of: Optional[datetime] = None) -> PlatformInsights:
        result = await self._compute(as_of)
        summary = result.summary
        return PlatformInsights(
            generated_at=summary.generated_at,
            cumulative_growth=dashboard.cumulative_growth(summary.monthly_growth),
            revenue_bands=dashboard.revenue_bands(summary.tenant_metrics),
            revenue_mix=dashboard.revenue_mix(summary.tenant_metrics),
            tier_revenue=dashboard.tier_revenue(summary),
            recent_signups=dashboard.recent_signups(
                summary.tenant_metrics, now=summary.generated_at
            ),
        )

    async def _compute(self, as_of: Optional[datetime]) -> PlatformAnalytics:
        now = as_of or _utc_now()
        dataset = await self.load_dataset(now=now)
        logger.info(
            "Computing platform analytics for %d tenants as of %s",
            len(dataset.tenants),
            now.isoformat(),
        )
        return compute_platform_analytics(
            dataset, now=now, leaderboard_limit=self._settings.leaderboard_size
        )

    async def load_dataset(self, *, now: Optional[datetime] = None) -> PlatformDataset:
        if self._client.use_mock_data:
            await self._client.simulate_latency()
            if not self._repository:
                raise RuntimeError("Mock platform repository not configured")
            return await self._repository.load_dataset()
        return await self._fetch_live_dataset(now or _utc_now())

    async def _fetch_live_dataset(self, now: datetime) -> PlatformDataset:
        try:
            tenants = await self._client.get(
                "platform/tenants", params={"order": "account_number"}
            )
        except ServiceError as exc:
            raise DataUnavailableError("Tenant records are unavailable", cause=exc) from exc
        if tenants is None:
            raise DataUnavailableError("Tenant records are unavailable")

        params = self._collection_params(now)
        names = list(_COLLECTION_PATHS)
        responses = await asyncio.gather(
            *(self._client.get(_COLLECTION_PATHS[name], params=params.get(name)) for name in names),
            return_exceptions=True,
        )

        collections: Dict[str, List[Any]] = {}
        for name, response in zip(names, responses):
            if isinstance(response, ServiceError):
                logger.warning("Treating %s as empty: %s", name, response)
                continue
            if isinstance(response, BaseException):
                raise ServiceError(f"Failed to fetch {name}", cause=response) from response
            collections[name] = response or []

        try:
            return PlatformDataset(tenants=tenants, **collections)
        except ValidationError as exc:
            logger.exception("Upstream platform data did not match the expected shape")
            raise ServiceError("Malformed platform data", cause=exc) from exc

    def _collection_params(self, now: datetime) -> Dict[str, Dict[str, Any]]:
        sales_since = now.date() - timedelta(days=self._settings.sales_lookback_days)
        performance_since = now.date() - timedelta(days=self._settings.performance_lookback_days)
        return {
            "locations": {"is_active": "true"},
            "daily_sales": {"since": sales_since.isoformat()},
            "weekly_performance": {"since": performance_since.isoformat()},
        }
