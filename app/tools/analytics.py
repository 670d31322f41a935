from datetime import datetime
from typing import Optional

from fastapi import APIRouter, Depends, HTTPException

from app.dependencies.services import get_platform_analytics_service
from app.schemas.analytics import (
    LeaderboardResponse,
    OutlierResponse,
    PlatformAnalytics,
    PlatformAnalyticsRequest,
    PlatformInsights,
    TenantSearchRequest,
    TenantSearchResponse,
)
from app.services import PlatformAnalyticsService
from app.services.exceptions import DataUnavailableError, ServiceError

router = APIRouter()


def _service_error(exc: ServiceError) -> HTTPException:
    if isinstance(exc, DataUnavailableError):
        return HTTPException(status_code=503, detail=str(exc))
    return HTTPException(status_code=502, detail=str(exc))


@router.post("/platform", response_model=PlatformAnalytics)
async def get_platform_analytics(
    req: PlatformAnalyticsRequest,
    service: PlatformAnalyticsService = Depends(get_platform_analytics_service),
):
    try:
        return await service.analytics(req)
    except ServiceError as exc:
        raise _service_error(exc) from exc


@router.get("/leaderboards/{name}", response_model=LeaderboardResponse)
async def get_leaderboard(
    name: str,
    as_of: Optional[datetime] = None,
    service: PlatformAnalyticsService = Depends(get_platform_analytics_service),
):
    try:
        return await service.leaderboard(name, as_of=as_of)
    except KeyError as exc:
        raise HTTPException(status_code=404, detail=f"Unknown leaderboard '{name}'") from exc
    except ServiceError as exc:
        raise _service_error(exc) from exc


@router.post("/tenants/search", response_model=TenantSearchResponse)
async def search_tenants(
    req: TenantSearchRequest,
    service: PlatformAnalyticsService = Depends(get_platform_analytics_service),
):
    try:
        return await service.search(req)
    except ValueError as exc:
        raise HTTPException(status_code=422, detail=str(exc)) from exc
    except ServiceError as exc:
        raise _service_error(exc) from exc


@router.get("/outliers", response_model=OutlierResponse)
async def get_outliers(
    as_of: Optional[datetime] = None,
    service: PlatformAnalyticsService = Depends(get_platform_analytics_service),
):
    try:
        return await service.outliers(as_of=as_of)
    except ServiceError as exc:
        raise _service_error(exc) from exc


@router.get("/insights", response_model=PlatformInsights)
async def get_insights(
    as_of: Optional[datetime] = None,
    service: PlatformAnalyticsService = Depends(get_platform_analytics_service),
):
    try:
        return await service.insights(as_of=as_of)
    except ServiceError as exc:
        raise _service_error(exc) from exc
