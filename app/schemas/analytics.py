from __future__ import annotations

from datetime import datetime
from typing import List, Optional

from pydantic import BaseModel, Field


class TenantMetrics(BaseModel):
    """Per-tenant aggregate. Numeric fields default to zero, never null."""

    id: str
    name: str
    slug: str
    account_number: int = 0
    subscription_tier: Optional[str] = None
    country: Optional[str] = None
    status: str = "unknown"
    created_at: Optional[datetime] = None
    activated_at: Optional[datetime] = None

    location_count: int = 0
    user_count: int = 0
    active_user_count: int = 0
    client_count: int = 0
    appointment_count: int = 0

    # Salon revenue, not subscription revenue
    total_revenue: float = 0.0
    revenue_this_month: float = 0.0
    revenue_last_month: float = 0.0
    revenue_growth_percent: float = 0.0
    average_ticket: float = 0.0
    service_revenue: float = 0.0
    retail_revenue: float = 0.0

    avg_rebooking_rate: float = 0.0
    avg_retention_rate: float = 0.0
    avg_retail_attachment_percent: float = 0.0
    new_clients_this_month: int = 0

    monthly_recurring_revenue: float = 0.0
    billing_cycle: Optional[str] = None


class DistributionBucket(BaseModel):
    key: str
    count: int


class TierBucket(DistributionBucket):
    mrr: float = 0.0


class MonthlyGrowthEntry(BaseModel):
    month: str = Field(..., description="Cohort month formatted as YYYY-MM")
    tenants: int = 0
    locations: int = 0
    users: int = 0


class PlatformSummary(BaseModel):
    generated_at: datetime

    total_tenants: int = 0
    active_tenants: int = 0
    total_locations: int = 0
    total_users: int = 0
    total_clients: int = 0
    total_appointments: int = 0

    combined_monthly_revenue: float = 0.0
    average_revenue_per_tenant: float = 0.0
    average_revenue_per_location: float = 0.0
    platform_mrr: float = 0.0
    platform_arr: float = 0.0

    avg_rebooking_rate: float = 0.0
    avg_retention_rate: float = 0.0
    avg_ticket: float = 0.0
    avg_retail_attachment_percent: float = 0.0

    country_distribution: List[DistributionBucket] = Field(default_factory=list)
    status_distribution: List[DistributionBucket] = Field(default_factory=list)
    tier_distribution: List[TierBucket] = Field(default_factory=list)
    monthly_growth: List[MonthlyGrowthEntry] = Field(default_factory=list)

    tenant_metrics: List[TenantMetrics] = Field(default_factory=list)


class Leaderboards(BaseModel):
    revenue: List[TenantMetrics] = Field(default_factory=list)
    size: List[TenantMetrics] = Field(default_factory=list)
    growth: List[TenantMetrics] = Field(default_factory=list)
    performance: List[TenantMetrics] = Field(default_factory=list)
    new_clients: List[TenantMetrics] = Field(default_factory=list)
    retail: List[TenantMetrics] = Field(default_factory=list)


class PlatformAnalytics(BaseModel):
    """Result of one aggregation run."""

    summary: PlatformSummary
    leaderboards: Leaderboards


class PlatformAnalyticsRequest(BaseModel):
    as_of: Optional[datetime] = Field(
        default=None,
        description="Reference instant for month boundaries. Defaults to now (UTC).",
    )
    include_tenants: bool = Field(
        default=True,
        description="Set to false to drop the per-tenant list from the summary.",
    )


class LeaderboardResponse(BaseModel):
    name: str
    generated_at: datetime
    items: List[TenantMetrics]


class TenantSearchRequest(BaseModel):
    query: Optional[str] = Field(
        default=None, description="Name fragment or account number fragment"
    )
    sort_by: str = Field(default="avg_rebooking_rate")
    descending: bool = True
    as_of: Optional[datetime] = None


class TenantSearchResponse(BaseModel):
    query: Optional[str] = None
    total: int
    items: List[TenantMetrics]


class CumulativeGrowthEntry(BaseModel):
    month: str
    new_tenants: int
    total_tenants: int
    total_locations: int
    total_users: int


class RevenueBand(BaseModel):
    band: str
    count: int


class RevenueMix(BaseModel):
    service_revenue: float = 0.0
    retail_revenue: float = 0.0


class TierRevenue(BaseModel):
    tier: str
    mrr: float
    accounts: int
    avg_mrr: float


class TenantOutliers(BaseModel):
    tenant_id: str
    name: str
    avg_rebooking_rate: str
    avg_retention_rate: str
    avg_retail_attachment_percent: str
    average_ticket: str


class OutlierResponse(BaseModel):
    generated_at: datetime
    threshold_percent: float
    items: List[TenantOutliers]


class PlatformInsights(BaseModel):
    generated_at: datetime
    cumulative_growth: List[CumulativeGrowthEntry] = Field(default_factory=list)
    revenue_bands: List[RevenueBand] = Field(default_factory=list)
    revenue_mix: RevenueMix = Field(default_factory=RevenueMix)
    tier_revenue: List[TierRevenue] = Field(default_factory=list)
    recent_signups: List[TenantMetrics] = Field(default_factory=list)
