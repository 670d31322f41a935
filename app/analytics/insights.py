"""Dashboard views derived from a computed platform summary.

These helpers never look at raw rows; they only reshape the tenant metrics
and summary produced by the engine.
"""

from __future__ import annotations

from datetime import datetime, timedelta, timezone
from enum import Enum
from typing import List, Optional, Sequence, Tuple

from app.schemas.analytics import (
    CumulativeGrowthEntry,
    MonthlyGrowthEntry,
    PlatformSummary,
    RevenueBand,
    RevenueMix,
    TenantMetrics,
    TenantOutliers,
    TierRevenue,
)

DEFAULT_OUTLIER_THRESHOLD = 20.0

# (label, inclusive lower bound, exclusive upper bound)
REVENUE_BANDS: Tuple[Tuple[str, float, float], ...] = (
    ("$10K-$50K", 10_000, 50_000),
    ("$50K-$100K", 50_000, 100_000),
    ("$100K-$250K", 100_000, 250_000),
    ("$250K+", 250_000, float("inf")),
)

SEARCH_SORT_FIELDS = frozenset(
    {
        "name",
        "account_number",
        "avg_rebooking_rate",
        "avg_retention_rate",
        "avg_retail_attachment_percent",
        "average_ticket",
        "new_clients_this_month",
        "revenue_this_month",
        "location_count",
        "user_count",
    }
)


class OutlierStatus(str, Enum):
    ABOVE = "above"
    BELOW = "below"
    NEUTRAL = "neutral"


def _as_utc(value: datetime) -> datetime:
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value


def cumulative_growth(monthly_growth: Sequence[MonthlyGrowthEntry]) -> List[CumulativeGrowthEntry]:
    entries: List[CumulativeGrowthEntry] = []
    tenants = locations = users = 0
    for item in sorted(monthly_growth, key=lambda entry: entry.month):
        tenants += item.tenants
        locations += item.locations
        users += item.users
        entries.append(
            CumulativeGrowthEntry(
                month=item.month,
                new_tenants=item.tenants,
                total_tenants=tenants,
                total_locations=locations,
                total_users=users,
            )
        )
    return entries


def revenue_bands(metrics: Sequence[TenantMetrics]) -> List[RevenueBand]:
    """Count tenants per band of this-month revenue."""

    zero = sum(1 for m in metrics if m.revenue_this_month == 0)
    small = sum(1 for m in metrics if 0 < m.revenue_this_month < 10_000)
    bands = [RevenueBand(band="$0", count=zero), RevenueBand(band="<$10K", count=small)]
    for label, lower, upper in REVENUE_BANDS:
        count = sum(1 for m in metrics if lower <= m.revenue_this_month < upper)
        bands.append(RevenueBand(band=label, count=count))
    return bands


def revenue_mix(metrics: Sequence[TenantMetrics]) -> RevenueMix:
    return RevenueMix(
        service_revenue=sum(m.service_revenue for m in metrics),
        retail_revenue=sum(m.retail_revenue for m in metrics),
    )


def tier_revenue(summary: PlatformSummary) -> List[TierRevenue]:
    return [
        TierRevenue(
            tier=bucket.key,
            mrr=bucket.mrr,
            accounts=bucket.count,
            avg_mrr=bucket.mrr / bucket.count if bucket.count > 0 else 0.0,
        )
        for bucket in summary.tier_distribution
    ]


def recent_signups(
    metrics: Sequence[TenantMetrics],
    *,
    now: datetime,
    days: int = 30,
    limit: int = 5,
) -> List[TenantMetrics]:
    cutoff = _as_utc(now) - timedelta(days=days)
    recent = [
        m for m in metrics if m.created_at is not None and _as_utc(m.created_at) >= cutoff
    ]
    recent.sort(key=lambda m: _as_utc(m.created_at), reverse=True)
    return recent[:limit]


def outlier_status(
    value: float,
    average: float,
    *,
    higher_is_better: bool = True,
    threshold_percent: float = DEFAULT_OUTLIER_THRESHOLD,
) -> OutlierStatus:
    """Classify a tenant value against the platform average."""

    if value == 0 or average == 0:
        return OutlierStatus.NEUTRAL
    diff = (value - average) / average * 100
    if not higher_is_better:
        diff = -diff
    if diff > threshold_percent:
        return OutlierStatus.ABOVE
    if diff < -threshold_percent:
        return OutlierStatus.BELOW
    return OutlierStatus.NEUTRAL


def tenant_outliers(
    summary: PlatformSummary,
    *,
    threshold_percent: float = DEFAULT_OUTLIER_THRESHOLD,
) -> List[TenantOutliers]:
    def status(value: float, average: float) -> str:
        return outlier_status(value, average, threshold_percent=threshold_percent).value

    return [
        TenantOutliers(
            tenant_id=m.id,
            name=m.name,
            avg_rebooking_rate=status(m.avg_rebooking_rate, summary.avg_rebooking_rate),
            avg_retention_rate=status(m.avg_retention_rate, summary.avg_retention_rate),
            avg_retail_attachment_percent=status(
                m.avg_retail_attachment_percent, summary.avg_retail_attachment_percent
            ),
            average_ticket=status(m.average_ticket, summary.avg_ticket),
        )
        for m in summary.tenant_metrics
    ]


def search_tenants(
    metrics: Sequence[TenantMetrics],
    *,
    query: Optional[str] = None,
    sort_by: str = "avg_rebooking_rate",
    descending: bool = True,
) -> List[TenantMetrics]:
    """Filter by name or account number fragment, then sort by one field."""

    if sort_by not in SEARCH_SORT_FIELDS:
        raise ValueError(f"Cannot sort tenants by '{sort_by}'")

    matches = list(metrics)
    needle = (query or "").strip().lower()
    if needle:
        matches = [
            m
            for m in matches
            if needle in m.name.lower() or needle in str(m.account_number)
        ]

    def sort_key(m: TenantMetrics):
        value = getattr(m, sort_by)
        return value.lower() if isinstance(value, str) else value

    matches.sort(key=sort_key, reverse=descending)
    return matches
