from __future__ import annotations

import logging
from collections import Counter
from datetime import datetime
from typing import Callable, Dict, List, Sequence

from app.schemas.analytics import (
    DistributionBucket,
    MonthlyGrowthEntry,
    PlatformSummary,
    TenantMetrics,
    TierBucket,
)

logger = logging.getLogger(__name__)

UNKNOWN_COUNTRY = "Unknown"
NO_PLAN = "No Plan"


def has_performance_data(metrics: TenantMetrics) -> bool:
    """Gate shared by all four platform performance averages.

    A tenant without rebooking data is left out of the ticket and retail
    attachment averages too.
    """

    return metrics.avg_rebooking_rate > 0


def _average(
    metrics: Sequence[TenantMetrics], value: Callable[[TenantMetrics], float]
) -> float:
    if not metrics:
        return 0.0
    return sum(value(m) for m in metrics) / len(metrics)


def _distribution(counts: Counter) -> List[DistributionBucket]:
    buckets = [DistributionBucket(key=key, count=count) for key, count in counts.items()]
    return sorted(buckets, key=lambda bucket: bucket.count, reverse=True)


def _tier_distribution(metrics: Sequence[TenantMetrics]) -> List[TierBucket]:
    tiers: Dict[str, TierBucket] = {}
    for m in metrics:
        tier = m.subscription_tier or NO_PLAN
        bucket = tiers.setdefault(tier, TierBucket(key=tier, count=0, mrr=0.0))
        bucket.count += 1
        bucket.mrr += m.monthly_recurring_revenue
    return sorted(tiers.values(), key=lambda bucket: bucket.mrr, reverse=True)


def _monthly_growth(metrics: Sequence[TenantMetrics]) -> List[MonthlyGrowthEntry]:
    cohorts: Dict[str, MonthlyGrowthEntry] = {}
    for m in metrics:
        if m.created_at is None:
            continue
        month = m.created_at.strftime("%Y-%m")
        entry = cohorts.setdefault(month, MonthlyGrowthEntry(month=month))
        entry.tenants += 1
        entry.locations += m.location_count
        entry.users += m.user_count
    return [cohorts[month] for month in sorted(cohorts)]


def reduce_platform_summary(
    metrics: List[TenantMetrics],
    *,
    now: datetime,
) -> PlatformSummary:
    """Fold per-tenant metrics into platform totals, averages and distributions."""

    total_locations = sum(m.location_count for m in metrics)
    combined_monthly_revenue = sum(m.revenue_this_month for m in metrics)
    platform_mrr = sum(m.monthly_recurring_revenue for m in metrics)

    transacting = [m for m in metrics if m.total_revenue > 0]
    with_performance = [m for m in metrics if has_performance_data(m)]

    summary = PlatformSummary(
        generated_at=now,
        total_tenants=len(metrics),
        active_tenants=sum(1 for m in metrics if m.status == "active"),
        total_locations=total_locations,
        total_users=sum(m.user_count for m in metrics),
        total_clients=sum(m.client_count for m in metrics),
        total_appointments=sum(m.appointment_count for m in metrics),
        combined_monthly_revenue=combined_monthly_revenue,
        average_revenue_per_tenant=_average(transacting, lambda m: m.revenue_this_month),
        average_revenue_per_location=(
            combined_monthly_revenue / total_locations if total_locations > 0 else 0.0
        ),
        platform_mrr=platform_mrr,
        platform_arr=platform_mrr * 12,
        avg_rebooking_rate=_average(with_performance, lambda m: m.avg_rebooking_rate),
        avg_retention_rate=_average(with_performance, lambda m: m.avg_retention_rate),
        avg_ticket=_average(with_performance, lambda m: m.average_ticket),
        avg_retail_attachment_percent=_average(
            with_performance, lambda m: m.avg_retail_attachment_percent
        ),
        country_distribution=_distribution(
            Counter(m.country or UNKNOWN_COUNTRY for m in metrics)
        ),
        status_distribution=_distribution(Counter(m.status for m in metrics)),
        tier_distribution=_tier_distribution(metrics),
        monthly_growth=_monthly_growth(metrics),
        tenant_metrics=metrics,
    )
    logger.debug(
        "Platform summary: %d tenants, %d with performance data",
        summary.total_tenants,
        len(with_performance),
    )
    return summary
