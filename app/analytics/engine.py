from __future__ import annotations

import logging
from datetime import datetime, timezone
from typing import Optional

from app.analytics.leaderboards import DEFAULT_LEADERBOARD_SIZE, build_leaderboards
from app.analytics.lookup import TenantIndex
from app.analytics.platform_summary import reduce_platform_summary
from app.analytics.tenant_metrics import reduce_tenant_metrics
from app.schemas.analytics import PlatformAnalytics
from app.schemas.platform import PlatformDataset

logger = logging.getLogger(__name__)


def compute_platform_analytics(
    dataset: PlatformDataset,
    *,
    now: Optional[datetime] = None,
    leaderboard_limit: int = DEFAULT_LEADERBOARD_SIZE,
) -> PlatformAnalytics:
    """Run one full aggregation over already fetched row sets.

    Every call builds its own index and metrics, so concurrent calls share
    nothing.
    """

    reference = now or datetime.now(timezone.utc)
    logger.debug(
        "Aggregating %d tenants, %d sales rollups, %d performance rollups as of %s",
        len(dataset.tenants),
        len(dataset.daily_sales),
        len(dataset.weekly_performance),
        reference.isoformat(),
    )
    index = TenantIndex.build(dataset.locations, dataset.staff)
    metrics = reduce_tenant_metrics(dataset, index, now=reference)
    summary = reduce_platform_summary(metrics, now=reference)
    leaderboards = build_leaderboards(metrics, limit=leaderboard_limit)
    return PlatformAnalytics(summary=summary, leaderboards=leaderboards)
