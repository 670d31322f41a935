"""Platform analytics aggregation engine.

Pure and synchronous: it takes fetched row sets and returns aggregate
structures without touching storage or the network.
"""

from app.analytics.engine import compute_platform_analytics
from app.analytics.leaderboards import LEADERBOARDS, LeaderboardSelector, build_leaderboards
from app.analytics.lookup import TenantIndex
from app.analytics.platform_summary import reduce_platform_summary
from app.analytics.tenant_metrics import reduce_tenant_metrics

__all__ = [
    "LEADERBOARDS",
    "LeaderboardSelector",
    "TenantIndex",
    "build_leaderboards",
    "compute_platform_analytics",
    "reduce_platform_summary",
    "reduce_tenant_metrics",
]
