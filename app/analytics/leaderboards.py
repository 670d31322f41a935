from __future__ import annotations

from dataclasses import dataclass, replace
from typing import Callable, Dict, List, Optional, Sequence

from app.schemas.analytics import Leaderboards, TenantMetrics

DEFAULT_LEADERBOARD_SIZE = 10


@dataclass(frozen=True)
class LeaderboardSelector:
    """Filter, sort and slice a tenant metrics list.

    Sorting is stable, so ties keep the input order (account number order
    when the tenants were fetched that way).
    """

    name: str
    key: Callable[[TenantMetrics], float]
    predicate: Optional[Callable[[TenantMetrics], bool]] = None
    descending: bool = True
    limit: int = DEFAULT_LEADERBOARD_SIZE

    def select(self, metrics: Sequence[TenantMetrics]) -> List[TenantMetrics]:
        candidates = [m for m in metrics if self.predicate is None or self.predicate(m)]
        candidates.sort(key=self.key, reverse=self.descending)
        return candidates[: self.limit]

    def with_limit(self, limit: int) -> "LeaderboardSelector":
        return replace(self, limit=limit)


LEADERBOARDS: Dict[str, LeaderboardSelector] = {
    selector.name: selector
    for selector in (
        LeaderboardSelector("revenue", key=lambda m: m.revenue_this_month),
        LeaderboardSelector("size", key=lambda m: m.location_count + m.user_count),
        LeaderboardSelector(
            "growth",
            key=lambda m: m.revenue_growth_percent,
            predicate=lambda m: m.revenue_growth_percent != 0,
        ),
        LeaderboardSelector(
            "performance",
            key=lambda m: m.avg_rebooking_rate + m.avg_retention_rate,
            predicate=lambda m: m.avg_rebooking_rate > 0 or m.avg_retention_rate > 0,
        ),
        LeaderboardSelector("new_clients", key=lambda m: m.new_clients_this_month),
        LeaderboardSelector(
            "retail",
            key=lambda m: m.avg_retail_attachment_percent,
            predicate=lambda m: m.avg_retail_attachment_percent > 0,
        ),
    )
}


def get_selector(name: str, *, limit: Optional[int] = None) -> LeaderboardSelector:
    try:
        selector = LEADERBOARDS[name]
    except KeyError:
        raise KeyError(f"Unknown leaderboard '{name}'") from None
    return selector.with_limit(limit) if limit is not None else selector


def build_leaderboards(
    metrics: Sequence[TenantMetrics], *, limit: int = DEFAULT_LEADERBOARD_SIZE
) -> Leaderboards:
    return Leaderboards(
        **{
            name: selector.with_limit(limit).select(metrics)
            for name, selector in LEADERBOARDS.items()
        }
    )
