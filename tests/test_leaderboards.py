import os
import sys

import pytest

sys.path.append(os.path.abspath(os.path.join(os.path.dirname(__file__), "..")))

from app.analytics.leaderboards import LEADERBOARDS, build_leaderboards, get_selector
from app.schemas.analytics import TenantMetrics


def _metrics(tenant_id: str, account_number: int, **fields) -> TenantMetrics:
    return TenantMetrics(
        id=tenant_id,
        name=f"Salon {tenant_id}",
        slug=tenant_id,
        account_number=account_number,
        **fields,
    )


def test_registry_exposes_six_boards() -> None:
    assert set(LEADERBOARDS) == {"revenue", "size", "growth", "performance", "new_clients", "retail"}


def test_revenue_board_is_sorted_and_capped() -> None:
    metrics = [_metrics(f"t-{n}", n, revenue_this_month=(n * 37) % 101) for n in range(1, 16)]

    board = get_selector("revenue").select(metrics)

    assert len(board) == 10
    for current, following in zip(board, board[1:]):
        assert current.revenue_this_month >= following.revenue_this_month


def test_ties_keep_input_order() -> None:
    metrics = [
        _metrics("t-1", 1, revenue_this_month=100),
        _metrics("t-2", 2, revenue_this_month=300),
        _metrics("t-3", 3, revenue_this_month=100),
    ]

    board = get_selector("revenue").select(metrics)

    assert [m.id for m in board] == ["t-2", "t-1", "t-3"]


def test_filtered_boards() -> None:
    metrics = [
        _metrics("t-1", 1, revenue_growth_percent=-20, avg_rebooking_rate=0, avg_retention_rate=40),
        _metrics("t-2", 2, revenue_growth_percent=0, avg_rebooking_rate=70, avg_retention_rate=20,
                 avg_retail_attachment_percent=12),
        _metrics("t-3", 3, revenue_growth_percent=35, avg_retail_attachment_percent=0),
    ]

    boards = build_leaderboards(metrics)

    assert [m.id for m in boards.growth] == ["t-3", "t-1"]
    assert [m.id for m in boards.performance] == ["t-2", "t-1"]
    assert [m.id for m in boards.retail] == ["t-2"]


def test_size_and_new_client_boards() -> None:
    metrics = [
        _metrics("t-1", 1, location_count=1, user_count=3, new_clients_this_month=9),
        _metrics("t-2", 2, location_count=4, user_count=12, new_clients_this_month=2),
    ]

    boards = build_leaderboards(metrics, limit=1)

    assert [m.id for m in boards.size] == ["t-2"]
    assert [m.id for m in boards.new_clients] == ["t-1"]


def test_unknown_board_raises_key_error() -> None:
    with pytest.raises(KeyError):
        get_selector("churn")
