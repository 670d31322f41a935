import os
import sys
from datetime import date, datetime, timezone

import pytest
from pydantic import ValidationError

sys.path.append(os.path.abspath(os.path.join(os.path.dirname(__file__), "..")))

from app.analytics.engine import compute_platform_analytics
from app.schemas.platform import (
    BillingRecord,
    DailySalesRollup,
    Location,
    PlatformDataset,
    StaffMembership,
    Tenant,
    WeeklyPerformanceRollup,
)

NOW = datetime(2026, 10, 17, 12, 0, tzinfo=timezone.utc)


def _two_tenant_dataset() -> PlatformDataset:
    return PlatformDataset(
        tenants=[
            Tenant(id="a", name="Atelier A", slug="atelier-a", account_number=1, status="active",
                   created_at=datetime(2025, 2, 1, tzinfo=timezone.utc)),
            Tenant(id="b", name="Barber B", slug="barber-b", account_number=2, status="active",
                   created_at=datetime(2025, 6, 9, tzinfo=timezone.utc)),
        ],
        locations=[
            Location(id="a-1", tenant_id="a", country="US"),
            Location(id="a-2", tenant_id="a", country="US"),
            Location(id="a-3", tenant_id="a"),
            Location(id="b-1", tenant_id="b", country="CA"),
        ],
        billing=[BillingRecord(tenant_id="a", billing_cycle="monthly", base_price=300, plan_name="Growth")],
        daily_sales=[
            DailySalesRollup(location_id="a-1", summary_date=date(2026, 10, 3), total_revenue=6000),
            DailySalesRollup(location_id="a-2", summary_date=date(2026, 10, 10), total_revenue=4000),
            DailySalesRollup(location_id="a-3", summary_date=date(2026, 9, 12), total_revenue=8000),
        ],
    )


def test_two_tenant_scenario() -> None:
    result = compute_platform_analytics(_two_tenant_dataset(), now=NOW)
    summary = result.summary
    metrics = {m.id: m for m in summary.tenant_metrics}

    assert summary.total_locations == 4
    assert summary.combined_monthly_revenue == pytest.approx(10_000)
    assert summary.platform_mrr == pytest.approx(300)
    assert summary.platform_arr == pytest.approx(3600)
    assert summary.average_revenue_per_tenant == pytest.approx(10_000)
    assert summary.average_revenue_per_location == pytest.approx(2500)
    assert metrics["a"].revenue_growth_percent == pytest.approx(25)
    assert metrics["b"].revenue_growth_percent == 0
    assert metrics["b"].monthly_recurring_revenue == 0
    assert [m.id for m in result.leaderboards.revenue] == ["a", "b"]
    assert [m.id for m in result.leaderboards.growth] == ["a"]


def test_every_tenant_appears_exactly_once() -> None:
    dataset = _two_tenant_dataset()
    dataset.tenants.append(Tenant(id="c", name="Curl Co", slug="curl-co", account_number=3))

    summary = compute_platform_analytics(dataset, now=NOW).summary

    assert [m.id for m in summary.tenant_metrics] == ["a", "b", "c"]
    assert summary.total_tenants == 3
    assert sum(b.count for b in summary.country_distribution) == 3


def test_reference_instant_controls_month_buckets() -> None:
    november = datetime(2026, 11, 2, tzinfo=timezone.utc)

    metrics = {
        m.id: m
        for m in compute_platform_analytics(_two_tenant_dataset(), now=november).summary.tenant_metrics
    }

    assert metrics["a"].revenue_this_month == 0
    assert metrics["a"].revenue_last_month == pytest.approx(10_000)
    assert metrics["a"].revenue_growth_percent == pytest.approx(-100)


def test_leaderboard_limit_is_configurable() -> None:
    result = compute_platform_analytics(_two_tenant_dataset(), now=NOW, leaderboard_limit=1)

    assert [m.id for m in result.leaderboards.revenue] == ["a"]
    assert len(result.leaderboards.size) == 1


def test_performance_rollups_flow_into_summary() -> None:
    dataset = _two_tenant_dataset()
    dataset.staff.append(StaffMembership(staff_id="s-1", tenant_id="b", is_active=True, is_approved=True))
    dataset.weekly_performance.append(
        WeeklyPerformanceRollup(staff_id="s-1", week_start=date(2026, 10, 12), rebooking_rate=64,
                                retention_rate=70, retail_sales=90, new_clients=4, total_revenue=900)
    )

    result = compute_platform_analytics(dataset, now=NOW)

    assert result.summary.avg_rebooking_rate == pytest.approx(64)
    assert result.summary.avg_retail_attachment_percent == pytest.approx(10)
    assert [m.id for m in result.leaderboards.performance] == ["b"]
    assert result.leaderboards.new_clients[0].id == "b"


def test_malformed_rows_fail_at_the_boundary() -> None:
    with pytest.raises(ValidationError):
        PlatformDataset(tenants=[{"id": "x"}], daily_sales=["not a record"])
