import os
import sys
from datetime import datetime, timezone

import pytest

sys.path.append(os.path.abspath(os.path.join(os.path.dirname(__file__), "..")))

from app.analytics.platform_summary import has_performance_data, reduce_platform_summary
from app.schemas.analytics import TenantMetrics

NOW = datetime(2026, 10, 17, 12, 0, tzinfo=timezone.utc)


def _metrics(tenant_id: str, **fields) -> TenantMetrics:
    return TenantMetrics(id=tenant_id, name=f"Salon {tenant_id}", slug=tenant_id, **fields)


def test_totals_and_safe_division_without_locations() -> None:
    summary = reduce_platform_summary(
        [
            _metrics("t-1", status="active", user_count=3, revenue_this_month=500, total_revenue=500),
            _metrics("t-2", status="trial", client_count=4, appointment_count=7),
        ],
        now=NOW,
    )

    assert summary.generated_at == NOW
    assert summary.total_tenants == 2
    assert summary.active_tenants == 1
    assert summary.total_users == 3
    assert summary.total_clients == 4
    assert summary.total_appointments == 7
    assert summary.combined_monthly_revenue == pytest.approx(500)
    assert summary.average_revenue_per_location == 0


def test_average_revenue_per_tenant_skips_tenants_that_never_transacted() -> None:
    summary = reduce_platform_summary(
        [
            _metrics("t-1", revenue_this_month=600, total_revenue=2000, location_count=2),
            _metrics("t-2", revenue_this_month=0, total_revenue=900, location_count=1),
            _metrics("t-3", location_count=1),
        ],
        now=NOW,
    )

    assert summary.average_revenue_per_tenant == pytest.approx(300)
    assert summary.average_revenue_per_location == pytest.approx(150)


def test_ticket_only_tenant_is_excluded_from_all_performance_averages() -> None:
    with_rebooking = _metrics(
        "t-1",
        avg_rebooking_rate=60,
        avg_retention_rate=80,
        average_ticket=50,
        avg_retail_attachment_percent=10,
    )
    ticket_only = _metrics("t-2", average_ticket=500, avg_retail_attachment_percent=90)

    summary = reduce_platform_summary([with_rebooking, ticket_only], now=NOW)

    assert has_performance_data(with_rebooking)
    assert not has_performance_data(ticket_only)
    assert summary.avg_rebooking_rate == pytest.approx(60)
    assert summary.avg_retention_rate == pytest.approx(80)
    assert summary.avg_ticket == pytest.approx(50)
    assert summary.avg_retail_attachment_percent == pytest.approx(10)


def test_performance_averages_are_zero_without_rebooking_data() -> None:
    summary = reduce_platform_summary([_metrics("t-1", average_ticket=75)], now=NOW)

    assert summary.avg_rebooking_rate == 0
    assert summary.avg_ticket == 0


def test_distributions_default_labels_and_ordering() -> None:
    metrics = [
        _metrics("t-1", country="SG", status="active", subscription_tier="Growth",
                 monthly_recurring_revenue=299),
        _metrics("t-2", country=None, status="trial"),
        _metrics("t-3", country="AU", status="active", subscription_tier="Pro",
                 monthly_recurring_revenue=500),
        _metrics("t-4", country="AU", status="active", subscription_tier="Growth",
                 monthly_recurring_revenue=299),
    ]

    summary = reduce_platform_summary(metrics, now=NOW)

    countries = [(b.key, b.count) for b in summary.country_distribution]
    assert countries == [("AU", 2), ("SG", 1), ("Unknown", 1)]
    assert [(b.key, b.count) for b in summary.status_distribution] == [("active", 3), ("trial", 1)]
    assert [(b.key, b.count, b.mrr) for b in summary.tier_distribution] == [
        ("Growth", 2, pytest.approx(598)),
        ("Pro", 1, pytest.approx(500)),
        ("No Plan", 1, 0),
    ]
    assert sum(b.count for b in summary.country_distribution) == summary.total_tenants
    assert sum(b.mrr for b in summary.tier_distribution) == pytest.approx(summary.platform_mrr)
    assert summary.platform_arr == pytest.approx(summary.platform_mrr * 12)


def test_monthly_growth_groups_by_creation_cohort() -> None:
    metrics = [
        _metrics("t-1", created_at=datetime(2025, 3, 4, tzinfo=timezone.utc), location_count=3, user_count=9),
        _metrics("t-2", created_at=datetime(2024, 11, 30, tzinfo=timezone.utc), location_count=1, user_count=2),
        _metrics("t-3", created_at=datetime(2025, 3, 28, tzinfo=timezone.utc), location_count=2, user_count=4),
        _metrics("t-4", created_at=None, location_count=5),
    ]

    growth = reduce_platform_summary(metrics, now=NOW).monthly_growth

    assert [(g.month, g.tenants, g.locations, g.users) for g in growth] == [
        ("2024-11", 1, 1, 2),
        ("2025-03", 2, 5, 13),
    ]
