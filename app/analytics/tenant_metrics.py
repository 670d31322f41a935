from __future__ import annotations

import logging
from collections import defaultdict
from dataclasses import dataclass, field
from datetime import date, datetime, timedelta
from typing import DefaultDict, Dict, List, Optional, Tuple

from app.analytics.lookup import TenantIndex
from app.schemas.analytics import TenantMetrics
from app.schemas.platform import BillingRecord, PlatformDataset, Tenant

logger = logging.getLogger(__name__)


@dataclass
class _PerformanceTotals:
    rebooking: List[float] = field(default_factory=list)
    retention: List[float] = field(default_factory=list)
    retail_sales: float = 0.0
    total_revenue: float = 0.0
    new_clients: int = 0


def month_bounds(now: datetime) -> Tuple[date, date, date]:
    """Return (this month start, last month start, last month end)."""

    this_month_start = now.date().replace(day=1)
    last_month_end = this_month_start - timedelta(days=1)
    last_month_start = last_month_end.replace(day=1)
    return this_month_start, last_month_start, last_month_end


def monthly_price(billing: Optional[BillingRecord]) -> float:
    """Normalise a billing record to a monthly price."""

    if billing is None:
        return 0.0
    if billing.custom_price is not None:
        price = billing.custom_price
    else:
        price = billing.base_price or 0.0
    if billing.billing_cycle == "annual":
        return price / 12
    return price


def growth_percent(this_month: float, last_month: float) -> float:
    # No baseline: revenue that appeared from nothing reads as +100%.
    if last_month > 0:
        return (this_month - last_month) / last_month * 100
    if this_month > 0:
        return 100.0
    return 0.0


def _mean(values: List[float]) -> float:
    return sum(values) / len(values) if values else 0.0


def _initial_metrics(
    tenant: Tenant, billing: Optional[BillingRecord], index: TenantIndex
) -> TenantMetrics:
    return TenantMetrics(
        id=tenant.id,
        name=tenant.name,
        slug=tenant.slug,
        account_number=tenant.account_number or 0,
        subscription_tier=billing.plan_name if billing else None,
        country=index.country_for(tenant.id),
        status=tenant.status or "unknown",
        created_at=tenant.created_at,
        activated_at=tenant.activated_at,
        monthly_recurring_revenue=monthly_price(billing),
        billing_cycle=billing.billing_cycle if billing else None,
    )


def reduce_tenant_metrics(
    dataset: PlatformDataset,
    index: TenantIndex,
    *,
    now: datetime,
) -> List[TenantMetrics]:
    """Fold every raw dataset into one metrics record per tenant.

    Tenants keep the order of ``dataset.tenants``. Rows that cannot be routed
    to a known tenant are skipped.
    """

    billing_by_tenant: Dict[str, BillingRecord] = {}
    for record in dataset.billing:
        billing_by_tenant.setdefault(record.tenant_id, record)

    metrics_by_tenant: Dict[str, TenantMetrics] = {}
    for tenant in dataset.tenants:
        metrics_by_tenant[tenant.id] = _initial_metrics(
            tenant, billing_by_tenant.get(tenant.id), index
        )

    for tenant_id in index.location_tenants.values():
        metrics = metrics_by_tenant.get(tenant_id)
        if metrics is not None:
            metrics.location_count += 1

    for member in dataset.staff:
        metrics = metrics_by_tenant.get(member.tenant_id) if member.tenant_id else None
        if metrics is None:
            continue
        metrics.user_count += 1
        if member.is_active and member.is_approved:
            metrics.active_user_count += 1

    for client in dataset.clients:
        metrics = metrics_by_tenant.get(index.tenant_for_location(client.location_id))
        if metrics is not None:
            metrics.client_count += 1

    for appointment in dataset.appointments:
        metrics = metrics_by_tenant.get(index.tenant_for_location(appointment.location_id))
        if metrics is not None:
            metrics.appointment_count += 1

    _apply_sales(dataset, index, metrics_by_tenant, now=now)
    _apply_performance(dataset, index, metrics_by_tenant)

    logger.debug("Reduced metrics for %d tenants", len(metrics_by_tenant))
    return list(metrics_by_tenant.values())


def _apply_sales(
    dataset: PlatformDataset,
    index: TenantIndex,
    metrics_by_tenant: Dict[str, TenantMetrics],
    *,
    now: datetime,
) -> None:
    this_month_start, last_month_start, last_month_end = month_bounds(now)
    this_month: DefaultDict[str, float] = defaultdict(float)
    last_month: DefaultDict[str, float] = defaultdict(float)
    tickets: DefaultDict[str, List[float]] = defaultdict(list)

    skipped = 0
    for sale in dataset.daily_sales:
        tenant_id = index.tenant_for_location(sale.location_id)
        metrics = metrics_by_tenant.get(tenant_id) if tenant_id else None
        if metrics is None:
            skipped += 1
            continue
        revenue = sale.total_revenue or 0.0
        metrics.total_revenue += revenue
        metrics.service_revenue += sale.service_revenue or 0.0
        metrics.retail_revenue += sale.product_revenue or 0.0

        if sale.summary_date >= this_month_start:
            this_month[tenant_id] += revenue
        elif last_month_start <= sale.summary_date <= last_month_end:
            last_month[tenant_id] += revenue

        if sale.average_ticket is not None:
            tickets[tenant_id].append(sale.average_ticket)

    if skipped:
        logger.debug("Skipped %d sales rollups without a known tenant", skipped)

    for tenant_id, metrics in metrics_by_tenant.items():
        metrics.revenue_this_month = this_month.get(tenant_id, 0.0)
        metrics.revenue_last_month = last_month.get(tenant_id, 0.0)
        metrics.revenue_growth_percent = growth_percent(
            metrics.revenue_this_month, metrics.revenue_last_month
        )
        metrics.average_ticket = _mean(tickets.get(tenant_id, []))


def _apply_performance(
    dataset: PlatformDataset,
    index: TenantIndex,
    metrics_by_tenant: Dict[str, TenantMetrics],
) -> None:
    totals: Dict[str, _PerformanceTotals] = {}
    for row in dataset.weekly_performance:
        tenant_id = index.tenant_for_staff(row.staff_id)
        if tenant_id is None or tenant_id not in metrics_by_tenant:
            continue
        perf = totals.setdefault(tenant_id, _PerformanceTotals())
        if row.rebooking_rate is not None:
            perf.rebooking.append(row.rebooking_rate)
        if row.retention_rate is not None:
            perf.retention.append(row.retention_rate)
        perf.retail_sales += row.retail_sales or 0.0
        perf.total_revenue += row.total_revenue or 0.0
        perf.new_clients += row.new_clients or 0

    for tenant_id, perf in totals.items():
        metrics = metrics_by_tenant[tenant_id]
        metrics.avg_rebooking_rate = _mean(perf.rebooking)
        metrics.avg_retention_rate = _mean(perf.retention)
        if perf.total_revenue > 0:
            metrics.avg_retail_attachment_percent = (
                perf.retail_sales / perf.total_revenue * 100
            )
        else:
            metrics.avg_retail_attachment_percent = 0.0
        # Summed over the whole fetched window, not just the calendar month.
        metrics.new_clients_this_month = perf.new_clients
