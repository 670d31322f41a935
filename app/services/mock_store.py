from __future__ import annotations

from dataclasses import dataclass
from datetime import date, datetime, timedelta, timezone
from typing import List, Optional

from app.schemas.platform import (
    AppointmentRecord,
    BillingRecord,
    ClientRecord,
    DailySalesRollup,
    Location,
    PlatformDataset,
    StaffMembership,
    Tenant,
    WeeklyPerformanceRollup,
)


def _ts(value: str) -> datetime:
    return datetime.fromisoformat(value).replace(tzinfo=timezone.utc)


class PlatformDataRepository:
    """In-memory platform data seeded with a handful of salon tenants.

    Sales and performance rollups are laid out relative to ``now`` so the
    this-month and last-month buckets always have data.
    """

    def __init__(self, *, now: Optional[datetime] = None) -> None:
        self._now = now or datetime.now(timezone.utc)
        self._dataset = self._seed()

    def _seed(self) -> PlatformDataset:
        tenants = [
            Tenant(
                id="t-1001",
                name="Chillbreeze Orchard",
                slug="chillbreeze-orchard",
                account_number=1001,
                status="active",
                created_at=_ts("2024-03-14T09:00:00"),
                activated_at=_ts("2024-03-20T09:00:00"),
            ),
            Tenant(
                id="t-1002",
                name="Luxe Locks Studio",
                slug="luxe-locks-studio",
                account_number=1002,
                status="active",
                created_at=_ts("2024-03-28T11:30:00"),
                activated_at=_ts("2024-04-02T08:00:00"),
            ),
            Tenant(
                id="t-1003",
                name="Fade Factory",
                slug="fade-factory",
                account_number=1003,
                status="trial",
                created_at=_ts("2025-01-09T15:45:00"),
            ),
            Tenant(
                id="t-1004",
                name="Glow Bar Spa",
                slug="glow-bar-spa",
                account_number=1004,
                status="inactive",
                created_at=_ts("2024-11-02T10:15:00"),
                activated_at=_ts("2024-11-05T10:15:00"),
            ),
        ]
        locations = [
            Location(id="loc-orchard", tenant_id="t-1001", country="SG"),
            Location(id="loc-tampines", tenant_id="t-1001", country="SG"),
            Location(id="loc-bondi", tenant_id="t-1002", country="AU"),
            Location(id="loc-fade-main", tenant_id="t-1003"),
            Location(id="loc-glow", tenant_id="t-1004", is_active=False, country="SG"),
        ]
        staff = [
            StaffMembership(staff_id="stf-01", tenant_id="t-1001", is_active=True, is_approved=True),
            StaffMembership(staff_id="stf-02", tenant_id="t-1001", is_active=True, is_approved=True),
            StaffMembership(staff_id="stf-03", tenant_id="t-1001", is_active=True, is_approved=False),
            StaffMembership(staff_id="stf-04", tenant_id="t-1002", is_active=True, is_approved=True),
            StaffMembership(staff_id="stf-05", tenant_id="t-1003", is_active=False, is_approved=True),
            StaffMembership(staff_id="stf-06", tenant_id="t-1004", is_active=True, is_approved=True),
        ]
        billing = [
            BillingRecord(
                tenant_id="t-1001", billing_cycle="monthly", base_price=299.0, plan_name="Growth"
            ),
            BillingRecord(
                tenant_id="t-1002",
                billing_cycle="annual",
                base_price=3588.0,
                custom_price=2400.0,
                plan_name="Professional",
            ),
            BillingRecord(
                tenant_id="t-1004", billing_cycle="monthly", base_price=99.0, plan_name="Starter"
            ),
        ]
        clients = [
            ClientRecord(id=f"cli-{n:03d}", location_id=location)
            for n, location in enumerate(
                ["loc-orchard"] * 4 + ["loc-tampines"] * 2 + ["loc-bondi"] * 3 + ["loc-fade-main"],
                start=1,
            )
        ]
        appointments = [
            AppointmentRecord(id=f"apt-{n:03d}", location_id=location)
            for n, location in enumerate(
                ["loc-orchard"] * 6 + ["loc-tampines"] * 3 + ["loc-bondi"] * 5 + [None],
                start=1,
            )
        ]
        return PlatformDataset(
            tenants=tenants,
            locations=locations,
            staff=staff,
            billing=billing,
            clients=clients,
            appointments=appointments,
            daily_sales=self._seed_sales(),
            weekly_performance=self._seed_performance(),
        )

    def _seed_sales(self) -> List[DailySalesRollup]:
        today = self._now.date()
        per_location = {
            "loc-orchard": (1800.0, 1500.0, 300.0, 85.0),
            "loc-tampines": (950.0, 850.0, 100.0, 62.5),
            "loc-bondi": (1200.0, 980.0, 220.0, 74.0),
        }
        rollups: List[DailySalesRollup] = []
        for days_back in range(0, 56, 7):
            summary_date: date = today - timedelta(days=days_back)
            for location_id, (total, service, product, ticket) in per_location.items():
                rollups.append(
                    DailySalesRollup(
                        location_id=location_id,
                        summary_date=summary_date,
                        total_revenue=total,
                        service_revenue=service,
                        product_revenue=product,
                        average_ticket=ticket,
                    )
                )
        return rollups

    def _seed_performance(self) -> List[WeeklyPerformanceRollup]:
        week_start = self._now.date() - timedelta(days=self._now.weekday())
        per_staff = {
            "stf-01": (68.0, 74.0, 420.0, 3, 2900.0),
            "stf-02": (55.0, 61.0, 180.0, 2, 1900.0),
            "stf-04": (72.0, None, 310.0, 4, 2600.0),
        }
        rollups: List[WeeklyPerformanceRollup] = []
        for weeks_back in range(4):
            start = week_start - timedelta(weeks=weeks_back)
            for staff_id, (rebooking, retention, retail, new_clients, revenue) in per_staff.items():
                rollups.append(
                    WeeklyPerformanceRollup(
                        staff_id=staff_id,
                        week_start=start,
                        rebooking_rate=rebooking,
                        retention_rate=retention,
                        retail_sales=retail,
                        new_clients=new_clients,
                        total_revenue=revenue,
                    )
                )
        return rollups

    async def load_dataset(self) -> PlatformDataset:
        return self._dataset.model_copy(deep=True)

    def replace_dataset(self, dataset: PlatformDataset) -> None:
        self._dataset = dataset


@dataclass
class MockDataStore:
    platform: PlatformDataRepository


_mock_store: Optional[MockDataStore] = None


def get_mock_store() -> MockDataStore:
    global _mock_store
    if _mock_store is None:
        _mock_store = MockDataStore(platform=PlatformDataRepository())
    return _mock_store


def reset_mock_store() -> None:
    global _mock_store
    _mock_store = None
