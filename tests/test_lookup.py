import os
import sys

sys.path.append(os.path.abspath(os.path.join(os.path.dirname(__file__), "..")))

from app.analytics.lookup import TenantIndex
from app.schemas.platform import Location, StaffMembership


def test_only_active_locations_with_tenant_are_indexed() -> None:
    index = TenantIndex.build(
        [
            Location(id="loc-1", tenant_id="t-1"),
            Location(id="loc-2", tenant_id="t-1", is_active=False),
            Location(id="loc-3", tenant_id=None),
        ],
        [],
    )

    assert index.location_tenants == {"loc-1": "t-1"}
    assert index.tenant_for_location("loc-2") is None
    assert index.tenant_for_location("loc-3") is None
    assert index.tenant_for_location(None) is None


def test_first_country_wins_per_tenant() -> None:
    index = TenantIndex.build(
        [
            Location(id="loc-1", tenant_id="t-1", country=None),
            Location(id="loc-2", tenant_id="t-1", country="SG"),
            Location(id="loc-3", tenant_id="t-1", country="AU"),
            Location(id="loc-4", tenant_id="t-2", country="AU", is_active=False),
        ],
        [],
    )

    assert index.country_for("t-1") == "SG"
    assert index.country_for("t-2") is None


def test_staff_index_ignores_flags_and_requires_both_ids() -> None:
    index = TenantIndex.build(
        [],
        [
            StaffMembership(staff_id="s-1", tenant_id="t-1", is_active=False, is_approved=False),
            StaffMembership(staff_id="s-2", tenant_id=None, is_active=True, is_approved=True),
            StaffMembership(staff_id=None, tenant_id="t-1"),
        ],
    )

    assert index.staff_tenants == {"s-1": "t-1"}
    assert index.tenant_for_staff("s-2") is None


def test_duplicate_ids_are_last_wins() -> None:
    index = TenantIndex.build(
        [Location(id="loc-1", tenant_id="t-1"), Location(id="loc-1", tenant_id="t-2")],
        [StaffMembership(staff_id="s-1", tenant_id="t-1"), StaffMembership(staff_id="s-1", tenant_id="t-3")],
    )

    assert index.tenant_for_location("loc-1") == "t-2"
    assert index.tenant_for_staff("s-1") == "t-3"
