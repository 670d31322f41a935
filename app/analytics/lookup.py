from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Dict, Iterable, Optional

from app.schemas.platform import Location, StaffMembership

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class TenantIndex:
    """Build-once lookup tables that route tenant-less rows to their tenant.

    ``location_tenants`` only holds active locations that belong to a tenant.
    ``staff_tenants`` holds every membership carrying both ids; the active and
    approved flags are left for the reducer. ``tenant_countries`` keeps the
    first country seen among a tenant's active locations.
    """

    location_tenants: Dict[str, str] = field(default_factory=dict)
    staff_tenants: Dict[str, str] = field(default_factory=dict)
    tenant_countries: Dict[str, str] = field(default_factory=dict)

    @classmethod
    def build(
        cls,
        locations: Iterable[Location],
        staff: Iterable[StaffMembership],
    ) -> "TenantIndex":
        location_tenants: Dict[str, str] = {}
        tenant_countries: Dict[str, str] = {}
        for location in locations:
            if not location.is_active or not location.tenant_id:
                continue
            location_tenants[location.id] = location.tenant_id
            if location.country and location.tenant_id not in tenant_countries:
                tenant_countries[location.tenant_id] = location.country

        staff_tenants: Dict[str, str] = {}
        for member in staff:
            if member.staff_id and member.tenant_id:
                staff_tenants[member.staff_id] = member.tenant_id

        logger.debug(
            "Indexed %d locations and %d staff members",
            len(location_tenants),
            len(staff_tenants),
        )
        return cls(
            location_tenants=location_tenants,
            staff_tenants=staff_tenants,
            tenant_countries=tenant_countries,
        )

    def tenant_for_location(self, location_id: Optional[str]) -> Optional[str]:
        if not location_id:
            return None
        return self.location_tenants.get(location_id)

    def tenant_for_staff(self, staff_id: Optional[str]) -> Optional[str]:
        if not staff_id:
            return None
        return self.staff_tenants.get(staff_id)

    def country_for(self, tenant_id: str) -> Optional[str]:
        return self.tenant_countries.get(tenant_id)
