from __future__ import annotations

from datetime import date, datetime
from typing import List, Optional

from pydantic import BaseModel, Field


class Tenant(BaseModel):
    """A salon business subscribed to the platform."""

    id: str
    name: str
    slug: str
    account_number: Optional[int] = None
    status: Optional[str] = None
    created_at: Optional[datetime] = None
    activated_at: Optional[datetime] = None


class Location(BaseModel):
    id: str
    tenant_id: Optional[str] = None
    is_active: bool = True
    country: Optional[str] = None


class StaffMembership(BaseModel):
    staff_id: Optional[str] = None
    tenant_id: Optional[str] = None
    is_active: bool = False
    is_approved: bool = False


class BillingRecord(BaseModel):
    tenant_id: str
    billing_cycle: Optional[str] = Field(
        default=None, description="Either 'monthly' or 'annual'"
    )
    base_price: Optional[float] = None
    custom_price: Optional[float] = Field(
        default=None, description="Negotiated price overriding the plan base price"
    )
    plan_name: Optional[str] = None


class ClientRecord(BaseModel):
    id: str
    location_id: Optional[str] = None


class AppointmentRecord(BaseModel):
    id: str
    location_id: Optional[str] = None


class DailySalesRollup(BaseModel):
    location_id: Optional[str] = None
    summary_date: date
    total_revenue: Optional[float] = None
    service_revenue: Optional[float] = None
    product_revenue: Optional[float] = None
    average_ticket: Optional[float] = None


class WeeklyPerformanceRollup(BaseModel):
    staff_id: Optional[str] = None
    week_start: date
    rebooking_rate: Optional[float] = None
    retention_rate: Optional[float] = None
    retail_sales: Optional[float] = None
    new_clients: Optional[int] = None
    total_revenue: Optional[float] = None


class PlatformDataset(BaseModel):
    """Row sets the analytics engine consumes, already authorised upstream."""

    tenants: List[Tenant]
    locations: List[Location] = Field(default_factory=list)
    staff: List[StaffMembership] = Field(default_factory=list)
    billing: List[BillingRecord] = Field(default_factory=list)
    clients: List[ClientRecord] = Field(default_factory=list)
    appointments: List[AppointmentRecord] = Field(default_factory=list)
    daily_sales: List[DailySalesRollup] = Field(default_factory=list)
    weekly_performance: List[WeeklyPerformanceRollup] = Field(default_factory=list)
