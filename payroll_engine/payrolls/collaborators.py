"""
Interfaces of the external collaborators the payroll service reads from
The transport behind each lookup (database, HTTP client, fixtures) is chosen
by whoever constructs the service.
"""

from datetime import datetime, timezone
from typing import Any, Dict, List, Optional, Protocol

from pydantic import BaseModel, Field

from payroll_engine.payrolls.schemas import (
    Country,
    EmploymentRecord,
    PayrollPeriod,
    SalaryComponent,
    SalaryRecord,
    StatutoryComponent,
)


class CountryLookup(Protocol):
    async def find_one(self, country_id: str) -> Optional[Country]:
        ...


class PayrollPeriodLookup(Protocol):
    async def find_one(self, payroll_period_id: str) -> Optional[PayrollPeriod]:
        ...


class SalaryComponentLookup(Protocol):
    async def find_by_country(self, country_id: str) -> List[SalaryComponent]:
        ...


class StatutoryComponentLookup(Protocol):
    async def find_by_country(self, country_id: str) -> List[StatutoryComponent]:
        ...


class EmploymentLookup(Protocol):
    async def find_active_by_employee(self, employee_id: str) -> Optional[EmploymentRecord]:
        ...


class SalaryHistoryLookup(Protocol):
    async def find_by_employment(self, employment_id: str) -> List[SalaryRecord]:
        ...


class AuditEntry(BaseModel):
    actor_user_id: str
    actor_role: str
    action: str
    entity_type: str
    entity_id: str
    changes: Dict[str, Any] = {}
    created_at: datetime = Field(default_factory=lambda: datetime.now(timezone.utc))


class AuditSink(Protocol):
    async def log(self, entry: AuditEntry) -> None:
        ...
