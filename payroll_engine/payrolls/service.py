import asyncio
import logging
import math
import time
import traceback
from datetime import date
from decimal import Decimal
from typing import Callable, Iterable, List, Optional, Tuple

from payroll_engine.core.cache import ReferenceDataCache
from payroll_engine.core.config import settings
from payroll_engine.core.exceptions import (
    ConfigurationError,
    InsufficientPermissionsError,
    ResourceNotFoundError,
)
from payroll_engine.core.logging_config import PayrollOperationLogger
from payroll_engine.core.validators import validate_period_country
from payroll_engine.payrolls import calculation
from payroll_engine.payrolls.calculation import RegionCalculator
from payroll_engine.payrolls.collaborators import (
    AuditEntry,
    AuditSink,
    CountryLookup,
    EmploymentLookup,
    PayrollPeriodLookup,
    SalaryComponentLookup,
    SalaryHistoryLookup,
    StatutoryComponentLookup,
)
from payroll_engine.payrolls.registry import RegionRegistry, build_default_registry
from payroll_engine.payrolls.schemas import (
    BulkCalculationError,
    BulkPayrollCalculationRequest,
    BulkPayrollCalculationResponse,
    CalculationInput,
    Country,
    EmploymentRecord,
    PayrollCalculationRequest,
    PayrollCalculationResponse,
    PayrollCalculationResult,
    PayrollCalculationSummary,
    RegionInfo,
    SalaryRecord,
)

logger = logging.getLogger(__name__)

SYSTEM_ACTOR = "system"
AUDIT_TRACEBACK_LIMIT = 500


def _error_message(exc: Exception) -> str:
    return str(exc) or type(exc).__name__


def _is_active_on(employment: EmploymentRecord, on_date: date) -> bool:
    if employment.status.lower() != "active":
        return False
    return employment.end_date is None or employment.end_date > on_date


def summarize_results(results: Iterable[PayrollCalculationResult]) -> PayrollCalculationSummary:
    """Totals over a set of calculated results, e.g. the output of a bulk run.

    ``currency_code`` is only set when every result shares one currency.
    """
    results = list(results)
    currencies = {r.currency_code for r in results}

    return PayrollCalculationSummary(
        total_employees=len(results),
        total_gross_pay=sum((r.gross_pay for r in results), Decimal("0")),
        total_statutory_deductions=sum((r.total_statutory_deductions for r in results), Decimal("0")),
        total_other_deductions=sum((r.total_other_deductions for r in results), Decimal("0")),
        total_net_pay=sum((r.net_pay for r in results), Decimal("0")),
        currency_code=currencies.pop() if len(currencies) == 1 else None,
    )


class PayrollCalculationService:
    """Orchestrates payroll calculations across regions.

    Reference data (countries, salary and statutory components) is read
    through a per-instance TTL cache; employee data is always fetched fresh.
    """

    def __init__(
        self,
        countries: CountryLookup,
        payroll_periods: PayrollPeriodLookup,
        salary_components: SalaryComponentLookup,
        statutory_components: StatutoryComponentLookup,
        employments: EmploymentLookup,
        salary_history: SalaryHistoryLookup,
        audit: AuditSink,
        registry: Optional[RegionRegistry] = None,
        cache_ttl_seconds: Optional[float] = None,
        batch_size: Optional[int] = None,
        privileged_roles: Optional[List[str]] = None,
        bulk_roles: Optional[List[str]] = None,
        clock: Callable[[], float] = time.time,
    ):
        self.countries = countries
        self.payroll_periods = payroll_periods
        self.salary_components = salary_components
        self.statutory_components = statutory_components
        self.employments = employments
        self.salary_history = salary_history
        self.audit = audit
        self.registry = registry if registry is not None else build_default_registry()

        ttl = settings.reference_cache_ttl_seconds if cache_ttl_seconds is None else cache_ttl_seconds
        self.cache = ReferenceDataCache(ttl_seconds=ttl, clock=clock)

        self.batch_size = settings.bulk_batch_size if batch_size is None else batch_size
        if self.batch_size < 1:
            raise ConfigurationError(
                detail="Bulk batch size must be at least 1",
                config_key="bulk_batch_size"
            )

        if privileged_roles is None:
            privileged_roles = settings.privileged_roles
        if bulk_roles is None:
            bulk_roles = settings.bulk_roles
        self.privileged_roles = [r.lower() for r in privileged_roles]
        self.bulk_roles = [r.lower() for r in bulk_roles]

    def register_region_factory(self, country_code: str, calculator: RegionCalculator) -> None:
        self.registry.register(country_code, calculator)

    def list_regions(self) -> List[RegionInfo]:
        return self.registry.regions()

    def clear_cache(self) -> None:
        """Drop all cached reference data (forced refresh)."""
        self.cache.clear()

    async def _get_country(self, country_id: str) -> Country:
        country = await self.cache.countries.get_or_fetch(
            country_id, lambda: self.countries.find_one(country_id)
        )
        if country is None:
            raise ResourceNotFoundError("Country", country_id)
        return country

    async def _get_employee_data(
        self,
        employee_id: str,
        on_date: date
    ) -> Tuple[EmploymentRecord, SalaryRecord]:
        """Active employment record and the salary record in effect on ``on_date``."""
        employment = await self.employments.find_active_by_employee(employee_id)
        if employment is None or not _is_active_on(employment, on_date):
            raise ResourceNotFoundError("Active employment record", employee_id)

        salary_records = await self.salary_history.find_by_employment(employment.id)
        effective = [r for r in salary_records if r.effective_date <= on_date]
        if not effective:
            raise ResourceNotFoundError("Current salary record", employment.id)

        salary = max(effective, key=lambda r: r.effective_date)
        logger.info(
            f"Retrieved employee data for {employee_id}: salary={salary.salary_amount} {salary.salary_currency}"
        )
        return employment, salary

    async def _emit_audit(self, entry: AuditEntry) -> None:
        try:
            await self.audit.log(entry)
        except Exception as e:
            logger.error(f"Failed to log {entry.action} audit: {str(e)}")

    async def calculate_payroll(
        self,
        request: PayrollCalculationRequest,
        actor_id: str = SYSTEM_ACTOR,
        actor_role: str = SYSTEM_ACTOR,
    ) -> PayrollCalculationResponse:
        """Calculate payroll for a single employee."""
        calculation_date = request.calculation_date or date.today()
        warnings: List[str] = []

        with PayrollOperationLogger("calculate_payroll", request.employee_id, logger) as operation:
            try:
                country = await self._get_country(request.country_id)

                period = await self.payroll_periods.find_one(request.payroll_period_id)
                if period is None:
                    raise ResourceNotFoundError("Payroll period", request.payroll_period_id)
                validate_period_country(period.country_id, request.country_id)

                salary_components = await self.cache.salary_components.get_or_fetch(
                    request.country_id, lambda: self.salary_components.find_by_country(request.country_id)
                )
                statutory_components = await self.cache.statutory_components.get_or_fetch(
                    request.country_id, lambda: self.statutory_components.find_by_country(request.country_id)
                )

                employment, salary = await self._get_employee_data(request.employee_id, calculation_date)

                if salary.salary_currency != country.currency_code:
                    warnings.append(
                        f"Employee salary currency ({salary.salary_currency}) differs from country currency "
                        f"({country.currency_code}). Using employee salary currency."
                    )
                    logger.warning(f"Currency mismatch for employee {request.employee_id}: {warnings[-1]}")

                calculation_input = CalculationInput(
                    employee_id=request.employee_id,
                    country_id=request.country_id,
                    country_code=country.code,
                    payroll_period_id=request.payroll_period_id,
                    calculation_date=calculation_date,
                    basic_salary=salary.salary_amount,
                    currency_code=salary.salary_currency,
                    salary_components=salary_components or [],
                    statutory_components=statutory_components or [],
                    include_overtime=request.include_overtime is not False,
                    include_night_shift=request.include_night_shift is not False,
                    metadata={
                        "employmentRecordId": employment.id,
                        "employeeName": employment.employee_name,
                        "employeeEmail": employment.employee_email,
                        "payrollPeriod": {
                            "startDate": period.start_date.isoformat(),
                            "endDate": period.end_date.isoformat(),
                        },
                    },
                )

                calculator = self.registry.get(country.code)
                result = calculation.calculate_payroll(calculator, calculation_input)

            except Exception as e:
                await self._emit_audit(AuditEntry(
                    actor_user_id=actor_id,
                    actor_role=actor_role,
                    action="payroll_calculation_failed",
                    entity_type="PayrollCalculation",
                    entity_id=request.employee_id,
                    changes={
                        "countryId": request.country_id,
                        "payrollPeriodId": request.payroll_period_id,
                        "error": _error_message(e),
                        "errorStack": traceback.format_exc()[:AUDIT_TRACEBACK_LIMIT],
                        "processingTimeMs": operation.elapsed_ms(),
                    },
                ))
                raise

            processing_time_ms = operation.elapsed_ms()
            operation.add_detail("net_pay", f"{result.net_pay} {result.currency_code}")

        await self._emit_audit(AuditEntry(
            actor_user_id=actor_id,
            actor_role=actor_role,
            action="payroll_calculated",
            entity_type="PayrollCalculation",
            entity_id=request.employee_id,
            changes={
                "calculationId": result.calculation_id,
                "countryId": request.country_id,
                "payrollPeriodId": request.payroll_period_id,
                "grossPay": str(result.gross_pay),
                "totalStatutoryDeductions": str(result.total_statutory_deductions),
                "totalOtherDeductions": str(result.total_other_deductions),
                "netPay": str(result.net_pay),
                "currencyCode": result.currency_code,
                "processingTimeMs": processing_time_ms,
                "calculationDate": calculation_date.isoformat(),
            },
        ))

        return PayrollCalculationResponse(
            result=result,
            processing_time_ms=processing_time_ms,
            status="success",
            warnings=warnings or None,
        )

    async def _calculate_for_bulk(
        self,
        request: BulkPayrollCalculationRequest,
        employee_id: str,
        actor_id: str,
        actor_role: str,
    ) -> Tuple[str, Optional[PayrollCalculationResult], Optional[str]]:
        try:
            response = await self.calculate_payroll(
                PayrollCalculationRequest(
                    employee_id=employee_id,
                    country_id=request.country_id,
                    payroll_period_id=request.payroll_period_id,
                    calculation_date=request.calculation_date,
                ),
                actor_id=actor_id,
                actor_role=actor_role,
            )
            return employee_id, response.result, None
        except Exception as e:
            logger.error(f"Bulk calculation failed for employee: {employee_id}: {_error_message(e)}")
            return employee_id, None, _error_message(e)

    async def calculate_bulk_payroll(
        self,
        request: BulkPayrollCalculationRequest,
        actor_id: str = SYSTEM_ACTOR,
        actor_role: str = SYSTEM_ACTOR,
    ) -> BulkPayrollCalculationResponse:
        """Calculate payroll for many employees, one batch in flight at a time.

        A failing employee is recorded in ``errors`` and never aborts the run.
        """
        start_time = time.perf_counter()
        results: List[PayrollCalculationResult] = []
        failed_employee_ids: List[str] = []
        errors: List[BulkCalculationError] = []

        employee_ids = request.employee_ids
        total_employees = len(employee_ids)
        total_batches = math.ceil(total_employees / self.batch_size)

        logger.info(
            f"Starting bulk payroll calculation for {total_employees} employees (batch size: {self.batch_size})"
        )

        for batch_number, offset in enumerate(range(0, total_employees, self.batch_size), start=1):
            batch = employee_ids[offset:offset + self.batch_size]
            logger.info(f"Processing batch {batch_number}/{total_batches} ({len(batch)} employees)")

            outcomes = await asyncio.gather(*(
                self._calculate_for_bulk(request, employee_id, actor_id, actor_role)
                for employee_id in batch
            ))

            for employee_id, result, error in outcomes:
                if result is not None:
                    results.append(result)
                else:
                    failed_employee_ids.append(employee_id)
                    errors.append(BulkCalculationError(employee_id=employee_id, error=error))

            logger.info(
                f"Batch {batch_number}/{total_batches} completed: "
                f"{len(results)}/{total_employees} successful so far"
            )

        elapsed_seconds = time.perf_counter() - start_time
        processing_time_ms = int(elapsed_seconds * 1000)
        employees_per_second = round(total_employees / elapsed_seconds) if elapsed_seconds > 0 else total_employees

        logger.info(
            f"Bulk payroll calculation completed: {len(results)} successful, {len(failed_employee_ids)} failed, "
            f"time: {processing_time_ms}ms ({employees_per_second} employees/sec)"
        )

        await self._emit_audit(AuditEntry(
            actor_user_id=actor_id,
            actor_role=actor_role,
            action="bulk_payroll_calculated",
            entity_type="BulkPayrollCalculation",
            entity_id=request.payroll_period_id,
            changes={
                "countryId": request.country_id,
                "payrollPeriodId": request.payroll_period_id,
                "totalRequested": total_employees,
                "successCount": len(results),
                "failedCount": len(failed_employee_ids),
                "processingTimeMs": processing_time_ms,
                "employeesPerSecond": employees_per_second,
                "batchSize": self.batch_size,
                "failedEmployeeIds": failed_employee_ids or None,
                "calculationDate": (request.calculation_date or date.today()).isoformat(),
            },
        ))

        return BulkPayrollCalculationResponse(
            results=results,
            total_requested=total_employees,
            success_count=len(results),
            failed_count=len(failed_employee_ids),
            processing_time_ms=processing_time_ms,
            employees_per_second=employees_per_second,
            failed_employee_ids=failed_employee_ids or None,
            errors=errors or None,
        )

    async def summarize_bulk_payroll(
        self,
        request: BulkPayrollCalculationRequest,
        actor_id: str = SYSTEM_ACTOR,
        actor_role: str = SYSTEM_ACTOR,
    ) -> PayrollCalculationSummary:
        """Run a bulk calculation and report only its totals."""
        response = await self.calculate_bulk_payroll(request, actor_id=actor_id, actor_role=actor_role)
        summary = summarize_results(response.results)
        return summary.model_copy(update={"failed_count": response.failed_count})

    def validate_calculation_access(self, employee_id: str, requester_id: str, requester_role: str) -> bool:
        """Privileged roles may calculate for anyone, everyone else only for themselves."""
        if (requester_role or "").lower() in self.privileged_roles:
            return True

        if employee_id == requester_id:
            return True

        raise InsufficientPermissionsError(
            detail="Insufficient permissions to calculate payroll for this employee",
            error_data={"employee_id": employee_id, "requester_id": requester_id, "role": requester_role}
        )

    def validate_bulk_access(self, requester_role: str) -> bool:
        if (requester_role or "").lower() in self.bulk_roles:
            return True

        raise InsufficientPermissionsError(
            detail="Insufficient permissions to run bulk payroll calculations",
            error_data={"role": requester_role}
        )

    def validate_privileged_access(self, requester_role: str) -> bool:
        if (requester_role or "").lower() in self.privileged_roles:
            return True

        raise InsufficientPermissionsError(
            detail="Insufficient permissions for this operation",
            error_data={"role": requester_role}
        )
