"""Tests for the payroll orchestration service."""

import asyncio
from decimal import Decimal

import pytest

from fakes import (
    CALCULATION_DATE,
    HRA,
    INDIA,
    PERIOD_IN,
    PERIOD_PH,
    PERIOD_SG,
    PHILIPPINES,
    SINGAPORE,
    RecordingAuditSink,
    employment,
    salary,
)
from payroll_engine.core.exceptions import (
    ConfigurationError,
    InsufficientPermissionsError,
    InvalidInputError,
    ResourceNotFoundError,
)
from payroll_engine.payrolls.regions.philippines import PhilippinesCalculator
from payroll_engine.payrolls.schemas import (
    BulkPayrollCalculationRequest,
    PayrollCalculationRequest,
    SalaryComponent,
    SalaryComponentType,
    StatutoryComponentType,
)
from payroll_engine.payrolls.service import summarize_results


def india_request(employee_id="emp-in-1", **kwargs):
    data = {
        "employee_id": employee_id,
        "country_id": INDIA.id,
        "payroll_period_id": PERIOD_IN.id,
        "calculation_date": CALCULATION_DATE,
    }
    data.update(kwargs)
    return PayrollCalculationRequest(**data)


def bulk_request(employee_ids, country_id=INDIA.id, payroll_period_id=PERIOD_IN.id):
    return BulkPayrollCalculationRequest(
        country_id=country_id,
        payroll_period_id=payroll_period_id,
        employee_ids=employee_ids,
        calculation_date=CALCULATION_DATE,
    )


def deduction(result, component_type):
    matches = [d for d in result.statutory_deductions if d.component_type == component_type]
    return matches[0] if matches else None


class TestCalculatePayroll:
    async def test_india_employee(self, service, audit_sink):
        response = await service.calculate_payroll(india_request())
        result = response.result

        assert response.status == "success"
        assert response.warnings is None
        assert response.processing_time_ms >= 0
        assert result.gross_pay == Decimal("70000")
        assert deduction(result, StatutoryComponentType.EPF).employee_contribution == Decimal("1800")
        assert deduction(result, StatutoryComponentType.PT).employee_contribution == Decimal("200")
        assert deduction(result, StatutoryComponentType.TDS).employee_contribution > 0
        assert result.net_pay < result.gross_pay
        assert result.metadata["employmentRecordId"] == "employment-emp-in-1"
        assert result.metadata["payrollPeriod"] == {"startDate": "2024-01-01", "endDate": "2024-01-31"}
        assert result.metadata["region"] == "India"

        assert audit_sink.actions() == ["payroll_calculated"]
        entry = audit_sink.entries[0]
        assert entry.entity_id == "emp-in-1"
        assert entry.changes["netPay"] == str(result.net_pay)

    async def test_philippines_employee(self, service):
        response = await service.calculate_payroll(PayrollCalculationRequest(
            employee_id="emp-ph-1",
            country_id=PHILIPPINES.id,
            payroll_period_id=PERIOD_PH.id,
            calculation_date=CALCULATION_DATE,
        ))
        result = response.result

        assert result.gross_pay == Decimal("27000")
        for component_type in (
            StatutoryComponentType.SSS,
            StatutoryComponentType.PHILHEALTH,
            StatutoryComponentType.PAGIBIG,
        ):
            assert deduction(result, component_type).employee_contribution > 0
        assert result.net_pay < result.gross_pay

    async def test_low_salary_has_no_tds(self, service, salary_components):
        salary_components.by_country[INDIA.id] = []

        response = await service.calculate_payroll(india_request("emp-in-2"))

        assert deduction(response.result, StatutoryComponentType.TDS) is None

    async def test_repeated_calculation_gives_same_totals(self, service):
        first = (await service.calculate_payroll(india_request())).result
        second = (await service.calculate_payroll(india_request())).result

        assert first.gross_pay == second.gross_pay
        assert first.net_pay == second.net_pay
        assert first.total_statutory_deductions == second.total_statutory_deductions
        assert first.total_other_deductions == second.total_other_deductions

    async def test_overtime_is_included_unless_disabled(self, service, salary_components):
        salary_components.by_country[INDIA.id] = [HRA, SalaryComponent(
            id="comp-ot",
            name="Overtime",
            component_type=SalaryComponentType.OVERTIME,
            amount=Decimal("4000"),
        )]

        default = await service.calculate_payroll(india_request())
        disabled = await service.calculate_payroll(india_request(include_overtime=False))

        assert default.result.overtime_pay == Decimal("4000")
        assert default.result.gross_pay == Decimal("74000")
        assert disabled.result.overtime_pay == Decimal("0")

    async def test_most_recent_effective_salary_is_used(self, service):
        response = await service.calculate_payroll(india_request("emp-in-history"))
        assert response.result.basic_salary == Decimal("50000")

    async def test_currency_mismatch_is_a_warning(self, service):
        response = await service.calculate_payroll(india_request("emp-in-usd"))

        assert response.status == "success"
        assert response.result.currency_code == "USD"
        assert len(response.warnings) == 1
        assert "USD" in response.warnings[0] and "INR" in response.warnings[0]

    async def test_unknown_country(self, service, audit_sink):
        with pytest.raises(ResourceNotFoundError) as exc_info:
            await service.calculate_payroll(india_request(country_id="country-xx"))

        assert exc_info.value.status_code == 404
        assert audit_sink.actions() == ["payroll_calculation_failed"]
        changes = audit_sink.entries[0].changes
        assert "Country not found" in changes["error"]
        assert len(changes["errorStack"]) <= 500

    async def test_unknown_period(self, service):
        with pytest.raises(ResourceNotFoundError):
            await service.calculate_payroll(india_request(payroll_period_id="period-xx"))

    async def test_period_of_another_country(self, service):
        with pytest.raises(InvalidInputError) as exc_info:
            await service.calculate_payroll(india_request(payroll_period_id=PERIOD_PH.id))

        assert exc_info.value.detail == "Payroll period does not belong to the specified country"

    @pytest.mark.parametrize("employee_id", ["emp-unknown", "emp-in-ended", "emp-in-nosalary"])
    async def test_missing_employment_or_salary(self, service, employee_id):
        with pytest.raises(ResourceNotFoundError):
            await service.calculate_payroll(india_request(employee_id))

    async def test_unregistered_region(self, service):
        with pytest.raises(InvalidInputError) as exc_info:
            await service.calculate_payroll(PayrollCalculationRequest(
                employee_id="emp-sg-1",
                country_id=SINGAPORE.id,
                payroll_period_id=PERIOD_SG.id,
                calculation_date=CALCULATION_DATE,
            ))

        assert exc_info.value.detail == "No calculation factory registered for country: SG"

    async def test_audit_failure_does_not_fail_calculation(self, make_service):
        service = make_service(audit=RecordingAuditSink(fail=True))

        response = await service.calculate_payroll(india_request())
        assert response.status == "success"

        with pytest.raises(ResourceNotFoundError):
            await service.calculate_payroll(india_request("emp-unknown"))


class TestReferenceDataCache:
    async def test_reference_data_is_cached_until_ttl(self, service, countries, salary_components, clock):
        await service.calculate_payroll(india_request())
        await service.calculate_payroll(india_request("emp-in-2"))

        assert countries.calls == 1
        assert salary_components.calls == 1

        clock.advance(301)
        await service.calculate_payroll(india_request())
        assert countries.calls == 2
        assert salary_components.calls == 2

    async def test_clear_cache_forces_refetch(self, service, countries):
        await service.calculate_payroll(india_request())
        service.clear_cache()
        await service.calculate_payroll(india_request())

        assert countries.calls == 2

    async def test_missing_country_is_not_cached(self, service, countries):
        for _ in range(2):
            with pytest.raises(ResourceNotFoundError):
                await service.calculate_payroll(india_request(country_id="country-xx"))

        assert countries.calls == 2


class TestBulkCalculation:
    async def test_failures_are_isolated(self, service, audit_sink):
        response = await service.calculate_bulk_payroll(bulk_request(["emp-in-1", "emp-in-2", "emp-missing"]))

        assert response.total_requested == 3
        assert response.success_count == 2
        assert response.failed_count == 1
        assert response.failed_employee_ids == ["emp-missing"]
        assert [e.employee_id for e in response.errors] == ["emp-missing"]
        assert "not found" in response.errors[0].error
        assert {r.employee_id for r in response.results} == {"emp-in-1", "emp-in-2"}

        assert audit_sink.actions().count("bulk_payroll_calculated") == 1
        summary = [e for e in audit_sink.entries if e.action == "bulk_payroll_calculated"][0]
        assert summary.entity_id == PERIOD_IN.id
        assert summary.changes["failedEmployeeIds"] == ["emp-missing"]

    async def test_unknown_country_fails_every_employee(self, service):
        response = await service.calculate_bulk_payroll(
            bulk_request(["emp-in-1", "emp-in-2"], country_id="country-xx")
        )

        assert response.success_count == 0
        assert response.failed_count == 2

    async def test_counts_add_up_across_batches(self, make_service):
        service = make_service(batch_size=2)
        employee_ids = ["emp-in-1", "emp-x", "emp-in-2", "emp-in-history", "emp-y"]

        response = await service.calculate_bulk_payroll(bulk_request(employee_ids))

        assert response.success_count + response.failed_count == response.total_requested == 5
        assert response.success_count == 3
        assert response.failed_employee_ids == ["emp-x", "emp-y"]
        assert response.employees_per_second >= 0

    async def test_batches_run_one_after_another(self, make_service, employments, salary_history):
        employee_ids = [f"emp-batch-{n}" for n in range(7)]
        for employee_id in employee_ids:
            employments.items[employee_id] = employment(employee_id)
            salary_history.records.append(salary(employee_id, "30000", "INR"))

        lookup = employments.find_active_by_employee
        in_flight = {"now": 0, "peak": 0}
        events = []

        async def slow_lookup(employee_id):
            in_flight["now"] += 1
            in_flight["peak"] = max(in_flight["peak"], in_flight["now"])
            events.append(("start", employee_id))
            await asyncio.sleep(0.01)
            events.append(("end", employee_id))
            in_flight["now"] -= 1
            return await lookup(employee_id)

        employments.find_active_by_employee = slow_lookup
        service = make_service(batch_size=3)

        response = await service.calculate_bulk_payroll(bulk_request(employee_ids))

        assert response.success_count == 7
        assert in_flight["peak"] == 3

        batches = [employee_ids[i:i + 3] for i in range(0, 7, 3)]
        for current, following in zip(batches, batches[1:]):
            last_end = max(events.index(("end", e)) for e in current)
            first_start = min(events.index(("start", e)) for e in following)
            assert last_end < first_start

    async def test_bulk_summary_counts_failures(self, service):
        summary = await service.summarize_bulk_payroll(bulk_request(["emp-in-1", "emp-in-2", "emp-missing"]))

        assert summary.total_employees == 2
        assert summary.failed_count == 1
        assert summary.currency_code == "INR"

    async def test_empty_request(self, service):
        response = await service.calculate_bulk_payroll(bulk_request([]))

        assert response.total_requested == 0
        assert response.results == []
        assert response.errors is None

    def test_batch_size_must_be_positive(self, make_service):
        with pytest.raises(ConfigurationError):
            make_service(batch_size=0)

    async def test_summary_of_bulk_results(self, service):
        response = await service.calculate_bulk_payroll(bulk_request(["emp-in-1", "emp-in-2"]))
        summary = summarize_results(response.results)

        assert summary.total_employees == 2
        assert summary.total_gross_pay == sum(r.gross_pay for r in response.results)
        assert summary.total_net_pay == sum(r.net_pay for r in response.results)
        assert summary.currency_code == "INR"


class TestAccessControl:
    @pytest.mark.parametrize("role", ["admin", "HR"])
    def test_privileged_roles_may_calculate_for_anyone(self, service, role):
        assert service.validate_calculation_access("emp-in-1", "someone-else", role) is True

    def test_employee_may_calculate_for_themselves(self, service):
        assert service.validate_calculation_access("emp-in-1", "emp-in-1", "employee") is True

    def test_employee_may_not_calculate_for_others(self, service):
        with pytest.raises(InsufficientPermissionsError) as exc_info:
            service.validate_calculation_access("emp-in-1", "emp-in-2", "employee")

        assert exc_info.value.status_code == 403

    def test_empty_role_lists_are_not_replaced_by_defaults(self, make_service):
        service = make_service(privileged_roles=[], bulk_roles=[])

        with pytest.raises(InsufficientPermissionsError):
            service.validate_calculation_access("emp-in-1", "admin-1", "admin")
        with pytest.raises(InsufficientPermissionsError):
            service.validate_bulk_access("admin")

    def test_bulk_roles(self, service):
        assert service.validate_bulk_access("payroll_admin") is True
        with pytest.raises(InsufficientPermissionsError):
            service.validate_bulk_access("employee")


def test_register_region_factory_replaces_calculator(service):
    service.register_region_factory("in", PhilippinesCalculator())

    assert [r.region_name for r in service.list_regions()] == ["Philippines", "Philippines"]
