"""Pytest configuration for the payroll engine test suite."""

from datetime import date
from decimal import Decimal

import pytest

from fakes import (
    COLA,
    HRA,
    INDIA,
    INDIA_STATUTORY,
    PERIOD_IN,
    PERIOD_PH,
    PERIOD_SG,
    PHILIPPINES,
    PHILIPPINES_STATUTORY,
    SINGAPORE,
    FakeClock,
    InMemoryComponentsByCountry,
    InMemoryCountries,
    InMemoryEmployments,
    InMemoryPayrollPeriods,
    InMemorySalaryHistory,
    RecordingAuditSink,
    employment,
    salary,
)
from payroll_engine.payrolls.schemas import CalculationInput
from payroll_engine.payrolls.service import PayrollCalculationService


@pytest.fixture
def clock():
    return FakeClock()


@pytest.fixture
def countries():
    return InMemoryCountries([INDIA, PHILIPPINES, SINGAPORE])


@pytest.fixture
def salary_components():
    return InMemoryComponentsByCountry({INDIA.id: [HRA], PHILIPPINES.id: [COLA]})


@pytest.fixture
def statutory_components():
    return InMemoryComponentsByCountry({INDIA.id: INDIA_STATUTORY, PHILIPPINES.id: PHILIPPINES_STATUTORY})


@pytest.fixture
def employments():
    return InMemoryEmployments([
        employment("emp-in-1"),
        employment("emp-in-2"),
        employment("emp-in-usd"),
        employment("emp-in-history"),
        employment("emp-in-ended", end_date=date(2023, 12, 31)),
        employment("emp-in-nosalary"),
        employment("emp-ph-1"),
        employment("emp-sg-1"),
    ])


@pytest.fixture
def salary_history():
    return InMemorySalaryHistory([
        salary("emp-in-1", "50000", "INR"),
        salary("emp-in-2", "20000", "INR"),
        salary("emp-in-usd", "50000", "USD"),
        salary("emp-in-history", "40000", "INR", effective=date(2023, 1, 1)),
        salary("emp-in-history", "50000", "INR", effective=date(2024, 1, 1)),
        salary("emp-in-history", "90000", "INR", effective=date(2024, 6, 1)),
        salary("emp-in-ended", "50000", "INR"),
        salary("emp-in-nosalary", "50000", "INR", effective=date(2024, 6, 1)),
        salary("emp-ph-1", "25000", "PHP"),
        salary("emp-sg-1", "6000", "SGD"),
    ])


@pytest.fixture
def audit_sink():
    return RecordingAuditSink()


@pytest.fixture
def make_service(countries, salary_components, statutory_components, employments, salary_history, clock):
    def _make(audit=None, **kwargs):
        return PayrollCalculationService(
            countries=countries,
            payroll_periods=InMemoryPayrollPeriods([PERIOD_IN, PERIOD_PH, PERIOD_SG]),
            salary_components=salary_components,
            statutory_components=statutory_components,
            employments=employments,
            salary_history=salary_history,
            audit=audit if audit is not None else RecordingAuditSink(),
            cache_ttl_seconds=kwargs.pop("cache_ttl_seconds", 300),
            clock=clock,
            **kwargs
        )
    return _make


@pytest.fixture
def service(make_service, audit_sink):
    return make_service(audit=audit_sink)


@pytest.fixture
def make_input():
    """CalculationInput with India defaults; override any field by keyword."""
    def _make(**overrides):
        data = {
            "employee_id": "emp-1",
            "country_id": INDIA.id,
            "country_code": "IN",
            "payroll_period_id": PERIOD_IN.id,
            "calculation_date": date(2024, 1, 31),
            "basic_salary": Decimal("50000"),
            "currency_code": "INR",
            "salary_components": [],
            "statutory_components": list(INDIA_STATUTORY),
        }
        data.update(overrides)
        return CalculationInput(**data)
    return _make
