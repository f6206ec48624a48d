"""Tests for the shared component-amount rule and gross pay assembly."""

from decimal import Decimal

import pytest

from payroll_engine.payrolls.components import (
    assemble_gross_pay,
    calculate_component_amount,
    find_component,
    round_currency,
)
from payroll_engine.payrolls.schemas import (
    CalculationMethod,
    SalaryComponent,
    SalaryComponentType,
)


def component(name, component_type=SalaryComponentType.EARNINGS, **kwargs):
    return SalaryComponent(id=f"comp-{name.lower().replace(' ', '-')}", name=name, component_type=component_type, **kwargs)


@pytest.mark.parametrize("amount,expected", [
    ("112.5", "113"),
    ("487.5", "488"),
    ("112.49", "112"),
    ("6976.67", "6977"),
    ("0", "0"),
])
def test_round_currency_is_half_up(amount, expected):
    assert round_currency(Decimal(amount)) == Decimal(expected)


def test_fixed_component_uses_configured_amount():
    allowance = component("Transport", amount=Decimal("1500"))
    assert calculate_component_amount(allowance, Decimal("50000")) == Decimal("1500")


def test_percentage_component_applies_to_base():
    hra = component("HRA", calculation_type=CalculationMethod.PERCENTAGE, percentage=Decimal("40"))
    assert calculate_component_amount(hra, Decimal("50000")) == Decimal("20000")


def test_formula_component_falls_back_to_fixed_amount():
    formula = component("Bonus", calculation_type=CalculationMethod.FORMULA, amount=Decimal("750"))
    assert calculate_component_amount(formula, Decimal("50000")) == Decimal("750")


def test_missing_amount_counts_as_zero():
    assert calculate_component_amount(component("Empty"), Decimal("50000")) == Decimal("0")


def test_find_component_matches_type_or_keyword_and_skips_inactive():
    components = [
        component("Overtime Pay", amount=Decimal("100"), is_active=False),
        component("Weekend Overtime", amount=Decimal("200")),
    ]
    found = find_component(components, SalaryComponentType.OVERTIME, ("overtime",))
    assert found.name == "Weekend Overtime"

    by_type = find_component(
        [component("Extra hours", SalaryComponentType.OVERTIME, amount=Decimal("5"))],
        SalaryComponentType.OVERTIME,
        ("overtime",),
    )
    assert by_type.name == "Extra hours"


class TestAssembleGrossPay:
    def test_basic_only(self, make_input):
        gross = assemble_gross_pay(make_input())

        assert gross.gross_pay == Decimal("50000")
        assert gross.total_earnings == Decimal("50000")
        assert gross.components[0].component_name == "Basic Salary"
        assert gross.components[0].component_id == "basic-salary"

    def test_earnings_benefits_and_reimbursements_are_added(self, make_input):
        gross = assemble_gross_pay(make_input(salary_components=[
            component("HRA", calculation_type=CalculationMethod.PERCENTAGE, percentage=Decimal("40")),
            component("Meal", SalaryComponentType.BENEFITS, amount=Decimal("3000")),
            component("Travel", SalaryComponentType.REIMBURSEMENTS, amount=Decimal("2000")),
            component("Old allowance", amount=Decimal("9999"), is_active=False),
            component("Loan", SalaryComponentType.DEDUCTIONS, amount=Decimal("1000")),
        ]))

        assert gross.gross_pay == Decimal("75000")
        assert len(gross.components) == 4

    def test_configured_basic_salary_component_is_not_counted_twice(self, make_input):
        gross = assemble_gross_pay(make_input(salary_components=[
            component("Basic Salary", amount=Decimal("50000")),
        ]))
        assert gross.gross_pay == Decimal("50000")

    def test_overtime_and_night_shift_follow_flags(self, make_input):
        components = [
            component("Overtime", SalaryComponentType.OVERTIME, amount=Decimal("10000")),
            component("Night Shift Allowance", SalaryComponentType.SHIFT_DIFFERENTIAL, amount=Decimal("5000")),
        ]

        included = assemble_gross_pay(make_input(salary_components=components))
        assert included.overtime_pay == Decimal("10000")
        assert included.night_shift_pay == Decimal("5000")
        assert included.gross_pay == Decimal("65000")

        excluded = assemble_gross_pay(make_input(
            salary_components=components, include_overtime=False, include_night_shift=False
        ))
        assert excluded.overtime_pay == Decimal("0")
        assert excluded.night_shift_pay == Decimal("0")
        assert excluded.gross_pay == Decimal("50000")
