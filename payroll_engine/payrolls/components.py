"""
Shared salary-component rules used by every region calculator
"""

from decimal import Decimal, ROUND_HALF_UP
from typing import Iterable, List, Optional, Tuple

from payroll_engine.payrolls.schemas import (
    CalculationInput,
    CalculationMethod,
    ComponentBreakdown,
    GrossPayBreakdown,
    SalaryComponent,
    SalaryComponentType,
    StatutoryComponent,
    StatutoryComponentType,
)

ZERO = Decimal("0")
ONE_HUNDRED = Decimal("100")

BASIC_SALARY_NAME = "Basic Salary"

EARNING_TYPES = (
    SalaryComponentType.EARNINGS,
    SalaryComponentType.BENEFITS,
    SalaryComponentType.REIMBURSEMENTS,
)


def round_currency(amount: Decimal) -> Decimal:
    """Round half-up to whole currency units."""
    return Decimal(amount).quantize(Decimal("1"), rounding=ROUND_HALF_UP)


def calculate_component_amount(component: SalaryComponent, base_amount: Decimal) -> Decimal:
    """Amount of a single salary component.

    PERCENTAGE components apply to ``base_amount`` (always the basic salary).
    FORMULA components have no expression evaluator and fall back to their
    configured fixed amount.
    """
    if component.calculation_type == CalculationMethod.PERCENTAGE:
        percentage = component.percentage or ZERO
        return base_amount * percentage / ONE_HUNDRED

    # FIXED and FORMULA
    return component.amount or ZERO


def component_line(
    component: SalaryComponent,
    amount: Decimal,
    currency_code: str,
    component_type: Optional[SalaryComponentType] = None,
    base_amount: Optional[Decimal] = None,
) -> ComponentBreakdown:
    rate = component.percentage if component.calculation_type == CalculationMethod.PERCENTAGE else None
    return ComponentBreakdown(
        component_id=component.id,
        component_name=component.name,
        component_type=component_type or component.component_type,
        amount=amount,
        currency_code=currency_code,
        calculation_method=component.calculation_type,
        base_amount=base_amount,
        rate=rate,
    )


def find_component(
    components: Iterable[SalaryComponent],
    component_type: SalaryComponentType,
    name_keywords: Tuple[str, ...],
) -> Optional[SalaryComponent]:
    """First active component of ``component_type`` or whose name contains a keyword."""
    for component in components:
        if not component.is_active:
            continue
        name = component.name.lower()
        if component.component_type == component_type or any(k in name for k in name_keywords):
            return component
    return None


def find_statutory_component(
    calculation_input: CalculationInput,
    component_type: StatutoryComponentType,
) -> Optional[StatutoryComponent]:
    """First active statutory component of the given type configured for the country."""
    for component in calculation_input.statutory_components:
        if component.is_active and component.component_type == component_type:
            return component
    return None


def assemble_gross_pay(
    calculation_input: CalculationInput,
    overtime_keywords: Tuple[str, ...] = ("overtime",),
    night_shift_keywords: Tuple[str, ...] = ("night",),
) -> GrossPayBreakdown:
    """Basic salary plus active earnings, benefits, reimbursements and
    (when requested) overtime and night-shift differential."""
    basic_salary = calculation_input.basic_salary
    currency = calculation_input.currency_code

    components: List[ComponentBreakdown] = [
        ComponentBreakdown(
            component_id="basic-salary",
            component_name=BASIC_SALARY_NAME,
            component_type=SalaryComponentType.EARNINGS,
            amount=basic_salary,
            currency_code=currency,
            calculation_method=CalculationMethod.FIXED,
        )
    ]
    total_earnings = basic_salary
    overtime_pay = ZERO
    night_shift_pay = ZERO

    for component in calculation_input.salary_components:
        if not component.is_active or component.component_type not in EARNING_TYPES:
            continue
        if component.name == BASIC_SALARY_NAME:
            continue

        amount = calculate_component_amount(component, basic_salary)
        components.append(component_line(component, amount, currency, base_amount=basic_salary))
        total_earnings += amount

    if calculation_input.include_overtime:
        overtime_component = find_component(
            calculation_input.salary_components, SalaryComponentType.OVERTIME, overtime_keywords
        )
        if overtime_component:
            overtime_pay = calculate_component_amount(overtime_component, basic_salary)
            components.append(component_line(
                overtime_component, overtime_pay, currency, component_type=SalaryComponentType.OVERTIME
            ))
            total_earnings += overtime_pay

    if calculation_input.include_night_shift:
        night_component = find_component(
            calculation_input.salary_components, SalaryComponentType.SHIFT_DIFFERENTIAL, night_shift_keywords
        )
        if night_component:
            night_shift_pay = calculate_component_amount(night_component, basic_salary)
            components.append(component_line(
                night_component, night_shift_pay, currency, component_type=SalaryComponentType.SHIFT_DIFFERENTIAL
            ))
            total_earnings += night_shift_pay

    return GrossPayBreakdown(
        gross_pay=total_earnings,
        basic_salary=basic_salary,
        total_earnings=total_earnings,
        overtime_pay=overtime_pay,
        night_shift_pay=night_shift_pay,
        components=components,
    )
