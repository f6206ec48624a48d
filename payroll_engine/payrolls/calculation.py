"""
Region-independent payroll calculation pipeline

``calculate_payroll`` runs the same seven steps for every jurisdiction:

1. validate the input
2. gross pay                      (region specific)
3. statutory deductions           (region specific)
4. other deductions               (overridable, DEDUCTIONS components)
5. net pay                        (never negative)
6. assemble the immutable result
7. region adjustments             (overridable, metadata only)

A region plugs in by subclassing ``RegionCalculator``.
"""

import logging
import secrets
import string
import time
from abc import ABC, abstractmethod
from datetime import datetime, timezone
from decimal import Decimal
from typing import List

from payroll_engine.core.exceptions import BaseAPIException, PayrollCalculationError
from payroll_engine.core.validators import validate_calculation_input
from payroll_engine.payrolls.components import (
    ZERO,
    calculate_component_amount,
    component_line,
)
from payroll_engine.payrolls.schemas import (
    CalculationInput,
    ComponentBreakdown,
    GrossPayBreakdown,
    PayrollCalculationResult,
    SalaryComponentType,
    StatutoryBreakdown,
)

logger = logging.getLogger(__name__)

_ID_ALPHABET = string.ascii_lowercase + string.digits


class RegionCalculator(ABC):
    """Jurisdiction-specific steps of the payroll pipeline."""

    region_name: str = "Unknown"

    @abstractmethod
    def compute_gross_pay(self, calculation_input: CalculationInput) -> GrossPayBreakdown:
        ...

    @abstractmethod
    def compute_statutory_deductions(
        self,
        calculation_input: CalculationInput,
        gross: GrossPayBreakdown,
    ) -> List[StatutoryBreakdown]:
        ...

    def compute_other_deductions(
        self,
        calculation_input: CalculationInput,
        gross: GrossPayBreakdown,
    ) -> List[ComponentBreakdown]:
        """Active DEDUCTIONS components, percentages taken on basic salary."""
        deductions = []
        for component in calculation_input.salary_components:
            if component.component_type != SalaryComponentType.DEDUCTIONS or not component.is_active:
                continue
            amount = calculate_component_amount(component, gross.basic_salary)
            deductions.append(component_line(
                component, amount, calculation_input.currency_code, base_amount=gross.basic_salary
            ))
        return deductions

    def apply_adjustments(
        self,
        result: PayrollCalculationResult,
        calculation_input: CalculationInput,
    ) -> PayrollCalculationResult:
        """Hook for region metadata; must not change any totals."""
        return result


def generate_calculation_id() -> str:
    suffix = "".join(secrets.choice(_ID_ALPHABET) for _ in range(9))
    return f"CALC-{int(time.time() * 1000)}-{suffix}"


def calculate_net_pay(
    gross: GrossPayBreakdown,
    statutory_deductions: List[StatutoryBreakdown],
    other_deductions: List[ComponentBreakdown],
) -> Decimal:
    total_statutory = sum((d.employee_contribution for d in statutory_deductions), ZERO)
    total_other = sum((d.amount for d in other_deductions), ZERO)
    return max(ZERO, gross.gross_pay - total_statutory - total_other)


def build_calculation_result(
    calculation_input: CalculationInput,
    gross: GrossPayBreakdown,
    statutory_deductions: List[StatutoryBreakdown],
    other_deductions: List[ComponentBreakdown],
    net_pay: Decimal,
) -> PayrollCalculationResult:
    total_statutory = sum((d.employee_contribution for d in statutory_deductions), ZERO)
    total_other = sum((d.amount for d in other_deductions), ZERO)

    return PayrollCalculationResult(
        calculation_id=generate_calculation_id(),
        employee_id=calculation_input.employee_id,
        country_id=calculation_input.country_id,
        payroll_period_id=calculation_input.payroll_period_id,
        calculated_at=datetime.now(timezone.utc),
        gross_pay=gross.gross_pay,
        basic_salary=gross.basic_salary,
        total_earnings=gross.total_earnings,
        overtime_pay=gross.overtime_pay,
        night_shift_pay=gross.night_shift_pay,
        total_statutory_deductions=total_statutory,
        total_other_deductions=total_other,
        total_deductions=total_statutory + total_other,
        net_pay=net_pay,
        currency_code=calculation_input.currency_code,
        salary_components=list(gross.components),
        statutory_deductions=list(statutory_deductions),
        other_deductions=list(other_deductions),
        metadata=dict(calculation_input.metadata),
    )


def calculate_payroll(
    calculator: RegionCalculator,
    calculation_input: CalculationInput,
) -> PayrollCalculationResult:
    """Run the full pipeline; all-or-nothing, no partial results."""
    region = calculator.region_name
    try:
        validate_calculation_input(calculation_input)

        gross = calculator.compute_gross_pay(calculation_input)
        statutory_deductions = calculator.compute_statutory_deductions(calculation_input, gross)
        other_deductions = calculator.compute_other_deductions(calculation_input, gross)
        net_pay = calculate_net_pay(gross, statutory_deductions, other_deductions)

        result = build_calculation_result(
            calculation_input, gross, statutory_deductions, other_deductions, net_pay
        )
        return calculator.apply_adjustments(result, calculation_input)

    except BaseAPIException as e:
        e.error_data.setdefault("employee_id", calculation_input.employee_id)
        e.error_data.setdefault("region", region)
        raise
    except Exception as e:
        logger.error(
            f"Payroll calculation failed for employee {calculation_input.employee_id} ({region}): {str(e)}"
        )
        raise PayrollCalculationError(
            detail=f"Payroll calculation failed for employee {calculation_input.employee_id} ({region}): {str(e)}",
            employee_id=calculation_input.employee_id,
            region=region,
            error_data={"exception_type": type(e).__name__}
        ) from e
