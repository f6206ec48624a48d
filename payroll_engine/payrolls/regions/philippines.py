"""
Philippines payroll calculator
Statutory deductions: SSS, PhilHealth, Pag-IBIG and withholding tax
"""

import logging
from decimal import Decimal
from typing import List, NamedTuple, Optional

from payroll_engine.payrolls.calculation import RegionCalculator
from payroll_engine.payrolls.components import (
    ONE_HUNDRED,
    ZERO,
    assemble_gross_pay,
    find_statutory_component,
    round_currency,
)
from payroll_engine.payrolls.regions import philippines_rates as rates
from payroll_engine.payrolls.schemas import (
    CalculationBasis,
    CalculationInput,
    GrossPayBreakdown,
    PayrollCalculationResult,
    StatutoryBreakdown,
    StatutoryComponentType,
)

logger = logging.getLogger(__name__)

WITHHOLDING_TAX_COMPONENT_ID = "withholding-tax"


class Contribution(NamedTuple):
    employee: Decimal
    employer: Decimal
    total: Decimal


def calculate_sss(monthly_salary: Decimal) -> Contribution:
    """Fixed contribution of the Monthly Salary Credit bracket; the top bracket caps it."""
    for bracket in rates.SSS_CONTRIBUTION_TABLE:
        if bracket.max_salary is None or monthly_salary <= bracket.max_salary:
            return Contribution(bracket.employee, bracket.employer, bracket.total)

    top = rates.SSS_CONTRIBUTION_TABLE[-1]
    return Contribution(top.employee, top.employer, top.total)


def calculate_philhealth(monthly_salary: Decimal) -> Contribution:
    salary_base = min(max(monthly_salary, rates.PHILHEALTH_MIN_SALARY), rates.PHILHEALTH_MAX_SALARY)

    total_premium = round_currency(salary_base * rates.PHILHEALTH_PREMIUM_RATE / ONE_HUNDRED)
    employee_share = round_currency(total_premium / 2)
    employer_share = total_premium - employee_share

    # Monthly min/max apply per share, halved
    min_share = rates.PHILHEALTH_MIN_CONTRIBUTION / 2
    max_share = rates.PHILHEALTH_MAX_CONTRIBUTION / 2
    employee = max(min_share, min(max_share, employee_share))
    employer = max(min_share, min(max_share, employer_share))

    return Contribution(employee, employer, employee + employer)


def calculate_pagibig(monthly_salary: Decimal) -> Contribution:
    salary_for_calc = min(monthly_salary, rates.PAGIBIG_MAX_SALARY)

    if monthly_salary <= rates.PAGIBIG_LOW_INCOME_THRESHOLD:
        employee_rate = rates.PAGIBIG_EMPLOYEE_RATE_LOW
    else:
        employee_rate = rates.PAGIBIG_EMPLOYEE_RATE

    employee = round_currency(salary_for_calc * employee_rate / ONE_HUNDRED)
    employee = min(employee, rates.PAGIBIG_MAX_EMPLOYEE_CONTRIBUTION)
    employer = round_currency(salary_for_calc * rates.PAGIBIG_EMPLOYER_RATE / ONE_HUNDRED)

    return Contribution(employee, employer, employee + employer)


def calculate_withholding_tax(monthly_taxable_income: Decimal) -> Decimal:
    """TRAIN Law withholding tax on monthly taxable income."""
    if monthly_taxable_income <= 0:
        return ZERO

    for bracket in rates.WITHHOLDING_TAX_TABLE:
        if bracket.max_income is None or monthly_taxable_income <= bracket.max_income:
            excess = max(ZERO, monthly_taxable_income - bracket.min_income)
            return round_currency(bracket.base_amount + excess * bracket.rate / ONE_HUNDRED)

    return ZERO


class PhilippinesCalculator(RegionCalculator):
    region_name = "Philippines"

    def compute_gross_pay(self, calculation_input: CalculationInput) -> GrossPayBreakdown:
        gross = assemble_gross_pay(
            calculation_input,
            overtime_keywords=("overtime",),
            night_shift_keywords=("night", "differential"),
        )
        logger.info(
            f"Philippines - Gross pay calculated: {gross.gross_pay} {calculation_input.currency_code} "
            f"for employee: {calculation_input.employee_id}"
        )
        return gross

    def compute_statutory_deductions(
        self,
        calculation_input: CalculationInput,
        gross: GrossPayBreakdown,
    ) -> List[StatutoryBreakdown]:
        currency = calculation_input.currency_code
        basic_salary = gross.basic_salary
        deductions = []

        contributions = (
            (StatutoryComponentType.SSS, "SSS", calculate_sss, None),
            (StatutoryComponentType.PHILHEALTH, "PhilHealth", calculate_philhealth, rates.PHILHEALTH_PREMIUM_RATE),
            (StatutoryComponentType.PAGIBIG, "Pag-IBIG", calculate_pagibig, None),
        )
        for component_type, display_name, calculate, rate in contributions:
            component = find_statutory_component(calculation_input, component_type)
            if not component:
                continue

            contribution = calculate(basic_salary)
            deductions.append(StatutoryBreakdown(
                component_id=component.id,
                component_name=display_name,
                component_type=component_type,
                employee_contribution=contribution.employee,
                employer_contribution=contribution.employer,
                total_contribution=contribution.total,
                currency_code=currency,
                calculation_basis=CalculationBasis.BASIC_SALARY,
                rate=rate,
            ))
            logger.debug(
                f"{display_name} calculated - Employee: {contribution.employee}, Employer: {contribution.employer}"
            )

        withholding = self._withholding_tax(gross.gross_pay, deductions, currency)
        if withholding:
            deductions.append(withholding)

        return deductions

    def _withholding_tax(
        self,
        gross_pay: Decimal,
        contributions: List[StatutoryBreakdown],
        currency: str,
    ) -> Optional[StatutoryBreakdown]:
        # Taxable income excludes the employee's SSS, PhilHealth and Pag-IBIG shares
        taxable_income = gross_pay - sum((d.employee_contribution for d in contributions), ZERO)
        monthly_tax = calculate_withholding_tax(taxable_income)
        if monthly_tax <= 0:
            return None

        logger.debug(f"Withholding Tax calculated: {monthly_tax} (Taxable Income: {taxable_income})")
        return StatutoryBreakdown(
            component_id=WITHHOLDING_TAX_COMPONENT_ID,
            component_name="Withholding Tax",
            component_type=StatutoryComponentType.WITHHOLDING_TAX,
            employee_contribution=monthly_tax,
            employer_contribution=ZERO,
            total_contribution=monthly_tax,
            currency_code=currency,
            calculation_basis=CalculationBasis.TAXABLE_INCOME,
        )

    def apply_adjustments(
        self,
        result: PayrollCalculationResult,
        calculation_input: CalculationInput,
    ) -> PayrollCalculationResult:
        metadata = {
            **result.metadata,
            "region": self.region_name,
            "taxLaw": rates.TAX_LAW,
            "calculationStandard": rates.CALCULATION_STANDARD,
            "sssApplicable": True,
            "philHealthApplicable": True,
            "pagIbigApplicable": True,
        }
        logger.info(f"Philippines-specific adjustments applied for employee: {calculation_input.employee_id}")
        return result.model_copy(update={"metadata": metadata})
