"""
India payroll calculator
Statutory deductions: EPF, ESI, Professional Tax and TDS
"""

import logging
from decimal import Decimal
from typing import List, Optional

from payroll_engine.payrolls.calculation import RegionCalculator
from payroll_engine.payrolls.components import (
    ONE_HUNDRED,
    ZERO,
    assemble_gross_pay,
    find_statutory_component,
    round_currency,
)
from payroll_engine.payrolls.regions import india_rates as rates
from payroll_engine.payrolls.schemas import (
    CalculationBasis,
    CalculationInput,
    GrossPayBreakdown,
    PayrollCalculationResult,
    StatutoryBreakdown,
    StatutoryComponentType,
)

logger = logging.getLogger(__name__)


def calculate_professional_tax(gross_pay: Decimal) -> Decimal:
    for slab in rates.PT_SLABS:
        if slab.max_salary is None or gross_pay <= slab.max_salary:
            return slab.tax
    return ZERO


def calculate_annual_income_tax(annual_income: Decimal) -> Decimal:
    """Progressive slab tax on annual income, before cess."""
    total_tax = ZERO
    previous_max = ZERO

    for slab in rates.TDS_SLABS:
        if annual_income <= previous_max:
            break
        upper = annual_income if slab.max_income is None else min(annual_income, slab.max_income)
        total_tax += (upper - previous_max) * slab.rate / ONE_HUNDRED
        if slab.max_income is None:
            break
        previous_max = slab.max_income

    return total_tax


def calculate_monthly_tds(annual_income: Decimal) -> Decimal:
    total_tax = calculate_annual_income_tax(annual_income) * rates.HEALTH_EDUCATION_CESS
    return round_currency(total_tax / rates.MONTHS_PER_YEAR)


class IndiaCalculator(RegionCalculator):
    region_name = "India"

    def compute_gross_pay(self, calculation_input: CalculationInput) -> GrossPayBreakdown:
        gross = assemble_gross_pay(
            calculation_input,
            overtime_keywords=("overtime",),
            night_shift_keywords=("night", "shift differential"),
        )
        logger.info(
            f"India - Gross pay calculated: {gross.gross_pay} {calculation_input.currency_code} "
            f"for employee: {calculation_input.employee_id}"
        )
        return gross

    def compute_statutory_deductions(
        self,
        calculation_input: CalculationInput,
        gross: GrossPayBreakdown,
    ) -> List[StatutoryBreakdown]:
        deductions = []
        currency = calculation_input.currency_code

        epf = self._epf(calculation_input, gross.basic_salary, currency)
        if epf:
            deductions.append(epf)

        esi = self._esi(calculation_input, gross.gross_pay, currency)
        if esi:
            deductions.append(esi)

        pt = self._professional_tax(calculation_input, gross.gross_pay, currency)
        if pt:
            deductions.append(pt)

        tds = self._tds(calculation_input, gross.gross_pay, currency)
        if tds:
            deductions.append(tds)

        return deductions

    def _epf(self, calculation_input, basic_salary: Decimal, currency: str) -> Optional[StatutoryBreakdown]:
        component = find_statutory_component(calculation_input, StatutoryComponentType.EPF)
        if not component:
            return None

        epf_wages = min(basic_salary, rates.EPF_WAGE_CEILING)
        employee = round_currency(epf_wages * rates.EPF_EMPLOYEE_RATE / ONE_HUNDRED)
        employer = round_currency(epf_wages * rates.EPF_EMPLOYER_RATE / ONE_HUNDRED)

        logger.debug(f"EPF calculated - Employee: {employee}, Employer: {employer} (Wages: {epf_wages})")
        return StatutoryBreakdown(
            component_id=component.id,
            component_name="EPF",
            component_type=StatutoryComponentType.EPF,
            employee_contribution=employee,
            employer_contribution=employer,
            total_contribution=employee + employer,
            currency_code=currency,
            calculation_basis=CalculationBasis.BASIC_SALARY,
            rate=rates.EPF_EMPLOYEE_RATE,
        )

    def _esi(self, calculation_input, gross_pay: Decimal, currency: str) -> Optional[StatutoryBreakdown]:
        if gross_pay > rates.ESI_WAGE_CEILING:
            return None
        component = find_statutory_component(calculation_input, StatutoryComponentType.ESI)
        if not component:
            return None

        employee = round_currency(gross_pay * rates.ESI_EMPLOYEE_RATE / ONE_HUNDRED)
        employer = round_currency(gross_pay * rates.ESI_EMPLOYER_RATE / ONE_HUNDRED)

        logger.debug(f"ESI calculated - Employee: {employee}, Employer: {employer}")
        return StatutoryBreakdown(
            component_id=component.id,
            component_name="ESI",
            component_type=StatutoryComponentType.ESI,
            employee_contribution=employee,
            employer_contribution=employer,
            total_contribution=employee + employer,
            currency_code=currency,
            calculation_basis=CalculationBasis.GROSS_SALARY,
            rate=rates.ESI_EMPLOYEE_RATE,
        )

    def _professional_tax(self, calculation_input, gross_pay: Decimal, currency: str) -> Optional[StatutoryBreakdown]:
        component = find_statutory_component(calculation_input, StatutoryComponentType.PT)
        if not component:
            return None

        monthly_pt = calculate_professional_tax(gross_pay)
        if monthly_pt <= 0:
            return None

        logger.debug(f"Professional Tax calculated: {monthly_pt}")
        return StatutoryBreakdown(
            component_id=component.id,
            component_name="Professional Tax",
            component_type=StatutoryComponentType.PT,
            employee_contribution=monthly_pt,
            employer_contribution=ZERO,
            total_contribution=monthly_pt,
            currency_code=currency,
            calculation_basis=CalculationBasis.SLAB_BASED,
        )

    def _tds(self, calculation_input, gross_pay: Decimal, currency: str) -> Optional[StatutoryBreakdown]:
        component = find_statutory_component(calculation_input, StatutoryComponentType.TDS)
        if not component:
            return None

        annual_income = gross_pay * rates.MONTHS_PER_YEAR
        monthly_tds = calculate_monthly_tds(annual_income)
        if monthly_tds <= 0:
            return None

        logger.debug(f"TDS calculated: {monthly_tds} (Annual Income: {annual_income})")
        return StatutoryBreakdown(
            component_id=component.id,
            component_name="TDS",
            component_type=StatutoryComponentType.TDS,
            employee_contribution=monthly_tds,
            employer_contribution=ZERO,
            total_contribution=monthly_tds,
            currency_code=currency,
            calculation_basis=CalculationBasis.SLAB_BASED,
        )

    def apply_adjustments(
        self,
        result: PayrollCalculationResult,
        calculation_input: CalculationInput,
    ) -> PayrollCalculationResult:
        metadata = {
            **result.metadata,
            "region": self.region_name,
            "epfApplicable": calculation_input.basic_salary <= rates.EPF_WAGE_CEILING,
            "esiApplicable": result.gross_pay <= rates.ESI_WAGE_CEILING,
            "taxRegime": rates.TAX_REGIME,
            "calculationStandard": rates.CALCULATION_STANDARD,
        }
        logger.info(f"India-specific adjustments applied for employee: {calculation_input.employee_id}")
        return result.model_copy(update={"metadata": metadata})
