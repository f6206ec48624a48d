from pydantic import BaseModel, Field
from typing import Any, Dict, List, Literal, Optional
from datetime import date, datetime
from decimal import Decimal
from enum import Enum


class SalaryComponentType(str, Enum):
    EARNINGS = "EARNINGS"
    BENEFITS = "BENEFITS"
    REIMBURSEMENTS = "REIMBURSEMENTS"
    OVERTIME = "OVERTIME"
    SHIFT_DIFFERENTIAL = "SHIFT_DIFFERENTIAL"
    DEDUCTIONS = "DEDUCTIONS"


class CalculationMethod(str, Enum):
    FIXED = "FIXED"
    PERCENTAGE = "PERCENTAGE"
    FORMULA = "FORMULA"


class StatutoryComponentType(str, Enum):
    EPF = "EPF"
    ESI = "ESI"
    PT = "PT"
    TDS = "TDS"
    SSS = "SSS"
    PHILHEALTH = "PHILHEALTH"
    PAGIBIG = "PAGIBIG"
    WITHHOLDING_TAX = "WITHHOLDING_TAX"


class CalculationBasis(str, Enum):
    BASIC_SALARY = "BASIC_SALARY"
    GROSS_SALARY = "GROSS_SALARY"
    SLAB_BASED = "SLAB_BASED"
    TAXABLE_INCOME = "TAXABLE_INCOME"


# Reference data handed over by external collaborators

class Country(BaseModel):
    id: str
    code: str  # ISO country code
    name: Optional[str] = None
    currency_code: str


class PayrollPeriod(BaseModel):
    id: str
    country_id: str
    start_date: date
    end_date: date


class SalaryComponent(BaseModel):
    id: str
    name: str
    component_type: SalaryComponentType
    calculation_type: CalculationMethod = CalculationMethod.FIXED
    amount: Optional[Decimal] = None
    percentage: Optional[Decimal] = None
    is_active: bool = True


class StatutoryComponent(BaseModel):
    id: str
    name: str
    component_type: StatutoryComponentType
    is_active: bool = True


class EmploymentRecord(BaseModel):
    id: str
    employee_id: str
    status: str = "active"
    start_date: Optional[date] = None
    end_date: Optional[date] = None
    employee_name: Optional[str] = None
    employee_email: Optional[str] = None


class SalaryRecord(BaseModel):
    id: str
    employment_id: str
    salary_amount: Decimal
    salary_currency: str
    effective_date: date


# Calculation input / output

class CalculationInput(BaseModel):
    employee_id: str
    country_id: str
    country_code: str
    payroll_period_id: str
    calculation_date: date
    basic_salary: Decimal
    currency_code: str
    salary_components: List[SalaryComponent] = []
    statutory_components: List[StatutoryComponent] = []
    include_overtime: bool = True
    include_night_shift: bool = True
    metadata: Dict[str, Any] = {}


class ComponentBreakdown(BaseModel):
    component_id: str
    component_name: str
    component_type: SalaryComponentType
    amount: Decimal
    currency_code: str
    calculation_method: CalculationMethod
    base_amount: Optional[Decimal] = None
    rate: Optional[Decimal] = None

    class Config:
        frozen = True


class StatutoryBreakdown(BaseModel):
    component_id: str
    component_name: str
    component_type: StatutoryComponentType
    employee_contribution: Decimal
    employer_contribution: Decimal
    total_contribution: Decimal
    currency_code: str
    calculation_basis: CalculationBasis
    rate: Optional[Decimal] = None

    class Config:
        frozen = True


class GrossPayBreakdown(BaseModel):
    gross_pay: Decimal
    basic_salary: Decimal
    total_earnings: Decimal
    overtime_pay: Decimal = Decimal("0")
    night_shift_pay: Decimal = Decimal("0")
    components: List[ComponentBreakdown] = []

    class Config:
        frozen = True


class PayrollCalculationResult(BaseModel):
    calculation_id: str
    employee_id: str
    country_id: str
    payroll_period_id: str
    calculated_at: datetime
    gross_pay: Decimal
    basic_salary: Decimal
    total_earnings: Decimal
    overtime_pay: Decimal
    night_shift_pay: Decimal
    total_statutory_deductions: Decimal
    total_other_deductions: Decimal
    total_deductions: Decimal
    net_pay: Decimal
    currency_code: str
    salary_components: List[ComponentBreakdown]
    statutory_deductions: List[StatutoryBreakdown]
    other_deductions: List[ComponentBreakdown]
    metadata: Dict[str, Any] = {}

    class Config:
        frozen = True


class PayrollCalculationRequest(BaseModel):
    employee_id: str
    country_id: str
    payroll_period_id: str
    calculation_date: Optional[date] = None
    include_overtime: Optional[bool] = None
    include_night_shift: Optional[bool] = None


class BulkPayrollCalculationRequest(BaseModel):
    country_id: str
    payroll_period_id: str
    employee_ids: List[str] = Field(default_factory=list)
    calculation_date: Optional[date] = None


class PayrollCalculationResponse(BaseModel):
    result: PayrollCalculationResult
    processing_time_ms: int
    status: Literal["success", "partial", "failed"]
    warnings: Optional[List[str]] = None
    errors: Optional[List[str]] = None


class BulkCalculationError(BaseModel):
    employee_id: str
    error: str


class BulkPayrollCalculationResponse(BaseModel):
    results: List[PayrollCalculationResult]
    total_requested: int
    success_count: int
    failed_count: int
    processing_time_ms: int
    employees_per_second: int = 0
    failed_employee_ids: Optional[List[str]] = None
    errors: Optional[List[BulkCalculationError]] = None


class PayrollCalculationSummary(BaseModel):
    total_employees: int
    total_gross_pay: Decimal
    total_statutory_deductions: Decimal
    total_other_deductions: Decimal
    total_net_pay: Decimal
    currency_code: Optional[str] = None
    failed_count: int = 0


class RegionInfo(BaseModel):
    country_code: str
    region_name: str
