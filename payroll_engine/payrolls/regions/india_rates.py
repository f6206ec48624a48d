"""
India statutory rates (monthly amounts in INR unless noted)
"""

from dataclasses import dataclass
from decimal import Decimal
from typing import Optional, Tuple


@dataclass(frozen=True)
class ProfessionalTaxSlab:
    min_salary: Decimal
    max_salary: Optional[Decimal]  # None = no upper bound
    tax: Decimal


@dataclass(frozen=True)
class IncomeTaxSlab:
    min_income: Decimal
    max_income: Optional[Decimal]  # None = no upper bound
    rate: Decimal  # percent


# Employees' Provident Fund
EPF_WAGE_CEILING = Decimal("15000")
EPF_EMPLOYEE_RATE = Decimal("12")
EPF_EMPLOYER_RATE = Decimal("12")  # includes pension share

# Employee State Insurance, applicable only up to the gross wage ceiling
ESI_WAGE_CEILING = Decimal("21000")
ESI_EMPLOYEE_RATE = Decimal("0.75")
ESI_EMPLOYER_RATE = Decimal("3.25")

# Professional Tax (Maharashtra slabs), on monthly gross
PT_SLABS: Tuple[ProfessionalTaxSlab, ...] = (
    ProfessionalTaxSlab(Decimal("0"), Decimal("7500"), Decimal("0")),
    ProfessionalTaxSlab(Decimal("7501"), Decimal("10000"), Decimal("175")),
    ProfessionalTaxSlab(Decimal("10001"), None, Decimal("200")),
)

# Income tax, old regime, on annual income
TDS_SLABS: Tuple[IncomeTaxSlab, ...] = (
    IncomeTaxSlab(Decimal("0"), Decimal("250000"), Decimal("0")),
    IncomeTaxSlab(Decimal("250001"), Decimal("500000"), Decimal("5")),
    IncomeTaxSlab(Decimal("500001"), Decimal("1000000"), Decimal("20")),
    IncomeTaxSlab(Decimal("1000001"), None, Decimal("30")),
)

HEALTH_EDUCATION_CESS = Decimal("1.04")  # 4% cess on computed tax
MONTHS_PER_YEAR = 12

TAX_REGIME = "Old Regime"
CALCULATION_STANDARD = "Indian Labor Laws 2024"
