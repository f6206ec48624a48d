"""
Philippines statutory rates (monthly amounts in PHP)
"""

from dataclasses import dataclass
from decimal import Decimal
from typing import Optional, Tuple


@dataclass(frozen=True)
class SSSBracket:
    min_salary: Decimal
    max_salary: Optional[Decimal]  # None = no upper bound
    monthly_salary_credit: Decimal
    employee: Decimal
    employer: Decimal
    total: Decimal


@dataclass(frozen=True)
class WithholdingTaxBracket:
    min_income: Decimal
    max_income: Optional[Decimal]  # None = no upper bound
    rate: Decimal  # percent of the excess over min_income
    base_amount: Decimal


# Social Security System, keyed on basic salary
SSS_CONTRIBUTION_TABLE: Tuple[SSSBracket, ...] = (
    SSSBracket(Decimal("0"), Decimal("4249.99"), Decimal("4000"), Decimal("180"), Decimal("380"), Decimal("560")),
    SSSBracket(Decimal("4250"), Decimal("4749.99"), Decimal("4500"), Decimal("202.5"), Decimal("427.5"), Decimal("630")),
    SSSBracket(Decimal("4750"), Decimal("5249.99"), Decimal("5000"), Decimal("225"), Decimal("475"), Decimal("700")),
    SSSBracket(Decimal("5250"), Decimal("5749.99"), Decimal("5500"), Decimal("247.5"), Decimal("522.5"), Decimal("770")),
    SSSBracket(Decimal("5750"), Decimal("6249.99"), Decimal("6000"), Decimal("270"), Decimal("570"), Decimal("840")),
    SSSBracket(Decimal("6250"), Decimal("6749.99"), Decimal("6500"), Decimal("292.5"), Decimal("617.5"), Decimal("910")),
    SSSBracket(Decimal("6750"), Decimal("7249.99"), Decimal("7000"), Decimal("315"), Decimal("665"), Decimal("980")),
    SSSBracket(Decimal("7250"), Decimal("7749.99"), Decimal("7500"), Decimal("337.5"), Decimal("712.5"), Decimal("1050")),
    SSSBracket(Decimal("7750"), Decimal("8249.99"), Decimal("8000"), Decimal("360"), Decimal("760"), Decimal("1120")),
    SSSBracket(Decimal("8250"), Decimal("8749.99"), Decimal("8500"), Decimal("382.5"), Decimal("807.5"), Decimal("1190")),
    SSSBracket(Decimal("8750"), Decimal("9249.99"), Decimal("9000"), Decimal("405"), Decimal("855"), Decimal("1260")),
    SSSBracket(Decimal("9250"), Decimal("9749.99"), Decimal("9500"), Decimal("427.5"), Decimal("902.5"), Decimal("1330")),
    SSSBracket(Decimal("9750"), Decimal("10249.99"), Decimal("10000"), Decimal("450"), Decimal("950"), Decimal("1400")),
    SSSBracket(Decimal("10250"), Decimal("10749.99"), Decimal("10500"), Decimal("472.5"), Decimal("997.5"), Decimal("1470")),
    SSSBracket(Decimal("10750"), Decimal("11249.99"), Decimal("11000"), Decimal("495"), Decimal("1045"), Decimal("1540")),
    SSSBracket(Decimal("11250"), Decimal("11749.99"), Decimal("11500"), Decimal("517.5"), Decimal("1092.5"), Decimal("1610")),
    SSSBracket(Decimal("11750"), Decimal("12249.99"), Decimal("12000"), Decimal("540"), Decimal("1140"), Decimal("1680")),
    SSSBracket(Decimal("12250"), Decimal("12749.99"), Decimal("12500"), Decimal("562.5"), Decimal("1187.5"), Decimal("1750")),
    SSSBracket(Decimal("12750"), Decimal("13249.99"), Decimal("13000"), Decimal("585"), Decimal("1235"), Decimal("1820")),
    SSSBracket(Decimal("13250"), Decimal("13749.99"), Decimal("13500"), Decimal("607.5"), Decimal("1282.5"), Decimal("1890")),
    SSSBracket(Decimal("13750"), Decimal("14249.99"), Decimal("14000"), Decimal("630"), Decimal("1330"), Decimal("1960")),
    SSSBracket(Decimal("14250"), Decimal("14749.99"), Decimal("14500"), Decimal("652.5"), Decimal("1377.5"), Decimal("2030")),
    SSSBracket(Decimal("14750"), Decimal("15249.99"), Decimal("15000"), Decimal("675"), Decimal("1425"), Decimal("2100")),
    SSSBracket(Decimal("15250"), Decimal("15749.99"), Decimal("15500"), Decimal("697.5"), Decimal("1472.5"), Decimal("2170")),
    SSSBracket(Decimal("15750"), Decimal("16249.99"), Decimal("16000"), Decimal("720"), Decimal("1520"), Decimal("2240")),
    SSSBracket(Decimal("16250"), Decimal("16749.99"), Decimal("16500"), Decimal("742.5"), Decimal("1567.5"), Decimal("2310")),
    SSSBracket(Decimal("16750"), Decimal("17249.99"), Decimal("17000"), Decimal("765"), Decimal("1615"), Decimal("2380")),
    SSSBracket(Decimal("17250"), Decimal("17749.99"), Decimal("17500"), Decimal("787.5"), Decimal("1662.5"), Decimal("2450")),
    SSSBracket(Decimal("17750"), Decimal("18249.99"), Decimal("18000"), Decimal("810"), Decimal("1710"), Decimal("2520")),
    SSSBracket(Decimal("18250"), Decimal("18749.99"), Decimal("18500"), Decimal("832.5"), Decimal("1757.5"), Decimal("2590")),
    SSSBracket(Decimal("18750"), Decimal("19249.99"), Decimal("19000"), Decimal("855"), Decimal("1805"), Decimal("2660")),
    SSSBracket(Decimal("19250"), Decimal("19749.99"), Decimal("19500"), Decimal("877.5"), Decimal("1852.5"), Decimal("2730")),
    SSSBracket(Decimal("19750"), None, Decimal("20000"), Decimal("900"), Decimal("1900"), Decimal("2800")),
)

# PhilHealth
PHILHEALTH_PREMIUM_RATE = Decimal("4")
PHILHEALTH_MIN_SALARY = Decimal("10000")
PHILHEALTH_MAX_SALARY = Decimal("80000")
PHILHEALTH_MIN_CONTRIBUTION = Decimal("400")  # monthly, both shares
PHILHEALTH_MAX_CONTRIBUTION = Decimal("3200")

# Pag-IBIG (HDMF)
PAGIBIG_LOW_INCOME_THRESHOLD = Decimal("1500")
PAGIBIG_EMPLOYEE_RATE_LOW = Decimal("1")
PAGIBIG_EMPLOYEE_RATE = Decimal("2")
PAGIBIG_EMPLOYER_RATE = Decimal("2")
PAGIBIG_MAX_EMPLOYEE_CONTRIBUTION = Decimal("100")
PAGIBIG_MAX_SALARY = Decimal("5000")

# Withholding tax on monthly taxable income (TRAIN Law)
WITHHOLDING_TAX_TABLE: Tuple[WithholdingTaxBracket, ...] = (
    WithholdingTaxBracket(Decimal("0"), Decimal("20833"), Decimal("0"), Decimal("0")),
    WithholdingTaxBracket(Decimal("20834"), Decimal("33332"), Decimal("15"), Decimal("0")),
    WithholdingTaxBracket(Decimal("33333"), Decimal("66666"), Decimal("20"), Decimal("1875")),
    WithholdingTaxBracket(Decimal("66667"), Decimal("166666"), Decimal("25"), Decimal("8541.8")),
    WithholdingTaxBracket(Decimal("166667"), Decimal("666666"), Decimal("30"), Decimal("33541.8")),
    WithholdingTaxBracket(Decimal("666667"), None, Decimal("35"), Decimal("183541.8")),
)

TAX_LAW = "TRAIN Law (RA 10963)"
CALCULATION_STANDARD = "Philippine Labor Code 2024"
