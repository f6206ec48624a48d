"""
Validation Utilities for the Payroll Calculation Engine
"""

from decimal import Decimal
from typing import Any, Dict, List

from payroll_engine.core.exceptions import InvalidInputError


def validate_required_fields(data: Dict[str, Any], required_fields: List[str]):
    """Validate that required fields are present and not empty."""
    missing_fields = []

    for field in required_fields:
        value = data.get(field)
        if value is None or (isinstance(value, str) and not value.strip()):
            missing_fields.append(field)

    if missing_fields:
        raise InvalidInputError(
            detail="Missing required input data for payroll calculation",
            error_data={"missing_fields": missing_fields}
        )


def validate_non_negative_amount(amount: Decimal, field_name: str):
    """Validate a money amount is zero or positive."""
    if amount is None or amount < 0:
        raise InvalidInputError(
            detail=f"{field_name.replace('_', ' ').capitalize()} cannot be negative",
            field=field_name,
            value=str(amount)
        )


def validate_calculation_input(calculation_input) -> None:
    """Validate a CalculationInput before any pay is computed."""
    validate_required_fields(
        {
            "employee_id": calculation_input.employee_id,
            "country_id": calculation_input.country_id,
            "country_code": calculation_input.country_code,
            "payroll_period_id": calculation_input.payroll_period_id,
            "currency_code": calculation_input.currency_code,
        },
        ["employee_id", "country_id", "country_code", "payroll_period_id", "currency_code"]
    )
    validate_non_negative_amount(calculation_input.basic_salary, "basic_salary")


def validate_period_country(period_country_id: str, country_id: str):
    """A payroll period may only be used for its own country."""
    if period_country_id != country_id:
        raise InvalidInputError(
            detail="Payroll period does not belong to the specified country",
            field="payroll_period_id",
            error_data={"period_country_id": period_country_id, "country_id": country_id}
        )
