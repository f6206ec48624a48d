"""
Custom Exception Classes for the Payroll Calculation Engine
"""

from typing import Any, Dict, Optional
from fastapi import HTTPException, status


class BaseAPIException(HTTPException):
    """Base exception class for API errors with enhanced error details."""

    def __init__(
        self,
        status_code: int,
        detail: str,
        error_code: Optional[str] = None,
        error_data: Optional[Dict[str, Any]] = None,
        headers: Optional[Dict[str, str]] = None
    ):
        super().__init__(status_code=status_code, detail=detail, headers=headers)
        self.error_code = error_code
        self.error_data = error_data or {}

    def __str__(self) -> str:
        return str(self.detail)


# Authentication & Authorization Exceptions
class AuthenticationError(BaseAPIException):
    """Requester identity missing or unusable."""

    def __init__(self, detail: str = "Authentication failed", error_data: Optional[Dict[str, Any]] = None):
        super().__init__(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail=detail,
            error_code="AUTH_FAILED",
            error_data=error_data
        )


class InsufficientPermissionsError(BaseAPIException):
    """User doesn't have required permissions."""

    def __init__(self, detail: str = "Insufficient permissions", error_data: Optional[Dict[str, Any]] = None):
        super().__init__(
            status_code=status.HTTP_403_FORBIDDEN,
            detail=detail,
            error_code="INSUFFICIENT_PERMISSIONS",
            error_data=error_data
        )


# Resource Exceptions
class ResourceNotFoundError(BaseAPIException):
    """Requested resource not found."""

    def __init__(self, resource_type: str, resource_id: str = None, error_data: Optional[Dict[str, Any]] = None):
        detail = f"{resource_type} not found"
        if resource_id:
            detail += f" (ID: {resource_id})"

        super().__init__(
            status_code=status.HTTP_404_NOT_FOUND,
            detail=detail,
            error_code="RESOURCE_NOT_FOUND",
            error_data={"resource_type": resource_type, "resource_id": resource_id, **(error_data or {})}
        )


# Validation Exceptions
class InvalidInputError(BaseAPIException):
    """Missing, contradictory or unsupported calculation input."""

    def __init__(self, detail: str, field: str = None, value: Any = None, error_data: Optional[Dict[str, Any]] = None):
        super().__init__(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail=detail,
            error_code="INVALID_INPUT",
            error_data={"field": field, "value": value, **(error_data or {})}
        )


# Configuration Exceptions
class ConfigurationError(BaseAPIException):
    """Configuration error."""

    def __init__(self, detail: str = "Configuration error", config_key: str = None, error_data: Optional[Dict[str, Any]] = None):
        super().__init__(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail=detail,
            error_code="CONFIGURATION_ERROR",
            error_data={"config_key": config_key, **(error_data or {})}
        )


# Payroll Exceptions
class PayrollCalculationError(BaseAPIException):
    """Payroll calculation failed."""

    def __init__(
        self,
        detail: str = "Payroll calculation failed",
        employee_id: str = None,
        region: str = None,
        error_data: Optional[Dict[str, Any]] = None
    ):
        super().__init__(
            status_code=status.HTTP_422_UNPROCESSABLE_ENTITY,
            detail=detail,
            error_code="PAYROLL_CALCULATION_ERROR",
            error_data={"employee_id": employee_id, "region": region, **(error_data or {})}
        )
