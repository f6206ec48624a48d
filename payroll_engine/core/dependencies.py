from typing import Optional

from fastapi import Header, Request
from pydantic import BaseModel

from payroll_engine.core.exceptions import AuthenticationError, ConfigurationError


class Requester(BaseModel):
    """Caller identity forwarded by the upstream gateway."""
    id: str
    role: str


def get_payroll_service(request: Request):
    """Payroll service attached to the running app."""
    service = getattr(request.app.state, "payroll_service", None)
    if service is None:
        raise ConfigurationError(
            detail="Payroll service is not configured",
            config_key="payroll_service"
        )
    return service


def get_current_requester(
    x_user_id: Optional[str] = Header(None),
    x_user_role: Optional[str] = Header(None),
) -> Requester:
    """Get the requester from the X-User-Id / X-User-Role headers."""
    if not x_user_id or not x_user_role:
        raise AuthenticationError(
            detail="Requester identity headers are missing",
            error_data={"required_headers": ["X-User-Id", "X-User-Role"]}
        )
    return Requester(id=x_user_id, role=x_user_role)
