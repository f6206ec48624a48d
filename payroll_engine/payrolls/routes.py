from fastapi import APIRouter, Depends
from typing import List

from payroll_engine.core.dependencies import Requester, get_current_requester, get_payroll_service
from payroll_engine.payrolls.schemas import (
    BulkPayrollCalculationRequest,
    BulkPayrollCalculationResponse,
    PayrollCalculationRequest,
    PayrollCalculationResponse,
    PayrollCalculationSummary,
    RegionInfo,
)
from payroll_engine.payrolls.service import PayrollCalculationService

router = APIRouter(prefix="/payrolls", tags=["payrolls"])


@router.post("/calculate", response_model=PayrollCalculationResponse)
async def calculate_payroll(
    calculation_request: PayrollCalculationRequest,
    requester: Requester = Depends(get_current_requester),
    payroll_service: PayrollCalculationService = Depends(get_payroll_service)
):
    """Calculate payroll for one employee without persisting anything."""
    payroll_service.validate_calculation_access(
        calculation_request.employee_id, requester.id, requester.role
    )
    return await payroll_service.calculate_payroll(
        calculation_request, actor_id=requester.id, actor_role=requester.role
    )


@router.post("/bulk-calculate", response_model=BulkPayrollCalculationResponse)
async def bulk_calculate_payroll(
    bulk_request: BulkPayrollCalculationRequest,
    requester: Requester = Depends(get_current_requester),
    payroll_service: PayrollCalculationService = Depends(get_payroll_service)
):
    """Calculate payroll for many employees of one country and period."""
    payroll_service.validate_bulk_access(requester.role)
    return await payroll_service.calculate_bulk_payroll(
        bulk_request, actor_id=requester.id, actor_role=requester.role
    )


@router.post("/bulk-calculate/summary", response_model=PayrollCalculationSummary)
async def summarize_bulk_payroll(
    bulk_request: BulkPayrollCalculationRequest,
    requester: Requester = Depends(get_current_requester),
    payroll_service: PayrollCalculationService = Depends(get_payroll_service)
):
    """Totals of a bulk calculation for one country and period."""
    payroll_service.validate_bulk_access(requester.role)
    return await payroll_service.summarize_bulk_payroll(
        bulk_request, actor_id=requester.id, actor_role=requester.role
    )


@router.post("/cache/clear")
async def clear_reference_cache(
    requester: Requester = Depends(get_current_requester),
    payroll_service: PayrollCalculationService = Depends(get_payroll_service)
):
    """Force a refresh of cached countries and components."""
    payroll_service.validate_privileged_access(requester.role)
    payroll_service.clear_cache()
    return {"message": "Reference data cache cleared"}


@router.get("/regions", response_model=List[RegionInfo])
async def list_regions(
    payroll_service: PayrollCalculationService = Depends(get_payroll_service)
):
    """Jurisdictions with a registered calculator."""
    return payroll_service.list_regions()
