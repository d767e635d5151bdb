"""
Admin Routes - payment reporting, ledger repair and trainer application review.
"""
from fastapi import APIRouter, Depends
from typing import Optional
from auth import require_admin
from exceptions import ValidationException
from models import ApiResponse, ReviewApplicationRequest
from models_orm import UserORM
from service_modules.payment_service import PaymentService, get_payment_service
from service_modules.trainer_application_service import (
    TrainerApplicationService, get_trainer_application_service, APPLICATION_STATUSES
)
import logging

logger = logging.getLogger("fitmarket")
router = APIRouter()


# --- PAYMENTS ---

@router.get("/admin/payment-summary", response_model=ApiResponse)
async def payment_summary(
    admin: UserORM = Depends(require_admin),
    service: PaymentService = Depends(get_payment_service)
):
    """Total paid and the most recent transactions."""
    return ApiResponse(message="Payment summary", data=service.payment_summary())


@router.post("/admin/reconcile-payments", response_model=ApiResponse)
async def reconcile_payments(
    admin: UserORM = Depends(require_admin),
    service: PaymentService = Depends(get_payment_service)
):
    """Re-run the missing fan-out steps for paid bookings."""
    logger.info(f"Payment reconciliation requested by {admin.email}")
    return ApiResponse(message="Reconciliation complete", data=service.reconcile_orphans())


# --- TRAINER APPLICATIONS ---

@router.get("/admin/trainer-applications", response_model=ApiResponse)
async def list_trainer_applications(
    status: Optional[str] = None,
    admin: UserORM = Depends(require_admin),
    service: TrainerApplicationService = Depends(get_trainer_application_service)
):
    if status and status not in APPLICATION_STATUSES:
        raise ValidationException(f"status must be one of {', '.join(APPLICATION_STATUSES)}")
    return ApiResponse(message="Applications loaded", data=service.list_applications(status))


@router.patch("/admin/trainer-applications/{application_id}/approve", response_model=ApiResponse)
async def approve_trainer_application(
    application_id: str,
    payload: ReviewApplicationRequest,
    admin: UserORM = Depends(require_admin),
    service: TrainerApplicationService = Depends(get_trainer_application_service)
):
    application = service.approve(application_id, payload.feedback)
    return ApiResponse(message="Application approved", data=application)


@router.patch("/admin/trainer-applications/{application_id}/reject", response_model=ApiResponse)
async def reject_trainer_application(
    application_id: str,
    payload: ReviewApplicationRequest,
    admin: UserORM = Depends(require_admin),
    service: TrainerApplicationService = Depends(get_trainer_application_service)
):
    application = service.reject(application_id, payload.feedback)
    return ApiResponse(message="Application rejected", data=application)
