"""
Trainer Routes - slot management and trainer applications.
"""
from fastapi import APIRouter, Depends
from auth import get_current_user, ensure_self_or_admin
from exceptions import ForbiddenException, ValidationException
from models import ApiResponse, AddSlotsRequest, DeleteSlotRequest, TrainerApplicationRequest
from models_orm import UserORM
from service_modules.slot_service import SlotService, get_slot_service
from service_modules.trainer_application_service import (
    TrainerApplicationService, get_trainer_application_service
)

router = APIRouter()


def _ensure_trainer_or_admin(user: UserORM, trainer_id: str):
    if user.role not in ("trainer", "admin"):
        raise ForbiddenException("Only trainers can manage slots")
    ensure_self_or_admin(user, user_id=trainer_id)


@router.patch("/trainers/add-slots", response_model=ApiResponse)
async def add_slots(
    payload: AddSlotsRequest,
    user: UserORM = Depends(get_current_user),
    service: SlotService = Depends(get_slot_service)
):
    """Add the slots the trainer does not offer yet."""
    _ensure_trainer_or_admin(user, payload.trainer_id)
    result = service.add_slots(payload.trainer_id, payload.slots)
    return ApiResponse(message=f"{result['added_count']} slot(s) added", data=result)


@router.get("/trainers/{trainer_id}/slots", response_model=ApiResponse)
async def get_slots(
    trainer_id: str,
    service: SlotService = Depends(get_slot_service)
):
    return ApiResponse(message="Slots loaded", data=service.get_slots(trainer_id))


@router.delete("/delete-slot", response_model=ApiResponse)
async def delete_slot(
    payload: DeleteSlotRequest,
    user: UserORM = Depends(get_current_user),
    service: SlotService = Depends(get_slot_service)
):
    """
    Remove a slot (and every booking made against it), or a single booking
    when `booking_id` and `user_id` are given instead of `slot`.
    """
    _ensure_trainer_or_admin(user, payload.trainer_id)

    if payload.slot is not None:
        result = service.delete_slot(payload.trainer_id, payload.slot)
        return ApiResponse(
            message=f"Slot deleted along with {result['deleted_booking_count']} booking(s)",
            data=result
        )

    if payload.booking_id and payload.user_id:
        result = service.delete_booking(payload.trainer_id, payload.booking_id, payload.user_id)
        return ApiResponse(message="Booking deleted", data=result)

    raise ValidationException("Provide either slot or booking_id and user_id")


@router.post("/trainers/apply", response_model=ApiResponse)
async def apply_as_trainer(
    payload: TrainerApplicationRequest,
    user: UserORM = Depends(get_current_user),
    service: TrainerApplicationService = Depends(get_trainer_application_service)
):
    """Submit an application to become a trainer."""
    application = service.apply(user.id, payload.skills, payload.certifications, payload.slots)
    return ApiResponse(message="Application submitted", data=application)
