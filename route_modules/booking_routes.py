"""
Booking Routes - members recording bookings and reading their payment history.
"""
from fastapi import APIRouter, Depends
from auth import get_current_user, ensure_self_or_admin
from models import ApiResponse, BookingFields
from models_orm import UserORM
from service_modules.booking_service import BookingService, get_booking_service

router = APIRouter()


@router.patch("/users/activity/{email}", response_model=ApiResponse)
async def record_booking(
    email: str,
    payload: BookingFields,
    user: UserORM = Depends(get_current_user),
    service: BookingService = Depends(get_booking_service)
):
    """Record a pending booking in the member's payment history."""
    ensure_self_or_admin(user, email=email)
    booking_id = service.record_pending_booking(email, payload.model_dump())
    return ApiResponse(message="Booking recorded", data={"booking_id": booking_id})


@router.get("/users/payment-history/{email}", response_model=ApiResponse)
async def get_payment_history(
    email: str,
    user: UserORM = Depends(get_current_user),
    service: BookingService = Depends(get_booking_service)
):
    ensure_self_or_admin(user, email=email)
    return ApiResponse(message="Payment history loaded", data=service.get_payment_history(email))


@router.get("/users/paymentData/{booking_id}", response_model=ApiResponse)
async def get_payment_data(
    booking_id: str,
    user: UserORM = Depends(get_current_user),
    service: BookingService = Depends(get_booking_service)
):
    """Fetch one booking together with its member's name and email."""
    result = service.get_booking_by_id(booking_id)
    if user.id != result["booking"]["trainer_id"]:
        ensure_self_or_admin(user, email=result["email"])
    return ApiResponse(message="Booking found", data=result)
