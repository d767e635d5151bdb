"""
Payment Routes - payment finalization, Stripe payment intents and webhooks.
"""
from fastapi import APIRouter, Depends, Header, Request
from typing import Optional
from auth import get_current_user, ensure_self_or_admin
from models import ApiResponse, PaymentIntentRequest
from models_orm import UserORM
from service_modules.booking_service import BookingService, get_booking_service
from service_modules.payment_service import PaymentService, get_payment_service

router = APIRouter()


@router.patch("/users/payment-status/{payment_id}", response_model=ApiResponse)
async def finalize_payment(
    payment_id: str,
    user: UserORM = Depends(get_current_user),
    bookings: BookingService = Depends(get_booking_service),
    service: PaymentService = Depends(get_payment_service)
):
    """Mark a pending booking as paid and propagate it to the trainer and the ledger."""
    booking = bookings.get_booking_by_id(payment_id)
    ensure_self_or_admin(user, email=booking["email"])

    result = service.finalize(payment_id)
    return ApiResponse(message="Payment status updated", data=result)


@router.post("/create-payment-intent", response_model=ApiResponse)
async def create_payment_intent(
    payload: PaymentIntentRequest,
    user: UserORM = Depends(get_current_user),
    service: PaymentService = Depends(get_payment_service)
):
    """Create a card payment intent and return its client secret."""
    result = service.create_payment_intent(payload.price, payload.booking_id, user.email)
    return ApiResponse(message="Payment intent created", data=result)


# --- STRIPE WEBHOOK ---

@router.post("/webhook/stripe")
async def stripe_webhook(
    request: Request,
    stripe_signature: Optional[str] = Header(None, alias="Stripe-Signature"),
    service: PaymentService = Depends(get_payment_service)
):
    """Handle Stripe webhook events."""
    payload = await request.body()

    return service.handle_webhook(payload, stripe_signature)
