from pydantic import BaseModel, ConfigDict, EmailStr, Field
from typing import Any, List, Optional, Literal

from service_modules.base import PRICE_PATTERN

# --- ENVELOPE ---
class ApiResponse(BaseModel):
    success: bool = True
    message: str
    data: Optional[Any] = None

# --- SLOTS ---
class Slot(BaseModel):
    day: str = Field(..., min_length=1)   # e.g. "Mon"
    time: str = Field(..., min_length=1)  # e.g. "10am"

class AddSlotsRequest(BaseModel):
    trainer_id: str
    slots: List[Slot]

class DeleteSlotRequest(BaseModel):
    """Either `slot` (remove a slot and its bookings) or `booking_id` + `user_id` (remove one booking)."""
    trainer_id: str
    slot: Optional[Slot] = None
    booking_id: Optional[str] = None
    user_id: Optional[str] = None

# --- BOOKINGS ---
class BookingFields(BaseModel):
    """Client-supplied booking fields. Unknown keys are kept with the booking."""
    model_config = ConfigDict(extra="allow")

    trainer_id: str
    slot: Slot
    class_id: Optional[str] = None
    price: Optional[str] = Field(None, pattern=PRICE_PATTERN)  # e.g. "$10.00"

class PaymentIntentRequest(BaseModel):
    price: float = Field(..., gt=0)
    booking_id: Optional[str] = None

# --- ACCOUNTS ---
class RegisterRequest(BaseModel):
    email: EmailStr
    password: str = Field(..., min_length=6)
    name: Optional[str] = None
    photo_url: Optional[str] = None

class LoginRequest(BaseModel):
    email: EmailStr
    password: str

class SocialLoginRequest(BaseModel):
    email: EmailStr
    name: Optional[str] = None
    photo_url: Optional[str] = None
    provider: str = "google"

# --- TRAINER APPLICATIONS ---
class TrainerApplicationRequest(BaseModel):
    skills: List[str] = []
    certifications: List[str] = []
    slots: List[Slot] = []

class ReviewApplicationRequest(BaseModel):
    feedback: Optional[str] = None

# --- CLASSES ---
class CreateClassRequest(BaseModel):
    class_name: str = Field(..., min_length=1)
    skills: List[str] = []
    difficulty_level: Literal["beginner", "intermediate", "advanced"] = "beginner"
