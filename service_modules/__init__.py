"""
Services package - one module per area of the marketplace backend.

Each module exposes its service class, a process-wide instance and a
`get_*_service` dependency for the routes.
"""
from .slot_service import SlotService, slot_service, get_slot_service
from .booking_service import BookingService, booking_service, get_booking_service
from .payment_service import PaymentService, payment_service, get_payment_service
from .class_service import ClassService, class_service, get_class_service
from .auth_service import AuthService, auth_service, get_auth_service
from .trainer_application_service import (
    TrainerApplicationService, trainer_application_service, get_trainer_application_service
)

__all__ = [
    'SlotService',
    'slot_service',
    'get_slot_service',
    'BookingService',
    'booking_service',
    'get_booking_service',
    'PaymentService',
    'payment_service',
    'get_payment_service',
    'ClassService',
    'class_service',
    'get_class_service',
    'AuthService',
    'auth_service',
    'get_auth_service',
    'TrainerApplicationService',
    'trainer_application_service',
    'get_trainer_application_service',
]
