from enum import Enum


class OrderStatus(str, Enum):
    pending = "pending"
    waiting_admin_confirmation = "waiting_admin_confirmation"
    confirmed = "confirmed"
    completed = "completed"
    cancelled = "cancelled"


VALID_STATUSES = [s.value for s in OrderStatus]

ALLOWED_TRANSITIONS = {
    "pending": ["confirmed", "cancelled", "waiting_admin_confirmation"],
    "waiting_admin_confirmation": ["confirmed", "cancelled"],
    "confirmed": ["completed", "cancelled"],
    "completed": [],  # terminal
    "cancelled": ["pending"],
}


def status_label(status: str) -> str:
    """Human readable form used in notifications: waiting_admin_confirmation -> waiting admin confirmation."""
    return status.replace("_", " ")
