from enum import Enum


class OrderEvent(str, Enum):
    STATUS_CHANGED = "status_changed"
    PRICE_SET = "price_set"
    PAYMENT_CONFIRMED = "payment_confirmed"
