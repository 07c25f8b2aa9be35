from enum import Enum


class PaymentMethod(str, Enum):
    COD = "cod"
    ADVANCED = "advanced"
    ONLINE = "online"


class PaymentStatus(str, Enum):
    PENDING = "pending"
    PAID = "paid"
    COMPLETED = "completed"


class TripStatus(str, Enum):
    PENDING = "pending"
    IN_PROGRESS = "in_progress"
    COMPLETED = "completed"


class PaymentRecordStatus(str, Enum):
    SUCCESS = "success"
    FAILED = "failed"
    PENDING = "pending"


def enum_values(enum_cls):
    return [member.value for member in enum_cls]
