"""Booking core error taxonomy

Raised by the domain services and translated to HTTP responses by the
exception handlers registered in main.py.
"""

from typing import Iterable, Optional, Union

Identifier = Union[int, str]


class BookingCoreError(Exception):
    """Base class for errors surfaced to API callers"""

    status_code = 500

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message

    def to_dict(self) -> dict:
        return {"detail": self.message}


class NotFoundError(BookingCoreError):
    """A referenced service, addon, zone, booking or lead does not exist"""

    status_code = 404

    def __init__(self, entity: str, ids: Union[Identifier, Iterable[Identifier], None] = None):
        if ids is None:
            id_list: list = []
        elif isinstance(ids, (int, str)):
            id_list = [ids]
        else:
            id_list = list(ids)
        self.entity = entity
        self.ids = id_list
        suffix = f": {', '.join(str(i) for i in id_list)}" if id_list else ""
        super().__init__(f"{entity.capitalize()} not found{suffix}")

    def to_dict(self) -> dict:
        return {"detail": self.message, "entity": self.entity, "ids": self.ids}


class InvalidError(BookingCoreError):
    """Malformed value that passed schema validation but is rejected by the core"""

    status_code = 422

    def __init__(self, field: str, reason: str):
        self.field = field
        self.reason = reason
        super().__init__(f"Invalid {field}: {reason}")

    def to_dict(self) -> dict:
        return {"detail": self.message, "field": self.field}


class ConflictError(BookingCoreError):
    """Duplicate unique key (slug, coupon code, rule key, phone)"""

    status_code = 409

    def __init__(self, entity: str, field: str, value: Optional[str] = None):
        self.entity = entity
        self.field = field
        self.value = value
        super().__init__(f"{entity.capitalize()} with {field} '{value}' already exists")

    def to_dict(self) -> dict:
        return {"detail": self.message, "entity": self.entity, "field": self.field}


class TransientError(BookingCoreError):
    """Storage or network failure; safe to retry for reads and the customer upsert"""

    status_code = 503

    def __init__(self, operation: str, retry_after: int = 1):
        self.operation = operation
        self.retry_after = retry_after
        super().__init__(f"Temporary failure during {operation}, please retry")
