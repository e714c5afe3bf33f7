"""Loyaltypass exceptions."""


class BaseError(Exception):
    """
    Structured error with a stable code, a human message and extra data.

    Subclasses provide ``_default_messages`` so callers can raise with just a code.
    """

    _default_messages: dict[str, str] = {}

    def __init__(self, code: str, message: str | None = None, **data):
        self.code = code
        self.message = message or self._default_messages.get(code, code)
        self.data = data
        super().__init__(f"[{code}] {self.message}")

    def as_dict(self) -> dict:
        return {"code": self.code, "message": self.message, "data": self.data}


class LoyaltyPassError(BaseError):
    """
    Structured exception for loyalty operations.

    Usage:
        try:
            VisitService.record_visit("PASS-123")
        except LoyaltyPassError as e:
            if e.code == "USER_NOT_FOUND":
                handle_not_found()
    """

    http_status = 400

    _default_messages = {
        "USER_NOT_FOUND": "User not found",
        "NOTIFICATION_NOT_FOUND": "Reward notification not found",
        "INVALID_PHONE": "Invalid phone number format",
        "MISSING_FIELD": "Required field is missing",
        "INVALID_PAYLOAD": "Invalid payload",
        "DUPLICATE_PHONE": "Phone number already registered",
        "DUPLICATE_PASS_SERIAL": "Pass serial number already assigned",
        "USER_FK_VIOLATION": "Referenced user does not exist",
        "PASS_CREATION_FAILED": "Pass creation failed",
        "PASS_UPDATE_FAILED": "Pass update failed",
        "NOTIFICATION_FAILED": "Reward notification dispatch failed",
    }


class NotFoundError(LoyaltyPassError):
    http_status = 404


class ValidationError(LoyaltyPassError):
    http_status = 400


class ConflictError(LoyaltyPassError):
    http_status = 409


class ForeignKeyError(LoyaltyPassError):
    http_status = 409


class UpstreamServiceError(LoyaltyPassError):
    http_status = 502
