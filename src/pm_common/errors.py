"""Unified error codes and custom exceptions.

Error code ranges:
  1xxx: Auth/User
  2xxx: Wallet
  3xxx: Event
  4xxx: Quote/Wager
  5xxx: Position
  9xxx: System

The HTTP status decides the public error name carried in every error body:
400 ValidationError, 401 Unauthorized, 404 NotFound, 409 Conflict, 500 InternalError.
"""

_ERROR_NAMES: dict[int, str] = {
    400: "ValidationError",
    401: "Unauthorized",
    404: "NotFound",
    409: "Conflict",
    500: "InternalError",
}


def error_name(http_status: int) -> str:
    return _ERROR_NAMES.get(http_status, "InternalError")


class AppError(Exception):
    """Base application error."""

    def __init__(
        self,
        code: int,
        message: str,
        http_status: int = 500,
    ) -> None:
        self.code = code
        self.message = message
        self.http_status = http_status
        super().__init__(message)

    @property
    def error(self) -> str:
        return error_name(self.http_status)


# --- 1xxx: Auth/User ---

class UnauthorizedError(AppError):
    def __init__(self, detail: str = "Invalid or missing credentials") -> None:
        super().__init__(1001, detail, 401)


class UserNotFoundError(AppError):
    def __init__(self, ref: str) -> None:
        super().__init__(1002, f"User not found: {ref}", 404)


# --- 2xxx: Wallet ---

class InsufficientFundsError(AppError):
    def __init__(self, required: int, available: int) -> None:
        super().__init__(
            2001,
            f"Insufficient funds: required {required} cents, spendable {available} cents",
            409,
        )


class WalletNotFoundError(AppError):
    def __init__(self, wallet_id: str) -> None:
        super().__init__(2002, f"Wallet not found: {wallet_id}", 404)


# --- 3xxx: Event ---

class EventNotFoundError(AppError):
    def __init__(self, event_ref: str) -> None:
        super().__init__(3001, f"Event not found: {event_ref}", 404)


class EventNotTradableError(AppError):
    def __init__(self, event_ref: str, status: str) -> None:
        super().__init__(3002, f"Event {event_ref} is not open for trading (status={status})", 409)


class InvalidTransitionError(AppError):
    def __init__(self, status: str, action: str) -> None:
        super().__init__(3003, f"Cannot {action} an event in status {status}", 409)


class DuplicateEventError(AppError):
    def __init__(self, field: str, value: str) -> None:
        super().__init__(3004, f"Event with {field} '{value}' already exists", 409)


class OutcomeNotFoundError(AppError):
    def __init__(self, outcome_ref: str) -> None:
        super().__init__(3005, f"Outcome not found: {outcome_ref}", 404)


class EventNotEditableError(AppError):
    def __init__(self, event_ref: str, status: str) -> None:
        super().__init__(3006, f"Outcomes of event {event_ref} are frozen (status={status})", 409)


class NoOutcomesError(AppError):
    def __init__(self, event_ref: str) -> None:
        super().__init__(3007, f"Event {event_ref} has no outcomes configured", 409)


# --- 4xxx: Quote/Wager ---

class OutOfBoundsError(AppError):
    def __init__(self, detail: str) -> None:
        super().__init__(4001, f"Wager out of bounds: {detail}", 409)


class SlippageExceededError(AppError):
    def __init__(self, max_payout: int, payout: int) -> None:
        super().__init__(
            4002,
            f"Payout moved: requested at least {max_payout} cents, current {payout} cents",
            409,
        )


class QuoteNotFoundError(AppError):
    def __init__(self, quote_id: str) -> None:
        super().__init__(4003, f"Quote not found or expired: {quote_id}", 404)


class WagerValidationError(AppError):
    def __init__(self, detail: str) -> None:
        super().__init__(4004, detail, 400)


# --- 5xxx: Position ---

class PositionNotFoundError(AppError):
    def __init__(self, position_id: str) -> None:
        super().__init__(5001, f"Position not found: {position_id}", 404)


# --- 9xxx: System ---

class RequestValidationFailed(AppError):
    def __init__(self, detail: str) -> None:
        super().__init__(9000, detail, 400)


class InternalError(AppError):
    def __init__(self, detail: str = "Internal server error") -> None:
        super().__init__(9002, detail, 500)
