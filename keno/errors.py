"""Custom exceptions for centralized error handling."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any


@dataclass
class AppError(Exception):
    """Base application error."""

    code: str
    message: str
    status_code: int
    details: Any | None = None


class NotFoundError(AppError):
    """Resource not found."""

    def __init__(self, message: str = "Not found", details: Any | None = None) -> None:
        super().__init__(code="not_found", message=message, status_code=404, details=details)


class ValidationError(AppError):
    """Input validation error."""

    def __init__(self, message: str = "Validation error", details: Any | None = None) -> None:
        super().__init__(code="validation_error", message=message, status_code=400, details=details)


class ConflictError(AppError):
    """Conflict (e.g., unique constraint)."""

    def __init__(self, message: str = "Conflict", details: Any | None = None) -> None:
        super().__init__(code="conflict", message=message, status_code=409, details=details)


class InvalidSelectionCountError(AppError):
    """Too few or too many spots selected."""

    def __init__(self, message: str = "Invalid selection count", details: Any | None = None) -> None:
        super().__init__(code="invalid_selection_count", message=message, status_code=400, details=details)


class InvalidSelectionError(AppError):
    """Selected numbers are duplicated, out of range or not integers."""

    def __init__(self, message: str = "Invalid selection", details: Any | None = None) -> None:
        super().__init__(code="invalid_selection", message=message, status_code=400, details=details)


class InvalidWagerError(AppError):
    """Wager is not a positive integer within the betting limits."""

    def __init__(self, message: str = "Invalid wager amount", details: Any | None = None) -> None:
        super().__init__(code="invalid_wager_amount", message=message, status_code=400, details=details)


class InsufficientBalanceError(AppError):
    """Wager exceeds the player's balance."""

    def __init__(self, message: str = "Insufficient balance", details: Any | None = None) -> None:
        super().__init__(code="insufficient_balance", message=message, status_code=400, details=details)


class BettingClosedError(AppError):
    """No game is currently accepting bets."""

    def __init__(self, message: str = "Betting closed", details: Any | None = None) -> None:
        super().__init__(code="betting_closed", message=message, status_code=409, details=details)
