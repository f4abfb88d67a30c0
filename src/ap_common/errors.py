"""Unified error codes and custom exceptions.

Error code ranges:
  1xxx: Auth/User
  2xxx: Wallet
  3xxx: Scenario
  6xxx: Stealing / Shields
  9xxx: System

Every error names the precondition it violated. Anything the caller needs to
render an actionable message (shortfall, remaining shield time, ...) goes in
``details`` and is returned as the ``data`` of the error envelope.
"""

from datetime import datetime
from typing import Any


class AppError(Exception):
    """Base application error."""

    def __init__(
        self,
        code: int,
        message: str,
        http_status: int = 500,
        details: dict[str, Any] | None = None,
    ) -> None:
        self.code = code
        self.message = message
        self.http_status = http_status
        self.details = details
        super().__init__(message)


# --- 1xxx: Auth/User ---

class UsernameExistsError(AppError):
    def __init__(self) -> None:
        super().__init__(1001, "Username already exists", 409)


class EmailExistsError(AppError):
    def __init__(self) -> None:
        super().__init__(1002, "Email already exists", 409)


class InvalidCredentialsError(AppError):
    def __init__(self) -> None:
        super().__init__(1003, "Invalid username or password", 401)


class AccountDisabledError(AppError):
    def __init__(self) -> None:
        super().__init__(1004, "Account is disabled", 403)


class InvalidRefreshTokenError(AppError):
    def __init__(self) -> None:
        super().__init__(1005, "Refresh token is invalid or expired", 401)


class PermissionDeniedError(AppError):
    def __init__(self, required: str) -> None:
        super().__init__(
            1006, f"Permission denied: {required} role required", 403,
            {"required_role": required},
        )


# --- 2xxx: Wallet ---

class InsufficientFundsError(AppError):
    def __init__(self, required: int, available: int) -> None:
        shortfall = max(required - available, 0)
        super().__init__(
            2001,
            f"Insufficient AP coins: required {required}, available {available}, "
            f"short by {shortfall}",
            422,
            {"required": required, "available": available, "shortfall": shortfall},
        )


class WalletNotFoundError(AppError):
    def __init__(self, user_id: str) -> None:
        super().__init__(2002, f"Wallet not found for user {user_id}", 404, {"user_id": user_id})


class InvalidAmountError(AppError):
    def __init__(self, amount: object) -> None:
        super().__init__(
            2003, f"Amount must be a positive integer, got {amount!r}", 422,
            {"amount": amount if isinstance(amount, int) else str(amount)},
        )


# --- 3xxx: Scenario ---

class ScenarioNotFoundError(AppError):
    def __init__(self, scenario_id: str) -> None:
        super().__init__(
            3001, f"Scenario not found: {scenario_id}", 404, {"scenario_id": scenario_id}
        )


class ScenarioNotActiveError(AppError):
    def __init__(self, scenario_id: str, status: str) -> None:
        super().__init__(
            3002, f"Scenario {scenario_id} is not active (status={status})", 422,
            {"scenario_id": scenario_id, "status": status},
        )


class OwnershipMismatchError(AppError):
    def __init__(self, scenario_id: str, expected_holder: str) -> None:
        super().__init__(
            3003,
            f"Scenario {scenario_id} is no longer held by {expected_holder}",
            409,
            {"scenario_id": scenario_id, "expected_holder": expected_holder},
        )


class DuplicatePredictionError(AppError):
    def __init__(self, scenario_id: str) -> None:
        super().__init__(
            3004, f"Already predicted on scenario {scenario_id}", 409,
            {"scenario_id": scenario_id},
        )


# --- 6xxx: Stealing / Shields ---

class SelfStealError(AppError):
    def __init__(self, scenario_id: str) -> None:
        super().__init__(
            6001, f"You already hold scenario {scenario_id}", 422, {"scenario_id": scenario_id}
        )


class ScenarioShieldedError(AppError):
    def __init__(self, scenario_id: str, protected_until: datetime, remaining_seconds: int) -> None:
        super().__init__(
            6002,
            f"Scenario {scenario_id} is shielded for another {remaining_seconds}s",
            423,
            {
                "scenario_id": scenario_id,
                "protected_until": protected_until.isoformat(),
                "remaining_seconds": remaining_seconds,
            },
        )


class StealRaceLostError(AppError):
    def __init__(self, scenario_id: str, refunded: int) -> None:
        super().__init__(
            6003,
            f"Another steal on scenario {scenario_id} won the race; {refunded} AP refunded",
            409,
            {"scenario_id": scenario_id, "refunded": refunded},
        )


class NotHolderError(AppError):
    def __init__(self, scenario_id: str, holder_id: str) -> None:
        super().__init__(
            6004, f"Only the current holder of scenario {scenario_id} can do this", 403,
            {"scenario_id": scenario_id, "holder_id": holder_id},
        )


class InvalidShieldTierError(AppError):
    def __init__(self, tier: str) -> None:
        super().__init__(6005, f"Unknown shield tier: {tier}", 422, {"tier": tier})


# --- 9xxx: System ---

class RateLimitError(AppError):
    def __init__(self, retry_after: int) -> None:
        super().__init__(9001, "Rate limit exceeded", 429, {"retry_after": retry_after})


class InternalError(AppError):
    def __init__(self, detail: str = "Internal server error") -> None:
        super().__init__(9002, detail, 500)
