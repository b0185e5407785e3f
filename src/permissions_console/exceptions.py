"""Exception hierarchy for the permissions console.

All console exceptions inherit from PermissionsConsoleError. Backend and
validation errors are recoverable: the async envelope turns them into a
user-visible error string. UnrecognizedActionError signals a wiring defect
and is never caught by the library.
"""

from typing import Any


class PermissionsConsoleError(Exception):
    """Base exception for all permissions console errors.

    Includes an error_code for machine-readable output and extra context.
    """

    error_code: str = "PMC_ERROR"

    def __init__(
        self,
        message: str,
        *,
        error_code: str | None = None,
        context: dict[str, Any] | None = None,
    ) -> None:
        super().__init__(message)
        self.message = message
        if error_code:
            self.error_code = error_code
        self.context = context or {}

    def to_dict(self) -> dict[str, Any]:
        """Convert exception to dictionary for structured output."""
        return {
            "error": self.error_code,
            "message": self.message,
            "context": self.context,
        }


# =============================================================================
# Store Errors (programming errors)
# =============================================================================


class UnrecognizedActionError(PermissionsConsoleError):
    """Raised by the reducer for an action type it does not handle."""

    error_code = "UNRECOGNIZED_ACTION"

    def __init__(self, action: object) -> None:
        if isinstance(action, dict):
            action_type = action.get("type")
        else:
            action_type = getattr(action, "type", None) or type(action).__name__
        super().__init__(
            f"Unrecognized action type: {action_type}",
            context={"action_type": str(action_type)},
        )


class InvalidPayloadError(PermissionsConsoleError):
    """Raised when a completion payload targets a field the state lacks."""

    error_code = "INVALID_PAYLOAD"

    def __init__(self, field_name: str) -> None:
        super().__init__(
            f"Not an application state field: {field_name}",
            context={"field": field_name},
        )


# =============================================================================
# Backend Errors
# =============================================================================


class BackendError(PermissionsConsoleError):
    """Raised when a ledger backend call fails."""

    error_code = "BACKEND_ERROR"

    def __init__(
        self,
        message: str,
        *,
        status_code: int | None = None,
        context: dict[str, Any] | None = None,
    ) -> None:
        super().__init__(message, context=context)
        self.status_code = status_code
        if status_code is not None:
            self.context["status_code"] = status_code


class TokenNotFoundError(BackendError):
    """Raised when the backend has no token with the given symbol."""

    error_code = "TOKEN_NOT_FOUND"

    def __init__(self, symbol: str) -> None:
        super().__init__(
            f"Security token not found: {symbol}",
            status_code=404,
            context={"symbol": symbol},
        )


class FeatureNotEnabledError(BackendError):
    """Raised when an operation needs a feature the token has disabled."""

    error_code = "FEATURE_NOT_ENABLED"

    def __init__(self, symbol: str, feature: str) -> None:
        super().__init__(
            f"{feature} feature is not enabled for {symbol}",
            context={"symbol": symbol, "feature": feature},
        )


class JobExecutionError(BackendError):
    """Raised when a submitted transaction queue fails on the ledger."""

    error_code = "JOB_FAILED"

    def __init__(self, job_id: str, reason: str) -> None:
        super().__init__(
            f"Transaction queue {job_id} failed: {reason}",
            context={"job_id": job_id, "reason": reason},
        )


class JobTimeoutError(BackendError):
    """Raised when a transaction queue does not settle in time."""

    error_code = "JOB_TIMEOUT"

    def __init__(self, job_id: str, timeout: float) -> None:
        super().__init__(
            f"Transaction queue {job_id} did not complete within {timeout:g}s",
            context={"job_id": job_id, "timeout": timeout},
        )


# =============================================================================
# Validation Errors
# =============================================================================


class ValidationError(PermissionsConsoleError):
    """Base exception for rejected user input."""

    error_code = "VALIDATION_ERROR"


class NoTokenSelectedError(ValidationError):
    """Raised when an operation needs a selected token and there is none."""

    error_code = "NO_TOKEN_SELECTED"

    def __init__(self) -> None:
        super().__init__("No token selected")


class InvalidAddressError(ValidationError):
    """Raised for a malformed delegate address."""

    error_code = "INVALID_ADDRESS"

    def __init__(self, address: str) -> None:
        super().__init__(
            f"Invalid delegate address: {address!r}",
            context={"address": address},
        )


class UnknownRoleError(ValidationError):
    """Raised when a role is not grantable on the selected token."""

    error_code = "UNKNOWN_ROLE"

    def __init__(self, role: str, available: tuple[str, ...]) -> None:
        super().__init__(
            f"Role {role} is not available; expected one of: {', '.join(available)}",
            context={"role": role, "available": list(available)},
        )
