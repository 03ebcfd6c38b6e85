"""Custom exception hierarchy for Ministry-Grants."""

from typing import Any, Dict, Optional
from fastapi import HTTPException, Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
import structlog

logger = structlog.get_logger(__name__)


class BaseMinistryGrantsException(Exception):
    """Base exception for Ministry-Grants application."""

    def __init__(
        self,
        message: str,
        status_code: int = 500,
        details: Optional[Dict[str, Any]] = None,
        error_code: Optional[str] = None
    ):
        """Initialize base exception."""
        self.message = message
        self.status_code = status_code
        self.details = details or {}
        self.error_code = error_code or self.__class__.__name__
        super().__init__(self.message)

    def to_dict(self) -> Dict[str, Any]:
        """Convert exception to dictionary for API responses."""
        return {
            "error": {
                "code": self.error_code,
                "message": self.message,
                "details": self.details
            }
        }


# Validation Exceptions
class ValidationError(BaseMinistryGrantsException):
    """General validation error."""

    def __init__(self, message: str = "Validation failed", details: Optional[Dict[str, Any]] = None, error_code: str = "VALIDATION_ERROR", **kwargs):
        super().__init__(message, status_code=status.HTTP_422_UNPROCESSABLE_ENTITY, details=details, error_code=error_code, **kwargs)


class InvalidAmountError(ValidationError):
    """Monetary amount is malformed or out of range."""

    def __init__(self, message: str = "Amount must be positive", value: Any = None, **kwargs):
        details = {"value": str(value)} if value is not None else None
        super().__init__(message, details=details, error_code="INVALID_AMOUNT", **kwargs)


class InvalidEINError(ValidationError):
    """EIN does not match the XX-XXXXXXX format."""

    def __init__(self, ein: str, **kwargs):
        super().__init__(
            "Invalid EIN format. Expected format: XX-XXXXXXX",
            details={"ein": ein},
            error_code="INVALID_EIN",
            **kwargs
        )


class InvalidEmailError(ValidationError):
    """Email address is malformed."""

    def __init__(self, email: str, **kwargs):
        super().__init__("Invalid email format", details={"email": email}, error_code="INVALID_EMAIL", **kwargs)


class InvalidCursorError(ValidationError):
    """Pagination cursor could not be decoded."""

    def __init__(self, cursor: str, reason: str = "", **kwargs):
        message = "Invalid cursor format"
        if reason:
            message += f": {reason}"
        super().__init__(message, details={"cursor": cursor}, error_code="INVALID_CURSOR", **kwargs)


# Resource Exceptions
class ResourceNotFoundError(BaseMinistryGrantsException):
    """Resource not found."""

    def __init__(self, resource: str, identifier: Any = "", error_code: str = "RESOURCE_NOT_FOUND", **kwargs):
        message = f"{resource} not found"
        if identifier != "":
            message = f"{resource} with ID {identifier} not found"
        details = {"resource": resource, "id": identifier}
        super().__init__(message, status_code=status.HTTP_404_NOT_FOUND, details=details, error_code=error_code, **kwargs)


class MinistryNotFoundError(ResourceNotFoundError):
    def __init__(self, ministry_id: int, **kwargs):
        super().__init__("Ministry", ministry_id, error_code="MINISTRY_NOT_FOUND", **kwargs)


class DonorNotFoundError(ResourceNotFoundError):
    def __init__(self, donor_id: int, **kwargs):
        super().__init__("Donor", donor_id, error_code="DONOR_NOT_FOUND", **kwargs)


class FundNotFoundError(ResourceNotFoundError):
    def __init__(self, fund_id: int, **kwargs):
        super().__init__("Giving fund", fund_id, error_code="FUND_NOT_FOUND", **kwargs)


class GrantNotFoundError(ResourceNotFoundError):
    def __init__(self, grant_id: int, **kwargs):
        super().__init__("Grant", grant_id, error_code="GRANT_NOT_FOUND", **kwargs)


class ResourceAlreadyExistsError(BaseMinistryGrantsException):
    """Resource already exists."""

    def __init__(self, resource: str, identifier: str = "", **kwargs):
        message = f"{resource} already exists"
        if identifier:
            message = f"A {resource.lower()} with {identifier} already exists"
        super().__init__(message, status_code=status.HTTP_409_CONFLICT, error_code="RESOURCE_ALREADY_EXISTS", **kwargs)


# Business Logic Exceptions
class BusinessRuleError(BaseMinistryGrantsException):
    """Business rule violation."""

    def __init__(self, message: str = "Business rule violation", error_code: str = "BUSINESS_RULE_ERROR", **kwargs):
        super().__init__(message, status_code=status.HTTP_409_CONFLICT, error_code=error_code, **kwargs)


class PreconditionError(BusinessRuleError):
    """An entity the operation depends on is not in a usable state."""


class MinistryNotVerifiedError(PreconditionError):
    def __init__(self, ministry_id: int, **kwargs):
        super().__init__(
            "Cannot create grant for unverified ministry. Ministry must be verified first.",
            details={"ministry_id": ministry_id},
            error_code="MINISTRY_NOT_VERIFIED",
            **kwargs
        )


class MinistryInactiveError(PreconditionError):
    def __init__(self, ministry_id: int, **kwargs):
        super().__init__(
            "Cannot create grant for inactive ministry",
            details={"ministry_id": ministry_id},
            error_code="MINISTRY_INACTIVE",
            **kwargs
        )


class FundInactiveError(PreconditionError):
    def __init__(self, fund_id: int, message: str = "Giving fund is inactive", **kwargs):
        super().__init__(message, details={"fund_id": fund_id}, error_code="FUND_INACTIVE", **kwargs)


class InvalidTransitionError(BusinessRuleError):
    """Grant is not in a status that allows the requested transition."""

    def __init__(self, grant_id: int, current_status: str, target_status: str, message: Optional[str] = None, error_code: str = "INVALID_TRANSITION", **kwargs):
        self.grant_id = grant_id
        self.current_status = current_status
        self.target_status = target_status
        if message is None:
            message = f"Cannot move grant {grant_id} from {current_status} to {target_status}"
        details = {
            "grant_id": grant_id,
            "current_status": current_status,
            "target_status": target_status,
        }
        super().__init__(message, details=details, error_code=error_code, **kwargs)


class AlreadyFundedError(InvalidTransitionError):
    def __init__(self, grant_id: int, target_status: str = "REJECTED", **kwargs):
        super().__init__(
            grant_id,
            "FUNDED",
            target_status,
            message="Cannot reject a grant that has already been funded",
            error_code="ALREADY_FUNDED",
            **kwargs
        )


class AlreadyRejectedError(InvalidTransitionError):
    def __init__(self, grant_id: int, target_status: str = "REJECTED", **kwargs):
        super().__init__(
            grant_id,
            "REJECTED",
            target_status,
            message="Grant is already rejected",
            error_code="ALREADY_REJECTED",
            **kwargs
        )


class InsufficientBalanceError(BusinessRuleError):
    """Giving fund balance does not cover the grant amount."""

    def __init__(self, fund_id: int, available, required, **kwargs):
        self.fund_id = fund_id
        self.available = available
        self.required = required
        message = (
            f"Insufficient fund balance. Available: ${available.to_fixed()}, "
            f"Required: ${required.to_fixed()}"
        )
        details = {
            "fund_id": fund_id,
            "available": available.to_fixed(),
            "required": required.to_fixed(),
        }
        super().__init__(message, details=details, error_code="INSUFFICIENT_BALANCE", **kwargs)


class ReferentialIntegrityError(BusinessRuleError):
    """Delete blocked by dependent rows."""

    def __init__(self, message: str = "Cannot delete a record that is still referenced", **kwargs):
        super().__init__(message, error_code="REFERENTIAL_INTEGRITY", **kwargs)


# Database Exceptions
class DatabaseError(BaseMinistryGrantsException):
    """Base database exception."""

    def __init__(self, message: str = "Database operation failed", error_code: str = "DATABASE_ERROR", **kwargs):
        super().__init__(message, status_code=status.HTTP_500_INTERNAL_SERVER_ERROR, error_code=error_code, **kwargs)


class ConnectionError(DatabaseError):
    """Database connection failed."""

    def __init__(self, message: str = "Database connection failed", **kwargs):
        super().__init__(message, error_code="CONNECTION_ERROR", **kwargs)


class TransactionError(DatabaseError):
    """Database transaction failed."""

    def __init__(self, message: str = "Transaction failed", **kwargs):
        super().__init__(message, error_code="TRANSACTION_ERROR", **kwargs)


class IntegrityError(DatabaseError):
    """Database integrity constraint violated."""

    def __init__(self, message: str = "Data integrity constraint violated", **kwargs):
        super().__init__(message, error_code="INTEGRITY_ERROR", **kwargs)


class ConcurrentModificationError(DatabaseError):
    """A version-checked write matched no row."""

    def __init__(self, resource_type: str, resource_id: int, version: int, **kwargs):
        super().__init__(
            f"{resource_type} {resource_id} was modified by another transaction "
            f"(expected version {version})",
            error_code="CONCURRENT_MODIFICATION",
            **kwargs
        )
        self.status_code = status.HTTP_409_CONFLICT
        self.resource_type = resource_type
        self.resource_id = resource_id
        self.version = version


# Exception handler functions for FastAPI
def handle_ministrygrants_exception(request: Request, exc: BaseMinistryGrantsException) -> JSONResponse:
    """Handle Ministry-Grants exceptions in FastAPI."""
    if exc.status_code >= 500:
        logger.error("Request failed", path=request.url.path, error_code=exc.error_code, error=exc.message)
    else:
        logger.info("Request rejected", path=request.url.path, error_code=exc.error_code)
    return JSONResponse(
        status_code=exc.status_code,
        content=exc.to_dict()
    )


def handle_http_exception(request: Request, exc: HTTPException) -> JSONResponse:
    """Handle HTTP exceptions in FastAPI."""
    return JSONResponse(
        status_code=exc.status_code,
        content={
            "error": {
                "code": f"HTTP_{exc.status_code}",
                "message": exc.detail,
                "details": {}
            }
        }
    )


def handle_request_validation_exception(request: Request, exc: RequestValidationError) -> JSONResponse:
    """Handle request body/query validation failures in FastAPI."""
    return JSONResponse(
        status_code=status.HTTP_422_UNPROCESSABLE_ENTITY,
        content={
            "error": {
                "code": "VALIDATION_ERROR",
                "message": "Request validation failed",
                "details": {"errors": [
                    {"loc": list(err.get("loc", ())), "msg": err.get("msg", "")}
                    for err in exc.errors()
                ]}
            }
        }
    )


def handle_generic_exception(request: Request, exc: Exception) -> JSONResponse:
    """Handle generic exceptions in FastAPI."""
    logger.exception("Unhandled error", path=request.url.path)
    return JSONResponse(
        status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
        content={
            "error": {
                "code": "INTERNAL_ERROR",
                "message": "An unexpected error occurred",
                "details": {}
            }
        }
    )
