"""
Error kinds raised by the Post Room services.

Services never build HTTP responses themselves. They raise one of the
exceptions below and the handler registered in ``postroom.main`` turns it
into a JSON body with the class's ``status_code``:

    PostRoomError (base)              500
    ├── ValidationError               400
    ├── InvalidCredentials            401
    ├── SessionInvalid                401
    ├── ProviderVerificationFailed    401
    ├── Forbidden                     403
    ├── NotFound                      404
    │   └── TokenNotFound             404
    ├── TokenExpired                  400
    ├── UnsupportedProvider           400
    ├── Conflict                      409
    └── NotificationDeliveryFailed    502
"""

from typing import Any, Dict, Optional


class PostRoomError(Exception):
    """
    Base exception for all application errors.

    Attributes:
        message:  User-facing description, safe to return to the client.
        context:  Extra debug info, logged but never returned.
    """

    status_code = 500
    error_code = "internal_error"

    def __init__(
        self,
        message: str = "An unexpected error occurred",
        context: Optional[Dict[str, Any]] = None,
    ):
        self.message = message
        self.context = context or {}
        super().__init__(self.message)


class ValidationError(PostRoomError):
    """Client input failed a business rule (password policy, empty title...)."""

    status_code = 400
    error_code = "validation_error"

    def __init__(
        self,
        message: str = "Validation failed",
        field: Optional[str] = None,
        context: Optional[Dict[str, Any]] = None,
    ):
        ctx = context or {}
        if field:
            ctx["field"] = field
        super().__init__(message=message, context=ctx)
        self.field = field


class NotFound(PostRoomError):
    """A requested record does not exist."""

    status_code = 404
    error_code = "not_found"

    def __init__(
        self,
        resource: str = "resource",
        message: Optional[str] = None,
        context: Optional[Dict[str, Any]] = None,
    ):
        ctx = context or {}
        ctx["resource"] = resource
        super().__init__(message=message or f"{resource} not found", context=ctx)
        self.resource = resource


class Forbidden(PostRoomError):
    status_code = 403
    error_code = "forbidden"

    def __init__(self, message: str = "Forbidden", context: Optional[Dict[str, Any]] = None):
        super().__init__(message=message, context=context)


class Conflict(PostRoomError):
    """A unique field is already taken (email, username, existing follow)."""

    status_code = 409
    error_code = "conflict"

    def __init__(self, message: str = "Conflict", context: Optional[Dict[str, Any]] = None):
        super().__init__(message=message, context=context)


class InvalidCredentials(PostRoomError):
    """
    Email/password login failed.

    Raised for unknown emails, provider-created accounts without a password
    and wrong passwords alike, so the response does not reveal which.
    """

    status_code = 401
    error_code = "invalid_credentials"

    def __init__(
        self,
        message: str = "Incorrect email or password",
        context: Optional[Dict[str, Any]] = None,
    ):
        super().__init__(message=message, context=context)


class SessionInvalid(PostRoomError):
    status_code = 401
    error_code = "session_invalid"

    def __init__(
        self,
        message: str = "Could not validate credentials",
        context: Optional[Dict[str, Any]] = None,
    ):
        super().__init__(message=message, context=context)


class TokenNotFound(NotFound):
    error_code = "token_not_found"

    def __init__(self, purpose: str, context: Optional[Dict[str, Any]] = None):
        ctx = context or {}
        ctx["purpose"] = purpose
        super().__init__(resource="token", message="Token not valid", context=ctx)
        self.purpose = purpose


class TokenExpired(PostRoomError):
    """The token exists but was already consumed or is past its validity window."""

    status_code = 400
    error_code = "token_expired"

    def __init__(self, purpose: str, context: Optional[Dict[str, Any]] = None):
        ctx = context or {}
        ctx["purpose"] = purpose
        super().__init__(message="Token expired or not valid", context=ctx)
        self.purpose = purpose


class UnsupportedProvider(PostRoomError):
    status_code = 400
    error_code = "unsupported_provider"

    def __init__(self, provider: str, context: Optional[Dict[str, Any]] = None):
        super().__init__(message=f"Invalid provider name: {provider}", context=context)
        self.provider = provider


class ProviderVerificationFailed(PostRoomError):
    """The identity provider rejected the token or could not be reached."""

    status_code = 401
    error_code = "provider_verification_failed"

    def __init__(
        self,
        provider: str,
        message: str = "Could not verify the identity provider token",
        context: Optional[Dict[str, Any]] = None,
    ):
        ctx = context or {}
        ctx["provider"] = provider
        super().__init__(message=message, context=ctx)
        self.provider = provider


class NotificationDeliveryFailed(PostRoomError):
    """The mail transport failed; the operation that triggered it did not complete."""

    status_code = 502
    error_code = "notification_delivery_failed"

    def __init__(
        self,
        message: str = "Could not send the email, please try again",
        context: Optional[Dict[str, Any]] = None,
    ):
        super().__init__(message=message, context=context)
