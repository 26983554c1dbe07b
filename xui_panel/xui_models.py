"""Data models and exceptions for the 3x-ui panel client."""

from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Optional

from .config import settings


# === Exceptions ===

class XUIError(Exception):
    """Base exception for all 3x-ui client errors."""

    def __init__(self, message: str, original_error: Optional[Exception] = None):
        super().__init__(message)
        self.message = message
        self.original_error = original_error

    def sanitized(self) -> "XUIError":
        """Copy of this error without the wrapped exception or response details."""
        clean = self.__class__.__new__(self.__class__)
        clean.args = self.args
        clean.__dict__.update(self.__dict__)
        clean.original_error = None
        clean.__cause__ = None
        clean.__context__ = None
        clean.__traceback__ = None
        return clean


class XUIConfigError(XUIError):
    """Missing or invalid client configuration."""
    pass


class XUIValidationError(XUIError):
    """Input rejected before reaching the panel."""

    def __init__(
        self,
        message: str,
        field: Optional[str] = None,
        original_error: Optional[Exception] = None,
    ):
        super().__init__(message, original_error)
        self.field = field


class XUIUnsupportedProtocolError(XUIValidationError):
    """Protocol tag outside the supported set."""

    def __init__(self, protocol: str):
        super().__init__(f"Unsupported protocol: {protocol}", field="protocol")
        self.protocol = protocol


class XUIRateLimitError(XUIError):
    """Local rate limiter rejected the call."""

    def __init__(self, message: str, kind: str = "general"):
        super().__init__(message)
        self.kind = kind


class XUIAuthError(XUIError):
    """Authentication failed - invalid credentials or no session cookie."""
    pass


class XUIConnectionError(XUIError):
    """Failed to connect to the 3x-ui server."""
    pass


class XUITimeoutError(XUIConnectionError):
    """The server took too long to respond."""
    pass


class XUIHTTPError(XUIError):
    """Panel answered with an error status."""

    def __init__(
        self,
        message: str,
        status_code: int,
        response_text: Optional[str] = None,
        original_error: Optional[Exception] = None,
    ):
        super().__init__(message, original_error)
        self.status_code = status_code
        self.response_text = response_text

    def sanitized(self) -> "XUIHTTPError":
        clean = super().sanitized()
        clean.response_text = None
        return clean


class XUIUnauthorizedError(XUIHTTPError):
    """Panel rejected the session cookie (HTTP 401)."""
    pass


class XUIMaxRetriesError(XUIError):
    """Re-authentication did not make the panel accept the request."""
    pass


class XUISessionStoreError(XUIError):
    """Session store could not persist a session."""
    pass


class XUIClientNotFoundError(XUIError):
    """Client with specified email/UUID not found on server."""
    pass


class XUIInboundError(XUIError):
    """Inbound configuration error (not found, invalid, etc.)."""
    pass


# === Data Classes ===

class SessionState(str, Enum):
    """Authentication state of one client instance."""

    NO_SESSION = "no_session"
    AUTHENTICATING = "authenticating"
    AUTHENTICATED = "authenticated"
    EXPIRED = "expired"


@dataclass
class ClientOptions:
    """Tunables of a ThreeXUI client instance."""

    timeout_ms: int = settings.REQUEST_TIMEOUT_MS
    max_redirects: int = settings.MAX_REDIRECTS
    max_requests_per_minute: int = settings.MAX_REQUESTS_PER_MINUTE
    max_login_attempts_per_hour: int = settings.MAX_LOGIN_ATTEMPTS_PER_HOUR
    session_ttl: int = settings.SESSION_TTL
    refresh_threshold: float = settings.REFRESH_THRESHOLD
    max_login_retries: int = settings.MAX_LOGIN_RETRIES
    is_development: bool = settings.IS_DEVELOPMENT
    user_agent: str = settings.USER_AGENT
    enable_csp: bool = False
    verify_tls: bool = True

    def __post_init__(self):
        if self.timeout_ms <= 0:
            raise XUIConfigError("timeout_ms must be positive")
        if self.max_redirects < 0:
            raise XUIConfigError("max_redirects must not be negative")
        if self.max_requests_per_minute < 1 or self.max_login_attempts_per_hour < 1:
            raise XUIConfigError("Rate limits must be at least 1")
        if self.session_ttl < 0:
            raise XUIConfigError("session_ttl must not be negative (0 disables expiry)")
        if not 0 < self.refresh_threshold <= 1:
            raise XUIConfigError("refresh_threshold must be in (0, 1]")
        if self.max_login_retries < 1:
            raise XUIConfigError("max_login_retries must be at least 1")

    @property
    def timeout_seconds(self) -> float:
        return self.timeout_ms / 1000

    @classmethod
    def from_dict(cls, data: dict) -> "ClientOptions":
        """Create from a plain dictionary, ignoring unknown keys."""
        known = {k: v for k, v in data.items() if k in cls.__dataclass_fields__}
        return cls(**known)


@dataclass
class LoginResult:
    """Outcome of a successful login or cache restore."""

    success: bool
    from_cache: bool
    data: dict = field(default_factory=dict)


@dataclass
class PanelResponse:
    """Standard `{success, msg, obj}` envelope returned by the panel API."""

    success: bool
    msg: str = ""
    obj: Any = None

    @classmethod
    def from_dict(cls, data: Any) -> "PanelResponse":
        """Create from a decoded response body."""
        if not isinstance(data, dict):
            return cls(success=False, msg="Unexpected response body", obj=data)
        return cls(
            success=bool(data.get("success", False)),
            msg=data.get("msg") or "",
            obj=data.get("obj"),
        )


@dataclass
class CredentialStrength:
    """Result of a credential strength check."""

    is_valid: bool
    issues: list[str]
    strength: str
