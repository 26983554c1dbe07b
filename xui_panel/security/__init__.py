"""Input validation, rate limiting and log-safe error handling."""

from .credential_security import CredentialSecurity
from .error_security import ErrorSecurity
from .headers import SecureHeaders
from .monitor import RateLimitKind, SecurityActivity, SecurityMonitor
from .validator import InputValidator

__all__ = [
    "InputValidator",
    "SecurityMonitor",
    "SecurityActivity",
    "RateLimitKind",
    "CredentialSecurity",
    "ErrorSecurity",
    "SecureHeaders",
]
