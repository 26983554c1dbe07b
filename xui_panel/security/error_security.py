"""Log-safe error reporting and production error sanitizing."""

import logging
from typing import Any, Dict, Optional

from ..xui_models import XUIError, XUIValidationError
from .credential_security import CredentialSecurity
from .validator import InputValidator

logger = logging.getLogger(__name__)

_SECRET_KEYS = ("password", "cookie", "token")


class ErrorSecurity:

    @staticmethod
    def sanitize_error(error: BaseException, is_development: bool = False) -> XUIError:
        """Error fit to hand to the caller.

        Development mode keeps the error as is. Production mode returns a copy
        with the same type and message but without the wrapped exception,
        response body or traceback.
        """
        if not isinstance(error, XUIError):
            error = XUIError(str(error) or error.__class__.__name__, error)
        if is_development:
            return error
        return error.sanitized()

    @staticmethod
    def safe_context(context: Optional[Dict[str, Any]] = None) -> Dict[str, Any]:
        """Copy of ``context`` without secrets and with the username hashed."""
        safe = {k: v for k, v in (context or {}).items() if k not in _SECRET_KEYS}
        if safe.get("username"):
            safe["username"] = CredentialSecurity.hash_for_logging(safe["username"])
        if safe.get("base_url"):
            try:
                safe["base_url"] = InputValidator.validate_url(str(safe["base_url"]))
            except XUIValidationError:
                safe["base_url"] = "<invalid>"
        return safe

    @classmethod
    def log_error(cls, error: BaseException, context: Optional[Dict[str, Any]] = None) -> None:
        """Log an error with a scrubbed context. Never raises."""
        message = getattr(error, "message", None) or str(error)
        logger.warning(f"[3xui-api-client] Error: {message} {cls.safe_context(context)}")
