"""Credential helpers: log-safe hashing, strength checks, token generation."""

import hashlib
import re
import secrets
from typing import Any

from ..xui_models import CredentialStrength

_UUID_V4 = re.compile(
    r"^[0-9a-f]{8}-[0-9a-f]{4}-4[0-9a-f]{3}-[89ab][0-9a-f]{3}-[0-9a-f]{12}$", re.IGNORECASE
)


class CredentialSecurity:
    """Stateless credential utilities. None of these raise."""

    @staticmethod
    def hash_for_logging(value: Any) -> str:
        """First 12 hex chars of SHA-256, safe to put in logs."""
        return hashlib.sha256(str(value).encode("utf-8")).hexdigest()[:12]

    @staticmethod
    def validate_credential_strength(credential: Any, kind: str = "password") -> CredentialStrength:
        """Rate a credential.

        Args:
            credential: Value to check
            kind: ``password``, ``uuid`` or ``port``

        Returns:
            CredentialStrength with issues and a weak/medium/strong rating
        """
        issues = []

        if kind == "uuid":
            if not isinstance(credential, str) or not _UUID_V4.match(credential):
                issues.append("Invalid UUID v4 format")
            strength = "weak" if issues else "strong"

        elif kind == "port":
            if isinstance(credential, int) and not isinstance(credential, bool):
                port = credential
            elif isinstance(credential, str) and credential.strip().isdigit():
                port = int(credential)
            else:
                port = 0
            if not 1 <= port <= 65535:
                issues.append("Port must be 1-65535")
            strength = "weak" if issues else "strong"

        elif kind == "password":
            value = credential if isinstance(credential, str) else ""
            has_lower = re.search(r"[a-z]", value) is not None
            has_upper = re.search(r"[A-Z]", value) is not None
            has_digit = re.search(r"[0-9]", value) is not None
            has_symbol = re.search(r"[^A-Za-z0-9]", value) is not None

            if len(value) < 8:
                issues.append("Password too short")
            if not has_lower:
                issues.append("Add lowercase letters")
            if not has_upper:
                issues.append("Add uppercase letters")
            if not has_digit:
                issues.append("Add numbers")

            if len(value) >= 12 and has_lower and has_upper and has_digit and has_symbol:
                strength = "strong"
            elif len(value) >= 10:
                strength = "medium"
            else:
                strength = "weak"

        else:
            issues.append(f"Unknown credential type: {kind}")
            strength = "weak"

        return CredentialStrength(is_valid=not issues, issues=issues, strength=strength)

    @staticmethod
    def generate_session_token(n_bytes: int = 32) -> str:
        return secrets.token_hex(n_bytes)
