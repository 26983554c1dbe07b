"""Boundary validation for client arguments and panel payloads."""

import json
import re
from typing import Any, Optional
from urllib.parse import urlparse

from ..xui_models import XUIValidationError

_USERNAME_PATTERN = re.compile(r"^[A-Za-z0-9_.@+-]+$")

# Nested objects the panel only accepts as JSON-encoded strings
_INBOUND_JSON_FIELDS = ("settings", "streamSettings", "sniffing", "allocate")
_CLIENT_JSON_FIELDS = ("settings",)


class InputValidator:
    """Normalizes inputs or raises XUIValidationError naming the bad field."""

    @staticmethod
    def validate_url(url: Any) -> str:
        """Validate a panel base URL and strip one trailing slash.

        Only ``http`` and ``https`` are accepted. A path (the panel's web base
        path) is kept.
        """
        if not isinstance(url, str) or not url.strip():
            raise XUIValidationError("Invalid URL: empty", field="base_url")

        trimmed = url.strip()
        try:
            parsed = urlparse(trimmed)
        except ValueError as e:
            raise XUIValidationError("Invalid URL format", field="base_url", original_error=e)

        if parsed.scheme not in ("http", "https"):
            raise XUIValidationError(
                "Invalid URL: protocol must be http or https", field="base_url"
            )
        if not parsed.netloc:
            raise XUIValidationError("Invalid URL format", field="base_url")

        return trimmed[:-1] if trimmed.endswith("/") else trimmed

    @staticmethod
    def validate_username(username: Any) -> str:
        if not isinstance(username, str) or not username.strip():
            raise XUIValidationError("Invalid username: empty", field="username")
        value = username.strip()
        if len(value) > 100:
            raise XUIValidationError("Invalid username: too long", field="username")
        if not _USERNAME_PATTERN.match(value):
            raise XUIValidationError(
                "Invalid username: contains illegal characters", field="username"
            )
        return value

    @staticmethod
    def validate_password(password: Any) -> str:
        """Only emptiness is rejected; strength is CredentialSecurity's concern."""
        if not isinstance(password, str) or len(password) == 0:
            raise XUIValidationError("Invalid password: empty", field="password")
        return password

    @staticmethod
    def validate_port(port: Any) -> int:
        if isinstance(port, bool) or not isinstance(port, int) or not 1 <= port <= 65535:
            raise XUIValidationError(
                "Invalid port: must be an integer between 1 and 65535", field="port"
            )
        return port

    @staticmethod
    def ensure_json_string(value: Any, field_name: str) -> Optional[str]:
        """Return ``value`` JSON-encoded unless it already is a string."""
        if value is None or isinstance(value, str):
            return value
        try:
            return json.dumps(value, separators=(",", ":"), ensure_ascii=False)
        except (TypeError, ValueError) as e:
            raise XUIValidationError(
                f"Invalid configuration: unable to serialize {field_name} to JSON",
                field=field_name,
                original_error=e,
            )

    @classmethod
    def _encode_fields(cls, config: dict, fields: tuple) -> dict:
        for name in fields:
            if name in config and config[name] is not None:
                config[name] = cls.ensure_json_string(config[name], name)
        return config

    @classmethod
    def validate_inbound_config(cls, config: Any) -> dict:
        """Shallow-check an inbound payload and JSON-encode nested objects.

        Returns:
            A copy of ``config`` ready to post to the panel
        """
        if not isinstance(config, dict):
            raise XUIValidationError("Invalid inbound config", field="config")

        copy = dict(config)
        if copy.get("port") is not None:
            cls.validate_port(copy["port"])
        if copy.get("protocol") is not None and not isinstance(copy["protocol"], str):
            raise XUIValidationError("Invalid protocol", field="protocol")
        return cls._encode_fields(copy, _INBOUND_JSON_FIELDS)

    @classmethod
    def validate_client_config(cls, config: Any) -> dict:
        """Shallow-check an addClient/updateClient payload (``id`` is the inbound ID)."""
        if not isinstance(config, dict):
            raise XUIValidationError("Invalid client config", field="config")

        copy = dict(config)
        client_id = copy.get("id")
        if isinstance(client_id, bool) or not isinstance(client_id, (int, str)):
            raise XUIValidationError("Invalid client config: id is required", field="id")
        return cls._encode_fields(copy, _CLIENT_JSON_FIELDS)
