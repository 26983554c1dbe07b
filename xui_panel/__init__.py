"""Async client for 3x-ui VPN panels.

This package wraps the 3x-ui panel API with cached sessions, local rate
limiting, input validation and protocol credential generation.

Usage:
    from xui_panel import ThreeXUI

    async with ThreeXUI("https://panel.example.com:2053", "admin", "secret") as xui:
        inbounds = await xui.get_inbounds()
        created = await xui.add_client_with_credentials(1, "vless", email="user@example.com")
        print(created.credentials.id)
"""

import logging

from .credentials import (
    CredentialBundle,
    DemoKeyPair,
    Protocol,
    generate_for_protocol,
    generate_password,
    generate_uuid,
)
from .security import (
    CredentialSecurity,
    ErrorSecurity,
    InputValidator,
    SecurityMonitor,
)
from .session import (
    CustomSessionHandler,
    DatabaseSessionStore,
    MemorySessionStore,
    RedisSessionStore,
    SessionManager,
    SessionStore,
)
from .xui_client import CreatedClient, ThreeXUI
from .xui_models import (
    ClientOptions,
    CredentialStrength,
    LoginResult,
    PanelResponse,
    SessionState,
    XUIAuthError,
    XUIClientNotFoundError,
    XUIConfigError,
    XUIConnectionError,
    XUIError,
    XUIHTTPError,
    XUIInboundError,
    XUIMaxRetriesError,
    XUIRateLimitError,
    XUISessionStoreError,
    XUITimeoutError,
    XUIUnauthorizedError,
    XUIUnsupportedProtocolError,
    XUIValidationError,
)

logging.getLogger(__name__).addHandler(logging.NullHandler())

__version__ = "2.0.0"

__all__ = [
    # Main client
    "ThreeXUI",
    "CreatedClient",
    # Sessions
    "SessionManager",
    "SessionStore",
    "MemorySessionStore",
    "RedisSessionStore",
    "DatabaseSessionStore",
    "CustomSessionHandler",
    # Security
    "InputValidator",
    "SecurityMonitor",
    "CredentialSecurity",
    "ErrorSecurity",
    # Credentials
    "Protocol",
    "CredentialBundle",
    "DemoKeyPair",
    "generate_for_protocol",
    "generate_password",
    "generate_uuid",
    # Data classes
    "ClientOptions",
    "SessionState",
    "LoginResult",
    "PanelResponse",
    "CredentialStrength",
    # Exceptions
    "XUIError",
    "XUIConfigError",
    "XUIValidationError",
    "XUIUnsupportedProtocolError",
    "XUIRateLimitError",
    "XUIAuthError",
    "XUIConnectionError",
    "XUITimeoutError",
    "XUIHTTPError",
    "XUIUnauthorizedError",
    "XUIMaxRetriesError",
    "XUISessionStoreError",
    "XUIClientNotFoundError",
    "XUIInboundError",
]
