"""Configuration package for the 3x-ui panel client."""

from .settings import (
    XUI_BASE_URL,
    XUI_USERNAME,
    XUI_PASSWORD,
    SESSION_TTL,
    REFRESH_THRESHOLD,
    IS_DEVELOPMENT
)

__all__ = [
    'XUI_BASE_URL',
    'XUI_USERNAME',
    'XUI_PASSWORD',
    'SESSION_TTL',
    'REFRESH_THRESHOLD',
    'IS_DEVELOPMENT'
]
