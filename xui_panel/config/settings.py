"""Configuration settings loader for the 3x-ui panel client."""

import os
from dotenv import load_dotenv

# Load environment variables from .env file
load_dotenv()

# Panel connection (used by ThreeXUI.from_env)
XUI_BASE_URL = os.getenv('XUI_BASE_URL', '')
XUI_USERNAME = os.getenv('XUI_USERNAME', '')
XUI_PASSWORD = os.getenv('XUI_PASSWORD', '')

# HTTP transport
REQUEST_TIMEOUT_MS = int(os.getenv('XUI_REQUEST_TIMEOUT_MS', 30000))
MAX_REDIRECTS = int(os.getenv('XUI_MAX_REDIRECTS', 5))
USER_AGENT = os.getenv('XUI_USER_AGENT', '3xui-api-client/2.0.0 (Security-Enhanced)')

# Local rate limiting
MAX_REQUESTS_PER_MINUTE = int(os.getenv('XUI_MAX_REQUESTS_PER_MINUTE', 60))
MAX_LOGIN_ATTEMPTS_PER_HOUR = int(os.getenv('XUI_MAX_LOGIN_ATTEMPTS_PER_HOUR', 10))

# Session lifecycle (seconds; 0 disables expiry)
SESSION_TTL = int(os.getenv('XUI_SESSION_TTL', 3600))
REFRESH_THRESHOLD = float(os.getenv('XUI_REFRESH_THRESHOLD', 0.8))
MAX_LOGIN_RETRIES = int(os.getenv('XUI_MAX_LOGIN_RETRIES', 3))

# Session store backends
REDIS_SESSION_PREFIX = os.getenv('XUI_REDIS_SESSION_PREFIX', '3xui:session:')
SESSION_DATABASE_URL = os.getenv('XUI_SESSION_DATABASE_URL', 'sqlite:///xui_sessions.db')
SESSION_TABLE_NAME = os.getenv('XUI_SESSION_TABLE', 'sessions')

# Verbose (unsanitized) errors
IS_DEVELOPMENT = os.getenv('XUI_ENV', 'production').lower() == 'development'
