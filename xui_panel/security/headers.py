"""Default request headers for the panel HTTP client."""

from typing import Dict


class SecureHeaders:

    @staticmethod
    def get_secure_headers(user_agent: str, enable_csp: bool = False) -> Dict[str, str]:
        headers = {
            "Accept": "application/json, text/plain, */*",
            "Cache-Control": "no-store",
            "Pragma": "no-cache",
            "X-Content-Type-Options": "nosniff",
            "X-Frame-Options": "DENY",
            "X-XSS-Protection": "1; mode=block",
            "Referrer-Policy": "strict-origin-when-cross-origin",
            "X-Requested-With": "XMLHttpRequest",
            "User-Agent": user_agent,
        }
        if enable_csp:
            headers["Content-Security-Policy"] = "default-src 'none'"
        return headers
