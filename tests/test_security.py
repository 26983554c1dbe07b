"""Tests for input validation, rate limiting and error sanitizing."""

import json
from unittest.mock import patch

import pytest

from xui_panel.security import (
    CredentialSecurity,
    ErrorSecurity,
    InputValidator,
    RateLimitKind,
    SecureHeaders,
    SecurityMonitor,
)
from xui_panel.security.monitor import ACTIVITY_CAPACITY
from xui_panel.xui_models import XUIError, XUIHTTPError, XUIValidationError


class TestInputValidator:
    def test_url_strips_trailing_slash(self):
        assert InputValidator.validate_url("https://panel.example.com/") == "https://panel.example.com"

    def test_url_keeps_base_path(self):
        assert InputValidator.validate_url("http://10.0.0.1:2053/secret/") == "http://10.0.0.1:2053/secret"

    @pytest.mark.parametrize("url", ["", "ftp://panel.example.com", "panel.example.com", None, "https://"])
    def test_invalid_urls(self, url):
        with pytest.raises(XUIValidationError) as exc_info:
            InputValidator.validate_url(url)
        assert exc_info.value.field == "base_url"

    def test_username(self):
        assert InputValidator.validate_username(" admin@panel ") == "admin@panel"

    @pytest.mark.parametrize("username", ["", "a" * 101, "admin; DROP TABLE", "name with space"])
    def test_invalid_usernames(self, username):
        with pytest.raises(XUIValidationError):
            InputValidator.validate_username(username)

    def test_password_only_rejects_empty(self):
        assert InputValidator.validate_password("x") == "x"
        with pytest.raises(XUIValidationError):
            InputValidator.validate_password("")

    @pytest.mark.parametrize("port", [0, 70000, "443", True, -1])
    def test_invalid_ports(self, port):
        with pytest.raises(XUIValidationError):
            InputValidator.validate_port(port)

    def test_inbound_config_with_bad_port(self):
        with pytest.raises(XUIValidationError) as exc_info:
            InputValidator.validate_inbound_config({"port": 70000, "protocol": "vless"})
        assert exc_info.value.field == "port"

    def test_inbound_config_keeps_json_strings(self):
        config = InputValidator.validate_inbound_config({"port": 443, "settings": '{"a":1}'})
        assert config["settings"] == '{"a":1}'

    def test_inbound_config_encodes_objects_without_mutating_input(self):
        original = {"port": 443, "settings": {"clients": []}, "sniffing": {"enabled": False}}
        config = InputValidator.validate_inbound_config(original)

        assert json.loads(config["settings"]) == {"clients": []}
        assert config["sniffing"] == '{"enabled":false}'
        assert original["settings"] == {"clients": []}

    def test_client_config_requires_id(self):
        with pytest.raises(XUIValidationError):
            InputValidator.validate_client_config({"settings": {}})
        with pytest.raises(XUIValidationError):
            InputValidator.validate_client_config({"id": True})

    def test_client_config_encodes_settings(self):
        config = InputValidator.validate_client_config({"id": 3, "settings": {"clients": [{"id": "x"}]}})
        assert config["settings"] == '{"clients":[{"id":"x"}]}'

    def test_unserializable_value(self):
        with pytest.raises(XUIValidationError):
            InputValidator.ensure_json_string({"x": object()}, "settings")


class TestSecurityMonitor:
    def test_login_limit(self):
        monitor = SecurityMonitor(max_login_attempts_per_hour=3)

        results = [monitor.check_rate_limit("user", RateLimitKind.LOGIN) for _ in range(4)]

        assert results == [True, True, True, False]
        stats = monitor.get_stats()
        assert stats["recent_activities"][-1]["type"] == "rate_limit_exceeded"
        assert stats["recent_activities"][-1]["details"] == {"identifier": "user", "type": "login"}

    def test_general_limit_is_per_identifier(self):
        monitor = SecurityMonitor(max_requests_per_minute=2)

        assert monitor.check_rate_limit("a")
        assert monitor.check_rate_limit("a")
        assert not monitor.check_rate_limit("a")
        assert monitor.check_rate_limit("b")

    def test_window_slides(self):
        monitor = SecurityMonitor(max_requests_per_minute=1)

        with patch("xui_panel.security.monitor.time.time", return_value=1000.0):
            assert monitor.check_rate_limit("a")
            assert not monitor.check_rate_limit("a")
        with patch("xui_panel.security.monitor.time.time", return_value=1061.0):
            assert monitor.check_rate_limit("a")

    def test_activity_log_is_bounded(self):
        monitor = SecurityMonitor()
        for i in range(ACTIVITY_CAPACITY + 50):
            monitor.log_suspicious_activity("probe", {"n": i})

        stats = monitor.get_stats()
        assert stats["total_suspicious_activities"] == ACTIVITY_CAPACITY
        assert len(stats["recent_activities"]) == 50
        assert stats["recent_activities"][-1]["details"] == {"n": ACTIVITY_CAPACITY + 49}

    def test_severity(self):
        monitor = SecurityMonitor()
        assert monitor.log_suspicious_activity("multiple_failed_logins").severity == "high"
        assert monitor.log_suspicious_activity("odd_request").severity == "medium"

    def test_blocked_ips(self):
        monitor = SecurityMonitor()
        monitor.block_ip("203.0.113.7")

        assert monitor.is_blocked("203.0.113.7")
        assert monitor.get_stats()["blocked_ips"] == 1

        monitor.clear_blocked_ips()
        assert not monitor.is_blocked("203.0.113.7")

    def test_active_rate_limits(self):
        monitor = SecurityMonitor()
        monitor.check_rate_limit("a")
        monitor.check_rate_limit("a", "login")

        assert monitor.get_stats()["active_rate_limits"] == {"general": 1, "login": 1}


class TestCredentialSecurity:
    def test_hash_for_logging(self):
        digest = CredentialSecurity.hash_for_logging("admin")

        assert len(digest) == 12
        assert digest == CredentialSecurity.hash_for_logging("admin")
        assert "admin" not in digest

    def test_strong_password(self):
        result = CredentialSecurity.validate_credential_strength("Str0ng!Passw0rd", "password")

        assert result.is_valid
        assert result.strength == "strong"

    def test_weak_password(self):
        result = CredentialSecurity.validate_credential_strength("abc", "password")

        assert not result.is_valid
        assert result.strength == "weak"
        assert "Password too short" in result.issues

    def test_uuid_and_port(self):
        assert CredentialSecurity.validate_credential_strength("not-a-uuid", "uuid").strength == "weak"
        assert CredentialSecurity.validate_credential_strength(443, "port").is_valid
        assert not CredentialSecurity.validate_credential_strength(0, "port").is_valid

    def test_unknown_kind(self):
        result = CredentialSecurity.validate_credential_strength("x", "pgp")
        assert result.issues == ["Unknown credential type: pgp"]

    def test_session_token(self):
        token = CredentialSecurity.generate_session_token()
        assert len(token) == 64
        assert token != CredentialSecurity.generate_session_token()


class TestErrorSecurity:
    def test_production_strips_details(self):
        cause = ValueError("socket detail")
        error = XUIHTTPError("Request failed with status code 500", 500, "stack trace", cause)

        clean = ErrorSecurity.sanitize_error(error, is_development=False)

        assert type(clean) is XUIHTTPError
        assert clean.message == error.message
        assert clean.status_code == 500
        assert clean.response_text is None
        assert clean.original_error is None
        assert error.response_text == "stack trace"

    def test_development_keeps_error(self):
        error = XUIError("boom", ValueError("inner"))
        assert ErrorSecurity.sanitize_error(error, is_development=True) is error

    def test_wraps_foreign_exceptions(self):
        clean = ErrorSecurity.sanitize_error(RuntimeError("bad"), is_development=False)

        assert isinstance(clean, XUIError)
        assert clean.message == "bad"

    def test_safe_context(self):
        safe = ErrorSecurity.safe_context(
            {"username": "admin", "password": "hunter2", "cookie": "c", "base_url": "https://p.example/"}
        )

        assert "password" not in safe
        assert "cookie" not in safe
        assert safe["username"] == CredentialSecurity.hash_for_logging("admin")
        assert safe["base_url"] == "https://p.example"

    def test_log_error_never_leaks_password(self, caplog):
        ErrorSecurity.log_error(XUIError("fail"), {"username": "admin", "password": "hunter2"})

        assert "hunter2" not in caplog.text
        assert "fail" in caplog.text


class TestSecureHeaders:
    def test_headers(self):
        headers = SecureHeaders.get_secure_headers("agent/1.0")

        assert headers["User-Agent"] == "agent/1.0"
        assert headers["X-Requested-With"] == "XMLHttpRequest"
        assert "Content-Security-Policy" not in headers

    def test_csp(self):
        headers = SecureHeaders.get_secure_headers("agent/1.0", enable_csp=True)
        assert "Content-Security-Policy" in headers
