"""Tests for the ThreeXUI client core (panel mocked with respx)."""

import asyncio
import json
import time
from unittest.mock import Mock, patch
from urllib.parse import parse_qs

import httpx
import pytest

from conftest import (
    BASE_URL,
    INBOUNDS_URL,
    LOGIN_URL,
    SESSION_COOKIE,
    login_response,
    panel_response,
)
from xui_panel import (
    ClientOptions,
    CustomSessionHandler,
    PanelResponse,
    SessionManager,
    SessionState,
    ThreeXUI,
    XUIAuthError,
    XUIClientNotFoundError,
    XUIConfigError,
    XUIConnectionError,
    XUIHTTPError,
    XUIMaxRetriesError,
    XUIRateLimitError,
    XUITimeoutError,
    XUIValidationError,
)
from xui_panel.credentials import Protocol, TrojanCredentials, is_uuid_v4


def cookie_sequence():
    """Login side effect that hands out a new cookie on every call."""
    counter = {"n": 0}

    def respond(request):
        counter["n"] += 1
        return login_response(f"3x-ui=token-{counter['n']}")

    return respond


def posted_json(route) -> dict:
    return json.loads(route.calls.last.request.content)


class TestConstruction:
    @pytest.mark.parametrize(
        "base_url,username,password",
        [
            ("", "admin", "secret"),
            (BASE_URL, "", "secret"),
            (BASE_URL, "admin", ""),
            ("ftp://panel.example.com", "admin", "secret"),
            (BASE_URL, "bad user", "secret"),
        ],
    )
    def test_invalid_arguments(self, base_url, username, password):
        with pytest.raises(XUIConfigError):
            ThreeXUI(base_url, username, password)

    def test_invalid_options(self):
        with pytest.raises(XUIConfigError):
            ClientOptions(timeout_ms=0)
        with pytest.raises(XUIConfigError):
            ClientOptions(refresh_threshold=1.5)

    def test_negative_session_ttl(self):
        with pytest.raises(XUIConfigError):
            ClientOptions(session_ttl=-5)
        assert ClientOptions(session_ttl=0).session_ttl == 0

    async def test_options_from_dict(self):
        async with ThreeXUI(
            BASE_URL + "/", "admin", "secret", {"timeout_ms": 1500, "unknown": True}
        ) as xui:
            assert xui.base_url == BASE_URL
            assert xui.options.timeout_seconds == 1.5
            assert xui.state == SessionState.NO_SESSION
            assert "admin" not in repr(xui)

    async def test_from_env(self):
        with patch("xui_panel.xui_client.settings") as settings:
            settings.XUI_BASE_URL = BASE_URL
            settings.XUI_USERNAME = "envadmin"
            settings.XUI_PASSWORD = "envsecret"
            xui = ThreeXUI.from_env()

        assert xui.username == "envadmin"
        await xui.aclose()


class TestLogin:
    async def test_login_then_cache(self, client, panel):
        login = panel.post(LOGIN_URL).mock(side_effect=lambda request: login_response())

        first = await client.login()
        second = await client.login()

        assert first.success and not first.from_cache
        assert second.success and second.from_cache
        assert second.data == {"msg": "Session restored from cache"}
        assert login.call_count == 1
        assert client.state == SessionState.AUTHENTICATED

    async def test_login_sends_form_credentials(self, client, panel):
        login = panel.post(LOGIN_URL).mock(side_effect=lambda request: login_response())

        await client.login()

        form = parse_qs(login.calls.last.request.content.decode())
        assert form == {"username": ["admin"], "password": ["S3cret-pass"]}

    async def test_force_refresh_always_hits_network(self, client, panel):
        login = panel.post(LOGIN_URL).mock(side_effect=cookie_sequence())

        await client.login(force_refresh=True)
        await client.login(force_refresh=True)

        assert login.call_count == 2

    async def test_missing_cookie(self, client, panel):
        panel.post(LOGIN_URL).mock(return_value=panel_response())

        with pytest.raises(XUIAuthError) as exc_info:
            await client.login()

        assert "no session token received" in str(exc_info.value)
        assert client.state == SessionState.NO_SESSION

    async def test_rejected_credentials(self, client, panel):
        panel.post(LOGIN_URL).mock(
            return_value=httpx.Response(200, json={"success": False, "msg": "Wrong username or password"})
        )

        with pytest.raises(XUIAuthError) as exc_info:
            await client.login()
        assert "Wrong username or password" in str(exc_info.value)

    async def test_login_http_error_becomes_auth_error(self, client, panel):
        panel.post(LOGIN_URL).mock(return_value=httpx.Response(502, text="bad gateway"))

        with pytest.raises(XUIAuthError) as exc_info:
            await client.login()
        assert str(exc_info.value).startswith("Login failed:")

    async def test_connection_error(self, client, panel):
        panel.post(LOGIN_URL).mock(side_effect=httpx.ConnectError("refused"))

        with pytest.raises(XUIConnectionError) as exc_info:
            await client.login()
        assert str(exc_info.value) == f"Login failed: Cannot connect to server: {BASE_URL}"

    async def test_repeated_failures_fail_fast(self, panel):
        login = panel.post(LOGIN_URL).mock(
            return_value=httpx.Response(200, json={"success": False, "msg": "wrong"})
        )
        xui = ThreeXUI(BASE_URL, "admin", "bad", ClientOptions(max_login_retries=2))

        for _ in range(3):
            with pytest.raises(XUIAuthError):
                await xui.login()
        assert login.call_count == 2

        activities = [a["type"] for a in xui.get_security_stats()["recent_activities"]]
        assert "multiple_failed_logins" in activities

        with pytest.raises(XUIAuthError):
            await xui.login(force_refresh=True)
        assert login.call_count == 3
        await xui.aclose()

    async def test_login_rate_limit(self, panel):
        panel.post(LOGIN_URL).mock(side_effect=cookie_sequence())
        xui = ThreeXUI(BASE_URL, "admin", "secret", ClientOptions(max_login_attempts_per_hour=3))

        for _ in range(3):
            await xui.login(force_refresh=True)
        with pytest.raises(XUIRateLimitError) as exc_info:
            await xui.login(force_refresh=True)

        assert exc_info.value.kind == "login"
        await xui.aclose()

    async def test_concurrent_logins_share_one_attempt(self, client, panel):
        login = panel.post(LOGIN_URL).mock(side_effect=cookie_sequence())

        results = await asyncio.gather(*(client.login() for _ in range(5)))

        assert login.call_count == 1
        assert all(r is results[0] for r in results)

    async def test_shared_session_manager(self, panel):
        login = panel.post(LOGIN_URL).mock(side_effect=lambda request: login_response())
        manager = SessionManager()

        async with ThreeXUI(BASE_URL, "admin", "secret", session_manager=manager) as first:
            await first.login()
        async with ThreeXUI(BASE_URL, "admin", "secret", session_manager=manager) as second:
            result = await second.login()

        assert result.from_cache
        assert login.call_count == 1

    async def test_store_write_failure_keeps_local_session(self, panel):
        login = panel.post(LOGIN_URL).mock(side_effect=lambda request: login_response())
        inbounds = panel.get(f"{INBOUNDS_URL}/list").mock(return_value=panel_response([]))
        manager = SessionManager(
            CustomSessionHandler(
                get_session=Mock(return_value=None),
                set_session=Mock(side_effect=RuntimeError("disk full")),
                delete_session=Mock(),
            )
        )

        async with ThreeXUI(BASE_URL, "admin", "secret", session_manager=manager) as xui:
            result = await xui.login()
            await xui.get_inbounds()

        assert result.success
        assert login.call_count == 1
        assert inbounds.calls.last.request.headers["Cookie"] == SESSION_COOKIE

    async def test_logout(self, client, panel):
        login = panel.post(LOGIN_URL).mock(side_effect=cookie_sequence())
        panel.get(f"{INBOUNDS_URL}/list").mock(return_value=panel_response([]))

        await client.login()
        await client.logout()

        assert client.state == SessionState.NO_SESSION
        assert not await client.is_session_valid()

        await client.get_inbounds()
        assert login.call_count == 2

    async def test_expired_state(self, client, panel):
        panel.post(LOGIN_URL).mock(side_effect=lambda request: login_response())
        await client.login()

        with patch("xui_panel.session.manager.time.time", return_value=time.time() + 10 ** 6):
            assert client.state == SessionState.EXPIRED


class TestRequests:
    async def test_request_uses_session_cookie(self, client, panel):
        panel.post(LOGIN_URL).mock(side_effect=lambda request: login_response())
        route = panel.get(f"{INBOUNDS_URL}/list").mock(return_value=panel_response([{"id": 1}]))

        response = await client.get_inbounds()

        assert response == PanelResponse(success=True, msg="", obj=[{"id": 1}])
        request = route.calls.last.request
        assert request.headers["Cookie"] == SESSION_COOKIE
        assert request.headers["X-Requested-With"] == "XMLHttpRequest"

    async def test_concurrent_requests_login_once(self, client, panel):
        login = panel.post(LOGIN_URL).mock(side_effect=cookie_sequence())
        route = panel.get(f"{INBOUNDS_URL}/list").mock(return_value=panel_response([]))

        responses = await asyncio.gather(*(client.get_inbounds() for _ in range(10)))

        assert all(r.success for r in responses)
        assert login.call_count == 1
        assert route.call_count == 10

    async def test_expired_session_is_renewed(self, client, panel):
        login = panel.post(LOGIN_URL).mock(side_effect=cookie_sequence())
        route = panel.get(f"{INBOUNDS_URL}/list").mock(
            side_effect=[httpx.Response(401), panel_response([])]
        )

        response = await client.get_inbounds()

        assert response.success
        assert login.call_count == 2
        assert route.calls[0].request.headers["Cookie"] == "3x-ui=token-1"
        assert route.calls[1].request.headers["Cookie"] == "3x-ui=token-2"

    async def test_persistent_401_raises_max_retries(self, client, panel):
        panel.post(LOGIN_URL).mock(side_effect=cookie_sequence())
        route = panel.get(f"{INBOUNDS_URL}/list").mock(return_value=httpx.Response(401))

        with pytest.raises(XUIMaxRetriesError) as exc_info:
            await client.get_inbounds()

        assert route.call_count == 2
        assert "Check your credentials" in str(exc_info.value)

    async def test_failed_relogin_clears_session(self, client, panel):
        panel.post(LOGIN_URL).mock(
            side_effect=[login_response(), httpx.Response(200, json={"success": False, "msg": "wrong"})]
        )
        panel.get(f"{INBOUNDS_URL}/list").mock(return_value=httpx.Response(401))

        with pytest.raises(XUIAuthError):
            await client.get_inbounds()

        assert client.state == SessionState.NO_SESSION
        assert not await client.is_session_valid()

    async def test_general_rate_limit(self, panel):
        panel.post(LOGIN_URL).mock(side_effect=lambda request: login_response())
        panel.get(f"{INBOUNDS_URL}/list").mock(return_value=panel_response([]))
        xui = ThreeXUI(BASE_URL, "admin", "secret", ClientOptions(max_requests_per_minute=2))

        await xui.get_inbounds()
        await xui.get_inbounds()
        with pytest.raises(XUIRateLimitError) as exc_info:
            await xui.get_inbounds()

        assert exc_info.value.kind == "general"
        await xui.aclose()

    async def test_http_timeout(self, client, panel):
        panel.post(LOGIN_URL).mock(side_effect=lambda request: login_response())
        panel.get(f"{INBOUNDS_URL}/list").mock(side_effect=httpx.ReadTimeout("slow"))

        with pytest.raises(XUITimeoutError):
            await client.get_inbounds()

    async def test_production_errors_are_sanitized(self, panel):
        panel.post(LOGIN_URL).mock(side_effect=lambda request: login_response())
        panel.get(f"{INBOUNDS_URL}/list").mock(
            return_value=httpx.Response(500, text="panic: runtime error at /usr/local/x-ui")
        )
        xui = ThreeXUI(BASE_URL, "admin", "secret", ClientOptions(is_development=False))

        with pytest.raises(XUIHTTPError) as exc_info:
            await xui.get_inbounds()

        error = exc_info.value
        assert error.status_code == 500
        assert error.response_text is None
        assert error.original_error is None
        assert error.__cause__ is None
        assert error.__context__ is None
        await xui.aclose()

    async def test_development_errors_keep_details(self, client, panel):
        panel.post(LOGIN_URL).mock(side_effect=lambda request: login_response())
        panel.get(f"{INBOUNDS_URL}/list").mock(return_value=httpx.Response(500, text="panic"))

        with pytest.raises(XUIHTTPError) as exc_info:
            await client.get_inbounds()
        assert exc_info.value.response_text == "panic"

    async def test_timeout_during_login_keeps_shared_attempt(self, client, panel):
        async def slow_login(request):
            await asyncio.sleep(0.3)
            return login_response()

        login = panel.post(LOGIN_URL).mock(side_effect=slow_login)
        panel.get(f"{INBOUNDS_URL}/list").mock(return_value=panel_response([]))

        with pytest.raises(XUITimeoutError):
            await client.request("GET", "/panel/api/inbounds/list", timeout=0.05)

        response = await client.get_inbounds()

        assert response.success
        assert login.call_count == 1
        assert client.state == SessionState.AUTHENTICATED

    async def test_redirect_keeps_session_cookie(self, client, panel):
        panel.post(LOGIN_URL).mock(side_effect=lambda request: login_response())
        panel.get(f"{INBOUNDS_URL}/list").mock(
            return_value=httpx.Response(307, headers={"Location": f"{INBOUNDS_URL}/list/"})
        )
        target = panel.get(f"{INBOUNDS_URL}/list/").mock(return_value=panel_response([{"id": 1}]))

        response = await client.get_inbounds()

        assert response.obj == [{"id": 1}]
        assert target.calls.last.request.headers["Cookie"] == SESSION_COOKIE

    async def test_cross_origin_redirect_drops_session_cookie(self, client, panel):
        panel.post(LOGIN_URL).mock(side_effect=lambda request: login_response())
        panel.get(f"{INBOUNDS_URL}/list").mock(
            return_value=httpx.Response(307, headers={"Location": "https://elsewhere.example.org/list"})
        )
        target = panel.get("https://elsewhere.example.org/list").mock(return_value=panel_response([]))

        await client.get_inbounds()

        assert "Cookie" not in target.calls.last.request.headers

    async def test_raw_request(self, client, panel):
        panel.post(LOGIN_URL).mock(side_effect=lambda request: login_response())
        panel.post(f"{BASE_URL}/panel/api/server/status").mock(
            return_value=panel_response({"cpu": 3.5})
        )

        body = await client.request("POST", "/panel/api/server/status")
        assert body["obj"] == {"cpu": 3.5}


class TestInbounds:
    async def test_add_inbound_rejects_bad_port(self, client, panel):
        login = panel.post(LOGIN_URL).mock(side_effect=lambda request: login_response())
        route = panel.post(f"{INBOUNDS_URL}/add").mock(return_value=panel_response())

        with pytest.raises(XUIValidationError):
            await client.add_inbound({"port": 70000, "protocol": "vless"})

        assert login.call_count == 0
        assert route.call_count == 0

    async def test_add_inbound_keeps_json_string_settings(self, client, panel):
        panel.post(LOGIN_URL).mock(side_effect=lambda request: login_response())
        route = panel.post(f"{INBOUNDS_URL}/add").mock(return_value=panel_response({"id": 7}))

        response = await client.add_inbound({"port": 443, "protocol": "vless", "settings": '{"a":1}'})

        assert response.obj == {"id": 7}
        assert posted_json(route)["settings"] == '{"a":1}'

    async def test_update_and_delete_inbound(self, client, panel):
        panel.post(LOGIN_URL).mock(side_effect=lambda request: login_response())
        update = panel.post(f"{INBOUNDS_URL}/update/3").mock(return_value=panel_response())
        delete = panel.post(f"{INBOUNDS_URL}/del/3").mock(return_value=panel_response())

        await client.update_inbound(3, {"remark": "renamed", "sniffing": {"enabled": False}})
        await client.delete_inbound(3)

        assert posted_json(update)["sniffing"] == '{"enabled":false}'
        assert delete.call_count == 1

    async def test_get_inbound(self, client, panel):
        panel.post(LOGIN_URL).mock(side_effect=lambda request: login_response())
        panel.get(f"{INBOUNDS_URL}/get/5").mock(return_value=panel_response({"id": 5}))

        assert (await client.get_inbound(5)).obj == {"id": 5}


class TestClients:
    async def test_add_client_with_credentials(self, client, panel):
        panel.post(LOGIN_URL).mock(side_effect=lambda request: login_response())
        route = panel.post(f"{INBOUNDS_URL}/addClient").mock(return_value=panel_response())

        created = await client.add_client_with_credentials(
            1, "trojan", password_length=20, email="bob", limit_ip=2
        )

        assert isinstance(created.credentials, TrojanCredentials)
        assert created.protocol == Protocol.TROJAN
        assert len(created.credentials.password) == 20
        body = posted_json(route)
        assert body["id"] == 1
        sent = json.loads(body["settings"])["clients"][0]
        assert sent["password"] == created.credentials.password
        assert sent["email"] == "bob"
        assert sent["limitIp"] == 2

    async def test_add_client_requires_inbound_id(self, client):
        with pytest.raises(XUIValidationError):
            await client.add_client({"settings": {"clients": []}})

    async def test_update_client_with_credentials(self, client, panel):
        panel.post(LOGIN_URL).mock(side_effect=lambda request: login_response())
        existing = {"id": "c-1", "email": "alice", "totalGB": 0, "enable": True, "limitIp": 0}
        panel.get(f"{INBOUNDS_URL}/get/1").mock(
            return_value=panel_response({"id": 1, "settings": json.dumps({"clients": [existing]})})
        )
        route = panel.post(f"{INBOUNDS_URL}/updateClient/c-1").mock(return_value=panel_response())

        await client.update_client_with_credentials("c-1", 1, total_gb=5, enable=False, expiry_days=30)

        body = posted_json(route)
        updated = json.loads(body["settings"])["clients"][0]
        assert body["id"] == 1
        assert updated["email"] == "alice"
        assert updated["totalGB"] == 5 * 1024 ** 3
        assert updated["enable"] is False
        assert updated["expiryTime"] > int(time.time() * 1000)

    async def test_update_missing_client(self, client, panel):
        panel.post(LOGIN_URL).mock(side_effect=lambda request: login_response())
        panel.get(f"{INBOUNDS_URL}/get/1").mock(
            return_value=panel_response({"id": 1, "settings": json.dumps({"clients": []})})
        )

        with pytest.raises(XUIClientNotFoundError):
            await client.update_client_with_credentials("c-404", 1, email="x")

    async def test_client_routes(self, client, panel):
        panel.post(LOGIN_URL).mock(side_effect=lambda request: login_response())
        routes = [
            panel.post(f"{INBOUNDS_URL}/2/delClient/c-1").mock(return_value=panel_response()),
            panel.get(f"{INBOUNDS_URL}/getClientTraffics/alice").mock(return_value=panel_response()),
            panel.get(f"{INBOUNDS_URL}/getClientTrafficsById/c-1").mock(return_value=panel_response()),
            panel.post(f"{INBOUNDS_URL}/clientIps/alice").mock(return_value=panel_response()),
            panel.post(f"{INBOUNDS_URL}/clearClientIps/alice").mock(return_value=panel_response()),
            panel.post(f"{INBOUNDS_URL}/2/resetClientTraffic/alice").mock(return_value=panel_response()),
            panel.post(f"{INBOUNDS_URL}/resetAllTraffics").mock(return_value=panel_response()),
            panel.post(f"{INBOUNDS_URL}/resetAllClientTraffics/2").mock(return_value=panel_response()),
            panel.post(f"{INBOUNDS_URL}/delDepletedClients/2").mock(return_value=panel_response()),
            panel.post(f"{INBOUNDS_URL}/onlines").mock(return_value=panel_response(["alice"])),
            panel.get(f"{INBOUNDS_URL}/createbackup").mock(return_value=panel_response()),
        ]

        await client.delete_client(2, "c-1")
        await client.get_client_traffics_by_email("alice")
        await client.get_client_traffics_by_id("c-1")
        await client.get_client_ips("alice")
        await client.clear_client_ips("alice")
        await client.reset_client_traffic(2, "alice")
        await client.reset_all_traffics()
        await client.reset_all_client_traffics(2)
        await client.delete_depleted_clients(2)
        online = await client.get_online_clients()
        await client.create_backup()

        assert all(route.call_count == 1 for route in routes)
        assert online.obj == ["alice"]


class TestHelpers:
    async def test_credential_helpers(self, client):
        assert is_uuid_v4(client.generate_uuid())
        assert is_uuid_v4(client.generate_uuid(secure=False))
        assert len(client.generate_password(24)) == 24
        assert client.get_recommended_shadowsocks_cipher() in client.get_shadowsocks_ciphers()
        assert len(client.generate_bulk_credentials("vmess", 3)) == 3
        assert client.generate_demo_wireguard_keys().is_demo
        creds = client.generate_credentials("vless")
        assert client.validate_credentials(creds, "vless")["valid"]
        assert 10000 <= client.generate_port() <= 65535

    async def test_security_helpers(self, client):
        assert client.validate_credential_strength("weak").strength == "weak"
        assert len(client.generate_secure_token()) == 64

        client.security_monitor.block_ip("198.51.100.1")
        client.clear_blocked_ips()
        assert client.get_security_stats()["blocked_ips"] == 0

    async def test_session_stats(self, client, panel):
        panel.post(LOGIN_URL).mock(side_effect=lambda request: login_response())
        await client.login()

        stats = await client.get_session_stats()
        assert stats["size"] == 1
        assert await client.is_session_valid()

        await client.clear_all_sessions()
        assert client.state == SessionState.NO_SESSION
        assert (await client.get_session_stats())["size"] == 0

    async def test_session_stats_never_raise(self, client):
        client.session_manager.get_stats = Mock(side_effect=RuntimeError("boom"))
        assert await client.get_session_stats() == {"message": "Statistics not available"}

    async def test_development_mode_toggle(self, client):
        client.set_development_mode(False)
        assert client.is_development is False
