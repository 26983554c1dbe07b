"""Shared fixtures for the panel client tests."""

import httpx
import pytest
import respx

from xui_panel import ClientOptions, ThreeXUI

BASE_URL = "https://panel.example.com:2053"
LOGIN_URL = f"{BASE_URL}/login"
INBOUNDS_URL = f"{BASE_URL}/panel/api/inbounds"
SESSION_COOKIE = "3x-ui=MTcwMDAwMDAwMHxEdi1CQkFFQ"


def login_response(cookie: str = SESSION_COOKIE) -> httpx.Response:
    return httpx.Response(
        200,
        json={"success": True, "msg": "Login Successfully", "obj": None},
        headers={"Set-Cookie": f"{cookie}; Path=/; HttpOnly"},
    )


def panel_response(obj=None, msg: str = "") -> httpx.Response:
    return httpx.Response(200, json={"success": True, "msg": msg, "obj": obj})


@pytest.fixture
def panel():
    """respx router standing in for the 3x-ui panel."""
    with respx.mock(assert_all_called=False) as router:
        yield router


@pytest.fixture
def options():
    return ClientOptions(timeout_ms=5000, is_development=True)


@pytest.fixture
async def client(panel, options):
    xui = ThreeXUI(BASE_URL, "admin", "S3cret-pass", options)
    yield xui
    await xui.aclose()
