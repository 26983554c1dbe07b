"""3x-ui panel API client with cached, self-renewing sessions."""

import asyncio
import json
import logging
import time
from dataclasses import dataclass
from datetime import datetime, timezone
from typing import Any, Optional, Union
from urllib.parse import quote

import httpx

from .config import settings
from .credentials import (
    SHADOWSOCKS_CIPHERS,
    CredentialBundle,
    DemoKeyPair,
    Protocol,
    build_client_settings,
    generate_bulk,
    generate_demo_reality_keys,
    generate_demo_wireguard_keys,
    generate_for_protocol,
    generate_insecure_uuid,
    generate_password,
    generate_port,
    generate_uuid,
    get_recommended_shadowsocks_cipher,
    validate_credentials,
)
from .security import (
    CredentialSecurity,
    ErrorSecurity,
    InputValidator,
    RateLimitKind,
    SecureHeaders,
    SecurityMonitor,
)
from .session import SessionManager
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
    XUIValidationError,
)

logger = logging.getLogger(__name__)

LOGIN_PATH = "/login"
INBOUNDS_API = "/panel/api/inbounds"

_BODY_METHODS = ("POST", "PUT", "PATCH")


@dataclass
class CreatedClient:
    """Result of add_client_with_credentials."""

    response: PanelResponse
    credentials: CredentialBundle
    protocol: Protocol


def _segment(value: Union[int, str]) -> str:
    return quote(str(value), safe="")


class ThreeXUI:
    """Async client for the 3x-ui panel API with automatic session management.

    Logins are cached through a SessionManager, shared between concurrent
    callers of one instance, and renewed once transparently when the panel
    answers 401.

    Usage:
        async with ThreeXUI("https://panel.example.com:2053", "admin", "secret") as xui:
            inbounds = await xui.get_inbounds()
    """

    def __init__(
        self,
        base_url: str,
        username: str,
        password: str,
        options: Union[ClientOptions, dict, None] = None,
        *,
        session_manager: Optional[SessionManager] = None,
        security_monitor: Optional[SecurityMonitor] = None,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        """Initialize the client.

        Args:
            base_url: Panel URL including the web base path, if any
            username: Panel admin username
            password: Panel admin password
            options: ClientOptions or a dict of its fields
            session_manager: Session cache (memory-backed if omitted)
            security_monitor: Rate limiter/activity log (fresh one if omitted)
            transport: Custom httpx transport

        Raises:
            XUIConfigError: If an argument is missing or invalid
        """
        if not base_url:
            raise XUIConfigError("base_url is required")
        if not username:
            raise XUIConfigError("username is required")
        if not password:
            raise XUIConfigError("password is required")

        try:
            self.base_url = InputValidator.validate_url(base_url)
            self.username = InputValidator.validate_username(username)
            self._password = InputValidator.validate_password(password)
        except XUIValidationError as e:
            raise XUIConfigError(f"Invalid {e.field}: {e.message}", e)

        if options is None:
            options = ClientOptions()
        elif isinstance(options, dict):
            options = ClientOptions.from_dict(options)
        self.options = options
        self.is_development = options.is_development

        self.session_manager = session_manager or SessionManager(
            session_ttl=options.session_ttl,
            refresh_threshold=options.refresh_threshold,
        )
        self.security_monitor = security_monitor or SecurityMonitor(
            max_requests_per_minute=options.max_requests_per_minute,
            max_login_attempts_per_hour=options.max_login_attempts_per_hour,
        )

        self._http = httpx.AsyncClient(
            base_url=self.base_url,
            timeout=options.timeout_seconds,
            follow_redirects=True,
            max_redirects=options.max_redirects,
            headers=SecureHeaders.get_secure_headers(options.user_agent, options.enable_csp),
            verify=options.verify_tls,
            transport=transport,
            event_hooks={"request": [self._attach_session]},
        )

        self._identifier = CredentialSecurity.hash_for_logging(self.username)
        self._cookie: Optional[str] = None
        self._session_created_at: Optional[float] = None
        self._failed_logins = 0
        self._login_task: Optional[asyncio.Task] = None
        self._login_forced = False

    @classmethod
    def from_env(cls, options: Union[ClientOptions, dict, None] = None, **kwargs) -> "ThreeXUI":
        """Build a client from XUI_BASE_URL, XUI_USERNAME and XUI_PASSWORD."""
        return cls(
            settings.XUI_BASE_URL,
            settings.XUI_USERNAME,
            settings.XUI_PASSWORD,
            options,
            **kwargs,
        )

    def __repr__(self) -> str:
        return f"<ThreeXUI(base_url={self.base_url}, user={self._identifier}, state={self.state.value})>"

    async def __aenter__(self) -> "ThreeXUI":
        return self

    async def __aexit__(self, exc_type, exc, tb) -> None:
        await self.aclose()

    async def aclose(self) -> None:
        """Close the underlying HTTP connection pool."""
        await self._http.aclose()

    # === Session lifecycle ===

    @property
    def state(self) -> SessionState:
        if self._login_task is not None and not self._login_task.done():
            return SessionState.AUTHENTICATING
        if self._cookie is None:
            return SessionState.NO_SESSION
        if self._local_session_stale():
            return SessionState.EXPIRED
        return SessionState.AUTHENTICATED

    def _log_context(self, action: str) -> dict:
        return {"username": self.username, "base_url": self.base_url, "action": action}

    def _local_session_stale(self) -> bool:
        if self._session_created_at is None:
            return True
        if not self.session_manager.auto_refresh:
            return False
        return self.session_manager.should_refresh_session({"created_at": self._session_created_at})

    async def login(self, force_refresh: bool = False) -> LoginResult:
        """Authenticate, reusing a cached session unless ``force_refresh``.

        Concurrent callers share one attempt and observe the same result.

        Returns:
            LoginResult with ``from_cache`` telling whether the network was used

        Raises:
            XUIRateLimitError: Too many login attempts this hour
            XUIAuthError: Bad credentials or no session cookie returned
            XUIConnectionError: Panel unreachable or timed out
        """
        try:
            return await self._run_login(force_refresh)
        except XUIError as e:
            clean = ErrorSecurity.sanitize_error(e, self.is_development)
            if clean is e:
                raise
        # Raised outside the handler so nothing chains back to the original
        raise clean

    async def _run_login(self, force_refresh: bool) -> LoginResult:
        while True:
            task = self._login_task
            if task is None or task.done():
                task = asyncio.create_task(self._login(force_refresh))
                task.add_done_callback(self._on_login_done)
                self._login_task = task
                self._login_forced = force_refresh
                break
            if self._login_forced or not force_refresh:
                break
            # A cache restore is in flight but the caller needs a fresh token
            await asyncio.wait([task])

        # Shielded so a caller's timeout never cancels the shared attempt
        return await asyncio.shield(task)

    def _on_login_done(self, task: asyncio.Task) -> None:
        if self._login_task is task:
            self._login_task = None
        if not task.cancelled():
            task.exception()  # waiters may all have timed out

    async def _login(self, force_refresh: bool) -> LoginResult:
        if not self.security_monitor.check_rate_limit(self._identifier, RateLimitKind.LOGIN):
            error = XUIRateLimitError("Rate limit exceeded for login attempts", kind="login")
            ErrorSecurity.log_error(error, self._log_context("login"))
            raise error

        if not force_refresh:
            if await self._restore_session():
                return LoginResult(
                    success=True,
                    from_cache=True,
                    data={"msg": "Session restored from cache"},
                )
            if self._failed_logins >= self.options.max_login_retries:
                raise XUIAuthError(
                    "Login failed: maximum login attempts reached, "
                    "call login(force_refresh=True) to try again"
                )

        try:
            response = await self._send(
                "POST",
                LOGIN_PATH,
                data={"username": self.username, "password": self._password},
            )
            body = self._decode(response)
            if not isinstance(body, dict) or not body.get("success"):
                reason = body.get("msg") if isinstance(body, dict) else None
                raise XUIAuthError(f"Login failed: {reason or 'unexpected response from panel'}")

            cookie = self._extract_cookie(response)
            if cookie is None:
                raise XUIAuthError("Login failed: no session token received")
        except XUIError as e:
            await self._record_failed_login(e, force_refresh)
            if isinstance(e, XUIAuthError):
                raise
            if isinstance(e, XUIConnectionError):
                raise type(e)(f"Login failed: {e.message}", e)
            raise XUIAuthError(f"Login failed: {e.message}", e)

        try:
            await self.session_manager.store_session(
                self.base_url,
                self.username,
                {"cookie": cookie, "login_time": datetime.now(timezone.utc).isoformat()},
            )
        except XUISessionStoreError as e:
            logger.warning(f"Failed to store session, continuing without cache: {e.message}")

        self._cookie = cookie
        self._session_created_at = time.time()
        self._failed_logins = 0
        logger.info(f"Logged in to {self.base_url} as {self._identifier}")

        return LoginResult(success=True, from_cache=False, data=body)

    async def _restore_session(self) -> bool:
        session = await self.session_manager.get_session(self.base_url, self.username)
        if not session or not session.get("cookie"):
            return False
        if self.session_manager.auto_refresh and self.session_manager.should_refresh_session(session):
            return False

        self._cookie = session["cookie"]
        self._session_created_at = session.get("created_at") or time.time()
        self._failed_logins = 0
        logger.info(f"Session for {self._identifier} restored from cache")
        return True

    async def _record_failed_login(self, error: XUIError, force_refresh: bool) -> None:
        self._failed_logins += 1
        ErrorSecurity.log_error(error, {**self._log_context("login"), "attempts": self._failed_logins})

        if self._failed_logins >= self.options.max_login_retries:
            self.security_monitor.log_suspicious_activity(
                "multiple_failed_logins",
                {"username": self._identifier, "attempts": self._failed_logins},
            )

        if force_refresh:
            # The token that triggered the refresh is known to be rejected
            self._cookie = None
            self._session_created_at = None
            await self.session_manager.delete_session(self.base_url, self.username)

    async def logout(self) -> None:
        """Forget the session locally and in the store. The panel is not contacted."""
        self._cookie = None
        self._session_created_at = None
        self._http.cookies.clear()
        await self.session_manager.delete_session(self.base_url, self.username)
        logger.info(f"Logged out {self._identifier} from {self.base_url}")

    async def _needs_login(self) -> bool:
        if self._cookie is None:
            return True
        if await self.session_manager.has_valid_session(self.base_url, self.username):
            return False
        # Store miss or stale record: our own token is still usable while fresh
        return self._local_session_stale()

    # === Request dispatch ===

    async def request(
        self,
        method: str,
        path: str,
        data: Any = None,
        *,
        timeout: Optional[float] = None,
    ) -> Any:
        """Call a panel endpoint with an authenticated session.

        Args:
            method: HTTP method
            path: Path relative to the base URL
            data: JSON body for POST/PUT/PATCH, query parameters otherwise
            timeout: Seconds for the whole call including login (default from options)

        Returns:
            Decoded JSON body (or text for non-JSON responses)

        Raises:
            XUIRateLimitError: Too many requests this minute
            XUIMaxRetriesError: Panel kept answering 401 after re-authentication
            XUIHTTPError: Any other error status
            XUIConnectionError: Panel unreachable; XUITimeoutError on timeout
        """
        timeout = self.options.timeout_seconds if timeout is None else timeout
        try:
            if not self.security_monitor.check_rate_limit(self._identifier, RateLimitKind.GENERAL):
                raise XUIRateLimitError("Rate limit exceeded for requests", kind="general")
            try:
                return await asyncio.wait_for(self._request(method, path, data), timeout)
            except asyncio.TimeoutError:
                raise XUITimeoutError(
                    f"Request timeout - {method.upper()} {path} took longer than {timeout}s"
                )
        except XUIError as e:
            clean = ErrorSecurity.sanitize_error(e, self.is_development)
            if clean is e:
                raise
        raise clean

    async def _request(self, method: str, path: str, data: Any) -> Any:
        if await self._needs_login():
            await self._run_login(force_refresh=False)

        cookie = self._cookie
        try:
            body = await self._dispatch(method, path, data)
        except XUIUnauthorizedError as e:
            if self._failed_logins >= self.options.max_login_retries:
                raise XUIMaxRetriesError(
                    "Maximum login retry attempts exceeded. Check your credentials.", e
                )
            logger.info(f"Session rejected on {method.upper()} {path}, re-authenticating")
            # Skip the login if another caller already replaced the rejected token
            if self._cookie == cookie or self._login_task is not None:
                await self._run_login(force_refresh=True)
            try:
                body = await self._dispatch(method, path, data)
            except XUIUnauthorizedError as retry_error:
                raise XUIMaxRetriesError(
                    "Maximum login retry attempts exceeded. Check your credentials.", retry_error
                )

        self._failed_logins = 0
        return body

    async def _dispatch(self, method: str, path: str, data: Any) -> Any:
        method = method.upper()
        kwargs: dict = {}
        if method in _BODY_METHODS:
            kwargs["json"] = data if data is not None else {}
        elif data:
            kwargs["params"] = data
        response = await self._send(method, path, **kwargs)
        return self._decode(response)

    async def _send(self, method: str, path: str, **kwargs) -> httpx.Response:
        try:
            response = await self._http.request(method, path, **kwargs)
        except httpx.TimeoutException as e:
            raise XUITimeoutError("Request timeout - server took too long to respond", e)
        except httpx.ConnectError as e:
            raise XUIConnectionError(f"Cannot connect to server: {self.base_url}", e)
        except httpx.HTTPError as e:
            raise XUIConnectionError(f"Request failed: {e}", e)
        finally:
            # The session cookie is set by _attach_session only
            self._http.cookies.clear()

        if response.status_code == 401:
            raise XUIUnauthorizedError(
                "Unauthorized: session rejected by panel", 401, response.text
            )
        if not 200 <= response.status_code < 300:
            raise XUIHTTPError(
                f"Request failed with status code {response.status_code}",
                response.status_code,
                response.text,
            )
        return response

    async def _attach_session(self, request: httpx.Request) -> None:
        """Request hook: put the session cookie on every hop to the panel.

        httpx rebuilds the Cookie header from its jar when it follows a
        redirect, so the header is set here rather than per call.
        """
        base = self._http.base_url
        same_origin = (request.url.scheme, request.url.host, request.url.port) == (
            base.scheme,
            base.host,
            base.port,
        )
        if self._cookie and same_origin:
            request.headers["Cookie"] = self._cookie
        else:
            request.headers.pop("Cookie", None)

    @staticmethod
    def _decode(response: httpx.Response) -> Any:
        try:
            return response.json()
        except ValueError:
            return response.text

    @staticmethod
    def _extract_cookie(response: httpx.Response) -> Optional[str]:
        """First ``name=value`` segment of the first Set-Cookie header."""
        cookies = response.headers.get_list("set-cookie")
        if not cookies:
            return None
        token = cookies[0].split(";", 1)[0].strip()
        return token or None

    # === Session introspection ===

    async def get_session_stats(self) -> dict:
        try:
            return await self.session_manager.get_stats()
        except Exception as e:
            logger.warning(f"Session statistics unavailable: {e}")
            return {"message": "Statistics not available"}

    async def is_session_valid(self) -> bool:
        try:
            return await self.session_manager.has_valid_session(self.base_url, self.username)
        except Exception as e:
            logger.warning(f"Session validity check failed: {e}")
            return False

    async def clear_all_sessions(self) -> None:
        """Drop every stored session, including this instance's token."""
        self._cookie = None
        self._session_created_at = None
        try:
            await self.session_manager.clear_all_sessions()
        except Exception as e:
            logger.warning(f"Failed to clear sessions: {e}")

    # === Credential generation ===

    def generate_credentials(self, protocol: Union[str, Protocol], **options) -> CredentialBundle:
        return generate_for_protocol(protocol, **options)

    def generate_bulk_credentials(self, protocol: Union[str, Protocol], count: int, **options) -> list:
        return generate_bulk(protocol, count, **options)

    def generate_uuid(self, secure: bool = True) -> str:
        return generate_uuid() if secure else generate_insecure_uuid()

    def generate_password(self, length: int = 16, **options) -> str:
        return generate_password(length, **options)

    def get_shadowsocks_ciphers(self) -> list[str]:
        return list(SHADOWSOCKS_CIPHERS)

    def get_recommended_shadowsocks_cipher(self) -> str:
        return get_recommended_shadowsocks_cipher()

    def generate_demo_wireguard_keys(self) -> DemoKeyPair:
        """Demo-only key pair; see credentials.generate_demo_wireguard_keys."""
        return generate_demo_wireguard_keys()

    def generate_demo_reality_keys(self) -> DemoKeyPair:
        """Demo-only key pair; see credentials.generate_demo_reality_keys."""
        return generate_demo_reality_keys()

    def generate_port(self, min_port: int = 10000, max_port: int = 65535) -> int:
        return generate_port(min_port, max_port)

    def validate_credentials(self, credentials, protocol: Union[str, Protocol]) -> dict:
        return validate_credentials(credentials, protocol)

    # === Inbounds ===

    async def get_inbounds(self) -> PanelResponse:
        return PanelResponse.from_dict(await self.request("GET", f"{INBOUNDS_API}/list"))

    async def get_inbound(self, inbound_id: int) -> PanelResponse:
        return PanelResponse.from_dict(
            await self.request("GET", f"{INBOUNDS_API}/get/{_segment(inbound_id)}")
        )

    async def add_inbound(self, inbound_config: dict) -> PanelResponse:
        config = InputValidator.validate_inbound_config(inbound_config)
        return PanelResponse.from_dict(await self.request("POST", f"{INBOUNDS_API}/add", config))

    async def update_inbound(self, inbound_id: int, inbound_config: dict) -> PanelResponse:
        config = InputValidator.validate_inbound_config(inbound_config)
        return PanelResponse.from_dict(
            await self.request("POST", f"{INBOUNDS_API}/update/{_segment(inbound_id)}", config)
        )

    async def delete_inbound(self, inbound_id: int) -> PanelResponse:
        return PanelResponse.from_dict(
            await self.request("POST", f"{INBOUNDS_API}/del/{_segment(inbound_id)}")
        )

    # === Clients ===

    async def add_client(self, client_config: dict) -> PanelResponse:
        config = InputValidator.validate_client_config(client_config)
        return PanelResponse.from_dict(
            await self.request("POST", f"{INBOUNDS_API}/addClient", config)
        )

    async def update_client(self, client_id: str, client_config: dict) -> PanelResponse:
        config = InputValidator.validate_client_config(client_config)
        return PanelResponse.from_dict(
            await self.request("POST", f"{INBOUNDS_API}/updateClient/{_segment(client_id)}", config)
        )

    async def delete_client(self, inbound_id: int, client_id: str) -> PanelResponse:
        return PanelResponse.from_dict(
            await self.request(
                "POST", f"{INBOUNDS_API}/{_segment(inbound_id)}/delClient/{_segment(client_id)}"
            )
        )

    async def get_client_traffics_by_email(self, email: str) -> PanelResponse:
        return PanelResponse.from_dict(
            await self.request("GET", f"{INBOUNDS_API}/getClientTraffics/{_segment(email)}")
        )

    async def get_client_traffics_by_id(self, client_id: str) -> PanelResponse:
        return PanelResponse.from_dict(
            await self.request("GET", f"{INBOUNDS_API}/getClientTrafficsById/{_segment(client_id)}")
        )

    async def get_client_ips(self, email: str) -> PanelResponse:
        return PanelResponse.from_dict(
            await self.request("POST", f"{INBOUNDS_API}/clientIps/{_segment(email)}")
        )

    async def clear_client_ips(self, email: str) -> PanelResponse:
        return PanelResponse.from_dict(
            await self.request("POST", f"{INBOUNDS_API}/clearClientIps/{_segment(email)}")
        )

    async def add_client_with_credentials(
        self,
        inbound_id: int,
        protocol: Union[str, Protocol],
        *,
        expiry_time: int = 0,
        limit_ip: int = 0,
        total_gb: int = 0,
        sub_id: Optional[str] = None,
        **credential_options,
    ) -> CreatedClient:
        """Generate credentials for ``protocol`` and add them as a new client.

        Args:
            inbound_id: Target inbound
            protocol: Protocol of the inbound
            expiry_time: Expiry in milliseconds since epoch (0 = never)
            limit_ip: Max simultaneous IPs (0 = unlimited)
            total_gb: Traffic limit in bytes (0 = unlimited)
            sub_id: Subscription ID (random if omitted)
            **credential_options: Passed to generate_for_protocol

        Returns:
            CreatedClient with the panel response and the generated credentials
        """
        credentials = generate_for_protocol(protocol, **credential_options)
        client = build_client_settings(
            credentials,
            expiry_time=expiry_time,
            limit_ip=limit_ip,
            total_gb=total_gb,
            sub_id=sub_id,
        )
        response = await self.add_client({"id": inbound_id, "settings": {"clients": [client]}})
        return CreatedClient(response=response, credentials=credentials, protocol=credentials.protocol)

    async def update_client_with_credentials(
        self,
        client_id: str,
        inbound_id: int,
        *,
        email: Optional[str] = None,
        limit_ip: Optional[int] = None,
        total_gb: Optional[float] = None,
        expiry_days: Optional[float] = None,
        enable: Optional[bool] = None,
        flow: Optional[str] = None,
        sub_id: Optional[str] = None,
    ) -> PanelResponse:
        """Update one client of an inbound using friendly units.

        Args:
            client_id: Client UUID (or password for Trojan/Shadowsocks)
            inbound_id: Inbound holding the client
            email: New client tag
            limit_ip: Max simultaneous IPs
            total_gb: Traffic limit in gigabytes
            expiry_days: Days from now until expiry
            enable: Enable or disable the client
            flow: VLESS flow
            sub_id: Subscription ID

        Raises:
            XUIInboundError: If the inbound cannot be read
            XUIClientNotFoundError: If the client is not in the inbound
        """
        inbound = await self.get_inbound(inbound_id)
        if not inbound.success or not isinstance(inbound.obj, dict):
            raise XUIInboundError(f"Failed to get inbound {inbound_id} for client update")

        raw_settings = inbound.obj.get("settings") or "{}"
        try:
            inbound_settings = json.loads(raw_settings) if isinstance(raw_settings, str) else raw_settings
        except ValueError as e:
            raise XUIInboundError(f"Inbound {inbound_id} has invalid settings JSON", e)

        target = None
        for client in inbound_settings.get("clients", []):
            if client.get("id") == client_id or client.get("password") == client_id:
                target = client
                break

        if target is None:
            raise XUIClientNotFoundError(f"Client {client_id} not found in inbound {inbound_id}")

        updated = dict(target)
        if email is not None:
            updated["email"] = email
        if limit_ip is not None:
            updated["limitIp"] = limit_ip
        if total_gb is not None:
            updated["totalGB"] = int(total_gb * 1024 ** 3)
        if expiry_days is not None:
            updated["expiryTime"] = int((time.time() + expiry_days * 86400) * 1000)
        if enable is not None:
            updated["enable"] = enable
        if flow is not None:
            updated["flow"] = flow
        if sub_id is not None:
            updated["subId"] = sub_id

        return await self.update_client(
            client_id, {"id": inbound_id, "settings": {"clients": [updated]}}
        )

    # === Traffic & system ===

    async def reset_client_traffic(self, inbound_id: int, email: str) -> PanelResponse:
        return PanelResponse.from_dict(
            await self.request(
                "POST", f"{INBOUNDS_API}/{_segment(inbound_id)}/resetClientTraffic/{_segment(email)}"
            )
        )

    async def reset_all_traffics(self) -> PanelResponse:
        return PanelResponse.from_dict(await self.request("POST", f"{INBOUNDS_API}/resetAllTraffics"))

    async def reset_all_client_traffics(self, inbound_id: int) -> PanelResponse:
        return PanelResponse.from_dict(
            await self.request("POST", f"{INBOUNDS_API}/resetAllClientTraffics/{_segment(inbound_id)}")
        )

    async def delete_depleted_clients(self, inbound_id: int) -> PanelResponse:
        return PanelResponse.from_dict(
            await self.request("POST", f"{INBOUNDS_API}/delDepletedClients/{_segment(inbound_id)}")
        )

    async def get_online_clients(self) -> PanelResponse:
        return PanelResponse.from_dict(await self.request("POST", f"{INBOUNDS_API}/onlines"))

    async def create_backup(self) -> PanelResponse:
        return PanelResponse.from_dict(await self.request("GET", f"{INBOUNDS_API}/createbackup"))

    # === Security ===

    def get_security_stats(self) -> dict:
        return self.security_monitor.get_stats()

    def clear_blocked_ips(self) -> None:
        self.security_monitor.clear_blocked_ips()

    def validate_credential_strength(self, credential: Any, kind: str = "password") -> CredentialStrength:
        return CredentialSecurity.validate_credential_strength(credential, kind)

    def generate_secure_token(self) -> str:
        return CredentialSecurity.generate_session_token()

    def set_development_mode(self, enabled: bool) -> None:
        """Toggle verbose (unsanitized) errors."""
        self.is_development = enabled
