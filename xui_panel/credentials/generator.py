"""Credential generation for the protocols supported by 3x-ui.

Everything here is a pure function: no I/O and no shared state. Secret
material comes from :mod:`secrets`; the only non-cryptographic sources are
``generate_insecure_uuid`` (legacy compatibility) and ``generate_port``.
"""

import base64
import random
import re
import secrets
import string
import time
import uuid
from typing import Callable, Optional, Sequence, Union

from ..xui_models import XUIUnsupportedProtocolError, XUIValidationError
from .models import (
    AccountCredentials,
    CredentialBundle,
    DemoKeyPair,
    DokodemoCredentials,
    Protocol,
    ShadowsocksCredentials,
    TrojanCredentials,
    VlessCredentials,
    VmessCredentials,
    WireGuardCredentials,
)

UUID_V4_PATTERN = re.compile(
    r"^[0-9a-f]{8}-[0-9a-f]{4}-4[0-9a-f]{3}-[89ab][0-9a-f]{3}-[0-9a-f]{12}$"
)

SIMILAR_CHARACTERS = "0O1lI"
SYMBOLS = "!@#$%^&*()_+-=[]{}|;:,.<>?"

SHADOWSOCKS_CIPHERS = (
    "chacha20-ietf-poly1305",
    "aes-256-gcm",
    "aes-128-gcm",
    "chacha20-poly1305",
)

# Shadowsocks 2022 PSK length in bytes per method
SHADOWSOCKS_2022_KEY_LENGTHS = {
    "2022-blake3-aes-128-gcm": 16,
    "2022-blake3-aes-256-gcm": 32,
    "2022-blake3-chacha20-poly1305": 32,
}

DEFAULT_SHADOWSOCKS_2022_METHOD = "2022-blake3-aes-256-gcm"

_BASE36 = string.digits + string.ascii_lowercase


# === Identifiers ===

def generate_uuid() -> str:
    """Cryptographically secure UUID v4 (default for credential issuance)."""
    raw = bytearray(secrets.token_bytes(16))
    raw[6] = (raw[6] & 0x0F) | 0x40  # version 4
    raw[8] = (raw[8] & 0x3F) | 0x80  # RFC 4122 variant
    return str(uuid.UUID(bytes=bytes(raw)))


def generate_insecure_uuid() -> str:
    """UUID v4 from the non-cryptographic ``random`` module.

    Kept for legacy callers only; never use it for credentials.
    """
    return str(uuid.UUID(int=random.getrandbits(128), version=4))


def is_uuid_v4(value: str) -> bool:
    return isinstance(value, str) and UUID_V4_PATTERN.match(value.lower()) is not None


def _random_base36(length: int) -> str:
    return "".join(secrets.choice(_BASE36) for _ in range(length))


def generate_username(prefix: str = "user") -> str:
    """Random username for SOCKS5/HTTP inbounds, e.g. ``user_k3x9qa``."""
    return f"{prefix}_{_random_base36(6)}"


def generate_client_identifier(prefix: str = "client") -> str:
    """Opaque client tag used in the panel's ``email`` field.

    Not an email address: a random suffix plus the last four digits of the
    current millisecond timestamp, e.g. ``client_a8f3k20417``.
    """
    timestamp = str(int(time.time() * 1000))[-4:]
    return f"{prefix}_{_random_base36(6)}{timestamp}"


# === Secrets ===

def generate_password(
    length: int = 16,
    *,
    include_uppercase: bool = True,
    include_lowercase: bool = True,
    include_numbers: bool = True,
    include_symbols: bool = False,
    exclude_similar: bool = True,
) -> str:
    """Random password drawn from the selected character classes.

    When ``length`` allows it, every selected class is represented at least once.

    Raises:
        XUIValidationError: If no character class is selected or length < 1
    """
    if length < 1:
        raise XUIValidationError("Password length must be at least 1", field="length")

    classes = []
    if include_uppercase:
        classes.append(string.ascii_uppercase)
    if include_lowercase:
        classes.append(string.ascii_lowercase)
    if include_numbers:
        classes.append(string.digits)
    if include_symbols:
        classes.append(SYMBOLS)

    if exclude_similar:
        classes = ["".join(c for c in chars if c not in SIMILAR_CHARACTERS) for chars in classes]
    classes = [chars for chars in classes if chars]

    if not classes:
        raise XUIValidationError(
            "No character sets selected for password generation", field="options"
        )

    alphabet = "".join(classes)
    chars = [secrets.choice(chars) for chars in classes] if length >= len(classes) else []
    chars.extend(secrets.choice(alphabet) for _ in range(length - len(chars)))
    secrets.SystemRandom().shuffle(chars)
    return "".join(chars)


def generate_shadowsocks2022_psk(method: str = DEFAULT_SHADOWSOCKS_2022_METHOD) -> str:
    """Base64 pre-shared key sized for the given Shadowsocks 2022 method."""
    key_length = SHADOWSOCKS_2022_KEY_LENGTHS.get(method)
    if key_length is None:
        raise XUIValidationError(f"Unsupported Shadowsocks2022 method: {method}", field="method")
    return base64.b64encode(secrets.token_bytes(key_length)).decode("ascii")


def _clamp_x25519(private: bytearray) -> bytearray:
    private[0] &= 248
    private[31] &= 127
    private[31] |= 64
    return private


def generate_demo_wireguard_keys() -> DemoKeyPair:
    """WireGuard-shaped demo key pair (standard base64).

    The private key is clamped as X25519 requires, but the public key is NOT
    its scalar multiple: it is independent random bytes. A real deployment
    needs a genuine X25519 implementation instead.
    """
    private = _clamp_x25519(bytearray(secrets.token_bytes(32)))
    return DemoKeyPair(
        private_key=base64.b64encode(bytes(private)).decode("ascii"),
        public_key=base64.b64encode(secrets.token_bytes(32)).decode("ascii"),
    )


def generate_demo_reality_keys() -> DemoKeyPair:
    """Reality-shaped demo key pair (URL-safe base64, as ``xray x25519`` prints).

    Same limitation as :func:`generate_demo_wireguard_keys`: the public key is
    random, not derived from the private key.
    """
    private = _clamp_x25519(bytearray(secrets.token_bytes(32)))
    return DemoKeyPair(
        private_key=base64.urlsafe_b64encode(bytes(private)).decode("ascii"),
        public_key=base64.urlsafe_b64encode(secrets.token_bytes(32)).decode("ascii"),
    )


def generate_reality_short_id() -> str:
    """Hex short ID of 1-16 characters."""
    length = secrets.randbelow(16) + 1
    return secrets.token_hex((length + 1) // 2)[:length]


def generate_port(min_port: int = 10000, max_port: int = 65535) -> int:
    """Random port in ``[min_port, max_port]``."""
    if not 1 <= min_port <= max_port <= 65535:
        raise XUIValidationError("Port range must be within 1-65535", field="port")
    return random.randint(min_port, max_port)


def get_recommended_shadowsocks_cipher() -> str:
    return SHADOWSOCKS_CIPHERS[0]


# === Protocol dispatch ===

def _vless(email: str, flow: str, **_) -> VlessCredentials:
    return VlessCredentials(id=generate_uuid(), email=email, flow=flow)


def _vmess(email: str, level: int, alter_id: int, **_) -> VmessCredentials:
    return VmessCredentials(id=generate_uuid(), email=email, level=level, alter_id=alter_id)


def _trojan(email: str, level: int, password_length: Optional[int], **_) -> TrojanCredentials:
    return TrojanCredentials(
        password=generate_password(password_length or 16), email=email, level=level
    )


def _shadowsocks(email: str, method: Optional[str], password_length: Optional[int], **_) -> ShadowsocksCredentials:
    return ShadowsocksCredentials(
        method=method or get_recommended_shadowsocks_cipher(),
        password=generate_password(password_length or 16),
        email=email,
    )


def _shadowsocks2022(email: str, method: Optional[str], **_) -> ShadowsocksCredentials:
    method = method or DEFAULT_SHADOWSOCKS_2022_METHOD
    return ShadowsocksCredentials(
        method=method,
        password=generate_shadowsocks2022_psk(method),
        email=email,
        protocol=Protocol.SHADOWSOCKS_2022,
    )


def _wireguard(allowed_ips: Optional[Sequence[str]], keep_alive: int, **_) -> WireGuardCredentials:
    keys = generate_demo_wireguard_keys()
    return WireGuardCredentials(
        private_key=keys.private_key,
        public_key=keys.public_key,
        allowed_ips=tuple(allowed_ips or ("10.0.0.2/32",)),
        keep_alive=keep_alive,
    )


def _account(protocol: Protocol):
    def build(email: str, username: Optional[str], password_length: Optional[int], **_) -> AccountCredentials:
        return AccountCredentials(
            user=username or generate_username(),
            password=generate_password(password_length or 12),
            email=email,
            protocol=protocol,
        )
    return build


def _dokodemo(email: str, **_) -> DokodemoCredentials:
    return DokodemoCredentials(email=email)


_PROTOCOL_GENERATORS: dict[Protocol, Callable[..., CredentialBundle]] = {
    Protocol.VLESS: _vless,
    Protocol.VMESS: _vmess,
    Protocol.TROJAN: _trojan,
    Protocol.SHADOWSOCKS: _shadowsocks,
    Protocol.SHADOWSOCKS_2022: _shadowsocks2022,
    Protocol.WIREGUARD: _wireguard,
    Protocol.SOCKS5: _account(Protocol.SOCKS5),
    Protocol.HTTP: _account(Protocol.HTTP),
    Protocol.DOKODEMO_DOOR: _dokodemo,
}


def parse_protocol(protocol: Union[str, Protocol]) -> Protocol:
    """Normalize a protocol tag.

    Raises:
        XUIUnsupportedProtocolError: For tags outside the supported set
    """
    if isinstance(protocol, Protocol):
        return protocol
    try:
        return Protocol(str(protocol).strip().lower())
    except ValueError:
        raise XUIUnsupportedProtocolError(str(protocol))


def generate_for_protocol(
    protocol: Union[str, Protocol],
    *,
    email: Optional[str] = None,
    flow: str = "xtls-rprx-vision",
    level: int = 0,
    alter_id: int = 0,
    password_length: Optional[int] = None,
    method: Optional[str] = None,
    allowed_ips: Optional[Sequence[str]] = None,
    keep_alive: int = 25,
    username: Optional[str] = None,
) -> CredentialBundle:
    """Generate a complete credential bundle for one client.

    Args:
        protocol: One of the :class:`Protocol` tags (case-insensitive)
        email: Client tag; a fresh client identifier is generated when omitted
        flow: VLESS flow
        level: VMess/Trojan user level
        alter_id: VMess alterId
        password_length: Trojan/Shadowsocks (16) or SOCKS5/HTTP (12) password length
        method: Shadowsocks cipher or Shadowsocks 2022 method
        allowed_ips: WireGuard peer allowed IPs
        keep_alive: WireGuard keepalive in seconds
        username: SOCKS5/HTTP user name

    Returns:
        The protocol's credential dataclass

    Raises:
        XUIUnsupportedProtocolError: For an unknown protocol tag
    """
    tag = parse_protocol(protocol)
    return _PROTOCOL_GENERATORS[tag](
        email=email or generate_client_identifier(),
        flow=flow,
        level=level,
        alter_id=alter_id,
        password_length=password_length,
        method=method,
        allowed_ips=allowed_ips,
        keep_alive=keep_alive,
        username=username,
    )


def generate_bulk(protocol: Union[str, Protocol], count: int, **options) -> list[CredentialBundle]:
    """Generate ``count`` independent bundles for the same protocol.

    A fixed ``email`` in ``options`` would be shared by every bundle, so it is
    only honoured for a single bundle.
    """
    if count < 0:
        raise XUIValidationError("count must not be negative", field="count")
    tag = parse_protocol(protocol)
    if count > 1:
        options.pop("email", None)
    return [generate_for_protocol(tag, **options) for _ in range(count)]


def validate_credentials(credentials: Union[CredentialBundle, dict], protocol: Union[str, Protocol]) -> dict:
    """Sanity-check generated credentials for a protocol.

    Returns:
        ``{"valid": bool, "errors": [str, ...]}``
    """
    tag = parse_protocol(protocol)
    data = credentials if isinstance(credentials, dict) else credentials.to_dict()
    errors = []

    if tag in (Protocol.VLESS, Protocol.VMESS):
        if not is_uuid_v4(data.get("id", "")):
            errors.append("Invalid UUID format")
    elif tag in (Protocol.TROJAN, Protocol.SHADOWSOCKS):
        if len(data.get("password") or "") < 8:
            errors.append("Password too short (minimum 8 characters)")
    elif tag == Protocol.SHADOWSOCKS_2022:
        expected = SHADOWSOCKS_2022_KEY_LENGTHS.get(data.get("method"))
        try:
            actual = len(base64.b64decode(data.get("password") or "", validate=True))
        except ValueError:
            actual = -1
        if expected is None or actual != expected:
            errors.append("PSK length does not match method")
    elif tag == Protocol.WIREGUARD:
        if not data.get("privateKey") or not data.get("publicKey"):
            errors.append("Missing key pair")
    elif tag in (Protocol.SOCKS5, Protocol.HTTP):
        if not data.get("user") or not data.get("pass"):
            errors.append("Missing user or password")

    return {"valid": not errors, "errors": errors}
