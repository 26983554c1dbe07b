"""Credential bundles for the protocols a 3x-ui inbound can serve.

Each protocol has its own frozen dataclass. ``to_dict()`` renders the bundle
with the camelCase keys the panel expects inside an inbound's ``clients`` list.
"""

from dataclasses import dataclass, field
from enum import Enum
from typing import Union


class Protocol(str, Enum):
    """Protocol tags accepted by the credential generator."""

    VLESS = "vless"
    VMESS = "vmess"
    TROJAN = "trojan"
    SHADOWSOCKS = "shadowsocks"
    SHADOWSOCKS_2022 = "shadowsocks2022"
    WIREGUARD = "wireguard"
    SOCKS5 = "socks5"
    HTTP = "http"
    DOKODEMO_DOOR = "dokodemo-door"


@dataclass(frozen=True)
class VlessCredentials:
    id: str
    email: str
    flow: str = "xtls-rprx-vision"
    encryption: str = "none"
    protocol: Protocol = field(default=Protocol.VLESS, init=False)

    def to_dict(self) -> dict:
        return {"id": self.id, "email": self.email, "flow": self.flow, "encryption": self.encryption}


@dataclass(frozen=True)
class VmessCredentials:
    id: str
    email: str
    level: int = 0
    alter_id: int = 0
    protocol: Protocol = field(default=Protocol.VMESS, init=False)

    def to_dict(self) -> dict:
        return {"id": self.id, "email": self.email, "level": self.level, "alterId": self.alter_id}


@dataclass(frozen=True)
class TrojanCredentials:
    password: str
    email: str
    level: int = 0
    protocol: Protocol = field(default=Protocol.TROJAN, init=False)

    def to_dict(self) -> dict:
        return {"password": self.password, "email": self.email, "level": self.level}


@dataclass(frozen=True)
class ShadowsocksCredentials:
    """Classic AEAD Shadowsocks and the 2022 edition (PSK in ``password``)."""

    method: str
    password: str
    email: str
    protocol: Protocol = Protocol.SHADOWSOCKS

    def to_dict(self) -> dict:
        return {"method": self.method, "password": self.password, "email": self.email}


@dataclass(frozen=True)
class WireGuardCredentials:
    private_key: str
    public_key: str
    allowed_ips: tuple[str, ...] = ("10.0.0.2/32",)
    keep_alive: int = 25
    protocol: Protocol = field(default=Protocol.WIREGUARD, init=False)

    def to_dict(self) -> dict:
        return {
            "privateKey": self.private_key,
            "publicKey": self.public_key,
            "allowedIPs": list(self.allowed_ips),
            "keepAlive": self.keep_alive,
        }


@dataclass(frozen=True)
class AccountCredentials:
    """User/password pair for SOCKS5 and HTTP proxies."""

    user: str
    password: str
    email: str
    protocol: Protocol = Protocol.SOCKS5

    def to_dict(self) -> dict:
        return {"user": self.user, "pass": self.password, "email": self.email}


@dataclass(frozen=True)
class DokodemoCredentials:
    """Dokodemo-door needs no authentication; only the client tag is kept."""

    email: str
    protocol: Protocol = field(default=Protocol.DOKODEMO_DOOR, init=False)

    def to_dict(self) -> dict:
        return {"email": self.email}


@dataclass(frozen=True)
class DemoKeyPair:
    """X25519-shaped key pair whose public half is NOT derived from the private key.

    Only the private key follows the protocol's clamping rule; the public key is
    independent random bytes. Use these values for demos and fixtures, never
    for a real WireGuard or Reality deployment.
    """

    private_key: str
    public_key: str
    is_demo: bool = True


CredentialBundle = Union[
    VlessCredentials,
    VmessCredentials,
    TrojanCredentials,
    ShadowsocksCredentials,
    WireGuardCredentials,
    AccountCredentials,
    DokodemoCredentials,
]
