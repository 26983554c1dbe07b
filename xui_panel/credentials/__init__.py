"""Credential generation and payload builders."""

from .builders import (
    build_client_settings,
    build_inbound_config,
    reality_config,
    reality_stream_settings,
    wireguard_client_config,
)
from .generator import (
    SHADOWSOCKS_2022_KEY_LENGTHS,
    SHADOWSOCKS_CIPHERS,
    generate_bulk,
    generate_client_identifier,
    generate_demo_reality_keys,
    generate_demo_wireguard_keys,
    generate_for_protocol,
    generate_insecure_uuid,
    generate_password,
    generate_port,
    generate_reality_short_id,
    generate_shadowsocks2022_psk,
    generate_username,
    generate_uuid,
    get_recommended_shadowsocks_cipher,
    is_uuid_v4,
    parse_protocol,
    validate_credentials,
)
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

__all__ = [
    # Generators
    "generate_uuid",
    "generate_insecure_uuid",
    "generate_password",
    "generate_for_protocol",
    "generate_bulk",
    "generate_client_identifier",
    "generate_username",
    "generate_shadowsocks2022_psk",
    "generate_demo_wireguard_keys",
    "generate_demo_reality_keys",
    "generate_reality_short_id",
    "generate_port",
    "get_recommended_shadowsocks_cipher",
    "is_uuid_v4",
    "parse_protocol",
    "validate_credentials",
    "SHADOWSOCKS_CIPHERS",
    "SHADOWSOCKS_2022_KEY_LENGTHS",
    # Builders
    "build_client_settings",
    "build_inbound_config",
    "reality_stream_settings",
    "reality_config",
    "wireguard_client_config",
    # Bundles
    "Protocol",
    "CredentialBundle",
    "VlessCredentials",
    "VmessCredentials",
    "TrojanCredentials",
    "ShadowsocksCredentials",
    "WireGuardCredentials",
    "AccountCredentials",
    "DokodemoCredentials",
    "DemoKeyPair",
]
