"""Plain constructors for inbound and client payloads.

The panel expects ``settings``/``streamSettings``/``sniffing`` as JSON strings;
these helpers return dictionaries and leave the encoding to
``InputValidator.validate_inbound_config``.
"""

from typing import Iterable, Optional, Sequence, Union

from .generator import generate_reality_short_id, generate_uuid, parse_protocol
from .models import CredentialBundle, DemoKeyPair, Protocol


def build_client_settings(
    bundle: CredentialBundle,
    *,
    enable: bool = True,
    expiry_time: int = 0,
    limit_ip: int = 0,
    total_gb: int = 0,
    sub_id: Optional[str] = None,
    tg_id: Union[int, str] = "",
) -> dict:
    """Client entry for an inbound's ``settings.clients`` list.

    Args:
        bundle: Generated credentials
        enable: Whether the client may connect
        expiry_time: Expiry in milliseconds since epoch (0 = never)
        limit_ip: Max simultaneous IPs (0 = unlimited)
        total_gb: Traffic limit in bytes (0 = unlimited)
        sub_id: Subscription ID (random UUID when omitted)
        tg_id: Telegram ID shown in the panel
    """
    return {
        **bundle.to_dict(),
        "enable": enable,
        "expiryTime": expiry_time,
        "limitIp": limit_ip,
        "totalGB": total_gb,
        "subId": sub_id or generate_uuid(),
        "tgId": tg_id,
    }


def _protocol_settings(protocol: Protocol, clients: list) -> dict:
    if protocol == Protocol.VLESS:
        return {"clients": clients, "decryption": "none", "fallbacks": []}
    if protocol == Protocol.TROJAN:
        return {"clients": clients, "fallbacks": []}
    if protocol in (Protocol.SHADOWSOCKS, Protocol.SHADOWSOCKS_2022):
        first = clients[0] if clients else {}
        return {
            "method": first.get("method", ""),
            "password": first.get("password", ""),
            "network": "tcp,udp",
            "clients": clients,
        }
    if protocol == Protocol.WIREGUARD:
        return {"mtu": 1420, "secretKey": "", "peers": clients}
    if protocol in (Protocol.SOCKS5, Protocol.HTTP):
        accounts = [{"user": c["user"], "pass": c["pass"]} for c in clients]
        return {"auth": "password" if accounts else "noauth", "accounts": accounts}
    if protocol == Protocol.DOKODEMO_DOOR:
        return {"address": "", "port": 0, "network": "tcp,udp"}
    return {"clients": clients}


def build_inbound_config(
    protocol: Union[str, Protocol],
    port: int,
    *,
    remark: str = "",
    clients: Iterable[dict] = (),
    stream_settings: Optional[dict] = None,
    sniffing: Optional[dict] = None,
    listen: str = "",
    enable: bool = True,
    expiry_time: int = 0,
    total: int = 0,
) -> dict:
    """Inbound payload for ``add_inbound``/``update_inbound``."""
    tag = parse_protocol(protocol)
    wire_protocol = {
        Protocol.SHADOWSOCKS_2022: "shadowsocks",
        Protocol.SOCKS5: "socks",
    }.get(tag, tag.value)
    return {
        "up": 0,
        "down": 0,
        "total": total,
        "remark": remark,
        "enable": enable,
        "expiryTime": expiry_time,
        "listen": listen,
        "port": port,
        "protocol": wire_protocol,
        "settings": _protocol_settings(tag, list(clients)),
        "streamSettings": stream_settings or {"network": "tcp", "security": "none"},
        "sniffing": sniffing or {"enabled": True, "destOverride": ["http", "tls"]},
    }


def reality_stream_settings(
    keys: DemoKeyPair,
    *,
    dest: str = "google.com:443",
    server_names: Sequence[str] = ("google.com",),
    short_ids: Optional[Sequence[str]] = None,
    fingerprint: str = "chrome",
    network: str = "tcp",
) -> dict:
    """``streamSettings`` for a VLESS Reality inbound."""
    return {
        "network": network,
        "security": "reality",
        "realitySettings": reality_config(
            keys, dest=dest, server_names=server_names, short_ids=short_ids, fingerprint=fingerprint
        ),
    }


def reality_config(
    keys: DemoKeyPair,
    *,
    dest: str = "google.com:443",
    server_names: Sequence[str] = ("google.com",),
    short_ids: Optional[Sequence[str]] = None,
    fingerprint: str = "chrome",
) -> dict:
    return {
        "show": False,
        "dest": dest,
        "xver": 0,
        "serverNames": list(server_names),
        "privateKey": keys.private_key,
        "shortIds": list(short_ids) if short_ids is not None else [generate_reality_short_id()],
        "settings": {"publicKey": keys.public_key, "fingerprint": fingerprint},
    }


def wireguard_client_config(
    keys: DemoKeyPair,
    allowed_ips: Sequence[str] = ("10.0.0.2/32",),
    keep_alive: int = 25,
) -> dict:
    return {
        "privateKey": keys.private_key,
        "publicKey": keys.public_key,
        "allowedIPs": list(allowed_ips),
        "keepAlive": keep_alive,
    }
