import ipaddress

from fastapi import Request

from wallet_gateway.core.config import Environment, settings


def is_trusted_proxy(host: str | None, trusted: list[str]) -> bool:
    """Check `host` against trusted proxy IPs and CIDR networks."""
    if not host:
        return False

    try:
        address = ipaddress.ip_address(host.strip())
    except ValueError:
        return False

    for entry in trusted:
        try:
            if address in ipaddress.ip_network(entry, strict=False):
                return True
        except ValueError:
            continue

    return False


def get_client_ip(request: Request) -> str:
    """
    Get client IP address from the connection, or from proxy headers when the
    connection comes from a trusted proxy

    X-Forwarded-For is read right to left and the first hop that is not a
    trusted proxy wins; entries further left are whatever the client sent.

    Args:
        request: FastAPI request object

    Returns:
        Client IP address as a string
    """
    if settings.current_environment == Environment.LOCAL:
        return "localhost"

    peer = request.client.host if request.client else None
    trusted = settings.trusted_proxies_list

    if not is_trusted_proxy(peer, trusted):
        return peer or "unknown"

    if "X-Forwarded-For" in request.headers:
        hops = [hop.strip() for hop in request.headers["X-Forwarded-For"].split(",")]
        hops = [hop for hop in hops if hop]
        for hop in reversed(hops):
            if not is_trusted_proxy(hop, trusted):
                return hop
        if hops:
            return hops[0]

    if "X-Real-IP" in request.headers:
        real_ip = request.headers["X-Real-IP"].strip()
        if real_ip:
            return real_ip

    return peer or "unknown"


def validate_content_type(
    content_type: str | None,
    allowed_types: tuple[str, ...] = ("application/json",),
) -> bool:
    """
    Check a Content-Type header against allowed media types.

    Parameters such as `; charset=utf-8` are ignored.
    """
    if not content_type:
        return False

    media_type = content_type.split(";", 1)[0].strip().lower()
    return media_type in allowed_types


def mask_token(token: str, visible: int = 20) -> str:
    """Shorten a token for log output."""
    if len(token) <= visible:
        return token
    return f"{token[:visible]}..."
