"""Client Identity - derive the rate-limit key for a request behind N trusted proxies.

Invariants:
    - Pure function of (peer address, X-Forwarded-For, trusted hop count)
    - Never trusts more forwarding entries than trusted_hops
    - Falls back to the peer address, then to "unknown"
"""

from app.core.domain_types import ClientId

UNKNOWN_CLIENT = ClientId("unknown")


def resolve_client_id(
    peer: str | None, forwarded_for: str | None, trusted_hops: int = 1,
) -> ClientId:
    """Walk the proxy chain from the socket outward, skipping trusted hops.

    The peer is hop 0; X-Forwarded-For entries are read right to left
    because each proxy appends the address it received the request from.
    """
    chain = [peer] if peer else []
    if forwarded_for and trusted_hops > 0:
        entries = [e.strip() for e in forwarded_for.split(",") if e.strip()]
        chain.extend(reversed(entries))
    if not chain:
        return UNKNOWN_CLIENT
    index = min(max(trusted_hops, 0), len(chain) - 1)
    return ClientId(chain[index])
