"""Client Identity - trusted proxy hop handling for rate-limit keys."""

from app.core.client_identity import UNKNOWN_CLIENT, resolve_client_id


def test_no_forwarding_header_uses_peer():
    assert resolve_client_id("10.0.0.5", None, trusted_hops=1) == "10.0.0.5"


def test_one_trusted_hop_uses_rightmost_forwarded_entry():
    assert resolve_client_id("10.0.0.1", "203.0.113.9", trusted_hops=1) == "203.0.113.9"


def test_spoofed_left_entries_are_not_trusted():
    forwarded = "1.2.3.4, 203.0.113.9"
    assert resolve_client_id("10.0.0.1", forwarded, trusted_hops=1) == "203.0.113.9"


def test_two_trusted_hops():
    forwarded = "198.51.100.7, 10.0.0.2"
    assert resolve_client_id("10.0.0.1", forwarded, trusted_hops=2) == "198.51.100.7"


def test_zero_hops_ignores_forwarding_header():
    assert resolve_client_id("10.0.0.1", "203.0.113.9", trusted_hops=0) == "10.0.0.1"


def test_more_hops_than_entries_uses_leftmost():
    assert resolve_client_id("10.0.0.1", "203.0.113.9", trusted_hops=5) == "203.0.113.9"


def test_distinct_clients_behind_same_proxy_stay_distinct():
    a = resolve_client_id("10.0.0.1", "198.51.100.1", trusted_hops=1)
    b = resolve_client_id("10.0.0.1", "198.51.100.2", trusted_hops=1)
    assert a != b


def test_missing_everything_is_unknown():
    assert resolve_client_id(None, None) == UNKNOWN_CLIENT
    assert resolve_client_id(None, " , ") == UNKNOWN_CLIENT
