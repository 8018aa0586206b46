"""
Module: test_network.py
Description: Unit tests for the client network allowlist.
"""

import pytest

from formrelay.auth.network import is_address_allowed, parse_networks

YANDEX_FORMS = parse_networks(["2a02:6b8:c00::/40"])


class TestIsAddressAllowed:
    """Test cases for is_address_allowed."""

    def test_empty_allowlist_allows_everything(self):
        assert is_address_allowed("203.0.113.5", [])
        assert is_address_allowed(None, [])

    def test_address_inside_network(self):
        assert is_address_allowed("2a02:6b8:c0e:500:1::10", YANDEX_FORMS)

    def test_address_outside_network(self):
        assert not is_address_allowed("2a02:6b9::1", YANDEX_FORMS)

    def test_ipv4_rejected_by_ipv6_allowlist(self):
        assert not is_address_allowed("203.0.113.5", YANDEX_FORMS)

    @pytest.mark.parametrize("address", [None, "", "testclient", "not-an-ip"])
    def test_unparseable_address_rejected(self, address):
        assert not is_address_allowed(address, YANDEX_FORMS)

    def test_ipv4_mapped_address_matches_ipv4_network(self):
        networks = parse_networks(["10.0.0.0/8"])

        assert is_address_allowed("::ffff:10.1.2.3", networks)
