"""Tests for the NWC credential generator."""

import re
from urllib.parse import parse_qs, urlsplit

import pytest

from src.nwc_credential.domain.generator import (
    NWC_SCHEME,
    CredentialGenerator,
    build_uri,
    normalize_relay,
    public_key_hex,
)

_HEX64 = re.compile(r"^[0-9a-f]{64}$")


class TestGenerate:
    def test_keys_are_64_char_hex_and_distinct(self) -> None:
        cred = CredentialGenerator("wss://relay.test").generate()
        assert _HEX64.match(cred.server_key)
        assert _HEX64.match(cred.user_key)
        assert _HEX64.match(cred.server_public_key)
        assert cred.server_key != cred.user_key

    def test_uri_binds_server_pubkey_relay_and_user_secret(self) -> None:
        cred = CredentialGenerator("wss://relay.test").generate()
        parts = urlsplit(cred.uri)
        query = parse_qs(parts.query)
        assert parts.scheme == NWC_SCHEME
        assert parts.netloc == cred.server_public_key
        assert query["relay"] == ["wss://relay.test/"]
        assert query["secret"] == [cred.user_key]
        assert "lud16" not in query

    def test_server_public_key_matches_server_secret(self) -> None:
        cred = CredentialGenerator("wss://relay.test").generate()
        assert public_key_hex(cred.server_key) == cred.server_public_key

    def test_every_generation_is_fresh(self) -> None:
        gen = CredentialGenerator("wss://relay.test")
        creds = [gen.generate() for _ in range(5)]
        keys = {c.server_key for c in creds} | {c.user_key for c in creds}
        assert len(keys) == 10


class TestPublicKey:
    def test_secp256k1_generator_point(self) -> None:
        # secret = 1 → G.x
        assert public_key_hex("00" * 31 + "01") == (
            "79be667ef9dcbbac55a06295ce870b07029bfcdb2dce28d959f2815b16f81798"
        )


class TestRelay:
    def test_empty_path_normalized(self) -> None:
        assert normalize_relay("wss://relay.test") == "wss://relay.test/"

    def test_path_and_port_kept(self) -> None:
        assert normalize_relay(" WSS://relay.test:7777/nostr ") == "wss://relay.test:7777/nostr"

    @pytest.mark.parametrize(
        "relay",
        ["https://relay.test", "relay.test", "wss://", "wss://relay.test:port", ""],
    )
    def test_invalid_relay_is_rejected_at_construction(self, relay: str) -> None:
        with pytest.raises(ValueError):
            CredentialGenerator(relay)


class TestBuildUri:
    def test_relay_is_percent_encoded(self) -> None:
        uri = build_uri("ab" * 32, "wss://relay.test/", "cd" * 32)
        assert uri == (
            f"nostr+walletconnect://{'ab' * 32}"
            f"?relay=wss%3A%2F%2Frelay.test%2F&secret={'cd' * 32}"
        )

    def test_optional_lud16(self) -> None:
        uri = build_uri("ab" * 32, "wss://relay.test/", "cd" * 32, lud16="alice@example.com")
        assert parse_qs(urlsplit(uri).query)["lud16"] == ["alice@example.com"]
