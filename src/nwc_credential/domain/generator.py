"""NWC credential generator.

Produces two independent secp256k1 key pairs (server, user) and the
``nostr+walletconnect://`` URI that hands the user secret to a wallet client:

    nostr+walletconnect://<server pubkey>?relay=<percent-encoded relay>&secret=<user secret>

Secrets are 32-byte big-endian hex; public keys are the 32-byte x-only
(BIP-340) coordinate, which is what Nostr uses on the wire.
"""

from urllib.parse import quote, urlsplit, urlunsplit

from cryptography.hazmat.primitives.asymmetric import ec

from src.nwc_credential.domain.models import GeneratedCredential

NWC_SCHEME = "nostr+walletconnect"
_RELAY_SCHEMES = ("ws", "wss")
_KEY_BYTES = 32


def normalize_relay(relay: str) -> str:
    """Validate a relay address and return its canonical form.

    Raises ValueError for anything that is not a ws:// or wss:// URL with a host.
    An empty path is normalized to "/".
    """
    parts = urlsplit(relay.strip())
    if parts.scheme.lower() not in _RELAY_SCHEMES or not parts.hostname:
        raise ValueError(f"Invalid relay address: {relay!r}")
    _ = parts.port  # raises ValueError on a malformed port
    return urlunsplit(
        (parts.scheme.lower(), parts.netloc, parts.path or "/", parts.query, "")
    )


def _secret_hex(key: ec.EllipticCurvePrivateKey) -> str:
    return key.private_numbers().private_value.to_bytes(_KEY_BYTES, "big").hex()


def _xonly_public_hex(key: ec.EllipticCurvePrivateKey) -> str:
    return key.public_key().public_numbers().x.to_bytes(_KEY_BYTES, "big").hex()


def public_key_hex(secret_hex: str) -> str:
    """Derive the x-only public key from a hex-encoded secret."""
    key = ec.derive_private_key(int(secret_hex, 16), ec.SECP256K1())
    return _xonly_public_hex(key)


def build_uri(
    server_public_key: str,
    relay: str,
    secret: str,
    lud16: str | None = None,
) -> str:
    uri = f"{NWC_SCHEME}://{server_public_key}?relay={quote(relay, safe='')}&secret={secret}"
    if lud16:
        uri += f"&lud16={quote(lud16, safe='')}"
    return uri


class CredentialGenerator:
    """Stateless apart from the relay — instantiate once at startup, reuse across requests."""

    def __init__(self, relay: str) -> None:
        self._relay = normalize_relay(relay)

    @property
    def relay(self) -> str:
        return self._relay

    def generate(self) -> GeneratedCredential:
        # ec.generate_private_key draws from the OS CSPRNG via OpenSSL
        server = ec.generate_private_key(ec.SECP256K1())
        user = ec.generate_private_key(ec.SECP256K1())
        server_public_key = _xonly_public_hex(server)
        user_secret = _secret_hex(user)
        return GeneratedCredential(
            server_key=_secret_hex(server),
            user_key=user_secret,
            uri=build_uri(server_public_key, self._relay, user_secret),
            server_public_key=server_public_key,
        )
