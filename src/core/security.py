"""Interaction request verification.

Discord signs every request it sends to the interactions endpoint with
the application's Ed25519 key. The signed payload is the
``X-Signature-Timestamp`` header value followed by the raw request body.
Unsigned or mis-signed requests must be answered with 401.
"""

from cryptography.exceptions import InvalidSignature
from cryptography.hazmat.primitives.asymmetric.ed25519 import Ed25519PublicKey

SIGNATURE_HEADER = "X-Signature-Ed25519"
TIMESTAMP_HEADER = "X-Signature-Timestamp"


def load_public_key(public_key_hex: str) -> Ed25519PublicKey:
    """Parse the hex-encoded public key shown in the developer portal.

    Raises:
        ValueError: The key is not 32 bytes of valid hex.
    """
    return Ed25519PublicKey.from_public_bytes(bytes.fromhex(public_key_hex))


def verify_interaction_signature(
    public_key_hex: str,
    signature_hex: str | None,
    timestamp: str | None,
    body: bytes,
) -> bool:
    """Check an interaction request signature.

    Args:
        public_key_hex: Application public key (hex).
        signature_hex: Value of the X-Signature-Ed25519 header.
        timestamp: Value of the X-Signature-Timestamp header.
        body: Raw request body, exactly as received.

    Returns:
        True if the signature is valid, False otherwise.
    """
    if not public_key_hex or not signature_hex or not timestamp:
        return False
    try:
        key = load_public_key(public_key_hex)
        key.verify(bytes.fromhex(signature_hex), timestamp.encode() + body)
    except (InvalidSignature, ValueError):
        return False
    return True
