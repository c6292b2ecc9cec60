"""Bearer token generation and hashing."""

import hashlib
import secrets

# 32 bytes = 256 bits of entropy, rendered as 64 hex chars
TOKEN_BYTES = 32


def generate_token() -> str:
    """Generate an unguessable bearer token from the OS CSPRNG."""
    return secrets.token_hex(TOKEN_BYTES)


def hash_token(token: str) -> str:
    """One-way storage digest of a raw token (SHA-256, hex)."""
    return hashlib.sha256(token.encode("utf-8")).hexdigest()
