"""Token helpers for password reset."""
import hashlib
import secrets


def generate_reset_token() -> str:
    """Return a 32-byte random token, hex encoded (64 characters)."""
    return secrets.token_hex(32)


def hash_token(token: str) -> str:
    """SHA-256 hex digest; only this digest is ever persisted."""
    return hashlib.sha256(token.encode()).hexdigest()
