"""PKCE (RFC 7636) helpers."""
import base64
import hashlib
import secrets

CODE_CHALLENGE_METHOD = "S256"


def generate_code_verifier(length: int = 64) -> str:
    """Random verifier of ``length`` characters (43-128) from the unreserved set."""
    if not 43 <= length <= 128:
        raise ValueError("PKCE code verifier length must be between 43 and 128")
    # token_urlsafe yields ~1.3 chars per byte; trim to the exact length
    return secrets.token_urlsafe(length)[:length]


def code_challenge(code_verifier: str) -> str:
    """S256 challenge: base64url(sha256(verifier)) without padding."""
    digest = hashlib.sha256(code_verifier.encode("ascii")).digest()
    return base64.urlsafe_b64encode(digest).rstrip(b"=").decode("ascii")
