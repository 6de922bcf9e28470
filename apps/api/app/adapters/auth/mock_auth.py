"""Mock auth verifier for local development and tests."""

from app.adapters.auth.base import AuthVerificationError, TokenVerifier
from app.schemas.auth import AuthPrincipal


class MockTokenVerifier(TokenVerifier):
    """Accepts deterministic test tokens only.

    Expected token format:
    - ``test:<user_id>``
    - ``test:<user_id>:<claimed_role>``
    - ``test:<user_id>:<claimed_role>:<email>``

    The claimed role is carried through untouched so tests can prove it is
    ignored by permission checks.
    """

    def verify_token(self, token: str) -> AuthPrincipal:
        parts = token.split(":")
        if len(parts) not in (2, 3, 4) or parts[0] != "test":
            raise AuthVerificationError("Invalid bearer token")

        user_id = parts[1].strip()
        if not user_id:
            raise AuthVerificationError("Bearer token missing user identity")

        claimed_role = parts[2].strip() if len(parts) >= 3 else ""
        email = parts[3].strip() if len(parts) == 4 else ""

        return AuthPrincipal(
            user_id=user_id,
            claimed_role=claimed_role or None,
            email=email or None,
        )


__all__ = ["MockTokenVerifier"]
