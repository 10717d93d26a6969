"""Verification of the bearer JWTs Vercel attaches to integration API calls.

Tokens are HS256-signed with the integration client secret and issued by
``https://vercel.com``.
"""

import jwt
from pydantic import BaseModel, ValidationError

from .errors import AuthInvalid
from .logging_config import get_logger

logger = get_logger(__name__)

ISSUER = "https://vercel.com"
ALGORITHMS = ["HS256"]


class Claims(BaseModel):
    installation_id: str
    user_id: str | None = None
    team_id: str | None = None
    iat: int | None = None
    iss: str


def parse_bearer(authorization: str | None) -> str:
    if not authorization or not authorization.startswith("Bearer "):
        raise AuthInvalid("Missing or invalid Authorization header")
    return authorization[len("Bearer ") :]


def verify_token(token: str, secret: str) -> Claims:
    """Decode and verify a token.

    Raises:
        AuthInvalid: On a bad signature, wrong issuer, expiry or missing claims.
    """
    try:
        payload = jwt.decode(
            token,
            secret,
            algorithms=ALGORITHMS,
            issuer=ISSUER,
            options={"require": ["iss"]},
        )
        return Claims.model_validate(payload)
    except (jwt.PyJWTError, ValidationError) as e:
        logger.warning("auth_token_rejected", error=str(e))
        raise AuthInvalid("Invalid token") from e
