"""Signing and verification of bearer tokens.

Tokens are HS256 JWTs whose ``id`` claim carries the user identifier. Both
functions are pure: they touch neither the network nor the document store.
"""

import logging
from dataclasses import dataclass
from datetime import datetime, timedelta, timezone
from typing import Sequence

import jwt

from notecode_api.errors import InternalError, InvalidTokenError

logger = logging.getLogger(__name__)

SUBJECT_CLAIM = "id"


@dataclass(frozen=True)
class TokenClaims:
    subject: str
    expires_at: datetime


def _require_secret(secret: str) -> None:
    if not secret:
        raise InternalError("Token secret is not configured")


def verify(token: str, secret: str, algorithms: Sequence[str] = ("HS256",)) -> TokenClaims:
    """Check the signature and expiry of ``token`` and return its claims.

    Raises:
        InvalidTokenError: bad signature, expired, malformed, or no usable subject.
        InternalError: no secret configured.
    """
    _require_secret(secret)
    try:
        payload = jwt.decode(
            token,
            secret,
            algorithms=list(algorithms),
            options={"require": ["exp"]},
        )
    except jwt.ExpiredSignatureError as e:
        raise InvalidTokenError("Token expired") from e
    except jwt.InvalidTokenError as e:
        raise InvalidTokenError(f"Token rejected: {type(e).__name__}") from e

    subject = payload.get(SUBJECT_CLAIM)
    if not isinstance(subject, str) or not subject:
        raise InvalidTokenError("Token has no subject")

    return TokenClaims(
        subject=subject,
        expires_at=datetime.fromtimestamp(payload["exp"], tz=timezone.utc),
    )


def issue(
    subject: str,
    secret: str,
    expires_in: timedelta = timedelta(days=30),
    algorithm: str = "HS256",
) -> str:
    """Mint a token for ``subject`` that expires after ``expires_in``."""
    _require_secret(secret)
    now = datetime.now(timezone.utc)
    payload = {
        SUBJECT_CLAIM: subject,
        "iat": now,
        "exp": now + expires_in,
    }
    logger.info(f"Issued token for user {subject} expiring {payload['exp'].isoformat()}")
    return jwt.encode(payload, secret, algorithm=algorithm)
