"""
Authentication gate for protected routes.

Attached to the files router as a router-level dependency, so it runs before
any handler: a request without a valid bearer token is answered 401 and never
reaches the file service.
"""

import logging
from typing import Optional

from fastapi import Depends, Header, Request

from database import DocumentStore
from notecode_api.auth import token_codec
from notecode_api.auth.identity import IdentityResolver, UserRecord
from notecode_api.config.settings import Settings
from notecode_api.dependencies import get_app_settings, get_document_store
from notecode_api.errors import InternalError, MissingCredentialError, UnauthorizedError

logger = logging.getLogger(__name__)

BEARER_PREFIX = "Bearer "


def extract_bearer_token(authorization: Optional[str]) -> str:
    """Return the token from an ``Authorization: Bearer <token>`` header value."""
    if not authorization or not authorization.startswith(BEARER_PREFIX):
        raise MissingCredentialError()
    token = authorization[len(BEARER_PREFIX):]
    if not token or any(char.isspace() for char in token):
        raise MissingCredentialError()
    return token


def authenticate(
    request: Request,
    authorization: Optional[str] = Header(default=None),
    settings: Settings = Depends(get_app_settings),
    store: DocumentStore = Depends(get_document_store),
) -> UserRecord:
    """Resolve the caller's identity or reject the request."""
    token = extract_bearer_token(authorization)
    claims = token_codec.verify(token, settings.jwt_secret, [settings.jwt_algorithm])

    try:
        identity = IdentityResolver(store).resolve(claims.subject)
    except UnauthorizedError:
        raise
    except Exception as e:
        logger.exception(f"Identity lookup failed for {request.url.path}: {e}")
        raise InternalError(f"Identity lookup failed: {e}") from e

    logger.debug(f"Authenticated user {identity.id} for {request.method} {request.url.path}")
    return identity
