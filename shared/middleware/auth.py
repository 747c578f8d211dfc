"""
shared/middleware/auth.py
Credential verification.

The bulk reminder checks its request flags before it looks at the
credential, so nothing here rejects a request on its own: the FastAPI
dependency only extracts the raw token and the service decides.
"""

import logging
from typing import Optional, Protocol

from fastapi import Depends, Query
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer
from jose import JWTError

from shared.schemas.schemas import TokenClaims
from shared.utils.errors import InvalidCredential
from shared.utils.security import verify_access_token

logger = logging.getLogger(__name__)

security = HTTPBearer(auto_error=False)


class TokenVerifier(Protocol):
    async def verify(self, token: str) -> TokenClaims: ...


def _claims_from_payload(payload: dict) -> TokenClaims:
    identity = payload.get("email")
    if not identity:
        raise InvalidCredential("Token has no email claim")
    return TokenClaims(identity_key=identity, supervisor=payload.get("supervisor") is True)


class FirebaseTokenVerifier:
    """Verifies Firebase Authentication ID tokens; supervisors carry a custom claim."""

    def __init__(self, app=None):
        self.app = app

    async def verify(self, token: str) -> TokenClaims:
        from firebase_admin import auth, exceptions

        try:
            payload = auth.verify_id_token(token, app=self.app)
        except (ValueError, exceptions.FirebaseError) as e:
            raise InvalidCredential(str(e)) from e
        return _claims_from_payload(payload)


class JwtTokenVerifier:
    """Verifies tokens minted by shared.utils.security.create_access_token."""

    async def verify(self, token: str) -> TokenClaims:
        try:
            payload = verify_access_token(token)
        except JWTError as e:
            raise InvalidCredential(str(e)) from e
        return _claims_from_payload(payload)


async def get_raw_token(
    token: Optional[str] = Query(None, description="Firebase Authentication ID token"),
    credentials: Optional[HTTPAuthorizationCredentials] = Depends(security),
) -> Optional[str]:
    """The credential from the ``token`` query parameter, else the Bearer header."""
    if token:
        return token
    if credentials:
        return credentials.credentials
    return None
