"""
Security utilities for authentication and authorization
Verifies Clerk session tokens and enforces role checks
"""

from typing import Optional, Dict, Any, List
from jose import JWTError, jwt
from fastapi import Depends, Request
from fastapi.security import HTTPBearer, HTTPAuthorizationCredentials

from .config import Settings
from .exceptions import UnauthorizedException, ForbiddenException

# Security scheme
security = HTTPBearer(auto_error=False)

class ClerkTokenVerifier:
    """Decode and validate session JWTs issued by Clerk"""

    def __init__(
        self,
        key: Optional[str],
        algorithm: str = "RS256",
        authorized_parties: Optional[List[str]] = None
    ):
        self.key = key
        self.algorithm = algorithm
        self.authorized_parties = authorized_parties or []

    @classmethod
    def from_settings(cls, settings: Settings) -> "ClerkTokenVerifier":
        return cls(
            key=settings.CLERK_JWT_KEY,
            algorithm=settings.CLERK_JWT_ALGORITHM,
            authorized_parties=settings.CLERK_AUTHORIZED_PARTIES
        )

    def decode_token(self, token: str) -> Dict[str, Any]:
        """Decode and validate JWT token"""
        if not self.key:
            raise UnauthorizedException("Authentication is not configured")

        try:
            payload = jwt.decode(
                token,
                self.key,
                algorithms=[self.algorithm],
                options={"verify_aud": False}
            )
        except JWTError:
            raise UnauthorizedException("Invalid authentication credentials")

        # Clerk puts the requesting origin in `azp`
        azp = payload.get("azp")
        if self.authorized_parties and azp and azp not in self.authorized_parties:
            raise UnauthorizedException("Invalid authorized party")

        if not payload.get("sub"):
            raise UnauthorizedException("Token has no subject")

        return payload

    @staticmethod
    def to_user(payload: Dict[str, Any]) -> Dict[str, Any]:
        metadata = payload.get("metadata") or payload.get("public_metadata") or {}
        return {
            "id": payload["sub"],
            "role": metadata.get("role"),
            "email": payload.get("email"),
            "session_id": payload.get("sid"),
        }

# Dependency to get current user from token
async def get_current_user(
    request: Request,
    credentials: Optional[HTTPAuthorizationCredentials] = Depends(security)
) -> Dict[str, Any]:
    """Extract and validate user from the Clerk session token"""
    if credentials is None:
        raise UnauthorizedException("Not authenticated")

    verifier: ClerkTokenVerifier = request.app.state.token_verifier
    payload = verifier.decode_token(credentials.credentials)
    user = verifier.to_user(payload)

    # Rate limiter keys on this
    request.state.user_id = user["id"]
    return user

# Role-based access control
def require_role(allowed_roles: list[str]):
    """Dependency factory to check user role"""
    async def role_checker(current_user: dict = Depends(get_current_user)):
        if current_user.get("role") not in allowed_roles:
            raise ForbiddenException("Insufficient permissions")
        return current_user
    return role_checker

require_admin = require_role(["admin"])
