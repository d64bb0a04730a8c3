"""
Bearer-token guard for the API.

Token issuance lives elsewhere; this module only resolves a presented token to
a user and role through whatever ``TokenResolver`` the app was built with.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import Optional

from fastapi import Depends, HTTPException, Request
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer

ROLE_ADMIN = "admin"
ROLE_GUEST = "guest"

bearer_scheme = HTTPBearer(auto_error=False)


@dataclass(frozen=True)
class AuthUser:
    id: str
    role: str

    @property
    def is_admin(self) -> bool:
        return self.role == ROLE_ADMIN


class TokenResolver(ABC):

    @abstractmethod
    async def resolve(self, token: str) -> Optional[AuthUser]:
        pass


class StaticTokenResolver(TokenResolver):
    """Fixed token -> role table, e.g. from ADMIN_API_TOKENS / GUEST_API_TOKENS."""

    def __init__(self, admin_tokens=(), guest_tokens=()):
        self._users = {}
        for i, token in enumerate(guest_tokens):
            self._users[token] = AuthUser(id=f"guest-{i}", role=ROLE_GUEST)
        for i, token in enumerate(admin_tokens):
            self._users[token] = AuthUser(id=f"admin-{i}", role=ROLE_ADMIN)

    async def resolve(self, token):
        return self._users.get(token)


async def get_current_user(
    request: Request,
    credentials: Optional[HTTPAuthorizationCredentials] = Depends(bearer_scheme),
) -> AuthUser:
    if credentials is None or not credentials.credentials:
        raise HTTPException(status_code=401, detail="Unauthorized")
    resolver: TokenResolver = request.app.state.token_resolver
    user = await resolver.resolve(credentials.credentials)
    if user is None:
        raise HTTPException(status_code=401, detail="Unauthorized")
    return user


async def require_admin(user: AuthUser = Depends(get_current_user)) -> AuthUser:
    if not user.is_admin:
        raise HTTPException(status_code=403, detail="Forbidden - Admin access required")
    return user
