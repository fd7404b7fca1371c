"""Request-scoped helpers shared by the routers."""
from __future__ import annotations

from dataclasses import dataclass

from fastapi import Depends, HTTPException, Request

from quicktweet.domain.accounts import Role, clean_identifier
from quicktweet.domain.errors import NotFound, Unauthorized
from quicktweet.services.registry import ServiceRegistry

AUTH_HEADER = "X-Auth-User"


@dataclass
class Caller:
    username: str
    role: str

    @property
    def is_admin(self) -> bool:
        return self.role == Role.ADMIN.value


def get_services(request: Request) -> ServiceRegistry:
    return request.app.state.services


def current_caller(request: Request, services: ServiceRegistry = Depends(get_services)) -> Caller:
    """Identity verified upstream and forwarded in a trusted header."""
    username = clean_identifier(request.headers.get(AUTH_HEADER))
    if not username:
        raise HTTPException(status_code=401, detail="Missing caller identity")
    try:
        user = services.directory.get_by_username(username)
    except NotFound:
        raise HTTPException(status_code=401, detail="Unknown caller") from None
    return Caller(username=user.username, role=user.role)


def require_admin(caller: Caller = Depends(current_caller)) -> Caller:
    if not caller.is_admin:
        raise Unauthorized("User is not authorized to access this.")
    return caller


def ensure_self_or_admin(caller: Caller, username: str) -> None:
    if caller.username != username and not caller.is_admin:
        raise Unauthorized("Callers may only act on their own account.")
