from __future__ import annotations

from typing import Optional

from fastapi import APIRouter, Depends
from pydantic import BaseModel, Field

from quicktweet.domain.accounts import RegistrationCandidate, clean_identifier
from quicktweet.routers.deps import Caller, current_caller, ensure_self_or_admin, get_services
from quicktweet.services.registry import ServiceRegistry

router = APIRouter(prefix="/users", tags=["users"])


class RegisterPayload(BaseModel):
    username: str = ""
    email: str = ""
    password: str = ""
    security_question: str = ""
    security_answer: str = ""
    bio: Optional[str] = None
    photo: Optional[str] = None
    interests: list[str] = Field(default_factory=list)


class ProfilePayload(BaseModel):
    bio: Optional[str] = None
    photo: Optional[str] = None
    status: Optional[str] = None
    interests: list[str] = Field(default_factory=list)


class StatusPayload(BaseModel):
    status: str = ""


class InterestsPayload(BaseModel):
    interests: list[str] = Field(default_factory=list)


@router.post("", status_code=201)
def register(payload: RegisterPayload, services: ServiceRegistry = Depends(get_services)):
    candidate = RegistrationCandidate(
        username=clean_identifier(payload.username),
        email=payload.email.strip(),
        password=payload.password,
        security_question=payload.security_question,
        security_answer=payload.security_answer,
        bio=payload.bio,
        photo=payload.photo,
        interests=payload.interests,
    )
    return services.lifecycle.register(candidate)


@router.get("")
def list_users(_: Caller = Depends(current_caller), services: ServiceRegistry = Depends(get_services)):
    return services.directory.list_users()


@router.get("/search")
def search_users(query: str = "", _: Caller = Depends(current_caller), services: ServiceRegistry = Depends(get_services)):
    return services.directory.search(query)


@router.post("/interests")
def users_by_interests(
    payload: InterestsPayload,
    _: Caller = Depends(current_caller),
    services: ServiceRegistry = Depends(get_services),
):
    return services.directory.find_by_interests(payload.interests)


@router.get("/username/{username}")
def get_by_username(username: str, _: Caller = Depends(current_caller), services: ServiceRegistry = Depends(get_services)):
    return services.directory.get_by_username(clean_identifier(username))


@router.get("/status/{username}")
def get_status(username: str, _: Caller = Depends(current_caller), services: ServiceRegistry = Depends(get_services)):
    return {"status": services.directory.get_status(clean_identifier(username))}


@router.put("/status/{username}")
def update_status(
    username: str,
    payload: StatusPayload,
    caller: Caller = Depends(current_caller),
    services: ServiceRegistry = Depends(get_services),
):
    username = clean_identifier(username)
    ensure_self_or_admin(caller, username)
    return {"status": services.directory.update_status(username, payload.status)}


@router.get("/{user_id}")
def get_by_id(user_id: int, _: Caller = Depends(current_caller), services: ServiceRegistry = Depends(get_services)):
    return services.directory.get_by_id(user_id)


@router.put("/{username}")
def update_profile(
    username: str,
    payload: ProfilePayload,
    caller: Caller = Depends(current_caller),
    services: ServiceRegistry = Depends(get_services),
):
    username = clean_identifier(username)
    ensure_self_or_admin(caller, username)
    return services.directory.update_profile(
        username,
        bio=payload.bio,
        photo=payload.photo,
        status=payload.status,
        interests=payload.interests,
    )


@router.delete("/{user_id}")
def delete_account(user_id: int, caller: Caller = Depends(current_caller), services: ServiceRegistry = Depends(get_services)):
    target = services.directory.get_by_id(user_id)
    ensure_self_or_admin(caller, target.username)
    report = services.lifecycle.delete_approved_account(user_id)
    return {"message": "User deleted", "removed_edges": report.total}
