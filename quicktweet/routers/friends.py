from __future__ import annotations

from fastapi import APIRouter, Depends
from pydantic import BaseModel

from quicktweet.domain.accounts import clean_identifier
from quicktweet.routers.deps import Caller, current_caller, ensure_self_or_admin, get_services
from quicktweet.services.registry import ServiceRegistry

router = APIRouter(prefix="/users/friends", tags=["friends"])


class FriendPayload(BaseModel):
    friend_username: str = ""


@router.get("/requests/{username}")
def incoming_requests(username: str, _: Caller = Depends(current_caller), services: ServiceRegistry = Depends(get_services)):
    return services.friends.list_incoming_requests(clean_identifier(username))


@router.put("/requests/{username}")
def send_request(
    username: str,
    payload: FriendPayload,
    caller: Caller = Depends(current_caller),
    services: ServiceRegistry = Depends(get_services),
):
    username = clean_identifier(username)
    ensure_self_or_admin(caller, username)
    return {"message": services.friends.send_request(username, clean_identifier(payload.friend_username))}


@router.get("/{username}")
def list_friends(username: str, _: Caller = Depends(current_caller), services: ServiceRegistry = Depends(get_services)):
    return services.friends.list_friends(clean_identifier(username))


@router.put("/{username}")
def add_friend(
    username: str,
    payload: FriendPayload,
    caller: Caller = Depends(current_caller),
    services: ServiceRegistry = Depends(get_services),
):
    username = clean_identifier(username)
    ensure_self_or_admin(caller, username)
    return {"message": services.friends.accept_direct(username, clean_identifier(payload.friend_username))}


@router.post("/{username}")
def remove_friend(
    username: str,
    payload: FriendPayload,
    caller: Caller = Depends(current_caller),
    services: ServiceRegistry = Depends(get_services),
):
    username = clean_identifier(username)
    ensure_self_or_admin(caller, username)
    return {"message": services.friends.remove(username, clean_identifier(payload.friend_username))}
