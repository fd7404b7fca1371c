from __future__ import annotations

from fastapi import APIRouter, Depends

from quicktweet.domain.accounts import clean_identifier
from quicktweet.routers.deps import Caller, current_caller, get_services, require_admin
from quicktweet.services.registry import ServiceRegistry

router = APIRouter(prefix="/admin", tags=["admin"])


@router.get("/requests")
def pending_requests(caller: Caller = Depends(current_caller), services: ServiceRegistry = Depends(get_services)):
    return services.ledger.list_pending(caller.role)


@router.put("/requests/{username}")
def approve_request(username: str, _: Caller = Depends(require_admin), services: ServiceRegistry = Depends(get_services)):
    return services.lifecycle.approve(clean_identifier(username))


@router.delete("/requests/{username}")
def reject_request(username: str, _: Caller = Depends(require_admin), services: ServiceRegistry = Depends(get_services)):
    return {"message": services.lifecycle.reject(clean_identifier(username))}


@router.put("/users/{user_id}")
def toggle_role(user_id: int, caller: Caller = Depends(current_caller), services: ServiceRegistry = Depends(get_services)):
    return {"message": services.directory.toggle_role(user_id, caller.username)}
