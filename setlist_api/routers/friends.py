from __future__ import annotations

from typing import List

from fastapi import APIRouter, Depends, Response, status

from setlist_api.routers.deps import current_user, get_services
from setlist_api.routers.schemas import FriendOut, FriendRequestBody, FriendshipOut, RespondFriendRequestBody
from setlist_api.services.auth_service import UserProfile
from setlist_api.services.container import Services

router = APIRouter(prefix="/friends", tags=["friends"])


@router.post("/request", status_code=status.HTTP_201_CREATED, response_model=FriendshipOut)
def send_request(
    body: FriendRequestBody,
    user: UserProfile = Depends(current_user),
    services: Services = Depends(get_services),
):
    return services.friends.send_request(user.id, body.identifier)


@router.patch("/request/{request_id}", response_model=FriendshipOut)
def respond_to_request(
    request_id: str,
    body: RespondFriendRequestBody,
    user: UserProfile = Depends(current_user),
    services: Services = Depends(get_services),
):
    return services.friends.respond(user.id, request_id, body.status)


@router.get("/pending", response_model=List[FriendOut])
def pending_requests(user: UserProfile = Depends(current_user), services: Services = Depends(get_services)):
    return services.friends.list_pending(user.id)


@router.get("", response_model=List[FriendOut])
def list_friends(user: UserProfile = Depends(current_user), services: Services = Depends(get_services)):
    return services.friends.list_friends(user.id)


@router.delete("/{friendship_id}", status_code=status.HTTP_204_NO_CONTENT)
def remove_friend(
    friendship_id: str,
    user: UserProfile = Depends(current_user),
    services: Services = Depends(get_services),
):
    services.friends.remove(user.id, friendship_id)
    return Response(status_code=status.HTTP_204_NO_CONTENT)
