from __future__ import annotations

from typing import List

from fastapi import APIRouter, Depends, Response, status

from setlist_api.routers.deps import current_user, get_services
from setlist_api.routers.schemas import (
    AddSongBody,
    CreateSetlistBody,
    ReorderSongsBody,
    SetlistOut,
    ShareBody,
    UpdateSetlistBody,
)
from setlist_api.services.auth_service import UserProfile
from setlist_api.services.container import Services

router = APIRouter(prefix="/setlists", tags=["setlists"])


@router.post("", status_code=status.HTTP_201_CREATED, response_model=SetlistOut)
def create_setlist(
    body: CreateSetlistBody,
    user: UserProfile = Depends(current_user),
    services: Services = Depends(get_services),
):
    return services.setlists.create(user.id, body.name, body.description, body.shared_with)


@router.get("", response_model=List[SetlistOut])
def list_setlists(user: UserProfile = Depends(current_user), services: Services = Depends(get_services)):
    return services.setlists.find_all(user.id)


@router.get("/{setlist_id}", response_model=SetlistOut)
def get_setlist(
    setlist_id: str,
    user: UserProfile = Depends(current_user),
    services: Services = Depends(get_services),
):
    return services.setlists.find_one(user.id, setlist_id)


@router.patch("/{setlist_id}", response_model=SetlistOut)
def update_setlist(
    setlist_id: str,
    body: UpdateSetlistBody,
    user: UserProfile = Depends(current_user),
    services: Services = Depends(get_services),
):
    return services.setlists.update(user.id, setlist_id, body.name, body.description, body.shared_with)


@router.delete("/{setlist_id}", status_code=status.HTTP_204_NO_CONTENT)
def delete_setlist(
    setlist_id: str,
    user: UserProfile = Depends(current_user),
    services: Services = Depends(get_services),
):
    services.setlists.remove(user.id, setlist_id)
    return Response(status_code=status.HTTP_204_NO_CONTENT)


@router.post("/{setlist_id}/songs", response_model=SetlistOut)
def add_song(
    setlist_id: str,
    body: AddSongBody,
    user: UserProfile = Depends(current_user),
    services: Services = Depends(get_services),
):
    return services.setlists.add_song(user.id, setlist_id, body.song_id)


@router.delete("/{setlist_id}/songs/{song_id}", response_model=SetlistOut)
def remove_song(
    setlist_id: str,
    song_id: str,
    user: UserProfile = Depends(current_user),
    services: Services = Depends(get_services),
):
    return services.setlists.remove_song(user.id, setlist_id, song_id)


@router.patch("/{setlist_id}/reorder", response_model=SetlistOut)
def reorder_songs(
    setlist_id: str,
    body: ReorderSongsBody,
    user: UserProfile = Depends(current_user),
    services: Services = Depends(get_services),
):
    return services.setlists.reorder_songs(user.id, setlist_id, body.song_ids)


@router.post("/{setlist_id}/share", response_model=SetlistOut)
def share_setlist(
    setlist_id: str,
    body: ShareBody,
    user: UserProfile = Depends(current_user),
    services: Services = Depends(get_services),
):
    return services.setlists.share(user.id, setlist_id, body.user_ids)


@router.delete("/{setlist_id}/share/{target_user_id}", response_model=SetlistOut)
def unshare_setlist(
    setlist_id: str,
    target_user_id: str,
    user: UserProfile = Depends(current_user),
    services: Services = Depends(get_services),
):
    return services.setlists.unshare(user.id, setlist_id, target_user_id)
