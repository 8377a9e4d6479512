from __future__ import annotations

from typing import List

from fastapi import APIRouter, Depends, Response, status

from setlist_api.routers.deps import current_user, get_services
from setlist_api.routers.schemas import CreateSongBody, ShareBody, SongOut, UpdateSongBody
from setlist_api.services.auth_service import UserProfile
from setlist_api.services.container import Services

router = APIRouter(prefix="/songs", tags=["songs"])


@router.post("", status_code=status.HTTP_201_CREATED, response_model=SongOut)
def create_song(
    body: CreateSongBody,
    user: UserProfile = Depends(current_user),
    services: Services = Depends(get_services),
):
    return services.songs.create(
        user.id,
        name=body.name,
        bpm=body.bpm,
        time_signature=body.time_signature,
        artist=body.artist,
        description=body.description,
        sections=[s.model_dump() for s in body.sections or []],
        shared_with=body.shared_with,
    )


@router.get("", response_model=List[SongOut])
def list_songs(user: UserProfile = Depends(current_user), services: Services = Depends(get_services)):
    return services.songs.find_all(user.id)


@router.get("/{song_id}", response_model=SongOut)
def get_song(song_id: str, user: UserProfile = Depends(current_user), services: Services = Depends(get_services)):
    return services.songs.find_one(user.id, song_id)


@router.patch("/{song_id}", response_model=SongOut)
def update_song(
    song_id: str,
    body: UpdateSongBody,
    user: UserProfile = Depends(current_user),
    services: Services = Depends(get_services),
):
    changes = body.model_dump(exclude_unset=True)
    return services.songs.update(user.id, song_id, changes)


@router.delete("/{song_id}", status_code=status.HTTP_204_NO_CONTENT)
def delete_song(song_id: str, user: UserProfile = Depends(current_user), services: Services = Depends(get_services)):
    services.songs.remove(user.id, song_id)
    return Response(status_code=status.HTTP_204_NO_CONTENT)


@router.post("/{song_id}/share", response_model=SongOut)
def share_song(
    song_id: str,
    body: ShareBody,
    user: UserProfile = Depends(current_user),
    services: Services = Depends(get_services),
):
    return services.songs.share(user.id, song_id, body.user_ids)


@router.delete("/{song_id}/share/{target_user_id}", response_model=SongOut)
def unshare_song(
    song_id: str,
    target_user_id: str,
    user: UserProfile = Depends(current_user),
    services: Services = Depends(get_services),
):
    return services.songs.unshare(user.id, song_id, target_user_id)
