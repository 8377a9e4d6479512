"""Song use cases: CRUD plus friendship-gated sharing."""

from __future__ import annotations

import logging
from typing import Any, Iterable, Optional

from setlist_api.core.errors import NotFoundError
from setlist_api.core.utils import utcnow
from setlist_api.domain import sharing
from setlist_api.domain.records import Song, SongSection, User
from setlist_api.repositories.collections import SONGS, USERS, Collection
from setlist_api.repositories.document_store import DocumentStore
from setlist_api.services.friends_service import FriendsService
from setlist_api.services.notification_service import NotificationService

logger = logging.getLogger(__name__)

UPDATABLE_FIELDS = {"name", "artist", "description", "bpm", "time_signature", "sections", "shared_with"}


class SongNotFoundError(NotFoundError):
    default_message = "Brano non trovato"


def _sections(values: Optional[Iterable[Any]]) -> list[SongSection]:
    result = []
    for value in values or []:
        if isinstance(value, SongSection):
            result.append(SongSection(name=value.name, bars=int(value.bars)))
        else:
            result.append(SongSection(name=value["name"], bars=int(value["bars"])))
    return result


class SongService:
    def __init__(
        self,
        store: DocumentStore,
        friends: FriendsService,
        notifications: Optional[NotificationService] = None,
    ) -> None:
        self.songs: Collection[Song] = Collection(store, SONGS, Song)
        self.users: Collection[User] = Collection(store, USERS, User)
        self.friends = friends
        self.notifications = notifications

    def _validate_targets(self, owner_id: str, targets: Iterable[str]) -> None:
        targets = list(targets)
        if targets:
            sharing.ensure_all_friends(targets, self.friends.friend_ids(owner_id))

    def _notify_shared(self, owner_id: str, song: Song, targets: Iterable[str]) -> None:
        if not self.notifications:
            return
        owner = self.users.get(owner_id)
        owner_name = owner.name if owner else "Un amico"
        for target in targets:
            self.notifications.notify_shared_song(target, owner_name, song.name)

    def create(
        self,
        user_id: str,
        name: str,
        bpm: int,
        time_signature: int,
        artist: Optional[str] = None,
        description: Optional[str] = None,
        sections: Optional[Iterable[Any]] = None,
        shared_with: Optional[Iterable[str]] = None,
    ) -> Song:
        targets = set(shared_with or [])
        self._validate_targets(user_id, targets)
        now = utcnow()
        song = self.songs.create(
            Song(
                user_id=user_id,
                name=name,
                artist=artist or None,
                description=description or None,
                bpm=bpm,
                time_signature=time_signature,
                sections=_sections(sections),
                shared_with=targets,
                created_at=now,
                updated_at=now,
            )
        )
        logger.info("Song %s created by %s", song.id, user_id)
        self._notify_shared(user_id, song, targets)
        return song

    def find_all(self, user_id: str) -> list[Song]:
        """Songs the user owns plus songs shared with them, each id once."""
        by_id: dict[str, Song] = {}
        for song in self.songs.find_by("userId", user_id) + self.songs.find_containing("sharedWith", user_id):
            by_id.setdefault(song.id, song)
        return list(by_id.values())

    def find_one(self, user_id: str, song_id: str) -> Song:
        song = self.songs.get(song_id)
        if not song:
            raise SongNotFoundError()
        sharing.require_read(song, user_id, "Non hai i permessi per accedere a questo brano")
        return song

    def update(self, user_id: str, song_id: str, changes: dict) -> Song:
        song = self.find_one(user_id, song_id)
        sharing.require_owner(song, user_id, "Solo il creatore può modificare questo brano")
        unknown = set(changes) - UPDATABLE_FIELDS
        if unknown:
            raise ValueError(f"Unknown song fields: {sorted(unknown)}")

        if changes.get("shared_with") is not None:
            self._validate_targets(user_id, changes["shared_with"])
            song.shared_with = set(changes["shared_with"])
        for key in ("name", "bpm", "time_signature"):
            if changes.get(key) is not None:
                setattr(song, key, changes[key])
        for key in ("artist", "description"):
            if key in changes:
                setattr(song, key, changes[key] or None)
        if changes.get("sections") is not None:
            song.sections = _sections(changes["sections"])
        song.updated_at = utcnow()
        return self.songs.save(song)

    def remove(self, user_id: str, song_id: str) -> None:
        song = self.find_one(user_id, song_id)
        sharing.require_owner(song, user_id, "Solo il creatore può eliminare questo brano")
        self.songs.delete(song_id)
        logger.info("Song %s deleted by %s", song_id, user_id)

    def share(self, owner_id: str, song_id: str, user_ids: Iterable[str]) -> Song:
        song = self.find_one(owner_id, song_id)
        sharing.require_owner(song, owner_id, "Solo il creatore può condividere questo brano")
        targets = set(user_ids)
        self._validate_targets(owner_id, targets)
        added = targets - song.shared_with
        song.shared_with = sharing.merge_shared(song.shared_with, targets)
        song.updated_at = utcnow()
        song = self.songs.save(song)
        logger.info("Song %s shared by %s with %d new user(s)", song_id, owner_id, len(added))
        self._notify_shared(owner_id, song, added)
        return song

    def unshare(self, owner_id: str, song_id: str, target_user_id: str) -> Song:
        song = self.find_one(owner_id, song_id)
        sharing.require_owner(song, owner_id, "Solo il creatore può rimuovere la condivisione")
        song.shared_with = sharing.without_shared(song.shared_with, target_user_id)
        song.updated_at = utcnow()
        return self.songs.save(song)
