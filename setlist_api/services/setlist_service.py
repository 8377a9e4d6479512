"""Setlist use cases: ordered song lists with friendship-gated sharing."""

from __future__ import annotations

import logging
from typing import Iterable, Optional

from setlist_api.core.errors import NotFoundError
from setlist_api.core.utils import utcnow
from setlist_api.domain import sharing
from setlist_api.domain.records import Setlist, User
from setlist_api.repositories.collections import SETLISTS, USERS, Collection
from setlist_api.repositories.document_store import DocumentStore
from setlist_api.services.friends_service import FriendsService
from setlist_api.services.notification_service import NotificationService
from setlist_api.services.song_service import SongService

logger = logging.getLogger(__name__)


class SetlistNotFoundError(NotFoundError):
    default_message = "Setlist non trovata"


class SetlistService:
    def __init__(
        self,
        store: DocumentStore,
        friends: FriendsService,
        songs: SongService,
        notifications: Optional[NotificationService] = None,
    ) -> None:
        self.setlists: Collection[Setlist] = Collection(store, SETLISTS, Setlist)
        self.users: Collection[User] = Collection(store, USERS, User)
        self.friends = friends
        self.songs = songs
        self.notifications = notifications

    def _validate_targets(self, owner_id: str, targets: Iterable[str]) -> None:
        targets = list(targets)
        if targets:
            sharing.ensure_all_friends(targets, self.friends.friend_ids(owner_id))

    def _notify_shared(self, owner_id: str, setlist: Setlist, targets: Iterable[str]) -> None:
        if not self.notifications:
            return
        owner = self.users.get(owner_id)
        owner_name = owner.name if owner else "Un amico"
        for target in targets:
            self.notifications.notify_shared_setlist(target, owner_name, setlist.name)

    def _owned(self, user_id: str, setlist_id: str) -> Setlist:
        setlist = self.find_one(user_id, setlist_id)
        sharing.require_owner(setlist, user_id, "Solo il creatore può modificare questa setlist")
        return setlist

    def _touch(self, setlist: Setlist) -> Setlist:
        setlist.updated_at = utcnow()
        return self.setlists.save(setlist)

    def create(
        self,
        user_id: str,
        name: str,
        description: Optional[str] = None,
        shared_with: Optional[Iterable[str]] = None,
    ) -> Setlist:
        targets = set(shared_with or [])
        self._validate_targets(user_id, targets)
        now = utcnow()
        setlist = self.setlists.create(
            Setlist(
                user_id=user_id,
                name=name,
                description=description or None,
                songs=[],
                shared_with=targets,
                created_at=now,
                updated_at=now,
            )
        )
        logger.info("Setlist %s created by %s", setlist.id, user_id)
        self._notify_shared(user_id, setlist, targets)
        return setlist

    def find_all(self, user_id: str) -> list[Setlist]:
        by_id: dict[str, Setlist] = {}
        owned = self.setlists.find_by("userId", user_id)
        shared = self.setlists.find_containing("sharedWith", user_id)
        for setlist in owned + shared:
            by_id.setdefault(setlist.id, setlist)
        return list(by_id.values())

    def find_one(self, user_id: str, setlist_id: str) -> Setlist:
        setlist = self.setlists.get(setlist_id)
        if not setlist:
            raise SetlistNotFoundError()
        sharing.require_read(setlist, user_id, "Non hai i permessi per accedere a questa setlist")
        return setlist

    def update(
        self,
        user_id: str,
        setlist_id: str,
        name: Optional[str] = None,
        description: Optional[str] = None,
        shared_with: Optional[Iterable[str]] = None,
    ) -> Setlist:
        setlist = self._owned(user_id, setlist_id)
        if shared_with is not None:
            targets = set(shared_with)
            self._validate_targets(user_id, targets)
            setlist.shared_with = targets
        if name is not None:
            setlist.name = name
        if description is not None:
            setlist.description = description or None
        return self._touch(setlist)

    def remove(self, user_id: str, setlist_id: str) -> None:
        self._owned(user_id, setlist_id)
        self.setlists.delete(setlist_id)
        logger.info("Setlist %s deleted by %s", setlist_id, user_id)

    # -------------------------------------- songs --------------------------------------
    def add_song(self, user_id: str, setlist_id: str, song_id: str) -> Setlist:
        setlist = self._owned(user_id, setlist_id)
        # the owner must be able to read the song (own or shared with them)
        self.songs.find_one(user_id, song_id)
        if song_id in setlist.songs:
            return setlist
        setlist.songs.append(song_id)
        return self._touch(setlist)

    def remove_song(self, user_id: str, setlist_id: str, song_id: str) -> Setlist:
        setlist = self._owned(user_id, setlist_id)
        if song_id not in setlist.songs:
            return setlist
        setlist.songs = [s for s in setlist.songs if s != song_id]
        return self._touch(setlist)

    def reorder_songs(self, user_id: str, setlist_id: str, song_ids: list[str]) -> Setlist:
        setlist = self._owned(user_id, setlist_id)
        setlist.songs = sharing.validate_reorder(setlist.songs, list(song_ids))
        return self._touch(setlist)

    # -------------------------------------- sharing --------------------------------------
    def share(self, owner_id: str, setlist_id: str, user_ids: Iterable[str]) -> Setlist:
        setlist = self._owned(owner_id, setlist_id)
        targets = set(user_ids)
        self._validate_targets(owner_id, targets)
        added = targets - setlist.shared_with
        setlist.shared_with = sharing.merge_shared(setlist.shared_with, targets)
        setlist = self._touch(setlist)
        logger.info("Setlist %s shared by %s with %d new user(s)", setlist_id, owner_id, len(added))
        self._notify_shared(owner_id, setlist, added)
        return setlist

    def unshare(self, owner_id: str, setlist_id: str, target_user_id: str) -> Setlist:
        setlist = self._owned(owner_id, setlist_id)
        setlist.shared_with = sharing.without_shared(setlist.shared_with, target_user_id)
        return self._touch(setlist)
