"""Builds every service once around a single injected document store."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Optional

from setlist_api.core.config import Settings, get_settings
from setlist_api.repositories.document_store import DocumentStore, SQLDocumentStore
from setlist_api.services.auth_service import AuthService
from setlist_api.services.friends_service import FriendsService
from setlist_api.services.notification_service import NotificationService, PushGateway
from setlist_api.services.setlist_service import SetlistService
from setlist_api.services.song_service import SongService


@dataclass
class Services:
    store: DocumentStore
    auth: AuthService
    notifications: NotificationService
    friends: FriendsService
    songs: SongService
    setlists: SetlistService


def build_services(
    store: Optional[DocumentStore] = None,
    *,
    settings: Optional[Settings] = None,
    push_gateway: Optional[PushGateway] = None,
) -> Services:
    store = store or SQLDocumentStore()
    notifications = NotificationService(store, push_gateway)
    friends = FriendsService(store, notifications)
    songs = SongService(store, friends, notifications)
    return Services(
        store=store,
        auth=AuthService(store, settings or get_settings()),
        notifications=notifications,
        friends=friends,
        songs=songs,
        setlists=SetlistService(store, friends, songs, notifications),
    )
