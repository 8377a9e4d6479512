"""Friendship graph: requests, responses and the accepted-friends relation."""

from __future__ import annotations

import logging
from dataclasses import dataclass
from datetime import datetime
from typing import Optional

from setlist_api.core.errors import ConflictError, ForbiddenError, NotFoundError, ServiceError
from setlist_api.core.utils import utcnow
from setlist_api.domain.records import Friendship, FriendshipStatus, User
from setlist_api.repositories.collections import FRIENDSHIPS, USERS, Collection
from setlist_api.repositories.document_store import DocumentStore
from setlist_api.services import email_service
from setlist_api.services.notification_service import NotificationService

logger = logging.getLogger(__name__)


class FriendUserNotFoundError(NotFoundError):
    default_message = "Utente non trovato"


class SelfFriendRequestError(ForbiddenError):
    default_message = "Non puoi inviare una richiesta di amicizia a te stesso"


class FriendRequestExistsError(ConflictError):
    default_message = "Richiesta di amicizia già inviata"


class AlreadyFriendsError(ConflictError):
    default_message = "Siete già amici"


class FriendshipNotFoundError(NotFoundError):
    default_message = "Richiesta di amicizia non trovata"


class NotRequestReceiverError(ForbiddenError):
    default_message = "Non puoi rispondere a questa richiesta"


class RequestAlreadyHandledError(ConflictError):
    default_message = "Questa richiesta è già stata gestita"


class InvalidFriendshipStatusError(ServiceError):
    default_message = "Stato non valido: usa 'accepted' o 'rejected'"


class NotFriendshipMemberError(ForbiddenError):
    default_message = "Non puoi rimuovere questa amicizia"


@dataclass
class FriendView:
    """A friendship joined with the other party's public profile."""

    id: str
    user_id: str
    email: str
    name: str
    status: FriendshipStatus
    created_at: datetime


class FriendsService:
    def __init__(self, store: DocumentStore, notifications: Optional[NotificationService] = None) -> None:
        self.friendships: Collection[Friendship] = Collection(store, FRIENDSHIPS, Friendship)
        self.users: Collection[User] = Collection(store, USERS, User)
        self.notifications = notifications

    # -------------------------------------- helpers --------------------------------------
    def _involving(self, user_id: str) -> list[Friendship]:
        sent = self.friendships.find_by("senderId", user_id)
        received = self.friendships.find_by("receiverId", user_id)
        return sent + received

    def _between(self, user_a: str, user_b: str) -> list[Friendship]:
        return [f for f in self._involving(user_a) if f.other_party(user_a) == user_b]

    def _view(self, friendship: Friendship, other_id: str) -> FriendView:
        other = self.users.get(other_id)
        if not other:
            raise FriendUserNotFoundError()
        return FriendView(
            id=friendship.id,
            user_id=other.id,
            email=other.email,
            name=other.name,
            status=friendship.status,
            created_at=friendship.created_at,
        )

    def _notify_request(self, sender: Optional[User], receiver: User) -> None:
        sender_name = sender.name if sender else "Qualcuno"
        email_service.send_friend_request_email(receiver.email, receiver.name, sender_name)
        if self.notifications:
            self.notifications.notify_friend_request(receiver.id, sender_name)

    def _notify_accepted(self, friendship: Friendship) -> None:
        sender = self.users.get(friendship.sender_id)
        receiver = self.users.get(friendship.receiver_id)
        if not sender or not receiver:
            return
        email_service.send_friend_accepted_email(sender.email, sender.name, receiver.name)
        if self.notifications:
            self.notifications.notify_friend_accepted(sender.id, receiver.name)

    # -------------------------------------- requests --------------------------------------
    def send_request(self, sender_id: str, identifier: str) -> Friendship:
        matches = self.users.find_by("email", (identifier or "").strip().lower())
        if not matches:
            raise FriendUserNotFoundError()
        receiver = matches[0]
        if receiver.id == sender_id:
            raise SelfFriendRequestError()

        # checked, not constrained: concurrent senders can still race past these lookups
        existing = self._between(sender_id, receiver.id)
        if any(f.sender_id == sender_id and f.status == FriendshipStatus.PENDING for f in existing):
            raise FriendRequestExistsError()
        if any(f.status == FriendshipStatus.ACCEPTED for f in existing):
            raise AlreadyFriendsError()

        now = utcnow()
        friendship = self.friendships.create(
            Friendship(
                sender_id=sender_id,
                receiver_id=receiver.id,
                status=FriendshipStatus.PENDING,
                created_at=now,
                updated_at=now,
            )
        )
        logger.info("Friend request %s sent from %s to %s", friendship.id, sender_id, receiver.id)
        self._notify_request(self.users.get(sender_id), receiver)
        return friendship

    def respond(self, user_id: str, request_id: str, status: FriendshipStatus | str) -> Friendship:
        try:
            new_status = FriendshipStatus(status)
        except ValueError:
            raise InvalidFriendshipStatusError() from None
        if new_status == FriendshipStatus.PENDING:
            raise InvalidFriendshipStatusError()

        friendship = self.friendships.get(request_id)
        if not friendship:
            raise FriendshipNotFoundError()
        if friendship.receiver_id != user_id:
            raise NotRequestReceiverError()
        if friendship.status != FriendshipStatus.PENDING:
            raise RequestAlreadyHandledError()

        friendship.status = new_status
        friendship.updated_at = utcnow()
        friendship = self.friendships.save(friendship)
        logger.info("Friend request %s %s by %s", request_id, new_status.value, user_id)
        if new_status == FriendshipStatus.ACCEPTED:
            self._notify_accepted(friendship)
        return friendship

    # -------------------------------------- queries --------------------------------------
    def list_pending(self, user_id: str) -> list[FriendView]:
        received = self.friendships.find_by("receiverId", user_id)
        return [self._view(f, f.sender_id) for f in received if f.status == FriendshipStatus.PENDING]

    def list_friends(self, user_id: str) -> list[FriendView]:
        return [
            self._view(f, f.other_party(user_id))
            for f in self._involving(user_id)
            if f.status == FriendshipStatus.ACCEPTED
        ]

    def friend_ids(self, user_id: str) -> set[str]:
        return {f.other_party(user_id) for f in self._involving(user_id) if f.status == FriendshipStatus.ACCEPTED}

    def are_friends(self, user_a: str, user_b: str) -> bool:
        return any(f.status == FriendshipStatus.ACCEPTED for f in self._between(user_a, user_b))

    # -------------------------------------- removal --------------------------------------
    def remove(self, user_id: str, friendship_id: str) -> None:
        friendship = self.friendships.get(friendship_id)
        if not friendship:
            raise FriendshipNotFoundError("Amicizia non trovata")
        if not friendship.involves(user_id):
            raise NotFriendshipMemberError()
        # resources already shared with the former friend keep their sharedWith entry
        self.friendships.delete(friendship_id)
        logger.info("Friendship %s removed by %s", friendship_id, user_id)
