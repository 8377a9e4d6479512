"""Sharing authorization rules for owned resources (songs and setlists).

Owners have full control; users listed in ``shared_with`` may only read.
"""
from __future__ import annotations

from collections import Counter
from typing import Iterable, Protocol

from setlist_api.core.errors import ForbiddenError, NotFoundError


class ShareableResource(Protocol):
    user_id: str
    shared_with: set[str]


class ResourceForbiddenError(ForbiddenError):
    """Raised when the requester lacks read or write access."""


class ShareTargetNotFriendError(ForbiddenError):
    default_message = "Non puoi condividere con utenti che non sono tuoi amici"


class ShareTargetNotFoundError(NotFoundError):
    default_message = "Questo utente non ha accesso alla risorsa"


class InvalidSongOrderError(ForbiddenError):
    default_message = "Ordine dei brani non valido"


def is_owner(resource: ShareableResource, requester_id: str) -> bool:
    return resource.user_id == requester_id


def can_read(resource: ShareableResource, requester_id: str) -> bool:
    return is_owner(resource, requester_id) or requester_id in resource.shared_with


def require_read(resource: ShareableResource, requester_id: str, message: str | None = None) -> None:
    if not can_read(resource, requester_id):
        raise ResourceForbiddenError(message or "Non hai i permessi per accedere a questa risorsa")


def require_owner(resource: ShareableResource, requester_id: str, message: str | None = None) -> None:
    if not is_owner(resource, requester_id):
        raise ResourceForbiddenError(message or "Solo il creatore può modificare questa risorsa")


def ensure_all_friends(targets: Iterable[str], friend_ids: set[str]) -> None:
    """All-or-nothing gate: fail before any mutation if one target is not a friend."""
    for target in targets:
        if target not in friend_ids:
            raise ShareTargetNotFriendError()


def merge_shared(current: set[str], targets: Iterable[str]) -> set[str]:
    return set(current) | set(targets)


def without_shared(current: set[str], target: str) -> set[str]:
    if target not in current:
        raise ShareTargetNotFoundError()
    return set(current) - {target}


def validate_reorder(current: list[str], new_order: list[str]) -> list[str]:
    """Accept ``new_order`` only if it is a permutation of ``current``."""
    if len(new_order) != len(current) or Counter(new_order) != Counter(current):
        raise InvalidSongOrderError()
    return list(new_order)
