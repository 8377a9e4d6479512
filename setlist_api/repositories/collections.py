"""Typed mapping layer between records and raw store documents."""
from __future__ import annotations

from typing import Any, Generic, Optional, Protocol, TypeVar

from setlist_api.repositories.document_store import DocumentStore

USERS = "users"
TOKENS = "auth_tokens"
FRIENDSHIPS = "friendships"
SONGS = "songs"
SETLISTS = "setlists"
DEVICES = "user_devices"


class Record(Protocol):
    id: Optional[str]

    def to_document(self) -> dict: ...

    @classmethod
    def from_document(cls, doc: dict) -> "Record": ...


T = TypeVar("T", bound=Record)


class Collection(Generic[T]):
    """One named collection of one record type over a shared DocumentStore."""

    def __init__(self, store: DocumentStore, name: str, record_cls: type[T]) -> None:
        self.store = store
        self.name = name
        self.record_cls = record_cls

    def _load(self, doc: Optional[dict]) -> Optional[T]:
        if doc is None:
            return None
        return self.record_cls.from_document(doc)

    def get(self, record_id: str) -> Optional[T]:
        return self._load(self.store.get(self.name, record_id))

    def create(self, record: T, record_id: Optional[str] = None) -> T:
        doc = self.store.create(self.name, record.to_document(), record_id or record.id)
        return self._load(doc)

    def save(self, record: T) -> T:
        """Write every field of an existing record back to the store."""
        doc = self.store.update(self.name, record.id, record.to_document())
        return self._load(doc)

    def update(self, record_id: str, partial: dict) -> T:
        """Patch raw document keys (e.g. ``{"used": True}``)."""
        return self._load(self.store.update(self.name, record_id, partial))

    def delete(self, record_id: str) -> None:
        self.store.delete(self.name, record_id)

    def find_by(self, field: str, value: Any) -> list[T]:
        return [self._load(doc) for doc in self.store.query(self.name, field, value)]

    def find_containing(self, field: str, value: Any) -> list[T]:
        return [self._load(doc) for doc in self.store.query_contains(self.name, field, value)]
