"""Generic document-store interface and its SQLAlchemy-backed adapter."""
from __future__ import annotations

import copy
import logging
import uuid
from datetime import datetime, timezone
from typing import Any, Optional, Protocol

from sqlalchemy import select

from setlist_api.core.errors import NotFoundError
from setlist_api.db.models import Document
from setlist_api.db.session import get_session, session_scope

logger = logging.getLogger(__name__)


class DocumentStore(Protocol):
    """Shape-agnostic collection storage keyed by opaque string ids.

    Every returned document is a plain dict that carries its ``id``.
    """

    def get(self, collection: str, doc_id: str) -> Optional[dict]: ...

    def create(self, collection: str, data: dict, doc_id: Optional[str] = None) -> dict: ...

    def update(self, collection: str, doc_id: str, partial: dict) -> dict: ...

    def delete(self, collection: str, doc_id: str) -> None: ...

    def query(self, collection: str, field: str, value: Any) -> list[dict]: ...

    def query_contains(self, collection: str, field: str, value: Any) -> list[dict]: ...


def _with_id(entity: Document) -> dict:
    doc = copy.deepcopy(entity.data or {})
    doc["id"] = entity.id
    return doc


def _strip_id(data: dict) -> dict:
    return {k: v for k, v in copy.deepcopy(data).items() if k != "id"}


class SQLDocumentStore:
    """DocumentStore persisted in the ``documents`` table.

    Field filtering runs in Python so the adapter behaves the same on SQLite
    and PostgreSQL. Each call is its own short session: there is no isolation
    across calls.
    """

    def get(self, collection: str, doc_id: str) -> Optional[dict]:
        if not doc_id:
            return None
        with get_session() as session:
            entity = session.get(Document, (collection, doc_id))
            return _with_id(entity) if entity else None

    def create(self, collection: str, data: dict, doc_id: Optional[str] = None) -> dict:
        new_id = doc_id or uuid.uuid4().hex
        now = datetime.now(timezone.utc)
        payload = _strip_id(data)
        with session_scope() as session:
            entity = session.get(Document, (collection, new_id))
            if entity:
                entity.data = payload
                entity.updated_at = now
            else:
                entity = Document(collection=collection, id=new_id, data=payload, created_at=now, updated_at=now)
                session.add(entity)
            session.flush()
            logger.debug("Created %s/%s", collection, new_id)
            return _with_id(entity)

    def update(self, collection: str, doc_id: str, partial: dict) -> dict:
        with session_scope() as session:
            entity = session.get(Document, (collection, doc_id))
            if not entity:
                raise NotFoundError(f"Documento {collection}/{doc_id} non trovato")
            merged = copy.deepcopy(entity.data or {})
            merged.update(_strip_id(partial))
            # reassign so the JSON column is flagged dirty
            entity.data = merged
            entity.updated_at = datetime.now(timezone.utc)
            return _with_id(entity)

    def delete(self, collection: str, doc_id: str) -> None:
        with session_scope() as session:
            entity = session.get(Document, (collection, doc_id))
            if entity:
                session.delete(entity)

    def _scan(self, collection: str) -> list[Document]:
        with get_session() as session:
            stmt = (
                select(Document)
                .where(Document.collection == collection)
                .order_by(Document.created_at, Document.id)
            )
            return list(session.execute(stmt).scalars())

    def query(self, collection: str, field: str, value: Any) -> list[dict]:
        results = []
        for entity in self._scan(collection):
            data = entity.data or {}
            current = entity.id if field == "id" else data.get(field)
            if current == value:
                results.append(_with_id(entity))
        return results

    def query_contains(self, collection: str, field: str, value: Any) -> list[dict]:
        results = []
        for entity in self._scan(collection):
            items = (entity.data or {}).get(field)
            if isinstance(items, list) and value in items:
                results.append(_with_id(entity))
        return results
