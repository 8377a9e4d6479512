"""
Smoke tests for the SQLDocumentStore against a temporary SQLite database.
"""
from __future__ import annotations

import pytest

from setlist_api.core.errors import NotFoundError
from setlist_api.domain.records import Setlist
from setlist_api.repositories.collections import SETLISTS, Collection


def test_create_get_update_delete(store):
    doc = store.create("songs", {"name": "Intro", "bpm": 120})
    assert doc["id"]
    assert store.get("songs", doc["id"]) == {"id": doc["id"], "name": "Intro", "bpm": 120}

    updated = store.update("songs", doc["id"], {"bpm": 128})
    assert updated["bpm"] == 128
    assert updated["name"] == "Intro"

    store.delete("songs", doc["id"])
    assert store.get("songs", doc["id"]) is None
    # deleting twice is harmless
    store.delete("songs", doc["id"])


def test_create_with_explicit_id_and_collections_are_isolated(store):
    store.create("songs", {"name": "A"}, "same-id")
    store.create("setlists", {"name": "B"}, "same-id")
    assert store.get("songs", "same-id")["name"] == "A"
    assert store.get("setlists", "same-id")["name"] == "B"


def test_update_missing_document_raises(store):
    with pytest.raises(NotFoundError):
        store.update("songs", "missing", {"bpm": 1})


def test_query_by_equality_and_membership(store):
    store.create("friendships", {"senderId": "u1", "receiverId": "u2"})
    store.create("friendships", {"senderId": "u1", "receiverId": "u3"})
    store.create("friendships", {"senderId": "u2", "receiverId": "u3"})
    store.create("songs", {"userId": "u1", "sharedWith": ["u2", "u3"]})
    store.create("songs", {"userId": "u2", "sharedWith": []})

    assert len(store.query("friendships", "senderId", "u1")) == 2
    assert store.query("friendships", "senderId", "nobody") == []
    shared = store.query_contains("songs", "sharedWith", "u3")
    assert [d["userId"] for d in shared] == ["u1"]


def test_collection_round_trips_records(store):
    setlists = Collection(store, SETLISTS, Setlist)
    created = setlists.create(Setlist(user_id="u1", name="Live", songs=["s2", "s1"], shared_with={"u2"}))
    loaded = setlists.get(created.id)
    assert loaded.songs == ["s2", "s1"]
    assert loaded.shared_with == {"u2"}
    assert loaded.created_at.tzinfo is not None
