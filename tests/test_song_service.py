from __future__ import annotations

import pytest

from conftest import make_friends, make_verified_user
from setlist_api.domain.sharing import (
    ResourceForbiddenError,
    ShareTargetNotFoundError,
    ShareTargetNotFriendError,
)
from setlist_api.services.song_service import SongNotFoundError


@pytest.fixture()
def people(services):
    ann = make_verified_user(services, "ann@x.com", "Ann")
    bob = make_verified_user(services, "bob@x.com", "Bob")
    cid = make_verified_user(services, "cid@x.com", "Cid")
    return ann, bob, cid


def _song(services, owner, name="Intro", **extra):
    return services.songs.create(owner.id, name=name, bpm=120, time_signature=4, **extra)


def test_create_and_owner_crud(services, people):
    ann, _, _ = people
    song = _song(services, ann, sections=[{"name": "Verse", "bars": 8}], artist="The Band")

    assert song.sections[0].bars == 8
    assert song.shared_with == set()
    assert services.songs.find_one(ann.id, song.id).artist == "The Band"

    updated = services.songs.update(ann.id, song.id, {"bpm": 96, "artist": ""})
    assert updated.bpm == 96
    assert updated.artist is None
    assert updated.name == "Intro"

    services.songs.remove(ann.id, song.id)
    with pytest.raises(SongNotFoundError):
        services.songs.find_one(ann.id, song.id)


def test_non_shared_user_cannot_read(services, people):
    ann, bob, _ = people
    song = _song(services, ann)
    with pytest.raises(ResourceForbiddenError):
        services.songs.find_one(bob.id, song.id)


def test_shared_friend_reads_but_cannot_write(services, people):
    ann, bob, _ = people
    make_friends(services, ann, bob)
    song = _song(services, ann)

    shared = services.songs.share(ann.id, song.id, [bob.id])
    assert shared.shared_with == {bob.id}
    assert services.songs.find_one(bob.id, song.id).id == song.id

    with pytest.raises(ResourceForbiddenError):
        services.songs.update(bob.id, song.id, {"bpm": 60})
    with pytest.raises(ResourceForbiddenError):
        services.songs.remove(bob.id, song.id)
    with pytest.raises(ResourceForbiddenError):
        services.songs.share(bob.id, song.id, [ann.id])
    with pytest.raises(ResourceForbiddenError):
        services.songs.unshare(bob.id, song.id, bob.id)
    assert services.songs.find_one(ann.id, song.id).bpm == 120


def test_share_is_all_or_nothing(services, people):
    ann, bob, cid = people
    make_friends(services, ann, bob)
    song = _song(services, ann)

    with pytest.raises(ShareTargetNotFriendError):
        services.songs.share(ann.id, song.id, [bob.id, cid.id])
    assert services.songs.find_one(ann.id, song.id).shared_with == set()

    with pytest.raises(ShareTargetNotFriendError):
        _song(services, ann, name="Outro", shared_with=[cid.id])
    with pytest.raises(ShareTargetNotFriendError):
        services.songs.update(ann.id, song.id, {"shared_with": [cid.id]})


def test_pending_request_does_not_allow_sharing(services, people):
    ann, bob, _ = people
    services.friends.send_request(ann.id, "bob@x.com")
    song = _song(services, ann)
    with pytest.raises(ShareTargetNotFriendError):
        services.songs.share(ann.id, song.id, [bob.id])


def test_share_is_idempotent_union_and_unshare(services, people):
    ann, bob, cid = people
    make_friends(services, ann, bob)
    make_friends(services, ann, cid)
    song = _song(services, ann, shared_with=[bob.id])

    song = services.songs.share(ann.id, song.id, [bob.id, cid.id])
    assert song.shared_with == {bob.id, cid.id}
    song = services.songs.share(ann.id, song.id, [bob.id])
    assert song.shared_with == {bob.id, cid.id}

    song = services.songs.unshare(ann.id, song.id, bob.id)
    assert song.shared_with == {cid.id}
    with pytest.raises(ShareTargetNotFoundError):
        services.songs.unshare(ann.id, song.id, bob.id)
    with pytest.raises(ResourceForbiddenError):
        services.songs.find_one(bob.id, song.id)


def test_find_all_unions_owned_and_shared_without_duplicates(services, people):
    ann, bob, cid = people
    make_friends(services, ann, bob)
    own = _song(services, bob, name="Bob's")
    shared = _song(services, ann, name="Ann's", shared_with=[bob.id])
    _song(services, cid, name="Cid's")
    # a record listing its own owner must still come back once
    services.songs.songs.update(own.id, {"sharedWith": [bob.id]})

    ids = [s.id for s in services.songs.find_all(bob.id)]
    assert sorted(ids) == sorted([own.id, shared.id])


def test_former_friend_keeps_read_access_after_removal(services, people):
    ann, bob, _ = people
    friendship_id = make_friends(services, ann, bob)
    song = _song(services, ann)
    services.songs.share(ann.id, song.id, [bob.id])

    assert services.songs.find_one(bob.id, song.id).id == song.id
    with pytest.raises(ResourceForbiddenError):
        services.songs.update(bob.id, song.id, {"name": "Hijacked"})

    services.friends.remove(ann.id, friendship_id)

    # stale access is retained: removal does not prune sharedWith
    assert services.songs.find_one(bob.id, song.id).id == song.id
    with pytest.raises(ShareTargetNotFriendError):
        services.songs.share(ann.id, song.id, [bob.id])
