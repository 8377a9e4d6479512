from __future__ import annotations

import pytest

from conftest import make_friends, make_verified_user
from setlist_api.services.container import build_services
from setlist_api.services.notification_service import DeliveryResult, NotificationService, PushPayload


class RecordingGateway:
    def __init__(self, failing: dict[str, str] | None = None, explode: bool = False):
        self.calls: list[tuple[list[str], PushPayload]] = []
        self.failing = failing or {}
        self.explode = explode

    def send(self, tokens, payload):
        self.calls.append((list(tokens), payload))
        if self.explode:
            raise RuntimeError("provider down")
        return [
            DeliveryResult(token=t, success=t not in self.failing, error_code=self.failing.get(t))
            for t in tokens
        ]


def test_register_device_upserts_by_token(store):
    svc = NotificationService(store, RecordingGateway())
    first = svc.register_device("u1", "tok-1", "Chrome", "web")
    moved = svc.register_device("u2", "tok-1", "Chrome", "web")

    assert moved.id == first.id
    assert svc.get_user_devices("u1") == []
    assert [d.fcm_token for d in svc.get_user_devices("u2")] == ["tok-1"]
    with pytest.raises(ValueError):
        svc.register_device("u1", "tok-2", platform="blackberry")


def test_send_prunes_dead_tokens(store):
    gateway = RecordingGateway(failing={"dead": "registration-token-not-registered", "flaky": "unavailable"})
    svc = NotificationService(store, gateway)
    for token in ("ok", "dead", "flaky"):
        svc.register_device("u1", token)

    assert svc.send_to_user("u1", PushPayload(title="Hi", body="there")) is True
    assert sorted(d.fcm_token for d in svc.get_user_devices("u1")) == ["flaky", "ok"]


def test_dispatch_failures_are_reported_not_raised(store):
    svc = NotificationService(store, RecordingGateway(explode=True))
    svc.register_device("u1", "tok")
    assert svc.send_to_user("u1", PushPayload(title="Hi", body="there")) is False
    assert svc.send_to_user("nobody", PushPayload(title="Hi", body="there")) is False
    assert svc.send_to_users([], PushPayload(title="Hi", body="there")) is False


def test_friend_and_share_events_push_to_devices(store, outbox):
    gateway = RecordingGateway()
    services = build_services(store, push_gateway=gateway)
    ann = make_verified_user(services, "ann@x.com", "Ann")
    bob = make_verified_user(services, "bob@x.com", "Bob")
    services.notifications.register_device(ann.id, "ann-phone")
    services.notifications.register_device(bob.id, "bob-phone")

    make_friends(services, ann, bob)
    song = services.songs.create(ann.id, name="Intro", bpm=120, time_signature=4)
    services.songs.share(ann.id, song.id, [bob.id])
    services.songs.share(ann.id, song.id, [bob.id])

    kinds = [(tokens, payload.data["type"]) for tokens, payload in gateway.calls]
    assert kinds == [
        (["bob-phone"], "friend_request"),
        (["ann-phone"], "friend_accepted"),
        (["bob-phone"], "shared_song"),
    ]


def test_push_outage_does_not_break_friend_request(store, outbox):
    services = build_services(store, push_gateway=RecordingGateway(explode=True))
    ann = make_verified_user(services, "ann@x.com", "Ann")
    bob = make_verified_user(services, "bob@x.com", "Bob")
    services.notifications.register_device(bob.id, "bob-phone")

    request = services.friends.send_request(ann.id, "bob@x.com")
    assert services.friends.friendships.get(request.id) is not None


def test_unregister_and_send_to_tokens(store):
    gateway = RecordingGateway()
    svc = NotificationService(store, gateway)
    svc.register_device("u1", "tok-1")

    assert svc.unregister_device("tok-1") == 1
    assert svc.unregister_device("tok-1") == 0
    assert svc.get_user_devices("u1") == []

    assert svc.send_to_tokens([], PushPayload(title="Hi", body="there")) is False
    assert svc.send_to_tokens(["raw"], PushPayload(title="Hi", body="there")) is True
    assert gateway.calls[-1][0] == ["raw"]


def test_unregister_scoped_to_owner(store):
    svc = NotificationService(store, RecordingGateway())
    svc.register_device("u1", "tok-1")

    assert svc.unregister_device("tok-1", user_id="u2") == 0
    assert [d.fcm_token for d in svc.get_user_devices("u1")] == ["tok-1"]
    assert svc.unregister_device("tok-1", user_id="u1") == 1
