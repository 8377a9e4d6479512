from __future__ import annotations

import pytest
from fastapi.testclient import TestClient

from conftest import last_token
from setlist_api.app import create_app


@pytest.fixture()
def client(services):
    return TestClient(create_app(services))


def _bearer(token: str) -> dict:
    return {"Authorization": f"Bearer {token}"}


def _signup(client, outbox, email: str, name: str) -> dict:
    resp = client.post("/auth/register", json={"email": email, "password": "pw123456", "name": name})
    assert resp.status_code == 201
    verified = client.post("/auth/verify-email", json={"token": last_token(outbox, email)})
    assert verified.status_code == 200
    return verified.json()


def test_register_verify_login_scenario(client, outbox):
    resp = client.post("/auth/register", json={"email": "a@x.com", "password": "pw123456", "name": "Ann"})
    assert resp.status_code == 201
    body = resp.json()
    assert body["access_token"] is None
    assert body["user"]["isEmailVerified"] is False
    assert "createdAt" in body["user"]
    assert "password" not in body["user"]

    early = client.post("/auth/login", json={"email": "a@x.com", "password": "pw123456"})
    assert early.status_code == 401

    verified = client.post("/auth/verify-email", json={"token": last_token(outbox, "a@x.com")})
    assert verified.status_code == 200
    assert verified.json()["access_token"]

    login = client.post("/auth/login", json={"email": "a@x.com", "password": "pw123456"})
    assert login.status_code == 200
    token = login.json()["access_token"]
    assert client.get("/auth/me", headers=_bearer(token)).json()["email"] == "a@x.com"

    duplicate = client.post("/auth/register", json={"email": "A@x.com", "password": "pw123456", "name": "Ann"})
    assert duplicate.status_code == 409


def test_forgot_password_payloads_are_identical(client, outbox):
    client.post("/auth/register", json={"email": "a@x.com", "password": "pw123456", "name": "Ann"})
    ghost = client.post("/auth/forgot-password", json={"email": "ghost@nowhere.com"})
    real = client.post("/auth/forgot-password", json={"email": "a@x.com"})
    assert ghost.status_code == real.status_code == 200
    assert ghost.content == real.content
    # the reset mail is sent as a background task once the response is out
    assert outbox[-1]["to"] == "a@x.com"
    assert "/reset-password?token=" in outbox[-1]["html"]


def test_validation_and_auth_errors(client):
    short = client.post("/auth/register", json={"email": "a@x.com", "password": "123", "name": "Ann"})
    assert short.status_code == 422
    assert client.get("/songs").status_code == 401
    assert client.get("/songs", headers=_bearer("not-a-jwt")).status_code == 401
    bad = client.post("/auth/verify-email", json={"token": "0" * 64})
    assert bad.status_code == 401
    assert bad.json()["detail"] == "Token di verifica non valido o scaduto"


def test_share_song_with_friend_then_unfriend(client, outbox):
    ann = _signup(client, outbox, "ann@x.com", "Ann")
    bob = _signup(client, outbox, "bob@x.com", "Bob")
    ann_h, bob_h = _bearer(ann["access_token"]), _bearer(bob["access_token"])

    request = client.post("/friends/request", json={"identifier": "bob@x.com"}, headers=ann_h)
    assert request.status_code == 201
    request_id = request.json()["id"]
    assert client.get("/friends/pending", headers=bob_h).json()[0]["email"] == "ann@x.com"
    forbidden = client.patch(f"/friends/request/{request_id}", json={"status": "accepted"}, headers=ann_h)
    assert forbidden.status_code == 403
    accepted = client.patch(f"/friends/request/{request_id}", json={"status": "accepted"}, headers=bob_h)
    assert accepted.json()["status"] == "accepted"

    song = client.post(
        "/songs",
        json={"name": "Intro", "bpm": 120, "timeSignature": 4, "sections": [{"name": "Verse", "bars": 8}]},
        headers=ann_h,
    ).json()
    shared = client.post(f"/songs/{song['id']}/share", json={"userIds": [bob["user"]["id"]]}, headers=ann_h)
    assert shared.status_code == 200
    assert shared.json()["sharedWith"] == [bob["user"]["id"]]
    assert shared.json()["timeSignature"] == 4
    assert "shared_with" not in shared.json()

    assert client.get(f"/songs/{song['id']}", headers=bob_h).status_code == 200
    assert client.patch(f"/songs/{song['id']}", json={"bpm": 80}, headers=bob_h).status_code == 403

    assert client.delete(f"/friends/{request_id}", headers=ann_h).status_code == 204
    assert client.get(f"/songs/{song['id']}", headers=bob_h).status_code == 200
    assert [s["id"] for s in client.get("/songs", headers=bob_h).json()] == [song["id"]]


def test_setlist_reorder_over_http(client, outbox):
    ann = _signup(client, outbox, "ann@x.com", "Ann")
    headers = _bearer(ann["access_token"])
    ids = [
        client.post("/songs", json={"name": n, "bpm": 100, "timeSignature": 4}, headers=headers).json()["id"]
        for n in ("One", "Two")
    ]
    setlist = client.post("/setlists", json={"name": "Gig"}, headers=headers).json()
    for song_id in ids:
        client.post(f"/setlists/{setlist['id']}/songs", json={"songId": song_id}, headers=headers)

    bad = client.patch(f"/setlists/{setlist['id']}/reorder", json={"songIds": [ids[0], ids[0]]}, headers=headers)
    assert bad.status_code == 403
    good = client.patch(f"/setlists/{setlist['id']}/reorder", json={"songIds": ids[::-1]}, headers=headers)
    assert good.json()["songs"] == ids[::-1]


@pytest.mark.parametrize("address", ["a@b..com", "a@-x-.c", "a@b.c.", ".a@b.com", "a..b@c.com", "no-at-sign"])
def test_malformed_email_is_rejected(client, outbox, address):
    resp = client.post("/auth/register", json={"email": address, "password": "pw123456", "name": "Ann"})
    assert resp.status_code == 422
    assert client.post("/auth/forgot-password", json={"email": address}).status_code == 422
    assert outbox == []


def test_email_is_trimmed_and_lowercased(client, outbox):
    resp = client.post("/auth/register", json={"email": "  Ann@X.com ", "password": "pw123456", "name": "Ann"})
    assert resp.status_code == 201
    assert resp.json()["user"]["email"] == "ann@x.com"


def test_self_friend_request_is_forbidden(client, outbox):
    ann = _signup(client, outbox, "ann@x.com", "Ann")
    resp = client.post("/friends/request", json={"identifier": "ann@x.com"}, headers=_bearer(ann["access_token"]))
    assert resp.status_code == 403


def test_responses_use_camel_case_aliases(client, outbox):
    ann = _signup(client, outbox, "ann@x.com", "Ann")
    bob = _signup(client, outbox, "bob@x.com", "Bob")
    ann_h = _bearer(ann["access_token"])

    request = client.post("/friends/request", json={"identifier": "bob@x.com"}, headers=ann_h).json()
    assert (request["senderId"], request["receiverId"]) == (ann["user"]["id"], bob["user"]["id"])
    pending = client.get("/friends/pending", headers=_bearer(bob["access_token"])).json()
    assert pending[0]["userId"] == ann["user"]["id"]

    setlist = client.post("/setlists", json={"name": "Gig"}, headers=ann_h).json()
    assert setlist["userId"] == ann["user"]["id"]
    assert setlist["sharedWith"] == []
    assert {"createdAt", "updatedAt"} <= set(setlist)


def test_unregister_only_removes_own_devices(client, outbox, services):
    ann = _signup(client, outbox, "ann@x.com", "Ann")
    bob = _signup(client, outbox, "bob@x.com", "Bob")

    device = client.post(
        "/notifications/register",
        json={"fcmToken": "ann-phone", "deviceInfo": "Pixel", "platform": "android"},
        headers=_bearer(ann["access_token"]),
    )
    assert device.status_code == 201
    assert device.json()["deviceInfo"] == "Pixel"

    stolen = client.post("/notifications/unregister", json={"fcmToken": "ann-phone"}, headers=_bearer(bob["access_token"]))
    assert stolen.json() == {"removed": 0}
    assert [d.fcm_token for d in services.notifications.get_user_devices(ann["user"]["id"])] == ["ann-phone"]

    own = client.post("/notifications/unregister", json={"fcmToken": "ann-phone"}, headers=_bearer(ann["access_token"]))
    assert own.json() == {"removed": 1}
