from __future__ import annotations

import re
import sys
from pathlib import Path

import pytest

# Make the setlist_api package importable when running tests from a checkout
ROOT = Path(__file__).resolve().parents[1]
if str(ROOT) not in sys.path:
    sys.path.insert(0, str(ROOT))

from setlist_api.core import config as core_config  # noqa: E402
from setlist_api.db import models  # noqa: E402
from setlist_api.db import session as db_session  # noqa: E402
from setlist_api.repositories.document_store import SQLDocumentStore  # noqa: E402
from setlist_api.services import email_service  # noqa: E402
from setlist_api.services.container import build_services  # noqa: E402

TOKEN_RE = re.compile(r"token=([0-9a-f]{64})")


def _reset_caches() -> None:
    core_config.get_settings.cache_clear()
    db_session.get_engine.cache_clear()
    db_session._get_sessionmaker.cache_clear()  # type: ignore[attr-defined]


@pytest.fixture()
def db_env(tmp_path, monkeypatch):
    """Point the SQL backend at a temporary SQLite file and reset settings/engine caches."""
    db_file = tmp_path / "test.db"
    monkeypatch.setenv("DATABASE_URL", f"sqlite:///{db_file}")
    monkeypatch.setenv("JWT_SECRET", "test-secret-with-enough-length-for-hs256!")
    monkeypatch.delenv("SMTP_HOST", raising=False)
    _reset_caches()

    engine = db_session.get_engine()
    models.Base.metadata.drop_all(bind=engine)
    models.Base.metadata.create_all(bind=engine)

    yield db_file

    models.Base.metadata.drop_all(bind=engine)
    engine.dispose()
    _reset_caches()


@pytest.fixture()
def store(db_env):
    return SQLDocumentStore()


@pytest.fixture()
def outbox(monkeypatch):
    """Capture outgoing emails instead of talking to SMTP."""
    sent: list[dict] = []

    def fake_send(subject, to_email, html_body, text_body=None):
        sent.append({"subject": subject, "to": to_email, "html": html_body, "text": text_body or ""})
        return True

    monkeypatch.setattr(email_service, "send_email", fake_send)
    return sent


@pytest.fixture()
def services(store, outbox):
    return build_services(store)


def last_token(outbox: list[dict], to: str) -> str:
    for mail in reversed(outbox):
        if mail["to"] == to:
            match = TOKEN_RE.search(mail["text"])
            if match:
                return match.group(1)
    raise AssertionError(f"no token mailed to {to}")


def make_verified_user(services, email: str, name: str, password: str = "pw123456"):
    services.auth.register(email, password, name)
    user = services.auth.users.find_by("email", email.lower())[0]
    user.is_email_verified = True
    return services.auth.users.save(user)


def make_friends(services, a, b) -> str:
    request = services.friends.send_request(a.id, b.email)
    services.friends.respond(b.id, request.id, "accepted")
    return request.id
