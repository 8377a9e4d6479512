"""Single-use expiring tokens for email verification and password reset."""

from __future__ import annotations

import logging
import secrets
from datetime import datetime, timedelta
from typing import Optional

from setlist_api.core.utils import utcnow
from setlist_api.domain.records import Token, TokenKind
from setlist_api.repositories.collections import TOKENS, Collection
from setlist_api.repositories.document_store import DocumentStore

logger = logging.getLogger(__name__)

TOKEN_BYTES = 32


class TokenLedger:
    """Issues, validates and invalidates tokens. Tokens are never deleted."""

    def __init__(self, store: DocumentStore) -> None:
        self.tokens: Collection[Token] = Collection(store, TOKENS, Token)

    def _now(self) -> datetime:
        return utcnow()

    def _generate(self) -> str:
        return secrets.token_hex(TOKEN_BYTES)

    def issue(self, user_id: str, kind: TokenKind, ttl: timedelta) -> Token:
        now = self._now()
        token = Token(
            user_id=user_id,
            token=self._generate(),
            type=TokenKind(kind),
            expires_at=now + ttl,
            created_at=now,
            used=False,
        )
        created = self.tokens.create(token)
        logger.info("Issued %s token %s for user %s", token.type.value, created.id, user_id)
        return created

    def find_valid(self, value: str, kind: TokenKind) -> Optional[Token]:
        """Return the first unused, unexpired token of ``kind`` with this exact value."""
        value = (value or "").strip()
        if not value:
            return None
        now = self._now()
        for token in self.tokens.find_by("token", value):
            if token.type == TokenKind(kind) and not token.used and token.expires_at > now:
                return token
        return None

    def invalidate(self, token_id: str) -> None:
        self.tokens.update(token_id, {"used": True})

    def invalidate_all_of_kind(self, user_id: str, kind: TokenKind) -> int:
        stale = [t for t in self.tokens.find_by("userId", user_id) if t.type == TokenKind(kind) and not t.used]
        for token in stale:
            self.invalidate(token.id)
        if stale:
            logger.info("Invalidated %d %s token(s) for user %s", len(stale), TokenKind(kind).value, user_id)
        return len(stale)

    def replace(self, user_id: str, kind: TokenKind, ttl: timedelta) -> Token:
        """Invalidate every live token of ``kind`` for the user, then issue a new one.

        The two steps are separate store calls; concurrent callers can still
        end up with more than one live token.
        """
        self.invalidate_all_of_kind(user_id, kind)
        return self.issue(user_id, kind, ttl)
