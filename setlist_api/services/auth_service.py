"""
Authentication and identity related use cases.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from datetime import datetime, timedelta
from typing import Any, Callable, Optional

from setlist_api.core.config import Settings, get_settings
from setlist_api.core.errors import AuthenticationError, ConflictError, NotFoundError
from setlist_api.core.security import (
    create_session_token,
    decode_session_token,
    hash_password,
    verify_password,
)
from setlist_api.core.utils import utcnow
from setlist_api.domain.records import TokenKind, User
from setlist_api.repositories.collections import USERS, Collection
from setlist_api.repositories.document_store import DocumentStore
from setlist_api.services import email_service
from setlist_api.services.token_ledger import TokenLedger

logger = logging.getLogger(__name__)

RESEND_VERIFICATION_MESSAGE = "Se l'email esiste, riceverai un link di verifica"
FORGOT_PASSWORD_MESSAGE = "Se l'email esiste, riceverai un link per reimpostare la password"

# Schedules fn(*args); the HTTP layer passes BackgroundTasks.add_task.
MailDispatcher = Callable[..., Any]


def send_now(fn: Callable[..., Any], *args: Any) -> None:
    fn(*args)


class AuthError(Exception):
    """Marker mixin for identity failures."""


class EmailAlreadyRegisteredError(AuthError, ConflictError):
    default_message = "Email già registrata"


class EmailAlreadyVerifiedError(AuthError, ConflictError):
    default_message = "Email già verificata"


class InvalidCredentialsError(AuthError, AuthenticationError):
    default_message = "Credenziali non valide"


class EmailNotVerifiedError(AuthError, AuthenticationError):
    default_message = "Email non verificata. Controlla la tua casella di posta per il link di verifica."


class InvalidCurrentPasswordError(AuthError, AuthenticationError):
    default_message = "Password attuale non corretta"


class InvalidSessionError(AuthError, AuthenticationError):
    default_message = "Sessione non valida o scaduta"


class TokenInvalidError(AuthError, AuthenticationError):
    default_message = "Token non valido o scaduto"


class UserNotFoundError(AuthError, NotFoundError):
    default_message = "Utente non trovato"


@dataclass
class UserProfile:
    id: str
    email: str
    name: str
    is_email_verified: bool
    created_at: datetime

    @classmethod
    def from_user(cls, user: User) -> "UserProfile":
        return cls(
            id=user.id,
            email=user.email,
            name=user.name,
            is_email_verified=user.is_email_verified,
            created_at=user.created_at,
        )


@dataclass
class RegisterResult:
    user: UserProfile
    message: str
    email_sent: bool
    access_token: Optional[str] = None


@dataclass
class AuthResult:
    user: UserProfile
    access_token: str


@dataclass
class VerifyResult:
    user: UserProfile
    access_token: str
    message: str


@dataclass(frozen=True)
class MessageResult:
    message: str


@dataclass
class AuthService:
    """Handles registration, login, verification and password flows."""

    store: DocumentStore
    settings: Settings = field(default_factory=get_settings)

    def __post_init__(self):
        self.users: Collection[User] = Collection(self.store, USERS, User)
        self.ledger = TokenLedger(self.store)

    # -------------------------------------- helpers --------------------------------------
    @staticmethod
    def _normalize_email(email: str | None) -> str:
        return (email or "").strip().lower()

    def _find_by_email(self, email: str) -> Optional[User]:
        normalized = self._normalize_email(email)
        if not normalized:
            return None
        matches = self.users.find_by("email", normalized)
        return matches[0] if matches else None

    def _verification_ttl(self) -> timedelta:
        return timedelta(seconds=self.settings.email_verification_ttl_seconds)

    def _reset_ttl(self) -> timedelta:
        return timedelta(seconds=self.settings.password_reset_ttl_seconds)

    def _session_for(self, user: User) -> str:
        return create_session_token(user.id, user.email, self.settings.session_ttl_seconds)

    # -------------------------------------- registration --------------------------------------
    def register(self, email: str, password: str, name: str) -> RegisterResult:
        normalized = self._normalize_email(email)
        # check-then-create: two concurrent registrations can both pass this lookup
        if self._find_by_email(normalized):
            raise EmailAlreadyRegisteredError()

        now = utcnow()
        user = self.users.create(
            User(
                email=normalized,
                password=hash_password(password),
                name=(name or "").strip(),
                is_email_verified=False,
                created_at=now,
                updated_at=now,
            )
        )
        token = self.ledger.issue(user.id, TokenKind.EMAIL_VERIFICATION, self._verification_ttl())
        user.email_verification_token = token.token
        user.email_verification_expires = token.expires_at
        user = self.users.save(user)

        email_sent = email_service.send_verification_email(user.email, user.name, token.token)
        logger.info("Registered user %s (verification email sent=%s)", user.id, email_sent)
        return RegisterResult(
            user=UserProfile.from_user(user),
            message="Registrazione completata. Controlla la tua email per verificare l'account.",
            email_sent=email_sent,
        )

    # -------------------------------------- login --------------------------------------
    def login(self, email: str, password: str) -> AuthResult:
        user = self._find_by_email(email)
        if not user or not verify_password(password, user.password):
            raise InvalidCredentialsError()
        if not user.is_email_verified:
            raise EmailNotVerifiedError()
        logger.info("User %s logged in", user.id)
        return AuthResult(user=UserProfile.from_user(user), access_token=self._session_for(user))

    # -------------------------------------- verification --------------------------------------
    def verify_email(self, token: str) -> VerifyResult:
        entity = self.ledger.find_valid(token, TokenKind.EMAIL_VERIFICATION)
        if not entity:
            raise TokenInvalidError("Token di verifica non valido o scaduto")
        user = self.users.get(entity.user_id)
        if not user:
            raise UserNotFoundError()
        if user.is_email_verified:
            raise EmailAlreadyVerifiedError()

        user.is_email_verified = True
        user.email_verification_token = None
        user.email_verification_expires = None
        user.updated_at = utcnow()
        user = self.users.save(user)
        self.ledger.invalidate(entity.id)

        email_service.send_welcome_email(user.email, user.name)
        logger.info("User %s verified their email", user.id)
        return VerifyResult(
            user=UserProfile.from_user(user),
            access_token=self._session_for(user),
            message="Email verificata con successo",
        )

    def resend_verification(self, email: str, defer: Optional[MailDispatcher] = None) -> MessageResult:
        user = self._find_by_email(email)
        if user:
            if user.is_email_verified:
                raise EmailAlreadyVerifiedError()
            token = self.ledger.replace(user.id, TokenKind.EMAIL_VERIFICATION, self._verification_ttl())
            user.email_verification_token = token.token
            user.email_verification_expires = token.expires_at
            user.updated_at = utcnow()
            self.users.save(user)
            (defer or send_now)(email_service.send_verification_email, user.email, user.name, token.token)
        return MessageResult(RESEND_VERIFICATION_MESSAGE)

    # -------------------------------------- passwords --------------------------------------
    def forgot_password(self, email: str, defer: Optional[MailDispatcher] = None) -> MessageResult:
        user = self._find_by_email(email)
        if user:
            token = self.ledger.replace(user.id, TokenKind.PASSWORD_RESET, self._reset_ttl())
            user.password_reset_token = token.token
            user.password_reset_expires = token.expires_at
            user.updated_at = utcnow()
            self.users.save(user)
            (defer or send_now)(email_service.send_password_reset_email, user.email, user.name, token.token)
        return MessageResult(FORGOT_PASSWORD_MESSAGE)

    def reset_password(self, token: str, new_password: str) -> MessageResult:
        entity = self.ledger.find_valid(token, TokenKind.PASSWORD_RESET)
        if not entity:
            raise TokenInvalidError("Token di reset non valido o scaduto")
        user = self.users.get(entity.user_id)
        if not user:
            raise UserNotFoundError()

        user.password = hash_password(new_password)
        user.password_reset_token = None
        user.password_reset_expires = None
        user.updated_at = utcnow()
        self.users.save(user)
        self.ledger.invalidate(entity.id)
        self.ledger.invalidate_all_of_kind(user.id, TokenKind.PASSWORD_RESET)

        email_service.send_password_changed_email(user.email, user.name)
        logger.info("Password reset completed for user %s", user.id)
        return MessageResult("Password reimpostata con successo")

    def change_password(self, user_id: str, current_password: str, new_password: str) -> MessageResult:
        user = self.users.get(user_id)
        if not user:
            raise UserNotFoundError()
        if not verify_password(current_password, user.password):
            raise InvalidCurrentPasswordError()
        user.password = hash_password(new_password)
        user.updated_at = utcnow()
        self.users.save(user)
        email_service.send_password_changed_email(user.email, user.name)
        logger.info("Password changed for user %s", user.id)
        return MessageResult("Password modificata con successo")

    # -------------------------------------- lookups --------------------------------------
    def check_email_exists(self, email: str) -> bool:
        """Reveal whether an account exists. Unlike the reset/resend flows this is not enumeration safe."""
        return self._find_by_email(email) is not None

    def get_profile(self, user_id: str) -> UserProfile:
        user = self.users.get(user_id)
        if not user:
            raise UserNotFoundError()
        return UserProfile.from_user(user)

    def authenticate(self, access_token: Optional[str]) -> UserProfile:
        claims = decode_session_token(access_token)
        if not claims:
            raise InvalidSessionError()
        user = self.users.get(str(claims.get("sub") or ""))
        if not user:
            raise InvalidSessionError("Utente non trovato")
        return UserProfile.from_user(user)
