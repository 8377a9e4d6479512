"""
Explicit per-collection schemas.

Each record knows how to turn itself into a store document and back; nothing
outside ``Collection`` handles raw dicts.
"""
from __future__ import annotations

import enum
from dataclasses import dataclass, field
from datetime import datetime
from typing import Optional

from setlist_api.core.utils import format_datetime, parse_datetime, utcnow


class TokenKind(str, enum.Enum):
    EMAIL_VERIFICATION = "email_verification"
    PASSWORD_RESET = "password_reset"


class FriendshipStatus(str, enum.Enum):
    PENDING = "pending"
    ACCEPTED = "accepted"
    REJECTED = "rejected"


@dataclass
class User:
    email: str
    password: str
    name: str
    is_email_verified: bool = False
    email_verification_token: Optional[str] = None
    email_verification_expires: Optional[datetime] = None
    password_reset_token: Optional[str] = None
    password_reset_expires: Optional[datetime] = None
    created_at: datetime = field(default_factory=utcnow)
    updated_at: datetime = field(default_factory=utcnow)
    id: Optional[str] = None

    def to_document(self) -> dict:
        return {
            "email": self.email,
            "password": self.password,
            "name": self.name,
            "isEmailVerified": self.is_email_verified,
            "emailVerificationToken": self.email_verification_token,
            "emailVerificationExpires": format_datetime(self.email_verification_expires),
            "passwordResetToken": self.password_reset_token,
            "passwordResetExpires": format_datetime(self.password_reset_expires),
            "createdAt": format_datetime(self.created_at),
            "updatedAt": format_datetime(self.updated_at),
        }

    @classmethod
    def from_document(cls, doc: dict) -> "User":
        return cls(
            id=doc.get("id"),
            email=doc.get("email", ""),
            password=doc.get("password", ""),
            name=doc.get("name", ""),
            is_email_verified=bool(doc.get("isEmailVerified")),
            email_verification_token=doc.get("emailVerificationToken"),
            email_verification_expires=parse_datetime(doc.get("emailVerificationExpires")),
            password_reset_token=doc.get("passwordResetToken"),
            password_reset_expires=parse_datetime(doc.get("passwordResetExpires")),
            created_at=parse_datetime(doc.get("createdAt")) or utcnow(),
            updated_at=parse_datetime(doc.get("updatedAt")) or utcnow(),
        )


@dataclass
class Token:
    user_id: str
    token: str
    type: TokenKind
    expires_at: datetime
    created_at: datetime = field(default_factory=utcnow)
    used: bool = False
    id: Optional[str] = None

    def to_document(self) -> dict:
        return {
            "userId": self.user_id,
            "token": self.token,
            "type": TokenKind(self.type).value,
            "expiresAt": format_datetime(self.expires_at),
            "createdAt": format_datetime(self.created_at),
            "used": self.used,
        }

    @classmethod
    def from_document(cls, doc: dict) -> "Token":
        return cls(
            id=doc.get("id"),
            user_id=doc.get("userId", ""),
            token=doc.get("token", ""),
            type=TokenKind(doc.get("type")),
            expires_at=parse_datetime(doc.get("expiresAt")),
            created_at=parse_datetime(doc.get("createdAt")) or utcnow(),
            used=bool(doc.get("used")),
        )


@dataclass
class Friendship:
    sender_id: str
    receiver_id: str
    status: FriendshipStatus = FriendshipStatus.PENDING
    created_at: datetime = field(default_factory=utcnow)
    updated_at: datetime = field(default_factory=utcnow)
    id: Optional[str] = None

    def involves(self, user_id: str) -> bool:
        return user_id in (self.sender_id, self.receiver_id)

    def other_party(self, user_id: str) -> str:
        return self.receiver_id if self.sender_id == user_id else self.sender_id

    def to_document(self) -> dict:
        return {
            "senderId": self.sender_id,
            "receiverId": self.receiver_id,
            "status": FriendshipStatus(self.status).value,
            "createdAt": format_datetime(self.created_at),
            "updatedAt": format_datetime(self.updated_at),
        }

    @classmethod
    def from_document(cls, doc: dict) -> "Friendship":
        return cls(
            id=doc.get("id"),
            sender_id=doc.get("senderId", ""),
            receiver_id=doc.get("receiverId", ""),
            status=FriendshipStatus(doc.get("status", FriendshipStatus.PENDING.value)),
            created_at=parse_datetime(doc.get("createdAt")) or utcnow(),
            updated_at=parse_datetime(doc.get("updatedAt")) or utcnow(),
        )


@dataclass
class SongSection:
    name: str
    bars: int

    def to_document(self) -> dict:
        return {"name": self.name, "bars": int(self.bars)}

    @classmethod
    def from_document(cls, doc: dict) -> "SongSection":
        return cls(name=doc.get("name", ""), bars=int(doc.get("bars") or 0))


@dataclass
class Song:
    user_id: str
    name: str
    bpm: int
    time_signature: int
    artist: Optional[str] = None
    description: Optional[str] = None
    sections: list[SongSection] = field(default_factory=list)
    shared_with: set[str] = field(default_factory=set)
    created_at: datetime = field(default_factory=utcnow)
    updated_at: datetime = field(default_factory=utcnow)
    id: Optional[str] = None

    def to_document(self) -> dict:
        return {
            "userId": self.user_id,
            "name": self.name,
            "artist": self.artist,
            "description": self.description,
            "bpm": self.bpm,
            "timeSignature": self.time_signature,
            "sections": [section.to_document() for section in self.sections],
            "sharedWith": sorted(self.shared_with),
            "createdAt": format_datetime(self.created_at),
            "updatedAt": format_datetime(self.updated_at),
        }

    @classmethod
    def from_document(cls, doc: dict) -> "Song":
        return cls(
            id=doc.get("id"),
            user_id=doc.get("userId", ""),
            name=doc.get("name", ""),
            artist=doc.get("artist"),
            description=doc.get("description"),
            bpm=doc.get("bpm"),
            time_signature=doc.get("timeSignature"),
            sections=[SongSection.from_document(s) for s in doc.get("sections") or []],
            shared_with=set(doc.get("sharedWith") or []),
            created_at=parse_datetime(doc.get("createdAt")) or utcnow(),
            updated_at=parse_datetime(doc.get("updatedAt")) or utcnow(),
        )


@dataclass
class Setlist:
    user_id: str
    name: str
    description: Optional[str] = None
    songs: list[str] = field(default_factory=list)
    shared_with: set[str] = field(default_factory=set)
    created_at: datetime = field(default_factory=utcnow)
    updated_at: datetime = field(default_factory=utcnow)
    id: Optional[str] = None

    def to_document(self) -> dict:
        return {
            "userId": self.user_id,
            "name": self.name,
            "description": self.description,
            "songs": list(self.songs),
            "sharedWith": sorted(self.shared_with),
            "createdAt": format_datetime(self.created_at),
            "updatedAt": format_datetime(self.updated_at),
        }

    @classmethod
    def from_document(cls, doc: dict) -> "Setlist":
        return cls(
            id=doc.get("id"),
            user_id=doc.get("userId", ""),
            name=doc.get("name", ""),
            description=doc.get("description"),
            songs=list(doc.get("songs") or []),
            shared_with=set(doc.get("sharedWith") or []),
            created_at=parse_datetime(doc.get("createdAt")) or utcnow(),
            updated_at=parse_datetime(doc.get("updatedAt")) or utcnow(),
        )


@dataclass
class Device:
    user_id: str
    fcm_token: str
    device_info: Optional[str] = None
    platform: Optional[str] = None
    created_at: datetime = field(default_factory=utcnow)
    updated_at: datetime = field(default_factory=utcnow)
    id: Optional[str] = None

    def to_document(self) -> dict:
        return {
            "userId": self.user_id,
            "fcmToken": self.fcm_token,
            "deviceInfo": self.device_info,
            "platform": self.platform,
            "createdAt": format_datetime(self.created_at),
            "updatedAt": format_datetime(self.updated_at),
        }

    @classmethod
    def from_document(cls, doc: dict) -> "Device":
        return cls(
            id=doc.get("id"),
            user_id=doc.get("userId", ""),
            fcm_token=doc.get("fcmToken", ""),
            device_info=doc.get("deviceInfo"),
            platform=doc.get("platform"),
            created_at=parse_datetime(doc.get("createdAt")) or utcnow(),
            updated_at=parse_datetime(doc.get("updatedAt")) or utcnow(),
        )
