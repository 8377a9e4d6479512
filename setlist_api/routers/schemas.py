"""Request and response bodies of the HTTP layer."""
from __future__ import annotations

from datetime import datetime
from typing import List, Literal, Optional

from pydantic import BaseModel, ConfigDict, EmailStr, Field, field_validator

from setlist_api.domain.records import FriendshipStatus


class EmailBody(BaseModel):
    email: EmailStr

    @field_validator("email", mode="before")
    @classmethod
    def _strip(cls, value):
        return value.strip() if isinstance(value, str) else value

    @field_validator("email")
    @classmethod
    def _lowercase(cls, value: str) -> str:
        return value.lower()


class RegisterBody(EmailBody):
    password: str = Field(min_length=6)
    name: str = Field(min_length=1)


class LoginBody(EmailBody):
    password: str = Field(min_length=1)


class TokenBody(BaseModel):
    token: str = Field(min_length=1)


class ResetPasswordBody(TokenBody):
    new_password: str = Field(min_length=6, alias="newPassword")


class ChangePasswordBody(BaseModel):
    current_password: str = Field(min_length=1, alias="currentPassword")
    new_password: str = Field(min_length=6, alias="newPassword")


class FriendRequestBody(BaseModel):
    identifier: str = Field(min_length=1)


class RespondFriendRequestBody(BaseModel):
    status: Literal["accepted", "rejected"]


class SectionBody(BaseModel):
    name: str = Field(min_length=1)
    bars: int = Field(ge=1, le=999)


class CreateSongBody(BaseModel):
    name: str = Field(min_length=1)
    bpm: int = Field(ge=30, le=300)
    time_signature: int = Field(ge=2, le=12, alias="timeSignature")
    artist: Optional[str] = None
    description: Optional[str] = None
    sections: Optional[List[SectionBody]] = None
    shared_with: Optional[List[str]] = Field(default=None, alias="sharedWith")


class UpdateSongBody(BaseModel):
    name: Optional[str] = Field(default=None, min_length=1)
    bpm: Optional[int] = Field(default=None, ge=30, le=300)
    time_signature: Optional[int] = Field(default=None, ge=2, le=12, alias="timeSignature")
    artist: Optional[str] = None
    description: Optional[str] = None
    sections: Optional[List[SectionBody]] = None
    shared_with: Optional[List[str]] = Field(default=None, alias="sharedWith")


class ShareBody(BaseModel):
    user_ids: List[str] = Field(alias="userIds")


class CreateSetlistBody(BaseModel):
    name: str = Field(min_length=1)
    description: Optional[str] = None
    shared_with: Optional[List[str]] = Field(default=None, alias="sharedWith")


class UpdateSetlistBody(BaseModel):
    name: Optional[str] = Field(default=None, min_length=1)
    description: Optional[str] = None
    shared_with: Optional[List[str]] = Field(default=None, alias="sharedWith")


class AddSongBody(BaseModel):
    song_id: str = Field(min_length=1, alias="songId")


class ReorderSongsBody(BaseModel):
    song_ids: List[str] = Field(alias="songIds")


class RegisterDeviceBody(BaseModel):
    fcm_token: str = Field(min_length=1, alias="fcmToken")
    device_info: Optional[str] = Field(default=None, alias="deviceInfo")
    platform: Optional[Literal["web", "android", "ios"]] = None


class UnregisterDeviceBody(BaseModel):
    fcm_token: str = Field(min_length=1, alias="fcmToken")


# -------------------------------------- responses --------------------------------------
# Field names match the dataclasses returned by the services, aliases match the request bodies.
class _Out(BaseModel):
    model_config = ConfigDict(populate_by_name=True, from_attributes=True)


class UserOut(_Out):
    id: str
    email: str
    name: str
    is_email_verified: bool = Field(alias="isEmailVerified")
    created_at: datetime = Field(alias="createdAt")


class RegisterOut(_Out):
    user: UserOut
    access_token: Optional[str] = None
    message: str


class AuthOut(_Out):
    user: UserOut
    access_token: str


class VerifyOut(AuthOut):
    message: str


class MessageOut(_Out):
    message: str


class _SharedOut(_Out):
    id: str
    user_id: str = Field(alias="userId")
    shared_with: List[str] = Field(default_factory=list, alias="sharedWith")
    created_at: datetime = Field(alias="createdAt")
    updated_at: datetime = Field(alias="updatedAt")

    @field_validator("shared_with", mode="before")
    @classmethod
    def _ordered(cls, value):
        return sorted(value) if isinstance(value, (set, frozenset)) else value


class SectionOut(_Out):
    name: str
    bars: int


class SongOut(_SharedOut):
    name: str
    bpm: int
    time_signature: int = Field(alias="timeSignature")
    artist: Optional[str] = None
    description: Optional[str] = None
    sections: List[SectionOut] = Field(default_factory=list)


class SetlistOut(_SharedOut):
    name: str
    description: Optional[str] = None
    songs: List[str] = Field(default_factory=list)


class FriendshipOut(_Out):
    id: str
    sender_id: str = Field(alias="senderId")
    receiver_id: str = Field(alias="receiverId")
    status: FriendshipStatus
    created_at: datetime = Field(alias="createdAt")
    updated_at: datetime = Field(alias="updatedAt")


class FriendOut(_Out):
    id: str
    user_id: str = Field(alias="userId")
    email: str
    name: str
    status: FriendshipStatus
    created_at: datetime = Field(alias="createdAt")


class DeviceOut(_Out):
    id: str
    platform: Optional[str] = None
    device_info: Optional[str] = Field(default=None, alias="deviceInfo")
