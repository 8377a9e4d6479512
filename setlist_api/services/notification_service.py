"""Push device registry and best-effort notification dispatch."""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Optional, Protocol

from setlist_api.core.config import get_settings
from setlist_api.core.utils import utcnow
from setlist_api.domain.records import Device
from setlist_api.repositories.collections import DEVICES, Collection
from setlist_api.repositories.document_store import DocumentStore

logger = logging.getLogger(__name__)

PLATFORMS = {"web", "android", "ios"}
DEAD_TOKEN_ERRORS = {"invalid-registration-token", "registration-token-not-registered"}


@dataclass
class PushPayload:
    title: str
    body: str
    icon: str = "/icon-192.png"
    click_action: Optional[str] = None
    data: dict[str, str] = field(default_factory=dict)


@dataclass
class DeliveryResult:
    token: str
    success: bool
    error_code: Optional[str] = None


class PushGateway(Protocol):
    """Outbound push transport (FCM or similar)."""

    def send(self, tokens: list[str], payload: PushPayload) -> list[DeliveryResult]: ...


class LoggingPushGateway:
    """Gateway used when no push provider is wired: records the attempt and reports failure."""

    def send(self, tokens: list[str], payload: PushPayload) -> list[DeliveryResult]:
        logger.info("Push %r not delivered to %d device(s): no gateway configured", payload.title, len(tokens))
        return [DeliveryResult(token=t, success=False, error_code="no-gateway") for t in tokens]


class NotificationService:
    def __init__(self, store: DocumentStore, gateway: Optional[PushGateway] = None) -> None:
        self.devices: Collection[Device] = Collection(store, DEVICES, Device)
        self.gateway = gateway or LoggingPushGateway()

    # -------------------------------------- devices --------------------------------------
    def register_device(
        self,
        user_id: str,
        fcm_token: str,
        device_info: Optional[str] = None,
        platform: Optional[str] = None,
    ) -> Device:
        if platform is not None and platform not in PLATFORMS:
            raise ValueError(f"Unsupported platform: {platform}")
        now = utcnow()
        existing = self.devices.find_by("fcmToken", fcm_token)
        if existing:
            # the same browser may now belong to a different account
            device = existing[0]
            device.user_id = user_id
            device.device_info = device_info
            device.platform = platform
            device.updated_at = now
            logger.info("Updated device token for user %s", user_id)
            return self.devices.save(device)
        device = self.devices.create(
            Device(
                user_id=user_id,
                fcm_token=fcm_token,
                device_info=device_info,
                platform=platform,
                created_at=now,
                updated_at=now,
            )
        )
        logger.info("Registered new device for user %s", user_id)
        return device

    def unregister_device(self, fcm_token: str, user_id: Optional[str] = None) -> int:
        """Delete devices holding the token; with ``user_id`` only that user's devices."""
        devices = [
            d for d in self.devices.find_by("fcmToken", fcm_token) if user_id is None or d.user_id == user_id
        ]
        for device in devices:
            self.devices.delete(device.id)
            logger.info("Unregistered device %s", device.id)
        return len(devices)

    def get_user_devices(self, user_id: str) -> list[Device]:
        return self.devices.find_by("userId", user_id)

    # -------------------------------------- dispatch --------------------------------------
    def send_to_user(self, user_id: str, payload: PushPayload) -> bool:
        tokens = [d.fcm_token for d in self.get_user_devices(user_id)]
        if not tokens:
            logger.warning("No devices found for user %s", user_id)
            return False
        return self.send_to_tokens(tokens, payload)

    def send_to_users(self, user_ids: list[str], payload: PushPayload) -> bool:
        tokens = [d.fcm_token for uid in user_ids for d in self.get_user_devices(uid)]
        if not tokens:
            logger.warning("No devices found for any of the specified users")
            return False
        return self.send_to_tokens(tokens, payload)

    def send_to_tokens(self, tokens: list[str], payload: PushPayload) -> bool:
        if not tokens:
            return False
        try:
            results = self.gateway.send(tokens, payload)
        except Exception as exc:  # gateway failures never reach the caller
            logger.error("Error sending push notification: %s", exc)
            return False

        delivered = sum(1 for r in results if r.success)
        logger.info("Push notification sent: %d/%d successful", delivered, len(tokens))
        for result in results:
            if result.success:
                continue
            logger.warning("Failed to send to a device: %s", result.error_code)
            if result.error_code in DEAD_TOKEN_ERRORS:
                self.unregister_device(result.token)
        return delivered > 0

    # -------------------------------------- app notifications --------------------------------------
    def _link(self, path: str) -> str:
        return f"{get_settings().public_base_url}{path}"

    def notify_friend_request(self, recipient_id: str, sender_name: str) -> bool:
        return self.send_to_user(
            recipient_id,
            PushPayload(
                title="Nuova richiesta di amicizia",
                body=f"{sender_name} ti ha inviato una richiesta di amicizia",
                click_action=self._link("/friends"),
                data={"type": "friend_request", "senderName": sender_name},
            ),
        )

    def notify_friend_accepted(self, sender_id: str, friend_name: str) -> bool:
        return self.send_to_user(
            sender_id,
            PushPayload(
                title="Richiesta accettata!",
                body=f"{friend_name} ha accettato la tua richiesta di amicizia",
                click_action=self._link("/friends"),
                data={"type": "friend_accepted", "friendName": friend_name},
            ),
        )

    def notify_shared_song(self, recipient_id: str, sender_name: str, song_name: str) -> bool:
        return self.send_to_user(
            recipient_id,
            PushPayload(
                title="Nuovo brano condiviso",
                body=f'{sender_name} ha condiviso "{song_name}" con te',
                click_action=self._link("/songs"),
                data={"type": "shared_song", "senderName": sender_name, "songName": song_name},
            ),
        )

    def notify_shared_setlist(self, recipient_id: str, sender_name: str, setlist_name: str) -> bool:
        return self.send_to_user(
            recipient_id,
            PushPayload(
                title="Nuova setlist condivisa",
                body=f'{sender_name} ha condiviso la setlist "{setlist_name}" con te',
                click_action=self._link("/setlists"),
                data={"type": "shared_setlist", "senderName": sender_name, "setlistName": setlist_name},
            ),
        )
