# SPDX-FileCopyrightText: 2024 Ferenc Nandor Janky <ferenj@effective-range.com>
# SPDX-FileCopyrightText: 2024 Attila Gombos <attila.gombos@effective-range.com>
# SPDX-License-Identifier: MIT

from dataclasses import dataclass
from enum import Enum
from typing import Any

DEFAULT_NOTIFICATION_TTL = 3


class AppEventType(Enum):
    TICK = 'tick'
    COMMAND = 'command'
    REFRESHED = 'refreshed'
    REFRESH_FAILED = 'refresh-failed'
    NOTIFICATION = 'notification'
    SCAN_STARTED = 'scan-started'
    DEVICE_STATE_CHANGED = 'device-state-changed'
    AUTH_REQUESTED = 'auth-requested'
    AUTH_REQUEST_KEY_PASSPHRASE = 'auth-request-key-passphrase'
    AUTH_REQUEST_PASSWORD = 'auth-request-password'
    AUTH_REQUEST_USERNAME_AND_PASSWORD = 'auth-request-username-and-password'
    CONFIGURE_ENTERPRISE_NETWORK = 'configure-enterprise-network'
    SHARE_READY = 'share-ready'
    RESET_REQUESTED = 'reset-requested'
    QUIT = 'quit'

    def __repr__(self) -> str:
        return self.value


class NotificationLevel(Enum):
    INFO = 'info'
    WARNING = 'warning'
    ERROR = 'error'

    def __repr__(self) -> str:
        return self.value


@dataclass
class Notification:
    message: str
    level: NotificationLevel = NotificationLevel.INFO
    ttl: int = DEFAULT_NOTIFICATION_TTL


@dataclass
class AppEvent:
    event_type: AppEventType
    data: Any = None
