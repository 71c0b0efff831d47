# SPDX-FileCopyrightText: 2024 Ferenc Nandor Janky <ferenj@effective-range.com>
# SPDX-FileCopyrightText: 2024 Attila Gombos <attila.gombos@effective-range.com>
# SPDX-License-Identifier: MIT

from queue import Queue, Empty
from typing import Any, Optional

from context_logger import get_logger

from wifi_event import AppEvent, AppEventType, Notification, NotificationLevel, DEFAULT_NOTIFICATION_TTL

log = get_logger('EventChannel')


class IEventChannel(object):

    def send(self, event_type: AppEventType, data: Any = None) -> None:
        raise NotImplementedError()

    def notify(self, message: str, level: NotificationLevel = NotificationLevel.INFO) -> None:
        raise NotImplementedError()

    def receive(self, timeout: Optional[float] = None) -> Optional[AppEvent]:
        raise NotImplementedError()


class EventChannel(IEventChannel):
    """Multi-producer, single-consumer channel between background tasks and the foreground loop."""

    def __init__(self, notification_ttl: int = DEFAULT_NOTIFICATION_TTL) -> None:
        self._queue: Queue[AppEvent] = Queue()
        self._notification_ttl = notification_ttl

    def send(self, event_type: AppEventType, data: Any = None) -> None:
        self._queue.put(AppEvent(event_type, data))

    def notify(self, message: str, level: NotificationLevel = NotificationLevel.INFO) -> None:
        log.debug('Notification', message=message, level=level)
        self.send(AppEventType.NOTIFICATION, Notification(message, level, self._notification_ttl))

    def receive(self, timeout: Optional[float] = None) -> Optional[AppEvent]:
        try:
            return self._queue.get(timeout=timeout)
        except Empty:
            return None
