# SPDX-FileCopyrightText: 2024 Ferenc Nandor Janky <ferenj@effective-range.com>
# SPDX-FileCopyrightText: 2024 Attila Gombos <attila.gombos@effective-range.com>
# SPDX-License-Identifier: MIT

from wifi_event import Notification


class NotificationBoard(object):

    def __init__(self) -> None:
        self._notifications: list[Notification] = []

    def add(self, notification: Notification) -> None:
        self._notifications.append(notification)

    def tick(self) -> None:
        self._notifications = [notification for notification in self._notifications if notification.ttl > 0]

        for notification in self._notifications:
            notification.ttl -= 1

    def get_notifications(self) -> list[Notification]:
        return list(self._notifications)
