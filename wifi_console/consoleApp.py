# SPDX-FileCopyrightText: 2024 Ferenc Nandor Janky <ferenj@effective-range.com>
# SPDX-FileCopyrightText: 2024 Attila Gombos <attila.gombos@effective-range.com>
# SPDX-License-Identifier: MIT

from dataclasses import dataclass
from typing import Any, Callable

from common_utility import IReusableTimer
from context_logger import get_logger

from wifi_dbus import DeviceNotFoundError
from wifi_event import IEventChannel, AppEvent, AppEventType, NotificationLevel
from wifi_model import DeviceState
from wifi_station import AuthCoordinator, ConnectionOrchestrator, ITaskRunner
from wifi_console import WifiDevice, NotificationBoard, ConsoleView, CommandConsole, SessionCreationError

log = get_logger('ConsoleApp')


@dataclass
class ConsoleAppConfig:
    refresh_interval: float
    receive_timeout: float = 0.5


class ConsoleApp(object):
    """Foreground loop: the only place where device, session and prompt state is modified.

    Background tasks and the tick timer reach it exclusively through the event channel.
    """

    def __init__(self, device: WifiDevice, orchestrator: ConnectionOrchestrator, auth: AuthCoordinator,
                 channel: IEventChannel, runner: ITaskRunner, timer: IReusableTimer, console: CommandConsole,
                 view: ConsoleView, config: ConsoleAppConfig) -> None:
        self._device = device
        self._orchestrator = orchestrator
        self._auth = auth
        self._channel = channel
        self._runner = runner
        self._timer = timer
        self._console = console
        self._view = view
        self._config = config
        self._board = NotificationBoard()
        self._running = False
        self._refresh_in_flight = False
        self._handlers: dict[AppEventType, Callable[[Any], None]] = {
            AppEventType.TICK: self._on_tick,
            AppEventType.COMMAND: self._console.execute,
            AppEventType.REFRESHED: self._on_refreshed,
            AppEventType.REFRESH_FAILED: self._on_refresh_failed,
            AppEventType.NOTIFICATION: self._on_notification,
            AppEventType.SCAN_STARTED: self._on_scan_started,
            AppEventType.DEVICE_STATE_CHANGED: self._on_device_state_changed,
            AppEventType.AUTH_REQUESTED: self._view.show_prompt,
            AppEventType.AUTH_REQUEST_KEY_PASSPHRASE: self._view.show_prompt,
            AppEventType.AUTH_REQUEST_PASSWORD: self._view.show_prompt,
            AppEventType.AUTH_REQUEST_USERNAME_AND_PASSWORD: self._view.show_prompt,
            AppEventType.CONFIGURE_ENTERPRISE_NETWORK: self._on_configure_enterprise,
            AppEventType.SHARE_READY: self._view.show_share,
            AppEventType.RESET_REQUESTED: self._on_reset_requested,
            AppEventType.QUIT: self._on_quit,
        }

    def get_board(self) -> NotificationBoard:
        return self._board

    def is_running(self) -> bool:
        return self._running

    def run(self) -> None:
        self._running = True
        self._orchestrator.set_device_path(self._device.device_path)
        self._request_refresh()
        self._timer.start(self._config.refresh_interval, self._send_tick)

        log.info('Console started', interface=self._device.interface)

        while self._running:
            if event := self._channel.receive(self._config.receive_timeout):
                self.handle(event)

        self._timer.cancel()

        log.info('Console stopped')

    def shutdown(self) -> None:
        self._channel.send(AppEventType.QUIT)

    def handle(self, event: AppEvent) -> None:
        log.debug('Handling event', event_type=event.event_type)
        self._handlers[event.event_type](event.data)

    def _send_tick(self) -> None:
        self._channel.send(AppEventType.TICK)
        self._timer.restart()

    def _on_tick(self, data: Any) -> None:
        self._board.tick()
        self._request_refresh()

    def _request_refresh(self) -> None:
        if self._refresh_in_flight:
            log.debug('Previous refresh still in progress, skipping')
            return

        self._refresh_in_flight = True
        self._runner.spawn('refresh', self._refresh)

    def _refresh(self) -> None:
        try:
            snapshot = self._device.fetch()
        except Exception as error:
            self._channel.send(AppEventType.REFRESH_FAILED, error)
        else:
            self._channel.send(AppEventType.REFRESHED, snapshot)

    def _on_refreshed(self, snapshot: Any) -> None:
        self._refresh_in_flight = False
        self._device.apply(snapshot)

    def _on_refresh_failed(self, error: Any) -> None:
        self._refresh_in_flight = False
        log.error('Failed to refresh device', error=error)

        if isinstance(error, (DeviceNotFoundError, SessionCreationError)):
            self._channel.send(AppEventType.RESET_REQUESTED)
        else:
            self._channel.notify(f'Failed to refresh: {error}', NotificationLevel.ERROR)

    def _on_notification(self, notification: Any) -> None:
        self._board.add(notification)
        self._view.show_notification(notification)

    def _on_scan_started(self, device_path: Any) -> None:
        if self._device.session:
            self._device.session.mark_scanning()

    def _on_device_state_changed(self, state: DeviceState) -> None:
        log.info('Device state changed', state=state)
        self._request_refresh()

    def _on_configure_enterprise(self, network_name: Any) -> None:
        self._channel.notify(f'{network_name} uses 802.1X, configure it with the connection service first',
                             NotificationLevel.WARNING)

    def _on_reset_requested(self, data: Any) -> None:
        log.warning('Resetting station', interface=self._device.interface)

        if self._orchestrator.get_pending():
            self._orchestrator.cancel_passphrase()

        self._auth.reset()
        self._device.reset()

    def _on_quit(self, data: Any) -> None:
        self._running = False
