# SPDX-FileCopyrightText: 2024 Ferenc Nandor Janky <ferenj@effective-range.com>
# SPDX-FileCopyrightText: 2024 Attila Gombos <attila.gombos@effective-range.com>
# SPDX-License-Identifier: MIT

import sys
from threading import Thread
from typing import Callable, Optional, TextIO

from context_logger import get_logger

from wifi_dbus import ClientError
from wifi_event import IEventChannel, AppEventType, NotificationLevel
from wifi_model import SecurityClass
from wifi_station import (
    AuthCoordinator,
    AuthRequestPendingError,
    AuthStateError,
    ConnectionOrchestrator,
    ConnectOutcome,
    CredentialKind,
    CredentialRequest,
    ITaskRunner,
    ListFocus,
    PendingConnectionError,
    StationSession,
)
from wifi_console import WifiDevice, ConsoleView

log = get_logger('CommandConsole')

CANCEL_COMMAND = '!cancel'


class CommandReader(object):
    """Forwards operator input lines to the event channel from a daemon thread."""

    def __init__(self, channel: IEventChannel, input_stream: Optional[TextIO] = None) -> None:
        self._channel = channel
        self._input = input_stream if input_stream else sys.stdin
        self._thread = Thread(target=self._read_lines, name='command-reader', daemon=True)

    def start(self) -> None:
        self._thread.start()

    def _read_lines(self) -> None:
        for line in self._input:
            self._channel.send(AppEventType.COMMAND, line.rstrip('\n'))

        log.info('Input closed')
        self._channel.send(AppEventType.QUIT)


class CommandConsole(object):

    def __init__(self, device: WifiDevice, orchestrator: ConnectionOrchestrator, auth: AuthCoordinator,
                 channel: IEventChannel, runner: ITaskRunner, view: ConsoleView) -> None:
        self._device = device
        self._orchestrator = orchestrator
        self._auth = auth
        self._channel = channel
        self._runner = runner
        self._view = view
        self.focus = ListFocus.KNOWN
        self._commands: dict[str, Callable[[list[str]], None]] = {
            'help': self._help,
            'show': self._show,
            'scan': self._scan,
            'focus': self._focus,
            'up': self._up,
            'down': self._down,
            'connect': self._connect,
            'hidden': self._hidden,
            'forget': self._forget,
            'autoconnect': self._autoconnect,
            'share': self._share,
            'unavailable': self._unavailable,
            'power': self._power,
            'quit': self._quit,
        }

    def execute(self, line: str) -> None:
        request = self._auth.get_request()

        try:
            if request:
                self._answer(request, line)
            elif parts := line.split():
                self._run_command(parts[0].lower(), parts[1:])
        except (ValueError, ClientError, AuthStateError, AuthRequestPendingError, PendingConnectionError) as error:
            log.error('Command failed', command='<credential>' if request else line, error=error)
            self._channel.notify(str(error), NotificationLevel.ERROR)

    def _run_command(self, command: str, args: list[str]) -> None:
        if handler := self._commands.get(command):
            handler(args)
        else:
            self._view.show_message(f'Unknown command: {command}, type help for the list of commands')

    def _answer(self, request: CredentialRequest, line: str) -> None:
        if line.strip() == CANCEL_COMMAND:
            if request.kind == CredentialKind.PSK:
                self._orchestrator.cancel_passphrase()
            else:
                self._auth.cancel()
            self._view.show_message(f'Cancelled credential request for {request.network_name}')
            return

        if not line.strip():
            self._view.show_message(f'Empty input, type the secret or {CANCEL_COMMAND}')
            return

        if request.kind == CredentialKind.PSK:
            self._orchestrator.submit_passphrase(line)
        elif request.kind == CredentialKind.PRIVATE_KEY_PASSPHRASE:
            self._auth.submit_private_key_passphrase(line)
        elif request.kind == CredentialKind.PASSWORD:
            self._auth.submit_password(line)
        else:
            parts = line.split(maxsplit=1)
            if len(parts) != 2:
                raise ValueError('Expected a username and a password separated by a space')
            self._auth.submit_username_and_password(parts[0], parts[1])

    def _help(self, args: list[str]) -> None:
        self._view.show_help()

    def _show(self, args: list[str]) -> None:
        self._view.show_device(self._device, self.focus)

    def _scan(self, args: list[str]) -> None:
        session = self._require_session()
        self._runner.spawn('scan', session.scan, self._channel)

    def _focus(self, args: list[str]) -> None:
        if len(args) != 1 or args[0] not in ('known', 'new'):
            raise ValueError('Usage: focus known|new')
        self.focus = ListFocus(args[0])

    def _up(self, args: list[str]) -> None:
        self._require_session().select_previous(self.focus)
        self._show(args)

    def _down(self, args: list[str]) -> None:
        self._require_session().select_next(self.focus)
        self._show(args)

    def _connect(self, args: list[str]) -> None:
        outcome = self._orchestrator.toggle_connect(self._require_session(), self.focus)

        if outcome == ConnectOutcome.IGNORED:
            self._view.show_message('No network selected to connect to')

    def _hidden(self, args: list[str]) -> None:
        if not args:
            raise ValueError('Usage: hidden <ssid> [open|wpa2|wpa3] [password]')

        ssid = args[0]
        security = SecurityClass.from_name(args[1]) if len(args) > 1 else SecurityClass.WPA2
        password = args[2] if len(args) > 2 else None

        self._require_session()
        self._orchestrator.connect_hidden(ssid, security, password)

    def _forget(self, args: list[str]) -> None:
        if profile := self._require_session().get_selected_profile():
            self._orchestrator.forget(profile)
        else:
            self._view.show_message('No saved network selected')

    def _autoconnect(self, args: list[str]) -> None:
        network = self._require_session().get_selected_known_network()

        if network and network.profile:
            self._orchestrator.toggle_autoconnect(network.profile)
        else:
            self._view.show_message('No known network selected')

    def _share(self, args: list[str]) -> None:
        network = self._require_session().get_selected_known_network()

        if network and network.profile:
            self._orchestrator.share(network.profile)
        else:
            self._view.show_message('No known network selected')

    def _unavailable(self, args: list[str]) -> None:
        self._require_session().toggle_show_unavailable()
        self._show(args)

    def _power(self, args: list[str]) -> None:
        self._device.toggle_power()

    def _quit(self, args: list[str]) -> None:
        self._channel.send(AppEventType.QUIT)

    def _require_session(self) -> StationSession:
        if not self._device.session:
            raise ValueError('Wi-Fi device is powered off or not ready')
        return self._device.session
