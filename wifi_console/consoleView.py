# SPDX-FileCopyrightText: 2024 Ferenc Nandor Janky <ferenj@effective-range.com>
# SPDX-FileCopyrightText: 2024 Attila Gombos <attila.gombos@effective-range.com>
# SPDX-License-Identifier: MIT

import sys
from typing import TextIO, Optional

from wifi_event import Notification
from wifi_model import Network, UnavailableNetwork
from wifi_station import (
    CredentialRequest,
    CredentialKind,
    CredentialShare,
    ListFocus,
    KnownRowKind,
    KnownSelection,
)
from wifi_console import WifiDevice

HELP_TEXT = '''Commands:
  show                             print device and network lists
  scan                             request a scan
  focus known|new                  select the list the cursor moves in
  up, down                         move the cursor
  connect                          connect to or disconnect from the selected network
  hidden <ssid> [open|wpa2|wpa3] [password]
                                   connect to a hidden network
  forget                           remove the selected saved network
  autoconnect                      toggle autoconnect of the selected known network
  share                            print the sharing payload of the selected known network
  unavailable                      show or hide saved networks out of range
  power                            toggle the wireless radio
  quit                             exit
While a credential prompt is active, type the secret or !cancel.'''

_PROMPTS = {
    CredentialKind.PSK: 'Passphrase for {network}',
    CredentialKind.PRIVATE_KEY_PASSPHRASE: 'Private key passphrase for {network}',
    CredentialKind.PASSWORD: 'Password for {network}',
    CredentialKind.USERNAME_AND_PASSWORD: 'Username and password for {network} (separated by a space)',
}


class ConsoleView(object):

    def __init__(self, output: Optional[TextIO] = None) -> None:
        self._output = output if output else sys.stdout

    def show_help(self) -> None:
        self._write(HELP_TEXT)

    def show_message(self, message: str) -> None:
        self._write(message)

    def show_notification(self, notification: Notification) -> None:
        self._write(f'[{notification.level.value}] {notification.message}')

    def show_prompt(self, request: CredentialRequest) -> None:
        prompt = _PROMPTS[request.kind].format(network=request.network_name)

        if request.prefill_username:
            prompt += f' (user: {request.prefill_username})'

        self._write(f'{prompt}, or !cancel:')

    def show_share(self, share: CredentialShare) -> None:
        self._write(f'Share {share.ssid}: {share.to_payload()}')

    def show_device(self, device: WifiDevice, focus: ListFocus) -> None:
        self._write(f'Device {device.interface} ({device.hw_address}) powered: {"on" if device.is_powered else "off"}')

        if not (session := device.session):
            return

        scanning = ', scanning' if session.is_scanning else ''
        self._write(f'State: {session.state}{scanning}')

        if session.diagnostic:
            diagnostic = session.diagnostic
            self._write(f'Link: {diagnostic.frequency} MHz, signal {diagnostic.signal_strength}%, '
                        f'{diagnostic.security}, {diagnostic.bitrate // 1000} Mbit/s')

        selection = session.resolve_known_selection() if focus == ListFocus.KNOWN else None

        self._write('Known networks:')

        if session.is_ethernet_connected:
            self._write(f'{self._cursor(selection, KnownRowKind.ETHERNET, 0)} ethernet (connected)')

        for index, network in enumerate(session.known_networks):
            self._write(f'{self._cursor(selection, KnownRowKind.NETWORK, index)} {self._format_network(network)}')

        if session.show_unavailable:
            for index, unavailable in enumerate(session.unavailable_networks):
                cursor = self._cursor(selection, KnownRowKind.UNAVAILABLE, index)
                self._write(f'{cursor} {self._format_unavailable(unavailable)}')

        self._write('New networks:')

        for index, network in enumerate(session.new_networks):
            cursor = '>' if focus == ListFocus.NEW and session.new_selection.index == index else ' '
            self._write(f'{cursor} {self._format_network(network)}')

    def _cursor(self, selection: Optional[KnownSelection], kind: KnownRowKind, index: int) -> str:
        return '>' if selection == KnownSelection(kind, index) else ' '

    def _format_network(self, network: Network) -> str:
        line = f'{network.name:<32} {network.security!s:<6} {network.signal_strength:>3}%'

        if network.profile:
            line += f' autoconnect: {"on" if network.profile.autoconnect else "off"}'

        if network.is_connected:
            line += ' (connected)'

        return line

    def _format_unavailable(self, network: UnavailableNetwork) -> str:
        last_connected = network.profile.last_connected_at()
        seen = last_connected.strftime('%Y-%m-%d %H:%M') if last_connected else 'never'
        return f'{network.name:<32} {network.profile.security!s:<6} unavailable, last connected: {seen}'

    def _write(self, line: str) -> None:
        self._output.write(f'{line}\n')
        self._output.flush()
