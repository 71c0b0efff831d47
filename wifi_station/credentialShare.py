# SPDX-FileCopyrightText: 2024 Ferenc Nandor Janky <ferenj@effective-range.com>
# SPDX-FileCopyrightText: 2024 Attila Gombos <attila.gombos@effective-range.com>
# SPDX-License-Identifier: MIT

from dataclasses import dataclass

_SPECIAL_CHARACTERS = '\\;,:"'


@dataclass(frozen=True)
class CredentialShare:
    ssid: str
    passphrase: str

    def to_payload(self) -> str:
        """Wi-Fi network configuration in the format scanned by phone cameras."""
        return f'WIFI:T:WPA;S:{_escape(self.ssid)};P:{_escape(self.passphrase)};;'


def _escape(value: str) -> str:
    return ''.join(f'\\{char}' if char in _SPECIAL_CHARACTERS else char for char in value)
