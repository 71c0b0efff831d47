# SPDX-FileCopyrightText: 2024 Ferenc Nandor Janky <ferenj@effective-range.com>
# SPDX-FileCopyrightText: 2024 Attila Gombos <attila.gombos@effective-range.com>
# SPDX-License-Identifier: MIT

from dataclasses import dataclass
from datetime import datetime, timezone
from typing import Optional

from wifi_model import SecurityClass


@dataclass(frozen=True)
class AccessPointSnapshot:
    ssid: str
    signal_strength: int
    security: SecurityClass
    frequency: int = 0
    bssid: str = ''
    path: str = ''

    def is_hidden(self) -> bool:
        return not self.ssid

    def band(self) -> str:
        if self.frequency >= 5925:
            return '6 GHz'
        if self.frequency >= 3000:
            return '5 GHz'
        return '2.4 GHz'

    def channel(self) -> int:
        if self.frequency == 2484:
            return 14
        if self.frequency >= 5955:
            return (self.frequency - 5950) // 5
        if self.frequency >= 5000:
            return (self.frequency - 5000) // 5
        if self.frequency >= 2412:
            return (self.frequency - 2407) // 5
        return 0


@dataclass
class SavedProfile:
    profile_id: str
    ssid: str
    security: SecurityClass
    autoconnect: bool = True
    hidden: bool = False
    last_connected: int = 0

    def last_connected_at(self) -> Optional[datetime]:
        if self.last_connected > 0:
            return datetime.fromtimestamp(self.last_connected, timezone.utc)
        return None


class Network(object):

    def __init__(self, access_point: AccessPointSnapshot, profile: Optional[SavedProfile] = None,
                 is_connected: bool = False) -> None:
        self.access_point = access_point
        self.profile = profile
        self.is_connected = is_connected

    def __repr__(self) -> str:
        return (f'Network(name={self.name}, security={self.security}, signal={self.signal_strength}, '
                f'known={self.known}, connected={self.is_connected})')

    def __eq__(self, other: object) -> bool:
        if isinstance(other, Network):
            return (self.access_point == other.access_point and self.profile == other.profile
                    and self.is_connected == other.is_connected)
        return False

    @property
    def name(self) -> str:
        return self.access_point.ssid

    @property
    def security(self) -> SecurityClass:
        return self.access_point.security

    @property
    def signal_strength(self) -> int:
        return self.access_point.signal_strength

    @property
    def known(self) -> bool:
        return self.profile is not None

    def requires_password(self) -> bool:
        return not self.known and self.security.requires_password()

    def is_enterprise(self) -> bool:
        return self.security.is_enterprise()

    def update_from(self, other: 'Network') -> None:
        self.access_point = other.access_point
        self.is_connected = other.is_connected
        if self.profile and other.profile:
            self.profile.autoconnect = other.profile.autoconnect


@dataclass
class UnavailableNetwork:
    profile: SavedProfile

    @property
    def name(self) -> str:
        return self.profile.ssid


@dataclass(frozen=True)
class DiagnosticInfo:
    frequency: int
    signal_strength: int
    security: SecurityClass
    bitrate: int = 0
