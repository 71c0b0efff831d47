# SPDX-FileCopyrightText: 2024 Ferenc Nandor Janky <ferenj@effective-range.com>
# SPDX-FileCopyrightText: 2024 Attila Gombos <attila.gombos@effective-range.com>
# SPDX-License-Identifier: MIT

from dataclasses import dataclass
from typing import Optional

from context_logger import get_logger

from wifi_dbus import INetworkManagerClient, ClientError
from wifi_event import IEventChannel, NotificationLevel
from wifi_station import ITaskRunner, StationSession, StationSnapshot

log = get_logger('WifiDevice')


class SessionCreationError(ClientError):
    pass


@dataclass
class DeviceSnapshot:
    is_powered: bool
    station: Optional[StationSnapshot] = None
    session: Optional[StationSession] = None


class WifiDevice(object):
    """Wireless device with its radio power state and, while powered, its station session."""

    def __init__(self, client: INetworkManagerClient, device_path: str, channel: IEventChannel, runner: ITaskRunner,
                 show_unavailable: bool = False) -> None:
        self.device_path = device_path
        self.interface = client.get_device_interface(device_path)
        self.hw_address = client.get_device_hw_address(device_path)
        self.is_powered = False
        self.session: Optional[StationSession] = None
        self._client = client
        self._channel = channel
        self._runner = runner
        self._show_unavailable = show_unavailable

    @staticmethod
    def create(client: INetworkManagerClient, interface: Optional[str], channel: IEventChannel,
               runner: ITaskRunner, show_unavailable: bool = False) -> 'WifiDevice':
        device_path = client.get_wifi_device_path(interface)
        device = WifiDevice(client, device_path, channel, runner, show_unavailable)

        log.info('Using Wi-Fi device', interface=device.interface, address=device.hw_address, path=device_path)

        return device

    def fetch(self) -> DeviceSnapshot:
        if not self._client.is_radio_enabled():
            return DeviceSnapshot(False)

        if self.session:
            return DeviceSnapshot(True, station=self.session.fetch())

        try:
            session = StationSession.create(self._client, self.device_path, self._show_unavailable)
        except ClientError as error:
            log.error('Failed to create station session', interface=self.interface, error=error)
            raise SessionCreationError(f'Failed to create station session: {error}', 'create_session') from error

        return DeviceSnapshot(True, session=session)

    def apply(self, snapshot: DeviceSnapshot) -> None:
        if self.is_powered != snapshot.is_powered:
            log.info('Device power state changed', interface=self.interface, powered=snapshot.is_powered)

        self.is_powered = snapshot.is_powered

        if not snapshot.is_powered:
            self._drop_session()
        elif snapshot.session and not self.session:
            self.session = snapshot.session
        elif snapshot.station and self.session:
            self.session.apply(snapshot.station)

    def reset(self) -> None:
        self._drop_session()

    def toggle_power(self) -> None:
        self._runner.spawn('toggle-power', self._set_power, not self.is_powered)

    def _set_power(self, enabled: bool) -> None:
        try:
            self._client.set_radio_enabled(enabled)
        except ClientError as error:
            log.error('Failed to change device power', interface=self.interface, error=error)
            self._channel.notify(f'Failed to power {"on" if enabled else "off"} device: {error}',
                                 NotificationLevel.ERROR)
        else:
            self._channel.notify(f'Device Powered {"On" if enabled else "Off"}')

    def _drop_session(self) -> None:
        if self.session:
            self._show_unavailable = self.session.show_unavailable
            log.info('Dropping station session', interface=self.interface)
            self.session = None
