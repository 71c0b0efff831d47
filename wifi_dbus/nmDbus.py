# SPDX-FileCopyrightText: 2024 Ferenc Nandor Janky <ferenj@effective-range.com>
# SPDX-FileCopyrightText: 2024 Attila Gombos <attila.gombos@effective-range.com>
# SPDX-License-Identifier: MIT

from threading import Event
from typing import Any, Optional, Callable

import gi

gi.require_version('NM', '1.0')

from context_logger import get_logger

from gi.repository import NM, GLib
from gi.repository.Gio import AsyncResult
from gi.repository.NM import DeviceWifi, Client, AccessPoint, RemoteConnection

from wifi_dbus import (
    INetworkManagerClient,
    ClientError,
    ScanInProgressError,
    DeviceNotFoundError,
)
from wifi_model import (
    AccessPointSnapshot,
    SavedProfile,
    DiagnosticInfo,
    DeviceState,
    SecurityClass,
)

log = get_logger('NetworkManagerClient')


class NetworkManagerClient(INetworkManagerClient):
    """Capability wrapper over a shared libnm client.

    Asynchronous libnm operations are started on the GLib main loop through the dispatcher
    and awaited by the calling worker thread until their finish callback runs.
    """

    def __init__(self, client: Client, timeout: float = 30, dispatcher: Optional[Callable[..., Any]] = None) -> None:
        self._client = client
        self._timeout = timeout
        self._dispatcher = dispatcher if dispatcher else GLib.idle_add

    def get_wifi_device_path(self, interface: Optional[str] = None) -> str:
        device = next((dev for dev in self._client.get_devices() if
                       isinstance(dev, DeviceWifi) and (not interface or dev.get_iface() == interface)), None)

        if not device:
            raise DeviceNotFoundError(f'No Wi-Fi device found for interface {interface or "any"}', 'get_device')

        return str(device.get_path())

    def get_device_interface(self, device_path: str) -> str:
        return str(self._get_device(device_path).get_iface())

    def get_device_hw_address(self, device_path: str) -> str:
        return str(self._get_device(device_path).get_hw_address())

    def is_radio_enabled(self) -> bool:
        return bool(self._client.wireless_get_enabled())

    def set_radio_enabled(self, enabled: bool) -> None:
        log.info('Setting wireless radio state', enabled=enabled)
        self._run_async(
            'set_radio_enabled',
            lambda callback: self._client.dbus_set_property(
                NM.DBUS_PATH, NM.DBUS_INTERFACE, 'WirelessEnabled', GLib.Variant('b', enabled),
                -1, None, callback, None),
            self._client.dbus_set_property_finish)

    def get_device_state(self, device_path: str) -> DeviceState:
        return DeviceState.from_code(int(self._get_device(device_path).get_state()))

    def has_active_ethernet_connection(self) -> bool:
        return any(dev.get_device_type() == NM.DeviceType.ETHERNET and dev.get_state() == NM.DeviceState.ACTIVATED
                   for dev in self._client.get_devices())

    def add_state_change_handler(self, device_path: str, handler: Any) -> None:
        device = self._get_device(device_path)

        def on_state_changed(dev: DeviceWifi, new: int, old: int, reason: int) -> None:
            handler(DeviceState.from_code(new))

        device.connect('state-changed', on_state_changed)
        log.info('Added state change handler', device=device_path)

    def request_scan(self, device_path: str) -> None:
        device = self._get_device(device_path)

        try:
            self._run_async(
                'request_scan',
                lambda callback: device.request_scan_async(None, callback, None),
                device.request_scan_finish)
        except ClientError as error:
            if 'not allowed' in str(error).lower():
                raise ScanInProgressError(str(error), 'request_scan')
            raise

    def list_visible_access_points(self, device_path: str) -> list[AccessPointSnapshot]:
        access_points = [self._to_snapshot(ap) for ap in self._get_device(device_path).get_access_points()]
        return sorted(access_points, key=lambda ap: ap.signal_strength, reverse=True)

    def list_saved_profiles(self) -> list[SavedProfile]:
        profiles = [self._to_profile(connection) for connection in self._client.get_connections()
                    if connection.get_connection_type() == NM.SETTING_WIRELESS_SETTING_NAME]
        return sorted(profiles, key=lambda profile: profile.last_connected, reverse=True)

    def get_active_ssid(self, device_path: str) -> Optional[str]:
        if ap := self._get_device(device_path).get_active_access_point():
            return bytes_to_str(ap.get_ssid())

        return None

    def get_active_ap_diagnostics(self, device_path: str) -> Optional[DiagnosticInfo]:
        device = self._get_device(device_path)

        if ap := device.get_active_access_point():
            snapshot = self._to_snapshot(ap)
            return DiagnosticInfo(snapshot.frequency, snapshot.signal_strength, snapshot.security,
                                  int(device.get_bitrate()))

        return None

    def activate_profile(self, profile_id: str, device_path: str) -> None:
        connection = self._get_connection(profile_id)
        device = self._get_device(device_path)

        log.info('Activating saved profile', profile=profile_id, device=device_path)

        self._run_async(
            'activate_profile',
            lambda callback: self._client.activate_connection_async(connection, device, None, None, callback, None),
            self._client.activate_connection_finish)

    def create_and_activate(self, device_path: str, access_point: AccessPointSnapshot,
                            secret: Optional[str] = None) -> None:
        device = self._get_device(device_path)
        connection = self._create_connection(access_point.ssid, access_point.security, secret, False)

        log.info('Creating and activating profile', ssid=access_point.ssid, security=access_point.security)

        self._run_async(
            'create_and_activate',
            lambda callback: self._client.add_and_activate_connection_async(
                connection, device, access_point.path or None, None, callback, None),
            self._client.add_and_activate_connection_finish)

    def create_and_activate_hidden(self, device_path: str, ssid: str, security: SecurityClass,
                                   secret: Optional[str] = None) -> None:
        device = self._get_device(device_path)
        connection = self._create_connection(ssid, security, secret, True)

        log.info('Creating and activating hidden profile', ssid=ssid, security=security)

        self._run_async(
            'create_and_activate_hidden',
            lambda callback: self._client.add_and_activate_connection_async(
                connection, device, None, None, callback, None),
            self._client.add_and_activate_connection_finish)

    def disconnect_device(self, device_path: str) -> None:
        device = self._get_device(device_path)

        log.info('Disconnecting device', device=device_path)

        self._run_async(
            'disconnect_device',
            lambda callback: device.disconnect_async(None, callback, None),
            device.disconnect_finish)

    def delete_profile(self, profile_id: str) -> None:
        connection = self._get_connection(profile_id)

        log.info('Deleting saved profile', profile=profile_id)

        self._run_async(
            'delete_profile',
            lambda callback: connection.delete_async(None, callback, None),
            connection.delete_finish)

    def set_autoconnect(self, profile_id: str, autoconnect: bool) -> None:
        connection = self._get_connection(profile_id)
        setting = connection.get_setting_connection()
        previous = bool(setting.get_autoconnect())
        setting.set_property(NM.SETTING_CONNECTION_AUTOCONNECT, autoconnect)

        log.info('Updating autoconnect', profile=profile_id, autoconnect=autoconnect)

        try:
            self._run_async(
                'set_autoconnect',
                lambda callback: connection.commit_changes_async(True, None, callback, None),
                connection.commit_changes_finish)
        except ClientError:
            # Cached connection must keep matching the stored profile
            setting.set_property(NM.SETTING_CONNECTION_AUTOCONNECT, previous)
            raise

    def get_secret(self, profile_id: str) -> Optional[str]:
        connection = self._get_connection(profile_id)

        secrets = self._run_async(
            'get_secret',
            lambda callback: connection.get_secrets_async(
                NM.SETTING_WIRELESS_SECURITY_SETTING_NAME, None, callback, None),
            connection.get_secrets_finish)

        if not secrets:
            return None

        security = secrets.unpack().get(NM.SETTING_WIRELESS_SECURITY_SETTING_NAME, {})
        secret = security.get(NM.SETTING_WIRELESS_SECURITY_PSK) or security.get(
            NM.SETTING_WIRELESS_SECURITY_WEP_KEY0)

        return str(secret) if secret else None

    def _get_device(self, device_path: str) -> DeviceWifi:
        device = self._client.get_device_by_path(device_path)

        if not isinstance(device, DeviceWifi):
            raise DeviceNotFoundError(f'Wi-Fi device not found: {device_path}', 'get_device')

        return device

    def _get_connection(self, profile_id: str) -> RemoteConnection:
        if connection := self._client.get_connection_by_path(profile_id):
            return connection

        raise ClientError(f'Saved profile not found: {profile_id}', 'get_connection')

    def _run_async(self, operation: str, start: Callable[[Any], None], finish: Callable[[AsyncResult], Any]) -> Any:
        completed = Event()
        outcome: dict[str, Any] = {}

        def on_finished(source: Any, result: AsyncResult, data: Any) -> None:
            try:
                outcome['result'] = finish(result)
            except GLib.Error as error:
                outcome['error'] = error
            completed.set()

        def on_dispatched() -> bool:
            try:
                start(on_finished)
            except GLib.Error as error:
                outcome['error'] = error
                completed.set()
            return False

        self._dispatcher(on_dispatched)

        if not completed.wait(self._timeout):
            log.error('Operation timed out', operation=operation, timeout=self._timeout)
            raise ClientError(f'{operation} timed out after {self._timeout} seconds', operation)

        if error := outcome.get('error'):
            log.error('Operation failed', operation=operation, error=error.message)
            raise ClientError(error.message, operation)

        return outcome.get('result')

    def _to_snapshot(self, ap: AccessPoint) -> AccessPointSnapshot:
        ssid = ap.get_ssid()
        security = SecurityClass.from_flags(int(ap.get_flags()), int(ap.get_wpa_flags()), int(ap.get_rsn_flags()))

        return AccessPointSnapshot(
            bytes_to_str(ssid) if ssid else '',
            int(ap.get_strength()),
            security,
            int(ap.get_frequency()),
            str(ap.get_bssid()),
            str(ap.get_path()),
        )

    def _to_profile(self, connection: RemoteConnection) -> SavedProfile:
        setting_connection = connection.get_setting_connection()
        setting_wireless = connection.get_setting_wireless()
        setting_security = connection.get_setting_wireless_security()

        ssid = setting_wireless.get_ssid() if setting_wireless else None
        key_mgmt = setting_security.get_key_mgmt() if setting_security else None
        has_8021x = connection.get_setting_802_1x() is not None

        return SavedProfile(
            str(connection.get_path()),
            bytes_to_str(ssid) if ssid else '',
            SecurityClass.from_key_mgmt(key_mgmt, has_8021x),
            bool(setting_connection.get_autoconnect()),
            bool(setting_wireless.get_hidden()) if setting_wireless else False,
            int(setting_connection.get_timestamp()),
        )

    def _create_connection(self, ssid: str, security: SecurityClass, secret: Optional[str],
                           hidden: bool) -> NM.SimpleConnection:
        setting_connection = NM.SettingConnection.new()
        setting_connection.set_property(NM.SETTING_CONNECTION_ID, ssid)
        setting_connection.set_property(NM.SETTING_CONNECTION_UUID, NM.utils_uuid_generate())
        setting_connection.set_property(NM.SETTING_CONNECTION_TYPE, NM.SETTING_WIRELESS_SETTING_NAME)

        setting_wireless = NM.SettingWireless.new()
        setting_wireless.set_property(NM.SETTING_WIRELESS_SSID, str_to_bytes(ssid))
        setting_wireless.set_property(NM.SETTING_WIRELESS_HIDDEN, hidden)

        connection = NM.SimpleConnection.new()
        connection.add_setting(setting_connection)
        connection.add_setting(setting_wireless)

        if security != SecurityClass.OPEN:
            connection.add_setting(self._create_security_setting(security, secret))

        return connection

    def _create_security_setting(self, security: SecurityClass, secret: Optional[str]) -> NM.SettingWirelessSecurity:
        setting_security = NM.SettingWirelessSecurity.new()

        if security == SecurityClass.WEP:
            setting_security.set_property(NM.SETTING_WIRELESS_SECURITY_KEY_MGMT, 'none')
            setting_security.set_property(NM.SETTING_WIRELESS_SECURITY_WEP_KEY0, secret)
        elif security == SecurityClass.WPA3:
            setting_security.set_property(NM.SETTING_WIRELESS_SECURITY_KEY_MGMT, 'sae')
            setting_security.set_property(NM.SETTING_WIRELESS_SECURITY_PSK, secret)
        elif security == SecurityClass.ENTERPRISE:
            setting_security.set_property(NM.SETTING_WIRELESS_SECURITY_KEY_MGMT, 'wpa-eap')
        else:
            setting_security.set_property(NM.SETTING_WIRELESS_SECURITY_KEY_MGMT, 'wpa-psk')
            setting_security.set_property(NM.SETTING_WIRELESS_SECURITY_PSK, secret)

        return setting_security


def bytes_to_str(glib_bytes: GLib.Bytes) -> str:
    data = glib_bytes.get_data()
    return data.decode('utf-8') if data else ''


def str_to_bytes(data: str) -> GLib.Bytes:
    return GLib.Bytes.new(data.encode())
