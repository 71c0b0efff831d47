# SPDX-FileCopyrightText: 2024 Ferenc Nandor Janky <ferenj@effective-range.com>
# SPDX-FileCopyrightText: 2024 Attila Gombos <attila.gombos@effective-range.com>
# SPDX-License-Identifier: MIT

from typing import Any, Optional

from wifi_model import AccessPointSnapshot, SavedProfile, DiagnosticInfo, DeviceState, SecurityClass


class ClientError(Exception):

    def __init__(self, message: str, operation: str = '') -> None:
        super().__init__(message)
        self.operation = operation


class ScanInProgressError(ClientError):
    pass


class DeviceNotFoundError(ClientError):
    pass


class INetworkManagerClient(object):

    def get_wifi_device_path(self, interface: Optional[str] = None) -> str:
        raise NotImplementedError()

    def get_device_interface(self, device_path: str) -> str:
        raise NotImplementedError()

    def get_device_hw_address(self, device_path: str) -> str:
        raise NotImplementedError()

    def is_radio_enabled(self) -> bool:
        raise NotImplementedError()

    def set_radio_enabled(self, enabled: bool) -> None:
        raise NotImplementedError()

    def get_device_state(self, device_path: str) -> DeviceState:
        raise NotImplementedError()

    def has_active_ethernet_connection(self) -> bool:
        raise NotImplementedError()

    def add_state_change_handler(self, device_path: str, handler: Any) -> None:
        raise NotImplementedError()

    def request_scan(self, device_path: str) -> None:
        raise NotImplementedError()

    def list_visible_access_points(self, device_path: str) -> list[AccessPointSnapshot]:
        raise NotImplementedError()

    def list_saved_profiles(self) -> list[SavedProfile]:
        raise NotImplementedError()

    def get_active_ssid(self, device_path: str) -> Optional[str]:
        raise NotImplementedError()

    def get_active_ap_diagnostics(self, device_path: str) -> Optional[DiagnosticInfo]:
        raise NotImplementedError()

    def activate_profile(self, profile_id: str, device_path: str) -> None:
        raise NotImplementedError()

    def create_and_activate(self, device_path: str, access_point: AccessPointSnapshot,
                            secret: Optional[str] = None) -> None:
        raise NotImplementedError()

    def create_and_activate_hidden(self, device_path: str, ssid: str, security: SecurityClass,
                                   secret: Optional[str] = None) -> None:
        raise NotImplementedError()

    def disconnect_device(self, device_path: str) -> None:
        raise NotImplementedError()

    def delete_profile(self, profile_id: str) -> None:
        raise NotImplementedError()

    def set_autoconnect(self, profile_id: str, autoconnect: bool) -> None:
        raise NotImplementedError()

    def get_secret(self, profile_id: str) -> Optional[str]:
        raise NotImplementedError()
