# SPDX-FileCopyrightText: 2024 Ferenc Nandor Janky <ferenj@effective-range.com>
# SPDX-FileCopyrightText: 2024 Attila Gombos <attila.gombos@effective-range.com>
# SPDX-License-Identifier: MIT

from enum import Enum
from typing import Optional

AP_FLAGS_PRIVACY = 0x1
AP_SEC_KEY_MGMT_802_1X = 0x200
AP_SEC_KEY_MGMT_SAE = 0x400


class SecurityClass(Enum):
    OPEN = 'open'
    WEP = 'wep'
    WPA = 'wpa'
    WPA2 = 'wpa2'
    WPA3 = 'wpa3'
    ENTERPRISE = '8021x'

    def __repr__(self) -> str:
        return self.value

    def __str__(self) -> str:
        return self.value

    def requires_password(self) -> bool:
        return self != SecurityClass.OPEN

    def is_enterprise(self) -> bool:
        return self == SecurityClass.ENTERPRISE

    def is_psk(self) -> bool:
        return self in (SecurityClass.WPA, SecurityClass.WPA2, SecurityClass.WPA3)

    @staticmethod
    def from_flags(flags: int, wpa_flags: int, rsn_flags: int) -> 'SecurityClass':
        """Classifies an access point by the flags NetworkManager reports for it.

        Enterprise key management wins over SAE, SAE over plain RSN, RSN over WPA.
        Privacy without any WPA or RSN flags means WEP.
        """
        if (wpa_flags | rsn_flags) & AP_SEC_KEY_MGMT_802_1X:
            return SecurityClass.ENTERPRISE
        if rsn_flags & AP_SEC_KEY_MGMT_SAE:
            return SecurityClass.WPA3
        if rsn_flags:
            return SecurityClass.WPA2
        if wpa_flags:
            return SecurityClass.WPA
        if flags & AP_FLAGS_PRIVACY:
            return SecurityClass.WEP
        return SecurityClass.OPEN

    @staticmethod
    def from_key_mgmt(key_mgmt: Optional[str], has_8021x: bool = False) -> 'SecurityClass':
        if has_8021x or key_mgmt in ('wpa-eap', 'wpa-eap-suite-b-192', 'ieee8021x'):
            return SecurityClass.ENTERPRISE
        if key_mgmt == 'sae':
            return SecurityClass.WPA3
        if key_mgmt == 'wpa-psk':
            return SecurityClass.WPA
        if key_mgmt == 'none':
            return SecurityClass.WEP
        return SecurityClass.OPEN

    @staticmethod
    def from_name(name: str) -> 'SecurityClass':
        for security in SecurityClass:
            if security.value == name.lower() or security.name == name.upper():
                return security
        raise ValueError(f'Unknown security class: {name}')


class DeviceState(Enum):
    UNKNOWN = 0
    UNMANAGED = 10
    UNAVAILABLE = 20
    DISCONNECTED = 30
    PREPARE = 40
    CONFIG = 50
    NEED_AUTH = 60
    IP_CONFIG = 70
    IP_CHECK = 80
    SECONDARIES = 90
    ACTIVATED = 100
    DEACTIVATING = 110
    FAILED = 120

    def __repr__(self) -> str:
        return self.name.lower()

    @staticmethod
    def from_code(code: int) -> 'DeviceState':
        try:
            return DeviceState(code)
        except ValueError:
            return DeviceState.UNKNOWN


class StationState(Enum):
    DISCONNECTED = 'disconnected'
    CONNECTING = 'connecting'
    CONNECTED = 'connected'
    DISCONNECTING = 'disconnecting'

    def __repr__(self) -> str:
        return self.value

    def __str__(self) -> str:
        return self.value

    @staticmethod
    def from_device_state(state: DeviceState) -> 'StationState':
        if state == DeviceState.ACTIVATED:
            return StationState.CONNECTED
        if DeviceState.PREPARE.value <= state.value <= DeviceState.SECONDARIES.value:
            return StationState.CONNECTING
        if state == DeviceState.DEACTIVATING:
            return StationState.DISCONNECTING
        return StationState.DISCONNECTED
