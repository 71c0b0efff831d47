from typing import Any, Callable, Optional

from wifi_model import AccessPointSnapshot, SavedProfile, SecurityClass, Network
from wifi_station import ITaskRunner


class InlineTaskRunner(ITaskRunner):

    def __init__(self) -> None:
        self.spawned: list[str] = []

    def spawn(self, name: str, target: Callable[..., Any], *args: Any) -> None:
        self.spawned.append(name)
        target(*args)


def create_ap(ssid: str, signal: int = 50, security: SecurityClass = SecurityClass.WPA2,
              frequency: int = 2412) -> AccessPointSnapshot:
    return AccessPointSnapshot(ssid, signal, security, frequency, f'00:11:22:33:44:{signal:02x}',
                               f'/org/freedesktop/NetworkManager/AccessPoint/{ssid}{signal}')


def create_profile(ssid: str, security: SecurityClass = SecurityClass.WPA, autoconnect: bool = True,
                   last_connected: int = 0) -> SavedProfile:
    return SavedProfile(f'/org/freedesktop/NetworkManager/Settings/{ssid}', ssid, security, autoconnect, False,
                        last_connected)


def create_network(ssid: str, signal: int = 50, security: SecurityClass = SecurityClass.WPA2,
                   profile: Optional[SavedProfile] = None, is_connected: bool = False) -> Network:
    return Network(create_ap(ssid, signal, security), profile, is_connected)
