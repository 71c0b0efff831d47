# SPDX-FileCopyrightText: 2024 Ferenc Nandor Janky <ferenj@effective-range.com>
# SPDX-FileCopyrightText: 2024 Attila Gombos <attila.gombos@effective-range.com>
# SPDX-License-Identifier: MIT

from dataclasses import dataclass, field
from threading import Lock
from typing import Optional

from context_logger import get_logger

from wifi_dbus import INetworkManagerClient, ClientError, ScanInProgressError
from wifi_event import IEventChannel, AppEventType, NotificationLevel
from wifi_model import (
    AccessPointSnapshot,
    SavedProfile,
    DiagnosticInfo,
    DeviceState,
    StationState,
    Network,
    UnavailableNetwork,
)
from wifi_station import NetworkCatalog, SelectionState, ListFocus, KnownRowKind, KnownSelection

log = get_logger('StationSession')

# Hidden SSIDs never become known networks, so the empty key cannot clash with one.
ETHERNET_ROW_KEY = ''


@dataclass
class StationSnapshot:
    device_state: DeviceState
    is_ethernet_connected: bool = False
    active_ssid: Optional[str] = None
    access_points: list[AccessPointSnapshot] = field(default_factory=list)
    saved_profiles: list[SavedProfile] = field(default_factory=list)
    diagnostic: Optional[DiagnosticInfo] = None


class StationSession(object):
    """Live view of one wireless interface: its state and the known, new and unavailable networks.

    fetch() only talks to the client and is safe to run as a background task. apply() and
    everything reading the lists belong to the foreground thread.
    """

    def __init__(self, client: INetworkManagerClient, device_path: str, catalog: Optional[NetworkCatalog] = None,
                 show_unavailable: bool = False) -> None:
        self.device_path = device_path
        self.state = StationState.DISCONNECTED
        self.is_scanning = False
        self.is_ethernet_connected = False
        self.connected_network: Optional[Network] = None
        self.new_networks: list[Network] = []
        self.known_networks: list[Network] = []
        self.unavailable_networks: list[UnavailableNetwork] = []
        self.new_selection = SelectionState()
        self.known_selection = SelectionState()
        self.diagnostic: Optional[DiagnosticInfo] = None
        self.show_unavailable = show_unavailable
        self._client = client
        self._catalog = catalog if catalog else NetworkCatalog()
        self._refresh_lock = Lock()

    @staticmethod
    def create(client: INetworkManagerClient, device_path: str, show_unavailable: bool = False) -> 'StationSession':
        session = StationSession(client, device_path, show_unavailable=show_unavailable)

        try:
            client.request_scan(device_path)
        except ClientError as error:
            log.warning('Initial scan request failed', device=device_path, error=error)

        session.refresh()

        log.info('Station session created', device=device_path, known=len(session.known_networks),
                 new=len(session.new_networks))

        return session

    def fetch(self) -> StationSnapshot:
        active_ssid = self._client.get_active_ssid(self.device_path)

        return StationSnapshot(
            self._client.get_device_state(self.device_path),
            self._client.has_active_ethernet_connection(),
            active_ssid,
            self._client.list_visible_access_points(self.device_path),
            self._client.list_saved_profiles(),
            self._client.get_active_ap_diagnostics(self.device_path) if active_ssid else None,
        )

    def apply(self, snapshot: StationSnapshot) -> None:
        self.state = StationState.from_device_state(snapshot.device_state)
        self.is_ethernet_connected = snapshot.is_ethernet_connected
        self.is_scanning = False

        result = self._catalog.reconcile(snapshot.access_points, snapshot.saved_profiles, snapshot.active_ssid)

        new = self._catalog.merge_preserving_selection(self.new_networks, result.new, self.new_selection)
        self.new_networks, self.new_selection = new.networks, new.selection

        previous_selection = self.known_selection
        known = self._catalog.merge_preserving_selection(self.known_networks, result.known, previous_selection)
        self.known_networks = known.networks
        self.unavailable_networks = self._catalog.find_unavailable(self.known_networks, snapshot.saved_profiles)

        if known.selection is previous_selection and previous_selection.index is not None:
            self._relocate_known_selection(previous_selection.key)
        else:
            self.known_selection = SelectionState()
            self._relocate_known_selection(None)

        self.connected_network = next(
            (network for network in self.known_networks + self.new_networks if network.is_connected), None)
        self.diagnostic = snapshot.diagnostic if self.connected_network else None

    def refresh(self) -> bool:
        if not self._refresh_lock.acquire(blocking=False):
            log.debug('Refresh already in progress, skipping', device=self.device_path)
            return False

        try:
            self.apply(self.fetch())
        finally:
            self._refresh_lock.release()

        return True

    def scan(self, channel: IEventChannel) -> None:
        try:
            self._client.request_scan(self.device_path)
        except ScanInProgressError:
            channel.notify('Scanning in progress')
        except ClientError as error:
            log.error('Failed to start scanning', device=self.device_path, error=error)
            channel.notify(f'Failed to start scanning: {error}', NotificationLevel.ERROR)
        else:
            channel.notify('Start Scanning')
            channel.send(AppEventType.SCAN_STARTED, self.device_path)

    def known_total_rows(self) -> int:
        rows = len(self.known_networks)

        if self.is_ethernet_connected:
            rows += 1

        if self.show_unavailable:
            rows += len(self.unavailable_networks)

        return rows

    def resolve_known_selection(self) -> Optional[KnownSelection]:
        return self._resolve_known_row(self.known_selection.index)

    def get_selected_new_network(self) -> Optional[Network]:
        index = self.new_selection.index

        if index is not None and index < len(self.new_networks):
            return self.new_networks[index]

        return None

    def get_selected_known_network(self) -> Optional[Network]:
        selection = self.resolve_known_selection()

        if selection and selection.kind == KnownRowKind.NETWORK:
            return self.known_networks[selection.index]

        return None

    def get_selected_profile(self) -> Optional[SavedProfile]:
        selection = self.resolve_known_selection()

        if not selection:
            return None

        if selection.kind == KnownRowKind.NETWORK:
            return self.known_networks[selection.index].profile

        if selection.kind == KnownRowKind.UNAVAILABLE:
            return self.unavailable_networks[selection.index].profile

        return None

    def select_next(self, focus: ListFocus) -> None:
        if focus == ListFocus.NEW:
            index = self.new_selection.next_index(len(self.new_networks))
            self.new_selection.select(index, self.new_networks[index].name if index is not None else None)
        else:
            index = self.known_selection.next_index(self.known_total_rows())
            self.known_selection.select(index, self._known_row_key(index))

    def select_previous(self, focus: ListFocus) -> None:
        if focus == ListFocus.NEW:
            index = self.new_selection.previous_index(len(self.new_networks))
            self.new_selection.select(index, self.new_networks[index].name if index is not None else None)
        else:
            index = self.known_selection.previous_index(self.known_total_rows())
            self.known_selection.select(index, self._known_row_key(index))

    def toggle_show_unavailable(self) -> None:
        self.show_unavailable = not self.show_unavailable
        self._relocate_known_selection(self.known_selection.key)

    def mark_scanning(self) -> None:
        self.is_scanning = True

    def _resolve_known_row(self, index: Optional[int]) -> Optional[KnownSelection]:
        if index is None:
            return None

        if self.is_ethernet_connected:
            if index == 0:
                return KnownSelection(KnownRowKind.ETHERNET)
            index -= 1

        if index < len(self.known_networks):
            return KnownSelection(KnownRowKind.NETWORK, index)

        index -= len(self.known_networks)

        if self.show_unavailable and index < len(self.unavailable_networks):
            return KnownSelection(KnownRowKind.UNAVAILABLE, index)

        return None

    def _relocate_known_selection(self, key: Optional[str]) -> None:
        """Moves the cursor to the row holding key, or to the first row when that row is gone."""
        index = self._find_known_row(key)

        if index is None and self.known_total_rows() > 0:
            index = 0

        self.known_selection.select(index, self._known_row_key(index))

    def _find_known_row(self, key: Optional[str]) -> Optional[int]:
        if key is None:
            return None

        return next((index for index in range(self.known_total_rows()) if self._known_row_key(index) == key), None)

    def _known_row_key(self, index: Optional[int]) -> Optional[str]:
        selection = self._resolve_known_row(index)

        if not selection:
            return None
        if selection.kind == KnownRowKind.ETHERNET:
            return ETHERNET_ROW_KEY
        if selection.kind == KnownRowKind.NETWORK:
            return self.known_networks[selection.index].name
        return self.unavailable_networks[selection.index].name
