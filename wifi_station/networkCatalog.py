# SPDX-FileCopyrightText: 2024 Ferenc Nandor Janky <ferenj@effective-range.com>
# SPDX-FileCopyrightText: 2024 Attila Gombos <attila.gombos@effective-range.com>
# SPDX-License-Identifier: MIT

from dataclasses import dataclass, field
from typing import Optional

from context_logger import get_logger

from wifi_model import AccessPointSnapshot, SavedProfile, Network, UnavailableNetwork
from wifi_station import SelectionState

log = get_logger('NetworkCatalog')


@dataclass
class CatalogResult:
    new: list[Network] = field(default_factory=list)
    known: list[Network] = field(default_factory=list)
    connected: Optional[Network] = None


@dataclass
class MergeResult:
    networks: list[Network]
    selection: SelectionState


class NetworkCatalog(object):
    """Turns raw scan results and saved profiles into the known, new and unavailable network lists."""

    def reconcile(self, scanned: list[AccessPointSnapshot], saved: list[SavedProfile],
                  active_ssid: Optional[str]) -> CatalogResult:
        result = CatalogResult()

        for access_point in self._deduplicate(scanned):
            profile = next((profile for profile in saved if profile.ssid == access_point.ssid), None)
            network = Network(access_point, profile)

            if active_ssid is not None and network.name == active_ssid and result.connected is None:
                network.is_connected = True
                result.connected = network

            if network.known:
                result.known.append(network)
            else:
                result.new.append(network)

        log.debug('Reconciled networks', known=len(result.known), new=len(result.new),
                  connected=result.connected.name if result.connected else None)

        return result

    def find_unavailable(self, known: list[Network], saved: list[SavedProfile]) -> list[UnavailableNetwork]:
        visible = {network.name for network in known}
        return [UnavailableNetwork(profile) for profile in saved if profile.ssid not in visible]

    def merge_preserving_selection(self, previous: list[Network], fresh: list[Network],
                                   previous_selection: Optional[SelectionState]) -> MergeResult:
        """Keeps the previous list and selection when the SSID set is unchanged, replaces both otherwise.

        Kept items take the mutable fields (access point snapshot, connected flag, autoconnect)
        of the fresh item with the same SSID.
        """
        fresh_by_name = {network.name: network for network in fresh}

        if previous_selection and len(previous) == len(fresh) and all(
                network.name in fresh_by_name for network in previous):
            for network in previous:
                network.update_from(fresh_by_name[network.name])

            return MergeResult(previous, previous_selection)

        return MergeResult(fresh, SelectionState.first_of([network.name for network in fresh]))

    def _deduplicate(self, scanned: list[AccessPointSnapshot]) -> list[AccessPointSnapshot]:
        strongest: dict[str, AccessPointSnapshot] = {}

        for access_point in scanned:
            if access_point.is_hidden():
                continue

            current = strongest.get(access_point.ssid)

            if current is None or access_point.signal_strength > current.signal_strength:
                strongest[access_point.ssid] = access_point

        return list(strongest.values())
