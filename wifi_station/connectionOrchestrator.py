# SPDX-FileCopyrightText: 2024 Ferenc Nandor Janky <ferenj@effective-range.com>
# SPDX-FileCopyrightText: 2024 Attila Gombos <attila.gombos@effective-range.com>
# SPDX-License-Identifier: MIT

from enum import Enum
from threading import Lock
from typing import Optional

from context_logger import get_logger

from wifi_dbus import INetworkManagerClient, ClientError
from wifi_event import IEventChannel, AppEventType, NotificationLevel
from wifi_model import Network, SavedProfile, SecurityClass
from wifi_station import (
    AuthCoordinator,
    CredentialRequest,
    ITaskRunner,
    ListFocus,
    KnownRowKind,
    StationSession,
    CredentialShare,
)

log = get_logger('ConnectionOrchestrator')

HIDDEN_NETWORK_SECURITY = (SecurityClass.OPEN, SecurityClass.WPA2, SecurityClass.WPA3)


class PasswordRequired(Exception):

    def __init__(self, network: Network) -> None:
        super().__init__(f'Password required for {network.name}')
        self.network = network


class ConnectionFailed(Exception):

    def __init__(self, network_name: str, reason: str) -> None:
        super().__init__(reason)
        self.network_name = network_name
        self.reason = reason


class ActivationFailed(ConnectionFailed):
    pass


class ProfileCreationFailed(ConnectionFailed):
    pass


class PendingConnectionError(Exception):
    pass


class ConnectOutcome(Enum):
    CONNECTING = 'connecting'
    DISCONNECTING = 'disconnecting'
    PASSWORD_REQUIRED = 'password-required'
    ENTERPRISE_REQUIRED = 'enterprise-required'
    IGNORED = 'ignored'

    def __repr__(self) -> str:
        return self.value


class ConnectionState(Enum):
    IDLE = 'idle'
    CREDENTIAL_CHECK = 'credential-check'
    PROMPTING_FOR_SECRET = 'prompting-for-secret'
    CONNECTING = 'connecting'
    CONNECTED = 'connected'
    FAILED = 'failed'

    def __repr__(self) -> str:
        return self.value


class ConnectionOrchestrator(object):
    """Decides what a connect or disconnect request means and runs the resulting service calls as tasks.

    Decisions are made on the calling (foreground) thread. Every call to the client is spawned,
    so the caller never blocks on the connection service or on a credential prompt.
    """

    def __init__(self, client: INetworkManagerClient, auth: AuthCoordinator, channel: IEventChannel,
                 runner: ITaskRunner) -> None:
        self._client = client
        self._auth = auth
        self._channel = channel
        self._runner = runner
        self._state_lock = Lock()
        self._state = ConnectionState.IDLE
        self._pending: Optional[Network] = None
        self._device_path: Optional[str] = None

    def get_state(self) -> ConnectionState:
        with self._state_lock:
            return self._state

    def get_pending(self) -> Optional[Network]:
        return self._pending

    def set_device_path(self, device_path: Optional[str]) -> None:
        self._device_path = device_path

    def connect(self, network: Network, secret: Optional[str] = None) -> ConnectOutcome:
        device_path = self._get_device_path()
        self._set_state(ConnectionState.CREDENTIAL_CHECK)

        try:
            self._check_credentials(network, secret)
        except PasswordRequired:
            self._prompt_for_passphrase(device_path, network)
            return ConnectOutcome.PASSWORD_REQUIRED

        if network.known:
            self._set_state(ConnectionState.CONNECTING)
            self._runner.spawn('activate', self._activate, device_path, network)
            return ConnectOutcome.CONNECTING

        if network.is_enterprise():
            log.info('Enterprise network requires configuration', network=network.name)
            self._set_state(ConnectionState.IDLE)
            self._channel.send(AppEventType.CONFIGURE_ENTERPRISE_NETWORK, network.name)
            return ConnectOutcome.ENTERPRISE_REQUIRED

        self._set_state(ConnectionState.CONNECTING)
        self._runner.spawn('create-and-activate', self._create_and_activate, device_path, network, secret)
        return ConnectOutcome.CONNECTING

    def submit_passphrase(self, passphrase: str) -> None:
        self._pending = None
        self._auth.submit_passphrase(passphrase)

    def cancel_passphrase(self) -> None:
        if self._pending:
            log.info('Connection cancelled', network=self._pending.name)
            self._pending = None

        self._auth.cancel()
        self._set_state(ConnectionState.IDLE)

    def toggle_connect(self, session: StationSession, focus: ListFocus) -> ConnectOutcome:
        if focus == ListFocus.NEW:
            if network := session.get_selected_new_network():
                return self.connect(network)
            return ConnectOutcome.IGNORED

        selection = session.resolve_known_selection()

        if not selection or selection.kind != KnownRowKind.NETWORK:
            return ConnectOutcome.IGNORED

        network = session.known_networks[selection.index]
        connected = session.connected_network

        if connected and connected.name == network.name:
            self.disconnect(session)
            return ConnectOutcome.DISCONNECTING

        if connected:
            device_path = self._get_device_path()
            self._set_state(ConnectionState.CONNECTING)
            self._runner.spawn('switch', self._switch, device_path, connected.name, network)
            return ConnectOutcome.CONNECTING

        return self.connect(network)

    def disconnect(self, session: StationSession) -> None:
        connected = session.connected_network
        self._runner.spawn('disconnect', self._disconnect, self._get_device_path(),
                           connected.name if connected else None)

    def connect_hidden(self, ssid: str, security: SecurityClass, password: Optional[str] = None) -> None:
        if not ssid:
            raise ValueError('SSID of a hidden network must not be empty')

        if security not in HIDDEN_NETWORK_SECURITY:
            raise ValueError(f'Unsupported hidden network security: {security}')

        if security.requires_password() and not password:
            raise ValueError(f'Password is required for {security} hidden network')

        device_path = self._get_device_path()
        self._set_state(ConnectionState.CONNECTING)
        self._runner.spawn('connect-hidden', self._connect_hidden, device_path, ssid, security, password)

    def forget(self, profile: SavedProfile) -> None:
        self._runner.spawn('forget', self._forget, profile)

    def toggle_autoconnect(self, profile: SavedProfile) -> None:
        self._runner.spawn('toggle-autoconnect', self._toggle_autoconnect, profile, not profile.autoconnect)

    def share(self, profile: SavedProfile) -> None:
        if not profile.security.is_psk():
            self._channel.notify(f'Sharing is not supported for {profile.security} network {profile.ssid}',
                                 NotificationLevel.WARNING)
            return

        self._runner.spawn('share', self._share, profile)

    def _check_credentials(self, network: Network, secret: Optional[str]) -> None:
        if not network.is_enterprise() and network.requires_password() and not secret:
            raise PasswordRequired(network)

    def _prompt_for_passphrase(self, device_path: str, network: Network) -> None:
        if self._pending:
            raise PendingConnectionError(f'Connection to {self._pending.name} is already waiting for a passphrase')

        self._pending = network
        self._set_state(ConnectionState.PROMPTING_FOR_SECRET)

        try:
            request = self._auth.request_passphrase(network.name)
        except Exception:
            self._pending = None
            self._set_state(ConnectionState.IDLE)
            raise

        self._runner.spawn('await-passphrase', self._await_passphrase, device_path, network, request)

    def _await_passphrase(self, device_path: str, network: Network, request: CredentialRequest) -> None:
        if passphrase := self._auth.wait_for_passphrase(request):
            self._set_state(ConnectionState.CONNECTING)
            self._create_and_activate(device_path, network, passphrase)
        else:
            log.info('Passphrase request cancelled', network=network.name)

    def _activate(self, device_path: str, network: Network) -> None:
        self._channel.notify(f'Connecting to {network.name}')

        try:
            self._activate_profile(device_path, network)
        except ConnectionFailed as error:
            self._on_failed(error)
        else:
            self._set_state(ConnectionState.CONNECTED)

    def _create_and_activate(self, device_path: str, network: Network, secret: Optional[str]) -> None:
        self._channel.notify(f'Connecting to {network.name}')

        try:
            self._create_profile(device_path, network, secret)
        except ConnectionFailed as error:
            self._on_failed(error)
        else:
            self._set_state(ConnectionState.CONNECTED)

    def _activate_profile(self, device_path: str, network: Network) -> None:
        if not network.profile:
            raise ActivationFailed(network.name, 'network has no saved profile')

        try:
            self._client.activate_profile(network.profile.profile_id, device_path)
        except ClientError as error:
            raise ActivationFailed(network.name, str(error))

    def _create_profile(self, device_path: str, network: Network, secret: Optional[str]) -> None:
        try:
            self._client.create_and_activate(device_path, network.access_point, secret)
        except ClientError as error:
            raise ProfileCreationFailed(network.name, str(error))

    def _switch(self, device_path: str, connected_name: str, network: Network) -> None:
        try:
            self._client.disconnect_device(device_path)
        except ClientError as error:
            self._on_failed(ActivationFailed(network.name, str(error)))
            return

        log.info('Disconnected before switching network', previous=connected_name, network=network.name)

        self._activate(device_path, network)

    def _disconnect(self, device_path: str, network_name: Optional[str]) -> None:
        try:
            self._client.disconnect_device(device_path)
        except ClientError as error:
            log.error('Failed to disconnect', device=device_path, error=error)
            self._channel.notify(f'Failed to disconnect: {error}', NotificationLevel.ERROR)
            return

        self._set_state(ConnectionState.IDLE)
        self._channel.notify(f'Disconnected from {network_name}' if network_name else 'Disconnected')

    def _connect_hidden(self, device_path: str, ssid: str, security: SecurityClass, password: Optional[str]) -> None:
        self._channel.notify(f'Connecting to hidden network: {ssid}')

        try:
            self._client.create_and_activate_hidden(device_path, ssid, security, password)
        except ClientError as error:
            log.error('Failed to connect to hidden network', ssid=ssid, error=error)
            self._set_state(ConnectionState.FAILED)
            self._channel.notify(f'Failed to connect to {ssid}: {error}', NotificationLevel.ERROR)
        else:
            self._set_state(ConnectionState.CONNECTED)

    def _forget(self, profile: SavedProfile) -> None:
        try:
            self._client.delete_profile(profile.profile_id)
        except ClientError as error:
            log.error('Failed to forget network', network=profile.ssid, error=error)
            self._channel.notify(f'Failed to forget {profile.ssid}: {error}', NotificationLevel.ERROR)
        else:
            self._channel.notify(f'The Network {profile.ssid} is removed')

    def _toggle_autoconnect(self, profile: SavedProfile, autoconnect: bool) -> None:
        try:
            self._client.set_autoconnect(profile.profile_id, autoconnect)
        except ClientError as error:
            log.error('Failed to update autoconnect', network=profile.ssid, error=error)
            self._channel.notify(f'Failed to update autoconnect for {profile.ssid}: {error}',
                                 NotificationLevel.ERROR)
        else:
            action = 'Enable' if autoconnect else 'Disable'
            self._channel.notify(f'{action} Autoconnect for: {profile.ssid}')

    def _share(self, profile: SavedProfile) -> None:
        try:
            secret = self._client.get_secret(profile.profile_id)
        except ClientError as error:
            log.error('Failed to read network secret', network=profile.ssid, error=error)
            self._channel.notify(f'Failed to share {profile.ssid}: {error}', NotificationLevel.ERROR)
            return

        if not secret:
            self._channel.notify(f'No password found for network {profile.ssid}', NotificationLevel.ERROR)
            return

        self._channel.send(AppEventType.SHARE_READY, CredentialShare(profile.ssid, secret))

    def _on_failed(self, error: ConnectionFailed) -> None:
        log.error('Failed to connect', network=error.network_name, reason=error.reason)
        self._set_state(ConnectionState.FAILED)
        self._channel.notify(f'Failed to connect: {error.reason}', NotificationLevel.ERROR)

    def _get_device_path(self) -> str:
        if not self._device_path:
            raise ClientError('No Wi-Fi device is available', 'connect')
        return self._device_path

    def _set_state(self, state: ConnectionState) -> None:
        with self._state_lock:
            if self._state != state:
                log.debug('Connection state changed', old=self._state, new=state)
                self._state = state
