# SPDX-FileCopyrightText: 2024 Ferenc Nandor Janky <ferenj@effective-range.com>
# SPDX-FileCopyrightText: 2024 Attila Gombos <attila.gombos@effective-range.com>
# SPDX-License-Identifier: MIT

from dataclasses import dataclass, replace
from enum import Enum
from threading import Condition
from typing import Any, Optional

from context_logger import get_logger

from wifi_event import IEventChannel, AppEventType

log = get_logger('AuthCoordinator')


class AuthRequestPendingError(Exception):

    def __init__(self, message: str, pending: 'AuthState') -> None:
        super().__init__(message)
        self.pending = pending


class AuthStateError(Exception):
    pass


class CredentialKind(Enum):
    PSK = 'psk'
    PRIVATE_KEY_PASSPHRASE = 'private-key-passphrase'
    PASSWORD = 'password'
    USERNAME_AND_PASSWORD = 'username-and-password'

    def __repr__(self) -> str:
        return self.value


class AuthState(Enum):
    NO_REQUEST = None
    AWAITING_PSK = CredentialKind.PSK
    AWAITING_PASSWORD = CredentialKind.PASSWORD
    AWAITING_USERNAME_PASSWORD = CredentialKind.USERNAME_AND_PASSWORD
    AWAITING_KEY_PASSPHRASE = CredentialKind.PRIVATE_KEY_PASSPHRASE

    def __repr__(self) -> str:
        return self.name

    @staticmethod
    def awaiting(kind: CredentialKind) -> 'AuthState':
        return AuthState(kind)


@dataclass(frozen=True)
class CredentialRequest:
    kind: CredentialKind
    network_name: str
    prefill_username: Optional[str] = None
    cycle: int = 0


class AuthCoordinator(object):
    """Bridges credential requests raised by connection attempts with the values typed by the operator.

    Requests never block. Waits block the calling worker thread until the matching value is
    submitted or the request is cancelled. Every request starts a new cycle, so a cancellation
    or value left over from an earlier cycle is never seen by a later wait.
    """

    _REQUEST_EVENTS = {
        CredentialKind.PSK: AppEventType.AUTH_REQUESTED,
        CredentialKind.PRIVATE_KEY_PASSPHRASE: AppEventType.AUTH_REQUEST_KEY_PASSPHRASE,
        CredentialKind.PASSWORD: AppEventType.AUTH_REQUEST_PASSWORD,
        CredentialKind.USERNAME_AND_PASSWORD: AppEventType.AUTH_REQUEST_USERNAME_AND_PASSWORD,
    }

    def __init__(self, channel: IEventChannel) -> None:
        self._channel = channel
        self._condition = Condition()
        self._state = AuthState.NO_REQUEST
        self._request: Optional[CredentialRequest] = None
        self._cycle = 0
        self._cancelled_cycle = -1
        self._values: dict[CredentialKind, tuple[int, Any]] = {}

    def get_state(self) -> AuthState:
        with self._condition:
            return self._state

    def get_request(self) -> Optional[CredentialRequest]:
        with self._condition:
            return self._request

    def request_passphrase(self, network_name: str) -> CredentialRequest:
        return self._request_credential(CredentialRequest(CredentialKind.PSK, network_name))

    def request_private_key_passphrase(self, network_name: str) -> CredentialRequest:
        return self._request_credential(CredentialRequest(CredentialKind.PRIVATE_KEY_PASSPHRASE, network_name))

    def request_password(self, network_name: str, username: Optional[str] = None) -> CredentialRequest:
        return self._request_credential(CredentialRequest(CredentialKind.PASSWORD, network_name, username))

    def request_username_and_password(self, network_name: str) -> CredentialRequest:
        return self._request_credential(CredentialRequest(CredentialKind.USERNAME_AND_PASSWORD, network_name))

    def wait_for_passphrase(self, request: Optional[CredentialRequest] = None) -> Optional[str]:
        return self._wait_for(CredentialKind.PSK, request)

    def wait_for_private_key_passphrase(self, request: Optional[CredentialRequest] = None) -> Optional[str]:
        return self._wait_for(CredentialKind.PRIVATE_KEY_PASSPHRASE, request)

    def wait_for_password(self, request: Optional[CredentialRequest] = None) -> Optional[str]:
        return self._wait_for(CredentialKind.PASSWORD, request)

    def wait_for_username_and_password(
            self, request: Optional[CredentialRequest] = None) -> Optional[tuple[str, str]]:
        return self._wait_for(CredentialKind.USERNAME_AND_PASSWORD, request)

    def submit_passphrase(self, passphrase: str) -> None:
        self._submit(CredentialKind.PSK, passphrase)

    def submit_private_key_passphrase(self, passphrase: str) -> None:
        self._submit(CredentialKind.PRIVATE_KEY_PASSPHRASE, passphrase)

    def submit_password(self, password: str) -> None:
        self._submit(CredentialKind.PASSWORD, password)

    def submit_username_and_password(self, username: str, password: str) -> None:
        self._submit(CredentialKind.USERNAME_AND_PASSWORD, (username, password))

    def cancel(self) -> None:
        with self._condition:
            log.info('Cancelling credential request', state=self._state)
            self._cancelled_cycle = self._cycle
            self._clear_request()
            self._condition.notify_all()

    def reset(self) -> None:
        with self._condition:
            log.debug('Resetting credential state', state=self._state)
            self._cancelled_cycle = self._cycle
            self._cycle += 1
            self._clear_request()
            self._condition.notify_all()

    def _request_credential(self, request: CredentialRequest) -> CredentialRequest:
        with self._condition:
            if self._state != AuthState.NO_REQUEST:
                raise AuthRequestPendingError(
                    f'Cannot request {request.kind.value} while {self._state.name} is pending', self._state)

            self._cycle += 1
            request = replace(request, cycle=self._cycle)
            self._state = AuthState.awaiting(request.kind)
            self._request = request

        log.info('Requesting credential', kind=request.kind, network=request.network_name)

        self._channel.send(self._REQUEST_EVENTS[request.kind], request)

        return request

    def _submit(self, kind: CredentialKind, value: Any) -> None:
        with self._condition:
            if self._state != AuthState.awaiting(kind):
                raise AuthStateError(f'No {kind.value} request is pending, current state is {self._state.name}')

            self._values[kind] = (self._cycle, value)
            self._clear_request()
            self._condition.notify_all()

        log.info('Credential submitted', kind=kind)

    def _wait_for(self, kind: CredentialKind, request: Optional[CredentialRequest]) -> Any:
        with self._condition:
            cycle = request.cycle if request else self._cycle

            while True:
                if stored := self._values.get(kind):
                    if stored[0] == cycle:
                        del self._values[kind]
                        return stored[1]

                if self._cancelled_cycle >= cycle:
                    log.debug('Credential wait cancelled', kind=kind)
                    return None

                self._condition.wait()

    def _clear_request(self) -> None:
        self._state = AuthState.NO_REQUEST
        self._request = None
