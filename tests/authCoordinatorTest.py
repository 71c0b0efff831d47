import unittest
from threading import Thread
from unittest import TestCase
from unittest.mock import MagicMock

from context_logger import setup_logging

from wifi_event import IEventChannel, AppEventType
from wifi_station import (
    AuthCoordinator,
    AuthState,
    AuthRequestPendingError,
    AuthStateError,
    CredentialKind,
    CredentialRequest,
)

WAIT_TIMEOUT = 5


class AuthCoordinatorTest(TestCase):

    @classmethod
    def setUpClass(cls):
        setup_logging('wifi-console', 'DEBUG', warn_on_overwrite=False)

    def setUp(self):
        print()

    def test_request_passphrase_emits_event_and_does_not_block(self):
        # Given
        channel = MagicMock(spec=IEventChannel)
        auth = AuthCoordinator(channel)

        # When
        request = auth.request_passphrase('home')

        # Then
        self.assertEqual(AuthState.AWAITING_PSK, auth.get_state())
        self.assertEqual(CredentialKind.PSK, request.kind)
        self.assertEqual('home', request.network_name)
        channel.send.assert_called_once_with(AppEventType.AUTH_REQUESTED, request)

    def test_request_password_carries_username(self):
        # Given
        channel = MagicMock(spec=IEventChannel)
        auth = AuthCoordinator(channel)

        # When
        request = auth.request_password('corp', 'alice')

        # Then
        self.assertEqual(AuthState.AWAITING_PASSWORD, auth.get_state())
        self.assertEqual('alice', request.prefill_username)
        channel.send.assert_called_once_with(AppEventType.AUTH_REQUEST_PASSWORD, request)

    def test_request_raises_when_another_request_is_pending(self):
        # Given
        auth = AuthCoordinator(MagicMock(spec=IEventChannel))
        auth.request_passphrase('home')

        # When, Then
        with self.assertRaises(AuthRequestPendingError) as context:
            auth.request_username_and_password('corp')

        self.assertEqual(AuthState.AWAITING_PSK, context.exception.pending)

    def test_submitted_passphrase_is_returned_by_wait(self):
        # Given
        auth = AuthCoordinator(MagicMock(spec=IEventChannel))
        request = auth.request_passphrase('home')
        auth.submit_passphrase('secret')

        # When
        result = auth.wait_for_passphrase(request)

        # Then
        self.assertEqual('secret', result)
        self.assertEqual(AuthState.NO_REQUEST, auth.get_state())

    def test_waiting_thread_receives_submitted_value(self):
        # Given
        auth = AuthCoordinator(MagicMock(spec=IEventChannel))
        request = auth.request_private_key_passphrase('corp')
        results = []
        waiter = Thread(target=lambda: results.append(auth.wait_for_private_key_passphrase(request)))
        waiter.start()

        # When
        auth.submit_private_key_passphrase('key-secret')
        waiter.join(WAIT_TIMEOUT)

        # Then
        self.assertFalse(waiter.is_alive())
        self.assertEqual(['key-secret'], results)

    def test_username_and_password_submitted_together(self):
        # Given
        auth = AuthCoordinator(MagicMock(spec=IEventChannel))
        request = auth.request_username_and_password('corp')

        # When
        auth.submit_username_and_password('alice', 'pa55')

        # Then
        self.assertEqual(('alice', 'pa55'), auth.wait_for_username_and_password(request))

    def test_submit_raises_when_no_matching_request_pending(self):
        # Given
        auth = AuthCoordinator(MagicMock(spec=IEventChannel))
        auth.request_passphrase('home')

        # When, Then
        with self.assertRaises(AuthStateError):
            auth.submit_password('secret')

    def test_cancel_resolves_pending_wait_to_none(self):
        # Given
        auth = AuthCoordinator(MagicMock(spec=IEventChannel))
        request = auth.request_passphrase('home')
        results = []
        waiter = Thread(target=lambda: results.append(auth.wait_for_passphrase(request)))
        waiter.start()

        # When
        auth.cancel()
        waiter.join(WAIT_TIMEOUT)

        # Then
        self.assertFalse(waiter.is_alive())
        self.assertEqual([None], results)
        self.assertEqual(AuthState.NO_REQUEST, auth.get_state())

    def test_cancel_resolves_all_current_waiters(self):
        # Given
        auth = AuthCoordinator(MagicMock(spec=IEventChannel))
        request = auth.request_password('corp')
        results = []
        waiters = [Thread(target=lambda: results.append(auth.wait_for_password(request))) for _ in range(3)]
        for waiter in waiters:
            waiter.start()

        # When
        auth.cancel()
        for waiter in waiters:
            waiter.join(WAIT_TIMEOUT)

        # Then
        self.assertEqual([None, None, None], results)

    def test_wait_after_reset_does_not_see_stale_cancellation(self):
        # Given
        auth = AuthCoordinator(MagicMock(spec=IEventChannel))
        auth.request_passphrase('home')
        auth.cancel()
        auth.reset()
        results = []
        waiter = Thread(target=lambda: results.append(auth.wait_for_passphrase()), daemon=True)

        # When
        waiter.start()
        waiter.join(0.2)

        # Then
        self.assertTrue(waiter.is_alive())
        self.assertEqual([], results)

        auth.cancel()
        waiter.join(WAIT_TIMEOUT)
        self.assertEqual([None], results)

    def test_new_request_after_cancel_is_not_cancelled(self):
        # Given
        auth = AuthCoordinator(MagicMock(spec=IEventChannel))
        auth.request_passphrase('home')
        auth.cancel()

        # When
        request = auth.request_passphrase('office')
        auth.submit_passphrase('office-secret')

        # Then
        self.assertEqual('office-secret', auth.wait_for_passphrase(request))

    def test_reset_resolves_old_waiter_without_value(self):
        # Given
        auth = AuthCoordinator(MagicMock(spec=IEventChannel))
        request = auth.request_passphrase('home')
        results = []
        waiter = Thread(target=lambda: results.append(auth.wait_for_passphrase(request)))
        waiter.start()

        # When
        auth.reset()
        waiter.join(WAIT_TIMEOUT)

        # Then
        self.assertEqual([None], results)
        self.assertIsNone(auth.get_request())

    def test_value_submitted_before_reset_is_still_delivered(self):
        # Given
        auth = AuthCoordinator(MagicMock(spec=IEventChannel))
        request = auth.request_passphrase('home')
        auth.submit_passphrase('secret')

        # When
        auth.reset()

        # Then
        self.assertEqual('secret', auth.wait_for_passphrase(request))

    def test_get_request_returns_pending_request(self):
        # Given
        auth = AuthCoordinator(MagicMock(spec=IEventChannel))

        # When
        request = auth.request_passphrase('home')

        # Then
        self.assertEqual(CredentialRequest(CredentialKind.PSK, 'home', None, request.cycle), auth.get_request())


if __name__ == '__main__':
    unittest.main()
