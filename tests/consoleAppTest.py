import unittest
from unittest import TestCase
from unittest.mock import MagicMock

from common_utility import IReusableTimer
from context_logger import setup_logging

from tests import create_network
from wifi_console import (
    ConsoleApp,
    ConsoleAppConfig,
    WifiDevice,
    DeviceSnapshot,
    CommandConsole,
    ConsoleView,
    SessionCreationError,
)
from wifi_dbus import ClientError, DeviceNotFoundError
from wifi_event import IEventChannel, EventChannel, AppEvent, AppEventType, Notification, NotificationLevel
from wifi_model import DeviceState
from wifi_station import (
    AuthCoordinator,
    ConnectionOrchestrator,
    ITaskRunner,
    StationSession,
    CredentialRequest,
    CredentialKind,
)

DEVICE_PATH = '/org/freedesktop/NetworkManager/Devices/3'


class ConsoleAppTest(TestCase):

    @classmethod
    def setUpClass(cls):
        setup_logging('wifi-console', 'DEBUG', warn_on_overwrite=False)

    def setUp(self):
        print()

    def test_run_starts_refresh_and_timer_and_stops_on_quit(self):
        # Given
        device, orchestrator, auth, channel, runner, timer, console, view = create_mocks()
        channel = EventChannel()
        app = create_app(device, orchestrator, auth, channel, runner, timer, console, view)
        channel.send(AppEventType.COMMAND, 'show')
        app.shutdown()

        # When
        app.run()

        # Then
        orchestrator.set_device_path.assert_called_once_with(DEVICE_PATH)
        runner.spawn.assert_called_once_with('refresh', app._refresh)
        timer.start.assert_called_once_with(2, app._send_tick)
        console.execute.assert_called_once_with('show')
        timer.cancel.assert_called_once()
        self.assertFalse(app.is_running())

    def test_timer_callback_sends_tick_and_rearms(self):
        # Given
        device, orchestrator, auth, channel, runner, timer, console, view = create_mocks()
        app = create_app(device, orchestrator, auth, channel, runner, timer, console, view)

        # When
        app._send_tick()

        # Then
        channel.send.assert_called_once_with(AppEventType.TICK)
        timer.restart.assert_called_once()

    def test_tick_ages_notifications_and_requests_refresh(self):
        # Given
        device, orchestrator, auth, channel, runner, timer, console, view = create_mocks()
        app = create_app(device, orchestrator, auth, channel, runner, timer, console, view)
        app.handle(AppEvent(AppEventType.NOTIFICATION, Notification('Start Scanning', ttl=1)))

        # When
        app.handle(AppEvent(AppEventType.TICK))

        # Then
        self.assertEqual(0, app.get_board().get_notifications()[0].ttl)
        runner.spawn.assert_called_once_with('refresh', app._refresh)

    def test_tick_skips_refresh_while_previous_in_flight(self):
        # Given
        device, orchestrator, auth, channel, runner, timer, console, view = create_mocks()
        app = create_app(device, orchestrator, auth, channel, runner, timer, console, view)
        app.handle(AppEvent(AppEventType.TICK))

        # When
        app.handle(AppEvent(AppEventType.TICK))

        # Then
        runner.spawn.assert_called_once()

    def test_refreshed_snapshot_applied_in_foreground(self):
        # Given
        device, orchestrator, auth, channel, runner, timer, console, view = create_mocks()
        snapshot = DeviceSnapshot(True)
        device.fetch.return_value = snapshot
        app = create_app(device, orchestrator, auth, channel, runner, timer, console, view)
        app.handle(AppEvent(AppEventType.TICK))

        # When
        app._refresh()
        app.handle(AppEvent(AppEventType.REFRESHED, snapshot))
        app.handle(AppEvent(AppEventType.TICK))

        # Then
        channel.send.assert_called_once_with(AppEventType.REFRESHED, snapshot)
        device.apply.assert_called_once_with(snapshot)
        self.assertEqual(2, runner.spawn.call_count)

    def test_refresh_failure_reported_to_foreground(self):
        # Given
        device, orchestrator, auth, channel, runner, timer, console, view = create_mocks()
        error = ClientError('NetworkManager is not running')
        device.fetch.side_effect = error
        app = create_app(device, orchestrator, auth, channel, runner, timer, console, view)

        # When
        app._refresh()

        # Then
        channel.send.assert_called_once_with(AppEventType.REFRESH_FAILED, error)
        device.apply.assert_not_called()

    def test_refresh_failure_notifies_error(self):
        # Given
        device, orchestrator, auth, channel, runner, timer, console, view = create_mocks()
        app = create_app(device, orchestrator, auth, channel, runner, timer, console, view)

        # When
        app.handle(AppEvent(AppEventType.REFRESH_FAILED, ClientError('NetworkManager is not running')))

        # Then
        channel.notify.assert_called_once_with('Failed to refresh: NetworkManager is not running',
                                               NotificationLevel.ERROR)

    def test_vanished_device_requests_reset(self):
        # Given
        device, orchestrator, auth, channel, runner, timer, console, view = create_mocks()
        app = create_app(device, orchestrator, auth, channel, runner, timer, console, view)

        # When
        app.handle(AppEvent(AppEventType.REFRESH_FAILED, DeviceNotFoundError('Wi-Fi device not found')))

        # Then
        channel.send.assert_called_once_with(AppEventType.RESET_REQUESTED)
        channel.notify.assert_not_called()

    def test_failed_session_creation_requests_reset(self):
        # Given
        device, orchestrator, auth, channel, runner, timer, console, view = create_mocks()
        app = create_app(device, orchestrator, auth, channel, runner, timer, console, view)
        app.handle(AppEvent(AppEventType.TICK))

        # When
        app.handle(AppEvent(AppEventType.REFRESH_FAILED,
                            SessionCreationError('Failed to create station session: timeout', 'create_session')))
        app.handle(AppEvent(AppEventType.TICK))

        # Then
        channel.send.assert_called_once_with(AppEventType.RESET_REQUESTED)
        channel.notify.assert_not_called()
        self.assertEqual(2, runner.spawn.call_count)

    def test_reset_cancels_pending_prompt_and_drops_session(self):
        # Given
        device, orchestrator, auth, channel, runner, timer, console, view = create_mocks()
        orchestrator.get_pending.return_value = create_network('cafe')
        app = create_app(device, orchestrator, auth, channel, runner, timer, console, view)

        # When
        app.handle(AppEvent(AppEventType.RESET_REQUESTED))

        # Then
        orchestrator.cancel_passphrase.assert_called_once()
        auth.reset.assert_called_once()
        device.reset.assert_called_once()

    def test_reset_without_pending_prompt(self):
        # Given
        device, orchestrator, auth, channel, runner, timer, console, view = create_mocks()
        orchestrator.get_pending.return_value = None
        app = create_app(device, orchestrator, auth, channel, runner, timer, console, view)

        # When
        app.handle(AppEvent(AppEventType.RESET_REQUESTED))

        # Then
        orchestrator.cancel_passphrase.assert_not_called()
        auth.reset.assert_called_once()

    def test_notification_added_to_board_and_shown(self):
        # Given
        device, orchestrator, auth, channel, runner, timer, console, view = create_mocks()
        app = create_app(device, orchestrator, auth, channel, runner, timer, console, view)
        notification = Notification('Connecting to cafe')

        # When
        app.handle(AppEvent(AppEventType.NOTIFICATION, notification))

        # Then
        self.assertEqual([notification], app.get_board().get_notifications())
        view.show_notification.assert_called_once_with(notification)

    def test_scan_started_marks_session_scanning(self):
        # Given
        device, orchestrator, auth, channel, runner, timer, console, view = create_mocks()
        app = create_app(device, orchestrator, auth, channel, runner, timer, console, view)

        # When
        app.handle(AppEvent(AppEventType.SCAN_STARTED, DEVICE_PATH))

        # Then
        device.session.mark_scanning.assert_called_once()

    def test_device_state_change_requests_refresh(self):
        # Given
        device, orchestrator, auth, channel, runner, timer, console, view = create_mocks()
        app = create_app(device, orchestrator, auth, channel, runner, timer, console, view)

        # When
        app.handle(AppEvent(AppEventType.DEVICE_STATE_CHANGED, DeviceState.ACTIVATED))

        # Then
        runner.spawn.assert_called_once_with('refresh', app._refresh)

    def test_auth_request_shows_prompt(self):
        # Given
        device, orchestrator, auth, channel, runner, timer, console, view = create_mocks()
        app = create_app(device, orchestrator, auth, channel, runner, timer, console, view)
        request = CredentialRequest(CredentialKind.PSK, 'cafe')

        # When
        app.handle(AppEvent(AppEventType.AUTH_REQUESTED, request))

        # Then
        view.show_prompt.assert_called_once_with(request)

    def test_enterprise_network_handed_off_with_warning(self):
        # Given
        device, orchestrator, auth, channel, runner, timer, console, view = create_mocks()
        app = create_app(device, orchestrator, auth, channel, runner, timer, console, view)

        # When
        app.handle(AppEvent(AppEventType.CONFIGURE_ENTERPRISE_NETWORK, 'corp'))

        # Then
        channel.notify.assert_called_once_with(
            'corp uses 802.1X, configure it with the connection service first', NotificationLevel.WARNING)


def create_mocks():
    device = MagicMock(spec=WifiDevice)
    device.device_path = DEVICE_PATH
    device.interface = 'wlan0'
    device.session = MagicMock(spec=StationSession)
    orchestrator = MagicMock(spec=ConnectionOrchestrator)
    auth = MagicMock(spec=AuthCoordinator)
    channel = MagicMock(spec=IEventChannel)
    runner = MagicMock(spec=ITaskRunner)
    timer = MagicMock(spec=IReusableTimer)
    console = MagicMock(spec=CommandConsole)
    view = MagicMock(spec=ConsoleView)
    return device, orchestrator, auth, channel, runner, timer, console, view


def create_app(device, orchestrator, auth, channel, runner, timer, console, view):
    return ConsoleApp(device, orchestrator, auth, channel, runner, timer, console, view, ConsoleAppConfig(2, 0.01))


if __name__ == '__main__':
    unittest.main()
