#!/usr/bin/env python3

# SPDX-FileCopyrightText: 2024 Ferenc Nandor Janky <ferenj@effective-range.com>
# SPDX-FileCopyrightText: 2024 Attila Gombos <attila.gombos@effective-range.com>
# SPDX-License-Identifier: MIT

import os
from argparse import ArgumentParser, ArgumentDefaultsHelpFormatter
from pathlib import Path
from signal import signal, SIGINT, SIGTERM
from threading import Thread
from typing import Any

import gi

gi.require_version("NM", "1.0")

from common_utility import ReusableTimer, ConfigLoader
from context_logger import setup_logging, get_logger
from gi.repository import GLib, NM

from wifi_console import (
    WifiDevice,
    ConsoleView,
    CommandConsole,
    CommandReader,
    ConsoleApp,
    ConsoleAppConfig,
)
from wifi_dbus.nmDbus import NetworkManagerClient
from wifi_event import EventChannel, AppEventType
from wifi_station import AuthCoordinator, ConnectionOrchestrator, ThreadTaskRunner

APPLICATION_NAME = "wifi-console"

log = get_logger("WifiConsoleApp")


def main() -> None:
    resource_root = _get_resource_root()
    arguments = _get_arguments()

    setup_logging(APPLICATION_NAME)

    log.info(f"Started {APPLICATION_NAME}", arguments=arguments)

    config = ConfigLoader(Path(f"{resource_root}/config/{APPLICATION_NAME}.conf.default")).load(arguments)

    _update_logging(arguments, config)

    log.info("Retrieved configuration", configuration=config)

    try:
        wlan_interface = config["wlan_interface"] or None
        refresh_interval = float(config["refresh_interval"])
        notification_ttl = int(config["notification_ttl"])
        client_timeout = float(config["client_timeout"])
        show_unavailable = _to_bool(config["show_unavailable_networks"])
    except KeyError as error:
        raise ValueError(f"Missing configuration key: {error}")

    event_loop = GLib.MainLoop()
    event_thread = Thread(target=event_loop.run)
    event_thread.start()

    try:
        nm_client = NM.Client.new(None)
        client = NetworkManagerClient(nm_client, client_timeout)

        channel = EventChannel(notification_ttl)
        runner = ThreadTaskRunner()
        auth = AuthCoordinator(channel)
        orchestrator = ConnectionOrchestrator(client, auth, channel, runner)
        device = WifiDevice.create(client, wlan_interface, channel, runner, show_unavailable)
        view = ConsoleView()
        console = CommandConsole(device, orchestrator, auth, channel, runner, view)
        app = ConsoleApp(device, orchestrator, auth, channel, runner, ReusableTimer(), console, view,
                         ConsoleAppConfig(refresh_interval))

        client.add_state_change_handler(
            device.device_path, lambda state: channel.send(AppEventType.DEVICE_STATE_CHANGED, state))

        def handler(signum: int, frame: Any) -> None:
            log.info(f"Shutting down {APPLICATION_NAME}", signum=signum)
            app.shutdown()

        signal(SIGINT, handler)
        signal(SIGTERM, handler)

        view.show_help()
        CommandReader(channel).start()

        app.run()
    finally:
        event_loop.quit()
        event_thread.join(1)


def _get_arguments() -> dict[str, Any]:
    parser = ArgumentParser(formatter_class=ArgumentDefaultsHelpFormatter)
    default_config = f"/etc/effective-range/{APPLICATION_NAME}/{APPLICATION_NAME}.conf"
    parser.add_argument(
        "-c",
        "--config-file",
        help="configuration file",
        default=default_config,
    )

    parser.add_argument("-f", "--log-file", help="log file path")
    parser.add_argument("-l", "--log-level", help="logging level")

    parser.add_argument("--wlan-interface", help="preferred wlan interface")
    parser.add_argument("--refresh-interval", help="refresh interval in seconds", type=float)
    parser.add_argument("--notification-ttl", help="notification lifetime in refresh ticks", type=int)
    parser.add_argument("--client-timeout", help="NetworkManager operation timeout in seconds", type=float)
    parser.add_argument("--show-unavailable-networks", help="list saved networks that are out of range",
                        action="store_true", default=None)

    args = parser.parse_args()

    return {k: v for k, v in vars(args).items() if v is not None}


def _get_resource_root() -> str:
    return str(Path(os.path.dirname(__file__)).parent.absolute())


def _update_logging(arguments: dict[str, Any], configuration: dict[str, Any]) -> None:
    log_level = configuration.get("log_level", "INFO")
    log_file = configuration.get("log_file")
    if log_level != "INFO" or log_file != arguments.get("log_file"):
        setup_logging(APPLICATION_NAME, log_level, log_file, warn_on_overwrite=False)


def _to_bool(value: Any) -> bool:
    return str(value).lower() in ("true", "yes", "on", "1")


if __name__ == "__main__":
    main()
