from __future__ import annotations

import argparse
import logging
import os
from pathlib import Path
import signal
import sys
import threading
from types import FrameType

from rich import print as rprint
from rich.markup import escape

from settingsync import __version__
from settingsync.core.config import ConfigError, SettingSyncConfig, load_dotenv_values
from settingsync.core.controller import SettingController
from settingsync.core.logger import setup_logging
from settingsync.core.settings import FileSystemSettingStore, SettingWatcher
from settingsync.core.upgrade import (
    HttpVersionGateway,
    VersionGatewayError,
    check_latest_version,
    get_upgrade_availability,
)
from settingsync.core.workqueue import (
    RateLimitingQueue,
    default_controller_rate_limiter,
)

logger = logging.getLogger(__name__)


def parse_arguments(argv: list[str] | None = None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(
        description="Reconcile settings and keep the latest released version cached"
    )
    parser.add_argument(
        "-v", "--version", action="version", version=f"%(prog)s {__version__}"
    )
    parser.add_argument(
        "--config",
        type=Path,
        metavar="FILE",
        help="Configuration file (default: ~/.settingsync/config.toml)",
    )
    parser.add_argument(
        "--current-version",
        metavar="VERSION",
        help="Version reported to the upgrade responder "
        "(default: the installed settingsync version)",
    )

    subparsers = parser.add_subparsers(dest="command")

    run_parser = subparsers.add_parser(
        "run", help="Watch the settings and reconcile them until interrupted"
    )
    run_parser.add_argument(
        "--settings-file", type=Path, metavar="FILE", help="JSON settings file"
    )
    run_parser.add_argument(
        "--workers", type=int, metavar="N", help="Number of worker threads"
    )

    subparsers.add_parser(
        "check", help="Ask the upgrade responder for the latest version and exit"
    )
    return parser.parse_args(argv)


def load_config(args: argparse.Namespace) -> SettingSyncConfig:
    if args.config is not None:
        os.environ["SETTINGSYNC_CONFIG_FILE"] = str(args.config)
    load_dotenv_values()

    overrides = {
        "current_version": args.current_version,
        "settings_file": getattr(args, "settings_file", None),
        "workers": getattr(args, "workers", None),
    }
    return SettingSyncConfig.load(
        **{key: value for key, value in overrides.items() if value is not None}
    )


def build_gateway(config: SettingSyncConfig) -> HttpVersionGateway:
    return HttpVersionGateway(
        config.upgrade_check.url, timeout=config.upgrade_check.request_timeout_seconds
    )


def build_controller(
    config: SettingSyncConfig, store: FileSystemSettingStore
) -> SettingController:
    rate_limiter = default_controller_rate_limiter(
        base_delay=config.queue.base_delay_seconds,
        max_delay=config.queue.max_delay_seconds,
        qps=config.queue.qps,
        burst=config.queue.burst,
    )
    return SettingController(
        store,
        config.current_version,
        gateway=build_gateway(config),
        queue=RateLimitingQueue(rate_limiter, name="settingsync-setting"),
        upgrade_check_interval=config.upgrade_check.interval,
        max_retries=config.queue.max_retries,
    )


def run(config: SettingSyncConfig) -> None:
    stop_event = threading.Event()

    def _stop(signum: int, frame: FrameType | None) -> None:
        logger.info("Received %s, stopping", signal.Signals(signum).name)
        stop_event.set()

    signal.signal(signal.SIGINT, _stop)
    signal.signal(signal.SIGTERM, _stop)

    store = FileSystemSettingStore(config.settings_file, namespace=config.namespace)
    controller = build_controller(config, store)
    watcher = SettingWatcher(
        store,
        controller,
        poll_interval=config.watch.poll_interval_seconds,
        resync_period=config.watch.resync_period_seconds,
    )
    watcher_thread = threading.Thread(
        target=watcher.run, args=(stop_event,), name="setting-watcher", daemon=True
    )
    watcher_thread.start()

    controller.run(stop_event, workers=config.workers)
    watcher_thread.join()


def check(config: SettingSyncConfig) -> int:
    try:
        latest_version = check_latest_version(
            build_gateway(config), config.current_version
        )
    except VersionGatewayError as e:
        rprint(f"[red]Error checking for upgrades: {escape(str(e))}[/]")
        return 1

    rprint(f"Latest version: [bold]{latest_version}[/]")
    if availability := get_upgrade_availability(
        config.current_version, latest_version
    ):
        rprint(
            f"[yellow]Upgrade available: {availability.current_version} -> "
            f"{availability.latest_version}[/]"
        )
    else:
        rprint(f"[green]{config.current_version} is up to date[/]")
    return 0


def main(argv: list[str] | None = None) -> None:
    args = parse_arguments(argv)

    try:
        config = load_config(args)
    except ConfigError as e:
        rprint(f"[red]{escape(str(e))}[/]")
        sys.exit(1)

    setup_logging(config.log_level, log_file=config.log_file)

    match args.command:
        case "check":
            sys.exit(check(config))
        case _:
            run(config)


if __name__ == "__main__":
    main()
