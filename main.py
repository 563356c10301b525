"""
Kiosk Rotator - Main Entry Point

Cycles a full-screen web surface through a list of pages on a fixed
interval. Arrow keys navigate; interacting with a page resets its timer.
"""
import argparse
import sys
from pathlib import Path
from typing import List, Optional, Sequence

# QtWebEngine must be imported before the QApplication exists.
from ui.screen_window import create_screen_window
from PySide6.QtWidgets import QApplication

from core.logging.logger import setup_logging, get_logger
from core.settings import SettingsManager
from rotation.controller import RotationController
from rotation.display_host import DisplayHost
from rotation.session_storage import SessionStorage
from rotation.sync_channel import SyncChannel
from ui.control_window import ControlWindow
from versioning import APP_EXE_NAME, APP_NAME, APP_VERSION, APP_DESCRIPTION

logger = get_logger(__name__)


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(prog=APP_EXE_NAME, description=APP_DESCRIPTION)
    parser.add_argument("urls", nargs="*", help="Pages to rotate through, in order")
    parser.add_argument("-f", "--file", type=Path,
                        help="Text file with one page per line (appended after positional pages)")
    parser.add_argument("-i", "--interval", type=float, default=None,
                        help="Seconds per page (default: rotation.interval_s setting)")
    parser.add_argument("-d", "--debug", action="store_true", help="Enable debug logging")
    parser.add_argument("-v", "--verbose", action="store_true",
                        help="Enable high-volume debug logging (implies --debug)")
    parser.add_argument("--version", action="version", version=f"{APP_NAME} {APP_VERSION}")
    return parser


def collect_urls(args: argparse.Namespace) -> List[str]:
    """Positional pages followed by the lines of ``--file``."""
    urls = list(args.urls)
    if args.file is not None:
        urls.extend(args.file.read_text(encoding="utf-8").splitlines())
    return urls


def resolve_interval_ms(args: argparse.Namespace, settings: SettingsManager) -> int:
    if args.interval is not None:
        if args.interval < 0:
            raise ValueError("--interval must be >= 0")
        return int(args.interval * 1000)
    return settings.get_int('rotation.interval_s', 30) * 1000


def main(argv: Optional[Sequence[str]] = None) -> int:
    """Main entry point for the rotator."""
    parser = build_parser()
    args = parser.parse_args(argv)
    setup_logging(debug=args.debug, verbose=args.verbose)

    logger.info("=" * 60)
    logger.info("%s %s Starting", APP_NAME, APP_VERSION)
    logger.info("=" * 60)

    try:
        urls = collect_urls(args)
    except OSError as e:
        logger.error("Could not read page list %s: %s", args.file, e)
        return 2

    app = QApplication(sys.argv[:1])
    app.setApplicationName(APP_NAME)
    app.setApplicationVersion(APP_VERSION)

    settings = SettingsManager()
    try:
        interval_ms = resolve_interval_ms(args, settings)
    except ValueError as e:
        parser.error(str(e))

    channel = SyncChannel(deferred=True)
    session_storage = SessionStorage()
    host = DisplayHost(channel, create_screen_window, settings_manager=settings)
    controller = RotationController(channel, settings_manager=settings,
                                    session_storage=session_storage)

    window = ControlWindow(controller)
    window.resize(420, 320)
    window.show()

    if not controller.start(urls, interval_ms):
        logger.warning("No pages to show; pass pages as arguments or with --file")

    exit_code = 0
    try:
        exit_code = app.exec()
    except Exception as e:
        logger.exception(f"Fatal error in main: {e}")
        exit_code = 1
    finally:
        controller.shutdown()
        host.shutdown()
        channel.close()
        session_storage.clear()

    logger.info("=" * 60)
    logger.info(f"{APP_NAME} Exiting (code={exit_code})")
    logger.info("=" * 60)
    return exit_code


if __name__ == "__main__":
    sys.exit(main())
