#!/usr/bin/env python3
"""
crl Daemon Entry Point
Runs the clipboard change detector until killed

Started detached by DaemonService.start() as ``python -m crl.daemon``;
can also be run in the foreground for debugging.
"""
import argparse
import logging
import signal
import sys
from pathlib import Path

from crl.database import ClipboardStore
from crl.errors import CrlError
from crl.log import configure_logging
from crl.services.change_detector import ChangeDetector
from crl.services.clipboard_service import ClipboardService
from crl.settings import SettingsManager

logger = logging.getLogger(__name__)


class CrlDaemon:
    """Background poller wiring settings, store and clipboard together"""

    def __init__(self, settings: SettingsManager):
        logger.info("Initializing services...")
        self.settings = settings
        self.store = ClipboardStore(settings.db_path, settings.busy_timeout_ms)
        self.clipboard = ClipboardService()
        self.detector = ChangeDetector(
            self.store,
            self.clipboard,
            interval=settings.poll_interval,
            ignore_empty=settings.daemon.ignore_empty,
        )
        logger.info(f"History database: {self.store.db_path}")

    def signal_handler(self, signum, frame):
        """Stop polling on SIGTERM/SIGINT"""
        logger.info(f"Received signal {signum}, shutting down...")
        self.detector.stop()

    def start(self) -> int:
        """Check clipboard and store, then poll until stopped"""
        try:
            self.detector.check_ready()
        except CrlError as e:
            logger.error(f"Start-up check failed: {e}")
            return 1

        signal.signal(signal.SIGTERM, self.signal_handler)
        signal.signal(signal.SIGINT, self.signal_handler)

        self.detector.run_forever()
        logger.info("Daemon shutdown complete")
        return 0


def main(argv=None) -> int:
    parser = argparse.ArgumentParser(prog="crl.daemon", description="crl clipboard poller")
    parser.add_argument("--config", type=Path, default=None, help="settings file")
    args = parser.parse_args(argv)

    configure_logging("INFO")
    try:
        settings = SettingsManager(args.config)
    except CrlError as e:
        logger.error(str(e))
        return 1

    # The daemon never logs less than INFO unless asked for DEBUG
    if logging.getLevelName(settings.log_level) < logging.INFO:
        configure_logging(settings.log_level)

    return CrlDaemon(settings).start()


if __name__ == "__main__":
    sys.exit(main())
