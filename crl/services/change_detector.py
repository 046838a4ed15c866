#!/usr/bin/env python3
"""
Change Detector - Polls the clipboard and records changes

One tick reads the clipboard, compares it with the latest stored entry and
inserts a new entry only when the text differs. Polling an unchanged
clipboard any number of times therefore stores it once.
"""
import logging
import threading
import time
from typing import Optional

from crl.database import ClipboardStore
from crl.services.clipboard_service import ClipboardService

logger = logging.getLogger(__name__)


class ChangeDetector:
    """Fixed-cadence clipboard poller feeding the history store"""

    def __init__(self, store: ClipboardStore, clipboard: ClipboardService,
                 interval: float = 0.5, ignore_empty: bool = True):
        """
        Initialize change detector

        Args:
            store: History store written on every detected change
            clipboard: Clipboard accessor polled on every tick
            interval: Seconds between ticks, fixed for the detector's lifetime
            ignore_empty: Treat an empty clipboard as "nothing to record"
        """
        self.store = store
        self.clipboard = clipboard
        self.interval = interval
        self.ignore_empty = ignore_empty
        self._stop_event = threading.Event()

    def tick(self) -> Optional[int]:
        """
        Run one poll-compare-maybe-insert cycle

        Returns:
            The id of the inserted entry, or None when nothing changed
        """
        text = self.clipboard.read()
        if self.ignore_empty and text == "":
            return None

        latest = self.store.latest()
        if latest is not None and latest.text == text:
            return None

        entry_id = self.store.insert(text)
        logger.info(f"✓ Recorded clipboard change as entry {entry_id} ({len(text)} chars)")
        return entry_id

    def check_ready(self):
        """Read the clipboard and the store once; raises if either is unusable"""
        self.clipboard.read()
        self.store.latest()

    def stop(self):
        """Ask the loop to exit at its next wait"""
        self._stop_event.set()

    @property
    def stopped(self) -> bool:
        return self._stop_event.is_set()

    def run_forever(self, max_ticks: Optional[int] = None) -> int:
        """
        Tick on a fixed cadence until stopped

        A failing tick is logged and the loop carries on; the next tick is
        the retry.

        Args:
            max_ticks: Stop after this many ticks (None runs until stop())

        Returns:
            Number of ticks run
        """
        logger.info(f"Polling clipboard every {self.interval * 1000:.0f}ms")
        ticks = 0
        deadline = time.monotonic()
        while not self._stop_event.is_set():
            try:
                self.tick()
            except Exception as e:
                logger.warning(f"Tick failed, retrying next interval: {e}")
            ticks += 1
            if max_ticks is not None and ticks >= max_ticks:
                break

            deadline += self.interval
            now = time.monotonic()
            if deadline < now:
                # Overran; restart the cadence from now rather than bursting
                deadline = now
            self._stop_event.wait(deadline - now)

        logger.info(f"Clipboard polling stopped after {ticks} ticks")
        return ticks
