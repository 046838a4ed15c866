"""Services used by the CLI and the daemon process."""

from .change_detector import ChangeDetector
from .clipboard_service import ClipboardService
from .daemon_service import DaemonService

__all__ = ["ChangeDetector", "ClipboardService", "DaemonService"]
