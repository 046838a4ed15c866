"""
Exception taxonomy for crl

Every failure a collaborator can report derives from CrlError so the
command router can turn it into an error response.
"""


class CrlError(Exception):
    """Base class for all crl errors"""


class ClipboardUnavailable(CrlError):
    """The OS clipboard could not be read or written"""


class StorageUnavailable(CrlError):
    """The history database could not be opened or written"""


class InvalidArgument(CrlError):
    """A caller-supplied argument is malformed"""


class InvalidId(InvalidArgument):
    """An entry identifier is not a well-formed integer"""


class PermissionDenied(CrlError):
    """The daemon could not be detached because of missing privileges"""


class DetachFailed(CrlError):
    """The daemon process could not be started or died during start-up"""


class DaemonAlreadyRunning(CrlError):
    """A daemon is already live; a second one would race on the history"""

    def __init__(self, pids):
        self.pids = frozenset(pids)
        listed = ", ".join(str(pid) for pid in sorted(self.pids))
        super().__init__(f"crl daemon already running (pid: {listed})")


class ProcessQueryFailed(CrlError):
    """The process table could not be queried"""


class ConfigError(CrlError):
    """The settings file is missing, unreadable or invalid"""
