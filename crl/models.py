"""Value types shared by the store, the services and the command router."""

import sqlite3
from dataclasses import dataclass, field
from enum import Enum
from typing import FrozenSet, Optional, Tuple, Union


@dataclass(frozen=True)
class ClipboardEntry:
    """One stored clipboard value. Immutable once written."""
    id: int
    text: str
    created_at: str

    @classmethod
    def from_row(cls, row: sqlite3.Row) -> "ClipboardEntry":
        return cls(id=row["id"], text=row["text"], created_at=row["created_at"])


class DaemonState(Enum):
    NOT_RUNNING = "not_running"
    RUNNING = "running"
    MULTIPLE_RUNNING = "multiple_running"


@dataclass(frozen=True)
class DaemonHealth:
    """Liveness of the daemon, derived from the process table on every query"""
    state: DaemonState
    pids: FrozenSet[int] = field(default_factory=frozenset)

    @classmethod
    def from_pids(cls, pids) -> "DaemonHealth":
        pids = frozenset(pids)
        if not pids:
            state = DaemonState.NOT_RUNNING
        elif len(pids) == 1:
            state = DaemonState.RUNNING
        else:
            state = DaemonState.MULTIPLE_RUNNING
        return cls(state=state, pids=pids)

    @property
    def pid(self) -> Optional[int]:
        """The daemon pid when exactly one is running"""
        if self.state is DaemonState.RUNNING:
            return next(iter(self.pids))
        return None


class ResponseKind(Enum):
    ERROR = "error"
    SUCCESS = "success"
    CONTENT = "content"


@dataclass(frozen=True)
class One:
    entry: ClipboardEntry


@dataclass(frozen=True)
class Many:
    entries: Tuple[ClipboardEntry, ...]


Payload = Union[None, One, Many]


@dataclass(frozen=True)
class ActionResponse:
    kind: ResponseKind
    message: str = ""
    payload: Payload = None

    @classmethod
    def error(cls, message: str) -> "ActionResponse":
        return cls(ResponseKind.ERROR, message)

    @classmethod
    def success(cls, message: str, payload: Payload = None) -> "ActionResponse":
        return cls(ResponseKind.SUCCESS, message, payload)

    @classmethod
    def content(cls, message: str = "", payload: Payload = None) -> "ActionResponse":
        return cls(ResponseKind.CONTENT, message, payload)

    @property
    def is_error(self) -> bool:
        return self.kind is ResponseKind.ERROR
