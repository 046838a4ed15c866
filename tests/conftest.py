"""Pytest configuration and shared fixtures."""

from pathlib import Path

import pytest

from crl.database import ClipboardStore
from crl.errors import ClipboardUnavailable


class FakeClipboard:
    """In-memory stand-in for ClipboardService.

    ``script`` is consumed one item per read; an exception instance in the
    script is raised instead of returned. Once exhausted, reads return the
    current text.
    """

    def __init__(self, text: str = "", script=None):
        self.text = text
        self.script = list(script or [])
        self.reads = 0
        self.writes = []
        self.fail_writes = False

    def read(self) -> str:
        self.reads += 1
        if self.script:
            item = self.script.pop(0)
            if isinstance(item, Exception):
                raise item
            self.text = item
        return self.text

    def write(self, text: str) -> None:
        if self.fail_writes:
            raise ClipboardUnavailable("no clipboard in tests")
        self.writes.append(text)
        self.text = text


@pytest.fixture
def temp_db_path(tmp_path: Path) -> Path:
    return tmp_path / "history.db"


@pytest.fixture
def temp_config_path(tmp_path: Path) -> Path:
    return tmp_path / "settings.yml"


@pytest.fixture
def store(temp_db_path: Path) -> ClipboardStore:
    return ClipboardStore(temp_db_path)


@pytest.fixture
def clipboard() -> FakeClipboard:
    return FakeClipboard()


@pytest.fixture
def make_clipboard():
    return FakeClipboard
