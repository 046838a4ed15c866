"""Tests for the command line front-end."""

import io
from pathlib import Path

import pytest
import yaml

from crl.cli import build_router, render_response, run
from crl.database import ClipboardStore
from crl.models import ActionResponse, ClipboardEntry, Many, One
from crl.settings import SettingsManager


@pytest.fixture
def config(temp_config_path: Path, temp_db_path: Path) -> Path:
    with open(temp_config_path, 'w') as f:
        yaml.dump({'store': {'db_path': str(temp_db_path)}, 'cli': {'default_list_limit': 3}}, f)
    return temp_config_path


def run_cli(*argv):
    out = io.StringIO()
    status = run(list(argv), out=out)
    return status, out.getvalue().splitlines()


def test_render_markers():
    """Test the marker prefix for each response kind"""
    assert render_response(ActionResponse.error("broken")) == ["❌ broken"]
    assert render_response(ActionResponse.success("fine")) == ["👍 fine"]
    assert render_response(ActionResponse.content("plain")) == ["plain"]


def test_render_payloads():
    """Test that payload entries render as one line each"""
    a = ClipboardEntry(id=2, text="second", created_at="t2")
    b = ClipboardEntry(id=1, text="first", created_at="t1")

    assert render_response(ActionResponse.content(payload=Many((a, b)))) == ["2 second", "1 first"]
    assert render_response(ActionResponse.success("copied", One(b))) == ["👍 copied", "1 first"]


def test_list_prints_entries(config: Path, temp_db_path: Path):
    """Test that list without argument uses the configured default"""
    store = ClipboardStore(temp_db_path)
    for text in ("one", "two", "three", "four"):
        store.insert(text)

    status, lines = run_cli("--config", str(config), "list")

    assert status == 0
    assert [line.split(" ", 1)[1] for line in lines] == ["four", "three", "two"]


def test_list_with_limit(config: Path, temp_db_path: Path):
    """Test that the list alias honours an explicit limit"""
    store = ClipboardStore(temp_db_path)
    for text in ("one", "two"):
        store.insert(text)

    status, lines = run_cli("--config", str(config), "l", "1")

    assert status == 0
    assert len(lines) == 1 and lines[0].endswith("two")


def test_bad_list_limit_exit_status(config: Path):
    """Test that a non-numeric limit exits with status 1"""
    status, lines = run_cli("--config", str(config), "list", "many")

    assert status == 1
    assert lines[0].startswith("❌ ")


def test_clean(config: Path, temp_db_path: Path):
    """Test that clean reports and deletes every entry"""
    ClipboardStore(temp_db_path).insert("gone soon")

    status, lines = run_cli("--config", str(config), "clean")

    assert status == 0
    assert lines == ["👍 removed 1 entry from history"]
    assert ClipboardStore(temp_db_path).count() == 0


def test_help(config: Path):
    """Test that help lists the commands"""
    status, lines = run_cli("--config", str(config), "help")

    assert status == 0
    assert any("set ID" in line for line in lines)


def test_unknown_command(config: Path):
    """Test that an unknown verb exits with status 1"""
    status, lines = run_cli("--config", str(config), "frobnicate")

    assert status == 1
    assert "frobnicate" in lines[0]


def test_missing_config_file(tmp_path: Path):
    """Test that a missing --config file is reported as an error"""
    status, lines = run_cli("--config", str(tmp_path / "nope.yml"), "list")

    assert status == 1
    assert lines[0].startswith("❌ ")


def test_relative_config_handed_to_daemon_as_absolute(tmp_path: Path, monkeypatch):
    """Test that a relative --config reaches the daemon command as an absolute path"""
    monkeypatch.chdir(tmp_path)
    with open(tmp_path / "cfg.yml", 'w') as f:
        yaml.dump({'store': {'db_path': "history.db"}}, f)

    router = build_router(SettingsManager(Path("cfg.yml")))
    command = router.daemon.daemon_command()

    assert command[-2] == "--config"
    assert Path(command[-1]).is_absolute()
    assert Path(command[-1]) == (tmp_path / "cfg.yml").resolve()
    assert router.store.db_path == (tmp_path / "cfg.yml").resolve().parent / "history.db"
