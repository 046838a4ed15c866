#!/usr/bin/env python3
"""
crl command line
Parses ``crl [--config PATH] [-v] <command> [argument]``, runs it through the
command router and prints the responses
"""
import argparse
import logging
import sys
from pathlib import Path
from typing import Iterable, List, Optional, TextIO

from crl import __version__
from crl.database import ClipboardStore
from crl.errors import CrlError
from crl.log import configure_logging
from crl.models import ActionResponse, Many, One, ResponseKind
from crl.router import CommandRouter
from crl.services.clipboard_service import ClipboardService
from crl.services.daemon_service import DaemonService
from crl.settings import SettingsManager

logger = logging.getLogger(__name__)

MARKERS = {
    ResponseKind.ERROR: "❌ ",
    ResponseKind.SUCCESS: "👍 ",
    ResponseKind.CONTENT: "",
}


def render_response(response: ActionResponse) -> List[str]:
    """Turn one response into output lines"""
    lines = []
    if response.message:
        lines.append(MARKERS[response.kind] + response.message)
    elif response.kind is not ResponseKind.CONTENT:
        lines.append(MARKERS[response.kind].rstrip())

    payload = response.payload
    if isinstance(payload, One):
        lines.append(f"{payload.entry.id} {payload.entry.text}")
    elif isinstance(payload, Many):
        lines.extend(f"{entry.id} {entry.text}" for entry in payload.entries)
    return lines


def print_responses(responses: Iterable[ActionResponse], out: Optional[TextIO] = None):
    out = out or sys.stdout
    for response in responses:
        for line in render_response(response):
            print(line, file=out)


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="crl",
        description="Clipboard record log: keeps a history of everything you copy.",
        epilog="Run 'crl help' for the list of commands.",
    )
    parser.add_argument("command", nargs="?", help="start|health|kill|list|set|clean|help")
    parser.add_argument("argument", nargs="?", help="list limit or entry id")
    parser.add_argument("--config", type=Path, default=None, help="settings file")
    parser.add_argument("-v", "--verbose", action="store_true", help="debug logging to stderr")
    parser.add_argument("--version", action="version", version=f"crl {__version__}")
    return parser


def build_router(settings: SettingsManager) -> CommandRouter:
    store = ClipboardStore(settings.db_path, settings.busy_timeout_ms)
    daemon = DaemonService(settings.daemon, config_path=settings.config_path if settings.explicit else None)
    return CommandRouter(store, daemon, ClipboardService(), settings.default_list_limit)


def run(argv: Optional[List[str]] = None, out: Optional[TextIO] = None) -> int:
    """Run the CLI and return the exit status"""
    args = build_parser().parse_args(argv)
    configure_logging("DEBUG" if args.verbose else "WARNING")

    try:
        settings = SettingsManager(args.config)
    except CrlError as e:
        print_responses([ActionResponse.error(str(e))], out)
        return 1

    if not args.verbose:
        configure_logging(settings.log_level)

    responses = build_router(settings).dispatch(args.command, args.argument)
    print_responses(responses, out)
    return 1 if any(response.is_error for response in responses) else 0


def main():
    sys.exit(run())


if __name__ == "__main__":
    main()
