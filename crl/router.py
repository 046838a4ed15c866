#!/usr/bin/env python3
"""
Command Router - Maps CLI verbs to store and daemon operations

Every verb produces a list of typed responses; collaborator failures are
converted to error responses and never escape dispatch().
"""
import logging
from typing import Callable, Dict, List, Optional

from crl.database import ClipboardStore, parse_entry_id
from crl.errors import CrlError, InvalidArgument
from crl.models import ActionResponse, DaemonState, Many, One
from crl.services.clipboard_service import ClipboardService
from crl.services.daemon_service import DaemonService

logger = logging.getLogger(__name__)

COMMANDS = ("start", "health", "kill", "list", "set", "clean", "help")

# Short aliases; "s" and "h" belong to start and health
ALIASES = {
    "s": "start",
    "h": "health",
    "k": "kill",
    "l": "list",
    "c": "clean",
}

HELP_TEXT = """\
usage: crl <command> [argument]

commands:
  start, s         start the clipboard daemon
  health, h        check that exactly one daemon is running
  kill, k          kill every running daemon
  list, l [N]      show the N most recent entries (default {default}, max 50)
  set ID           copy entry ID back to the clipboard
  clean, c         delete the whole history
  help             show this message"""


def resolve_verb(verb: Optional[str]) -> Optional[str]:
    """Map a verb or alias to its command name, None if unknown"""
    if not verb:
        return None
    verb = verb.strip().lower()
    verb = ALIASES.get(verb, verb)
    return verb if verb in COMMANDS else None


class CommandRouter:
    """Dispatches one verb to the store or the daemon service"""

    def __init__(self, store: ClipboardStore, daemon: DaemonService,
                 clipboard: ClipboardService, default_list_limit: int = 25):
        self.store = store
        self.daemon = daemon
        self.clipboard = clipboard
        self.default_list_limit = default_list_limit
        self._handlers: Dict[str, Callable[[Optional[str]], List[ActionResponse]]] = {
            "start": self._handle_start,
            "health": self._handle_health,
            "kill": self._handle_kill,
            "list": self._handle_list,
            "set": self._handle_set,
            "clean": self._handle_clean,
            "help": self._handle_help,
        }

    def dispatch(self, verb: Optional[str], argument: Optional[str] = None) -> List[ActionResponse]:
        """
        Run one command

        Args:
            verb: Command name or alias
            argument: Optional single argument (list limit or entry id)

        Returns:
            Responses in display order
        """
        command = resolve_verb(verb)
        if command is None:
            message = f"unknown command '{verb}'" if verb else "no command given"
            return [ActionResponse.error(f"{message}, run 'crl help' for usage")]

        logger.debug(f"Dispatching {command} (argument: {argument!r})")
        try:
            return self._handlers[command](argument)
        except CrlError as e:
            logger.warning(f"{command} failed: {e}")
            return [ActionResponse.error(str(e))]

    def _handle_start(self, argument: Optional[str]) -> List[ActionResponse]:
        responses = [ActionResponse.content("Starting crl...")]
        try:
            pid = self.daemon.start()
        except CrlError as e:
            responses.append(ActionResponse.error(str(e)))
            return responses
        responses.append(ActionResponse.success(f"crl daemon started on pid: {pid}"))
        responses.append(ActionResponse.content("Check that it stays alive with: crl health"))
        return responses

    def _handle_health(self, argument: Optional[str]) -> List[ActionResponse]:
        health = self.daemon.health()
        if health.state is DaemonState.NOT_RUNNING:
            return [ActionResponse.error("crl daemon is not running. run 'crl start' to start it...")]
        if health.state is DaemonState.RUNNING:
            return [ActionResponse.success(f"crl daemon is running on pid: {health.pid}")]
        pids = ", ".join(str(pid) for pid in sorted(health.pids))
        return [ActionResponse.error(
            f"more than one daemon running (pids: {pids})... not good. run 'crl kill' then 'crl start'"
        )]

    def _handle_kill(self, argument: Optional[str]) -> List[ActionResponse]:
        killed = self.daemon.kill()
        if not killed:
            return [ActionResponse.success("no crl daemon running")]
        pids = ", ".join(str(pid) for pid in sorted(killed))
        return [ActionResponse.success(f"kill sent to crl daemon (pid: {pids})")]

    def _handle_list(self, argument: Optional[str]) -> List[ActionResponse]:
        if argument is None or argument.strip() == "":
            limit = self.default_list_limit
        else:
            try:
                limit = int(argument.strip())
            except ValueError as e:
                raise InvalidArgument(f"list limit must be an integer, got '{argument}'") from e

        entries = self.store.list(limit)
        message = "" if entries else "history is empty"
        return [ActionResponse.content(message, Many(tuple(entries)))]

    def _handle_set(self, argument: Optional[str]) -> List[ActionResponse]:
        if argument is None:
            raise InvalidArgument("set needs an entry id, e.g. 'crl set 12'")

        entry_id = parse_entry_id(argument)
        entry = self.store.get(entry_id)
        if entry is None:
            return [ActionResponse.error(f"no entry with id {entry_id}")]

        self.clipboard.write(entry.text)
        return [ActionResponse.success(f"entry {entry.id} copied to clipboard", One(entry))]

    def _handle_clean(self, argument: Optional[str]) -> List[ActionResponse]:
        removed = self.store.clear()
        noun = "entry" if removed == 1 else "entries"
        return [ActionResponse.success(f"removed {removed} {noun} from history")]

    def _handle_help(self, argument: Optional[str]) -> List[ActionResponse]:
        return [ActionResponse.content(HELP_TEXT.format(default=self.default_list_limit))]

