#!/usr/bin/env python3
"""
Daemon Service - Starts, finds and kills the background clipboard poller

Nothing about the daemon is persisted: every query looks at the live
process table, so a daemon killed from outside is never reported as alive.
"""
import logging
import os
import signal
import subprocess
import sys
from pathlib import Path
from typing import FrozenSet, List, Optional

from crl.errors import (
    DaemonAlreadyRunning,
    DetachFailed,
    PermissionDenied,
    ProcessQueryFailed,
)
from crl.models import DaemonHealth, DaemonState
from crl.settings import DaemonSettings

logger = logging.getLogger(__name__)

DAEMON_MODULE = "crl.daemon"
# Matched by pgrep -f against the full command line of every process
DAEMON_PATTERN = r"-m crl\.daemon"


class DaemonService:
    """Lifecycle of the detached daemon process"""

    def __init__(self, settings: Optional[DaemonSettings] = None,
                 config_path: Optional[Path] = None,
                 pattern: str = DAEMON_PATTERN):
        """
        Initialize daemon service

        Args:
            settings: Daemon settings (working directory, log sinks, privileges)
            config_path: Settings file handed down to the daemon process
            pattern: pgrep -f pattern identifying daemon processes
        """
        self.settings = settings or DaemonSettings()
        self.config_path = config_path
        self.pattern = pattern

    def find_pids(self) -> FrozenSet[int]:
        """Get the pids of every live daemon process"""
        try:
            result = subprocess.run(
                ['pgrep', '-f', '--', self.pattern],
                capture_output=True,
                text=True
            )
        except OSError as e:
            raise ProcessQueryFailed(f"cannot run pgrep: {e}") from e

        if result.returncode == 1:
            return frozenset()
        if result.returncode != 0:
            raise ProcessQueryFailed(
                f"pgrep failed with status {result.returncode}: {result.stderr.strip()}"
            )

        return frozenset(int(line) for line in result.stdout.split() if line.strip().isdigit())

    def health(self) -> DaemonHealth:
        """Classify the daemon as not running, running, or running more than once"""
        health = DaemonHealth.from_pids(self.find_pids())
        logger.info(f"Daemon health: {health.state.value} (pids: {sorted(health.pids)})")
        return health

    def daemon_command(self) -> List[str]:
        """Command line of the daemon process"""
        command = [sys.executable, '-u', '-m', DAEMON_MODULE]
        if self.config_path is not None:
            command.extend(['--config', str(self.config_path)])
        return command

    def _privilege_kwargs(self) -> dict:
        kwargs = {}
        if self.settings.user:
            kwargs['user'] = self.settings.user
        if self.settings.group:
            kwargs['group'] = self.settings.group
        return kwargs

    def start(self) -> int:
        """
        Detach a new daemon process

        Returns:
            The pid of the daemon

        Raises:
            DaemonAlreadyRunning: if a daemon is already live
            PermissionDenied: if the working directory, log sinks or
                user/group drop are not permitted
            DetachFailed: if the process cannot be spawned or exits during
                its readiness check
        """
        health = self.health()
        if health.state is not DaemonState.NOT_RUNNING:
            raise DaemonAlreadyRunning(health.pids)

        settings = self.settings
        command = self.daemon_command()
        logger.info(f"Starting daemon: {' '.join(command)}")

        try:
            for sink in (settings.stdout_log, settings.stderr_log):
                sink.parent.mkdir(parents=True, exist_ok=True)

            with open(settings.stdout_log, 'a') as out_file, open(settings.stderr_log, 'a') as err_file:
                process = subprocess.Popen(
                    command,
                    cwd=str(settings.working_directory),
                    stdin=subprocess.DEVNULL,
                    stdout=out_file,
                    stderr=err_file,
                    start_new_session=True,  # Detach from the terminal session
                    **self._privilege_kwargs()
                )
        except PermissionError as e:
            logger.error(f"Permission denied while detaching daemon: {e}")
            raise PermissionDenied(f"cannot start daemon: {e}") from e
        except (OSError, ValueError, KeyError, subprocess.SubprocessError) as e:
            logger.error(f"Failed to start daemon: {e}")
            raise DetachFailed(f"cannot start daemon: {e}") from e

        logger.info(f"Daemon process started with PID: {process.pid}")

        # The daemon checks clipboard and store before looping; an early exit means that check failed
        try:
            returncode = process.wait(timeout=settings.startup_grace_ms / 1000.0)
        except subprocess.TimeoutExpired:
            # Detached child outlives us; mark it reaped so Popen does not warn on exit
            process.returncode = 0
            return process.pid

        logger.error(f"Daemon exited during start-up with status {returncode}")
        raise DetachFailed(
            f"daemon exited during start-up with status {returncode}, see {settings.stderr_log}"
        )

    def kill(self) -> FrozenSet[int]:
        """
        Send SIGKILL to every daemon process

        Best-effort: a process that is already gone is skipped and the
        outcome is not verified.

        Returns:
            The pids a kill was issued for

        Raises:
            PermissionDenied: if any pid may not be signalled; the message
                names the pids that were killed anyway
        """
        signalled = set()
        denied = []
        for pid in sorted(self.find_pids()):
            try:
                os.kill(pid, signal.SIGKILL)
                signalled.add(pid)
                logger.info(f"Sent SIGKILL to daemon (PID: {pid})")
            except ProcessLookupError:
                logger.info(f"Daemon process {pid} already terminated")
            except PermissionError:
                logger.error(f"Not permitted to kill daemon process {pid}")
                denied.append(pid)

        if denied:
            message = f"not permitted to kill pid {', '.join(str(pid) for pid in denied)}"
            if signalled:
                message += f" (killed pid {', '.join(str(pid) for pid in sorted(signalled))})"
            raise PermissionDenied(message)
        return frozenset(signalled)
