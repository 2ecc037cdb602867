"""
MPD control client for fuzzytunes.

Library queries and queue mutations go through the ``mpc`` command line
client. Formats use mpc's template syntax: ``%artist%``, ``%album%``,
``%title%``, ``%track%``, ``%date%``, ``%file%``, ``%position%`` and
``[...]`` groups that vanish when a placeholder inside them is empty.
"""
import re
import shlex
import subprocess
from typing import Dict, Iterable, List, Optional, Sequence

from fuzzytunes.logging_config import get_logger, ControlClientError

logger = get_logger('client')

# Placeholders fzf substitutes itself; these must reach the shell unquoted
_FZF_PLACEHOLDER = re.compile(r"^\{[+]?[0-9.]*\}$")


class ControlClient:
    """Base class for library/queue control clients."""

    def list_tag(self, tag: str, **filters: str) -> List[str]:
        """Distinct values of ``tag`` among songs matching ``filters``."""
        raise NotImplementedError("Subclasses must implement list_tag()")

    def find(self, fmt: str, **filters: str) -> List[str]:
        """Songs matching ``filters`` (all songs if none), rendered with ``fmt``."""
        raise NotImplementedError("Subclasses must implement find()")

    def queue(self, fmt: str) -> List[str]:
        """Current queue, one rendered line per entry."""
        raise NotImplementedError("Subclasses must implement queue()")

    def current(self, fmt: str) -> str:
        """The song now playing, or an empty string."""
        raise NotImplementedError("Subclasses must implement current()")

    def add(self, paths: Sequence[str]) -> None:
        raise NotImplementedError("Subclasses must implement add()")

    def play(self, index: int) -> None:
        raise NotImplementedError("Subclasses must implement play()")

    def delete(self, positions: Sequence[int]) -> None:
        raise NotImplementedError("Subclasses must implement delete()")

    def next(self) -> None:
        raise NotImplementedError("Subclasses must implement next()")

    def prev(self) -> None:
        raise NotImplementedError("Subclasses must implement prev()")

    def clear(self) -> None:
        raise NotImplementedError("Subclasses must implement clear()")

    def shell_command(self, *args: str) -> str:
        """Render a command line for use inside a selector preview or binding."""
        raise NotImplementedError("Subclasses must implement shell_command()")


class MpcClient(ControlClient):
    """Control client backed by the ``mpc`` executable."""

    def __init__(self, executable: str = "mpc", host: Optional[str] = None,
                 port: Optional[int] = None, timeout: float = 10.0):
        self.executable = executable
        self.host = host
        self.port = port
        self.timeout = timeout

    def _base_command(self) -> List[str]:
        cmd = [self.executable]
        if self.host:
            cmd.extend(["--host", self.host])
        if self.port:
            cmd.extend(["--port", str(self.port)])
        return cmd

    def _run(self, args: Iterable[str]) -> List[str]:
        cmd = self._base_command() + list(args)
        logger.debug(f"Running {shlex.join(cmd)}")
        try:
            result = subprocess.run(
                cmd,
                stdout=subprocess.PIPE,
                stderr=subprocess.PIPE,
                text=True,
                timeout=self.timeout,
            )
        except (subprocess.SubprocessError, FileNotFoundError) as e:
            raise ControlClientError(f"Failed to run {self.executable}: {e}")

        if result.returncode != 0:
            message = result.stderr.strip() or f"exit status {result.returncode}"
            raise ControlClientError(f"{self.executable} {' '.join(cmd[1:])}: {message}")
        return [line for line in result.stdout.splitlines() if line]

    @staticmethod
    def _filter_args(filters: Dict[str, str]) -> List[str]:
        args: List[str] = []
        for tag, value in filters.items():
            args.extend([tag, value])
        return args

    def check_connection(self) -> None:
        """Raise ControlClientError unless the MPD server answers."""
        self._run(["status"])

    def list_tag(self, tag: str, **filters: str) -> List[str]:
        return self._run(["list", tag] + self._filter_args(filters))

    def find(self, fmt: str, **filters: str) -> List[str]:
        if not filters:
            return self._run(["listall", "-f", fmt])
        return self._run(["find", "-f", fmt] + self._filter_args(filters))

    def queue(self, fmt: str) -> List[str]:
        return self._run(["playlist", "-f", fmt])

    def current(self, fmt: str) -> str:
        lines = self._run(["current", "-f", fmt])
        return lines[0] if lines else ""

    def add(self, paths: Sequence[str]) -> None:
        self._run(["add"] + list(paths))

    def play(self, index: int) -> None:
        self._run(["play", str(index)])

    def delete(self, positions: Sequence[int]) -> None:
        self._run(["del"] + [str(position) for position in positions])

    def next(self) -> None:
        self._run(["next"])

    def prev(self) -> None:
        self._run(["prev"])

    def clear(self) -> None:
        self._run(["clear"])

    def shell_command(self, *args: str) -> str:
        parts = []
        for arg in self._base_command() + list(args):
            if _FZF_PLACEHOLDER.match(arg):
                parts.append(arg)
            else:
                parts.append(shlex.quote(arg))
        return " ".join(parts)
