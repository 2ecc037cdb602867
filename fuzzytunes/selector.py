"""
Selection screens for fuzzytunes, drawn by fzf.
"""
import os
import subprocess
from dataclasses import dataclass, field
from typing import List, Mapping, Optional, Sequence, Tuple

from fuzzytunes.logging_config import get_logger, SelectorError

logger = get_logger('selector')

ENTER = "enter"

# fzf exit statuses
FZF_OK = 0
FZF_NO_MATCH = 1
FZF_INTERRUPTED = 130


@dataclass
class Selection:
    """What the user did on one selection screen."""
    key: str = ENTER
    items: List[str] = field(default_factory=list)
    cancelled: bool = False

    @classmethod
    def cancel(cls) -> "Selection":
        return cls(key=ENTER, items=[], cancelled=True)


def parse_output(output: str, expect_keys: Sequence[str]) -> Selection:
    """Parse fzf's stdout.

    With ``--expect`` the first line names the key that ended the screen,
    blank for enter. Every following line is a selected item.
    """
    lines = output.split("\n")
    if lines and lines[-1] == "":
        lines.pop()
    key = ENTER
    if expect_keys:
        if not lines:
            return Selection()
        key = lines.pop(0) or ENTER
    return Selection(key=key, items=lines)


class FzfSelector:
    """Runs one fzf screen per call to ``show``."""

    def __init__(self, executable: str = "fzf", options: str = "",
                 environ: Optional[Mapping[str, str]] = None):
        self.executable = executable
        self.options = options
        self.environ = dict(os.environ if environ is None else environ)

    def build_command(self, prompt: str, multi: bool = False,
                      preview_command: Optional[str] = None,
                      inline_execute: Optional[Tuple[str, str]] = None,
                      header: Optional[str] = None,
                      expect_keys: Sequence[str] = (),
                      with_nth: Optional[int] = None) -> List[str]:
        """Assemble the fzf argument list for one screen."""
        cmd = [self.executable, "--prompt", f"{prompt} > "]
        if expect_keys:
            cmd.append("--expect=" + ",".join(expect_keys))
        if multi:
            cmd.append("--multi")
        else:
            cmd.append("--no-multi")
        if preview_command:
            cmd.extend(["--preview", f"{preview_command} 2>/dev/null"])
        if inline_execute:
            key, command = inline_execute
            cmd.extend(["--bind", f"{key}:execute-silent({command} >/dev/null 2>&1 &)"])
        if header:
            cmd.extend(["--header", header])
        if with_nth:
            cmd.extend(["--delimiter", "\t", "--with-nth", f"{with_nth}.."])
        return cmd

    def show(self, prompt: str, items: Sequence[str], multi: bool = False,
             preview_command: Optional[str] = None,
             inline_execute: Optional[Tuple[str, str]] = None,
             header: Optional[str] = None,
             expect_keys: Sequence[str] = (),
             with_nth: Optional[int] = None) -> Selection:
        """Show ``items`` and wait for the user.

        Returns the pressed key (one of ``expect_keys`` or ``"enter"``) and the
        selected lines in the order they were selected. An aborted screen
        comes back as a cancelled selection.
        """
        cmd = self.build_command(prompt, multi=multi, preview_command=preview_command,
                                 inline_execute=inline_execute, header=header,
                                 expect_keys=expect_keys, with_nth=with_nth)
        env = dict(self.environ)
        env["FZF_DEFAULT_OPTS"] = self.options
        logger.debug(f"Showing {len(items)} items for prompt {prompt!r}")

        try:
            result = subprocess.run(
                cmd,
                input="\n".join(items),
                stdout=subprocess.PIPE,
                text=True,
                env=env,
            )
        except FileNotFoundError as e:
            raise SelectorError(f"Failed to start {self.executable}: {e}")
        except KeyboardInterrupt:
            return Selection.cancel()

        if result.returncode == FZF_INTERRUPTED or result.returncode < 0:
            return Selection.cancel()
        if result.returncode not in (FZF_OK, FZF_NO_MATCH):
            raise SelectorError(f"{self.executable} exited with status {result.returncode}")
        return parse_output(result.stdout, expect_keys)
