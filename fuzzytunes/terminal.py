"""
Terminal handling for fuzzytunes.
"""
import signal
import sys
import termios
from contextlib import contextmanager
from typing import Any, Dict, Iterator, Optional, TextIO

from fuzzytunes.logging_config import get_logger

logger = get_logger('terminal')

ENTER_ALT_SCREEN = "\033[?1049h"
LEAVE_ALT_SCREEN = "\033[?1049l"
SHOW_CURSOR = "\033[?25h"

EXIT_SIGNALS = (signal.SIGTERM, signal.SIGHUP)


def _exit_on_signal(signum: int, frame: Any = None) -> None:
    """Turn a termination signal into SystemExit so cleanup runs."""
    logger.debug(f"Received signal {signum}, exiting")
    sys.exit(128 + signum)


@contextmanager
def terminal_session(stdin: Optional[TextIO] = None,
                     stdout: Optional[TextIO] = None) -> Iterator[None]:
    """Hold the terminal for the duration of a browsing session.

    Switches to the alternate screen and remembers the tty settings. Both
    are put back however the block is left.
    """
    stdin = stdin or sys.stdin
    stdout = stdout or sys.stdout

    fd = None
    old = None
    if stdin.isatty():
        fd = stdin.fileno()
        old = termios.tcgetattr(fd)

    # Handlers go in only once the tty settings are held, so a failed
    # tcgetattr leaves nothing behind
    previous_handlers: Dict[int, Any] = {}
    try:
        for signum in EXIT_SIGNALS:
            previous_handlers[signum] = signal.signal(signum, _exit_on_signal)
        if old is not None:
            stdout.write(ENTER_ALT_SCREEN)
            stdout.flush()
        yield
    finally:
        if old is not None:
            stdout.write(SHOW_CURSOR + LEAVE_ALT_SCREEN)
            stdout.flush()
            termios.tcsetattr(fd, termios.TCSADRAIN, old)
        for signum, handler in previous_handlers.items():
            signal.signal(signum, handler)
