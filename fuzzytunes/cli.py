"""
Command line entry point for fuzzytunes.
"""
import shutil
import sys
from dataclasses import dataclass
from pathlib import Path
from typing import Dict, List, Optional

from fuzzytunes import __description__, __version__
from fuzzytunes.client import MpcClient
from fuzzytunes.config import load_config, resolve_selector_options
from fuzzytunes.dispatch import QueueDispatcher
from fuzzytunes.logging_config import (
    get_logger,
    setup_logging,
    ControlClientError,
    FuzzyTunesError,
    MissingDependencyError,
    NavigationInvariantError,
    SelectorError,
)
from fuzzytunes.navigator import (
    EXIT_INVARIANT,
    EXIT_OK,
    START_VIEWS,
    Navigator,
)
from fuzzytunes.selector import FzfSelector
from fuzzytunes.terminal import terminal_session

logger = get_logger('main')

EXIT_ERROR = 1
EXIT_INTERRUPTED = 130

REQUIRED_COMMANDS = ("fzf", "mpc")

VIEW_FLAGS: Dict[str, str] = {
    "--all": "songs",
    "--artist": "artists",
    "--playlist": "playlist",
    "--genre": "genres",
}

USAGE = f"""fuzzytunes {__version__}
{__description__}

Usage:
  fuzzytunes [--all | --artist | --playlist | --genre] [--config PATH]

Options:
  --all          Start in the song list
  --artist       Start in the artist list
  --playlist     Start in the queue
  --genre        Start in the genre list
  --config PATH  Read settings from PATH instead of the default config file
  -v, --version  Show version info
  -h, --help     Show this help
"""

# External command cache
_command_cache: Dict[str, Optional[str]] = {}


def _find_command(cmd: str) -> Optional[str]:
    """Find an external command in PATH with caching.

    Args:
        cmd: Command name to find

    Returns:
        Path to command if found, None otherwise
    """
    if cmd in _command_cache:
        return _command_cache[cmd]
    result = shutil.which(cmd)
    _command_cache[cmd] = result
    return result


def check_dependencies() -> None:
    """Raise MissingDependencyError if fzf or mpc is missing."""
    missing = [cmd for cmd in REQUIRED_COMMANDS if _find_command(cmd) is None]
    if missing:
        raise MissingDependencyError(f"Required command not found: {', '.join(missing)}")


class UsageError(FuzzyTunesError):
    """Bad command line arguments."""
    pass


@dataclass
class Options:
    view: Optional[str] = None
    config_path: Optional[Path] = None
    show_help: bool = False
    show_version: bool = False


def parse_args(argv: List[str]) -> Options:
    """Parse command line flags. The last view flag given wins."""
    options = Options()
    args = list(argv)
    while args:
        arg = args.pop(0)
        if arg in ("--help", "-h"):
            options.show_help = True
        elif arg in ("--version", "-v"):
            options.show_version = True
        elif arg in VIEW_FLAGS:
            options.view = VIEW_FLAGS[arg]
        elif arg == "--config":
            if not args:
                raise UsageError("--config needs a path")
            options.config_path = Path(args.pop(0)).expanduser()
        elif arg.startswith("--config="):
            options.config_path = Path(arg.split("=", 1)[1]).expanduser()
        else:
            raise UsageError(f"Unknown option: {arg}")
    return options


def main(argv: Optional[List[str]] = None) -> int:
    """Run fuzzytunes and return the process exit code."""
    argv = sys.argv[1:] if argv is None else argv
    try:
        options = parse_args(argv)
    except UsageError as e:
        print(f"Error: {e}", file=sys.stderr)
        print(USAGE, file=sys.stderr)
        return EXIT_ERROR

    if options.show_help:
        print(USAGE)
        return EXIT_OK
    if options.show_version:
        print(f"fuzzytunes {__version__}")
        print(__description__)
        return EXIT_OK

    manager = load_config(options.config_path)
    config = manager.config
    setup_logging(config.log_level, Path(config.log_file).expanduser() if config.log_file else None)
    manager.report_problems()

    try:
        check_dependencies()
        client = MpcClient(executable=_find_command("mpc"))
        client.check_connection()
    except (MissingDependencyError, ControlClientError) as e:
        print(f"Error: {e}", file=sys.stderr)
        return EXIT_ERROR

    fzf_options, tier = resolve_selector_options(config.fzf_options)
    logger.debug(f"Using fzf options from {tier}: {fzf_options}")
    selector = FzfSelector(executable=_find_command("fzf"), options=fzf_options)
    dispatcher = QueueDispatcher(client)
    navigator = Navigator(client, selector, dispatcher, config)
    start = START_VIEWS[options.view or config.default_view]()

    try:
        with terminal_session():
            code = navigator.run(start)
    except NavigationInvariantError as e:
        logger.critical(f"Navigation error: {e}")
        code = EXIT_INVARIANT
    except (ControlClientError, SelectorError) as e:
        print(f"Error: {e}", file=sys.stderr)
        code = EXIT_ERROR
    except KeyboardInterrupt:
        code = EXIT_INTERRUPTED
    finally:
        dispatcher.close()
    return code


def run() -> None:
    """Console script entry point."""
    sys.exit(main())


if __name__ == "__main__":
    run()
