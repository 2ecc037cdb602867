import sys
from pathlib import Path
from typing import Dict, List, Optional, Sequence, Tuple

import pytest

sys.path.insert(0, str(Path(__file__).parent.parent))

from fuzzytunes.client import ControlClient
from fuzzytunes.config import AppConfig
from fuzzytunes.dispatch import QueueDispatcher
from fuzzytunes.navigator import Navigator
from fuzzytunes.selector import Selection


def _filter_key(filters: Dict[str, str]) -> Tuple[Tuple[str, str], ...]:
    return tuple(sorted(filters.items()))


class FakeClient(ControlClient):
    """In-memory stand-in for mpc. Records every write call."""

    def __init__(self, tags=None, songs=None, genres=None, queue_lines=None, now_playing=""):
        self.tags = tags or {}
        self.songs = songs or {}
        self.genres = genres or []
        self.queue_lines: List[str] = list(queue_lines or [])
        self.now_playing = now_playing
        self.calls: List[tuple] = []
        self.queue_reads = 0

    def list_tag(self, tag, **filters):
        return list(self.tags.get((tag, _filter_key(filters)), []))

    def find(self, fmt, **filters):
        if fmt == "%genre%":
            return list(self.genres)
        return list(self.songs.get(_filter_key(filters), []))

    def queue(self, fmt):
        self.queue_reads += 1
        return list(self.queue_lines)

    def current(self, fmt):
        return self.now_playing

    def add(self, paths):
        self.calls.append(("add", list(paths)))
        for path in paths:
            self.queue_lines.append(f"{len(self.queue_lines) + 1}\t{path}")

    def play(self, index):
        self.calls.append(("play", index))

    def delete(self, positions):
        self.calls.append(("delete", list(positions)))

    def next(self):
        self.calls.append(("next",))

    def prev(self):
        self.calls.append(("prev",))

    def clear(self):
        self.calls.append(("clear",))
        self.queue_lines = []

    def shell_command(self, *args):
        return "mpc " + " ".join(args)


class ScriptedSelector:
    """Plays back canned selections and remembers what it was shown.

    Once the script runs out every further screen is cancelled.
    """

    def __init__(self, selections: Optional[Sequence[Selection]] = None):
        self.selections = list(selections or [])
        self.screens: List[dict] = []

    def show(self, prompt, items, **opts):
        self.screens.append(dict(opts, prompt=prompt, items=list(items)))
        if self.selections:
            return self.selections.pop(0)
        return Selection.cancel()


@pytest.fixture
def fake_client():
    return FakeClient()


@pytest.fixture
def dispatcher(fake_client):
    dispatcher = QueueDispatcher(fake_client)
    yield dispatcher
    dispatcher.close()


@pytest.fixture
def make_navigator(fake_client, dispatcher):
    """Build a navigator around the fake client and a scripted selector."""
    def _make(selections=(), config=None):
        selector = ScriptedSelector(selections)
        navigator = Navigator(fake_client, selector, dispatcher, config or AppConfig())
        return navigator, selector
    return _make
