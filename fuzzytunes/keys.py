"""
Key bindings for fuzzytunes.

Every view shares one immutable table mapping logical actions to the key
tokens fzf understands. When two actions are bound to the same token the
action declared first in ``Action`` wins.
"""
import re
from dataclasses import dataclass, field
from enum import Enum
from typing import Dict, List, Mapping, Optional, Tuple

from fuzzytunes.logging_config import get_logger

logger = get_logger('keys')


class Action(Enum):
    """Logical actions that can be bound to a key."""
    PLAYLIST = "playlist"
    TRACK = "track"
    ARTIST = "artist"
    GENRE = "genre"
    FINDADD = "findadd"

    @property
    def config_key(self) -> str:
        """Name of the config setting that overrides this binding."""
        if self is Action.FINDADD:
            return "findadd_key"
        return f"{self.value}_view_key"


VIEW_ACTIONS: Tuple[Action, ...] = (Action.PLAYLIST, Action.TRACK, Action.ARTIST, Action.GENRE)

DEFAULT_BINDINGS: Dict[Action, str] = {
    Action.PLAYLIST: "f1",
    Action.TRACK: "f2",
    Action.ARTIST: "f3",
    Action.GENRE: "f4",
    Action.FINDADD: "ctrl-space",
}

# Named keys fzf accepts for --expect and --bind
_NAMED_KEYS = {
    "enter", "return", "space", "tab", "btab", "bspace", "bs", "esc", "del",
    "delete", "up", "down", "left", "right", "home", "end", "insert", "pgup",
    "page-up", "pgdn", "page-down", "shift-up", "shift-down", "shift-left",
    "shift-right", "shift-delete", "alt-up", "alt-down", "alt-left",
    "alt-right", "alt-bspace", "alt-enter", "alt-space", "ctrl-space",
    "ctrl-alt-space", "ctrl-/", "ctrl-_", "ctrl-\\", "ctrl-]", "ctrl-^",
    "ctrl-delete", "double-click", "left-click", "right-click",
}

_KEY_PATTERNS = (
    re.compile(r"^ctrl-[a-z]$"),
    re.compile(r"^ctrl-alt-[a-z]$"),
    re.compile(r"^alt-.$"),
    re.compile(r"^f([1-9]|1[0-2])$"),
)


def is_valid_key(token: str) -> bool:
    """Check whether fzf recognizes ``token`` as a key name.

    Any single printable character other than a comma or colon is accepted
    as well, since those two separate entries on the fzf command line.
    """
    if not isinstance(token, str) or not token:
        return False
    if len(token) == 1:
        return token.isprintable() and token not in ",:" and not token.isspace()
    token = token.lower()
    if token in _NAMED_KEYS:
        return True
    return any(pattern.match(token) for pattern in _KEY_PATTERNS)


@dataclass(frozen=True)
class KeyBindings:
    """Immutable action-to-key table."""
    bindings: Mapping[Action, str] = field(default_factory=lambda: dict(DEFAULT_BINDINGS))

    @classmethod
    def from_overrides(cls, overrides: Optional[Mapping[Action, str]] = None) -> "KeyBindings":
        """Layer overrides over the default bindings."""
        table = dict(DEFAULT_BINDINGS)
        for action, token in (overrides or {}).items():
            table[action] = token
        collisions = _collisions(table)
        for token, actions in collisions.items():
            names = ", ".join(action.value for action in actions)
            logger.info(f"Key {token!r} is bound to {names}; {actions[0].value} takes precedence")
        return cls(bindings=table)

    def key_for(self, action: Action) -> str:
        return self.bindings[action]

    def resolve(self, token: str) -> Optional[Action]:
        """Return the first action bound to ``token``, or None."""
        for action in Action:
            if self.bindings.get(action) == token:
                return action
        return None

    def view_action(self, token: str) -> Optional[Action]:
        """Resolve ``token`` only if it names one of the global view switches."""
        action = self.resolve(token)
        if action in VIEW_ACTIONS:
            return action
        return None

    def expect_keys(self) -> List[str]:
        """Tokens for the global view switches, without duplicates."""
        keys: List[str] = []
        for action in VIEW_ACTIONS:
            token = self.bindings[action]
            if token not in keys:
                keys.append(token)
        return keys

    @property
    def findadd(self) -> str:
        return self.bindings[Action.FINDADD]


def _collisions(table: Mapping[Action, str]) -> Dict[str, List[Action]]:
    seen: Dict[str, List[Action]] = {}
    for action in Action:
        seen.setdefault(table[action], []).append(action)
    return {token: actions for token, actions in seen.items() if len(actions) > 1}
