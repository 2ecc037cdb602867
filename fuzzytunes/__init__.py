"""
Fuzzytunes - Browse an MPD library and queue through fzf.
"""

__version__ = "1.0.0"
__author__ = "FuzzyTunes Team"
__description__ = "A terminal browser for MPD that picks artists, albums, songs and queue entries with fzf."

from . import logging_config
from . import keys
from . import config
from . import client
from . import selector
from . import dispatch
from . import navigator

from .keys import Action, KeyBindings
from .config import AppConfig, ConfigManager, load_config, resolve_selector_options
from .client import ControlClient, MpcClient
from .selector import FzfSelector, Selection
from .dispatch import QueueDispatcher
from .navigator import Navigator

__all__ = [
    # Keys
    'Action',
    'KeyBindings',

    # Config
    'AppConfig',
    'ConfigManager',
    'load_config',
    'resolve_selector_options',

    # Control client
    'ControlClient',
    'MpcClient',

    # Selector
    'FzfSelector',
    'Selection',

    # Navigation
    'QueueDispatcher',
    'Navigator',
]
