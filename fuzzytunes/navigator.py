"""
View navigation for fuzzytunes.

Each view is one fzf screen. A handler lists items, shows them, and returns
the next view to display. ``Navigator.run`` keeps calling handlers until one
returns ``Exit``.
"""
from collections import Counter
from dataclasses import dataclass
from typing import Callable, Dict, Iterable, List, Optional, Tuple, Type, Union

from fuzzytunes.client import ControlClient
from fuzzytunes.config import AppConfig
from fuzzytunes.dispatch import NEXT, PREV, QueueDispatcher
from fuzzytunes.keys import Action, KeyBindings
from fuzzytunes.logging_config import get_logger, NavigationInvariantError
from fuzzytunes.selector import ENTER, FzfSelector, Selection

logger = get_logger('navigator')

EXIT_OK = 0
EXIT_NO_SELECTION = 1
EXIT_INVARIANT = 99

SONG_TITLE_FORMAT = "[[%track% - ]%title%]|[%file%]"


# =============================================================================
# Views
# =============================================================================
@dataclass(frozen=True)
class Songs:
    pass


@dataclass(frozen=True)
class Artists:
    pass


@dataclass(frozen=True)
class AlbumsOfArtist:
    artist: str


@dataclass(frozen=True)
class SongsOfAlbum:
    artist: str
    album: str


@dataclass(frozen=True)
class Genres:
    pass


@dataclass(frozen=True)
class ArtistsOfGenre:
    genre: str


@dataclass(frozen=True)
class Playlist:
    pass


@dataclass(frozen=True)
class Exit:
    code: int = EXIT_OK


View = Union[Songs, Artists, AlbumsOfArtist, SongsOfAlbum, Genres, ArtistsOfGenre, Playlist, Exit]

START_VIEWS: Dict[str, Callable[[], View]] = {
    "songs": Songs,
    "artists": Artists,
    "playlist": Playlist,
    "genres": Genres,
}

_ACTION_VIEWS: Dict[Action, Callable[[], View]] = {
    Action.PLAYLIST: Playlist,
    Action.TRACK: Songs,
    Action.ARTIST: Artists,
    Action.GENRE: Genres,
}


# =============================================================================
# Listing order
# =============================================================================
def split_fields(line: str) -> Tuple[str, str]:
    """Split a ``hidden<TAB>shown`` line. Lines without a tab have no hidden part."""
    hidden, sep, shown = line.partition("\t")
    if not sep:
        return "", line
    return hidden, shown


def sort_albums(lines: Iterable[str]) -> List[str]:
    """Order ``date<TAB>album`` lines by date, oldest first, without duplicates.

    The sort is stable and compares dates as plain strings, so an empty
    date comes before every dated album.
    """
    ordered = sorted(lines, key=lambda line: split_fields(line)[0])
    seen = set()
    unique = []
    for line in ordered:
        if line not in seen:
            seen.add(line)
            unique.append(line)
    return unique


def rank_genres(genres: Iterable[str]) -> List[str]:
    """Distinct genres, most common first, ties in alphabetical order."""
    counts = Counter(genre for genre in genres if genre)
    return [genre for genre, _ in sorted(counts.items(), key=lambda item: (-item[1], item[0]))]


def _first_field(lines: Iterable[str]) -> List[str]:
    return [split_fields(line)[0] for line in lines]


def _positions(lines: Iterable[str]) -> List[int]:
    positions = []
    for value in _first_field(lines):
        try:
            positions.append(int(value))
        except ValueError:
            logger.warning(f"Ignoring queue line without a position: {value!r}")
    return positions


# =============================================================================
# Navigator
# =============================================================================
class Navigator:
    """The view state machine."""

    def __init__(self, client: ControlClient, selector: FzfSelector,
                 dispatcher: QueueDispatcher, config: AppConfig,
                 bindings: Optional[KeyBindings] = None):
        self.client = client
        self.selector = selector
        self.dispatcher = dispatcher
        self.config = config
        self.bindings = bindings or config.key_bindings()
        self._handlers: Dict[Type, Callable[..., View]] = {
            Songs: self.show_songs,
            Artists: self.show_artists,
            AlbumsOfArtist: self.show_albums_of_artist,
            SongsOfAlbum: self.show_songs_of_album,
            Genres: self.show_genres,
            ArtistsOfGenre: self.show_artists_of_genre,
            Playlist: self.show_playlist,
        }

    def run(self, view: View) -> int:
        """Show views until one exits. Returns the exit code."""
        while not isinstance(view, Exit):
            view = self.step(view)
        logger.debug(f"Navigation finished with exit code {view.code}")
        return view.code

    def step(self, view: View) -> View:
        """Show one view and return the one that follows it."""
        logger.debug(f"Entering view {view}")
        return self._handlers[type(view)](view)

    # -------------------------------------------------------------------------
    # Helpers
    # -------------------------------------------------------------------------
    def _show(self, prompt: str, items: List[str], extra_keys: Iterable[str] = (),
              **opts) -> Selection:
        expect = self.bindings.expect_keys()
        for key in extra_keys:
            if key not in expect:
                expect.append(key)
        return self.selector.show(prompt, items, expect_keys=expect, **opts)

    def _global_view(self, selection: Selection) -> Optional[View]:
        """The view a global key switches to, if the key is one."""
        if selection.key == ENTER:
            return None
        action = self.bindings.view_action(selection.key)
        if action is None:
            return None
        logger.debug(f"Key {selection.key!r} switches to {action.value}")
        return _ACTION_VIEWS[action]()

    def _findadd(self, *args: str) -> Tuple[str, str]:
        return self.bindings.findadd, self.client.shell_command("findadd", *args)

    def _song_line_format(self, fmt: str) -> str:
        return f"%file%\t{fmt}"

    # -------------------------------------------------------------------------
    # Views
    # -------------------------------------------------------------------------
    def show_songs(self, view: Songs) -> View:
        items = self.client.find(self._song_line_format(self.config.full_song_format))
        selection = self._show("songs", items, multi=True, with_nth=2)
        if selection.cancelled:
            return Exit(EXIT_OK)
        target = self._global_view(selection)
        if target is not None:
            return target
        if selection.key == ENTER and selection.items:
            self.dispatcher.enqueue_and_play(_first_field(selection.items))
            return Playlist()
        return Exit(EXIT_NO_SELECTION)

    def show_artists(self, view: Artists) -> View:
        items = self.client.list_tag("artist")
        selection = self._show(
            "artists", items,
            preview_command=self.client.shell_command("list", "album", "artist", "{}"),
            inline_execute=self._findadd("artist", "{}"),
        )
        if selection.cancelled:
            return Exit(EXIT_OK)
        target = self._global_view(selection)
        if target is not None:
            return target
        if selection.key == ENTER and selection.items:
            return AlbumsOfArtist(selection.items[0])
        return Exit(EXIT_NO_SELECTION)

    def show_albums_of_artist(self, view: AlbumsOfArtist) -> View:
        # Songs without an album tag have no album to open
        lines = self.client.find("[%date%]\t[%album%]", artist=view.artist)
        items = sort_albums(line for line in lines if split_fields(line)[1])
        selection = self._show(
            view.artist, items, with_nth=1,
            preview_command=self.client.shell_command(
                "find", "-f", SONG_TITLE_FORMAT, "artist", view.artist, "album", "{2}"),
            inline_execute=self._findadd("artist", view.artist, "album", "{2}"),
        )
        if selection.cancelled:
            return Exit(EXIT_OK)
        target = self._global_view(selection)
        if target is not None:
            return target
        if selection.key == ENTER and selection.items:
            album = split_fields(selection.items[0])[1]
            if album:
                return SongsOfAlbum(view.artist, album)
        return Artists()

    def show_songs_of_album(self, view: SongsOfAlbum) -> View:
        if not view.artist or not view.album:
            raise NavigationInvariantError(
                f"Album songs need an artist and an album, got {view.artist!r} and {view.album!r}"
            )
        items = self.client.find(self._song_line_format(SONG_TITLE_FORMAT),
                                 artist=view.artist, album=view.album)
        selection = self._show(f"{view.artist} - {view.album}", items, multi=True, with_nth=2)
        if selection.cancelled:
            return Exit(EXIT_OK)
        target = self._global_view(selection)
        if target is not None:
            return target
        if selection.key == ENTER and selection.items:
            self.dispatcher.enqueue_and_play(_first_field(selection.items))
            return Playlist()
        return AlbumsOfArtist(view.artist)

    def show_genres(self, view: Genres) -> View:
        items = rank_genres(self.client.find("%genre%"))
        selection = self._show(
            "genres", items,
            preview_command=self.client.shell_command("list", "artist", "genre", "{}"),
            inline_execute=self._findadd("genre", "{}"),
        )
        if selection.cancelled:
            return Exit(EXIT_OK)
        target = self._global_view(selection)
        if target is not None:
            return target
        if selection.key == ENTER and selection.items:
            return ArtistsOfGenre(selection.items[0])
        return Exit(EXIT_NO_SELECTION)

    def show_artists_of_genre(self, view: ArtistsOfGenre) -> View:
        items = self.client.list_tag("artist", genre=view.genre)
        selection = self._show(
            view.genre, items,
            preview_command=self.client.shell_command("list", "album", "artist", "{}"),
            inline_execute=self._findadd("artist", "{}"),
        )
        if selection.cancelled:
            return Exit(EXIT_OK)
        target = self._global_view(selection)
        if target is not None:
            return target
        if selection.key == ENTER and selection.items:
            return AlbumsOfArtist(selection.items[0])
        return Genres()

    def show_playlist(self, view: Playlist) -> View:
        """The queue screen. Stays on screen after every command it handles."""
        local_keys = (self.config.next_key, self.config.prev_key,
                      self.config.delete_key, self.config.clear_key)
        while True:
            items = self.client.queue(f"%position%\t{self.config.full_song_format}")
            now_playing = self.client.current(self.config.full_song_format)
            selection = self._show(
                "playlist", items, extra_keys=local_keys, multi=True, with_nth=2,
                header=f"now playing: {now_playing}" if now_playing else "now playing: -",
            )
            if selection.cancelled:
                return Exit(EXIT_OK)
            target = self._global_view(selection)
            if target is not None:
                return target

            key = selection.key
            if key == self.config.next_key:
                self.dispatcher.jump(NEXT)
            elif key == self.config.prev_key:
                self.dispatcher.jump(PREV)
            elif key == self.config.delete_key:
                self.dispatcher.delete(_positions(selection.items), background=True)
            elif key == self.config.clear_key:
                self.dispatcher.clear()
                return Artists()
            elif key == ENTER and selection.items:
                positions = _positions(selection.items)
                if positions:
                    self.dispatcher.play(positions[0], background=True)
