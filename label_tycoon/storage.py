"""JSON file storage.

The engine only depends on the ``GameStore`` protocol below. ``JsonStorage``
is the bundled implementation: flat JSON files under a configurable base
directory, with no database or ORM. Reads and writes go through plain helper
methods that load and dump JSON.

Directory layout:

    {base}/
      games/
        {game_id}.json    ← GameState between turns
      artists.json        ← list of Artist objects (all games)
      projects.json       ← list of Project objects (all games)
      songs.json          ← list of Song objects (all games)

``transaction()`` stages every write in memory. Files are only touched when
the block exits normally; an exception discards the staged writes so a
failed turn leaves the previous files in place.
"""

from __future__ import annotations

import copy
import json
import logging
import os
from contextlib import contextmanager
from pathlib import Path
from typing import Any, Iterator, Protocol

from label_tycoon.models import Artist, GameState, Project, Song

logger = logging.getLogger(__name__)


class StorageError(RuntimeError):
    """Raised when a read or write against the store cannot be completed."""


# ---------------------------------------------------------------------------
# Protocol: the data-access capability the engine is given
# ---------------------------------------------------------------------------

class GameStore(Protocol):
    def transaction(self) -> Any: ...

    def save_game_state(self, state: GameState) -> None: ...

    def get_artist_by_id(self, artist_id: str) -> Artist | None: ...

    def get_artists_for_game(self, game_id: str) -> list[Artist]: ...

    def update_artist(self, artist_id: str, patch: dict[str, Any]) -> Artist: ...

    def create_project(self, project: Project) -> Project: ...

    def update_project(self, project_id: str, patch: dict[str, Any]) -> Project: ...

    def get_active_recording_projects_for_game(self, game_id: str) -> list[Project]: ...

    def create_song(self, song: Song) -> Song: ...

    def update_songs(self, songs: list[Song]) -> None: ...

    def get_songs_for_project(self, project_id: str) -> list[Song]: ...

    def get_released_songs_for_game(self, game_id: str) -> list[Song]: ...


# ---------------------------------------------------------------------------
# JSON implementation
# ---------------------------------------------------------------------------

class JsonStorage:
    def __init__(self, base_path: Path) -> None:
        self._base = base_path
        self._games_root = base_path / "games"
        self._games_root.mkdir(parents=True, exist_ok=True)
        self._staged: dict[Path, Any] | None = None

    # ------------------------------------------------------------------
    # Internal path helpers
    # ------------------------------------------------------------------

    def _game_file(self, game_id: str) -> Path:
        return self._games_root / f"{game_id}.json"

    def _collection_file(self, name: str) -> Path:
        return self._base / f"{name}.json"

    def _read_json(self, path: Path, default: Any = None) -> Any:
        if self._staged is not None and path in self._staged:
            return copy.deepcopy(self._staged[path])
        if not path.exists():
            return default
        try:
            return json.loads(path.read_text())
        except (OSError, json.JSONDecodeError) as e:
            raise StorageError(f"Cannot read {path}: {e}") from e

    def _write_json(self, path: Path, data: Any) -> None:
        if self._staged is not None:
            self._staged[path] = data
            return
        self._flush(path, data)

    def _flush(self, path: Path, data: Any) -> None:
        tmp = path.with_suffix(path.suffix + ".tmp")
        try:
            tmp.write_text(json.dumps(data, indent=2))
            os.replace(tmp, path)
        except OSError as e:
            raise StorageError(f"Cannot write {path}: {e}") from e

    # ------------------------------------------------------------------
    # Transactions
    # ------------------------------------------------------------------

    @contextmanager
    def transaction(self) -> Iterator[None]:
        """Stage writes until the block exits; discard them on error."""
        if self._staged is not None:
            raise StorageError("Nested transactions are not supported")
        self._staged = {}
        try:
            yield
        except BaseException:
            logger.warning("transaction rolled back (%d staged writes discarded)", len(self._staged))
            self._staged = None
            raise
        staged, self._staged = self._staged, None
        for path, data in staged.items():
            self._flush(path, data)
        logger.debug("transaction committed (%d files)", len(staged))

    # ------------------------------------------------------------------
    # Game state
    # ------------------------------------------------------------------

    def save_game_state(self, state: GameState) -> None:
        self._write_json(self._game_file(state.id), state.model_dump(mode="json"))

    def get_game_state(self, game_id: str) -> GameState | None:
        data = self._read_json(self._game_file(game_id))
        if data is None:
            return None
        return GameState.model_validate(data)

    def delete_game(self, game_id: str) -> None:
        """Remove a game's state and every artist, project and song it owns."""
        self._write_artists([a for a in self._all_artists() if a.game_id != game_id])
        self._write_projects([p for p in self._all_projects() if p.game_id != game_id])
        self._write_songs([s for s in self._all_songs() if s.game_id != game_id])
        path = self._game_file(game_id)
        if path.exists():
            path.unlink()

    # ------------------------------------------------------------------
    # Artists
    # ------------------------------------------------------------------

    def _all_artists(self) -> list[Artist]:
        return [Artist.model_validate(a) for a in self._read_json(self._collection_file("artists"), [])]

    def _write_artists(self, artists: list[Artist]) -> None:
        self._write_json(self._collection_file("artists"), [a.model_dump(mode="json") for a in artists])

    def save_artist(self, artist: Artist) -> None:
        """Upsert an artist by id."""
        artists = self._all_artists()
        for i, a in enumerate(artists):
            if a.id == artist.id:
                artists[i] = artist
                break
        else:
            artists.append(artist)
        self._write_artists(artists)

    def get_artist_by_id(self, artist_id: str) -> Artist | None:
        for a in self._all_artists():
            if a.id == artist_id:
                return a
        return None

    def get_artists_for_game(self, game_id: str) -> list[Artist]:
        return [a for a in self._all_artists() if a.game_id == game_id]

    def update_artist(self, artist_id: str, patch: dict[str, Any]) -> Artist:
        artists = self._all_artists()
        for i, a in enumerate(artists):
            if a.id == artist_id:
                artists[i] = Artist.model_validate({**a.model_dump(), **patch})
                self._write_artists(artists)
                return artists[i]
        raise StorageError(f"Artist not found: {artist_id}")

    # ------------------------------------------------------------------
    # Projects
    # ------------------------------------------------------------------

    def _all_projects(self) -> list[Project]:
        return [Project.model_validate(p) for p in self._read_json(self._collection_file("projects"), [])]

    def _write_projects(self, projects: list[Project]) -> None:
        self._write_json(self._collection_file("projects"), [p.model_dump(mode="json") for p in projects])

    def create_project(self, project: Project) -> Project:
        projects = self._all_projects()
        if any(p.id == project.id for p in projects):
            raise StorageError(f"Project already exists: {project.id}")
        projects.append(project)
        self._write_projects(projects)
        return project

    def update_project(self, project_id: str, patch: dict[str, Any]) -> Project:
        projects = self._all_projects()
        for i, p in enumerate(projects):
            if p.id == project_id:
                projects[i] = Project.model_validate({**p.model_dump(), **patch})
                self._write_projects(projects)
                return projects[i]
        raise StorageError(f"Project not found: {project_id}")

    def get_projects_for_game(self, game_id: str) -> list[Project]:
        return [p for p in self._all_projects() if p.game_id == game_id]

    def get_active_recording_projects_for_game(self, game_id: str) -> list[Project]:
        """Projects that have not reached the released stage, ordered by id."""
        active = [p for p in self.get_projects_for_game(game_id) if p.stage != "released"]
        return sorted(active, key=lambda p: p.id)

    # ------------------------------------------------------------------
    # Songs
    # ------------------------------------------------------------------

    def _all_songs(self) -> list[Song]:
        return [Song.model_validate(s) for s in self._read_json(self._collection_file("songs"), [])]

    def _write_songs(self, songs: list[Song]) -> None:
        self._write_json(self._collection_file("songs"), [s.model_dump(mode="json") for s in songs])

    def create_song(self, song: Song) -> Song:
        songs = self._all_songs()
        if any(s.id == song.id for s in songs):
            raise StorageError(f"Song already exists: {song.id}")
        songs.append(song)
        self._write_songs(songs)
        return song

    def update_songs(self, songs: list[Song]) -> None:
        """Replace many songs in a single write."""
        if not songs:
            return
        by_id = {s.id: s for s in songs}
        stored = self._all_songs()
        found = 0
        for i, s in enumerate(stored):
            if s.id in by_id:
                stored[i] = by_id[s.id]
                found += 1
        if found != len(by_id):
            missing = sorted(set(by_id) - {s.id for s in stored})
            raise StorageError(f"Songs not found: {', '.join(missing)}")
        self._write_songs(stored)

    def get_songs_for_project(self, project_id: str) -> list[Song]:
        return [s for s in self._all_songs() if s.project_id == project_id]

    def get_released_songs_for_game(self, game_id: str) -> list[Song]:
        return [s for s in self._all_songs() if s.game_id == game_id and s.is_released]
