"""Game persistence.

GameStore defines the per-entity reads and writes the engine uses during an
advance. MemoryStore keeps everything in process (tests, previews); GameDB
keeps it in SQLite. Writes are provisional until commit(); rollback()
discards everything since the last commit.
"""

from __future__ import annotations

import copy
import json
import logging
from pathlib import Path
from typing import Any

import aiosqlite

from label.models import Artist, Executive, GameState, Project, Release, Song

logger = logging.getLogger(__name__)

_KINDS: dict[str, type] = {
    "games": GameState,
    "artists": Artist,
    "executives": Executive,
    "projects": Project,
    "songs": Song,
    "releases": Release,
}


class GameNotFoundError(Exception):
    """Raised when a game id has no stored state."""

    def __init__(self, game_id: str):
        self.game_id = game_id
        super().__init__(f"Game not found: {game_id}")


class GameStore:
    """Entity-level API shared by every backend."""

    async def _put(self, kind: str, obj: Any) -> None:
        raise NotImplementedError

    async def _get(self, kind: str, row_id: str) -> Any | None:
        raise NotImplementedError

    async def _list(self, kind: str, game_id: str) -> list[Any]:
        raise NotImplementedError

    async def commit(self) -> None:
        raise NotImplementedError

    async def rollback(self) -> None:
        raise NotImplementedError

    # ── Games ───────────────────────────────────────────────────

    async def get_game(self, game_id: str) -> GameState:
        state = await self._get("games", game_id)
        if state is None:
            raise GameNotFoundError(game_id)
        return state

    async def save_game(self, state: GameState) -> None:
        await self._put("games", state)

    # ── Roster ──────────────────────────────────────────────────

    async def add_artist(self, artist: Artist) -> None:
        await self._put("artists", artist)

    async def get_artist(self, artist_id: str) -> Artist | None:
        return await self._get("artists", artist_id)

    async def get_artists(self, game_id: str, signed_only: bool = True) -> list[Artist]:
        artists = await self._list("artists", game_id)
        return [a for a in artists if a.signed or not signed_only]

    async def update_artist(self, artist: Artist) -> None:
        await self._put("artists", artist)

    async def add_executive(self, executive: Executive) -> None:
        await self._put("executives", executive)

    async def get_executives(self, game_id: str) -> list[Executive]:
        return await self._list("executives", game_id)

    async def update_executive(self, executive: Executive) -> None:
        await self._put("executives", executive)

    # ── Catalog ─────────────────────────────────────────────────

    async def add_project(self, project: Project) -> None:
        await self._put("projects", project)

    async def get_projects(self, game_id: str) -> list[Project]:
        return await self._list("projects", game_id)

    async def update_project(self, project: Project) -> None:
        await self._put("projects", project)

    async def add_song(self, song: Song) -> None:
        await self._put("songs", song)

    async def get_song(self, song_id: str) -> Song | None:
        return await self._get("songs", song_id)

    async def get_songs(self, game_id: str) -> list[Song]:
        return await self._list("songs", game_id)

    async def get_project_songs(self, project_id: str, game_id: str) -> list[Song]:
        return [s for s in await self.get_songs(game_id) if s.project_id == project_id]

    async def update_song(self, song: Song) -> None:
        await self._put("songs", song)

    async def add_release(self, release: Release) -> None:
        await self._put("releases", release)

    async def get_releases(self, game_id: str) -> list[Release]:
        return await self._list("releases", game_id)

    async def update_release(self, release: Release) -> None:
        await self._put("releases", release)


def _game_id_of(obj: Any) -> str:
    return obj.id if isinstance(obj, GameState) else obj.game_id


class MemoryStore(GameStore):
    """In-process store; hands out copies so callers never share state."""

    def __init__(self) -> None:
        self._rows: dict[str, dict[str, Any]] = {kind: {} for kind in _KINDS}
        self._committed = copy.deepcopy(self._rows)

    async def _put(self, kind: str, obj: Any) -> None:
        self._rows[kind][obj.id] = copy.deepcopy(obj)

    async def _get(self, kind: str, row_id: str) -> Any | None:
        obj = self._rows[kind].get(row_id)
        return copy.deepcopy(obj) if obj is not None else None

    async def _list(self, kind: str, game_id: str) -> list[Any]:
        return [copy.deepcopy(o) for o in self._rows[kind].values() if _game_id_of(o) == game_id]

    async def commit(self) -> None:
        self._committed = copy.deepcopy(self._rows)

    async def rollback(self) -> None:
        self._rows = copy.deepcopy(self._committed)
        logger.debug("Memory store rolled back")


# ── SQLite ──────────────────────────────────────────────────────

_SCHEMA = "\n".join(
    f"""
CREATE TABLE IF NOT EXISTS {kind} (
    id TEXT PRIMARY KEY,
    game_id TEXT,
    data TEXT              -- JSON blob of the dataclass
);
CREATE INDEX IF NOT EXISTS idx_{kind}_game ON {kind} (game_id);
"""
    for kind in _KINDS
)


class GameDB(GameStore):
    """SQLite-backed store. One connection per engine instance."""

    def __init__(self, db_path: str | Path):
        self._path = Path(db_path)
        self._db: aiosqlite.Connection | None = None

    async def open(self) -> None:
        self._path.parent.mkdir(parents=True, exist_ok=True)
        self._db = await aiosqlite.connect(str(self._path))
        await self._db.executescript(_SCHEMA)
        await self._db.commit()
        logger.debug("Game DB ready at %s", self._path)

    async def close(self) -> None:
        if self._db:
            await self._db.close()

    async def __aenter__(self) -> GameDB:
        await self.open()
        return self

    async def __aexit__(self, *exc: Any) -> None:
        await self.close()

    async def _put(self, kind: str, obj: Any) -> None:
        await self._db.execute(
            f"INSERT INTO {kind} (id, game_id, data) VALUES (?, ?, ?) "
            "ON CONFLICT(id) DO UPDATE SET data=excluded.data",
            (obj.id, _game_id_of(obj), json.dumps(obj.to_dict())),
        )

    async def _get(self, kind: str, row_id: str) -> Any | None:
        cursor = await self._db.execute(f"SELECT data FROM {kind} WHERE id = ? LIMIT 1", (row_id,))
        row = await cursor.fetchone()
        if row is None:
            return None
        return _KINDS[kind].from_dict(json.loads(row[0]))

    async def _list(self, kind: str, game_id: str) -> list[Any]:
        cursor = await self._db.execute(
            f"SELECT data FROM {kind} WHERE game_id = ? ORDER BY rowid ASC", (game_id,)
        )
        rows = await cursor.fetchall()
        return [_KINDS[kind].from_dict(json.loads(row[0])) for row in rows]

    async def commit(self) -> None:
        await self._db.commit()

    async def rollback(self) -> None:
        await self._db.rollback()
        logger.debug("Game DB rolled back")

    async def list_games(self) -> list[dict]:
        cursor = await self._db.execute("SELECT id, data FROM games ORDER BY rowid ASC")
        rows = await cursor.fetchall()
        games = []
        for row_id, data in rows:
            state = GameState.from_dict(json.loads(data))
            games.append({"id": row_id, "period": state.current_period, "money": state.money})
        return games
