"""SQLite implementation of the video repository."""

import json
import logging
import sqlite3
from collections.abc import Iterator
from contextlib import contextmanager
from datetime import datetime, timezone

from gastrobot.config import settings
from gastrobot.models import ChatTurn, Recipe, Video
from gastrobot.storage.repository import StoreUnavailableError, VideoRepository

logger = logging.getLogger(__name__)


class SQLiteVideoRepository(VideoRepository):
    """SQLite-backed storage.

    Implements VideoRepository using stdlib sqlite3. Timestamps are
    stored as UTC ISO-8601 text so lexical order is chronological.
    JSON columns hold embeddings, recipe lists and cited videos.

    Keyword search lowercases both sides with Python's str.lower, so
    accented capitals (É, À, Ç) match like ASCII ones.
    """

    _SCHEMA = """
        CREATE TABLE IF NOT EXISTS videos (
            video_id      TEXT PRIMARY KEY,
            platform      TEXT NOT NULL,
            title         TEXT NOT NULL,
            description   TEXT,
            url           TEXT NOT NULL,
            thumbnail_url TEXT,
            published_at  TEXT,
            duration      INTEGER,
            view_count    INTEGER,
            transcript    TEXT,
            embedding     TEXT,
            created_at    TEXT NOT NULL,
            updated_at    TEXT NOT NULL
        );
        CREATE INDEX IF NOT EXISTS idx_videos_published_at ON videos (published_at);

        CREATE TABLE IF NOT EXISTS recipes (
            id            INTEGER PRIMARY KEY AUTOINCREMENT,
            video_id      TEXT NOT NULL,
            title         TEXT NOT NULL,
            description   TEXT,
            ingredients   TEXT DEFAULT '[]',
            instructions  TEXT DEFAULT '[]',
            tags          TEXT DEFAULT '[]',
            created_at    TEXT NOT NULL
        );

        CREATE TABLE IF NOT EXISTS chat_turns (
            id             INTEGER PRIMARY KEY AUTOINCREMENT,
            user_id        TEXT NOT NULL,
            user_message   TEXT NOT NULL,
            bot_response   TEXT NOT NULL,
            source_videos  TEXT DEFAULT '[]',
            created_at     TEXT NOT NULL
        );
    """

    _ORDER_BY_PUBLISHED = "ORDER BY published_at IS NULL, published_at DESC"

    def __init__(self, db_path: str | None = None) -> None:
        """Initialize the repository.

        Args:
            db_path: Path to SQLite database file. Defaults to settings.db_path.
                     Use ":memory:" for testing.

        Raises:
            StoreUnavailableError: If the database cannot be opened.
        """
        self._db_path = db_path or str(settings.db_path)
        try:
            self._conn = sqlite3.connect(self._db_path, check_same_thread=False)
            self._conn.row_factory = sqlite3.Row
            self._conn.create_function("casefold_text", 1, _lower_or_none, deterministic=True)
            self._init_db()
        except sqlite3.Error as e:
            raise StoreUnavailableError(f"Cannot open database {self._db_path}: {e}") from e

    def _init_db(self) -> None:
        """Create tables if they don't exist."""
        self._conn.executescript(self._SCHEMA)
        self._conn.commit()

    def close(self) -> None:
        self._conn.close()

    @contextmanager
    def _guard(self, operation: str) -> Iterator[None]:
        """Translate sqlite3 failures into StoreUnavailableError."""
        try:
            yield
        except sqlite3.Error as e:
            logger.error("SQLite %s failed: %s", operation, e)
            raise StoreUnavailableError(f"Database not available ({operation}): {e}") from e

    def find_videos(self, keywords: list[str], limit: int) -> list[Video]:
        """Videos whose title or description contains any keyword."""
        if not keywords:
            return []
        conditions = " OR ".join(
            "casefold_text(title) LIKE ? OR casefold_text(description) LIKE ?"
            for _ in keywords
        )
        params: list[object] = []
        for keyword in keywords:
            pattern = f"%{keyword.lower()}%"
            params.extend((pattern, pattern))
        params.append(limit)
        sql = f"SELECT * FROM videos WHERE {conditions} {self._ORDER_BY_PUBLISHED} LIMIT ?"
        with self._guard("find_videos"):
            rows = self._conn.execute(sql, params).fetchall()
        return [self._row_to_video(row) for row in rows]

    def recent_videos(self, limit: int) -> list[Video]:
        sql = f"SELECT * FROM videos {self._ORDER_BY_PUBLISHED} LIMIT ?"
        with self._guard("recent_videos"):
            rows = self._conn.execute(sql, (limit,)).fetchall()
        return [self._row_to_video(row) for row in rows]

    def save_chat_turn(self, turn: ChatTurn) -> None:
        sql = """
            INSERT INTO chat_turns (user_id, user_message, bot_response, source_videos, created_at)
            VALUES (?, ?, ?, ?, ?)
        """
        with self._guard("save_chat_turn"):
            self._conn.execute(sql, (
                turn.user_id,
                turn.user_message,
                turn.bot_response,
                json.dumps([v.model_dump() for v in turn.source_videos]),
                _to_text(turn.created_at),
            ))
            self._conn.commit()

    def save_video(self, video: Video) -> None:
        """Persist a video to storage. Upserts if video_id already exists."""
        sql = """
            INSERT INTO videos (
                video_id, platform, title, description, url, thumbnail_url,
                published_at, duration, view_count, transcript, embedding,
                created_at, updated_at
            ) VALUES (?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?)
            ON CONFLICT(video_id) DO UPDATE SET
                platform = excluded.platform,
                title = excluded.title,
                description = excluded.description,
                url = excluded.url,
                thumbnail_url = excluded.thumbnail_url,
                published_at = excluded.published_at,
                duration = excluded.duration,
                view_count = excluded.view_count,
                transcript = excluded.transcript,
                embedding = excluded.embedding,
                updated_at = excluded.updated_at
        """
        with self._guard("save_video"):
            self._conn.execute(sql, (
                video.video_id,
                video.platform,
                video.title,
                video.description,
                video.url,
                video.thumbnail_url,
                _to_text(video.published_at),
                video.duration,
                video.view_count,
                video.transcript,
                json.dumps(video.embedding) if video.embedding is not None else None,
                _to_text(video.created_at),
                _to_text(video.updated_at),
            ))
            self._conn.commit()

    def exists(self, video_id: str) -> bool:
        sql = "SELECT 1 FROM videos WHERE video_id = ? LIMIT 1"
        with self._guard("exists"):
            return self._conn.execute(sql, (video_id,)).fetchone() is not None

    def count_videos(self) -> int:
        with self._guard("count_videos"):
            return self._conn.execute("SELECT COUNT(*) FROM videos").fetchone()[0]

    def list_videos(self, limit: int = 20, offset: int = 0) -> list[Video]:
        sql = f"SELECT * FROM videos {self._ORDER_BY_PUBLISHED} LIMIT ? OFFSET ?"
        with self._guard("list_videos"):
            rows = self._conn.execute(sql, (limit, offset)).fetchall()
        return [self._row_to_video(row) for row in rows]

    def save_recipe(self, recipe: Recipe) -> None:
        sql = """
            INSERT INTO recipes (video_id, title, description, ingredients, instructions, tags, created_at)
            VALUES (?, ?, ?, ?, ?, ?, ?)
        """
        with self._guard("save_recipe"):
            self._conn.execute(sql, (
                recipe.video_id,
                recipe.title,
                recipe.description,
                json.dumps(recipe.ingredients),
                json.dumps(recipe.instructions),
                json.dumps(recipe.tags),
                _to_text(recipe.created_at),
            ))
            self._conn.commit()

    def list_recipes(self, limit: int = 10, offset: int = 0) -> list[Recipe]:
        sql = "SELECT * FROM recipes ORDER BY created_at DESC, id DESC LIMIT ? OFFSET ?"
        with self._guard("list_recipes"):
            rows = self._conn.execute(sql, (limit, offset)).fetchall()
        return [
            Recipe(
                video_id=row["video_id"],
                title=row["title"],
                description=row["description"],
                ingredients=json.loads(row["ingredients"]),
                instructions=json.loads(row["instructions"]),
                tags=json.loads(row["tags"]),
                created_at=row["created_at"],
            )
            for row in rows
        ]

    @staticmethod
    def _row_to_video(row: sqlite3.Row) -> Video:
        """Convert a database row to a Video model."""
        embedding = row["embedding"]
        return Video(
            video_id=row["video_id"],
            platform=row["platform"],
            title=row["title"],
            description=row["description"],
            url=row["url"],
            thumbnail_url=row["thumbnail_url"],
            published_at=row["published_at"],
            duration=row["duration"],
            view_count=row["view_count"],
            transcript=row["transcript"],
            embedding=json.loads(embedding) if embedding is not None else None,
            created_at=row["created_at"],
            updated_at=row["updated_at"],
        )


def _to_text(value: datetime | None) -> str | None:
    """Normalize a timestamp to UTC ISO-8601 text; naive values are taken as UTC."""
    if value is None:
        return None
    if value.tzinfo is None:
        value = value.replace(tzinfo=timezone.utc)
    return value.astimezone(timezone.utc).isoformat()


def _lower_or_none(value: str | None) -> str | None:
    return value.lower() if value is not None else None
