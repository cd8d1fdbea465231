"""Abstract repository interface for video, recipe and chat storage."""

from abc import ABC, abstractmethod

from gastrobot.models import ChatTurn, Recipe, Video


class StoreUnavailableError(Exception):
    """Raised when the backing store cannot serve a query.

    Distinct from an empty result: callers must never treat this
    as "no videos".
    """


class VideoRepository(ABC):
    """Abstract base class defining the storage contract.

    All concrete storage implementations (SQLite, MySQL, etc.)
    must implement this interface and raise StoreUnavailableError
    for any backend failure.
    """

    @abstractmethod
    def find_videos(self, keywords: list[str], limit: int) -> list[Video]:
        """Videos whose title or description contains any keyword.

        Matching is a SQL LIKE substring test. Results are ordered by
        publish date, most recent first, undated videos last.
        """

    @abstractmethod
    def recent_videos(self, limit: int) -> list[Video]:
        """Most recently published videos, undated videos last."""

    @abstractmethod
    def save_chat_turn(self, turn: ChatTurn) -> None:
        """Persist one chat turn. Never updates an existing row."""

    @abstractmethod
    def save_video(self, video: Video) -> None:
        """Persist a video. Upserts if video_id already exists."""

    @abstractmethod
    def exists(self, video_id: str) -> bool:
        """Check whether a video with the given ID is in storage."""

    @abstractmethod
    def count_videos(self) -> int:
        """Number of stored videos."""

    @abstractmethod
    def list_videos(self, limit: int = 20, offset: int = 0) -> list[Video]:
        """Page through stored videos, most recently published first."""

    @abstractmethod
    def save_recipe(self, recipe: Recipe) -> None:
        """Persist an extracted recipe."""

    @abstractmethod
    def list_recipes(self, limit: int = 10, offset: int = 0) -> list[Recipe]:
        """Page through recipes, newest first."""
