"""Domain models for gastrobot."""

from datetime import datetime, timezone

from pydantic import BaseModel, Field


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


class Video(BaseModel):
    """A synced video from the brand's channel.

    Nullable columns stay ``None`` when the platform did not report them;
    an empty description is kept distinct from a missing one.
    """

    video_id: str  # platform video ID (e.g. "dQw4w9WgXcQ")
    platform: str = "youtube"
    title: str
    description: str | None = None
    url: str
    thumbnail_url: str | None = None
    published_at: datetime | None = None
    duration: int | None = None  # seconds
    view_count: int | None = None
    transcript: str | None = None
    embedding: list[float] | None = None
    created_at: datetime = Field(default_factory=_utcnow)
    updated_at: datetime = Field(default_factory=_utcnow)


class SourceVideo(BaseModel):
    """Projection of a Video cited in a chat reply."""

    id: str
    title: str
    description: str | None = None
    thumbnail_url: str | None = None
    video_url: str
    duration: int | None = None
    view_count: int | None = None

    @classmethod
    def from_video(cls, video: Video) -> "SourceVideo":
        return cls(
            id=video.video_id,
            title=video.title,
            description=video.description,
            thumbnail_url=video.thumbnail_url,
            video_url=video.url,
            duration=video.duration,
            view_count=video.view_count,
        )


class ChatTurn(BaseModel):
    """One persisted question/answer exchange."""

    user_id: str
    user_message: str
    bot_response: str
    source_videos: list[SourceVideo] = Field(default_factory=list)
    created_at: datetime = Field(default_factory=_utcnow)


class ChatReply(BaseModel):
    """What a chat turn returns to the calling layer."""

    user_message: str
    bot_response: str
    source_videos: list[SourceVideo] = Field(default_factory=list)
    timestamp: datetime

    @classmethod
    def from_turn(cls, turn: ChatTurn) -> "ChatReply":
        return cls(
            user_message=turn.user_message,
            bot_response=turn.bot_response,
            source_videos=turn.source_videos,
            timestamp=turn.created_at,
        )


class Recipe(BaseModel):
    """A recipe extracted from a video description."""

    video_id: str
    title: str
    description: str | None = None
    ingredients: list[str] = Field(default_factory=list)
    instructions: list[str] = Field(default_factory=list)
    tags: list[str] = Field(default_factory=list)
    created_at: datetime = Field(default_factory=_utcnow)


class SyncReport(BaseModel):
    """Outcome of a one-shot channel sync."""

    fetched: int = 0
    stored: int = 0
    skipped: int = 0
    failed: int = 0
    recipes: int = 0
    errors: list[str] = Field(default_factory=list)

    @property
    def message(self) -> str:
        if self.fetched == 0:
            return "No new videos found"
        return f"Successfully processed {self.stored} new videos"
