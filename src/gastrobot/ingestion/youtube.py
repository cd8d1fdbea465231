"""YouTube channel metadata sync via yt-dlp."""

import logging
import re
from datetime import datetime, timezone
from urllib.parse import parse_qs, urlparse

import yt_dlp

from gastrobot.config import settings
from gastrobot.models import Video

logger = logging.getLogger(__name__)


class ExtractionError(Exception):
    """Raised when video extraction fails."""


class ChannelSync:
    """Lists a channel's latest uploads and extracts their metadata.

    Single responsibility: given a channel URL, return Video models.
    All yt-dlp interaction is encapsulated here. Only the first batch
    of uploads is read; there is no page-token crawling.
    """

    _URL_PATTERNS = [
        re.compile(r"(?:youtube\.com/watch\?.*v=)([\w-]{11})"),
        re.compile(r"(?:youtu\.be/)([\w-]{11})"),
        re.compile(r"(?:youtube\.com/embed/)([\w-]{11})"),
        re.compile(r"(?:youtube\.com/shorts/)([\w-]{11})"),
    ]

    def __init__(self, channel_url: str | None = None) -> None:
        self._channel_url = channel_url or settings.channel_url

    @property
    def channel_url(self) -> str:
        return self._channel_url

    def list_video_ids(self, max_results: int) -> list[str]:
        """Return IDs of the channel's most recent uploads, newest first.

        Raises:
            ExtractionError: If the channel listing fails.
        """
        ydl_opts = {
            "quiet": True,
            "no_warnings": True,
            "extract_flat": True,
            "skip_download": True,
            "playlistend": max_results,
        }
        try:
            with yt_dlp.YoutubeDL(ydl_opts) as ydl:
                info = ydl.extract_info(self._channel_url, download=False)
        except yt_dlp.utils.DownloadError as e:
            raise ExtractionError(f"Failed to list channel videos: {e}") from e

        if not info or "entries" not in info:
            return []
        ids = []
        for entry in info["entries"]:
            if not entry:
                continue
            video_id = entry.get("id")
            if not video_id and entry.get("url"):
                try:
                    video_id = self.parse_video_id(entry["url"])
                except ExtractionError as e:
                    logger.warning("Skipping channel entry: %s", e)
                    continue
            if video_id:
                ids.append(video_id)
        return list(dict.fromkeys(ids))[:max_results]

    def extract(self, video_id: str) -> Video:
        """Fetch full metadata for one video.

        Raises:
            ExtractionError: If extraction fails.
        """
        url = self.video_url(video_id)
        ydl_opts = {
            "quiet": True,
            "no_warnings": True,
            "skip_download": True,
        }
        try:
            with yt_dlp.YoutubeDL(ydl_opts) as ydl:
                info = ydl.extract_info(url, download=False)
                if info is None:
                    raise ExtractionError(f"yt-dlp returned no info for: {url}")
        except yt_dlp.utils.DownloadError as e:
            raise ExtractionError(f"Failed to extract video info: {e}") from e

        return Video(
            video_id=video_id,
            platform="youtube",
            title=info.get("title") or "",
            description=info.get("description"),
            url=url,
            thumbnail_url=info.get("thumbnail"),
            published_at=self._parse_published(info),
            duration=_optional_int(info.get("duration")),
            view_count=_optional_int(info.get("view_count")),
        )

    @staticmethod
    def video_url(video_id: str) -> str:
        return f"https://www.youtube.com/watch?v={video_id}"

    @classmethod
    def parse_video_id(cls, url: str) -> str:
        """Extract the 11-character video ID from a YouTube URL.

        Raises:
            ExtractionError: If the URL cannot be parsed.
        """
        for pattern in cls._URL_PATTERNS:
            match = pattern.search(url)
            if match:
                return match.group(1)

        # Fallback: query parameter parsing
        parsed = urlparse(url)
        video_id = parse_qs(parsed.query).get("v", [None])[0]
        if video_id and len(video_id) == 11:
            return video_id

        raise ExtractionError(f"Could not extract video ID from URL: {url}")

    @staticmethod
    def _parse_published(info: dict) -> datetime | None:
        """Publish time from the epoch timestamp, else the YYYYMMDD upload date."""
        timestamp = info.get("timestamp")
        if timestamp:
            return datetime.fromtimestamp(timestamp, tz=timezone.utc)
        upload_date = info.get("upload_date")
        if upload_date:
            try:
                return datetime.strptime(upload_date, "%Y%m%d").replace(tzinfo=timezone.utc)
            except ValueError:
                logger.warning("Unparseable upload date for %s: %s", info.get("id"), upload_date)
        return None


def _optional_int(value) -> int | None:
    if value is None:
        return None
    return int(value)
