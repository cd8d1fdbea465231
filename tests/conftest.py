# tests/conftest.py
"""Shared fixtures for gastrobot tests."""

from datetime import datetime, timezone
from unittest.mock import MagicMock, patch

import pytest

from gastrobot.models import Video
from gastrobot.storage.sqlite import SQLiteVideoRepository


def make_video(video_id, title, description=None, published_at=None, **extra):
    """Build a Video with a canonical URL derived from its ID."""
    return Video(
        video_id=video_id,
        title=title,
        description=description,
        url=f"https://www.youtube.com/watch?v={video_id}",
        published_at=published_at,
        **extra,
    )


@pytest.fixture
def donut_video():
    return make_video(
        "donut000001",
        "Donuts maison",
        description="La recette des donuts de Homer Simpson.\nIngrédients :\n250 g de farine\n2 oeufs",
        published_at=datetime(2024, 5, 1, tzinfo=timezone.utc),
        thumbnail_url="https://i.ytimg.com/vi/donut000001/hqdefault.jpg",
        duration=754,
        view_count=120000,
    )


@pytest.fixture
def sample_videos(donut_video):
    """Six videos so the five-video cap is observable."""
    return [
        donut_video,
        make_video("ramen000001", "Le ramen de Naruto", "Bouillon tonkotsu maison",
                   datetime(2024, 6, 1, tzinfo=timezone.utc)),
        make_video("lembas00001", "Lembas du Seigneur des Anneaux", "Pain elfique au miel",
                   datetime(2024, 3, 1, tzinfo=timezone.utc)),
        make_video("ratatouille", "La ratatouille de Ratatouille", None,
                   datetime(2024, 1, 1, tzinfo=timezone.utc)),
        make_video("butterbeer1", "Bièraubeurre d'Harry Potter", "Une boisson au caramel",
                   datetime(2023, 12, 1, tzinfo=timezone.utc)),
        make_video("krabby00001", "Le Krabby Patty de Bob l'éponge", "Burger du Crabe Croustillant",
                   datetime(2023, 6, 1, tzinfo=timezone.utc)),
    ]


@pytest.fixture
def sqlite_repo():
    """SQLiteVideoRepository backed by in-memory database."""
    return SQLiteVideoRepository(":memory:")


@pytest.fixture
def populated_repo(sqlite_repo, sample_videos):
    for video in sample_videos:
        sqlite_repo.save_video(video)
    return sqlite_repo


@pytest.fixture
def mock_llm():
    """LLMClient with mocked litellm.completion."""
    from gastrobot.llm import LLMClient

    with patch("gastrobot.llm.litellm.completion") as mock_completion:
        mock_response = MagicMock()
        mock_response.choices = [MagicMock()]
        mock_response.choices[0].message.content = "Pour les donuts, regardez « Donuts maison »."
        mock_completion.return_value = mock_response

        with patch.dict("os.environ", {"MISTRAL_API_KEY": "test-key-123"}):
            client = LLMClient()
            client._mock_completion = mock_completion
            yield client


@pytest.fixture
def mock_sync(sample_videos):
    """ChannelSync with mocked yt-dlp returning sample_videos."""
    from gastrobot.ingestion.youtube import ChannelSync

    by_id = {v.video_id: v for v in sample_videos}
    sync = ChannelSync("https://www.youtube.com/channel/test/videos")
    with patch.object(sync, "list_video_ids", return_value=list(by_id)) as list_mock, \
            patch.object(sync, "extract", side_effect=lambda vid: by_id[vid]) as extract_mock:
        sync._list_mock = list_mock
        sync._extract_mock = extract_mock
        yield sync


@pytest.fixture
def service(populated_repo, mock_llm, mock_sync):
    """Fully wired GastrobotService with all mocked dependencies."""
    from gastrobot.service import GastrobotService

    return GastrobotService(
        repository=populated_repo,
        llm_client=mock_llm,
        channel_sync=mock_sync,
    )
