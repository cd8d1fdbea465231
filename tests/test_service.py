# tests/test_service.py
"""Tests for GastrobotService."""

from unittest.mock import MagicMock, patch

import pytest

from gastrobot.grounding import REFUSAL_MESSAGE
from gastrobot.ingestion.youtube import ExtractionError
from gastrobot.llm import LLMError
from gastrobot.service import ChatError, EmptyMessageError, GastrobotService
from gastrobot.storage.repository import StoreUnavailableError, VideoRepository


def _chat_turn_count(repo) -> int:
    return repo._conn.execute("SELECT COUNT(*) FROM chat_turns").fetchone()[0]


class TestChat:
    def test_donut_question(self, service, populated_repo, mock_llm):
        reply = service.chat("comment faire des donuts?", "user-1")

        assert reply.user_message == "comment faire des donuts?"
        assert reply.bot_response == "Pour les donuts, regardez « Donuts maison »."
        assert [v.id for v in reply.source_videos] == ["donut000001"]
        assert reply.source_videos[0].video_url == "https://www.youtube.com/watch?v=donut000001"
        assert reply.source_videos[0].view_count == 120000

        kwargs = mock_llm._mock_completion.call_args.kwargs
        assert kwargs["temperature"] == 0
        assert "Donuts maison" in kwargs["messages"][0]["content"]
        assert _chat_turn_count(populated_repo) == 1

    def test_no_match_cites_recent_videos(self, service):
        reply = service.chat("xylophone", "user-1")
        assert len(reply.source_videos) == 5

    def test_empty_store_refuses_without_llm(self, sqlite_repo, mock_llm, mock_sync):
        svc = GastrobotService(repository=sqlite_repo, llm_client=mock_llm, channel_sync=mock_sync)
        reply = svc.chat("??", "user-1")

        assert reply.bot_response == REFUSAL_MESSAGE
        assert reply.source_videos == []
        mock_llm._mock_completion.assert_not_called()
        assert _chat_turn_count(sqlite_repo) == 1

    @pytest.mark.parametrize("message", ["", "   ", "\n"])
    def test_empty_message_rejected(self, service, populated_repo, message):
        with pytest.raises(EmptyMessageError) as exc:
            service.chat(message, "user-1")
        assert exc.value.stage == "validation"
        assert _chat_turn_count(populated_repo) == 0

    def test_store_unavailable_not_persisted(self, mock_llm, mock_sync):
        repo = MagicMock(spec=VideoRepository)
        repo.find_videos.side_effect = StoreUnavailableError("Database not available")
        svc = GastrobotService(repository=repo, llm_client=mock_llm, channel_sync=mock_sync)

        with pytest.raises(ChatError) as exc:
            svc.chat("comment faire des donuts?", "user-1")

        assert exc.value.stage == "retrieval"
        assert isinstance(exc.value.__cause__, StoreUnavailableError)
        assert str(exc.value) == ChatError.GENERIC_MESSAGE
        repo.save_chat_turn.assert_not_called()
        mock_llm._mock_completion.assert_not_called()

    def test_llm_failure_is_turn_failure(self, service, populated_repo, mock_llm):
        mock_llm._mock_completion.side_effect = TimeoutError("too slow")
        with pytest.raises(ChatError) as exc:
            service.chat("comment faire des donuts?", "user-1")
        assert exc.value.stage == "generation"
        assert isinstance(exc.value.__cause__, LLMError)
        assert _chat_turn_count(populated_repo) == 0

    def test_empty_llm_answer_is_turn_failure(self, service, mock_llm):
        mock_llm._mock_completion.return_value.choices[0].message.content = []
        with pytest.raises(ChatError) as exc:
            service.chat("des donuts", "user-1")
        assert exc.value.stage == "generation"

    def test_persistence_failure(self, mock_llm, mock_sync, donut_video):
        repo = MagicMock(spec=VideoRepository)
        repo.find_videos.return_value = [donut_video]
        repo.save_chat_turn.side_effect = StoreUnavailableError("disk full")
        svc = GastrobotService(repository=repo, llm_client=mock_llm, channel_sync=mock_sync)
        with pytest.raises(ChatError) as exc:
            svc.chat("des donuts", "user-1")
        assert exc.value.stage == "persistence"

    def test_missing_api_key_fails_at_startup(self, sqlite_repo, mock_sync):
        with patch.dict("os.environ", {}, clear=True):
            with pytest.raises(LLMError):
                GastrobotService(repository=sqlite_repo, channel_sync=mock_sync)


class TestSync:
    def test_sync_stores_new_videos(self, sqlite_repo, mock_llm, mock_sync):
        svc = GastrobotService(repository=sqlite_repo, llm_client=mock_llm, channel_sync=mock_sync)
        report = svc.sync_videos(10)
        assert report.fetched == 6
        assert report.stored == 6
        assert report.skipped == 0
        assert report.recipes == 1
        assert svc.video_count() == 6
        assert svc.list_recipes()[0].video_id == "donut000001"

    def test_sync_skips_existing(self, service, mock_sync):
        report = service.sync_videos()
        assert report.stored == 0
        assert report.skipped == 6
        mock_sync._extract_mock.assert_not_called()

    def test_sync_caps_max_results(self, service, mock_sync):
        service.sync_videos(1000)
        mock_sync._list_mock.assert_called_once_with(250)

    def test_sync_negative_max_results_clamped(self, service, mock_sync):
        service.sync_videos(-5)
        mock_sync._list_mock.assert_called_once_with(1)

    def test_sync_continues_after_failure(self, sqlite_repo, mock_llm, mock_sync, sample_videos):
        by_id = {v.video_id: v for v in sample_videos}

        def extract(video_id):
            if video_id == "ramen000001":
                raise ExtractionError("private video")
            return by_id[video_id]

        mock_sync._extract_mock.side_effect = extract
        svc = GastrobotService(repository=sqlite_repo, llm_client=mock_llm, channel_sync=mock_sync)
        report = svc.sync_videos()
        assert report.failed == 1
        assert report.stored == 5
        assert "ramen000001" in report.errors[0]

    def test_sync_listing_failure_propagates(self, service, mock_sync):
        mock_sync._list_mock.side_effect = ExtractionError("channel gone")
        with pytest.raises(ExtractionError):
            service.sync_videos()


class TestListing:
    def test_list_videos(self, service):
        videos = service.list_videos(limit=2)
        assert [v.video_id for v in videos] == ["ramen000001", "donut000001"]

    def test_list_videos_limit_capped(self, service, populated_repo):
        with patch.object(populated_repo, "list_videos", wraps=populated_repo.list_videos) as spy:
            service.list_videos(limit=500)
        spy.assert_called_once_with(limit=100, offset=0)

    def test_negative_limit_returns_one_video(self, service):
        videos = service.list_videos(limit=-1)
        assert [v.video_id for v in videos] == ["ramen000001"]

    def test_negative_paging_clamped(self, service, populated_repo):
        with patch.object(populated_repo, "list_recipes", wraps=populated_repo.list_recipes) as spy:
            service.list_recipes(limit=0, offset=-3)
        spy.assert_called_once_with(limit=1, offset=0)

    def test_video_count(self, service):
        assert service.video_count() == 6
