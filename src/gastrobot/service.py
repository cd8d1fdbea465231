"""Core business logic for gastrobot."""

import logging

from gastrobot.config import settings
from gastrobot.grounding import GroundedResponder
from gastrobot.ingestion.recipes import extract_recipe
from gastrobot.ingestion.youtube import ChannelSync, ExtractionError
from gastrobot.llm import LLMClient, LLMError
from gastrobot.models import ChatReply, ChatTurn, Recipe, SourceVideo, SyncReport, Video
from gastrobot.retrieval import KeywordRetriever
from gastrobot.storage.repository import StoreUnavailableError, VideoRepository

logger = logging.getLogger(__name__)

SYNC_HARD_LIMIT = 250
MAX_PAGE_SIZE = 100


class ChatError(Exception):
    """A chat turn failed. The message is safe to show to the user.

    ``stage`` names where it failed: validation, retrieval,
    generation or persistence. The underlying error is ``__cause__``.
    """

    GENERIC_MESSAGE = "Erreur lors du traitement de votre message. Veuillez réessayer."

    def __init__(self, message: str, stage: str) -> None:
        super().__init__(message)
        self.stage = stage


class EmptyMessageError(ChatError):
    """Raised when a chat message is blank."""

    def __init__(self) -> None:
        super().__init__("Le message ne peut pas être vide.", stage="validation")


class GastrobotService:
    """Core service layer — single orchestration point for gastrobot.

    Both the CLI and MCP server are thin wrappers over this class.
    Dependencies are injected via constructor; the LLM client is
    created here when not supplied, so a missing API key fails at
    startup.
    """

    def __init__(
        self,
        repository: VideoRepository,
        llm_client: LLMClient | None = None,
        channel_sync: ChannelSync | None = None,
        retriever: KeywordRetriever | None = None,
    ) -> None:
        self._repo = repository
        self._llm = llm_client or LLMClient()
        self._sync = channel_sync or ChannelSync()
        self._retriever = retriever or KeywordRetriever(repository)
        self._responder = GroundedResponder(self._llm)

    def chat(self, message: str, user_id: str) -> ChatReply:
        """Answer a cooking question from the synced videos.

        Args:
            message: Raw user message.
            user_id: Identity of the authenticated user.

        Returns:
            ChatReply with the answer and the videos it cites.

        Raises:
            EmptyMessageError: If the message is blank.
            ChatError: If retrieval, generation or persistence fails.
        """
        if not message or not message.strip():
            raise EmptyMessageError()

        try:
            candidates = self._retriever.retrieve(message)
        except StoreUnavailableError as e:
            raise self._turn_failure("retrieval", e) from e

        try:
            answer = self._responder.respond(message, candidates)
        except LLMError as e:
            raise self._turn_failure("generation", e) from e

        turn = ChatTurn(
            user_id=user_id,
            user_message=message,
            bot_response=answer.text,
            source_videos=[SourceVideo.from_video(v) for v in answer.cited_videos],
        )
        try:
            self._repo.save_chat_turn(turn)
        except StoreUnavailableError as e:
            raise self._turn_failure("persistence", e) from e

        logger.info(
            "Chat turn for user %s: %d candidates, context=%s",
            user_id, len(candidates), answer.has_context,
        )
        return ChatReply.from_turn(turn)

    def sync_videos(self, max_results: int | None = None) -> SyncReport:
        """Pull the channel's latest uploads into the video table.

        Existing videos are skipped. A recipe is extracted from each new
        video's description when one is found. Per-video failures are
        logged and counted; they do not abort the sync.

        Raises:
            ExtractionError: If the channel listing fails.
            StoreUnavailableError: If the store is unreachable.
        """
        limit = max(1, min(max_results or settings.sync_max_results, SYNC_HARD_LIMIT))
        logger.info("Syncing up to %d videos from %s", limit, self._sync.channel_url)

        video_ids = self._sync.list_video_ids(limit)
        report = SyncReport(fetched=len(video_ids))

        for video_id in video_ids:
            if self._repo.exists(video_id):
                report.skipped += 1
                continue
            try:
                video = self._sync.extract(video_id)
            except ExtractionError as e:
                logger.warning("Skipping video %s: %s", video_id, e)
                report.failed += 1
                report.errors.append(f"{video_id}: {e}")
                continue

            self._repo.save_video(video)
            report.stored += 1
            logger.info("Stored video: %s — %s", video.video_id, video.title)

            recipe = extract_recipe(video)
            if recipe is not None:
                self._repo.save_recipe(recipe)
                report.recipes += 1

        logger.info(
            "Sync done: %d fetched, %d stored, %d skipped, %d failed",
            report.fetched, report.stored, report.skipped, report.failed,
        )
        return report

    def list_videos(self, limit: int = 20, offset: int = 0) -> list[Video]:
        """Stored videos, most recently published first (limit clamped to 1..100)."""
        return self._repo.list_videos(limit=_page_size(limit), offset=max(0, offset))

    def list_recipes(self, limit: int = 10, offset: int = 0) -> list[Recipe]:
        return self._repo.list_recipes(limit=_page_size(limit), offset=max(0, offset))

    def video_count(self) -> int:
        return self._repo.count_videos()

    @staticmethod
    def _turn_failure(stage: str, error: Exception) -> ChatError:
        logger.error("Chat turn failed during %s: %s", stage, error)
        return ChatError(ChatError.GENERIC_MESSAGE, stage=stage)


def _page_size(limit: int) -> int:
    return max(1, min(limit, MAX_PAGE_SIZE))
