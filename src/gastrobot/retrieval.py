"""Keyword retrieval — map a chat message to a small set of candidate videos."""

import logging
import re

from gastrobot.models import Video
from gastrobot.storage.repository import VideoRepository

logger = logging.getLogger(__name__)

CANDIDATE_LIMIT = 5

# Interrogative and filler words that match far too many descriptions.
STOP_WORDS = frozenset({
    "comment", "faire", "pour", "quoi", "quel",
    "avec", "dans", "peut", "peux", "dois", "doit",
})

_NON_WORD = re.compile(r"[^a-zàâäæçéèêëïîôœùûü\s]")


def extract_keywords(message: str) -> list[str]:
    """Lowercase, drop punctuation and digits, keep tokens longer than 2 chars.

    Order of first appearance is kept; repeats are dropped.
    """
    cleaned = _NON_WORD.sub("", message.lower())
    tokens = [token for token in cleaned.split() if len(token) > 2]
    return list(dict.fromkeys(tokens))


def meaningful_keywords(keywords: list[str]) -> list[str]:
    """Keywords that are neither stop words nor 3 characters long."""
    return [k for k in keywords if k not in STOP_WORDS and len(k) > 3]


class KeywordRetriever:
    """Finds the videos a chat message is most likely about.

    Cascade, stopping at the first non-empty result:

    1. meaningful keywords against title/description
    2. every raw keyword against title/description
    3. the most recently published videos

    Each step is ordered by publish date (newest first) and capped at
    ``limit``. Store failures propagate as StoreUnavailableError.
    """

    def __init__(self, repository: VideoRepository, limit: int = CANDIDATE_LIMIT) -> None:
        self._repo = repository
        self._limit = limit

    def retrieve(self, message: str) -> list[Video]:
        """Return the candidate set (0 to ``limit`` videos) for a message."""
        keywords = extract_keywords(message)
        meaningful = meaningful_keywords(keywords)
        logger.debug("Keywords: %s (meaningful: %s)", keywords, meaningful)

        if meaningful:
            videos = self._repo.find_videos(meaningful, self._limit)
            if videos:
                logger.info("Matched %d videos on meaningful keywords", len(videos))
                return videos

        if keywords:
            videos = self._repo.find_videos(keywords, self._limit)
            if videos:
                logger.info("Matched %d videos on raw keywords", len(videos))
                return videos

        videos = self._repo.recent_videos(self._limit)
        logger.info("No keyword match, falling back to %d recent videos", len(videos))
        return videos
