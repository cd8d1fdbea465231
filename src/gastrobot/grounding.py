"""Grounded answers — build a context from videos and answer only from it."""

import logging
from dataclasses import dataclass, field
from typing import Any

from gastrobot.config import settings
from gastrobot.llm import LLMClient, LLMError
from gastrobot.models import Video

logger = logging.getLogger(__name__)

REFUSAL_MESSAGE = (
    "Désolé, je n'ai pas trouvé d'information sur ce sujet dans les vidéos de "
    "Gastronogeek. Je vous invite à consulter ses chaînes officielles et ses "
    "livres de recettes."
)

_SYSTEM_PROMPT = """Tu es l'assistant culinaire de Gastronogeek. Tu réponds aux questions de cuisine \
en t'appuyant uniquement sur les vidéos de Gastronogeek listées ci-dessous.

Règles strictes :
- Réponds UNIQUEMENT à partir des informations présentes dans le contexte.
- Si le contexte ne suffit pas pour répondre, réponds exactement : "{refusal}"
- N'invente rien, ne devine rien et n'extrapole pas au-delà du contexte.
- Quand c'est utile, cite le titre et l'URL de la vidéo concernée.

Contexte (vidéos Gastronogeek) :
{context}"""


def build_context(videos: list[Video]) -> str:
    """Render videos as Title/Description/URL blocks separated by a blank line."""
    blocks = []
    for video in videos:
        description = "N/A" if video.description is None else video.description
        blocks.append(f"Title: {video.title}\nDescription: {description}\nURL: {video.url}")
    return "\n\n".join(blocks)


def build_system_prompt(context: str) -> str:
    return _SYSTEM_PROMPT.format(refusal=REFUSAL_MESSAGE, context=context)


@dataclass
class GroundedAnswer:
    """A response plus the videos it is allowed to cite."""

    text: str
    cited_videos: list[Video] = field(default_factory=list)
    has_context: bool = False


class GroundedResponder:
    """Answers a message from a candidate set, or refuses.

    With no context the LLM is never called and the fixed refusal is
    returned. Otherwise the LLM runs at temperature 0 with a prompt
    restricting it to the context. LLM failures propagate as LLMError;
    they are never turned into the refusal.
    """

    TEMPERATURE = 0.0

    def __init__(self, llm: LLMClient, max_tokens: int | None = None) -> None:
        self._llm = llm
        self._max_tokens = max_tokens or settings.max_tokens

    def respond(self, message: str, candidates: list[Video]) -> GroundedAnswer:
        context = build_context(candidates)
        if not context.strip():
            logger.info("No context available, returning refusal")
            return GroundedAnswer(text=REFUSAL_MESSAGE)

        content = self._llm.complete(
            message,
            build_system_prompt(context),
            temperature=self.TEMPERATURE,
            max_tokens=self._max_tokens,
        )
        return GroundedAnswer(
            text=self._extract_text(content),
            cited_videos=list(candidates),
            has_context=True,
        )

    @staticmethod
    def _extract_text(content: Any) -> str:
        """Normalize provider content to text.

        Providers answer with a plain string or a list of content
        fragments; for fragments the first one's text is used.

        Raises:
            LLMError: If no text can be extracted.
        """
        if isinstance(content, str):
            text = content
        elif isinstance(content, (list, tuple)) and content:
            first = content[0]
            text = first.get("text") if isinstance(first, dict) else getattr(first, "text", None)
        else:
            text = None

        if not isinstance(text, str) or not text.strip():
            raise LLMError("No text in LLM response")
        return text
