"""FastMCP server — thin wrapper exposing GastrobotService as MCP tools."""

from fastmcp import FastMCP

from gastrobot.config import settings
from gastrobot.ingestion.youtube import ExtractionError
from gastrobot.models import Recipe, Video
from gastrobot.service import ChatError, GastrobotService
from gastrobot.storage.repository import StoreUnavailableError
from gastrobot.storage.sqlite import SQLiteVideoRepository


mcp = FastMCP(
    name="gastrobot",
    instructions=(
        "gastrobot answers cooking questions from Gastronogeek's videos. "
        "Use chat to ask a question, sync_videos to refresh the video "
        "catalogue, and list_videos or list_recipes to browse it."
    ),
)

_service: GastrobotService | None = None


def _get_service() -> GastrobotService:
    """Lazy-initialise the service singleton with default dependencies."""
    global _service
    if _service is None:
        settings.ensure_dirs()
        _service = GastrobotService(repository=SQLiteVideoRepository())
    return _service


def chat(message: str, user_id: str) -> dict:
    """Ask the cooking assistant a question.

    Answers only from the synced videos and returns the videos it used.

    Args:
        message: The question, in French or English.
        user_id: Identifier of the authenticated user.
    """
    try:
        reply = _get_service().chat(message, user_id)
        return reply.model_dump(mode="json")
    except ChatError as e:
        return {"error": str(e), "stage": e.stage}


def sync_videos(max_results: int = 50) -> dict:
    """Pull the latest uploads from the Gastronogeek channel (admin).

    Args:
        max_results: Number of recent uploads to check (clamped to 1..250).
    """
    try:
        report = _get_service().sync_videos(max_results)
    except (ExtractionError, StoreUnavailableError) as e:
        return {"error": f"Failed to sync videos: {e}"}
    return {
        "success": True,
        "message": report.message,
        **report.model_dump(),
    }


def list_videos(limit: int = 20, offset: int = 0) -> dict:
    """List synced videos, most recently published first.

    Args:
        limit: Page size (clamped to 1..100).
        offset: Number of videos to skip (negative counts as 0).
    """
    try:
        videos = _get_service().list_videos(limit=limit, offset=offset)
    except StoreUnavailableError as e:
        return {"error": str(e)}
    return {"videos": [_video_summary(v) for v in videos], "total": len(videos)}


def list_recipes(limit: int = 10, offset: int = 0) -> dict:
    """List recipes extracted from video descriptions.

    Args:
        limit: Page size (clamped to 1..100).
        offset: Number of recipes to skip (negative counts as 0).
    """
    try:
        recipes = _get_service().list_recipes(limit=limit, offset=offset)
    except StoreUnavailableError as e:
        return {"error": str(e)}
    return {"recipes": [_recipe_summary(r) for r in recipes], "total": len(recipes)}


def video_count() -> dict:
    """Number of videos in the catalogue."""
    try:
        return {"count": _get_service().video_count()}
    except StoreUnavailableError as e:
        return {"error": str(e)}


def _video_summary(video: Video) -> dict:
    """Create a concise summary dict for tool responses (excludes transcript)."""
    return {
        "video_id": video.video_id,
        "title": video.title,
        "description": video.description,
        "url": video.url,
        "thumbnail_url": video.thumbnail_url,
        "published_at": video.published_at.isoformat() if video.published_at else None,
        "duration": video.duration,
        "view_count": video.view_count,
    }


def _recipe_summary(recipe: Recipe) -> dict:
    return recipe.model_dump(mode="json", exclude={"description"})


mcp.tool(annotations={"readOnlyHint": False, "idempotentHint": False})(chat)
mcp.tool(annotations={"readOnlyHint": False, "idempotentHint": True})(sync_videos)
mcp.tool(annotations={"readOnlyHint": True})(list_videos)
mcp.tool(annotations={"readOnlyHint": True})(list_recipes)
mcp.tool(annotations={"readOnlyHint": True})(video_count)
