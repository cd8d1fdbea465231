"""CLI interface — thin wrapper over GastrobotService and FastMCP server."""

import logging

import typer

from gastrobot.config import settings
from gastrobot.ingestion.youtube import ExtractionError
from gastrobot.llm import LLMError
from gastrobot.service import ChatError, GastrobotService
from gastrobot.storage.repository import StoreUnavailableError
from gastrobot.storage.sqlite import SQLiteVideoRepository


app = typer.Typer(
    name="gastrobot",
    help="Cooking assistant grounded in Gastronogeek's videos.",
    no_args_is_help=True,
)


@app.callback()
def main() -> None:
    """Configure logging for every command."""
    logging.basicConfig(
        level=settings.log_level,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )


def _get_service() -> GastrobotService:
    """Create a service instance with default dependencies or exit on startup errors."""
    settings.ensure_dirs()
    try:
        return GastrobotService(repository=SQLiteVideoRepository())
    except (LLMError, StoreUnavailableError) as e:
        typer.echo(f"❌ {e}", err=True)
        raise typer.Exit(code=1)


@app.command()
def ask(
    message: str = typer.Argument(..., help="Cooking question to ask."),
    user: str = typer.Option("cli", "--user", "-u", help="User identifier recorded with the turn."),
) -> None:
    """Ask a cooking question."""
    svc = _get_service()
    try:
        reply = svc.chat(message, user)
    except ChatError as e:
        typer.echo(f"❌ {e}", err=True)
        raise typer.Exit(code=1)

    typer.echo(reply.bot_response)
    if reply.source_videos:
        typer.echo("\nSources:")
        for v in reply.source_videos:
            typer.echo(f"  • {v.title}")
            typer.echo(f"    {v.video_url}")


@app.command()
def sync(
    max_results: int = typer.Option(settings.sync_max_results, "--max", "-n", help="Uploads to check (max 250)."),
) -> None:
    """Sync the latest channel uploads into the video catalogue."""
    svc = _get_service()
    try:
        typer.echo("🔄 Syncing videos...")
        report = svc.sync_videos(max_results)
    except (ExtractionError, StoreUnavailableError) as e:
        typer.echo(f"❌ Failed to sync videos: {e}", err=True)
        raise typer.Exit(code=1)

    typer.echo(f"✅ {report.message}")
    typer.echo(f"   Fetched: {report.fetched}")
    typer.echo(f"   Skipped: {report.skipped}")
    typer.echo(f"   Failed:  {report.failed}")
    typer.echo(f"   Recipes: {report.recipes}")


@app.command(name="list")
def list_videos(
    limit: int = typer.Option(20, "--limit", "-n", help="Maximum videos to show."),
    offset: int = typer.Option(0, "--offset", help="Videos to skip."),
) -> None:
    """List synced videos, most recent first."""
    svc = _get_service()
    videos = svc.list_videos(limit=limit, offset=offset)
    if not videos:
        typer.echo("Catalogue is empty. Use 'gastrobot sync' to fetch videos.")
        return
    for i, v in enumerate(videos, offset + 1):
        published = v.published_at.date().isoformat() if v.published_at else "----------"
        typer.echo(f"  {i}. {v.video_id}  {published}  {v.title}")


@app.command()
def recipes(
    limit: int = typer.Option(10, "--limit", "-n", help="Maximum recipes to show."),
) -> None:
    """List recipes extracted from video descriptions."""
    svc = _get_service()
    found = svc.list_recipes(limit=limit)
    if not found:
        typer.echo("No recipes yet.")
        return
    for r in found:
        typer.echo(f"🍳 {r.title} ({r.video_id})")
        typer.echo(f"   {len(r.ingredients)} ingredients, {len(r.instructions)} steps")


@app.command()
def serve(
    stdio: bool = typer.Option(False, "--stdio", help="Use stdio transport instead of HTTP."),
    host: str = typer.Option(settings.host, "--host", help="Host to bind to."),
    port: int = typer.Option(settings.port, "--port", help="Port to bind to."),
) -> None:
    """Start the gastrobot MCP server."""
    from gastrobot.server import mcp

    if stdio:
        typer.echo("Starting gastrobot MCP server (stdio)...", err=True)
        mcp.run(transport="stdio")
    else:
        typer.echo(f"Starting gastrobot MCP server on http://{host}:{port}/mcp")
        mcp.run(transport="streamable-http", host=host, port=port)
