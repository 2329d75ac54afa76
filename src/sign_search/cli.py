"""CLI interface for sign search."""

import json
from pathlib import Path
from typing import Optional

import typer
from rich.console import Console
from rich.table import Table

from .config import settings
from .exceptions import TagGenerationError
from .log import configure_logging
from .providers.provider import get_provider, reset_provider
from .service import SignSearchService, import_videos as import_records
from .storage.database import init_db, get_today_quota
from .storage.repository import VideoRepository

app = typer.Typer(help="Sign language video search - Powered by Gemini/Groq AI")
console = Console()


@app.callback()
def main(
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Show debug logs"),
):
    """Configure logging for every command."""
    configure_logging("DEBUG" if verbose else settings.log_level)


def validate_api_key(provider: str | None = None) -> bool:
    """Validate that the required API key is configured."""
    provider = provider or settings.ai_provider

    if provider == "groq":
        if not settings.groq_api_key:
            console.print("[red]Error: GROQ_API_KEY environment variable not set.[/red]")
            console.print("\nTo fix this, run:")
            console.print("  export GROQ_API_KEY='your-api-key'")
            console.print("\nGet your API key at: https://console.groq.com/keys")
            return False
    else:
        if not settings.gemini_api_key:
            console.print("[red]Error: GEMINI_API_KEY environment variable not set.[/red]")
            console.print("\nTo fix this, run:")
            console.print("  export GEMINI_API_KEY='your-api-key'")
            console.print("\nGet your API key at: https://aistudio.google.com/apikey")
            return False
    return True


def set_provider(provider: str | None) -> None:
    """Set the AI provider if specified."""
    if provider:
        settings.ai_provider = provider
        reset_provider()


def _repository() -> VideoRepository:
    return VideoRepository(embedding_dimension=settings.embedding_dimension)


def _create_service(provider: str | None) -> SignSearchService:
    """Validate credentials and build the service, exiting on failure."""
    set_provider(provider)
    if not validate_api_key(provider):
        raise typer.Exit(1)

    init_db()
    console.print(f"[dim]Using provider: {settings.ai_provider}[/dim]")
    return SignSearchService(repository=_repository(), provider=get_provider())


@app.command()
def search(
    query: str = typer.Argument("", help="Search query (empty lists the newest videos)"),
    region: Optional[str] = typer.Option(None, "--region", "-r", help="Region code, e.g. TH"),
    limit: int = typer.Option(
        settings.default_search_limit, "--limit", "-l", min=1, help="Maximum results"
    ),
    conversational: bool = typer.Option(
        False, "--ask", "-a", help="Treat the query as a question and extract its keyword"
    ),
    enhanced: bool = typer.Option(
        False, "--enhanced", help="Skip vector search, rerank keyword matches only"
    ),
    provider: Optional[str] = typer.Option(None, "--provider", "-p", help="AI provider: gemini or groq"),
):
    """Search verified videos."""
    service = _create_service(provider)

    with console.status("Searching..."):
        results = service.search(
            query,
            region=region,
            limit=limit,
            conversational=conversational,
            enhanced=enhanced,
        )

    if not results:
        console.print("[yellow]No results found.[/yellow]")
        raise typer.Exit(0)

    title = f"Search Results: '{query}'" if query else "Latest Videos"
    table = Table(title=title)
    table.add_column("Title", style="cyan")
    table.add_column("Region", style="magenta")
    table.add_column("Tags", style="blue")
    table.add_column("URL", style="green")
    table.add_column("Score", style="yellow")

    for r in results:
        c = r.candidate
        table.add_row(
            c.title[:40],
            c.region,
            ", ".join(c.tags)[:30],
            c.video_url,
            f"{r.similarity:.0%}" if r.similarity is not None else "-",
        )

    console.print(table)


@app.command()
def parse(
    query: str = typer.Argument(..., help="Natural language question"),
    provider: Optional[str] = typer.Option(None, "--provider", "-p", help="AI provider: gemini or groq"),
):
    """Extract the search keyword from a question."""
    service = _create_service(provider)
    console.print(service.parse_query(query))


@app.command()
def tags(
    title: str = typer.Argument(..., help="Video title"),
    description: str = typer.Argument(..., help="Video description"),
    provider: Optional[str] = typer.Option(None, "--provider", "-p", help="AI provider: gemini or groq"),
):
    """Suggest search tags for a video."""
    service = _create_service(provider)
    try:
        suggested = service.suggest_tags(title, description)
    except (ValueError, TagGenerationError) as e:
        console.print(f"[red]Error: {e}[/red]")
        raise typer.Exit(1)

    console.print(", ".join(suggested) if suggested else "[yellow]No tags suggested.[/yellow]")


@app.command()
def backfill(
    provider: Optional[str] = typer.Option(None, "--provider", "-p", help="AI provider: gemini or groq"),
):
    """Generate embeddings for videos that are missing one."""
    service = _create_service(provider)
    if settings.ai_provider == "groq":
        console.print("[yellow]Groq has no embedding models; every video will fail.[/yellow]")

    with console.status("Generating embeddings..."):
        result = service.backfill_embeddings()

    if result.total == 0:
        console.print("[green]All videos already have embeddings.[/green]")
        return

    console.print(f"Embedded {result.embedded} of {result.total} videos")
    if result.failed:
        console.print(f"[red]Failed: {', '.join(result.failed_ids)}[/red]")
        console.print("Run 'sign-search backfill' again to retry them.")


@app.command("import")
def import_videos(
    path: Path = typer.Argument(..., exists=True, dir_okay=False, help="JSON file with a list of videos"),
    embed: bool = typer.Option(True, "--embed/--no-embed", help="Embed videos while importing"),
    provider: Optional[str] = typer.Option(None, "--provider", "-p", help="AI provider: gemini or groq"),
):
    """Import video records from a JSON file."""
    try:
        records = json.loads(path.read_text())
    except json.JSONDecodeError as e:
        console.print(f"[red]Invalid JSON in {path}: {e}[/red]")
        raise typer.Exit(1)
    if not isinstance(records, list):
        console.print("[red]Expected a JSON list of video records.[/red]")
        raise typer.Exit(1)

    try:
        if embed:
            result = _create_service(provider).import_videos(records)
        else:
            init_db()
            result = import_records(_repository(), records)
    except (KeyError, ValueError) as e:
        console.print(f"[red]Invalid video record: {e}[/red]")
        raise typer.Exit(1)

    console.print(f"Imported {result.imported} videos, embedded {result.embedded}")


@app.command("list")
def list_videos(
    region: Optional[str] = typer.Option(None, "--region", "-r", help="Region code, e.g. TH"),
    limit: int = typer.Option(settings.default_search_limit, "--limit", "-l", min=1),
):
    """List the newest verified videos."""
    init_db()
    repository = _repository()
    videos = repository.list_recent(region, limit)

    if not videos:
        console.print("[yellow]No verified videos yet.[/yellow]")
        raise typer.Exit(0)

    table = Table(title="Verified Videos")
    table.add_column("Title", style="green")
    table.add_column("Region", style="magenta")
    table.add_column("Uploader", style="cyan")
    table.add_column("Created", style="blue")

    for v in videos:
        table.add_row(
            v.title[:40],
            v.region,
            v.uploader.display_name if v.uploader else "-",
            v.created_at.strftime("%Y-%m-%d"),
        )

    console.print(table)

    counts = repository.count_videos()
    console.print(
        f"{counts['searchable']} verified of {counts['total']} videos, "
        f"{counts['missing_embedding']} missing embeddings"
    )


@app.command()
def quota():
    """Show API quota usage."""
    init_db()

    q = get_today_quota()

    # Show quota based on current provider
    if settings.ai_provider == "groq":
        daily_limit = settings.groq_daily_limit
        provider_name = "Groq"
    else:
        daily_limit = settings.gemini_daily_limit
        provider_name = "Gemini"

    remaining = daily_limit - q.request_count
    usage_pct = q.request_count / daily_limit * 100 if daily_limit else 100.0

    console.print(f"\n[bold]{provider_name} API Quota Usage[/bold]")
    console.print(f"Date: {q.date}")
    console.print(f"Requests: {q.request_count} / {daily_limit}")
    console.print(f"Remaining: {remaining}")

    if usage_pct >= 80:
        console.print(f"[red]Usage: {usage_pct:.1f}% - Running low![/red]")
    elif usage_pct >= 50:
        console.print(f"[yellow]Usage: {usage_pct:.1f}%[/yellow]")
    else:
        console.print(f"[green]Usage: {usage_pct:.1f}%[/green]")


@app.command()
def config():
    """Show current configuration."""
    console.print(f"\n[bold]Current Configuration[/bold]")
    console.print(f"AI Provider: {settings.ai_provider}")
    console.print(f"Gemini API Key: {'***' + settings.gemini_api_key[-4:] if settings.gemini_api_key else 'Not set'}")
    console.print(f"Groq API Key: {'***' + settings.groq_api_key[-4:] if settings.groq_api_key else 'Not set'}")
    console.print(f"Database: {settings.database_path}")

    console.print(f"\n[bold]Search[/bold]")
    console.print(f"Embedding model: {settings.gemini_embedding_model} ({settings.embedding_dimension}-d)")
    console.print(f"Max vector distance: {settings.max_vector_distance}")
    console.print(f"Min rerank score: {settings.min_relevance_score}/10")
    console.print(f"Default limit: {settings.default_search_limit}")


@app.command()
def serve(
    host: str = typer.Option("127.0.0.1", "--host", "-h", help="Host to bind"),
    port: int = typer.Option(8000, "--port", "-p", help="Port to bind"),
):
    """Start the API server."""
    import uvicorn

    if not validate_api_key():
        raise typer.Exit(1)

    console.print(f"Starting server at http://{host}:{port}")
    uvicorn.run("sign_search.api.routes:app", host=host, port=port)


if __name__ == "__main__":
    app()
