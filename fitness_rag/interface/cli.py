import typer
from rich.console import Console
from rich.markdown import Markdown
from rich.panel import Panel
from rich.prompt import Prompt
from rich.table import Table

from ..agent.knowledge_base import KnowledgeBaseManager
from ..common.exceptions import FitnessRAGError
from ..composition.container import get_knowledge_base
from ..config.logging import setup_logging
from ..domain.models import QueryType, RAGResponse

app = typer.Typer(
    name="fitness-rag",
    help="Fitness knowledge base - workout, form and nutrition answers from trusted articles",
    add_completion=False,
)

console = Console(force_terminal=True, legacy_windows=False)


@app.callback()
def main(
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Show debug logs"),
):
    """Configure logging for every command."""
    from ..config import settings

    level = "DEBUG" if verbose else settings.log_level
    setup_logging(level=level, log_file=settings.log_file, json_format=settings.log_json)


def get_manager() -> KnowledgeBaseManager:
    """Get the knowledge base manager, checking the API key first."""
    from ..config import settings

    settings.ensure_directories()

    if not settings.google_api_key:
        console.print(
            "[red]Error:[/] Google API key not set.\n"
            "Get a free key at https://aistudio.google.com/ and set GOOGLE_API_KEY in .env"
        )
        raise typer.Exit(1)

    return get_knowledge_base()


def get_ready_manager() -> KnowledgeBaseManager:
    """Get a manager whose knowledge base is loaded or freshly built."""
    manager = get_manager()
    with console.status("[bold green]Loading knowledge base...[/]"):
        result = manager.initialize()

    if not result.success:
        console.print(f"[red]{result.message}[/]")
        raise typer.Exit(1)
    return manager


def print_response(response: RAGResponse) -> None:
    console.print(Panel(Markdown(response.answer), title="[bold green]Root[/]", border_style="green"))

    if response.sources:
        console.print("[dim]Sources:[/]")
        for source in response.sources:
            score = f" ({source.relevance_score:.0%})" if source.relevance_score is not None else ""
            console.print(f"  [dim]{source.title}{score} - {source.url}[/]")


@app.command()
def init():
    """Load the knowledge base, crawling the default sources if none exists."""
    manager = get_manager()
    with console.status("[bold green]Initializing knowledge base...[/]"):
        result = manager.initialize()

    if result.success:
        console.print(f"[green]{result.message}[/]")
    else:
        console.print(f"[red]{result.message}[/]")
        raise typer.Exit(1)


@app.command()
def ask(
    question: str = typer.Argument(..., help="Workout, form or nutrition question"),
    query_type: QueryType = typer.Option(
        QueryType.GENERAL, "--type", "-t", help="Retrieval profile", case_sensitive=False
    ),
):
    """Ask a single question and get an answer."""
    manager = get_ready_manager()

    try:
        with console.status("[bold green]Thinking...[/]"):
            response = manager.answer(question, query_type)
    except FitnessRAGError as e:
        console.print(f"[red]Error [{e.error_code}]: {e.message}[/]")
        raise typer.Exit(1)

    print_response(response)


@app.command()
def chat():
    """Start an interactive chat session with the fitness coach."""
    console.print(
        Panel.fit(
            "[bold green]Root - your fitness coach[/]\n"
            "[dim]Ask about workouts, exercise form and nutrition[/]\n\n"
            "Examples:\n"
            "- What's a good beginner full-body routine?\n"
            "- How do I keep my back straight during deadlifts?\n"
            "- What should I eat after a workout?\n\n"
            "[dim]Type 'quit' or 'exit' to leave[/]",
            title="Welcome",
            border_style="green",
        )
    )

    manager = get_ready_manager()

    while True:
        try:
            query = Prompt.ask("\n[bold cyan]You[/]")

            if query.lower() in ("quit", "exit", "q"):
                console.print("[dim]Goodbye![/]")
                break

            if not query.strip():
                continue

            with console.status("[bold green]Thinking...[/]"):
                response = manager.ask(query)

            console.print()
            print_response(response)

        except KeyboardInterrupt:
            console.print("\n[dim]Goodbye![/]")
            break
        except FitnessRAGError as e:
            console.print(f"[red]Error [{e.error_code}]: {e.message}[/]")


@app.command()
def status():
    """Show the current status of the knowledge base."""
    from ..config import settings

    console.print("[bold]Fitness Knowledge Base Status[/]\n")

    if settings.google_api_key:
        console.print("[green]OK[/] Google API key configured")
    else:
        console.print("[red]MISSING[/] Google API key not set (set GOOGLE_API_KEY in .env)")

    report = get_knowledge_base().status()
    info = report["index_info"]

    table = Table(show_header=False, box=None)
    table.add_row("Store", info["store_path"])
    table.add_row("On disk", "yes" if info["exists_on_disk"] else "no")
    table.add_row("State", report["state"])
    for key, value in report["config"].items():
        table.add_row(key, str(value))
    console.print(table)

    if not info["exists_on_disk"]:
        console.print("\n[yellow]Knowledge base is empty. Run 'fitness-rag init' to build it.[/]")


@app.command()
def rebuild(
    urls: list[str] = typer.Option(None, "--url", "-u", help="Custom URL to crawl (repeatable)"),
):
    """Delete the knowledge base and crawl a fresh one."""
    manager = get_manager()

    try:
        with console.status("[bold green]Rebuilding knowledge base...[/]"):
            count = manager.rebuild(urls or None)
    except FitnessRAGError as e:
        console.print(f"[red]Rebuild failed [{e.error_code}]: {e.message}[/]")
        raise typer.Exit(1)

    console.print(
        Panel.fit(
            f"[bold green]Rebuild complete![/]\nIndexed {count} articles",
            title="Success",
            border_style="green",
        )
    )


@app.command("add-sources")
def add_sources(
    urls: list[str] = typer.Argument(..., help="Article URLs to add"),
):
    """Crawl new article URLs and fold them into the knowledge base."""
    manager = get_manager()

    try:
        with console.status(f"[bold green]Crawling {len(urls)} URLs...[/]"):
            added = manager.add_sources(urls)
    except FitnessRAGError as e:
        console.print(f"[red]Failed to add sources [{e.error_code}]: {e.message}[/]")
        raise typer.Exit(1)

    if added:
        console.print(f"[green]Added {added} new articles to the knowledge base[/]")
    else:
        console.print("[yellow]No new relevant fitness content found[/]")


@app.command()
def serve(
    host: str = typer.Option("127.0.0.1", help="Interface to bind"),
    port: int = typer.Option(8000, help="Port to listen on"),
):
    """Run the HTTP API with uvicorn."""
    import uvicorn

    console.print(f"[green]Serving on http://{host}:{port} (docs at /docs)[/]")
    uvicorn.run("fitness_rag.api.main:app", host=host, port=port)


if __name__ == "__main__":
    app()
