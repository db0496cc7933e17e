"""Command-line interface for ATask."""

import json
from pathlib import Path
from typing import Optional

import typer
from rich.console import Console
from rich.progress import Progress, SpinnerColumn, TextColumn
from rich.table import Table

from atask.errors import AtaskError, ParseError
from atask.extraction import GraphWalkExtractor
from atask.ingestion import IngestionCoordinator, build_extractor
from atask.log_config import configure_logging
from atask.models import RepositoryConfig, Settings
from atask.storage import CommitStore, StoreConfig

app = typer.Typer(
    name="atask",
    help="Git-based task tracking - mine commit history into a local store",
    add_completion=False,
)
console = Console()


@app.callback()
def main() -> None:
    """Configure logging from settings before any command runs."""
    settings = Settings()
    configure_logging(settings.log_level, settings.log_json)


def _strategy_option(default: Optional[str] = None):
    return typer.Option(
        default,
        "--strategy",
        "-s",
        help="Extraction strategy: graph (object graph walk) or log (git log --numstat)",
    )


@app.command()
def extract(
    repo_path: Path = typer.Argument(..., help="Path to Git repository"),
    strategy: Optional[str] = _strategy_option(),
    max_commits: Optional[int] = typer.Option(None, "--max-commits", "-n", help="Maximum commits to extract"),
    output: Optional[Path] = typer.Option(None, "--output", "-o", help="Output JSON file"),
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Verbose output"),
) -> None:
    """Extract canonical commit records from a Git repository."""
    settings = Settings()
    strategy = strategy or settings.default_strategy

    try:
        config = RepositoryConfig(repo_path=repo_path)
        extractor = build_extractor(
            config, strategy=strategy, max_count=max_commits, strict=settings.strict_dates
        )

        console.print(f"[bold green]Extracting commits from:[/bold green] {repo_path}")
        console.print(f"[bold blue]Strategy:[/bold blue] {strategy}")

        commits = []

        with Progress(
            SpinnerColumn(),
            TextColumn("[progress.description]{task.description}"),
            console=console,
            transient=True,
        ) as progress:
            task = progress.add_task("Extracting commits...", total=None)

            for commit in extractor.extract_commits(max_count=max_commits):
                commits.append(commit.model_dump(mode="json"))

                if verbose:
                    console.print(
                        f"  [cyan]{commit.short_hash}[/cyan] "
                        f"{commit.message_summary} "
                        f"[dim]+{commit.insertions} -{commit.deletions} by {commit.author_name}[/dim]"
                    )

            progress.update(task, completed=True)

        console.print(f"\n[bold green]✓[/bold green] Extracted {len(commits)} commits")

        if output:
            output.parent.mkdir(parents=True, exist_ok=True)
            with open(output, "w", encoding="utf-8") as f:
                json.dump(commits, f, indent=2, ensure_ascii=False)
            console.print(f"[bold green]✓[/bold green] Saved to {output}")

    except (AtaskError, ValueError) as e:
        console.print(f"[bold red]Error:[/bold red] {e}")
        raise typer.Exit(1)


@app.command()
def show(
    repo_path: Path = typer.Argument(..., help="Path to Git repository"),
    commit_hash: str = typer.Argument(..., help="Full 40-character commit hash"),
) -> None:
    """Show a single commit."""
    try:
        extractor = GraphWalkExtractor(RepositoryConfig(repo_path=repo_path))
        commit = extractor.get_commit(commit_hash)
    except ParseError as e:
        console.print(f"[bold red]Invalid hash:[/bold red] {e}")
        raise typer.Exit(1)
    except AtaskError as e:
        console.print(f"[bold red]Error:[/bold red] {e}")
        raise typer.Exit(1)

    if commit is None:
        console.print(f"[yellow]Commit not found:[/yellow] {commit_hash}")
        return

    console.print("\n[bold]Commit Information[/bold]")
    console.print(f"[cyan]Hash:[/cyan] {commit.hash}")
    console.print(f"[cyan]Author:[/cyan] {commit.author_name} <{commit.author_email}>")
    console.print(f"[cyan]Date:[/cyan] {commit.commit_date.isoformat()}")
    console.print(f"[cyan]Message:[/cyan] {commit.message}")
    console.print(f"[cyan]Lines:[/cyan] +{commit.insertions} -{commit.deletions}")
    console.print(f"[cyan]Files Changed:[/cyan] {len(commit.files_changed)}")

    for file_path in commit.files_changed:
        console.print(f"  • {file_path}")


@app.command()
def ingest(
    repo_path: Path = typer.Argument(..., help="Path to Git repository"),
    db_path: Optional[Path] = typer.Option(None, "--db", help="SQLite database file (default: ATASK_DB_PATH)"),
    strategy: Optional[str] = _strategy_option(),
    max_commits: Optional[int] = typer.Option(None, "--max-commits", "-n", help="Maximum commits to ingest"),
) -> None:
    """Ingest commit history into the store. Safe to run repeatedly."""
    settings = Settings()
    strategy = strategy or settings.default_strategy
    store_config = StoreConfig(path=db_path) if db_path else StoreConfig()

    try:
        config = RepositoryConfig(repo_path=repo_path)
        extractor = build_extractor(
            config, strategy=strategy, max_count=max_commits, strict=settings.strict_dates
        )

        with CommitStore(store_config) as store:
            result = IngestionCoordinator(store).ingest_from(extractor, max_count=max_commits)
            total = store.count()

    except (AtaskError, ValueError) as e:
        console.print(f"[bold red]Error:[/bold red] {e}")
        raise typer.Exit(1)

    if result.inserted:
        console.print(f"[bold green]✓[/bold green] Inserted {result.inserted} new commits")
    else:
        console.print("[green]No new commits to import.[/green]")
    console.print(f"[dim]Skipped {result.skipped} already stored, {total} in store[/dim]")


@app.command("list")
def list_commits(
    db_path: Optional[Path] = typer.Option(None, "--db", help="SQLite database file (default: ATASK_DB_PATH)"),
    max_count: int = typer.Option(20, "--max", "-n", help="Maximum commits to show"),
) -> None:
    """List stored commits, newest first."""
    store_config = StoreConfig(path=db_path) if db_path else StoreConfig()

    with CommitStore(store_config) as store:
        commits = store.list_all(limit=max_count)

    table = Table(show_header=True, header_style="bold magenta")
    table.add_column("Hash", style="cyan", width=10)
    table.add_column("Author", style="green")
    table.add_column("Date", style="blue")
    table.add_column("Message", style="white")
    table.add_column("Files", justify="right", style="yellow")
    table.add_column("+/-", justify="right")

    for commit in commits:
        table.add_row(
            commit.short_hash,
            commit.author_name[:20],
            commit.commit_date.strftime("%Y-%m-%d %H:%M"),
            commit.message_summary[:60],
            str(len(commit.files_changed)),
            f"+{commit.insertions} -{commit.deletions}",
        )

    console.print(table)


@app.command()
def remote(
    repo_path: Path = typer.Argument(..., help="Path to Git repository"),
    name: str = typer.Option("origin", "--name", help="Remote name"),
    host: Optional[str] = typer.Option(None, "--host", help="Host marker the URL must carry, e.g. github"),
) -> None:
    """Print the owner and project of a remote."""
    try:
        extractor = GraphWalkExtractor(RepositoryConfig(repo_path=repo_path, remote_host=host))
        owner, project = extractor.parse_remote(name)
    except AtaskError as e:
        console.print(f"[bold red]Error:[/bold red] {e}")
        raise typer.Exit(1)

    console.print(f"[cyan]Owner:[/cyan] {owner}")
    console.print(f"[cyan]Project:[/cyan] {project}")


if __name__ == "__main__":
    app()
