"""Main CLI entrypoint for D-NAV intake.

Provides commands for extracting decision candidates from documents and for
inspecting how a single statement is scored.
"""

from __future__ import annotations

import json
import logging
import sys
from pathlib import Path

import click
from rich.console import Console
from rich.logging import RichHandler
from rich.table import Table

from dnav import __version__
from dnav.config import ScoringConfig, get_config

console = Console()

TIER_CHOICES = ["A", "B", "C"]


def setup_logging() -> None:
    """Configure logging with rich output."""
    config = get_config()

    handlers: list[logging.Handler] = [RichHandler(console=console, rich_tracebacks=True)]
    if config.logging.file:
        handlers.append(logging.FileHandler(config.logging.file, encoding="utf-8"))

    logging.basicConfig(
        level=getattr(logging, config.logging.level.upper()),
        format=config.logging.format,
        handlers=handlers,
    )


@click.group()
@click.version_option(version=__version__, prog_name="dnav")
@click.option("-v", "--verbose", is_flag=True, help="Enable verbose output")
@click.pass_context
def cli(ctx: click.Context, verbose: bool) -> None:
    """D-NAV intake – decision candidate extraction.

    Surfaces sentences that look like commitments, allocations or directional
    choices so they can be reviewed.
    """
    ctx.ensure_object(dict)
    ctx.obj["verbose"] = verbose

    if verbose:
        get_config().logging.level = "DEBUG"

    setup_logging()


def _score_color(score: int) -> str:
    if score >= 70:
        return "green"
    if score >= 45:
        return "yellow"
    return "dim"


def _print_documents(documents: list) -> None:
    table = Table(title="Documents")
    table.add_column("Document", style="cyan")
    table.add_column("Status")
    table.add_column("Pages", justify="right")
    table.add_column("Quality")
    table.add_column("Candidates", justify="right")
    table.add_column("Notes", style="dim")

    status_styles = {"done": "green", "error": "red", "paused": "yellow"}
    for doc in documents:
        style = status_styles.get(doc.status.value, "white")
        notes = doc.error or doc.pause_message or doc.limit_applied or doc.quality_reason or ""
        table.add_row(
            doc.label,
            f"[{style}]{doc.status.value}[/]",
            f"{doc.processed_pages}/{doc.total_pages if doc.total_pages is not None else '?'}",
            doc.quality_tier or "-",
            str(doc.candidate_count),
            notes,
        )

    console.print(table)


def _scoring_config(strict: bool | None) -> ScoringConfig:
    """Scoring config with the command's strict/broad choice applied."""
    scoring = get_config().scoring
    if strict is None:
        return scoring
    return scoring.model_copy(update={"strict": strict})


def _print_summary(summary: dict) -> None:
    table = Table(title=f"Kept decisions ({summary['total']})")
    table.add_column("Group", style="cyan")
    table.add_column("Name")
    table.add_column("Kept", justify="right")

    for name, count in summary["by_type"].items():
        table.add_row("Type", name, str(count))
    for name, count in summary["by_category"].items():
        table.add_row("Category", name, str(count))

    console.print(table)


def _print_candidates(candidates: list, limit: int) -> None:
    table = Table(title=f"Decision candidates ({len(candidates)})")
    table.add_column("Score", justify="right")
    table.add_column("Decision")
    table.add_column("Source", style="cyan")
    table.add_column("Category", style="green")
    table.add_column("Type")
    table.add_column("Time", style="dim")

    for candidate in candidates[:limit]:
        color = _score_color(candidate.decision_score)
        source = f"{candidate.doc_label} p.{candidate.page_number}"
        if candidate.supporting_count > 1:
            source += f" (+{candidate.supporting_count - 1})"
        table.add_row(
            f"[{color}]{candidate.decision_score}[/]",
            candidate.decision_text,
            source,
            candidate.category,
            candidate.candidate_type,
            ", ".join(candidate.time_anchors) or "-",
        )

    console.print(table)
    if len(candidates) > limit:
        console.print(f"[dim]... and {len(candidates) - limit} more[/]")


@cli.command()
@click.argument("paths", nargs=-1, type=click.Path(exists=True, dir_okay=False, path_type=Path))
@click.option(
    "--text",
    "text_file",
    type=click.File("r", encoding="utf-8"),
    default=None,
    help="Pasted text to process as one memo ('-' reads stdin).",
)
@click.option(
    "--merge-across-docs",
    is_flag=True,
    default=None,
    help="Merge near-duplicate candidates across documents.",
)
@click.option(
    "--strict/--broad",
    default=None,
    help="Strict mode drops weak chunks without commitment language (default: from config).",
)
@click.option(
    "--signals",
    "show_signals",
    is_flag=True,
    help="Include belief/outlook statements from the signal bucket.",
)
@click.option(
    "--keep-min-score",
    type=click.IntRange(0, 100),
    default=None,
    help="Mark candidates at or above this score as kept (for export).",
)
@click.option(
    "--export",
    "export_path",
    type=click.Path(dir_okay=False, path_type=Path),
    default=None,
    help="Write kept candidates to this file.",
)
@click.option(
    "--format",
    "export_format",
    type=click.Choice(["csv", "json", "xlsx"]),
    default=None,
    help="Export format (default: from file suffix, then config).",
)
@click.option(
    "--limit",
    default=20,
    type=int,
    help="Maximum candidates to display (default: 20)",
)
@click.option(
    "--json",
    "output_json",
    is_flag=True,
    help="Output results as JSON",
)
def extract(
    paths: tuple[Path, ...],
    text_file: click.utils.LazyFile | None,
    merge_across_docs: bool | None,
    strict: bool | None,
    show_signals: bool,
    keep_min_score: int | None,
    export_path: Path | None,
    export_format: str | None,
    limit: int,
    output_json: bool,
) -> None:
    """Extract decision candidates from documents.

    PATHS: PDF or text files to process, in order.
    """
    from dnav.export import export_candidates
    from dnav.governor import DocumentStatus, Governor
    from dnav.ingest import FlatTextSource, PageExtractionError, open_source

    if not paths and text_file is None:
        raise click.UsageError("Provide at least one file or --text.")

    sources = []
    for path in paths:
        try:
            sources.append(open_source(path))
        except PageExtractionError as e:
            raise click.UsageError(str(e)) from e
    if text_file is not None:
        sources.append(FlatTextSource(label="Pasted text", text=text_file.read()))

    try:
        with console.status("[bold blue]Extracting decisions...[/]") as status:
            governor: Governor | None = None

            def show_progress() -> None:
                if governor is not None:
                    status.update(f"[bold blue]{governor.status_line}[/] ({governor.progress}%)")

            config = get_config().model_copy(update={"scoring": _scoring_config(strict)})
            governor = Governor(
                config,
                yield_control=show_progress,
                merge_across_documents=merge_across_docs,
            )
            governor.enqueue(sources)
            governor.run()

            # Pauses only matter to interactive hosts; keep going until done
            while any(doc.status is DocumentStatus.PAUSED for doc in governor.documents):
                if not output_json:
                    console.print(f"[yellow]{governor.status_line}[/]")
                governor.resume()
                governor.run()

        candidates = governor.review_list(include_signals=show_signals)

        if keep_min_score is not None:
            for candidate in candidates:
                if candidate.decision_score >= keep_min_score:
                    governor.set_kept(candidate.id)

        summary = governor.candidates.kept_summary()

        if output_json:
            output = {
                "status": governor.status_line,
                "documents": [
                    {
                        "id": doc.id,
                        "label": doc.label,
                        "status": doc.status.value,
                        "processed_pages": doc.processed_pages,
                        "total_pages": doc.total_pages,
                        "quality_tier": doc.quality_tier,
                        "error": doc.error,
                        "candidate_count": doc.candidate_count,
                    }
                    for doc in governor.documents
                ],
                "candidates": [candidate.to_dict() for candidate in candidates],
                "kept_summary": summary,
            }
            click.echo(json.dumps(output, indent=2))
        else:
            _print_documents(governor.documents)
            if candidates:
                _print_candidates(candidates, limit)
            else:
                console.print("[yellow]No decision candidates found.[/]")
            if summary["total"]:
                _print_summary(summary)
            console.print(f"\n[bold]{governor.status_line}[/]")

        if export_path is not None:
            fmt = export_format or export_path.suffix.lstrip(".") or get_config().export.format
            count = export_candidates(governor.candidates.kept(), export_path, fmt=fmt)
            if not output_json:
                console.print(
                    f"[green]✓[/] Exported {count} kept decisions to [cyan]{export_path}[/]"
                )
    except ValueError as e:
        raise click.UsageError(str(e)) from e
    except Exception as e:
        console.print(f"[red]Error extracting decisions:[/] {e}")
        if get_config().logging.level == "DEBUG":
            console.print_exception()
        sys.exit(1)


@cli.command()
@click.argument("text")
@click.option(
    "--tier",
    type=click.Choice(TIER_CHOICES),
    default="A",
    help="Quality tier of the page the text came from (default: A)",
)
@click.option(
    "--strict/--broad",
    default=None,
    help="Score in strict or broad mode (default: from config).",
)
def score(text: str, tier: str, strict: bool | None) -> None:
    """Show how a single statement is scored."""
    from dnav.extract.patterns import detect_category
    from dnav.extract.scoring import score_chunk

    result = score_chunk(text, tier=tier, config=_scoring_config(strict))
    verdict_colors = {"accept": "green", "signal": "yellow", "reject": "red"}
    color = verdict_colors[result.verdict.value]

    console.print(
        f"[{color}]{result.verdict.value.upper()}[/] ({result.reason}) "
        f"score [bold]{result.decision_score}[/]"
    )
    console.print(f"  Type: {result.candidate_type}")
    console.print(f"  Category: {detect_category(text)}")
    console.print(f"  Triggers: {', '.join(result.triggers) or '-'}")
    console.print(f"  Time anchors: {', '.join(result.time_anchors) or '-'}")

    structure = result.structure
    console.print(
        f"  [dim]words={structure.word_count} digit_ratio={structure.digit_ratio:.2f} "
        f"years={structure.year_tokens} caps_ratio={structure.caps_ratio:.2f} "
        f"table_like={structure.is_table_like} heading_like={structure.is_heading_like}[/]"
    )


def main() -> None:
    """Console script entry point."""
    cli()


if __name__ == "__main__":
    main()
