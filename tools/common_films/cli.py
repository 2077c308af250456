"""CLI entry-point for common-films."""

from __future__ import annotations

import asyncio
import json
import logging
import sys
from dataclasses import replace

import click
from rich.console import Console
from rich.logging import RichHandler
from rich.table import Table

from .api import LetterboxdClient
from .comparison import Comparison
from .config import ComparisonConfig, LetterboxdConfig, PacingConfig
from .harvester import PageHarvester
from .models import Category, ComparisonResult, Record, normalize_handle
from .progress import ConsoleReporter

console = Console()


def _setup_logging(verbose: bool) -> None:
    level = logging.DEBUG if verbose else logging.INFO
    logging.basicConfig(
        level=level,
        format="%(message)s",
        datefmt="[%X]",
        handlers=[RichHandler(rich_tracebacks=True, console=Console(stderr=True))],
    )
    # Suppress noisy libraries
    logging.getLogger("httpx").setLevel(logging.WARNING)
    logging.getLogger("httpcore").setLevel(logging.WARNING)


def format_rating(rating: float | None) -> str:
    """3.5 → '★★★½'.  Unrated (or zero) renders empty."""
    if not rating:
        return ""
    return "★" * int(rating) + ("½" if rating % 1 else "")


def _status(record: Record) -> str:
    return "[green]watched[/green]" if record.category is Category.PRIMARY else "[blue]watchlist[/blue]"


def _print_stats(stats: dict) -> None:
    table = Table(title="Harvest Summary", show_header=True, header_style="bold cyan")
    table.add_column("Metric", style="bold")
    table.add_column("Count", justify="right")
    for key, val in stats.items():
        table.add_row(key.capitalize(), str(val))
    console.print(table)


def _print_result(result: ComparisonResult) -> None:
    a, b = result.identity_a, result.identity_b
    if not result.pairs:
        console.print(f"No films in common found between {a.display_name} and {b.display_name}.")
        return
    table = Table(title=f"{len(result.pairs)} films in common", show_header=True, header_style="bold cyan")
    table.add_column("Film", style="bold", max_width=40)
    table.add_column(a.display_name)
    table.add_column("Rating", justify="left")
    table.add_column(b.display_name)
    table.add_column("Rating", justify="left")
    for pair in result.pairs:
        table.add_row(
            pair.owner_a.title,
            _status(pair.owner_a),
            format_rating(pair.owner_a.rating),
            _status(pair.owner_b),
            format_rating(pair.owner_b.rating),
        )
    console.print(table)


def _handle(ctx: click.Context, param: click.Parameter, value: str) -> str:
    try:
        return normalize_handle(value)
    except ValueError as exc:
        raise click.BadParameter(str(exc), ctx=ctx, param=param) from exc


@click.group()
@click.option("--base-url", envvar="LETTERBOXD_BASE_URL", default="https://letterboxd.com", help="Letterboxd site root")
@click.option("--timeout", envvar="LETTERBOXD_TIMEOUT", default=30.0, type=float, help="Per-request timeout (seconds)")
@click.option("--page-delay", envvar="COMMON_FILMS_PAGE_DELAY", default=0.3, type=float, help="Pause between listing pages")
@click.option("--batch-delay", envvar="COMMON_FILMS_BATCH_DELAY", default=0.2, type=float, help="Pause between poster batches")
@click.option("-v", "--verbose", is_flag=True, help="Enable debug logging")
@click.pass_context
def cli(ctx: click.Context, **kwargs: object) -> None:
    """Common Films – compare two Letterboxd members.

    Scrapes both members' watched films and watchlists and lists the
    films they share, with each member's status and rating.
    """
    _setup_logging(bool(kwargs.pop("verbose")))
    ctx.ensure_object(dict)
    ctx.obj["letterboxd_cfg"] = LetterboxdConfig(
        base_url=str(kwargs["base_url"]).rstrip("/"),
        timeout=kwargs["timeout"],  # type: ignore[arg-type]
    )
    ctx.obj["pacing_cfg"] = replace(
        PacingConfig.from_env(),
        page_delay=kwargs["page_delay"],
        batch_delay=kwargs["batch_delay"],
    )


def _make_config(ctx: click.Context, *, posters: bool = True) -> ComparisonConfig:
    return ComparisonConfig(
        letterboxd=ctx.obj["letterboxd_cfg"],
        pacing=ctx.obj["pacing_cfg"],
        fetch_posters=posters,
    )


async def _compare(cfg: ComparisonConfig, handle_a: str, handle_b: str) -> tuple[ComparisonResult, dict]:
    async with Comparison(cfg) as comparison:
        with ConsoleReporter() as reporter:
            result = await comparison.run(handle_a, handle_b, reporter)
        return result, comparison.stats


# ─── Commands ────────────────────────────────────────────────────


@cli.command()
@click.argument("handle_a", callback=_handle)
@click.argument("handle_b", callback=_handle)
@click.option("--no-posters", is_flag=True, help="Skip poster backfill")
@click.option("--json", "as_json", is_flag=True, help="Print the result as JSON")
@click.pass_context
def compare(ctx: click.Context, handle_a: str, handle_b: str, no_posters: bool, as_json: bool) -> None:
    """Find the films two members have in common.

    Example: common-films compare alice bob
    """
    if handle_a == handle_b:
        raise click.UsageError("Pick two different members to compare")
    cfg = _make_config(ctx, posters=not no_posters)
    result, stats = asyncio.run(_compare(cfg, handle_a, handle_b))
    if as_json:
        click.echo(json.dumps(result.to_dict(), ensure_ascii=False, indent=2))
    elif result.ok:
        _print_result(result)
        _print_stats(stats)
    if not result.ok:
        console.print(f"[red]✗[/red] {result.error}")
        sys.exit(1)


@cli.command()
@click.argument("handle", callback=_handle)
@click.option(
    "--category",
    type=click.Choice([c.value for c in Category]),
    default=Category.PRIMARY.value,
    help="Which list to harvest",
)
@click.option("--limit", default=10, type=int, help="Number of films to show (0 = all)")
@click.pass_context
def films(ctx: click.Context, handle: str, category: str, limit: int) -> None:
    """Preview one member's watched films or watchlist.

    Example: common-films films alice --category watchlist --limit 5
    """
    cat = Category(category)

    async def _harvest() -> tuple[list[Record], dict]:
        async with LetterboxdClient(ctx.obj["letterboxd_cfg"]) as client:
            harvester = PageHarvester(client, ctx.obj["pacing_cfg"])
            start = client.films_url(handle) if cat is Category.PRIMARY else client.watchlist_url(handle)
            with ConsoleReporter() as reporter:
                records = await harvester.harvest(start, cat, reporter)
            return records, harvester.stats

    records, stats = asyncio.run(_harvest())
    shown = records[:limit] if limit > 0 else records
    table = Table(title=f"{handle} – {cat.value} ({len(records)} films)", show_header=True, header_style="bold cyan")
    table.add_column("Slug", style="bold")
    table.add_column("Title", max_width=40)
    table.add_column("Rating")
    table.add_column("Poster", justify="center")
    for r in shown:
        table.add_row(r.key, r.title, format_rating(r.rating), "" if r.has_placeholder else "✓")
    console.print(table)
    _print_stats(stats)


@cli.command()
@click.argument("handle", callback=_handle)
@click.pass_context
def profile(ctx: click.Context, handle: str) -> None:
    """Show a member's display name and avatar.

    Example: common-films profile alice
    """
    async def _resolve():
        async with Comparison(_make_config(ctx)) as comparison:
            return await comparison.resolve_identity(handle)

    identity = asyncio.run(_resolve())
    console.print(f"[bold]{identity.display_name}[/bold] ([cyan]{identity.handle}[/cyan])")
    console.print(identity.avatar_ref or "[dim]no avatar[/dim]")


def main() -> None:
    cli()


if __name__ == "__main__":
    main()
