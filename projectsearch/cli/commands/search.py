"""Search, facet and request CLI commands."""

from typing import Any

import click
import msgspec
from rich.console import Console
from rich.markup import escape
from rich.panel import Panel
from rich.table import Table

from projectsearch.search import SearchOptions, SearchResponse
from projectsearch.search.results import Facet


def get_search_service(ctx):
    """Get the search service from context."""
    return ctx.obj.search_service


def parse_filters(values: tuple[str, ...]) -> dict[str, list[str]]:
    """Parse repeated ``field=v1,v2`` options into a filter mapping."""
    filters: dict[str, list[str]] = {}
    for item in values:
        field, sep, raw = item.partition("=")
        field = field.strip()
        if not sep or not field:
            raise click.BadParameter(
                f"Expected FIELD=VALUE[,VALUE...], got {item!r}", param_hint="--filter"
            )
        filters.setdefault(field, []).append(raw)
    return filters


def filter_option(command):
    return click.option(
        "--filter",
        "-f",
        "filters",
        multiple=True,
        metavar="FIELD=VALUES",
        help="Restrict FIELD to comma-separated VALUES (repeatable)",
    )(command)


def search_options(command):
    """Options shared by the ``search`` and ``request`` commands."""
    decorators = [
        filter_option,
        click.option("--sort", "-s", help="Sort field, e.g. stars or created_at"),
        click.option(
            "--order",
            type=click.Choice(["asc", "desc"]),
            help="Sort direction (default: desc)",
        ),
        click.option("--prefix", is_flag=True, help="Autocomplete on the exact name"),
        click.option("--api", is_flag=True, help="Skip facets and suggestions"),
        click.option("--page", "-p", type=int, default=1, help="Results page"),
        click.option("--per-page", "-n", type=int, help="Results per page"),
        click.option("--facet-limit", type=int, help="Maximum values per facet"),
    ]
    for decorator in reversed(decorators):
        command = decorator(command)
    return command


def build_options(ctx, **params: Any) -> SearchOptions:
    """Turn command-line values into search options."""
    settings = ctx.obj.settings
    return SearchOptions.from_params(
        {
            "filters": parse_filters(params.get("filters", ())),
            "sort": params.get("sort"),
            "order": params.get("order"),
            "prefix": params.get("prefix", False),
            "api": params.get("api", False),
            "page": params.get("page") or 1,
            "per_page": params.get("per_page") or settings.per_page,
            "facet_limit": params.get("facet_limit") or settings.facet_limit,
        }
    )


@click.command()
@click.argument("query", required=False, default="")
@search_options
@click.option("--json", "as_json", is_flag=True, help="Print the response as JSON")
@click.pass_context
def search(ctx: click.Context, query: str, as_json: bool, **kwargs) -> None:
    """Search projects.

    QUERY is free text; leave it out to browse by popularity.
    """
    console = ctx.obj.console
    options = build_options(ctx, **kwargs)
    response = get_search_service(ctx).search(query, options)

    if as_json:
        click.echo(msgspec.json.encode(response.to_dict()).decode())
        return

    _display_results(console, response)
    _display_facets(console, list(response.facets.values()))
    if response.suggestion:
        console.print(f"\nDid you mean: [cyan]{escape(response.suggestion)}[/cyan]?")


@click.command()
@filter_option
@click.option("--facet-limit", type=int, help="Maximum values per facet")
@click.option("--json", "as_json", is_flag=True, help="Print facets as JSON")
@click.pass_context
def facets(ctx: click.Context, as_json: bool, **kwargs) -> None:
    """Show facet counts for the given filters."""
    console = ctx.obj.console
    options = build_options(ctx, **kwargs)
    result = get_search_service(ctx).facets(options)

    if as_json:
        payload = {name: facet.to_dict() for name, facet in result.items()}
        click.echo(msgspec.json.encode(payload).decode())
        return

    if not any(facet.values for facet in result.values()):
        console.print("[yellow]No facet values[/yellow]")
        return
    _display_facets(console, list(result.values()), limit=None)


@click.command()
@click.argument("query", required=False, default="")
@search_options
@click.pass_context
def request(ctx: click.Context, query: str, **kwargs) -> None:
    """Print the request body a search would send."""
    options = build_options(ctx, **kwargs)
    body = get_search_service(ctx).request(query, options)
    click.echo(msgspec.json.format(msgspec.json.encode(body), indent=2).decode())


def _display_results(console: Console, response: SearchResponse) -> None:
    """Display search hits as a table."""
    if response.total == 0:
        label = f"'{escape(response.query)}'" if response.query else "these filters"
        console.print(f"\n[yellow]No results found for {label}[/yellow]")
        return

    timing = f" ({response.took_ms}ms)" if response.took_ms is not None else ""
    noun = "result" if response.total == 1 else "results"
    console.print(
        f"\nFound [green]{response.total}[/green] {noun}{timing}, "
        f"page {response.page} of {response.total_pages}"
    )

    table = Table()
    table.add_column("ID", style="cyan", justify="right")
    table.add_column("Name", overflow="ellipsis", max_width=40)
    table.add_column("Platform")
    table.add_column("Language")
    table.add_column("Rank", justify="right")
    table.add_column("Stars", justify="right")

    for hit in response.hits:
        source = hit.source
        table.add_row(
            escape(hit.id),
            escape(source.get("name") or ""),
            escape(source.get("platform") or ""),
            escape(source.get("language") or ""),
            str(source.get("rank", 0)),
            str(source.get("stars", 0)),
        )

    console.print(table)


def _display_facets(
    console: Console, facets: list[Facet], limit: int | None = 5
) -> None:
    """Display facets, one panel each."""
    for facet in facets:
        if not facet.values:
            continue
        lines = []
        for value in facet.values[:limit]:
            marker = "[green]*[/green] " if value.selected else ""
            lines.append(f"{marker}{escape(str(value.value))} ({value.count})")
        console.print(
            Panel("\n".join(lines), title=escape(facet.display_name), expand=False)
        )
