"""The projectsearch command group and its shared wiring."""

import logging
import sys
from dataclasses import dataclass
from pathlib import Path

import click
import msgspec
import yaml
from click.exceptions import Exit
from rich.console import Console

from projectsearch import __version__
from projectsearch.cli.commands import search
from projectsearch.config import SearchSettings, load_settings
from projectsearch.core.models import Project
from projectsearch.search import (
    IndexingHook,
    MemoryBackend,
    QueryBuilder,
    SearchService,
)
from projectsearch.storage import EventBus, ProjectRepository

logger = logging.getLogger(__name__)


@dataclass
class Context:
    """Objects shared by every command of one invocation."""

    repository: ProjectRepository
    search_service: SearchService
    settings: SearchSettings
    console: Console
    event_bus: EventBus
    debug: bool = False


LOG_FORMAT = "%(levelname)s: %(message)s"
DEBUG_LOG_FORMAT = "%(asctime)s %(name)s %(levelname)s %(message)s"


def setup_logging(verbose: bool = False, quiet: bool = False, debug: bool = False):
    """Route log records to stderr at the level the flags ask for."""
    level = logging.INFO
    if quiet:
        level = logging.WARNING
    elif verbose or debug:
        level = logging.DEBUG

    logging.basicConfig(level=level, format=DEBUG_LOG_FORMAT if debug else LOG_FORMAT)


def create_console(no_color: bool = False) -> Console:
    """Rich console for command output; plain text with ``--no-color``."""
    if no_color:
        return Console(no_color=True, highlight=False, color_system=None, width=120)
    return Console(width=120)


def load_projects(path: Path) -> list[Project]:
    """Read projects from a JSON or YAML file.

    The file holds either a list of project mappings or a mapping with a
    ``projects`` list.
    """
    suffix = path.suffix.lower()
    try:
        if suffix == ".json":
            data = msgspec.json.decode(path.read_bytes())
        elif suffix in (".yaml", ".yml"):
            data = yaml.safe_load(path.read_text())
        else:
            raise ValueError(f"Unsupported data file type: {path.name}")
    except (msgspec.DecodeError, yaml.YAMLError) as e:
        raise ValueError(f"Cannot parse {path.name}: {e}") from e

    if isinstance(data, dict):
        data = data.get("projects", [])
    if not isinstance(data, list):
        raise ValueError(f"{path.name} must contain a list of projects")

    try:
        return [Project.from_dict(item) for item in data]
    except msgspec.ValidationError as e:
        raise ValueError(f"Invalid project in {path.name}: {e}") from e


def create_context(
    settings: SearchSettings, console: Console, debug: bool = False
) -> Context:
    """Wire the repository, indexing hook and search service together."""
    event_bus = EventBus()
    backend = MemoryBackend()

    IndexingHook(backend, settings.index_name).attach(event_bus)

    service = SearchService(
        backend,
        settings.index_name,
        builder=QueryBuilder(retired_platforms=settings.retired_platforms),
        facet_cache_ttl=settings.facet_cache_ttl,
    )
    return Context(
        repository=ProjectRepository(event_bus),
        search_service=service,
        settings=settings,
        console=console,
        event_bus=event_bus,
        debug=debug,
    )


class ProjectSearchGroup(click.Group):
    """Command group that turns unexpected errors into a message and exit 1.

    Usage errors keep click's own handling; ``--debug`` re-raises.
    """

    def invoke(self, ctx):
        try:
            return super().invoke(ctx)
        except KeyboardInterrupt:
            _report(_app(ctx), "[yellow]Interrupted[/yellow]", "Interrupted")
            ctx.exit(130)
        except (click.ClickException, click.Abort, Exit, SystemExit):
            raise
        except Exception as e:
            app = _app(ctx)
            if app is not None and app.debug:
                raise
            _report(app, f"[red]Error:[/red] {e}", f"Error: {e}")
            ctx.exit(1)


def _app(ctx: click.Context) -> Context | None:
    return ctx.obj if isinstance(ctx.obj, Context) else None


def _report(app: Context | None, markup: str, plain: str) -> None:
    if app is not None:
        app.console.print(markup)
    else:
        click.echo(plain, err=True)


@click.group(cls=ProjectSearchGroup)
@click.option("--verbose", "-v", is_flag=True, help="Log debug messages")
@click.option("--quiet", "-q", is_flag=True, help="Only log warnings and errors")
@click.option("--no-color", is_flag=True, help="Plain output without colors")
@click.option("--debug", is_flag=True, help="Show tracebacks instead of messages")
@click.option(
    "--config",
    "-c",
    type=click.Path(exists=True, path_type=Path),
    help="YAML configuration file replacing the default locations",
)
@click.option(
    "--data",
    "-d",
    "data_file",
    type=click.Path(exists=True, dir_okay=False, path_type=Path),
    help="JSON or YAML file of projects to load into the index",
)
@click.version_option(
    version=__version__,
    prog_name="projectsearch",
    message="projectsearch version %(version)s",
)
@click.pass_context
def cli(
    ctx: click.Context,
    verbose: bool,
    quiet: bool,
    no_color: bool,
    debug: bool,
    config: Path | None,
    data_file: Path | None,
) -> None:
    """Package catalog search.

    Builds search requests for the projects index and runs them against
    an in-process engine loaded from a data file.
    """
    setup_logging(verbose=verbose, quiet=quiet, debug=debug)
    console = create_console(no_color=no_color)

    try:
        settings = load_settings(config)
        ctx.obj = create_context(settings, console, debug=debug)

        if data_file:
            projects = load_projects(data_file)
            ctx.obj.repository.save_all(projects)
            logger.debug(f"Loaded {len(projects)} projects from {data_file}")

    except KeyboardInterrupt:
        console.print("[yellow]Interrupted[/yellow]")
        ctx.exit(130)
    except (ValueError, OSError) as e:
        if debug:
            raise
        console.print(f"[red]Error initializing application:[/red] {e}")
        ctx.exit(1)


cli.add_command(search.search)
cli.add_command(search.facets)
cli.add_command(search.request)


def main() -> None:
    """Console script entry point."""
    try:
        cli()
    except KeyboardInterrupt:
        sys.exit(130)


if __name__ == "__main__":
    main()
