"""Developer CLI for replaying persisted session history.

Prints the reconstructed view as camelCase JSON, through either the batch
reconstructor or the live aggregator.
"""

import json
import logging
import sys
from pathlib import Path

import click

from .aggregation import LiveAggregator
from .aggregation import reconstruct_events
from .aggregation import reconstruct_session
from .config import TraceSettings
from .config import load_config
from .models import ReconstructedView
from .storage import load_session
from .storage import read_events_jsonl

logger = logging.getLogger(__name__)


def configure_logging(settings: TraceSettings) -> None:
    """Configure root logging to stderr at the configured level."""
    logging.basicConfig(
        level=getattr(logging, settings.log_level.upper(), logging.INFO),
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
        stream=sys.stderr,
    )


def replay_file(path: Path, settings: TraceSettings, live: bool = False, events_only: bool = False) -> ReconstructedView:
    """Reconstruct a session file.

    Args:
        path: Session JSON document, or events.jsonl when events_only is set
        settings: Aggregation settings
        live: Feed the history through LiveAggregator instead of the batch path
        events_only: Treat the file as events.jsonl

    Returns:
        Final reconstructed view
    """
    if events_only:
        events = read_events_jsonl(path)
        if not live:
            return reconstruct_events(events, settings)
        aggregator = LiveAggregator(session_id=path.stem, settings=settings)
        for event in events:
            aggregator.apply(event)
        return aggregator.finish()

    session = load_session(path)
    if not live:
        return reconstruct_session(session, settings)

    aggregator = LiveAggregator(session_id=session.id or path.stem, settings=settings)
    for message in session.messages:
        aggregator.feed_message(message)
    aggregator.sync_agents(session.agents)
    return aggregator.finish()


@click.group()
@click.option(
    "--config",
    "config_path",
    type=click.Path(dir_okay=False, path_type=Path),
    default=None,
    help="Config file (default: $SESSION_TRACE_HOME/config/session-trace.yaml)",
)
@click.pass_context
def cli(ctx: click.Context, config_path: Path | None):
    """Session trace - replay and inspect agent session history."""
    settings = load_config(config_path)
    configure_logging(settings)
    ctx.obj = settings


@cli.command()
@click.argument("path", type=click.Path(exists=True, dir_okay=False, path_type=Path))
@click.option("--live", is_flag=True, help="Feed events one at a time through the live aggregator")
@click.option("--events", "events_only", is_flag=True, help="Treat PATH as an events.jsonl file")
@click.option("--indent", type=int, default=2, show_default=True, help="JSON indentation")
@click.pass_obj
def replay(settings: TraceSettings, path: Path, live: bool, events_only: bool, indent: int):
    """Reconstruct PATH and print the view as JSON."""
    try:
        view = replay_file(path, settings, live=live, events_only=events_only)
    except (OSError, ValueError) as e:
        # json.JSONDecodeError and pydantic.ValidationError are ValueErrors
        click.echo(f"Error: failed to read {path}: {e}", err=True)
        sys.exit(1)

    click.echo(json.dumps(view.to_json_dict(), indent=indent))

    if view.diagnostics:
        click.echo(f"{len(view.diagnostics)} diagnostics reported", err=True)


@cli.command()
@click.pass_obj
def config(settings: TraceSettings):
    """Print the effective settings."""
    click.echo(json.dumps(settings.model_dump(mode="json"), indent=2))


def main() -> None:
    cli()


if __name__ == "__main__":
    main()
