import asyncio
import json
import logging
import os
from typing import Optional

import typer

from logpuller.catalog.catalog import load_catalog
from logpuller.catalog.context_resolver import ContextResolver
from logpuller.core.options import PullerOptions
from logpuller.core.utils import setup_logging
from logpuller.exceptions import CatalogLoadException, PathNotFoundException
from logpuller.io.aws.sqs_source import SQSSource
from logpuller.io.utils.clients.aws_clients import AWSClients
from logpuller.runtime.sqs_poller import SQSPoller
from logpuller.runtime.worker import PullerWorker

LOGPULLER_HELP = """\
Pull logs from managed log sources and archive them to S3.

Configuration is read from the environment: LOG_SOURCES_DIR,
PULLER_LOG_SOURCE_TYPES, SECRET_ARNS, INGESTION_BUCKET_NAME, AWS_REGION,
PULLER_MAX_CONCURRENCY and LOG_LEVEL.
"""
app = typer.Typer(help=LOGPULLER_HELP, pretty_exceptions_enable=False)

LOG_SOURCES_DIR_OPTION = typer.Option(
    None, help="Overrides LOG_SOURCES_DIR, the directory holding the catalog."
)


def _load_options(log_sources_dir: Optional[str]) -> PullerOptions:
    try:
        options = PullerOptions.from_env()
    except CatalogLoadException as e:
        typer.echo(str(e))
        raise typer.Exit(1)
    if log_sources_dir:
        options.log_sources_dir = log_sources_dir
    setup_logging(options.log_level)
    return options


def _build_worker(options: PullerOptions) -> PullerWorker:
    try:
        return PullerWorker.from_options(options)
    except (CatalogLoadException, PathNotFoundException) as e:
        typer.echo(f"Failed to start worker: {e}")
        raise typer.Exit(1)


@app.command(help="List the log sources this worker can pull.")
def sources(log_sources_dir: Optional[str] = LOG_SOURCES_DIR_OPTION):
    options = _load_options(log_sources_dir)
    try:
        catalog = load_catalog(options.log_sources_dir)
    except (CatalogLoadException, PathNotFoundException) as e:
        typer.echo(str(e))
        raise typer.Exit(1)
    resolver = ContextResolver.from_catalog(
        catalog, options.puller_log_source_types, options.secret_arns
    )
    for name in resolver.log_source_names():
        typer.echo(f"{name}\t{resolver.resolve(name).log_source_type}")
    skipped = sorted({c.name for c in catalog} - set(resolver.log_source_names()))
    if skipped:
        typer.echo(f"skipped: {', '.join(skipped)}")


@app.command(help="Process an SQS event file, as Lambda would deliver it.")
def process(
    event_file: str = typer.Argument(..., help="Path to an SQS event JSON file."),
    log_sources_dir: Optional[str] = LOG_SOURCES_DIR_OPTION,
):
    if not os.path.exists(event_file):
        typer.echo(f"Event file {event_file} does not exist.")
        raise typer.Exit(1)
    with open(event_file, "r") as f:
        event = json.load(f)
    worker = _build_worker(_load_options(log_sources_dir))
    response = worker.handle(event)
    typer.echo(json.dumps(response))
    if response is not None:
        raise typer.Exit(2)


@app.command(help="Poll an SQS queue for pull requests.")
def poll(
    queue_name: str = typer.Option(..., help="The SQS queue to poll."),
    aws_account_id: Optional[str] = typer.Option(
        None, help="The account that owns the queue, if not the caller's."
    ),
    max_batches: Optional[int] = typer.Option(
        None, help="Stop after this many non empty batches."
    ),
    log_sources_dir: Optional[str] = LOG_SOURCES_DIR_OPTION,
):
    options = _load_options(log_sources_dir)
    worker = _build_worker(options)
    aws_clients = AWSClients(region=options.aws_region)
    source = SQSSource(
        aws_clients.sqs_client(), queue_name, aws_account_id=aws_account_id
    )
    poller = SQSPoller(worker.orchestrator, source)
    try:
        asyncio.run(poller.run(max_batches=max_batches))
    except KeyboardInterrupt:
        logging.info("interrupted, exiting")


def main():
    app()


if __name__ == "__main__":
    main()
