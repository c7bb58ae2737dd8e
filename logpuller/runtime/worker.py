import asyncio
import logging
from typing import Any, Dict, Optional

from logpuller.catalog.catalog import load_catalog
from logpuller.catalog.context_resolver import ContextResolver
from logpuller.core.options import PullerOptions
from logpuller.exceptions import CatalogLoadException
from logpuller.io.aws.archive_writer import ArchiveWriter
from logpuller.io.aws.secrets import SecretsClient
from logpuller.io.utils.clients.aws_clients import AWSClients
from logpuller.pullers.http_json import new_session
from logpuller.pullers.registry import PullerRegistry
from logpuller.runtime.batch_orchestrator import BatchOrchestrator
from logpuller.runtime.types import InboundMessage


class PullerWorker:
    """Owns the state shared by every batch a process handles.

    Construction loads the catalog and builds the clients, if that fails the
    worker must not accept any batches.
    """

    def __init__(self, orchestrator: BatchOrchestrator) -> None:
        self.orchestrator = orchestrator

    @classmethod
    def from_options(cls, options: PullerOptions) -> "PullerWorker":
        if not options.ingestion_bucket_name:
            raise CatalogLoadException("INGESTION_BUCKET_NAME must be set.")
        aws_clients = AWSClients(region=options.aws_region)
        secrets = SecretsClient(aws_clients.secretsmanager_client())
        pullers = PullerRegistry.default(new_session(), secrets)

        resolver = ContextResolver.from_catalog(
            load_catalog(options.log_sources_dir),
            options.puller_log_source_types,
            options.secret_arns,
        )
        unhandled = set(options.puller_log_source_types) - set(
            pullers.log_source_types()
        )
        if unhandled:
            logging.warning(
                "no puller registered for log source types: %s", sorted(unhandled)
            )
        logging.info(
            "resolved %d log sources: %s", len(resolver), resolver.log_source_names()
        )
        orchestrator = BatchOrchestrator(
            resolver=resolver,
            pullers=pullers,
            archive_writer=ArchiveWriter(
                aws_clients.s3_client(), options.ingestion_bucket_name
            ),
            max_concurrency=options.max_concurrency,
        )
        return cls(orchestrator)

    async def process_event(self, event: Dict[str, Any]) -> Optional[Dict[str, Any]]:
        """Processes an SQS event, returning the partial batch failure response."""
        logging.info("Starting....")
        messages = [
            InboundMessage.from_sqs_record(record)
            for record in event.get("Records", [])
        ]
        response = await self.orchestrator.process_batch(messages)
        if response is None:
            return None
        return response.as_dict()

    def handle(self, event: Dict[str, Any]) -> Optional[Dict[str, Any]]:
        return asyncio.run(self.process_event(event))
