import asyncio
import contextlib
import logging
from typing import Iterable, List, Optional, Tuple

from logpuller.catalog.context_resolver import ContextResolver, PullContext
from logpuller.core.types.aws_types import SQSMessageID
from logpuller.exceptions import (
    ArchiveException,
    ConnectorException,
    MalformedRequestException,
    UnknownLogSourceException,
)
from logpuller.io.aws.archive_writer import ArchiveWriter
from logpuller.pullers.registry import PullerRegistry
from logpuller.runtime.failure_reporter import FailureReporter
from logpuller.runtime.types import (
    BatchResponse,
    Failed,
    InboundMessage,
    PullerRequest,
    PullOutcome,
)

# A request that parsed and resolved, ready to be pulled.
_Dispatchable = Tuple[SQSMessageID, PullerRequest, PullContext]


class BatchOrchestrator:
    """Pulls and archives every request in a batch concurrently.

    A failure only ever affects the message that caused it: the message id is
    reported for redelivery and the rest of the batch carries on.
    """

    def __init__(
        self,
        resolver: ContextResolver,
        pullers: PullerRegistry,
        archive_writer: ArchiveWriter,
        max_concurrency: Optional[int] = None,
    ) -> None:
        self.resolver = resolver
        self.pullers = pullers
        self.archive_writer = archive_writer
        self.max_concurrency = max_concurrency

    def _prepare(
        self, messages: Iterable[InboundMessage], failures: FailureReporter
    ) -> List[_Dispatchable]:
        to_dispatch = []
        for message in messages:
            if message.message_id is None:
                logging.error("Dropping message with no message id: %r", message.body)
                continue
            try:
                request = PullerRequest.from_json(message.body)
            except MalformedRequestException as e:
                failures.add(message.message_id, None, e)
                continue
            context = self.resolver.resolve(request.log_source_name)
            if context is None:
                failures.add(
                    message.message_id,
                    request.log_source_name,
                    UnknownLogSourceException(request.log_source_name),
                )
                continue
            to_dispatch.append((message.message_id, request, context))
        return to_dispatch

    async def _pull_and_archive(
        self, request: PullerRequest, context: PullContext
    ) -> PullOutcome:
        log_source_name = request.log_source_name
        try:
            puller = self.pullers.get(context.log_source_type)
            data = await puller.pull(context)
        except Exception as e:
            return Failed(ConnectorException(log_source_name, e))
        try:
            return await self.archive_writer.archive(data, log_source_name)
        except Exception as e:
            return Failed(ArchiveException(log_source_name, "<unwritten>", e))

    async def _process_one(
        self,
        message_id: SQSMessageID,
        request: PullerRequest,
        context: PullContext,
        limiter,
        failures: FailureReporter,
    ) -> Tuple[SQSMessageID, PullOutcome]:
        async with limiter:
            outcome = await self._pull_and_archive(request, context)
        if isinstance(outcome, Failed):
            failures.add(message_id, request.log_source_name, outcome.cause)
        return message_id, outcome

    def _limiter(self):
        if self.max_concurrency is None:
            return contextlib.nullcontext()
        return asyncio.Semaphore(self.max_concurrency)

    async def process_batch(
        self, messages: Iterable[InboundMessage]
    ) -> Optional[BatchResponse]:
        """Returns the messages to redeliver, or None if all of them succeeded."""
        failures = FailureReporter()
        to_dispatch = self._prepare(messages, failures)
        logging.info("Processing %d messages.", len(to_dispatch))

        limiter = self._limiter()
        results = await asyncio.gather(
            *[
                self._process_one(message_id, request, context, limiter, failures)
                for message_id, request, context in to_dispatch
            ]
        )
        num_succeeded = sum(
            1 for _, outcome in results if not isinstance(outcome, Failed)
        )
        logging.info(
            "Finished batch: %d succeeded, %d failed.", num_succeeded, len(failures)
        )
        return failures.report()
