import asyncio
import logging
from typing import Optional

from logpuller.io.aws.sqs_source import SQSSource
from logpuller.runtime.batch_orchestrator import BatchOrchestrator


class SQSPoller:
    def __init__(self, orchestrator: BatchOrchestrator, source: SQSSource) -> None:
        self.orchestrator = orchestrator
        self.source = source
        self._running = False

    async def run(self, max_batches: Optional[int] = None):
        """Pulls, processes and acks batches until stopped.

        `max_batches` counts non empty batches, it is mostly useful for tests
        and one off runs.
        """
        logging.info("Starting SQSPoller for queue %s...", self.source.queue_name)
        self._running = True
        num_batches = 0
        while self._running:
            if max_batches is not None and num_batches >= max_batches:
                break
            try:
                response = await self.source.pull()
            except Exception:
                logging.exception("pull failed")
                await asyncio.sleep(1)
                continue
            if not response.messages:
                await asyncio.sleep(1)
                continue
            num_batches += 1
            report = await self.orchestrator.process_batch(response.messages)
            failed_ids = [] if report is None else report.failed_message_ids()
            try:
                await self.source.ack(response, failed_ids)
            except Exception:
                # Unacked messages are redelivered, duplicate archives are fine.
                logging.exception("failed to ack messages")
            await self._log_backlog()
        self._running = False
        logging.info("SQSPoller Complete.")

    async def _log_backlog(self):
        try:
            backlog = await self.source.backlog()
        except Exception:
            logging.exception("failed to read queue backlog")
            return
        logging.info("queue %s backlog: %d", self.source.queue_name, backlog)

    def stop(self):
        logging.info("Stopping SQSPoller...")
        self._running = False
