import logging
import threading
from typing import List, Optional

from logpuller.core.types.aws_types import SQSMessageID
from logpuller.core.types.puller_types import LogSourceName
from logpuller.runtime.types import BatchItemFailure, BatchResponse


class FailureReporter:
    """Collects the message ids that failed while processing one batch."""

    def __init__(self) -> None:
        self._failures: List[BatchItemFailure] = []
        self._lock = threading.Lock()

    def add(
        self,
        message_id: SQSMessageID,
        log_source_name: Optional[LogSourceName],
        cause: Exception,
    ):
        logging.error(
            "Failed message_id: %s log_source: %s: %s",
            message_id,
            log_source_name,
            cause,
            exc_info=cause,
        )
        with self._lock:
            self._failures.append(BatchItemFailure(item_identifier=message_id))

    def __len__(self) -> int:
        with self._lock:
            return len(self._failures)

    def report(self) -> Optional[BatchResponse]:
        """Returns None when every message in the batch can be deleted."""
        with self._lock:
            failures = list(self._failures)
        if not failures:
            return None
        logging.error(
            "Encountered %d errors processing messages, returning to SQS",
            len(failures),
        )
        return BatchResponse(batch_item_failures=failures)
