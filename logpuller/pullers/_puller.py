import asyncio

import requests

from logpuller.catalog.context_resolver import PullContext
from logpuller.core.types.puller_types import LogSourceType
from logpuller.io.aws.secrets import SecretsClient


class Puller:
    """Pulls new logs for one type of log source.

    Subclasses implement `_pull`, which runs in the default executor so that
    blocking HTTP calls don't stall the other requests in a batch.
    """

    log_source_type: LogSourceType

    def __init__(self, session: requests.Session, secrets: SecretsClient) -> None:
        self.session = session
        self.secrets = secrets

    def _pull(self, context: PullContext) -> bytes:
        raise NotImplementedError("_pull not implemented")

    async def pull(self, context: PullContext) -> bytes:
        """Returns the raw logs pulled, empty bytes means there is nothing new."""
        loop = asyncio.get_event_loop()
        return await loop.run_in_executor(None, self._pull, context)
