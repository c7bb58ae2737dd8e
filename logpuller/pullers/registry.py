from typing import Dict, Iterable, List, Type

import requests

from logpuller.core.types.puller_types import LogSourceType
from logpuller.exceptions import UnknownConnectorTypeException
from logpuller.io.aws.secrets import SecretsClient
from logpuller.pullers._puller import Puller
from logpuller.pullers.http_json import HTTPJSONPuller

PULLER_TYPES: List[Type[Puller]] = [HTTPJSONPuller]


class PullerRegistry:
    def __init__(self, pullers: Iterable[Puller]) -> None:
        self._pullers: Dict[LogSourceType, Puller] = {
            puller.log_source_type: puller for puller in pullers
        }

    @classmethod
    def default(
        cls, session: requests.Session, secrets: SecretsClient
    ) -> "PullerRegistry":
        return cls([puller_type(session, secrets) for puller_type in PULLER_TYPES])

    def get(self, log_source_type: LogSourceType) -> Puller:
        try:
            return self._pullers[log_source_type]
        except KeyError:
            raise UnknownConnectorTypeException(log_source_type)

    def log_source_types(self) -> List[LogSourceType]:
        return sorted(self._pullers)
