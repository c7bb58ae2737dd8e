import dataclasses
import logging
from types import MappingProxyType
from typing import Dict, Iterable, List, Mapping, Optional

from logpuller.catalog.catalog import LogSourceConfig
from logpuller.core.types.aws_types import SecretArn
from logpuller.core.types.puller_types import LogSourceName, LogSourceType

_LOG_SOURCE_TYPE_PROPERTY = "log_source_type"


@dataclasses.dataclass(frozen=True)
class PullContext:
    """Everything a puller needs to pull logs for one log source.

    Built once at startup and shared by every request for the source.
    """

    secret_ref: SecretArn
    log_source_type: LogSourceType
    properties: Mapping[str, str]


def _string_properties(
    properties: Mapping, log_source_type: LogSourceType
) -> Mapping[str, str]:
    props = {
        k: v
        for k, v in properties.items()
        if isinstance(k, str) and isinstance(v, str)
    }
    props[_LOG_SOURCE_TYPE_PROPERTY] = log_source_type
    return MappingProxyType(props)


class ContextResolver:
    def __init__(self, contexts: Mapping[LogSourceName, PullContext]) -> None:
        self._contexts = MappingProxyType(dict(contexts))

    @classmethod
    def from_catalog(
        cls,
        log_sources: Iterable[LogSourceConfig],
        log_source_types: Iterable[LogSourceType],
        secret_arns: Mapping[LogSourceName, SecretArn],
    ) -> "ContextResolver":
        accepted_types = set(log_source_types)
        contexts: Dict[LogSourceName, PullContext] = {}
        for log_source in log_sources:
            managed_type = log_source.managed.type
            if managed_type not in accepted_types:
                continue
            secret_arn = secret_arns.get(log_source.name)
            if not secret_arn:
                logging.debug(
                    "no secret arn configured for log_source: %s, skipping",
                    log_source.name,
                )
                continue
            contexts[log_source.name] = PullContext(
                secret_ref=secret_arn,
                log_source_type=managed_type,
                properties=_string_properties(
                    log_source.managed.properties, managed_type
                ),
            )
        return cls(contexts)

    def resolve(self, log_source_name: LogSourceName) -> Optional[PullContext]:
        return self._contexts.get(log_source_name)

    def log_source_names(self) -> List[LogSourceName]:
        return sorted(self._contexts)

    def __len__(self) -> int:
        return len(self._contexts)
