import dataclasses
import json
import os
from typing import Dict, List, Mapping, Optional

from logpuller.core.options._options import Options
from logpuller.core.types.aws_types import AWSRegion, S3BucketName, SecretArn
from logpuller.core.types.puller_types import LogSourceName, LogSourceType
from logpuller.exceptions import CatalogLoadException

DEFAULT_LOG_SOURCES_DIR = "/opt/config/log_sources"


def _json_env(env: Mapping[str, str], name: str):
    raw = env.get(name)
    if raw is None or raw == "":
        raise CatalogLoadException(f"{name} must be set.")
    try:
        return json.loads(raw)
    except json.JSONDecodeError as e:
        raise CatalogLoadException(f"{name} is not valid JSON: {e}") from e


@dataclasses.dataclass
class PullerOptions(Options):
    log_sources_dir: str
    # Connector types this deployment handles, sources of any other type are
    # left for other workers.
    puller_log_source_types: List[LogSourceType]
    secret_arns: Dict[LogSourceName, SecretArn]
    ingestion_bucket_name: Optional[S3BucketName]
    aws_region: Optional[AWSRegion]
    # None means every request in a batch is dispatched at once.
    max_concurrency: Optional[int]
    log_level: str = "INFO"

    @classmethod
    def default(cls) -> "PullerOptions":
        return cls(
            log_sources_dir=DEFAULT_LOG_SOURCES_DIR,
            puller_log_source_types=[],
            secret_arns={},
            ingestion_bucket_name=None,
            aws_region=None,
            max_concurrency=None,
        )

    @classmethod
    def from_env(cls, env: Optional[Mapping[str, str]] = None) -> "PullerOptions":
        if env is None:
            env = os.environ
        types = _json_env(env, "PULLER_LOG_SOURCE_TYPES")
        if not isinstance(types, list) or not all(isinstance(t, str) for t in types):
            raise CatalogLoadException(
                "PULLER_LOG_SOURCE_TYPES must be a JSON list of strings."
            )
        secret_arns = _json_env(env, "SECRET_ARNS")
        if not isinstance(secret_arns, dict):
            raise CatalogLoadException("SECRET_ARNS must be a JSON object.")
        max_concurrency = env.get("PULLER_MAX_CONCURRENCY")
        if max_concurrency:
            try:
                max_concurrency = int(max_concurrency)
            except ValueError as e:
                raise CatalogLoadException(
                    f"PULLER_MAX_CONCURRENCY must be an integer: {max_concurrency}"
                ) from e
            if max_concurrency < 1:
                raise CatalogLoadException(
                    "PULLER_MAX_CONCURRENCY must be a positive integer."
                )
        else:
            max_concurrency = None
        return cls(
            log_sources_dir=env.get("LOG_SOURCES_DIR", DEFAULT_LOG_SOURCES_DIR),
            puller_log_source_types=types,
            secret_arns={str(k): str(v) for k, v in secret_arns.items()},
            ingestion_bucket_name=env.get("INGESTION_BUCKET_NAME") or None,
            aws_region=env.get("AWS_REGION") or None,
            max_concurrency=max_concurrency,
            log_level=env.get("LOG_LEVEL", "INFO"),
        )
