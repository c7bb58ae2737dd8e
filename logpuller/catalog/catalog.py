"""Loads the log source catalog from disk.

The catalog is a directory with one sub directory per log source, each holding
a ``log_source.yml`` file:

    name: okta_system
    managed:
      type: http_json
      properties:
        url: https://example.okta.com/api/v1/logs

Entries that are missing a name, a managed type or managed properties are
skipped, the catalog may declare sources that are handled by other workers.
"""
import dataclasses
import logging
import os
from typing import Any, Dict, List, Optional

import dacite
import yaml

from logpuller.core import utils
from logpuller.core.types.puller_types import LogSourceName, LogSourceType
from logpuller.exceptions import CatalogLoadException

LOG_SOURCE_CONFIG_FILE = "log_source.yml"


@dataclasses.dataclass(frozen=True)
class ManagedConfig:
    type: LogSourceType
    properties: Dict[Any, Any]


@dataclasses.dataclass(frozen=True)
class LogSourceConfig:
    name: LogSourceName
    managed: ManagedConfig

    @classmethod
    def fromdict(cls, config_dict: Any) -> Optional["LogSourceConfig"]:
        """Returns None if the config does not declare a managed log source."""
        if not isinstance(config_dict, dict):
            return None
        try:
            return dacite.from_dict(
                data_class=cls,
                data=config_dict,
                config=dacite.Config(strict=False),
            )
        except dacite.DaciteError as e:
            logging.debug("skipping log source config %s: %s", config_dict, e)
            return None


def _read_log_source_config(log_source_dir: str) -> Any:
    config_path = os.path.join(log_source_dir, LOG_SOURCE_CONFIG_FILE)
    if not os.path.isfile(config_path):
        raise CatalogLoadException(
            f"Log source directory {log_source_dir} has no {LOG_SOURCE_CONFIG_FILE}."
        )
    try:
        return utils.read_yaml_file(config_path)
    except (OSError, yaml.YAMLError) as e:
        raise CatalogLoadException(f"Failed to read {config_path}: {e}") from e


def load_catalog(log_sources_dir: str) -> List[LogSourceConfig]:
    utils.assert_path_exists(log_sources_dir)
    configs = []
    for entry in sorted(os.listdir(log_sources_dir)):
        log_source_dir = os.path.join(log_sources_dir, entry)
        if not os.path.isdir(log_source_dir):
            continue
        config = LogSourceConfig.fromdict(_read_log_source_config(log_source_dir))
        if config is not None:
            configs.append(config)
    logging.info(
        "loaded %d managed log sources from %s", len(configs), log_sources_dir
    )
    return configs
