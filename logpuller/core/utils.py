import logging
import os
from typing import Any, Dict
from uuid import uuid4

import yaml

from logpuller.exceptions import PathNotFoundException

_LOG_FORMAT = "%(asctime)s %(levelname)s %(name)s: %(message)s"


def read_yaml_file(file_path: str) -> Dict[str, Any]:
    if not os.path.exists(file_path):
        return {}
    with open(file_path, "r") as f:
        return yaml.safe_load(f)


def assert_path_exists(path: str):
    if not os.path.exists(path):
        raise PathNotFoundException(f"Path {path} does not exist.")


def uuid() -> str:
    return str(uuid4())


def setup_logging(log_level: str = "INFO"):
    logging.basicConfig(format=_LOG_FORMAT)
    logging.getLogger().setLevel(log_level)
    # boto logs every request at INFO which drowns out the pull logs.
    logging.getLogger("botocore").setLevel(logging.WARNING)
    logging.getLogger("urllib3").setLevel(logging.WARNING)
