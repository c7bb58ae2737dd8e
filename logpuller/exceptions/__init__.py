# ruff: noqa
from .exceptions import (
    ArchiveException,
    CatalogLoadException,
    ConnectorException,
    MalformedRequestException,
    PathNotFoundException,
    PullRequestException,
    UnknownConnectorTypeException,
    UnknownLogSourceException,
)
