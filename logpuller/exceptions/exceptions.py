from typing import Optional


class PathNotFoundException(Exception):
    """Raised when a configuration path is not found."""

    def __init__(self, message) -> None:
        long_message = (
            "Failed to find a required configuration path. Please ensure the log "
            f"source catalog is mounted.\n\nFull error: {message}"
        )
        super().__init__(long_message)


class CatalogLoadException(Exception):
    """Raised when the log source catalog or its settings cannot be loaded.

    This is fatal at startup, a worker that cannot build its catalog must not
    accept any batches.
    """


class UnknownConnectorTypeException(Exception):
    """Raised when no puller is registered for a log source type."""

    def __init__(self, log_source_type: str) -> None:
        super().__init__(f"No puller registered for log source type: {log_source_type}")
        self.log_source_type = log_source_type


class PullRequestException(Exception):
    """Base class for failures scoped to a single pull request.

    These never abort a batch, the owning message is reported for redelivery.
    """

    def __init__(self, message: str, log_source_name: Optional[str] = None) -> None:
        super().__init__(message)
        self.log_source_name = log_source_name


class MalformedRequestException(PullRequestException):
    """Raised when a message body is not a valid pull request."""

    def __init__(self, message) -> None:
        super().__init__(f"Malformed pull request: {message}")


class UnknownLogSourceException(PullRequestException):
    """Raised when a request names a log source this worker cannot resolve."""

    def __init__(self, log_source_name: str) -> None:
        super().__init__(f"Invalid log source: {log_source_name}", log_source_name)


class ConnectorException(PullRequestException):
    """Raised when pulling logs from a log source fails."""

    def __init__(self, log_source_name: str, cause: Exception) -> None:
        super().__init__(
            f"Error for log_source: {log_source_name}: {cause!r}", log_source_name
        )
        self.__cause__ = cause


class ArchiveException(PullRequestException):
    """Raised when writing pulled logs to the ingestion bucket fails."""

    def __init__(self, log_source_name: str, key: str, cause: Exception) -> None:
        super().__init__(
            f"Error putting {key} to S3 for log_source: {log_source_name}: {cause!r}",
            log_source_name,
        )
        self.key = key
        self.__cause__ = cause
