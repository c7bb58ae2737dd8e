import dataclasses
import json
from typing import Any, Dict, List, Optional, Union

from logpuller.core.types.aws_types import S3ObjectKey, SQSMessageID
from logpuller.core.types.puller_types import LogSourceName
from logpuller.exceptions import MalformedRequestException


@dataclasses.dataclass(frozen=True)
class PullerRequest:
    log_source_name: LogSourceName
    # Opaque, passed through as sent by the scheduler.
    time: str

    @classmethod
    def from_json(cls, body: Optional[str]) -> "PullerRequest":
        if body is None:
            raise MalformedRequestException("message has no body")
        try:
            payload = json.loads(body)
        except (TypeError, json.JSONDecodeError) as e:
            raise MalformedRequestException(e) from e
        if not isinstance(payload, dict):
            raise MalformedRequestException(f"expected a JSON object, got: {body}")
        log_source_name = payload.get("log_source_name")
        time = payload.get("time")
        if not isinstance(log_source_name, str) or not isinstance(time, str):
            raise MalformedRequestException(
                f"`log_source_name` and `time` must be strings, got: {body}"
            )
        return cls(log_source_name=log_source_name, time=time)


@dataclasses.dataclass(frozen=True)
class InboundMessage:
    message_id: Optional[SQSMessageID]
    body: Optional[str]

    @classmethod
    def from_sqs_record(cls, record: Dict[str, Any]) -> "InboundMessage":
        # Lambda event records use `messageId`, ReceiveMessage uses `MessageId`.
        return cls(
            message_id=record.get("messageId", record.get("MessageId")),
            body=record.get("body", record.get("Body")),
        )


@dataclasses.dataclass(frozen=True)
class Archived:
    byte_count: int
    key: S3ObjectKey


@dataclasses.dataclass(frozen=True)
class NoNewData:
    pass


@dataclasses.dataclass(frozen=True)
class Failed:
    cause: Exception


PullOutcome = Union[Archived, NoNewData, Failed]


@dataclasses.dataclass(frozen=True)
class BatchItemFailure:
    item_identifier: SQSMessageID

    def as_dict(self) -> Dict[str, str]:
        return {"itemIdentifier": self.item_identifier}


@dataclasses.dataclass
class BatchResponse:
    batch_item_failures: List[BatchItemFailure]

    def failed_message_ids(self) -> List[SQSMessageID]:
        return [f.item_identifier for f in self.batch_item_failures]

    def as_dict(self) -> Dict[str, Any]:
        return {"batchItemFailures": [f.as_dict() for f in self.batch_item_failures]}
