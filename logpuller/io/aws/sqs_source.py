import asyncio
import dataclasses
from typing import Iterable, List, Optional

from logpuller.core.types.aws_types import AWSAccountID, SQSMessageID, SQSQueueName
from logpuller.runtime.types import InboundMessage

_MAX_BATCH_SIZE = 10
_WAIT_TIME_SECONDS = 20


@dataclasses.dataclass(frozen=True)
class _MessageInfo:
    message_id: SQSMessageID
    receipt_handle: str


@dataclasses.dataclass
class PullResponse:
    messages: List[InboundMessage]
    message_infos: List[_MessageInfo]


def _get_queue_url(
    aws_conn, queue_name: SQSQueueName, aws_account_id: Optional[AWSAccountID]
):
    if aws_account_id is None:
        response = aws_conn.get_queue_url(QueueName=queue_name)
    else:
        response = aws_conn.get_queue_url(
            QueueName=queue_name, QueueOwnerAWSAccountId=aws_account_id
        )
    return response["QueueUrl"]


class SQSSource:
    """Receives pull requests from an SQS queue when not running in Lambda.

    Acking deletes only the messages that were not reported as failed, the
    rest become visible again once their visibility timeout expires.
    """

    def __init__(
        self,
        sqs_client,
        queue_name: SQSQueueName,
        aws_account_id: Optional[AWSAccountID] = None,
        wait_time_seconds: int = _WAIT_TIME_SECONDS,
    ):
        self.sqs_client = sqs_client
        self.queue_name = queue_name
        self.wait_time_seconds = wait_time_seconds
        self.queue_url = _get_queue_url(self.sqs_client, queue_name, aws_account_id)

    def _pull(self) -> PullResponse:
        response = self.sqs_client.receive_message(
            QueueUrl=self.queue_url,
            AttributeNames=["All"],
            MaxNumberOfMessages=_MAX_BATCH_SIZE,
            WaitTimeSeconds=self.wait_time_seconds,
        )
        messages = []
        message_infos = []
        for message in response.get("Messages", []):
            message_infos.append(
                _MessageInfo(
                    message_id=message["MessageId"],
                    receipt_handle=message["ReceiptHandle"],
                )
            )
            messages.append(InboundMessage.from_sqs_record(message))
        return PullResponse(messages=messages, message_infos=message_infos)

    async def pull(self) -> PullResponse:
        loop = asyncio.get_event_loop()
        return await loop.run_in_executor(None, self._pull)

    def _delete_messages(self, batch_to_delete: Iterable[_MessageInfo]):
        to_delete = []
        for info in batch_to_delete:
            to_delete.append(
                {"Id": info.message_id, "ReceiptHandle": info.receipt_handle}
            )
        response = self.sqs_client.delete_message_batch(
            QueueUrl=self.queue_url, Entries=to_delete
        )
        if response.get("Failed"):
            raise ValueError(f"message delete failed: {response['Failed']}")

    async def ack(
        self, pull_response: PullResponse, failed_message_ids: Iterable[SQSMessageID]
    ):
        failed = set(failed_message_ids)
        to_ack = [
            info
            for info in pull_response.message_infos
            if info.message_id not in failed
        ]
        coros = []
        loop = asyncio.get_event_loop()
        for i in range(0, len(to_ack), _MAX_BATCH_SIZE):
            batch_to_delete = to_ack[i : i + _MAX_BATCH_SIZE]
            coros.append(
                loop.run_in_executor(None, self._delete_messages, batch_to_delete)
            )
        await asyncio.gather(*coros)

    def _get_backlog(self) -> int:
        queue_atts = self.sqs_client.get_queue_attributes(
            QueueUrl=self.queue_url, AttributeNames=["ApproximateNumberOfMessages"]
        )
        if "ApproximateNumberOfMessages" in queue_atts["Attributes"]:
            return int(queue_atts["Attributes"]["ApproximateNumberOfMessages"])
        return 0

    async def backlog(self) -> int:
        loop = asyncio.get_event_loop()
        return await loop.run_in_executor(None, self._get_backlog)
