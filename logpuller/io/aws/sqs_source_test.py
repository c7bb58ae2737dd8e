import json
import os
import unittest

import boto3
from moto import mock_aws

from logpuller.io.aws.sqs_source import SQSSource


class SQSSourceTest(unittest.IsolatedAsyncioTestCase):
    def setUp(self) -> None:
        os.environ["AWS_ACCESS_KEY_ID"] = "dummy"
        os.environ["AWS_SECRET_ACCESS_KEY"] = "dummy"
        self.queue_name = "pull-requests"
        self.mock_aws = mock_aws()
        self.mock_aws.start()
        self.sqs_client = boto3.client("sqs", region_name="us-east-1")
        # Short visibility timeout so unacked messages come back during the test.
        self.queue_url = self.sqs_client.create_queue(
            QueueName=self.queue_name, Attributes={"VisibilityTimeout": "1"}
        )["QueueUrl"]
        self.source = SQSSource(self.sqs_client, self.queue_name, wait_time_seconds=0)

    def tearDown(self) -> None:
        self.mock_aws.stop()

    def _send(self, log_source_name: str) -> str:
        return self.sqs_client.send_message(
            QueueUrl=self.queue_url,
            MessageBody=json.dumps(
                {"log_source_name": log_source_name, "time": "2023-01-01T00:00:00Z"}
            ),
        )["MessageId"]

    async def test_pull(self):
        message_ids = [self._send(f"source-{i}") for i in range(3)]

        response = await self.source.pull()

        self.assertCountEqual(message_ids, [m.message_id for m in response.messages])
        self.assertCountEqual(
            [f"source-{i}" for i in range(3)],
            [json.loads(m.body)["log_source_name"] for m in response.messages],
        )

    async def test_pull_empty_queue(self):
        response = await self.source.pull()

        self.assertEqual([], response.messages)

    async def test_ack_only_deletes_succeeded_messages(self):
        for i in range(3):
            self._send(f"source-{i}")
        response = await self.source.pull()
        failed = response.messages[1].message_id

        await self.source.ack(response, [failed])

        attributes = self.sqs_client.get_queue_attributes(
            QueueUrl=self.queue_url,
            AttributeNames=[
                "ApproximateNumberOfMessages",
                "ApproximateNumberOfMessagesNotVisible",
            ],
        )["Attributes"]
        remaining = int(attributes["ApproximateNumberOfMessages"]) + int(
            attributes["ApproximateNumberOfMessagesNotVisible"]
        )
        self.assertEqual(1, remaining)

    async def test_backlog(self):
        for i in range(12):
            self._send(f"source-{i}")

        self.assertEqual(12, await self.source.backlog())


if __name__ == "__main__":
    unittest.main()
