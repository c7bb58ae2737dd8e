import json
import unittest

from logpuller.exceptions import MalformedRequestException
from logpuller.runtime.types import InboundMessage, PullerRequest


class PullerRequestTest(unittest.TestCase):
    def test_from_json(self):
        request = PullerRequest.from_json(
            json.dumps(
                {
                    "log_source_name": "okta",
                    "time": "2023-01-01T00:00:00Z",
                    "extra": "ignored",
                }
            )
        )

        self.assertEqual(
            PullerRequest(log_source_name="okta", time="2023-01-01T00:00:00Z"),
            request,
        )

    def test_malformed(self):
        for body in [
            None,
            "",
            "not json",
            "[1, 2]",
            '{"log_source_name": "okta"}',
            '{"time": "now"}',
            '{"log_source_name": 1, "time": "now"}',
        ]:
            with self.subTest(body=body):
                with self.assertRaises(MalformedRequestException):
                    PullerRequest.from_json(body)


class InboundMessageTest(unittest.TestCase):
    def test_from_lambda_record(self):
        message = InboundMessage.from_sqs_record(
            {"messageId": "m1", "body": "{}", "receiptHandle": "handle"}
        )

        self.assertEqual(InboundMessage(message_id="m1", body="{}"), message)

    def test_from_receive_message(self):
        message = InboundMessage.from_sqs_record(
            {"MessageId": "m1", "Body": "{}", "ReceiptHandle": "handle"}
        )

        self.assertEqual(InboundMessage(message_id="m1", body="{}"), message)

    def test_missing_fields(self):
        self.assertEqual(
            InboundMessage(message_id=None, body=None),
            InboundMessage.from_sqs_record({}),
        )


if __name__ == "__main__":
    unittest.main()
