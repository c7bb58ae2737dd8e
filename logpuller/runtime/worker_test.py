import json
import os
import shutil
import tempfile
import unittest
from unittest import mock

import boto3
from moto import mock_aws

from logpuller.core.options import PullerOptions
from logpuller.exceptions import CatalogLoadException, PathNotFoundException
from logpuller.io.aws.archive_writer import decompress
from logpuller.pullers.http_json import HTTPJSONPuller
from logpuller.runtime.lambda_handler import make_handler
from logpuller.runtime.worker import PullerWorker


def _record(message_id: str, body: str):
    return {
        "messageId": message_id,
        "receiptHandle": f"handle-{message_id}",
        "body": body,
        "eventSource": "aws:sqs",
    }


def _pull_request(log_source_name: str) -> str:
    return json.dumps(
        {"log_source_name": log_source_name, "time": "2023-01-01T00:00:00Z"}
    )


class PullerWorkerTest(unittest.TestCase):
    def setUp(self) -> None:
        os.environ["AWS_ACCESS_KEY_ID"] = "dummy"
        os.environ["AWS_SECRET_ACCESS_KEY"] = "dummy"
        self.bucket_name = "ingestion-bucket"
        self.mock_aws = mock_aws()
        self.mock_aws.start()
        self.s3_client = boto3.client("s3", region_name="us-east-1")
        self.s3_client.create_bucket(Bucket=self.bucket_name)

        self.catalog_dir = tempfile.mkdtemp()
        log_sources = [("okta", "http_json"), ("github", "http_json"), ("duo", "duo")]
        for name, type_ in log_sources:
            os.makedirs(os.path.join(self.catalog_dir, name))
            with open(os.path.join(self.catalog_dir, name, "log_source.yml"), "w") as f:
                f.write(
                    f"name: {name}\n"
                    "managed:\n"
                    f"  type: {type_}\n"
                    "  properties:\n"
                    f"    url: https://{name}.example.com/logs\n"
                )
        self.options = PullerOptions(
            log_sources_dir=self.catalog_dir,
            puller_log_source_types=["http_json"],
            secret_arns={"okta": "arn:okta", "github": "arn:github", "duo": "arn:duo"},
            ingestion_bucket_name=self.bucket_name,
            aws_region="us-east-1",
            max_concurrency=None,
        )

    def tearDown(self) -> None:
        self.mock_aws.stop()
        shutil.rmtree(self.catalog_dir)

    def _archived(self):
        response = self.s3_client.list_objects_v2(Bucket=self.bucket_name)
        archived = {}
        for obj in response.get("Contents", []):
            body = self.s3_client.get_object(Bucket=self.bucket_name, Key=obj["Key"])
            archived[obj["Key"].split("/")[0]] = decompress(body["Body"].read())
        return archived

    def test_handle_event(self):
        def fake_pull(puller, context):
            if "github" in context.properties["url"]:
                raise ConnectionError("github is down")
            return b'{"event": "login"}'

        worker = PullerWorker.from_options(self.options)
        handler = make_handler(worker)

        with mock.patch.object(
            HTTPJSONPuller, "_pull", autospec=True, side_effect=fake_pull
        ):
            response = handler(
                {
                    "Records": [
                        _record("m1", _pull_request("okta")),
                        _record("m2", _pull_request("github")),
                        # Declared, but pulled by some other worker.
                        _record("m3", _pull_request("duo")),
                        _record("m4", "not json"),
                    ]
                },
                None,
            )

        self.assertEqual(
            {
                "batchItemFailures": [
                    {"itemIdentifier": "m3"},
                    {"itemIdentifier": "m4"},
                    {"itemIdentifier": "m2"},
                ]
            },
            response,
        )
        self.assertEqual({"okta": b'{"event": "login"}'}, self._archived())

    def test_handle_event_all_succeed(self):
        worker = PullerWorker.from_options(self.options)

        with mock.patch.object(HTTPJSONPuller, "_pull", return_value=b""):
            response = worker.handle(
                {"Records": [_record("m1", _pull_request("okta"))]}
            )

        self.assertIsNone(response)
        self.assertEqual({}, self._archived())

    def test_handle_empty_event(self):
        worker = PullerWorker.from_options(self.options)

        self.assertIsNone(worker.handle({"Records": []}))
        self.assertIsNone(worker.handle({}))

    def test_missing_catalog_is_fatal(self):
        self.options.log_sources_dir = os.path.join(self.catalog_dir, "missing")

        with self.assertRaises(PathNotFoundException):
            PullerWorker.from_options(self.options)

    def test_missing_bucket_name_is_fatal(self):
        self.options.ingestion_bucket_name = None

        with self.assertRaises(CatalogLoadException):
            PullerWorker.from_options(self.options)


if __name__ == "__main__":
    unittest.main()
