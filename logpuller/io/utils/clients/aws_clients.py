from typing import Optional

import boto3

from logpuller.core.types.aws_types import AWSRegion


class AWSClients:
    """Builds boto3 clients for one region.

    Credentials come from boto3's default chain, in Lambda that is the
    execution role.
    """

    def __init__(self, region: Optional[AWSRegion]) -> None:
        self.region = region

    def _get_boto_client(self, service_name: str):
        return boto3.client(service_name=service_name, region_name=self.region)

    def sqs_client(self):
        return self._get_boto_client("sqs")

    def s3_client(self):
        return self._get_boto_client("s3")

    def secretsmanager_client(self):
        return self._get_boto_client("secretsmanager")
