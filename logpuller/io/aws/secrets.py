import json
import logging
import threading
from typing import Dict

from logpuller.core.types.aws_types import SecretArn


class SecretsClient:
    """Fetches log source secrets from AWS Secrets Manager.

    Secrets are cached for the lifetime of the process. Pullers call this from
    executor threads so the cache is guarded by a lock.
    """

    def __init__(self, secretsmanager_client) -> None:
        self.secretsmanager_client = secretsmanager_client
        self._cache: Dict[SecretArn, Dict[str, str]] = {}
        self._lock = threading.Lock()

    def _fetch(self, secret_arn: SecretArn) -> Dict[str, str]:
        response = self.secretsmanager_client.get_secret_value(SecretId=secret_arn)
        secret_string = response.get("SecretString")
        if secret_string is None:
            raise ValueError(f"secret {secret_arn} has no SecretString")
        try:
            secret = json.loads(secret_string)
        except json.JSONDecodeError:
            return {"value": secret_string}
        if not isinstance(secret, dict):
            return {"value": secret_string}
        return {str(k): str(v) for k, v in secret.items()}

    def get_secret(self, secret_arn: SecretArn) -> Dict[str, str]:
        with self._lock:
            if secret_arn in self._cache:
                return self._cache[secret_arn]
        logging.debug("fetching secret %s", secret_arn)
        secret = self._fetch(secret_arn)
        with self._lock:
            self._cache[secret_arn] = secret
        return secret
