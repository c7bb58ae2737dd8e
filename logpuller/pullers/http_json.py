import datetime
import logging
from typing import Dict

import requests
from requests.adapters import HTTPAdapter
from urllib3.util.retry import Retry

from logpuller.catalog.context_resolver import PullContext
from logpuller.pullers._puller import Puller

_TIMEOUT_SECONDS = 30
_MAX_RETRIES = 3


def new_session() -> requests.Session:
    """Returns a session that retries throttled and transient server errors."""
    retry = Retry(
        total=_MAX_RETRIES,
        backoff_factor=0.5,
        status_forcelist=[429, 500, 502, 503, 504],
        allowed_methods=["GET"],
    )
    session = requests.Session()
    session.mount("https://", HTTPAdapter(max_retries=retry))
    session.mount("http://", HTTPAdapter(max_retries=retry))
    return session


class HTTPJSONPuller(Puller):
    """Polls a JSON endpoint for recent log events.

    Properties:
        url: the endpoint to GET.
        lookback_minutes: optional, sent as an ISO 8601 `since` query param.
        token_header: optional, header the API token is sent in. Defaults to
            `Authorization` with a bearer token.

    The log source secret may hold an `api_token`.
    """

    log_source_type = "http_json"

    def _headers(self, context: PullContext) -> Dict[str, str]:
        headers = {"Accept": "application/json"}
        token = self.secrets.get_secret(context.secret_ref).get("api_token")
        if token:
            token_header = context.properties.get("token_header")
            if token_header:
                headers[token_header] = token
            else:
                headers["Authorization"] = f"Bearer {token}"
        return headers

    def _params(self, context: PullContext) -> Dict[str, str]:
        lookback_minutes = context.properties.get("lookback_minutes")
        if not lookback_minutes:
            return {}
        since = datetime.datetime.now(datetime.timezone.utc) - datetime.timedelta(
            minutes=int(lookback_minutes)
        )
        return {"since": since.isoformat()}

    def _pull(self, context: PullContext) -> bytes:
        url = context.properties.get("url")
        if not url:
            raise ValueError("http_json log sources require a `url` property")
        response = self.session.get(
            url,
            headers=self._headers(context),
            params=self._params(context),
            timeout=_TIMEOUT_SECONDS,
        )
        response.raise_for_status()
        if response.status_code == 204:
            return b""
        logging.debug("pulled %d bytes from %s", len(response.content), url)
        return response.content
