import unittest
from types import MappingProxyType
from unittest import mock

import requests

from logpuller.catalog.context_resolver import PullContext
from logpuller.pullers.http_json import HTTPJSONPuller, new_session


def _context(**properties) -> PullContext:
    return PullContext(
        secret_ref="arn:okta",
        log_source_type="http_json",
        properties=MappingProxyType({"log_source_type": "http_json", **properties}),
    )


def _response(status_code: int, content: bytes = b"") -> requests.Response:
    response = requests.Response()
    response.status_code = status_code
    response._content = content
    return response


class HTTPJSONPullerTest(unittest.IsolatedAsyncioTestCase):
    def setUp(self) -> None:
        self.session = mock.MagicMock()
        self.secrets = mock.MagicMock()
        self.secrets.get_secret.return_value = {"api_token": "token"}
        self.puller = HTTPJSONPuller(self.session, self.secrets)

    async def test_pull(self):
        self.session.get.return_value = _response(200, b'[{"event": 1}]')

        data = await self.puller.pull(_context(url="https://logs.example.com/events"))

        self.assertEqual(b'[{"event": 1}]', data)
        self.secrets.get_secret.assert_called_once_with("arn:okta")
        args, kwargs = self.session.get.call_args
        self.assertEqual(("https://logs.example.com/events",), args)
        self.assertEqual("Bearer token", kwargs["headers"]["Authorization"])
        self.assertEqual({}, kwargs["params"])

    async def test_custom_token_header_and_lookback(self):
        self.session.get.return_value = _response(200, b"[]")

        await self.puller.pull(
            _context(
                url="https://logs.example.com/events",
                token_header="X-Api-Key",
                lookback_minutes="5",
            )
        )

        _, kwargs = self.session.get.call_args
        self.assertEqual("token", kwargs["headers"]["X-Api-Key"])
        self.assertNotIn("Authorization", kwargs["headers"])
        self.assertIn("since", kwargs["params"])

    async def test_no_content(self):
        self.session.get.return_value = _response(204)

        self.assertEqual(b"", await self.puller.pull(_context(url="https://x")))

    async def test_http_error(self):
        self.session.get.return_value = _response(403, b"forbidden")

        with self.assertRaises(requests.HTTPError):
            await self.puller.pull(_context(url="https://x"))

    async def test_missing_url(self):
        with self.assertRaises(ValueError):
            await self.puller.pull(_context())
        self.session.get.assert_not_called()


class NewSessionTest(unittest.TestCase):
    def test_retries_are_configured(self):
        session = new_session()

        adapter = session.get_adapter("https://logs.example.com")
        self.assertEqual(3, adapter.max_retries.total)
        self.assertIn(503, adapter.max_retries.status_forcelist)


if __name__ == "__main__":
    unittest.main()
