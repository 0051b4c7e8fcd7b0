import unittest
from unittest.mock import MagicMock, patch

import httpx
from google.genai import errors

from grub.backend.completion import (
    CompletionRequest,
    GeminiCompletionClient,
    InMemoryCompletionClient,
)
from grub.models import gemini
from grub.models.gemini import UpstreamError


class InMemoryCompletionClientTests(unittest.TestCase):
    def test_replies_in_order_and_records_requests(self):
        client = InMemoryCompletionClient()
        client.queue_response("first")
        client.queue_response("second")

        request = CompletionRequest(model_name="m", prompt_text="p")
        self.assertEqual(client.complete(request).text, "first")
        self.assertEqual(client.complete(request).text, "second")
        self.assertEqual(len(client.requests), 2)

    def test_raises_when_script_is_empty(self):
        client = InMemoryCompletionClient()
        with self.assertRaises(UpstreamError):
            client.complete(CompletionRequest(model_name="m", prompt_text="p"))

    def test_queued_exception_is_raised(self):
        client = InMemoryCompletionClient()
        client.queue_response(UpstreamError("down", 503))
        with self.assertRaises(UpstreamError) as ctx:
            client.complete(CompletionRequest(model_name="m", prompt_text="p"))
        self.assertEqual(ctx.exception.status_code, 503)


class GeminiCompletionClientTests(unittest.TestCase):
    def setUp(self):
        patcher = patch("grub.models.gemini.genai.Client")
        self.mock_client_cls = patcher.start()
        self.addCleanup(patcher.stop)
        self.genai_client = self.mock_client_cls.return_value

    def test_complete_returns_text(self):
        self.genai_client.models.generate_content.return_value = MagicMock(
            text='{"Monday": []}'
        )
        client = GeminiCompletionClient(api_key="key", timeout_seconds=30)

        response = client.complete(
            CompletionRequest(model_name="gemini-test", prompt_text="plan please")
        )

        self.assertEqual(response.text, '{"Monday": []}')
        kwargs = self.genai_client.models.generate_content.call_args.kwargs
        self.assertEqual(kwargs["model"], "gemini-test")
        self.assertEqual(kwargs["contents"], "plan please")
        client_kwargs = self.mock_client_cls.call_args.kwargs
        self.assertEqual(client_kwargs["api_key"], "key")
        self.assertEqual(client_kwargs["http_options"].timeout, 30000)

    def test_transport_error_becomes_upstream_error(self):
        self.genai_client.models.generate_content.side_effect = httpx.ConnectError(
            "connection refused"
        )
        client = GeminiCompletionClient(api_key="key")
        with self.assertRaises(UpstreamError):
            client.complete(CompletionRequest(model_name="m", prompt_text="p"))
        # No retry unless configured.
        self.assertEqual(self.genai_client.models.generate_content.call_count, 1)

    def test_empty_text_is_upstream_error(self):
        self.genai_client.models.generate_content.return_value = MagicMock(text="")
        client = GeminiCompletionClient(api_key="key")
        with self.assertRaises(UpstreamError):
            client.complete(CompletionRequest(model_name="m", prompt_text="p"))

    @patch("grub.models.gemini.time.sleep")
    def test_configured_retries(self, mock_sleep):
        self.genai_client.models.generate_content.side_effect = [
            httpx.ConnectError("reset"),
            MagicMock(text="ok"),
        ]
        client = GeminiCompletionClient(api_key="key", max_retries=1)

        response = client.complete(CompletionRequest(model_name="m", prompt_text="p"))

        self.assertEqual(response.text, "ok")
        self.assertEqual(self.genai_client.models.generate_content.call_count, 2)
        mock_sleep.assert_called_once_with(gemini.RETRY_BACKOFF_SECONDS)

    @patch("grub.models.gemini.time.sleep")
    def test_server_errors_are_retried(self, mock_sleep):
        self.genai_client.models.generate_content.side_effect = [
            _api_error(errors.ServerError, 503, "UNAVAILABLE"),
            _api_error(errors.ClientError, 429, "RESOURCE_EXHAUSTED"),
            MagicMock(text="ok"),
        ]
        client = GeminiCompletionClient(api_key="key", max_retries=2)

        response = client.complete(CompletionRequest(model_name="m", prompt_text="p"))

        self.assertEqual(response.text, "ok")
        self.assertEqual(mock_sleep.call_count, 2)

    @patch("grub.models.gemini.time.sleep")
    def test_client_errors_are_not_retried(self, mock_sleep):
        self.genai_client.models.generate_content.side_effect = _api_error(
            errors.ClientError, 401, "UNAUTHENTICATED"
        )
        client = GeminiCompletionClient(api_key="bad-key", max_retries=3)

        with self.assertRaises(UpstreamError) as ctx:
            client.complete(CompletionRequest(model_name="m", prompt_text="p"))

        self.assertEqual(ctx.exception.status_code, 401)
        self.assertEqual(self.genai_client.models.generate_content.call_count, 1)
        mock_sleep.assert_not_called()


def _api_error(error_cls, code, status):
    return error_cls(
        code, {"error": {"code": code, "message": "request failed", "status": status}}
    )


if __name__ == "__main__":
    unittest.main()
