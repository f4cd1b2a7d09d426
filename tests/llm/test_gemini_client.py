"""Tests for the Gemini client (HTTP is mocked)."""

import json
from unittest.mock import MagicMock, patch

import pytest
import requests

from gemdiff.errors import LLMError
from gemdiff.llm.base import CancelToken, StreamChunk
from gemdiff.llm.gemini_client import GeminiClient


def _sse(*parts_per_chunk):
    lines = []
    for parts in parts_per_chunk:
        chunk = {"candidates": [{"content": {"parts": parts}}]}
        lines.append("data: " + json.dumps(chunk))
        lines.append("")
    return lines


def _stream_response(lines):
    response = MagicMock()
    response.status_code = 200
    response.iter_lines.return_value = iter(lines)
    return response


def _client(**kwargs):
    kwargs.setdefault("retry_delay", 0)
    return GeminiClient(
        base_url="https://example.test/v1beta/",
        model="gemini-2.5-pro",
        api_key="secret",
        **kwargs,
    )


class TestConstruction:
    def test_missing_api_key(self):
        with pytest.raises(LLMError, match="API key"):
            GeminiClient(base_url="https://example.test", model="m", api_key="")

    def test_payload_requests_thoughts(self):
        payload = _client()._payload("hello")

        assert payload["contents"][0]["parts"][0]["text"] == "hello"
        assert payload["generationConfig"]["thinkingConfig"] == {"includeThoughts": True}

    def test_payload_without_thoughts(self):
        payload = _client(include_thoughts=False)._payload("hello")

        assert "thinkingConfig" not in payload["generationConfig"]


class TestStreaming:
    @patch("gemdiff.llm.gemini_client.requests.post")
    def test_thoughts_are_flagged_and_excluded(self, mock_post):
        mock_post.return_value = _stream_response(_sse(
            [{"text": "pondering", "thought": True}],
            [{"text": "Here is "}],
            [{"text": "the diff"}],
        ))
        seen = []

        result = _client().generate_response("prompt", on_chunk=seen.append)

        assert result == "Here is the diff"
        assert seen == [
            StreamChunk("pondering", thought=True),
            StreamChunk("Here is "),
            StreamChunk("the diff"),
        ]
        url = mock_post.call_args[0][0]
        assert url == ("https://example.test/v1beta/models/gemini-2.5-pro"
                       ":streamGenerateContent?alt=sse")
        assert mock_post.call_args[1]["headers"] == {"x-goog-api-key": "secret"}

    @patch("gemdiff.llm.gemini_client.requests.post")
    def test_malformed_chunks_are_skipped(self, mock_post):
        lines = ["data: {broken", ": keep-alive"] + _sse([{"text": "ok"}]) + ["data: [DONE]"]
        mock_post.return_value = _stream_response(lines)

        assert _client().generate_response("prompt") == "ok"

    @patch("gemdiff.llm.gemini_client.requests.post")
    def test_cancel_stops_between_chunks(self, mock_post):
        mock_post.return_value = _stream_response(_sse(
            [{"text": "first "}], [{"text": "second"}],
        ))
        token = CancelToken()

        def _on_chunk(chunk):
            token.cancel()

        result = _client().generate_response(
            "prompt", on_chunk=_on_chunk, cancel_token=token)

        assert result == "first "
        assert mock_post.call_count == 1


class TestRetries:
    @patch("gemdiff.llm.gemini_client.requests.post")
    def test_stream_failure_falls_back_to_non_streaming(self, mock_post):
        fallback = MagicMock()
        fallback.json.return_value = {
            "candidates": [{"content": {"parts": [
                {"text": "thinking", "thought": True},
                {"text": "answer"},
            ]}}],
        }
        mock_post.side_effect = [requests.ConnectionError("boom"), fallback]

        result = _client().generate_response("prompt")

        assert result == "answer"
        assert mock_post.call_count == 2
        assert "stream" not in mock_post.call_args[1]

    @patch("gemdiff.llm.gemini_client.requests.post")
    def test_exhausted_retries_raise(self, mock_post):
        mock_post.side_effect = requests.ConnectionError("down")

        with pytest.raises(LLMError, match="after 2 retries"):
            _client(max_retries=2).generate_response("prompt")

    @patch("gemdiff.llm.gemini_client.requests.post")
    def test_empty_response_raises(self, mock_post):
        mock_post.return_value = _stream_response([])

        with pytest.raises(LLMError, match="empty response"):
            _client(max_retries=1).generate_response("prompt")
