"""
Google Gemini LLM client — calls the Gemini REST API directly.
"""

import json
import logging
from typing import Iterator

import requests

from .base import LLMClient, StreamChunk
from ..errors import LLMError

log = logging.getLogger(__name__)


class GeminiClient(LLMClient):

    def __init__(self, base_url: str, model: str, api_key: str,
                 include_thoughts: bool = True, **kwargs):
        super().__init__(**kwargs)
        if not api_key:
            raise LLMError(
                "Gemini API key not configured. Set GEMINI_API_KEY or add "
                "it to .gemdiff.yaml.")
        self.base_url = base_url.rstrip("/")
        self.model = model
        self.api_key = api_key
        self.include_thoughts = include_thoughts

    def _payload(self, prompt: str) -> dict:
        generation_config: dict = {}
        if self.include_thoughts:
            generation_config["thinkingConfig"] = {"includeThoughts": True}
        return {
            "contents": [
                {
                    "parts": [{"text": prompt}]
                }
            ],
            "generationConfig": generation_config,
        }

    @staticmethod
    def _parts(data: dict) -> list[dict]:
        candidates = data.get("candidates", [])
        if not candidates:
            return []
        return candidates[0].get("content", {}).get("parts", [])

    # ── Non-streaming generation ──

    def _generate(self, prompt: str) -> str:
        log.debug(f"[Gemini] Prompt:\n{prompt}")

        url = f"{self.base_url}/models/{self.model}:generateContent"
        response = requests.post(
            url, json=self._payload(prompt),
            headers={"x-goog-api-key": self.api_key},
            timeout=(10, 300),
        )
        response.raise_for_status()
        data = response.json()

        usage = data.get("usageMetadata", {})
        log.debug(f"[Gemini] Usage: prompt={usage.get('promptTokenCount')} "
                  f"completion={usage.get('candidatesTokenCount')}")

        response_text = "".join(
            p.get("text", "") for p in self._parts(data) if not p.get("thought")
        )
        log.debug(f"[Gemini] Response:\n{response_text}")
        return response_text

    # ── Streaming generation ──

    def _generate_stream(self, prompt: str) -> Iterator[StreamChunk]:
        url = (
            f"{self.base_url}/models/{self.model}"
            f":streamGenerateContent?alt=sse"
        )
        response = requests.post(
            url, json=self._payload(prompt),
            headers={"x-goog-api-key": self.api_key},
            stream=True, timeout=(10, 120),
        )
        response.raise_for_status()
        log.debug(f"[Gemini] Response Status: {response.status_code}")

        chunks = 0
        try:
            for line in response.iter_lines(decode_unicode=True):
                if not line or not line.startswith("data: "):
                    continue
                data_str = line[6:]
                if data_str.strip() == "[DONE]":
                    break
                try:
                    data = json.loads(data_str)
                except json.JSONDecodeError:
                    log.debug(f"[Gemini] Skipping malformed chunk: {data_str!r}")
                    continue
                for part in self._parts(data):
                    text = part.get("text", "")
                    if not text:
                        continue
                    chunks += 1
                    yield StreamChunk(text=text, thought=bool(part.get("thought")))
        finally:
            response.close()

        log.debug(f"[Gemini] Streamed {chunks} chunks")
