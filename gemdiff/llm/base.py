import logging
import random
import threading
import time
from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import Callable, Iterator, Optional

from ..errors import LLMError

log = logging.getLogger(__name__)


@dataclass(frozen=True)
class StreamChunk:
    """A piece of streamed model output. ``thought`` marks reasoning text."""
    text: str
    thought: bool = False


class CancelToken:
    """Cooperative cancellation flag, checked between stream chunks."""

    def __init__(self) -> None:
        self._event = threading.Event()

    def cancel(self) -> None:
        self._event.set()

    @property
    def cancelled(self) -> bool:
        return self._event.is_set()


class LLMClient(ABC):

    def __init__(self, max_retries: int = 3, retry_delay: float = 2.0,
                 stream: bool = True):
        self.max_retries = max_retries
        self.retry_delay = retry_delay
        self.stream = stream

    # ── Public entry points ──

    def iter_stream(self, prompt: str,
                    cancel_token: Optional[CancelToken] = None) -> Iterator[StreamChunk]:
        """Yield chunks as they arrive; stops early once *cancel_token* is set."""
        for chunk in self._generate_stream(prompt):
            if cancel_token is not None and cancel_token.cancelled:
                log.info("[LLM] Generation cancelled")
                return
            yield chunk

    def generate_response(self, prompt: str,
                          on_chunk: Optional[Callable[[StreamChunk], None]] = None,
                          cancel_token: Optional[CancelToken] = None) -> str:
        """Generate a response with automatic retry and exponential backoff.

        Streams when enabled, passing every chunk (thoughts included) to
        *on_chunk*; the returned text excludes thoughts. A cancelled
        generation returns whatever text arrived without retrying. Raises
        :class:`LLMError` after all retries are exhausted.
        """
        last_error: Exception | None = None
        use_stream = self.stream  # mutable: falls back on failure

        for attempt in range(1, self.max_retries + 1):
            try:
                if use_stream:
                    result = self._collect(prompt, on_chunk, cancel_token)
                else:
                    result = self._generate(prompt)

                if cancel_token is not None and cancel_token.cancelled:
                    return result

                if not result or not result.strip():
                    log.warning(
                        f"[LLM] Empty response on attempt {attempt}/{self.max_retries}")
                    if attempt < self.max_retries:
                        self._backoff(attempt)
                        continue
                    raise LLMError("LLM returned empty response after all retries")

                return result

            except LLMError:
                raise
            except Exception as e:
                last_error = e
                log.warning(
                    f"[LLM] Error on attempt {attempt}/{self.max_retries}: {e}")

                if cancel_token is not None and cancel_token.cancelled:
                    raise LLMError(f"LLM generation cancelled: {e}") from e

                # If streaming failed, fall back to non-streaming for next retry
                if use_stream:
                    log.warning("[LLM] Streaming failed — falling back to non-streaming")
                    use_stream = False

                if attempt < self.max_retries:
                    self._backoff(attempt, rate_limited="429" in str(e))

        raise LLMError(
            f"LLM failed after {self.max_retries} retries: {last_error}")

    def _collect(self, prompt: str,
                 on_chunk: Optional[Callable[[StreamChunk], None]],
                 cancel_token: Optional[CancelToken]) -> str:
        parts: list[str] = []
        for chunk in self.iter_stream(prompt, cancel_token):
            if on_chunk is not None:
                on_chunk(chunk)
            if not chunk.thought:
                parts.append(chunk.text)
        return "".join(parts)

    def _backoff(self, attempt: int, rate_limited: bool = False) -> None:
        # Jittered exponential backoff
        wait = self.retry_delay * (2 ** (attempt - 1))
        jitter = wait * 0.1 * random.random()
        if rate_limited:
            wait *= 2
            log.info(f"[LLM] Rate limit detected (429). Backing off for {wait:.1f}s")
        time.sleep(wait + jitter)

    # ── Subclass hooks ──

    @abstractmethod
    def _generate(self, prompt: str) -> str:
        """Synchronous (non-streaming) generation."""

    @abstractmethod
    def _generate_stream(self, prompt: str) -> Iterator[StreamChunk]:
        """Streaming generation, yielding chunks as they arrive."""
