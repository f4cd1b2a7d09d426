from .base import CancelToken, LLMClient, StreamChunk
from .gemini_client import GeminiClient
from ..errors import LLMError
