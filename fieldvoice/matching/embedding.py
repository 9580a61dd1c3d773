"""Embedding backends: text in, fixed-length vector out."""

import os
import logging
from abc import ABC, abstractmethod
from typing import List, Optional

import aiohttp
import numpy as np

from ..errors import EmbeddingNotReady

logger = logging.getLogger(__name__)


class AbstractEmbeddingBackend(ABC):
    """Abstract base class for embedding backends."""

    @property
    @abstractmethod
    def is_ready(self) -> bool:
        """True once the backend can serve ``embed`` calls."""

    @abstractmethod
    async def embed(self, text: str) -> np.ndarray:
        """Embed ``text``.

        Raises:
            EmbeddingNotReady: If the backend is still warming up
        """

    async def initialize(self) -> bool:
        """Prepare backend resources. Returns True on success."""
        return True

    async def cleanup(self) -> None:
        """Release backend resources."""


class HttpEmbeddingBackend(AbstractEmbeddingBackend):
    """Embeddings from an OpenAI-compatible ``/embeddings`` endpoint."""

    def __init__(self,
                 base_url: str = "https://api.openai.com/v1",
                 model: str = "text-embedding-3-small",
                 api_key: Optional[str] = None,
                 api_key_env: str = "OPENAI_API_KEY",
                 timeout_seconds: float = 10.0):
        """Initialize the HTTP embedding backend.

        Args:
            base_url: API root; ``/embeddings`` is appended
            model: Embedding model name
            api_key: API key; read from ``api_key_env`` when not given
            api_key_env: Environment variable holding the key
            timeout_seconds: Per-request timeout
        """
        self.url = base_url.rstrip("/") + "/embeddings"
        self.model = model
        self.api_key = api_key or os.environ.get(api_key_env, "")
        self.timeout = aiohttp.ClientTimeout(total=timeout_seconds)
        self._session: Optional[aiohttp.ClientSession] = None
        self._ready = False

        logger.info(f"HttpEmbeddingBackend initialized with model: {model}")

    @property
    def is_ready(self) -> bool:
        return self._ready

    async def initialize(self) -> bool:
        """Open the HTTP session and run a warm-up request."""
        if self._session is None:
            self._session = aiohttp.ClientSession(timeout=self.timeout)
        try:
            vectors = await self._request(["warm up"])
        except (aiohttp.ClientError, RuntimeError) as e:
            logger.error(f"Embedding warm-up failed: {e}")
            return False

        self._ready = True
        logger.info(f"Embedding backend ready ({len(vectors[0])} dimensions)")
        return True

    async def embed(self, text: str) -> np.ndarray:
        if not self._ready:
            raise EmbeddingNotReady("Embedding backend has not been initialized")
        vectors = await self._request([text])
        return vectors[0]

    async def _request(self, inputs: List[str]) -> List[np.ndarray]:
        headers = {
            "Authorization": f"Bearer {self.api_key}",
            "Content-Type": "application/json"
        }
        data = {"model": self.model, "input": inputs}

        async with self._session.post(self.url, headers=headers, json=data) as response:
            if response.status != 200:
                error_text = await response.text()
                raise RuntimeError(f"Embedding API error: {response.status} - {error_text}")
            result = await response.json()

        items = sorted(result["data"], key=lambda item: item["index"])
        return [np.asarray(item["embedding"], dtype=np.float32) for item in items]

    async def cleanup(self) -> None:
        self._ready = False
        if self._session is not None:
            await self._session.close()
            self._session = None
