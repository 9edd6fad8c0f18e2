"""
Ollama client for narrative generation.

One request per prompt, no retries: callers decide what to do when the
service is slow or down.
"""

import time
from typing import Any, Dict, List, Optional

import httpx

from phishlens.config.logging import get_logger
from phishlens.config.settings import Settings, get_settings
from phishlens.services.interfaces import NarrativeUnavailableError

logger = get_logger(__name__)


class OllamaClient:
    """Thin async client for the Ollama ``/api/generate`` and ``/api/tags`` endpoints."""

    def __init__(
        self,
        base_url: Optional[str] = None,
        model: Optional[str] = None,
        timeout: Optional[float] = None,
        connect_timeout: Optional[float] = None,
        temperature: Optional[float] = None,
        top_p: Optional[float] = None,
        top_k: Optional[int] = None,
        http_client: Optional[httpx.AsyncClient] = None,
        settings: Optional[Settings] = None,
    ):
        settings = settings or get_settings()
        self.base_url = (base_url or settings.OLLAMA_API_URL).rstrip("/")
        self.model = model or settings.OLLAMA_MODEL
        self.timeout = timeout if timeout is not None else settings.OLLAMA_TIMEOUT
        self.connect_timeout = connect_timeout if connect_timeout is not None else settings.OLLAMA_CONNECT_TIMEOUT
        self.options = {
            "temperature": temperature if temperature is not None else settings.OLLAMA_TEMPERATURE,
            "top_p": top_p if top_p is not None else settings.OLLAMA_TOP_P,
            "top_k": top_k if top_k is not None else settings.OLLAMA_TOP_K,
        }
        self._owns_client = http_client is None
        self.client = http_client or httpx.AsyncClient(
            base_url=self.base_url,
            headers={"Content-Type": "application/json"},
        )

    async def __aenter__(self):
        """Async context manager entry."""
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb):
        """Async context manager exit."""
        await self.close()

    async def close(self):
        """Close the HTTP client if this instance created it."""
        if self._owns_client:
            await self.client.aclose()

    async def generate(self, prompt: str) -> str:
        """Send one prompt and return the model's reply text.

        Raises:
            NarrativeUnavailableError: on timeout, transport error, non-200
                status or a reply without a ``response`` string.
        """
        payload = {
            "model": self.model,
            "prompt": prompt,
            "stream": False,
            "options": dict(self.options),
        }
        start_time = time.monotonic()

        try:
            response = await self.client.post(
                f"{self.base_url}/api/generate",
                json=payload,
                timeout=httpx.Timeout(self.timeout, connect=self.connect_timeout),
            )
        except httpx.TimeoutException as e:
            raise NarrativeUnavailableError(f"Ollama request timed out after {self.timeout}s") from e
        except httpx.HTTPError as e:
            raise NarrativeUnavailableError(f"Ollama request failed: {e}") from e

        if response.status_code != 200:
            raise NarrativeUnavailableError(
                f"Ollama API error: {response.status_code}", status_code=response.status_code
            )

        try:
            data: Dict[str, Any] = response.json()
        except ValueError as e:
            raise NarrativeUnavailableError("Ollama returned a non-JSON reply") from e

        reply = data.get("response") if isinstance(data, dict) else None
        if not isinstance(reply, str):
            raise NarrativeUnavailableError("Ollama reply has no 'response' text")

        logger.debug(
            "ollama_generate_complete",
            model=self.model,
            elapsed_ms=int((time.monotonic() - start_time) * 1000),
        )
        return reply

    async def health_check(self) -> bool:
        """Check Ollama service health."""
        try:
            response = await self.client.get(f"{self.base_url}/api/tags", timeout=self.connect_timeout)
            return response.status_code == 200
        except httpx.HTTPError as e:
            logger.warning("ollama_health_check_failed", error=str(e))
            return False

    async def list_models(self) -> List[Dict[str, Any]]:
        """List models available on the Ollama server; empty on failure."""
        try:
            response = await self.client.get(f"{self.base_url}/api/tags", timeout=self.connect_timeout)
            response.raise_for_status()
            data = response.json()
        except (httpx.HTTPError, ValueError) as e:
            logger.warning("ollama_list_models_failed", error=str(e))
            return []
        return (data.get("models") if isinstance(data, dict) else None) or []


def create_ollama_client(settings: Optional[Settings] = None) -> OllamaClient:
    """Factory function to create an Ollama client from settings."""
    return OllamaClient(settings=settings)
