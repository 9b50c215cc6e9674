"""Upstream inference service.

Forwards a chat request to the hosted model and hands back the raw upstream
response so the API layer can pass either shape (event stream or JSON)
through unmodified.
"""

import logging

import httpx

from src.models.schemas import ChatRequest
from src.proxy.config import ProxyConfig, get_proxy_config

logger = logging.getLogger(__name__)


class InferenceError(Exception):
    """Raised when the upstream inference call cannot be completed."""

    pass


class InferenceService:
    """Service wrapping the HTTP call to the model provider.

    Args:
        config: Optional proxy configuration. Loads from environment if not
            provided.
        transport: Optional httpx transport, used in tests.
    """

    def __init__(
        self,
        config: ProxyConfig | None = None,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        self._config = config or get_proxy_config()
        self._client = httpx.AsyncClient(transport=transport, timeout=None)

    @property
    def config(self) -> ProxyConfig:
        return self._config

    def build_payload(self, request: ChatRequest) -> dict:
        """Model payload: input plus the fixed token budget."""
        payload: dict = {
            "input": request.input,
            "max_tokens": self._config.max_tokens,
        }
        if request.reasoning is not None:
            payload["reasoning"] = request.reasoning.model_dump(exclude_none=True)
        if self._config.system_prompt:
            payload["instructions"] = self._config.system_prompt
        return payload

    def build_headers(self) -> dict[str, str]:
        headers = {"Authorization": f"Bearer {self._config.api_token}"}
        if self._config.gateway_id:
            headers["cf-aig-skip-cache"] = str(self._config.skip_cache).lower()
            headers["cf-aig-cache-ttl"] = str(self._config.cache_ttl)
        return headers

    async def run(self, request: ChatRequest) -> httpx.Response:
        """Send a request upstream without reading the body.

        The caller owns the returned response and must close it.

        Raises:
            InferenceError: If the upstream cannot be reached.
        """
        upstream_request = self._client.build_request(
            "POST",
            self._config.endpoint_url,
            json=self.build_payload(request),
            headers=self.build_headers(),
        )
        try:
            response = await self._client.send(upstream_request, stream=True)
        except httpx.HTTPError as e:
            raise InferenceError(f"Upstream inference call failed: {e}") from e
        logger.info(
            f"Upstream {self._config.model_id} responded {response.status_code} "
            f"({response.headers.get('content-type', 'unknown')})"
        )
        return response

    async def aclose(self) -> None:
        await self._client.aclose()


# Module-level singleton instance
_inference_service: InferenceService | None = None


def get_inference_service() -> InferenceService:
    """Get or create the global inference service.

    Returns:
        The InferenceService instance.

    Raises:
        InferenceError: If the proxy configuration is invalid.
    """
    global _inference_service
    if _inference_service is None:
        try:
            _inference_service = InferenceService()
        except ValueError as e:
            raise InferenceError(f"Inference proxy is not configured: {e}") from e
    return _inference_service


async def close_inference_service() -> None:
    """Close the global service's HTTP client, if one was created."""
    global _inference_service
    if _inference_service is not None:
        await _inference_service.aclose()
        _inference_service = None
