"""Inference proxy configuration with environment variable loading.

Pydantic-based configuration for the upstream Workers AI call, optionally
routed through an AI Gateway with response caching.
"""

import os

from dotenv import load_dotenv
from pydantic import BaseModel, Field, field_validator

# Load environment variables from .env file
load_dotenv()

DEFAULT_MODEL_ID = "@cf/openai/gpt-oss-120b"
DEFAULT_SYSTEM_PROMPT = (
    "You are a helpful, friendly assistant. Provide concise and accurate responses."
)


def _env_bool(name: str, default: bool) -> bool:
    value = os.getenv(name)
    if value is None:
        return default
    return value.strip().lower() in {"1", "true", "yes", "on"}


class ProxyConfig(BaseModel):
    """Configuration for the upstream inference call.

    Attributes:
        account_id: Cloudflare account that owns the model deployment.
        api_token: API token for the inference endpoint.
        model_id: Fixed model identifier.
        max_tokens: Maximum tokens in the generated response.
        gateway_id: AI Gateway id; requests go direct when unset.
        cache_ttl: Gateway cache lifetime in seconds.
        skip_cache: Ask the gateway to bypass its cache.
        system_prompt: Instructions sent with every request; empty to omit.
        base_url: Override for the full inference URL.
    """

    account_id: str = Field(
        default_factory=lambda: os.getenv("CLOUDFLARE_ACCOUNT_ID", ""),
        description="Cloudflare account id",
    )
    api_token: str = Field(
        default_factory=lambda: os.getenv("CLOUDFLARE_API_TOKEN", ""),
        description="API token for the inference endpoint",
    )
    model_id: str = Field(
        default_factory=lambda: os.getenv("MODEL_ID", DEFAULT_MODEL_ID),
        description="Model to use",
    )
    max_tokens: int = Field(
        default_factory=lambda: int(os.getenv("MAX_TOKENS", "1024")),
        ge=1,
        le=128000,
        description="Maximum tokens in generated response",
    )
    gateway_id: str | None = Field(
        default_factory=lambda: os.getenv("AI_GATEWAY_ID", "oss-120b-free") or None,
        description="AI Gateway id (None to call the model directly)",
    )
    cache_ttl: int = Field(
        default_factory=lambda: int(os.getenv("AI_GATEWAY_CACHE_TTL", "3600")),
        ge=0,
        description="Gateway cache TTL in seconds",
    )
    skip_cache: bool = Field(
        default_factory=lambda: _env_bool("AI_GATEWAY_SKIP_CACHE", False),
    )
    system_prompt: str = Field(
        default_factory=lambda: os.getenv("SYSTEM_PROMPT", DEFAULT_SYSTEM_PROMPT),
    )
    base_url: str | None = Field(
        default_factory=lambda: os.getenv("INFERENCE_BASE_URL") or None,
        description="Full inference URL override",
    )

    @field_validator("api_token")
    @classmethod
    def validate_api_token(cls, v: str) -> str:
        """Validate that the API token is provided and non-empty."""
        if not v or not v.strip():
            raise ValueError("API token required. Set CLOUDFLARE_API_TOKEN in .env")
        return v.strip()

    @property
    def endpoint_url(self) -> str:
        """URL the proxy posts inference requests to."""
        if self.base_url:
            return self.base_url
        if self.gateway_id:
            return (
                f"https://gateway.ai.cloudflare.com/v1/{self.account_id}/"
                f"{self.gateway_id}/workers-ai/{self.model_id}"
            )
        return (
            f"https://api.cloudflare.com/client/v4/accounts/{self.account_id}"
            f"/ai/run/{self.model_id}"
        )


def get_proxy_config() -> ProxyConfig:
    """Create proxy configuration from environment.

    Returns:
        Configured ProxyConfig instance.

    Raises:
        ValueError: If no API token is set.
    """
    return ProxyConfig()
