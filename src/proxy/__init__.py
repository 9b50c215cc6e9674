"""Stateless proxy between the chat UI and the hosted model.

Responsibilities:
    - Model payload construction (fixed model id and token budget)
    - System prompt injection
    - Optional AI Gateway routing with response caching

Holds no conversation state; every request carries the full transcript.
"""

from src.proxy.config import ProxyConfig, get_proxy_config
from src.proxy.inference import InferenceError, InferenceService, get_inference_service

__all__ = [
    "InferenceError",
    "InferenceService",
    "ProxyConfig",
    "get_inference_service",
    "get_proxy_config",
]
