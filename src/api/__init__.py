"""FastAPI endpoints for the LLM chat proxy.

Stateless HTTP routes with async request handling. Streams Server-Sent
Events from the model straight through to the browser.

Endpoints:
    - GET /health: Service health status
    - POST /api/chat: Chat completion requests
"""

from src.api.app import app, create_app

__all__ = ["app", "create_app"]
