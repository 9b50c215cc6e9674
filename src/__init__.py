"""LLM Chat - multi-session chat client for a hosted language model.

Combines FastAPI for the inference proxy, httpx for upstream and client
calls, NiceGUI for the browser interface, and Pydantic for data validation.

Components:
    - api: HTTP endpoints and streamed pass-through responses
    - proxy: Upstream inference call and its configuration
    - chat: Session registry, conversation controller and UI sync
    - ui: Web interface for chat interactions
    - models: Messages, sessions and request schemas
"""

__version__ = "0.1.0"
