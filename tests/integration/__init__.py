"""Integration tests for components working together as a system.

Coverage:
    - POST /api/chat through the real FastAPI app
    - Controller exchanges sent through the proxy app
    - Session history surviving a page reload

Only the hosted model is mocked; no network access or API keys required.
"""
