"""Unit tests for individual components in isolation.

Coverage:
    - models: Pydantic validation of messages, sessions and requests
    - chat: Storage, session store, client parsing, presenter, controller
    - proxy: Configuration and upstream payload construction

Views are recorded instead of drawn; HTTP goes through MockTransport.
"""
