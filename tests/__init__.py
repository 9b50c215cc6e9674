"""Test package for LLM Chat.

Provides test coverage for all components with unit tests for isolated
logic and integration tests for workflows.

Structure:
    - unit/: Individual function and class tests
    - integration/: Proxy endpoint and end-to-end exchange tests

The hosted model is always replaced by an httpx MockTransport.
Leverages pytest with pytest-check for soft assertions.
"""
