"""Test package for toolchat.

Provides coverage for all components with unit tests for isolated logic
and integration tests for the HTTP and streaming workflow.

Structure:
    - unit/: Individual function and class tests
    - integration/: End-to-end exchange tests over the ASGI app

No test reaches the network: the model is scripted and tool HTTP runs
over httpx.MockTransport.
"""
