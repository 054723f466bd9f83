"""Unit tests for individual components in isolation.

Coverage:
    - models/: Wire event validation and serialization
    - agent/: Configuration, model adapter and orchestration loop
    - tools/: Tool implementations and the executor
    - client/: SSE decoding, stream consumption and session storage

Uses fakes for the model and tools, httpx.MockTransport for HTTP.
"""
