"""
LLM Watch agent package.

This package contains:
- settings: configuration loaded from the environment
- logging_config: shared logging setup
- errors: typed error hierarchy and error payloads
- provider: upstream adapters, response extraction and the registry
- metrics: in-memory metrics store, Prometheus exposition, demo generator
- routes: FastAPI app factory and HTTP endpoints
- gateway: optional MCP gateway service forwarding to providers
"""
