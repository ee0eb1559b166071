"""
Application package for Polychat.

This package contains:
- settings: configuration (provider endpoints, OpenRouter headers, timeouts)
- logging_config: shared logging setup
- deps: FastAPI dependencies (database session, HTTP client)
- provider: credential checks, routing, provider adapters, response normalization
- routes: FastAPI app factory and HTTP endpoints
"""
