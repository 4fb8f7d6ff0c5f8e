"""proxyctl — program layer-4 proxy policies on Windows HNS endpoints."""

__version__ = "0.1.0"
