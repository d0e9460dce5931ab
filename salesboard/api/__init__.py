"""HTTP API for the Salesboard reporting service."""
from salesboard.api.routes import EndpointError, router

__all__ = ["EndpointError", "router"]
