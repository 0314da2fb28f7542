"""EventFlow HTTP API."""

from eventflow.api.router import router

__all__ = ["router"]
