# Path: core/client/__init__.py
# Purpose: Package initializer for the backend HTTP client.
# Layer: core/client.
# Details: Exposes BackendClient.

from .backend import BackendClient

__all__ = ["BackendClient"]
