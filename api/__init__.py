# Path: api/__init__.py
# Purpose: Package initializer for HTTP API layer.
# Layer: api.
# Details: Exposes the application factory serving extraction, matching, and catalog endpoints.

from .app import create_app

__all__ = ["create_app"]
