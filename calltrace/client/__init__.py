"""Declarative service clients that tag every request with its invocation."""

from .endpoint import Endpoint, delete, get, patch, post, put
from .service import Service, ServiceClient

__all__ = ["Endpoint", "Service", "ServiceClient", "delete", "get", "patch", "post", "put"]
