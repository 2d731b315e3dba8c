"""API components - status query and HTTP server."""

from paydrop.api.status import StatusQuery
from paydrop.api.server import HttpServer, create_app

__all__ = ["StatusQuery", "HttpServer", "create_app"]
