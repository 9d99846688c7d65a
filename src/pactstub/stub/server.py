"""
PactStub HTTP Application

FastAPI application that turns every inbound request into an
IncomingRequest, hands it to the active simulation callback and writes the
returned StubResponse back.

Features:
- Catch-all route for any method (including extension methods) and path
- Admin API for metrics, loaded interactions and active filters
- Request metrics
"""

from __future__ import annotations  # Enable forward references for type hints

import json
import logging
import threading
from dataclasses import dataclass, field
from datetime import datetime
from typing import Any, Callable, Dict, Optional

from fastapi import FastAPI, Request, Response
from fastapi.responses import JSONResponse

from ..common.utils import query_from_pairs
from .config import StubConfig
from .matcher import IncomingRequest


# Hop-by-hop and length headers are computed by the server itself
HEADERS_TO_SKIP = {'content-length', 'transfer-encoding', 'connection'}


@dataclass
class StubResponse:
    """Response produced by a simulation callback."""

    status: int
    body: bytes = b''
    headers: Dict[str, str] = field(default_factory=dict)
    media_type: Optional[str] = None

    @classmethod
    def json(cls, status: int, payload: Any, headers: Optional[Dict[str, str]] = None) -> 'StubResponse':
        return cls(
            status=status,
            body=json.dumps(payload).encode('utf-8'),
            headers=dict(headers or {}),
            media_type='application/json'
        )

    def to_response(self) -> Response:
        """Convert to a FastAPI Response."""
        headers = {
            k: v for k, v in self.headers.items()
            if k.lower() not in HEADERS_TO_SKIP
        }
        return Response(
            content=self.body,
            status_code=self.status,
            headers=headers,
            media_type=self.media_type
        )


@dataclass
class StubMetrics:
    """Track stub request metrics."""

    total_requests: int = 0
    matched_requests: int = 0
    unmatched_requests: int = 0
    echoed_requests: int = 0
    failed_requests: int = 0
    start_time: str = field(default_factory=lambda: datetime.now().isoformat())

    def __post_init__(self):
        self._lock = threading.Lock()

    def record(self, outcome: str):
        """Count one request; outcome is matched, unmatched, echoed or failed."""
        with self._lock:
            self.total_requests += 1
            attribute = f"{outcome}_requests"
            setattr(self, attribute, getattr(self, attribute) + 1)

    def reset(self):
        with self._lock:
            self.total_requests = 0
            self.matched_requests = 0
            self.unmatched_requests = 0
            self.echoed_requests = 0
            self.failed_requests = 0
            self.start_time = datetime.now().isoformat()

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary."""
        with self._lock:
            uptime_seconds = (datetime.now() - datetime.fromisoformat(self.start_time)).total_seconds()
            return {
                'total_requests': self.total_requests,
                'matched_requests': self.matched_requests,
                'unmatched_requests': self.unmatched_requests,
                'echoed_requests': self.echoed_requests,
                'failed_requests': self.failed_requests,
                'match_rate': round((self.matched_requests / self.total_requests * 100) if self.total_requests > 0 else 0, 2),
                'uptime_seconds': round(uptime_seconds, 2),
                'start_time': self.start_time
            }


RequestHandler = Callable[[IncomingRequest], StubResponse]


def create_app(
    handler: RequestHandler,
    config: Optional[StubConfig] = None,
    metrics: Optional[StubMetrics] = None,
    inspector: Optional[Any] = None,
    logger: Optional[logging.Logger] = None
) -> FastAPI:
    """
    Create the FastAPI application serving one simulation.

    Args:
        handler: Callback invoked once per request with the normalized request
        config: Stub configuration (admin API settings)
        metrics: Metrics exposed by the admin API
        inspector: Object exposing describe_interactions() and filters, for the admin API
        logger: Diagnostics logger

    Returns:
        FastAPI application instance
    """
    config = config or StubConfig()
    metrics = metrics or StubMetrics()
    logger = logger or logging.getLogger("pactstub.server")

    app = FastAPI(
        title="PactStub",
        description="HTTP stub replaying pact contract interactions",
        version="1.0.0",
        docs_url=None,
        redoc_url=None,
        openapi_url=None
    )

    # Admin API routes
    if config.admin_enabled:
        @app.get(f"{config.admin_prefix}/metrics")
        async def get_metrics():
            """Get stub metrics."""
            return JSONResponse(content=metrics.to_dict())

        @app.post(f"{config.admin_prefix}/reset")
        async def reset_metrics():
            """Reset metrics."""
            metrics.reset()
            return JSONResponse(content={'status': 'reset'})

        @app.get(f"{config.admin_prefix}/interactions")
        async def list_interactions():
            """List the interactions of the loaded contract."""
            if inspector is None:
                return JSONResponse(content={'total': 0, 'interactions': []})
            return JSONResponse(content=inspector.describe_interactions())

        @app.get(f"{config.admin_prefix}/filters")
        async def get_filters():
            """Get the active interaction filters."""
            if inspector is None:
                return JSONResponse(content={'providerState': '', 'description': ''})
            return JSONResponse(content=inspector.filters.to_dict())

    # Main catch-all route for simulation; no method list, so extension
    # methods such as PURGE or PROPFIND reach the matcher too
    async def simulate_request(request: Request):
        """Handle incoming requests through the active simulation."""
        incoming = IncomingRequest.create(
            method=request.method,
            path=request.url.path,
            query=query_from_pairs(request.query_params.multi_items()),
            headers=_joined_headers(request),
            body=await request.body()
        )

        try:
            stub_response = handler(incoming)
        except Exception as e:
            metrics.record('failed')
            logger.exception(f"Simulation callback failed for {incoming.method} {incoming.path}")
            return JSONResponse(
                content={
                    'error': 'Stub failed to handle the request',
                    'detail': str(e),
                    'request': {'method': incoming.method, 'path': incoming.path}
                },
                status_code=500
            )

        return stub_response.to_response()

    app.add_route("/{path:path}", simulate_request, methods=None, include_in_schema=False)

    return app


def _joined_headers(request: Request) -> Dict[str, str]:
    """Join repeated header values with ", " the way contract headers are normalized."""
    return {
        name: ', '.join(request.headers.getlist(name))
        for name in request.headers.keys()
    }
