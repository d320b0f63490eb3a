"""
Foods service entrypoints: AWS Lambda proxy handler and a local FastAPI app.
"""

import asyncio
from contextlib import asynccontextmanager
from typing import Any, Dict, Optional

from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse

from shared.config import HandlerConfig, get_config
from shared.logging import clear_context, configure_logging, get_logger, set_request_id

from .handler import FoodsHandler
from .models import FoodsRequest, decode_body
from .persistence.postgres import FoodStore


class FoodsService:
    """Wires configuration, store and handler together once per process."""

    def __init__(self, config: Optional[HandlerConfig] = None, store: Optional[FoodStore] = None):
        self.config = config or get_config()
        configure_logging(self.config.service_name, self.config.log_level)
        self.logger = get_logger(self.config.service_name)

        self.store = store or FoodStore(self.config)
        self.handler = FoodsHandler(self.store)

    async def handle_event(self, event: Dict[str, Any], request_id: Optional[str] = None) -> Dict[str, Any]:
        """Handle an API Gateway proxy event."""
        set_request_id(request_id)
        try:
            request = FoodsRequest.from_proxy_event(event, request_id=request_id)
            response = await self.handler.handle(request)
            return response.to_proxy()
        finally:
            clear_context()

    def create_app(self) -> FastAPI:
        """FastAPI app forwarding every route to the handler."""

        @asynccontextmanager
        async def lifespan(app: FastAPI):
            yield
            await self.store.close()

        app = FastAPI(
            title="Foods Service",
            description="Calorie Foods API - collection query service",
            version="1.0.0",
            docs_url="/docs" if self.config.env == "local" else None,
            redoc_url=None,
            lifespan=lifespan,
        )

        @app.get("/health")
        async def health_check():
            """Health check endpoint."""
            return {
                "service": self.config.service_name,
                "status": "ok",
                "database": self.store.state.value,
            }

        @app.api_route(
            "/{path:path}",
            methods=["GET", "POST", "PUT", "DELETE", "PATCH", "OPTIONS"]
        )
        async def proxy(path: str, request: Request):
            set_request_id(request.headers.get("x-request-id"))
            try:
                body = await request.body()
                foods_request = FoodsRequest(
                    method=request.method,
                    path=request.url.path,
                    query=dict(request.query_params),
                    headers=dict(request.headers),
                    body=decode_body(body),
                )
                response = await self.handler.handle(foods_request)
                return JSONResponse(
                    status_code=response.status_code,
                    content=response.body,
                    headers=response.headers,
                )
            finally:
                clear_context()

        return app


_service: Optional[FoodsService] = None
_loop: Optional[asyncio.AbstractEventLoop] = None


def get_service() -> FoodsService:
    """Process-wide service; its store keeps the pool across warm invocations."""
    global _service
    if _service is None:
        _service = FoodsService()
    return _service


def lambda_handler(event: Dict[str, Any], context: Any) -> Dict[str, Any]:
    """AWS Lambda entrypoint for API Gateway REST proxy events."""
    global _loop
    # The pool is bound to the loop it was created on, so reuse one loop
    if _loop is None or _loop.is_closed():
        _loop = asyncio.new_event_loop()

    request_id = getattr(context, "aws_request_id", None)
    return _loop.run_until_complete(get_service().handle_event(event, request_id))


def create_app() -> FastAPI:
    """Create foods service application."""
    return FoodsService().create_app()


if __name__ == "__main__":
    import uvicorn

    uvicorn.run(create_app(), host="0.0.0.0", port=8080)
