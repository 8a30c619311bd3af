from fastapi import FastAPI, Request
from fastapi.responses import Response
import logging
from contextlib import asynccontextmanager
from datetime import datetime, timezone
from typing import Optional

import httpx

from . import __version__
from .config import bind_address, log_level
from .gateway.models import ForwarderSettings
from .gateway.proxy import FeedForwarder
from .monitoring.metrics import metrics_router


class AddTraceIdFilter(logging.Filter):
    def filter(self, record):
        if not hasattr(record, "trace_id"):
            record.trace_id = "system"
        return True


logging.basicConfig(
    level=log_level(),
    format="%(asctime)s - %(name)s - %(levelname)s - trace_id=%(trace_id)s - %(message)s",
)
for _handler in logging.getLogger().handlers:
    _handler.addFilter(AddTraceIdFilter())
logger = logging.getLogger("feedproxy")

RSS_PROXY_PATH = "/api/rss-proxy"

# GET and OPTIONS are the supported methods; the rest fall through to the
# fetch path unchanged.
RSS_PROXY_METHODS = ["GET", "OPTIONS", "HEAD", "POST", "PUT", "PATCH", "DELETE"]


def create_app(
    settings: Optional[ForwarderSettings] = None,
    transport: Optional[httpx.AsyncBaseTransport] = None,
) -> FastAPI:
    forwarder = FeedForwarder(settings=settings, transport=transport)

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        logger.info("Feed proxy starting")
        await forwarder.start()
        yield
        logger.info("Feed proxy shutting down")
        await forwarder.stop()

    app = FastAPI(
        title="Feed Proxy",
        version=__version__,
        docs_url=None,
        redoc_url=None,
        lifespan=lifespan,
    )
    app.state.forwarder = forwarder
    app.include_router(metrics_router)

    @app.get("/health")
    async def health_check():
        return {
            "status": "healthy",
            "timestamp": datetime.now(tz=timezone.utc).isoformat(),
            "version": __version__,
        }

    @app.api_route(RSS_PROXY_PATH, methods=RSS_PROXY_METHODS)
    async def rss_proxy(request: Request):
        result = await forwarder.handle(
            request.method, request.query_params.get("url")
        )
        return Response(
            content=result.body,
            status_code=result.status_code,
            headers=result.headers,
        )

    return app


app = create_app()


def run():
    import uvicorn

    host, port = bind_address()
    uvicorn.run(app, host=host, port=port)


if __name__ == "__main__":
    run()
