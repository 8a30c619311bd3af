from prometheus_client import CollectorRegistry, Histogram, Counter
from prometheus_client import generate_latest, CONTENT_TYPE_LATEST
from fastapi import APIRouter
from fastapi.responses import Response

registry = CollectorRegistry()

proxy_requests_total = Counter(
    "feedproxy_requests_total",
    "Feed proxy requests by outcome",
    ["outcome"],
    registry=registry,
)

upstream_fetch_duration = Histogram(
    "feedproxy_upstream_duration_seconds",
    "Duration of outbound feed fetches in seconds",
    ["outcome"],
    registry=registry,
)

metrics_router = APIRouter()


@metrics_router.get("/metrics")
async def get_metrics():
    return Response(generate_latest(registry), media_type=CONTENT_TYPE_LATEST)
