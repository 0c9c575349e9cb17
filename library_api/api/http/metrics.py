"""Prometheus scrape endpoint."""

from fastapi import APIRouter
from fastapi.responses import PlainTextResponse
from prometheus_client import CONTENT_TYPE_LATEST, REGISTRY, generate_latest

router = APIRouter(tags=["metrics"])


@router.get("/metrics", include_in_schema=False)
async def metrics() -> PlainTextResponse:
    """
    Cache, population and authorization counters in the text exposition
    format, e.g. ``response_cache_hits_total{backend="memory"} 42.0``.
    """
    return PlainTextResponse(
        generate_latest(REGISTRY), media_type=CONTENT_TYPE_LATEST
    )
