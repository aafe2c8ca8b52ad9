"""Prometheus counters fed by the service's metric events."""

from typing import Any

from prometheus_client import CONTENT_TYPE_LATEST, Counter, generate_latest
from starlette.requests import Request
from starlette.responses import PlainTextResponse, Response

pastes_created = Counter("hastebin_paste_created", "The total number of pastes created")
pastes_read = Counter("hastebin_paste_read", "The total number of pastes read")

COUNTERS: dict[str, Counter] = {
    "documents.created": pastes_created,
    "documents.read": pastes_read,
}


def record_metric(name: str, value: float, labels: dict[str, Any] | None) -> None:
    """Metric callback incrementing the matching Prometheus counter.

    Events without a counter (timers, for instance) are ignored.
    """
    counter = COUNTERS.get(name)
    if counter is not None:
        counter.inc(value)


async def metrics(request: Request) -> Response:
    """Prometheus metrics endpoint."""
    return PlainTextResponse(generate_latest(), media_type=CONTENT_TYPE_LATEST)
