"""
Prometheus-based metrics for production monitoring.
Provides /metrics endpoint for scraping.
"""
from prometheus_client import Counter, generate_latest, CONTENT_TYPE_LATEST
from fastapi import APIRouter, Response


# Counters
entitlements_granted_total = Counter(
    "entitlements_granted_total",
    "Total number of new entitlements written to client storage",
    ["product_id"],
)

payment_callbacks_total = Counter(
    "payment_callbacks_total",
    "Page loads carrying a checkout success marker",
    ["outcome"],  # granted, bundle, ignored
)

checkout_redirects_total = Counter(
    "checkout_redirects_total",
    "Total redirects to the hosted checkout",
    ["product_id"],
)


# Metrics endpoint router
router = APIRouter()


@router.get("/metrics")
def metrics_endpoint() -> Response:
    """Prometheus metrics endpoint for scraping."""
    return Response(
        content=generate_latest(),
        media_type=CONTENT_TYPE_LATEST,
    )
