from fastapi import APIRouter, Response

from egzamin8.catalog.loader import CatalogError, get_catalog


router = APIRouter()


@router.get("/health")
def health() -> dict:
    """Liveness probe - always returns 200 if app is running."""
    return {"status": "ok"}


@router.get("/ready")
def readiness(response: Response) -> dict:
    """Readiness probe - returns 503 if the catalog cannot be loaded."""
    try:
        catalog = get_catalog()
        return {"status": "ready", "products": len(catalog)}
    except CatalogError as e:
        response.status_code = 503
        return {"status": "not_ready", "error": str(e)}
