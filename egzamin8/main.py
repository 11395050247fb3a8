"""
Main FastAPI application for the egzamin8 site.
Serves pages, catalog API, promo stream, health and metrics.
"""
from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from egzamin8.core.config import settings
from egzamin8.core.logging import configure_logging
from egzamin8.api.routes import catalog, health, promo
from egzamin8.web.pages import router as pages_router
from egzamin8.utils.metrics import router as metrics_router


configure_logging()

app = FastAPI(
    title="Egzamin8",
    description="Exam preparation materials with checkout-gated access",
    version="1.0.0",
)

# CORS
origins = settings.cors_origins_list
if not origins:
    origins = ["http://localhost:3000", "http://127.0.0.1:3000"]
app.add_middleware(
    CORSMiddleware,
    allow_origins=origins,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

# Routers
app.include_router(health.router, tags=["health"])
app.include_router(catalog.router)
app.include_router(promo.router)
app.include_router(pages_router)
app.include_router(metrics_router)
