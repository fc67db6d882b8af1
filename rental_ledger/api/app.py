"""FastAPI application for the rental payment ledger."""

import logging

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from rental_ledger import __version__
from rental_ledger.api.locations import router as locations_router
from rental_ledger.api.payments import router as payments_router

logger = logging.getLogger(__name__)

app = FastAPI(
    title="Rental Ledger",
    description="Rent payment calendar, month selection and payment ledger",
    version=__version__,
)

# Agency back-office is served from another origin
app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

app.include_router(locations_router)
app.include_router(payments_router)


@app.get("/health")
async def health() -> dict:
    """Liveness check."""
    return {"status": "ok"}
